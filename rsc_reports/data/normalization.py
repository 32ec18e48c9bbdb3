"""Value normalization shared by every report.

This module turns raw GraphQL values into the units and shapes used in flat
records:

1. Paths      → ``get_path`` walks nested dicts/lists, never raises
2. Timestamps → aware UTC datetimes (epoch ms or ISO-8601 input)
3. Ages       → hours/days since a timestamp, relative to a caller-fixed "now"
4. Storage    → decimal GB/TB (1000-based), 2 dp
5. Ratios     → percentages and their display strings
6. SLA ids    → protected / unprotected / do-not-protect labels
7. Deep links → console URL per object type
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Optional, Sequence, Union

BYTES_PER_GB = 1000 ** 3
BYTES_PER_TB = 1000 ** 4

# SLA domain ids/names that mean "no policy applies"
UNPROTECTED_SLA = "UNPROTECTED"
DO_NOT_PROTECT_SLA = "DO_NOT_PROTECT"
SENTINEL_SLA_VALUES = {UNPROTECTED_SLA, DO_NOT_PROTECT_SLA, ""}

# Hours per SLA duration unit (months/quarters/years are nominal)
DURATION_UNIT_HOURS = {
    "MINUTES": 1 / 60,
    "HOURS": 1,
    "DAYS": 24,
    "WEEKS": 24 * 7,
    "MONTHS": 24 * 30,
    "QUARTERS": 24 * 91,
    "YEARS": 24 * 365,
}

# Console paths per object type, relative to the console base URL
OBJECT_URL_PATHS = {
    "VmwareVirtualMachine": "inventory_hierarchy/vsphere/vm/{id}/overview",
    "HypervVirtualMachine": "inventory_hierarchy/hyperv/vm/{id}/overview",
    "NutanixVirtualMachine": "inventory_hierarchy/nutanix/vm/{id}/overview",
    "Mssql": "inventory_hierarchy/mssql/database/{id}/overview",
    "OracleDatabase": "inventory_hierarchy/oracle/database/{id}/overview",
    "ManagedVolume": "inventory_hierarchy/managed_volume/{id}/overview",
    "NasShare": "inventory_hierarchy/nas/share/{id}/overview",
    "PhysicalHost": "inventory_hierarchy/physical_host/{id}/overview",
    "WindowsFileset": "inventory_hierarchy/fileset/windows/{id}/overview",
    "LinuxFileset": "inventory_hierarchy/fileset/linux/{id}/overview",
    "AwsNativeEc2Instance": "inventory_hierarchy/aws/ec2/{id}/overview",
    "AzureNativeVm": "inventory_hierarchy/azure/vm/{id}/overview",
    "GcpNativeGCEInstance": "inventory_hierarchy/gcp/gce/{id}/overview",
    "O365Org": "inventory_hierarchy/o365/org/{id}/overview",
    "Cluster": "clusters/{id}/overview",
    "SlaDomain": "sla/details/{id}",
}

Timestamp = Union[int, float, str, datetime, None]


def get_path(obj: Any, path: Union[str, Sequence[str], None], default: Any = None) -> Any:
    """Walk a dotted path through nested dicts and lists.

    Numeric segments index into lists (``"replicationSpecs.0.cluster.name"``).
    Any missing step returns ``default``.
    """
    if path is None or path == "":
        return obj
    parts = path.split(".") if isinstance(path, str) else list(path)
    current = obj
    for part in parts:
        if current is None:
            return default
        if isinstance(current, dict):
            current = current.get(part)
        elif isinstance(current, (list, tuple)):
            try:
                current = current[int(part)]
            except (ValueError, IndexError):
                return default
        else:
            return default
    return default if current is None else current


def epoch_ms_to_utc(value: Union[int, float]) -> datetime:
    """Convert UNIX epoch milliseconds to an aware UTC datetime."""
    return datetime.fromtimestamp(float(value) / 1000.0, tz=timezone.utc)


def _epoch_ms_or_none(value: Union[int, float]) -> Optional[datetime]:
    try:
        return epoch_ms_to_utc(value)
    except (OverflowError, OSError, ValueError):
        return None


def to_utc(value: Timestamp) -> Optional[datetime]:
    """Normalize a timestamp to an aware UTC datetime.

    Accepts epoch milliseconds (number or numeric string), ISO-8601 strings
    (``Z`` suffix allowed) and datetimes. Naive datetimes are taken as UTC.
    Blank or unparseable input returns None.
    """
    if value is None or value == "":
        return None
    if isinstance(value, bool):
        return None
    if isinstance(value, datetime):
        if value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value.astimezone(timezone.utc)
    if isinstance(value, (int, float)):
        return _epoch_ms_or_none(value)

    text = str(value).strip()
    if not text:
        return None
    try:
        number = float(text)
    except ValueError:
        number = None
    if number is not None:
        return _epoch_ms_or_none(number)
    try:
        parsed = datetime.fromisoformat(text.replace("Z", "+00:00"))
    except ValueError:
        return None
    return to_utc(parsed)


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def hours_since(value: Timestamp, now: Optional[datetime] = None) -> Optional[float]:
    """Hours between ``value`` and ``now``, rounded to 2 dp."""
    ts = to_utc(value)
    if ts is None:
        return None
    now = to_utc(now) or utc_now()
    return round((now - ts).total_seconds() / 3600, 2)


def days_since(value: Timestamp, now: Optional[datetime] = None) -> Optional[float]:
    """Days between ``value`` and ``now``, rounded to 2 dp."""
    ts = to_utc(value)
    if ts is None:
        return None
    now = to_utc(now) or utc_now()
    return round((now - ts).total_seconds() / 86400, 2)


def _to_number(value: Any) -> Optional[float]:
    if value is None or value == "" or isinstance(value, bool):
        return None
    try:
        return float(value)
    except (TypeError, ValueError):
        return None


def bytes_to_gb(value: Any) -> Optional[float]:
    """Bytes → decimal gigabytes (divide by 1000³), 2 dp."""
    number = _to_number(value)
    if number is None:
        return None
    return round(number / BYTES_PER_GB, 2)


def bytes_to_tb(value: Any) -> Optional[float]:
    """Bytes → decimal terabytes (divide by 1000⁴), 2 dp."""
    number = _to_number(value)
    if number is None:
        return None
    return round(number / BYTES_PER_TB, 2)


def percent(observed: Any, expected: Any) -> Optional[float]:
    """observed/expected as a percentage, 2 dp. None when expected is 0."""
    obs = _to_number(observed)
    exp = _to_number(expected)
    if obs is None or not exp:
        return None
    return round(obs / exp * 100, 2)


def format_percent(observed: Any, expected: Any) -> str:
    """Display string for observed/expected.

    ``"83.33%"`` for 5/6; anything that renders as ``"100.00%"`` becomes
    ``"100%"``; ``"N/A"`` when expected is 0.
    """
    obs = _to_number(observed)
    exp = _to_number(expected)
    if obs is None or not exp:
        return "N/A"
    text = f"{obs / exp * 100:.2f}%"
    if text == "100.00%":
        return "100%"
    return text


def has_value(value: Any) -> bool:
    """True when a sub-object or string is present and non-empty."""
    if value is None:
        return False
    if isinstance(value, (str, list, tuple, dict)):
        return len(value) > 0
    return True


def is_unprotected_sla(value: Optional[str]) -> bool:
    """True for a missing SLA or one of the sentinel SLA ids/names."""
    if value is None:
        return True
    return str(value).strip().upper() in SENTINEL_SLA_VALUES


def protection_label(sla_id: Optional[str]) -> str:
    """Map an SLA id to 'Protected', 'Unprotected' or 'DoNotProtect'."""
    if sla_id is not None and str(sla_id).strip().upper() == DO_NOT_PROTECT_SLA:
        return "DoNotProtect"
    if is_unprotected_sla(sla_id):
        return "Unprotected"
    return "Protected"


def duration_to_hours(duration: Any, unit: Optional[str]) -> Optional[float]:
    """Convert an SLA ``{duration, unit}`` pair to hours."""
    number = _to_number(duration)
    factor = DURATION_UNIT_HOURS.get((unit or "").upper())
    if number is None or factor is None:
        return None
    return round(number * factor, 2)


def format_duration(duration: Any, unit: Optional[str]) -> Optional[str]:
    """Render an SLA ``{duration, unit}`` pair, e.g. ``"4 Hours"``."""
    number = _to_number(duration)
    if number is None or not unit:
        return None
    count = int(number) if number.is_integer() else number
    label = unit.strip().capitalize()
    if count == 1 and label.endswith("s"):
        label = label[:-1]
    return f"{count} {label}"


def build_object_url(console_url: Optional[str], object_type: Optional[str], object_id: Optional[str]) -> Optional[str]:
    """Browser deep link for an object, or None when unknown."""
    if not console_url or not object_id or not object_type:
        return None
    template = OBJECT_URL_PATHS.get(object_type)
    if template is None:
        return None
    return f"{console_url.rstrip('/')}/{template.format(id=object_id)}"
