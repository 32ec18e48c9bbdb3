"""Data models for RSC reports.

Two kinds of structures live here:

1. DECLARATIONS
   - QuerySpec / ObjectTypeSpec describe what to fetch and how to flatten it.
     Inventory records themselves are plain dicts built from these tables.

2. AGGREGATES
   - Backup windows, per-object success rates and grouped summaries.

Units follow the record conventions:
- Timestamps: aware UTC datetimes
- Ages: hours or days (float, 2 dp)
- Storage: decimal gigabytes/terabytes (float, 2 dp)
- Percentages: 0-100 (float, 2 dp) plus a display string
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple

from .mapping import Field
from .normalization import format_percent, percent


class ComplianceStatus(str, Enum):
    """SLA compliance status of a protected object."""

    IN_COMPLIANCE = "IN_COMPLIANCE"
    OUT_OF_COMPLIANCE = "OUT_OF_COMPLIANCE"
    NOT_AVAILABLE = "NOT_AVAILABLE"
    EMPTY = "EMPTY"


class SummaryGroup(str, Enum):
    """Dimension a success-rate summary is grouped by."""

    OBJECT_TYPE = "object_type"
    SLA_DOMAIN = "sla_domain"
    CLUSTER = "cluster"
    DAY = "day"
    OVERALL = "overall"


# =============================================================================
# Declarations
# =============================================================================


@dataclass(frozen=True)
class QuerySpec:
    """One paginated GraphQL query plus the field table for its nodes."""

    name: str  # GraphQL operation name
    query: str
    connection_path: str  # Dotted path under `data`
    fields: Tuple[Field, ...]
    variables: Dict[str, Any] = field(default_factory=dict)
    page_size: int = 1000
    page_size_variable: Optional[str] = "first"


@dataclass(frozen=True)
class ObjectTypeSpec:
    """A report: one or more queries whose records merge into one list."""

    name: str
    display_name: str
    queries: Tuple[QuerySpec, ...]
    description: str = ""
    required_variables: Tuple[str, ...] = ()

    @property
    def field_names(self) -> List[str]:
        """Columns of the first query (all queries of one object type share them)."""
        if not self.queries:
            return []
        return [f.name for f in self.queries[0].fields]


# =============================================================================
# Backup success rate
# =============================================================================


@dataclass(frozen=True)
class BackupWindow:
    """Half-open [start, end) range in which a backup is expected."""

    start: datetime
    end: datetime

    @property
    def day(self) -> date:
        """Calendar day the window opens on."""
        return self.start.date()

    def contains(self, ts: datetime) -> bool:
        return self.start <= ts < self.end


@dataclass
class DayResult:
    """Backup outcome of one object for one window."""

    window: BackupWindow
    snapshot_utc: Optional[datetime] = None

    @property
    def backup_found(self) -> bool:
        return self.snapshot_utc is not None


@dataclass
class ObjectSuccessRate:
    """Per-object backup success over a reporting range."""

    object_id: str
    name: Optional[str]
    object_type: Optional[str]
    cluster: Optional[str]
    sla_domain: Optional[str]
    sla_domain_id: Optional[str] = None
    sla_frequency: Optional[str] = None
    days: List[DayResult] = field(default_factory=list)

    @property
    def days_expected(self) -> int:
        return len(self.days)

    @property
    def days_with_backup(self) -> int:
        return sum(1 for d in self.days if d.backup_found)

    @property
    def success_percent(self) -> Optional[float]:
        return percent(self.days_with_backup, self.days_expected)

    @property
    def success_display(self) -> str:
        return format_percent(self.days_with_backup, self.days_expected)

    @property
    def missed_days(self) -> List[date]:
        return [d.window.day for d in self.days if not d.backup_found]

    def to_record(self) -> Dict[str, Any]:
        """Flat record, one ``backup_<date>`` column per window."""
        record: Dict[str, Any] = {
            "object": self.name,
            "object_id": self.object_id,
            "object_type": self.object_type,
            "cluster": self.cluster,
            "sla_domain": self.sla_domain,
            "sla_frequency": self.sla_frequency,
            "days_expected": self.days_expected,
            "days_with_backup": self.days_with_backup,
            "success_percent": self.success_percent,
            "success_rate": self.success_display,
        }
        for d in self.days:
            record[f"backup_{d.window.day.isoformat()}"] = d.backup_found
        return record


@dataclass
class SuccessRateSummary:
    """Pass/fail totals for one group value."""

    group: SummaryGroup
    key: str
    objects: int
    expected: int
    observed: int

    @property
    def missed(self) -> int:
        return self.expected - self.observed

    @property
    def success_percent(self) -> Optional[float]:
        return percent(self.observed, self.expected)

    @property
    def success_display(self) -> str:
        return format_percent(self.observed, self.expected)

    def to_record(self) -> Dict[str, Any]:
        return {
            "group": self.group.value,
            "key": self.key,
            "objects": self.objects,
            "expected": self.expected,
            "observed": self.observed,
            "missed": self.missed,
            "success_percent": self.success_percent,
            "success_rate": self.success_display,
        }


@dataclass
class SuccessRateReport:
    """Complete backup success-rate result."""

    windows: List[BackupWindow]
    objects: List[ObjectSuccessRate]
    overall: SuccessRateSummary
    by_object_type: List[SuccessRateSummary] = field(default_factory=list)
    by_sla_domain: List[SuccessRateSummary] = field(default_factory=list)
    by_cluster: List[SuccessRateSummary] = field(default_factory=list)
    by_day: List[SuccessRateSummary] = field(default_factory=list)
    generated_at: Optional[datetime] = None

    def summaries(self, group: SummaryGroup) -> List[SuccessRateSummary]:
        return {
            SummaryGroup.OBJECT_TYPE: self.by_object_type,
            SummaryGroup.SLA_DOMAIN: self.by_sla_domain,
            SummaryGroup.CLUSTER: self.by_cluster,
            SummaryGroup.DAY: self.by_day,
            SummaryGroup.OVERALL: [self.overall],
        }[group]
