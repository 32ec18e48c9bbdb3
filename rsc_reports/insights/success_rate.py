"""Backup success rate across daily backup windows.

For every protected object and every 24-hour window in the reporting range,
a backup counts as successful when at least one snapshot was taken inside
the window. Results are rolled up per object, object type, SLA domain,
cluster and day.

Window rules:
- Windows are half-open ``[start, end)`` in UTC and 24 hours wide.
- The newest window ends at the most recent ``HH:00`` at or before "now",
  moved back ``skip_days`` whole days.
- Windows are returned oldest first and labelled by the day they open on.
"""

from __future__ import annotations

import calendar
from collections import OrderedDict
from datetime import datetime, timedelta, timezone
from typing import Any, Callable, Dict, Iterable, List, Optional, Sequence

from ..catalog.core import OBJECTS, SLA_DOMAINS
from ..collectors.base import BaseCollector, CollectorError
from ..collectors.graphql import GraphQLClient
from ..collectors.inventory import GraphQLCollector
from ..collectors.snapshots import fetch_snapshot_times
from ..data.cache import InventoryCache
from ..data.models import (
    BackupWindow,
    DayResult,
    ObjectSuccessRate,
    SuccessRateReport,
    SuccessRateSummary,
    SummaryGroup,
)
from ..data.normalization import is_unprotected_sla, to_utc, utc_now

WINDOW = timedelta(days=1)


def generate_backup_windows(
    days_to_report: int,
    backup_window_end_hour: int,
    skip_days: int = 0,
    now: Optional[datetime] = None,
) -> List[BackupWindow]:
    """Consecutive daily windows ending at ``backup_window_end_hour`` UTC.

    Args:
        days_to_report: Number of windows (>= 1).
        backup_window_end_hour: Hour of day (0-23, UTC) each window ends at.
        skip_days: Whole days to move the newest window back.
        now: Reference time; defaults to the current UTC time.

    Returns:
        ``days_to_report`` windows, oldest first.
    """
    if days_to_report < 1:
        raise ValueError("days_to_report must be at least 1")
    if not 0 <= backup_window_end_hour <= 23:
        raise ValueError("backup_window_end_hour must be between 0 and 23")
    if skip_days < 0:
        raise ValueError("skip_days cannot be negative")

    now = to_utc(now) if now is not None else utc_now()
    end = now.replace(hour=backup_window_end_hour, minute=0, second=0, microsecond=0)
    if end > now:
        end -= WINDOW
    end -= timedelta(days=skip_days)

    return [
        BackupWindow(start=end - WINDOW * (i + 1), end=end - WINDOW * i)
        for i in reversed(range(days_to_report))
    ]


def generate_month_windows(
    year: int,
    month: int,
    backup_window_end_hour: int,
    now: Optional[datetime] = None,
) -> List[BackupWindow]:
    """One window per calendar day of a month, skipping windows not yet closed."""
    if not 0 <= backup_window_end_hour <= 23:
        raise ValueError("backup_window_end_hour must be between 0 and 23")
    now = to_utc(now) if now is not None else utc_now()
    _, ndays = calendar.monthrange(year, month)

    windows = []
    for day in range(1, ndays + 1):
        start = datetime(year, month, day, backup_window_end_hour, tzinfo=timezone.utc)
        window = BackupWindow(start=start, end=start + WINDOW)
        if window.end > now:
            break
        windows.append(window)
    return windows


def find_snapshot_in_window(times: Iterable[Any], window: BackupWindow) -> Optional[datetime]:
    """Latest snapshot time inside ``window``, or None."""
    inside = [ts for ts in (to_utc(t) for t in times) if ts is not None and window.contains(ts)]
    return max(inside) if inside else None


def object_key(record: Dict[str, Any]) -> Optional[str]:
    """Workload id used for snapshot lookups (fid when the record has one)."""
    return record.get("object_fid") or record.get("object_id")


def evaluate_object(
    record: Dict[str, Any],
    snapshot_times: Iterable[Any],
    windows: Sequence[BackupWindow],
    sla_frequency: Optional[str] = None,
) -> ObjectSuccessRate:
    times = [ts for ts in (to_utc(t) for t in snapshot_times) if ts is not None]
    return ObjectSuccessRate(
        object_id=object_key(record),
        name=record.get("object"),
        object_type=record.get("object_type"),
        cluster=record.get("cluster"),
        sla_domain=record.get("sla_domain"),
        sla_domain_id=record.get("sla_domain_id"),
        sla_frequency=sla_frequency,
        days=[DayResult(window=w, snapshot_utc=find_snapshot_in_window(times, w)) for w in windows],
    )


def is_reportable(record: Dict[str, Any]) -> bool:
    """Active objects with a real SLA assignment are expected to back up daily."""
    if record.get("is_relic"):
        return False
    return not (is_unprotected_sla(record.get("sla_domain_id")) or is_unprotected_sla(record.get("sla_domain")))


def _summarize(
    group: SummaryGroup,
    results: List[ObjectSuccessRate],
    key: Callable[[ObjectSuccessRate], Optional[str]],
) -> List[SuccessRateSummary]:
    buckets: Dict[str, List[ObjectSuccessRate]] = OrderedDict()
    for r in results:
        buckets.setdefault(key(r) or "Unknown", []).append(r)
    return [
        SuccessRateSummary(
            group=group,
            key=k,
            objects=len(items),
            expected=sum(i.days_expected for i in items),
            observed=sum(i.days_with_backup for i in items),
        )
        for k, items in sorted(buckets.items())
    ]


def _summarize_days(windows: Sequence[BackupWindow], results: List[ObjectSuccessRate]) -> List[SuccessRateSummary]:
    summaries = []
    for idx, window in enumerate(windows):
        summaries.append(
            SuccessRateSummary(
                group=SummaryGroup.DAY,
                key=window.day.isoformat(),
                objects=len(results),
                expected=len(results),
                observed=sum(1 for r in results if r.days[idx].backup_found),
            )
        )
    return summaries


def calculate_backup_success_rate(
    objects: Iterable[Dict[str, Any]],
    snapshots_by_object: Dict[str, Iterable[Any]],
    windows: Sequence[BackupWindow],
    sla_domains: Optional[Iterable[Dict[str, Any]]] = None,
    now: Optional[datetime] = None,
) -> SuccessRateReport:
    """Join objects with their snapshots and score every window.

    Args:
        objects: Object inventory records (the ``objects`` report).
        snapshots_by_object: Snapshot times keyed by workload id.
        windows: Backup windows, oldest first.
        sla_domains: Optional ``sla_domains`` records, joined on SLA id.
        now: Timestamp stamped on the report.
    """
    windows = list(windows)
    sla_index = {
        r["sla_domain_id"]: r for r in (sla_domains or []) if r.get("sla_domain_id")
    }

    results: List[ObjectSuccessRate] = []
    for record in objects:
        if not is_reportable(record):
            continue
        key = object_key(record)
        times = snapshots_by_object.get(key)
        if times is None and record.get("object_id") != key:
            times = snapshots_by_object.get(record.get("object_id"))
        sla = sla_index.get(record.get("sla_domain_id")) or {}
        results.append(evaluate_object(record, times or [], windows, sla.get("frequency")))

    overall = SuccessRateSummary(
        group=SummaryGroup.OVERALL,
        key="All Objects",
        objects=len(results),
        expected=sum(r.days_expected for r in results),
        observed=sum(r.days_with_backup for r in results),
    )
    return SuccessRateReport(
        windows=windows,
        objects=results,
        overall=overall,
        by_object_type=_summarize(SummaryGroup.OBJECT_TYPE, results, lambda r: r.object_type),
        by_sla_domain=_summarize(SummaryGroup.SLA_DOMAIN, results, lambda r: r.sla_domain),
        by_cluster=_summarize(SummaryGroup.CLUSTER, results, lambda r: r.cluster),
        by_day=_summarize_days(windows, results),
        generated_at=to_utc(now) if now is not None else utc_now(),
    )


class BackupSuccessRateCollector(BaseCollector):
    """Fetch inventory and snapshot history, then score backup windows.

    SLA domains and the object inventory are read through the shared
    :class:`InventoryCache`, so repeated runs in one session reuse them.
    """

    def __init__(
        self,
        client: GraphQLClient,
        cache: Optional[InventoryCache] = None,
        *,
        days_to_report: int = 7,
        backup_window_end_hour: int = 0,
        skip_days: int = 0,
        month: Optional[str] = None,
        page_size: Optional[int] = None,
        now: Optional[datetime] = None,
    ):
        self.client = client
        self.cache = cache if cache is not None else InventoryCache()
        self.days_to_report = days_to_report
        self.backup_window_end_hour = backup_window_end_hour
        self.skip_days = skip_days
        self.month = month
        self.page_size = page_size
        self.now = now

    @property
    def name(self) -> str:
        return "backup_success_rate"

    @property
    def display_name(self) -> str:
        return "Backup Success Rate"

    def is_available(self) -> bool:
        return self.client.connection.is_connected()

    def windows(self) -> List[BackupWindow]:
        if self.month:
            try:
                year, month = (int(p) for p in self.month.split("-", 1))
            except ValueError:
                raise CollectorError(self.name, f"Invalid month '{self.month}', expected YYYY-MM")
            if not 1 <= month <= 12:
                raise CollectorError(self.name, f"Invalid month '{self.month}', expected YYYY-MM")
            return generate_month_windows(year, month, self.backup_window_end_hour, self.now)
        return generate_backup_windows(
            self.days_to_report, self.backup_window_end_hour, self.skip_days, self.now
        )

    def _load(self, spec):
        collector = GraphQLCollector(self.client, spec, page_size=self.page_size, now=self.now)
        return self.cache.get(spec.name, collector.collect)

    def run(self) -> SuccessRateReport:
        windows = self.windows()
        if not windows:
            raise CollectorError(self.name, "No complete backup windows in the requested range")

        sla_domains = self._load(SLA_DOMAINS)
        objects = [r for r in self._load(OBJECTS) if is_reportable(r)]
        self.client.log(
            f"[{self.name}] {len(objects)} protected objects, "
            f"{windows[0].start:%Y-%m-%d %H:%M} to {windows[-1].end:%Y-%m-%d %H:%M} UTC"
        )

        start, end = windows[0].start, windows[-1].end
        snapshots: Dict[str, List[datetime]] = {}
        for record in objects:
            key = object_key(record)
            if not key or key in snapshots:
                continue
            snapshots[key] = fetch_snapshot_times(self.client, key, start, end, self.page_size)

        report = calculate_backup_success_rate(objects, snapshots, windows, sla_domains, self.now)
        self.client.log(f"[{self.name}] Overall {report.overall.success_display}")
        return report

    def collect(self) -> List[Dict[str, Any]]:
        return [r.to_record() for r in self.run().objects]
