"""Snapshot history lookups for individual workloads."""

from __future__ import annotations

from datetime import datetime
from typing import Any, Dict, List, Optional

from .graphql import GraphQLClient
from .inventory import GraphQLCollector
from ..catalog.snapshots import OBJECT_SNAPSHOTS
from ..data.normalization import to_utc


def time_range(start: Optional[datetime], end: Optional[datetime]) -> Optional[Dict[str, str]]:
    """``timeRange`` variable for a [start, end) range, or None if open."""
    if start is None and end is None:
        return None
    rng: Dict[str, str] = {}
    if start is not None:
        rng["start"] = to_utc(start).strftime("%Y-%m-%dT%H:%M:%S.000Z")
    if end is not None:
        rng["end"] = to_utc(end).strftime("%Y-%m-%dT%H:%M:%S.000Z")
    return rng


def snapshot_collector(
    client: GraphQLClient,
    workload_id: str,
    start: Optional[datetime] = None,
    end: Optional[datetime] = None,
    page_size: Optional[int] = None,
    now: Optional[datetime] = None,
) -> GraphQLCollector:
    variables: Dict[str, Any] = {"workloadId": workload_id}
    rng = time_range(start, end)
    if rng:
        variables["timeRange"] = rng
    return GraphQLCollector(client, OBJECT_SNAPSHOTS, page_size=page_size, variables=variables, now=now)


def fetch_snapshot_times(
    client: GraphQLClient,
    workload_id: str,
    start: Optional[datetime] = None,
    end: Optional[datetime] = None,
    page_size: Optional[int] = None,
) -> List[datetime]:
    """UTC creation times of a workload's snapshots in [start, end).

    The server filters by ``timeRange``; the range is re-applied locally so
    the end bound stays exclusive.
    """
    records = snapshot_collector(client, workload_id, start, end, page_size).collect()
    times = []
    for record in records:
        ts = record.get("date_utc")
        if ts is None:
            continue
        if start is not None and ts < to_utc(start):
            continue
        if end is not None and ts >= to_utc(end):
            continue
        times.append(ts)
    return sorted(times)
