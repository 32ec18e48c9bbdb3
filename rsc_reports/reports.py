"""High-level entry point: one connection, one client, one shared cache."""

from __future__ import annotations

from datetime import datetime, timedelta
from typing import Any, Dict, List, Optional

from .catalog import get_spec
from .catalog.core import CLUSTERS, OBJECTS, SLA_DOMAINS
from .collectors.connection import RSCConnection
from .collectors.graphql import GraphQLClient
from .collectors.inventory import GraphQLCollector
from .collectors.snapshots import snapshot_collector
from .config import Config
from .data.cache import InventoryCache
from .data.models import ObjectTypeSpec, SuccessRateReport
from .data.normalization import utc_now
from .insights.success_rate import BackupSuccessRateCollector
from .insights.summaries import cluster_sla_summary, cluster_summary, protection_summary, storage_by_cluster


class RSCReports:
    """Report session bound to one RSC tenant.

    Inventory tables that other reports join against (objects, SLA
    domains) are fetched once and kept in ``cache`` until refreshed or
    invalidated.

    Example:
        >>> with RSCReports.from_config(Config.load()) as rsc:
        ...     rows = rsc.get("vsphere_vms")
    """

    def __init__(
        self,
        connection: RSCConnection,
        cache: Optional[InventoryCache] = None,
        config: Optional[Config] = None,
    ):
        self.connection = connection
        self.config = config or Config()
        self.cache = cache if cache is not None else InventoryCache(self.config.reports.cache_max_age_delta)
        self.client = GraphQLClient(connection, verbose=self.config.reports.verbose)

    @classmethod
    def from_config(cls, config: Config) -> "RSCReports":
        return cls(RSCConnection.from_config(config), config=config)

    @property
    def page_size(self) -> Optional[int]:
        return self.config.reports.page_size

    def collector(self, spec: ObjectTypeSpec, **variables: Any) -> GraphQLCollector:
        return GraphQLCollector(self.client, spec, page_size=self.page_size, variables=variables)

    def get(self, name: str, **variables: Any) -> List[Dict[str, Any]]:
        """Fetch any catalog report by name. Not cached."""
        return self.collector(get_spec(name), **variables).collect()

    def _cached(self, spec: ObjectTypeSpec, refresh: bool) -> List[Dict[str, Any]]:
        loader = self.collector(spec).collect
        if refresh:
            return self.cache.refresh(spec.name, loader)
        return self.cache.get(spec.name, loader)

    def get_objects(self, refresh: bool = False) -> List[Dict[str, Any]]:
        return self._cached(OBJECTS, refresh)

    def get_sla_domains(self, refresh: bool = False) -> List[Dict[str, Any]]:
        return self._cached(SLA_DOMAINS, refresh)

    def get_clusters(self) -> List[Dict[str, Any]]:
        """Clusters joined with object counts from the object inventory."""
        objects = self.get_objects()
        clusters = self.collector(CLUSTERS).collect()
        return cluster_summary(clusters, objects)

    def get_object_snapshots(
        self,
        object_id: str,
        start: Optional[datetime] = None,
        end: Optional[datetime] = None,
    ) -> List[Dict[str, Any]]:
        return snapshot_collector(self.client, object_id, start, end, self.page_size).collect()

    def get_recent_snapshots(self, object_id: str, days: int) -> List[Dict[str, Any]]:
        if days < 1:
            raise ValueError("days must be at least 1")
        end = utc_now()
        return self.get_object_snapshots(object_id, end - timedelta(days=days), end)

    def get_backup_success_rate(
        self,
        days_to_report: Optional[int] = None,
        backup_window_end_hour: Optional[int] = None,
        skip_days: Optional[int] = None,
        month: Optional[str] = None,
        now: Optional[datetime] = None,
    ) -> SuccessRateReport:
        rc = self.config.reports
        collector = BackupSuccessRateCollector(
            self.client,
            self.cache,
            days_to_report=rc.days_to_report if days_to_report is None else days_to_report,
            backup_window_end_hour=rc.backup_window_end_hour if backup_window_end_hour is None else backup_window_end_hour,
            skip_days=rc.skip_days if skip_days is None else skip_days,
            month=month,
            page_size=self.page_size,
            now=now,
        )
        return collector.run()

    def get_protection_summary(self) -> List[Dict[str, Any]]:
        return protection_summary(self.get_objects())

    def get_cluster_sla_summary(self) -> List[Dict[str, Any]]:
        return cluster_sla_summary(self.get_objects())

    def get_storage_summary(self) -> List[Dict[str, Any]]:
        return storage_by_cluster(self.get_objects())

    def close(self) -> None:
        self.cache.invalidate()
        self.connection.close()

    def __enter__(self) -> "RSCReports":
        return self

    def __exit__(self, *exc: Any) -> None:
        self.close()
