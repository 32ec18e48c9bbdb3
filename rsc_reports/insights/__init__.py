"""Insights module - backup success rate and inventory roll-ups."""

from .success_rate import (
    BackupSuccessRateCollector,
    calculate_backup_success_rate,
    generate_backup_windows,
    generate_month_windows,
)
from .summaries import cluster_sla_summary, cluster_summary, group_count, protection_summary, storage_by_cluster

__all__ = [
    "BackupSuccessRateCollector",
    "calculate_backup_success_rate",
    "generate_backup_windows",
    "generate_month_windows",
    "cluster_sla_summary",
    "cluster_summary",
    "group_count",
    "protection_summary",
    "storage_by_cluster",
]
