"""Column groups shared by several object types."""

from ..data.mapping import Field, days_since_field, hours_since_field, protection_field, utc_field

# Selection matching snapshot_fields()
SNAPSHOT_SELECTION = """
        newestSnapshot { id date }
        oldestSnapshot { id date }
        snapshotConnection { count }
        onDemandSnapshotCount
"""


def snapshot_fields():
    """Newest/oldest snapshot columns shared by every snapshot-bearing workload."""
    return (
        utc_field("last_snapshot_utc", "newestSnapshot.date"),
        hours_since_field("hours_since_last_snapshot", "newestSnapshot.date"),
        utc_field("oldest_snapshot_utc", "oldestSnapshot.date"),
        days_since_field("days_since_oldest_snapshot", "oldestSnapshot.date"),
        Field("total_snapshots", "snapshotConnection.count"),
        Field("on_demand_snapshots", "onDemandSnapshotCount"),
    )


def sla_fields():
    return (
        Field("sla_domain", "effectiveSlaDomain.name"),
        Field("sla_domain_id", "effectiveSlaDomain.id"),
        protection_field("protection", "effectiveSlaDomain.id"),
        Field("sla_assignment", "slaAssignment"),
    )


def cluster_fields():
    return (
        Field("cluster", "cluster.name"),
        Field("cluster_id", "cluster.id"),
    )
