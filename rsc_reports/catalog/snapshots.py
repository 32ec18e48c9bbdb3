"""Snapshot history of a single workload."""

from ..data.mapping import Field, bool_field, hours_since_field, utc_field
from ..data.models import ObjectTypeSpec, QuerySpec

OBJECT_SNAPSHOTS_QUERY = """
query SnapshotsListQuery($workloadId: String!, $first: Int, $after: String, $timeRange: TimeRangeInput) {
  snapshotOfASnappableConnection(
    workloadId: $workloadId
    first: $first
    after: $after
    sortBy: CREATION_TIME
    sortOrder: DESC
    timeRange: $timeRange
  ) {
    edges {
      node {
        id
        date
        expirationDate
        isOnDemandSnapshot
        ... on CdmSnapshot {
          isRetentionLocked
          isExpired
          cluster { id name }
          slaDomain { id name }
        }
        ... on PolarisSnapshot {
          isReplica
          isArchivalCopy
          slaDomain { id name }
        }
      }
    }
    pageInfo { endCursor hasNextPage }
  }
}
"""

OBJECT_SNAPSHOT_FIELDS = (
    Field("snapshot_id", "id"),
    utc_field("date_utc", "date"),
    hours_since_field("hours_since", "date"),
    utc_field("expiration_utc", "expirationDate"),
    bool_field("is_on_demand", "isOnDemandSnapshot"),
    bool_field("is_retention_locked", "isRetentionLocked"),
    bool_field("is_expired", "isExpired"),
    bool_field("is_replica", "isReplica"),
    bool_field("is_archive_copy", "isArchivalCopy"),
    Field("cluster", "cluster.name"),
    Field("sla_domain", "slaDomain.name"),
)

OBJECT_SNAPSHOTS = ObjectTypeSpec(
    name="object_snapshots",
    display_name="Object Snapshots",
    description="Snapshots of one workload, newest first. Requires workloadId; timeRange is optional.",
    queries=(
        QuerySpec(
            name="SnapshotsListQuery",
            query=OBJECT_SNAPSHOTS_QUERY,
            connection_path="snapshotOfASnappableConnection",
            fields=OBJECT_SNAPSHOT_FIELDS,
            page_size=500,
        ),
    ),
    required_variables=("workloadId",),
)

SPECS = (OBJECT_SNAPSHOTS,)
