"""Core inventory: objects, SLA domains, clusters, events, protected objects."""

from ..data.mapping import (
    Field,
    bool_field,
    equals_field,
    flag_field,
    gb_field,
    hours_since_field,
    joined_field,
    protection_field,
    tb_field,
    url_field,
    utc_field,
)
from ..data.models import ComplianceStatus, ObjectTypeSpec, QuerySpec
from ..data.normalization import duration_to_hours, format_duration, get_path, percent, to_utc

# =============================================================================
# Object inventory (protection / compliance report)
# =============================================================================

OBJECTS_QUERY = """
query ObjectListQuery($first: Int, $after: String, $filter: SnappableFilterInput) {
  snappableConnection(first: $first, after: $after, filter: $filter) {
    edges {
      node {
        id
        fid
        name
        objectType
        location
        isRelic
        cluster { id name }
        slaDomain { id name }
        complianceStatus
        protectionStatus
        lastSnapshot
        latestArchivalSnapshot
        latestReplicationSnapshot
        totalSnapshots
        missedSnapshots
        localSnapshots
        archiveSnapshots
        replicaSnapshots
        logicalBytes
        physicalBytes
        localStorage
        archiveStorage
        replicaStorage
        dataReduction
        awaitingFirstFull
        protectedOn
        orgName
      }
    }
    pageInfo { endCursor hasNextPage }
  }
}
"""

OBJECT_FIELDS = (
    Field("object", "name"),
    Field("object_id", "id"),
    Field("object_fid", "fid"),
    Field("object_type", "objectType"),
    Field("location", "location"),
    bool_field("is_relic", "isRelic"),
    Field("cluster", "cluster.name"),
    Field("cluster_id", "cluster.id"),
    Field("sla_domain", "slaDomain.name"),
    Field("sla_domain_id", "slaDomain.id"),
    protection_field("protection", "slaDomain.id"),
    Field("compliance_status", "complianceStatus"),
    equals_field("in_compliance", "complianceStatus", ComplianceStatus.IN_COMPLIANCE),
    Field("protection_status", "protectionStatus"),
    utc_field("last_snapshot_utc", "lastSnapshot"),
    hours_since_field("hours_since_last_snapshot", "lastSnapshot"),
    utc_field("last_archive_snapshot_utc", "latestArchivalSnapshot"),
    utc_field("last_replica_snapshot_utc", "latestReplicationSnapshot"),
    Field("total_snapshots", "totalSnapshots"),
    Field("missed_snapshots", "missedSnapshots"),
    Field("local_snapshots", "localSnapshots"),
    Field("archive_snapshots", "archiveSnapshots"),
    Field("replica_snapshots", "replicaSnapshots"),
    gb_field("logical_gb", "logicalBytes"),
    gb_field("physical_gb", "physicalBytes"),
    gb_field("local_storage_gb", "localStorage"),
    gb_field("archive_storage_gb", "archiveStorage"),
    gb_field("replica_storage_gb", "replicaStorage"),
    Field("data_reduction_percent", "dataReduction", convert=lambda v: round(float(v), 2)),
    bool_field("awaiting_first_full", "awaitingFirstFull"),
    utc_field("protected_on_utc", "protectedOn"),
    Field("organization", "orgName"),
    url_field("url", type_path="objectType", id_path="fid"),
)

OBJECTS = ObjectTypeSpec(
    name="objects",
    display_name="Protected Objects",
    description="Every object known to RSC with its SLA, compliance and storage figures.",
    queries=(
        QuerySpec(
            name="ObjectListQuery",
            query=OBJECTS_QUERY,
            connection_path="snappableConnection",
            fields=OBJECT_FIELDS,
        ),
    ),
)

# =============================================================================
# SLA domains
# =============================================================================

SLA_DOMAINS_QUERY = """
query SLAListQuery($after: String, $first: Int, $filter: [GlobalSlaFilterInput!], $shouldShowProtectedObjectCount: Boolean) {
  slaDomains(after: $after, first: $first, filter: $filter, shouldShowProtectedObjectCount: $shouldShowProtectedObjectCount) {
    edges {
      node {
        id
        name
        ... on GlobalSlaReply {
          description
          objectTypes
          protectedObjectCount
          baseFrequency { duration unit }
          localRetentionLimit { duration unit }
          archivalSpecs { storageSetting { name } }
          replicationSpecsV2 {
            cluster { id name }
            retentionDuration { duration unit }
          }
          isRetentionLockedSla
          retentionLockMode
          ownerOrg { id name }
        }
      }
    }
    pageInfo { endCursor hasNextPage }
  }
}
"""


def _sla_frequency(node, ctx):
    return format_duration(get_path(node, "baseFrequency.duration"), get_path(node, "baseFrequency.unit"))


def _sla_frequency_hours(node, ctx):
    return duration_to_hours(get_path(node, "baseFrequency.duration"), get_path(node, "baseFrequency.unit"))


def _sla_retention(node, ctx):
    return format_duration(get_path(node, "localRetentionLimit.duration"), get_path(node, "localRetentionLimit.unit"))


def _sla_replica_retention(node, ctx):
    return format_duration(
        get_path(node, "replicationSpecsV2.0.retentionDuration.duration"),
        get_path(node, "replicationSpecsV2.0.retentionDuration.unit"),
    )


SLA_DOMAIN_FIELDS = (
    Field("sla_domain", "name"),
    Field("sla_domain_id", "id"),
    Field("description", "description"),
    joined_field("object_types", "objectTypes"),
    Field("protected_objects", "protectedObjectCount", default=0),
    Field("frequency", derive=_sla_frequency),
    Field("frequency_hours", derive=_sla_frequency_hours),
    Field("local_retention", derive=_sla_retention),
    flag_field("is_archived", "archivalSpecs"),
    joined_field("archive_targets", "archivalSpecs", key="storageSetting.name"),
    flag_field("is_replicated", "replicationSpecsV2"),
    joined_field("replication_targets", "replicationSpecsV2", key="cluster.name"),
    Field("replica_retention", derive=_sla_replica_retention),
    bool_field("retention_locked", "isRetentionLockedSla"),
    Field("retention_lock_mode", "retentionLockMode"),
    Field("organization", "ownerOrg.name"),
    url_field("url", object_type="SlaDomain"),
)

SLA_DOMAINS = ObjectTypeSpec(
    name="sla_domains",
    display_name="SLA Domains",
    description="Backup policies with frequency, retention, archival and replication settings.",
    queries=(
        QuerySpec(
            name="SLAListQuery",
            query=SLA_DOMAINS_QUERY,
            connection_path="slaDomains",
            fields=SLA_DOMAIN_FIELDS,
            variables={"shouldShowProtectedObjectCount": True},
            page_size=500,
        ),
    ),
)

# =============================================================================
# Clusters (nodes-style connection)
# =============================================================================

CLUSTERS_QUERY = """
query ClusterListQuery($first: Int, $after: String, $filter: ClusterFilterInput) {
  clusterConnection(first: $first, after: $after, filter: $filter) {
    nodes {
      id
      name
      version
      status
      type
      productType
      estimatedRunway
      lastConnectionTime
      geoLocation { address }
      metric {
        totalCapacity
        usedCapacity
        availableCapacity
        lastUpdateTime
      }
    }
    pageInfo { endCursor hasNextPage }
  }
}
"""


def _cluster_used_percent(node, ctx):
    return percent(get_path(node, "metric.usedCapacity"), get_path(node, "metric.totalCapacity"))


CLUSTER_FIELDS = (
    Field("cluster", "name"),
    Field("cluster_id", "id"),
    Field("version", "version"),
    Field("status", "status"),
    Field("type", "type"),
    Field("product_type", "productType"),
    Field("location", "geoLocation.address"),
    utc_field("last_connected_utc", "lastConnectionTime"),
    hours_since_field("hours_since_connected", "lastConnectionTime"),
    tb_field("total_tb", "metric.totalCapacity"),
    tb_field("used_tb", "metric.usedCapacity"),
    tb_field("free_tb", "metric.availableCapacity"),
    Field("used_percent", derive=_cluster_used_percent),
    Field("runway_days", "estimatedRunway"),
    utc_field("metrics_updated_utc", "metric.lastUpdateTime"),
    url_field("url", object_type="Cluster"),
)

CLUSTERS = ObjectTypeSpec(
    name="clusters",
    display_name="Clusters",
    description="Connected clusters with capacity and connectivity.",
    queries=(
        QuerySpec(
            name="ClusterListQuery",
            query=CLUSTERS_QUERY,
            connection_path="clusterConnection",
            fields=CLUSTER_FIELDS,
            page_size=100,
        ),
    ),
)

# =============================================================================
# Events (activity series)
# =============================================================================

EVENTS_QUERY = """
query EventSeriesListQuery($after: String, $first: Int, $filters: ActivitySeriesFilter, $sortBy: ActivitySeriesSortField, $sortOrder: SortOrder) {
  activitySeriesConnection(after: $after, first: $first, filters: $filters, sortBy: $sortBy, sortOrder: $sortOrder) {
    edges {
      node {
        id
        activitySeriesId
        lastActivityType
        lastActivityStatus
        objectId
        objectName
        objectType
        severity
        progress
        startTime
        lastUpdated
        clusterName
        location
        activityConnection(first: 1) {
          nodes { message time severity }
        }
      }
    }
    pageInfo { endCursor hasNextPage }
  }
}
"""


def _event_duration_minutes(node, ctx):
    start = to_utc(get_path(node, "startTime"))
    end = to_utc(get_path(node, "lastUpdated"))
    if start is None or end is None:
        return None
    return round((end - start).total_seconds() / 60, 2)


EVENT_FIELDS = (
    Field("event_id", "id"),
    Field("series_id", "activitySeriesId"),
    Field("activity_type", "lastActivityType"),
    Field("status", "lastActivityStatus"),
    Field("object", "objectName"),
    Field("object_id", "objectId"),
    Field("object_type", "objectType"),
    Field("severity", "severity"),
    Field("progress", "progress"),
    Field("cluster", "clusterName"),
    Field("location", "location"),
    utc_field("started_utc", "startTime"),
    utc_field("last_updated_utc", "lastUpdated"),
    hours_since_field("hours_since_update", "lastUpdated"),
    Field("duration_minutes", derive=_event_duration_minutes),
    Field("message", "activityConnection.nodes.0.message"),
)

EVENTS = ObjectTypeSpec(
    name="events",
    display_name="Events",
    description="Activity series (backups, recoveries, archival...) newest first.",
    queries=(
        QuerySpec(
            name="EventSeriesListQuery",
            query=EVENTS_QUERY,
            connection_path="activitySeriesConnection",
            fields=EVENT_FIELDS,
            variables={"sortBy": "LAST_UPDATED", "sortOrder": "DESC"},
            page_size=500,
        ),
    ),
)

# =============================================================================
# Objects protected by given SLA domains
# =============================================================================

PROTECTED_OBJECTS_QUERY = """
query ProtectedObjectListQuery($slaIds: [UUID!]!, $first: Int, $after: String, $filter: GetProtectedObjectsFilterInput) {
  slaProtectedObjects(slaIds: $slaIds, first: $first, after: $after, filter: $filter) {
    edges {
      node {
        id
        name
        objectType
        slaPauseStatus
        protectionStatus
        isPrimary
        cluster { id name }
        effectiveSlaDomain { id name }
      }
    }
    pageInfo { endCursor hasNextPage }
  }
}
"""

PROTECTED_OBJECT_FIELDS = (
    Field("object", "name"),
    Field("object_id", "id"),
    Field("object_type", "objectType"),
    Field("cluster", "cluster.name"),
    Field("cluster_id", "cluster.id"),
    Field("sla_domain", "effectiveSlaDomain.name"),
    Field("sla_domain_id", "effectiveSlaDomain.id"),
    Field("sla_paused", "slaPauseStatus"),
    Field("protection_status", "protectionStatus"),
    bool_field("is_primary", "isPrimary"),
    url_field("url", type_path="objectType"),
)

PROTECTED_OBJECTS = ObjectTypeSpec(
    name="protected_objects",
    display_name="SLA Protected Objects",
    description="Objects assigned to the SLA domains given in `slaIds`.",
    required_variables=("slaIds",),
    queries=(
        QuerySpec(
            name="ProtectedObjectListQuery",
            query=PROTECTED_OBJECTS_QUERY,
            connection_path="slaProtectedObjects",
            fields=PROTECTED_OBJECT_FIELDS,
            page_size=500,
        ),
    ),
)

SPECS = (OBJECTS, SLA_DOMAINS, CLUSTERS, EVENTS, PROTECTED_OBJECTS)
