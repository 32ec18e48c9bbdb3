"""Database and managed-volume workloads."""

from ..data.mapping import Field, bool_field, gb_field, url_field
from ..data.models import ObjectTypeSpec, QuerySpec
from ..data.normalization import get_path, percent
from .common import SNAPSHOT_SELECTION, cluster_fields, sla_fields, snapshot_fields

# =============================================================================
# Microsoft SQL Server
# =============================================================================

MSSQL_DATABASES_QUERY = """
query MssqlDatabaseListQuery($first: Int!, $after: String, $filter: [Filter!]) {
  mssqlDatabases(first: $first, after: $after, filter: $filter) {
    edges {
      node {
        id
        name
        isRelic
        isOnline
        recoveryModel
        copyOnly
        isLogShippingSecondary
        logBackupFrequencyInSeconds
        logBackupRetentionInHours
        hasPermissions
        physicalPath { fid name objectType }
        effectiveSlaDomain { id name }
        slaAssignment
        cluster { id name }
%s
      }
    }
    pageInfo { endCursor hasNextPage }
  }
}
""" % SNAPSHOT_SELECTION


def _log_backup_minutes(node, ctx):
    seconds = get_path(node, "logBackupFrequencyInSeconds")
    if seconds is None:
        return None
    return round(float(seconds) / 60, 2)


MSSQL_DATABASE_FIELDS = (
    (
        Field("database", "name"),
        Field("database_id", "id"),
        Field("instance", "physicalPath.0.name"),
        Field("host", "physicalPath.1.name"),
        bool_field("is_relic", "isRelic"),
        bool_field("is_online", "isOnline"),
        Field("recovery_model", "recoveryModel"),
        bool_field("copy_only", "copyOnly"),
        bool_field("log_shipping_secondary", "isLogShippingSecondary"),
        Field("log_backup_frequency_minutes", derive=_log_backup_minutes),
        Field("log_retention_hours", "logBackupRetentionInHours"),
        bool_field("has_permissions", "hasPermissions"),
    )
    + cluster_fields()
    + sla_fields()
    + snapshot_fields()
    + (url_field("url", object_type="Mssql"),)
)

MSSQL_DATABASES = ObjectTypeSpec(
    name="mssql_databases",
    display_name="MSSQL Databases",
    queries=(
        QuerySpec(
            name="MssqlDatabaseListQuery",
            query=MSSQL_DATABASES_QUERY,
            connection_path="mssqlDatabases",
            fields=MSSQL_DATABASE_FIELDS,
        ),
    ),
)

# =============================================================================
# Oracle
# =============================================================================

ORACLE_DATABASES_QUERY = """
query OracleDatabaseListQuery($first: Int, $after: String, $filter: [Filter!]) {
  oracleDatabases(first: $first, after: $after, filter: $filter) {
    edges {
      node {
        id
        name
        dbUniqueName
        isRelic
        dataGuardType
        numInstances
        logBackupFrequency
        logRetentionHours
        osType
        physicalPath { fid name objectType }
        effectiveSlaDomain { id name }
        slaAssignment
        cluster { id name }
%s
      }
    }
    pageInfo { endCursor hasNextPage }
  }
}
""" % SNAPSHOT_SELECTION

# Snapshot dates for some Oracle databases come back empty; they map to None
# like any other missing value.
ORACLE_DATABASE_FIELDS = (
    (
        Field("database", "name"),
        Field("database_id", "id"),
        Field("db_unique_name", "dbUniqueName"),
        Field("host", "physicalPath.0.name"),
        bool_field("is_relic", "isRelic"),
        Field("data_guard_type", "dataGuardType"),
        Field("instances", "numInstances"),
        Field("log_backup_frequency_minutes", "logBackupFrequency"),
        Field("log_retention_hours", "logRetentionHours"),
        Field("os_type", "osType"),
    )
    + cluster_fields()
    + sla_fields()
    + snapshot_fields()
    + (url_field("url", object_type="OracleDatabase"),)
)

ORACLE_DATABASES = ObjectTypeSpec(
    name="oracle_databases",
    display_name="Oracle Databases",
    queries=(
        QuerySpec(
            name="OracleDatabaseListQuery",
            query=ORACLE_DATABASES_QUERY,
            connection_path="oracleDatabases",
            fields=ORACLE_DATABASE_FIELDS,
        ),
    ),
)

# =============================================================================
# Managed volumes
# =============================================================================

MANAGED_VOLUMES_QUERY = """
query ManagedVolumeListQuery($first: Int, $after: String, $filter: [Filter!]) {
  managedVolumes(first: $first, after: $after, filter: $filter) {
    edges {
      node {
        id
        name
        isRelic
        state
        protocol
        mvType
        numChannels
        provisionedSize
        usedSize
        effectiveSlaDomain { id name }
        slaAssignment
        cluster { id name }
%s
      }
    }
    pageInfo { endCursor hasNextPage }
  }
}
""" % SNAPSHOT_SELECTION


def _mv_used_percent(node, ctx):
    return percent(get_path(node, "usedSize"), get_path(node, "provisionedSize"))


MANAGED_VOLUME_FIELDS = (
    (
        Field("managed_volume", "name"),
        Field("managed_volume_id", "id"),
        bool_field("is_relic", "isRelic"),
        Field("state", "state"),
        Field("protocol", "protocol"),
        Field("volume_type", "mvType"),
        Field("channels", "numChannels"),
        gb_field("provisioned_gb", "provisionedSize"),
        gb_field("used_gb", "usedSize"),
        Field("used_percent", derive=_mv_used_percent),
    )
    + cluster_fields()
    + sla_fields()
    + snapshot_fields()
    + (url_field("url", object_type="ManagedVolume"),)
)

MANAGED_VOLUMES = ObjectTypeSpec(
    name="managed_volumes",
    display_name="Managed Volumes",
    queries=(
        QuerySpec(
            name="ManagedVolumeListQuery",
            query=MANAGED_VOLUMES_QUERY,
            connection_path="managedVolumes",
            fields=MANAGED_VOLUME_FIELDS,
        ),
    ),
)

SPECS = (MSSQL_DATABASES, ORACLE_DATABASES, MANAGED_VOLUMES)
