"""Physical hosts, fileset templates and NAS shares."""

from ..data.mapping import Field, bool_field, constant_field, joined_field, url_field
from ..data.models import ObjectTypeSpec, QuerySpec
from .common import SNAPSHOT_SELECTION, cluster_fields, sla_fields, snapshot_fields

# =============================================================================
# Physical hosts (Windows + Linux roots)
# =============================================================================

PHYSICAL_HOSTS_QUERY = """
query PhysicalHostListQuery($hostRoot: HostRoot!, $first: Int, $after: String, $filter: [Filter!]) {
  physicalHosts(hostRoot: $hostRoot, first: $first, after: $after, filter: $filter) {
    edges {
      node {
        id
        name
        osType
        osName
        isArchived
        connectionStatus { connectivity }
        effectiveSlaDomain { id name }
        slaAssignment
        cluster { id name }
        descendantConnection { count }
      }
    }
    pageInfo { endCursor hasNextPage }
  }
}
"""


def physical_host_fields(os_family):
    return (
        (
            Field("host", "name"),
            Field("host_id", "id"),
            constant_field("os_family", os_family),
            Field("os_type", "osType"),
            Field("os_name", "osName"),
            Field("connectivity", "connectionStatus.connectivity"),
            bool_field("is_relic", "isArchived"),
            Field("protected_children", "descendantConnection.count"),
        )
        + cluster_fields()
        + sla_fields()
        + (url_field("url", object_type="PhysicalHost"),)
    )


PHYSICAL_HOSTS = ObjectTypeSpec(
    name="physical_hosts",
    display_name="Physical Hosts",
    description="Windows and Linux hosts registered for fileset and database backup.",
    queries=(
        QuerySpec(
            name="PhysicalHostListQuery",
            query=PHYSICAL_HOSTS_QUERY,
            connection_path="physicalHosts",
            fields=physical_host_fields("Windows"),
            variables={"hostRoot": "WINDOWS_HOST_ROOT"},
            page_size=500,
        ),
        QuerySpec(
            name="PhysicalHostListQuery",
            query=PHYSICAL_HOSTS_QUERY,
            connection_path="physicalHosts",
            fields=physical_host_fields("Linux"),
            variables={"hostRoot": "LINUX_HOST_ROOT"},
            page_size=500,
        ),
    ),
)

# =============================================================================
# Fileset templates (Windows + Linux roots)
# =============================================================================

FILESETS_QUERY = """
query FilesetTemplateListQuery($hostRoot: HostRoot!, $first: Int, $after: String, $filter: [Filter!]) {
  filesetTemplates(hostRoot: $hostRoot, first: $first, after: $after, filter: $filter) {
    edges {
      node {
        id
        name
        includes
        excludes
        exceptions
        allowBackupNetworkMounts
        allowBackupHiddenFoldersInNetworkMounts
        isArrayEnabled
        cluster { id name }
        physicalChildConnection { count }
      }
    }
    pageInfo { endCursor hasNextPage }
  }
}
"""


def fileset_fields(os_family):
    return (
        Field("fileset_template", "name"),
        Field("template_id", "id"),
        constant_field("os_family", os_family),
        joined_field("includes", "includes"),
        joined_field("excludes", "excludes"),
        joined_field("exceptions", "exceptions"),
        bool_field("network_mounts", "allowBackupNetworkMounts"),
        bool_field("array_enabled", "isArrayEnabled"),
        Field("hosts_assigned", "physicalChildConnection.count", default=0),
        Field("cluster", "cluster.name"),
        Field("cluster_id", "cluster.id"),
    )


FILESETS = ObjectTypeSpec(
    name="filesets",
    display_name="Fileset Templates",
    queries=(
        QuerySpec(
            name="FilesetTemplateListQuery",
            query=FILESETS_QUERY,
            connection_path="filesetTemplates",
            fields=fileset_fields("Windows"),
            variables={"hostRoot": "WINDOWS_HOST_ROOT"},
            page_size=500,
        ),
        QuerySpec(
            name="FilesetTemplateListQuery",
            query=FILESETS_QUERY,
            connection_path="filesetTemplates",
            fields=fileset_fields("Linux"),
            variables={"hostRoot": "LINUX_HOST_ROOT"},
            page_size=500,
        ),
    ),
)

# =============================================================================
# NAS shares
# =============================================================================

NAS_SHARES_QUERY = """
query NasShareListQuery($first: Int, $after: String, $filter: [Filter!]) {
  nasShares(first: $first, after: $after, filter: $filter) {
    edges {
      node {
        id
        name
        shareType
        exportPoint
        isRelic
        isStale
        nasSystem { id name vendorType }
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

NAS_SHARE_FIELDS = (
    (
        Field("share", "name"),
        Field("share_id", "id"),
        Field("share_type", "shareType"),
        Field("export_point", "exportPoint"),
        Field("nas_system", "nasSystem.name"),
        Field("vendor", "nasSystem.vendorType"),
        bool_field("is_relic", "isRelic"),
        bool_field("is_stale", "isStale"),
    )
    + cluster_fields()
    + sla_fields()
    + snapshot_fields()
    + (url_field("url", object_type="NasShare"),)
)

NAS_SHARES = ObjectTypeSpec(
    name="nas_shares",
    display_name="NAS Shares",
    queries=(
        QuerySpec(
            name="NasShareListQuery",
            query=NAS_SHARES_QUERY,
            connection_path="nasShares",
            fields=NAS_SHARE_FIELDS,
        ),
    ),
)

SPECS = (PHYSICAL_HOSTS, FILESETS, NAS_SHARES)
