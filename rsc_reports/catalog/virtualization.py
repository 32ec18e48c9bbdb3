"""Hypervisor workloads: vSphere, Hyper-V and Nutanix AHV VMs, plus live mounts."""

from ..data.mapping import (
    Field,
    bool_field,
    constant_field,
    count_field,
    flag_field,
    hours_since_field,
    url_field,
    utc_field,
)
from ..data.models import ObjectTypeSpec, QuerySpec
from .common import SNAPSHOT_SELECTION, cluster_fields, sla_fields, snapshot_fields

# =============================================================================
# vSphere
# =============================================================================

VSPHERE_VMS_QUERY = """
query VSphereVMsListQuery($first: Int!, $after: String, $filter: [Filter!]) {
  vSphereVmNewConnection(first: $first, after: $after, filter: $filter) {
    edges {
      node {
        id
        name
        isRelic
        guestOsName
        powerStatus
        vmwareToolsInstalled
        snapshotConsistencyMandate
        effectiveSlaDomain { id name }
        slaAssignment
        cluster { id name }
        agentStatus { agentStatus }
        preBackupScript { scriptPath timeoutMs failureHandling }
        postSnapScript { scriptPath timeoutMs failureHandling }
        postBackupScript { scriptPath timeoutMs failureHandling }
        logicalPath { name objectType }
%s
      }
    }
    pageInfo { endCursor hasNextPage }
  }
}
""" % SNAPSHOT_SELECTION

VSPHERE_VM_FIELDS = (
    (
        Field("vm", "name"),
        Field("vm_id", "id"),
        bool_field("is_relic", "isRelic"),
        Field("guest_os", "guestOsName"),
        Field("power_status", "powerStatus"),
        bool_field("tools_installed", "vmwareToolsInstalled"),
        Field("consistency", "snapshotConsistencyMandate"),
        Field("agent_status", "agentStatus.agentStatus"),
        flag_field("has_pre_backup_script", "preBackupScript.scriptPath"),
        flag_field("has_post_snap_script", "postSnapScript.scriptPath"),
        flag_field("has_post_backup_script", "postBackupScript.scriptPath"),
        Field("vcenter", "logicalPath.0.name"),
    )
    + cluster_fields()
    + sla_fields()
    + snapshot_fields()
    + (url_field("url", object_type="VmwareVirtualMachine"),)
)

VSPHERE_VMS = ObjectTypeSpec(
    name="vsphere_vms",
    display_name="vSphere VMs",
    description="VMware virtual machines with SLA, snapshot and backup-script details.",
    queries=(
        QuerySpec(
            name="VSphereVMsListQuery",
            query=VSPHERE_VMS_QUERY,
            connection_path="vSphereVmNewConnection",
            fields=VSPHERE_VM_FIELDS,
        ),
    ),
)

# =============================================================================
# Hyper-V
# =============================================================================

HYPERV_VMS_QUERY = """
query HypervVMsListQuery($first: Int, $after: String, $filter: [Filter!]) {
  hypervVirtualMachines(first: $first, after: $after, filter: $filter) {
    edges {
      node {
        id
        name
        isRelic
        osType
        hostName
        effectiveSlaDomain { id name }
        slaAssignment
        cluster { id name }
        agentStatus { connectionStatus }
%s
      }
    }
    pageInfo { endCursor hasNextPage }
  }
}
""" % SNAPSHOT_SELECTION

HYPERV_VM_FIELDS = (
    (
        Field("vm", "name"),
        Field("vm_id", "id"),
        bool_field("is_relic", "isRelic"),
        Field("os_type", "osType"),
        Field("host", "hostName"),
        Field("agent_status", "agentStatus.connectionStatus"),
    )
    + cluster_fields()
    + sla_fields()
    + snapshot_fields()
    + (url_field("url", object_type="HypervVirtualMachine"),)
)

HYPERV_VMS = ObjectTypeSpec(
    name="hyperv_vms",
    display_name="Hyper-V VMs",
    queries=(
        QuerySpec(
            name="HypervVMsListQuery",
            query=HYPERV_VMS_QUERY,
            connection_path="hypervVirtualMachines",
            fields=HYPERV_VM_FIELDS,
        ),
    ),
)

# =============================================================================
# Nutanix AHV
# =============================================================================

NUTANIX_VMS_QUERY = """
query NutanixVMsListQuery($first: Int, $after: String, $filter: [Filter!]) {
  nutanixVms(first: $first, after: $after, filter: $filter) {
    edges {
      node {
        id
        name
        isRelic
        osType
        nutanixClusterName
        effectiveSlaDomain { id name }
        slaAssignment
        cluster { id name }
        vmDisks { uuid }
%s
      }
    }
    pageInfo { endCursor hasNextPage }
  }
}
""" % SNAPSHOT_SELECTION

NUTANIX_VM_FIELDS = (
    (
        Field("vm", "name"),
        Field("vm_id", "id"),
        bool_field("is_relic", "isRelic"),
        Field("os_type", "osType"),
        Field("nutanix_cluster", "nutanixClusterName"),
        # The API may return an empty list here; an absent list stays None.
        count_field("disk_count", "vmDisks"),
    )
    + cluster_fields()
    + sla_fields()
    + snapshot_fields()
    + (url_field("url", object_type="NutanixVirtualMachine"),)
)

NUTANIX_VMS = ObjectTypeSpec(
    name="nutanix_vms",
    display_name="Nutanix AHV VMs",
    queries=(
        QuerySpec(
            name="NutanixVMsListQuery",
            query=NUTANIX_VMS_QUERY,
            connection_path="nutanixVms",
            fields=NUTANIX_VM_FIELDS,
        ),
    ),
)

# =============================================================================
# Live mounts (six sources, one record shape)
# =============================================================================


def live_mount_fields(mount_type, id_path, name_path, source_name_path, source_id_path, created_path, status_path):
    return (
        constant_field("mount_type", mount_type),
        Field("mount_id", id_path),
        Field("mount_name", name_path),
        Field("source_object", source_name_path),
        Field("source_object_id", source_id_path),
        Field("status", status_path),
        Field("cluster", "cluster.name"),
        Field("cluster_id", "cluster.id"),
        utc_field("mounted_utc", created_path),
        hours_since_field("hours_mounted", created_path),
    )


VSPHERE_LIVE_MOUNTS_QUERY = """
query VSphereLiveMountsQuery($first: Int, $after: String, $filter: [VsphereLiveMountFilterInput!]) {
  vSphereLiveMounts(first: $first, after: $after, filter: $filter) {
    edges {
      node {
        id
        vmStatus
        mountTimestamp
        newVm { id name }
        sourceVm { id name }
        cluster { id name }
      }
    }
    pageInfo { endCursor hasNextPage }
  }
}
"""

HYPERV_LIVE_MOUNTS_QUERY = """
query HypervLiveMountsQuery($first: Int, $after: String, $filters: [HypervLiveMountFilterInput!]) {
  hypervMounts(first: $first, after: $after, filters: $filters) {
    edges {
      node {
        id
        name
        mountedVmStatus
        mountCreateDate
        sourceSnapshot { id snappableName snappableId }
        cluster { id name }
      }
    }
    pageInfo { endCursor hasNextPage }
  }
}
"""

NUTANIX_LIVE_MOUNTS_QUERY = """
query NutanixLiveMountsQuery($first: Int, $after: String, $filters: [NutanixLiveMountFilterInput!]) {
  nutanixMounts(first: $first, after: $after, filters: $filters) {
    edges {
      node {
        id
        mountedVmName
        status
        mountedDate
        sourceVmName
        sourceVmId
        cluster { id name }
      }
    }
    pageInfo { endCursor hasNextPage }
  }
}
"""

MSSQL_LIVE_MOUNTS_QUERY = """
query MssqlLiveMountsQuery($first: Int, $after: String, $filters: [MssqlDatabaseLiveMountFilterInput!]) {
  mssqlDatabaseLiveMounts(first: $first, after: $after, filters: $filters) {
    edges {
      node {
        fid
        mountedDatabaseName
        isReady
        creationDate
        sourceDatabase { id name }
        cluster { id name }
      }
    }
    pageInfo { endCursor hasNextPage }
  }
}
"""

ORACLE_LIVE_MOUNTS_QUERY = """
query OracleLiveMountsQuery($first: Int, $after: String, $filters: [OracleLiveMountFilterInput!]) {
  oracleLiveMounts(first: $first, after: $after, filters: $filters) {
    edges {
      node {
        id
        status
        creationDate
        targetOracleHost { name }
        sourceDatabase { id name }
        cluster { id name }
      }
    }
    pageInfo { endCursor hasNextPage }
  }
}
"""

MANAGED_VOLUME_LIVE_MOUNTS_QUERY = """
query ManagedVolumeLiveMountsQuery($first: Int, $after: String, $filter: [Filter!]) {
  managedVolumeLiveMounts(first: $first, after: $after, filter: $filter) {
    edges {
      node {
        id
        name
        isReady
        creationDate
        managedVolume { id name }
        cluster { id name }
      }
    }
    pageInfo { endCursor hasNextPage }
  }
}
"""

LIVE_MOUNTS = ObjectTypeSpec(
    name="live_mounts",
    display_name="Live Mounts",
    description="Active live mounts across vSphere, Hyper-V, Nutanix, MSSQL, Oracle and managed volumes.",
    queries=(
        QuerySpec(
            name="VSphereLiveMountsQuery",
            query=VSPHERE_LIVE_MOUNTS_QUERY,
            connection_path="vSphereLiveMounts",
            fields=live_mount_fields(
                "vSphere VM", "id", "newVm.name", "sourceVm.name", "sourceVm.id", "mountTimestamp", "vmStatus"
            ),
            page_size=200,
        ),
        QuerySpec(
            name="HypervLiveMountsQuery",
            query=HYPERV_LIVE_MOUNTS_QUERY,
            connection_path="hypervMounts",
            fields=live_mount_fields(
                "Hyper-V VM",
                "id",
                "name",
                "sourceSnapshot.snappableName",
                "sourceSnapshot.snappableId",
                "mountCreateDate",
                "mountedVmStatus",
            ),
            page_size=200,
        ),
        QuerySpec(
            name="NutanixLiveMountsQuery",
            query=NUTANIX_LIVE_MOUNTS_QUERY,
            connection_path="nutanixMounts",
            fields=live_mount_fields(
                "Nutanix VM", "id", "mountedVmName", "sourceVmName", "sourceVmId", "mountedDate", "status"
            ),
            page_size=200,
        ),
        QuerySpec(
            name="MssqlLiveMountsQuery",
            query=MSSQL_LIVE_MOUNTS_QUERY,
            connection_path="mssqlDatabaseLiveMounts",
            fields=live_mount_fields(
                "MSSQL Database",
                "fid",
                "mountedDatabaseName",
                "sourceDatabase.name",
                "sourceDatabase.id",
                "creationDate",
                "isReady",
            ),
            page_size=200,
        ),
        QuerySpec(
            name="OracleLiveMountsQuery",
            query=ORACLE_LIVE_MOUNTS_QUERY,
            connection_path="oracleLiveMounts",
            fields=live_mount_fields(
                "Oracle Database",
                "id",
                "targetOracleHost.name",
                "sourceDatabase.name",
                "sourceDatabase.id",
                "creationDate",
                "status",
            ),
            page_size=200,
        ),
        QuerySpec(
            name="ManagedVolumeLiveMountsQuery",
            query=MANAGED_VOLUME_LIVE_MOUNTS_QUERY,
            connection_path="managedVolumeLiveMounts",
            fields=live_mount_fields(
                "Managed Volume",
                "id",
                "name",
                "managedVolume.name",
                "managedVolume.id",
                "creationDate",
                "isReady",
            ),
            page_size=200,
        ),
    ),
)

SPECS = (VSPHERE_VMS, HYPERV_VMS, NUTANIX_VMS, LIVE_MOUNTS)
