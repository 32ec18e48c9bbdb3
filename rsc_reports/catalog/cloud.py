"""Cloud-native workloads (AWS, Azure, GCP) and Microsoft 365 organizations."""

from ..data.mapping import Field, bool_field, constant_field, hours_since_field, url_field, utc_field
from ..data.models import ObjectTypeSpec, QuerySpec
from .common import sla_fields


def cloud_vm_fields(cloud, object_type, *, native_id, region, account, instance_type):
    """Common record shape for a cloud VM, whatever the provider."""
    return (
        (
            constant_field("cloud", cloud),
            Field("vm", "name"),
            Field("vm_id", "id"),
            Field("native_id", native_id),
            Field("region", region),
            Field("account", account),
            Field("instance_type", instance_type),
            bool_field("is_relic", "isRelic"),
        )
        + sla_fields()
        + (
            utc_field("last_snapshot_utc", "newestSnapshot.date"),
            hours_since_field("hours_since_last_snapshot", "newestSnapshot.date"),
            url_field("url", object_type=object_type),
        )
    )


AWS_EC2_QUERY = """
query AwsEc2InstancesQuery($first: Int, $after: String, $filter: [Filter!]) {
  awsNativeEc2Instances(first: $first, after: $after, filter: $filter) {
    edges {
      node {
        id
        name: instanceName
        instanceNativeId
        instanceType
        region
        isRelic
        awsAccount { id name }
        effectiveSlaDomain { id name }
        slaAssignment
        newestSnapshot { id date }
      }
    }
    pageInfo { endCursor hasNextPage }
  }
}
"""

AZURE_VMS_QUERY = """
query AzureVMsQuery($first: Int, $after: String, $filter: [Filter!]) {
  azureNativeVirtualMachines(first: $first, after: $after, filter: $filter) {
    edges {
      node {
        id
        name
        nativeName
        vmSize: sizeType
        region
        isRelic
        subscription { id name }
        effectiveSlaDomain { id name }
        slaAssignment
        newestSnapshot { id date }
      }
    }
    pageInfo { endCursor hasNextPage }
  }
}
"""

GCP_INSTANCES_QUERY = """
query GcpInstancesQuery($first: Int, $after: String, $filter: [Filter!]) {
  gcpNativeGceInstances(first: $first, after: $after, filter: $filter) {
    edges {
      node {
        id
        name: nativeName
        nativeId
        machineType
        region
        isRelic
        gcpNativeProject { id name }
        effectiveSlaDomain { id name }
        slaAssignment
        newestSnapshot { id date }
      }
    }
    pageInfo { endCursor hasNextPage }
  }
}
"""

AWS_EC2_QUERY_SPEC = QuerySpec(
    name="AwsEc2InstancesQuery",
    query=AWS_EC2_QUERY,
    connection_path="awsNativeEc2Instances",
    fields=cloud_vm_fields(
        "AWS",
        "AwsNativeEc2Instance",
        native_id="instanceNativeId",
        region="region",
        account="awsAccount.name",
        instance_type="instanceType",
    ),
    page_size=500,
)

AZURE_VMS_QUERY_SPEC = QuerySpec(
    name="AzureVMsQuery",
    query=AZURE_VMS_QUERY,
    connection_path="azureNativeVirtualMachines",
    fields=cloud_vm_fields(
        "Azure",
        "AzureNativeVm",
        native_id="nativeName",
        region="region",
        account="subscription.name",
        instance_type="vmSize",
    ),
    page_size=500,
)

GCP_INSTANCES_QUERY_SPEC = QuerySpec(
    name="GcpInstancesQuery",
    query=GCP_INSTANCES_QUERY,
    connection_path="gcpNativeGceInstances",
    fields=cloud_vm_fields(
        "GCP",
        "GcpNativeGCEInstance",
        native_id="nativeId",
        region="region",
        account="gcpNativeProject.name",
        instance_type="machineType",
    ),
    page_size=500,
)

AWS_EC2_INSTANCES = ObjectTypeSpec(
    name="aws_ec2_instances",
    display_name="AWS EC2 Instances",
    queries=(AWS_EC2_QUERY_SPEC,),
)

AZURE_VMS = ObjectTypeSpec(
    name="azure_vms",
    display_name="Azure VMs",
    queries=(AZURE_VMS_QUERY_SPEC,),
)

GCP_INSTANCES = ObjectTypeSpec(
    name="gcp_instances",
    display_name="GCP GCE Instances",
    queries=(GCP_INSTANCES_QUERY_SPEC,),
)

CLOUD_VMS = ObjectTypeSpec(
    name="cloud_vms",
    display_name="Cloud VMs",
    description="AWS, Azure and GCP virtual machines in one table.",
    queries=(AWS_EC2_QUERY_SPEC, AZURE_VMS_QUERY_SPEC, GCP_INSTANCES_QUERY_SPEC),
)

# =============================================================================
# Microsoft 365
# =============================================================================

M365_ORGS_QUERY = """
query O365OrgsQuery($first: Int, $after: String, $filter: [Filter!]) {
  o365Orgs(first: $first, after: $after, filter: $filter) {
    edges {
      node {
        id
        name
        status
        pastDueStatus
        exocomputeId
        effectiveSlaDomain { id name }
        slaAssignment
        unprotectedUsersCount
        protectedMailboxesCount
        protectedOnedrivesCount
        protectedSharepointSitesCount
        protectedTeamsCount
      }
    }
    pageInfo { endCursor hasNextPage }
  }
}
"""

M365_ORGS = ObjectTypeSpec(
    name="m365_orgs",
    display_name="Microsoft 365 Organizations",
    queries=(
        QuerySpec(
            name="O365OrgsQuery",
            query=M365_ORGS_QUERY,
            connection_path="o365Orgs",
            fields=(
                Field("organization", "name"),
                Field("organization_id", "id"),
                Field("status", "status"),
                Field("past_due_status", "pastDueStatus"),
                Field("unprotected_users", "unprotectedUsersCount", default=0),
                Field("protected_mailboxes", "protectedMailboxesCount", default=0),
                Field("protected_onedrives", "protectedOnedrivesCount", default=0),
                Field("protected_sharepoint_sites", "protectedSharepointSitesCount", default=0),
                Field("protected_teams", "protectedTeamsCount", default=0),
            )
            + sla_fields()
            + (url_field("url", object_type="O365Org"),),
            page_size=100,
        ),
    ),
)

SPECS = (AWS_EC2_INSTANCES, AZURE_VMS, GCP_INSTANCES, CLOUD_VMS, M365_ORGS)
