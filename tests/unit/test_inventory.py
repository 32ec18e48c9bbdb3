"""Tests for the catalog and the paginate-and-flatten collector."""

from datetime import datetime, timedelta, timezone

import pytest

from rsc_reports.catalog import CATALOG, get_spec, list_specs
from rsc_reports.catalog.core import OBJECTS
from rsc_reports.collectors.base import CollectorError, SchemaError
from rsc_reports.collectors.inventory import GraphQLCollector
from rsc_reports.collectors.snapshots import fetch_snapshot_times, time_range

NOW = datetime(2024, 3, 15, 12, 0, tzinfo=timezone.utc)


class TestCatalog:
    def test_expected_types_registered(self):
        for name in (
            "objects",
            "sla_domains",
            "clusters",
            "events",
            "protected_objects",
            "vsphere_vms",
            "hyperv_vms",
            "nutanix_vms",
            "live_mounts",
            "mssql_databases",
            "oracle_databases",
            "managed_volumes",
            "physical_hosts",
            "filesets",
            "nas_shares",
            "aws_ec2_instances",
            "azure_vms",
            "gcp_instances",
            "cloud_vms",
            "m365_orgs",
            "object_snapshots",
        ):
            assert name in CATALOG

    def test_get_spec_normalizes_name(self):
        assert get_spec("Vsphere-VMs") is CATALOG["vsphere_vms"]

    def test_get_spec_unknown(self):
        with pytest.raises(KeyError):
            get_spec("floppy_disks")

    def test_list_specs_sorted(self):
        names = [s.name for s in list_specs()]
        assert names == sorted(names)

    @pytest.mark.parametrize("name", sorted(CATALOG))
    def test_merged_queries_share_record_shape(self, name):
        spec = CATALOG[name]
        shapes = {tuple(f.name for f in q.fields) for q in spec.queries}
        assert len(shapes) == 1

    @pytest.mark.parametrize("name", sorted(CATALOG))
    def test_queries_accept_cursor(self, name):
        for query in CATALOG[name].queries:
            assert "$after" in query.query
            assert "pageInfo" in query.query
            assert query.name in query.query

    def test_live_mounts_has_six_sources(self):
        assert len(CATALOG["live_mounts"].queries) == 6

    def test_cloud_vms_merges_three_clouds(self):
        assert len(CATALOG["cloud_vms"].queries) == 3


class TestGraphQLCollector:
    def test_objects_two_pages(self, client, session, make_response, edges_page, sample_object_nodes):
        session.post.side_effect = [
            make_response(edges_page("snappableConnection", sample_object_nodes[:3], "cursor-1", True)),
            make_response(edges_page("snappableConnection", sample_object_nodes[3:], "cursor-2", False)),
        ]
        collector = GraphQLCollector(client, OBJECTS, page_size=3, now=NOW)

        records = collector.collect()

        assert session.post.call_count == 2
        assert len(records) == 4
        assert [r["object"] for r in records] == ["web-01", "db-01", "sales", "home"]
        assert list(records[0]) == OBJECTS.field_names
        assert records[0]["hours_since_last_snapshot"] == 1.0
        assert records[0]["last_snapshot_utc"] == NOW - timedelta(hours=1)
        assert records[0]["logical_gb"] == 1.0
        assert records[0]["local_storage_gb"] == 2.5
        assert records[0]["in_compliance"] is True
        assert records[0]["protection"] == "Protected"
        assert records[0]["url"] == (
            "https://example.my.rubrik.com/inventory_hierarchy/vsphere/vm/fid-vm-1/overview"
        )
        assert records[2]["protection"] == "Unprotected"
        assert records[2]["hours_since_last_snapshot"] is None
        assert records[3]["protection"] == "DoNotProtect"
        assert records[3]["cluster"] is None

        second = session.post.call_args_list[1].kwargs["json"]
        assert second["operationName"] == "ObjectListQuery"
        assert second["variables"]["after"] == "cursor-1"
        assert second["variables"]["first"] == 3

    def test_multi_query_spec_concatenates_in_order(self, client, session, make_response, edges_page):
        session.post.side_effect = [
            make_response(edges_page("physicalHosts", [{"id": "w1", "name": "win-01"}])),
            make_response(edges_page("physicalHosts", [{"id": "l1", "name": "lin-01"}])),
        ]
        records = GraphQLCollector(client, get_spec("physical_hosts"), now=NOW).collect()

        assert [(r["host"], r["os_family"]) for r in records] == [("win-01", "Windows"), ("lin-01", "Linux")]
        roots = [c.kwargs["json"]["variables"]["hostRoot"] for c in session.post.call_args_list]
        assert roots == ["WINDOWS_HOST_ROOT", "LINUX_HOST_ROOT"]

    def test_caller_variables_override_query_defaults(self, client, session, make_response, edges_page):
        session.post.return_value = make_response(edges_page("slaDomains", []))
        GraphQLCollector(
            client, get_spec("sla_domains"), variables={"shouldShowProtectedObjectCount": False}
        ).collect()
        sent = session.post.call_args.kwargs["json"]["variables"]
        assert sent["shouldShowProtectedObjectCount"] is False

    def test_required_variable_missing(self, client, session):
        with pytest.raises(CollectorError):
            GraphQLCollector(client, get_spec("object_snapshots")).collect()
        session.post.assert_not_called()

    def test_failure_propagates(self, client, session, make_response):
        session.post.return_value = make_response({"errors": [{"message": "nope"}]})
        with pytest.raises(SchemaError):
            GraphQLCollector(client, OBJECTS).collect()

    def test_status(self, client):
        status = GraphQLCollector(client, OBJECTS).get_status()
        assert status == {"name": "objects", "display_name": "Protected Objects", "available": True}


class TestSnapshots:
    def test_time_range(self):
        rng = time_range(NOW - timedelta(days=1), NOW)
        assert rng == {"start": "2024-03-14T12:00:00.000Z", "end": "2024-03-15T12:00:00.000Z"}
        assert time_range(None, None) is None

    def test_fetch_snapshot_times(self, client, session, make_response, edges_page):
        start, end = NOW - timedelta(days=2), NOW
        session.post.return_value = make_response(
            edges_page(
                "snapshotOfASnappableConnection",
                [
                    {"id": "s3", "date": "2024-03-15T12:00:00Z"},
                    {"id": "s2", "date": "2024-03-14T09:00:00Z"},
                    {"id": "s1", "date": "2024-03-13T12:00:00Z"},
                    {"id": "s0", "date": None},
                ],
            )
        )

        times = fetch_snapshot_times(client, "fid-vm-1", start, end)

        # end bound is exclusive, start inclusive
        assert times == [
            datetime(2024, 3, 13, 12, 0, tzinfo=timezone.utc),
            datetime(2024, 3, 14, 9, 0, tzinfo=timezone.utc),
        ]
        sent = session.post.call_args.kwargs["json"]["variables"]
        assert sent["workloadId"] == "fid-vm-1"
        assert sent["timeRange"]["start"] == "2024-03-13T12:00:00.000Z"
