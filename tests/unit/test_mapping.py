"""Tests for declarative node → record mapping."""

from datetime import datetime, timedelta, timezone

from rsc_reports.data.mapping import (
    Field,
    MappingContext,
    bool_field,
    constant_field,
    count_field,
    flag_field,
    flatten,
    flatten_all,
    gb_field,
    hours_since_field,
    joined_field,
    protection_field,
    url_field,
    utc_field,
)

NOW = datetime(2024, 3, 15, 12, 0, tzinfo=timezone.utc)
CTX = MappingContext(now=NOW, console_url="https://x.my.rubrik.com")

FIELDS = (
    Field("name", "name"),
    Field("cluster", "cluster.name"),
    Field("first_target", "targets.0.name"),
    utc_field("last_snapshot_utc", "newestSnapshot.date"),
    hours_since_field("hours_since_last_snapshot", "newestSnapshot.date"),
    gb_field("used_gb", "usedBytes"),
    flag_field("has_script", "preBackupScript"),
    bool_field("is_relic", "isRelic"),
    count_field("disk_count", "disks"),
    joined_field("targets", "targets", key="name"),
    protection_field("protection", "sla.id"),
    constant_field("os_family", "Linux"),
    url_field("url", object_type="Cluster"),
)


class TestFlatten:
    def test_full_node(self):
        node = {
            "id": "c-1",
            "name": "alpha",
            "cluster": {"name": "cluster-a"},
            "targets": [{"name": "s3"}, {"name": "azure"}],
            "newestSnapshot": {"date": "2024-03-15T10:00:00Z"},
            "usedBytes": 1000000000,
            "preBackupScript": {"scriptPath": "/opt/pre.sh"},
            "isRelic": True,
            "disks": [{}, {}, {}],
            "sla": {"id": "sla-gold"},
        }
        record = flatten(node, FIELDS, CTX)

        assert record == {
            "name": "alpha",
            "cluster": "cluster-a",
            "first_target": "s3",
            "last_snapshot_utc": NOW - timedelta(hours=2),
            "hours_since_last_snapshot": 2.0,
            "used_gb": 1.0,
            "has_script": True,
            "is_relic": True,
            "disk_count": 3,
            "targets": "s3, azure",
            "protection": "Protected",
            "os_family": "Linux",
            "url": "https://x.my.rubrik.com/clusters/c-1/overview",
        }

    def test_missing_nested_paths_are_none(self):
        record = flatten({"name": "bare", "cluster": None, "targets": []}, FIELDS, CTX)

        assert record["cluster"] is None
        assert record["first_target"] is None
        assert record["last_snapshot_utc"] is None
        assert record["hours_since_last_snapshot"] is None
        assert record["used_gb"] is None
        assert record["has_script"] is False
        assert record["is_relic"] is False
        assert record["disk_count"] is None
        assert record["targets"] == ""
        assert record["protection"] == "Unprotected"
        assert record["url"] is None

    def test_keys_in_declaration_order(self):
        record = flatten({}, FIELDS, CTX)
        assert list(record) == [f.name for f in FIELDS]

    def test_none_node(self):
        assert flatten(None, (Field("a", "a"),), CTX) == {"a": None}

    def test_default_replaces_none(self):
        fields = (Field("count", "conn.count", default=0),)
        assert flatten({}, fields, CTX) == {"count": 0}
        assert flatten({"conn": {"count": 4}}, fields, CTX) == {"count": 4}

    def test_convert_skipped_for_missing(self):
        fields = (Field("n", "n", convert=int),)
        assert flatten({}, fields, CTX) == {"n": None}
        assert flatten({"n": "7"}, fields, CTX) == {"n": 7}

    def test_idempotent(self):
        node = {"name": "alpha", "newestSnapshot": {"date": 1710496800000}, "sla": {"id": "UNPROTECTED"}}
        assert flatten(node, FIELDS, CTX) == flatten(node, FIELDS, CTX)

    def test_does_not_mutate_node(self):
        node = {"name": "alpha", "cluster": {"name": "a"}}
        snapshot = {"name": "alpha", "cluster": {"name": "a"}}
        flatten(node, FIELDS, CTX)
        assert node == snapshot

    def test_flatten_all(self):
        records = flatten_all([{"name": "a"}, {"name": "b"}], (Field("name", "name"),), CTX)
        assert records == [{"name": "a"}, {"name": "b"}]


class TestMappingContext:
    def test_create_normalizes_now(self):
        ctx = MappingContext.create(datetime(2024, 3, 15, 12, 0), "https://x")
        assert ctx.now == NOW
        assert ctx.console_url == "https://x"

    def test_create_defaults_to_current_time(self):
        ctx = MappingContext.create()
        assert ctx.now.tzinfo is not None
