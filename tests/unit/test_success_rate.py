"""Tests for backup windows and success-rate aggregation."""

from datetime import datetime, timedelta, timezone
from unittest.mock import MagicMock

import pytest

from rsc_reports.collectors.base import CollectorError
from rsc_reports.data.cache import InventoryCache
from rsc_reports.data.models import BackupWindow, SummaryGroup
from rsc_reports.insights.success_rate import (
    BackupSuccessRateCollector,
    calculate_backup_success_rate,
    evaluate_object,
    find_snapshot_in_window,
    generate_backup_windows,
    generate_month_windows,
)

UTC = timezone.utc
NOW = datetime(2024, 3, 15, 12, 0, tzinfo=UTC)


def at(day, hour=0, minute=0, month=3):
    return datetime(2024, month, day, hour, minute, tzinfo=UTC)


class TestBackupWindows:
    def test_seven_windows_ending_at_hour(self):
        windows = generate_backup_windows(7, 10, now=NOW)

        assert len(windows) == 7
        for w in windows:
            assert w.end - w.start == timedelta(hours=24)
            assert w.end.hour == 10 and w.end.minute == 0
        assert windows[-1].end == at(15, 10)
        assert windows[0].start == at(8, 10)
        for older, newer in zip(windows, windows[1:]):
            assert older.end == newer.start

    def test_end_hour_later_than_now(self):
        windows = generate_backup_windows(1, 14, now=NOW)
        assert windows[0].end == at(14, 14)

    def test_end_hour_equal_to_now(self):
        windows = generate_backup_windows(1, 12, now=NOW)
        assert windows[0].end == NOW

    def test_skip_days(self):
        windows = generate_backup_windows(3, 10, skip_days=2, now=NOW)
        assert windows[-1].end == at(13, 10)
        assert windows[0].start == at(10, 10)

    def test_window_labelled_by_start_day(self):
        windows = generate_backup_windows(2, 10, now=NOW)
        assert [w.day.isoformat() for w in windows] == ["2024-03-13", "2024-03-14"]

    def test_half_open_membership(self):
        w = BackupWindow(start=at(14, 10), end=at(15, 10))
        assert w.contains(at(14, 10))
        assert w.contains(at(15, 9, 59))
        assert not w.contains(at(15, 10))
        assert not w.contains(at(14, 9, 59))

    @pytest.mark.parametrize("days,hour,skip", [(0, 10, 0), (7, 24, 0), (7, -1, 0), (7, 10, -1)])
    def test_invalid_arguments(self, days, hour, skip):
        with pytest.raises(ValueError):
            generate_backup_windows(days, hour, skip, now=NOW)


class TestMonthWindows:
    def test_complete_month(self):
        windows = generate_month_windows(2024, 2, 0, now=NOW)
        assert len(windows) == 29
        assert windows[0].start == at(1, 0, month=2)
        assert windows[-1].end == at(1, 0, month=3)

    def test_current_month_drops_open_windows(self):
        windows = generate_month_windows(2024, 3, 10, now=NOW)
        assert len(windows) == 14
        assert windows[-1].end == at(15, 10)

    def test_future_month(self):
        assert generate_month_windows(2024, 4, 0, now=NOW) == []


class TestFindSnapshot:
    def test_latest_in_window(self):
        w = BackupWindow(start=at(14, 10), end=at(15, 10))
        times = [at(14, 9), at(14, 11), at(15, 8), at(15, 10)]
        assert find_snapshot_in_window(times, w) == at(15, 8)

    def test_mixed_inputs(self):
        w = BackupWindow(start=at(14, 10), end=at(15, 10))
        times = ["2024-03-14T12:00:00Z", None, int(at(14, 11).timestamp() * 1000)]
        assert find_snapshot_in_window(times, w) == at(14, 12)

    def test_none_in_window(self):
        w = BackupWindow(start=at(14, 10), end=at(15, 10))
        assert find_snapshot_in_window([at(13, 10)], w) is None
        assert find_snapshot_in_window([], w) is None


def _record(object_id, name, object_type="VmwareVirtualMachine", cluster="cluster-a",
            sla="Gold", sla_id="sla-gold", fid=None):
    return {
        "object": name,
        "object_id": object_id,
        "object_fid": fid,
        "object_type": object_type,
        "cluster": cluster,
        "sla_domain": sla,
        "sla_domain_id": sla_id,
    }


class TestCalculation:
    @pytest.fixture
    def windows(self):
        return generate_backup_windows(3, 10, now=NOW)  # 12th-13th, 13th-14th, 14th-15th

    def test_evaluate_object(self, windows):
        result = evaluate_object(_record("vm-1", "web-01"), [at(12, 22), at(14, 23)], windows)
        assert [d.backup_found for d in result.days] == [True, False, True]
        assert result.days_with_backup == 2
        assert result.success_display == "66.67%"
        assert result.missed_days == [windows[1].day]

    def test_report(self, windows):
        objects = [
            _record("vm-1", "web-01"),
            _record("vm-2", "db-01", cluster="cluster-b"),
            _record("db-1", "sales", object_type="Mssql", sla="Silver", sla_id="sla-silver", fid="fid-db-1"),
            _record("vm-3", "scratch", sla="Unprotected", sla_id="UNPROTECTED"),
            _record("vm-4", "legacy", sla="Do Not Protect", sla_id="DO_NOT_PROTECT"),
            _record("vm-5", "orphan", sla=None, sla_id=None),
        ]
        snapshots = {
            "vm-1": [at(12, 12), at(13, 12), at(14, 12)],
            "vm-2": [at(13, 12)],
            "fid-db-1": [at(12, 11), at(14, 11)],
            "vm-3": [at(13, 12)],
        }
        sla_domains = [
            {"sla_domain_id": "sla-gold", "frequency": "4 Hours"},
            {"sla_domain_id": "sla-silver", "frequency": "1 Day"},
        ]

        report = calculate_backup_success_rate(objects, snapshots, windows, sla_domains, now=NOW)

        assert [r.name for r in report.objects] == ["web-01", "db-01", "sales"]
        assert report.objects[0].sla_frequency == "4 Hours"
        assert report.objects[2].object_id == "fid-db-1"
        assert report.objects[2].sla_frequency == "1 Day"

        assert report.overall.objects == 3
        assert report.overall.expected == 9
        assert report.overall.observed == 6
        assert report.overall.success_display == "66.67%"
        assert report.generated_at == NOW

        by_type = {s.key: (s.expected, s.observed) for s in report.by_object_type}
        assert by_type == {"Mssql": (3, 2), "VmwareVirtualMachine": (6, 4)}
        by_cluster = {s.key: s.success_display for s in report.summaries(SummaryGroup.CLUSTER)}
        assert by_cluster == {"cluster-a": "83.33%", "cluster-b": "33.33%"}
        by_day = [(s.key, s.observed, s.expected) for s in report.by_day]
        assert by_day == [("2024-03-12", 2, 3), ("2024-03-13", 2, 3), ("2024-03-14", 2, 3)]
        assert report.summaries(SummaryGroup.OVERALL) == [report.overall]

    def test_full_success_displays_100(self, windows):
        report = calculate_backup_success_rate(
            [_record("vm-1", "web-01")], {"vm-1": [at(12, 12), at(13, 12), at(14, 12)]}, windows
        )
        assert report.overall.success_display == "100%"
        assert report.objects[0].to_record()["success_rate"] == "100%"

    def test_relics_are_not_scored(self, windows):
        relic = dict(_record("vm-9", "retired", sla_id="sla-1"), is_relic=True)
        report = calculate_backup_success_rate([relic, _record("vm-1", "web-01")], {"vm-1": [at(13, 12)]}, windows)
        assert [r.name for r in report.objects] == ["web-01"]
        assert report.overall.objects == 1
        assert report.overall.observed == 1

    def test_empty_inventory(self, windows):
        report = calculate_backup_success_rate([], {}, windows)
        assert report.overall.success_display == "N/A"
        assert report.objects == []

    def test_to_record_has_day_columns(self, windows):
        report = calculate_backup_success_rate([_record("vm-1", "web-01")], {"vm-1": [at(13, 12)]}, windows)
        record = report.objects[0].to_record()
        assert record["backup_2024-03-12"] is False
        assert record["backup_2024-03-13"] is True
        assert record["days_expected"] == 3


class TestBackupSuccessRateCollector:
    def _client(self):
        client = MagicMock()
        client.connection.is_connected.return_value = True
        return client

    def test_run_uses_cache_and_fetches_snapshots(self, monkeypatch):
        import rsc_reports.insights.success_rate as mod

        objects = [_record("vm-1", "web-01", fid="fid-1"), _record("vm-2", "scratch", sla_id="UNPROTECTED")]
        cache = InventoryCache()
        cache.refresh("sla_domains", lambda: [{"sla_domain_id": "sla-gold", "frequency": "1 Day"}])
        cache.refresh("objects", lambda: objects)

        fetch = MagicMock(return_value=[at(14, 12)])
        monkeypatch.setattr(mod, "fetch_snapshot_times", fetch)

        collector = BackupSuccessRateCollector(
            self._client(), cache, days_to_report=2, backup_window_end_hour=10, now=NOW
        )
        report = collector.run()

        fetch.assert_called_once()
        args = fetch.call_args.args
        assert args[1] == "fid-1"
        assert args[2] == at(13, 10)
        assert args[3] == at(15, 10)
        assert [d.backup_found for d in report.objects[0].days] == [False, True]
        assert report.objects[0].sla_frequency == "1 Day"

    def test_invalid_month(self):
        collector = BackupSuccessRateCollector(self._client(), month="2024-13", now=NOW)
        with pytest.raises(CollectorError):
            collector.windows()

    def test_month_mode(self):
        collector = BackupSuccessRateCollector(self._client(), month="2024-02", now=NOW)
        assert len(collector.windows()) == 29

    def test_no_complete_windows(self):
        collector = BackupSuccessRateCollector(self._client(), month="2024-04", now=NOW)
        with pytest.raises(CollectorError):
            collector.run()
