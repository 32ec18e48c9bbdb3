"""Tests for value normalization."""

from datetime import datetime, timedelta, timezone

import pytest

from rsc_reports.data.normalization import (
    build_object_url,
    bytes_to_gb,
    bytes_to_tb,
    days_since,
    duration_to_hours,
    format_duration,
    format_percent,
    get_path,
    has_value,
    hours_since,
    is_unprotected_sla,
    percent,
    protection_label,
    to_utc,
)

NOW = datetime(2024, 3, 15, 12, 0, tzinfo=timezone.utc)


class TestGetPath:
    def test_nested_dicts(self):
        assert get_path({"a": {"b": {"c": 1}}}, "a.b.c") == 1

    def test_list_index(self):
        assert get_path({"a": [{"b": 1}, {"b": 2}]}, "a.1.b") == 2

    def test_missing_steps_return_default(self):
        assert get_path({"a": None}, "a.b.c") is None
        assert get_path({"a": []}, "a.0.b", default="x") == "x"
        assert get_path({"a": "text"}, "a.b") is None
        assert get_path(None, "a") is None

    def test_empty_path_returns_object(self):
        assert get_path({"a": 1}, "") == {"a": 1}


class TestTimestamps:
    def test_epoch_ms(self):
        assert to_utc(1710504000000) == NOW

    def test_epoch_ms_string(self):
        assert to_utc("1710504000000") == NOW

    def test_iso_with_z(self):
        assert to_utc("2024-03-15T12:00:00Z") == NOW
        assert to_utc("2024-03-15T12:00:00.000Z") == NOW

    def test_iso_with_offset(self):
        assert to_utc("2024-03-15T14:00:00+02:00") == NOW

    def test_naive_datetime_is_utc(self):
        assert to_utc(datetime(2024, 3, 15, 12, 0)) == NOW

    def test_blank_values(self):
        assert to_utc(None) is None
        assert to_utc("") is None
        assert to_utc("   ") is None
        assert to_utc("not a date") is None
        assert to_utc(True) is None

    def test_out_of_range_epochs(self):
        assert to_utc("inf") is None
        assert to_utc(float("nan")) is None
        assert to_utc(10 ** 20) is None
        assert hours_since("-inf", NOW) is None

    def test_hours_since(self):
        assert hours_since(NOW - timedelta(hours=1), NOW) == 1.0
        assert hours_since(int(NOW.timestamp() * 1000) - 5400000, NOW) == 1.5
        assert hours_since(None, NOW) is None

    def test_days_since(self):
        assert days_since(NOW - timedelta(days=3, hours=12), NOW) == 3.5
        assert days_since("", NOW) is None


class TestStorage:
    def test_decimal_gigabytes(self):
        assert bytes_to_gb(1000000000) == 1.0
        assert bytes_to_gb(1073741824) == 1.07
        assert bytes_to_gb("2500000000") == 2.5

    def test_decimal_terabytes(self):
        assert bytes_to_tb(1000 ** 4) == 1.0
        assert bytes_to_tb(1230000000000) == 1.23

    def test_missing_values(self):
        assert bytes_to_gb(None) is None
        assert bytes_to_gb("n/a") is None
        assert bytes_to_gb(0) == 0.0


class TestPercent:
    def test_percent(self):
        assert percent(5, 6) == 83.33
        assert percent(6, 6) == 100.0

    def test_percent_zero_expected(self):
        assert percent(0, 0) is None

    def test_format_percent(self):
        assert format_percent(5, 6) == "83.33%"
        assert format_percent(1, 3) == "33.33%"
        assert format_percent(0, 7) == "0.00%"

    def test_format_percent_collapses_hundred(self):
        assert format_percent(7, 7) == "100%"
        assert format_percent(99999, 99999.5) == "100%"

    def test_format_percent_zero_expected(self):
        assert format_percent(0, 0) == "N/A"


class TestSLA:
    @pytest.mark.parametrize("value", [None, "", "UNPROTECTED", "DO_NOT_PROTECT", "unprotected"])
    def test_sentinels(self, value):
        assert is_unprotected_sla(value)

    def test_real_sla(self):
        assert not is_unprotected_sla("0b6c3c5e-1f0b-4d0e-9a4c-2f7e1f2b6f10")

    def test_protection_label(self):
        assert protection_label("DO_NOT_PROTECT") == "DoNotProtect"
        assert protection_label("UNPROTECTED") == "Unprotected"
        assert protection_label(None) == "Unprotected"
        assert protection_label("sla-gold") == "Protected"

    def test_has_value(self):
        assert has_value({"scriptPath": "/x"})
        assert has_value("x")
        assert has_value(0)
        assert not has_value(None)
        assert not has_value("")
        assert not has_value([])
        assert not has_value({})


class TestDurations:
    def test_format_duration(self):
        assert format_duration(4, "HOURS") == "4 Hours"
        assert format_duration(1, "DAYS") == "1 Day"
        assert format_duration(None, "DAYS") is None

    def test_duration_to_hours(self):
        assert duration_to_hours(2, "DAYS") == 48.0
        assert duration_to_hours(30, "MINUTES") == 0.5
        assert duration_to_hours(1, "FORTNIGHTS") is None


class TestObjectUrl:
    def test_known_type(self):
        url = build_object_url("https://x.my.rubrik.com/", "Cluster", "abc")
        assert url == "https://x.my.rubrik.com/clusters/abc/overview"

    def test_unknown_type_or_id(self):
        assert build_object_url("https://x.my.rubrik.com", "Mystery", "abc") is None
        assert build_object_url("https://x.my.rubrik.com", "Cluster", None) is None
        assert build_object_url(None, "Cluster", "abc") is None
