"""Tests for the inventory lookup cache."""

from datetime import timedelta
from unittest.mock import MagicMock

import pytest

from rsc_reports.data.cache import InventoryCache


class FakeClock:
    def __init__(self):
        self.t = 1000.0

    def __call__(self):
        return self.t


class TestInventoryCache:
    def test_loads_once(self):
        cache = InventoryCache()
        loader = MagicMock(return_value=[{"id": 1}])

        assert cache.get("objects", loader) == [{"id": 1}]
        assert cache.get("objects", loader) == [{"id": 1}]
        loader.assert_called_once()
        assert "objects" in cache
        assert len(cache) == 1

    def test_refresh_reloads(self):
        cache = InventoryCache()
        cache.get("objects", lambda: [1])
        assert cache.refresh("objects", lambda: [2]) == [2]
        assert cache.peek("objects") == [2]

    def test_failed_refresh_keeps_previous(self):
        cache = InventoryCache()
        cache.get("objects", lambda: [1])

        def boom():
            raise RuntimeError("fetch failed")

        with pytest.raises(RuntimeError):
            cache.refresh("objects", boom)
        assert cache.peek("objects") == [1]

    def test_failed_first_load_caches_nothing(self):
        cache = InventoryCache()
        with pytest.raises(RuntimeError):
            cache.get("objects", MagicMock(side_effect=RuntimeError("down")))
        assert "objects" not in cache

    def test_invalidate_one(self):
        cache = InventoryCache()
        cache.get("objects", lambda: [1])
        cache.get("sla_domains", lambda: [2])
        cache.invalidate("objects")
        assert cache.names() == ["sla_domains"]

    def test_invalidate_empty_name_keeps_others(self):
        cache = InventoryCache()
        cache.get("objects", lambda: [1])
        cache.invalidate("")
        assert cache.names() == ["objects"]

    def test_invalidate_all(self):
        cache = InventoryCache()
        cache.get("objects", lambda: [1])
        cache.get("sla_domains", lambda: [2])
        cache.invalidate()
        assert len(cache) == 0
        assert cache.peek("objects") is None

    def test_max_age(self):
        clock = FakeClock()
        cache = InventoryCache(max_age=timedelta(minutes=5), clock=clock)
        loader = MagicMock(side_effect=[[1], [2]])

        assert cache.get("objects", loader) == [1]
        clock.t += 299
        assert cache.get("objects", loader) == [1]
        assert cache.age("objects") == 299
        clock.t += 2
        assert cache.peek("objects") is None
        assert cache.get("objects", loader) == [2]
        assert loader.call_count == 2

    def test_age_absent(self):
        assert InventoryCache().age("objects") is None
