"""
Tests for the disk cache and UI preference persistence.
"""

from __future__ import annotations

from pathlib import Path

from quickpay_dashboard.lib.caches import DiskCache, PreferenceCache


class TestDiskCache:
    """Tests for DiskCache"""

    def test_get_and_set(self, tmp_path: Path) -> None:
        cache = DiskCache(tmp_path)
        assert cache.get("k") is None
        cache.set("k", {"value": 1})
        assert cache.get("k") == {"value": 1}
        assert DiskCache(tmp_path).get("k") == {"value": 1}


class TestPreferenceCache:
    """Tests for PreferenceCache"""

    def test_only_allowed_keys_are_written(self, tmp_path: Path) -> None:
        preferences = PreferenceCache(DiskCache(tmp_path))
        preferences.save({"filter_status": "paid", "user_id": "1", "invoices": [1, 2]})
        preferences.save({"search_query": "lee"})
        assert preferences.load() == {"filter_status": "paid", "search_query": "lee"}

    def test_namespaces_are_independent(self, tmp_path: Path) -> None:
        cache = DiskCache(tmp_path)
        first = PreferenceCache(cache, namespace="ui-preferences:a")
        second = PreferenceCache(cache, namespace="ui-preferences:b")
        first.save({"filter_status": "overdue"})
        assert second.load() == {}
        assert first.load() == {"filter_status": "overdue"}

    def test_unexpected_stored_value_is_ignored(self, tmp_path: Path) -> None:
        cache = DiskCache(tmp_path)
        cache.set("ui-preferences", "not a dict")
        assert PreferenceCache(cache).load() == {}
