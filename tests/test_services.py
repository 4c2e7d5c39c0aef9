"""
Tests for the backend factories and per-session stores.
"""

from __future__ import annotations

from pathlib import Path
from types import SimpleNamespace
from typing import Iterator

import pytest
from pyspark.sql.types import StringType, StructField, StructType

from quickpay_dashboard import stores
from quickpay_dashboard.config import Settings
from quickpay_dashboard.services import (
    get_attachment_storage,
    get_auth_provider,
    get_remote_tables,
    remote_spark,
)
from quickpay_dashboard.services.auth import DemoAuthProvider
from quickpay_dashboard.services.remote_demo import DemoTables
from quickpay_dashboard.services.remote_spark import SparkTables
from quickpay_dashboard.services.storage import LocalAttachmentStorage


class TestFactories:
    """Tests for the service registries"""

    def test_demo_kind(self, tmp_path: Path) -> None:
        settings = Settings(cache_dir=str(tmp_path))
        assert isinstance(get_remote_tables(settings), DemoTables)
        assert isinstance(get_auth_provider(settings), DemoAuthProvider)
        storage = get_attachment_storage(settings)
        assert isinstance(storage, LocalAttachmentStorage)
        assert storage.root == tmp_path / "attachments"

    def test_explicit_kind_overrides_settings(self) -> None:
        settings = Settings(backend="live")
        assert isinstance(get_remote_tables(settings, "DEMO"), DemoTables)

    def test_unknown_kind(self) -> None:
        with pytest.raises(ValueError, match="Unknown remote tables kind: sqlite"):
            get_remote_tables(Settings(), "sqlite")
        with pytest.raises(ValueError, match="Unknown auth provider kind"):
            get_auth_provider(Settings(), "ldap")


def _clear_factories() -> None:
    stores._auth_provider.cache_clear()
    stores._remote_tables.cache_clear()
    stores._preference_cache.cache_clear()
    stores.clear_invoice_stores()


@pytest.fixture
def session_settings(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Iterator[Settings]:
    """Demo settings with preferences under tmp_path, factories reset around the test."""
    settings = Settings(cache_dir=str(tmp_path))
    monkeypatch.setattr(stores, "get_settings", lambda: settings)
    _clear_factories()
    yield settings
    _clear_factories()


class TestSessionStores:
    """Tests for get_invoice_store keyed by browser session"""

    def test_one_store_per_session(self, session_settings: Settings) -> None:
        first = stores.get_invoice_store("session-a")
        assert stores.get_invoice_store("session-a") is first
        second = stores.get_invoice_store("session-b")
        assert second is not first
        assert second._remote is first._remote

    @pytest.mark.asyncio
    async def test_sessions_do_not_share_ui_state(self, session_settings: Settings) -> None:
        first = stores.get_invoice_store("session-a")
        second = stores.get_invoice_store("session-b")
        await first.fetch_invoices()
        first.set_filter_status("paid")
        first.set_search_query("alex")
        first.open_modal(first.get_state().invoices[0])

        state = second.get_state()
        assert state.filter_status == "all"
        assert state.search_query == ""
        assert state.selected_invoice is None
        assert state.is_modal_open is False

    def test_preferences_are_namespaced_per_session(self, session_settings: Settings) -> None:
        stores.get_invoice_store("session-a").set_search_query("lee")
        stores.clear_invoice_stores()
        assert stores.get_invoice_store("session-a").get_state().search_query == "lee"
        assert stores.get_invoice_store("session-b").get_state().search_query == ""

    def test_least_recently_used_session_is_evicted(
        self, session_settings: Settings, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        monkeypatch.setattr(stores, "MAX_SESSION_STORES", 2)
        first = stores.get_invoice_store("session-a")
        second = stores.get_invoice_store("session-b")
        assert stores.get_invoice_store("session-a") is first
        stores.get_invoice_store("session-c")
        assert stores.get_invoice_store("session-a") is first
        assert stores.get_invoice_store("session-b") is not second


class _RecordingReader:
    def __init__(self) -> None:
        self.tables: list[str] = []

    def table(self, name: str) -> SimpleNamespace:
        self.tables.append(name)
        return SimpleNamespace(schema=StructType([StructField("id", StringType())]))


class TestSparkSchemaCache:
    """Tests for SparkTables table schema lookups"""

    def test_schema_read_once_per_instance(self, monkeypatch: pytest.MonkeyPatch) -> None:
        reader = _RecordingReader()
        monkeypatch.setattr(remote_spark.clients, "spark", lambda: SimpleNamespace(read=reader))

        tables = SparkTables("main.quickpay")
        assert tables._schema("invoices").fieldNames() == ["id"]
        tables._schema("invoices")
        assert reader.tables == ["main.quickpay.`invoices`"]

        SparkTables("main.archive")._schema("invoices")
        assert reader.tables == ["main.quickpay.`invoices`", "main.archive.`invoices`"]
