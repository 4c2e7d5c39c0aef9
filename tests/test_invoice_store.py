"""
Tests for the invoice store: reads with fixture fallback, mutations,
request ordering and UI state.
"""

from __future__ import annotations

import asyncio
from typing import Any

import pytest

from quickpay_dashboard.data.fixtures import FixtureSet
from quickpay_dashboard.lib.caches import DiskCache, PreferenceCache
from quickpay_dashboard.models.common import InvoiceStoreState
from quickpay_dashboard.models.invoice import invoice_from_row
from quickpay_dashboard.services.auth import DemoAuthProvider
from quickpay_dashboard.services.remote_demo import DemoTables
from quickpay_dashboard.stores.invoice_store import InvoiceStore
from quickpay_dashboard.validation import validate_invoice

from tests.conftest import FailingTables, RecordingTables, ScriptedTables, make_row


def _ids(state: InvoiceStoreState) -> list[str]:
    return [invoice.id for invoice in state.invoices]


class _CrashingDeleteTables(DemoTables):
    """Deletes fail with an error outside the RemoteError hierarchy."""

    async def delete(self, table: str, *, eq: Any) -> None:
        raise RuntimeError("driver crashed")


class TestFetchInvoices:
    """Tests for fetch_invoices"""

    @pytest.mark.asyncio
    async def test_remote_rows_newest_first(self, auth: DemoAuthProvider) -> None:
        fixtures = FixtureSet(
            invoices=[
                make_row("a", created_at="2024-01-01T00:00:00+00:00"),
                make_row("b", created_at="2024-03-01T00:00:00+00:00"),
                make_row("c", created_at="2024-02-01T00:00:00+00:00"),
            ]
        )
        store = InvoiceStore(DemoTables(fixtures), auth)
        await store.fetch_invoices()
        state = store.get_state()
        assert _ids(state) == ["b", "c", "a"]
        assert state.data_source == "remote"
        assert state.fallback_reason is None
        assert not state.is_loading

    @pytest.mark.asyncio
    async def test_failure_falls_back_to_fixtures(
        self, auth: DemoAuthProvider, fixture_set: FixtureSet
    ) -> None:
        store = InvoiceStore(FailingTables(), auth)
        await store.fetch_invoices()
        state = store.get_state()
        assert state.invoices == fixture_set.load_invoices()
        assert state.error is None
        assert state.data_source == "fallback"
        assert state.fallback_reason == "error"
        assert state.is_fallback

    @pytest.mark.asyncio
    async def test_empty_result_falls_back_to_fixtures(
        self, auth: DemoAuthProvider, fixture_set: FixtureSet
    ) -> None:
        store = InvoiceStore(DemoTables(empty=True), auth)
        await store.fetch_invoices()
        state = store.get_state()
        assert _ids(state) == ["inv-004", "inv-002", "inv-001", "inv-003", "inv-005", "inv-006"]
        assert state.invoices == fixture_set.load_invoices()
        assert state.fallback_reason == "empty"

    @pytest.mark.asyncio
    async def test_loading_flag_while_in_flight(self, auth: DemoAuthProvider) -> None:
        remote = ScriptedTables()
        gate = remote.queue([make_row("a")])
        store = InvoiceStore(remote, auth)
        seen: list[bool] = []
        store.subscribe(lambda state: seen.append(state.is_loading))

        task = asyncio.create_task(store.fetch_invoices())
        await asyncio.sleep(0)
        assert store.get_state().is_loading
        gate.set()
        await task
        assert seen[0] is True
        assert seen[-1] is False

    @pytest.mark.asyncio
    async def test_newest_request_wins(self, auth: DemoAuthProvider) -> None:
        remote = ScriptedTables()
        slow = remote.queue([make_row("old")])
        fast = remote.queue([make_row("new")])
        store = InvoiceStore(remote, auth)

        first = asyncio.create_task(store.fetch_invoices())
        await asyncio.sleep(0)
        second = asyncio.create_task(store.fetch_invoices())
        await asyncio.sleep(0)

        fast.set()
        await second
        assert _ids(store.get_state()) == ["new"]
        assert store.get_state().is_loading

        slow.set()
        await first
        assert _ids(store.get_state()) == ["new"]
        assert not store.get_state().is_loading


class TestFetchInvoiceById:
    """Tests for fetch_invoice_by_id"""

    @pytest.mark.asyncio
    async def test_loads_items_in_order(self, demo_tables: DemoTables, auth: DemoAuthProvider) -> None:
        store = InvoiceStore(demo_tables, auth)
        await store.fetch_invoice_by_id("inv-001")
        selected = store.get_state().selected_invoice
        assert selected is not None
        assert selected.invoice_number == "INV-2024-001"
        assert [item.description for item in selected.items] == [
            "Legal consultation",
            "Contract review",
        ]

    @pytest.mark.asyncio
    async def test_failure_uses_fixture_invoice(self, auth: DemoAuthProvider) -> None:
        store = InvoiceStore(FailingTables(), auth)
        await store.fetch_invoice_by_id("inv-004")
        selected = store.get_state().selected_invoice
        assert selected is not None
        assert selected.total == 1250
        assert len(selected.items) == 2
        assert store.get_state().error is None

    @pytest.mark.asyncio
    async def test_unknown_id_clears_selection(self, demo_tables: DemoTables, auth: DemoAuthProvider) -> None:
        store = InvoiceStore(demo_tables, auth)
        await store.fetch_invoice_by_id("inv-001")
        await store.fetch_invoice_by_id("missing")
        assert store.get_state().selected_invoice is None
        assert store.get_state().error is None

    @pytest.mark.asyncio
    async def test_unknown_id_closes_open_modal(self, auth: DemoAuthProvider) -> None:
        remote = RecordingTables(fail_on={("select", "invoices")})
        store = InvoiceStore(remote, auth)
        store.open_modal(invoice_from_row(make_row("remote-only-1")))

        await store.fetch_invoice_by_id("remote-only-1")

        state = store.get_state()
        assert state.selected_invoice is None
        assert state.is_modal_open is False
        assert state.is_loading is False

    @pytest.mark.asyncio
    async def test_find_invoice_leaves_state_untouched(
        self, demo_tables: DemoTables, auth: DemoAuthProvider
    ) -> None:
        store = InvoiceStore(demo_tables, auth)
        await store.fetch_invoices()
        store.open_modal(store.get_state().invoices[0])
        before = store.get_state()

        found = await store.find_invoice("inv-004")
        missing = await store.find_invoice("missing")

        assert found is not None and len(found.items) == 2
        assert missing is None
        assert store.get_state() is before


class TestCreateInvoice:
    """Tests for create_invoice"""

    @pytest.mark.asyncio
    async def test_creates_invoice_and_items(
        self, auth: DemoAuthProvider, valid_candidate: dict[str, Any]
    ) -> None:
        remote = RecordingTables()
        store = InvoiceStore(remote, auth)
        store.open_drawer()

        created = await store.create_invoice(validate_invoice(valid_candidate).unwrap())

        state = store.get_state()
        assert created
        assert not state.is_drawer_open
        assert state.error is None
        assert state.invoices[0].invoice_number == "INV-TEST-001"
        assert state.invoices[0].user_id == "1"
        assert len(state.invoices) == 7
        assert ("insert", "invoice_items") in remote.calls
        items = await remote.select("invoice_items", eq={"invoice_id": state.invoices[0].id})
        assert sorted(row["amount"] for row in items) == [400, 1000]

    @pytest.mark.asyncio
    async def test_requires_signed_in_user(
        self, signed_out_auth: DemoAuthProvider, valid_candidate: dict[str, Any]
    ) -> None:
        remote = RecordingTables()
        store = InvoiceStore(remote, signed_out_auth)
        store.open_drawer()

        created = await store.create_invoice(validate_invoice(valid_candidate).unwrap())

        assert not created
        assert store.get_state().error == "User not authenticated"
        assert store.get_state().is_drawer_open
        assert remote.calls == []

    @pytest.mark.asyncio
    async def test_remote_failure_keeps_drawer_and_data(
        self, auth: DemoAuthProvider, valid_candidate: dict[str, Any]
    ) -> None:
        remote = RecordingTables(fail_on={("insert", "invoices")})
        store = InvoiceStore(remote, auth)
        await store.fetch_invoices()
        before = store.get_state().invoices
        store.open_drawer()

        created = await store.create_invoice(validate_invoice(valid_candidate).unwrap())

        state = store.get_state()
        assert not created
        assert state.error == "This record already exists"
        assert state.is_drawer_open
        assert state.invoices is before
        assert not state.is_loading

    @pytest.mark.asyncio
    async def test_item_failure_rolls_back_invoice(
        self, auth: DemoAuthProvider, valid_candidate: dict[str, Any]
    ) -> None:
        remote = RecordingTables(fail_on={("insert", "invoice_items")})
        store = InvoiceStore(remote, auth)

        created = await store.create_invoice(validate_invoice(valid_candidate).unwrap())

        assert not created
        rows = await remote.select("invoices", eq={"invoice_number": "INV-TEST-001"})
        assert rows == []


class TestUpdateInvoice:
    """Tests for update_invoice"""

    @pytest.mark.asyncio
    async def test_patch_then_refetch(self, auth: DemoAuthProvider) -> None:
        remote = RecordingTables()
        store = InvoiceStore(remote, auth)
        await store.fetch_invoices()

        updated = await store.update_invoice("inv-004", {"status": "sent", "id": "hijack"})

        assert updated
        invoice = next(inv for inv in store.get_state().invoices if inv.id == "inv-004")
        assert invoice.status == "sent"
        assert remote.calls.count(("select", "invoices")) == 2

    @pytest.mark.asyncio
    async def test_failure_sets_error(self, auth: DemoAuthProvider) -> None:
        store = InvoiceStore(FailingTables("permission denied"), auth)
        assert not await store.update_invoice("inv-004", {"status": "paid"})
        assert store.get_state().error == "permission denied"


class TestDeleteInvoice:
    """Tests for delete_invoice"""

    @pytest.mark.asyncio
    async def test_removes_only_that_invoice_without_refetch(self, auth: DemoAuthProvider) -> None:
        remote = RecordingTables()
        store = InvoiceStore(remote, auth)
        await store.fetch_invoices()
        before = _ids(store.get_state())
        remote.calls.clear()

        assert await store.delete_invoice("inv-002")

        assert _ids(store.get_state()) == [i for i in before if i != "inv-002"]
        assert ("select", "invoices") not in remote.calls

    @pytest.mark.asyncio
    async def test_missing_id_is_a_no_op(self, auth: DemoAuthProvider) -> None:
        store = InvoiceStore(DemoTables(), auth)
        await store.fetch_invoices()
        before = _ids(store.get_state())

        assert await store.delete_invoice("does-not-exist")

        assert _ids(store.get_state()) == before
        assert store.get_state().error is None

    @pytest.mark.asyncio
    async def test_clears_selection_of_deleted_invoice(self, auth: DemoAuthProvider) -> None:
        store = InvoiceStore(DemoTables(), auth)
        await store.fetch_invoices()
        store.open_modal(store.get_state().invoices[0])

        await store.delete_invoice(store.get_state().invoices[0].id)

        assert store.get_state().selected_invoice is None
        assert not store.get_state().is_modal_open

    @pytest.mark.asyncio
    async def test_failure_leaves_list_unchanged(self, auth: DemoAuthProvider) -> None:
        store = InvoiceStore(FailingTables(code="23503"), auth)
        await store.fetch_invoices()
        before = store.get_state().invoices

        assert not await store.delete_invoice("inv-001")

        assert store.get_state().invoices is before
        assert store.get_state().error == "connection refused"

    @pytest.mark.asyncio
    async def test_invoice_failure_keeps_its_items(self, auth: DemoAuthProvider) -> None:
        remote = RecordingTables(fail_on={("delete", "invoices")})
        store = InvoiceStore(remote, auth)
        await store.fetch_invoices()

        assert not await store.delete_invoice("inv-004")

        assert ("delete", "invoice_items") not in remote.calls
        assert len(await remote.select("invoice_items", eq={"invoice_id": "inv-004"})) == 2
        assert "inv-004" in _ids(store.get_state())
        assert store.get_state().error == "This record already exists"

    @pytest.mark.asyncio
    async def test_item_cleanup_failure_still_deletes_invoice(self, auth: DemoAuthProvider) -> None:
        remote = RecordingTables(fail_on={("delete", "invoice_items")})
        store = InvoiceStore(remote, auth)
        await store.fetch_invoices()

        assert await store.delete_invoice("inv-004")

        assert "inv-004" not in _ids(store.get_state())
        assert await remote.select("invoices", eq={"id": "inv-004"}) == []
        assert store.get_state().error is None

    @pytest.mark.asyncio
    async def test_unexpected_error_still_clears_loading(self, auth: DemoAuthProvider) -> None:
        store = InvoiceStore(_CrashingDeleteTables(), auth)
        await store.fetch_invoices()

        with pytest.raises(RuntimeError, match="driver crashed"):
            await store.delete_invoice("inv-001")

        assert store.get_state().is_loading is False
        assert "inv-001" in _ids(store.get_state())


class TestUiState:
    """Tests for the synchronous UI setters and dispatch"""

    def test_open_modal_selects_and_opens(self, demo_tables: DemoTables, auth: DemoAuthProvider) -> None:
        store = InvoiceStore(demo_tables, auth)
        invoice = invoice_from_row(make_row("x"))
        published: list[InvoiceStoreState] = []
        store.subscribe(published.append)

        store.open_modal(invoice)

        assert len(published) == 1
        assert published[0].selected_invoice is invoice
        assert published[0].is_modal_open

    def test_drawer_and_modal_are_independent(self, demo_tables: DemoTables, auth: DemoAuthProvider) -> None:
        store = InvoiceStore(demo_tables, auth)
        store.open_drawer()
        store.open_modal(invoice_from_row(make_row("x")))
        store.close_modal()
        state = store.get_state()
        assert state.is_drawer_open
        assert not state.is_modal_open
        assert state.selected_invoice is not None

    def test_filter_validation(self, demo_tables: DemoTables, auth: DemoAuthProvider) -> None:
        store = InvoiceStore(demo_tables, auth)
        store.set_filter_status("paid")
        assert store.get_state().filter_status == "paid"
        with pytest.raises(ValueError):
            store.set_filter_status("archived")

    def test_unsubscribe(self, demo_tables: DemoTables, auth: DemoAuthProvider) -> None:
        store = InvoiceStore(demo_tables, auth)
        published: list[InvoiceStoreState] = []
        unsubscribe = store.subscribe(published.append)
        store.open_drawer()
        unsubscribe()
        store.close_drawer()
        assert len(published) == 1

    def test_failing_listener_does_not_break_others(
        self, demo_tables: DemoTables, auth: DemoAuthProvider
    ) -> None:
        store = InvoiceStore(demo_tables, auth)
        published: list[InvoiceStoreState] = []

        def broken(state: InvoiceStoreState) -> None:
            raise RuntimeError("boom")

        store.subscribe(broken)
        store.subscribe(published.append)
        store.set_search_query("alex")
        assert published[0].search_query == "alex"

    @pytest.mark.asyncio
    async def test_dispatch(self, demo_tables: DemoTables, auth: DemoAuthProvider) -> None:
        store = InvoiceStore(demo_tables, auth)
        store.dispatch("set_search_query", "thomas")
        await store.dispatch("fetch_invoices")
        assert store.get_state().search_query == "thomas"
        assert store.get_state().data_source == "remote"
        with pytest.raises(ValueError):
            store.dispatch("drop_tables")

    def test_preferences_round_trip(self, tmp_path, auth: DemoAuthProvider) -> None:
        cache = DiskCache(tmp_path / "prefs")
        store = InvoiceStore(DemoTables(), auth, preferences=PreferenceCache(cache))
        store.set_filter_status("overdue")
        store.set_search_query("lee")

        restored = InvoiceStore(DemoTables(), auth, preferences=PreferenceCache(cache))
        assert restored.get_state().filter_status == "overdue"
        assert restored.get_state().search_query == "lee"


class TestClientsAndPayments:
    """Tests for the read helpers used by the form and payments page"""

    @pytest.mark.asyncio
    async def test_clients_fall_back(self, auth: DemoAuthProvider) -> None:
        store = InvoiceStore(FailingTables(), auth)
        clients = await store.fetch_clients()
        assert [c.name for c in clients] == ["Alex Parkinson", "Thomas Lee"]

    @pytest.mark.asyncio
    async def test_payments_for_invoice(self, demo_tables: DemoTables, auth: DemoAuthProvider) -> None:
        store = InvoiceStore(demo_tables, auth)
        payments = await store.fetch_payments("inv-005")
        assert [p.id for p in payments] == ["pay-002"]
        assert payments[0].amount == 1134
