"""
Invoice store: the in-memory cache of the user's invoices.

The store mediates every read and write against the remote tables and
publishes InvoiceStoreState snapshots.

Read policy: a failed fetch, or one that returns no rows, substitutes the
fixture dataset so the dashboard is never empty. The failure is logged but
not surfaced; ``data_source`` and ``fallback_reason`` record what happened.

Write policy: create, update and delete surface failures through
``error`` and leave the cached data as it was. Create and update resync
with a full fetch on success; delete evicts the entry locally.

Each action type keeps a request generation counter. A response that
settles after a newer request of the same type was issued is discarded,
so the newest request wins whatever order responses arrive in.
"""

from collections import defaultdict
from datetime import date, datetime
from typing import Any, Mapping

from quickpay_dashboard.data.fixtures import FixtureSet
from quickpay_dashboard.errors import AuthenticationError, QuickPayError, RemoteError
from quickpay_dashboard.lib import logs
from quickpay_dashboard.lib.caches import PreferenceCache
from quickpay_dashboard.models.common import (
    FALLBACK_EMPTY,
    FALLBACK_ERROR,
    SOURCE_FALLBACK,
    SOURCE_REMOTE,
    InvoiceStoreState,
)
from quickpay_dashboard.models.invoice import (
    FILTER_STATUSES,
    INVOICE_COLUMNS,
    Client,
    Invoice,
    Payment,
    client_from_row,
    invoice_from_row,
    payment_from_row,
)
from quickpay_dashboard.services.auth import AuthProvider
from quickpay_dashboard.services.remote import RemoteTables
from quickpay_dashboard.stores.base import ObservableStore
from quickpay_dashboard.validation.invoice_schema import ValidInvoice

LOG = logs.logger(__file__)

INVOICES_TABLE = "invoices"
ITEMS_TABLE = "invoice_items"
CLIENTS_TABLE = "clients"
PAYMENTS_TABLE = "payments"

_READ_ONLY_COLUMNS = frozenset({"id", "user_id", "created_at", "updated_at"})
_PATCHABLE_COLUMNS = frozenset(INVOICE_COLUMNS) - _READ_ONLY_COLUMNS


def _patch_row(patch: Mapping[str, Any]) -> dict[str, Any]:
    """Keep patchable columns and render dates as ISO strings."""
    row: dict[str, Any] = {}
    for column, value in patch.items():
        if column not in _PATCHABLE_COLUMNS:
            LOG.warning("Ignoring non-patchable invoice column: %s", column)
            continue
        if isinstance(value, (date, datetime)):
            value = value.isoformat()
        row[column] = value
    if row.get("is_recurring") is False:
        row["recurring_frequency"] = None
    return row


class InvoiceStore(ObservableStore[InvoiceStoreState]):
    """
    Observable invoice state with remote orchestration.

    Args:
        remote: Remote table access.
        auth: Provides the current user id for creation.
        fixtures: Fallback dataset, defaults to the bundled fixtures.
        preferences: Optional cache restoring/persisting filter and search.
    """

    ACTIONS = frozenset(
        {
            "fetch_invoices",
            "fetch_invoice_by_id",
            "create_invoice",
            "update_invoice",
            "delete_invoice",
            "select_invoice",
            "open_drawer",
            "close_drawer",
            "open_modal",
            "close_modal",
            "set_filter_status",
            "set_search_query",
        }
    )

    def __init__(
        self,
        remote: RemoteTables,
        auth: AuthProvider,
        fixtures: FixtureSet | None = None,
        preferences: PreferenceCache | None = None,
    ) -> None:
        self._remote = remote
        self._auth = auth
        self._fixtures = fixtures or FixtureSet.default()
        self._preferences = preferences
        self._generations: dict[str, int] = defaultdict(int)
        self._in_flight = 0
        super().__init__(self._initial_state())

    def _initial_state(self) -> InvoiceStoreState:
        if self._preferences is None:
            return InvoiceStoreState()
        saved = self._preferences.load()
        status = saved.get("filter_status", "all")
        query = saved.get("search_query", "")
        return InvoiceStoreState(
            filter_status=status if status in FILTER_STATUSES else "all",
            search_query=query if isinstance(query, str) else "",
        )

    # Request lifecycle

    def _begin(self, action: str) -> int:
        self._generations[action] += 1
        self._in_flight += 1
        self._set(is_loading=True, error=None)
        return self._generations[action]

    def _settle(self, action: str, generation: int, changes: dict[str, Any]) -> None:
        self._in_flight -= 1
        if generation != self._generations[action]:
            LOG.info(
                "Discarding stale %s response (generation %d, latest %d)",
                action,
                generation,
                self._generations[action],
            )
            changes = {}
        self._set(is_loading=self._in_flight > 0, **changes)

    def _fallback_invoices(self, reason: str) -> dict[str, Any]:
        return {
            "invoices": self._fixtures.load_invoices(),
            "data_source": SOURCE_FALLBACK,
            "fallback_reason": reason,
        }

    # Reads

    async def fetch_invoices(self) -> None:
        """Load every invoice, newest first, falling back to fixtures."""
        generation = self._begin("fetch")
        changes: dict[str, Any] = {}
        try:
            try:
                rows = await self._remote.select(
                    INVOICES_TABLE, order_by="created_at", descending=True
                )
            except RemoteError as exc:
                LOG.warning("Fetching invoices failed, using fixture data: %s", exc.message)
                changes = self._fallback_invoices(FALLBACK_ERROR)
            else:
                if rows:
                    changes = {
                        "invoices": tuple(invoice_from_row(row) for row in rows),
                        "data_source": SOURCE_REMOTE,
                        "fallback_reason": None,
                    }
                else:
                    LOG.info("No invoices returned, using fixture data")
                    changes = self._fallback_invoices(FALLBACK_EMPTY)
        finally:
            self._settle("fetch", generation, changes)

    async def fetch_invoice_by_id(self, invoice_id: str) -> None:
        """
        Load one invoice with its line items into ``selected_invoice``.

        An id found in neither the remote store nor the fixtures clears the
        selection and closes the detail modal; that is a normal outcome, not
        an error.
        """
        generation = self._begin("fetch_one")
        changes: dict[str, Any] = {}
        try:
            invoice = await self._load_invoice(invoice_id)
            changes = {"selected_invoice": invoice}
            if invoice is None:
                changes["is_modal_open"] = False
        finally:
            self._settle("fetch_one", generation, changes)

    async def find_invoice(self, invoice_id: str) -> Invoice | None:
        """Look up one invoice with its items without touching store state."""
        return await self._load_invoice(invoice_id)

    async def _load_invoice(self, invoice_id: str) -> Invoice | None:
        try:
            rows = await self._remote.select(INVOICES_TABLE, eq={"id": invoice_id})
        except RemoteError as exc:
            LOG.warning("Fetching invoice %s failed, using fixture data: %s", invoice_id, exc.message)
            return self._fixtures.get_invoice(invoice_id)
        if not rows:
            return self._fixtures.get_invoice(invoice_id)
        try:
            items = await self._remote.select(
                ITEMS_TABLE, eq={"invoice_id": invoice_id}, order_by="order", descending=False
            )
        except RemoteError as exc:
            LOG.warning("Fetching items of invoice %s failed: %s", invoice_id, exc.message)
            items = []
        return invoice_from_row(rows[0], items)

    async def fetch_clients(self) -> list[Client]:
        """Return the user's clients for the creation form, with fixture fallback."""
        try:
            rows = await self._remote.select(CLIENTS_TABLE, order_by="name", descending=False)
        except RemoteError as exc:
            LOG.warning("Fetching clients failed, using fixture data: %s", exc.message)
            rows = []
        if not rows:
            rows = list(self._fixtures.clients)
        return [client_from_row(row) for row in rows]

    async def fetch_payments(self, invoice_id: str | None = None) -> list[Payment]:
        """Return recorded payments, newest first, with fixture fallback."""
        eq = {"invoice_id": invoice_id} if invoice_id else None
        try:
            rows = await self._remote.select(
                PAYMENTS_TABLE, eq=eq, order_by="payment_date", descending=True
            )
        except RemoteError as exc:
            LOG.warning("Fetching payments failed, using fixture data: %s", exc.message)
            rows = []
        if not rows:
            rows = [
                row
                for row in self._fixtures.payments
                if invoice_id is None or row.get("invoice_id") == invoice_id
            ]
        return [payment_from_row(row) for row in rows]

    # Writes

    async def create_invoice(self, invoice: ValidInvoice) -> bool:
        """
        Persist a validated invoice and its line items.

        Requires a signed-in user; without one an AuthenticationError is
        surfaced and no remote call is made. On success the cache is
        refetched and the drawer closed. On failure the drawer stays open
        and nothing is committed.

        Returns:
            True when the invoice was created.
        """
        generation = self._begin("create")
        changes: dict[str, Any] = {}
        try:
            user_id = await self._auth.current_user_id()
            if not user_id:
                raise AuthenticationError()
            inserted = await self._remote.insert(INVOICES_TABLE, [invoice.to_row(user_id)])
            invoice_id = str(inserted[0]["id"]) if inserted else None
            if invoice_id and invoice.items:
                await self._insert_items(invoice, invoice_id)
            LOG.info("Created invoice %s (%s)", invoice.invoice_number, invoice_id)
            await self.fetch_invoices()
            changes = {"is_drawer_open": False}
            return True
        except QuickPayError as exc:
            LOG.warning("Creating invoice %s failed: %s", invoice.invoice_number, exc.message)
            changes = {"error": exc.message}
            return False
        finally:
            self._settle("create", generation, changes)

    async def _insert_items(self, invoice: ValidInvoice, invoice_id: str) -> None:
        try:
            await self._remote.insert(ITEMS_TABLE, invoice.item_rows(invoice_id))
        except RemoteError:
            LOG.warning("Rolling back invoice %s after item insert failure", invoice_id)
            try:
                await self._remote.delete(INVOICES_TABLE, eq={"id": invoice_id})
            except RemoteError:
                LOG.error("Rollback of invoice %s failed", invoice_id, exc_info=True)
            raise

    async def update_invoice(self, invoice_id: str, patch: Mapping[str, Any]) -> bool:
        """
        Apply a partial field patch, then resync with a full fetch.

        Returns:
            True when the update was accepted.
        """
        generation = self._begin("update")
        changes: dict[str, Any] = {}
        try:
            row = _patch_row(patch)
            if row:
                await self._remote.update(INVOICES_TABLE, row, eq={"id": invoice_id})
                LOG.info("Updated invoice %s: %s", invoice_id, sorted(row))
            await self.fetch_invoices()
            return True
        except RemoteError as exc:
            LOG.warning("Updating invoice %s failed: %s", invoice_id, exc.message)
            changes = {"error": exc.message}
            return False
        finally:
            self._settle("update", generation, changes)

    async def delete_invoice(self, invoice_id: str) -> bool:
        """
        Delete an invoice and evict it from the cache without refetching.

        The invoice row goes first; if that fails nothing was removed and the
        error is surfaced. Its line items are then removed as a cleanup step
        whose failure only leaves orphaned item rows, which is logged. Deleting
        an id that is not cached is a successful no-op.

        Returns:
            True when the delete was accepted.
        """
        generation = self._begin("delete")
        changes: dict[str, Any] = {}
        try:
            try:
                await self._remote.delete(INVOICES_TABLE, eq={"id": invoice_id})
            except RemoteError as exc:
                LOG.warning("Deleting invoice %s failed: %s", invoice_id, exc.message)
                changes = {"error": exc.message}
                return False
            try:
                await self._remote.delete(ITEMS_TABLE, eq={"invoice_id": invoice_id})
            except RemoteError as exc:
                LOG.error(
                    "Invoice %s deleted but its line items were not: %s",
                    invoice_id,
                    exc.message,
                )

            # Evict against the latest snapshot, not the one seen when the call began.
            state = self.get_state()
            changes = {
                "invoices": tuple(inv for inv in state.invoices if inv.id != invoice_id)
            }
            if state.selected_invoice is not None and state.selected_invoice.id == invoice_id:
                changes.update(selected_invoice=None, is_modal_open=False)
            LOG.info("Deleted invoice %s", invoice_id)
            return True
        finally:
            self._settle("delete", generation, changes)

    # UI state

    def select_invoice(self, invoice: Invoice | None) -> None:
        self._set(selected_invoice=invoice)

    def open_drawer(self) -> None:
        self._set(is_drawer_open=True)

    def close_drawer(self) -> None:
        self._set(is_drawer_open=False)

    def open_modal(self, invoice: Invoice) -> None:
        """Select ``invoice`` and open the detail modal in one step."""
        self._set(selected_invoice=invoice, is_modal_open=True)

    def close_modal(self) -> None:
        self._set(is_modal_open=False)

    def clear_error(self) -> None:
        self._set(error=None)

    def set_filter_status(self, status: str) -> None:
        if status not in FILTER_STATUSES:
            raise ValueError(f"Unknown status filter: {status}")
        self._set(filter_status=status)
        self._save_preferences()

    def set_search_query(self, query: str) -> None:
        self._set(search_query=query or "")
        self._save_preferences()

    def _save_preferences(self) -> None:
        if self._preferences is None:
            return
        state = self.get_state()
        self._preferences.save(
            {"filter_status": state.filter_status, "search_query": state.search_query}
        )
