"""
Reflex state management for the QuickPay dashboard.

The invoice and auth stores hold the authoritative data, with one invoice
store per browser session (keyed by the client token); the Reflex states
here mirror their snapshots (through the selectors) into vars the
components render, and forward user events to store actions.

- DashboardState: invoice list, stats, filters, detail modal and drawer flags
- InvoiceFormState: the creation drawer form with live totals
- PublicInvoiceState: the client-facing invoice page and its pay form
"""

from typing import Any

import reflex as rx

from quickpay_dashboard.errors import RemoteError
from quickpay_dashboard.lib import logs, objects
from quickpay_dashboard.models.invoice import FILTER_STATUSES, Invoice
from quickpay_dashboard.models.reflex_models import (
    ClientOptionModel,
    InvoiceModel,
    PaymentModel,
    client_to_option,
    invoice_to_model,
    payment_to_model,
)
from quickpay_dashboard.stores import (
    InvoiceStore,
    get_attachments,
    get_auth_store,
    get_invoice_store,
    get_settings,
    select_dashboard_stats,
    select_filtered_invoices,
)
from quickpay_dashboard.utils import format_currency, quickpay_url
from quickpay_dashboard.validation import (
    compute_totals,
    invoice_form_defaults,
    validate_invoice,
)

LOG = logs.logger(__file__)

FILTER_LABELS = {
    "all": "Show all",
    "draft": "Drafts",
    "sent": "Pending",
    "paid": "Paid",
    "overdue": "Overdue",
    "cancelled": "Cancelled",
}


def _store(state: rx.State) -> InvoiceStore:
    """Return the invoice store of the browser session behind ``state``."""
    return get_invoice_store(state.router.session.client_token)


def _find_invoice(store: InvoiceStore, invoice_id: str) -> Invoice | None:
    for invoice in store.get_state().invoices:
        if invoice.id == invoice_id:
            return invoice
    return None


class DashboardState(rx.State):
    """
    Mirror of the invoice store for the dashboard and payments pages.
    """

    invoices: list[InvoiceModel] = []
    invoice_count: int = 0
    selected: InvoiceModel = InvoiceModel()
    has_selection: bool = False
    is_loading: bool = False
    error: str = ""
    is_drawer_open: bool = False
    is_modal_open: bool = False
    filter_status: str = "all"
    search_query: str = ""
    is_fallback: bool = False
    fallback_reason: str = ""

    total_received: str = "$0.00"
    pending: str = "$0.00"
    drafts: str = "$0.00"
    total_invoices: int = 0

    user_name: str = ""
    payments: list[PaymentModel] = []
    attachment_url: str = ""

    @rx.var
    def quickpay_link(self) -> str:
        settings = get_settings()
        return quickpay_url(settings.quickpay_username, settings.quickpay_host)

    @rx.var
    def filter_label(self) -> str:
        return FILTER_LABELS.get(self.filter_status, "Show all")

    @rx.var
    def is_empty(self) -> bool:
        return not self.is_loading and self.invoice_count == 0

    @rx.var
    def total_received_parts(self) -> list[str]:
        dollars, _, cents = self.total_received.partition(".")
        return [dollars, cents or "00"]

    def _sync(self) -> None:
        """Copy the current store snapshot into this state's vars."""
        snapshot = _store(self).get_state()
        filtered = select_filtered_invoices(snapshot)
        stats = select_dashboard_stats(snapshot)

        self.invoices = [invoice_to_model(inv) for inv in filtered]
        self.invoice_count = len(filtered)
        self.is_loading = snapshot.is_loading
        self.error = snapshot.error or ""
        self.is_drawer_open = snapshot.is_drawer_open
        self.is_modal_open = snapshot.is_modal_open
        self.filter_status = snapshot.filter_status
        self.search_query = snapshot.search_query
        self.is_fallback = snapshot.is_fallback
        self.fallback_reason = snapshot.fallback_reason or ""
        self.has_selection = snapshot.selected_invoice is not None
        self.selected = (
            invoice_to_model(snapshot.selected_invoice)
            if snapshot.selected_invoice
            else InvoiceModel()
        )
        self.total_received = format_currency(stats.total_received)
        self.pending = format_currency(stats.pending)
        self.drafts = format_currency(stats.drafts)
        self.total_invoices = stats.total_invoices

    @rx.event
    async def on_load(self):
        """
        Event handler for page load.

        Shows the cached snapshot immediately, then refetches.
        """
        self._sync()
        self.is_loading = True
        yield

        auth_state = get_auth_store().get_state()
        if auth_state.user is None:
            await get_auth_store().initialize_auth()
            auth_state = get_auth_store().get_state()
        user = auth_state.user
        if user is not None:
            self.user_name = user.full_name or (user.email or "").split("@")[0]

        store = _store(self)
        await store.fetch_invoices()
        self._sync()
        LOG.info("Dashboard loaded: %s", objects.to_json(store.get_state().to_dict()))

    @rx.event
    async def load_payments(self):
        store = _store(self)
        payments = await store.fetch_payments()
        numbers = {inv.id: inv.invoice_number for inv in store.get_state().invoices}
        self.payments = [
            payment_to_model(payment, numbers.get(payment.invoice_id, ""))
            for payment in payments
        ]

    @rx.event
    def refresh(self):
        self._sync()

    @rx.event
    def search(self, query: str):
        _store(self).set_search_query(query.strip() if query else "")
        self._sync()

    @rx.event
    def set_filter(self, status: str):
        if status not in FILTER_STATUSES:
            LOG.warning("Ignoring unknown status filter: %s", status)
            return
        _store(self).set_filter_status(status)
        self._sync()

    @rx.event
    async def open_invoice(self, invoice_id: str):
        """Open the detail modal, then load the invoice's line items."""
        store = _store(self)
        invoice = _find_invoice(store, invoice_id)
        self.attachment_url = ""
        if invoice is not None:
            store.open_modal(invoice)
            self._sync()
            yield
        await store.fetch_invoice_by_id(invoice_id)
        if store.get_state().selected_invoice is not None:
            store.open_modal(store.get_state().selected_invoice)
        self._sync()

    @rx.event
    def close_modal(self):
        _store(self).close_modal()
        self._sync()

    @rx.event
    def on_modal_open_change(self, is_open: bool):
        if not is_open:
            _store(self).close_modal()
            self._sync()

    @rx.event
    def open_drawer(self):
        _store(self).open_drawer()
        self._sync()
        return InvoiceFormState.reset_form

    @rx.event
    def close_drawer(self):
        _store(self).close_drawer()
        self._sync()

    @rx.event
    def on_drawer_open_change(self, is_open: bool):
        if not is_open:
            _store(self).close_drawer()
            self._sync()

    @rx.event
    async def mark_selected_paid(self):
        if not self.has_selection:
            return
        invoice_id = self.selected.id
        store = _store(self)
        if await store.update_invoice(invoice_id, {"status": "paid"}):
            await store.fetch_invoice_by_id(invoice_id)
        self._sync()

    @rx.event
    async def delete_selected(self):
        if not self.has_selection:
            return
        store = _store(self)
        await store.delete_invoice(self.selected.id)
        self._sync()

    @rx.event
    async def upload_attachment(self, files: list[rx.UploadFile]):
        """Store the dropped file against the selected invoice."""
        if not self.has_selection or not files:
            return
        upload = files[0]
        data = await upload.read()
        try:
            stored = await get_attachments().upload(
                data, upload.filename or "attachment", self.selected.id
            )
        except RemoteError as exc:
            LOG.warning("Attachment upload for %s failed: %s", self.selected.id, exc.message)
            return rx.toast.error(exc.message)
        self.attachment_url = stored["url"]
        return rx.toast.success("Attachment uploaded")

    @rx.event
    def dismiss_error(self):
        _store(self).clear_error()
        self._sync()

    @rx.event
    def copy_quickpay_link(self):
        return [
            rx.set_clipboard(self.quickpay_link),
            rx.toast.success("QuickPay link copied!"),
        ]


def _blank_item() -> dict[str, str]:
    return {"description": "", "quantity": "1", "unit_price": "0"}


def _lenient_float(value: Any) -> float:
    try:
        return float(value)
    except (TypeError, ValueError):
        return 0.0


class InvoiceFormState(rx.State):
    """
    Creation drawer form.

    Inputs are kept as strings exactly as typed; the totals shown while
    typing treat unparseable numbers as 0, and submission runs the full
    validation engine.
    """

    invoice_number: str = ""
    client_id: str = ""
    notes: str = ""
    issue_date: str = ""
    due_date: str = ""
    is_recurring: bool = False
    tax_rate: str = "0"
    items: list[dict[str, str]] = [_blank_item()]
    errors: dict[str, str] = {}
    form_error: str = ""
    is_submitting: bool = False
    client_options: list[ClientOptionModel] = []

    def _totals(self):
        rows = [
            {
                "quantity": _lenient_float(item.get("quantity")),
                "unit_price": _lenient_float(item.get("unit_price")),
            }
            for item in self.items
        ]
        return compute_totals(rows, _lenient_float(self.tax_rate))

    @rx.var
    def subtotal_display(self) -> str:
        return format_currency(self._totals().subtotal)

    @rx.var
    def tax_display(self) -> str:
        return format_currency(self._totals().tax_amount)

    @rx.var
    def total_display(self) -> str:
        return format_currency(self._totals().total)

    @rx.var
    def item_amounts(self) -> list[str]:
        return [
            f"{_lenient_float(item.get('quantity')) * _lenient_float(item.get('unit_price')):.2f}"
            for item in self.items
        ]

    @rx.var
    def item_errors(self) -> list[str]:
        """One message per item row, joining that row's field errors."""
        messages = []
        for index in range(len(self.items)):
            prefix = f"items.{index}."
            messages.append(
                "; ".join(msg for path, msg in self.errors.items() if path.startswith(prefix))
            )
        return messages

    @rx.var
    def can_remove_items(self) -> bool:
        return len(self.items) > 1

    @rx.event
    async def reset_form(self):
        defaults = invoice_form_defaults()
        self.invoice_number = defaults["invoice_number"]
        self.client_id = ""
        self.notes = ""
        self.issue_date = defaults["issue_date"].isoformat()
        self.due_date = defaults["due_date"].isoformat()
        self.is_recurring = defaults["is_recurring"]
        self.tax_rate = str(defaults["tax_rate"])
        self.items = [_blank_item()]
        self.errors = {}
        self.form_error = ""
        self.is_submitting = False
        clients = await _store(self).fetch_clients()
        self.client_options = [client_to_option(client) for client in clients]

    @rx.event
    def set_client_id(self, value: str):
        self.client_id = value

    @rx.event
    def set_notes(self, value: str):
        self.notes = value

    @rx.event
    def set_issue_date(self, value: str):
        self.issue_date = value

    @rx.event
    def set_due_date(self, value: str):
        self.due_date = value

    @rx.event
    def set_is_recurring(self, value: bool):
        self.is_recurring = bool(value)

    @rx.event
    def set_tax_rate(self, value: str):
        self.tax_rate = value

    @rx.event
    def set_item_field(self, index: int, field: str, value: str):
        if field not in ("description", "quantity", "unit_price"):
            return
        items = [dict(item) for item in self.items]
        if 0 <= index < len(items):
            items[index][field] = value
            self.items = items

    @rx.event
    def add_item(self):
        self.items = self.items + [_blank_item()]

    @rx.event
    def remove_item(self, index: int):
        if len(self.items) > 1 and 0 <= index < len(self.items):
            self.items = [item for i, item in enumerate(self.items) if i != index]

    def _candidate(self) -> dict[str, Any]:
        candidate: dict[str, Any] = {
            "invoice_number": self.invoice_number,
            "status": "draft",
            "issue_date": self.issue_date,
            "due_date": self.due_date,
            "tax_rate": self.tax_rate or 0,
            "notes": self.notes,
            "is_recurring": self.is_recurring,
            "items": [dict(item) for item in self.items],
        }
        option = next((o for o in self.client_options if o.value == self.client_id), None)
        if option is not None:
            candidate.update(
                client_id=option.value,
                client_name=option.name,
                client_email=option.email or None,
            )
        return candidate

    @rx.event
    async def submit(self):
        """Validate the form and create the invoice through the store."""
        result = validate_invoice(self._candidate())
        if not result.ok:
            self.errors = result.error_map()
            self.form_error = "Please fix the highlighted fields"
            return
        self.errors = {}
        self.form_error = ""
        self.is_submitting = True
        yield

        store = _store(self)
        created = await store.create_invoice(result.value)
        self.is_submitting = False
        if not created:
            self.form_error = store.get_state().error or "Could not create invoice"
            yield DashboardState.refresh
            return
        yield rx.toast.success(f"Invoice {result.value.invoice_number} created")
        yield DashboardState.refresh


class PublicInvoiceState(rx.State):
    """Client-facing invoice view at /invoices/[invoice_id]."""

    invoice: InvoiceModel = InvoiceModel()
    found: bool = False
    is_loading: bool = True
    card_number: str = ""
    card_expiry: str = ""
    card_cvc: str = ""

    @rx.event
    async def on_load(self):
        self.is_loading = True
        invoice_id = self.router.page.params.get("invoice_id", "")
        invoice = await _store(self).find_invoice(invoice_id)
        self.found = invoice is not None
        self.invoice = invoice_to_model(invoice) if invoice else InvoiceModel()
        self.is_loading = False

    @rx.event
    def set_card_number(self, value: str):
        self.card_number = value

    @rx.event
    def set_card_expiry(self, value: str):
        self.card_expiry = value

    @rx.event
    def set_card_cvc(self, value: str):
        self.card_cvc = value

    @rx.event
    def pay(self, form_data: dict):
        LOG.info("Pay form submitted for invoice %s", self.invoice.invoice_number)
        return rx.toast.info("Online payments are not enabled for this invoice yet.")
