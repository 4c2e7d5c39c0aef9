"""
Invoice domain models and row conversion helpers.

The remote store hands back untyped rows (plain dicts keyed by column
name). This module defines the typed dataclasses the rest of the package
works with and the functions converting between the two:

    Invoice
    ├── Recurrence (present only for recurring invoices)
    └── LineItem[] (description, quantity, unit price, derived amount)

    Client, Payment, User (reference entities, read-only here)

Rows may carry the legacy denormalized client fields either flat
(``client_name``) or nested (``client.name``); benedict keypaths read both.
"""

from dataclasses import asdict, dataclass, field
from datetime import date, datetime
from typing import Any, Mapping, Sequence

from benedict import benedict

from quickpay_dashboard.utils import parse_date, parse_datetime

INVOICE_STATUSES = ("draft", "sent", "paid", "overdue", "cancelled")
FILTER_STATUSES = ("all",) + INVOICE_STATUSES
RECURRING_FREQUENCIES = ("weekly", "monthly", "quarterly", "yearly")
PAYMENT_METHODS = ("bank_transfer", "card", "cash", "mpesa", "other")

# Columns accepted by the invoices table, in schema order.
INVOICE_COLUMNS = (
    "id",
    "user_id",
    "client_id",
    "invoice_number",
    "status",
    "issue_date",
    "due_date",
    "subtotal",
    "tax_rate",
    "tax_amount",
    "total",
    "notes",
    "is_recurring",
    "recurring_frequency",
    "created_at",
    "updated_at",
    "client_name",
    "client_email",
)


@dataclass(slots=True, frozen=True)
class Recurrence:
    """How often a recurring invoice is re-issued."""

    frequency: str = "monthly"


@dataclass(slots=True)
class LineItem:
    """One billable row on an invoice."""

    description: str
    quantity: int
    unit_price: float
    id: str | None = None
    invoice_id: str | None = None
    order: int = 0

    @property
    def amount(self) -> float:
        """Always the live product of quantity and unit price."""
        return self.quantity * self.unit_price


@dataclass(slots=True)
class Invoice:
    """Primary dataclass for invoices."""

    id: str
    user_id: str
    invoice_number: str
    status: str
    issue_date: date
    due_date: date
    subtotal: float
    tax_rate: float
    tax_amount: float
    total: float
    client_id: str | None = None
    notes: str | None = None
    recurrence: Recurrence | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None
    client_name: str | None = None
    client_email: str | None = None
    items: Sequence[LineItem] = field(default_factory=tuple)

    @property
    def is_recurring(self) -> bool:
        return self.recurrence is not None

    def searchable_terms(self) -> list[str]:
        """Return the lower-cased terms matched by the search box."""
        terms = [self.invoice_number, self.client_name, self.client_email]
        return [value.lower() for value in terms if value]


@dataclass(slots=True)
class Client:
    """A customer the user bills."""

    id: str
    user_id: str
    name: str
    email: str
    company_name: str | None = None
    address: str | None = None
    phone: str | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None


@dataclass(slots=True)
class Payment:
    """A payment recorded against an invoice."""

    id: str
    invoice_id: str
    amount: float
    payment_date: date
    payment_method: str
    reference: str | None = None
    notes: str | None = None
    created_at: datetime | None = None


@dataclass(slots=True)
class User:
    """The signed-in account owning invoices and clients."""

    id: str
    email: str | None = None
    full_name: str | None = None
    company_name: str | None = None
    avatar_url: str | None = None


def _float(value: Any, default: float = 0.0) -> float:
    if value is None or value == "":
        return default
    return float(value)


def _optional_str(value: Any) -> str | None:
    if value is None:
        return None
    text = str(value)
    return text or None


def line_item_from_row(row: Mapping[str, Any]) -> LineItem:
    """Convert an ``invoice_items`` row into a LineItem."""
    return LineItem(
        id=_optional_str(row.get("id")),
        invoice_id=_optional_str(row.get("invoice_id")),
        description=row.get("description") or "",
        quantity=int(row.get("quantity") or 0),
        unit_price=_float(row.get("unit_price")),
        order=int(row.get("order") or 0),
    )


def line_item_to_row(item: LineItem) -> dict[str, Any]:
    """Convert a LineItem into an ``invoice_items`` row, including its amount."""
    row = {
        "description": item.description,
        "quantity": item.quantity,
        "unit_price": item.unit_price,
        "amount": item.amount,
        "order": item.order,
    }
    if item.id:
        row["id"] = item.id
    if item.invoice_id:
        row["invoice_id"] = item.invoice_id
    return row


def invoice_from_row(
    row: Mapping[str, Any], items: Sequence[Mapping[str, Any]] = ()
) -> Invoice:
    """
    Convert a remote ``invoices`` row into an Invoice.

    Args:
        row: Untyped row as returned by the remote store or fixtures.
        items: Optional ``invoice_items`` rows belonging to this invoice.

    Returns:
        Invoice dataclass. Recurrence is only set when ``is_recurring`` is
        true; a missing frequency on a recurring row defaults to monthly.
    """
    data = dict(row)
    if not isinstance(data.get("client"), dict):
        data["client"] = {}
    b = benedict(data, keypath_separator=".")
    recurrence = None
    if b.get("is_recurring"):
        recurrence = Recurrence(b.get("recurring_frequency") or "monthly")

    issue_date = parse_date(b.get("issue_date")) or date.today()
    return Invoice(
        id=str(b.get("id", "")),
        user_id=str(b.get("user_id", "")),
        client_id=_optional_str(b.get("client_id")),
        invoice_number=b.get("invoice_number", ""),
        status=b.get("status") or "draft",
        issue_date=issue_date,
        due_date=parse_date(b.get("due_date")) or issue_date,
        subtotal=_float(b.get("subtotal")),
        tax_rate=_float(b.get("tax_rate")),
        tax_amount=_float(b.get("tax_amount")),
        total=_float(b.get("total")),
        notes=_optional_str(b.get("notes")),
        recurrence=recurrence,
        created_at=parse_datetime(b.get("created_at")),
        updated_at=parse_datetime(b.get("updated_at")),
        client_name=_optional_str(b.get("client_name") or b.get("client.name")),
        client_email=_optional_str(b.get("client_email") or b.get("client.email")),
        items=tuple(
            sorted((line_item_from_row(i) for i in items), key=lambda i: i.order)
        ),
    )


def invoice_to_row(invoice: Invoice) -> dict[str, Any]:
    """Convert an Invoice back into a flat ``invoices`` row (items excluded)."""
    return {
        "id": invoice.id,
        "user_id": invoice.user_id,
        "client_id": invoice.client_id,
        "invoice_number": invoice.invoice_number,
        "status": invoice.status,
        "issue_date": invoice.issue_date.isoformat(),
        "due_date": invoice.due_date.isoformat(),
        "subtotal": invoice.subtotal,
        "tax_rate": invoice.tax_rate,
        "tax_amount": invoice.tax_amount,
        "total": invoice.total,
        "notes": invoice.notes,
        "is_recurring": invoice.is_recurring,
        "recurring_frequency": (
            invoice.recurrence.frequency if invoice.recurrence else None
        ),
        "created_at": invoice.created_at.isoformat() if invoice.created_at else None,
        "updated_at": invoice.updated_at.isoformat() if invoice.updated_at else None,
        "client_name": invoice.client_name,
        "client_email": invoice.client_email,
    }


def client_from_row(row: Mapping[str, Any]) -> Client:
    return Client(
        id=str(row.get("id", "")),
        user_id=str(row.get("user_id", "")),
        name=row.get("name") or "",
        email=row.get("email") or "",
        company_name=_optional_str(row.get("company_name")),
        address=_optional_str(row.get("address")),
        phone=_optional_str(row.get("phone")),
        created_at=parse_datetime(row.get("created_at")),
        updated_at=parse_datetime(row.get("updated_at")),
    )


def payment_from_row(row: Mapping[str, Any]) -> Payment:
    return Payment(
        id=str(row.get("id", "")),
        invoice_id=str(row.get("invoice_id", "")),
        amount=_float(row.get("amount")),
        payment_date=parse_date(row.get("payment_date")) or date.today(),
        payment_method=row.get("payment_method") or "other",
        reference=_optional_str(row.get("reference")),
        notes=_optional_str(row.get("notes")),
        created_at=parse_datetime(row.get("created_at")),
    )


def user_from_row(row: Mapping[str, Any]) -> User:
    return User(
        id=str(row.get("id", "")),
        email=_optional_str(row.get("email")),
        full_name=_optional_str(row.get("full_name")),
        company_name=_optional_str(row.get("company_name")),
        avatar_url=_optional_str(row.get("avatar_url")),
    )


def serialize_invoice(invoice: Invoice) -> dict:
    """Convert an Invoice into a JSON serializable dictionary (items included)."""
    data = invoice_to_row(invoice)
    data["items"] = [asdict(item) | {"amount": item.amount} for item in invoice.items]
    return data
