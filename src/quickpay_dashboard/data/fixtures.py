"""
Static fixture rows used as the offline/demo dataset.

The rows have exactly the shape of remote table rows so they can stand in
for the remote store verbatim: the invoice store falls back to them when a
fetch fails or returns nothing, and DemoTables seeds its in-memory tables
from them.
"""

from dataclasses import dataclass, field
from typing import Any, Sequence

from quickpay_dashboard.models.invoice import (
    Client,
    Invoice,
    LineItem,
    Payment,
    client_from_row,
    invoice_from_row,
    line_item_from_row,
    payment_from_row,
)

DEMO_USER_ID = "1"

MOCK_USERS: list[dict[str, Any]] = [
    {
        "id": DEMO_USER_ID,
        "email": "demo@publicnote.com",
        "full_name": "Jordan Avery",
        "company_name": "Public Note",
        "avatar_url": None,
        "created_at": "2024-06-01T08:00:00+00:00",
        "updated_at": "2024-06-01T08:00:00+00:00",
    }
]

MOCK_CLIENTS: list[dict[str, Any]] = [
    {
        "id": "client-001",
        "user_id": DEMO_USER_ID,
        "name": "Alex Parkinson",
        "email": "alex@email.com",
        "company_name": "Parkinson Legal",
        "address": "18 Harbor St, Boston, MA 02110",
        "phone": "+1 617-555-0142",
        "created_at": "2024-06-10T10:00:00+00:00",
        "updated_at": "2024-06-10T10:00:00+00:00",
    },
    {
        "id": "client-002",
        "user_id": DEMO_USER_ID,
        "name": "Thomas Lee",
        "email": "thomas@email.com",
        "company_name": "Lee & Partners",
        "address": "410 Market St, San Francisco, CA 94105",
        "phone": "+1 415-555-0178",
        "created_at": "2024-06-12T10:00:00+00:00",
        "updated_at": "2024-06-12T10:00:00+00:00",
    },
]

# Newest first, the order the remote store returns them in.
MOCK_INVOICES: list[dict[str, Any]] = [
    {
        "id": "inv-004",
        "user_id": DEMO_USER_ID,
        "client_id": "client-002",
        "invoice_number": "INV-2024-004",
        "status": "draft",
        "issue_date": "2024-11-01",
        "due_date": "2024-12-01",
        "subtotal": 1250.0,
        "tax_rate": 0.0,
        "tax_amount": 0.0,
        "total": 1250.0,
        "notes": "Brand identity package",
        "is_recurring": False,
        "recurring_frequency": None,
        "created_at": "2024-11-01T09:30:00+00:00",
        "updated_at": "2024-11-01T09:30:00+00:00",
        "client_name": "Thomas Lee",
        "client_email": "thomas@email.com",
    },
    {
        "id": "inv-002",
        "user_id": DEMO_USER_ID,
        "client_id": "client-002",
        "invoice_number": "INV-2024-002",
        "status": "sent",
        "issue_date": "2024-10-15",
        "due_date": "2024-11-14",
        "subtotal": 2500.0,
        "tax_rate": 10.0,
        "tax_amount": 250.0,
        "total": 2750.0,
        "notes": "Website redesign",
        "is_recurring": False,
        "recurring_frequency": None,
        "created_at": "2024-10-15T14:00:00+00:00",
        "updated_at": "2024-10-15T14:00:00+00:00",
        "client_name": "Thomas Lee",
        "client_email": "thomas@email.com",
    },
    {
        "id": "inv-001",
        "user_id": DEMO_USER_ID,
        "client_id": "client-001",
        "invoice_number": "INV-2024-001",
        "status": "paid",
        "issue_date": "2024-10-01",
        "due_date": "2024-10-31",
        "subtotal": 1400.0,
        "tax_rate": 0.0,
        "tax_amount": 0.0,
        "total": 1400.0,
        "notes": "Legal consulting",
        "is_recurring": False,
        "recurring_frequency": None,
        "created_at": "2024-10-01T09:00:00+00:00",
        "updated_at": "2024-10-20T16:45:00+00:00",
        "client_name": "Alex Parkinson",
        "client_email": "alex@email.com",
    },
    {
        "id": "inv-003",
        "user_id": DEMO_USER_ID,
        "client_id": "client-001",
        "invoice_number": "INV-2024-003",
        "status": "overdue",
        "issue_date": "2024-09-01",
        "due_date": "2024-10-01",
        "subtotal": 1200.0,
        "tax_rate": 5.0,
        "tax_amount": 60.0,
        "total": 1260.0,
        "notes": "Monthly retainer",
        "is_recurring": True,
        "recurring_frequency": "monthly",
        "created_at": "2024-09-01T08:15:00+00:00",
        "updated_at": "2024-10-02T00:00:00+00:00",
        "client_name": "Alex Parkinson",
        "client_email": "alex@email.com",
    },
    {
        "id": "inv-005",
        "user_id": DEMO_USER_ID,
        "client_id": "client-001",
        "invoice_number": "INV-2024-005",
        "status": "paid",
        "issue_date": "2024-08-10",
        "due_date": "2024-09-09",
        "subtotal": 1050.0,
        "tax_rate": 8.0,
        "tax_amount": 84.0,
        "total": 1134.0,
        "notes": "Team workshop",
        "is_recurring": False,
        "recurring_frequency": None,
        "created_at": "2024-08-10T11:00:00+00:00",
        "updated_at": "2024-09-01T12:00:00+00:00",
        "client_name": "Alex Parkinson",
        "client_email": "alex@email.com",
    },
    {
        "id": "inv-006",
        "user_id": DEMO_USER_ID,
        "client_id": "client-002",
        "invoice_number": "INV-2024-006",
        "status": "cancelled",
        "issue_date": "2024-07-05",
        "due_date": "2024-08-04",
        "subtotal": 300.0,
        "tax_rate": 0.0,
        "tax_amount": 0.0,
        "total": 300.0,
        "notes": None,
        "is_recurring": False,
        "recurring_frequency": None,
        "created_at": "2024-07-05T10:20:00+00:00",
        "updated_at": "2024-07-20T10:20:00+00:00",
        "client_name": "Thomas Lee",
        "client_email": "thomas@email.com",
    },
]

MOCK_INVOICE_ITEMS: list[dict[str, Any]] = [
    {"id": "item-001", "invoice_id": "inv-001", "description": "Legal consultation", "quantity": 2, "unit_price": 500.0, "amount": 1000.0, "order": 0},
    {"id": "item-002", "invoice_id": "inv-001", "description": "Contract review", "quantity": 1, "unit_price": 400.0, "amount": 400.0, "order": 1},
    {"id": "item-003", "invoice_id": "inv-002", "description": "Website redesign", "quantity": 1, "unit_price": 2500.0, "amount": 2500.0, "order": 0},
    {"id": "item-004", "invoice_id": "inv-003", "description": "Monthly retainer", "quantity": 1, "unit_price": 1200.0, "amount": 1200.0, "order": 0},
    {"id": "item-005", "invoice_id": "inv-004", "description": "Logo design", "quantity": 1, "unit_price": 800.0, "amount": 800.0, "order": 0},
    {"id": "item-006", "invoice_id": "inv-004", "description": "Brand guidelines", "quantity": 1, "unit_price": 450.0, "amount": 450.0, "order": 1},
    {"id": "item-007", "invoice_id": "inv-005", "description": "Workshop facilitation", "quantity": 3, "unit_price": 350.0, "amount": 1050.0, "order": 0},
    {"id": "item-008", "invoice_id": "inv-006", "description": "Hosting setup", "quantity": 1, "unit_price": 300.0, "amount": 300.0, "order": 0},
]

MOCK_PAYMENTS: list[dict[str, Any]] = [
    {
        "id": "pay-001",
        "invoice_id": "inv-001",
        "amount": 1400.0,
        "payment_date": "2024-10-20",
        "payment_method": "bank_transfer",
        "reference": "TRX-88213",
        "notes": None,
        "created_at": "2024-10-20T16:45:00+00:00",
    },
    {
        "id": "pay-002",
        "invoice_id": "inv-005",
        "amount": 1134.0,
        "payment_date": "2024-09-01",
        "payment_method": "card",
        "reference": None,
        "notes": "Paid via QuickPay link",
        "created_at": "2024-09-01T12:00:00+00:00",
    },
]


@dataclass(frozen=True)
class FixtureSet:
    """
    A bundle of fixture rows for every table.

    The store and DemoTables take one of these so tests can supply their
    own dataset; ``FixtureSet.default()`` returns the bundled rows.
    """

    invoices: Sequence[dict[str, Any]] = field(default_factory=list)
    invoice_items: Sequence[dict[str, Any]] = field(default_factory=list)
    clients: Sequence[dict[str, Any]] = field(default_factory=list)
    payments: Sequence[dict[str, Any]] = field(default_factory=list)
    users: Sequence[dict[str, Any]] = field(default_factory=list)

    @classmethod
    def default(cls) -> "FixtureSet":
        return cls(
            invoices=MOCK_INVOICES,
            invoice_items=MOCK_INVOICE_ITEMS,
            clients=MOCK_CLIENTS,
            payments=MOCK_PAYMENTS,
            users=MOCK_USERS,
        )

    def tables(self) -> dict[str, Sequence[dict[str, Any]]]:
        """Return the rows keyed by remote table name."""
        return {
            "invoices": self.invoices,
            "invoice_items": self.invoice_items,
            "clients": self.clients,
            "payments": self.payments,
            "users": self.users,
        }

    def load_invoices(self) -> tuple[Invoice, ...]:
        """Return every fixture invoice, in fixture order, without items."""
        return tuple(invoice_from_row(row) for row in self.invoices)

    def get_invoice(self, invoice_id: str) -> Invoice | None:
        """Return one fixture invoice with its line items, or None."""
        for row in self.invoices:
            if str(row.get("id")) == invoice_id:
                items = [i for i in self.invoice_items if i.get("invoice_id") == invoice_id]
                return invoice_from_row(row, items)
        return None

    def get_items(self, invoice_id: str) -> list[LineItem]:
        rows = [i for i in self.invoice_items if i.get("invoice_id") == invoice_id]
        return sorted((line_item_from_row(r) for r in rows), key=lambda i: i.order)

    def get_client(self, client_id: str) -> Client | None:
        for row in self.clients:
            if str(row.get("id")) == client_id:
                return client_from_row(row)
        return None

    def get_payments(self, invoice_id: str) -> list[Payment]:
        return [
            payment_from_row(row)
            for row in self.payments
            if row.get("invoice_id") == invoice_id
        ]


_DEFAULT = FixtureSet.default()


def load_mock_invoices() -> tuple[Invoice, ...]:
    """Return the bundled fixture invoices."""
    return _DEFAULT.load_invoices()


def get_mock_invoice_with_items(invoice_id: str) -> tuple[Invoice, list[LineItem]] | None:
    """Return a bundled invoice and its line items, or None when unknown."""
    invoice = _DEFAULT.get_invoice(invoice_id)
    if invoice is None:
        return None
    return invoice, list(invoice.items)


def get_mock_client(client_id: str) -> Client | None:
    return _DEFAULT.get_client(client_id)


def get_mock_payments(invoice_id: str) -> list[Payment]:
    return _DEFAULT.get_payments(invoice_id)
