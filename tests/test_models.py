"""
Tests for row conversion in the invoice models.
"""

from __future__ import annotations

from datetime import date, timezone

from quickpay_dashboard.models.invoice import (
    LineItem,
    Recurrence,
    invoice_from_row,
    invoice_to_row,
    line_item_to_row,
    payment_from_row,
    serialize_invoice,
    user_from_row,
)

from tests.conftest import make_row


class TestInvoiceFromRow:
    """Tests for invoice_from_row"""

    def test_flat_row(self) -> None:
        invoice = invoice_from_row(
            make_row("a", status="sent", total=250.5, client_name="Ada", client_email="ada@x.io")
        )
        assert invoice.id == "a"
        assert invoice.status == "sent"
        assert invoice.total == 250.5
        assert invoice.issue_date == date(2024, 10, 1)
        assert invoice.created_at.tzinfo == timezone.utc
        assert invoice.client_name == "Ada"
        assert invoice.recurrence is None

    def test_nested_client(self) -> None:
        invoice = invoice_from_row(
            make_row("a", client={"name": "Nested Co", "email": "billing@nested.co"})
        )
        assert invoice.client_name == "Nested Co"
        assert invoice.client_email == "billing@nested.co"

    def test_null_client_and_missing_fields(self) -> None:
        invoice = invoice_from_row({"id": 7, "issue_date": "2024-05-01", "client": None})
        assert invoice.id == "7"
        assert invoice.status == "draft"
        assert invoice.due_date == date(2024, 5, 1)
        assert invoice.client_name is None
        assert invoice.total == 0.0

    def test_recurrence(self) -> None:
        recurring = invoice_from_row(make_row("a", is_recurring=True, recurring_frequency=None))
        assert recurring.recurrence == Recurrence("monthly")
        assert recurring.is_recurring

        weekly = invoice_from_row(make_row("b", is_recurring=True, recurring_frequency="weekly"))
        assert weekly.recurrence == Recurrence("weekly")

        stale = invoice_from_row(make_row("c", is_recurring=False, recurring_frequency="weekly"))
        assert stale.recurrence is None

    def test_items_sorted_by_order(self) -> None:
        items = [
            {"id": "i2", "description": "Second", "quantity": 1, "unit_price": 5, "order": 1},
            {"id": "i1", "description": "First", "quantity": "2", "unit_price": "10", "order": 0},
        ]
        invoice = invoice_from_row(make_row("a"), items)
        assert [item.description for item in invoice.items] == ["First", "Second"]
        assert invoice.items[0].amount == 20


class TestRowsOut:
    """Tests for the row and JSON producers"""

    def test_invoice_to_row(self) -> None:
        row = invoice_to_row(invoice_from_row(make_row("a", is_recurring=True)))
        assert row["issue_date"] == "2024-10-01"
        assert row["is_recurring"] is True
        assert row["recurring_frequency"] == "monthly"
        assert row["created_at"].startswith("2024-10-01T09:00:00")

    def test_line_item_row_carries_amount(self) -> None:
        row = line_item_to_row(LineItem("Design", 3, 120.0, order=2))
        assert row == {
            "description": "Design",
            "quantity": 3,
            "unit_price": 120.0,
            "amount": 360.0,
            "order": 2,
        }

    def test_serialize_invoice_includes_items(self) -> None:
        invoice = invoice_from_row(
            make_row("a"), [{"description": "X", "quantity": 2, "unit_price": 3}]
        )
        data = serialize_invoice(invoice)
        assert data["items"][0]["amount"] == 6
        assert data["id"] == "a"


class TestReferenceRows:
    """Tests for payment and user rows"""

    def test_payment_defaults(self) -> None:
        payment = payment_from_row({"id": "p", "invoice_id": "a", "amount": "12.5"})
        assert payment.amount == 12.5
        assert payment.payment_method == "other"

    def test_user(self) -> None:
        user = user_from_row({"id": 1, "email": "me@x.io", "full_name": ""})
        assert user.id == "1"
        assert user.full_name is None
