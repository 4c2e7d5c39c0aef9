"""
Tests for the display models rendered by the Reflex components.
"""

from __future__ import annotations

from quickpay_dashboard.data.fixtures import FixtureSet
from quickpay_dashboard.models.invoice import client_from_row, invoice_from_row
from quickpay_dashboard.models.reflex_models import (
    client_to_option,
    invoice_to_model,
    payment_to_model,
)

from tests.conftest import make_row

class TestInvoiceToModel:
    """Tests for invoice_to_model"""

    def test_display_strings(self, fixture_set: FixtureSet) -> None:
        model = invoice_to_model(fixture_set.get_invoice("inv-002"))
        assert model.status_label == "Pending"
        assert model.status_color == "blue"
        assert model.total == "$2,750.00"
        assert (model.total_dollars, model.total_cents) == ("$2,750", "00")
        assert model.tax_rate == "10%"
        assert model.due == "November 14, 2024"
        assert model.items[0].amount == "$2,500.00"
        assert model.is_past_due

    def test_missing_client_and_notes(self) -> None:
        model = invoice_to_model(invoice_from_row(make_row("a", status="paid")))
        assert model.client_name == "Unknown Client"
        assert model.notes_preview == ""
        assert not model.is_past_due

    def test_long_notes_are_previewed(self) -> None:
        model = invoice_to_model(invoice_from_row(make_row("a", notes="x" * 60)))
        assert model.notes_preview == "x" * 40 + "..."


class TestReferenceModels:
    """Tests for payment and client option models"""

    def test_payment(self, fixture_set: FixtureSet) -> None:
        payment = fixture_set.get_payments("inv-001")[0]
        model = payment_to_model(payment, "INV-2024-001")
        assert model.method == "Bank Transfer"
        assert model.amount == "$1,400.00"
        assert model.paid_on == "Oct 20, 2024"

    def test_client_option(self, fixture_set: FixtureSet) -> None:
        option = client_to_option(client_from_row(fixture_set.clients[0]))
        assert option.value == "client-001"
        assert option.label == "Alex Parkinson (alex@email.com)"
