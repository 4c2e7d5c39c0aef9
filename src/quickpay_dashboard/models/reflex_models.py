"""
Reflex-compatible models for the QuickPay dashboard.

These models extend rx.Base so they can be used with rx.foreach and other
Reflex reactive components. Display strings (money, dates, status labels)
are rendered here in Python; components only place them.
"""

import reflex as rx

from quickpay_dashboard.models.invoice import Client, Invoice, LineItem, Payment
from quickpay_dashboard.utils import (
    check_invoice_status,
    format_currency,
    format_date,
    status_color,
    status_label,
    truncate,
)


class LineItemModel(rx.Base):
    """Line item row of the detail views."""

    description: str = ""
    quantity: int = 0
    unit_price: str = ""
    amount: str = ""


class InvoiceModel(rx.Base):
    """Invoice as shown in the table, the detail modal and the public page."""

    id: str = ""
    invoice_number: str = ""
    status: str = "draft"
    status_label: str = ""
    status_color: str = "gray"
    created: str = ""
    issued: str = ""
    due: str = ""
    client_name: str = ""
    client_email: str = ""
    notes: str = ""
    notes_preview: str = ""
    is_past_due: bool = False
    recurring: str = ""
    subtotal: str = ""
    tax: str = ""
    tax_rate: str = ""
    total: str = ""
    total_dollars: str = ""
    total_cents: str = ""
    items: list[LineItemModel] = []


class PaymentModel(rx.Base):
    """Recorded payment row."""

    id: str = ""
    invoice_number: str = ""
    amount: str = ""
    method: str = ""
    paid_on: str = ""
    reference: str = ""


class ClientOptionModel(rx.Base):
    """Entry of the recipient select in the creation drawer."""

    value: str = ""
    label: str = ""
    name: str = ""
    email: str = ""


def line_item_to_model(item: LineItem) -> LineItemModel:
    return LineItemModel(
        description=item.description,
        quantity=item.quantity,
        unit_price=format_currency(item.unit_price),
        amount=format_currency(item.amount),
    )


def invoice_to_model(invoice: Invoice) -> InvoiceModel:
    """
    Convert an Invoice to an InvoiceModel.

    Args:
        invoice: Domain invoice, with or without line items.

    Returns:
        InvoiceModel instance.
    """
    total = format_currency(invoice.total)
    dollars, _, cents = total.partition(".")
    return InvoiceModel(
        id=invoice.id,
        invoice_number=invoice.invoice_number,
        status=invoice.status,
        status_label=status_label(invoice.status),
        status_color=status_color(invoice.status),
        created=format_date(invoice.created_at or invoice.issue_date),
        issued=format_date(invoice.issue_date or invoice.created_at, "long"),
        due=format_date(invoice.due_date, "long"),
        client_name=invoice.client_name or "Unknown Client",
        client_email=invoice.client_email or "",
        notes=invoice.notes or "",
        notes_preview=truncate(invoice.notes or "", 40),
        is_past_due=invoice.status == "sent"
        and check_invoice_status(invoice.status, invoice.due_date, False) == "overdue",
        recurring=invoice.recurrence.frequency if invoice.recurrence else "",
        subtotal=format_currency(invoice.subtotal),
        tax=format_currency(invoice.tax_amount),
        tax_rate=f"{invoice.tax_rate:g}%",
        total=total,
        total_dollars=dollars,
        total_cents=cents or "00",
        items=[line_item_to_model(item) for item in invoice.items],
    )


def payment_to_model(payment: Payment, invoice_number: str = "") -> PaymentModel:
    return PaymentModel(
        id=payment.id,
        invoice_number=invoice_number,
        amount=format_currency(payment.amount),
        method=payment.payment_method.replace("_", " ").title(),
        paid_on=format_date(payment.payment_date),
        reference=payment.reference or "",
    )


def client_to_option(client: Client) -> ClientOptionModel:
    label = f"{client.name} ({client.email})" if client.email else client.name
    return ClientOptionModel(
        value=client.id, label=label, name=client.name, email=client.email or ""
    )
