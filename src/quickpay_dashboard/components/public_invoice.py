"""
Client-facing invoice page with a pay form.

The pay form only acknowledges submission; no payment is processed.
"""

import reflex as rx

from quickpay_dashboard.components.invoice_detail import invoice_detail
from quickpay_dashboard.state import PublicInvoiceState


def _pay_form() -> rx.Component:
    return rx.box(
        rx.heading("Pay this Invoice", size="4", as_="h3"),
        rx.text("Make payment for this invoice by filling in the details.", class_name="muted"),
        rx.form(
            rx.input(
                name="card_number",
                placeholder="Card number",
                value=PublicInvoiceState.card_number,
                on_change=PublicInvoiceState.set_card_number,
            ),
            rx.box(
                rx.input(
                    name="card_expiry",
                    placeholder="MM / YY",
                    value=PublicInvoiceState.card_expiry,
                    on_change=PublicInvoiceState.set_card_expiry,
                ),
                rx.input(
                    name="card_cvc",
                    placeholder="CVC",
                    value=PublicInvoiceState.card_cvc,
                    on_change=PublicInvoiceState.set_card_cvc,
                ),
                class_name="field-grid",
            ),
            rx.button(
                "PAY " + PublicInvoiceState.invoice.total,
                type="submit",
                width="100%",
                class_name="pay-button",
            ),
            on_submit=PublicInvoiceState.pay,
            class_name="pay-form",
        ),
        class_name="card",
    )


def _not_found() -> rx.Component:
    return rx.box(
        rx.icon("file-x", size=48, class_name="empty-icon"),
        rx.heading("Invoice not found", size="4", as_="h2"),
        rx.text("The invoice you are looking for does not exist.", class_name="muted"),
        class_name="card empty-state",
    )


def public_invoice_page() -> rx.Component:
    """Build the public invoice view for /invoices/[invoice_id]."""
    return rx.box(
        rx.box(
            rx.cond(
                PublicInvoiceState.is_loading,
                rx.box(rx.skeleton(height="20em"), class_name="card"),
                rx.cond(
                    PublicInvoiceState.found,
                    rx.box(
                        rx.box(
                            rx.heading("Invoice from QuickPay", size="5", as_="h1"),
                            invoice_detail(PublicInvoiceState.invoice),
                            class_name="card",
                        ),
                        _pay_form(),
                        class_name="stack",
                    ),
                    _not_found(),
                ),
            ),
            class_name="public-container",
        ),
        class_name="public-shell",
    )
