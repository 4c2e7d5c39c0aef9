"""
Payments page content: recorded payments and the invoice list.
"""

import reflex as rx

from quickpay_dashboard.components.dashboard_cards import quickpay_card, total_received_card
from quickpay_dashboard.models.reflex_models import PaymentModel
from quickpay_dashboard.state import DashboardState


def _payment_row(payment: PaymentModel) -> rx.Component:
    return rx.table.row(
        rx.table.cell(payment.paid_on),
        rx.table.cell(rx.text(payment.invoice_number, class_name="strong")),
        rx.table.cell(payment.method),
        rx.table.cell(payment.reference),
        rx.table.cell(rx.text(payment.amount, class_name="strong"), class_name="align-right"),
    )


def payments_table() -> rx.Component:
    return rx.box(
        rx.box(
            rx.heading("Payments", size="4", as_="h2"),
            rx.text("Payments recorded against your invoices.", class_name="muted"),
            class_name="card-header",
        ),
        rx.table.root(
            rx.table.header(
                rx.table.row(
                    rx.table.column_header_cell("Date"),
                    rx.table.column_header_cell("Invoice"),
                    rx.table.column_header_cell("Method"),
                    rx.table.column_header_cell("Reference"),
                    rx.table.column_header_cell("Amount", class_name="align-right"),
                )
            ),
            rx.table.body(rx.foreach(DashboardState.payments, _payment_row)),
            width="100%",
        ),
        class_name="card",
    )


def payments_overview() -> rx.Component:
    return rx.box(
        rx.box(total_received_card(), quickpay_card(), class_name="card-grid"),
        payments_table(),
        class_name="stack",
    )
