"""
Invoice list: search box, status filter, and the clickable table rows.
"""

import reflex as rx

from quickpay_dashboard.models.invoice import FILTER_STATUSES
from quickpay_dashboard.models.reflex_models import InvoiceModel
from quickpay_dashboard.state import FILTER_LABELS, DashboardState


def status_badge(label: rx.Var, color: rx.Var, status: rx.Var) -> rx.Component:
    """Dot (or check mark for paid) followed by the status label."""
    return rx.box(
        rx.cond(
            status == "paid",
            rx.icon("check", size=16, class_name="status-icon"),
            rx.box(class_name="status-dot"),
        ),
        rx.text(label, class_name="status-label"),
        class_name="status-badge",
        data_color=color,
    )


def _search_bar() -> rx.Component:
    return rx.box(
        rx.box(
            rx.icon("search", class_name="input-icon"),
            rx.input(
                placeholder="Search an invoice",
                value=DashboardState.search_query,
                on_change=DashboardState.search,
                class_name="search-input",
                debounce=300,
            ),
            class_name="input-with-icon",
        ),
        rx.select.root(
            rx.select.trigger(placeholder="Show all"),
            rx.select.content(
                *[
                    rx.select.item(FILTER_LABELS[status], value=status)
                    for status in FILTER_STATUSES
                ]
            ),
            value=DashboardState.filter_status,
            on_change=DashboardState.set_filter,
        ),
        class_name="table-toolbar",
    )


def invoice_row(invoice: InvoiceModel) -> rx.Component:
    """Build one table row; clicking it opens the detail modal."""
    return rx.table.row(
        rx.table.cell(
            rx.text(invoice.invoice_number, class_name="strong"),
            rx.cond(
                invoice.notes_preview != "",
                rx.text(invoice.notes_preview, class_name="muted small"),
            ),
        ),
        rx.table.cell(rx.text(invoice.created, class_name="muted")),
        rx.table.cell(
            rx.text(invoice.client_name, class_name="strong"),
            rx.cond(
                invoice.client_email != "",
                rx.text(invoice.client_email, class_name="muted small"),
            ),
        ),
        rx.table.cell(
            rx.text(
                rx.text.span(invoice.total_dollars),
                rx.text.span("." + invoice.total_cents, class_name="cents"),
                class_name="amount",
            ),
            class_name="align-right",
        ),
        rx.table.cell(
            status_badge(invoice.status_label, invoice.status_color, invoice.status),
            class_name="align-right",
        ),
        on_click=DashboardState.open_invoice(invoice.id),
        class_name="invoice-row",
    )


def _empty_row() -> rx.Component:
    return rx.table.row(
        rx.table.cell(
            rx.cond(DashboardState.is_loading, "Loading invoices...", "No invoices found"),
            col_span=5,
            class_name="empty-cell",
        )
    )


def invoice_table() -> rx.Component:
    """
    Build the invoice card with header, toolbar and table.

    Returns:
        The invoice table component.
    """
    return rx.box(
        rx.box(
            rx.heading("Invoices", size="4", as_="h2"),
            rx.text("List of all of your recent transactions.", class_name="muted"),
            class_name="card-header",
        ),
        _search_bar(),
        rx.table.root(
            rx.table.header(
                rx.table.row(
                    rx.table.column_header_cell("No."),
                    rx.table.column_header_cell("Date"),
                    rx.table.column_header_cell("Client"),
                    rx.table.column_header_cell("Amount", class_name="align-right"),
                    rx.table.column_header_cell("Status", class_name="align-right"),
                )
            ),
            rx.table.body(
                rx.cond(
                    DashboardState.invoice_count == 0,
                    _empty_row(),
                    rx.foreach(DashboardState.invoices, invoice_row),
                )
            ),
            width="100%",
        ),
        class_name="card invoice-table",
    )
