"""
Invoice detail body shared by the dashboard modal and the public page,
and the modal that wraps it.
"""

import reflex as rx

from quickpay_dashboard.models.reflex_models import InvoiceModel, LineItemModel
from quickpay_dashboard.state import DashboardState

SENDER_ADDRESS = ["340 S LEMON AVE #1950", "Walnut, California", "United States 91789"]


def _labelled(label: str, value: rx.Var) -> rx.Component:
    return rx.box(
        rx.text(label, class_name="label"),
        rx.text(value, class_name="value"),
        class_name="info-block",
    )


def _item_row(item: LineItemModel) -> rx.Component:
    return rx.table.row(
        rx.table.cell(item.description),
        rx.table.cell(item.quantity, class_name="align-center"),
        rx.table.cell(item.unit_price, class_name="align-right"),
        rx.table.cell(rx.text(item.amount, class_name="strong"), class_name="align-right"),
    )


def _items_table(invoice: InvoiceModel) -> rx.Component:
    return rx.cond(
        invoice.items.length() > 0,
        rx.table.root(
            rx.table.header(
                rx.table.row(
                    rx.table.column_header_cell("Item"),
                    rx.table.column_header_cell("Qty", class_name="align-center"),
                    rx.table.column_header_cell("Price", class_name="align-right"),
                    rx.table.column_header_cell("Total Price", class_name="align-right"),
                )
            ),
            rx.table.body(rx.foreach(invoice.items, _item_row)),
            width="100%",
        ),
        rx.text("No line items recorded.", class_name="muted"),
    )


def invoice_detail(invoice: InvoiceModel) -> rx.Component:
    """
    Build the printable invoice body.

    Args:
        invoice: InvoiceModel var to render.
    """
    return rx.box(
        rx.box(
            rx.box(
                rx.heading(invoice.invoice_number, size="7", as_="h2"),
                rx.cond(
                    invoice.recurring != "",
                    rx.badge("Recurring: " + invoice.recurring, variant="soft"),
                ),
            ),
            rx.box(
                rx.text("QuickPay", class_name="strong"),
                *[rx.text(line, class_name="muted small") for line in SENDER_ADDRESS],
                class_name="align-right",
            ),
            class_name="detail-header",
        ),
        rx.box(
            _labelled("Issued on", invoice.issued),
            _labelled("Due on", invoice.due),
            rx.cond(
                invoice.is_past_due,
                rx.badge("Past due", color_scheme="red", variant="soft"),
            ),
            class_name="info-grid",
        ),
        rx.box(
            rx.text("Invoice for", class_name="label"),
            rx.text(invoice.client_name, class_name="strong"),
            rx.text(invoice.client_email, class_name="muted"),
            class_name="detail-section",
        ),
        _items_table(invoice),
        rx.cond(
            invoice.notes != "",
            rx.box(
                rx.text("Additional Notes", class_name="label"),
                rx.text(invoice.notes),
                class_name="notes surface",
            ),
        ),
        rx.box(
            rx.box(rx.text("Subtotal"), rx.text(invoice.subtotal), class_name="totals-row"),
            rx.box(
                rx.text("Tax (", invoice.tax_rate, ")"),
                rx.text(invoice.tax),
                class_name="totals-row",
            ),
            rx.box(
                rx.text("Total Amount", class_name="label"),
                rx.text(invoice.total, class_name="total-amount"),
                class_name="totals-row emphasize",
            ),
            class_name="totals",
        ),
        class_name="invoice-detail",
    )


ATTACHMENT_UPLOAD_ID = "invoice-attachment"


def _attachment_upload() -> rx.Component:
    return rx.box(
        rx.upload(
            rx.text("Drop a file here or click to attach it", class_name="muted small"),
            id=ATTACHMENT_UPLOAD_ID,
            multiple=False,
            on_drop=DashboardState.upload_attachment(
                rx.upload_files(upload_id=ATTACHMENT_UPLOAD_ID)
            ),
            class_name="attachment-drop",
        ),
        rx.cond(
            DashboardState.attachment_url != "",
            rx.link(
                rx.icon("paperclip", size=14),
                "View attachment",
                href=DashboardState.attachment_url,
                is_external=True,
                class_name="text-link",
            ),
        ),
        class_name="detail-section",
    )


def invoice_modal() -> rx.Component:
    """Detail dialog bound to the store's modal flag and selection."""
    return rx.dialog.root(
        rx.dialog.content(
            rx.box(
                rx.dialog.title("Invoice Details"),
                rx.box(
                    DashboardState.selected.status_label,
                    class_name="status-badge",
                    data_color=DashboardState.selected.status_color,
                ),
                class_name="dialog-header",
            ),
            rx.cond(
                DashboardState.has_selection,
                invoice_detail(DashboardState.selected),
                rx.skeleton(height="12em"),
            ),
            _attachment_upload(),
            rx.box(
                rx.link(
                    rx.icon("external-link", size=14),
                    "OPEN PUBLIC PAGE",
                    href="/invoices/" + DashboardState.selected.id,
                    is_external=True,
                    class_name="text-link",
                ),
                rx.box(
                    rx.button(
                        "DELETE",
                        color_scheme="red",
                        variant="soft",
                        on_click=DashboardState.delete_selected,
                    ),
                    rx.cond(
                        DashboardState.selected.status != "paid",
                        rx.button(
                            "MARK AS PAID",
                            variant="soft",
                            on_click=DashboardState.mark_selected_paid,
                        ),
                    ),
                    rx.button("CLOSE", variant="outline", on_click=DashboardState.close_modal),
                    class_name="dialog-actions",
                ),
                class_name="dialog-footer",
            ),
            max_width="760px",
        ),
        open=DashboardState.is_modal_open,
        on_open_change=DashboardState.on_modal_open_change,
    )
