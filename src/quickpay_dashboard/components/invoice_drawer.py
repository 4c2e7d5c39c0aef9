"""
Invoice creation drawer.

The form keeps its own state (InvoiceFormState); the drawer's visibility
belongs to the invoice store and is mirrored through DashboardState.
"""

import reflex as rx

from quickpay_dashboard.state import DashboardState, InvoiceFormState


def _field_error(key: str) -> rx.Component:
    return rx.cond(
        InvoiceFormState.errors.contains(key),
        rx.text(InvoiceFormState.errors[key], class_name="field-error"),
    )


def _labelled_input(label: str, key: str, **props) -> rx.Component:
    return rx.box(
        rx.text(label, as_="label", class_name="field-label"),
        rx.input(**props),
        _field_error(key),
        class_name="field",
    )


def _item_editor(item: rx.Var, index: rx.Var) -> rx.Component:
    return rx.box(
        rx.box(
            rx.input(
                placeholder="Item description",
                value=item["description"],
                on_change=lambda value: InvoiceFormState.set_item_field(
                    index, "description", value
                ),
                class_name="item-description",
            ),
            rx.input(
                type="number",
                placeholder="Qty",
                min="1",
                value=item["quantity"],
                on_change=lambda value: InvoiceFormState.set_item_field(
                    index, "quantity", value
                ),
                class_name="item-quantity",
            ),
            rx.input(
                type="number",
                placeholder="Price",
                step="0.01",
                min="0",
                value=item["unit_price"],
                on_change=lambda value: InvoiceFormState.set_item_field(
                    index, "unit_price", value
                ),
                class_name="item-price",
            ),
            rx.input(
                value=InvoiceFormState.item_amounts[index],
                disabled=True,
                class_name="item-amount",
            ),
            rx.cond(
                InvoiceFormState.can_remove_items,
                rx.icon_button(
                    rx.icon("x", size=16),
                    variant="ghost",
                    type="button",
                    on_click=InvoiceFormState.remove_item(index),
                ),
            ),
            class_name="item-row",
        ),
        rx.cond(
            InvoiceFormState.item_errors[index] != "",
            rx.text(InvoiceFormState.item_errors[index], class_name="field-error"),
        ),
        class_name="item-editor surface",
    )


def _totals() -> rx.Component:
    return rx.box(
        rx.box(rx.text("Subtotal"), rx.text(InvoiceFormState.subtotal_display), class_name="totals-row"),
        rx.box(
            rx.box(
                rx.text("Tax (%)"),
                rx.input(
                    type="number",
                    min="0",
                    max="100",
                    step="0.01",
                    value=InvoiceFormState.tax_rate,
                    on_change=InvoiceFormState.set_tax_rate,
                    class_name="tax-input",
                ),
                class_name="tax-field",
            ),
            rx.text(InvoiceFormState.tax_display),
            class_name="totals-row",
        ),
        _field_error("tax_rate"),
        rx.box(
            rx.text("Total"),
            rx.text(InvoiceFormState.total_display, class_name="total-amount"),
            class_name="totals-row emphasize",
        ),
        _field_error("total"),
        class_name="totals",
    )


def _form_body() -> rx.Component:
    return rx.box(
        rx.box(
            rx.text("Recipient", as_="label", class_name="field-label"),
            rx.select.root(
                rx.select.trigger(placeholder="Select a client", width="100%"),
                rx.select.content(
                    rx.foreach(
                        InvoiceFormState.client_options,
                        lambda option: rx.select.item(option.label, value=option.value),
                    )
                ),
                value=InvoiceFormState.client_id,
                on_change=InvoiceFormState.set_client_id,
            ),
            _field_error("client_email"),
            class_name="field",
        ),
        _labelled_input(
            "Project / Description",
            "notes",
            placeholder="e.g., Legal Consulting",
            value=InvoiceFormState.notes,
            on_change=InvoiceFormState.set_notes,
        ),
        rx.box(
            _labelled_input(
                "Issued on",
                "issue_date",
                type="date",
                value=InvoiceFormState.issue_date,
                on_change=InvoiceFormState.set_issue_date,
            ),
            _labelled_input(
                "Due on",
                "due_date",
                type="date",
                value=InvoiceFormState.due_date,
                on_change=InvoiceFormState.set_due_date,
            ),
            class_name="field-grid",
        ),
        rx.checkbox(
            "This is a recurring invoice (monthly)",
            checked=InvoiceFormState.is_recurring,
            on_change=InvoiceFormState.set_is_recurring,
        ),
        rx.box(
            rx.text("Items", as_="label", class_name="field-label"),
            rx.foreach(InvoiceFormState.items, _item_editor),
            _field_error("items"),
            rx.button(
                rx.icon("plus", size=14),
                "ADD ITEM",
                variant="ghost",
                type="button",
                on_click=InvoiceFormState.add_item,
            ),
            class_name="field",
        ),
        _totals(),
        class_name="drawer-body",
    )


def invoice_drawer() -> rx.Component:
    """Build the right-hand creation drawer."""
    return rx.drawer.root(
        rx.drawer.overlay(),
        rx.drawer.portal(
            rx.drawer.content(
                rx.box(
                    rx.drawer.title("Create new invoice"),
                    rx.text(InvoiceFormState.invoice_number, class_name="drawer-number"),
                    rx.drawer.close(
                        rx.icon_button(rx.icon("x", size=18), variant="ghost")
                    ),
                    class_name="drawer-header",
                ),
                _form_body(),
                rx.box(
                    rx.cond(
                        InvoiceFormState.form_error != "",
                        rx.text(InvoiceFormState.form_error, class_name="field-error"),
                    ),
                    rx.box(
                        rx.button(
                            "CANCEL",
                            variant="outline",
                            type="button",
                            on_click=DashboardState.close_drawer,
                        ),
                        rx.button(
                            "CREATE INVOICE",
                            loading=InvoiceFormState.is_submitting,
                            on_click=InvoiceFormState.submit,
                            class_name="primary-button",
                        ),
                        class_name="drawer-actions",
                    ),
                    class_name="drawer-footer",
                ),
                class_name="drawer-panel",
            )
        ),
        direction="right",
        open=DashboardState.is_drawer_open,
        on_open_change=DashboardState.on_drawer_open_change,
    )
