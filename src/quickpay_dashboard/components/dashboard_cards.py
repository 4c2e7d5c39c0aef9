"""
Dashboard summary cards: total received with pending/drafts, and the
QuickPay link card.
"""

import reflex as rx

from quickpay_dashboard.state import DashboardState


def _side_figure(label: str, dot_class: str, value: rx.Var) -> rx.Component:
    return rx.box(
        rx.box(
            rx.box(class_name=f"status-dot {dot_class}"),
            rx.text(label, class_name="label"),
            class_name="figure-label",
        ),
        rx.text(value, class_name="figure-value"),
        class_name="side-figure",
    )


def total_received_card() -> rx.Component:
    """
    Build the large stats card.

    The amount is split so the cents render in a lighter weight.
    """
    return rx.cond(
        DashboardState.is_loading & (DashboardState.total_invoices == 0),
        rx.box(rx.skeleton(height="8em"), class_name="card stats-card"),
        rx.box(
            rx.box(
                rx.text("TOTAL RECEIVED", class_name="label"),
                rx.text(
                    rx.text.span(DashboardState.total_received_parts[0]),
                    rx.text.span(
                        "." + DashboardState.total_received_parts[1], class_name="cents"
                    ),
                    class_name="stats-amount",
                ),
                rx.text(
                    DashboardState.total_invoices,
                    " invoices in total",
                    class_name="muted",
                ),
                class_name="stats-main",
            ),
            rx.box(
                _side_figure("Pending", "blue", DashboardState.pending),
                _side_figure("In drafts", "orange", DashboardState.drafts),
                class_name="stats-side",
            ),
            class_name="card stats-card",
        ),
    )


def quickpay_card() -> rx.Component:
    """Build the card advertising the user's QuickPay payment link."""
    return rx.box(
        rx.box(
            rx.box(rx.icon("zap", size=20), class_name="quickpay-mark"),
            rx.box(
                rx.heading(DashboardState.quickpay_link, size="3", as_="h3"),
                rx.text(
                    "Quickpay lets you receive payments on the fly. You can generate "
                    "invoice or share the payment link to request the payment.",
                    class_name="muted",
                ),
                rx.link("LEARN MORE", href="#", class_name="text-link"),
            ),
            class_name="quickpay-header",
        ),
        rx.box(
            rx.icon_button(rx.icon("pencil", size=16), variant="ghost"),
            rx.icon_button(
                rx.icon("copy", size=16),
                variant="ghost",
                on_click=DashboardState.copy_quickpay_link,
                title="Copy link",
            ),
            class_name="quickpay-actions",
        ),
        class_name="card quickpay-card",
    )
