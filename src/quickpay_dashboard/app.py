"""
Reflex application entry point for the QuickPay dashboard.

This module initializes the Reflex app and registers the pages:

- ``/``: dashboard stats, QuickPay link and invoice list
- ``/payments``: stats, recorded payments and the invoice list
- ``/invoices/[invoice_id]``: public invoice view with a pay form
"""

import reflex as rx

from quickpay_dashboard.components.dashboard_cards import quickpay_card, total_received_card
from quickpay_dashboard.components.invoice_detail import invoice_modal
from quickpay_dashboard.components.invoice_drawer import invoice_drawer
from quickpay_dashboard.components.invoice_table import invoice_table
from quickpay_dashboard.components.layout import dashboard_layout
from quickpay_dashboard.components.payments import payments_overview
from quickpay_dashboard.components.public_invoice import public_invoice_page
from quickpay_dashboard.lib import logs
from quickpay_dashboard.state import DashboardState, PublicInvoiceState
from quickpay_dashboard.stores import get_settings

LOG = logs.logger(__file__)

_FONT_URL = "https://fonts.googleapis.com/css2?family=Inter:wght@300;400;500;600;700&display=swap"


def index() -> rx.Component:
    """
    Build the dashboard page.

    Returns:
        The page with stats cards, the invoice table, modal and drawer.
    """
    return dashboard_layout(
        "Dashboard",
        rx.box(total_received_card(), quickpay_card(), class_name="card-grid"),
        invoice_table(),
        invoice_modal(),
        invoice_drawer(),
    )


def payments() -> rx.Component:
    return dashboard_layout(
        "Payments",
        payments_overview(),
        invoice_table(),
        invoice_modal(),
        invoice_drawer(),
    )


def public_invoice() -> rx.Component:
    return public_invoice_page()


# Create the Reflex app
app = rx.App(
    theme=rx.theme(
        appearance="light",
        has_background=True,
        radius="large",
        accent_color="blue",
    ),
    stylesheets=[
        _FONT_URL,
        "/styles.css",
    ],
)

_TITLE = get_settings().app_title

app.add_page(index, route="/", title=_TITLE, on_load=DashboardState.on_load)
app.add_page(
    payments,
    route="/payments",
    title=f"Payments | {_TITLE}",
    on_load=[DashboardState.on_load, DashboardState.load_payments],
)
app.add_page(
    public_invoice,
    route="/invoices/[invoice_id]",
    title=f"Invoice | {_TITLE}",
    on_load=PublicInvoiceState.on_load,
)


def main() -> None:
    """Entrypoint used by `quickpay-dashboard`; runs `reflex run` on the app port."""
    import subprocess
    import sys

    settings = get_settings()
    LOG.info("Starting QuickPay dashboard - backend:%s port:%s", settings.backend, settings.app_port)
    subprocess.run(
        [sys.executable, "-m", "reflex", "run", "--backend-port", str(settings.app_port)],
        check=False,
    )


if __name__ == "__main__":
    main()
