"""
Data models and row conversion helpers for the QuickPay dashboard.

This package provides:
- Invoice domain models (Invoice, LineItem, Client, Payment, User)
- Store snapshot and derived view models (InvoiceStoreState, DashboardStats)
- Conversion between untyped remote rows and dataclasses

All models use Python dataclasses; Reflex view models live separately in
``reflex_models`` so the core can be used without the UI framework.
"""

from quickpay_dashboard.models.common import DashboardStats, InvoiceStoreState
from quickpay_dashboard.models.invoice import (
    FILTER_STATUSES,
    INVOICE_STATUSES,
    PAYMENT_METHODS,
    RECURRING_FREQUENCIES,
    Client,
    Invoice,
    LineItem,
    Payment,
    Recurrence,
    User,
    client_from_row,
    invoice_from_row,
    invoice_to_row,
    line_item_from_row,
    line_item_to_row,
    payment_from_row,
    serialize_invoice,
    user_from_row,
)

__all__ = [
    "FILTER_STATUSES",
    "INVOICE_STATUSES",
    "PAYMENT_METHODS",
    "RECURRING_FREQUENCIES",
    "Client",
    "DashboardStats",
    "Invoice",
    "InvoiceStoreState",
    "LineItem",
    "Payment",
    "Recurrence",
    "User",
    "client_from_row",
    "invoice_from_row",
    "invoice_to_row",
    "line_item_from_row",
    "line_item_to_row",
    "payment_from_row",
    "serialize_invoice",
    "user_from_row",
]
