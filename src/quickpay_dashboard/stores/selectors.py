"""
Derived views over the invoice store snapshot.

Both selectors are pure and memoized on the identity of their inputs, so
recomputing them on every state change is cheap when the invoice tuple and
filters have not been replaced.
"""

from functools import wraps
from typing import Any, Callable, Sequence

from quickpay_dashboard.models.common import DashboardStats, InvoiceStoreState
from quickpay_dashboard.models.invoice import INVOICE_STATUSES, Invoice
from quickpay_dashboard.utils import matches_query

PENDING_STATUSES = frozenset({"sent", "overdue"})


def memoize_by_identity(func: Callable[..., Any]) -> Callable[..., Any]:
    """Cache the last result, reusing it while every argument is the same object."""
    last_args: tuple | None = None
    last_result: Any = None

    @wraps(func)
    def wrapper(*args: Any) -> Any:
        nonlocal last_args, last_result
        if (
            last_args is not None
            and len(args) == len(last_args)
            and all(a is b for a, b in zip(args, last_args))
        ):
            return last_result
        last_result = func(*args)
        last_args = args
        return last_result

    return wrapper


@memoize_by_identity
def _filter_invoices(
    invoices: tuple[Invoice, ...], status: str, query: str
) -> tuple[Invoice, ...]:
    if status == "all" and not (query or "").strip():
        return invoices
    return tuple(
        invoice
        for invoice in invoices
        if (status == "all" or invoice.status == status) and matches_query(invoice, query)
    )


@memoize_by_identity
def _dashboard_stats(invoices: tuple[Invoice, ...]) -> DashboardStats:
    return compute_dashboard_stats(invoices)


def compute_dashboard_stats(invoices: Sequence[Invoice]) -> DashboardStats:
    """Reduce ``invoices`` to the dashboard card figures."""
    counts = dict.fromkeys(INVOICE_STATUSES, 0)
    received = pending = drafts = 0.0
    for invoice in invoices:
        counts[invoice.status] = counts.get(invoice.status, 0) + 1
        if invoice.status == "paid":
            received += invoice.total
        elif invoice.status in PENDING_STATUSES:
            pending += invoice.total
        elif invoice.status == "draft":
            drafts += invoice.total
    return DashboardStats(
        total_received=round(received, 2),
        pending=round(pending, 2),
        drafts=round(drafts, 2),
        total_invoices=len(invoices),
        status_counts=counts,
    )


def select_filtered_invoices(state: InvoiceStoreState) -> tuple[Invoice, ...]:
    """
    Apply the status filter, then the search query.

    The status filter is an exact match with "all" meaning no filter; the
    query is a case-insensitive substring match on invoice number, client
    name and client email. "all" with an empty query returns the invoice
    tuple itself, order unchanged.
    """
    return _filter_invoices(state.invoices, state.filter_status, state.search_query)


def select_dashboard_stats(state: InvoiceStoreState) -> DashboardStats:
    """Stats over the full invoice list; filters do not apply."""
    return _dashboard_stats(state.invoices)
