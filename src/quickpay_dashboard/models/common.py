"""
Common state models for the QuickPay dashboard.

This module defines the immutable snapshots published by the stores:

- InvoiceStoreState: invoice collection, selection, UI flags and filters
- AuthStoreState: current user/session and request status
- DashboardStats: the reductions shown on the dashboard cards

Snapshots are frozen; stores publish a new one on every change so
listeners and memoized selectors can compare by identity.
"""

from dataclasses import dataclass, field

from quickpay_dashboard.models.invoice import Invoice, User

# Where the current invoice list came from.
SOURCE_NONE = "none"
SOURCE_REMOTE = "remote"
SOURCE_FALLBACK = "fallback"

# Why the fixture dataset was substituted.
FALLBACK_ERROR = "error"
FALLBACK_EMPTY = "empty"


@dataclass(frozen=True, slots=True)
class InvoiceStoreState:
    """
    Snapshot of the invoice store.

    Attributes:
        invoices: Invoice collection, newest first when loaded remotely.
        selected_invoice: The invoice shown in the detail modal, if any.
        is_loading: True while any remote request is in flight.
        error: Message of the last failed mutation, if any.
        is_drawer_open: Creation drawer visibility.
        is_modal_open: Detail modal visibility (independent of the drawer).
        filter_status: "all" or one of the invoice statuses.
        search_query: Free text matched against number, client name, email.
        data_source: "none", "remote" or "fallback".
        fallback_reason: "error" or "empty" when data_source is "fallback".
    """

    invoices: tuple[Invoice, ...] = ()
    selected_invoice: Invoice | None = None
    is_loading: bool = False
    error: str | None = None
    is_drawer_open: bool = False
    is_modal_open: bool = False
    filter_status: str = "all"
    search_query: str = ""
    data_source: str = SOURCE_NONE
    fallback_reason: str | None = None

    @property
    def is_fallback(self) -> bool:
        return self.data_source == SOURCE_FALLBACK

    def to_dict(self) -> dict:
        """Summarize the snapshot for log output."""
        return {
            "invoices": len(self.invoices),
            "selected_invoice": self.selected_invoice.id if self.selected_invoice else None,
            "is_loading": self.is_loading,
            "error": self.error,
            "is_drawer_open": self.is_drawer_open,
            "is_modal_open": self.is_modal_open,
            "filter_status": self.filter_status,
            "search_query": self.search_query,
            "data_source": self.data_source,
            "fallback_reason": self.fallback_reason,
        }


@dataclass(frozen=True, slots=True)
class AuthStoreState:
    """Snapshot of the auth store."""

    user: User | None = None
    is_loading: bool = False
    error: str | None = None

    @property
    def user_id(self) -> str | None:
        return self.user.id if self.user else None

    @property
    def is_authenticated(self) -> bool:
        return self.user is not None


@dataclass(frozen=True, slots=True)
class DashboardStats:
    """
    Client-side reductions over the full invoice list.

    Attributes:
        total_received: Sum of totals of paid invoices.
        pending: Sum of totals of sent and overdue invoices.
        drafts: Sum of totals of draft invoices.
        total_invoices: Count of all invoices, ignoring filters.
    """

    total_received: float = 0.0
    pending: float = 0.0
    drafts: float = 0.0
    total_invoices: int = 0
    status_counts: dict[str, int] = field(default_factory=dict)
