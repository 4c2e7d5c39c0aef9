"""
Utility functions for invoice data manipulation and formatting.

Provides helpers for:
- Date parsing (ISO and m/d/y formats) and display formatting
- Currency formatting
- Search query matching against invoice fields
- Status presentation and overdue detection
"""

from datetime import date, datetime, timezone
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from quickpay_dashboard.models.invoice import Invoice

STATUS_LABELS = {
    "draft": "Draft",
    "sent": "Pending",
    "paid": "Paid",
    "overdue": "Overdue",
    "cancelled": "Cancelled",
}

STATUS_COLORS = {
    "draft": "orange",
    "sent": "blue",
    "paid": "green",
    "overdue": "red",
    "cancelled": "gray",
}


def parse_datetime(value: Any) -> datetime | None:
    """
    Parse a timestamp from the remote store.

    Accepts datetime/date objects, ISO 8601 strings (including a trailing
    ``Z``) and the m/d/y formats handled by parse_date.

    Returns:
        datetime if parsing succeeds, None otherwise.
    """
    if isinstance(value, datetime):
        return value
    if isinstance(value, date):
        return datetime(value.year, value.month, value.day)
    if not isinstance(value, str):
        return None
    text = value.strip()
    if not text:
        return None
    if text.endswith("Z"):
        text = text[:-1] + "+00:00"
    try:
        return datetime.fromisoformat(text)
    except ValueError:
        pass
    for fmt in ("%m/%d/%Y", "%m/%d/%y"):
        try:
            return datetime.strptime(text, fmt)
        except ValueError:
            continue
    return None


def parse_date(value: Any) -> date | None:
    """
    Parse a calendar date.

    Args:
        value: date, datetime, ISO string (e.g. "2024-12-25" or a full
            timestamp) or m/d/y string (e.g. "12/25/2024").

    Returns:
        date if parsing succeeds, None otherwise.
    """
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    parsed = parse_datetime(value)
    return parsed.date() if parsed else None


def format_currency(value: float, currency: str = "USD") -> str:
    """
    Format a currency amount.

    USD amounts render with a dollar sign (``$1,234.56``); other currencies
    are prefixed with their code (``EUR 1,234.56``).
    """
    if currency == "USD":
        sign = "-" if value < 0 else ""
        return f"{sign}${abs(value):,.2f}"
    return f"{currency} {value:,.2f}"


def format_date(value: date | datetime | str | None, style: str = "short") -> str:
    """Format a date for display (``short``: Jan 05, 2025, ``long``: January 05, 2025)."""
    parsed = parse_date(value)
    if not parsed:
        return "N/A"
    return parsed.strftime("%B %d, %Y" if style == "long" else "%b %d, %Y")


def truncate(text: str, length: int) -> str:
    if len(text) <= length:
        return text
    return f"{text[:length]}..."


def matches_query(invoice: "Invoice", query: str) -> bool:
    """
    Check if an invoice matches the search query.

    Performs case-insensitive substring matching against the invoice
    number, client name and client email.

    Returns:
        True if query matches any searchable term, or if query is empty.
    """
    normalized = (query or "").strip().lower()
    if not normalized:
        return True
    return any(normalized in value for value in invoice.searchable_terms())


def check_invoice_status(
    current_status: str, due_date: date | datetime | str, is_paid: bool, today: date | None = None
) -> str:
    """
    Derive the effective status of an invoice.

    Paid wins, cancelled and draft are sticky, and anything else past its
    due date is overdue.
    """
    if is_paid:
        return "paid"
    if current_status in ("cancelled", "draft"):
        return current_status
    due = parse_date(due_date)
    today = today or datetime.now(timezone.utc).date()
    if due and due < today:
        return "overdue"
    return "sent"


def calculate_percentage_change(current: float, previous: float) -> tuple[float, str]:
    """Return the percentage change and its label, e.g. ``(12.5, "+12.5%")``."""
    if previous == 0:
        return 0.0, "0%"
    change = (current - previous) / previous * 100
    sign = "+" if change > 0 else ""
    return change, f"{sign}{change:.1f}%"


def status_label(status: str) -> str:
    return STATUS_LABELS.get(status, STATUS_LABELS["draft"])


def status_color(status: str) -> str:
    return STATUS_COLORS.get(status, STATUS_COLORS["draft"])


def quickpay_url(username: str, host: str = "quickpay.to") -> str:
    """Return the shareable QuickPay link for a user handle."""
    return f"{host}/{username.strip().lstrip('@')}"
