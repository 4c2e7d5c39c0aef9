"""
Error types shared by the validation engine, services and stores.

The hierarchy mirrors how failures are handled:

- ValidationError: form-level, carries every FieldError at once
- AuthenticationError: a mutation was attempted without a signed-in user
- RemoteError: anything the remote data store, auth provider or file
  storage reported, with a short human-readable message
- NotFoundError: a lookup matched nothing
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Sequence

if TYPE_CHECKING:
    from quickpay_dashboard.validation.invoice_schema import FieldError

# Remote error codes (PostgREST / Postgres style) and their UI messages.
NO_DATA_FOUND = "PGRST116"
UNIQUE_VIOLATION = "23505"
FOREIGN_KEY_VIOLATION = "23503"

_CODE_MESSAGES = {
    NO_DATA_FOUND: "No data found",
    UNIQUE_VIOLATION: "This record already exists",
    FOREIGN_KEY_VIOLATION: "Related record not found",
}

# Spark / Delta error classes collapsed onto the codes above.
_ERROR_CLASS_CODES = {
    "TABLE_OR_VIEW_NOT_FOUND": NO_DATA_FOUND,
    "ROW_SUBQUERY_TOO_MANY_ROWS": NO_DATA_FOUND,
    "DELTA_CONCURRENT_APPEND": UNIQUE_VIOLATION,
    "DELTA_DUPLICATE_DATA_SKIPPING_COLUMNS": UNIQUE_VIOLATION,
    "DELTA_VIOLATE_CONSTRAINT_WITH_VALUES": FOREIGN_KEY_VIOLATION,
    "DELTA_NOT_NULL_CONSTRAINT_VIOLATED": FOREIGN_KEY_VIOLATION,
}

UNEXPECTED_ERROR_MESSAGE = "An unexpected error occurred"


class QuickPayError(Exception):
    """Base class for all dashboard errors."""

    @property
    def message(self) -> str:
        return str(self.args[0]) if self.args else self.__class__.__name__


class ValidationError(QuickPayError):
    """One or more fields failed validation."""

    def __init__(self, errors: Sequence[FieldError]) -> None:
        self.errors = list(errors)
        summary = "; ".join(f"{e.path}: {e.message}" for e in self.errors)
        super().__init__(summary or "Invalid input")

    def by_path(self) -> dict[str, str]:
        """Return the first message per field path, for form display."""
        result: dict[str, str] = {}
        for error in self.errors:
            result.setdefault(error.path, error.message)
        return result


class AuthenticationError(QuickPayError):
    """Raised when an action needs a signed-in user and there is none."""

    def __init__(self, message: str = "User not authenticated") -> None:
        super().__init__(message)


class RemoteError(QuickPayError):
    """A failure reported by a remote collaborator."""

    def __init__(self, message: str, code: str | None = None) -> None:
        super().__init__(message)
        self.code = code

    @classmethod
    def from_exception(cls, exc: BaseException) -> RemoteError:
        """Wrap an arbitrary backend exception, keeping its mapped code."""
        if isinstance(exc, RemoteError):
            return exc
        code = _error_code(exc)
        return cls(remote_error_message(exc), code=code)


class NotFoundError(RemoteError):
    """A lookup by id matched no row."""

    def __init__(self, message: str = "No data found") -> None:
        super().__init__(message, code=NO_DATA_FOUND)


def _error_code(error: Any) -> str | None:
    code = getattr(error, "code", None)
    if code:
        return str(code)
    get_error_class = getattr(error, "getErrorClass", None)
    if callable(get_error_class):
        try:
            error_class = get_error_class()
        except Exception:
            error_class = None
        if error_class:
            return _ERROR_CLASS_CODES.get(error_class, error_class)
    return None


def remote_error_message(error: Any) -> str:
    """
    Map a remote failure to a short message suitable for the UI.

    Known codes get a fixed message; otherwise the error's own message is
    used, falling back to a generic one.
    """
    code = _error_code(error)
    if code in _CODE_MESSAGES:
        return _CODE_MESSAGES[code]
    message = getattr(error, "message", None)
    if isinstance(message, str) and message:
        return message
    if isinstance(error, BaseException) and str(error):
        return str(error)
    return UNEXPECTED_ERROR_MESSAGE
