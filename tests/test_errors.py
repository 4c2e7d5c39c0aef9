"""
Tests for the error hierarchy and remote error messages.
"""

from __future__ import annotations

from quickpay_dashboard.errors import (
    AuthenticationError,
    NotFoundError,
    QuickPayError,
    RemoteError,
    ValidationError,
    remote_error_message,
)
from quickpay_dashboard.validation.invoice_schema import FieldError


class FakeSparkError(Exception):
    """Mimics the error-class accessor of Spark exceptions."""

    def __init__(self, message: str, error_class: str | None) -> None:
        super().__init__(message)
        self._error_class = error_class

    def getErrorClass(self) -> str | None:
        return self._error_class


class TestRemoteErrorMessage:
    """Tests for remote_error_message"""

    def test_known_codes(self) -> None:
        assert remote_error_message(RemoteError("dup", code="23505")) == "This record already exists"
        assert remote_error_message(RemoteError("fk", code="23503")) == "Related record not found"
        assert remote_error_message(NotFoundError()) == "No data found"

    def test_spark_error_classes(self) -> None:
        error = FakeSparkError("[TABLE_OR_VIEW_NOT_FOUND] missing", "TABLE_OR_VIEW_NOT_FOUND")
        assert remote_error_message(error) == "No data found"
        wrapped = RemoteError.from_exception(error)
        assert wrapped.code == "PGRST116"
        assert wrapped.message == "No data found"

    def test_falls_back_to_message(self) -> None:
        assert remote_error_message(RemoteError("timeout")) == "timeout"
        assert remote_error_message(FakeSparkError("boom", "SOMETHING_ELSE")) == "boom"
        assert remote_error_message(Exception()) == "An unexpected error occurred"

    def test_from_exception_keeps_remote_errors(self) -> None:
        original = RemoteError("kept", code="X")
        assert RemoteError.from_exception(original) is original


class TestErrorTypes:
    """Tests for the error classes"""

    def test_hierarchy(self) -> None:
        assert issubclass(NotFoundError, RemoteError)
        assert issubclass(AuthenticationError, QuickPayError)
        assert AuthenticationError().message == "User not authenticated"

    def test_validation_error_by_path(self) -> None:
        error = ValidationError(
            [
                FieldError("due_date", "Invalid date", "invalid_date"),
                FieldError("due_date", "Due date must be on or after issue date", "custom"),
                FieldError("items", "At least one item is required", "too_small"),
            ]
        )
        assert error.by_path() == {
            "due_date": "Invalid date",
            "items": "At least one item is required",
        }
        assert "items: At least one item is required" in error.message
