"""Validation and totals engine for invoices, clients and payments."""

from quickpay_dashboard.validation.invoice_schema import (
    TOLERANCE,
    FieldError,
    Totals,
    ValidationResult,
    ValidClient,
    ValidInvoice,
    ValidPayment,
    compute_totals,
    generate_invoice_number,
    invoice_form_defaults,
    validate_client,
    validate_invoice,
    validate_payment,
)

__all__ = [
    "TOLERANCE",
    "FieldError",
    "Totals",
    "ValidClient",
    "ValidInvoice",
    "ValidPayment",
    "ValidationResult",
    "compute_totals",
    "generate_invoice_number",
    "invoice_form_defaults",
    "validate_client",
    "validate_invoice",
    "validate_payment",
]
