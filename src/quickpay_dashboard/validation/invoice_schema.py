"""
Invoice validation and totals engine.

Everything here is pure: given a candidate payload (usually the creation
form's values) it decides whether the payload is well formed and computes
the authoritative financial fields.

Field rules live on pydantic input models (``LineItemIn``, ``InvoiceIn``,
``ClientIn``, ``PaymentIn``). Their errors are translated into FieldErrors
with dotted paths, then the whole-object checks run in a fixed order (due
date, subtotal, tax amount, total). Nothing short-circuits: the cross-field
checks still run on whatever fields were valid, so the caller receives
every FieldError at once and the form can show all violations together.
"""

import random
import string
import time
from dataclasses import dataclass, field
from datetime import date, timedelta
from typing import Any, Generic, Iterable, Literal, Mapping, Optional, TypeVar

from pydantic import (
    BaseModel,
    ConfigDict,
    EmailStr,
    Field,
    field_validator,
    model_validator,
)
from pydantic import ValidationError as PydanticValidationError

from quickpay_dashboard.errors import ValidationError
from quickpay_dashboard.models.invoice import (
    INVOICE_STATUSES,
    PAYMENT_METHODS,
    RECURRING_FREQUENCIES,
    LineItem,
    Recurrence,
    line_item_to_row,
)
from quickpay_dashboard.utils import parse_date

T = TypeVar("T")

TOLERANCE = 0.01
MIN_LINE_ITEMS = 1
MAX_LINE_ITEMS = 50
MIN_UNIT_PRICE = 0.01
MAX_DESCRIPTION_LENGTH = 200
MAX_NOTES_LENGTH = 1000
MAX_INVOICE_NUMBER_LENGTH = 50
DEFAULT_PAYMENT_TERMS_DAYS = 30

INVOICE_NUMBER_PATTERN = r"^[A-Z0-9-]+$"
PHONE_PATTERN = r"^\+?[0-9\s\-().]{7,20}$"
_BASE36 = string.digits + string.ascii_uppercase

InvoiceStatus = Literal[INVOICE_STATUSES]  # type: ignore[valid-type]
RecurringFrequency = Literal[RECURRING_FREQUENCIES]  # type: ignore[valid-type]
PaymentMethod = Literal[PAYMENT_METHODS]  # type: ignore[valid-type]


@dataclass(frozen=True, slots=True)
class FieldError:
    """A single violation tied to a field path such as ``items.0.quantity``."""

    path: str
    message: str
    code: str = "invalid"


@dataclass(frozen=True, slots=True)
class Totals:
    subtotal: float
    tax_amount: float
    total: float


@dataclass(slots=True)
class ValidationResult(Generic[T]):
    """Either a validated value or the ordered list of field errors."""

    value: T | None = None
    errors: list[FieldError] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.errors and self.value is not None

    @property
    def paths(self) -> list[str]:
        return [error.path for error in self.errors]

    def unwrap(self) -> T:
        """Return the value or raise ValidationError with every field error."""
        if not self.ok:
            raise ValidationError(self.errors)
        return self.value

    def error_map(self) -> dict[str, str]:
        """Return the first message per path, for rendering next to inputs."""
        result: dict[str, str] = {}
        for error in self.errors:
            result.setdefault(error.path, error.message)
        return result


@dataclass(slots=True)
class ValidInvoice:
    """A creation payload that passed validation, with authoritative totals."""

    invoice_number: str
    status: str
    issue_date: date
    due_date: date
    items: tuple[LineItem, ...]
    tax_rate: float
    subtotal: float
    tax_amount: float
    total: float
    client_id: str | None = None
    notes: str | None = None
    recurrence: Recurrence | None = None
    client_name: str | None = None
    client_email: str | None = None

    def to_row(self, user_id: str) -> dict[str, Any]:
        """Build the ``invoices`` insert row for the given owner."""
        return {
            "user_id": user_id,
            "client_id": self.client_id,
            "invoice_number": self.invoice_number,
            "status": self.status,
            "issue_date": self.issue_date.isoformat(),
            "due_date": self.due_date.isoformat(),
            "subtotal": self.subtotal,
            "tax_rate": self.tax_rate,
            "tax_amount": self.tax_amount,
            "total": self.total,
            "notes": self.notes,
            "is_recurring": self.recurrence is not None,
            "recurring_frequency": self.recurrence.frequency if self.recurrence else None,
            "client_name": self.client_name,
            "client_email": self.client_email,
        }

    def item_rows(self, invoice_id: str) -> list[dict[str, Any]]:
        rows = []
        for order, item in enumerate(self.items):
            row = line_item_to_row(item)
            row["invoice_id"] = invoice_id
            row["order"] = order
            rows.append(row)
        return rows


@dataclass(slots=True)
class ValidClient:
    name: str
    email: str
    company_name: str | None = None
    address: str | None = None
    phone: str | None = None

    def to_row(self, user_id: str) -> dict[str, Any]:
        return {
            "user_id": user_id,
            "name": self.name,
            "email": self.email,
            "company_name": self.company_name,
            "address": self.address,
            "phone": self.phone,
        }


@dataclass(slots=True)
class ValidPayment:
    invoice_id: str
    amount: float
    payment_date: date
    payment_method: str
    reference: str | None = None
    notes: str | None = None

    def to_row(self) -> dict[str, Any]:
        return {
            "invoice_id": self.invoice_id,
            "amount": self.amount,
            "payment_date": self.payment_date.isoformat(),
            "payment_method": self.payment_method,
            "reference": self.reference,
            "notes": self.notes,
        }


def _get(item: Any, key: str, default: Any = None) -> Any:
    if isinstance(item, Mapping):
        return item.get(key, default)
    return getattr(item, key, default)


def compute_totals(items: Iterable[Any], tax_rate: float) -> Totals:
    """
    Compute subtotal, tax and total for a list of line items.

    Each item contributes ``quantity * unit_price``. Items may be LineItem
    instances or mappings with ``quantity`` and ``unit_price`` keys; blank
    values count as zero so the form can call this on every keystroke.

    Args:
        items: Line items.
        tax_rate: Tax rate as a percentage (0-100).

    Returns:
        Totals with subtotal, tax_amount and total.
    """
    subtotal = 0.0
    for item in items:
        quantity = _get(item, "quantity") or 0
        unit_price = _get(item, "unit_price") or 0
        subtotal += float(quantity) * float(unit_price)
    tax_amount = subtotal * float(tax_rate or 0) / 100
    return Totals(subtotal=subtotal, tax_amount=tax_amount, total=subtotal + tax_amount)


def _base36(number: int) -> str:
    if number == 0:
        return "0"
    digits = []
    while number:
        number, remainder = divmod(number, 36)
        digits.append(_BASE36[remainder])
    return "".join(reversed(digits))


def generate_invoice_number(
    prefix: str = "INV",
    *,
    now_ms: int | None = None,
    rng: random.Random | None = None,
) -> str:
    """
    Generate a human-readable invoice number.

    Format is ``PREFIX-<base36 millisecond timestamp><4 random chars>``,
    all upper case. Numbers are not guaranteed unique across concurrent
    creators; the remote store has no uniqueness check either.
    """
    timestamp = now_ms if now_ms is not None else time.time_ns() // 1_000_000
    suffix = "".join((rng or random).choices(_BASE36, k=4))
    return f"{prefix.upper()}-{_base36(timestamp)}{suffix}"


def invoice_form_defaults(today: date | None = None) -> dict[str, Any]:
    """Return the initial values of the creation form."""
    today = today or date.today()
    return {
        "invoice_number": generate_invoice_number(),
        "status": "draft",
        "issue_date": today,
        "due_date": today + timedelta(days=DEFAULT_PAYMENT_TERMS_DAYS),
        "items": [{"description": "", "quantity": 1, "unit_price": 0}],
        "tax_rate": 0,
        "is_recurring": False,
    }


def _differs(submitted: float, expected: float) -> bool:
    return round(abs(submitted - expected), 6) > TOLERANCE


class _FormModel(BaseModel):
    """Base for form input models: trimmed strings, blank optionals omitted."""

    model_config = ConfigDict(str_strip_whitespace=True, allow_inf_nan=False)

    @model_validator(mode="before")
    @classmethod
    def drop_blank_optionals(cls, data: Any) -> Any:
        if not isinstance(data, Mapping):
            return data
        fields = cls.model_fields
        return {
            key: value
            for key, value in data.items()
            if not (
                isinstance(value, str)
                and not value.strip()
                and key in fields
                and not fields[key].is_required()
            )
        }


def _parse_form_date(value: Any) -> Any:
    if isinstance(value, str):
        return parse_date(value) or value
    return value


def _normalize_email(value: Any) -> Any:
    if isinstance(value, str):
        return value.strip().lower()
    return value


class LineItemIn(_FormModel):
    id: Optional[str] = None
    description: str = Field(min_length=1, max_length=MAX_DESCRIPTION_LENGTH)
    quantity: int = Field(ge=1)
    unit_price: float = Field(ge=MIN_UNIT_PRICE)


class InvoiceIn(_FormModel):
    client_id: Optional[str] = None
    invoice_number: str = Field(
        min_length=1,
        max_length=MAX_INVOICE_NUMBER_LENGTH,
        pattern=INVOICE_NUMBER_PATTERN,
    )
    status: InvoiceStatus = "draft"
    issue_date: date
    due_date: date
    items: list[LineItemIn] = Field(min_length=MIN_LINE_ITEMS, max_length=MAX_LINE_ITEMS)
    tax_rate: float = Field(default=0, ge=0, le=100)
    subtotal: Optional[float] = Field(default=None, ge=0)
    tax_amount: Optional[float] = Field(default=None, ge=0)
    total: Optional[float] = Field(default=None, gt=0)
    notes: Optional[str] = Field(default=None, max_length=MAX_NOTES_LENGTH)
    is_recurring: bool = False
    recurring_frequency: Optional[RecurringFrequency] = None
    client_name: Optional[str] = None
    client_email: Optional[EmailStr] = None

    parse_dates = field_validator("issue_date", "due_date", mode="before")(_parse_form_date)

    @field_validator("items", mode="before")
    @classmethod
    def items_as_mappings(cls, value: Any) -> Any:
        if isinstance(value, (list, tuple)):
            return [_line_item_input(item) for item in value]
        return value

    normalize_email = field_validator("client_email", mode="before")(_normalize_email)


class ClientIn(_FormModel):
    name: str = Field(min_length=2, max_length=100)
    email: EmailStr
    company_name: Optional[str] = Field(default=None, max_length=100)
    address: Optional[str] = Field(default=None, max_length=500)
    phone: Optional[str] = Field(default=None, max_length=20, pattern=PHONE_PATTERN)

    normalize_email = field_validator("email", mode="before")(_normalize_email)


class PaymentIn(_FormModel):
    invoice_id: str = Field(min_length=1)
    amount: float = Field(gt=0)
    payment_date: date
    payment_method: PaymentMethod
    reference: Optional[str] = Field(default=None, max_length=100)
    notes: Optional[str] = Field(default=None, max_length=500)

    parse_dates = field_validator("payment_date", mode="before")(_parse_form_date)


def _line_item_input(item: Any) -> Any:
    if isinstance(item, LineItem):
        return {
            "id": item.id,
            "description": item.description,
            "quantity": item.quantity,
            "unit_price": item.unit_price,
        }
    return item


# Messages keyed by (field name, pydantic error type), then fallbacks by type.
_MESSAGES: dict[tuple[str, str], tuple[str, str]] = {
    ("items", "missing"): ("At least one item is required", "required"),
    ("items", "too_short"): ("At least one item is required", "too_small"),
    ("items", "too_long"): (f"Maximum {MAX_LINE_ITEMS} items allowed", "too_big"),
    ("items", "list_type"): ("Items must be a list", "invalid_type"),
    ("invoice_number", "string_pattern_mismatch"): (
        "Invoice number can only contain uppercase letters, numbers and dashes",
        "invalid_format",
    ),
    ("unit_price", "greater_than_equal"): (
        f"Price must be at least {MIN_UNIT_PRICE}",
        "too_small",
    ),
    ("amount", "greater_than"): ("Amount must be positive", "too_small"),
    ("phone", "string_pattern_mismatch"): ("Invalid phone number", "invalid_format"),
    ("email", "value_error"): ("Invalid email address", "invalid_format"),
    ("client_email", "value_error"): ("Invalid email address", "invalid_format"),
}

_LABELS = {
    "client_id": "Client",
    "invoice_id": "Invoice",
    "unit_price": "Price",
    "recurring_frequency": "Recurring frequency",
}


def _label(name: str) -> str:
    return _LABELS.get(name) or name.replace("_", " ").capitalize() or "Value"


def _field_error(error: Mapping[str, Any]) -> FieldError:
    loc = error["loc"]
    path = ".".join(str(part) for part in loc)
    name = next((part for part in reversed(loc) if isinstance(part, str)), "")
    kind = error["type"]
    ctx = error.get("ctx") or {}

    known = _MESSAGES.get((name, kind))
    if known:
        return FieldError(path, *known)

    label = _label(name)
    if kind == "missing" or (kind == "string_too_short" and ctx.get("min_length") == 1):
        return FieldError(path, f"{label} is required", "required")
    if kind == "string_too_short":
        return FieldError(
            path, f"{label} must be at least {ctx['min_length']} characters", "too_small"
        )
    if kind == "string_too_long":
        return FieldError(
            path, f"{label} must be {ctx['max_length']} characters or fewer", "too_big"
        )
    if kind == "greater_than_equal":
        return FieldError(path, f"{label} must be at least {ctx['ge']}", "too_small")
    if kind == "greater_than":
        return FieldError(path, f"{label} must be greater than {ctx['gt']}", "too_small")
    if kind == "less_than_equal":
        return FieldError(path, f"{label} cannot exceed {ctx['le']}", "too_big")
    if kind == "literal_error":
        return FieldError(
            path, f"{label} must be one of: {ctx['expected']}", "invalid_enum"
        )
    if kind in ("int_from_float", "int_parsing", "int_type"):
        return FieldError(path, f"{label} must be a whole number", "invalid_type")
    if kind in ("float_parsing", "float_type", "finite_number"):
        return FieldError(path, f"{label} must be a number", "invalid_type")
    if kind.startswith("date_"):
        return FieldError(path, f"{label} must be a valid date", "invalid_date")
    if kind == "string_pattern_mismatch":
        return FieldError(path, f"{label} has an invalid format", "invalid_format")
    return FieldError(path, error["msg"], "invalid")


def _field_errors(exc: PydanticValidationError) -> list[FieldError]:
    return [_field_error(error) for error in exc.errors(include_url=False)]


def _parse(
    model: type[BaseModel], candidate: Mapping[str, Any]
) -> tuple[Any, list[FieldError]]:
    """Return ``(model instance or None, field errors)``."""
    try:
        return model.model_validate(candidate), []
    except PydanticValidationError as exc:
        return None, _field_errors(exc)


def _truthy(value: Any) -> bool:
    if isinstance(value, str):
        return value.strip().lower() in {"1", "true", "yes", "on"}
    return bool(value)


def _submitted(value: Any) -> float | None:
    if value is None or (isinstance(value, str) and not value.strip()):
        return None
    return float(value)


def _cross_field_errors(
    values: Mapping[str, Any], failed: set[str]
) -> tuple[list[FieldError], Totals | None]:
    """
    Run the whole-object checks on the fields that passed field validation.

    ``failed`` holds the top-level names that already carry an error; any
    check that reads one of them is skipped.

    Returns:
        The cross-field errors and the recomputed totals, or None when the
        items or tax rate were invalid.
    """
    errors: list[FieldError] = []

    if (
        not failed & {"is_recurring", "recurring_frequency"}
        and values.get("recurring_frequency")
        and not _truthy(values.get("is_recurring"))
    ):
        errors.append(
            FieldError(
                "recurring_frequency",
                "Frequency is only allowed on recurring invoices",
                "invalid",
            )
        )

    if not failed & {"issue_date", "due_date"}:
        issue_date = parse_date(values.get("issue_date"))
        due_date = parse_date(values.get("due_date"))
        if issue_date and due_date and due_date < issue_date:
            errors.append(
                FieldError(
                    "due_date",
                    "Due date must be on or after the issue date",
                    "invalid_range",
                )
            )

    if failed & {"items", "tax_rate"}:
        return errors, None

    totals = compute_totals(values.get("items") or [], values.get("tax_rate") or 0)
    for key, expected, message in (
        ("subtotal", totals.subtotal, "Subtotal does not match the sum of line items"),
        ("tax_amount", totals.tax_amount, "Tax amount does not match subtotal and tax rate"),
        ("total", totals.total, "Total does not match subtotal plus tax"),
    ):
        if key in failed:
            continue
        submitted = _submitted(values.get(key))
        if submitted is not None and _differs(submitted, expected):
            errors.append(FieldError(key, message, "mismatch"))
    if totals.total <= 0:
        errors.append(FieldError("total", "Total must be greater than 0", "too_small"))
    return errors, totals


def validate_invoice(candidate: Mapping[str, Any]) -> ValidationResult[ValidInvoice]:
    """
    Validate a candidate invoice with its line items.

    Field checks come first (types, ranges, lengths, enums, the invoice
    number pattern), then the cross-field checks in this order:

    1. ``due_date`` on or after ``issue_date``
    2. ``subtotal`` equals the sum of item amounts
    3. ``tax_amount`` equals subtotal * tax_rate / 100
    4. ``total`` equals subtotal + tax_amount

    Submitted totals are optional; when present each is compared, within
    0.01, against the value recomputed from the items so every error is
    tagged to the field that is actually wrong. Submitted item amounts are
    ignored: an item's amount is always quantity * unit_price.

    Args:
        candidate: Form values or any mapping with the invoice fields.

    Returns:
        ValidationResult holding a ValidInvoice with authoritative totals,
        or every FieldError found.
    """
    parsed, errors = _parse(InvoiceIn, candidate)
    if parsed is not None:
        values: Mapping[str, Any] = parsed.model_dump()
    else:
        values = dict(candidate)
    failed = {str(error.path).split(".", 1)[0] for error in errors}

    cross_errors, totals = _cross_field_errors(values, failed)
    errors.extend(cross_errors)
    if errors or parsed is None or totals is None:
        return ValidationResult(errors=errors)

    recurrence = None
    if parsed.is_recurring:
        recurrence = Recurrence(parsed.recurring_frequency or "monthly")
    return ValidationResult(
        value=ValidInvoice(
            invoice_number=parsed.invoice_number,
            status=parsed.status,
            issue_date=parsed.issue_date,
            due_date=parsed.due_date,
            items=tuple(
                LineItem(
                    id=item.id,
                    description=item.description,
                    quantity=item.quantity,
                    unit_price=item.unit_price,
                    order=index,
                )
                for index, item in enumerate(parsed.items)
            ),
            tax_rate=parsed.tax_rate,
            subtotal=totals.subtotal,
            tax_amount=totals.tax_amount,
            total=totals.total,
            client_id=parsed.client_id,
            notes=parsed.notes,
            recurrence=recurrence,
            client_name=parsed.client_name,
            client_email=parsed.client_email,
        )
    )


def validate_client(candidate: Mapping[str, Any]) -> ValidationResult[ValidClient]:
    """Validate a client record; the email is normalized to trimmed lower case."""
    parsed, errors = _parse(ClientIn, candidate)
    if parsed is None:
        return ValidationResult(errors=errors)
    return ValidationResult(value=ValidClient(**parsed.model_dump()))


def validate_payment(candidate: Mapping[str, Any]) -> ValidationResult[ValidPayment]:
    """Validate a payment record against an invoice."""
    parsed, errors = _parse(PaymentIn, candidate)
    if parsed is None:
        return ValidationResult(errors=errors)
    return ValidationResult(value=ValidPayment(**parsed.model_dump()))
