"""
Name: Input Validation Helpers

Responsibilities:
  - Reject structurally invalid input before any state is touched
  - Normalize text and money values consistently across aggregates

Notes:
  - All helpers raise ValidationFailureError with the offending field name
"""

from __future__ import annotations

import re
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation

from .errors import ValidationFailureError

_TWO_PLACES = Decimal("0.01")
EMAIL_PATTERN = re.compile(r"^[A-Za-z0-9+_.-]+@[A-Za-z0-9.-]+\.[A-Za-z]{2,}$")
PHONE_PATTERN = re.compile(r"^\+?[0-9]{10,15}$")
ROLE_NAME_PATTERN = re.compile(r"^[A-Z][A-Z0-9_]{1,49}$")


def require_text(value: str | None, field: str, *, max_length: int | None = None) -> str:
    text = (value or "").strip()
    if not text:
        raise ValidationFailureError(f"{field} is required", field=field)
    if max_length is not None and len(text) > max_length:
        raise ValidationFailureError(
            f"{field} must be at most {max_length} characters", field=field
        )
    return text


def optional_text(
    value: str | None, field: str, *, max_length: int | None = None
) -> str | None:
    if value is None:
        return None
    text = value.strip()
    if not text:
        return None
    if max_length is not None and len(text) > max_length:
        raise ValidationFailureError(
            f"{field} must be at most {max_length} characters", field=field
        )
    return text


def require_positive_amount(value: Decimal | str | int | float | None, field: str = "amount") -> Decimal:
    if value is None:
        raise ValidationFailureError(f"{field} is required", field=field)
    try:
        amount = Decimal(str(value))
    except (InvalidOperation, ValueError) as exc:
        raise ValidationFailureError(f"{field} must be a decimal number", field=field) from exc
    if not amount.is_finite() or amount <= 0:
        raise ValidationFailureError(f"{field} must be greater than zero", field=field)
    return amount.quantize(_TWO_PLACES, rounding=ROUND_HALF_UP)


def normalize_email(value: str | None) -> str:
    email = require_text(value, "email", max_length=255).lower()
    if not EMAIL_PATTERN.match(email):
        raise ValidationFailureError("email is not a valid address", field="email")
    return email


def normalize_phone(value: str | None) -> str | None:
    phone = optional_text(value, "phone_number")
    if phone is not None and not PHONE_PATTERN.match(phone):
        raise ValidationFailureError(
            "phone_number must be 10-15 digits, optionally prefixed with +",
            field="phone_number",
        )
    return phone


def normalize_role_name(value: str | None) -> str:
    name = require_text(value, "name").upper()
    if not ROLE_NAME_PATTERN.match(name):
        raise ValidationFailureError(
            "name must be upper-case letters, digits or underscores", field="name"
        )
    return name
