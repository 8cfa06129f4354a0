# File: src/breadpos/core/validators.py
"""Field validators shared by the request schemas.

Each returns the cleaned value or raises ValueError, so they can be
called straight from pydantic ``field_validator`` hooks.
"""

import html
import re
from decimal import Decimal, InvalidOperation

CENTS = Decimal("0.01")
# NUMERIC(12, 2)
MAX_AMOUNT = Decimal("9999999999.99")

PIN_RE = re.compile(r"\d{4,8}")
PHONE_CHARS_RE = re.compile(r"[0-9\s+\-()]+")
EMAIL_RE = re.compile(r"[a-z0-9._%+-]+@[a-z0-9.-]+\.[a-z]{2,}")
TAG_RE = re.compile(r"<[^>]+>")


def validate_currency(value: Decimal | float | str, max_value: Decimal = MAX_AMOUNT) -> Decimal:
    """Peso amount: non-negative, within column range, at most centavo precision."""
    try:
        amount = Decimal(str(value))
    except (InvalidOperation, ValueError) as e:
        raise ValueError(f"Invalid currency format: {value}") from e

    if amount < 0:
        raise ValueError("Currency value cannot be negative")
    if amount > max_value:
        raise ValueError(f"Currency value exceeds maximum allowed: {max_value}")
    if amount != amount.quantize(CENTS):
        raise ValueError("Currency value cannot have more than 2 decimal places")
    return amount


def validate_pin(value: str) -> str:
    cleaned = (value or "").strip()
    if not PIN_RE.fullmatch(cleaned):
        raise ValueError("PIN must be 4 to 8 digits")
    return cleaned


def validate_phone(value: str | None) -> str | None:
    """Landline or mobile number; blank becomes None."""
    cleaned = (value or "").strip()
    if not cleaned:
        return None
    if not PHONE_CHARS_RE.fullmatch(cleaned):
        raise ValueError("Phone can only contain digits, spaces, +, -, (, )")
    if sum(ch.isdigit() for ch in cleaned) < 7:
        raise ValueError("Phone must contain at least 7 digits")
    return cleaned


def validate_email(value: str | None) -> str | None:
    cleaned = (value or "").strip().lower()
    if not cleaned:
        return None
    if not EMAIL_RE.fullmatch(cleaned):
        raise ValueError("Invalid email format")
    return cleaned


def sanitize_html(value: str | None) -> str | None:
    """Drop tags and escape what is left, for free-text notes shown back to staff."""
    if not value:
        return None
    cleaned = html.escape(TAG_RE.sub("", value), quote=True).strip()
    return cleaned or None
