"""Shared validation helpers."""

import re
from datetime import date, datetime

_EMAIL_RE = re.compile(r'^[^@\s]+@[^@\s]+\.[^@\s]+$')


def is_valid_email(value: str) -> bool:
    """Return True if *value* looks like a valid email address."""
    return bool(value and _EMAIL_RE.match(value.strip()))


def parse_date(value, field: str = "date") -> date | None:
    """Parse an ISO ``YYYY-MM-DD`` value; blank means None.

    Raises ValueError naming *field* when the value is not a date.
    """
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    try:
        return datetime.strptime(str(value).strip()[:10], "%Y-%m-%d").date()
    except ValueError:
        raise ValueError(f"Invalid {field}: {value}")


def parse_quantity(value, field: str = "quantity") -> float:
    """Parse a non-negative number."""
    try:
        quantity = float(value)
    except (TypeError, ValueError):
        raise ValueError(f"Invalid {field}: {value}")
    if quantity < 0:
        raise ValueError(f"{field.capitalize()} cannot be negative")
    return quantity


def optional_text(payload: dict, key: str, default: str, label: str | None = None) -> str:
    """Return the stripped string at *key*, or *default* when blank or absent."""
    value = payload.get(key)
    if value is None or value == "":
        return default
    if not isinstance(value, str):
        raise ValueError(f"{label or key} must be text")
    return value.strip() or default


def require_text(payload: dict, key: str, label: str | None = None) -> str:
    """Return the stripped string at *key*, raising ValueError when blank."""
    value = payload.get(key)
    if value is None or not str(value).strip():
        raise ValueError(f"{label or key} is required")
    return str(value).strip()
