from __future__ import annotations

from decimal import Decimal

from ..core.exceptions import ValidationError


def require_non_empty(value: str, field_name: str) -> str:
    if not value or not str(value).strip():
        raise ValidationError(f"{field_name} is required")
    return str(value).strip()


def require_month(month: int) -> int:
    try:
        m = int(month)
    except (TypeError, ValueError):
        raise ValidationError("Month must be a number between 1 and 12")
    if m < 1 or m > 12:
        raise ValidationError("Month must be a number between 1 and 12")
    return m


def require_year(year: int) -> int:
    try:
        y = int(year)
    except (TypeError, ValueError):
        raise ValidationError("Year must be a number")
    if y < 1900 or y > 9999:
        raise ValidationError("Year is out of range")
    return y


def require_in_range(value: Decimal, field_name: str, *, low, high=None) -> Decimal:
    if value < low or (high is not None and value > high):
        bound = f"between {low} and {high}" if high is not None else f"at least {low}"
        raise ValidationError(f"{field_name} must be {bound}")
    return value
