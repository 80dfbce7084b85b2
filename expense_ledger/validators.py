"""Validation helpers shared across the expense ledger."""

from __future__ import annotations

import math
from typing import Optional

from .exceptions import InvalidDateError, NegativeAmountError, ValidationError
from .models import CATEGORY_MAX_LENGTH, DATE_FORMAT, DATE_LENGTH

DAYS_IN_MONTH = (31, 28, 31, 30, 31, 30, 31, 31, 30, 31, 30, 31)
MIN_YEAR = 1
MAX_YEAR = 9999

_DIGITS = frozenset("0123456789")


def is_leap_year(year: int) -> bool:
    return year % 4 == 0 and (year % 100 != 0 or year % 400 == 0)


def days_in_month(month: int, year: int) -> int:
    if month == 2 and is_leap_year(year):
        return 29
    return DAYS_IN_MONTH[month - 1]


def _is_format_valid(text: str) -> bool:
    if len(text) != DATE_LENGTH or text[2] != "/" or text[5] != "/":
        return False
    # str.isdigit accepts non-ASCII digits, so compare against an explicit set.
    return all(ch in _DIGITS for index, ch in enumerate(text) if index not in (2, 5))


def is_valid_date(text: object) -> bool:
    """Return True when ``text`` is an existing Gregorian date in dd/mm/yyyy form."""
    if not isinstance(text, str) or not _is_format_valid(text):
        return False
    day, month, year = int(text[0:2]), int(text[3:5]), int(text[6:10])
    if not MIN_YEAR <= year <= MAX_YEAR or not 1 <= month <= 12:
        return False
    return 1 <= day <= days_in_month(month, year)


def validate_date(raw: object) -> str:
    if isinstance(raw, str):
        raw = raw.strip()
    if not is_valid_date(raw):
        raise InvalidDateError(f"date must be a valid calendar date in {DATE_FORMAT} format")
    return raw  # type: ignore[return-value]


def parse_amount(raw: object, field: str = "amount") -> float:
    """Convert raw input to a non-negative float."""
    if isinstance(raw, bool):
        raise ValidationError(f"{field} must be a numeric value")
    try:
        amount = float(raw)  # type: ignore[arg-type]
    except (TypeError, ValueError) as exc:
        raise ValidationError(f"{field} must be a numeric value") from exc

    if not math.isfinite(amount):
        raise ValidationError(f"{field} must be a finite number")
    if amount < 0:
        raise NegativeAmountError(f"{field} cannot be negative")
    return amount


def validate_required_str(value: object, field: str, max_length: int) -> str:
    if not isinstance(value, str):
        raise ValidationError(f"{field} must be a string")
    trimmed = value.strip()
    if not trimmed:
        raise ValidationError(f"{field} cannot be empty")
    if len(trimmed) > max_length:
        raise ValidationError(f"{field} must be at most {max_length} characters")
    return trimmed


def validate_category(value: object) -> str:
    category = validate_required_str(value, "category", CATEGORY_MAX_LENGTH)
    # Commas would break the flat CSV layout on export.
    if "," in category:
        raise ValidationError("category cannot contain commas")
    return category


def parse_ceiling(raw: object) -> Optional[float]:
    """Parse a budget ceiling; ``None`` and zero both mean no budget."""
    if raw is None or (isinstance(raw, str) and not raw.strip()):
        return None
    try:
        ceiling = parse_amount(raw, "budget")
    except NegativeAmountError as exc:
        raise ValidationError("budget cannot be negative") from exc
    return ceiling or None
