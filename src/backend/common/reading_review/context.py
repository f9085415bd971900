from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal, InvalidOperation
from typing import Any, Optional

from .config import EngineConfig


@dataclass(frozen=True)
class ValidationContext:
    # "Today" for rules that look at calendar windows; injectable so runs are reproducible.
    reference_date: date = field(default_factory=date.today)
    config: EngineConfig = field(default_factory=EngineConfig)


def as_decimal(value: Any) -> Optional[Decimal]:
    """Numeric view of a reading field, or None when it is blank or not a number."""
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, Decimal):
        return value if value.is_finite() else None
    if isinstance(value, (int, float)):
        try:
            result = Decimal(str(value))
        except InvalidOperation:
            return None
        return result if result.is_finite() else None
    text = str(value).strip()
    if not text:
        return None
    try:
        result = Decimal(text)
    except InvalidOperation:
        return None
    return result if result.is_finite() else None


def format_reading(value: Decimal) -> str:
    """Text form of a reading with integral values printed without a fraction."""
    if value == value.to_integral_value():
        return str(int(value))
    return format(value.normalize(), "f")


def parse_dmy_date(value: Any) -> Optional[date]:
    """Parse ``dd/mm/yyyy``; anything else yields None."""
    if value is None:
        return None
    parts = str(value).strip().split("/")
    if len(parts) != 3:
        return None
    try:
        day, month, year = (int(p) for p in parts)
        return date(year, month, day)
    except ValueError:
        return None


def shift_month(year: int, month: int, delta: int) -> tuple[int, int]:
    """Move (year, month) by ``delta`` calendar months."""
    index = year * 12 + (month - 1) + delta
    return index // 12, index % 12 + 1
