# utils/dates.py

from datetime import date, datetime, timezone
from typing import Tuple


def utcnow() -> datetime:
    """Current UTC time as a naive datetime (the storage convention)."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


def to_naive_utc(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value
    return value.astimezone(timezone.utc).replace(tzinfo=None)


def month_key(value: date) -> str:
    """2024-03-05 -> '2024-03'"""
    return f"{value.year:04d}-{value.month:02d}"


def month_bounds(month: str) -> Tuple[date, date]:
    """
    Returns the half-open [first day, first day of next month) range for a
    'YYYY-MM' string. Raises ValueError for malformed input.
    """
    year_str, month_str = month.split("-")
    start = date(int(year_str), int(month_str), 1)
    if start.month == 12:
        end = date(start.year + 1, 1, 1)
    else:
        end = date(start.year, start.month + 1, 1)
    return start, end
