"""Utility functions for the amortization engine.

This module provides helpers for parsing user input into Python data types and
for handling dates, most importantly adding calendar months to a date while
clamping the day to the length of the target month.
"""

from __future__ import annotations

import calendar
from datetime import date
from decimal import Decimal, InvalidOperation, getcontext

getcontext().prec = 28  # increase decimal precision to avoid rounding errors

_AMOUNT_SUFFIXES = {"k": Decimal("1000"), "m": Decimal("1000000")}


def parse_date(value: str) -> date:
    """Parse a ``YYYY-MM-DD`` or ``YYYY-MM`` string into a ``date``.

    A year-month string is normalized to the first day of that month.

    Raises
    ------
    ValueError
        If the string is not a valid date.
    """
    try:
        parts = value.strip().split("-")
        if len(parts) not in (2, 3):
            raise ValueError
        year = int(parts[0])
        month = int(parts[1])
        day = int(parts[2]) if len(parts) == 3 else 1
        return date(year, month, day)
    except Exception as exc:
        raise ValueError(f"Invalid date string: {value}") from exc


def add_months(dt: date, months: int) -> date:
    """Return a new date a number of months after ``dt``.

    The day of the month is clamped to the last valid day if needed (e.g.,
    adding one month to Jan 31 yields Feb 28 or 29).
    """
    year = dt.year + (dt.month - 1 + months) // 12
    month = (dt.month - 1 + months) % 12 + 1
    day = min(dt.day, calendar.monthrange(year, month)[1])
    return date(year, month, day)


def decimal_from_str(value: str) -> Decimal:
    """Convert a numeric string into a ``Decimal``.

    The function strips any commas and handles both integer and float-like
    strings. It raises ``ValueError`` if conversion fails.
    """
    try:
        cleaned = value.strip().replace(",", "")
        result = Decimal(cleaned)
    except (InvalidOperation, AttributeError) as exc:
        raise ValueError(f"Invalid numeric value: {value}") from exc
    if not result.is_finite():
        raise ValueError(f"Invalid numeric value: {value}")
    return result


def parse_amount(value: str) -> Decimal:
    """Parse a currency amount with optional ``k``/``m`` suffixes.

    ``"250k"`` means 250 000 and ``"1.5m"`` means 1 500 000.
    """
    cleaned = value.strip().lower()
    factor = Decimal("1")
    if cleaned[-1:] in _AMOUNT_SUFFIXES:
        factor = _AMOUNT_SUFFIXES[cleaned[-1]]
        cleaned = cleaned[:-1]
    return decimal_from_str(cleaned) * factor


def parse_rate(value: str) -> Decimal:
    """Parse an annual interest rate given in percent into a fraction.

    ``"6.5"`` and ``"6.5%"`` both yield ``Decimal("0.065")``.
    """
    cleaned = value.strip()
    if cleaned.endswith("%"):
        cleaned = cleaned[:-1]
    return decimal_from_str(cleaned) / Decimal(100)
