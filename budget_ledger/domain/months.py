from __future__ import annotations

import calendar
import re
from datetime import date
from decimal import ROUND_HALF_UP, Decimal

CENT = Decimal("0.01")

_MONTH_PATTERN = re.compile(r"^(\d{4})-(0[1-9]|1[0-2])$")


def parse_month(value: str) -> tuple[int, int]:
    match = _MONTH_PATTERN.match(value)
    if match is None:
        raise ValueError(f"Invalid month {value!r}, expected YYYY-MM.")
    return int(match.group(1)), int(match.group(2))


def is_month(value: str) -> bool:
    return _MONTH_PATTERN.match(value) is not None


def format_month(year: int, month: int) -> str:
    return f"{year:04d}-{month:02d}"


def month_of(value: date) -> str:
    return format_month(value.year, value.month)


def remaining_months(from_month: str) -> list[str]:
    """Months after ``from_month`` up to December of the same year."""
    year, month = parse_month(from_month)
    return [format_month(year, m) for m in range(month + 1, 13)]


def round_money(value: Decimal) -> Decimal:
    return value.quantize(CENT, rounding=ROUND_HALF_UP)


def month_bounds(value: str) -> tuple[date, date]:
    """First and last day of ``value``."""
    year, month = parse_month(value)
    last_day = calendar.monthrange(year, month)[1]
    return date(year, month, 1), date(year, month, last_day)
