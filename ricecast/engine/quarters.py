"""Calendar quarter lookup shared by every component that needs quarter bounds."""

from __future__ import annotations

import calendar
import datetime as dt

from ricecast.errors import InputError

QUARTERS: tuple[int, ...] = (1, 2, 3, 4)

# quarter -> (first month, last month)
QUARTER_MONTHS: dict[int, tuple[int, int]] = {
    1: (1, 3),
    2: (4, 6),
    3: (7, 9),
    4: (10, 12),
}

QUARTER_NAMES: dict[int, str] = {
    1: "Q1 (January-March)",
    2: "Q2 (April-June)",
    3: "Q3 (July-September)",
    4: "Q4 (October-December)",
}


def validate_quarter(quarter: int) -> int:
    if quarter not in QUARTER_MONTHS:
        raise InputError(f"Invalid quarter: {quarter}. Must be 1, 2, 3, or 4.")
    return quarter


def quarter_range(year: int, quarter: int) -> tuple[dt.date, dt.date]:
    """Inclusive first and last calendar day of ``quarter`` in ``year``."""
    first_month, last_month = QUARTER_MONTHS[validate_quarter(quarter)]
    last_day = calendar.monthrange(year, last_month)[1]
    return dt.date(year, first_month, 1), dt.date(year, last_month, last_day)


def quarter_length(year: int, quarter: int) -> int:
    start, end = quarter_range(year, quarter)
    return (end - start).days + 1


def quarter_of(day: dt.date) -> int:
    return (day.month - 1) // 3 + 1


def intersect(
    a: tuple[dt.date, dt.date],
    b: tuple[dt.date, dt.date],
) -> tuple[dt.date, dt.date] | None:
    start = max(a[0], b[0])
    end = min(a[1], b[1])
    if start > end:
        return None
    return start, end
