"""Date windows for the rolling-twelve total and the monthly breakdown."""

from __future__ import annotations

import calendar
from datetime import date, timedelta

MONTHS_IN_WINDOW = 12
# Xero renders English month names regardless of the host locale.
MONTH_ABBREVIATIONS = (
    "Jan", "Feb", "Mar", "Apr", "May", "Jun",
    "Jul", "Aug", "Sep", "Oct", "Nov", "Dec",
)


def _subtract_one_year(day: date) -> date:
    """Same calendar day a year earlier; Feb 29 falls back to Feb 28."""
    try:
        return day.replace(year=day.year - 1)
    except ValueError:
        return day.replace(year=day.year - 1, day=28)


def month_before(year: int, month: int, count: int = 1) -> tuple[int, int]:
    """Return the ``(year, month)`` that lies ``count`` months earlier."""
    index = year * 12 + (month - 1) - count
    return index // 12, index % 12 + 1


def last_day_of_month(year: int, month: int) -> date:
    return date(year, month, calendar.monthrange(year, month)[1])


def rolling_twelve_range(today: date) -> tuple[date, date]:
    """The twelve months ending yesterday, inclusive on both ends."""
    end = today - timedelta(days=1)
    start = _subtract_one_year(end) + timedelta(days=1)
    return start, end


def previous_month_range(today: date) -> tuple[date, date]:
    """First and last day of the month before ``today``'s month.

    Requesting this range with eleven prior ``MONTH`` periods yields the last
    twelve complete months, most recent first.
    """
    year, month = month_before(today.year, today.month)
    return date(year, month, 1), last_day_of_month(year, month)


def trailing_months(today: date) -> list[tuple[int, int]]:
    """The twelve complete months before ``today``, most recent first."""
    return [
        month_before(today.year, today.month, offset)
        for offset in range(1, MONTHS_IN_WINDOW + 1)
    ]


def month_end_label(day: date) -> str:
    """Format ``day`` as a Xero column header, e.g. ``30 Sep 26``."""
    return f"{day.day:02d} {MONTH_ABBREVIATIONS[day.month - 1]} {day.year % 100:02d}"


def month_end_labels(today: date) -> list[str]:
    """Expected header labels for the monthly breakdown."""
    return [
        month_end_label(last_day_of_month(year, month))
        for year, month in trailing_months(today)
    ]
