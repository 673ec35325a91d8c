"""
Calendar arithmetic for billing periods.

Uses date only (no timezone). Month and year steps clamp to the last day of
the target month: Jan 31 + 1 month = Feb 28 (Feb 29 in leap years),
Feb 29 + 1 year = Feb 28. Every step is taken from the anchor, so a clamped
renewal never shifts the following ones (Jan 31 -> Feb 28 -> Mar 31).
"""
import calendar
from datetime import date


def last_day_of_month(year: int, month: int) -> int:
    return calendar.monthrange(year, month)[1]


def add_months(d: date, n: int) -> date:
    month = d.month - 1 + n
    year = d.year + month // 12
    month = month % 12 + 1
    last = last_day_of_month(year, month)
    day = min(d.day, last)
    return date(year, month, day)


def add_years(d: date, n: int) -> date:
    return add_months(d, 12 * n)


def with_year(d: date, year: int) -> date:
    """Re-anchor d to another year (clamped)."""
    return add_years(d, year - d.year)


def months_between(start: date, end: date) -> int:
    """Whole calendar months from start's month to end's month (day ignored)."""
    return (end.year - start.year) * 12 + (end.month - start.month)
