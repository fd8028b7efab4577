"""Date arithmetic for policy durations and interest periods."""

from __future__ import annotations

from datetime import date

from dateutil.relativedelta import relativedelta


def elapsed_years(start: date, end: date) -> int:
    """Whole calendar years from start to end (floor)."""
    return relativedelta(end, start).years


def days_between(start: date, end: date) -> int:
    """Signed day count from start to end."""
    return (end - start).days


def age_on(date_of_birth: date, on_date: date) -> int:
    """Age in completed years."""
    return relativedelta(on_date, date_of_birth).years
