"""Date manipulation utilities for statement and due-date cycles"""

from calendar import monthrange
from datetime import date


def days_in_month(year: int, month: int) -> int:
    """Number of days in the given month"""
    return monthrange(year, month)[1]


def clamp_day(year: int, month: int, day_of_month: int) -> date:
    """Build a date, clamping the day to the last valid day of that month (31 -> Feb 28/29)"""
    return date(year, month, min(day_of_month, days_in_month(year, month)))


def add_months(from_date: date, months: int, day_of_month: int | None = None) -> date:
    """
    Shift a date by whole months without mutating it.

    The day is taken from ``day_of_month`` when given (so a cycle anchored on the
    31st keeps landing on month-end) and clamped to the target month's length.
    """
    month_index = from_date.month - 1 + months
    year = from_date.year + month_index // 12
    month = month_index % 12 + 1
    return clamp_day(year, month, day_of_month or from_date.day)


def next_occurrence(day_of_month: int, reference_date: date) -> date:
    """
    Next occurrence of a day-of-month on or after the reference date.

    Requirements:
    - Day is clamped to the reference month's length first
    - If that date is on/after the reference date it is returned as-is
    - Otherwise the same day (clamped again) in the following month
    """
    this_month = clamp_day(reference_date.year, reference_date.month, day_of_month)
    if this_month >= reference_date:
        return this_month
    return add_months(this_month, 1, day_of_month)


def resolve_cycle_dates(statement_day: int, due_day: int, reference_date: date) -> tuple[date, date]:
    """
    Resolve the next statement date and the due date that follows it.

    The due date is looked up relative to the resolved statement date; a due date
    landing on or before the statement is rolled forward one month, since a due
    date always belongs to the cycle that the statement closes.

    Returns: (next_statement_date, next_due_date)
    """
    statement_date = next_occurrence(statement_day, reference_date)
    due_date = next_occurrence(due_day, statement_date)

    if due_date <= statement_date:
        due_date = add_months(due_date, 1, due_day)

    return statement_date, due_date


def days_until(target: date, from_date: date) -> int:
    """Whole days from ``from_date`` to ``target`` (negative when target is past)"""
    return (target - from_date).days

