"""Unit tests for statement/due date resolution"""

from datetime import date
from credit_optimizer.utils.date_utils import (
    add_months,
    clamp_day,
    days_until,
    next_occurrence,
    resolve_cycle_dates,
)


def test_clamp_day_month_end():
    """Test day 31 clamps to the last day of shorter months"""
    assert clamp_day(2024, 2, 31) == date(2024, 2, 29)  # leap year
    assert clamp_day(2023, 2, 31) == date(2023, 2, 28)
    assert clamp_day(2024, 4, 31) == date(2024, 4, 30)
    assert clamp_day(2024, 1, 15) == date(2024, 1, 15)


def test_next_occurrence_same_day_counts():
    """Test reference date itself is a valid occurrence"""
    assert next_occurrence(15, date(2024, 1, 15)) == date(2024, 1, 15)


def test_next_occurrence_later_this_month():
    assert next_occurrence(20, date(2024, 1, 1)) == date(2024, 1, 20)


def test_next_occurrence_rolls_to_next_month():
    """Test a day already passed moves to the following month"""
    assert next_occurrence(15, date(2024, 1, 20)) == date(2024, 2, 15)
    assert next_occurrence(10, date(2024, 12, 11)) == date(2025, 1, 10)


def test_next_occurrence_clamps_in_february():
    """Test day 31 in February becomes the 28th/29th"""
    assert next_occurrence(31, date(2024, 2, 10)) == date(2024, 2, 29)
    assert next_occurrence(31, date(2023, 2, 1)) == date(2023, 2, 28)


def test_next_occurrence_clamps_again_after_roll():
    """Test rolled date is clamped to the following month's length"""
    assert next_occurrence(31, date(2024, 3, 31)) == date(2024, 3, 31)
    assert next_occurrence(30, date(2024, 1, 31)) == date(2024, 2, 29)


def test_add_months_keeps_anchor_day():
    """Test a month-end anchor is restored after passing through February"""
    february = add_months(date(2024, 1, 31), 1)
    assert february == date(2024, 2, 29)
    assert add_months(february, 1, day_of_month=31) == date(2024, 3, 31)


def test_add_months_across_year():
    assert add_months(date(2024, 11, 15), 2) == date(2025, 1, 15)


def test_add_months_does_not_mutate():
    """Test input date is untouched"""
    original = date(2024, 1, 31)
    add_months(original, 1)
    assert original == date(2024, 1, 31)


def test_resolve_cycle_dates_due_after_statement_next_month():
    """Test due day before statement day lands in the following month"""
    statement, due = resolve_cycle_dates(15, 10, date(2024, 1, 1))

    assert statement == date(2024, 1, 15)
    assert due == date(2024, 2, 10)


def test_resolve_cycle_dates_due_same_month():
    statement, due = resolve_cycle_dates(5, 28, date(2024, 1, 1))

    assert statement == date(2024, 1, 5)
    assert due == date(2024, 1, 28)


def test_resolve_cycle_dates_due_on_statement_day_rolls_forward():
    """Test due date equal to statement date is pushed one month"""
    statement, due = resolve_cycle_dates(15, 15, date(2024, 1, 1))

    assert statement == date(2024, 1, 15)
    assert due == date(2024, 2, 15)
    assert due > statement


def test_days_until():
    assert days_until(date(2024, 1, 15), date(2024, 1, 1)) == 14
    assert days_until(date(2024, 1, 1), date(2024, 1, 3)) == -2
