from __future__ import annotations

from datetime import datetime

from core.available_days import (
    at_time_of_day,
    available_day,
    day_key,
    is_included_day,
    start_of_day,
)
from core.time_of_day import TimeOfDay

# 2024-01-01 is a Monday.
MONDAY = datetime(2024, 1, 1)
THURSDAY = datetime(2024, 1, 4)
FRIDAY = datetime(2024, 1, 5)
SATURDAY = datetime(2024, 1, 6)
SUNDAY = datetime(2024, 1, 7)
NEXT_MONDAY = datetime(2024, 1, 8)


def test_weekend_days_are_excluded_only_when_requested() -> None:
    assert not is_included_day(SATURDAY, weekdays_only=True)
    assert not is_included_day(SUNDAY, weekdays_only=True)
    assert is_included_day(FRIDAY, weekdays_only=True)
    assert is_included_day(SUNDAY, weekdays_only=False)


def test_zero_count_returns_base_day() -> None:
    assert available_day(MONDAY, 0, weekdays_only=True) == MONDAY
    assert available_day(SATURDAY, 0, weekdays_only=False) == SATURDAY


def test_zero_count_normalizes_weekend_forward() -> None:
    assert available_day(SATURDAY, 0, weekdays_only=True) == NEXT_MONDAY
    assert available_day(SUNDAY, 0, weekdays_only=True) == NEXT_MONDAY


def test_weekends_do_not_consume_the_count() -> None:
    assert available_day(FRIDAY, 1, weekdays_only=True) == NEXT_MONDAY
    assert available_day(THURSDAY, 2, weekdays_only=True) == NEXT_MONDAY
    assert available_day(MONDAY, 5, weekdays_only=True) == NEXT_MONDAY


def test_calendar_days_when_weekends_allowed() -> None:
    assert available_day(FRIDAY, 1, weekdays_only=False) == SATURDAY
    assert available_day(MONDAY, 7, weekdays_only=False) == NEXT_MONDAY


def test_negative_count_is_treated_as_zero() -> None:
    assert available_day(MONDAY, -2, weekdays_only=False) == MONDAY


def test_time_helpers() -> None:
    moment = datetime(2024, 1, 1, 17, 45, 12, 500)
    assert start_of_day(moment) == MONDAY
    assert at_time_of_day(moment, TimeOfDay(hour=7, minute=5)) == datetime(2024, 1, 1, 7, 5)
    assert day_key(moment) == (2024, 1, 1)
