"""Available-day arithmetic (core domain).

An available day is any calendar day when weekdays_only is off, and Monday
through Friday when it is on. All datetimes are local wall-clock times; the
tzinfo of the input, if any, is carried through untouched.
"""

from __future__ import annotations

from datetime import datetime, timedelta

from core.models import DayKey
from core.time_of_day import TimeOfDay

# datetime.weekday(): Monday == 0 ... Saturday == 5, Sunday == 6
EXCLUDED_WEEKDAYS = frozenset({5, 6})

# Safety bound for the forward shift, not a domain constraint.
WEEKDAY_SHIFT_LIMIT = 14

ONE_DAY = timedelta(days=1)


def start_of_day(moment: datetime) -> datetime:
    return moment.replace(hour=0, minute=0, second=0, microsecond=0)


def at_time_of_day(day: datetime, time_of_day: TimeOfDay) -> datetime:
    """Return `day` with the fixed time applied (seconds zeroed)."""

    return day.replace(
        hour=time_of_day.hour,
        minute=time_of_day.minute,
        second=0,
        microsecond=0,
    )


def day_key(moment: datetime) -> DayKey:
    """Calendar-day key used for same-day collision checks."""

    return (moment.year, moment.month, moment.day)


def is_included_day(day: datetime, weekdays_only: bool) -> bool:
    if not weekdays_only:
        return True
    return day.weekday() not in EXCLUDED_WEEKDAYS


def shift_to_included_day(day: datetime, weekdays_only: bool) -> datetime:
    """Move a day forward until it is an included day."""

    attempts = 0
    while not is_included_day(day, weekdays_only) and attempts < WEEKDAY_SHIFT_LIMIT:
        day += ONE_DAY
        attempts += 1
    return day


def available_day(base_day: datetime, count: int, weekdays_only: bool) -> datetime:
    """Return the day `count` available days after `base_day`.

    With weekdays_only, Saturday and Sunday are stepped over without
    consuming the count. A count of zero only normalizes a weekend base day
    forward to the next weekday.
    """

    day = base_day
    remaining = max(0, count)
    while remaining > 0:
        day += ONE_DAY
        if is_included_day(day, weekdays_only):
            remaining -= 1

    if weekdays_only:
        day = shift_to_included_day(day, weekdays_only)
    return day
