"""Fire-date resolution and same-day deconfliction (core domain)."""

from __future__ import annotations

from datetime import datetime
from typing import Set

from core.available_days import at_time_of_day, available_day, day_key, start_of_day
from core.models import DayKey
from core.time_of_day import TimeOfDay

# Probe ceiling for deconfliction. Reaching it returns the last probe even
# if that day is still taken.
MAX_DECONFLICT_PROBES = 365


def resolve_fire_date(
    day_offset: int,
    time_of_day: TimeOfDay,
    weekdays_only: bool,
    now: datetime,
) -> datetime:
    """Return the candidate fire date for one schedule entry.

    The result is always strictly after `now`: a slot that has already
    passed (typically day_offset 0 late in the day) moves forward one more
    available day.
    """

    base_day = start_of_day(now)
    target_day = available_day(base_day, max(0, day_offset), weekdays_only)
    candidate = at_time_of_day(target_day, time_of_day)

    if candidate <= now:
        next_day = available_day(start_of_day(candidate), 1, weekdays_only)
        candidate = at_time_of_day(next_day, time_of_day)

    return candidate


def deconflict(
    candidate: datetime,
    used_dates: Set[DayKey],
    time_of_day: TimeOfDay,
    weekdays_only: bool,
) -> datetime:
    """Move `candidate` forward until its calendar day is unclaimed.

    `used_dates` is updated in place with the day of the returned date, so
    callers must feed entries through in schedule order.
    """

    probe = candidate
    attempts = 0
    while day_key(probe) in used_dates and attempts < MAX_DECONFLICT_PROBES:
        next_day = available_day(start_of_day(probe), 1, weekdays_only)
        probe = at_time_of_day(next_day, time_of_day)
        attempts += 1

    used_dates.add(day_key(probe))
    return probe
