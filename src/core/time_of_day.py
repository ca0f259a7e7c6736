"""Fixed time-of-day parsing (core domain)."""

from __future__ import annotations

from dataclasses import dataclass
from typing import List, Optional

DEFAULT_HOUR = 9
DEFAULT_MINUTE = 0


@dataclass(frozen=True)
class TimeOfDay:
    hour: int
    minute: int


def _parse_component(tokens: List[str], index: int, upper: int) -> Optional[int]:
    if index >= len(tokens):
        return None
    try:
        value = int(tokens[index])
    except ValueError:
        return None
    if not 0 <= value <= upper:
        return None
    return value


def parse_time_of_day(raw: str) -> TimeOfDay:
    """Parse an "HH:mm" string, falling back per component.

    A bad hour does not discard a good minute (and vice versa): "xx:30"
    becomes 09:30 and "18" becomes 18:00. This function never raises.
    """

    tokens = (raw or "").split(":")
    hour = _parse_component(tokens, 0, 23)
    minute = _parse_component(tokens, 1, 59)
    return TimeOfDay(
        hour=DEFAULT_HOUR if hour is None else hour,
        minute=DEFAULT_MINUTE if minute is None else minute,
    )
