"""Notification configuration dataclasses.

We keep config parsing outside the core, but these dataclasses define the
shape the core expects so adapters and app layers can build safely.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Optional


@dataclass(frozen=True)
class ConfigMeta:
    """Policy flags shared by every schedule entry of one configuration."""

    version: str
    description: str
    is_persistent: bool
    fixed_time: str
    weekdays_only: bool


@dataclass(frozen=True)
class NotificationContent:
    """Default title/subtitle used when an entry supplies no override."""

    title: str
    subtitle: str


@dataclass(frozen=True)
class ScheduleEntry:
    id: int
    day_offset: int
    description: str
    title: Optional[str] = None
    subtitle: Optional[str] = None


@dataclass(frozen=True)
class NotificationConfig:
    """A full configuration document as handed to the engine."""

    config: ConfigMeta
    notification_content: NotificationContent
    schedules: List[ScheduleEntry] = field(default_factory=list)

    @property
    def version(self) -> str:
        return self.config.version
