"""Core domain models.

These dataclasses are shared across the core and adapters to avoid tight
coupling to any integration-specific types.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import FrozenSet, List, Optional, Set, Tuple

from core.errors import SinkSubmissionFailed

DayKey = Tuple[int, int, int]


@dataclass(frozen=True)
class ResolvedNotification:
    """One notification ready to be handed to the sink."""

    identifier: str
    title: str
    body: str
    fire_date: datetime


@dataclass
class SchedulingState:
    """Accumulator for a single engine pass.

    used_dates holds the calendar days already claimed in this pass, while
    existing_ids is the snapshot of identifiers the host already has pending.
    """

    existing_ids: FrozenSet[str] = frozenset()
    used_dates: Set[DayKey] = field(default_factory=set)


@dataclass(frozen=True)
class ApplyResult:
    """Outcome of SchedulingEngine.apply."""

    skip: bool
    records: List[ResolvedNotification]
    new_last_applied_version: Optional[str]


@dataclass
class SchedulingReport:
    """What a full scheduling pass did, for logging and the CLI."""

    version: str
    skipped: bool = False
    scheduled: List[str] = field(default_factory=list)
    failed: List[SinkSubmissionFailed] = field(default_factory=list)


@dataclass(frozen=True)
class PendingNotification:
    """A stored notification as seen by the delivery loop and the CLI."""

    identifier: str
    title: str
    body: str
    fire_date: datetime
    delivered_at: Optional[datetime] = None

    def as_resolved(self) -> ResolvedNotification:
        return ResolvedNotification(
            identifier=self.identifier,
            title=self.title,
            body=self.body,
            fire_date=self.fire_date,
        )
