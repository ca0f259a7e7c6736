"""Scheduling engine (core domain).

The engine turns one configuration plus a snapshot of already-pending
identifiers into a list of resolved notifications. It is synchronous and
free of side effects so it can be tested without any async harness:

1) Skip persistent configurations that were already applied
2) Mint each entry's identifier and drop the ones already pending
3) Resolve a future fire date for the entry
4) Deconflict it against days claimed earlier in the same pass
5) Fill in title/body from overrides or defaults
"""

from __future__ import annotations

from datetime import datetime
from typing import AbstractSet, List, Optional

from core.config import NotificationConfig, ScheduleEntry
from core.fire_dates import deconflict, resolve_fire_date
from core.identifiers import mint_identifier
from core.models import ApplyResult, ResolvedNotification, SchedulingState
from core.time_of_day import TimeOfDay, parse_time_of_day


def should_skip(
    config: NotificationConfig,
    existing_ids: AbstractSet[str],
    last_applied_version: Optional[str],
    force: bool,
) -> bool:
    """Return True when a persistent config was already applied unchanged."""

    meta = config.config
    return (
        meta.is_persistent
        and not force
        and last_applied_version == meta.version
        and bool(existing_ids)
    )


class SchedulingEngine:
    """Resolves schedule entries into conflict-free, future fire dates."""

    def apply(
        self,
        config: NotificationConfig,
        existing_ids: AbstractSet[str],
        last_applied_version: Optional[str],
        now: datetime,
        force: bool = False,
    ) -> ApplyResult:
        if should_skip(config, existing_ids, last_applied_version, force):
            return ApplyResult(skip=True, records=[], new_last_applied_version=None)

        state = SchedulingState(existing_ids=frozenset(existing_ids))
        time_of_day = parse_time_of_day(config.config.fixed_time)

        # Entries must be resolved strictly in list order: collision outcomes
        # depend on which days earlier entries already claimed.
        records: List[ResolvedNotification] = []
        for entry in config.schedules:
            record = self._resolve_entry(config, entry, time_of_day, state, now)
            if record is not None:
                records.append(record)

        return ApplyResult(
            skip=False,
            records=records,
            new_last_applied_version=config.config.version,
        )

    def _resolve_entry(
        self,
        config: NotificationConfig,
        entry: ScheduleEntry,
        time_of_day: TimeOfDay,
        state: SchedulingState,
        now: datetime,
    ) -> Optional[ResolvedNotification]:
        identifier = mint_identifier(config.config.version, entry.id)
        # Already pending entries keep their date and do not claim a day here.
        if identifier in state.existing_ids:
            return None

        weekdays_only = config.config.weekdays_only
        candidate = resolve_fire_date(entry.day_offset, time_of_day, weekdays_only, now)
        fire_date = deconflict(candidate, state.used_dates, time_of_day, weekdays_only)

        defaults = config.notification_content
        return ResolvedNotification(
            identifier=identifier,
            title=entry.title if entry.title is not None else defaults.title,
            body=entry.subtitle if entry.subtitle is not None else defaults.subtitle,
            fire_date=fire_date,
        )
