"""Scheduling pass orchestration.

This module is integration-agnostic. It only relies on ports for fetching,
permission, storage and the notification sink. The ordering is strict:
permission, pending snapshot, fetch, engine, hand-off, then persistence of
the applied version.
"""

from __future__ import annotations

import asyncio
import logging
from datetime import datetime
from typing import Callable, Optional

from core.engine import SchedulingEngine
from core.errors import PermissionDenied, SinkSubmissionFailed
from core.models import ResolvedNotification, SchedulingReport
from core.ports import (
    ConfigFetcherPort,
    KeyValueStorePort,
    NotificationSinkPort,
    PendingStorePort,
    PermissionGatePort,
)

LOGGER = logging.getLogger(__name__)

LAST_APPLIED_VERSION_KEY = "last_applied_config_version"


class NotificationScheduler:
    """Runs one scheduling pass end to end."""

    def __init__(
        self,
        config_url: str,
        fetcher: ConfigFetcherPort,
        permission_gate: PermissionGatePort,
        pending_store: PendingStorePort,
        sink: NotificationSinkPort,
        state_store: KeyValueStorePort,
        clock: Callable[[], datetime] = datetime.now,
        engine: Optional[SchedulingEngine] = None,
    ) -> None:
        self._config_url = config_url
        self._fetcher = fetcher
        self._permission_gate = permission_gate
        self._pending_store = pending_store
        self._sink = sink
        self._state_store = state_store
        self._clock = clock
        self._engine = engine or SchedulingEngine()

    async def schedule(self, force: bool = False) -> SchedulingReport:
        """Apply the remote configuration once.

        Fetch and decode errors propagate before anything is written, so a
        failed pass leaves the stored version untouched.
        """

        if not await self._permission_gate.ensure_granted():
            raise PermissionDenied("Notification delivery is not granted")

        existing_ids = self._pending_store.list_existing_identifiers()
        LOGGER.info("Pending notifications: %s", len(existing_ids))

        config = await self._fetcher.fetch(self._config_url)
        last_applied_version = self._state_store.get(LAST_APPLIED_VERSION_KEY)

        result = self._engine.apply(
            config,
            existing_ids,
            last_applied_version,
            now=self._clock(),
            force=force,
        )
        report = SchedulingReport(version=config.version)
        if result.skip:
            LOGGER.info("Persistent config already applied (version %s). Skipping.", config.version)
            report.skipped = True
            return report

        LOGGER.info("Applying config v%s (%s new notifications)", config.version, len(result.records))
        outcomes = await asyncio.gather(
            *(self._submit(record) for record in result.records),
            return_exceptions=True,
        )
        for record, outcome in zip(result.records, outcomes):
            if isinstance(outcome, SinkSubmissionFailed):
                report.failed.append(outcome)
            elif isinstance(outcome, BaseException):
                raise outcome
            else:
                report.scheduled.append(record.identifier)

        # Partial sink failures still count as an applied version.
        if result.new_last_applied_version is not None:
            self._state_store.set(LAST_APPLIED_VERSION_KEY, result.new_last_applied_version)
        return report

    async def _submit(self, record: ResolvedNotification) -> None:
        try:
            await self._sink.submit(record)
        except asyncio.CancelledError:
            raise
        except Exception as exc:
            LOGGER.error("Failed to schedule %s: %s", record.identifier, exc)
            raise SinkSubmissionFailed(record.identifier, str(exc)) from exc
        LOGGER.info("Scheduled %s at %s", record.identifier, record.fire_date.isoformat())

