"""Delivery loop for stored notifications.

Stands in for the OS service that fires a one-shot notification at its
wall-clock time: every tick, anything due and not yet delivered is sent
through the notifier and marked delivered.
"""

from __future__ import annotations

import asyncio
import logging
from datetime import datetime
from typing import Awaitable, Callable, Optional

from core.ports import DueNotificationStorePort, NotifierPort

LOGGER = logging.getLogger(__name__)


class NotificationDispatcher:
    """Sends due notifications exactly once each."""

    def __init__(self, store: DueNotificationStorePort, notifier: NotifierPort) -> None:
        self._store = store
        self._notifier = notifier

    async def dispatch_due(self, now: datetime) -> int:
        """Deliver every due notification and return how many were sent."""

        delivered = 0
        for pending in self._store.list_due(now):
            try:
                await self._notifier.send(pending.as_resolved())
            except Exception:
                # Left undelivered so the next tick retries it.
                LOGGER.exception("Failed to deliver %s", pending.identifier)
                continue
            self._store.mark_delivered(pending.identifier, now)
            delivered += 1
            LOGGER.info("Delivered %s", pending.identifier)
        return delivered

    async def run_forever(
        self,
        poll_interval_seconds: float,
        clock: Callable[[], datetime] = datetime.now,
        on_tick: Optional[Callable[[datetime], Awaitable[None]]] = None,
    ) -> None:
        """Poll until cancelled.

        on_tick runs before each delivery round, which lets the app layer
        re-run the scheduling pass periodically.
        """

        while True:
            now = clock()
            if on_tick is not None:
                await on_tick(now)
            await self.dispatch_due(now)
            await asyncio.sleep(poll_interval_seconds)
