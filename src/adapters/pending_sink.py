"""Notification sink adapter backed by the SQLite pending table."""

from __future__ import annotations

from datetime import datetime
from typing import Callable

from adapters.sqlite_storage import SQLiteStorage
from core.models import ResolvedNotification


class StoredNotificationSink:
    """Stores resolved notifications for the delivery loop to fire later."""

    def __init__(self, storage: SQLiteStorage, clock: Callable[[], datetime] = datetime.now) -> None:
        self._storage = storage
        self._clock = clock

    async def submit(self, notification: ResolvedNotification) -> None:
        # A one-shot trigger in the past would never fire.
        if notification.fire_date <= self._clock():
            raise ValueError(f"fire date {notification.fire_date.isoformat()} is not in the future")
        self._storage.add_pending(notification)
