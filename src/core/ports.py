"""Ports (interfaces) used by the core scheduling pass.

Ports define the minimal contracts for fetching, permission, storage and
notification adapters so that the core can be reused with different backends.
"""

from __future__ import annotations

from datetime import datetime
from typing import List, Optional, Protocol, Set

from core.config import NotificationConfig
from core.models import PendingNotification, ResolvedNotification


class ConfigFetcherPort(Protocol):
    """Obtains and decodes the remote configuration document."""

    async def fetch(self, url: str) -> NotificationConfig:
        ...


class PermissionGatePort(Protocol):
    async def ensure_granted(self) -> bool:
        ...


class PendingStorePort(Protocol):
    def list_existing_identifiers(self) -> Set[str]:
        ...


class NotificationSinkPort(Protocol):
    """Accepts one resolved notification for later delivery."""

    async def submit(self, notification: ResolvedNotification) -> None:
        ...


class KeyValueStorePort(Protocol):
    def get(self, key: str) -> Optional[str]:
        ...

    def set(self, key: str, value: str) -> None:
        ...


class DueNotificationStorePort(Protocol):
    """Storage operations required by the delivery loop."""

    def list_due(self, now: datetime) -> List[PendingNotification]:
        ...

    def mark_delivered(self, identifier: str, delivered_at: datetime) -> None:
        ...


class NotifierPort(Protocol):
    """Delivery channel that shows a notification to the user."""

    async def send(self, notification: ResolvedNotification) -> None:
        ...
