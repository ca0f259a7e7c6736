"""Telegram notification adapter for Saved Messages.

Formats a human-readable Markdown message and sends it to Saved Messages.
"""

from __future__ import annotations

from adapters.notification_formatting import format_notification
from core.models import ResolvedNotification


class TelegramSavedMessagesNotifier:
    """Notifier adapter that sends messages to the user's Saved Messages."""

    def __init__(self, client) -> None:
        self._client = client

    async def send(self, notification: ResolvedNotification) -> None:
        message = format_notification(notification, mode="markdown")
        await self._client.send_message("me", message, parse_mode="Markdown")
