"""Permission gate adapters.

A scheduling pass only runs once delivery has been granted. For Saved
Messages that means an authorized Telethon session; for the Bot API it means
a configured token and chat.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Optional

from telethon import TelegramClient

from adapters.telegram_login import authorize
from core.ports import PermissionGatePort

LOGGER = logging.getLogger(__name__)


class TelegramSessionGate:
    """Granted when the Telethon session is authorized.

    An unauthorized session is the "not determined" state: when interactive,
    the login flow runs once and its outcome decides the grant.
    """

    def __init__(self, client: TelegramClient, interactive: bool = False) -> None:
        self._client = client
        self._interactive = interactive

    async def ensure_granted(self) -> bool:
        if not self._client.is_connected():
            await self._client.connect()
        if await self._client.is_user_authorized():
            return True
        if not self._interactive:
            LOGGER.warning("Telegram session is not authorized; run `notigate login` first")
            return False
        try:
            await authorize(self._client)
        except Exception:
            LOGGER.exception("Telegram authorization failed")
            return False
        return await self._client.is_user_authorized()


class BotConfigGate:
    """Granted when both the bot token and the target chat are configured."""

    def __init__(self, bot_token: Optional[str], chat_id: Optional[str]) -> None:
        self._bot_token = bot_token
        self._chat_id = chat_id

    async def ensure_granted(self) -> bool:
        if not self._bot_token:
            LOGGER.warning("BOT_API is not set")
            return False
        if not self._chat_id:
            LOGGER.warning("notifications.bot_chat_id is not set")
            return False
        return True


class RetryingPermissionGate:
    """Re-polls a denied gate after a fixed delay, a bounded number of times."""

    def __init__(self, inner: PermissionGatePort, delay_seconds: float, max_attempts: int) -> None:
        self._inner = inner
        self._delay = delay_seconds
        self._max_attempts = max(1, max_attempts)

    async def ensure_granted(self) -> bool:
        for attempt in range(1, self._max_attempts + 1):
            if await self._inner.ensure_granted():
                return True
            if attempt < self._max_attempts:
                LOGGER.info(
                    "Notifications not granted (attempt %s/%s), retrying in %ss",
                    attempt,
                    self._max_attempts,
                    self._delay,
                )
                await asyncio.sleep(self._delay)
        return False
