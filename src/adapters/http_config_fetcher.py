"""HTTP configuration fetch adapter.

Implements the core ConfigFetcherPort with urllib. The blocking request runs
in a worker thread so the event loop stays responsive.
"""

from __future__ import annotations

import asyncio
import json
import logging
import urllib.error
import urllib.request

from adapters.config_decoder import build_notification_config
from core.config import NotificationConfig
from core.errors import ConfigDecodeError, ConfigHttpError, ConfigUnreachable

LOGGER = logging.getLogger(__name__)


class HttpConfigFetcher:
    """Downloads and decodes the notification configuration document."""

    def __init__(self, timeout_seconds: float = 10.0) -> None:
        self._timeout = timeout_seconds

    def _download(self, url: str) -> bytes:
        try:
            request = urllib.request.Request(url, headers={"Accept": "application/json"})
        except ValueError as exc:
            raise ConfigUnreachable(url, f"invalid URL ({exc})") from exc

        try:
            with urllib.request.urlopen(request, timeout=self._timeout) as response:
                status = getattr(response, "status", 200)
                if not 200 <= status <= 299:
                    raise ConfigHttpError(url, status)
                return response.read()
        except urllib.error.HTTPError as exc:
            raise ConfigHttpError(url, exc.code) from exc
        except urllib.error.URLError as exc:
            raise ConfigUnreachable(url, str(exc.reason)) from exc
        except (OSError, ValueError) as exc:
            raise ConfigUnreachable(url, str(exc)) from exc

    def decode(self, body: bytes) -> NotificationConfig:
        """Parse a raw response body into a NotificationConfig."""

        if not body or not body.strip():
            raise ConfigDecodeError(ConfigDecodeError.DATA_CORRUPTED, "", "empty config response")
        try:
            payload = json.loads(body.decode("utf-8"))
        except (UnicodeDecodeError, json.JSONDecodeError) as exc:
            raise ConfigDecodeError(ConfigDecodeError.DATA_CORRUPTED, "", str(exc)) from exc
        return build_notification_config(payload)

    async def fetch(self, url: str) -> NotificationConfig:
        LOGGER.info("Downloading config: %s", url)
        body = await asyncio.to_thread(self._download, url)
        return self.decode(body)
