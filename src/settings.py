"""Static configuration for notigate.

All user-editable settings (config URL, delivery method, polling, logging)
live in a single JSON file for quick edits without touching Python. Secrets
stay in the environment (.env).
"""

import json
import os

PROJECT_ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))

CONFIG_PATH = os.path.join(PROJECT_ROOT, "config.json")


def _load_json_config() -> dict:
    """Load config.json with a flat, user-friendly schema."""

    if not os.path.exists(CONFIG_PATH):
        raise FileNotFoundError(f"Config file not found: {CONFIG_PATH}")

    with open(CONFIG_PATH, "r", encoding="utf-8") as handle:
        return json.load(handle)


def _resolve_path(path: str) -> str:
    if os.path.isabs(path):
        return path
    return os.path.join(PROJECT_ROOT, path)


_CONFIG = _load_json_config()

# Expose the raw config for modules that need structured access.
CONFIG = _CONFIG

# Remote notification configuration document.
CONFIG_URL = _CONFIG.get("config_url", "")

# Where to store the SQLite database (applied version + pending notifications).
DB_PATH = _resolve_path(_CONFIG.get("db_path", "notigate.db"))

_fetch = _CONFIG.get("fetch", {})
FETCH_TIMEOUT_SECONDS = float(_fetch.get("timeout_seconds", 10))

# Some deployments re-poll a denied permission after a fixed delay instead
# of failing the pass straight away.
_permission = _CONFIG.get("permission", {})
PERMISSION_RETRY_ENABLED = bool(_permission.get("retry_enabled", False))
PERMISSION_RETRY_DELAY_SECONDS = float(_permission.get("retry_delay_seconds", 60))
PERMISSION_RETRY_MAX_ATTEMPTS = int(_permission.get("retry_max_attempts", 3))

# Notification method switches adapters without changing core logic.
_notifications = _CONFIG.get("notifications", {})
NOTIFICATION_METHOD = _notifications.get("notification_method", "saved_messages")
# Bot chat id is only required when notification_method=bot.
BOT_CHAT_ID = _notifications.get("bot_chat_id")

# Delivery loop settings for `notigate run`.
_dispatch = _CONFIG.get("dispatch", {})
POLL_INTERVAL_SECONDS = float(_dispatch.get("poll_interval_seconds", 30))
RESCHEDULE_INTERVAL_MINUTES = float(_dispatch.get("reschedule_interval_minutes", 60))

# Logging configuration (optional).
LOGGING = _CONFIG.get("logging", {})
