"""Application entry point for notigate."""

from __future__ import annotations

import argparse
import asyncio
import logging
import os
from datetime import datetime, timedelta
from logging.handlers import RotatingFileHandler
from typing import Optional

from art import tprint
from dotenv import load_dotenv
from rich.console import Console
from rich.table import Table

import settings
from adapters.http_config_fetcher import HttpConfigFetcher
from adapters.notification_formatting import format_fire_date, format_origin_label
from adapters.pending_sink import StoredNotificationSink
from adapters.permission_gate import BotConfigGate, RetryingPermissionGate, TelegramSessionGate
from adapters.sqlite_storage import SQLiteStorage
from adapters.telegram_bot_notifier import TelegramBotNotifier
from adapters.telegram_login import authorize, build_client
from adapters.telegram_notifier import TelegramSavedMessagesNotifier
from core.dispatcher import NotificationDispatcher
from core.engine import SchedulingEngine
from core.errors import ConfigFetchError, PermissionDenied
from core.models import ResolvedNotification, SchedulingReport
from core.ports import NotifierPort, PermissionGatePort
from core.scheduler import LAST_APPLIED_VERSION_KEY, NotificationScheduler

NAME = "NOTIGATE"
FONT = "tarty-1"

LOGGER = logging.getLogger(__name__)


def _print_banner() -> None:
    tprint(NAME, FONT, space=1)


class _RedactingFormatter(logging.Formatter):
    def __init__(self, secrets: list[str], fmt: str, datefmt: Optional[str] = None) -> None:
        super().__init__(fmt=fmt, datefmt=datefmt)
        self._secrets = [secret for secret in secrets if secret]

    def format(self, record: logging.LogRecord) -> str:
        message = super().format(record)
        for secret in self._secrets:
            message = message.replace(secret, "***")
        return message


def _collect_redaction_values(config: dict) -> list[str]:
    redact_cfg = config.get("redact", {}) if config else {}
    if not redact_cfg.get("enabled", False):
        return []
    values = []
    for name in redact_cfg.get("patterns", []):
        value = os.getenv(name)
        if value:
            values.append(value)
    return sorted(set(values), key=len, reverse=True)


def _configure_logging() -> None:
    config = settings.LOGGING or {}
    if not config.get("enabled", False):
        return

    level_name = str(config.get("level", "INFO")).upper()
    level = getattr(logging, level_name, logging.INFO)

    fmt = "%(asctime)s %(levelname)s %(name)s: %(message)s"
    datefmt = "%Y-%m-%d %H:%M:%S"
    formatter = _RedactingFormatter(_collect_redaction_values(config), fmt=fmt, datefmt=datefmt)

    handlers: list[logging.Handler] = []

    if config.get("console", True):
        console_handler = logging.StreamHandler()
        console_handler.setLevel(level)
        console_handler.setFormatter(formatter)
        handlers.append(console_handler)

    file_cfg = config.get("file", {})
    if file_cfg.get("enabled", False):
        path = file_cfg.get("path", "logs/notigate.log")
        if not os.path.isabs(path):
            path = os.path.join(settings.PROJECT_ROOT, path)
        directory = os.path.dirname(path)
        if directory:
            os.makedirs(directory, exist_ok=True)

        file_handler = RotatingFileHandler(
            path,
            maxBytes=int(file_cfg.get("max_bytes", 5 * 1024 * 1024)),
            backupCount=int(file_cfg.get("backup_count", 5)),
            encoding="utf-8",
        )
        file_handler.setLevel(level)
        file_handler.setFormatter(formatter)
        handlers.append(file_handler)

    if not handlers:
        return

    logging.basicConfig(level=level, handlers=handlers)


def _open_storage() -> SQLiteStorage:
    storage = SQLiteStorage(settings.DB_PATH)
    storage.init_db()
    return storage


def _build_delivery(client, interactive: bool) -> tuple[PermissionGatePort, NotifierPort]:
    """Select the gate and notifier pair for the configured delivery method."""

    if settings.NOTIFICATION_METHOD == "bot":
        bot_token = os.getenv("BOT_API")
        chat_id = str(settings.BOT_CHAT_ID) if settings.BOT_CHAT_ID else None
        gate: PermissionGatePort = BotConfigGate(bot_token, chat_id)
        notifier: NotifierPort = TelegramBotNotifier(
            bot_token=bot_token or "",
            chat_id=chat_id or "",
        )
    elif settings.NOTIFICATION_METHOD == "saved_messages":
        gate = TelegramSessionGate(client, interactive=interactive)
        notifier = TelegramSavedMessagesNotifier(client)
    else:
        raise RuntimeError("notification_method must be 'saved_messages' or 'bot'")

    if settings.PERMISSION_RETRY_ENABLED:
        gate = RetryingPermissionGate(
            gate,
            delay_seconds=settings.PERMISSION_RETRY_DELAY_SECONDS,
            max_attempts=settings.PERMISSION_RETRY_MAX_ATTEMPTS,
        )
    return gate, notifier


def _build_client():
    return build_client(session_dir=os.path.dirname(settings.DB_PATH))


def _needs_client() -> bool:
    return settings.NOTIFICATION_METHOD == "saved_messages"


def _build_scheduler(storage: SQLiteStorage, gate: PermissionGatePort) -> NotificationScheduler:
    if not settings.CONFIG_URL:
        raise RuntimeError("config_url is required in config.json")
    return NotificationScheduler(
        config_url=settings.CONFIG_URL,
        fetcher=HttpConfigFetcher(timeout_seconds=settings.FETCH_TIMEOUT_SECONDS),
        permission_gate=gate,
        pending_store=storage,
        sink=StoredNotificationSink(storage),
        state_store=storage,
    )


def _log_report(report: SchedulingReport) -> None:
    if report.skipped:
        return
    LOGGER.info(
        "Config v%s applied: scheduled=%s, failed=%s",
        report.version,
        len(report.scheduled),
        len(report.failed),
    )


async def _run_pass(scheduler: NotificationScheduler, force: bool) -> bool:
    """Run one scheduling pass; return False when it was aborted."""

    try:
        report = await scheduler.schedule(force=force)
    except PermissionDenied:
        LOGGER.warning("Notifications not granted")
        return False
    except ConfigFetchError as exc:
        LOGGER.error("Config could not be applied: %s", exc)
        return False
    _log_report(report)
    return True


def _schedule(force: bool) -> None:
    _configure_logging()
    storage = _open_storage()

    async def _run_schedule() -> bool:
        client = _build_client() if _needs_client() else None
        gate, _ = _build_delivery(client, interactive=True)
        try:
            return await _run_pass(_build_scheduler(storage, gate), force)
        finally:
            if client is not None:
                await client.disconnect()

    if not asyncio.run(_run_schedule()):
        raise SystemExit(1)


def _run() -> None:
    _print_banner()
    _configure_logging()
    LOGGER.info("Starting notigate")
    storage = _open_storage()

    async def _run_forever() -> None:
        client = _build_client() if _needs_client() else None
        gate, notifier = _build_delivery(client, interactive=False)
        scheduler = _build_scheduler(storage, gate)
        dispatcher = NotificationDispatcher(storage, notifier)

        interval = timedelta(minutes=settings.RESCHEDULE_INTERVAL_MINUTES)
        next_pass: list[datetime] = [datetime.min]

        async def _maybe_reschedule(now: datetime) -> None:
            if now < next_pass[0]:
                return
            next_pass[0] = now + interval
            try:
                await _run_pass(scheduler, force=False)
            except Exception:
                LOGGER.exception("Scheduling pass failed")

        LOGGER.info("Delivery loop started (poll every %ss)", settings.POLL_INTERVAL_SECONDS)
        try:
            await dispatcher.run_forever(settings.POLL_INTERVAL_SECONDS, on_tick=_maybe_reschedule)
        finally:
            if client is not None:
                await client.disconnect()

    try:
        asyncio.run(_run_forever())
    except KeyboardInterrupt:
        LOGGER.info("Stopped")


def _render_notifications(title: str, rows: list[ResolvedNotification], delivered: Optional[dict] = None) -> None:
    table = Table(title=title)
    table.add_column("Fire date")
    table.add_column("Origin")
    table.add_column("Title")
    table.add_column("Body")
    if delivered is not None:
        table.add_column("Delivered")
    for row in rows:
        cells = [format_fire_date(row), format_origin_label(row), row.title, row.body]
        if delivered is not None:
            stamp = delivered.get(row.identifier)
            cells.append(stamp.strftime("%H:%M %d-%m-%Y") if stamp else "-")
        table.add_row(*cells)
    Console().print(table)


def _preview(file_path: Optional[str], force: bool) -> None:
    """Dry run: resolve the configuration without scheduling anything."""

    _configure_logging()
    storage = _open_storage()
    fetcher = HttpConfigFetcher(timeout_seconds=settings.FETCH_TIMEOUT_SECONDS)
    try:
        if file_path:
            with open(file_path, "rb") as handle:
                config = fetcher.decode(handle.read())
        else:
            config = asyncio.run(fetcher.fetch(settings.CONFIG_URL))
    except ConfigFetchError as exc:
        LOGGER.error("Config could not be loaded: %s", exc)
        raise SystemExit(1)

    result = SchedulingEngine().apply(
        config,
        storage.list_existing_identifiers(),
        storage.get(LAST_APPLIED_VERSION_KEY),
        now=datetime.now(),
        force=force,
    )
    if result.skip:
        print(f"Persistent config v{config.version} is already applied; nothing to schedule.")
        return
    _render_notifications(f"Config v{config.version} preview", result.records)


def _pending(include_delivered: bool) -> None:
    storage = _open_storage()
    stored = storage.list_pending(include_delivered=include_delivered)
    if not stored:
        print("No stored notifications.")
        return
    delivered = {item.identifier: item.delivered_at for item in stored}
    _render_notifications(
        "Stored notifications",
        [item.as_resolved() for item in stored],
        delivered if include_delivered else None,
    )
    print(f"Last applied config version: {storage.get(LAST_APPLIED_VERSION_KEY) or '-'}")


def _login() -> None:
    _print_banner()
    client = _build_client()

    async def _run_login() -> None:
        await client.connect()
        await authorize(client)
        me = await client.get_me()
        print(f"Logged in as: {me.first_name}")
        await client.disconnect()

    client.loop.run_until_complete(_run_login())


def main(argv: Optional[list[str]] = None) -> None:
    load_dotenv()
    parser = argparse.ArgumentParser(prog="notigate")
    subparsers = parser.add_subparsers(dest="command")

    subparsers.add_parser("run", help="Schedule, then deliver notifications as they fall due")
    schedule_parser = subparsers.add_parser("schedule", help="Run one scheduling pass")
    schedule_parser.add_argument("--force", action="store_true", help="Re-apply a persistent config")
    preview_parser = subparsers.add_parser("preview", help="Show resolved fire dates without scheduling")
    preview_parser.add_argument("--file", help="Read the config document from a local JSON file")
    preview_parser.add_argument("--force", action="store_true")
    pending_parser = subparsers.add_parser("pending", help="List stored notifications")
    pending_parser.add_argument("--all", action="store_true", help="Include delivered notifications")
    subparsers.add_parser("login", help="Authorize the Telegram session")

    args = parser.parse_args(argv)
    if args.command == "schedule":
        _schedule(args.force)
        return
    if args.command == "preview":
        _preview(args.file, args.force)
        return
    if args.command == "pending":
        _pending(args.all)
        return
    if args.command == "login":
        _login()
        return
    _run()


if __name__ == "__main__":
    main()
