"""Shared notification formatting helpers.

Keeping formatting here prevents drift between adapters and keeps messages
consistent regardless of delivery channel.
"""

from __future__ import annotations

import html

from core.identifiers import split_identifier
from core.models import ResolvedNotification

DIVIDER = "──────────────"


def format_fire_date(notification: ResolvedNotification) -> str:
    return notification.fire_date.strftime("%H:%M %d-%m-%Y")


def format_origin_label(notification: ResolvedNotification) -> str:
    """Return "config v<version> #<id>" for minted identifiers."""

    parts = split_identifier(notification.identifier)
    if parts is None:
        return notification.identifier
    version, entry_id = parts
    return f"config v{version} #{entry_id}"


def _format_markdown(notification: ResolvedNotification) -> str:
    """Create the Markdown notification body used by Saved Messages."""

    # Telegram Markdown is supported by passing parse_mode="Markdown".
    def escape_md(value: str) -> str:
        for ch in r"*[`_":
            value = value.replace(ch, f"\\{ch}")
        return value

    lines = [
        f"**{escape_md(notification.title)}**",
        DIVIDER,
        "",
        escape_md(notification.body),
        "",
        f"[{format_fire_date(notification)}] {escape_md(format_origin_label(notification))}",
    ]
    return "\n".join(lines)


def _format_html(notification: ResolvedNotification) -> str:
    """Create the HTML notification body used by the Bot API adapter."""

    parts = [
        f"<b>{html.escape(notification.title)}</b>",
        DIVIDER,
        "",
        html.escape(notification.body),
        "",
        f"<i>[{html.escape(format_fire_date(notification))}] "
        f"{html.escape(format_origin_label(notification))}</i>",
    ]
    return "\n".join(parts)


def format_notification(notification: ResolvedNotification, mode: str) -> str:
    """Return the notification formatted for the requested mode."""

    if mode == "markdown":
        return _format_markdown(notification)
    if mode == "html":
        return _format_html(notification)
    raise ValueError(f"Unsupported notification format: {mode}")
