"""JSON-to-core configuration decoding adapter.

Decoding is strict about required fields and JSON types so that a bad
document aborts the pass before the engine sees it. Unknown keys are ignored.
"""

from __future__ import annotations

from typing import Any, List, Optional

from core.config import ConfigMeta, NotificationConfig, NotificationContent, ScheduleEntry
from core.errors import ConfigDecodeError

_MISSING = object()


def _path(*parts: object) -> str:
    return " -> ".join(str(part) for part in parts)


def _type_name(value: Any) -> str:
    if value is None:
        return "null"
    return type(value).__name__


def _object(value: Any, path: List[object]) -> dict:
    if not isinstance(value, dict):
        raise ConfigDecodeError(
            ConfigDecodeError.TYPE_MISMATCH,
            _path(*path),
            f"expected object, got {_type_name(value)}",
        )
    return value


def _field(container: dict, key: str, expected: type, path: List[object], optional: bool = False) -> Any:
    value = container.get(key, _MISSING)
    field_path = _path(*path, key)
    if value is _MISSING:
        if optional:
            return None
        raise ConfigDecodeError(ConfigDecodeError.MISSING_FIELD, field_path)
    if value is None:
        if optional:
            return None
        raise ConfigDecodeError(
            ConfigDecodeError.MISSING_VALUE,
            field_path,
            f"expected {expected.__name__}, got null",
        )
    # bool is an int subclass in Python but not a JSON number.
    if isinstance(value, bool) and expected is not bool:
        valid = False
    else:
        valid = isinstance(value, expected)
    if not valid:
        raise ConfigDecodeError(
            ConfigDecodeError.TYPE_MISMATCH,
            field_path,
            f"expected {expected.__name__}, got {_type_name(value)}",
        )
    return value


def _build_meta(raw: dict) -> ConfigMeta:
    path: List[object] = ["config"]
    return ConfigMeta(
        version=_field(raw, "version", str, path),
        description=_field(raw, "description", str, path),
        is_persistent=_field(raw, "isPersistent", bool, path),
        fixed_time=_field(raw, "fixedTime", str, path),
        weekdays_only=_field(raw, "weekdaysOnly", bool, path),
    )


def _build_content(raw: dict) -> NotificationContent:
    path: List[object] = ["notificationContent"]
    return NotificationContent(
        title=_field(raw, "title", str, path),
        subtitle=_field(raw, "subtitle", str, path),
    )


def _build_entry(raw: Any, index: int) -> ScheduleEntry:
    path: List[object] = ["schedules", index]
    entry = _object(raw, path)
    title: Optional[str] = _field(entry, "title", str, path, optional=True)
    subtitle: Optional[str] = _field(entry, "subtitle", str, path, optional=True)
    return ScheduleEntry(
        id=_field(entry, "id", int, path),
        day_offset=_field(entry, "dayOffset", int, path),
        description=_field(entry, "description", str, path),
        title=title,
        subtitle=subtitle,
    )


def build_notification_config(payload: Any) -> NotificationConfig:
    """Decode a parsed JSON document into a NotificationConfig.

    Raises ConfigDecodeError with the offending path, e.g.
    "schedules -> 2 -> dayOffset".
    """

    root = _object(payload, [])
    meta = _build_meta(_field(root, "config", dict, []))
    content = _build_content(_field(root, "notificationContent", dict, []))
    raw_schedules = _field(root, "schedules", list, [])
    schedules = [_build_entry(raw, index) for index, raw in enumerate(raw_schedules)]
    return NotificationConfig(config=meta, notification_content=content, schedules=schedules)
