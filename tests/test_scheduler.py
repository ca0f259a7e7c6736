from __future__ import annotations

import asyncio
from datetime import datetime
from typing import Optional

import pytest

from core.config import ConfigMeta, NotificationConfig, NotificationContent, ScheduleEntry
from core.errors import ConfigHttpError, PermissionDenied
from core.models import ResolvedNotification
from core.scheduler import LAST_APPLIED_VERSION_KEY, NotificationScheduler

URL = "https://example.com/config.json"


def _config(version: str = "1.0", is_persistent: bool = True) -> NotificationConfig:
    return NotificationConfig(
        config=ConfigMeta(
            version=version,
            description="test",
            is_persistent=is_persistent,
            fixed_time="09:00",
            weekdays_only=True,
        ),
        notification_content=NotificationContent(title="Hello", subtitle="World"),
        schedules=[
            ScheduleEntry(id=1, day_offset=1, description="first"),
            ScheduleEntry(id=2, day_offset=2, description="second"),
            ScheduleEntry(id=3, day_offset=3, description="third"),
        ],
    )


class FakeFetcher:
    def __init__(self, config: Optional[NotificationConfig] = None, error: Optional[Exception] = None) -> None:
        self._config = config
        self._error = error
        self.calls: list[str] = []

    async def fetch(self, url: str) -> NotificationConfig:
        self.calls.append(url)
        if self._error is not None:
            raise self._error
        return self._config


class FakeGate:
    def __init__(self, granted: bool = True) -> None:
        self._granted = granted

    async def ensure_granted(self) -> bool:
        return self._granted


class FakePendingStore:
    def __init__(self, identifiers: Optional[set[str]] = None) -> None:
        self.identifiers = identifiers or set()

    def list_existing_identifiers(self) -> set[str]:
        return set(self.identifiers)


class FakeSink:
    def __init__(self, failing: Optional[set[str]] = None) -> None:
        self._failing = failing or set()
        self.submitted: list[ResolvedNotification] = []

    async def submit(self, notification: ResolvedNotification) -> None:
        if notification.identifier in self._failing:
            raise RuntimeError("sink rejected")
        self.submitted.append(notification)


class FakeState:
    def __init__(self, values: Optional[dict[str, str]] = None) -> None:
        self.values = dict(values or {})

    def get(self, key: str) -> Optional[str]:
        return self.values.get(key)

    def set(self, key: str, value: str) -> None:
        self.values[key] = value


def _scheduler(
    fetcher: FakeFetcher,
    *,
    gate: Optional[FakeGate] = None,
    pending: Optional[FakePendingStore] = None,
    sink: Optional[FakeSink] = None,
    state: Optional[FakeState] = None,
) -> NotificationScheduler:
    return NotificationScheduler(
        config_url=URL,
        fetcher=fetcher,
        permission_gate=gate or FakeGate(),
        pending_store=pending or FakePendingStore(),
        sink=sink or FakeSink(),
        state_store=state or FakeState(),
        clock=lambda: datetime(2024, 1, 1, 8, 0),
    )


def test_schedules_all_entries_and_persists_version() -> None:
    sink = FakeSink()
    state = FakeState()
    fetcher = FakeFetcher(_config())

    report = asyncio.run(_scheduler(fetcher, sink=sink, state=state).schedule())

    assert fetcher.calls == [URL]
    assert report.scheduled == ["NIG_v1.0_id1", "NIG_v1.0_id2", "NIG_v1.0_id3"]
    assert not report.failed
    assert [item.fire_date for item in sink.submitted] == [
        datetime(2024, 1, 2, 9, 0),
        datetime(2024, 1, 3, 9, 0),
        datetime(2024, 1, 4, 9, 0),
    ]
    assert state.values[LAST_APPLIED_VERSION_KEY] == "1.0"


def test_applied_persistent_config_is_skipped() -> None:
    sink = FakeSink()
    state = FakeState({LAST_APPLIED_VERSION_KEY: "1.0"})
    scheduler = _scheduler(
        FakeFetcher(_config()),
        pending=FakePendingStore({"NIG_v1.0_id1"}),
        sink=sink,
        state=state,
    )

    report = asyncio.run(scheduler.schedule())

    assert report.skipped
    assert sink.submitted == []
    assert state.values == {LAST_APPLIED_VERSION_KEY: "1.0"}


def test_force_reapplies_missing_entries_only() -> None:
    sink = FakeSink()
    scheduler = _scheduler(
        FakeFetcher(_config()),
        pending=FakePendingStore({"NIG_v1.0_id1"}),
        sink=sink,
        state=FakeState({LAST_APPLIED_VERSION_KEY: "1.0"}),
    )

    report = asyncio.run(scheduler.schedule(force=True))

    assert not report.skipped
    assert report.scheduled == ["NIG_v1.0_id2", "NIG_v1.0_id3"]


def test_permission_denied_aborts_before_fetch() -> None:
    fetcher = FakeFetcher(_config())
    state = FakeState()
    scheduler = _scheduler(fetcher, gate=FakeGate(granted=False), state=state)

    with pytest.raises(PermissionDenied):
        asyncio.run(scheduler.schedule())

    assert fetcher.calls == []
    assert state.values == {}


def test_fetch_error_leaves_state_untouched() -> None:
    sink = FakeSink()
    state = FakeState({LAST_APPLIED_VERSION_KEY: "0.9"})
    scheduler = _scheduler(FakeFetcher(error=ConfigHttpError(URL, 503)), sink=sink, state=state)

    with pytest.raises(ConfigHttpError):
        asyncio.run(scheduler.schedule())

    assert sink.submitted == []
    assert state.values == {LAST_APPLIED_VERSION_KEY: "0.9"}


def test_sink_failure_is_local_to_one_record() -> None:
    sink = FakeSink(failing={"NIG_v1.0_id2"})
    state = FakeState()

    report = asyncio.run(_scheduler(FakeFetcher(_config()), sink=sink, state=state).schedule())

    assert [failure.identifier for failure in report.failed] == ["NIG_v1.0_id2"]
    assert "sink rejected" in report.failed[0].reason
    assert report.scheduled == ["NIG_v1.0_id1", "NIG_v1.0_id3"]
    assert [item.identifier for item in sink.submitted] == ["NIG_v1.0_id1", "NIG_v1.0_id3"]
    assert state.values[LAST_APPLIED_VERSION_KEY] == "1.0"
