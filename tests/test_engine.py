from __future__ import annotations

from datetime import datetime
from typing import List, Optional

from core.config import ConfigMeta, NotificationConfig, NotificationContent, ScheduleEntry
from core.engine import SchedulingEngine
from core.identifiers import mint_identifier

MONDAY_MORNING = datetime(2024, 1, 1, 8, 0)


def _config(
    schedules: List[ScheduleEntry],
    *,
    version: str = "1.0",
    is_persistent: bool = True,
    fixed_time: str = "09:00",
    weekdays_only: bool = False,
) -> NotificationConfig:
    return NotificationConfig(
        config=ConfigMeta(
            version=version,
            description="test",
            is_persistent=is_persistent,
            fixed_time=fixed_time,
            weekdays_only=weekdays_only,
        ),
        notification_content=NotificationContent(title="Default title", subtitle="Default body"),
        schedules=schedules,
    )


def _entry(
    entry_id: int, day_offset: int, title: Optional[str] = None, subtitle: Optional[str] = None
) -> ScheduleEntry:
    return ScheduleEntry(
        id=entry_id,
        day_offset=day_offset,
        description=f"entry {entry_id}",
        title=title,
        subtitle=subtitle,
    )


def _dates(result) -> dict:
    return {record.identifier: record.fire_date for record in result.records}


def test_passed_slot_on_monday_resolves_to_tuesday() -> None:
    config = _config([_entry(1, 0)], fixed_time="07:00", weekdays_only=True)
    result = SchedulingEngine().apply(config, set(), None, MONDAY_MORNING)
    assert [record.fire_date for record in result.records] == [datetime(2024, 1, 2, 7, 0)]


def test_same_offset_entries_are_deconflicted_in_order() -> None:
    config = _config([_entry(1, 2), _entry(2, 2)])
    result = SchedulingEngine().apply(config, set(), None, MONDAY_MORNING)
    assert [record.fire_date for record in result.records] == [
        datetime(2024, 1, 3, 9, 0),
        datetime(2024, 1, 4, 9, 0),
    ]


def test_existing_entry_is_skipped_without_claiming_its_day() -> None:
    config = _config([_entry(5, 1), _entry(6, 1)], is_persistent=False)
    existing = {mint_identifier("1.0", 5)}
    result = SchedulingEngine().apply(config, existing, None, MONDAY_MORNING)
    assert _dates(result) == {mint_identifier("1.0", 6): datetime(2024, 1, 2, 9, 0)}


def test_persistent_config_already_applied_is_skipped() -> None:
    config = _config([_entry(1, 1)])
    result = SchedulingEngine().apply(config, {"NIG_v1.0_id1"}, "1.0", MONDAY_MORNING)
    assert result.skip
    assert result.records == []
    assert result.new_last_applied_version is None


def test_skip_requires_every_condition() -> None:
    engine = SchedulingEngine()
    existing = {"NIG_v0.9_id1"}
    persistent = _config([_entry(1, 1)])

    assert not engine.apply(persistent, existing, "1.0", MONDAY_MORNING, force=True).skip
    assert not engine.apply(persistent, existing, "0.9", MONDAY_MORNING).skip
    assert not engine.apply(persistent, set(), "1.0", MONDAY_MORNING).skip
    assert not engine.apply(_config([_entry(1, 1)], is_persistent=False), existing, "1.0", MONDAY_MORNING).skip


def test_records_carry_version_and_content() -> None:
    config = _config([_entry(1, 1, title="", subtitle=None), _entry(2, 2, subtitle="Custom body")])
    result = SchedulingEngine().apply(config, set(), None, MONDAY_MORNING)

    assert result.new_last_applied_version == "1.0"
    first, second = result.records
    assert first.identifier == "NIG_v1.0_id1"
    assert first.title == ""
    assert first.body == "Default body"
    assert second.title == "Default title"
    assert second.body == "Custom body"


def test_reapplying_is_idempotent() -> None:
    engine = SchedulingEngine()
    for persistent in (True, False):
        config = _config([_entry(1, 0), _entry(2, 1), _entry(3, 1)], is_persistent=persistent)
        first = engine.apply(config, set(), None, MONDAY_MORNING)
        assert len(first.records) == 3

        existing = {record.identifier for record in first.records}
        second = engine.apply(config, existing, first.new_last_applied_version, MONDAY_MORNING)
        assert second.records == []
        assert second.skip is persistent


def test_apply_is_deterministic() -> None:
    config = _config([_entry(i, i % 3) for i in range(1, 8)], weekdays_only=True)
    engine = SchedulingEngine()
    assert engine.apply(config, set(), None, MONDAY_MORNING) == engine.apply(
        config, set(), None, MONDAY_MORNING
    )


def test_weekdays_only_dates_are_unique_future_weekdays() -> None:
    now = datetime(2024, 1, 5, 18, 30)  # Friday evening
    config = _config([_entry(i, i % 4) for i in range(1, 21)], weekdays_only=True)
    result = SchedulingEngine().apply(config, set(), None, now)

    dates = [record.fire_date for record in result.records]
    assert len(dates) == 20
    assert all(date > now for date in dates)
    assert all(date.weekday() < 5 for date in dates)
    assert len({date.date() for date in dates}) == len(dates)


def test_collision_outcome_follows_list_order() -> None:
    entries = [_entry(1, 2), _entry(2, 1), _entry(3, 1)]
    engine = SchedulingEngine()

    forward = _dates(engine.apply(_config(entries), set(), None, MONDAY_MORNING))
    backward = _dates(engine.apply(_config(list(reversed(entries))), set(), None, MONDAY_MORNING))

    assert forward["NIG_v1.0_id1"] == datetime(2024, 1, 3, 9, 0)
    assert forward["NIG_v1.0_id3"] == datetime(2024, 1, 4, 9, 0)
    assert backward["NIG_v1.0_id3"] == datetime(2024, 1, 2, 9, 0)
    assert backward["NIG_v1.0_id1"] == datetime(2024, 1, 4, 9, 0)
