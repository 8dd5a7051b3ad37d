from datetime import datetime, time

import pytest

from lantern.core.time_gate import (
    MANUAL_UNLOCK_SECONDS,
    UNLOCK_TASK_NAME,
    TimeGate,
    is_permitted,
    parse_clock_time,
)


@pytest.mark.parametrize("value,expected", [
    ("04:50", time(4, 50)),
    ("4:05", time(4, 5)),
    ("04:50 (WIB)", time(4, 50)),
    ("24:00", None),
    ("12:60", None),
    ("noon", None),
    ("", None),
    (None, None),
])
def test_parse_clock_time(value, expected) -> None:
    assert parse_clock_time(value) == expected


def test_closed_one_minute_before_schedule() -> None:
    assert not is_permitted("04:50", datetime(2026, 3, 1, 4, 49, 59), False)


def test_open_at_and_after_schedule() -> None:
    assert is_permitted("04:50", datetime(2026, 3, 1, 4, 50, 0), False)
    assert is_permitted("04:50", datetime(2026, 3, 1, 23, 0), False)


def test_manual_unlock_overrides_schedule() -> None:
    assert is_permitted("23:59", datetime(2026, 3, 1, 0, 1), True)


def test_missing_or_garbled_time_fails_open() -> None:
    now = datetime(2026, 3, 1, 0, 1)
    assert is_permitted(None, now, False)
    assert is_permitted("--:--", now, False)


def test_gate_looks_up_event_in_timings(clock, scheduler) -> None:
    gate = TimeGate(scheduler, clock=clock)
    assert not gate.is_open("Fajr", {"Fajr": "04:50"})
    assert gate.is_open("Tahajjud", {"Fajr": "04:50"})
    assert gate.is_open("Fajr", None)


def test_unlock_requires_confirmation(clock, scheduler) -> None:
    gate = TimeGate(scheduler, clock=clock)

    assert gate.activate_manual_unlock(confirmed=False) is False
    assert gate.manual_unlock is False
    assert scheduler.tasks == {}


def test_unlock_schedules_expiry_after_ten_minutes(clock, scheduler) -> None:
    gate = TimeGate(scheduler, clock=clock)

    assert gate.activate_manual_unlock(confirmed=True)

    assert gate.manual_unlock is True
    assert scheduler.tasks[UNLOCK_TASK_NAME][1] == MANUAL_UNLOCK_SECONDS == 600
    assert (gate.unlock_expires_at - clock()).total_seconds() == 600
    assert gate.is_open("Fajr", {"Fajr": "23:00"})

    scheduler.fire(UNLOCK_TASK_NAME)

    assert gate.manual_unlock is False
    assert gate.unlock_expires_at is None
    assert not gate.is_open("Fajr", {"Fajr": "23:00"})


def test_rearming_replaces_pending_expiry(clock, scheduler) -> None:
    gate = TimeGate(scheduler, clock=clock)
    gate.activate_manual_unlock(confirmed=True)
    gate.activate_manual_unlock(confirmed=True)

    assert scheduler.cancelled == [UNLOCK_TASK_NAME]
    assert list(scheduler.tasks) == [UNLOCK_TASK_NAME]


def test_reset_cancels_expiry(clock, scheduler) -> None:
    gate = TimeGate(scheduler, clock=clock)
    gate.activate_manual_unlock(confirmed=True)

    gate.reset()

    assert gate.manual_unlock is False
    assert UNLOCK_TASK_NAME not in scheduler.tasks
