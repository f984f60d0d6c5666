"""Tests for the self-rearming daily reminder chain."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone

import pytest

from habitsync.models import Reminder
from habitsync.services.reminders import (
    RECORD_KEY,
    REMINDER_IDENTITY,
    RecurringScheduler,
    compute_next_trigger,
    create_reminder_scheduler,
)

NOW = datetime(2026, 10, 19, 9, 30)


class _Records:
    """Dict-backed RecordStore."""

    def __init__(self, initial=None):
        self.values = dict(initial or {})
        self.writes = []

    def get_flag(self, key):
        return self.values.get(key)

    def set_flag(self, key, value):
        self.writes.append((key, value))
        self.values[key] = value


def _scheduler(timer, records=None, *, now=NOW, on_reminder=None) -> RecurringScheduler:
    return RecurringScheduler(
        timer, records if records is not None else _Records(), on_reminder=on_reminder, clock=lambda: now
    )


class TestComputeNextTrigger:
    def test_just_before_eleven_returns_same_day(self):
        now = datetime(2026, 10, 19, 10, 59, 59, 999000)

        assert compute_next_trigger(now) == datetime(2026, 10, 19, 11, 0, 0)

    def test_exactly_eleven_rolls_to_tomorrow(self):
        now = datetime(2026, 10, 19, 11, 0, 0)

        assert compute_next_trigger(now) == datetime(2026, 10, 20, 11, 0, 0)

    def test_just_after_eleven_rolls_to_tomorrow(self):
        now = datetime(2026, 10, 19, 11, 0, 0, 1000)

        assert compute_next_trigger(now) == datetime(2026, 10, 20, 11, 0, 0)

    def test_rolls_over_month_and_year(self):
        assert compute_next_trigger(datetime(2026, 12, 31, 23, 0)) == datetime(2027, 1, 1, 11, 0)

    def test_always_strictly_after_now(self):
        start = datetime(2026, 10, 19, 0, 0)
        for minutes in range(0, 24 * 60, 7):
            now = start + timedelta(minutes=minutes)
            trigger = compute_next_trigger(now)
            assert now < trigger <= now + timedelta(days=1)
            assert (trigger.hour, trigger.minute, trigger.second) == (11, 0, 0)

    def test_keeps_timezone_of_now(self):
        now = datetime(2026, 10, 19, 12, 0, tzinfo=timezone.utc)

        assert compute_next_trigger(now) == datetime(2026, 10, 20, 11, 0, tzinfo=timezone.utc)

    def test_custom_time(self):
        assert compute_next_trigger(NOW, hour=20, minute=15) == datetime(2026, 10, 19, 20, 15)


class TestArming:
    def test_arm_daily_registers_next_trigger_precisely(self, fake_timer):
        armed = _scheduler(fake_timer).arm_daily()

        assert armed == datetime(2026, 10, 19, 11, 0)
        assert fake_timer.registrations == [(REMINDER_IDENTITY, armed, True)]

    def test_arm_daily_uses_best_effort_when_precise_not_authorized(self, fake_timer):
        fake_timer.precise_authorized = False

        _scheduler(fake_timer).arm_daily()

        assert fake_timer.registrations[0][2] is False

    def test_refused_precise_registration_degrades_to_best_effort(self, fake_timer):
        fake_timer.refuse_precise = True

        armed = _scheduler(fake_timer).arm_daily()

        assert armed is not None
        assert fake_timer.registrations == [(REMINDER_IDENTITY, armed, False)]

    def test_total_refusal_returns_none(self, fake_timer):
        fake_timer.refuse_all = True

        assert _scheduler(fake_timer).arm_daily() is None
        assert fake_timer.registrations == []

    def test_rearming_replaces_previous_registration(self, fake_timer):
        scheduler = _scheduler(fake_timer)

        scheduler.arm_daily()
        scheduler.arm_daily()

        assert list(fake_timer.active) == [REMINDER_IDENTITY]


class TestArmIfNotAlready:
    def test_second_call_registers_nothing(self, fake_timer):
        records = _Records()
        scheduler = _scheduler(fake_timer, records)

        assert scheduler.arm_if_not_already() is True
        assert records.values[RECORD_KEY] is True
        assert scheduler.arm_if_not_already() is False

        assert len(fake_timer.registrations) == 1
        assert records.writes == [(RECORD_KEY, True)]

    def test_existing_record_skips_registration(self, fake_timer):
        scheduler = _scheduler(fake_timer, _Records({RECORD_KEY: True}))

        assert scheduler.arm_if_not_already() is False
        assert fake_timer.registrations == []

    def test_failed_arming_does_not_persist_record(self, fake_timer):
        fake_timer.refuse_all = True
        records = _Records()

        assert _scheduler(fake_timer, records).arm_if_not_already() is False
        assert records.writes == []

    def test_persists_through_settings_repository(self, fake_timer, settings_repo):
        scheduler = _scheduler(fake_timer, settings_repo)

        scheduler.arm_if_not_already()
        restarted = _scheduler(fake_timer, settings_repo)

        assert restarted.is_armed()
        assert restarted.arm_if_not_already() is False
        assert len(fake_timer.registrations) == 1


class TestCancelAndReset:
    def test_cancel_keeps_record(self, fake_timer):
        records = _Records()
        scheduler = _scheduler(fake_timer, records)
        scheduler.arm_if_not_already()

        scheduler.cancel_daily()

        assert fake_timer.active == {}
        assert fake_timer.cancelled == [REMINDER_IDENTITY]
        assert scheduler.is_armed()
        assert scheduler.arm_if_not_already() is False

    def test_reset_clears_record_so_next_launch_arms(self, fake_timer):
        records = _Records()
        scheduler = _scheduler(fake_timer, records)
        scheduler.arm_if_not_already()

        scheduler.reset()

        assert not scheduler.is_armed()
        assert scheduler.arm_if_not_already() is True
        assert len(fake_timer.registrations) == 2


class TestFiringContract:
    def test_fire_surfaces_reminder_then_rearms(self, fake_timer):
        fired_at = datetime(2026, 10, 19, 11, 0, 0)
        received = []
        scheduler = _scheduler(fake_timer, now=fired_at, on_reminder=received.append)

        scheduler.handle_fire()

        assert received == [Reminder(fired_at=fired_at)]
        assert received[0].open_today
        assert fake_timer.registrations == [
            (REMINDER_IDENTITY, datetime(2026, 10, 20, 11, 0), True)
        ]

    def test_fire_rearms_even_when_surfacing_fails(self, fake_timer):
        def broken_sink(reminder):
            raise RuntimeError("display unavailable")

        scheduler = _scheduler(fake_timer, on_reminder=broken_sink)

        with pytest.raises(RuntimeError):
            scheduler.handle_fire()

        assert len(fake_timer.registrations) == 1

    def test_fire_without_presentation_still_rearms(self, fake_timer):
        _scheduler(fake_timer).handle_fire()

        assert len(fake_timer.registrations) == 1

    def test_host_restart_rearms_despite_record(self, fake_timer):
        records = _Records({RECORD_KEY: True})
        scheduler = _scheduler(fake_timer, records)

        armed = scheduler.handle_host_restart()

        assert armed == datetime(2026, 10, 19, 11, 0)
        assert len(fake_timer.registrations) == 1
        assert records.writes == []

    def test_factory_binds_fire_handler(self, fake_timer):
        received = []
        scheduler = create_reminder_scheduler(fake_timer, _Records(), on_reminder=received.append)

        fake_timer.receivers[REMINDER_IDENTITY]()

        assert len(received) == 1
        assert fake_timer.active[REMINDER_IDENTITY] == scheduler.next_trigger()
