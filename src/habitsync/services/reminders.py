"""Daily reminder chain built from one-shot wake-ups.

There is no periodic timer: each firing registers its own successor. A
single persisted flag records that the chain was started, so normal app
launches do not re-register, while host restarts (which wipe every pending
wake-up but keep the flag) re-arm unconditionally through
:meth:`RecurringScheduler.handle_host_restart`.
"""

from __future__ import annotations

import logging
from datetime import datetime, timedelta
from typing import Callable, Optional

from ..domain.repositories import RecordStore, TimerFacility
from ..errors import TimerRegistrationError
from ..models.reminder import Reminder

logger = logging.getLogger("habitsync.reminders")

REMINDER_IDENTITY = "daily_habits_reminder"
RECORD_KEY = "alarm_scheduled"
REMINDER_HOUR = 11
REMINDER_MINUTE = 0

ReminderSink = Callable[[Reminder], None]


def compute_next_trigger(
    now: datetime, *, hour: int = REMINDER_HOUR, minute: int = REMINDER_MINUTE
) -> datetime:
    """Return the next ``hour:minute`` local instant strictly after ``now``.

    An instant equal to ``now`` counts as passed and rolls to tomorrow.
    """
    candidate = now.replace(hour=hour, minute=minute, second=0, microsecond=0)
    if candidate <= now:
        candidate += timedelta(days=1)
    return candidate


class RecurringScheduler:
    """Arms and perpetuates the daily reminder through a host timer facility."""

    def __init__(
        self,
        timer: TimerFacility,
        records: RecordStore,
        *,
        on_reminder: Optional[ReminderSink] = None,
        identity: str = REMINDER_IDENTITY,
        record_key: str = RECORD_KEY,
        hour: int = REMINDER_HOUR,
        minute: int = REMINDER_MINUTE,
        clock: Callable[[], datetime] = datetime.now,
    ):
        self.timer = timer
        self.records = records
        self.on_reminder = on_reminder
        self.identity = identity
        self.record_key = record_key
        self.hour = hour
        self.minute = minute
        self._clock = clock

    def next_trigger(self) -> datetime:
        return compute_next_trigger(self._clock(), hour=self.hour, minute=self.minute)

    def is_armed(self) -> bool:
        """Whether the chain has ever been started (the persisted record)."""
        return bool(self.records.get_flag(self.record_key))

    def arm_daily(self) -> Optional[datetime]:
        """Register the next wake-up, replacing any earlier one.

        Falls back to best-effort timing when precise scheduling is refused.
        Returns the instant armed, or ``None`` if the host refused both modes.
        """
        when = self.next_trigger()
        precise = self.timer.is_precise_scheduling_authorized()
        try:
            self.timer.register_once(self.identity, when, precise)
        except TimerRegistrationError as exc:
            if not precise:
                logger.error("Could not arm daily reminder for %s: %s", when, exc)
                return None
            logger.warning("Precise reminder refused, using best-effort timing: %s", exc)
            try:
                self.timer.register_once(self.identity, when, False)
            except TimerRegistrationError as fallback_exc:
                logger.error("Could not arm daily reminder for %s: %s", when, fallback_exc)
                return None
            precise = False

        logger.info(
            "Daily reminder armed for %s", when.isoformat(),
            extra={"identity": self.identity, "precise": precise},
        )
        return when

    def arm_if_not_already(self) -> bool:
        """Start the chain once per install. Returns True when it armed."""
        if self.records.get_flag(self.record_key):
            logger.debug("Daily reminder already armed, skipping")
            return False
        if self.arm_daily() is None:
            return False
        self.records.set_flag(self.record_key, True)
        return True

    def cancel_daily(self) -> None:
        """Unregister the pending wake-up. The persisted record is left as is."""
        self.timer.cancel(self.identity)
        logger.info("Daily reminder cancelled", extra={"identity": self.identity})

    def reset(self) -> None:
        """Cancel and forget the chain so the next launch arms it again."""
        self.cancel_daily()
        self.records.set_flag(self.record_key, False)

    def handle_fire(self) -> None:
        """Surface the reminder, then arm tomorrow's wake-up.

        Re-arming happens even if surfacing fails; that error is re-raised
        afterwards.
        """
        try:
            if self.on_reminder is not None:
                self.on_reminder(Reminder(fired_at=self._clock()))
            else:
                logger.warning("Daily reminder fired with no presentation attached")
        finally:
            self.arm_daily()

    def handle_host_restart(self) -> Optional[datetime]:
        """Re-arm after a host restart, ignoring the persisted record."""
        logger.info("Host restart: re-arming daily reminder")
        return self.arm_daily()


def create_reminder_scheduler(
    timer,
    records: RecordStore,
    *,
    on_reminder: Optional[ReminderSink] = None,
    hour: int = REMINDER_HOUR,
    minute: int = REMINDER_MINUTE,
) -> RecurringScheduler:
    """Build a scheduler and bind its fire handler to ``timer``.

    Args:
        timer: Facility exposing ``add_receiver`` (e.g. APSchedulerTimerFacility)
        records: Persisted flag store
        on_reminder: Presentation callback receiving each :class:`Reminder`
    """
    scheduler = RecurringScheduler(
        timer, records, on_reminder=on_reminder, hour=hour, minute=minute
    )
    timer.add_receiver(scheduler.identity, scheduler.handle_fire)
    return scheduler


__all__ = [
    "RECORD_KEY",
    "REMINDER_IDENTITY",
    "RecurringScheduler",
    "compute_next_trigger",
    "create_reminder_scheduler",
]
