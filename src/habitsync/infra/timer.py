"""APScheduler-backed host timer facility for one-shot wake-ups."""

from __future__ import annotations

import logging
import random
from datetime import datetime, timedelta
from typing import Callable, Optional

from apscheduler.jobstores.base import JobLookupError
from apscheduler.schedulers.base import BaseScheduler
from apscheduler.triggers.date import DateTrigger

from ..errors import TimerRegistrationError

logger = logging.getLogger("habitsync.timer")


class APSchedulerTimerFacility:
    """Registers one-shot jobs keyed by identity on an APScheduler scheduler.

    Jobs live in the scheduler's in-memory job store, so a process restart
    drops every registration, the same way a device reboot clears alarms.
    Receivers are bound per identity with :meth:`add_receiver`; the job
    itself only carries the identity.
    """

    def __init__(
        self,
        scheduler: BaseScheduler,
        *,
        precise_authorized: bool = True,
        best_effort_slack: float = 3600.0,
    ):
        self.scheduler = scheduler
        self.precise_authorized = precise_authorized
        self.best_effort_slack = best_effort_slack
        self._receivers: dict[str, Callable[[], None]] = {}

    def add_receiver(self, identity: str, handler: Callable[[], None]) -> None:
        self._receivers[identity] = handler

    def is_precise_scheduling_authorized(self) -> bool:
        return self.precise_authorized

    def register_once(self, identity: str, when: datetime, precise: bool) -> None:
        """Register a wake-up at ``when``, replacing any prior one for ``identity``.

        Best-effort registrations may fire up to ``best_effort_slack`` seconds
        late, never early.
        """
        if precise and not self.precise_authorized:
            raise TimerRegistrationError("Precise scheduling is not authorized on this host")

        run_date = when
        if not precise and self.best_effort_slack > 0:
            run_date = when + timedelta(seconds=random.uniform(0, self.best_effort_slack))

        try:
            self.scheduler.add_job(
                func=self._dispatch,
                trigger=DateTrigger(run_date=run_date),
                args=[identity],
                id=identity,
                name=f"One-shot wake-up ({identity})",
                replace_existing=True,
                # Late wake-ups still run; a dropped one would end the chain.
                misfire_grace_time=None,
                coalesce=True,
            )
        except Exception as exc:
            raise TimerRegistrationError(f"Failed to register {identity}: {exc}") from exc

        logger.info(
            "Registered wake-up %s at %s", identity, run_date.isoformat(),
            extra={"identity": identity, "precise": precise},
        )

    def cancel(self, identity: str) -> None:
        try:
            self.scheduler.remove_job(identity)
        except JobLookupError:
            logger.debug("No wake-up registered for %s", identity)
            return
        logger.info("Cancelled wake-up %s", identity)

    def next_fire_time(self, identity: str) -> Optional[datetime]:
        job = self.scheduler.get_job(identity)
        if job is None:
            return None
        # Pending jobs (scheduler not started yet) have no computed run time.
        return getattr(job, "next_run_time", None) or job.trigger.run_date

    def _dispatch(self, identity: str) -> None:
        handler = self._receivers.get(identity)
        if handler is None:
            logger.warning("Wake-up %s fired with no receiver bound", identity)
            return
        handler()


__all__ = ["APSchedulerTimerFacility"]
