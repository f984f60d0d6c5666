"""The day currently being viewed."""

from __future__ import annotations

from dataclasses import dataclass, replace
from datetime import date, timedelta


@dataclass(frozen=True, slots=True)
class DateCursor:
    """Calendar day under view plus the "today" captured at session start.

    ``today`` is never re-evaluated, so ``is_today`` stays stable across a
    midnight rollover within one session.
    """

    day: date
    today: date

    @classmethod
    def starting_at(cls, today: date) -> "DateCursor":
        return cls(day=today, today=today)

    @property
    def is_today(self) -> bool:
        return self.day == self.today

    @property
    def date_param(self) -> str:
        """ISO ``YYYY-MM-DD`` form used on the wire."""
        return self.day.isoformat()

    def shifted(self, delta_days: int) -> "DateCursor":
        return replace(self, day=self.day + timedelta(days=delta_days))

    def previous(self) -> "DateCursor":
        return self.shifted(-1)

    def next(self) -> "DateCursor":
        return self.shifted(1)

    def return_to_today(self) -> "DateCursor":
        return replace(self, day=self.today)


__all__ = ["DateCursor"]
