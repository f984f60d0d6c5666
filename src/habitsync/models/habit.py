"""Habit log value objects exchanged with the remote log store."""

from __future__ import annotations

from dataclasses import dataclass, replace
from datetime import date
from typing import Any, Iterable, Mapping, Optional

from ..errors import RemoteError


@dataclass(frozen=True, slots=True)
class HabitEntry:
    """One habit's logged value for exactly one day.

    ``logged_value`` is ``None`` when nothing has been logged yet.
    """

    id: int
    name: str
    description: Optional[str] = None
    logged_value: Optional[float] = None

    def with_value(self, value: float) -> "HabitEntry":
        """Return a copy carrying ``value`` as its logged value."""
        return replace(self, logged_value=value)

    @classmethod
    def from_payload(cls, payload: Mapping[str, Any]) -> "HabitEntry":
        """Build an entry from the API's JSON object.

        Raises:
            RemoteError: if required fields are missing or mistyped.
        """
        if not isinstance(payload, Mapping):
            raise RemoteError(f"Malformed habit entry: {payload!r}")
        try:
            habit_id = payload["id"]
            name = payload["name"]
        except KeyError as exc:
            raise RemoteError(f"Habit entry missing field {exc.args[0]!r}") from exc
        if isinstance(habit_id, bool) or not isinstance(habit_id, int):
            raise RemoteError(f"Habit entry has invalid id {habit_id!r}")
        if not isinstance(name, str):
            raise RemoteError(f"Habit entry {habit_id} has invalid name {name!r}")

        description = payload.get("description")
        raw_value = payload.get("log_value")
        if raw_value is None:
            value = None
        elif isinstance(raw_value, (int, float)) and not isinstance(raw_value, bool):
            value = float(raw_value)
        else:
            raise RemoteError(f"Habit entry {habit_id} has invalid log_value {raw_value!r}")

        return cls(
            id=habit_id,
            name=name,
            description=description if isinstance(description, str) else None,
            logged_value=value,
        )


@dataclass(frozen=True, slots=True)
class LogRequest:
    """Body of an append/overwrite call for one habit on one day."""

    habit_id: int
    day: date
    value: float

    def to_payload(self) -> dict[str, Any]:
        return {"habit_id": self.habit_id, "date": self.day.isoformat(), "value": self.value}


@dataclass(frozen=True, slots=True)
class DaySnapshot:
    """Ordered habits for one calendar day. Replaced wholesale, never edited."""

    day: date
    entries: tuple[HabitEntry, ...] = ()

    @classmethod
    def of(cls, day: date, entries: Iterable[HabitEntry]) -> "DaySnapshot":
        return cls(day=day, entries=tuple(entries))

    def find(self, habit_id: int) -> Optional[HabitEntry]:
        for entry in self.entries:
            if entry.id == habit_id:
                return entry
        return None

    def with_value(self, habit_id: int, value: float) -> "DaySnapshot":
        """Return a snapshot with ``habit_id``'s entry replaced by ``value``."""
        return DaySnapshot(
            day=self.day,
            entries=tuple(
                entry.with_value(value) if entry.id == habit_id else entry
                for entry in self.entries
            ),
        )


__all__ = ["DaySnapshot", "HabitEntry", "LogRequest"]
