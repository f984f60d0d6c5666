"""Remote log store protocol."""

from __future__ import annotations

from datetime import date
from typing import Protocol

from ...models.habit import HabitEntry


class RemoteLogStore(Protocol):
    """Authoritative store of habit log values.

    Both operations raise ``RemoteError`` on transport or parse failure.
    """

    async def fetch_day(self, day: date) -> list[HabitEntry]:
        """Return every habit with its logged value for ``day``."""
        ...

    async def append_log(self, habit_id: int, day: date, value: float) -> None:
        """Append or overwrite ``habit_id``'s value for ``day``."""
        ...
