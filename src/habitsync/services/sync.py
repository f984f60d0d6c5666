"""Client-side synchronization of the day's habit list with the remote log store.

The engine owns two values, the current :class:`SyncState` and the
:class:`DateCursor`, and only ever swaps them whole. Edits follow an
optimistic protocol:

1. apply the edit to the current snapshot and publish it immediately;
2. write the value to the remote store;
3. on success re-fetch the day and publish the server's list;
4. on failure drop the tentative snapshot and reload the day.

Every fetch and write remembers the cursor day and cursor generation it was
issued under. Completions that no longer match are discarded, so a slow
answer for a day the user has left never overwrites the day on screen.
Loads also carry a sequence number, and only the latest load may publish.
"""

from __future__ import annotations

import asyncio
import logging
from datetime import date
from typing import Any, Callable, Coroutine, Optional

from ..domain.repositories import RemoteLogStore
from ..errors import RemoteError
from ..models.cursor import DateCursor
from ..models.habit import DaySnapshot
from ..models.state import UNKNOWN_ERROR, Error, Loading, Success, SyncState

logger = logging.getLogger("habitsync.sync")

StateListener = Callable[[SyncState], None]


def _failure_message(exc: BaseException) -> str:
    if isinstance(exc, RemoteError):
        return exc.message or UNKNOWN_ERROR
    return str(exc) or UNKNOWN_ERROR


class SyncEngine:
    """Optimistic view of one day's habits backed by a :class:`RemoteLogStore`.

    Operations must be called from a running asyncio event loop. Each one
    updates state synchronously and returns the :class:`asyncio.Task` doing
    its I/O (``None`` when the call was a no-op).
    """

    def __init__(self, store: RemoteLogStore, *, today: Optional[date] = None):
        self._store = store
        self._cursor = DateCursor.starting_at(today or date.today())
        self._generation = 0
        self._load_seq = 0
        self._state: SyncState = Loading()
        self._listeners: list[StateListener] = []
        self._tasks: set[asyncio.Task] = set()

    @property
    def state(self) -> SyncState:
        return self._state

    @property
    def cursor(self) -> DateCursor:
        return self._cursor

    def subscribe(self, listener: StateListener) -> Callable[[], None]:
        """Call ``listener`` with every published state. Returns an unsubscribe hook."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    # ------------------------------------------------------------------
    # Loading and navigation
    # ------------------------------------------------------------------

    def load_for_day(self, day: Optional[date] = None) -> asyncio.Task:
        """Publish Loading and fetch ``day`` (the cursor day by default).

        A ``day`` other than the cursor's moves the cursor there first.
        """
        if day is not None and day != self._cursor.day:
            self._set_cursor(DateCursor(day=day, today=self._cursor.today))
        target = self._cursor.day
        generation = self._generation
        self._load_seq += 1
        self._publish(Loading())
        return self._spawn(self._fetch(target, generation, self._load_seq))

    def retry(self) -> asyncio.Task:
        return self.load_for_day()

    def navigate(self, delta_days: int) -> asyncio.Task:
        return self._move_to(self._cursor.shifted(delta_days))

    def previous_day(self) -> asyncio.Task:
        return self._move_to(self._cursor.previous())

    def next_day(self) -> asyncio.Task:
        return self._move_to(self._cursor.next())

    def return_to_today(self) -> asyncio.Task:
        return self._move_to(self._cursor.return_to_today())

    def jump_to(self, day: date) -> asyncio.Task:
        return self._move_to(DateCursor(day=day, today=self._cursor.today))

    # ------------------------------------------------------------------
    # Edits
    # ------------------------------------------------------------------

    def mutate(self, habit_id: int, new_value: float) -> Optional[asyncio.Task]:
        """Optimistically set ``habit_id`` to ``new_value`` and sync it."""
        state = self._state
        if not isinstance(state, Success):
            logger.debug("Ignoring edit of habit %s: no snapshot loaded", habit_id)
            return None

        day = self._cursor.day
        generation = self._generation
        self._publish(Success(state.snapshot.with_value(habit_id, new_value)))
        return self._spawn(self._write(habit_id, day, generation, new_value))

    def increment(self, habit_id: int) -> Optional[asyncio.Task]:
        return self._step(habit_id, 1.0)

    def decrement(self, habit_id: int) -> Optional[asyncio.Task]:
        return self._step(habit_id, -1.0)

    def set_value(self, habit_id: int, value: float) -> Optional[asyncio.Task]:
        return self.mutate(habit_id, value)

    async def wait_idle(self) -> None:
        """Wait until every fetch and write issued so far has settled."""
        while self._tasks:
            await asyncio.gather(*list(self._tasks))

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _step(self, habit_id: int, delta: float) -> Optional[asyncio.Task]:
        state = self._state
        if not isinstance(state, Success):
            return None
        entry = state.snapshot.find(habit_id)
        if entry is None:
            logger.debug("Habit %s not in snapshot for %s", habit_id, state.snapshot.day)
            return None
        current = entry.logged_value if entry.logged_value is not None else 0.0
        return self.mutate(habit_id, current + delta)

    def _move_to(self, cursor: DateCursor) -> asyncio.Task:
        self._set_cursor(cursor)
        return self.load_for_day()

    def _set_cursor(self, cursor: DateCursor) -> None:
        self._cursor = cursor
        self._generation += 1
        logger.debug("Cursor moved to %s (today=%s)", cursor.day, cursor.is_today)

    def _is_current(self, day: date, generation: int) -> bool:
        return generation == self._generation and day == self._cursor.day

    def _publish(self, state: SyncState) -> None:
        self._state = state
        for listener in list(self._listeners):
            listener(state)

    def _spawn(self, coro: Coroutine[Any, Any, None]) -> asyncio.Task:
        task = asyncio.get_running_loop().create_task(coro)
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        return task

    async def _fetch(self, day: date, generation: int, seq: int) -> None:
        try:
            entries = await self._store.fetch_day(day)
        except Exception as exc:
            if seq != self._load_seq or not self._is_current(day, generation):
                logger.debug("Discarding stale fetch failure for %s", day)
                return
            message = _failure_message(exc)
            logger.warning("Loading habits for %s failed: %s", day, message)
            self._publish(Error(message))
            return

        if seq != self._load_seq or not self._is_current(day, generation):
            logger.debug("Discarding stale fetch for %s", day)
            return
        self._publish(Success(DaySnapshot.of(day, entries)))

    async def _write(self, habit_id: int, day: date, generation: int, value: float) -> None:
        try:
            await self._store.append_log(habit_id, day, value)
            entries = await self._store.fetch_day(day)
        except Exception as exc:
            if not self._is_current(day, generation):
                logger.debug("Discarding stale write failure for habit %s on %s", habit_id, day)
                return
            logger.warning(
                "Logging habit %s on %s failed, reloading: %s",
                habit_id, day, _failure_message(exc),
            )
            await self.load_for_day()
            return

        if not self._is_current(day, generation):
            logger.debug("Discarding stale reconciliation for %s", day)
            return
        self._publish(Success(DaySnapshot.of(day, entries)))


__all__ = ["SyncEngine", "StateListener"]
