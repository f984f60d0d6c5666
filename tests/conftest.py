"""Pytest configuration and shared fixtures for HabitSync tests.

Provides a throwaway SQLite database for the settings store plus in-memory
fakes for the remote log store and the host timer facility, so the sync
engine and the reminder chain can be exercised without a network or a
running scheduler.
"""

from __future__ import annotations

import asyncio
import tempfile
from datetime import date, datetime
from pathlib import Path
from typing import Optional

import pytest
from sqlmodel import SQLModel, create_engine

from habitsync.errors import TimerRegistrationError
from habitsync.infra.database import create_session_factory
from habitsync.infra.repositories import SQLModelSettingsRepository
from habitsync.models import HabitEntry

# =============================================================================
# Database Fixtures
# =============================================================================


@pytest.fixture(scope="function")
def db_engine():
    """Create an isolated SQLite database file for each test.

    Yields:
        Engine: SQLModel engine connected to test database
    """
    with tempfile.NamedTemporaryFile(suffix=".db", delete=False) as f:
        db_path = Path(f.name)

    engine = create_engine(f"sqlite:///{db_path}", echo=False)
    SQLModel.metadata.create_all(engine)

    yield engine

    engine.dispose()
    db_path.unlink(missing_ok=True)


@pytest.fixture(scope="function")
def session_factory(db_engine):
    """Session factory matching what the repositories expect."""
    return create_session_factory(db_engine)


@pytest.fixture
def settings_repo(session_factory) -> SQLModelSettingsRepository:
    return SQLModelSettingsRepository(session_factory)


# =============================================================================
# Fakes
# =============================================================================


class FakeRemoteLogStore:
    """In-memory RemoteLogStore with hooks for failures and slow responses.

    ``fetch_errors``/``write_errors`` are queues: each call pops the next
    exception (``None`` meaning succeed). ``fetch_gates`` and ``write_gate``
    hold a call until the test sets the event.
    """

    def __init__(self, days: Optional[dict[date, list[HabitEntry]]] = None):
        self.days: dict[date, list[HabitEntry]] = dict(days or {})
        self.fetch_calls: list[date] = []
        self.writes: list[tuple[int, date, float]] = []
        self.fetch_errors: list[Optional[Exception]] = []
        self.write_errors: list[Optional[Exception]] = []
        self.fetch_gates: dict[date, asyncio.Event] = {}
        self.write_gate: Optional[asyncio.Event] = None
        self.apply_writes = True

    async def __aenter__(self) -> "FakeRemoteLogStore":
        return self

    async def __aexit__(self, *exc_info) -> None:
        return None

    async def fetch_day(self, day: date) -> list[HabitEntry]:
        self.fetch_calls.append(day)
        gate = self.fetch_gates.get(day)
        if gate is not None:
            await gate.wait()
        if self.fetch_errors:
            error = self.fetch_errors.pop(0)
            if error is not None:
                raise error
        return list(self.days.get(day, []))

    async def append_log(self, habit_id: int, day: date, value: float) -> None:
        self.writes.append((habit_id, day, value))
        if self.write_gate is not None:
            await self.write_gate.wait()
        if self.write_errors:
            error = self.write_errors.pop(0)
            if error is not None:
                raise error
        if self.apply_writes:
            self.days[day] = [
                entry.with_value(value) if entry.id == habit_id else entry
                for entry in self.days.get(day, [])
            ]


class FakeTimer:
    """TimerFacility double recording registrations per identity."""

    def __init__(self, *, precise_authorized: bool = True):
        self.precise_authorized = precise_authorized
        self.registrations: list[tuple[str, datetime, bool]] = []
        self.active: dict[str, datetime] = {}
        self.cancelled: list[str] = []
        self.refuse_precise = False
        self.refuse_all = False
        self.receivers: dict[str, object] = {}

    def add_receiver(self, identity, handler) -> None:
        self.receivers[identity] = handler

    def is_precise_scheduling_authorized(self) -> bool:
        return self.precise_authorized

    def register_once(self, identity: str, when: datetime, precise: bool) -> None:
        if self.refuse_all or (precise and self.refuse_precise):
            raise TimerRegistrationError("refused by host")
        self.registrations.append((identity, when, precise))
        self.active[identity] = when

    def cancel(self, identity: str) -> None:
        self.cancelled.append(identity)
        self.active.pop(identity, None)


@pytest.fixture
def remote_store() -> FakeRemoteLogStore:
    return FakeRemoteLogStore()


@pytest.fixture
def fake_timer() -> FakeTimer:
    return FakeTimer()


@pytest.fixture
def habit():
    """Factory for HabitEntry values with sensible defaults."""

    def _create_habit(
        id: int = 1,
        name: str = "Running",
        value: Optional[float] = None,
        description: Optional[str] = None,
    ) -> HabitEntry:
        return HabitEntry(id=id, name=name, description=description, logged_value=value)

    return _create_habit


