"""Command line host for HabitSync.

Plays the presentation role: renders the sync engine's state, issues its
operations, and surfaces the daily reminder when running as a daemon.
"""

from __future__ import annotations

import asyncio
from datetime import date, datetime, timedelta
from typing import Optional

import click
from apscheduler.schedulers.background import BackgroundScheduler

from .config import BaseConfig
from .infra.database import bootstrap_database
from .infra.remote import HttpRemoteLogStore
from .infra.repositories import SQLModelSettingsRepository
from .infra.timer import APSchedulerTimerFacility
from .logging_config import get_logger, setup_logging
from .models.reminder import Reminder
from .models.state import Error, Loading, Success, SyncState
from .services.reminders import RecurringScheduler, create_reminder_scheduler
from .services.sync import SyncEngine

logger = get_logger("cli")

DISPLAY_DATE_FORMAT = "%a, %d %b %Y"


def _store_for(config: BaseConfig) -> HttpRemoteLogStore:
    return HttpRemoteLogStore(config.API_BASE_URL, timeout=config.HTTP_TIMEOUT)


def _resolve_day(day: Optional[datetime], offset: int) -> date:
    base = day.date() if day is not None else date.today()
    return base + timedelta(days=offset)


def _format_value(value: Optional[float]) -> str:
    if value is None:
        return "-"
    return f"{value:g}"


def render_state(engine: SyncEngine, state: Optional[SyncState] = None) -> list[str]:
    """Return printable lines for the engine's cursor day and ``state``."""
    state = state if state is not None else engine.state
    cursor = engine.cursor
    header = cursor.day.strftime(DISPLAY_DATE_FORMAT)
    if cursor.is_today:
        header += " (today)"
    lines = [header]

    if isinstance(state, Loading):
        lines.append("  Loading...")
    elif isinstance(state, Error):
        lines.append(f"  Error: {state.message}")
    elif isinstance(state, Success):
        if not state.snapshot.entries:
            lines.append("  No habits.")
        for entry in state.snapshot.entries:
            marker = "✓" if entry.logged_value is not None else "·"
            line = f"  {marker} [{entry.id}] {entry.name}: {_format_value(entry.logged_value)}"
            if entry.description:
                line += f"  ({entry.description})"
            lines.append(line)
    return lines


def _echo_state(engine: SyncEngine) -> None:
    for line in render_state(engine):
        click.echo(line)


def _build_reminders(
    config: BaseConfig, scheduler: BackgroundScheduler, on_reminder=None
) -> RecurringScheduler:
    _, session_factory = bootstrap_database(config)
    facility = APSchedulerTimerFacility(
        scheduler,
        precise_authorized=config.PRECISE_REMINDERS,
        best_effort_slack=config.REMINDER_SLACK,
    )
    return create_reminder_scheduler(
        facility,
        SQLModelSettingsRepository(session_factory),
        on_reminder=on_reminder,
        hour=config.REMINDER_HOUR,
        minute=config.REMINDER_MINUTE,
    )


day_option = click.option(
    "--date", "day", type=click.DateTime(formats=["%Y-%m-%d"]), default=None,
    help="Day to work on (YYYY-MM-DD). Defaults to today.",
)
offset_option = click.option(
    "--offset", type=int, default=0, show_default=True,
    help="Days to move from --date (negative for the past).",
)


@click.group()
@click.pass_context
def cli(ctx: click.Context) -> None:
    """Log habit values and manage the daily reminder."""

    config = BaseConfig()
    setup_logging(config)
    ctx.obj = config


async def _load(config: BaseConfig, day: date) -> SyncEngine:
    async with _store_for(config) as store:
        engine = SyncEngine(store)
        engine.jump_to(day)
        await engine.wait_idle()
        return engine


@cli.command("show")
@day_option
@offset_option
@click.pass_obj
def show(config: BaseConfig, day: Optional[datetime], offset: int) -> None:
    """Print the habits logged for a day."""

    engine = asyncio.run(_load(config, _resolve_day(day, offset)))
    _echo_state(engine)
    if isinstance(engine.state, Error):
        raise SystemExit(1)


async def _edit(config: BaseConfig, day: date, action: str, habit_id: int, value: Optional[float]):
    async with _store_for(config) as store:
        engine = SyncEngine(store)
        engine.jump_to(day)
        await engine.wait_idle()
        if isinstance(engine.state, Error):
            return engine, False

        if action == "inc":
            task = engine.increment(habit_id)
        elif action == "dec":
            task = engine.decrement(habit_id)
        else:
            task = engine.set_value(habit_id, value)
        if task is None:
            return engine, False
        await engine.wait_idle()
        return engine, True


def _run_edit(config: BaseConfig, day, offset, action, habit_id, value=None) -> None:
    engine, applied = asyncio.run(
        _edit(config, _resolve_day(day, offset), action, habit_id, value)
    )
    _echo_state(engine)
    if isinstance(engine.state, Error):
        raise SystemExit(1)
    if not applied:
        click.echo(f"Habit {habit_id} is not listed for this day.", err=True)
        raise SystemExit(1)


@cli.command("inc")
@click.argument("habit_id", type=int)
@day_option
@offset_option
@click.pass_obj
def increment(config: BaseConfig, habit_id: int, day, offset: int) -> None:
    """Add one to a habit's logged value."""
    _run_edit(config, day, offset, "inc", habit_id)


@cli.command("dec")
@click.argument("habit_id", type=int)
@day_option
@offset_option
@click.pass_obj
def decrement(config: BaseConfig, habit_id: int, day, offset: int) -> None:
    """Subtract one from a habit's logged value."""
    _run_edit(config, day, offset, "dec", habit_id)


@cli.command("set")
@click.argument("habit_id", type=int)
@click.argument("value", type=float)
@day_option
@offset_option
@click.pass_obj
def set_value(config: BaseConfig, habit_id: int, value: float, day, offset: int) -> None:
    """Log an exact value for a habit."""
    _run_edit(config, day, offset, "set", habit_id, value)


@cli.group("reminder")
def reminder() -> None:
    """Inspect or reset the daily reminder."""


@reminder.command("status")
@click.pass_obj
def reminder_status(config: BaseConfig) -> None:
    """Show whether the reminder chain was started and when it fires next."""

    reminders = _build_reminders(config, BackgroundScheduler())
    state = "armed" if reminders.is_armed() else "not armed"
    click.echo(f"Daily reminder: {state}")
    click.echo(f"Next trigger: {reminders.next_trigger():%Y-%m-%d %H:%M}")


@reminder.command("reset")
@click.pass_obj
def reminder_reset(config: BaseConfig) -> None:
    """Forget the reminder chain so the next daemon start arms it afresh."""

    reminders = _build_reminders(config, BackgroundScheduler())
    reminders.reset()
    click.echo("Daily reminder reset.")


async def _wait_for_shutdown() -> None:
    await asyncio.Event().wait()


async def _run_daemon(config: BaseConfig, scheduler: Optional[BackgroundScheduler] = None) -> None:
    loop = asyncio.get_running_loop()
    scheduler = scheduler or BackgroundScheduler()

    async with _store_for(config) as store:
        engine = SyncEngine(store)

        def on_state(state: SyncState) -> None:
            if not isinstance(state, Loading):
                _echo_state(engine)

        def on_reminder(item: Reminder) -> None:
            # Runs on an APScheduler worker thread.
            click.echo(f"{item.title}: {item.body}")
            if item.open_today:
                loop.call_soon_threadsafe(engine.return_to_today)

        engine.subscribe(on_state)
        reminders = _build_reminders(config, scheduler, on_reminder=on_reminder)
        scheduler.start()
        # Pending wake-ups do not outlive the process, so a start with the
        # record already set is a host restart.
        if reminders.is_armed():
            reminders.handle_host_restart()
        else:
            reminders.arm_if_not_already()

        engine.load_for_day()
        logger.info("Daemon running; next reminder at %s", reminders.next_trigger())
        try:
            await _wait_for_shutdown()
        finally:
            scheduler.shutdown(wait=False)


@cli.command("daemon")
@click.pass_obj
def daemon(config: BaseConfig) -> None:
    """Keep running, surfacing the daily reminder and today's habits."""

    try:
        asyncio.run(_run_daemon(config))
    except KeyboardInterrupt:
        click.echo("Stopped.")


if __name__ == "__main__":  # pragma: no cover
    cli()
