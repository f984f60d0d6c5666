"""Application configuration objects and helpers."""

from __future__ import annotations

import os
from pathlib import Path
from typing import Any

from dotenv import load_dotenv

load_dotenv()


def _env_bool(name: str, default: bool = False) -> bool:
    """Interpret environment variable values as booleans."""

    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in {"1", "true", "yes", "on"}


def _env_int(name: str, default: int) -> int:
    value = os.getenv(name)
    if value is None or not value.strip():
        return default
    try:
        return int(value)
    except ValueError as exc:
        raise ValueError(f"{name} must be an integer, got {value!r}") from exc


def _env_float(name: str, default: float) -> float:
    value = os.getenv(name)
    if value is None or not value.strip():
        return default
    try:
        return float(value)
    except ValueError as exc:
        raise ValueError(f"{name} must be a number, got {value!r}") from exc


class BaseConfig:
    """Base configuration shared across environments."""

    APP_NAME = "HabitSync"
    DB_FILENAME = "habitsync.db"
    DEFAULT_API_BASE_URL = "http://gv-api.lab-ocp.com/"

    def __init__(self) -> None:
        self.DATA_DIR = self._resolve_data_dir()
        self.DEV_MODE = _env_bool("HABITSYNC_DEV_MODE", default=True)
        self.API_BASE_URL = os.getenv("HABITSYNC_API_BASE_URL", self.DEFAULT_API_BASE_URL)
        self.HTTP_TIMEOUT = _env_float("HABITSYNC_HTTP_TIMEOUT", 30.0)
        self.REMINDER_HOUR = _env_int("HABITSYNC_REMINDER_HOUR", 11)
        self.REMINDER_MINUTE = _env_int("HABITSYNC_REMINDER_MINUTE", 0)
        self.PRECISE_REMINDERS = _env_bool("HABITSYNC_PRECISE_REMINDERS", default=True)
        self.REMINDER_SLACK = _env_float("HABITSYNC_REMINDER_SLACK", 3600.0)
        self.DATABASE_URL = os.getenv("HABITSYNC_DATABASE_URL", self._build_sqlite_url())

        if not 0 <= self.REMINDER_HOUR <= 23:
            raise ValueError("HABITSYNC_REMINDER_HOUR must be between 0 and 23.")
        if not 0 <= self.REMINDER_MINUTE <= 59:
            raise ValueError("HABITSYNC_REMINDER_MINUTE must be between 0 and 59.")
        if self.HTTP_TIMEOUT <= 0:
            raise ValueError("HABITSYNC_HTTP_TIMEOUT must be positive.")
        if self.REMINDER_SLACK < 0:
            raise ValueError("HABITSYNC_REMINDER_SLACK must not be negative.")

    def _resolve_data_dir(self) -> Path:
        """Return the directory where the settings database and logs live."""

        data_root = os.getenv("HABITSYNC_DATA_DIR", "instance")
        base_path = Path(data_root).expanduser()
        try:
            path = base_path.resolve()
            path.mkdir(parents=True, exist_ok=True)
            return path
        except PermissionError:
            # Protected install locations fall back to user-local storage.
            fallback_path = Path.home() / ".local" / "share" / self.APP_NAME.lower()
            fallback_path.mkdir(parents=True, exist_ok=True)
            return fallback_path.resolve()

    def _build_sqlite_url(self) -> str:
        db_path = self.DATA_DIR / self.DB_FILENAME
        return f"sqlite:///{db_path}"

    def sqlalchemy_engine_options(self) -> dict[str, Any]:
        """Expose engine kwargs for SQLModel to consume."""

        # Timer callbacks touch the settings store from APScheduler worker threads.
        connect_args: dict[str, Any] = {"check_same_thread": False}
        return {"connect_args": connect_args}


class DevConfig(BaseConfig):
    """Development configuration using local SQLite."""

    DEBUG = True
    TESTING = False
