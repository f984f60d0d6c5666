"""HabitSync habit-logging client package."""

from __future__ import annotations

from .config import BaseConfig, DevConfig
from .services.reminders import RecurringScheduler, compute_next_trigger
from .services.sync import SyncEngine

__all__ = ["BaseConfig", "DevConfig", "RecurringScheduler", "SyncEngine", "compute_next_trigger"]
