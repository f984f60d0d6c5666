"""Model exports: SQLModel tables and client value objects."""

from .cursor import DateCursor
from .habit import DaySnapshot, HabitEntry, LogRequest
from .reminder import Reminder
from .settings import AppSetting
from .state import Error, Loading, Success, SyncState

__all__ = [
    "AppSetting",
    "DateCursor",
    "DaySnapshot",
    "Error",
    "HabitEntry",
    "Loading",
    "LogRequest",
    "Reminder",
    "Success",
    "SyncState",
]
