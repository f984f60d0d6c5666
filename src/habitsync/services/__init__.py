"""Service module exports."""

from . import reminders, sync

__all__ = ["reminders", "sync"]
