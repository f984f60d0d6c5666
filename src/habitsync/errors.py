"""Exception types raised by HabitSync collaborators."""

from __future__ import annotations


class HabitSyncError(Exception):
    """Base class for every error HabitSync raises on purpose."""


class RemoteError(HabitSyncError):
    """The remote log store failed: transport, HTTP status, or payload."""

    def __init__(self, message: str = "") -> None:
        super().__init__(message)
        self.message = message


class TimerRegistrationError(HabitSyncError):
    """The host timer facility refused to register a wake-up."""


__all__ = ["HabitSyncError", "RemoteError", "TimerRegistrationError"]
