"""Payload handed to the presentation layer when the daily reminder fires."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime


@dataclass(frozen=True, slots=True)
class Reminder:
    fired_at: datetime
    title: str = "Time to log your habits"
    body: str = "Open today's habits to log them"
    open_today: bool = True


__all__ = ["Reminder"]
