"""Host timer facility protocol."""

from __future__ import annotations

from datetime import datetime
from typing import Protocol


class TimerFacility(Protocol):
    """One-shot wake-ups keyed by identity."""

    def register_once(self, identity: str, when: datetime, precise: bool) -> None:
        """Register a wake-up at ``when``, replacing any prior one under ``identity``."""
        ...

    def cancel(self, identity: str) -> None:
        """Drop the wake-up registered under ``identity``, if any."""
        ...

    def is_precise_scheduling_authorized(self) -> bool:
        ...
