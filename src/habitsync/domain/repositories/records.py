"""Persisted flag store protocol."""

from __future__ import annotations

from typing import Optional, Protocol


class RecordStore(Protocol):
    """Durable boolean flags that survive process restarts."""

    def get_flag(self, key: str) -> Optional[bool]:
        """Return the stored flag, or ``None`` when it was never written."""
        ...

    def set_flag(self, key: str, value: bool) -> None:
        ...
