"""Render state published by the sync engine."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Union

from .habit import DaySnapshot

UNKNOWN_ERROR = "Unknown error"


@dataclass(frozen=True, slots=True)
class Loading:
    """A fetch for the cursor day is outstanding."""


@dataclass(frozen=True, slots=True)
class Success:
    snapshot: DaySnapshot


@dataclass(frozen=True, slots=True)
class Error:
    message: str = UNKNOWN_ERROR


SyncState = Union[Loading, Success, Error]

__all__ = ["Error", "Loading", "Success", "SyncState", "UNKNOWN_ERROR"]
