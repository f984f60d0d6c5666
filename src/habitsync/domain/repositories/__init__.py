"""Repository protocol definitions for domain layer."""

from .records import RecordStore
from .remote import RemoteLogStore
from .timer import TimerFacility

__all__ = ["RecordStore", "RemoteLogStore", "TimerFacility"]
