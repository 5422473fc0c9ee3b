"""
Journaling feature module.

Client-side journal capabilities:
- Reflection Service Client (calls the backend reflection endpoint)
- Entry Store (entries, tags, pins, filtered views)
- Local storage and the dark-mode preference
"""

from app.features.journaling.client import ReflectionClient
from app.features.journaling.exceptions import (
    JournalError,
    NotFoundError,
    PersistenceError,
    ServiceError,
)
from app.features.journaling.models import EntryFilter, JournalEntry
from app.features.journaling.preferences import Preferences
from app.features.journaling.storage import LocalStorage, MemoryStorage
from app.features.journaling.store import EntryStore

__all__ = [
    "ReflectionClient",
    "JournalError",
    "NotFoundError",
    "PersistenceError",
    "ServiceError",
    "EntryFilter",
    "JournalEntry",
    "Preferences",
    "LocalStorage",
    "MemoryStorage",
    "EntryStore",
]
