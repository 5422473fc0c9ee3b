# Shared constants and utilities
from .constants import (
    ENTRIES_STORAGE_KEY,
    DARK_MODE_STORAGE_KEY,
    REFLECTION_PROVIDERS,
    VIEW_MODES,
)

__all__ = [
    "ENTRIES_STORAGE_KEY",
    "DARK_MODE_STORAGE_KEY",
    "REFLECTION_PROVIDERS",
    "VIEW_MODES",
]
