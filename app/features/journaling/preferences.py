"""Dark-mode preference, persisted next to the entries."""

import logging

from app.features.journaling.exceptions import PersistenceError
from app.shared.constants import DARK_MODE_STORAGE_KEY

logger = logging.getLogger("Journal.Preferences")


class Preferences:
    def __init__(self, storage):
        self.storage = storage

    @property
    def dark_mode(self) -> bool:
        try:
            return self.storage.get_item(DARK_MODE_STORAGE_KEY) == "true"
        except PersistenceError as e:
            logger.error(f"Error reading dark mode preference: {e}")
            return False

    def set_dark_mode(self, enabled: bool) -> bool:
        try:
            self.storage.set_item(DARK_MODE_STORAGE_KEY, "true" if enabled else "false")
        except PersistenceError as e:
            logger.error(f"Error saving dark mode preference: {e}")
        return enabled

    def toggle_dark_mode(self) -> bool:
        return self.set_dark_mode(not self.dark_mode)
