"""
Local Storage - file-backed key/value store for the journal client.

Behaves like the browser's localStorage: string keys map to string values,
and every write replaces the value for its key immediately. The whole map
lives in a single JSON file, rewritten atomically (temp file + rename) so
an interrupted write never leaves a truncated file behind.
"""

import json
import logging
import os
import tempfile
from pathlib import Path
from typing import Dict, Optional, Union

from app.features.journaling.exceptions import PersistenceError

logger = logging.getLogger("Journal.Storage")


class LocalStorage:
    """String-to-string storage persisted to a JSON file."""

    def __init__(self, path: Union[str, Path]):
        self.path = Path(path)

    def get_item(self, key: str) -> Optional[str]:
        """Value stored under ``key``, or None if the key was never set."""
        return self._read().get(key)

    def set_item(self, key: str, value: str) -> None:
        data = self._read()
        data[key] = value
        self._write(data)

    def remove_item(self, key: str) -> None:
        data = self._read()
        if key in data:
            del data[key]
            self._write(data)

    def _read(self) -> Dict[str, str]:
        if not self.path.exists():
            return {}
        try:
            with open(self.path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except (OSError, ValueError) as e:
            raise PersistenceError(f"Could not read {self.path}: {e}") from e

        if not isinstance(data, dict):
            raise PersistenceError(f"{self.path} does not hold a key/value map")
        return data

    def _write(self, data: Dict[str, str]) -> None:
        tmp_path = None
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp_path = tempfile.mkstemp(
                dir=self.path.parent, prefix=f".{self.path.name}.", suffix=".tmp"
            )
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                json.dump(data, f)
            os.replace(tmp_path, self.path)
            tmp_path = None
        except OSError as e:
            raise PersistenceError(f"Could not write {self.path}: {e}") from e
        finally:
            if tmp_path is not None and os.path.exists(tmp_path):
                os.unlink(tmp_path)
        logger.debug("Wrote %s keys to %s", len(data), self.path)


class MemoryStorage:
    """In-process storage with the LocalStorage interface."""

    def __init__(self, initial: Optional[Dict[str, str]] = None):
        self.data: Dict[str, str] = dict(initial or {})

    def get_item(self, key: str) -> Optional[str]:
        return self.data.get(key)

    def set_item(self, key: str, value: str) -> None:
        self.data[key] = value

    def remove_item(self, key: str) -> None:
        self.data.pop(key, None)
