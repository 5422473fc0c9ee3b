"""Exceptions raised by the journal client and entry store."""


class JournalError(Exception):
    """Base exception for journal operations."""
    pass


class ServiceError(JournalError):
    """Raised when the reflection endpoint fails, times out or returns a bad payload."""

    def __init__(self, message: str, status_code: int = None):
        super().__init__(message)
        self.status_code = status_code


class NotFoundError(JournalError):
    """Raised when an operation references an entry id that is not in the store."""

    def __init__(self, entry_id: str):
        super().__init__(f"Entry {entry_id} not found")
        self.entry_id = entry_id


class PersistenceError(JournalError):
    """Raised when local storage cannot be read or written."""
    pass
