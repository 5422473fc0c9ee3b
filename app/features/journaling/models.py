"""Journal entry models shared by the store, the storage layer and the CLI."""

import uuid
from datetime import datetime, timezone
from typing import List

from pydantic import BaseModel, ConfigDict, Field, field_validator


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def new_entry_id() -> str:
    return str(uuid.uuid4())


class JournalEntry(BaseModel):
    """
    One journal entry: the user's text and the reflection generated for it.

    Serialized with camelCase keys (``createdAt``, ``isPinned``), the
    format the entries were always stored in.
    """

    model_config = ConfigDict(populate_by_name=True, validate_assignment=True)

    id: str = Field(default_factory=new_entry_id)
    prompt: str
    response: str
    created_at: datetime = Field(default_factory=utc_now, alias="createdAt")
    is_pinned: bool = Field(default=False, alias="isPinned")
    tags: List[str] = Field(default_factory=list)

    @field_validator("created_at")
    @classmethod
    def assume_utc(cls, value: datetime) -> datetime:
        # Stored timestamps without an offset are UTC
        if value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value

    def matches_search(self, search: str) -> bool:
        """Case-insensitive substring match against prompt or response."""
        if not search:
            return True
        needle = search.lower()
        return needle in self.prompt.lower() or needle in self.response.lower()

    def has_tags(self, tags: List[str]) -> bool:
        """True if this entry carries every tag in ``tags``."""
        return all(tag in self.tags for tag in tags)

    def to_storage(self) -> dict:
        return self.model_dump(mode="json", by_alias=True)


class EntryFilter(BaseModel):
    """Search text plus selected tags; the empty filter matches everything."""

    search: str = ""
    tags: List[str] = Field(default_factory=list)

    def matches(self, entry: JournalEntry) -> bool:
        return entry.matches_search(self.search) and entry.has_tags(self.tags)
