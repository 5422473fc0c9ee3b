"""
Entry Store - the journal's collection of entries and its derived views.

The in-memory collection is the single source of truth. It is loaded once
from local storage when the store is created and written back after every
mutation. Filtered and sorted views are computed on demand, never stored.

Usage:
    store = EntryStore(LocalStorage(settings.JOURNAL_STORAGE_PATH), ReflectionClient())

    entry = await store.create("today I ran 5k")
    store.add_tag(entry.id, "fitness")
    store.toggle_pin(entry.id)

    for entry in store.list(EntryFilter(search="run", tags=["fitness"])):
        print(entry.prompt, entry.response)

Mutations referencing an unknown id are silent no-ops (they return None or
False). A failed storage write is logged and the store carries on with its
in-memory state. Only reflection failures (ServiceError) reach the caller.

Stored records that fail to parse are skipped and written back untouched.
If the stored collection cannot be read at all, ``load_failed`` is set and
nothing is written until the store is reloaded from repaired storage.
"""

import json
import logging
from typing import Any, Callable, Dict, List, Optional, Tuple

from app.core.logging_utils import preview
from app.features.journaling.client import ReflectionClient
from app.features.journaling.exceptions import NotFoundError, PersistenceError
from app.features.journaling.models import EntryFilter, JournalEntry, new_entry_id, utc_now
from app.shared.constants import ENTRIES_STORAGE_KEY

logger = logging.getLogger("Journal.Store")


class EntryStore:
    """Ordered journal entries, newest first, persisted after every change."""

    def __init__(
        self,
        storage,
        client: ReflectionClient,
        clock: Callable = utc_now,
    ):
        self.storage = storage
        self.client = client
        self._clock = clock
        self._entries: List[JournalEntry] = []
        # Stored records that could not be read; written back unchanged
        self._unreadable: List[Any] = []
        # Set when the stored collection could not be read; while set,
        # nothing is written over it.
        self._load_failed = False
        self.load()

    # =========================================================================
    # PERSISTENCE
    # =========================================================================

    @property
    def load_failed(self) -> bool:
        """True while changes stay in memory because storage was unreadable."""
        return self._load_failed

    def load(self) -> None:
        """Replace the in-memory collection with what storage holds."""
        try:
            raw = self.storage.get_item(ENTRIES_STORAGE_KEY)
            self._entries, self._unreadable = self._parse(raw)
            self._load_failed = False
        except PersistenceError as e:
            logger.error(f"Error loading journal entries: {e}")
            self._entries, self._unreadable = [], []
            self._load_failed = True

        if self._unreadable:
            logger.warning(f"Skipped {len(self._unreadable)} unreadable journal entries")
        logger.info(f"Loaded {len(self._entries)} journal entries")

    @staticmethod
    def _parse(raw: Optional[str]) -> Tuple[List[JournalEntry], List[Any]]:
        if not raw:
            return [], []
        try:
            records = json.loads(raw)
        except ValueError as e:
            raise PersistenceError(f"Stored entries are not valid JSON: {e}") from e
        if not isinstance(records, list):
            raise PersistenceError("Stored entries are not a list")

        entries = []
        unreadable = []
        seen_ids = set()
        for index, record in enumerate(records):
            if not isinstance(record, dict):
                logger.warning(f"Stored entry {index} is not an object, skipping")
                unreadable.append(record)
                continue
            normalized = dict(record)
            # Older entries were saved without these fields
            if not normalized.get("id") or normalized["id"] in seen_ids:
                normalized["id"] = new_entry_id()
            normalized["isPinned"] = bool(normalized.get("isPinned", False))
            normalized["tags"] = normalized.get("tags") or []
            if normalized.get("response") is None:
                normalized["response"] = ""
            try:
                entry = JournalEntry.model_validate(normalized)
            except ValueError as e:
                logger.warning(f"Stored entry {index} is malformed, skipping: {e}")
                unreadable.append(record)
                continue
            seen_ids.add(entry.id)
            entries.append(entry)
        return entries, unreadable

    def _persist(self) -> None:
        if self._load_failed:
            logger.warning("Stored entries could not be read; keeping changes in memory only")
            return

        records = [entry.to_storage() for entry in self._entries] + self._unreadable
        try:
            self.storage.set_item(ENTRIES_STORAGE_KEY, json.dumps(records))
        except PersistenceError as e:
            logger.error(f"Error saving journal entries: {e}")
            return

        logger.debug(f"Saved {len(self._entries)} journal entries")

    # =========================================================================
    # LOOKUP
    # =========================================================================

    def _find(self, entry_id: str) -> JournalEntry:
        for entry in self._entries:
            if entry.id == entry_id:
                return entry
        raise NotFoundError(entry_id)

    def get(self, entry_id: str) -> Optional[JournalEntry]:
        try:
            return self._find(entry_id)
        except NotFoundError:
            return None

    def __len__(self) -> int:
        return len(self._entries)

    @property
    def entries(self) -> List[JournalEntry]:
        """The collection in storage order (newest created first)."""
        return list(self._entries)

    # =========================================================================
    # MUTATIONS
    # =========================================================================

    async def create(self, prompt: str) -> JournalEntry:
        """
        Reflect on ``prompt`` and add the result as the newest entry.

        Raises:
            ServiceError: the reflection call failed; nothing was added.
        """
        response = await self.client.reflect(prompt)

        entry = JournalEntry(prompt=prompt, response=response, created_at=self._clock())
        self._entries.insert(0, entry)
        self._persist()

        logger.info(f"Entry created: {entry.id}", extra={"entry_preview": preview(prompt)})
        return entry

    async def edit(self, entry_id: str, new_prompt: str) -> Optional[JournalEntry]:
        """
        Replace an entry's text and regenerate its reflection.

        Keeps id, pin state and tags; resets createdAt to now. Returns None
        without calling the reflection service if the id is unknown.

        Raises:
            ServiceError: the reflection call failed; the entry is unchanged.
        """
        if self.get(entry_id) is None:
            logger.debug(f"Edit skipped, entry {entry_id} not found")
            return None

        response = await self.client.reflect(new_prompt)

        # The entry may have been deleted while the reflection was in flight
        try:
            entry = self._find(entry_id)
        except NotFoundError:
            logger.debug(f"Edit dropped, entry {entry_id} deleted during reflection")
            return None

        entry.prompt = new_prompt
        entry.response = response
        entry.created_at = self._clock()
        self._persist()

        logger.info(f"Entry updated: {entry_id}")
        return entry

    def delete(self, entry_id: str) -> bool:
        """Remove an entry and write storage right away. False if absent."""
        remaining = [entry for entry in self._entries if entry.id != entry_id]
        if len(remaining) == len(self._entries):
            logger.debug(f"Delete skipped, entry {entry_id} not found")
            return False

        self._entries = remaining
        self._persist()
        logger.info(f"Entry deleted: {entry_id}")
        return True

    def _update(self, entry_id: str, action: str, change: Callable[[JournalEntry], bool]) -> Optional[JournalEntry]:
        """Apply ``change`` to one entry; persist if it reports a change."""
        try:
            entry = self._find(entry_id)
        except NotFoundError as e:
            logger.debug(f"{action} skipped: {e}")
            return None

        if change(entry):
            self._persist()
        return entry

    def toggle_pin(self, entry_id: str) -> Optional[JournalEntry]:
        def flip(entry: JournalEntry) -> bool:
            entry.is_pinned = not entry.is_pinned
            return True

        return self._update(entry_id, "Toggle pin", flip)

    def add_tag(self, entry_id: str, tag: str) -> Optional[JournalEntry]:
        """Add a trimmed tag; blank tags and tags already present are ignored."""
        tag = (tag or "").strip()
        if not tag:
            return self.get(entry_id)

        def add(entry: JournalEntry) -> bool:
            if tag in entry.tags:
                return False
            entry.tags = entry.tags + [tag]
            return True

        return self._update(entry_id, "Add tag", add)

    def remove_tag(self, entry_id: str, tag: str) -> Optional[JournalEntry]:
        """Remove every occurrence of exactly ``tag``."""
        def remove(entry: JournalEntry) -> bool:
            kept = [t for t in entry.tags if t != tag]
            if len(kept) == len(entry.tags):
                return False
            entry.tags = kept
            return True

        return self._update(entry_id, "Remove tag", remove)

    # =========================================================================
    # DERIVED VIEWS
    # =========================================================================

    def list(self, entry_filter: Optional[EntryFilter] = None) -> List[JournalEntry]:
        """Entries matching the filter, pinned first, then newest first."""
        entry_filter = entry_filter or EntryFilter()
        matching = [entry for entry in self._entries if entry_filter.matches(entry)]
        # Two stable sorts: by date, then pinned entries to the front
        matching.sort(key=lambda entry: entry.created_at, reverse=True)
        matching.sort(key=lambda entry: not entry.is_pinned)
        return matching

    def all_tags(self) -> List[str]:
        """Every tag in use, deduplicated and sorted."""
        return sorted({tag for entry in self._entries for tag in entry.tags})

    def tag_counts(self) -> Dict[str, int]:
        """Number of entries carrying each tag."""
        counts: Dict[str, int] = {}
        for entry in self._entries:
            for tag in set(entry.tags):
                counts[tag] = counts.get(tag, 0) + 1
        return dict(sorted(counts.items()))
