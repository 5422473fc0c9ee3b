"""
Unit tests for the Entry Store.

Covers entry lifecycle (create, edit, delete), pins and tags, the filtered
and sorted views, and how the store persists to local storage.
"""

import asyncio
import json
from datetime import datetime, timezone

import pytest

from app.features.journaling import (
    EntryFilter,
    EntryStore,
    JournalEntry,
    MemoryStorage,
    PersistenceError,
    ServiceError,
)
from app.shared.constants import ENTRIES_STORAGE_KEY


def create(store, prompt):
    return asyncio.run(store.create(prompt))


def stored_entries(storage):
    return json.loads(storage.get_item(ENTRIES_STORAGE_KEY))


class TestCreate:
    def test_creates_entry_with_reflection(self, store, reflection_client):
        reflection_client.respond("Great job on your run!")

        entry = create(store, "today I ran 5k")

        assert entry.prompt == "today I ran 5k"
        assert entry.response == "Great job on your run!"
        assert entry.is_pinned is False
        assert entry.tags == []
        assert store.list() == [entry]

    def test_each_success_adds_one_entry_with_distinct_id(self, store):
        for i in range(5):
            create(store, f"entry {i}")

        ids = [entry.id for entry in store.entries]
        assert len(store) == 5
        assert len(set(ids)) == 5

    def test_newest_entry_goes_first(self, store):
        first = create(store, "first")
        second = create(store, "second")

        assert [e.id for e in store.entries] == [second.id, first.id]

    def test_service_failure_adds_nothing(self, store, storage, reflection_client, service_error):
        reflection_client.respond(service_error)

        with pytest.raises(ServiceError):
            create(store, "lost thought")

        assert len(store) == 0
        assert storage.get_item(ENTRIES_STORAGE_KEY) is None

    def test_create_persists(self, store, storage):
        entry = create(store, "hello")

        assert [e["id"] for e in stored_entries(storage)] == [entry.id]

    def test_uses_clock_for_created_at(self, store, clock):
        entry = create(store, "hello")

        assert entry.created_at == clock.current


class TestEdit:
    def test_edit_replaces_text_and_reflection(self, store, reflection_client, clock):
        reflection_client.respond("old reflection", "new reflection")
        entry = create(store, "old text")
        store.toggle_pin(entry.id)
        store.add_tag(entry.id, "work")
        created = entry.created_at

        edited = asyncio.run(store.edit(entry.id, "new text"))

        assert edited.id == entry.id
        assert edited.prompt == "new text"
        assert edited.response == "new reflection"
        assert edited.created_at > created
        assert edited.is_pinned is True
        assert edited.tags == ["work"]
        assert stored_entries(store.storage)[0]["prompt"] == "new text"

    def test_edit_unknown_id_is_noop_without_calling_service(self, store, reflection_client):
        create(store, "text")
        calls = len(reflection_client.prompts)

        assert asyncio.run(store.edit("missing", "new")) is None
        assert len(reflection_client.prompts) == calls

    def test_edit_failure_leaves_entry_unchanged(self, store, reflection_client, service_error):
        entry = create(store, "original")
        reflection_client.respond(service_error)

        with pytest.raises(ServiceError):
            asyncio.run(store.edit(entry.id, "changed"))

        assert store.get(entry.id).prompt == "original"

    def test_entry_deleted_during_reflection_is_not_resurrected(self, store, reflection_client):
        entry = create(store, "doomed")

        async def reflect_then_lose_entry(prompt):
            store.delete(entry.id)
            return "too late"

        reflection_client.reflect = reflect_then_lose_entry

        assert asyncio.run(store.edit(entry.id, "rewrite")) is None
        assert len(store) == 0


class TestDelete:
    def test_delete_removes_entry(self, store):
        keep = create(store, "keep")
        drop = create(store, "drop")

        assert store.delete(drop.id) is True

        assert [e.id for e in store.list()] == [keep.id]

    def test_delete_twice_is_noop(self, store):
        entry = create(store, "once")

        assert store.delete(entry.id) is True
        assert store.delete(entry.id) is False
        assert store.get(entry.id) is None

    def test_delete_persists_immediately(self, store, storage):
        entry = create(store, "gone")
        other = create(store, "stays")

        store.delete(entry.id)

        assert [e["id"] for e in stored_entries(storage)] == [other.id]

    def test_deleting_last_entry_clears_storage(self, store, storage):
        entry = create(store, "only")

        store.delete(entry.id)

        assert stored_entries(storage) == []


class TestPin:
    def test_toggle_twice_restores(self, store):
        entry = create(store, "pin me")

        assert store.toggle_pin(entry.id).is_pinned is True
        assert store.toggle_pin(entry.id).is_pinned is False

    def test_toggle_persists(self, store, storage):
        entry = create(store, "pin me")

        store.toggle_pin(entry.id)

        assert stored_entries(storage)[0]["isPinned"] is True

    def test_toggle_unknown_id(self, store):
        assert store.toggle_pin("missing") is None


class TestTags:
    def test_add_tag_is_trimmed(self, store):
        entry = create(store, "ran")

        store.add_tag(entry.id, "  fitness ")

        assert store.get(entry.id).tags == ["fitness"]

    def test_blank_tag_ignored(self, store, storage):
        entry = create(store, "ran")
        before = storage.get_item(ENTRIES_STORAGE_KEY)

        store.add_tag(entry.id, "   ")

        assert store.get(entry.id).tags == []
        assert storage.get_item(ENTRIES_STORAGE_KEY) == before

    def test_duplicate_tag_not_added(self, store):
        entry = create(store, "ran")

        store.add_tag(entry.id, "fitness")
        store.add_tag(entry.id, " fitness")

        assert store.get(entry.id).tags == ["fitness"]

    def test_tags_keep_insertion_order(self, store):
        entry = create(store, "ran")

        for tag in ("zeta", "alpha", "mid"):
            store.add_tag(entry.id, tag)

        assert store.get(entry.id).tags == ["zeta", "alpha", "mid"]

    def test_remove_tag_removes_all_exact_matches(self, storage, reflection_client, clock):
        entry = JournalEntry(prompt="p", response="r", tags=["a", "b", "a", "A"])
        storage.set_item(ENTRIES_STORAGE_KEY, json.dumps([entry.to_storage()]))
        store = EntryStore(storage, reflection_client, clock=clock)

        store.remove_tag(entry.id, "a")

        assert store.get(entry.id).tags == ["b", "A"]
        assert stored_entries(storage)[0]["tags"] == ["b", "A"]

    def test_tag_unknown_id(self, store):
        assert store.add_tag("missing", "x") is None
        assert store.remove_tag("missing", "x") is None

    def test_all_tags_sorted_and_deduplicated(self, store):
        first = create(store, "one")
        second = create(store, "two")
        store.add_tag(first.id, "work")
        store.add_tag(first.id, "health")
        store.add_tag(second.id, "work")
        store.add_tag(second.id, "family")

        assert store.all_tags() == ["family", "health", "work"]
        assert store.tag_counts() == {"family": 1, "health": 1, "work": 2}


class TestList:
    def test_empty_filter_sorts_pinned_first_then_newest(self, store):
        oldest = create(store, "oldest")
        middle = create(store, "middle")
        newest = create(store, "newest")
        store.toggle_pin(oldest.id)

        assert [e.id for e in store.list()] == [oldest.id, newest.id, middle.id]

    def test_later_entry_listed_first(self, storage, reflection_client):
        t1 = datetime(2025, 1, 1, tzinfo=timezone.utc)
        t2 = datetime(2025, 1, 2, tzinfo=timezone.utc)
        early = JournalEntry(prompt="early", response="r", created_at=t1)
        late = JournalEntry(prompt="late", response="r", created_at=t2)
        storage.set_item(ENTRIES_STORAGE_KEY, json.dumps([early.to_storage(), late.to_storage()]))

        store = EntryStore(storage, reflection_client)

        assert [e.prompt for e in store.list()] == ["late", "early"]

    def test_edit_moves_entry_to_top(self, store):
        first = create(store, "first")
        create(store, "second")

        asyncio.run(store.edit(first.id, "first, revised"))

        assert store.list()[0].id == first.id

    def test_search_is_case_insensitive_over_prompt_and_response(self, store, reflection_client):
        reflection_client.respond("Nice RUN", "Rest well", "Good dinner")
        run = create(store, "morning jog")
        sleep = create(store, "Running late to bed")
        create(store, "cooked pasta")

        found = store.list(EntryFilter(search="run"))

        assert {e.id for e in found} == {run.id, sleep.id}

    def test_tag_filter_requires_every_selected_tag(self, store):
        both = create(store, "both")
        one = create(store, "one")
        store.add_tag(both.id, "work")
        store.add_tag(both.id, "stress")
        store.add_tag(one.id, "work")

        assert [e.id for e in store.list(EntryFilter(tags=["work", "stress"]))] == [both.id]
        assert {e.id for e in store.list(EntryFilter(tags=["work"]))} == {both.id, one.id}

    def test_search_and_tags_combine(self, store, reflection_client):
        reflection_client.respond("r1", "r2")
        tagged = create(store, "gym session")
        create(store, "gym again")
        store.add_tag(tagged.id, "fitness")

        found = store.list(EntryFilter(search="GYM", tags=["fitness"]))

        assert [e.id for e in found] == [tagged.id]

    def test_list_does_not_reorder_collection(self, store):
        first = create(store, "first")
        second = create(store, "second")
        store.toggle_pin(first.id)

        store.list()

        assert [e.id for e in store.entries] == [second.id, first.id]


class TestPersistence:
    def test_round_trip(self, store, storage, reflection_client):
        first = create(store, "first")
        second = create(store, "second")
        store.toggle_pin(first.id)
        store.add_tag(second.id, "tag")

        reloaded = EntryStore(storage, reflection_client)

        assert reloaded.entries == store.entries

    def test_legacy_entries_are_normalized(self, reflection_client):
        storage = MemoryStorage({ENTRIES_STORAGE_KEY: json.dumps([
            {"prompt": "no id", "response": "r", "createdAt": "2024-05-01T10:00:00.000Z"},
            {"id": "abc", "prompt": "p", "response": "r", "createdAt": "2024-05-02T10:00:00.000Z", "tags": None},
        ])})

        store = EntryStore(storage, reflection_client)

        no_id, with_id = sorted(store.entries, key=lambda e: e.created_at)
        assert no_id.id
        assert no_id.is_pinned is False
        assert no_id.tags == []
        assert with_id.id == "abc"
        assert with_id.tags == []

    def test_duplicate_stored_ids_are_reassigned(self, reflection_client):
        record = {"id": "same", "prompt": "p", "response": "r", "createdAt": "2024-05-01T10:00:00Z"}
        storage = MemoryStorage({ENTRIES_STORAGE_KEY: json.dumps([record, record])})

        store = EntryStore(storage, reflection_client)

        assert len({e.id for e in store.entries}) == 2

    def test_unreadable_storage_is_never_overwritten_with_empty(self, reflection_client):
        storage = MemoryStorage({ENTRIES_STORAGE_KEY: "{not json"})
        store = EntryStore(storage, reflection_client)
        assert len(store) == 0
        assert store.load_failed is True

        store.delete("anything")
        store._persist()

        assert storage.get_item(ENTRIES_STORAGE_KEY) == "{not json"

    def test_new_entry_after_failed_load_stays_in_memory(self, reflection_client):
        storage = MemoryStorage({ENTRIES_STORAGE_KEY: '{"not": "a list"}'})
        store = EntryStore(storage, reflection_client)

        entry = create(store, "fresh start")

        assert store.get(entry.id) == entry
        assert storage.get_item(ENTRIES_STORAGE_KEY) == '{"not": "a list"}'

    def test_entry_without_response_is_loaded(self, reflection_client):
        storage = MemoryStorage({ENTRIES_STORAGE_KEY: json.dumps([
            {"id": "a", "prompt": "first", "response": "r", "createdAt": "2024-05-01T10:00:00Z"},
            {"id": "b", "prompt": "legacy", "createdAt": "2024-05-02T10:00:00Z"},
            {"id": "c", "prompt": "third", "response": "r", "createdAt": "2024-05-03T10:00:00Z"},
        ])})
        store = EntryStore(storage, reflection_client)

        assert store.get("b").response == ""

        create(store, "new")

        assert [e["prompt"] for e in stored_entries(storage)] == ["new", "first", "legacy", "third"]

    def test_malformed_record_is_skipped_and_kept_in_storage(self, reflection_client):
        broken = {"id": "bad", "response": "r", "createdAt": "yesterday"}
        storage = MemoryStorage({ENTRIES_STORAGE_KEY: json.dumps([
            {"id": "a", "prompt": "first", "response": "r", "createdAt": "2024-05-01T10:00:00Z"},
            broken,
            "not an entry",
            {"id": "c", "prompt": "third", "response": "r", "createdAt": "2024-05-03T10:00:00Z"},
        ])})
        store = EntryStore(storage, reflection_client)

        assert [e.id for e in store.entries] == ["a", "c"]
        assert store.load_failed is False

        entry = create(store, "new")

        saved = stored_entries(storage)
        assert [record["id"] if isinstance(record, dict) else record for record in saved] == [
            entry.id, "a", "c", "bad", "not an entry",
        ]
        assert saved[3] == broken

    def test_write_failure_keeps_in_memory_state(self, reflection_client):
        class BrokenStorage(MemoryStorage):
            def set_item(self, key, value):
                raise PersistenceError("disk full")

        store = EntryStore(BrokenStorage(), reflection_client)

        entry = create(store, "still here")
        store.add_tag(entry.id, "kept")

        assert store.get(entry.id).tags == ["kept"]
