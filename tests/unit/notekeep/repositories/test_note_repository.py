"""
Unit Tests for the Note Repository.

Covers the ordering and filtering rules as plain functions, then the
repository's mutations and their persistence through the NoteStore.
"""

import json
from unittest.mock import MagicMock

import pytest

from notekeep.core.exceptions import StorageError
from notekeep.repositories.note import (
    NoteRepository,
    delete_note,
    filter_notes,
    matches_query,
    reorder_notes,
    sort_notes,
    upsert_note,
)
from notekeep.schemas.note import Note, NoteFilter

NOTES_KEY = "markdown-keep-notes"


def ids(notes):
    return [note.id for note in notes]


# =============================================================================
# Ordering
# =============================================================================


class TestSortNotes:
    """Tests for display ordering."""

    def test_pinned_before_newer_unpinned(self, make_note):
        """A pinned older note still comes before a newer unpinned one."""
        a = make_note("A", pinned=True, updated_at=100)
        b = make_note("B", updated_at=200)

        assert ids(sort_notes([b, a])) == ["A", "B"]

    def test_newest_first_within_group(self, make_note):
        notes = [make_note("old", updated_at=1), make_note("new", updated_at=2)]
        assert ids(sort_notes(notes)) == ["new", "old"]

    def test_archived_last_even_when_pinned(self, make_note):
        notes = [
            make_note("archived-pinned", pinned=True, archived=True, updated_at=300),
            make_note("plain", updated_at=100),
            make_note("pinned", pinned=True, updated_at=50),
        ]

        assert ids(sort_notes(notes)) == ["pinned", "plain", "archived-pinned"]

    def test_sort_is_idempotent(self, make_note):
        notes = [
            make_note("a", pinned=True, updated_at=5),
            make_note("b", archived=True, updated_at=9),
            make_note("c", updated_at=9),
            make_note("d", updated_at=9),
            make_note("e", pinned=True, updated_at=5),
        ]

        once = sort_notes(notes)

        assert sort_notes(once) == once

    def test_equal_keys_keep_input_order(self, make_note):
        notes = [make_note("x", updated_at=1), make_note("y", updated_at=1)]
        assert ids(sort_notes(notes)) == ["x", "y"]


# =============================================================================
# Filtering
# =============================================================================


class TestFilterNotes:
    """Tests for category and free-text filtering."""

    @pytest.fixture
    def notes(self, make_note):
        return [
            make_note("p1", title="Groceries", pinned=True, tags=["Home"]),
            make_note("n1", title="Meeting", body="Discuss **roadmap**"),
            make_note("a1", title="Old", archived=True, tags=["work"]),
            make_note("p2", title="Plans", pinned=True, archived=True),
        ]

    def test_all_returns_everything(self, notes):
        assert filter_notes(notes) == notes

    def test_pinned_is_ordered_subsequence(self, notes):
        assert filter_notes(notes, NoteFilter.PINNED) == [notes[0], notes[3]]

    def test_archived(self, notes):
        assert ids(filter_notes(notes, NoteFilter.ARCHIVED)) == ["a1", "p2"]

    def test_accepts_string_category(self, notes):
        assert ids(filter_notes(notes, "pinned")) == ["p1", "p2"]

    def test_query_matches_title_case_insensitively(self, notes):
        assert ids(filter_notes(notes, query="GROC")) == ["p1"]

    def test_query_matches_body(self, notes):
        assert ids(filter_notes(notes, query="roadmap")) == ["n1"]

    def test_query_matches_tags(self, notes):
        assert ids(filter_notes(notes, query="home")) == ["p1"]

    def test_query_is_trimmed(self, notes):
        assert ids(filter_notes(notes, query="  work  ")) == ["a1"]

    def test_blank_query_matches_all(self, notes):
        assert filter_notes(notes, query="   ") == notes

    def test_category_and_query_combined(self, notes):
        assert ids(filter_notes(notes, NoteFilter.ARCHIVED, "plans")) == ["p2"]

    def test_no_match(self, notes):
        assert filter_notes(notes, query="zebra") == []

    def test_matches_query_on_partial_tag(self, make_note):
        assert matches_query(make_note("t", tags=["javascript"]), "script")


# =============================================================================
# List operations
# =============================================================================


class TestListOperations:
    """Tests for upsert/delete/reorder over plain lists."""

    def test_upsert_inserts_new_note_first(self, make_note):
        existing = [make_note("a")]
        result = upsert_note(existing, make_note("b"))
        assert ids(result) == ["b", "a"]

    def test_upsert_replaces_in_place(self, make_note):
        existing = [make_note("a"), make_note("b", title="old")]

        result = upsert_note(existing, make_note("b", title="new"))

        assert ids(result) == ["a", "b"]
        assert result[1].title == "new"

    def test_upsert_keeps_unknown_fields_of_existing(self, make_note):
        existing = [Note.model_validate({"id": "a", "updatedAt": 1, "color": "red"})]

        result = upsert_note(existing, make_note("a", title="changed"))

        assert result[0].title == "changed"
        assert result[0].to_record()["color"] == "red"

    def test_upsert_mapping_merges_only_given_fields(self, make_note):
        existing = [make_note("a", body="keep", tags=["x"], pinned=True)]

        result = upsert_note(existing, {"id": "a", "title": "renamed"})

        assert result[0].title == "renamed"
        assert result[0].body == "keep"
        assert result[0].tags == ["x"]
        assert result[0].pinned is True

    def test_upsert_does_not_mutate_input(self, make_note):
        existing = [make_note("a")]
        upsert_note(existing, make_note("b"))
        assert ids(existing) == ["a"]

    def test_delete_note(self, make_note):
        assert ids(delete_note([make_note("a"), make_note("b")], "a")) == ["b"]

    def test_delete_unknown_is_noop(self, make_note):
        assert ids(delete_note([make_note("a")], "zzz")) == ["a"]

    def test_reorder_follows_ids(self, make_note):
        notes = [make_note("a"), make_note("b"), make_note("c")]
        assert ids(reorder_notes(notes, ["c", "a", "b"])) == ["c", "a", "b"]

    def test_reorder_drops_unknown_and_repeated_ids(self, make_note):
        notes = [make_note("a"), make_note("b")]
        assert ids(reorder_notes(notes, ["b", "ghost", "b", "a"])) == ["b", "a"]

    def test_reorder_keeps_unlisted_notes_in_place(self, make_note):
        """Should fill only the slots the listed notes already held."""
        notes = [make_note("a"), make_note("hidden"), make_note("b"), make_note("c")]
        assert ids(reorder_notes(notes, ["c", "a"])) == ["c", "hidden", "b", "a"]

    def test_reorder_archived_subset_stays_after_live_notes(self, make_note):
        notes = [
            make_note("live1"),
            make_note("arch1", archived=True),
            make_note("arch2", archived=True),
            make_note("live2"),
        ]

        result = reorder_notes(notes, ["arch2", "arch1"])

        assert ids(result) == ["live1", "arch2", "arch1", "live2"]

    def test_reorder_without_ids_changes_nothing(self, make_note):
        notes = [make_note("a"), make_note("b")]
        assert ids(reorder_notes(notes, [])) == ["a", "b"]


# =============================================================================
# NoteRepository
# =============================================================================


class TestRepositoryLoad:
    """Tests for loading into the repository."""

    def test_load_sorts(self, repository, kv_store):
        kv_store.set(NOTES_KEY, json.dumps([
            {"id": "b", "updatedAt": 200},
            {"id": "a", "pinned": True, "updatedAt": 100},
        ]))

        assert ids(repository.load()) == ["a", "b"]
        assert len(repository) == 2

    def test_load_from_corrupt_store_is_empty(self, repository, kv_store):
        kv_store.set(NOTES_KEY, "garbage")
        assert repository.load() == []

    def test_snapshot_is_immutable_copy(self, repository, make_note):
        repository.upsert(make_note("a"))
        snapshot = repository.snapshot()

        repository.upsert(make_note("b"))

        assert ids(snapshot) == ["a"]

    def test_get_unknown_returns_none(self, repository):
        assert repository.get("missing") is None


class TestRepositoryUpsert:
    """Tests for create and update."""

    def test_create_persists(self, repository, note_store):
        stored = repository.upsert(Note(id="n1", title="Todo", body="- milk"))

        assert stored.title == "Todo"
        assert note_store.load() == [stored]

    def test_upsert_refreshes_timestamp(self, repository, clock):
        stored = repository.upsert(Note(id="n1", updated_at=1))
        assert stored.updated_at == clock.now

    def test_upsert_accepts_mapping(self, repository):
        stored = repository.upsert({"id": "n1", "title": "From dict"})
        assert repository.get("n1") == stored

    def test_update_keeps_single_entry(self, repository):
        repository.upsert(Note(id="n1", title="one"))
        repository.upsert(Note(id="n1", title="two"))

        assert len(repository) == 1
        assert repository.get("n1").title == "two"

    def test_newest_first_after_create(self, repository):
        repository.upsert(Note(id="first"))
        repository.upsert(Note(id="second"))

        assert ids(repository.snapshot()) == ["second", "first"]

    def test_ids_stay_unique(self, repository):
        for note_id in ["a", "b", "a", "c", "b", "a"]:
            repository.upsert(Note(id=note_id))

        notes = repository.snapshot()

        assert len(ids(notes)) == len(set(ids(notes))) == 3

    def test_partial_mapping_keeps_other_fields(self, repository):
        repository.upsert({"id": "a", "body": "b", "tags": ["x"], "pinned": True})

        stored = repository.upsert({"id": "a", "title": "A2"})

        assert stored.title == "A2"
        assert stored.body == "b"
        assert stored.tags == ["x"]
        assert stored.pinned is True

    def test_partial_note_keeps_other_fields(self, repository):
        repository.upsert(Note(id="a", body="b", archived=True))

        stored = repository.upsert(Note(id="a", title="A2"))

        assert stored.title == "A2"
        assert stored.body == "b"
        assert stored.archived is True

    def test_partial_update_still_refreshes_timestamp(self, repository, clock):
        repository.upsert({"id": "a"})
        stored = repository.upsert({"id": "a", "title": "later"})
        assert stored.updated_at == clock.now

    def test_memory_updated_even_if_persist_fails(self, clock):
        note_store = MagicMock()
        note_store.save.side_effect = StorageError("disk full")
        repository = NoteRepository(note_store, clock=clock)

        with pytest.raises(StorageError):
            repository.upsert(Note(id="n1"))

        assert repository.get("n1") is not None


class TestRepositoryMutations:
    """Tests for delete, toggles and reorder."""

    def test_delete(self, repository, note_store):
        repository.upsert(Note(id="a"))
        repository.upsert(Note(id="b"))

        assert repository.delete("a") is True
        assert ids(note_store.load()) == ["b"]

    def test_delete_unknown_does_not_write(self, repository, kv_store):
        assert repository.delete("ghost") is False
        assert kv_store.get(NOTES_KEY) is None

    def test_toggle_pin_moves_note_first(self, repository):
        repository.upsert(Note(id="a"))
        repository.upsert(Note(id="b"))

        pinned = repository.toggle_pin("a")

        assert pinned.pinned is True
        assert ids(repository.snapshot()) == ["a", "b"]

    def test_toggle_pin_twice_restores_flag(self, repository):
        repository.upsert(Note(id="a"))
        repository.toggle_pin("a")
        assert repository.toggle_pin("a").pinned is False

    def test_toggle_refreshes_timestamp(self, repository, clock):
        repository.upsert(Note(id="a"))
        toggled = repository.toggle_archive("a")
        assert toggled.updated_at == clock.now

    def test_archiving_pinned_note_moves_it_last(self, repository):
        repository.upsert(Note(id="a", pinned=True))
        repository.upsert(Note(id="b"))
        repository.upsert(Note(id="c"))

        archived = repository.toggle_archive("a")

        assert archived.pinned is True
        assert archived.archived is True
        assert ids(repository.snapshot()) == ["c", "b", "a"]

    def test_toggle_unknown_returns_none(self, repository, kv_store):
        assert repository.toggle_pin("ghost") is None
        assert repository.toggle_archive("ghost") is None
        assert kv_store.get(NOTES_KEY) is None

    def test_toggle_persists(self, repository, note_store):
        repository.upsert(Note(id="a"))
        repository.toggle_archive("a")
        assert note_store.load()[0].archived is True

    def test_reorder_persists_without_resorting(self, repository, note_store):
        repository.upsert(Note(id="a", pinned=True))
        repository.upsert(Note(id="b"))

        repository.reorder(["b", "a"])

        assert ids(repository.snapshot()) == ["b", "a"]
        assert ids(note_store.load()) == ["b", "a"]

    def test_reorder_does_not_touch_timestamps(self, repository):
        repository.upsert(Note(id="a"))
        repository.upsert(Note(id="b"))
        before = {note.id: note.updated_at for note in repository.snapshot()}

        repository.reorder(["a", "b"])

        assert {note.id: note.updated_at for note in repository.snapshot()} == before

    def test_manual_order_lost_on_reload(self, repository):
        repository.upsert(Note(id="a"))
        repository.upsert(Note(id="b"))
        repository.reorder(["a", "b"])

        assert ids(repository.reload()) == ["b", "a"]
