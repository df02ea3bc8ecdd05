"""
Note Repository.

In-memory ordered list of notes backed by a NoteStore. The ordering and
filtering rules are plain functions over note sequences so they can be
used and tested without a store.
"""

from collections.abc import Callable, Iterable, Mapping, Sequence
from typing import Any

from notekeep.core.logging import get_logger
from notekeep.core.utils import now_ms
from notekeep.repositories.store import NoteStore
from notekeep.schemas.note import Note, NoteFilter

logger = get_logger(__name__)


def sort_key(note: Note) -> tuple[int, int]:
    """
    Sort key: pinned live notes, then other live notes, then archived.

    Archived notes sort last whatever their pin flag. Within each group
    the most recently updated note comes first.
    """
    if note.archived:
        group = 2
    elif note.pinned:
        group = 0
    else:
        group = 1
    return (group, -note.updated_at)


def sort_notes(notes: Iterable[Note]) -> list[Note]:
    """Return notes in display order. Stable, so sorting twice is a no-op."""
    return sorted(notes, key=sort_key)


def matches_category(note: Note, category: NoteFilter) -> bool:
    if category == NoteFilter.PINNED:
        return note.pinned
    if category == NoteFilter.ARCHIVED:
        return note.archived
    return True


def matches_query(note: Note, query: str) -> bool:
    """Case-insensitive substring match against title, body or any tag."""
    needle = query.strip().lower()
    if not needle:
        return True
    if needle in note.title.lower() or needle in note.body.lower():
        return True
    return any(needle in tag.lower() for tag in note.tags)


def filter_notes(
    notes: Iterable[Note],
    category: NoteFilter = NoteFilter.ALL,
    query: str = "",
) -> list[Note]:
    """Notes matching the category AND the free-text query, order preserved."""
    category = NoteFilter(category)
    return [
        note for note in notes
        if matches_category(note, category) and matches_query(note, query)
    ]


def note_changes(payload: Note | Mapping[str, Any]) -> dict[str, Any]:
    """
    Fields a payload actually sets, keyed by their persisted names.

    A Note contributes only the fields it was built with; a mapping
    contributes its keys as given.
    """
    if isinstance(payload, Note):
        changes = payload.model_dump(by_alias=True, exclude_unset=True)
        changes.update(payload.model_extra or {})
        return changes
    changes = dict(payload)
    if "updated_at" in changes:
        changes["updatedAt"] = changes.pop("updated_at")
    return changes


def upsert_note(notes: Sequence[Note], payload: Note | Mapping[str, Any]) -> list[Note]:
    """
    Merge payload into the note with the same id, or insert it first.

    Only the fields the payload sets overwrite the stored ones; every
    other stored field, unknown keys included, survives the merge.
    """
    changes = note_changes(payload)
    result = list(notes)
    for index, note in enumerate(result):
        if note.id == changes.get("id"):
            merged = note.to_record()
            merged.update(changes)
            result[index] = Note.model_validate(merged)
            return result
    result.insert(0, Note.model_validate(changes))
    return result


def delete_note(notes: Sequence[Note], note_id: str) -> list[Note]:
    return [note for note in notes if note.id != note_id]


def reorder_notes(notes: Sequence[Note], ids: Iterable[str]) -> list[Note]:
    """
    Put the listed notes in the order given by ids.

    Unknown and repeated ids are dropped. The listed notes are placed
    into the positions they already occupy between them, so notes whose
    id is not listed keep their exact positions.
    """
    by_id = {note.id: note for note in notes}
    ordered: list[Note] = []
    listed: set[str] = set()
    for note_id in ids:
        if note_id in by_id and note_id not in listed:
            ordered.append(by_id[note_id])
            listed.add(note_id)
    queue = iter(ordered)
    return [next(queue) if note.id in listed else note for note in notes]


class NoteRepository:
    """
    Owner of the in-memory note list.

    Every mutating method updates the list and writes it through the
    NoteStore. Persistence failures propagate as StorageError after the
    in-memory change has been applied; callers decide how to report them.
    """

    def __init__(
        self,
        store: NoteStore,
        clock: Callable[[], int] = now_ms,
    ) -> None:
        self.store = store
        self._clock = clock
        self._notes: list[Note] = []

    def __len__(self) -> int:
        return len(self._notes)

    def load(self) -> list[Note]:
        """Replace the in-memory list with the persisted one, sorted."""
        self._notes = sort_notes(self.store.load())
        logger.debug("Repository loaded", extra={"count": len(self._notes)})
        return list(self._notes)

    reload = load

    def snapshot(self) -> tuple[Note, ...]:
        """Current notes in repository order."""
        return tuple(self._notes)

    def get(self, note_id: str) -> Note | None:
        for note in self._notes:
            if note.id == note_id:
                return note
        return None

    def filter(self, category: NoteFilter = NoteFilter.ALL, query: str = "") -> list[Note]:
        return filter_notes(self._notes, category, query)

    def _commit(self, notes: list[Note]) -> None:
        self._notes = notes
        self.store.save(self._notes)

    def upsert(self, payload: Note | Mapping[str, Any]) -> Note:
        """
        Create or update a note from payload.

        A partial payload only changes the fields it names.

        Returns:
            The stored note after merging

        Raises:
            pydantic.ValidationError: If a new note would be invalid
        """
        changes = note_changes(payload)
        changes["updatedAt"] = self._clock()
        notes = sort_notes(upsert_note(self._notes, changes))
        self._commit(notes)
        note_id = changes["id"]
        logger.info("Note upserted", extra={"note_id": note_id})
        return self.get(note_id)

    def delete(self, note_id: str) -> bool:
        """
        Delete a note.

        Returns:
            True if a note was removed, False if the id was unknown
        """
        if self.get(note_id) is None:
            return False
        self._commit(delete_note(self._notes, note_id))
        logger.info("Note deleted", extra={"note_id": note_id})
        return True

    def _toggle(self, note_id: str, field: str) -> Note | None:
        note = self.get(note_id)
        if note is None:
            return None
        updated = note.model_copy(
            update={field: not getattr(note, field), "updated_at": self._clock()}
        )
        notes = [updated if item.id == note_id else item for item in self._notes]
        self._commit(sort_notes(notes))
        logger.info("Note flag toggled", extra={"note_id": note_id, "field": field})
        return updated

    def toggle_pin(self, note_id: str) -> Note | None:
        return self._toggle(note_id, "pinned")

    def toggle_archive(self, note_id: str) -> Note | None:
        return self._toggle(note_id, "archived")

    def reorder(self, ids: Iterable[str]) -> list[Note]:
        """Apply a manual ordering and persist it without re-sorting."""
        self._commit(reorder_notes(self._notes, ids))
        return list(self._notes)
