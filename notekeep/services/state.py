"""
Application State.

Transient UI state as an immutable value plus the pure functions that
derive a new state from an old one. Nothing here touches storage or
widgets, so every transition can be tested directly.
"""

from collections.abc import Callable
from dataclasses import dataclass, field, replace

from notekeep.core.exceptions import ValidationError
from notekeep.core.utils import new_note_id, now_ms
from notekeep.schemas.note import Note, NoteDraft, NoteFilter, Theme, ViewMode

EMPTY_NOTE_MESSAGE = "Add a title or body to save the note."


@dataclass(frozen=True)
class AppState:
    """Everything the views need besides the notes themselves."""

    active_filter: NoteFilter = NoteFilter.ALL
    active_view: ViewMode = ViewMode.GRID
    editing_id: str | None = None
    query: str = ""
    theme: Theme = Theme.LIGHT
    draft: NoteDraft = field(default_factory=NoteDraft)

    @property
    def is_editing(self) -> bool:
        return self.editing_id is not None


def select_filter(state: AppState, category: NoteFilter | str) -> AppState:
    return replace(state, active_filter=NoteFilter(category))


def select_view(state: AppState, view: ViewMode | str) -> AppState:
    return replace(state, active_view=ViewMode(view))


def set_query(state: AppState, query: str) -> AppState:
    return replace(state, query=query)


def set_draft(
    state: AppState,
    title: str | None = None,
    body: str | None = None,
    tags: str | None = None,
) -> AppState:
    """Update any subset of the editor fields."""
    draft = state.draft.model_copy(update={
        key: value
        for key, value in (("title", title), ("body", body), ("tags", tags))
        if value is not None
    })
    return replace(state, draft=draft)


def begin_edit(state: AppState, note: Note) -> AppState:
    """Load a note into the editor."""
    return replace(state, editing_id=note.id, draft=NoteDraft.from_note(note))


def clear_editor(state: AppState) -> AppState:
    return replace(state, editing_id=None, draft=NoteDraft())


def set_theme(state: AppState, theme: Theme | str) -> AppState:
    return replace(state, theme=Theme(theme))


def toggle_theme(state: AppState) -> AppState:
    return set_theme(state, Theme.LIGHT if state.theme == Theme.DARK else Theme.DARK)


def build_payload(
    draft: NoteDraft,
    editing_id: str | None = None,
    existing: Note | None = None,
    clock: Callable[[], int] = now_ms,
    id_factory: Callable[[], str] = new_note_id,
    untitled_title: str = "Untitled note",
) -> Note:
    """
    Turn editor contents into a note ready for upsert.

    Title and body are trimmed and tags split on commas. When editing,
    the id is kept and the pin/archive flags of the existing note carry
    over; otherwise a fresh id is generated.

    Raises:
        ValidationError: If both title and body are empty
    """
    title = draft.title.strip()
    body = draft.body.strip()

    if not title and not body:
        raise ValidationError(
            EMPTY_NOTE_MESSAGE,
            details={"missing_fields": ["title", "body"]},
        )

    return Note(
        id=editing_id or id_factory(),
        title=title or untitled_title,
        body=body,
        tags=draft.tag_list(),
        pinned=existing.pinned if existing is not None else False,
        archived=existing.archived if existing is not None else False,
        updated_at=clock(),
    )
