"""
Note List View Models.

Declarative description of what the UI shows: one card per visible note,
the list layout, the empty-state message and the editor preview. The
terminal UI only maps these values onto widgets.
"""

from collections.abc import Callable, Iterable
from dataclasses import dataclass

from notekeep.core.utils import format_timestamp
from notekeep.repositories.note import filter_notes
from notekeep.schemas.note import Note, NoteFilter, Theme, ViewMode
from notekeep.services.renderer import MarkdownRenderer
from notekeep.services.state import AppState

EMPTY_LIST_MESSAGE = "No notes yet. Create your first one!"


@dataclass(frozen=True)
class NoteCardView:
    id: str
    title: str
    body: str
    tags: tuple[str, ...]
    updated_label: str
    pinned: bool
    archived: bool


@dataclass(frozen=True)
class EditorView:
    title: str
    body: str
    tags: str
    preview_html: str
    save_label: str


@dataclass(frozen=True)
class NoteListView:
    cards: tuple[NoteCardView, ...]
    layout: ViewMode
    active_filter: NoteFilter
    query: str
    theme: Theme
    editor: EditorView
    empty_message: str | None = None
    total: int = 0

    @property
    def ids(self) -> list[str]:
        """Ids of the visible cards, top to bottom."""
        return [card.id for card in self.cards]


def build_card(
    note: Note,
    formatter: Callable[[int], str] = format_timestamp,
) -> NoteCardView:
    return NoteCardView(
        id=note.id,
        title=note.title,
        body=note.body,
        tags=tuple(note.tags),
        updated_label=formatter(note.updated_at),
        pinned=note.pinned,
        archived=note.archived,
    )


def build_editor(state: AppState, renderer: MarkdownRenderer) -> EditorView:
    draft = state.draft
    return EditorView(
        title=draft.title,
        body=draft.body,
        tags=draft.tags,
        preview_html=renderer.to_html(draft.body),
        save_label="Update Note" if state.is_editing else "Save Note",
    )


def build_note_list(
    notes: Iterable[Note],
    state: AppState,
    renderer: MarkdownRenderer,
    formatter: Callable[[int], str] = format_timestamp,
    empty_message: str = EMPTY_LIST_MESSAGE,
) -> NoteListView:
    """Project notes and UI state into the full view model."""
    notes = list(notes)
    visible = filter_notes(notes, state.active_filter, state.query)
    cards = tuple(build_card(note, formatter) for note in visible)
    return NoteListView(
        cards=cards,
        layout=state.active_view,
        active_filter=state.active_filter,
        query=state.query,
        theme=state.theme,
        editor=build_editor(state, renderer),
        empty_message=None if cards else empty_message,
        total=len(notes),
    )
