"""
Note Controller.

Translates user actions into repository calls and state transitions, then
re-renders the whole note list. Holds the current AppState; the UI only
forwards events and draws the NoteListView it is handed.
"""

from collections.abc import Callable, Iterable
from dataclasses import dataclass
from pathlib import Path
from typing import Literal, Protocol

from notekeep.core.exceptions import StorageError, ValidationError
from notekeep.core.utils import format_timestamp, new_note_id, now_ms
from notekeep.repositories.note import NoteRepository
from notekeep.schemas.note import Note, NoteFilter, Theme, ViewMode
from notekeep.services import state as transitions
from notekeep.services.base import BaseService
from notekeep.services.renderer import MarkdownRenderer
from notekeep.services.state import AppState
from notekeep.views.note_list import (
    EMPTY_LIST_MESSAGE,
    EditorView,
    NoteListView,
    build_editor,
    build_note_list,
)

Severity = Literal["information", "warning", "error"]


@dataclass(frozen=True)
class Notice:
    """Transient message for the user."""

    message: str
    severity: Severity = "information"


class Clipboard(Protocol):
    async def write_text(self, text: str) -> None: ...


class NoteController(BaseService):
    """
    Wires UI events to the note repository.

    Args:
        repository: Note repository (owns the notes)
        renderer: Markdown renderer for cards and preview
        on_render: Called with a fresh NoteListView after every change
        on_notice: Called with user-facing messages
        on_theme: Called when the theme is loaded or toggled
        state: Initial UI state
    """

    def __init__(
        self,
        repository: NoteRepository,
        renderer: MarkdownRenderer,
        on_render: Callable[[NoteListView], None],
        on_notice: Callable[[Notice], None] | None = None,
        on_theme: Callable[[Theme], None] | None = None,
        state: AppState | None = None,
        clock: Callable[[], int] = now_ms,
        id_factory: Callable[[], str] = new_note_id,
        formatter: Callable[[int], str] = format_timestamp,
        untitled_title: str = "Untitled note",
        empty_message: str = EMPTY_LIST_MESSAGE,
        export_indent: int = 2,
    ) -> None:
        super().__init__()
        self.repository = repository
        self.renderer = renderer
        self._on_render = on_render
        self._on_notice = on_notice or (lambda notice: None)
        self._on_theme = on_theme or (lambda theme: None)
        self._state = state or AppState()
        self._clock = clock
        self._id_factory = id_factory
        self._formatter = formatter
        self._untitled_title = untitled_title
        self._empty_message = empty_message
        self._export_indent = export_indent
        self._unsubscribe: Callable[[], None] | None = None

    @property
    def state(self) -> AppState:
        return self._state

    @property
    def store(self):
        return self.repository.store

    # -------------------------------------------------------------------------
    # Lifecycle
    # -------------------------------------------------------------------------

    def start(self) -> NoteListView:
        """Load notes and theme, subscribe to external changes, render."""
        self._load_notes("load_notes")
        try:
            theme = self._execute_storage_operation("load_theme", self.store.load_theme)
        except StorageError as e:
            self._notify(f"Could not read theme: {e.message}", "warning")
            theme = None
        if theme is not None:
            self._state = transitions.set_theme(self._state, theme)
        self._on_theme(self._state.theme)

        if self._unsubscribe is None:
            self._unsubscribe = self.store.subscribe(self.handle_storage_change)

        self._log_operation("Controller started", notes=len(self.repository))
        return self.render()

    def stop(self) -> None:
        if self._unsubscribe is not None:
            self._unsubscribe()
            self._unsubscribe = None

    def handle_storage_change(self) -> NoteListView:
        """Another instance rewrote the notes; reload them (last writer wins)."""
        self._log_debug("Reloading notes after external change")
        self._load_notes("reload_notes")
        return self.render()

    def _load_notes(self, operation: str) -> None:
        try:
            self._execute_storage_operation(operation, self.repository.load)
        except StorageError as e:
            self._notify(f"Could not read notes: {e.message}", "error")

    # -------------------------------------------------------------------------
    # Rendering
    # -------------------------------------------------------------------------

    def view(self) -> NoteListView:
        return build_note_list(
            self.repository.snapshot(),
            self._state,
            self.renderer,
            formatter=self._formatter,
            empty_message=self._empty_message,
        )

    def render(self) -> NoteListView:
        view = self.view()
        self._on_render(view)
        return view

    def _notify(self, message: str, severity: Severity = "information") -> None:
        self._on_notice(Notice(message, severity))

    def _persist(self, operation: str, func: Callable, *args) -> object | None:
        """Run a repository mutation; storage failures become an error notice."""
        try:
            return self._execute_storage_operation(operation, func, *args)
        except StorageError as e:
            self._notify(f"Could not save notes: {e.message}", "error")
            return None

    # -------------------------------------------------------------------------
    # Editor
    # -------------------------------------------------------------------------

    def update_draft(
        self,
        title: str | None = None,
        body: str | None = None,
        tags: str | None = None,
    ) -> EditorView:
        """Record editor input. Only the editor and preview change, not the list."""
        self._state = transitions.set_draft(self._state, title=title, body=body, tags=tags)
        return build_editor(self._state, self.renderer)

    def preview_html(self) -> str:
        return self.renderer.to_html(self._state.draft.body)

    def save(self) -> Note | None:
        """
        Save the editor contents as a new note or over the one being edited.

        Returns:
            The stored note, or None if the draft was rejected or could
            not be persisted
        """
        editing_id = self._state.editing_id
        existing = self.repository.get(editing_id) if editing_id else None
        try:
            payload = transitions.build_payload(
                self._state.draft,
                editing_id=editing_id,
                existing=existing,
                clock=self._clock,
                id_factory=self._id_factory,
                untitled_title=self._untitled_title,
            )
        except ValidationError as e:
            self._log_debug("Draft rejected", details=e.details)
            self._notify(e.message, "error")
            return None

        self._log_operation("Saving note", note_id=payload.id, editing=editing_id is not None)
        stored = self._persist("upsert_note", self.repository.upsert, payload)
        self._state = transitions.clear_editor(self._state)
        self.render()
        if stored is not None:
            self._notify("Note updated" if editing_id else "Note saved")
        return stored

    def clear(self) -> NoteListView:
        self._state = transitions.clear_editor(self._state)
        return self.render()

    def edit(self, note_id: str) -> Note | None:
        """Load a note into the editor. Unknown ids are ignored."""
        note = self.repository.get(note_id)
        if note is None:
            return None
        self._state = transitions.begin_edit(self._state, note)
        self.render()
        return note

    # -------------------------------------------------------------------------
    # Note actions
    # -------------------------------------------------------------------------

    def delete(self, note_id: str) -> bool:
        self._log_operation("Deleting note", note_id=note_id)
        removed = bool(self._persist("delete_note", self.repository.delete, note_id))
        self.render()
        return removed

    def toggle_pin(self, note_id: str) -> Note | None:
        note = self._persist("toggle_pin", self.repository.toggle_pin, note_id)
        self.render()
        return note

    def toggle_archive(self, note_id: str) -> Note | None:
        note = self._persist("toggle_archive", self.repository.toggle_archive, note_id)
        self.render()
        return note

    def reorder(self, ids: Iterable[str]) -> NoteListView:
        """Persist a manual ordering, e.g. after a drag or a move key."""
        self._persist("reorder_notes", self.repository.reorder, list(ids))
        return self.render()

    def move(self, note_id: str, offset: int) -> NoteListView:
        """
        Move a visible card up (negative offset) or down among visible cards.

        Computes the new visible ordering and hands it to reorder(), the
        same way a drag-and-drop would.
        """
        ids = self.view().ids
        if note_id not in ids:
            return self.render()
        index = ids.index(note_id)
        target = max(0, min(len(ids) - 1, index + offset))
        ids.insert(target, ids.pop(index))
        return self.reorder(ids)

    # -------------------------------------------------------------------------
    # List controls
    # -------------------------------------------------------------------------

    def set_filter(self, category: NoteFilter | str) -> NoteListView:
        self._state = transitions.select_filter(self._state, category)
        return self.render()

    def set_view(self, view: ViewMode | str) -> NoteListView:
        self._state = transitions.select_view(self._state, view)
        return self.render()

    def search(self, query: str) -> NoteListView:
        self._state = transitions.set_query(self._state, query)
        return self.render()

    def toggle_theme(self) -> Theme:
        self._state = transitions.toggle_theme(self._state)
        try:
            self._execute_storage_operation("save_theme", self.store.save_theme, self._state.theme)
        except StorageError as e:
            self._notify(f"Could not save theme: {e.message}", "warning")
        self._on_theme(self._state.theme)
        self.render()
        return self._state.theme

    # -------------------------------------------------------------------------
    # Export and clipboard
    # -------------------------------------------------------------------------

    def export(self, path: str | Path) -> Path | None:
        """Write every note (not just the visible ones) to a JSON file."""
        try:
            written = self._execute_storage_operation(
                "export_notes",
                self.store.export,
                self.repository.snapshot(),
                path,
                self._export_indent,
            )
        except StorageError as e:
            self._notify(f"Export failed: {e.message}", "error")
            return None
        self._notify(f"Exported {len(self.repository)} notes to {written}")
        return written

    async def copy_preview(self, clipboard: Clipboard) -> bool:
        """
        Copy the preview's text to the clipboard.

        Returns:
            True on success; on failure the user is told and nothing changes
        """
        text = self.renderer.to_text(self.preview_html())
        try:
            await clipboard.write_text(text)
        except Exception as e:
            self._logger.warning("Clipboard copy failed", extra={"error": str(e)})
            self._notify("Unable to copy preview.", "error")
            return False
        self._notify("Preview copied to clipboard")
        return True
