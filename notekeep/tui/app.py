"""
Terminal UI.

Textual front end for the note controller: an editor with live preview on
the left, the searchable, filterable note list on the right. The app only
forwards widget events to the controller and draws the NoteListView it
gets back.

Usage:
    python cli.py --service tui
"""

from __future__ import annotations

import asyncio
from pathlib import Path

from rich.markdown import Markdown
from rich.text import Text
from textual import on
from textual.app import App, ComposeResult
from textual.binding import Binding
from textual.containers import Horizontal, Vertical, VerticalScroll
from textual.widgets import Button, Footer, Header, Input, Static, TextArea

from notekeep.core.config import get_app_config
from notekeep.core.logging import get_logger, log_with_source
from notekeep.repositories.base import KeyValueStore
from notekeep.repositories.file import FileKeyValueStore
from notekeep.schemas.note import NoteFilter, Theme, ViewMode
from notekeep.services.controller import NoteController, Notice
from notekeep.services.factory import create_controller
from notekeep.views.note_list import NoteCardView, NoteListView

logger = get_logger(__name__)

THEMES = {Theme.LIGHT: "textual-light", Theme.DARK: "textual-dark"}


class TerminalClipboard:
    """Clipboard backed by the terminal's OSC 52 support."""

    def __init__(self, app: App) -> None:
        self._app = app

    async def write_text(self, text: str) -> None:
        self._app.copy_to_clipboard(text)


class NoteAction(Button):
    """Per-card button remembering which note and action it belongs to."""

    def __init__(self, label: str, action: str, note_id: str, active: bool = False) -> None:
        super().__init__(label, classes=f"note-action {action}")
        self.note_action = action
        self.note_id = note_id
        self.set_class(active, "active")


class NoteCard(Vertical):
    """One rendered note."""

    def __init__(self, card: NoteCardView) -> None:
        super().__init__(classes="note-card")
        self.card = card
        self.set_class(card.pinned, "pinned")
        self.set_class(card.archived, "archived")

    def compose(self) -> ComposeResult:
        card = self.card
        yield Static(Text(card.title, style="bold"), classes="note-card__title")
        if card.body.strip():
            yield Static(Markdown(card.body), classes="note-card__content")
        tags = "  ".join(f"#{tag}" for tag in card.tags)
        yield Static(Text(f"{card.updated_label}  {tags}".rstrip(), style="dim"), classes="note-card__meta")
        with Horizontal(classes="note-card__actions"):
            yield NoteAction("Pin", "pin", card.id, active=card.pinned)
            yield NoteAction("Archive", "archive", card.id, active=card.archived)
            yield NoteAction("Edit", "edit", card.id)
            yield NoteAction("Delete", "delete", card.id)
            yield NoteAction("Up", "up", card.id)
            yield NoteAction("Down", "down", card.id)


class NotekeepApp(App):
    """Markdown notes in the terminal."""

    TITLE = "Markdown Keep"
    SUB_TITLE = "Markdown notes with preview"

    CSS = """
    #editor {
        width: 2fr;
        padding: 0 1;
    }

    #note-body {
        height: 1fr;
    }

    #preview {
        height: 1fr;
        border: solid $primary;
        padding: 0 1;
    }

    #notes-pane {
        width: 3fr;
        padding: 0 1;
    }

    .toolbar {
        height: auto;
    }

    .toolbar Button {
        margin: 0 1 0 0;
    }

    .toolbar Button.active {
        background: $accent;
    }

    #notes-container.notes--grid {
        layout: grid;
        grid-size: 2;
        grid-gutter: 1;
    }

    #notes-container.notes--list {
        layout: vertical;
    }

    .note-card {
        height: auto;
        border: round $primary;
        padding: 0 1;
        margin: 0 0 1 0;
    }

    .note-card.pinned {
        border: round $warning;
    }

    .note-card.archived {
        opacity: 70%;
    }

    .note-card__actions {
        height: auto;
    }

    .note-action {
        min-width: 6;
        margin: 0 1 0 0;
    }

    .note-action.active {
        background: $accent;
    }

    .empty-state {
        color: $text-muted;
        padding: 1;
    }
    """

    BINDINGS = [
        Binding("ctrl+s", "save_note", "Save"),
        Binding("ctrl+n", "clear_editor", "New"),
        Binding("ctrl+y", "copy_preview", "Copy preview"),
        Binding("ctrl+e", "export_notes", "Export"),
        Binding("ctrl+t", "toggle_theme", "Theme"),
        Binding("f1", "set_filter('all')", "All", show=True),
        Binding("f2", "set_filter('pinned')", "Pinned", show=True),
        Binding("f3", "set_filter('archived')", "Archived", show=True),
        Binding("f4", "toggle_view", "Grid/List", show=True),
        Binding("ctrl+q", "quit", "Quit"),
    ]

    def __init__(
        self,
        store: KeyValueStore | None = None,
        data_dir: Path | None = None,
        export_dir: Path | None = None,
    ) -> None:
        super().__init__()
        self._store = store
        self._data_dir = data_dir
        self._export_dir = export_dir or Path.cwd()
        self._latest_view: NoteListView | None = None
        self._render_lock = asyncio.Lock()
        self.controller: NoteController | None = None

    def compose(self) -> ComposeResult:
        yield Header()
        with Horizontal():
            with Vertical(id="editor"):
                yield Input(placeholder="Title", id="note-title")
                yield TextArea(id="note-body")
                yield Input(placeholder="Tags, comma separated", id="note-tags")
                with Horizontal(classes="toolbar"):
                    yield Button("Save Note", id="save-note", variant="primary")
                    yield Button("Clear", id="clear-editor")
                    yield Button("Copy preview", id="copy-preview")
                with VerticalScroll(id="preview"):
                    yield Static(id="preview-content")
            with Vertical(id="notes-pane"):
                yield Input(placeholder="Search notes", id="search-input")
                with Horizontal(classes="toolbar"):
                    yield Button("All", id="filter-all", classes="filter")
                    yield Button("Pinned", id="filter-pinned", classes="filter")
                    yield Button("Archived", id="filter-archived", classes="filter")
                    yield Button("Grid", id="view-grid", classes="view")
                    yield Button("List", id="view-list", classes="view")
                yield VerticalScroll(id="notes-container")
        yield Footer()

    def on_mount(self) -> None:
        self.controller = create_controller(
            on_render=self._render_view,
            on_notice=self._show_notice,
            on_theme=self._apply_theme,
            store=self._store,
            data_dir=self._data_dir,
        )
        self.controller.start()

        store = self.controller.store.store
        if isinstance(store, FileKeyValueStore):
            interval = get_app_config().storage.sync_poll_seconds
            self.set_interval(interval, store.poll)
        log_with_source(logger, "tui", "info", "TUI started", notes=len(self.controller.repository))

    def on_unmount(self) -> None:
        if self.controller is not None:
            self.controller.stop()

    # -------------------------------------------------------------------------
    # Controller callbacks
    # -------------------------------------------------------------------------

    def _render_view(self, view: NoteListView) -> None:
        self._latest_view = view
        self._sync_editor(view)
        self._sync_toolbar(view)
        self.run_worker(self._mount_cards(), group="cards")

    async def _mount_cards(self) -> None:
        async with self._render_lock:
            view = self._latest_view
            if view is None:
                return
            container = self.query_one("#notes-container", VerticalScroll)
            await container.remove_children()
            if view.empty_message:
                await container.mount(Static(view.empty_message, classes="empty-state"))
            else:
                await container.mount_all(NoteCard(card) for card in view.cards)

    def _sync_editor(self, view: NoteListView) -> None:
        editor = view.editor
        title = self.query_one("#note-title", Input)
        if title.value != editor.title:
            title.value = editor.title
        body = self.query_one("#note-body", TextArea)
        if body.text != editor.body:
            body.load_text(editor.body)
        tags = self.query_one("#note-tags", Input)
        if tags.value != editor.tags:
            tags.value = editor.tags
        self.query_one("#save-note", Button).label = editor.save_label
        self._update_preview()

    def _sync_toolbar(self, view: NoteListView) -> None:
        for category in NoteFilter:
            button = self.query_one(f"#filter-{category.value}", Button)
            button.set_class(view.active_filter == category, "active")
        for mode in ViewMode:
            button = self.query_one(f"#view-{mode.value}", Button)
            button.set_class(view.layout == mode, "active")
        container = self.query_one("#notes-container", VerticalScroll)
        container.set_class(view.layout == ViewMode.GRID, "notes--grid")
        container.set_class(view.layout == ViewMode.LIST, "notes--list")

    def _update_preview(self) -> None:
        body = self.controller.state.draft.body if self.controller else ""
        preview = self.query_one("#preview-content", Static)
        if body.strip():
            preview.update(Markdown(body))
        else:
            preview.update(Text(self.controller.renderer.placeholder, style="dim italic"))

    def _show_notice(self, notice: Notice) -> None:
        timeout = get_app_config().application.notices.timeout_seconds
        self.notify(notice.message, severity=notice.severity, timeout=timeout)

    def _apply_theme(self, theme: Theme) -> None:
        self.theme = THEMES[theme]

    # -------------------------------------------------------------------------
    # Widget events
    # -------------------------------------------------------------------------

    @on(Input.Changed, "#note-title")
    def on_title_changed(self, event: Input.Changed) -> None:
        self.controller.update_draft(title=event.value)

    @on(Input.Changed, "#note-tags")
    def on_tags_changed(self, event: Input.Changed) -> None:
        self.controller.update_draft(tags=event.value)

    @on(TextArea.Changed, "#note-body")
    def on_body_changed(self, event: TextArea.Changed) -> None:
        self.controller.update_draft(body=event.text_area.text)
        self._update_preview()

    @on(Input.Changed, "#search-input")
    def on_search_changed(self, event: Input.Changed) -> None:
        self.controller.search(event.value)

    @on(Button.Pressed, "#save-note")
    def on_save_pressed(self) -> None:
        self.action_save_note()

    @on(Button.Pressed, "#clear-editor")
    def on_clear_pressed(self) -> None:
        self.action_clear_editor()

    @on(Button.Pressed, "#copy-preview")
    def on_copy_pressed(self) -> None:
        self.action_copy_preview()

    @on(Button.Pressed, ".filter")
    def on_filter_pressed(self, event: Button.Pressed) -> None:
        self.action_set_filter(event.button.id.removeprefix("filter-"))

    @on(Button.Pressed, ".view")
    def on_view_pressed(self, event: Button.Pressed) -> None:
        self.controller.set_view(event.button.id.removeprefix("view-"))

    @on(Button.Pressed, ".note-action")
    def on_note_action(self, event: Button.Pressed) -> None:
        button = event.button
        if not isinstance(button, NoteAction):
            return
        note_id = button.note_id
        if button.note_action == "pin":
            self.controller.toggle_pin(note_id)
        elif button.note_action == "archive":
            self.controller.toggle_archive(note_id)
        elif button.note_action == "delete":
            self.controller.delete(note_id)
        elif button.note_action == "edit":
            self.controller.edit(note_id)
            self.query_one("#note-title", Input).focus()
        elif button.note_action == "up":
            self.controller.move(note_id, -1)
        elif button.note_action == "down":
            self.controller.move(note_id, 1)

    # -------------------------------------------------------------------------
    # Actions
    # -------------------------------------------------------------------------

    def action_save_note(self) -> None:
        self.controller.save()

    def action_clear_editor(self) -> None:
        self.controller.clear()

    def action_copy_preview(self) -> None:
        self.run_worker(self.controller.copy_preview(TerminalClipboard(self)))

    def action_export_notes(self) -> None:
        filename = get_app_config().application.export.filename
        self.controller.export(self._export_dir / filename)

    def action_toggle_theme(self) -> None:
        self.controller.toggle_theme()

    def action_set_filter(self, category: str) -> None:
        self.controller.set_filter(category)

    def action_toggle_view(self) -> None:
        current = self.controller.state.active_view
        self.controller.set_view(ViewMode.LIST if current == ViewMode.GRID else ViewMode.GRID)


def run(data_dir: Path | None = None, export_dir: Path | None = None) -> None:
    NotekeepApp(data_dir=data_dir, export_dir=export_dir).run()
