"""
Service Factory.

Builds the store, repository, renderer and controller from the validated
YAML configuration. Entry points (TUI, CLI) call these instead of wiring
the object graph themselves.
"""

from collections.abc import Callable
from pathlib import Path

from notekeep.core.config import get_app_config, get_data_dir
from notekeep.core.config_schema import ApplicationSchema, StorageSchema
from notekeep.core.logging import get_logger
from notekeep.repositories.base import KeyValueStore
from notekeep.repositories.file import FileKeyValueStore
from notekeep.repositories.memory import MemoryKeyValueStore
from notekeep.repositories.note import NoteRepository
from notekeep.repositories.store import NoteStore
from notekeep.schemas.note import NoteFilter, Theme, ViewMode
from notekeep.services.controller import NoteController, Notice
from notekeep.services.renderer import MarkdownRenderer
from notekeep.services.state import AppState
from notekeep.views.note_list import NoteListView

logger = get_logger(__name__)


def create_key_value_store(storage: StorageSchema, data_dir: Path | None = None) -> KeyValueStore:
    """Create the configured key-value store backend."""
    if storage.backend == "memory":
        return MemoryKeyValueStore()
    directory = data_dir or get_data_dir()
    logger.debug("Using file store", extra={"directory": str(directory)})
    return FileKeyValueStore(directory)


def create_note_store(storage: StorageSchema, store: KeyValueStore) -> NoteStore:
    return NoteStore(store, notes_key=storage.notes_key, theme_key=storage.theme_key)


def create_renderer(application: ApplicationSchema) -> MarkdownRenderer:
    settings = application.markdown
    return MarkdownRenderer(
        extensions=settings.extensions,
        hard_line_breaks=settings.hard_line_breaks,
        escape_raw_html=settings.escape_raw_html,
        placeholder=application.editor.preview_placeholder,
    )


def initial_state(application: ApplicationSchema) -> AppState:
    defaults = application.defaults
    return AppState(
        active_filter=NoteFilter(defaults.filter),
        active_view=ViewMode(defaults.view),
        theme=Theme(defaults.theme),
    )


def create_controller(
    on_render: Callable[[NoteListView], None],
    on_notice: Callable[[Notice], None] | None = None,
    on_theme: Callable[[Theme], None] | None = None,
    store: KeyValueStore | None = None,
    data_dir: Path | None = None,
) -> NoteController:
    """
    Build a controller from configuration.

    Args:
        on_render: Receives every re-rendered view
        on_notice: Receives user-facing messages
        on_theme: Receives the active theme
        store: Key-value store to use instead of the configured one
        data_dir: Directory overriding storage.yaml and NOTEKEEP_DATA_DIR

    Returns:
        A controller that has not been started yet
    """
    config = get_app_config()
    application = config.application
    kv_store = store or create_key_value_store(config.storage, data_dir)
    repository = NoteRepository(create_note_store(config.storage, kv_store))
    return NoteController(
        repository,
        create_renderer(application),
        on_render=on_render,
        on_notice=on_notice,
        on_theme=on_theme,
        state=initial_state(application),
        untitled_title=application.editor.untitled_title,
        empty_message=application.editor.empty_list_message,
        export_indent=application.export.indent,
    )
