"""
Root Pytest Fixtures.

Shared fixtures available to all test types.

Storage:
    Tests never touch the configured data directory. Unit tests use the
    in-memory key-value store; file-store tests write under tmp_path.

Time:
    A controllable millisecond clock replaces the wall clock wherever
    ordering by timestamp matters.
"""

from collections.abc import Callable
from typing import Any

import pytest

from notekeep.core.config import get_app_config, get_settings
from notekeep.repositories.memory import MemoryBackend, MemoryKeyValueStore
from notekeep.repositories.note import NoteRepository
from notekeep.repositories.store import NoteStore
from notekeep.schemas.note import Note
from notekeep.services.renderer import MarkdownRenderer

NOTES_KEY = "markdown-keep-notes"
THEME_KEY = "markdown-keep-theme"


# =============================================================================
# Configuration
# =============================================================================


@pytest.fixture(autouse=True)
def _clear_config_cache():
    """Clear lru_cache between tests so each test gets a fresh load."""
    get_settings.cache_clear()
    get_app_config.cache_clear()
    yield
    get_settings.cache_clear()
    get_app_config.cache_clear()


# =============================================================================
# Clock
# =============================================================================


class FakeClock:
    """Millisecond clock that advances by one step on every call."""

    def __init__(self, start: int = 1_000, step: int = 10) -> None:
        self.now = start
        self.step = step

    def __call__(self) -> int:
        self.now += self.step
        return self.now


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


# =============================================================================
# Notes
# =============================================================================


@pytest.fixture
def make_note() -> Callable[..., Note]:
    """
    Build a Note with sensible defaults.

    Usage:
        def test_sort(make_note):
            a = make_note("a", pinned=True, updated_at=100)
    """

    def _make(note_id: str, **fields: Any) -> Note:
        fields.setdefault("title", f"Note {note_id}")
        fields.setdefault("updated_at", 100)
        return Note(id=note_id, **fields)

    return _make


# =============================================================================
# Storage
# =============================================================================


@pytest.fixture
def memory_backend() -> MemoryBackend:
    return MemoryBackend()


@pytest.fixture
def kv_store(memory_backend: MemoryBackend) -> MemoryKeyValueStore:
    return MemoryKeyValueStore(memory_backend)


@pytest.fixture
def note_store(kv_store: MemoryKeyValueStore, clock: FakeClock) -> NoteStore:
    return NoteStore(kv_store, notes_key=NOTES_KEY, theme_key=THEME_KEY, clock=clock)


@pytest.fixture
def repository(note_store: NoteStore, clock: FakeClock) -> NoteRepository:
    return NoteRepository(note_store, clock=clock)


@pytest.fixture
def renderer() -> MarkdownRenderer:
    return MarkdownRenderer()
