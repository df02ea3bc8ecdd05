"""
Unit Test Fixtures.

Fixtures for unit tests - storage is in memory, the UI is replaced by
recorders that capture what the controller would have drawn.
"""

from unittest.mock import MagicMock

import pytest

from notekeep.repositories.note import NoteRepository
from notekeep.services.controller import NoteController
from notekeep.services.renderer import MarkdownRenderer


# =============================================================================
# UI Recorders
# =============================================================================


class Recorder:
    """Captures renders, notices and theme changes emitted by a controller."""

    def __init__(self) -> None:
        self.views = []
        self.notices = []
        self.themes = []

    def render(self, view) -> None:
        self.views.append(view)

    def notice(self, notice) -> None:
        self.notices.append(notice)

    def theme(self, theme) -> None:
        self.themes.append(theme)

    @property
    def last_view(self):
        return self.views[-1]

    @property
    def messages(self) -> list[str]:
        return [notice.message for notice in self.notices]


@pytest.fixture
def recorder() -> Recorder:
    return Recorder()


@pytest.fixture
def controller(
    repository: NoteRepository,
    renderer: MarkdownRenderer,
    recorder: Recorder,
    clock,
) -> NoteController:
    """
    Controller over an in-memory repository, not yet started.

    Generated ids are note-1, note-2, ... in creation order.
    """
    counter = iter(range(1, 10_000))
    return NoteController(
        repository,
        renderer,
        on_render=recorder.render,
        on_notice=recorder.notice,
        on_theme=recorder.theme,
        clock=clock,
        id_factory=lambda: f"note-{next(counter)}",
        formatter=str,
    )


# =============================================================================
# Logging Mock Fixtures
# =============================================================================


@pytest.fixture
def mock_logger() -> MagicMock:
    """
    Mock logger for testing logging calls.

    Usage:
        def test_logging(mock_logger):
            with patch("module.get_logger", return_value=mock_logger):
                # Test code that logs
                mock_logger.info.assert_called_once()
    """
    logger = MagicMock()
    logger.debug = MagicMock()
    logger.info = MagicMock()
    logger.warning = MagicMock()
    logger.error = MagicMock()
    logger.exception = MagicMock()
    return logger
