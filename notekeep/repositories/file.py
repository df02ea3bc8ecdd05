"""
File-Backed Key-Value Store.

Each key lives in its own UTF-8 file inside one directory, written
atomically through a temporary file and os.replace. Another process
writing the same directory is picked up by poll(), which compares the
files on disk against the last values this instance saw or wrote.
"""

import os
import re
import tempfile
from pathlib import Path

from notekeep.core.exceptions import StorageError
from notekeep.core.logging import get_logger, log_with_source
from notekeep.repositories.base import KeyValueStore, StorageEvent

logger = get_logger(__name__)

_KEY_PATTERN = re.compile(r"^[A-Za-z0-9][A-Za-z0-9._-]*$")
_SUFFIX = ".slot"


class FileKeyValueStore(KeyValueStore):
    """
    Key-value store persisting one file per key.

    Args:
        directory: Directory holding the slot files, created on first write
    """

    def __init__(self, directory: str | Path) -> None:
        super().__init__()
        self.directory = Path(directory)
        self._known: dict[str, str] = self._scan()

    def _path(self, key: str) -> Path:
        if not _KEY_PATTERN.match(key):
            raise ValueError(f"Invalid storage key: {key!r}")
        return self.directory / f"{key}{_SUFFIX}"

    def _read(self, path: Path) -> str | None:
        try:
            return path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return None
        except UnicodeDecodeError as e:
            log_with_source(
                logger, "storage", "warning", "Ignoring unreadable slot file",
                file=path.name, error=str(e),
            )
            return None
        except OSError as e:
            raise StorageError(f"Failed to read {path.name}: {e}") from e

    def _scan(self) -> dict[str, str]:
        """Read every slot file currently on disk."""
        if not self.directory.is_dir():
            return {}
        values: dict[str, str] = {}
        for path in sorted(self.directory.glob(f"*{_SUFFIX}")):
            value = self._read(path)
            if value is not None:
                values[path.name[: -len(_SUFFIX)]] = value
        return values

    def get(self, key: str) -> str | None:
        value = self._read(self._path(key))
        if value is None:
            self._known.pop(key, None)
        else:
            self._known[key] = value
        return value

    def set(self, key: str, value: str) -> None:
        path = self._path(key)
        try:
            self.directory.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(dir=self.directory, prefix=f".{key}.", suffix=".tmp")
            try:
                with os.fdopen(fd, "w", encoding="utf-8") as handle:
                    handle.write(value)
                os.replace(tmp_name, path)
            except BaseException:
                Path(tmp_name).unlink(missing_ok=True)
                raise
        except OSError as e:
            raise StorageError(f"Failed to write {path.name}: {e}") from e
        self._known[key] = value

    def remove(self, key: str) -> None:
        path = self._path(key)
        try:
            path.unlink(missing_ok=True)
        except OSError as e:
            raise StorageError(f"Failed to remove {path.name}: {e}") from e
        self._known.pop(key, None)

    def poll(self) -> list[StorageEvent]:
        """
        Detect changes written by other processes since the last look.

        Emits a StorageEvent to subscribers for every key whose on-disk
        value differs from what this instance last saw or wrote.

        Returns:
            The events that were emitted, in key order
        """
        current = self._scan()
        events = [
            StorageEvent(key, self._known.get(key), current.get(key))
            for key in sorted(set(self._known) | set(current))
            if self._known.get(key) != current.get(key)
        ]
        self._known = current
        for event in events:
            self._emit(event)
        return events
