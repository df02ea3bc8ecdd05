"""
Note Store.

Adapter between the note repository and a KeyValueStore. Notes are kept
as one JSON array under the notes key; the theme is a plain string under
a second key.
"""

import json
from collections.abc import Callable, Iterable
from pathlib import Path

from pydantic import ValidationError as PydanticValidationError

from notekeep.core.exceptions import StorageError
from notekeep.core.logging import get_logger, log_with_source
from notekeep.core.utils import now_ms
from notekeep.repositories.base import KeyValueStore, StorageEvent
from notekeep.schemas.note import Note, Theme

logger = get_logger(__name__)


class NoteStore:
    """
    Reads and writes the persisted note list and theme preference.

    Args:
        store: Backing key-value store
        notes_key: Key holding the JSON note array
        theme_key: Key holding the theme string
        clock: Millisecond clock used to fill in missing timestamps
    """

    def __init__(
        self,
        store: KeyValueStore,
        notes_key: str,
        theme_key: str,
        clock: Callable[[], int] = now_ms,
    ) -> None:
        self.store = store
        self.notes_key = notes_key
        self.theme_key = theme_key
        self._clock = clock

    def load(self) -> list[Note]:
        """
        Load the persisted note list.

        Missing, unparsable or non-array data yields an empty list.
        Entries that are not valid note records are skipped; entries
        without a timestamp get the current time.
        """
        raw = self.store.get(self.notes_key)
        if not raw:
            return []

        try:
            parsed = json.loads(raw)
        except (ValueError, RecursionError) as e:
            log_with_source(logger, "storage", "error", "Failed to parse notes", error=str(e))
            return []

        if not isinstance(parsed, list):
            log_with_source(
                logger, "storage", "warning", "Persisted notes are not a list",
                found=type(parsed).__name__,
            )
            return []

        notes: list[Note] = []
        for index, item in enumerate(parsed):
            if not isinstance(item, dict):
                log_with_source(logger, "storage", "warning", "Skipping non-object note", index=index)
                continue
            record = dict(item)
            if record.get("updatedAt") is None:
                record["updatedAt"] = self._clock()
            try:
                notes.append(Note.model_validate(record))
            except PydanticValidationError as e:
                log_with_source(
                    logger, "storage", "warning", "Skipping invalid note",
                    index=index, error=str(e),
                )

        logger.debug("Notes loaded", extra={"count": len(notes)})
        return notes

    def save(self, notes: Iterable[Note]) -> None:
        """
        Overwrite the persisted note list.

        Raises:
            StorageError: If the backing store cannot be written
        """
        payload = json.dumps([note.to_record() for note in notes], ensure_ascii=False)
        self.store.set(self.notes_key, payload)

    def load_theme(self) -> Theme | None:
        """Return the saved theme, or None when absent or unrecognised."""
        value = self.store.get(self.theme_key)
        if value is None:
            return None
        try:
            return Theme(value)
        except ValueError:
            logger.warning("Ignoring unknown theme", extra={"value": value})
            return None

    def save_theme(self, theme: Theme) -> None:
        self.store.set(self.theme_key, Theme(theme).value)

    def subscribe(self, callback: Callable[[], None]) -> Callable[[], None]:
        """
        Call callback whenever another instance rewrites the notes key.

        Returns:
            Callable that cancels the subscription
        """

        def on_change(event: StorageEvent) -> None:
            if event.key == self.notes_key:
                callback()

        return self.store.subscribe(on_change)

    def export(self, notes: Iterable[Note], path: str | Path, indent: int = 2) -> Path:
        """
        Write all notes to a pretty-printed JSON file.

        Returns:
            The path written

        Raises:
            StorageError: If the file cannot be written
        """
        target = Path(path)
        document = json.dumps([note.to_record() for note in notes], indent=indent, ensure_ascii=False)
        try:
            target.parent.mkdir(parents=True, exist_ok=True)
            target.write_text(document + "\n", encoding="utf-8")
        except OSError as e:
            raise StorageError(f"Failed to export notes to {target}: {e}") from e
        logger.info("Notes exported", extra={"path": str(target)})
        return target
