"""
Base Key-Value Store.

Contract shared by every persistent slot store. A store holds string
values under string keys and tells subscribers about writes made by a
*different* store instance sharing the same backing storage, the way a
browser tab only sees storage events raised by other tabs.

Subclasses implement get/set/remove:

    class RedisKeyValueStore(KeyValueStore):
        def get(self, key): ...
"""

from abc import ABC, abstractmethod
from collections.abc import Callable
from dataclasses import dataclass

from notekeep.core.logging import get_logger

logger = get_logger(__name__)


@dataclass(frozen=True)
class StorageEvent:
    """A value changed by another store instance."""

    key: str
    old_value: str | None
    new_value: str | None


StorageListener = Callable[[StorageEvent], None]


class KeyValueStore(ABC):
    """
    Base class for persistent key-value slots.

    Provides:
    - Listener registration for cross-instance change notifications
    - Event dispatch in registration order
    """

    def __init__(self) -> None:
        self._listeners: list[StorageListener] = []

    @abstractmethod
    def get(self, key: str) -> str | None:
        """Return the value stored under key, or None when absent."""

    @abstractmethod
    def set(self, key: str, value: str) -> None:
        """
        Store value under key, overwriting any previous value.

        Raises:
            StorageError: If the backing storage cannot be written
        """

    @abstractmethod
    def remove(self, key: str) -> None:
        """Remove key. Removing an absent key is a no-op."""

    def subscribe(self, listener: StorageListener) -> Callable[[], None]:
        """
        Register a listener for changes made by other instances.

        Returns:
            Callable that removes the listener again
        """
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _emit(self, event: StorageEvent) -> None:
        """Deliver an external change to every registered listener."""
        logger.debug("Storage change received", extra={"key": event.key})
        for listener in list(self._listeners):
            listener(event)
