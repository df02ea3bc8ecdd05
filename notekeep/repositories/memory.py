"""
In-Memory Key-Value Store.

Used by tests and by the ``memory`` storage backend. Several store
instances can share one MemoryBackend; a write through one instance is
broadcast to the others as a StorageEvent.
"""

from notekeep.repositories.base import KeyValueStore, StorageEvent


class MemoryBackend:
    """Shared values plus the stores attached to them."""

    def __init__(self, values: dict[str, str] | None = None) -> None:
        self.values: dict[str, str] = dict(values or {})
        self._stores: list["MemoryKeyValueStore"] = []

    def attach(self, store: "MemoryKeyValueStore") -> None:
        self._stores.append(store)

    def broadcast(self, source: "MemoryKeyValueStore", event: StorageEvent) -> None:
        for store in list(self._stores):
            if store is not source:
                store._emit(event)


class MemoryKeyValueStore(KeyValueStore):
    """Key-value store backed by a (possibly shared) dictionary."""

    def __init__(self, backend: MemoryBackend | None = None) -> None:
        super().__init__()
        self.backend = backend or MemoryBackend()
        self.backend.attach(self)

    def get(self, key: str) -> str | None:
        return self.backend.values.get(key)

    def set(self, key: str, value: str) -> None:
        old_value = self.backend.values.get(key)
        self.backend.values[key] = value
        if old_value != value:
            self.backend.broadcast(self, StorageEvent(key, old_value, value))

    def remove(self, key: str) -> None:
        old_value = self.backend.values.pop(key, None)
        if old_value is not None:
            self.backend.broadcast(self, StorageEvent(key, old_value, None))
