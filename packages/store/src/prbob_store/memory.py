"""In-memory store: nothing survives the process.

Selected with ``store: memory`` in .prbob.yml for throwaway sessions, and used
by the test-suite to simulate several tabs of one origin: every MemoryStore
built on the same MemoryOrigin shares entries and receives the others' events.
"""

from __future__ import annotations

from collections import deque

from prbob_store.base import BaseStore
from prbob_store.models import StorageEvent


class MemoryOrigin:
    """Shared backing state for a group of MemoryStore instances."""

    def __init__(self) -> None:
        self.entries: dict[str, str] = {}
        self._members: list[MemoryStore] = []

    def attach(self, store: MemoryStore) -> None:
        self._members.append(store)

    def detach(self, store: MemoryStore) -> None:
        if store in self._members:
            self._members.remove(store)

    def broadcast(self, sender: MemoryStore, event: StorageEvent) -> None:
        for member in self._members:
            if member is not sender:
                member._pending.append(event)


class MemoryStore(BaseStore):
    """Process-local store; pass the same ``origin`` to share state between instances."""

    def __init__(self, origin: MemoryOrigin | None = None):
        self.origin = origin or MemoryOrigin()
        self._pending: deque[StorageEvent] = deque()
        self.origin.attach(self)

    def get(self, key: str) -> str | None:
        return self.origin.entries.get(key)

    def set(self, key: str, value: str) -> None:
        self.origin.entries[key] = value
        self.origin.broadcast(self, StorageEvent(key=key, new_value=value))

    def remove(self, key: str) -> None:
        if self.origin.entries.pop(key, None) is None:
            return
        self.origin.broadcast(self, StorageEvent(key=key, new_value=None))

    def poll_changes(self) -> list[StorageEvent]:
        events = list(self._pending)
        self._pending.clear()
        return events

    def close(self) -> None:
        self.origin.detach(self)
