"""Abstract key-value store interface.

A store is the equivalent of one browser profile's origin storage: a flat
string-to-string mapping that survives reloads and is shared by every
instance opened on the same origin. The CLI depends on BaseStore, not on a
concrete backend, so backends are swappable without touching session code.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from prbob_store.models import StorageEvent


class BaseStore(ABC):
    """Pluggable key-value persistence with cross-instance change events.

    All methods are synchronous. Writes made through one instance are visible
    to get() on every other instance immediately, and are reported once by
    their poll_changes(), never by the writer's own poll_changes().
    """

    @abstractmethod
    def get(self, key: str) -> str | None:
        """Return the stored value, or None if the key is absent."""

    @abstractmethod
    def set(self, key: str, value: str) -> None:
        """Store a value, overwriting any previous one."""

    @abstractmethod
    def remove(self, key: str) -> None:
        """Delete a key. Removing an absent key is a no-op and emits no event."""

    @abstractmethod
    def poll_changes(self) -> list[StorageEvent]:
        """Return changes made by other instances since the last poll, oldest first."""

    def close(self) -> None:
        """Release any resources held by the store (connections, file handles).

        Optional: subclasses that need cleanup should override this.
        Default is a no-op so callers can always call close() safely.
        """
