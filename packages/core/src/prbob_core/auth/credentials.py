"""The single persisted bearer-token slot.

The token is stored in the clear. Treat it as sensitive: it must never reach
a log record or console output.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from prbob_store.base import BaseStore
    from prbob_store.models import StorageEvent

TOKEN_KEY = "github_pat"


class CredentialStore:
    def __init__(self, store: BaseStore):
        self._store = store

    def save(self, token: str) -> None:
        self._store.set(TOKEN_KEY, token)

    def load(self) -> str | None:
        return self._store.get(TOKEN_KEY)

    def clear(self) -> None:
        self._store.remove(TOKEN_KEY)

    def discard(self, token: str) -> bool:
        """Clear the slot only if it still holds ``token``.

        A rejected token must not take a newer token written by another
        session down with it. Returns True if the slot was cleared.
        """
        if self.load() != token:
            return False
        self.clear()
        return True

    def changes(self) -> list[StorageEvent]:
        """Token writes and removals made by other sessions since the last call."""
        return [event for event in self._store.poll_changes() if event.key == TOKEN_KEY]
