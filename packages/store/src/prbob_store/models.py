"""Storage data models.

Kept separate from prbob_core so the store layer has no knowledge of what is
being stored; tokens, verifiers or anything else are just string values.
"""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class StorageEvent:
    """A write or removal made by another store instance on the same origin.

    ``new_value`` is None when the key was removed.
    """

    key: str
    new_value: str | None
