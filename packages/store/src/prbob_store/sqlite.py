"""SQLiteStore: the default, file-backed profile store.

Why SQLite:
- Batteries included: ships with Python, no extra dependencies.
- Safe to open from several processes at once, which is how separate prbob
  invocations play the role of separate browser tabs on one origin.
- The change log gives each instance an ordered event stream without any
  daemon or file watcher.

Schema:
  entries  - current key/value pairs.
  changes  - append-only log of writes and removals; ``value`` is NULL for a
             removal and ``writer`` identifies the instance that made it.
"""

from __future__ import annotations

import logging
import sqlite3
import uuid
from pathlib import Path

from prbob_store.base import BaseStore
from prbob_store.models import StorageEvent

logger = logging.getLogger(__name__)

_SCHEMA = """
CREATE TABLE IF NOT EXISTS entries (
    key    TEXT PRIMARY KEY,
    value  TEXT NOT NULL
);
CREATE TABLE IF NOT EXISTS changes (
    seq     INTEGER PRIMARY KEY AUTOINCREMENT,
    key     TEXT NOT NULL,
    value   TEXT,
    writer  TEXT NOT NULL
);
"""


class SQLiteStore(BaseStore):
    """Stores profile entries in a local SQLite database file.

    The path defaults to ``~/.prbob/profile.db``. Configure via .prbob.yml:
    ``store_path: /path/to/profile.db``.
    """

    def __init__(self, db_path: str = "~/.prbob/profile.db"):
        path = Path(db_path).expanduser()
        path.parent.mkdir(parents=True, exist_ok=True)
        self._conn = sqlite3.connect(str(path))
        self._conn.row_factory = sqlite3.Row
        self._conn.executescript(_SCHEMA)
        self._conn.commit()
        self._writer = uuid.uuid4().hex
        # Only changes made after this instance opened are reported to it.
        row = self._conn.execute("SELECT COALESCE(MAX(seq), 0) AS seq FROM changes").fetchone()
        self._cursor = row["seq"]

    def get(self, key: str) -> str | None:
        row = self._conn.execute("SELECT value FROM entries WHERE key=?", (key,)).fetchone()
        return row["value"] if row is not None else None

    def set(self, key: str, value: str) -> None:
        with self._conn:
            self._conn.execute(
                "INSERT INTO entries (key, value) VALUES (?, ?) "
                "ON CONFLICT(key) DO UPDATE SET value=excluded.value",
                (key, value),
            )
            self._log_change(key, value)

    def remove(self, key: str) -> None:
        with self._conn:
            deleted = self._conn.execute("DELETE FROM entries WHERE key=?", (key,)).rowcount
            if deleted:
                self._log_change(key, None)

    def poll_changes(self) -> list[StorageEvent]:
        rows = self._conn.execute(
            "SELECT seq, key, value, writer FROM changes WHERE seq > ? ORDER BY seq",
            (self._cursor,),
        ).fetchall()
        events = []
        for row in rows:
            self._cursor = row["seq"]
            if row["writer"] == self._writer:
                continue
            events.append(StorageEvent(key=row["key"], new_value=row["value"]))
        if events:
            logger.debug("Observed %d storage change(s) from other sessions.", len(events))
        return events

    def close(self) -> None:
        self._conn.close()

    def _log_change(self, key: str, value: str | None) -> None:
        self._conn.execute(
            "INSERT INTO changes (key, value, writer) VALUES (?, ?, ?)",
            (key, value, self._writer),
        )
