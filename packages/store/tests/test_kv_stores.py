"""Tests for prbob-store implementations."""

from __future__ import annotations

from prbob_store.memory import MemoryOrigin, MemoryStore
from prbob_store.models import StorageEvent
from prbob_store.sqlite import SQLiteStore

# ---------------------------------------------------------------------------
# MemoryStore
# ---------------------------------------------------------------------------


class TestMemoryStore:
    def test_get_missing_key_returns_none(self):
        assert MemoryStore().get("github_pat") is None

    def test_set_and_get(self):
        store = MemoryStore()
        store.set("github_pat", "tok")
        assert store.get("github_pat") == "tok"

    def test_remove_deletes_key(self):
        store = MemoryStore()
        store.set("github_pat", "tok")
        store.remove("github_pat")
        assert store.get("github_pat") is None

    def test_writer_does_not_see_own_events(self):
        store = MemoryStore()
        store.set("github_pat", "tok")
        store.remove("github_pat")
        assert store.poll_changes() == []

    def test_other_instance_sees_events_in_order(self):
        origin = MemoryOrigin()
        tab_a = MemoryStore(origin)
        tab_b = MemoryStore(origin)

        tab_a.set("github_pat", "tok")
        tab_a.remove("github_pat")

        assert tab_b.poll_changes() == [
            StorageEvent(key="github_pat", new_value="tok"),
            StorageEvent(key="github_pat", new_value=None),
        ]
        # Each event is delivered once.
        assert tab_b.poll_changes() == []

    def test_instances_share_entries(self):
        origin = MemoryOrigin()
        MemoryStore(origin).set("github_pat", "tok")
        assert MemoryStore(origin).get("github_pat") == "tok"

    def test_removing_absent_key_emits_nothing(self):
        origin = MemoryOrigin()
        tab_a = MemoryStore(origin)
        tab_b = MemoryStore(origin)
        tab_a.remove("github_pat")
        assert tab_b.poll_changes() == []

    def test_closed_instance_stops_receiving(self):
        origin = MemoryOrigin()
        tab_a = MemoryStore(origin)
        tab_b = MemoryStore(origin)
        tab_b.close()
        tab_a.set("github_pat", "tok")
        assert tab_b.poll_changes() == []

    def test_separate_origins_are_isolated(self):
        MemoryStore().set("github_pat", "tok")
        assert MemoryStore().get("github_pat") is None


# ---------------------------------------------------------------------------
# SQLiteStore
# ---------------------------------------------------------------------------


class TestSQLiteStore:
    def test_set_and_get(self, tmp_path):
        store = SQLiteStore(db_path=str(tmp_path / "profile.db"))
        store.set("github_pat", "tok")
        assert store.get("github_pat") == "tok"
        store.close()

    def test_overwrite_keeps_single_value(self, tmp_path):
        store = SQLiteStore(db_path=str(tmp_path / "profile.db"))
        store.set("github_code_verifier", "first")
        store.set("github_code_verifier", "second")
        assert store.get("github_code_verifier") == "second"
        store.close()

    def test_remove(self, tmp_path):
        store = SQLiteStore(db_path=str(tmp_path / "profile.db"))
        store.set("github_pat", "tok")
        store.remove("github_pat")
        assert store.get("github_pat") is None
        store.close()

    def test_persists_across_connections(self, tmp_path):
        """Data written by one SQLiteStore instance must be readable after a reload."""
        db_path = str(tmp_path / "profile.db")
        store_a = SQLiteStore(db_path=db_path)
        store_a.set("github_pat", "tok")
        store_a.close()

        store_b = SQLiteStore(db_path=db_path)
        assert store_b.get("github_pat") == "tok"
        store_b.close()

    def test_creates_parent_directory(self, tmp_path):
        db_path = tmp_path / "nested" / "dir" / "profile.db"
        store = SQLiteStore(db_path=str(db_path))
        assert db_path.exists()
        store.close()

    def test_changes_reported_to_other_instances_only(self, tmp_path):
        db_path = str(tmp_path / "profile.db")
        tab_a = SQLiteStore(db_path=db_path)
        tab_b = SQLiteStore(db_path=db_path)

        tab_a.set("github_pat", "tok")
        tab_a.remove("github_pat")

        assert tab_a.poll_changes() == []
        assert tab_b.poll_changes() == [
            StorageEvent(key="github_pat", new_value="tok"),
            StorageEvent(key="github_pat", new_value=None),
        ]
        assert tab_b.poll_changes() == []
        tab_a.close()
        tab_b.close()

    def test_history_before_open_is_not_replayed(self, tmp_path):
        db_path = str(tmp_path / "profile.db")
        tab_a = SQLiteStore(db_path=db_path)
        tab_a.set("github_pat", "old")

        tab_b = SQLiteStore(db_path=db_path)
        assert tab_b.poll_changes() == []
        tab_a.close()
        tab_b.close()

    def test_removing_absent_key_logs_nothing(self, tmp_path):
        db_path = str(tmp_path / "profile.db")
        tab_a = SQLiteStore(db_path=db_path)
        tab_b = SQLiteStore(db_path=db_path)
        tab_a.remove("github_pat")
        assert tab_b.poll_changes() == []
        tab_a.close()
        tab_b.close()
