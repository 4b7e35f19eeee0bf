"""
Sprocket - Database Tests
=========================

Tests for the database layer to ensure data integrity.
"""

import time

import pytest


class TestBotState:
    """Tests for bot state operations."""

    def test_set_and_get_bot_state_string(self, test_db):
        """Test setting and getting a string value."""
        test_db.set_bot_state("test_key", "test_value")
        assert test_db.get_bot_state("test_key") == "test_value"

    def test_set_and_get_bot_state_list(self, test_db):
        """Test nested lists survive the JSON round trip."""
        pairs = [["1-2", {"topic": "Meeting"}]]
        test_db.set_bot_state("pending", pairs)
        assert test_db.get_bot_state("pending") == pairs

    def test_get_bot_state_default(self, test_db):
        """Test getting a non-existent key returns default."""
        assert test_db.get_bot_state("nonexistent", "default_value") == "default_value"

    def test_delete_bot_state(self, test_db):
        """Test deleting a key falls back to the default."""
        test_db.set_bot_state("gone", {"a": 1})
        test_db.delete_bot_state("gone")
        assert test_db.get_bot_state("gone") is None

    def test_encourage_responding_default_on(self, test_db):
        """Test auto replies are on until turned off."""
        assert test_db.is_encourage_responding() is True

    def test_set_encourage_responding(self, test_db):
        """Test toggling auto replies."""
        test_db.set_encourage_responding(False)
        assert test_db.is_encourage_responding() is False

        test_db.set_encourage_responding(True)
        assert test_db.is_encourage_responding() is True


class TestEncouragements:
    """Tests for stored encouragement messages."""

    def test_add_and_list_in_order(self, test_db):
        """Test messages come back in insertion order."""
        test_db.add_encouragement("You got this", 111)
        test_db.add_encouragement("Keep going", 222)

        messages = [row["message"] for row in test_db.get_encouragements()]
        assert messages == ["You got this", "Keep going"]

    def test_delete_by_position(self, test_db):
        """Test deleting uses 1-based list positions."""
        test_db.add_encouragement("first")
        test_db.add_encouragement("second")
        test_db.add_encouragement("third")

        assert test_db.delete_encouragement_at(2) == "second"
        messages = [row["message"] for row in test_db.get_encouragements()]
        assert messages == ["first", "third"]

    @pytest.mark.parametrize("position", [0, -1, 5])
    def test_delete_invalid_position(self, test_db, position):
        """Test out-of-range positions delete nothing."""
        test_db.add_encouragement("only")
        assert test_db.delete_encouragement_at(position) is None
        assert len(test_db.get_encouragements()) == 1


class TestArchiveTasks:
    """Tests for scheduled archive tasks."""

    def test_add_and_get_task(self, test_db):
        """Test storing a task returns its row id."""
        task_id = test_db.add_archive_task(1, 10, time.time() + 3600, 99)

        task = test_db.get_archive_task(task_id)
        assert task["guild_id"] == 1
        assert task["channel_id"] == 10
        assert task["scheduled_by"] == 99

    def test_rescheduling_replaces_task(self, test_db):
        """Test a channel has at most one pending task."""
        test_db.add_archive_task(1, 10, time.time() + 3600, 99)
        test_db.add_archive_task(1, 10, time.time() + 7200, 99)

        assert len(test_db.get_archive_tasks(1)) == 1

    def test_due_tasks(self, test_db):
        """Test only tasks whose time has passed are due."""
        now = time.time()
        test_db.add_archive_task(1, 10, now - 60, 99)
        test_db.add_archive_task(1, 11, now + 3600, 99)

        due = test_db.get_due_archive_tasks(now)
        assert [task["channel_id"] for task in due] == [10]

    def test_tasks_scoped_to_guild(self, test_db):
        """Test listing only returns the guild's own tasks."""
        test_db.add_archive_task(1, 10, time.time() + 60, 99)
        test_db.add_archive_task(2, 20, time.time() + 60, 99)

        assert [task["channel_id"] for task in test_db.get_archive_tasks(2)] == [20]

    def test_delete_task(self, test_db):
        """Test deleting reports whether a row was removed."""
        task_id = test_db.add_archive_task(1, 10, time.time() + 60, 99)

        assert test_db.delete_archive_task(task_id) is True
        assert test_db.delete_archive_task(task_id) is False
        assert test_db.get_archive_task(task_id) is None


class TestSchema:
    """Tests for migrations."""

    def test_new_file_at_latest_version(self, test_db):
        """Test a fresh database is migrated to the newest schema."""
        from sprocket.core.database.schema import SCHEMA_VERSION

        assert test_db.schema_version() == SCHEMA_VERSION

    def test_migrate_is_idempotent(self, test_db):
        """Test running migrations again keeps data and version."""
        test_db.add_encouragement("Still here")

        assert test_db.migrate() == test_db.schema_version()
        assert [row["message"] for row in test_db.get_encouragements()] == ["Still here"]

    def test_failed_transaction_rolls_back(self, test_db):
        """Test an error inside a transaction leaves no partial writes."""
        with pytest.raises(RuntimeError):
            with test_db.transaction() as conn:
                conn.execute(
                    "INSERT INTO encouragements (message, added_by, added_at) VALUES (?, ?, ?)",
                    ("half done", None, time.time()),
                )
                raise RuntimeError("boom")

        assert test_db.get_encouragements() == []
