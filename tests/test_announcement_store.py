"""
Sprocket - Announcement Store Tests
===================================

Tests for the pending announcement registry: expiry, persistence and
recovery from bad stored state.
"""

import asyncio
import sqlite3
from unittest.mock import MagicMock, patch

import pytest

from sprocket.services.announcements import (
    AnnouncementNotFound,
    AnnouncementRecord,
    AnnouncementStore,
    AnnouncementSweeper,
    DeliveryStatus,
    DuplicateAnnouncement,
)
from sprocket.services.announcements.store import STATE_KEY


def make_record(clock, author_id=42, topic="Meeting", details="Room 101 at noon"):
    return AnnouncementRecord.new(author_id, topic, details, created_at=clock())


class TestStoreOperations:
    """Tests for create/get/update/delete."""

    def test_create_and_get(self, store, clock):
        """Test a created record can be read back."""
        record = make_record(clock)
        store.create(record)

        fetched = store.get(record.id)
        assert fetched.topic == "Meeting"
        assert fetched.author_id == 42

    def test_get_returns_copy(self, store, clock):
        """Test mutating a fetched record does not change the store."""
        record = make_record(clock)
        store.create(record)

        store.get(record.id).email_subject = "changed"
        assert store.get(record.id).email_subject == "Meeting"

    def test_duplicate_create_rejected(self, store, clock):
        """Test the same id cannot be created twice."""
        record = make_record(clock)
        store.create(record)
        with pytest.raises(DuplicateAnnouncement):
            store.create(make_record(clock))

    def test_update_changes_fields(self, store, clock):
        """Test update applies the mutation and persists it."""
        record = make_record(clock)
        store.create(record)

        def mutate(r):
            r.email_subject = "Room Change"

        updated = store.update(record.id, mutate)
        assert updated.email_subject == "Room Change"
        assert store.get(record.id).email_subject == "Room Change"

    def test_update_cannot_change_id_or_author(self, store, clock):
        """Test identity fields are restored after the mutation."""
        record = make_record(clock)
        store.create(record)

        def mutate(r):
            r.id = "hijacked"
            r.author_id = 7

        updated = store.update(record.id, mutate)
        assert updated.id == record.id
        assert updated.author_id == 42

    def test_update_missing_raises(self, store):
        """Test updating an unknown id raises NotFound."""
        with pytest.raises(AnnouncementNotFound):
            store.update("1-1", lambda r: None)

    def test_delete_is_idempotent(self, store, clock):
        """Test deleting twice is harmless."""
        record = make_record(clock)
        store.create(record)

        store.delete(record.id)
        store.delete(record.id)
        assert store.get(record.id) is None
        assert store.count() == 0


class TestExpiry:
    """Tests for lifespan handling."""

    def test_record_valid_at_exact_lifespan(self, store, clock):
        """Test a record exactly at the lifespan is still live."""
        record = make_record(clock)
        store.create(record)

        clock.advance(1800)
        assert store.get(record.id) is not None

    def test_record_expires_after_lifespan(self, store, clock):
        """Test a record past the lifespan reads as absent."""
        record = make_record(clock)
        store.create(record)

        clock.advance(1801)
        assert store.get(record.id) is None
        with pytest.raises(AnnouncementNotFound):
            store.update(record.id, lambda r: None)

    def test_sweep_removes_only_expired(self, store, clock):
        """Test the sweep leaves fresh records alone."""
        old = make_record(clock, author_id=1)
        store.create(old)
        clock.advance(1000)
        fresh = make_record(clock, author_id=2)
        store.create(fresh)
        clock.advance(900)

        assert store.sweep_expired() == [old.id]
        assert store.count() == 1
        assert store.get(fresh.id) is not None

    def test_sweep_with_nothing_expired(self, store, clock):
        """Test an empty sweep returns nothing."""
        store.create(make_record(clock))
        assert store.sweep_expired() == []


class TestPersistence:
    """Tests for save/load through bot_state."""

    def test_reload_restores_records(self, store, test_db, clock):
        """Test a new store sees what the old one saved."""
        record = make_record(clock)
        store.create(record)
        store.update(record.id, lambda r: setattr(r, "discord_status", DeliveryStatus.SENT))

        reloaded = AnnouncementStore(test_db, lifespan_seconds=1800, clock=clock)
        assert reloaded.load() == 1
        restored = reloaded.get(record.id)
        assert restored.discord_status == DeliveryStatus.SENT
        assert restored.email_status == DeliveryStatus.PENDING

    def test_stored_layout_is_id_record_pairs(self, store, test_db, clock):
        """Test the registry is stored as ordered [id, record] pairs."""
        record = make_record(clock)
        store.create(record)

        raw = test_db.get_bot_state(STATE_KEY)
        assert raw[0][0] == record.id
        assert raw[0][1]["topic"] == "Meeting"

    def test_load_missing_state(self, test_db, clock):
        """Test no stored state loads as empty."""
        store = AnnouncementStore(test_db, lifespan_seconds=1800, clock=clock)
        assert store.load() == 0

    def test_load_corrupt_state(self, test_db, clock):
        """Test a non-list value loads as empty without raising."""
        test_db.set_bot_state(STATE_KEY, "{not json")
        store = AnnouncementStore(test_db, lifespan_seconds=1800, clock=clock)
        assert store.load() == 0
        assert store.count() == 0

    def test_load_skips_bad_entries(self, store, test_db, clock):
        """Test bad entries are dropped and good ones kept."""
        record = make_record(clock)
        good = [record.id, record.to_dict()]
        mismatched = ["9-9", record.to_dict()]
        test_db.set_bot_state(STATE_KEY, [good, mismatched, ["1-1", {"topic": "x"}], 5])

        assert store.load() == 1
        assert store.get(record.id) is not None


class TestWriteFailure:
    """Tests that a failed write leaves memory matching disk."""

    def test_failed_create_not_kept(self, store, test_db, clock):
        record = make_record(clock)

        with patch.object(test_db, "set_bot_state", side_effect=sqlite3.OperationalError("database is locked")):
            with pytest.raises(sqlite3.OperationalError):
                store.create(record)

        assert store.get(record.id) is None
        assert store.count() == 0

    def test_failed_update_rolled_back(self, store, test_db, clock):
        """Test the record keeps its previous contents when the write fails."""
        record = make_record(clock)
        store.create(record)

        with patch.object(test_db, "set_bot_state", side_effect=sqlite3.OperationalError("database is locked")):
            with pytest.raises(sqlite3.OperationalError):
                store.update(record.id, lambda r: setattr(r, "email_subject", "Changed"))

        assert store.get(record.id).email_subject == "Meeting"
        assert test_db.get_bot_state(STATE_KEY)[0][1]["email_subject"] == "Meeting"

    def test_failed_delete_rolled_back(self, store, test_db, clock):
        record = make_record(clock)
        store.create(record)

        with patch.object(test_db, "set_bot_state", side_effect=sqlite3.OperationalError("disk I/O error")):
            with pytest.raises(sqlite3.OperationalError):
                store.delete(record.id)

        assert store.get(record.id) is not None


class TestSweeper:
    """Tests for the background expiry sweep."""

    def test_interval_defaults_to_half_lifespan(self, store):
        assert AnnouncementSweeper(store).interval == 900

    @pytest.mark.asyncio
    async def test_sweeps_once_at_start(self, store, clock):
        """Test records already expired at startup are removed before the loop runs."""
        record = make_record(clock)
        store.create(record)
        clock.advance(1801)

        sweeper = AnnouncementSweeper(store, interval=3600)
        await sweeper.start()
        try:
            assert store.count() == 0
        finally:
            await sweeper.stop()
        assert sweeper.task.done()

    @pytest.mark.asyncio
    async def test_loop_survives_failed_sweep(self):
        """Test an exception in one sweep does not stop later sweeps."""
        store = MagicMock(lifespan_seconds=1800)
        store.count.return_value = 0
        outcomes = iter([[], RuntimeError("database is locked")])

        def sweep():
            outcome = next(outcomes, [])
            if isinstance(outcome, Exception):
                raise outcome
            return outcome

        store.sweep_expired.side_effect = sweep

        sweeper = AnnouncementSweeper(store, interval=0)
        await sweeper.start()
        for _ in range(50):
            await asyncio.sleep(0)
            if store.sweep_expired.call_count >= 4:
                break
        await sweeper.stop()

        assert store.sweep_expired.call_count >= 4
