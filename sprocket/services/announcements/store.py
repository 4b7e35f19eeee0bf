"""
Sprocket - Announcement Store
=============================

Keyed registry of pending announcements with expiry and persistence.

DESIGN:
    Records live in an in-memory dict keyed by id. After every mutation
    the whole registry is written to the bot_state table as an ordered
    list of [id, record] pairs, so a restart picks up where it left off.

    Expiry is both lazy and eager:
    - get/update treat a record older than the lifespan as absent
    - sweep_expired() physically removes such records

    There is no locking. All callers run on the one event loop and the
    sweep only ever deletes, so the last write for an id wins.

Author: Engineering Club Exec Team
Server: McRoberts Engineering Club
"""

import dataclasses
import sqlite3
import time
from typing import TYPE_CHECKING, Callable, Dict, List, Optional

from sprocket.core.logger import logger
from sprocket.services.announcements.errors import AnnouncementNotFound, DuplicateAnnouncement
from sprocket.services.announcements.models import AnnouncementRecord

if TYPE_CHECKING:
    from sprocket.core.database import DatabaseManager


# =============================================================================
# Constants
# =============================================================================

STATE_KEY = "pending_announcements"
"""bot_state key holding the persisted [id, record] pairs."""


# =============================================================================
# Announcement Store
# =============================================================================

class AnnouncementStore:
    """
    Pending announcement registry.

    Attributes:
        db: Database used for persistence.
        lifespan_seconds: Age after which a record is expired.
    """

    def __init__(
        self,
        db: "DatabaseManager",
        lifespan_seconds: float,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self.db = db
        self.lifespan_seconds = lifespan_seconds
        self._clock = clock
        self._records: Dict[str, AnnouncementRecord] = {}

    # =========================================================================
    # Persistence
    # =========================================================================

    def load(self) -> int:
        """
        Replace memory with the persisted registry.

        Missing, empty or corrupt state loads as an empty registry; bad
        entries are skipped individually. Never raises.

        Returns:
            Number of records loaded.
        """
        self._records = {}

        try:
            raw = self.db.get_bot_state(STATE_KEY, [])
        except sqlite3.Error as e:
            logger.error("Announcement State Unreadable", [
                ("Error", str(e)[:100]),
            ])
            return 0

        if not raw:
            return 0

        if not isinstance(raw, list):
            logger.warning("Announcement State Corrupt", [
                ("Type", type(raw).__name__),
                ("Action", "Starting empty"),
            ])
            return 0

        skipped = 0
        for entry in raw:
            try:
                announcement_id, data = entry
                record = AnnouncementRecord.from_dict(data)
            except (TypeError, ValueError, KeyError):
                skipped += 1
                continue
            if record.id != announcement_id:
                skipped += 1
                continue
            self._records[record.id] = record

        logger.tree("Announcements Loaded", [
            ("Loaded", str(len(self._records))),
            ("Skipped", str(skipped)),
        ], emoji="📂")

        return len(self._records)

    def _persist(self, previous: Dict[str, AnnouncementRecord]) -> None:
        """Write every record; on failure restore previous and re-raise."""
        pairs = [[record_id, record.to_dict()] for record_id, record in self._records.items()]
        try:
            self.db.set_bot_state(STATE_KEY, pairs)
        except sqlite3.Error:
            self._records = previous
            raise

    # =========================================================================
    # Expiry
    # =========================================================================

    def _is_live(self, record: AnnouncementRecord, now: Optional[float] = None) -> bool:
        now = self._clock() if now is None else now
        return not record.is_expired(now, self.lifespan_seconds)

    def sweep_expired(self, now: Optional[float] = None) -> List[str]:
        """
        Remove every record whose age exceeds the lifespan.

        Args:
            now: Reference time, defaults to the store clock.

        Returns:
            Removed ids.
        """
        now = self._clock() if now is None else now
        removed = [
            record_id for record_id, record in self._records.items()
            if not self._is_live(record, now)
        ]
        if not removed:
            return []

        previous = dict(self._records)
        for record_id in removed:
            del self._records[record_id]
        self._persist(previous)

        logger.tree("Expired Announcements Swept", [
            ("Removed", str(len(removed))),
            ("Remaining", str(len(self._records))),
        ], emoji="🧹")

        return removed

    # =========================================================================
    # Operations
    # =========================================================================

    def create(self, record: AnnouncementRecord) -> str:
        """
        Insert a new record.

        Raises:
            DuplicateAnnouncement: The id is already present.
        """
        if record.id in self._records:
            raise DuplicateAnnouncement(record.id)
        previous = dict(self._records)
        self._records[record.id] = record
        self._persist(previous)
        return record.id

    def get(self, announcement_id: str) -> Optional[AnnouncementRecord]:
        """Return a copy of the record, or None if absent or expired."""
        record = self._records.get(announcement_id)
        if record is None or not self._is_live(record):
            return None
        return dataclasses.replace(record)

    def update(
        self,
        announcement_id: str,
        mutator: Callable[[AnnouncementRecord], None],
    ) -> AnnouncementRecord:
        """
        Apply a mutation to a live record and persist it.

        The mutator works on a copy; the id and author never change.

        Args:
            announcement_id: Record to change.
            mutator: Function that edits the record in place.

        Returns:
            The updated record.

        Raises:
            AnnouncementNotFound: The record is absent or expired.
        """
        current = self.get(announcement_id)
        if current is None:
            raise AnnouncementNotFound(announcement_id)

        mutator(current)
        current.id = announcement_id
        current.author_id = self._records[announcement_id].author_id

        previous = dict(self._records)
        self._records[announcement_id] = current
        self._persist(previous)
        return dataclasses.replace(current)

    def delete(self, announcement_id: str) -> None:
        """Remove a record. Deleting an unknown id does nothing."""
        previous = dict(self._records)
        if self._records.pop(announcement_id, None) is not None:
            self._persist(previous)

    def count(self) -> int:
        return len(self._records)


__all__ = ["AnnouncementStore", "STATE_KEY"]
