"""
Sprocket - Archive Tasks Mixin
==============================

Scheduled channel archive storage.

Author: Engineering Club Exec Team
Server: McRoberts Engineering Club
"""

import time
from typing import TYPE_CHECKING, List, Optional

from sprocket.core.logger import logger
from sprocket.core.database.models import ArchiveTaskRecord

if TYPE_CHECKING:
    from .manager import DatabaseManager


class ArchiveTasksMixin:
    """Mixin for scheduled archive task operations."""

    def add_archive_task(
        self: "DatabaseManager",
        guild_id: int,
        channel_id: int,
        run_at: float,
        scheduled_by: int,
    ) -> int:
        """
        Schedule a channel to be archived.

        A channel has at most one pending task; scheduling again replaces it.

        Args:
            guild_id: Guild that owns the channel.
            channel_id: Channel to archive.
            run_at: Epoch seconds when the archive should happen.
            scheduled_by: User who scheduled it.

        Returns:
            Row ID of the task.
        """
        cursor = self.execute(
            """INSERT OR REPLACE INTO archive_tasks
               (guild_id, channel_id, run_at, scheduled_by, created_at)
               VALUES (?, ?, ?, ?, ?)""",
            (guild_id, channel_id, run_at, scheduled_by, time.time())
        )
        logger.tree("Archive Task Stored", [
            ("Channel ID", str(channel_id)),
            ("Run At", str(int(run_at))),
            ("Scheduled By", str(scheduled_by)),
        ], emoji="🗓️")
        return cursor.lastrowid

    def get_due_archive_tasks(self: "DatabaseManager", now: Optional[float] = None) -> List[ArchiveTaskRecord]:
        """Get tasks whose run time has passed, oldest first."""
        now = time.time() if now is None else now
        rows = self.fetchall(
            "SELECT * FROM archive_tasks WHERE run_at <= ? ORDER BY run_at",
            (now,)
        )
        return [dict(row) for row in rows]

    def get_archive_tasks(self: "DatabaseManager", guild_id: int) -> List[ArchiveTaskRecord]:
        """Get all pending tasks for a guild, soonest first."""
        rows = self.fetchall(
            "SELECT * FROM archive_tasks WHERE guild_id = ? ORDER BY run_at",
            (guild_id,)
        )
        return [dict(row) for row in rows]

    def get_archive_task(self: "DatabaseManager", task_id: int) -> Optional[ArchiveTaskRecord]:
        row = self.fetchone("SELECT * FROM archive_tasks WHERE id = ?", (task_id,))
        return dict(row) if row else None

    def delete_archive_task(self: "DatabaseManager", task_id: int) -> bool:
        """
        Remove a task.

        Returns:
            True if a task was removed.
        """
        cursor = self.execute("DELETE FROM archive_tasks WHERE id = ?", (task_id,))
        return cursor.rowcount > 0


__all__ = ["ArchiveTasksMixin"]
