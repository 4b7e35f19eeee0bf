"""
Sprocket - Encouragements Mixin
===============================

User-submitted encouraging messages.

Author: Engineering Club Exec Team
Server: McRoberts Engineering Club
"""

import time
from typing import TYPE_CHECKING, List, Optional

from sprocket.core.database.models import EncouragementRecord

if TYPE_CHECKING:
    from .manager import DatabaseManager


class EncouragementsMixin:
    """Mixin for encouragement operations."""

    def add_encouragement(self: "DatabaseManager", message: str, added_by: Optional[int] = None) -> int:
        cursor = self.execute(
            "INSERT INTO encouragements (message, added_by, added_at) VALUES (?, ?, ?)",
            (message, added_by, time.time())
        )
        return cursor.lastrowid

    def get_encouragements(self: "DatabaseManager") -> List[EncouragementRecord]:
        """Get all stored encouragements in insertion order."""
        rows = self.fetchall("SELECT * FROM encouragements ORDER BY id")
        return [dict(row) for row in rows]

    def delete_encouragement_at(self: "DatabaseManager", position: int) -> Optional[str]:
        """
        Delete the encouragement at a 1-based list position.

        Args:
            position: Position as shown by /encourage list.

        Returns:
            The deleted message, or None if the position is out of range.
        """
        if position < 1:
            return None
        with self.transaction() as conn:
            row = conn.execute(
                "SELECT id, message FROM encouragements ORDER BY id LIMIT 1 OFFSET ?",
                (position - 1,)
            ).fetchone()
            if row is None:
                return None
            conn.execute("DELETE FROM encouragements WHERE id = ?", (row["id"],))
        return row["message"]


__all__ = ["EncouragementsMixin"]
