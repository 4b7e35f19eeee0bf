"""
Sprocket - Bot State
====================

JSON key/value rows for small pieces of bot state.

Author: Engineering Club Exec Team
Server: McRoberts Engineering Club
"""

import json
import time
from typing import TYPE_CHECKING, Any

from sprocket.core.logger import logger

if TYPE_CHECKING:
    from sprocket.core.database.manager import DatabaseManager


ENCOURAGE_RESPONDING_KEY = "encourage_responding"


class StateMixin:
    """bot_state table access."""

    def get_bot_state(self: "DatabaseManager", key: str, default: Any = None) -> Any:
        """
        Decoded value for key, or default when the key is unset.

        A row that is not valid JSON comes back as its raw text.
        """
        row = self.fetchone("SELECT value FROM bot_state WHERE key = ?", (key,))
        if row is None:
            return default
        try:
            return json.loads(row["value"])
        except json.JSONDecodeError:
            return row["value"]

    def set_bot_state(self: "DatabaseManager", key: str, value: Any) -> None:
        self.execute(
            """
            INSERT INTO bot_state (key, value, updated_at) VALUES (?, ?, ?)
            ON CONFLICT(key) DO UPDATE SET value = excluded.value, updated_at = excluded.updated_at
            """,
            (key, json.dumps(value), time.time()),
        )

    def delete_bot_state(self: "DatabaseManager", key: str) -> None:
        self.execute("DELETE FROM bot_state WHERE key = ?", (key,))

    # Sad-word auto replies default to on
    def is_encourage_responding(self: "DatabaseManager") -> bool:
        return bool(self.get_bot_state(ENCOURAGE_RESPONDING_KEY, True))

    def set_encourage_responding(self: "DatabaseManager", enabled: bool) -> None:
        self.set_bot_state(ENCOURAGE_RESPONDING_KEY, bool(enabled))
        logger.tree("Encourage Responding Changed", [
            ("Enabled", "Yes" if enabled else "No"),
        ], emoji="⚙️")


__all__ = ["StateMixin"]
