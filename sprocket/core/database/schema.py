"""
Sprocket - Database Schema
==========================

Versioned migrations tracked in PRAGMA user_version.

Author: Engineering Club Exec Team
Server: McRoberts Engineering Club
"""

from typing import TYPE_CHECKING, List, Tuple

if TYPE_CHECKING:
    from sprocket.core.database.manager import DatabaseManager


# Append new versions; never edit a shipped one.
MIGRATIONS: List[Tuple[int, Tuple[str, ...]]] = [
    (1, (
        # JSON values keyed by name: pending announcements, toggles
        """
        CREATE TABLE IF NOT EXISTS bot_state (
            key TEXT PRIMARY KEY,
            value TEXT NOT NULL,
            updated_at REAL NOT NULL
        )
        """,
        # One pending archive per channel
        """
        CREATE TABLE IF NOT EXISTS archive_tasks (
            id INTEGER PRIMARY KEY AUTOINCREMENT,
            guild_id INTEGER NOT NULL,
            channel_id INTEGER NOT NULL UNIQUE,
            run_at REAL NOT NULL,
            scheduled_by INTEGER NOT NULL,
            created_at REAL NOT NULL
        )
        """,
        "CREATE INDEX IF NOT EXISTS idx_archive_tasks_run_at ON archive_tasks(run_at)",
        """
        CREATE TABLE IF NOT EXISTS encouragements (
            id INTEGER PRIMARY KEY AUTOINCREMENT,
            message TEXT NOT NULL,
            added_by INTEGER,
            added_at REAL NOT NULL
        )
        """,
    )),
]

SCHEMA_VERSION = MIGRATIONS[-1][0]


class SchemaMixin:
    """Brings the file up to SCHEMA_VERSION."""

    def schema_version(self: "DatabaseManager") -> int:
        return self.fetchone("PRAGMA user_version")[0]

    def migrate(self: "DatabaseManager") -> int:
        """Apply every migration newer than the file; returns the resulting version."""
        current = self.schema_version()
        for version, statements in MIGRATIONS:
            if version <= current:
                continue
            with self.transaction() as conn:
                for statement in statements:
                    conn.execute(statement)
                conn.execute(f"PRAGMA user_version = {version}")
            current = version
        return current


__all__ = ["SchemaMixin", "MIGRATIONS", "SCHEMA_VERSION"]
