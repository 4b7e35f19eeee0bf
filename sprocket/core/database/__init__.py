"""
Sprocket - Database Module
==========================

SQLite storage for bot state, scheduled archives and encouragements.

Author: Engineering Club Exec Team
Server: McRoberts Engineering Club
"""

from sprocket.core.database.manager import (
    DatabaseManager,
    get_db,
    DATA_DIR,
    DB_PATH,
)
from sprocket.core.database.models import (
    ArchiveTaskRecord,
    EncouragementRecord,
)

__all__ = [
    "DatabaseManager",
    "get_db",
    "DATA_DIR",
    "DB_PATH",
    "ArchiveTaskRecord",
    "EncouragementRecord",
]
