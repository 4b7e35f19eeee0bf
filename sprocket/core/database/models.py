"""
Sprocket - Database Type Definitions
====================================

TypedDict definitions for database records.

Author: Engineering Club Exec Team
Server: McRoberts Engineering Club
"""

from typing import Optional, TypedDict


class ArchiveTaskRecord(TypedDict, total=False):
    """Type for scheduled archive task records."""
    id: int
    guild_id: int
    channel_id: int
    run_at: float
    scheduled_by: int
    created_at: float


class EncouragementRecord(TypedDict, total=False):
    """Type for encouragement records."""
    id: int
    message: str
    added_by: Optional[int]
    added_at: float


__all__ = ["ArchiveTaskRecord", "EncouragementRecord"]
