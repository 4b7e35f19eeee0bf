"""
Sprocket - Announcements Package
================================

Pending announcement registry, workflow state machine and expiry sweep.

Author: Engineering Club Exec Team
Server: McRoberts Engineering Club
"""

from sprocket.services.announcements.actions import ACTION_TEMPLATE, ActionKind, AnnouncementAction
from sprocket.services.announcements.errors import (
    AnnouncementBusy,
    AnnouncementError,
    AnnouncementForbidden,
    AnnouncementNotFound,
    DuplicateAnnouncement,
    InvalidAnnouncement,
)
from sprocket.services.announcements.models import (
    AnnouncementRecord,
    AnnouncementState,
    DeliveryStatus,
    SendOutcome,
)
from sprocket.services.announcements.store import AnnouncementStore
from sprocket.services.announcements.sweeper import AnnouncementSweeper
from sprocket.services.announcements.workflow import AnnouncementWorkflow

__all__ = [
    "ACTION_TEMPLATE",
    "ActionKind",
    "AnnouncementAction",
    "AnnouncementBusy",
    "AnnouncementError",
    "AnnouncementForbidden",
    "AnnouncementNotFound",
    "DuplicateAnnouncement",
    "InvalidAnnouncement",
    "AnnouncementRecord",
    "AnnouncementState",
    "DeliveryStatus",
    "SendOutcome",
    "AnnouncementStore",
    "AnnouncementSweeper",
    "AnnouncementWorkflow",
]
