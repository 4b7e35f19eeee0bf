"""
Sprocket - Announcement Errors
==============================

Author: Engineering Club Exec Team
Server: McRoberts Engineering Club
"""


class AnnouncementError(Exception):
    """Base class for announcement workflow errors."""

    user_message = "❌ Something went wrong with this announcement."


class AnnouncementNotFound(AnnouncementError):
    """The id is unknown or the record has expired."""

    user_message = "❌ Announcement not found or expired! Run `/announce` to start again."

    def __init__(self, announcement_id: str) -> None:
        super().__init__(f"Announcement {announcement_id} not found or expired")
        self.announcement_id = announcement_id


class AnnouncementForbidden(AnnouncementError):
    """Someone other than the author tried to act on the record."""

    user_message = "❌ You can only manage your own announcements!"

    def __init__(self, announcement_id: str, actor_id: int) -> None:
        super().__init__(f"User {actor_id} does not own announcement {announcement_id}")
        self.announcement_id = announcement_id
        self.actor_id = actor_id


class DuplicateAnnouncement(AnnouncementError):
    """A record with the same id already exists."""

    user_message = "❌ You just created an announcement. Try again in a moment."

    def __init__(self, announcement_id: str) -> None:
        super().__init__(f"Announcement {announcement_id} already exists")
        self.announcement_id = announcement_id


class AnnouncementBusy(AnnouncementError):
    """A send for this record is already running."""

    user_message = "⏳ This announcement is already being sent."

    def __init__(self, announcement_id: str) -> None:
        super().__init__(f"Announcement {announcement_id} is already sending")
        self.announcement_id = announcement_id


class InvalidAnnouncement(AnnouncementError):
    """Submitted content is empty or malformed."""

    user_message = "❌ The topic and content cannot be empty."


__all__ = [
    "AnnouncementError",
    "AnnouncementNotFound",
    "AnnouncementForbidden",
    "DuplicateAnnouncement",
    "AnnouncementBusy",
    "InvalidAnnouncement",
]
