"""
Sprocket - Handlers Package
===========================

Interaction and message handlers used by cogs and views.

Available Handlers:
    AnnouncementHandler: Button/modal dispatch for the announcement panel
    IntroductionHandler: Role assignment from introduction posts
    EncouragementResponder: Sad-word auto replies

Author: Engineering Club Exec Team
Server: McRoberts Engineering Club
"""

from .announcement_handler import AnnouncementHandler
from .encouragement import EncouragementResponder
from .introductions import IntroductionHandler

__all__ = [
    "AnnouncementHandler",
    "EncouragementResponder",
    "IntroductionHandler",
]
