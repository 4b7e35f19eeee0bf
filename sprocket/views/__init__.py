"""
Sprocket - Views Package
========================

Persistent buttons, modals and embed builders for the announcement
control panel.

Author: Engineering Club Exec Team
Server: McRoberts Engineering Club
"""

from .announcement import (
    AnnouncementButton,
    DiscordEditModal,
    EmailEditModal,
    build_control_view,
    build_panel_embed,
    build_post_embed,
    build_preview_embeds,
    setup_announcement_views,
)

__all__ = [
    "AnnouncementButton",
    "DiscordEditModal",
    "EmailEditModal",
    "build_control_view",
    "build_panel_embed",
    "build_post_embed",
    "build_preview_embeds",
    "setup_announcement_views",
]
