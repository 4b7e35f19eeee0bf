"""
Sprocket - Announcement Actions
===============================

Typed control identifiers for the announcement panel.

DESIGN:
    Every button on the control panel carries "ann:<kind>:<id>". The
    string is produced and parsed only here; the DynamicItem template
    below decodes it once at the Discord boundary and handlers receive
    an AnnouncementAction, never the raw custom id.

Author: Engineering Club Exec Team
Server: McRoberts Engineering Club
"""

import re
from dataclasses import dataclass
from enum import Enum
from typing import Optional


# =============================================================================
# Action Kinds
# =============================================================================

class ActionKind(str, Enum):
    EDIT_DISCORD = "edit_discord"
    EDIT_EMAIL = "edit_email"
    PREVIEW = "preview"
    TEST_SEND = "test_send"
    SEND = "send"
    CANCEL = "cancel"


ACTION_PREFIX = "ann"

ACTION_TEMPLATE = (
    rf"{ACTION_PREFIX}:"
    rf"(?P<kind>{'|'.join(kind.value for kind in ActionKind)}):"
    r"(?P<announcement_id>\d+-\d+)"
)
"""Regex matched against button custom ids."""

_ACTION_PATTERN = re.compile(rf"^{ACTION_TEMPLATE}$")


# =============================================================================
# Action
# =============================================================================

@dataclass(frozen=True)
class AnnouncementAction:
    """One control press: what to do and to which announcement."""

    kind: ActionKind
    announcement_id: str

    @property
    def custom_id(self) -> str:
        return f"{ACTION_PREFIX}:{self.kind.value}:{self.announcement_id}"

    @classmethod
    def from_match(cls, match: "re.Match[str]") -> "AnnouncementAction":
        return cls(
            kind=ActionKind(match["kind"]),
            announcement_id=match["announcement_id"],
        )

    @classmethod
    def decode(cls, custom_id: str) -> Optional["AnnouncementAction"]:
        """Parse a custom id, returning None if it is not an announcement control."""
        match = _ACTION_PATTERN.match(custom_id)
        return cls.from_match(match) if match else None


__all__ = ["ActionKind", "AnnouncementAction", "ACTION_TEMPLATE"]
