"""
Sprocket - Encouragement Responder
==================================

Replies to sad-sounding messages with an encouraging line.

Author: Engineering Club Exec Team
Server: McRoberts Engineering Club
"""

import random
from typing import TYPE_CHECKING, List

import discord

from sprocket.core.logger import logger

if TYPE_CHECKING:
    from sprocket.core.database import DatabaseManager


# =============================================================================
# Constants
# =============================================================================

SAD_WORDS = ("sad", "depressed", "unhappy", "angry", "miserable")

STARTER_ENCOURAGEMENTS = (
    "Cheer up!",
    "Hang in there.",
    "You are a great person!",
)


# =============================================================================
# Helpers
# =============================================================================

def contains_sad_word(text: str) -> bool:
    lowered = (text or "").lower()
    return any(word in lowered for word in SAD_WORDS)


def all_encouragements(db: "DatabaseManager") -> List[str]:
    """Built-in lines followed by user-added ones."""
    return list(STARTER_ENCOURAGEMENTS) + [row["message"] for row in db.get_encouragements()]


# =============================================================================
# Encouragement Responder
# =============================================================================

class EncouragementResponder:
    """Sad-word auto replies, toggled with /encourage responding."""

    def __init__(self, db: "DatabaseManager") -> None:
        self.db = db

    async def check_message(self, message: discord.Message) -> bool:
        """
        Reply if responding is on and the message contains a sad word.

        Returns:
            True if a reply was sent.
        """
        if not contains_sad_word(message.content):
            return False
        if not self.db.is_encourage_responding():
            return False

        encouragement = random.choice(all_encouragements(self.db))
        try:
            await message.reply(encouragement, mention_author=False)
        except discord.HTTPException as e:
            logger.warning(f"Encouragement reply failed: {e}")
            return False

        logger.tree("Encouragement Sent", [
            ("User", f"{message.author} ({message.author.id})"),
            ("Reply", encouragement[:50]),
        ], emoji="💛")
        return True


__all__ = [
    "EncouragementResponder",
    "SAD_WORDS",
    "STARTER_ENCOURAGEMENTS",
    "all_encouragements",
    "contains_sad_word",
]
