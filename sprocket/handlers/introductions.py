"""
Sprocket - Introduction Handler
===============================

Gives new members their roles when they post in the introductions channel.

DESIGN:
    A member introduces themselves with something like "Hi, I'm Sam in
    grade 11". The first number in the text picks the grade role (a role
    literally named "11"); everyone also gets the "members" role, and
    the message gets a 👋 reaction. Missing roles are skipped quietly.

Author: Engineering Club Exec Team
Server: McRoberts Engineering Club
"""

import re
from typing import Optional

import discord

from sprocket.core.logger import logger


# =============================================================================
# Constants
# =============================================================================

GRADE_PATTERN = re.compile(r"(\d+)")
MEMBERS_ROLE_NAME = "members"
WELCOME_REACTION = "👋"


# =============================================================================
# Helpers
# =============================================================================

def extract_grade(text: str) -> Optional[str]:
    """First integer in the text, normalized (so "09" becomes "9")."""
    match = GRADE_PATTERN.search(text or "")
    return str(int(match.group(1))) if match else None


def find_role_by_name(guild: discord.Guild, name: str) -> Optional[discord.Role]:
    """Case-insensitive exact role name lookup."""
    wanted = name.lower()
    for role in guild.roles:
        if role.name.lower() == wanted:
            return role
    return None


# =============================================================================
# Introduction Handler
# =============================================================================

class IntroductionHandler:
    """Assigns grade and member roles from introduction messages."""

    async def handle(self, message: discord.Message) -> None:
        """
        Process one introduction message.

        Args:
            message: Non-bot guild message from the introductions channel.
        """
        member = message.author
        if not isinstance(member, discord.Member):
            return

        roles = []
        grade = extract_grade(message.content)
        if grade:
            grade_role = find_role_by_name(message.guild, grade)
            if grade_role:
                roles.append(grade_role)

        members_role = find_role_by_name(message.guild, MEMBERS_ROLE_NAME)
        if members_role:
            roles.append(members_role)

        to_add = [role for role in roles if role not in member.roles]
        if to_add:
            try:
                await member.add_roles(*to_add, reason="Introduction posted")
            except discord.HTTPException as e:
                logger.error("Introduction Role Assignment Failed", [
                    ("User", f"{member} ({member.id})"),
                    ("Roles", ", ".join(role.name for role in to_add)),
                    ("Error", str(e)[:100]),
                ])

        try:
            await message.add_reaction(WELCOME_REACTION)
        except discord.HTTPException as e:
            logger.warning(f"Welcome reaction failed: {e}")

        logger.tree("Introduction Processed", [
            ("User", f"{member} ({member.id})"),
            ("Grade", grade or "None"),
            ("Roles Added", ", ".join(role.name for role in to_add) or "None"),
        ], emoji="👋")


__all__ = ["IntroductionHandler", "extract_grade", "find_role_by_name"]
