"""
Sprocket - Announce Command Cog
===============================

/announce opens a private control panel for a new announcement draft.

Author: Engineering Club Exec Team
Server: McRoberts Engineering Club
"""

from typing import TYPE_CHECKING, Optional

import discord
from discord import app_commands
from discord.ext import commands

from sprocket.core.logger import logger

if TYPE_CHECKING:
    from sprocket.bot import SprocketBot


class AnnounceCog(commands.Cog):
    """Cog for the /announce command."""

    def __init__(self, bot: "SprocketBot") -> None:
        self.bot = bot

        logger.tree("Announce Cog Loaded", [
            ("Commands", "/announce"),
        ], emoji="📢")

    @app_commands.command(name="announce", description="Draft an announcement for Discord and email")
    @app_commands.describe(
        topic="What the announcement is about",
        details="Details for the announcement body",
    )
    @app_commands.guild_only()
    @app_commands.default_permissions(manage_messages=True)
    @app_commands.checks.has_permissions(manage_messages=True)
    async def announce(
        self,
        interaction: discord.Interaction,
        topic: str,
        details: Optional[str] = None,
    ) -> None:
        """Create a draft and show its control panel to the author only."""
        await self.bot.announcement_handler.create(interaction, topic, details)


async def setup(bot: "SprocketBot") -> None:
    """Load the Announce cog."""
    await bot.add_cog(AnnounceCog(bot))
