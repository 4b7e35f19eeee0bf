"""
Sprocket - Message Events
=========================

Routes incoming guild messages to the introduction and encouragement
handlers.

Author: Engineering Club Exec Team
Server: McRoberts Engineering Club
"""

from typing import TYPE_CHECKING

import discord
from discord.ext import commands

from sprocket.core.config import get_config

if TYPE_CHECKING:
    from sprocket.bot import SprocketBot


class MessageEvents(commands.Cog):
    """Message event handlers."""

    def __init__(self, bot: "SprocketBot") -> None:
        self.bot = bot
        self.config = get_config()

    @commands.Cog.listener()
    async def on_message(self, message: discord.Message) -> None:
        """
        Event handler for messages.

        DESIGN: Two routes, both for non-bot guild messages only:
        1. Any channel -> sad-word encouragement
        2. Introductions channel -> grade/member roles + wave
        """
        if message.author.bot or message.guild is None:
            return

        # -----------------------------------------------------------------
        # Route 1: Encouragement
        # -----------------------------------------------------------------
        if self.bot.encouragement_responder:
            await self.bot.encouragement_responder.check_message(message)

        # -----------------------------------------------------------------
        # Route 2: Introductions channel
        # -----------------------------------------------------------------
        if (
            self.config.introduction_channel_id
            and message.channel.id == self.config.introduction_channel_id
            and self.bot.introduction_handler
        ):
            await self.bot.introduction_handler.handle(message)


async def setup(bot: "SprocketBot") -> None:
    """Load the MessageEvents cog."""
    await bot.add_cog(MessageEvents(bot))
