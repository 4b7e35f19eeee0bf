"""
Sprocket - Fun Command Cog
==========================

/lfs replies with a random canned message.

Author: Engineering Club Exec Team
Server: McRoberts Engineering Club
"""

import random
from typing import TYPE_CHECKING

import discord
from discord import app_commands
from discord.ext import commands

from sprocket.core.logger import logger

if TYPE_CHECKING:
    from sprocket.bot import SprocketBot


LFS_RESPONSES = (
    "The Nova Bus LFS is a North American, low floor transit bus. Introduced in 1994, the design "
    "provides a level entry without steps for passengers with limited mobility.",
    "More useful messages will come in the future.",
    "yeet",
    "Behind you.",
    "stop",
    "Target successfully nuked",
    "sniper no sniping (wait what)",
    "swiper no swiping",
    "NEXT STOP: 11500 BLOCK ON KING ROAD",
    "IQ: Below zero",
    "nginx",
    "newark when",
    "fire > ferry",
    "city dreams",
    "upgrade to windows 10",
    "TWENTY ONE",
    "beans",
    "the cooler beans",
    "the coolest beans",
    "the coolester beans",
    "gg no re",
    "french baguette launcher",
    "you cannot rocket jump with the flak cannon",
    "9540",
)


class FunCog(commands.Cog):
    """Cog for novelty commands."""

    def __init__(self, bot: "SprocketBot") -> None:
        self.bot = bot

        logger.tree("Fun Cog Loaded", [
            ("Commands", "/lfs"),
            ("Responses", str(len(LFS_RESPONSES))),
        ], emoji="🚌")

    @app_commands.command(name="lfs", description="Get a random LFS-related message")
    async def lfs(self, interaction: discord.Interaction) -> None:
        await interaction.response.send_message(random.choice(LFS_RESPONSES))


async def setup(bot: "SprocketBot") -> None:
    """Load the Fun cog."""
    await bot.add_cog(FunCog(bot))
