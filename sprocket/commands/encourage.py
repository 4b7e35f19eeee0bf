"""
Sprocket - Encourage Command Cog
================================

/encourage subcommands: inspiring quotes and the encouragement list used
by the sad-word auto replies.

DESIGN:
    Built-in lines always exist and cannot be deleted. Lines added with
    /encourage add are stored in the encouragements table and are
    numbered from 1 in /encourage list; /encourage delete takes that
    number. The on/off switch lives in bot_state so it survives restarts.

Author: Engineering Club Exec Team
Server: McRoberts Engineering Club
"""

import asyncio
from typing import TYPE_CHECKING

import aiohttp
import discord
from discord import app_commands
from discord.ext import commands

from sprocket.core.config import get_config
from sprocket.core.database import get_db
from sprocket.core.logger import logger
from sprocket.handlers.encouragement import STARTER_ENCOURAGEMENTS

if TYPE_CHECKING:
    from sprocket.bot import SprocketBot


# =============================================================================
# Constants
# =============================================================================

QUOTE_API_URL = "https://zenquotes.io/api/random"

MAX_MESSAGE_LENGTH = 2000


# =============================================================================
# Quote Fetching
# =============================================================================

class QuoteUnavailable(Exception):
    """The quote API could not be reached or returned junk."""

    pass


async def fetch_quote(timeout: float) -> str:
    """
    Fetch a random quote formatted as "quote -author".

    Raises:
        QuoteUnavailable: Network error, timeout or unexpected payload.
    """

    async def _get() -> str:
        async with aiohttp.ClientSession() as session:
            async with session.get(
                QUOTE_API_URL,
                timeout=aiohttp.ClientTimeout(total=timeout),
            ) as response:
                if response.status != 200:
                    raise QuoteUnavailable(f"Quote API returned {response.status}")
                data = await response.json(content_type=None)

        try:
            return f"{data[0]['q']} -{data[0]['a']}"
        except (KeyError, IndexError, TypeError):
            raise QuoteUnavailable("Unexpected quote payload")

    try:
        return await asyncio.wait_for(_get(), timeout=timeout)
    except asyncio.TimeoutError:
        raise QuoteUnavailable(f"Quote API timed out after {timeout}s")
    except aiohttp.ClientError as e:
        raise QuoteUnavailable(str(e))


def format_encouragement_list(custom: list) -> str:
    lines = ["**Built-in**"]
    lines.extend(f"• {line}" for line in STARTER_ENCOURAGEMENTS)
    lines.append("")
    lines.append("**Added**")
    if custom:
        lines.extend(f"{position}. {row['message']}" for position, row in enumerate(custom, start=1))
    else:
        lines.append("None yet. Use `/encourage add` to add one.")
    text = "\n".join(lines)
    if len(text) > MAX_MESSAGE_LENGTH:
        text = text[:MAX_MESSAGE_LENGTH - 1] + "…"
    return text


# =============================================================================
# Encourage Cog
# =============================================================================

class EncourageCog(
    commands.GroupCog,
    group_name="encourage",
    group_description="Encouragement system commands",
):
    """Cog for /encourage subcommands."""

    def __init__(self, bot: "SprocketBot") -> None:
        self.bot = bot
        self.config = get_config()
        self.db = get_db()
        super().__init__()

        logger.tree("Encourage Cog Loaded", [
            ("Commands", "/encourage inspire, add, delete, list, responding"),
            ("Responding", "On" if self.db.is_encourage_responding() else "Off"),
        ], emoji="💛")

    @app_commands.command(name="inspire", description="Get an inspiring quote")
    async def inspire(self, interaction: discord.Interaction) -> None:
        await interaction.response.defer()
        try:
            quote = await fetch_quote(self.config.network_timeout)
        except QuoteUnavailable as e:
            logger.warning("Quote Fetch Failed", [
                ("Error", str(e)[:100]),
            ])
            await interaction.followup.send("❌ Couldn't fetch a quote right now. Try again later.")
            return
        await interaction.followup.send(quote)

    @app_commands.command(name="add", description="Add a new encouraging message")
    @app_commands.describe(message="The encouraging message to add")
    async def add(self, interaction: discord.Interaction, message: str) -> None:
        message = message.strip()
        if not message:
            await interaction.response.send_message("❌ The message can't be empty.", ephemeral=True)
            return

        await asyncio.to_thread(self.db.add_encouragement, message, interaction.user.id)
        await interaction.response.send_message("New encouraging message added.")

        logger.tree("Encouragement Added", [
            ("By", f"{interaction.user} ({interaction.user.id})"),
            ("Message", message[:50]),
        ], emoji="💛")

    @app_commands.command(name="delete", description="Delete an encouraging message")
    @app_commands.describe(index="Number of the message in /encourage list")
    async def delete(self, interaction: discord.Interaction, index: int) -> None:
        removed = await asyncio.to_thread(self.db.delete_encouragement_at, index)
        if removed is None:
            await interaction.response.send_message("Invalid index.", ephemeral=True)
            return

        await interaction.response.send_message("Encouraging message deleted.")

        logger.tree("Encouragement Deleted", [
            ("By", f"{interaction.user} ({interaction.user.id})"),
            ("Message", removed[:50]),
        ], emoji="🗑️")

    @app_commands.command(name="list", description="List all encouraging messages")
    async def list_messages(self, interaction: discord.Interaction) -> None:
        custom = await asyncio.to_thread(self.db.get_encouragements)
        await interaction.response.send_message(format_encouragement_list(custom), ephemeral=True)

    @app_commands.command(name="responding", description="Turn encouragement responses on or off")
    @app_commands.describe(state="Turn responding on (true) or off (false)")
    async def responding(self, interaction: discord.Interaction, state: bool) -> None:
        await asyncio.to_thread(self.db.set_encourage_responding, state)
        await interaction.response.send_message(f"Responding is now {'on' if state else 'off'}.")

        logger.tree("Encouragement Responding Toggled", [
            ("By", f"{interaction.user} ({interaction.user.id})"),
            ("State", "On" if state else "Off"),
        ], emoji="💛")


async def setup(bot: "SprocketBot") -> None:
    """Load the Encourage cog."""
    await bot.add_cog(EncourageCog(bot))
