"""
Sprocket - Avatar Command Cog
=============================

/setavatar changes the bot's profile picture from a URL or an uploaded
image, falling back to the club GIF.

DESIGN:
    The download and the profile update run together under one
    asyncio.wait_for deadline; Discord only allows a couple of avatar
    changes per hour, so rate limits are reported instead of retried.

Author: Engineering Club Exec Team
Server: McRoberts Engineering Club
"""

import asyncio
from typing import TYPE_CHECKING, Optional

import aiohttp
import discord
from discord import app_commands
from discord.ext import commands

from sprocket.core.config import get_config
from sprocket.core.logger import logger
from sprocket.utils.embeds import status_embed

if TYPE_CHECKING:
    from sprocket.bot import SprocketBot


# =============================================================================
# Constants
# =============================================================================

DEFAULT_AVATAR_URL = (
    "https://media0.giphy.com/media/v1.Y2lkPTc5MGI3NjExaGZnZGoydDhqcm9yZGtqanQ5YmNvdDNybzY4bGR3aDJqeWg3MnRkeiZlcD12MV9pbnRlcm5hbF9naWZfYnlfaWQmY3Q9Zw"
    "/s3wqGbNrYjG3AqkmD5/giphy.gif"
)

# Discord API error codes
INVALID_FORM_BODY = 50035
MISSING_PERMISSIONS = 50013


# =============================================================================
# Helpers
# =============================================================================

class AvatarDownloadError(Exception):
    """The avatar image could not be downloaded."""

    pass


def resolve_avatar_url(url: Optional[str], image: Optional[discord.Attachment]) -> str:
    """
    Pick the avatar source: attachment, then URL, then the club default.

    Raises:
        ValueError: The attachment is not an image.
    """
    if image is not None:
        if not (image.content_type or "").startswith("image/"):
            raise ValueError("Please upload an image file")
        return image.url
    if not url or url.strip().lower() == "default":
        return DEFAULT_AVATAR_URL
    return url.strip()


def describe_avatar_error(error: Exception) -> str:
    """Map a failed avatar update to a message for the invoker."""
    if isinstance(error, asyncio.TimeoutError):
        return "Timed out while updating the avatar. Try a smaller image"
    if isinstance(error, AvatarDownloadError):
        return f"Couldn't download the image: {error}"
    if isinstance(error, discord.HTTPException):
        if error.code == INVALID_FORM_BODY:
            return "Invalid image format or size. Use PNG, JPG, or GIF under 8MB"
        if error.code == MISSING_PERMISSIONS or isinstance(error, discord.Forbidden):
            return "Bot doesn't have permission to change avatar"
        if error.status == 429 or "rate limit" in str(error).lower():
            return "Rate limited. You can only change the bot avatar twice per hour"
    return "Failed to update avatar"


async def download_image(url: str, timeout: float) -> bytes:
    try:
        async with aiohttp.ClientSession() as session:
            async with session.get(url, timeout=aiohttp.ClientTimeout(total=timeout)) as response:
                if response.status != 200:
                    raise AvatarDownloadError(f"HTTP {response.status}")
                return await response.read()
    except aiohttp.ClientError as e:
        raise AvatarDownloadError(str(e)[:100])


# =============================================================================
# Avatar Cog
# =============================================================================

class AvatarCog(commands.Cog):
    """Cog for /setavatar."""

    def __init__(self, bot: "SprocketBot") -> None:
        self.bot = bot
        self.config = get_config()

        logger.tree("Avatar Cog Loaded", [
            ("Commands", "/setavatar"),
            ("Timeout", f"{self.config.network_timeout}s"),
        ], emoji="🖼️")

    @app_commands.command(name="setavatar", description="Set the bot's profile picture")
    @app_commands.describe(
        url="Image URL or 'default' for the club GIF",
        image="Upload an image file",
    )
    @app_commands.guild_only()
    @app_commands.default_permissions(manage_guild=True)
    async def setavatar(
        self,
        interaction: discord.Interaction,
        url: Optional[str] = None,
        image: Optional[discord.Attachment] = None,
    ) -> None:
        if not interaction.user.guild_permissions.manage_guild:
            await interaction.response.send_message(
                embed=status_embed("Access Denied", "You need Manage Server permission to change the bot avatar", "error"),
                ephemeral=True,
            )
            return

        try:
            avatar_url = resolve_avatar_url(url, image)
        except ValueError as e:
            await interaction.response.send_message(
                embed=status_embed("Invalid File", str(e), "error"),
                ephemeral=True,
            )
            return

        await interaction.response.defer(ephemeral=True)

        timeout = self.config.network_timeout

        async def update() -> None:
            data = await download_image(avatar_url, timeout)
            await self.bot.user.edit(avatar=data)

        try:
            await asyncio.wait_for(update(), timeout=timeout * 2)
        except (asyncio.TimeoutError, AvatarDownloadError, discord.HTTPException) as e:
            logger.warning("Avatar Update Failed", [
                ("By", f"{interaction.user} ({interaction.user.id})"),
                ("URL", avatar_url[:80]),
                ("Error", f"{type(e).__name__}: {str(e)[:80]}"),
            ])
            await interaction.followup.send(
                embed=status_embed("Avatar Update Failed", describe_avatar_error(e), "error"),
                ephemeral=True,
            )
            return

        await interaction.followup.send(
            embed=status_embed(
                "Avatar Updated",
                "Bot profile picture has been successfully updated!",
                "success",
                fields=[("New Avatar", f"[View Image]({avatar_url})", False)],
            ),
            ephemeral=True,
        )

        logger.tree("Avatar Updated", [
            ("By", f"{interaction.user} ({interaction.user.id})"),
            ("URL", avatar_url[:80]),
        ], emoji="🖼️")


async def setup(bot: "SprocketBot") -> None:
    """Load the Avatar cog."""
    await bot.add_cog(AvatarCog(bot))
