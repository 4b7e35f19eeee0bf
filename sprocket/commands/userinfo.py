"""
Sprocket - User Info Command Cog
================================

/userinfo shows account and membership details for a member.

Author: Engineering Club Exec Team
Server: McRoberts Engineering Club
"""

from typing import TYPE_CHECKING, Optional

import discord
from discord import app_commands
from discord.ext import commands

from sprocket.core.config import EmbedColors
from sprocket.core.logger import logger

if TYPE_CHECKING:
    from sprocket.bot import SprocketBot


MAX_ROLES_SHOWN = 20


def build_userinfo_embed(member: discord.Member) -> discord.Embed:
    """Embed with id, account creation, join date and roles."""
    embed = discord.Embed(
        title=f"👤 {member.display_name}",
        color=member.color if member.color.value else EmbedColors.INFO,
    )
    embed.set_thumbnail(url=member.display_avatar.url)
    embed.add_field(name="Username", value=str(member), inline=True)
    embed.add_field(name="ID", value=str(member.id), inline=True)
    embed.add_field(
        name="Account Created",
        value=f"<t:{int(member.created_at.timestamp())}:F>",
        inline=False,
    )
    if member.joined_at:
        embed.add_field(
            name="Joined Server",
            value=f"<t:{int(member.joined_at.timestamp())}:F>",
            inline=False,
        )

    roles = [role.mention for role in reversed(member.roles) if not role.is_default()]
    shown = roles[:MAX_ROLES_SHOWN]
    if len(roles) > MAX_ROLES_SHOWN:
        shown.append(f"+{len(roles) - MAX_ROLES_SHOWN} more")
    embed.add_field(
        name=f"Roles ({len(roles)})",
        value=" ".join(shown) if shown else "None",
        inline=False,
    )
    return embed


class UserInfoCog(commands.Cog):
    """Cog for /userinfo."""

    def __init__(self, bot: "SprocketBot") -> None:
        self.bot = bot

        logger.tree("User Info Cog Loaded", [
            ("Commands", "/userinfo"),
        ], emoji="👤")

    @app_commands.command(name="userinfo", description="Get information about a user")
    @app_commands.describe(user="The user to get information about")
    @app_commands.guild_only()
    async def userinfo(
        self,
        interaction: discord.Interaction,
        user: Optional[discord.Member] = None,
    ) -> None:
        member = user or interaction.user
        await interaction.response.send_message(embed=build_userinfo_embed(member))


async def setup(bot: "SprocketBot") -> None:
    """Load the User Info cog."""
    await bot.add_cog(UserInfoCog(bot))
