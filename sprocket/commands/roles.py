"""
Sprocket - Roles Command Cog
============================

/assignrole lets members with Manage Roles hand out roles below their own.

Author: Engineering Club Exec Team
Server: McRoberts Engineering Club
"""

from typing import TYPE_CHECKING

import discord
from discord import app_commands
from discord.ext import commands

from sprocket.core.logger import logger
from sprocket.utils.embeds import status_embed

if TYPE_CHECKING:
    from sprocket.bot import SprocketBot


def can_assign(invoker: discord.Member, role: discord.Role) -> bool:
    """Roles at or above the invoker's highest role are off limits."""
    return role.position < invoker.top_role.position


class RolesCog(commands.Cog):
    """Cog for role assignment."""

    def __init__(self, bot: "SprocketBot") -> None:
        self.bot = bot

        logger.tree("Roles Cog Loaded", [
            ("Commands", "/assignrole"),
        ], emoji="🎭")

    @app_commands.command(name="assignrole", description="Assign a role to a user")
    @app_commands.describe(
        user="The user to assign the role to",
        role="The role to assign",
    )
    @app_commands.guild_only()
    @app_commands.default_permissions(manage_roles=True)
    async def assignrole(
        self,
        interaction: discord.Interaction,
        user: discord.Member,
        role: discord.Role,
    ) -> None:
        invoker = interaction.user
        if not invoker.guild_permissions.manage_roles:
            await interaction.response.send_message(
                embed=status_embed("Access Denied", "You need Manage Roles permission to use this command", "error"),
                ephemeral=True,
            )
            return

        if not can_assign(invoker, role):
            await interaction.response.send_message(
                embed=status_embed(
                    "Role Hierarchy Error",
                    "You cannot assign a role equal to or higher than your highest role",
                    "error",
                ),
                ephemeral=True,
            )
            return

        try:
            await user.add_roles(role, reason=f"Assigned by {invoker}")
        except discord.HTTPException as e:
            logger.error("Role Assignment Failed", [
                ("User", f"{user} ({user.id})"),
                ("Role", role.name),
                ("Error", str(e)[:100]),
            ])
            await interaction.response.send_message(
                embed=status_embed(
                    "Role Assignment Failed",
                    f"Could not give **{role.name}** to {user.mention}. Please check my permissions and try again.",
                    "error",
                ),
                ephemeral=True,
            )
            return

        await interaction.response.send_message(
            embed=status_embed(
                "Role Assigned",
                f"Role successfully assigned to {user.mention}",
                "success",
                fields=[("User", str(user), True), ("Role", role.name, True)],
            ),
        )

        logger.tree("Role Assigned", [
            ("User", f"{user} ({user.id})"),
            ("Role", role.name),
            ("By", f"{invoker} ({invoker.id})"),
        ], emoji="🎭")


async def setup(bot: "SprocketBot") -> None:
    """Load the Roles cog."""
    await bot.add_cog(RolesCog(bot))
