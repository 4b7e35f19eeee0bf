"""
Sprocket - Archive Command Cog
==============================

/archive subcommands for moving channels between the archived and execs
categories, immediately or on a scheduled date.

DESIGN:
    Scheduled archives are stored as archive_tasks rows and picked up by
    ArchiveScheduler, so they survive restarts. Task ids are the row ids
    shown by /archive list-scheduled.

Author: Engineering Club Exec Team
Server: McRoberts Engineering Club
"""

import asyncio
from typing import TYPE_CHECKING, Union

import discord
from discord import app_commands
from discord.ext import commands

from sprocket.core.config import EmbedColors, get_config
from sprocket.core.database import get_db
from sprocket.core.logger import logger
from sprocket.services.archive import (
    ScheduleDateError,
    find_category,
    move_to_category,
    parse_schedule_date,
)
from sprocket.utils.embeds import status_embed

if TYPE_CHECKING:
    from sprocket.bot import SprocketBot


ArchivableChannel = Union[discord.TextChannel, discord.VoiceChannel]


# =============================================================================
# Archive Cog
# =============================================================================

@app_commands.guild_only()
@app_commands.default_permissions(manage_channels=True)
class ArchiveCog(
    commands.GroupCog,
    group_name="archive",
    group_description="Manage channel archiving and categories",
):
    """Cog for /archive subcommands."""

    def __init__(self, bot: "SprocketBot") -> None:
        self.bot = bot
        self.config = get_config()
        self.db = get_db()
        super().__init__()

        logger.tree("Archive Cog Loaded", [
            ("Commands", "/archive move, unarchive, schedule, list-scheduled, cancel-schedule"),
            ("Archived Category", self.config.archived_category_name),
            ("Unarchive Category", self.config.unarchive_category_name),
        ], emoji="📁")

    # =========================================================================
    # Permission Check
    # =========================================================================

    async def interaction_check(self, interaction: discord.Interaction) -> bool:
        """Require Manage Channels even if the default permission was overridden."""
        permissions = getattr(interaction.user, "guild_permissions", None)
        if permissions and permissions.manage_channels:
            return True

        await interaction.response.send_message(
            embed=status_embed("Access Denied", "You need Manage Channels permission to use this command", "error"),
            ephemeral=True,
        )
        return False

    # =========================================================================
    # Move / Unarchive
    # =========================================================================

    @app_commands.command(name="move", description="Move a channel to the archived category")
    @app_commands.describe(channel="The channel to archive")
    async def move(self, interaction: discord.Interaction, channel: ArchivableChannel) -> None:
        await self._move(interaction, channel, self.config.archived_category_name, archive=True)

    @app_commands.command(name="unarchive", description="Move a channel from archived to the execs category")
    @app_commands.describe(channel="The channel to unarchive")
    async def unarchive(self, interaction: discord.Interaction, channel: ArchivableChannel) -> None:
        await self._move(interaction, channel, self.config.unarchive_category_name, archive=False)

    async def _move(
        self,
        interaction: discord.Interaction,
        channel: ArchivableChannel,
        category_name: str,
        archive: bool,
    ) -> None:
        category = find_category(interaction.guild, category_name)
        if category is None:
            await interaction.response.send_message(
                f'Could not find an "{category_name.title()}" category. Please create one first.',
                ephemeral=True,
            )
            return

        await interaction.response.defer()
        action = "Archived" if archive else "Unarchived"
        try:
            await move_to_category(channel, category, reason=f"{action} by {interaction.user}")
        except discord.HTTPException as e:
            logger.error("Channel Move Failed", [
                ("Channel", f"#{channel.name} ({channel.id})"),
                ("Category", category.name),
                ("Error", str(e)[:100]),
            ])
            await interaction.followup.send(
                "There was an error moving the channel. Please check my permissions and try again.",
                ephemeral=True,
            )
            return

        if archive:
            message = f"📁 Successfully moved {channel.name} to the Archived category."
        else:
            message = f"📤 Successfully moved {channel.name} to the Execs category."
        await interaction.followup.send(message)

    # =========================================================================
    # Scheduling
    # =========================================================================

    @app_commands.command(name="schedule", description="Schedule a channel to be archived on a date")
    @app_commands.describe(
        channel="The channel to archive",
        date="Date to archive on (YYYY-MM-DD)",
    )
    async def schedule(
        self,
        interaction: discord.Interaction,
        channel: ArchivableChannel,
        date: str,
    ) -> None:
        try:
            run_at = parse_schedule_date(date, self.config.timezone)
        except ScheduleDateError as e:
            await interaction.response.send_message(str(e), ephemeral=True)
            return

        task_id = await asyncio.to_thread(
            self.db.add_archive_task,
            interaction.guild.id,
            channel.id,
            run_at.timestamp(),
            interaction.user.id,
        )

        timestamp = int(run_at.timestamp())
        embed = discord.Embed(
            title="⏰ Archiving Scheduled",
            description=f"{channel.mention} will be archived on <t:{timestamp}:F>.",
            color=EmbedColors.INFO,
        )
        embed.add_field(name="Task ID", value=str(task_id), inline=True)
        embed.add_field(name="Channel", value=channel.mention, inline=True)
        embed.add_field(name="Runs", value=f"<t:{timestamp}:R>", inline=True)
        await interaction.response.send_message(embed=embed)

        logger.tree("Archive Scheduled", [
            ("Task ID", str(task_id)),
            ("Channel", f"#{channel.name} ({channel.id})"),
            ("Run At", run_at.isoformat()),
            ("By", f"{interaction.user} ({interaction.user.id})"),
        ], emoji="⏰")

    @app_commands.command(name="list-scheduled", description="List scheduled archiving tasks")
    async def list_scheduled(self, interaction: discord.Interaction) -> None:
        tasks = await asyncio.to_thread(self.db.get_archive_tasks, interaction.guild.id)
        if not tasks:
            await interaction.response.send_message("No scheduled archiving tasks found.", ephemeral=True)
            return

        embed = discord.Embed(title="📅 Scheduled Archiving Tasks", color=EmbedColors.INFO)
        for task in tasks[:25]:
            embed.add_field(
                name=f"Task {task['id']}",
                value=f"<#{task['channel_id']}> on <t:{int(task['run_at'])}:F>",
                inline=False,
            )
        await interaction.response.send_message(embed=embed, ephemeral=True)

    @app_commands.command(name="cancel-schedule", description="Cancel a scheduled archiving task")
    @app_commands.describe(task_id="Task ID from /archive list-scheduled")
    async def cancel_schedule(self, interaction: discord.Interaction, task_id: int) -> None:
        task = await asyncio.to_thread(self.db.get_archive_task, task_id)
        if task is None or task["guild_id"] != interaction.guild.id:
            await interaction.response.send_message(
                "Task not found. Use `/archive list-scheduled` to see available tasks.",
                ephemeral=True,
            )
            return

        await asyncio.to_thread(self.db.delete_archive_task, task_id)
        await interaction.response.send_message(f"✅ Cancelled scheduled archiving task {task_id}.")

        logger.tree("Archive Schedule Cancelled", [
            ("Task ID", str(task_id)),
            ("Channel ID", str(task["channel_id"])),
            ("By", f"{interaction.user} ({interaction.user.id})"),
        ], emoji="🗑️")


async def setup(bot: "SprocketBot") -> None:
    """Load the Archive cog."""
    await bot.add_cog(ArchiveCog(bot))
