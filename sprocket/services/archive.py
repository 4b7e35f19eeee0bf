"""
Sprocket - Archive Service
==========================

Channel archiving helpers and the scheduled archive runner.

DESIGN:
    Archiving means moving a channel under the first category whose name
    contains "archived"; unarchiving moves it under the "execs" category.

    Scheduled archives are rows in the archive_tasks table. A polling
    loop picks up rows whose time has passed, so a schedule survives
    restarts instead of living in an in-process timer.

Author: Engineering Club Exec Team
Server: McRoberts Engineering Club
"""

import asyncio
import re
from datetime import datetime
from typing import TYPE_CHECKING, Optional
from zoneinfo import ZoneInfo

import discord

from sprocket.core.config import get_config
from sprocket.core.database import ArchiveTaskRecord, get_db
from sprocket.core.logger import logger
from sprocket.utils.retry import retry_async, safe_send

if TYPE_CHECKING:
    from sprocket.bot import SprocketBot


# =============================================================================
# Constants
# =============================================================================

DATE_PATTERN = re.compile(r"^\d{4}-\d{2}-\d{2}$")

SCHEDULED_ARCHIVE_NOTICE = "📁 This channel has been automatically archived as scheduled."


# =============================================================================
# Helpers
# =============================================================================

class ScheduleDateError(ValueError):
    """The requested archive date is malformed or not in the future."""

    pass


def find_category(guild: discord.Guild, name_fragment: str) -> Optional[discord.CategoryChannel]:
    """Return the first category whose name contains the fragment, case-insensitively."""
    fragment = name_fragment.lower()
    for category in guild.categories:
        if fragment in category.name.lower():
            return category
    return None


def parse_schedule_date(date_text: str, timezone: str, now: Optional[datetime] = None) -> datetime:
    """
    Parse a YYYY-MM-DD date as midnight in the club timezone.

    Args:
        date_text: User input.
        timezone: IANA timezone name.
        now: Reference time, defaults to the current time.

    Returns:
        Timezone-aware datetime.

    Raises:
        ScheduleDateError: Bad format, impossible date, or not in the future.
    """
    date_text = date_text.strip()
    if not DATE_PATTERN.match(date_text):
        raise ScheduleDateError("Invalid date format. Please use YYYY-MM-DD (e.g., 2024-06-22).")

    tz = ZoneInfo(timezone)
    try:
        target = datetime.strptime(date_text, "%Y-%m-%d").replace(tzinfo=tz)
    except ValueError:
        raise ScheduleDateError(f"{date_text} is not a valid calendar date.")

    now = now or datetime.now(tz)
    if target <= now:
        raise ScheduleDateError("The scheduled date must be in the future.")
    return target


async def move_to_category(
    channel: discord.abc.GuildChannel,
    category: discord.CategoryChannel,
    reason: str,
) -> None:
    """Move a channel under a category, retrying transient Discord errors."""
    await retry_async(channel.edit, category=category, reason=reason, label="channel.edit")

    logger.tree("Channel Moved", [
        ("Channel", f"#{channel.name} ({channel.id})"),
        ("Category", category.name),
        ("Reason", reason),
    ], emoji="📁")


# =============================================================================
# Archive Scheduler
# =============================================================================

class ArchiveScheduler:
    """
    Background service that runs due archive tasks.

    Attributes:
        bot: Reference to the main bot instance.
        config: Bot configuration.
        db: Database manager.
        task: Background task reference.
        running: Whether the scheduler is active.
    """

    def __init__(self, bot: "SprocketBot") -> None:
        self.bot = bot
        self.config = get_config()
        self.db = get_db()
        self.task: Optional[asyncio.Task] = None
        self.running: bool = False

    # =========================================================================
    # Lifecycle Management
    # =========================================================================

    async def start(self) -> None:
        if self.task and not self.task.done():
            self.task.cancel()

        self.running = True
        self.task = asyncio.create_task(self._scheduler_loop())

        logger.tree("Archive Scheduler Started", [
            ("Check Interval", f"{self.config.archive_check_interval} seconds"),
            ("Status", "Running"),
        ], emoji="⏰")

    async def stop(self) -> None:
        self.running = False

        if self.task and not self.task.done():
            self.task.cancel()
            try:
                await self.task
            except asyncio.CancelledError:
                pass

        logger.info("Archive Scheduler Stopped")

    # =========================================================================
    # Scheduler Loop
    # =========================================================================

    async def _scheduler_loop(self) -> None:
        """Check for due tasks until stopped; a failed pass never ends the loop."""
        await self.bot.wait_until_ready()

        while self.running:
            try:
                await self.process_due_tasks()
                await asyncio.sleep(self.config.archive_check_interval)
            except asyncio.CancelledError:
                break
            except Exception as e:
                logger.error("Archive Scheduler Error", [
                    ("Error", str(e)[:100]),
                ])
                await asyncio.sleep(self.config.archive_check_interval)

    async def process_due_tasks(self) -> int:
        """
        Run every task whose time has come.

        Returns:
            Number of tasks processed.
        """
        due = await asyncio.to_thread(self.db.get_due_archive_tasks)
        for task in due:
            try:
                await self._run_task(task)
            except Exception as e:
                logger.error("Scheduled Archive Failed", [
                    ("Task ID", str(task["id"])),
                    ("Channel ID", str(task["channel_id"])),
                    ("Type", type(e).__name__),
                    ("Error", str(e)[:100]),
                ])
            await asyncio.to_thread(self.db.delete_archive_task, task["id"])
        return len(due)

    async def _run_task(self, task: ArchiveTaskRecord) -> None:
        guild = self.bot.get_guild(task["guild_id"])
        channel = guild.get_channel(task["channel_id"]) if guild else None
        if guild is None or channel is None:
            logger.warning("Scheduled Archive Skipped", [
                ("Task ID", str(task["id"])),
                ("Reason", "Guild or channel no longer exists"),
            ])
            return

        category = find_category(guild, self.config.archived_category_name)
        if category is None:
            logger.warning("Scheduled Archive Skipped", [
                ("Task ID", str(task["id"])),
                ("Reason", f"No category containing '{self.config.archived_category_name}'"),
            ])
            return

        await move_to_category(channel, category, reason=f"Scheduled archive (task {task['id']})")
        await safe_send(channel, SCHEDULED_ARCHIVE_NOTICE)


__all__ = [
    "ArchiveScheduler",
    "ScheduleDateError",
    "find_category",
    "move_to_category",
    "parse_schedule_date",
]
