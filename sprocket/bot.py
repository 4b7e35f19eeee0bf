"""
Sprocket - Main Bot Class
=========================

Core Discord client for the McRoberts Engineering Club server.

Features:
- Announcement drafting with Discord + email delivery
- Channel archiving, immediate or scheduled
- Introduction role assignment
- Encouragement replies and a few utility commands
- Health check HTTP endpoint

Author: Engineering Club Exec Team
Server: McRoberts Engineering Club
"""

from datetime import datetime
from typing import Optional

import discord
from discord import app_commands
from discord.ext import commands

from sprocket.core.config import get_config
from sprocket.core.database import get_db
from sprocket.core.logger import logger
from sprocket.services.announcements import AnnouncementError
from sprocket.utils.error_handler import ErrorHandler


# =============================================================================
# SprocketBot Class
# =============================================================================

class SprocketBot(commands.Bot):
    """
    Main Discord bot class for Sprocket.

    DESIGN: Central orchestrator that:
    - Holds references to all services for cross-service communication
    - Manages bot lifecycle (startup, shutdown)
    - Turns uncaught app command errors into ephemeral replies

    SERVICE INITIALIZATION ORDER:
    1. setup_hook (before on_ready):
       - Announcement store (loads persisted drafts), gateway, workflow, handler
       - Introduction handler, encouragement responder
       - Command and event cog loading
       - Persistent announcement buttons
       - Command tree syncing

    2. on_ready:
       - Announcement sweeper
       - Archive scheduler
       - Health Check Server
    """

    # =========================================================================
    # Initialization
    # =========================================================================

    def __init__(self) -> None:
        """Initialize the bot with necessary intents and configuration."""
        self.config = get_config()

        intents = discord.Intents.default()
        intents.message_content = True
        intents.members = True
        intents.guilds = True

        super().__init__(
            command_prefix="!",
            intents=intents,
            help_command=None,
        )

        self.db = get_db()
        self.start_time: datetime = datetime.now()

        # Service placeholders
        self.announcement_store = None
        self.announcement_workflow = None
        self.announcement_handler = None
        self.announcement_sweeper = None
        self.archive_scheduler = None
        self.introduction_handler = None
        self.encouragement_responder = None
        self.health_server = None

        # Ready state guard
        self._ready_initialized: bool = False
        self._shutting_down: bool = False

        self.tree.on_error = self.on_app_command_error

        logger.info("Bot Instance Created")

    # =========================================================================
    # Setup Hook
    # =========================================================================

    async def setup_hook(self) -> None:
        """Build handlers, load cogs and sync commands before on_ready."""
        self._init_handlers()

        from sprocket.commands import COMMAND_COGS
        for cog in COMMAND_COGS:
            try:
                await self.load_extension(cog)
                logger.info(f"Cog Loaded: {cog.split('.')[-1]}")
            except Exception as e:
                logger.error("Failed to Load Cog", [("Cog", cog), ("Error", str(e))])

        from sprocket.events import EVENT_COGS
        for cog in EVENT_COGS:
            try:
                await self.load_extension(cog)
                logger.debug(f"Event Cog Loaded: {cog.split('.')[-1]}")
            except Exception as e:
                logger.error("Failed to Load Event Cog", [("Cog", cog), ("Error", str(e))])

        # Register persistent views
        from sprocket.views import setup_announcement_views
        setup_announcement_views(self)

        await self._sync_commands()

    def _init_handlers(self) -> None:
        """Create the announcement stack and message handlers."""
        from sprocket.services.announcements import AnnouncementStore, AnnouncementWorkflow
        from sprocket.services.email import EmailGateway
        from sprocket.handlers import AnnouncementHandler, EncouragementResponder, IntroductionHandler

        self.announcement_store = AnnouncementStore(
            self.db,
            lifespan_seconds=self.config.announcement_lifespan_seconds,
        )
        loaded = self.announcement_store.load()

        self.announcement_workflow = AnnouncementWorkflow(
            store=self.announcement_store,
            gateway=EmailGateway(self.config),
            publisher=self._publish_announcement,
        )
        self.announcement_handler = AnnouncementHandler(self, self.announcement_workflow)
        self.introduction_handler = IntroductionHandler()
        self.encouragement_responder = EncouragementResponder(self.db)

        logger.tree("Handlers Initialized", [
            ("Pending Announcements", str(loaded)),
            ("Email", "Configured" if self.config.email_configured else "Not configured"),
            ("Sheets", "Configured" if self.config.sheets_configured else "Not configured"),
        ], emoji="🧰")

    async def _publish_announcement(self, record) -> discord.Message:
        return await self.announcement_handler.publish(record)

    async def _sync_commands(self) -> None:
        try:
            if self.config.guild_id:
                guild = discord.Object(id=self.config.guild_id)
                self.tree.copy_global_to(guild=guild)
                synced = await self.tree.sync(guild=guild)
                scope = f"Guild {self.config.guild_id}"
            else:
                synced = await self.tree.sync()
                scope = "Global"
            logger.tree("Commands Synced", [
                ("Count", str(len(synced))),
                ("Scope", scope),
            ], emoji="✅")
        except Exception as e:
            logger.error("Command Sync Failed", [("Error", str(e))])

    # =========================================================================
    # On Ready
    # =========================================================================

    async def on_ready(self) -> None:
        """Start background services when the bot is ready."""
        if self._ready_initialized:
            logger.info("Bot Reconnected (skipping re-initialization)")
            return

        self._ready_initialized = True

        if not self.user:
            return

        logger.tree("BOT ONLINE", [
            ("Name", self.user.name),
            ("ID", str(self.user.id)),
            ("Guilds", str(len(self.guilds))),
        ], emoji="🚀")

        await self._init_services()

        logger.tree("SPROCKET READY", [
            ("Pending Announcements", str(self.announcement_store.count())),
            ("Announcement Sweeper", "Running" if self.announcement_sweeper else "Stopped"),
            ("Archive Scheduler", "Running" if self.archive_scheduler else "Stopped"),
            ("Health Server", "Running" if self.health_server else "Stopped"),
        ], emoji="⚙️")

    # =========================================================================
    # Service Initialization
    # =========================================================================

    async def _init_services(self) -> None:
        """Start background services after Discord connection."""
        try:
            from sprocket.services.announcements import AnnouncementSweeper
            self.announcement_sweeper = AnnouncementSweeper(self.announcement_store)
            await self.announcement_sweeper.start()

            from sprocket.services.archive import ArchiveScheduler
            self.archive_scheduler = ArchiveScheduler(self)
            await self.archive_scheduler.start()

            from sprocket.core.health import HealthCheckServer
            self.health_server = HealthCheckServer(self, port=self.config.port)
            await self.health_server.start()

        except Exception as e:
            ErrorHandler.handle(e, location="SprocketBot._init_services", critical=True)

    # =========================================================================
    # App Command Errors
    # =========================================================================

    async def on_app_command_error(
        self,
        interaction: discord.Interaction,
        error: app_commands.AppCommandError,
    ) -> None:
        """Outermost boundary for slash commands: always answer ephemerally."""
        original: Exception = getattr(error, "original", error)

        if isinstance(error, app_commands.CheckFailure) and interaction.response.is_done():
            # interaction_check already replied
            return

        if isinstance(original, AnnouncementError):
            message = original.user_message
        elif isinstance(error, app_commands.MissingPermissions):
            message = "❌ You don't have permission to use this command."
        elif isinstance(error, app_commands.CheckFailure):
            message = "❌ You can't use this command here."
        else:
            command = interaction.command.qualified_name if interaction.command else "unknown"
            ErrorHandler.handle(original, location=f"command:{command}", critical=True, interaction=interaction)
            message = f"❌ Something went wrong: {str(original)[:150]}"

        try:
            if interaction.response.is_done():
                await interaction.followup.send(message, ephemeral=True)
            else:
                await interaction.response.send_message(message, ephemeral=True)
        except discord.HTTPException as e:
            logger.warning(f"Failed to send command error reply: {e}")

    # =========================================================================
    # Shutdown
    # =========================================================================

    async def shutdown(self) -> None:
        """Stop services, close the database and disconnect. Runs once."""
        if self._shutting_down:
            return
        self._shutting_down = True

        logger.info("Initiating Graceful Shutdown")

        if self.announcement_sweeper:
            await self.announcement_sweeper.stop()

        if self.archive_scheduler:
            await self.archive_scheduler.stop()

        if self.health_server:
            await self.health_server.stop()

        self.db.close()
        await super().close()

        logger.tree("SHUTDOWN COMPLETE", [
            ("Uptime", str(datetime.now() - self.start_time)),
        ], emoji="🛑")

    async def close(self) -> None:
        """Override close to ensure proper shutdown."""
        await self.shutdown()


# =============================================================================
# Module Export
# =============================================================================

__all__ = ["SprocketBot"]
