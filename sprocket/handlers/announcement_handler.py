"""
Sprocket - Announcement Handler
===============================

Dispatch boundary between Discord interactions and the announcement
workflow.

DESIGN:
    Buttons and modals call into this handler with an already-decoded
    AnnouncementAction. The handler runs the workflow transition, then
    re-renders the panel through the view builders.

    This is the outermost boundary for announcement events: every error
    is caught here and becomes an ephemeral reply. An unknown or expired
    id also re-renders the panel as Expired.

Author: Engineering Club Exec Team
Server: McRoberts Engineering Club
"""

from typing import TYPE_CHECKING, Optional

import discord

from sprocket.core.config import ConfigValidationError, get_config
from sprocket.core.logger import logger
from sprocket.services.announcements import (
    ActionKind,
    AnnouncementAction,
    AnnouncementError,
    AnnouncementNotFound,
    AnnouncementRecord,
    AnnouncementState,
    AnnouncementWorkflow,
    SendOutcome,
)
from sprocket.utils.error_handler import ErrorHandler
from sprocket.utils.retry import safe_fetch_channel
from sprocket.views.announcement import (
    DiscordEditModal,
    EmailEditModal,
    build_control_view,
    build_panel_embed,
    build_post_embed,
    build_preview_embeds,
)

if TYPE_CHECKING:
    from sprocket.bot import SprocketBot


# =============================================================================
# Announcement Handler
# =============================================================================

class AnnouncementHandler:
    """
    Routes announcement interactions to the workflow.

    Attributes:
        bot: Main bot instance.
        workflow: Announcement state machine.
    """

    def __init__(self, bot: "SprocketBot", workflow: AnnouncementWorkflow) -> None:
        self.bot = bot
        self.workflow = workflow
        self.config = get_config()

    # =========================================================================
    # Publishing
    # =========================================================================

    async def publish(self, record: AnnouncementRecord) -> discord.Message:
        """
        Post the Discord payload.

        The configured announcement channel wins; the channel /announce ran
        in is the fallback.

        Raises:
            LookupError: Neither channel can be resolved.
            discord.HTTPException: Discord rejected the post.
        """
        channel_id = self.config.announcement_channel_id or record.channel_id
        channel = await safe_fetch_channel(self.bot, channel_id)
        if channel is None:
            raise LookupError(f"Announcement channel with ID {channel_id} not found")

        author = self.bot.get_user(record.author_id)
        embed = build_post_embed(record, author.name if author else None)

        # Single attempt; a later Send retries a failed Discord side
        message = await channel.send(
            content="@everyone",
            embed=embed,
            allowed_mentions=discord.AllowedMentions(everyone=True),
        )

        logger.tree("Announcement Posted", [
            ("ID", record.id),
            ("Channel", f"#{getattr(channel, 'name', channel_id)} ({channel_id})"),
        ], emoji="📢")

        return message

    # =========================================================================
    # Create
    # =========================================================================

    async def create(
        self,
        interaction: discord.Interaction,
        topic: str,
        details: Optional[str],
    ) -> None:
        """Handle /announce: create a draft and show its panel."""
        try:
            record = self.workflow.create(
                author_id=interaction.user.id,
                topic=topic,
                details=details,
                channel_id=interaction.channel_id,
            )
        except Exception as e:
            await self.report_error(interaction, e, "announce")
            return

        await interaction.response.send_message(
            embed=build_panel_embed(record, record.state),
            view=build_control_view(record, record.state),
            ephemeral=True,
        )

    # =========================================================================
    # Button Dispatch
    # =========================================================================

    async def handle_action(self, interaction: discord.Interaction, action: AnnouncementAction) -> None:
        """Run one control press; never raises."""
        logger.tree("Announcement Button", [
            ("Action", action.kind.value),
            ("ID", action.announcement_id),
            ("User", f"{interaction.user} ({interaction.user.id})"),
        ], emoji="🔘")

        handlers = {
            ActionKind.EDIT_DISCORD: self._open_discord_editor,
            ActionKind.EDIT_EMAIL: self._open_email_editor,
            ActionKind.PREVIEW: self._preview,
            ActionKind.TEST_SEND: self._test_send,
            ActionKind.SEND: self._send,
            ActionKind.CANCEL: self._cancel,
        }

        try:
            await handlers[action.kind](interaction, action.announcement_id)
        except Exception as e:
            await self.report_error(interaction, e, f"announcement.{action.kind.value}")

    async def _open_discord_editor(self, interaction: discord.Interaction, announcement_id: str) -> None:
        record = self.workflow.get_owned(announcement_id, interaction.user.id)
        await interaction.response.send_modal(DiscordEditModal(record))

    async def _open_email_editor(self, interaction: discord.Interaction, announcement_id: str) -> None:
        record = self.workflow.get_owned(announcement_id, interaction.user.id)
        await interaction.response.send_modal(EmailEditModal(record))

    async def _preview(self, interaction: discord.Interaction, announcement_id: str) -> None:
        record = self.workflow.preview(announcement_id, interaction.user.id)
        await interaction.response.send_message(
            content="**👀 Preview** (only you can see this)",
            embeds=build_preview_embeds(record, interaction.user.name),
            ephemeral=True,
        )

    async def _test_send(self, interaction: discord.Interaction, announcement_id: str) -> None:
        self.workflow.get_owned(announcement_id, interaction.user.id)
        await interaction.response.defer(ephemeral=True, thinking=True)

        await self.workflow.test_send(announcement_id, interaction.user.id)
        await interaction.followup.send(
            f"✅ Test email sent successfully to {self.config.test_recipient}!",
            ephemeral=True,
        )

    async def _send(self, interaction: discord.Interaction, announcement_id: str) -> None:
        record = self.workflow.get_owned(announcement_id, interaction.user.id)

        await interaction.response.edit_message(
            embed=build_panel_embed(record, AnnouncementState.SENDING),
            view=build_control_view(record, AnnouncementState.SENDING),
        )

        try:
            outcome = await self.workflow.send(announcement_id, interaction.user.id)
        except Exception:
            # Put the usable panel back before reporting the error
            await self._refresh_panel(interaction, announcement_id)
            raise

        await interaction.edit_original_response(
            embed=build_panel_embed(outcome.record, outcome.state, self._outcome_notice(outcome)),
            view=build_control_view(outcome.record, outcome.state),
        )
        await interaction.followup.send(self._outcome_message(outcome), ephemeral=True)

    async def _cancel(self, interaction: discord.Interaction, announcement_id: str) -> None:
        record = self.workflow.cancel(announcement_id, interaction.user.id)
        await interaction.response.edit_message(
            embed=build_panel_embed(record, AnnouncementState.CANCELLED),
            view=None,
        )

    # =========================================================================
    # Modal Submissions
    # =========================================================================

    async def submit_discord_edit(self, interaction: discord.Interaction, announcement_id: str, body: str) -> None:
        try:
            record = self.workflow.edit_discord(announcement_id, interaction.user.id, body)
            await self._show_updated(interaction, record, "✏️ Discord content updated!")
        except Exception as e:
            await self.report_error(interaction, e, "announcement.submit_discord_edit")

    async def submit_email_edit(
        self,
        interaction: discord.Interaction,
        announcement_id: str,
        subject: str,
        body: str,
    ) -> None:
        try:
            record = self.workflow.edit_email(announcement_id, interaction.user.id, subject, body)
            await self._show_updated(interaction, record, "✏️ Email content updated!")
        except Exception as e:
            await self.report_error(interaction, e, "announcement.submit_email_edit")

    async def _show_updated(self, interaction: discord.Interaction, record: AnnouncementRecord, notice: str) -> None:
        await interaction.response.edit_message(
            embed=build_panel_embed(record, record.state, notice),
            view=build_control_view(record, record.state),
        )

    # =========================================================================
    # Rendering Helpers
    # =========================================================================

    async def _refresh_panel(self, interaction: discord.Interaction, announcement_id: str) -> None:
        record = self.workflow.store.get(announcement_id)
        state = record.state if record else AnnouncementState.EXPIRED
        try:
            await interaction.edit_original_response(
                embed=build_panel_embed(record, state),
                view=build_control_view(record, state),
            )
        except discord.HTTPException as e:
            logger.warning("Announcement Panel Refresh Failed", [
                ("ID", announcement_id),
                ("Error", str(e)[:100]),
            ])

    @staticmethod
    def _outcome_notice(outcome: SendOutcome) -> Optional[str]:
        if outcome.state == AnnouncementState.SENT:
            return None
        return "Press the retry button to try the failed side again."

    @staticmethod
    def _outcome_message(outcome: SendOutcome) -> str:
        lines = []
        if "discord" in outcome.attempted:
            if outcome.discord_error:
                lines.append(f"❌ Failed to send Discord announcement: {outcome.discord_error}")
            else:
                lines.append("✅ Discord announcement sent successfully!")
        if "email" in outcome.attempted:
            if outcome.email_error:
                lines.append(f"❌ Failed to send emails: {outcome.email_error}")
            elif outcome.email_result:
                lines.append(
                    f"✅ Email announcement sent successfully to "
                    f"{len(outcome.email_result.delivered)} recipients!"
                )
        lines.extend(f"⚠️ {warning}" for warning in outcome.warnings)
        return "\n".join(lines)[:2000]

    # =========================================================================
    # Error Boundary
    # =========================================================================

    async def report_error(
        self,
        interaction: discord.Interaction,
        error: Exception,
        location: str,
    ) -> None:
        """
        Turn any handler error into an ephemeral reply.

        Expired ids also flip the panel to Expired when the interaction
        came from the panel itself.
        """
        if isinstance(error, AnnouncementError):
            message = error.user_message
            logger.tree("Announcement Rejected", [
                ("Location", location),
                ("Reason", str(error)),
                ("User", f"{interaction.user} ({interaction.user.id})"),
            ], emoji="🚫")
        elif isinstance(error, ConfigValidationError):
            message = f"⚙️ This feature is not configured: {error}"
            ErrorHandler.handle(error, location, interaction=interaction)
        else:
            message = f"❌ Something went wrong: {str(error)[:150]}"
            ErrorHandler.handle(error, location, critical=True, interaction=interaction)

        try:
            if isinstance(error, AnnouncementNotFound) and interaction.message and not interaction.response.is_done():
                await interaction.response.edit_message(
                    embed=build_panel_embed(None, AnnouncementState.EXPIRED),
                    view=None,
                )
                await interaction.followup.send(message, ephemeral=True)
            elif interaction.response.is_done():
                await interaction.followup.send(message, ephemeral=True)
            else:
                await interaction.response.send_message(message, ephemeral=True)
        except discord.HTTPException as e:
            logger.warning("Announcement Error Reply Failed", [
                ("Location", location),
                ("Error", str(e)[:100]),
            ])


__all__ = ["AnnouncementHandler"]
