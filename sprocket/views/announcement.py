"""
Sprocket - Announcement Views
=============================

Embeds, buttons and modals for the announcement control panel.

DESIGN:
    Everything here is a projection of (record, state). Nothing in this
    module reads or writes the store; button and modal callbacks hand a
    decoded AnnouncementAction to bot.announcement_handler.

    Buttons are DynamicItems keyed by "ann:<kind>:<id>", so a panel keeps
    working after a restart as long as its record is still live.

Author: Engineering Club Exec Team
Server: McRoberts Engineering Club
"""

from typing import TYPE_CHECKING, List, Optional

import discord

from sprocket.core.config import EmbedColors
from sprocket.services.announcements.actions import (
    ACTION_TEMPLATE,
    ActionKind,
    AnnouncementAction,
)
from sprocket.services.announcements.models import (
    AnnouncementRecord,
    AnnouncementState,
    DeliveryStatus,
)

if TYPE_CHECKING:
    from sprocket.bot import SprocketBot


# =============================================================================
# Constants
# =============================================================================

MAX_BODY_LENGTH = 4000
MAX_SUBJECT_LENGTH = 200
FIELD_PREVIEW_LENGTH = 1000
ERROR_PREVIEW_LENGTH = 500
NOTICE_LENGTH = 1000

STATE_COLORS = {
    AnnouncementState.DRAFT: EmbedColors.INFO,
    AnnouncementState.SENDING: EmbedColors.DRAFT,
    AnnouncementState.SENT: EmbedColors.SUCCESS,
    AnnouncementState.PARTIALLY_SENT: EmbedColors.WARNING,
    AnnouncementState.FAILED: EmbedColors.ERROR,
    AnnouncementState.CANCELLED: EmbedColors.INACTIVE,
    AnnouncementState.EXPIRED: EmbedColors.INACTIVE,
}

STATE_LABELS = {
    AnnouncementState.DRAFT: "📝 Draft",
    AnnouncementState.SENDING: "📤 Sending...",
    AnnouncementState.SENT: "✅ Sent",
    AnnouncementState.PARTIALLY_SENT: "⚠️ Partially sent",
    AnnouncementState.FAILED: "❌ Failed",
    AnnouncementState.CANCELLED: "🗑️ Cancelled",
    AnnouncementState.EXPIRED: "⌛ Expired",
}

STATUS_ICONS = {
    DeliveryStatus.PENDING: "⏳ Pending",
    DeliveryStatus.SENT: "✅ Sent",
    DeliveryStatus.FAILED: "❌ Failed",
}


def _code_block(text: str, limit: int = FIELD_PREVIEW_LENGTH) -> str:
    # Result is at most limit + 6 characters, under the 1024 field cap
    if not text:
        return "*No content*"
    clipped = text if len(text) <= limit else text[:limit - 3] + "..."
    return f"```{clipped.replace('```', 'ʼʼʼ')}```"


# =============================================================================
# Embeds
# =============================================================================

def build_panel_embed(
    record: Optional[AnnouncementRecord],
    state: AnnouncementState,
    notice: Optional[str] = None,
) -> discord.Embed:
    """
    Render the control panel for a record in a given state.

    Args:
        record: The announcement, or None when it has expired.
        state: State to show.
        notice: Optional extra line under the description.

    Returns:
        Panel embed.
    """
    if record is None:
        embed = discord.Embed(
            title="📢 Announcement Control Panel",
            description="This announcement has expired. Run `/announce` to start again.",
            color=STATE_COLORS[AnnouncementState.EXPIRED],
        )
        embed.add_field(name="Status", value=STATE_LABELS[AnnouncementState.EXPIRED], inline=False)
        return embed

    if state.is_terminal:
        description = "This announcement is closed."
    else:
        description = "Use the buttons below to edit, preview, test, or send your announcement."
    if notice:
        description = f"{description}\n\n{notice[:NOTICE_LENGTH]}"

    embed = discord.Embed(
        title="📢 Announcement Control Panel",
        description=description,
        color=STATE_COLORS[state],
        timestamp=discord.utils.utcnow(),
    )
    embed.add_field(name="Status", value=STATE_LABELS[state], inline=True)
    embed.add_field(name="Discord", value=STATUS_ICONS[record.discord_status], inline=True)
    embed.add_field(name="Email", value=STATUS_ICONS[record.email_status], inline=True)
    embed.add_field(name="📝 Topic", value=_code_block(record.topic, MAX_SUBJECT_LENGTH), inline=False)
    embed.add_field(name="💬 Discord Content", value=_code_block(record.discord_body), inline=False)
    embed.add_field(name="📨 Email Subject", value=_code_block(record.email_subject, MAX_SUBJECT_LENGTH), inline=False)
    embed.add_field(name="📧 Email Content", value=_code_block(record.email_body), inline=False)

    if record.discord_status == DeliveryStatus.FAILED and record.last_error_discord:
        embed.add_field(name="Discord Error", value=record.last_error_discord[:ERROR_PREVIEW_LENGTH], inline=False)
    if record.email_status == DeliveryStatus.FAILED and record.last_error_email:
        embed.add_field(name="Email Error", value=record.last_error_email[:ERROR_PREVIEW_LENGTH], inline=False)

    embed.set_footer(text=f"ID: {record.id}")
    return embed


def build_post_embed(record: AnnouncementRecord, author_name: Optional[str] = None) -> discord.Embed:
    """Embed posted to the announcement channel."""
    embed = discord.Embed(
        title=f"📢 {record.topic}"[:256],
        description=record.discord_body[:4096],
        color=EmbedColors.DRAFT,
        timestamp=discord.utils.utcnow(),
    )
    if author_name:
        embed.set_footer(text=f"Announced by {author_name}")
    return embed


def build_preview_embeds(record: AnnouncementRecord, author_name: Optional[str] = None) -> List[discord.Embed]:
    """Discord post as it will look, followed by the email subject and body."""
    email_embed = discord.Embed(
        title="📧 Email Preview",
        color=EmbedColors.INFO,
    )
    email_embed.add_field(name="Subject", value=record.email_subject[:1024], inline=False)
    email_embed.add_field(name="Body", value=_code_block(record.email_body), inline=False)
    return [build_post_embed(record, author_name), email_embed]


# =============================================================================
# Dynamic Buttons
# =============================================================================

BUTTON_STYLES = {
    ActionKind.EDIT_DISCORD: ("Edit Discord", discord.ButtonStyle.primary, "💬", 0),
    ActionKind.EDIT_EMAIL: ("Edit Email", discord.ButtonStyle.primary, "📧", 0),
    ActionKind.PREVIEW: ("Preview", discord.ButtonStyle.secondary, "👀", 0),
    ActionKind.TEST_SEND: ("Test Email", discord.ButtonStyle.secondary, "🧪", 0),
    ActionKind.SEND: ("Send", discord.ButtonStyle.success, "📤", 1),
    ActionKind.CANCEL: ("Cancel", discord.ButtonStyle.danger, "🗑️", 1),
}


class AnnouncementButton(discord.ui.DynamicItem[discord.ui.Button], template=ACTION_TEMPLATE):
    """Persistent control panel button."""

    def __init__(self, action: AnnouncementAction, label: Optional[str] = None, disabled: bool = False):
        default_label, style, emoji, row = BUTTON_STYLES[action.kind]
        super().__init__(
            discord.ui.Button(
                label=label or default_label,
                style=style,
                emoji=emoji,
                custom_id=action.custom_id,
                row=row,
                disabled=disabled,
            )
        )
        self.action = action

    @classmethod
    async def from_custom_id(
        cls,
        interaction: discord.Interaction,
        item: discord.ui.Button,
        match,
    ) -> "AnnouncementButton":
        return cls(AnnouncementAction.from_match(match))

    async def callback(self, interaction: discord.Interaction) -> None:
        bot: "SprocketBot" = interaction.client
        handler = getattr(bot, "announcement_handler", None)
        if handler is None:
            await interaction.response.send_message(
                "Announcements are not available right now.",
                ephemeral=True,
            )
            return
        await handler.handle_action(interaction, self.action)


def build_control_view(record: Optional[AnnouncementRecord], state: AnnouncementState) -> Optional[discord.ui.View]:
    """
    Controls for a state, or None when the panel is closed.

    SENDING shows the buttons disabled; FAILED and PARTIALLY_SENT relabel
    Send as a retry of what is still outstanding.
    """
    if record is None or state.is_terminal:
        return None

    view = discord.ui.View(timeout=None)
    disabled = state == AnnouncementState.SENDING

    for kind in ActionKind:
        label = None
        if kind == ActionKind.SEND and state in (AnnouncementState.FAILED, AnnouncementState.PARTIALLY_SENT):
            outstanding = [
                name for name, status in (
                    ("Discord", record.discord_status),
                    ("Email", record.email_status),
                ) if status != DeliveryStatus.SENT
            ]
            label = f"Retry {' + '.join(outstanding)}"
        view.add_item(AnnouncementButton(
            AnnouncementAction(kind, record.id),
            label=label,
            disabled=disabled,
        ))
    return view


# =============================================================================
# Modals
# =============================================================================

class DiscordEditModal(discord.ui.Modal, title="Edit Discord Content"):
    """Pre-filled form for the Discord payload."""

    def __init__(self, record: AnnouncementRecord):
        super().__init__()
        self.announcement_id = record.id

        self.content = discord.ui.TextInput(
            label="Discord Message Content",
            style=discord.TextStyle.paragraph,
            default=record.discord_body[:MAX_BODY_LENGTH],
            required=True,
            min_length=1,
            max_length=MAX_BODY_LENGTH,
        )
        self.add_item(self.content)

    async def on_submit(self, interaction: discord.Interaction) -> None:
        bot: "SprocketBot" = interaction.client
        await bot.announcement_handler.submit_discord_edit(
            interaction, self.announcement_id, self.content.value
        )

    async def on_error(self, interaction: discord.Interaction, error: Exception) -> None:
        bot: "SprocketBot" = interaction.client
        await bot.announcement_handler.report_error(interaction, error, "DiscordEditModal")


class EmailEditModal(discord.ui.Modal, title="Edit Email Content"):
    """Pre-filled form for the email subject and body."""

    def __init__(self, record: AnnouncementRecord):
        super().__init__()
        self.announcement_id = record.id

        self.subject = discord.ui.TextInput(
            label="Email Subject",
            style=discord.TextStyle.short,
            default=record.email_subject[:MAX_SUBJECT_LENGTH],
            required=True,
            min_length=1,
            max_length=MAX_SUBJECT_LENGTH,
        )
        self.add_item(self.subject)

        self.body = discord.ui.TextInput(
            label="Email Body Content",
            style=discord.TextStyle.paragraph,
            default=record.email_body[:MAX_BODY_LENGTH],
            required=True,
            min_length=1,
            max_length=MAX_BODY_LENGTH,
        )
        self.add_item(self.body)

    async def on_submit(self, interaction: discord.Interaction) -> None:
        bot: "SprocketBot" = interaction.client
        await bot.announcement_handler.submit_email_edit(
            interaction, self.announcement_id, self.subject.value, self.body.value
        )

    async def on_error(self, interaction: discord.Interaction, error: Exception) -> None:
        bot: "SprocketBot" = interaction.client
        await bot.announcement_handler.report_error(interaction, error, "EmailEditModal")


# =============================================================================
# Setup Function (for persistent views)
# =============================================================================

def setup_announcement_views(bot: "SprocketBot") -> None:
    """Register the announcement button so panels survive restarts."""
    bot.add_dynamic_items(AnnouncementButton)


__all__ = [
    "AnnouncementButton",
    "DiscordEditModal",
    "EmailEditModal",
    "build_control_view",
    "build_panel_embed",
    "build_post_embed",
    "build_preview_embeds",
    "setup_announcement_views",
]
