"""
Sprocket - Command Helper Tests
===============================

Tests for the pure helpers behind the slash commands.
"""

import asyncio
from unittest.mock import MagicMock

import discord
import pytest
from discord import app_commands

from sprocket.bot import SprocketBot
from sprocket.commands.announce import AnnounceCog
from sprocket.commands.avatar import (
    DEFAULT_AVATAR_URL,
    AvatarDownloadError,
    describe_avatar_error,
    resolve_avatar_url,
)
from sprocket.commands.encourage import format_encouragement_list
from sprocket.commands.fun import LFS_RESPONSES
from sprocket.commands.roles import can_assign
from sprocket.commands.userinfo import MAX_ROLES_SHOWN, build_userinfo_embed
from sprocket.handlers.encouragement import STARTER_ENCOURAGEMENTS


def http_error(cls, status, message):
    response = MagicMock(status=status, reason="error")
    return cls(response, message)


def make_role(position, mention="<@&1>"):
    role = MagicMock()
    role.position = position
    role.mention = mention
    role.is_default = MagicMock(return_value=False)
    return role


class TestAvatarSource:
    """Tests for picking the avatar image."""

    def test_attachment_wins(self):
        """Test an uploaded image is used over the URL."""
        image = MagicMock(content_type="image/png", url="https://cdn/x.png")
        assert resolve_avatar_url("https://other", image) == "https://cdn/x.png"

    def test_non_image_attachment(self):
        """Test a non-image upload is refused."""
        image = MagicMock(content_type="application/pdf", url="https://cdn/x.pdf")
        with pytest.raises(ValueError, match="image file"):
            resolve_avatar_url(None, image)

    @pytest.mark.parametrize("url", [None, "", "default", "DEFAULT "])
    def test_default_gif(self, url):
        """Test no URL or 'default' picks the club GIF."""
        assert resolve_avatar_url(url, None) == DEFAULT_AVATAR_URL

    def test_explicit_url(self):
        assert resolve_avatar_url(" https://x/y.png ", None) == "https://x/y.png"


class TestAvatarErrors:
    """Tests for avatar failure messages."""

    def test_timeout(self):
        assert "Timed out" in describe_avatar_error(asyncio.TimeoutError())

    def test_download(self):
        assert describe_avatar_error(AvatarDownloadError("HTTP 404")) == "Couldn't download the image: HTTP 404"

    def test_invalid_form_body(self):
        """Test code 50035 explains the accepted formats."""
        error = http_error(discord.HTTPException, 400, {"code": 50035, "message": "Invalid Form Body"})
        assert "PNG, JPG, or GIF" in describe_avatar_error(error)

    def test_forbidden(self):
        error = http_error(discord.Forbidden, 403, {"code": 50013, "message": "Missing Permissions"})
        assert describe_avatar_error(error) == "Bot doesn't have permission to change avatar"

    def test_rate_limited(self):
        """Test a 429 explains the hourly avatar limit."""
        error = http_error(discord.HTTPException, 429, "You are changing your avatar too fast")
        assert "twice per hour" in describe_avatar_error(error)

    def test_other(self):
        assert describe_avatar_error(RuntimeError("boom")) == "Failed to update avatar"


class TestEncouragementList:
    """Tests for /encourage list output."""

    def test_numbers_added_lines(self):
        """Test built-ins are bullets and added lines are numbered from 1."""
        text = format_encouragement_list([{"message": "You rock"}, {"message": "Keep going"}])

        for line in STARTER_ENCOURAGEMENTS:
            assert f"• {line}" in text
        assert "1. You rock" in text
        assert "2. Keep going" in text

    def test_nothing_added(self):
        assert "None yet" in format_encouragement_list([])

    def test_truncated_to_message_limit(self):
        """Test a long list still fits in one Discord message."""
        text = format_encouragement_list([{"message": "x" * 500}] * 10)
        assert len(text) <= 2000


class TestRoleHierarchy:
    """Tests for the role assignment check."""

    @pytest.mark.parametrize("role_position,expected", [(4, True), (5, False), (6, False)])
    def test_only_below_top_role(self, role_position, expected):
        """Test roles at or above the invoker's top role are refused."""
        invoker = MagicMock()
        invoker.top_role.position = 5
        assert can_assign(invoker, make_role(role_position)) is expected


class TestUserInfo:
    """Tests for the /userinfo embed."""

    def test_fields(self, mock_discord_member):
        """Test id, dates and roles are shown."""
        mock_discord_member.color = discord.Colour.default()
        mock_discord_member.roles = [make_role(1, "<@&10>"), make_role(2, "<@&20>")]

        embed = build_userinfo_embed(mock_discord_member)
        fields = {f.name: f.value for f in embed.fields}

        assert fields["ID"] == "123456789"
        assert fields["Account Created"].startswith("<t:")
        assert "Joined Server" in fields
        assert fields["Roles (2)"] == "<@&20> <@&10>"

    def test_role_cap(self, mock_discord_member):
        """Test long role lists are capped with a count of the rest."""
        mock_discord_member.color = discord.Colour.default()
        mock_discord_member.roles = [make_role(i) for i in range(MAX_ROLES_SHOWN + 5)]

        embed = build_userinfo_embed(mock_discord_member)
        roles_field = embed.fields[-1]

        assert roles_field.name == f"Roles ({MAX_ROLES_SHOWN + 5})"
        assert roles_field.value.endswith("+5 more")


class TestLfs:
    def test_responses_available(self):
        assert len(LFS_RESPONSES) > 1
        assert all(isinstance(line, str) and line for line in LFS_RESPONSES)


class TestAnnouncePermissions:
    """Tests for the /announce permission gate."""

    def test_hidden_from_members_by_default(self):
        assert AnnounceCog.announce.default_permissions.manage_messages is True

    def test_member_without_manage_messages_rejected(self, mock_discord_interaction):
        """Test the runtime check refuses members lacking Manage Messages."""
        mock_discord_interaction.permissions = discord.Permissions(send_messages=True)

        with pytest.raises(app_commands.MissingPermissions) as exc_info:
            AnnounceCog.announce.checks[0](mock_discord_interaction)
        assert exc_info.value.missing_permissions == ["manage_messages"]

    def test_member_with_manage_messages_allowed(self, mock_discord_interaction):
        mock_discord_interaction.permissions = discord.Permissions(manage_messages=True)

        assert AnnounceCog.announce.checks[0](mock_discord_interaction) is True

    @pytest.mark.asyncio
    async def test_rejection_reply_is_ephemeral(self, mock_discord_interaction):
        """Test the tree error hook turns the failed check into a private reply."""
        error = app_commands.MissingPermissions(["manage_messages"])

        await SprocketBot.on_app_command_error(MagicMock(), mock_discord_interaction, error)

        args, kwargs = mock_discord_interaction.response.send_message.await_args
        assert "don't have permission" in args[0]
        assert kwargs["ephemeral"] is True
