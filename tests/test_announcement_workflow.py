"""
Sprocket - Announcement Workflow Tests
======================================

Tests for the announcement state machine: ownership, edits, sending with
per-channel retry, cancel and expiry.
"""

import aiosmtplib
import pytest

from sprocket.services.announcements import (
    AnnouncementBusy,
    AnnouncementForbidden,
    AnnouncementNotFound,
    AnnouncementState,
    DeliveryStatus,
    InvalidAnnouncement,
)
from sprocket.services.email import EmailConfigError, SendFailed


AUTHOR = 42
OTHER = 99


class TestCreateAndEdit:
    """Tests for drafting."""

    def test_create_derives_payloads(self, workflow):
        """Test topic and details feed both payloads."""
        record = workflow.create(AUTHOR, "Meeting", "Room 101 at noon", channel_id=5)

        assert record.discord_body == "**Meeting**\nRoom 101 at noon"
        assert record.email_subject == "Meeting"
        assert record.email_body == "Room 101 at noon"
        assert record.channel_id == 5
        assert workflow.state_of(record.id) == AnnouncementState.DRAFT

    def test_create_without_details(self, workflow):
        """Test the topic doubles as the email body when details are missing."""
        record = workflow.create(AUTHOR, "Meeting")
        assert record.discord_body == "**Meeting**"
        assert record.email_body == "Meeting"

    def test_create_blank_topic_rejected(self, workflow):
        """Test a blank topic is refused."""
        with pytest.raises(InvalidAnnouncement):
            workflow.create(AUTHOR, "   ")

    def test_edit_email_leaves_discord_untouched(self, workflow):
        """Test the email edit only changes email fields."""
        record = workflow.create(AUTHOR, "Meeting", "Room 101")

        updated = workflow.edit_email(record.id, AUTHOR, "Room Change", "Now in 202")
        assert updated.email_subject == "Room Change"
        assert updated.email_body == "Now in 202"
        assert updated.discord_body == record.discord_body

    def test_edit_discord_leaves_email_untouched(self, workflow):
        """Test the Discord edit only changes the Discord body."""
        record = workflow.create(AUTHOR, "Meeting", "Room 101")

        updated = workflow.edit_discord(record.id, AUTHOR, "New text")
        assert updated.discord_body == "New text"
        assert updated.email_subject == "Meeting"

    def test_edit_empty_rejected(self, workflow):
        """Test empty edits are refused and nothing changes."""
        record = workflow.create(AUTHOR, "Meeting", "Room 101")

        with pytest.raises(InvalidAnnouncement):
            workflow.edit_discord(record.id, AUTHOR, "  ")
        with pytest.raises(InvalidAnnouncement):
            workflow.edit_email(record.id, AUTHOR, "", "body")
        assert workflow.preview(record.id, AUTHOR).discord_body == record.discord_body


class TestOwnership:
    """Tests for author-only access."""

    def test_other_user_cannot_edit(self, workflow):
        """Test a non-author edit is forbidden and changes nothing."""
        record = workflow.create(AUTHOR, "Meeting", "Room 101")

        with pytest.raises(AnnouncementForbidden):
            workflow.edit_email(record.id, OTHER, "Hacked", "Hacked")
        assert workflow.preview(record.id, AUTHOR).email_subject == "Meeting"

    def test_other_user_cannot_preview(self, workflow):
        """Test preview is owner-only as well."""
        record = workflow.create(AUTHOR, "Meeting")
        with pytest.raises(AnnouncementForbidden):
            workflow.preview(record.id, OTHER)

    @pytest.mark.asyncio
    async def test_other_user_cannot_send(self, workflow, publisher, fake_transport):
        """Test a non-author send delivers nothing."""
        record = workflow.create(AUTHOR, "Meeting")

        with pytest.raises(AnnouncementForbidden):
            await workflow.send(record.id, OTHER)
        publisher.assert_not_called()
        assert fake_transport.calls == []

    def test_other_user_cannot_cancel(self, workflow):
        """Test a non-author cancel leaves the draft in place."""
        record = workflow.create(AUTHOR, "Meeting")
        with pytest.raises(AnnouncementForbidden):
            workflow.cancel(record.id, OTHER)
        assert workflow.state_of(record.id) == AnnouncementState.DRAFT


class TestSend:
    """Tests for delivery."""

    @pytest.mark.asyncio
    async def test_send_both_succeed(self, workflow, store, publisher, fake_transport):
        """Test a full success removes the record."""
        record = workflow.create(AUTHOR, "Meeting", "Room 101")

        outcome = await workflow.send(record.id, AUTHOR)

        assert outcome.state == AnnouncementState.SENT
        assert outcome.attempted == ["discord", "email"]
        assert outcome.email_result.delivered == ["a@x.com", "b@x.com"]
        publisher.assert_awaited_once()
        assert len(fake_transport.calls) == 1
        assert store.get(record.id) is None

    @pytest.mark.asyncio
    async def test_discord_fails_email_succeeds(self, workflow, store, publisher):
        """Test a Discord failure keeps the record as partially sent."""
        publisher.side_effect = LookupError("Announcement channel with ID 1 not found")
        record = workflow.create(AUTHOR, "Meeting")

        outcome = await workflow.send(record.id, AUTHOR)

        assert outcome.state == AnnouncementState.PARTIALLY_SENT
        assert "not found" in outcome.discord_error
        kept = store.get(record.id)
        assert kept.discord_status == DeliveryStatus.FAILED
        assert kept.email_status == DeliveryStatus.SENT

    @pytest.mark.asyncio
    async def test_retry_only_resends_failed_side(self, workflow, store, publisher, fake_transport):
        """Test a retry after a Discord failure does not email twice."""
        publisher.side_effect = [LookupError("channel missing"), None]
        record = workflow.create(AUTHOR, "Meeting")

        await workflow.send(record.id, AUTHOR)
        outcome = await workflow.send(record.id, AUTHOR)

        assert outcome.state == AnnouncementState.SENT
        assert outcome.attempted == ["discord"]
        assert publisher.await_count == 2
        assert len(fake_transport.calls) == 1
        assert store.get(record.id) is None

    @pytest.mark.asyncio
    async def test_both_fail(self, workflow, store, publisher, fake_recipients):
        """Test two failures leave the record FAILED and retryable."""
        publisher.side_effect = RuntimeError("discord down")
        fake_recipients.error = EmailConfigError("Missing Google Sheets environment variables: GOOGLE_SHEETS_ID")
        record = workflow.create(AUTHOR, "Meeting")

        outcome = await workflow.send(record.id, AUTHOR)

        assert outcome.state == AnnouncementState.FAILED
        assert "GOOGLE_SHEETS_ID" in outcome.email_error
        assert workflow.state_of(record.id) == AnnouncementState.FAILED

    @pytest.mark.asyncio
    async def test_email_transient_failure_exhausts_attempts(self, workflow, fake_transport):
        """Test the email side fails after the configured attempts."""
        fake_transport.outcomes = [aiosmtplib.SMTPServerDisconnected("gone")] * 3
        record = workflow.create(AUTHOR, "Meeting")

        outcome = await workflow.send(record.id, AUTHOR)

        assert outcome.state == AnnouncementState.PARTIALLY_SENT
        assert "after 3 attempts" in outcome.email_error
        assert len(fake_transport.calls) == 3

    @pytest.mark.asyncio
    async def test_refused_recipients_warn_but_count_as_sent(self, workflow, fake_transport):
        """Test partially refused recipients still mark email as sent."""
        fake_transport.outcomes = [{"b@x.com": (550, "no such user")}]
        record = workflow.create(AUTHOR, "Meeting")

        outcome = await workflow.send(record.id, AUTHOR)

        assert outcome.state == AnnouncementState.SENT
        assert outcome.email_result.failed == ["b@x.com"]
        assert any("refused" in warning for warning in outcome.warnings)

    @pytest.mark.asyncio
    async def test_send_while_sending_is_busy(self, workflow):
        """Test a second press during a send is rejected."""
        record = workflow.create(AUTHOR, "Meeting")
        workflow._sending.add(record.id)

        with pytest.raises(AnnouncementBusy):
            await workflow.send(record.id, AUTHOR)
        with pytest.raises(AnnouncementBusy):
            workflow.cancel(record.id, AUTHOR)

    @pytest.mark.asyncio
    async def test_send_after_expiry(self, workflow, clock, publisher):
        """Test sending an expired draft is NotFound and delivers nothing."""
        record = workflow.create(AUTHOR, "Meeting")
        clock.advance(1801)

        with pytest.raises(AnnouncementNotFound):
            await workflow.send(record.id, AUTHOR)
        publisher.assert_not_called()


class TestTestSend:
    """Tests for the test email button."""

    @pytest.mark.asyncio
    async def test_goes_to_test_address_only(self, workflow, fake_transport, fake_recipients):
        """Test the test email skips the member list and keeps the draft."""
        record = workflow.create(AUTHOR, "Meeting", "Room 101")

        result = await workflow.test_send(record.id, AUTHOR)

        assert result.delivered == ["tester@example.com"]
        message, envelope = fake_transport.calls[0]
        assert envelope == ["tester@example.com"]
        assert message["Subject"] == "[TEST] Meeting"
        assert fake_recipients.calls == 0
        assert workflow.state_of(record.id) == AnnouncementState.DRAFT

    @pytest.mark.asyncio
    async def test_failure_propagates(self, workflow, fake_transport):
        """Test a failed test email raises and leaves the draft unchanged."""
        fake_transport.outcomes = [aiosmtplib.SMTPAuthenticationError(535, "bad credentials")]
        record = workflow.create(AUTHOR, "Meeting")

        with pytest.raises(SendFailed):
            await workflow.test_send(record.id, AUTHOR)
        assert workflow.state_of(record.id) == AnnouncementState.DRAFT


class TestCancel:
    """Tests for cancelling drafts."""

    def test_meeting_room_change_then_cancel(self, workflow, store):
        """Test create, edit the email subject, then cancel removes the draft."""
        record = workflow.create(AUTHOR, "Meeting")
        workflow.edit_email(record.id, AUTHOR, "Room Change", record.email_body)

        cancelled = workflow.cancel(record.id, AUTHOR)

        assert cancelled.email_subject == "Room Change"
        assert store.get(record.id) is None
        assert workflow.state_of(record.id) == AnnouncementState.EXPIRED

    def test_cancel_twice_is_not_found(self, workflow):
        """Test a second cancel reports the draft as gone."""
        record = workflow.create(AUTHOR, "Meeting")
        workflow.cancel(record.id, AUTHOR)

        with pytest.raises(AnnouncementNotFound):
            workflow.cancel(record.id, AUTHOR)
