"""
Sprocket - Announcement Workflow
================================

State machine behind /announce and its control panel.

DESIGN:
    DRAFT -> (edit)* -> SENDING -> SENT | PARTIALLY_SENT | FAILED
    with CANCELLED and EXPIRED as the other ways out.

    Send runs two independent deliveries, the Discord post and the bulk
    email. Each one is skipped when its flag is already "sent", so
    pressing Send again after a partial failure only retries the side
    that failed. A failure on one side is recorded and never stops the
    other side from being tried.

    Every operation checks the record exists (else AnnouncementNotFound)
    and that the actor is the author (else AnnouncementForbidden) before
    touching anything.

Author: Engineering Club Exec Team
Server: McRoberts Engineering Club
"""

import time
from typing import Any, Awaitable, Callable, Optional, Set

from sprocket.core.logger import logger
from sprocket.services.announcements.errors import (
    AnnouncementBusy,
    AnnouncementForbidden,
    AnnouncementNotFound,
    InvalidAnnouncement,
)
from sprocket.services.announcements.models import (
    AnnouncementRecord,
    AnnouncementState,
    DeliveryStatus,
    SendOutcome,
)
from sprocket.services.announcements.store import AnnouncementStore
from sprocket.services.email.gateway import BulkSendResult, EmailGateway


Publisher = Callable[[AnnouncementRecord], Awaitable[Any]]
"""Posts a record's Discord payload; raises on failure."""


# =============================================================================
# Announcement Workflow
# =============================================================================

class AnnouncementWorkflow:
    """
    Drives announcement records through their lifecycle.

    Attributes:
        store: Pending announcement registry.
        gateway: Email delivery.
        publisher: Coroutine that posts the Discord payload.
    """

    def __init__(
        self,
        store: AnnouncementStore,
        gateway: EmailGateway,
        publisher: Publisher,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self.store = store
        self.gateway = gateway
        self.publisher = publisher
        self._clock = clock
        self._sending: Set[str] = set()

    # =========================================================================
    # Lookup
    # =========================================================================

    def get_owned(self, announcement_id: str, actor_id: int) -> AnnouncementRecord:
        """
        Fetch a live record the actor is allowed to act on.

        Raises:
            AnnouncementNotFound: Absent or expired.
            AnnouncementForbidden: Actor is not the author.
        """
        record = self.store.get(announcement_id)
        if record is None:
            raise AnnouncementNotFound(announcement_id)
        if record.author_id != actor_id:
            logger.warning("Announcement Access Denied", [
                ("ID", announcement_id),
                ("Actor", str(actor_id)),
                ("Author", str(record.author_id)),
            ])
            raise AnnouncementForbidden(announcement_id, actor_id)
        return record

    def state_of(self, announcement_id: str) -> AnnouncementState:
        """Current state, EXPIRED when the record is gone."""
        record = self.store.get(announcement_id)
        return record.state if record else AnnouncementState.EXPIRED

    # =========================================================================
    # Create / Edit / Preview
    # =========================================================================

    def create(
        self,
        author_id: int,
        topic: str,
        details: Optional[str] = None,
        channel_id: Optional[int] = None,
    ) -> AnnouncementRecord:
        """
        Start a new draft.

        Raises:
            InvalidAnnouncement: Topic is blank.
            DuplicateAnnouncement: Same author created one in the same millisecond.
        """
        if not topic or not topic.strip():
            raise InvalidAnnouncement("Topic is required")

        record = AnnouncementRecord.new(
            author_id=author_id,
            topic=topic,
            details=details,
            created_at=self._clock(),
            channel_id=channel_id,
        )
        self.store.create(record)

        logger.tree("Announcement Created", [
            ("ID", record.id),
            ("Author", str(author_id)),
            ("Topic", record.topic[:50]),
            ("Details", "Yes" if details and details.strip() else "No"),
        ], emoji="📢")

        return record

    def edit_discord(self, announcement_id: str, actor_id: int, body: str) -> AnnouncementRecord:
        """Replace the Discord payload only."""
        self.get_owned(announcement_id, actor_id)
        if not body or not body.strip():
            raise InvalidAnnouncement("Discord content cannot be empty")

        def mutate(record: AnnouncementRecord) -> None:
            record.discord_body = body.strip()

        record = self.store.update(announcement_id, mutate)

        logger.tree("Announcement Discord Edited", [
            ("ID", announcement_id),
            ("Length", str(len(record.discord_body))),
        ], emoji="✏️")

        return record

    def edit_email(
        self,
        announcement_id: str,
        actor_id: int,
        subject: str,
        body: str,
    ) -> AnnouncementRecord:
        """Replace the email subject and body only."""
        self.get_owned(announcement_id, actor_id)
        if not subject or not subject.strip() or not body or not body.strip():
            raise InvalidAnnouncement("Email subject and body cannot be empty")

        def mutate(record: AnnouncementRecord) -> None:
            record.email_subject = subject.strip()
            record.email_body = body.strip()

        record = self.store.update(announcement_id, mutate)

        logger.tree("Announcement Email Edited", [
            ("ID", announcement_id),
            ("Subject", record.email_subject[:50]),
            ("Length", str(len(record.email_body))),
        ], emoji="✏️")

        return record

    def preview(self, announcement_id: str, actor_id: int) -> AnnouncementRecord:
        """Return the record for rendering; no state change."""
        return self.get_owned(announcement_id, actor_id)

    # =========================================================================
    # Test Send
    # =========================================================================

    async def test_send(self, announcement_id: str, actor_id: int) -> BulkSendResult:
        """
        Email the current payload to the test address only.

        Failures propagate to the caller; the record is never changed.
        """
        record = self.get_owned(announcement_id, actor_id)

        logger.tree("Announcement Test Send", [
            ("ID", announcement_id),
            ("To", str(self.gateway.config.test_recipient)),
        ], emoji="🧪")

        return await self.gateway.send_test(record.email_subject, record.email_body)

    # =========================================================================
    # Send
    # =========================================================================

    async def _deliver_discord(self, record: AnnouncementRecord) -> Optional[str]:
        """Post to Discord; returns the error message on failure."""
        try:
            await self.publisher(record)
        except Exception as e:
            logger.error("Announcement Discord Delivery Failed", [
                ("ID", record.id),
                ("Error", f"{type(e).__name__}: {str(e)[:100]}"),
            ])
            return str(e) or type(e).__name__
        return None

    async def _deliver_email(self, record: AnnouncementRecord, outcome: SendOutcome) -> Optional[str]:
        """Fetch recipients and bulk send; returns the error message on failure."""
        try:
            recipients = await self.gateway.fetch_recipients()
            result = await self.gateway.send_bulk(
                record.email_subject, record.email_body, recipients
            )
        except Exception as e:
            logger.error("Announcement Email Delivery Failed", [
                ("ID", record.id),
                ("Error", f"{type(e).__name__}: {str(e)[:100]}"),
            ])
            return str(e) or type(e).__name__

        outcome.email_result = result
        if result.failed:
            outcome.warnings.append(
                f"{len(result.failed)} recipient(s) were refused by the mail server"
            )
        return None

    async def send(self, announcement_id: str, actor_id: int) -> SendOutcome:
        """
        Deliver every side that has not been sent yet.

        Returns:
            Outcome with the resulting state. On SENT the record has been
            removed; otherwise it is kept with updated flags for a retry.

        Raises:
            AnnouncementNotFound: Absent or expired.
            AnnouncementForbidden: Actor is not the author.
            AnnouncementBusy: A send for this record is already running.
        """
        record = self.get_owned(announcement_id, actor_id)
        if announcement_id in self._sending:
            raise AnnouncementBusy(announcement_id)

        self._sending.add(announcement_id)
        try:
            outcome = SendOutcome(state=AnnouncementState.SENDING, record=record)

            logger.tree("Announcement Sending", [
                ("ID", announcement_id),
                ("Discord", record.discord_status.value),
                ("Email", record.email_status.value),
            ], emoji="📤")

            if record.discord_status != DeliveryStatus.SENT:
                outcome.attempted.append("discord")
                error = await self._deliver_discord(record)
                record.discord_status = DeliveryStatus.FAILED if error else DeliveryStatus.SENT
                record.last_error_discord = error

            if record.email_status != DeliveryStatus.SENT:
                outcome.attempted.append("email")
                error = await self._deliver_email(record, outcome)
                record.email_status = DeliveryStatus.FAILED if error else DeliveryStatus.SENT
                record.last_error_email = error

            outcome.state = record.state
            outcome.record = record

            if outcome.state == AnnouncementState.SENT:
                self.store.delete(announcement_id)
            else:
                self._save_flags(record)

            logger.tree("Announcement Send Finished", [
                ("ID", announcement_id),
                ("State", outcome.state.value),
                ("Attempted", ", ".join(outcome.attempted) or "None"),
                ("Discord", record.discord_status.value),
                ("Email", record.email_status.value),
            ], emoji="✅" if outcome.state == AnnouncementState.SENT else "⚠️")

            return outcome
        finally:
            self._sending.discard(announcement_id)

    def _save_flags(self, sent: AnnouncementRecord) -> None:
        """Write delivery flags back, tolerating a record that expired mid-send."""
        def mutate(record: AnnouncementRecord) -> None:
            record.discord_status = sent.discord_status
            record.email_status = sent.email_status
            record.last_error_discord = sent.last_error_discord
            record.last_error_email = sent.last_error_email

        try:
            self.store.update(sent.id, mutate)
        except AnnouncementNotFound:
            logger.warning("Announcement Gone Before Flags Saved", [
                ("ID", sent.id),
            ])

    # =========================================================================
    # Cancel
    # =========================================================================

    def cancel(self, announcement_id: str, actor_id: int) -> AnnouncementRecord:
        """Delete the draft. Returns the removed record for a final render."""
        record = self.get_owned(announcement_id, actor_id)
        if announcement_id in self._sending:
            raise AnnouncementBusy(announcement_id)
        self.store.delete(announcement_id)

        logger.tree("Announcement Cancelled", [
            ("ID", announcement_id),
            ("Author", str(actor_id)),
        ], emoji="🗑️")

        return record


__all__ = ["AnnouncementWorkflow", "Publisher"]
