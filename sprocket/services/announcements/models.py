"""
Sprocket - Announcement Models
==============================

Data types for the announcement workflow.

DESIGN:
    A record carries two independent payloads (Discord and email) plus a
    delivery flag per channel. The workflow state shown to users is
    derived from those flags, so a record never stores a state that can
    disagree with what was actually delivered.

Author: Engineering Club Exec Team
Server: McRoberts Engineering Club
"""

from dataclasses import asdict, dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional

from sprocket.services.email.gateway import BulkSendResult


# =============================================================================
# Enums
# =============================================================================

class DeliveryStatus(str, Enum):
    """Per-channel delivery flag."""

    PENDING = "pending"
    SENT = "sent"
    FAILED = "failed"


class AnnouncementState(str, Enum):
    """Workflow state rendered on the control panel."""

    DRAFT = "draft"
    SENDING = "sending"
    SENT = "sent"
    PARTIALLY_SENT = "partially_sent"
    FAILED = "failed"
    CANCELLED = "cancelled"
    EXPIRED = "expired"

    @property
    def is_terminal(self) -> bool:
        return self in (
            AnnouncementState.SENT,
            AnnouncementState.CANCELLED,
            AnnouncementState.EXPIRED,
        )


# =============================================================================
# Record
# =============================================================================

def make_announcement_id(author_id: int, created_at: float) -> str:
    """Build the "<author>-<millis>" token that identifies an announcement."""
    return f"{author_id}-{int(created_at * 1000)}"


@dataclass
class AnnouncementRecord:
    """
    A pending announcement.

    Attributes:
        id: Unique "<author_id>-<created_ms>" token.
        author_id: Creator; the only user allowed to act on the record.
        topic: Short title from /announce.
        discord_body: Text posted to Discord.
        email_subject: Subject line of the email.
        email_body: Plain text body of the email.
        created_at: Epoch seconds, used for expiry.
        channel_id: Channel /announce was run in.
        discord_status: Delivery flag for the Discord post.
        email_status: Delivery flag for the email broadcast.
        last_error_discord: Last Discord failure message.
        last_error_email: Last email failure message.
    """

    id: str
    author_id: int
    topic: str
    discord_body: str
    email_subject: str
    email_body: str
    created_at: float
    channel_id: Optional[int] = None
    discord_status: DeliveryStatus = DeliveryStatus.PENDING
    email_status: DeliveryStatus = DeliveryStatus.PENDING
    last_error_discord: Optional[str] = None
    last_error_email: Optional[str] = None

    @classmethod
    def new(
        cls,
        author_id: int,
        topic: str,
        details: Optional[str],
        created_at: float,
        channel_id: Optional[int] = None,
    ) -> "AnnouncementRecord":
        """
        Create a draft, deriving both payloads from topic and details.

        Discord gets "**topic**" followed by the details on the next line.
        Email uses the topic as subject and the details (or the topic when
        there are none) as body.
        """
        topic = topic.strip()
        details = (details or "").strip()
        discord_body = f"**{topic}**\n{details}" if details else f"**{topic}**"
        return cls(
            id=make_announcement_id(author_id, created_at),
            author_id=author_id,
            topic=topic,
            discord_body=discord_body,
            email_subject=topic,
            email_body=details or topic,
            created_at=created_at,
            channel_id=channel_id,
        )

    # =========================================================================
    # Derived State
    # =========================================================================

    @property
    def state(self) -> AnnouncementState:
        """Workflow state implied by the two delivery flags."""
        statuses = (self.discord_status, self.email_status)
        sent = statuses.count(DeliveryStatus.SENT)
        if sent == 2:
            return AnnouncementState.SENT
        if sent == 1:
            return AnnouncementState.PARTIALLY_SENT
        if DeliveryStatus.FAILED in statuses:
            return AnnouncementState.FAILED
        return AnnouncementState.DRAFT

    def is_expired(self, now: float, lifespan_seconds: float) -> bool:
        """A record exactly at the lifespan is still valid."""
        return now - self.created_at > lifespan_seconds

    # =========================================================================
    # Serialization
    # =========================================================================

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        data["discord_status"] = self.discord_status.value
        data["email_status"] = self.email_status.value
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "AnnouncementRecord":
        """
        Rebuild a record from its stored form.

        Raises:
            KeyError: A required field is missing.
            ValueError: A field has an invalid value.
        """
        return cls(
            id=str(data["id"]),
            author_id=int(data["author_id"]),
            topic=str(data["topic"]),
            discord_body=str(data["discord_body"]),
            email_subject=str(data["email_subject"]),
            email_body=str(data["email_body"]),
            created_at=float(data["created_at"]),
            channel_id=int(data["channel_id"]) if data.get("channel_id") else None,
            discord_status=DeliveryStatus(data.get("discord_status", "pending")),
            email_status=DeliveryStatus(data.get("email_status", "pending")),
            last_error_discord=data.get("last_error_discord"),
            last_error_email=data.get("last_error_email"),
        )


# =============================================================================
# Send Outcome
# =============================================================================

@dataclass
class SendOutcome:
    """
    Result of one Send press.

    Attributes:
        state: SENT, PARTIALLY_SENT or FAILED.
        record: Record after the attempt (already removed from the store when SENT).
        attempted: Channels tried this time ("discord", "email").
        email_result: Bulk send result when email was delivered.
        warnings: Non-fatal notes such as refused recipients.
    """

    state: AnnouncementState
    record: AnnouncementRecord
    attempted: List[str] = field(default_factory=list)
    email_result: Optional[BulkSendResult] = None
    warnings: List[str] = field(default_factory=list)

    @property
    def discord_error(self) -> Optional[str]:
        if self.record.discord_status == DeliveryStatus.FAILED:
            return self.record.last_error_discord
        return None

    @property
    def email_error(self) -> Optional[str]:
        if self.record.email_status == DeliveryStatus.FAILED:
            return self.record.last_error_email
        return None


__all__ = [
    "AnnouncementRecord",
    "AnnouncementState",
    "DeliveryStatus",
    "SendOutcome",
    "make_announcement_id",
]
