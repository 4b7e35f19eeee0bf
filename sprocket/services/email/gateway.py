"""
Sprocket - Email Gateway
========================

Bulk and test email delivery for announcements.

DESIGN:
    One bulk send is one provider call: the sender is the visible To
    address and every member is on Bcc, so addresses are never exposed
    to each other. aiosmtplib keeps the SMTP session on the bot's event
    loop.

    Transient failures (dropped connections, socket errors, 4xx replies)
    are retried as a unit with a fixed delay. Authentication failures and
    a fully refused recipient list are not retried.

Author: Engineering Club Exec Team
Server: McRoberts Engineering Club
"""

import asyncio
from dataclasses import dataclass, field
from email.message import EmailMessage
from email.utils import formataddr
from typing import Dict, List, Optional, Protocol, Sequence

import aiosmtplib
from aiosmtplib import SMTPResponse

from sprocket.core.config import Config
from sprocket.core.logger import logger
from sprocket.services.email.errors import EmailConfigError, SendFailed
from sprocket.services.email.formatting import format_email_html
from sprocket.services.email.sheets import SheetsRecipientSource
from sprocket.utils.retry import RetryPolicy, retry_async


# =============================================================================
# Constants
# =============================================================================

SMTP_TIMEOUT = 30

TRANSIENT_SMTP_ERRORS = (
    aiosmtplib.SMTPException,
    OSError,
    asyncio.TimeoutError,
)


# =============================================================================
# Result Type
# =============================================================================

@dataclass
class BulkSendResult:
    """
    Outcome of one bulk send.

    Attributes:
        delivered: Recipients the server accepted.
        failed: Recipients the server refused.
        attempts: Provider calls made, including retries.
    """

    delivered: List[str] = field(default_factory=list)
    failed: List[str] = field(default_factory=list)
    attempts: int = 1

    @property
    def partial(self) -> bool:
        return bool(self.failed)


# =============================================================================
# Transport
# =============================================================================

class EmailTransport(Protocol):
    """Anything that can hand a message to a mail server."""

    async def send(self, message: EmailMessage, recipients: Sequence[str]) -> Dict[str, SMTPResponse]:
        ...


class SmtpTransport:
    """
    SMTP transport over aiosmtplib.

    Port 465 uses implicit TLS, any other port upgrades with STARTTLS.
    """

    def __init__(self, config: Config) -> None:
        self.config = config

    async def send(self, message: EmailMessage, recipients: Sequence[str]) -> Dict[str, SMTPResponse]:
        """
        Deliver a message.

        Returns:
            Refused recipients mapped to the server's response.
        """
        implicit_tls = self.config.smtp_port == 465
        refused, _ = await aiosmtplib.send(
            message,
            recipients=list(recipients),
            hostname=self.config.smtp_host,
            port=self.config.smtp_port,
            username=self.config.email_from,
            password=self.config.email_password,
            use_tls=implicit_tls,
            start_tls=not implicit_tls,
            timeout=SMTP_TIMEOUT,
        )
        return refused


# =============================================================================
# Gateway
# =============================================================================

class EmailGateway:
    """
    Sends announcement emails and resolves the club mailing list.

    Attributes:
        config: Bot configuration.
        recipient_source: Reader for the member sheet.
        transport: Mail transport (SMTP in production).
    """

    def __init__(
        self,
        config: Config,
        recipient_source: Optional[SheetsRecipientSource] = None,
        transport: Optional[EmailTransport] = None,
    ) -> None:
        self.config = config
        self.recipient_source = recipient_source or SheetsRecipientSource(config)
        self.transport = transport or SmtpTransport(config)

    # =========================================================================
    # Recipients
    # =========================================================================

    async def fetch_recipients(self) -> List[str]:
        """Read the member list from the recipient sheet."""
        return await self.recipient_source.fetch()

    # =========================================================================
    # Message Building
    # =========================================================================

    def _check_config(self) -> None:
        if not self.config.email_configured:
            raise EmailConfigError(
                "Missing email environment variables: EMAIL_FROM, EMAIL_PASSWORD"
            )

    def build_message(self, subject: str, body: str, bcc: Sequence[str]) -> EmailMessage:
        """
        Build a text + HTML message addressed to the sender with everyone on Bcc.

        Args:
            subject: Email subject line.
            body: Plain text body with light markup.
            bcc: Hidden recipients.

        Returns:
            Ready-to-send message.
        """
        message = EmailMessage()
        message["Subject"] = subject
        message["From"] = formataddr((self.config.email_from_name, self.config.email_from))
        message["To"] = self.config.email_from
        if bcc:
            message["Bcc"] = ", ".join(bcc)
        message.set_content(body)
        message.add_alternative(format_email_html(body), subtype="html")
        return message

    # =========================================================================
    # Delivery
    # =========================================================================

    async def _deliver(
        self,
        message: EmailMessage,
        envelope: Sequence[str],
        recipients: Sequence[str],
    ) -> BulkSendResult:
        """
        Run the transport with fixed-delay retries.

        Args:
            message: Message to send.
            envelope: Every SMTP RCPT address, including the sender copy.
            recipients: Addresses reported back in the result.
        """
        attempts = 0

        async def attempt() -> Dict[str, SMTPResponse]:
            nonlocal attempts
            attempts += 1
            try:
                return await self.transport.send(message, envelope)
            except aiosmtplib.SMTPAuthenticationError as e:
                raise SendFailed(f"SMTP authentication failed: {e.code}", attempts=attempts)
            except aiosmtplib.SMTPRecipientsRefused as e:
                raise SendFailed(
                    f"All {len(e.recipients)} recipients were refused", attempts=attempts
                )

        try:
            refused = await retry_async(
                attempt,
                policy=RetryPolicy(
                    attempts=self.config.email_max_attempts,
                    base_delay=self.config.email_retry_delay,
                    exponential=False,
                ),
                retry_on=TRANSIENT_SMTP_ERRORS,
                label="smtp send",
            )
        except TRANSIENT_SMTP_ERRORS as e:
            raise SendFailed(
                f"Email failed after {attempts} attempts: {type(e).__name__}: {e}",
                attempts=attempts,
            )

        refused_lower = {address.lower() for address in (refused or {})}
        return BulkSendResult(
            delivered=[r for r in recipients if r.lower() not in refused_lower],
            failed=[r for r in recipients if r.lower() in refused_lower],
            attempts=attempts,
        )

    async def send_bulk(self, subject: str, body: str, recipients: Sequence[str]) -> BulkSendResult:
        """
        Send one announcement email to every recipient.

        Args:
            subject: Email subject.
            body: Plain text body.
            recipients: Member addresses, placed on Bcc.

        Returns:
            Delivered and refused recipients.

        Raises:
            EmailConfigError: SMTP credentials are missing.
            SendFailed: No recipients, or every attempt failed.
        """
        self._check_config()
        if not recipients:
            raise SendFailed("No email recipients provided")

        message = self.build_message(subject, body, recipients)
        envelope = [self.config.email_from, *recipients]

        logger.tree("Sending Bulk Email", [
            ("Subject", subject[:50]),
            ("Recipients", str(len(recipients))),
            ("Max Attempts", str(self.config.email_max_attempts)),
        ], emoji="📬")

        result = await self._deliver(message, envelope, recipients)

        if result.failed:
            logger.warning("Bulk Email Partially Refused", [
                ("Delivered", str(len(result.delivered))),
                ("Refused", str(len(result.failed))),
                ("First Refused", result.failed[0]),
            ])
        else:
            logger.tree("Bulk Email Sent", [
                ("Subject", subject[:50]),
                ("Delivered", str(len(result.delivered))),
                ("Attempts", str(result.attempts)),
            ], emoji="✅")

        return result

    async def send_test(self, subject: str, body: str) -> BulkSendResult:
        """
        Send the announcement email to the test address only.

        Raises:
            EmailConfigError: SMTP credentials are missing.
            SendFailed: Every attempt failed.
        """
        self._check_config()
        test_address = self.config.test_recipient

        message = self.build_message(f"[TEST] {subject}", body, [])
        message.replace_header("To", test_address)

        result = await self._deliver(message, [test_address], [test_address])

        logger.tree("Test Email Sent", [
            ("Subject", subject[:50]),
            ("To", test_address),
            ("Attempts", str(result.attempts)),
        ], emoji="🧪")

        return result


__all__ = [
    "EmailGateway",
    "EmailTransport",
    "SmtpTransport",
    "BulkSendResult",
]
