"""
Sprocket - Email Package
========================

Mailing list lookup and announcement email delivery.

Author: Engineering Club Exec Team
Server: McRoberts Engineering Club
"""

from sprocket.services.email.errors import EmailConfigError, RecipientFetchError, SendFailed
from sprocket.services.email.formatting import format_email_html
from sprocket.services.email.sheets import SheetsRecipientSource, extract_recipients
from sprocket.services.email.gateway import BulkSendResult, EmailGateway, SmtpTransport

__all__ = [
    "EmailGateway",
    "BulkSendResult",
    "SmtpTransport",
    "SheetsRecipientSource",
    "extract_recipients",
    "format_email_html",
    "EmailConfigError",
    "RecipientFetchError",
    "SendFailed",
]
