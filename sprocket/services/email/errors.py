"""
Sprocket - Email Errors
=======================

Exceptions raised by the email gateway.

Author: Engineering Club Exec Team
Server: McRoberts Engineering Club
"""

from sprocket.core.config import ConfigValidationError


class EmailConfigError(ConfigValidationError):
    """SMTP or Google Sheets credentials are missing."""

    pass


class SendFailed(Exception):
    """
    An email could not be delivered after all attempts.

    Attributes:
        attempts: How many provider calls were made.
    """

    def __init__(self, message: str, attempts: int = 0) -> None:
        super().__init__(message)
        self.attempts = attempts


class RecipientFetchError(Exception):
    """The recipient sheet could not be read."""

    pass


__all__ = ["EmailConfigError", "SendFailed", "RecipientFetchError"]
