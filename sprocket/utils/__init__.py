"""
Sprocket - Utils Package
========================

Helper functions and classes shared across the bot.

Available Utilities:
    Retry: RetryPolicy, retry_async, safe_fetch_channel, safe_send
    Embeds: status_embed for command replies
    ErrorHandler: Categorized error logging with recovery hints

Author: Engineering Club Exec Team
Server: McRoberts Engineering Club
"""

from .retry import RetryPolicy, retry_async, safe_fetch_channel, safe_send
from .embeds import status_embed
from .error_handler import ErrorHandler


__all__ = [
    "retry_async",
    "RetryPolicy",
    "safe_fetch_channel",
    "safe_send",
    "status_embed",
    "ErrorHandler",
]
