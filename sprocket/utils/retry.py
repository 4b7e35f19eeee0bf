"""
Sprocket - Retry Utilities
==========================

Backoff for Discord API and mail provider calls.

DESIGN:
    A RetryPolicy says how many attempts and how long to wait between
    them. Discord calls share DISCORD_RETRY; the email gateway builds its
    own fixed-delay policy from config. Forbidden and NotFound are never
    retried because another attempt cannot fix them.

Author: Engineering Club Exec Team
Server: McRoberts Engineering Club
"""

import asyncio
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Optional, Tuple, Type

import discord

from sprocket.core.logger import logger


# =============================================================================
# Policy
# =============================================================================

@dataclass(frozen=True)
class RetryPolicy:
    """
    Attempt budget and backoff shape.

    Attributes:
        attempts: Total calls, including the first.
        base_delay: Wait after the first failure, in seconds.
        max_delay: Upper bound for exponential waits.
        exponential: Double the wait after each failure.
    """

    attempts: int = 3
    base_delay: float = 0.5
    max_delay: float = 10.0
    exponential: bool = True

    def delay_after(self, failures: int) -> float:
        """Seconds to wait after the given number of failures (1-based)."""
        if not self.exponential:
            return self.base_delay
        return min(self.base_delay * (2 ** (failures - 1)), self.max_delay)


DISCORD_RETRY = RetryPolicy()

RETRYABLE_EXCEPTIONS: Tuple[Type[BaseException], ...] = (
    discord.HTTPException,
    asyncio.TimeoutError,
    ConnectionError,
)

PERMANENT_DISCORD_ERRORS: Tuple[Type[BaseException], ...] = (
    discord.Forbidden,
    discord.NotFound,
)


# =============================================================================
# Retry
# =============================================================================

async def retry_async(
    func: Callable[..., Awaitable[Any]],
    *args,
    policy: RetryPolicy = DISCORD_RETRY,
    retry_on: Tuple[Type[BaseException], ...] = RETRYABLE_EXCEPTIONS,
    label: Optional[str] = None,
    **kwargs,
) -> Any:
    """
    Await func(*args, **kwargs) until it succeeds or the policy runs out.

    Args:
        func: Async callable.
        policy: Attempt budget and delays.
        retry_on: Exception types worth another attempt.
        label: Name used in retry log lines; defaults to the callable's name.

    Returns:
        Whatever func returns.

    Raises:
        The last retryable exception once attempts are spent, any
        non-retryable exception immediately.
    """
    name = label or getattr(func, "__qualname__", repr(func))
    attempts = max(1, policy.attempts)

    for attempt in range(1, attempts + 1):
        try:
            return await func(*args, **kwargs)
        except PERMANENT_DISCORD_ERRORS:
            raise
        except retry_on as e:
            if attempt == attempts:
                logger.error("Retries Exhausted", [
                    ("Call", name),
                    ("Attempts", str(attempts)),
                    ("Error", f"{type(e).__name__}: {str(e)[:100]}"),
                ])
                raise

            delay = policy.delay_after(attempt)
            logger.warning("Retrying Call", [
                ("Call", name),
                ("Attempt", f"{attempt}/{attempts}"),
                ("Error", type(e).__name__),
                ("Next Try", f"{delay:.1f}s"),
            ])
            await asyncio.sleep(delay)


# =============================================================================
# Discord Helpers
# =============================================================================

async def safe_fetch_channel(bot, channel_id: Optional[int]) -> Optional[discord.abc.GuildChannel]:
    """Cached channel, else an API fetch; None when it cannot be resolved."""
    if not channel_id:
        return None

    channel = bot.get_channel(channel_id)
    if channel is not None:
        return channel

    try:
        return await retry_async(bot.fetch_channel, channel_id, label="fetch_channel")
    except (discord.NotFound, discord.Forbidden):
        return None
    except discord.HTTPException as e:
        logger.warning("Channel Fetch Failed", [
            ("Channel ID", str(channel_id)),
            ("Error", str(e)[:100]),
        ])
        return None


async def safe_send(
    channel: Optional[discord.abc.Messageable],
    content: Optional[str] = None,
    **kwargs,
) -> Optional[discord.Message]:
    """Send with retries; failures are logged and return None."""
    if channel is None:
        return None

    try:
        return await retry_async(channel.send, content, label="channel.send", **kwargs)
    except discord.HTTPException as e:
        logger.warning("Message Send Failed", [
            ("Channel", str(getattr(channel, "id", "?"))),
            ("Error", str(e)[:100]),
        ])
        return None


__all__ = [
    "DISCORD_RETRY",
    "RETRYABLE_EXCEPTIONS",
    "RetryPolicy",
    "retry_async",
    "safe_fetch_channel",
    "safe_send",
]
