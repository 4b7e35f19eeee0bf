"""
Sprocket - Error Handler
========================

Categorized logging for unexpected errors, with a recovery hint.

DESIGN:
    ERROR_RULES is an ordered list of (exception types, category, hint);
    the first rule matching the exception wins. Specific types therefore
    come before their bases: SMTP errors are OSErrors, and a Forbidden is
    an HTTPException.

    Critical errors are also dumped as JSON (traceback plus Discord
    context) under LOGS_DIR/errors for later digging.

Author: Engineering Club Exec Team
Server: McRoberts Engineering Club
"""

import json
import sqlite3
import sys
import traceback
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, List, Tuple, Type

import aiohttp
import aiosmtplib
import discord
from google.auth.exceptions import GoogleAuthError

from sprocket.core.logger import logger, LOGS_DIR, LOCAL_TZ
from sprocket.services.email.errors import EmailConfigError, RecipientFetchError, SendFailed


ErrorRule = Tuple[Tuple[Type[BaseException], ...], str, str]

ERROR_RULES: List[ErrorRule] = [
    ((discord.Forbidden,), "discord", "Check the bot's role permissions in server settings"),
    ((discord.NotFound,), "discord", "Channel, role or message no longer exists; check configured IDs"),
    ((discord.HTTPException,), "discord", "Discord API issue; try again shortly"),
    ((EmailConfigError,), "email", "Set EMAIL_FROM and EMAIL_PASSWORD (an app password)"),
    ((aiosmtplib.SMTPAuthenticationError,), "email", "SMTP login rejected; check the app password"),
    ((SendFailed, aiosmtplib.SMTPException), "email", "Mail provider unavailable; press Send again to retry email only"),
    ((GoogleAuthError,), "sheets", "Google rejected the service account key"),
    ((RecipientFetchError,), "sheets", "Members sheet unreadable; check the sheet ID and sharing"),
    ((sqlite3.OperationalError,), "database", "Database busy or locked; try again"),
    ((sqlite3.Error,), "database", "Database error; check the data file"),
    ((aiohttp.ClientError, ConnectionError, TimeoutError), "network", "Network request failed; check connectivity"),
    ((OSError,), "system", "System resource issue; check disk space and permissions"),
]

CRITICAL_DIR = Path(LOGS_DIR) / "errors"


def classify(error: BaseException) -> Tuple[str, str]:
    """(category, hint) for an exception; ('general', ...) when nothing matches."""
    for types, category, hint in ERROR_RULES:
        if isinstance(error, types):
            return category, hint
    return "general", "Unexpected error; check the traceback in the logs"


def _interaction_context(interaction: discord.Interaction) -> Dict[str, Any]:
    return {
        "guild": interaction.guild.name if interaction.guild else "DM",
        "channel": getattr(interaction.channel, "name", str(interaction.channel_id)),
        "user": str(interaction.user),
        "user_id": interaction.user.id,
        "command": interaction.command.qualified_name if interaction.command else None,
    }


class ErrorHandler:
    """Entry point used at the outer boundaries (commands, services, main)."""

    @classmethod
    def handle(cls, e: BaseException, location: str, critical: bool = False, **context) -> str:
        """
        Log an error with its category and hint.

        Args:
            e: The exception.
            location: Where it was caught.
            critical: Log as an error and save a JSON dump; otherwise a warning.
            **context: Extra values for the dump; an "interaction" key adds
                guild, channel and user details.

        Returns:
            The error category.
        """
        category, hint = classify(e)
        interaction = context.pop("interaction", None)

        details = [
            ("Location", location),
            ("Type", type(e).__name__),
            ("Error", str(e)[:200]),
            ("Hint", hint),
        ]
        if isinstance(interaction, discord.Interaction):
            details.append(("User", f"{interaction.user} ({interaction.user.id})"))

        if not critical:
            logger.warning(f"[{category.upper()}] Error", details)
            return category

        logger.error(f"CRITICAL [{category.upper()}] Error", details)
        dump = {
            "timestamp": datetime.now(LOCAL_TZ).isoformat(),
            "location": location,
            "category": category,
            "type": type(e).__name__,
            "message": str(e),
            "traceback": "".join(traceback.format_exception(type(e), e, e.__traceback__)),
            "python": sys.version,
            "context": context,
        }
        if isinstance(interaction, discord.Interaction):
            dump["discord"] = _interaction_context(interaction)
        cls._save_dump(dump)
        return category

    @staticmethod
    def _save_dump(dump: Dict[str, Any]) -> None:
        try:
            CRITICAL_DIR.mkdir(parents=True, exist_ok=True)
            path = CRITICAL_DIR / f"error_{datetime.now().strftime('%Y%m%d_%H%M%S_%f')}.json"
            path.write_text(json.dumps(dump, indent=2, default=str), encoding="utf-8")
        except OSError as save_error:
            logger.warning("Could Not Save Error Dump", [("Error", str(save_error)[:100])])
            return
        logger.info(f"Critical error saved to {path}")


__all__ = ["ErrorHandler", "classify", "ERROR_RULES"]
