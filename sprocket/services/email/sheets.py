"""
Sprocket - Recipient Sheet Reader
=================================

Reads the club mailing list from a Google Sheet.

DESIGN:
    The sheet holds one member per row with the name in column A, the email address in column B
    and a header in row 1. A service account (google-auth) signs a
    read-only token; the values endpoint is then called directly over
    aiohttp so the request shares the bot's event loop and timeout.

Author: Engineering Club Exec Team
Server: McRoberts Engineering Club
"""

import asyncio
from typing import Any, List, Optional, Sequence
from urllib.parse import quote

import aiohttp
from google.auth.transport.requests import Request
from google.oauth2 import service_account

from sprocket.core.config import Config
from sprocket.core.logger import logger
from sprocket.services.email.errors import EmailConfigError, RecipientFetchError


# =============================================================================
# Constants
# =============================================================================

SHEETS_SCOPES = ["https://www.googleapis.com/auth/spreadsheets.readonly"]
SHEETS_VALUES_URL = "https://sheets.googleapis.com/v4/spreadsheets/{sheet_id}/values/{range}"
SHEET_COLUMNS = "A:B"
EMAIL_COLUMN_INDEX = 1
"""Email addresses live in column B; column A holds the member name."""


# =============================================================================
# Parsing
# =============================================================================

def extract_recipients(rows: Optional[Sequence[Sequence[Any]]]) -> List[str]:
    """
    Turn raw column values into a clean recipient list.

    Row 1 is a header and skipped. A row counts only if its column B
    cell contains "@". Addresses are trimmed and lower-cased, and duplicates
    are dropped keeping the first occurrence.

    Args:
        rows: Values as returned by the Sheets API (list of rows).

    Returns:
        Ordered, de-duplicated addresses.
    """
    if not rows:
        return []

    seen = set()
    recipients = []
    for row in rows[1:]:
        if len(row) <= EMAIL_COLUMN_INDEX:
            continue
        cell = str(row[EMAIL_COLUMN_INDEX]).strip().lower()
        if "@" not in cell or cell in seen:
            continue
        seen.add(cell)
        recipients.append(cell)
    return recipients


# =============================================================================
# Sheet Source
# =============================================================================

class SheetsRecipientSource:
    """
    Fetches recipients from the configured Google Sheet.

    Attributes:
        config: Bot configuration holding the sheet and credential values.
    """

    def __init__(self, config: Config) -> None:
        self.config = config
        self._credentials: Optional[service_account.Credentials] = None

    def _check_config(self) -> None:
        missing = [
            name for name, value in (
                ("GOOGLE_SHEETS_ID", self.config.google_sheets_id),
                ("GOOGLE_CLIENT_EMAIL", self.config.google_client_email),
                ("GOOGLE_PRIVATE_KEY", self.config.google_private_key),
            ) if not value
        ]
        if missing:
            raise EmailConfigError(
                f"Missing Google Sheets environment variables: {', '.join(missing)}"
            )

    def _get_credentials(self) -> service_account.Credentials:
        if self._credentials is None:
            self._credentials = service_account.Credentials.from_service_account_info(
                self.config.google_service_account_info(),
                scopes=SHEETS_SCOPES,
            )
        return self._credentials

    async def _get_token(self) -> str:
        """Return a valid bearer token, refreshing off the event loop when needed."""
        credentials = self._get_credentials()
        if not credentials.valid:
            await asyncio.to_thread(credentials.refresh, Request())
        return credentials.token

    def _build_url(self) -> str:
        sheet_range = f"'{self.config.google_sheet_name}'!{SHEET_COLUMNS}"
        return SHEETS_VALUES_URL.format(
            sheet_id=self.config.google_sheets_id,
            range=quote(sheet_range, safe=""),
        )

    async def fetch(self) -> List[str]:
        """
        Read and clean the recipient column.

        Returns:
            Ordered, de-duplicated addresses.

        Raises:
            EmailConfigError: Google credentials are not configured.
            RecipientFetchError: The sheet could not be read in time.
        """
        self._check_config()

        try:
            token = await asyncio.wait_for(
                self._get_token(), timeout=self.config.network_timeout
            )
            async with aiohttp.ClientSession() as session:
                async with session.get(
                    self._build_url(),
                    headers={"Authorization": f"Bearer {token}"},
                    timeout=aiohttp.ClientTimeout(total=self.config.network_timeout),
                ) as resp:
                    if resp.status != 200:
                        body = await resp.text()
                        raise RecipientFetchError(
                            f"Sheets API returned {resp.status}: {body[:200]}"
                        )
                    payload = await resp.json()
        except asyncio.TimeoutError:
            raise RecipientFetchError("Google Sheets request timeout")
        except aiohttp.ClientError as e:
            raise RecipientFetchError(f"Google Sheets request failed: {e}")

        recipients = extract_recipients(payload.get("values"))

        logger.tree("Recipients Fetched", [
            ("Sheet", self.config.google_sheet_name),
            ("Rows", str(len(payload.get("values") or []))),
            ("Unique Emails", str(len(recipients))),
        ], emoji="📋")

        return recipients


__all__ = ["SheetsRecipientSource", "extract_recipients"]
