"""
Sprocket - Configuration Module
===============================

Centralized configuration management with environment variable validation.

DESIGN:
    A single source of truth for all configuration, loaded from environment
    variables at startup into a dataclass. Only the Discord token is
    required; email, sheets and channel settings are optional and the
    features that need them report a configuration error when used.

    Key patterns:
    - Singleton pattern via get_config() ensures one Config instance
    - Validation happens once at load time, not on every access
    - Integer options are clamped to a safe range with a logged warning

Author: Engineering Club Exec Team
Server: McRoberts Engineering Club
"""

import os
from dataclasses import dataclass
from typing import Any, Dict, Optional


# =============================================================================
# Configuration Dataclass
# =============================================================================

@dataclass
class Config:
    """
    Bot configuration loaded from environment variables.

    Attributes:
        discord_token: Discord bot authentication token.
        guild_id: Optional guild for instant slash command sync.
        announcement_channel_id: Fallback channel for announcement posts.
        introduction_channel_id: Channel where new members introduce themselves.
        email_from: Sender account for announcement emails.
        announcement_lifespan_minutes: How long a draft announcement stays live.
    """

    # -------------------------------------------------------------------------
    # Required: Discord
    # -------------------------------------------------------------------------

    discord_token: str

    # -------------------------------------------------------------------------
    # Optional: Discord
    # -------------------------------------------------------------------------

    guild_id: Optional[int] = None
    announcement_channel_id: Optional[int] = None
    introduction_channel_id: Optional[int] = None

    # -------------------------------------------------------------------------
    # Optional: Email (SMTP)
    # -------------------------------------------------------------------------

    email_from: Optional[str] = None
    email_password: Optional[str] = None
    email_from_name: str = "McRoberts Engineering Club"
    smtp_host: str = "smtp.gmail.com"
    smtp_port: int = 465
    test_email_address: Optional[str] = None

    # -------------------------------------------------------------------------
    # Optional: Google Sheets (service account)
    # -------------------------------------------------------------------------

    google_sheets_id: Optional[str] = None
    google_sheet_name: str = "Sheet1"
    google_client_email: Optional[str] = None
    google_private_key: Optional[str] = None
    google_project_id: Optional[str] = None
    google_private_key_id: Optional[str] = None
    google_client_id: Optional[str] = None

    # -------------------------------------------------------------------------
    # Optional: Announcements
    # -------------------------------------------------------------------------

    announcement_lifespan_minutes: int = 30
    email_max_attempts: int = 3
    email_retry_delay: int = 2

    # -------------------------------------------------------------------------
    # Optional: Archive
    # -------------------------------------------------------------------------

    archive_check_interval: int = 60        # How often to poll for due archive tasks
    archived_category_name: str = "archived"
    unarchive_category_name: str = "execs"

    # -------------------------------------------------------------------------
    # Optional: Runtime
    # -------------------------------------------------------------------------

    port: int = 10000
    timezone: str = "America/Vancouver"
    network_timeout: int = 10               # Seconds for sheet/quote/avatar requests
    error_webhook_url: Optional[str] = None

    # -------------------------------------------------------------------------
    # Derived Values
    # -------------------------------------------------------------------------

    @property
    def announcement_lifespan_seconds(self) -> int:
        return self.announcement_lifespan_minutes * 60

    @property
    def email_configured(self) -> bool:
        return bool(self.email_from and self.email_password)

    @property
    def sheets_configured(self) -> bool:
        return bool(
            self.google_sheets_id
            and self.google_client_email
            and self.google_private_key
        )

    @property
    def test_recipient(self) -> Optional[str]:
        """Address used for test emails, falling back to the sender account."""
        return self.test_email_address or self.email_from

    def google_service_account_info(self) -> Dict[str, Any]:
        """
        Build the service account mapping google-auth expects.

        Returns:
            Dict in the shape of a downloaded service account JSON key.
        """
        return {
            "type": "service_account",
            "project_id": self.google_project_id,
            "private_key_id": self.google_private_key_id,
            "private_key": self.google_private_key,
            "client_email": self.google_client_email,
            "client_id": self.google_client_id,
            "token_uri": "https://oauth2.googleapis.com/token",
        }


# =============================================================================
# Embed Colors
# =============================================================================

class EmbedColors:
    """Standardized color palette for Discord embeds."""

    BLUE = 0x0099FF     # Announcement drafts
    GREEN = 0x2ECC71    # Sent / success
    GOLD = 0xF1C40F     # Partial / warnings
    RED = 0xE74C3C      # Failed
    GRAY = 0x95A5A6     # Cancelled / expired
    BLURPLE = 0x5865F2  # Info embeds

    DRAFT = BLUE
    SUCCESS = GREEN
    WARNING = GOLD
    ERROR = RED
    INACTIVE = GRAY
    INFO = BLURPLE


# =============================================================================
# Validation
# =============================================================================

class ConfigValidationError(Exception):
    """
    Raised when required configuration is missing or invalid.

    DESIGN:
        Custom exception type allows callers to distinguish config
        errors from other startup failures.
    """

    pass


def _parse_int_optional(value: Optional[str]) -> Optional[int]:
    """
    Parse optional string to integer, returning None on failure.

    Args:
        value: String value from environment variable, may be None.

    Returns:
        Parsed integer or None if parsing fails.
    """
    if not value:
        return None
    try:
        return int(value)
    except ValueError:
        return None


def _parse_int_with_default(
    value: Optional[str],
    default: int,
    name: str,
    min_val: Optional[int] = None,
    max_val: Optional[int] = None,
) -> int:
    """
    Parse optional integer with default and range validation.

    Args:
        value: String value from environment variable.
        default: Default value if not set or invalid.
        name: Variable name for warning messages.
        min_val: Minimum allowed value (inclusive).
        max_val: Maximum allowed value (inclusive).

    Returns:
        Parsed integer within valid range, or default.
    """
    if not value:
        return default
    try:
        parsed = int(value)
        if min_val is not None and parsed < min_val:
            from sprocket.core.logger import logger
            logger.warning(f"Config {name}={parsed} below min {min_val}, using {min_val}")
            return min_val
        if max_val is not None and parsed > max_val:
            from sprocket.core.logger import logger
            logger.warning(f"Config {name}={parsed} above max {max_val}, using {max_val}")
            return max_val
        return parsed
    except ValueError:
        from sprocket.core.logger import logger
        logger.warning(f"Config {name}='{value}' invalid, using default {default}")
        return default


def _validate_url(value: Optional[str], name: str) -> Optional[str]:
    """
    Validate URL format for webhooks.

    Args:
        value: URL string to validate.
        name: Variable name for warning messages.

    Returns:
        URL if valid, None if invalid or empty.
    """
    if not value:
        return None
    if not value.startswith(("https://", "http://")):
        from sprocket.core.logger import logger
        logger.warning(f"Config {name} invalid URL format, ignoring")
        return None
    return value


def _parse_private_key(value: Optional[str]) -> Optional[str]:
    """Restore newlines in a PEM key stored on one line with literal \\n."""
    if not value:
        return None
    return value.replace("\\n", "\n")


# =============================================================================
# Configuration Loading
# =============================================================================

def load_config() -> Config:
    """
    Load and validate configuration from environment variables.

    Returns:
        Validated Config object with all settings.

    Raises:
        ConfigValidationError: If any required variable is missing.
    """
    missing = []

    discord_token = os.getenv("DISCORD_TOKEN")
    if not discord_token:
        missing.append("DISCORD_TOKEN")

    if missing:
        raise ConfigValidationError(
            f"Missing required environment variables: {', '.join(missing)}"
        )

    return Config(
        discord_token=discord_token,
        guild_id=_parse_int_optional(os.getenv("GUILD_ID")),
        announcement_channel_id=_parse_int_optional(os.getenv("ANNOUNCEMENT_CHANNEL_ID")),
        introduction_channel_id=_parse_int_optional(os.getenv("INTRODUCTION_CHANNEL_ID")),
        email_from=os.getenv("EMAIL_FROM") or None,
        email_password=os.getenv("EMAIL_PASSWORD") or None,
        email_from_name=os.getenv("EMAIL_FROM_NAME") or "McRoberts Engineering Club",
        smtp_host=os.getenv("SMTP_HOST") or "smtp.gmail.com",
        smtp_port=_parse_int_with_default(os.getenv("SMTP_PORT"), 465, "SMTP_PORT", 1, 65535),
        test_email_address=os.getenv("TEST_EMAIL_ADDRESS") or None,
        google_sheets_id=os.getenv("GOOGLE_SHEETS_ID") or None,
        google_sheet_name=os.getenv("GOOGLE_SHEET_NAME") or "Sheet1",
        google_client_email=os.getenv("GOOGLE_CLIENT_EMAIL") or None,
        google_private_key=_parse_private_key(os.getenv("GOOGLE_PRIVATE_KEY")),
        google_project_id=os.getenv("GOOGLE_PROJECT_ID") or None,
        google_private_key_id=os.getenv("GOOGLE_PRIVATE_KEY_ID") or None,
        google_client_id=os.getenv("GOOGLE_CLIENT_ID") or None,
        announcement_lifespan_minutes=_parse_int_with_default(
            os.getenv("ANNOUNCEMENT_LIFESPAN_MINUTES"), 30, "ANNOUNCEMENT_LIFESPAN_MINUTES", 1, 1440
        ),
        email_max_attempts=_parse_int_with_default(
            os.getenv("EMAIL_MAX_ATTEMPTS"), 3, "EMAIL_MAX_ATTEMPTS", 1, 10
        ),
        email_retry_delay=_parse_int_with_default(
            os.getenv("EMAIL_RETRY_DELAY"), 2, "EMAIL_RETRY_DELAY", 0, 60
        ),
        archive_check_interval=_parse_int_with_default(
            os.getenv("ARCHIVE_CHECK_INTERVAL"), 60, "ARCHIVE_CHECK_INTERVAL", 10, 3600
        ),
        archived_category_name=(os.getenv("ARCHIVED_CATEGORY_NAME") or "archived").lower(),
        unarchive_category_name=(os.getenv("UNARCHIVE_CATEGORY_NAME") or "execs").lower(),
        port=_parse_int_with_default(os.getenv("PORT"), 10000, "PORT", 1, 65535),
        timezone=os.getenv("TIMEZONE") or "America/Vancouver",
        network_timeout=_parse_int_with_default(
            os.getenv("NETWORK_TIMEOUT"), 10, "NETWORK_TIMEOUT", 1, 120
        ),
        error_webhook_url=_validate_url(os.getenv("ERROR_WEBHOOK_URL"), "ERROR_WEBHOOK_URL"),
    )


# =============================================================================
# Singleton Access
# =============================================================================

_config: Optional[Config] = None


def get_config() -> Config:
    """
    Get the global configuration instance.

    Returns:
        The global Config instance.

    Raises:
        ConfigValidationError: On first call if config is invalid.
    """
    global _config
    if _config is None:
        _config = load_config()
    return _config


def reset_config() -> None:
    """Drop the cached Config so the next get_config() reloads the environment."""
    global _config
    _config = None


# =============================================================================
# Config Validation & Logging
# =============================================================================

def validate_and_log_config() -> Config:
    """
    Validate configuration and log results at startup.

    Returns:
        The loaded Config.

    Raises:
        ConfigValidationError: If required configuration is missing.
    """
    from sprocket.core.logger import logger

    config = get_config()

    optional_features = []
    if config.email_configured:
        optional_features.append("Email")
    if config.sheets_configured:
        optional_features.append("Sheets")
    if config.introduction_channel_id:
        optional_features.append("Introductions")
    if config.error_webhook_url:
        optional_features.append("Webhook Alerts")

    missing_optional = []
    if not config.email_configured:
        missing_optional.append("EMAIL_FROM / EMAIL_PASSWORD")
    if not config.sheets_configured:
        missing_optional.append("GOOGLE_SHEETS_ID / GOOGLE_CLIENT_EMAIL / GOOGLE_PRIVATE_KEY")

    for var in missing_optional:
        logger.info(f"Optional config not set: {var}")

    logger.tree("Configuration Validated", [
        ("Required", "✅ All required variables set"),
        ("Optional Features", ", ".join(optional_features) if optional_features else "None"),
        ("Announcement Lifespan", f"{config.announcement_lifespan_minutes} min"),
        ("Email Attempts", str(config.email_max_attempts)),
    ], emoji="⚙️")

    return config


# =============================================================================
# Module Export
# =============================================================================

__all__ = [
    "Config",
    "ConfigValidationError",
    "EmbedColors",
    "load_config",
    "get_config",
    "reset_config",
    "validate_and_log_config",
]
