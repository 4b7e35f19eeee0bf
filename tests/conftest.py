"""
Sprocket - Test Fixtures
========================

Shared fixtures for all tests.
"""

import os
import tempfile
from typing import Dict, List, Sequence, Tuple
from unittest.mock import AsyncMock, MagicMock

import pytest

# Set up test environment before importing modules
os.environ.setdefault("LOGS_DIR", tempfile.mkdtemp(prefix="sprocket-logs-"))
os.environ.setdefault("DISCORD_TOKEN", "test-token")
os.environ["TESTING"] = "1"


# =============================================================================
# Fakes
# =============================================================================

class FakeTransport:
    """Mail transport that records messages instead of talking SMTP."""

    def __init__(self, outcomes: Sequence = ()) -> None:
        # Each outcome is an exception to raise or a refused-recipients dict
        self.outcomes: List = list(outcomes)
        self.calls: List[Tuple] = []

    async def send(self, message, recipients) -> Dict[str, Tuple[int, str]]:
        self.calls.append((message, list(recipients)))
        if self.outcomes:
            outcome = self.outcomes.pop(0)
            if isinstance(outcome, BaseException):
                raise outcome
            return outcome
        return {}


class FakeRecipientSource:
    """Recipient source returning a fixed list or raising."""

    def __init__(self, recipients=None, error: Exception = None) -> None:
        self.recipients = list(recipients or [])
        self.error = error
        self.calls = 0

    async def fetch(self) -> List[str]:
        self.calls += 1
        if self.error:
            raise self.error
        return list(self.recipients)


# =============================================================================
# Database
# =============================================================================

@pytest.fixture
def temp_db_path(tmp_path):
    """Create a temporary database path for testing."""
    return tmp_path / "test_sprocket.db"


@pytest.fixture
def test_db(temp_db_path):
    """Create a fresh test database instance."""
    from sprocket.core.database import DatabaseManager

    # Reset singleton
    DatabaseManager._instance = None

    db = DatabaseManager(temp_db_path)

    yield db

    # Cleanup
    db.close()
    DatabaseManager._instance = None


# =============================================================================
# Config
# =============================================================================

@pytest.fixture
def test_config():
    """Config with email set up, no retry delay and a test address."""
    from sprocket.core.config import Config

    return Config(
        discord_token="test-token",
        guild_id=987654321,
        announcement_channel_id=444555666,
        introduction_channel_id=333444555,
        email_from="club@example.com",
        email_password="app-password",
        test_email_address="tester@example.com",
        email_max_attempts=3,
        email_retry_delay=0,
    )


@pytest.fixture(autouse=True)
def fresh_config():
    """Drop the cached global Config around each test."""
    from sprocket.core.config import reset_config

    reset_config()
    yield
    reset_config()


# =============================================================================
# Email
# =============================================================================

@pytest.fixture
def fake_transport():
    return FakeTransport()


@pytest.fixture
def fake_recipients():
    return FakeRecipientSource(["a@x.com", "b@x.com"])


@pytest.fixture
def gateway(test_config, fake_recipients, fake_transport):
    """Email gateway wired to fakes."""
    from sprocket.services.email import EmailGateway

    return EmailGateway(test_config, recipient_source=fake_recipients, transport=fake_transport)


# =============================================================================
# Announcements
# =============================================================================

class FakeClock:
    """Controllable time source."""

    def __init__(self, now: float = 1_700_000_000.0) -> None:
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def store(test_db, clock):
    """Announcement store with a 30 minute lifespan on the fake clock."""
    from sprocket.services.announcements import AnnouncementStore

    return AnnouncementStore(test_db, lifespan_seconds=1800, clock=clock)


@pytest.fixture
def publisher():
    """Discord publisher that succeeds by default."""
    return AsyncMock(return_value=MagicMock(id=111222333))


@pytest.fixture
def workflow(store, gateway, publisher, clock):
    from sprocket.services.announcements import AnnouncementWorkflow

    return AnnouncementWorkflow(store=store, gateway=gateway, publisher=publisher, clock=clock)


# =============================================================================
# Discord Mocks
# =============================================================================

@pytest.fixture
def mock_discord_member():
    """Create a mock Discord member."""
    from datetime import datetime, timezone
    member = MagicMock()
    member.id = 123456789
    member.name = "testuser"
    member.display_name = "Test User"
    member.display_avatar.url = "https://example.com/avatar.png"
    member.created_at = datetime(2020, 9, 13, 12, 0, 0, tzinfo=timezone.utc)
    member.joined_at = datetime(2022, 4, 15, 10, 0, 0, tzinfo=timezone.utc)
    member.roles = []
    member.mention = "<@123456789>"
    member.bot = False
    member.add_roles = AsyncMock()
    return member


@pytest.fixture
def mock_discord_guild():
    """Create a mock Discord guild."""
    guild = MagicMock()
    guild.id = 987654321
    guild.name = "McRoberts Engineering"
    guild.roles = []
    guild.categories = []
    guild.get_channel = MagicMock(return_value=None)
    return guild


@pytest.fixture
def mock_discord_interaction(mock_discord_member, mock_discord_guild):
    """Create a mock Discord interaction."""
    interaction = MagicMock()
    interaction.user = mock_discord_member
    interaction.guild = mock_discord_guild
    interaction.channel_id = 555666777
    interaction.message = None
    interaction.client = MagicMock()
    interaction.response = MagicMock()
    interaction.response.defer = AsyncMock()
    interaction.response.send_message = AsyncMock()
    interaction.response.send_modal = AsyncMock()
    interaction.response.edit_message = AsyncMock()
    interaction.response.is_done = MagicMock(return_value=False)
    interaction.followup = MagicMock()
    interaction.followup.send = AsyncMock()
    interaction.edit_original_response = AsyncMock()
    return interaction


@pytest.fixture
def mock_discord_message(mock_discord_member, mock_discord_guild):
    """Create a mock Discord guild message."""
    message = MagicMock()
    message.id = 111222333
    message.content = "Test message content"
    message.author = mock_discord_member
    message.guild = mock_discord_guild
    message.channel = MagicMock()
    message.channel.id = 555666777
    message.reply = AsyncMock()
    message.add_reaction = AsyncMock()
    return message
