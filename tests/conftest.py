"""
Guardian - Test Fixtures
========================

Shared fixtures for all tests.

Discord objects are MagicMock/AsyncMock stand-ins; the real discord.py
package is used for exceptions, embeds and permission overwrites.
"""

import asyncio
import itertools
import os
import tempfile
from unittest.mock import AsyncMock, MagicMock

import pytest

# Keep log output out of the working tree; must happen before guardian imports
os.environ.setdefault("LOG_DIR", tempfile.mkdtemp(prefix="guardian-test-logs-"))

import discord  # noqa: E402

from guardian.core.config import Config, DetectorThresholds  # noqa: E402
from guardian.core.database import DatabaseManager  # noqa: E402
from guardian.services.exemptions import ExemptionPolicy  # noqa: E402
from guardian.services.guild_settings import GuildSettings  # noqa: E402
from guardian.services.remediation import MessageDeleter, RemediationRole, RoleProvisioner  # noqa: E402
from guardian.services.tracking import SlidingWindowTracker  # noqa: E402


GUILD_ID = 987654321
BOT_USER_ID = 999888777

_ids = itertools.count(10_000)


# =============================================================================
# Discord Exceptions
# =============================================================================

def http_error(cls=discord.HTTPException, status: int = 500, text: str = "error"):
    """Build a real discord.py HTTP exception from a fake response."""
    reasons = {403: "Forbidden", 404: "Not Found", 429: "Too Many Requests", 500: "Server Error"}
    response = MagicMock(status=status, reason=reasons.get(status, "Error"))
    return cls(response, text)


@pytest.fixture
def not_found():
    return http_error(discord.NotFound, 404, "Unknown Message")


@pytest.fixture
def forbidden():
    return http_error(discord.Forbidden, 403, "Missing Permissions")


# =============================================================================
# Settings & Database
# =============================================================================

@pytest.fixture
def temp_db_path(tmp_path):
    """Create a temporary database path for testing."""
    return tmp_path / "guardian_test.db"


@pytest.fixture
def test_db(temp_db_path):
    """Create a fresh test database instance."""
    db = DatabaseManager(temp_db_path)
    yield db
    db.close()


@pytest.fixture
def settings(test_db):
    guild_settings = GuildSettings(test_db)
    guild_settings.load()
    return guild_settings


@pytest.fixture
def thresholds():
    return DetectorThresholds()


@pytest.fixture
def config(thresholds):
    return Config(discord_token="test-token", thresholds=thresholds)


# =============================================================================
# Discord Object Factories
# =============================================================================

def _make_role(role_id: int, name: str) -> MagicMock:
    role = MagicMock()
    role.id = role_id
    role.name = name
    role.mention = f"<@&{role_id}>"
    return role


@pytest.fixture
def make_role():
    return _make_role


@pytest.fixture
def make_channel():
    def factory(guild=None, name: str = "general") -> MagicMock:
        channel = MagicMock()
        channel.id = next(_ids)
        channel.name = name
        channel.guild = guild
        channel.send = AsyncMock(return_value=MagicMock(id=next(_ids)))
        channel.set_permissions = AsyncMock()
        return channel
    return factory


@pytest.fixture
def mock_guild(make_channel):
    """A guild whose role/member lookups behave like discord.Guild."""
    guild = MagicMock()
    guild.id = GUILD_ID
    guild.name = "Test Server"
    guild.roles = []
    guild._members = {}
    guild.channels = []
    guild.text_channels = []
    guild.channels.extend(make_channel(guild, f"channel-{i}") for i in range(3))
    guild.me = MagicMock(id=BOT_USER_ID)
    guild.default_role = _make_role(GUILD_ID, "@everyone")

    guild.get_role = MagicMock(side_effect=lambda rid: next((r for r in guild.roles if r.id == rid), None))
    guild.get_member = MagicMock(side_effect=lambda mid: guild._members.get(mid))
    guild.get_channel = MagicMock(
        side_effect=lambda cid: next((c for c in guild.text_channels if c.id == cid), None)
    )

    async def create_role(name, permissions=None, reason=None):
        await asyncio.sleep(0)  # yield so concurrent callers interleave
        role = _make_role(next(_ids), name)
        guild.roles.append(role)
        return role

    guild.create_role = AsyncMock(side_effect=create_role)
    guild.ban = AsyncMock()
    return guild


@pytest.fixture
def make_member(mock_guild):
    def factory(member_id=None, roles=None, bot: bool = False, guild=None) -> MagicMock:
        g = guild or mock_guild
        member = MagicMock()
        member.id = member_id or next(_ids)
        member.name = f"user{member.id}"
        member.bot = bot
        member.guild = g
        member.roles = list(roles or [])
        member.mention = f"<@{member.id}>"
        member.add_roles = AsyncMock()
        member.remove_roles = AsyncMock()
        member.timeout = AsyncMock()
        member.kick = AsyncMock()
        member.send = AsyncMock()
        g._members[member.id] = member
        return member
    return factory


@pytest.fixture
def make_message(mock_guild, make_channel):
    channel = make_channel(mock_guild)

    def factory(author, content: str = "", attachments=None, msg_channel=None) -> MagicMock:
        message = MagicMock()
        message.id = next(_ids)
        message.author = author
        message.guild = author.guild
        message.channel = msg_channel or channel
        message.content = content
        message.attachments = list(attachments or [])
        message.delete = AsyncMock()
        message.reply = AsyncMock()
        return message
    return factory


# =============================================================================
# Bot
# =============================================================================

@pytest.fixture
def mock_bot(config, settings):
    """Bot stand-in carrying real shared components and a mocked log sink."""
    bot = MagicMock()
    bot.config = config
    bot.user = MagicMock(id=BOT_USER_ID)
    bot.settings = settings
    bot.tracker = SlidingWindowTracker()
    bot.exemptions = ExemptionPolicy(settings)
    bot.roles = RoleProvisioner({
        RemediationRole.MUTE: config.mute_role_name,
        RemediationRole.RAID_GUARD: config.raid_role_name,
    })
    bot.deleter = MessageDeleter()
    bot.mod_log = MagicMock()
    bot.mod_log.log = AsyncMock()
    bot.mod_log.is_log_channel = MagicMock(return_value=False)
    return bot
