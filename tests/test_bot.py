"""
Tests for bot wiring.
"""

import pytest

from guardian.bot import GuardianBot
from guardian.commands import COMMAND_COGS
from guardian.events import EVENT_COGS


@pytest.fixture
def bot(config, test_db):
    return GuardianBot(config, test_db)


class TestGuardianBot:
    """Tests for component construction and cog loading."""

    @pytest.mark.asyncio
    async def test_detectors_share_components(self, bot):
        assert bot.spam.bot is bot
        assert bot.exemptions.settings is bot.settings
        assert bot.gif_guard.fetcher is bot.fetcher
        assert bot.raid.dangerous_bots  # bundled deny-list
        assert bot.insults.words  # bundled insult list

    @pytest.mark.asyncio
    async def test_all_cogs_load(self, bot):
        for extension in EVENT_COGS + COMMAND_COGS:
            await bot.load_extension(extension)

        assert set(bot.cogs) == {"MessageEvents", "MemberEvents", "ChannelEvents", "ThreadEvents", "GuardCog"}
        assert bot.tree.get_command("guard") is not None
