"""
Tests for anti-nuke detection and actor attribution.
"""

from unittest.mock import AsyncMock, MagicMock

import discord
import pytest

from guardian.services.antinuke import AntiNukeService, AuditLogAttributor, NukeKind


CHANNEL_DELETE = discord.AuditLogAction.channel_delete
ROLE_DELETE = discord.AuditLogAction.role_delete


@pytest.fixture
def attributor():
    attr = MagicMock()
    attr.attribute = AsyncMock(return_value=None)
    return attr


@pytest.fixture
def service(mock_bot, attributor):
    return AntiNukeService(mock_bot, attributor)


# =============================================================================
# Detection
# =============================================================================

class TestAntiNukeService:
    """Tests for per-actor privileged action limits."""

    @pytest.mark.asyncio
    async def test_five_channel_deletes_ban_bot(self, service, attributor, mock_bot, mock_guild, make_member):
        nuker = make_member(bot=True)
        attributor.attribute.return_value = nuker

        results = [
            await service.on_privileged_action(mock_guild, NukeKind.CHANNEL, CHANNEL_DELETE, now=i * 10.0)
            for i in range(5)
        ]

        assert results == [False, False, False, False, True]
        mock_guild.ban.assert_awaited_once()
        assert mock_guild.ban.await_args.args[0] is nuker
        mock_bot.mod_log.log.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_four_channel_deletes_do_not_ban(self, service, attributor, mock_guild, make_member):
        attributor.attribute.return_value = make_member(bot=True)

        for i in range(4):
            await service.on_privileged_action(mock_guild, NukeKind.CHANNEL, CHANNEL_DELETE, now=float(i))

        mock_guild.ban.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_actions_outside_window_do_not_count(self, service, attributor, mock_guild, make_member):
        attributor.attribute.return_value = make_member(bot=True)

        for i in range(8):
            await service.on_privileged_action(mock_guild, NukeKind.CHANNEL, CHANNEL_DELETE, now=i * 40.0)

        mock_guild.ban.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_role_threshold_is_ten(self, service, mock_guild, make_member):
        nuker = make_member(bot=True)

        results = [
            await service.record_action(mock_guild, nuker, NukeKind.ROLE, ROLE_DELETE, now=float(i))
            for i in range(10)
        ]

        assert results.count(True) == 1
        assert results[-1] is True

    @pytest.mark.asyncio
    async def test_role_and_channel_windows_are_independent(self, service, mock_guild, make_member):
        nuker = make_member(bot=True)

        for i in range(4):
            await service.record_action(mock_guild, nuker, NukeKind.CHANNEL, now=float(i))
        for i in range(9):
            await service.record_action(mock_guild, nuker, NukeKind.ROLE, now=float(i))

        mock_guild.ban.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_breach_resets_both_windows(self, service, mock_bot, mock_guild, make_member):
        nuker = make_member(bot=True)
        for i in range(3):
            await service.record_action(mock_guild, nuker, NukeKind.ROLE, now=float(i))
        for i in range(5):
            await service.record_action(mock_guild, nuker, NukeKind.CHANNEL, now=float(i))

        assert mock_bot.tracker.size(("nuke_role", mock_guild.id, nuker.id)) == 0
        assert mock_bot.tracker.size(("nuke_channel", mock_guild.id, nuker.id)) == 0

    @pytest.mark.asyncio
    async def test_human_actor_ignored(self, service, attributor, mock_guild, make_member):
        attributor.attribute.return_value = make_member(bot=False)

        for i in range(10):
            assert await service.on_privileged_action(
                mock_guild, NukeKind.CHANNEL, CHANNEL_DELETE, now=float(i)
            ) is False
        mock_guild.ban.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_self_ignored(self, service, attributor, mock_bot, mock_guild, make_member):
        attributor.attribute.return_value = make_member(member_id=mock_bot.user.id, bot=True)

        for i in range(10):
            await service.on_privileged_action(mock_guild, NukeKind.CHANNEL, CHANNEL_DELETE, now=float(i))
        mock_guild.ban.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_trusted_bot_ignored(self, mock_bot, attributor, mock_guild, make_member):
        mock_bot.config.trusted_bot_ids = {4242}
        service = AntiNukeService(mock_bot, attributor)
        attributor.attribute.return_value = make_member(member_id=4242, bot=True)

        for i in range(10):
            await service.on_privileged_action(mock_guild, NukeKind.CHANNEL, CHANNEL_DELETE, now=float(i))
        mock_guild.ban.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_unattributed_event_ignored(self, service, mock_guild):
        assert await service.on_privileged_action(mock_guild, NukeKind.ROLE, ROLE_DELETE, now=0.0) is False

    @pytest.mark.asyncio
    async def test_failed_ban_still_resets(self, service, mock_bot, mock_guild, make_member, forbidden):
        mock_guild.ban.side_effect = forbidden
        nuker = make_member(bot=True)

        for i in range(5):
            await service.record_action(mock_guild, nuker, NukeKind.CHANNEL, now=float(i))

        assert mock_bot.tracker.size(("nuke_channel", mock_guild.id, nuker.id)) == 0
        mock_bot.mod_log.log.assert_awaited_once()


# =============================================================================
# Attribution
# =============================================================================

def _entry(user, target_id):
    entry = MagicMock()
    entry.user = user
    entry.target = MagicMock(id=target_id)
    return entry


def _audit_logs(entries=(), error=None):
    def audit_logs(**kwargs):
        async def gen():
            if error is not None:
                raise error
            for entry in entries:
                yield entry
        return gen()
    return MagicMock(side_effect=audit_logs)


class TestAuditLogAttributor:
    """Tests for audit-log based attribution."""

    @pytest.mark.asyncio
    async def test_prefers_matching_target(self, mock_guild):
        newest, matching = MagicMock(), MagicMock()
        mock_guild.audit_logs = _audit_logs([_entry(newest, 1), _entry(matching, 2)])

        actor = await AuditLogAttributor().attribute(mock_guild, CHANNEL_DELETE, target_id=2)

        assert actor is matching
        assert mock_guild.audit_logs.call_args.kwargs == {"limit": 5, "action": CHANNEL_DELETE}

    @pytest.mark.asyncio
    async def test_falls_back_to_newest(self, mock_guild):
        newest = MagicMock()
        mock_guild.audit_logs = _audit_logs([_entry(newest, 1), _entry(MagicMock(), 2)])

        assert await AuditLogAttributor().attribute(mock_guild, CHANNEL_DELETE, target_id=99) is newest

    @pytest.mark.asyncio
    async def test_empty_log_gives_none(self, mock_guild):
        mock_guild.audit_logs = _audit_logs([])
        assert await AuditLogAttributor().attribute(mock_guild, ROLE_DELETE) is None

    @pytest.mark.asyncio
    async def test_missing_permission_gives_none(self, mock_guild, forbidden):
        mock_guild.audit_logs = _audit_logs(error=forbidden)
        assert await AuditLogAttributor().attribute(mock_guild, ROLE_DELETE) is None
