"""
Tests for raid detection and lockdown.
"""

import pytest

from guardian.services.guild_settings import KEY_RAID_LOCKDOWN_DEFAULT
from guardian.services.raid import RaidService, load_dangerous_bots
from guardian.services.remediation import RemediationRole


NUKE_BOT_ID = 1092845207946235945


@pytest.fixture
def service(mock_bot):
    return RaidService(mock_bot, {NUKE_BOT_ID: "Nuke Bot"})


def _raid_role(guild, bot):
    return next(r for r in guild.roles if r.name == bot.config.raid_role_name)


# =============================================================================
# Threshold
# =============================================================================

class TestRequiredJoins:
    """Tests for the baseline-relative threshold."""

    def test_empty_baseline_uses_floor(self, service):
        assert service.required_joins(0) == 5

    def test_busy_baseline_raises_threshold(self, service):
        service.baseline = 3600
        service.window = 300
        # 120 joins/hour -> 10 expected per 5 min -> x5
        assert service.required_joins(120) == pytest.approx(50)


# =============================================================================
# Lockdown
# =============================================================================

class TestRaidLockdown:
    """Tests for lockdown activation and recovery."""

    @pytest.mark.asyncio
    async def test_five_joins_trigger_lockdown(self, service, mock_bot, mock_guild, make_member):
        members = [make_member() for _ in range(5)]
        for i, member in enumerate(members):
            await service.on_member_join(member, now=float(i))

        assert service.is_locked(mock_guild.id)
        role = _raid_role(mock_guild, mock_bot)
        for member in members:
            member.add_roles.assert_awaited_once()
            assert member.add_roles.await_args.args[0] is role
        mock_bot.mod_log.log.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_four_joins_do_not_trigger(self, service, mock_bot, mock_guild, make_member):
        for i in range(4):
            await service.on_member_join(make_member(), now=float(i))

        assert not service.is_locked(mock_guild.id)
        mock_guild.create_role.assert_not_awaited()
        mock_bot.mod_log.log.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_spread_out_joins_do_not_trigger(self, service, mock_guild, make_member):
        for i in range(10):
            await service.on_member_join(make_member(), now=i * 120.0)

        assert not service.is_locked(mock_guild.id)

    @pytest.mark.asyncio
    async def test_joiners_during_lockdown_are_tagged(self, service, mock_bot, mock_guild, make_member):
        for i in range(5):
            await service.on_member_join(make_member(), now=float(i))

        late = make_member()
        await service.on_member_join(late, now=1000.0)

        late.add_roles.assert_awaited_once()
        assert late.add_roles.await_args.args[0] is _raid_role(mock_guild, mock_bot)
        # one activation log only
        mock_bot.mod_log.log.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_members_already_holding_role_not_retagged(self, service, mock_bot, mock_guild, make_member):
        members = [make_member() for _ in range(5)]
        raid_role = await mock_bot.roles.ensure(mock_guild, RemediationRole.RAID_GUARD)
        members[0].roles.append(raid_role)

        for i, member in enumerate(members):
            await service.on_member_join(member, now=float(i))

        members[0].add_roles.assert_not_awaited()
        members[1].add_roles.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_release_is_manual_and_keeps_roles(self, service, mock_guild, make_member):
        members = [make_member() for _ in range(5)]
        for i, member in enumerate(members):
            await service.on_member_join(member, now=float(i))

        # lockdown does not lapse on its own
        await service.on_member_join(make_member(), now=10_000.0)
        assert service.is_locked(mock_guild.id)

        assert service.release_lockdown(mock_guild.id) is True
        assert not service.is_locked(mock_guild.id)
        assert service.release_lockdown(mock_guild.id) is False
        for member in members:
            member.remove_roles.assert_not_awaited()

        calm = make_member()
        await service.on_member_join(calm, now=20_000.0)
        calm.add_roles.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_lockdown_default_from_settings(self, service, mock_bot, mock_guild, make_member):
        mock_bot.settings.set(mock_guild.id, KEY_RAID_LOCKDOWN_DEFAULT, True)
        joiner = make_member()

        await service.on_member_join(joiner, now=0.0)

        assert service.is_locked(mock_guild.id)
        joiner.add_roles.assert_awaited_once()


# =============================================================================
# Dangerous Bots
# =============================================================================

class TestDangerousBots:
    """Tests for the deny-list."""

    @pytest.mark.asyncio
    async def test_listed_bot_is_banned(self, service, mock_bot, mock_guild, make_member):
        bot_member = make_member(member_id=NUKE_BOT_ID, bot=True)

        await service.on_member_join(bot_member, now=0.0)

        mock_guild.ban.assert_awaited_once()
        assert mock_guild.ban.await_args.args[0] is bot_member
        mock_bot.mod_log.log.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_unlisted_bot_ignored(self, service, mock_bot, mock_guild, make_member):
        for i in range(6):
            await service.on_member_join(make_member(bot=True), now=float(i))

        mock_guild.ban.assert_not_awaited()
        assert not service.is_locked(mock_guild.id)
        assert mock_bot.tracker.size(("raid", mock_guild.id, 0)) == 0

    def test_load_bundled_list(self):
        from guardian.core.constants import DANGEROUS_BOTS_FILE

        bots = load_dangerous_bots(DANGEROUS_BOTS_FILE)
        assert bots[NUKE_BOT_ID] == "Nuke Bot"

    def test_missing_file_gives_empty_list(self, tmp_path):
        assert load_dangerous_bots(tmp_path / "missing.json") == {}

    def test_malformed_file_gives_empty_list(self, tmp_path):
        path = tmp_path / "bots.json"
        path.write_text("{not json", encoding="utf-8")
        assert load_dangerous_bots(path) == {}
