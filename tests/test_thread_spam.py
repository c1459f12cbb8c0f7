"""
Tests for thread spam detection.
"""

from unittest.mock import MagicMock

import pytest

from guardian.services.exemptions import ExemptCategory
from guardian.services.thread_spam import ThreadSpamService, thread_changed


def _thread(owner, guild, name="thread", owner_attr=True):
    thread = MagicMock()
    thread.id = 42
    thread.name = name
    thread.guild = guild
    thread.owner = owner if owner_attr else None
    thread.owner_id = owner.id if owner is not None else None
    thread.archived = False
    thread.locked = False
    return thread


@pytest.fixture
def service(mock_bot):
    return ThreadSpamService(mock_bot)


# =============================================================================
# Change Detection
# =============================================================================

class TestThreadChanged:
    """Tests for which thread edits count as operations."""

    def _pair(self, **changes):
        before = MagicMock(name="before")
        before.name, before.archived, before.locked = "a", False, False
        after = MagicMock(name="after")
        after.name = changes.get("name", "a")
        after.archived = changes.get("archived", False)
        after.locked = changes.get("locked", False)
        return before, after

    def test_rename_counts(self):
        assert thread_changed(*self._pair(name="b"))

    def test_archive_counts(self):
        assert thread_changed(*self._pair(archived=True))

    def test_lock_counts(self):
        assert thread_changed(*self._pair(locked=True))

    def test_other_edit_ignored(self):
        assert not thread_changed(*self._pair())


# =============================================================================
# Detection
# =============================================================================

class TestThreadSpamService:
    """Tests for per-owner operation limits."""

    @pytest.mark.asyncio
    async def test_third_operation_times_out_owner(self, service, mock_bot, mock_guild, make_member):
        owner = make_member()
        thread = _thread(owner, mock_guild)

        assert await service.record_operation(thread, "create", now=0.0) is False
        assert await service.record_operation(thread, "rename", now=1.0) is False
        assert await service.record_operation(thread, "archive", now=2.0) is True

        owner.timeout.assert_awaited_once()
        assert owner.timeout.await_args.args[0].total_seconds() == 600
        mock_bot.mod_log.log.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_window_reset_after_breach(self, service, mock_guild, make_member):
        owner = make_member()
        thread = _thread(owner, mock_guild)
        for i in range(3):
            await service.record_operation(thread, "create", now=float(i))

        assert await service.record_operation(thread, "create", now=3.0) is False
        owner.timeout.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_slow_operations_never_trigger(self, service, mock_guild, make_member):
        owner = make_member()
        thread = _thread(owner, mock_guild)

        for i in range(6):
            assert await service.record_operation(thread, "create", now=i * 20.0) is False

    @pytest.mark.asyncio
    async def test_owner_resolved_from_cache(self, service, mock_guild, make_member):
        owner = make_member()
        thread = _thread(owner, mock_guild, owner_attr=False)
        for i in range(3):
            await service.record_operation(thread, "create", now=float(i))

        owner.timeout.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_unknown_owner_ignored(self, service, mock_guild):
        thread = _thread(None, mock_guild)
        assert await service.record_operation(thread, "create", now=0.0) is False

    @pytest.mark.asyncio
    async def test_bot_owner_ignored(self, service, mock_guild, make_member):
        owner = make_member(bot=True)
        thread = _thread(owner, mock_guild)
        for i in range(5):
            assert await service.record_operation(thread, "create", now=float(i)) is False

    @pytest.mark.asyncio
    async def test_exempt_owner_ignored(self, service, mock_bot, mock_guild, make_member, make_role):
        role = make_role(777, "Thread Mods")
        mock_bot.settings.add_exempt_role(mock_guild.id, ExemptCategory.THREAD_SPAM.value, 777)
        owner = make_member(roles=[role])
        thread = _thread(owner, mock_guild)

        for i in range(5):
            assert await service.record_operation(thread, "create", now=float(i)) is False

    @pytest.mark.asyncio
    async def test_per_guild_override(self, service, mock_bot, mock_guild, make_member):
        mock_bot.settings.set_thread_spam_limits(mock_guild.id, threshold=5, window_seconds=60)
        owner = make_member()
        thread = _thread(owner, mock_guild)

        results = [await service.record_operation(thread, "create", now=i * 10.0) for i in range(5)]

        assert results == [False, False, False, False, True]
