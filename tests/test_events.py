"""
Tests for event routing into the detectors.
"""

from unittest.mock import AsyncMock, MagicMock

import discord
import pytest

from guardian.events.channels import ChannelEvents
from guardian.events.members import MemberEvents
from guardian.events.messages import MessageEvents
from guardian.events.threads import ThreadEvents
from guardian.services.antinuke import NukeKind


@pytest.fixture
def routing_bot():
    """Bot whose detectors are all AsyncMocks."""
    bot = MagicMock()
    bot.mod_log.is_log_channel = MagicMock(return_value=False)
    for name in ("spam", "gif_guard", "ngwords", "insults"):
        getattr(bot, name).check = AsyncMock(return_value=False)
    bot.raid.on_member_join = AsyncMock()
    bot.antinuke.on_privileged_action = AsyncMock(return_value=False)
    bot.roles.apply_to_channel = AsyncMock(return_value=0)
    bot.thread_spam.record_operation = AsyncMock(return_value=False)
    return bot


def _message(content="hello", bot_author=False, guild=True):
    message = MagicMock()
    message.content = content
    message.author.bot = bot_author
    message.guild = MagicMock(id=1) if guild else None
    return message


# =============================================================================
# Messages
# =============================================================================

class TestMessagePipeline:
    """Tests for on_message / on_message_edit routing."""

    @pytest.mark.asyncio
    async def test_all_detectors_run_for_clean_message(self, routing_bot):
        await MessageEvents(routing_bot).on_message(_message())

        routing_bot.spam.check.assert_awaited_once()
        routing_bot.gif_guard.check.assert_awaited_once()
        routing_bot.ngwords.check.assert_awaited_once()
        routing_bot.insults.check.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_spam_ends_pipeline(self, routing_bot):
        routing_bot.spam.check.return_value = True

        await MessageEvents(routing_bot).on_message(_message())

        routing_bot.gif_guard.check.assert_not_awaited()
        routing_bot.ngwords.check.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_hazardous_image_ends_pipeline(self, routing_bot):
        routing_bot.gif_guard.check.return_value = True

        await MessageEvents(routing_bot).on_message(_message())

        routing_bot.ngwords.check.assert_not_awaited()
        routing_bot.insults.check.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_word_filters_both_run(self, routing_bot):
        routing_bot.ngwords.check.return_value = True

        await MessageEvents(routing_bot).on_message(_message())

        routing_bot.insults.check.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_detector_failure_does_not_stop_others(self, routing_bot):
        routing_bot.spam.check.side_effect = RuntimeError("boom")

        await MessageEvents(routing_bot).on_message(_message())

        routing_bot.gif_guard.check.assert_awaited_once()
        routing_bot.insults.check.assert_awaited_once()

    @pytest.mark.asyncio
    @pytest.mark.parametrize("message", [
        _message(bot_author=True),
        _message(guild=False),
    ])
    async def test_skipped_messages(self, routing_bot, message):
        await MessageEvents(routing_bot).on_message(message)
        routing_bot.spam.check.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_log_channel_skipped(self, routing_bot):
        routing_bot.mod_log.is_log_channel.return_value = True
        await MessageEvents(routing_bot).on_message(_message())
        routing_bot.spam.check.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_edit_runs_ngwords_only(self, routing_bot):
        after = _message("edited")

        await MessageEvents(routing_bot).on_message_edit(_message("original"), after)

        routing_bot.ngwords.check.assert_awaited_once_with(after, is_edit=True)
        routing_bot.spam.check.assert_not_awaited()
        routing_bot.insults.check.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_edit_without_content_change_ignored(self, routing_bot):
        await MessageEvents(routing_bot).on_message_edit(_message("same"), _message("same"))
        routing_bot.ngwords.check.assert_not_awaited()


# =============================================================================
# Members, Channels, Threads
# =============================================================================

class TestOtherEvents:
    """Tests for join, channel, role and thread routing."""

    @pytest.mark.asyncio
    async def test_member_join(self, routing_bot):
        member = MagicMock()
        await MemberEvents(routing_bot).on_member_join(member)
        routing_bot.raid.on_member_join.assert_awaited_once_with(member)

    @pytest.mark.asyncio
    async def test_channel_create_applies_overwrites_and_tracks(self, routing_bot):
        channel = MagicMock(id=77)

        await ChannelEvents(routing_bot).on_guild_channel_create(channel)

        routing_bot.roles.apply_to_channel.assert_awaited_once_with(channel)
        routing_bot.antinuke.on_privileged_action.assert_awaited_once_with(
            channel.guild, NukeKind.CHANNEL, discord.AuditLogAction.channel_create, 77
        )

    @pytest.mark.asyncio
    async def test_role_delete_tracked(self, routing_bot):
        role = MagicMock(id=88)

        await ChannelEvents(routing_bot).on_guild_role_delete(role)

        routing_bot.antinuke.on_privileged_action.assert_awaited_once_with(
            role.guild, NukeKind.ROLE, discord.AuditLogAction.role_delete, 88
        )

    @pytest.mark.asyncio
    async def test_thread_create(self, routing_bot):
        thread = MagicMock()
        await ThreadEvents(routing_bot).on_thread_create(thread)
        routing_bot.thread_spam.record_operation.assert_awaited_once_with(thread, "create")

    @pytest.mark.asyncio
    async def test_thread_update_only_counts_tracked_changes(self, routing_bot):
        before, after = MagicMock(), MagicMock()
        before.name = after.name = "same"
        before.archived = after.archived = False
        before.locked = after.locked = False

        await ThreadEvents(routing_bot).on_thread_update(before, after)
        routing_bot.thread_spam.record_operation.assert_not_awaited()

        after.archived = True
        await ThreadEvents(routing_bot).on_thread_update(before, after)
        routing_bot.thread_spam.record_operation.assert_awaited_once_with(after, "update")
