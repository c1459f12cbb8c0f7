"""
Guardian - Message Events
=========================

Runs the message pipeline: similarity spam, GIF guard, NG-words, insults.

DESIGN:
    Each detector runs inside safe_async_operation so one detector's
    failure is logged without stopping the rest. Spam and hazardous
    images end the pipeline since the message is already gone; the word
    filters both run because their deletes are idempotent.
"""

from typing import TYPE_CHECKING

import discord
from discord.ext import commands

from guardian.core.logger import logger
from guardian.utils.async_utils import safe_async_operation

if TYPE_CHECKING:
    from guardian.bot import GuardianBot


class MessageEvents(commands.Cog):
    """Message event handlers."""

    def __init__(self, bot: "GuardianBot") -> None:
        self.bot = bot

    def _should_skip(self, message: discord.Message) -> bool:
        if message.guild is None or message.author.bot:
            return True
        return self.bot.mod_log.is_log_channel(message.channel)

    @commands.Cog.listener()
    async def on_message(self, message: discord.Message) -> None:
        if self._should_skip(message):
            return

        if await safe_async_operation("Similarity Spam", self.bot.spam.check(message), default=False):
            return

        if await safe_async_operation("GIF Guard", self.bot.gif_guard.check(message), default=False):
            return

        await safe_async_operation("NG-Words", self.bot.ngwords.check(message), default=False)
        await safe_async_operation("Insults", self.bot.insults.check(message), default=False)

    @commands.Cog.listener()
    async def on_message_edit(self, before: discord.Message, after: discord.Message) -> None:
        if self._should_skip(after):
            return
        if before.content == after.content:
            return

        await safe_async_operation("NG-Words (Edit)", self.bot.ngwords.check(after, is_edit=True), default=False)


async def setup(bot: "GuardianBot") -> None:
    """Add the message events cog to the bot."""
    await bot.add_cog(MessageEvents(bot))
    logger.debug("Message Events Loaded")
