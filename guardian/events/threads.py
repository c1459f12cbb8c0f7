"""
Guardian - Thread Events
========================

Thread creation and name/archive/lock changes feed thread-spam detection.
"""

from typing import TYPE_CHECKING

import discord
from discord.ext import commands

from guardian.core.logger import logger
from guardian.services.thread_spam import thread_changed
from guardian.utils.async_utils import safe_async_operation

if TYPE_CHECKING:
    from guardian.bot import GuardianBot


class ThreadEvents(commands.Cog):
    """Thread event handlers."""

    def __init__(self, bot: "GuardianBot") -> None:
        self.bot = bot

    @commands.Cog.listener()
    async def on_thread_create(self, thread: discord.Thread) -> None:
        await safe_async_operation("Thread Spam", self.bot.thread_spam.record_operation(thread, "create"))

    @commands.Cog.listener()
    async def on_thread_update(self, before: discord.Thread, after: discord.Thread) -> None:
        if not thread_changed(before, after):
            return
        await safe_async_operation("Thread Spam", self.bot.thread_spam.record_operation(after, "update"))


async def setup(bot: "GuardianBot") -> None:
    """Add the thread events cog to the bot."""
    await bot.add_cog(ThreadEvents(bot))
    logger.debug("Thread Events Loaded")
