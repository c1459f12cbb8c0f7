"""
Guardian - Member Events
========================

Member joins feed raid detection and the dangerous-bot deny-list.
"""

from typing import TYPE_CHECKING

import discord
from discord.ext import commands

from guardian.core.logger import logger
from guardian.utils.async_utils import safe_async_operation

if TYPE_CHECKING:
    from guardian.bot import GuardianBot


class MemberEvents(commands.Cog):
    """Member event handlers."""

    def __init__(self, bot: "GuardianBot") -> None:
        self.bot = bot

    @commands.Cog.listener()
    async def on_member_join(self, member: discord.Member) -> None:
        await safe_async_operation("Raid Detection", self.bot.raid.on_member_join(member))


async def setup(bot: "GuardianBot") -> None:
    """Add the member events cog to the bot."""
    await bot.add_cog(MemberEvents(bot))
    logger.debug("Member Events Loaded")
