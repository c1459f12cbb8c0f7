"""
Guardian - Channel & Role Events
================================

Role and channel create/delete events feed the anti-nuke detector.
New channels also receive the remediation role overwrites.
"""

from typing import TYPE_CHECKING

import discord
from discord.ext import commands

from guardian.core.logger import logger
from guardian.services.antinuke import NukeKind
from guardian.utils.async_utils import safe_async_operation

if TYPE_CHECKING:
    from guardian.bot import GuardianBot


class ChannelEvents(commands.Cog):
    """Channel and role event handlers."""

    def __init__(self, bot: "GuardianBot") -> None:
        self.bot = bot

    async def _track(
        self,
        guild: discord.Guild,
        kind: NukeKind,
        action: discord.AuditLogAction,
        target_id: int,
    ) -> None:
        await safe_async_operation(
            "Anti-Nuke",
            self.bot.antinuke.on_privileged_action(guild, kind, action, target_id),
        )

    # =========================================================================
    # Channels
    # =========================================================================

    @commands.Cog.listener()
    async def on_guild_channel_create(self, channel: discord.abc.GuildChannel) -> None:
        await safe_async_operation("Remediation Overwrites", self.bot.roles.apply_to_channel(channel))
        await self._track(channel.guild, NukeKind.CHANNEL, discord.AuditLogAction.channel_create, channel.id)

    @commands.Cog.listener()
    async def on_guild_channel_delete(self, channel: discord.abc.GuildChannel) -> None:
        await self._track(channel.guild, NukeKind.CHANNEL, discord.AuditLogAction.channel_delete, channel.id)

    # =========================================================================
    # Roles
    # =========================================================================

    @commands.Cog.listener()
    async def on_guild_role_create(self, role: discord.Role) -> None:
        await self._track(role.guild, NukeKind.ROLE, discord.AuditLogAction.role_create, role.id)

    @commands.Cog.listener()
    async def on_guild_role_delete(self, role: discord.Role) -> None:
        await self._track(role.guild, NukeKind.ROLE, discord.AuditLogAction.role_delete, role.id)


async def setup(bot: "GuardianBot") -> None:
    """Add the channel events cog to the bot."""
    await bot.add_cog(ChannelEvents(bot))
    logger.debug("Channel Events Loaded")
