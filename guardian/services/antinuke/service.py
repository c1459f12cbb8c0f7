"""
Guardian - Anti-Nuke Service
============================

Bans automated accounts that mass-create or delete roles and channels.

DESIGN:
    Only bot accounts are tracked; this bot and trusted bot ids never are.
    Each (guild, actor) has two independent windows, one for role actions
    and one for channel actions. Breaching either bans the actor and
    resets both.
"""

import time
from enum import Enum
from typing import Optional, Tuple, TYPE_CHECKING

import discord

from guardian.core.config import EmbedColors
from guardian.core.logger import logger
from guardian.services.remediation import safe_ban

from .attribution import Actor, ActorAttributor

if TYPE_CHECKING:
    from guardian.bot import GuardianBot


class NukeKind(str, Enum):
    ROLE = "role"
    CHANNEL = "channel"


class AntiNukeService:
    """Rate limits privileged actions of bot accounts."""

    def __init__(self, bot: "GuardianBot", attributor: ActorAttributor) -> None:
        self.bot = bot
        self.attributor = attributor
        thresholds = bot.config.thresholds
        self.window = thresholds.nuke_window_seconds
        self.thresholds = {
            NukeKind.ROLE: thresholds.nuke_role_threshold,
            NukeKind.CHANNEL: thresholds.nuke_channel_threshold,
        }
        self.trusted_ids = set(bot.config.trusted_bot_ids)

        logger.tree("Anti-Nuke Service Loaded", [
            ("Role Actions", f"{self.thresholds[NukeKind.ROLE]} / {self.window}s"),
            ("Channel Actions", f"{self.thresholds[NukeKind.CHANNEL]} / {self.window}s"),
            ("Trusted Bots", str(len(self.trusted_ids))),
        ], emoji="🛡️")

    def is_tracked_actor(self, actor: Actor) -> bool:
        if not actor.bot:
            return False
        if self.bot.user is not None and actor.id == self.bot.user.id:
            return False
        return actor.id not in self.trusted_ids

    async def on_privileged_action(
        self,
        guild: discord.Guild,
        kind: NukeKind,
        action: discord.AuditLogAction,
        target_id: Optional[int] = None,
        now: Optional[float] = None,
    ) -> bool:
        """
        Attribute a role/channel event and count it against its actor.

        Returns:
            True when the actor breached a threshold and was handled.
        """
        actor = await self.attributor.attribute(guild, action, target_id)
        if actor is None or not self.is_tracked_actor(actor):
            return False
        return await self.record_action(guild, actor, kind, action, now)

    async def record_action(
        self,
        guild: discord.Guild,
        actor: Actor,
        kind: NukeKind,
        action: Optional[discord.AuditLogAction] = None,
        now: Optional[float] = None,
    ) -> bool:
        now = time.monotonic() if now is None else now
        tracker = self.bot.tracker
        role_key = ("nuke_role", guild.id, actor.id)
        channel_key = ("nuke_channel", guild.id, actor.id)

        async with tracker.lock(("nuke", guild.id, actor.id)):
            tracker.record(role_key if kind is NukeKind.ROLE else channel_key, now, action, window=self.window)
            counts = {
                NukeKind.ROLE: len(tracker.current_window(role_key, now, self.window)),
                NukeKind.CHANNEL: len(tracker.current_window(channel_key, now, self.window)),
            }

            logger.debug("Privileged Action Tracked", [
                ("Guild", str(guild.id)),
                ("Actor", f"{actor} ({actor.id})"),
                ("Kind", kind.value),
                ("Roles", f"{counts[NukeKind.ROLE]} / {self.thresholds[NukeKind.ROLE]}"),
                ("Channels", f"{counts[NukeKind.CHANNEL]} / {self.thresholds[NukeKind.CHANNEL]}"),
            ])

            breached = [k for k in NukeKind if counts[k] >= self.thresholds[k]]
            if not breached:
                return False
            tracker.reset(role_key)
            tracker.reset(channel_key)

        await self._handle_nuke(guild, actor, breached[0], (counts[NukeKind.ROLE], counts[NukeKind.CHANNEL]))
        return True

    async def _handle_nuke(
        self,
        guild: discord.Guild,
        actor: Actor,
        kind: NukeKind,
        counts: Tuple[int, int],
    ) -> None:
        roles, channels = counts
        banned = await safe_ban(guild, actor, reason=f"Anti-nuke: mass {kind.value} actions")

        logger.tree("NUKE BOT DETECTED", [
            ("Actor", f"{actor} ({actor.id})"),
            ("Guild", f"{guild.name} ({guild.id})"),
            ("Trigger", f"mass {kind.value} actions"),
            ("Role Actions", f"{roles} / {self.window}s"),
            ("Channel Actions", f"{channels} / {self.window}s"),
            ("Banned", "Yes" if banned else "Failed"),
        ], emoji="☢️")

        await self.bot.mod_log.log(guild, "☢️ Nuke Bot Banned", [
            ("Actor", f"{actor.mention} ({actor.id})"),
            ("Trigger", f"mass {kind.value} actions"),
            ("Role Actions", f"{roles} in {self.window}s"),
            ("Channel Actions", f"{channels} in {self.window}s"),
            ("Banned", "Yes" if banned else "Failed"),
        ], color=EmbedColors.LOG_NEGATIVE)


__all__ = ["AntiNukeService", "NukeKind"]
