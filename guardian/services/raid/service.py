"""
Guardian - Raid Service
=======================

Join-rate raid detection with manual-recovery lockdown.

DESIGN:
    One window per guild holds every join of the trailing baseline period
    (member id as payload). The expected number of joins in a detection
    window is derived from that baseline; a raid is declared when the
    recent joins reach `max(expected * multiplier, floor)`.

    Lockdown is a transient per-guild flag. It is set on the first
    breach, never expires on its own and is cleared only by
    release_lockdown(); roles handed out during lockdown are left in
    place for moderators to review.
"""

import time
from typing import Dict, List, Optional, Tuple, TYPE_CHECKING

import discord

from guardian.core.config import EmbedColors
from guardian.core.logger import logger
from guardian.services.remediation import RemediationRole, safe_add_role, safe_ban
from guardian.utils.async_utils import gather_with_logging

if TYPE_CHECKING:
    from guardian.bot import GuardianBot


DETECTOR = "raid"
GUILD_ACTOR = 0  # join history is tracked per guild, not per member


class RaidService:
    """Join-rate raid detection, lockdown and deny-list bans."""

    def __init__(self, bot: "GuardianBot", dangerous_bots: Dict[int, str]) -> None:
        self.bot = bot
        thresholds = bot.config.thresholds
        self.window = thresholds.raid_window_seconds
        self.baseline = thresholds.raid_baseline_seconds
        self.multiplier = thresholds.raid_rate_multiplier
        self.floor = thresholds.raid_join_floor
        self.dangerous_bots = dangerous_bots

        self._lockdown: Dict[int, bool] = {}

    # =========================================================================
    # Lockdown State
    # =========================================================================

    def is_locked(self, guild_id: int) -> bool:
        if guild_id in self._lockdown:
            return self._lockdown[guild_id]
        return self.bot.settings.raid_lockdown_default(guild_id)

    def release_lockdown(self, guild_id: int) -> bool:
        """
        Clear a guild's lockdown flag.

        Returns:
            True if the guild was locked.
        """
        was_locked = self.is_locked(guild_id)
        self._lockdown[guild_id] = False
        if was_locked:
            logger.tree("Raid Lockdown Released", [
                ("Guild", str(guild_id)),
            ], emoji="🔓")
        return was_locked

    # =========================================================================
    # Detection
    # =========================================================================

    def required_joins(self, joins_in_baseline: int) -> float:
        """Joins within one detection window that count as a raid."""
        baseline_hours = self.baseline / 3600
        window_hours = self.window / 3600
        baseline_rate = joins_in_baseline / baseline_hours * window_hours
        return max(baseline_rate * self.multiplier, self.floor)

    def record_join(self, guild_id: int, member_id: int, now: float) -> Tuple[List[int], float]:
        """
        Record a join and return (member ids joined within the window, required).

        Caller holds the guild's lock.
        """
        key = (DETECTOR, guild_id, GUILD_ACTOR)
        entries = self.bot.tracker.record(key, now, member_id, window=self.baseline)
        recent = [e.payload for e in entries if now - e.timestamp < self.window]
        return recent, self.required_joins(len(entries))

    async def on_member_join(self, member: discord.Member, now: Optional[float] = None) -> None:
        guild = member.guild

        if member.bot:
            await self._check_dangerous_bot(member)
            return

        now = time.monotonic() if now is None else now
        key = (DETECTOR, guild.id, GUILD_ACTOR)
        activate = False
        async with self.bot.tracker.lock(key):
            recent, required = self.record_join(guild.id, member.id, now)
            already_locked = self.is_locked(guild.id)
            if not already_locked and len(recent) >= required:
                self._lockdown[guild.id] = True
                activate = True

        if activate:
            await self._activate_lockdown(guild, recent, required)
        elif already_locked:
            await self._tag_joiner(member)

    # =========================================================================
    # Remediation
    # =========================================================================

    async def _tag_joiner(self, member: discord.Member) -> bool:
        role = await self.bot.roles.ensure(member.guild, RemediationRole.RAID_GUARD)
        if role is None:
            return False
        return await safe_add_role(member, role, reason="Raid lockdown active")

    async def _activate_lockdown(self, guild: discord.Guild, recent: List[int], required: float) -> None:
        role = await self.bot.roles.ensure(guild, RemediationRole.RAID_GUARD)

        tagged = 0
        if role is not None:
            targets = []
            for member_id in dict.fromkeys(recent):
                member = guild.get_member(member_id)
                if member is None or any(r.id == role.id for r in member.roles):
                    continue
                targets.append(member)

            results = await gather_with_logging(
                *[("Tag Raid Joiner", safe_add_role(m, role, reason="Raid lockdown")) for m in targets],
                context="Raid Lockdown",
            )
            tagged = sum(1 for r in results if r is True)

        logger.tree("RAID LOCKDOWN ACTIVATED", [
            ("Guild", f"{guild.name} ({guild.id})"),
            ("Joins", f"{len(recent)} in {self.window}s"),
            ("Threshold", f"{required:.1f}"),
            ("Role", role.name if role else "Unavailable"),
            ("Tagged", str(tagged)),
        ], emoji="🚨")

        await self.bot.mod_log.log(
            guild,
            "🚨 Raid Lockdown Activated",
            [
                ("Joins", f"{len(recent)} in {self.window // 60} min"),
                ("Threshold", f"{required:.1f}"),
                ("Tagged", str(tagged)),
                ("Role", role.mention if role else "Unavailable"),
            ],
            color=EmbedColors.LOCKDOWN,
            description=(
                "New members are being restricted until a moderator ends the lockdown.\n"
                "Recovery is manual: run `/guard raid-unlock`, then review and remove "
                "the raid-guard role from legitimate members."
            ),
        )

    async def _check_dangerous_bot(self, member: discord.Member) -> bool:
        name = self.dangerous_bots.get(member.id)
        if name is None:
            return False

        guild = member.guild
        banned = await safe_ban(guild, member, reason=f"Dangerous bot on deny-list: {name}")

        logger.tree("DANGEROUS BOT JOINED", [
            ("Bot", f"{member} ({member.id})"),
            ("Listed As", name),
            ("Guild", f"{guild.name} ({guild.id})"),
            ("Banned", "Yes" if banned else "Failed"),
        ], emoji="🤖")

        await self.bot.mod_log.log(guild, "🤖 Dangerous Bot Banned", [
            ("Bot", f"{member.mention} ({member.id})"),
            ("Listed As", name),
            ("Banned", "Yes" if banned else "Failed"),
        ], color=EmbedColors.LOG_NEGATIVE)
        return True


__all__ = ["RaidService"]
