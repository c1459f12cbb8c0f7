"""
Guardian - Thread Spam Service
==============================

Detects members creating or churning threads too quickly.

Thread creation and thread edits that change the name, archived or
locked state each count as one operation for the thread's owner.
On breach the owner is timed out and their window is cleared, so one
burst triggers once.
"""

import time
from typing import Optional, TYPE_CHECKING

import discord

from guardian.core.config import EmbedColors
from guardian.core.logger import logger
from guardian.services.exemptions import ExemptCategory
from guardian.services.remediation import safe_timeout

if TYPE_CHECKING:
    from guardian.bot import GuardianBot


DETECTOR = "thread_spam"


def thread_changed(before: discord.Thread, after: discord.Thread) -> bool:
    """True when an update touched the fields that count as an operation."""
    return (
        before.name != after.name
        or before.archived != after.archived
        or before.locked != after.locked
    )


class ThreadSpamService:
    """Per-owner thread operation rate limiting."""

    def __init__(self, bot: "GuardianBot") -> None:
        self.bot = bot
        thresholds = bot.config.thresholds
        self.default_threshold = thresholds.thread_spam_threshold
        self.default_window = thresholds.thread_spam_window_seconds
        self.timeout_seconds = thresholds.thread_spam_timeout_seconds

    def _owner(self, thread: discord.Thread) -> Optional[discord.Member]:
        owner = thread.owner
        if owner is None and thread.owner_id is not None:
            owner = thread.guild.get_member(thread.owner_id)
        return owner

    async def record_operation(
        self,
        thread: discord.Thread,
        operation: str,
        now: Optional[float] = None,
    ) -> bool:
        """
        Count one thread operation for the thread's owner.

        Returns:
            True when the owner breached the limit and was handled.
        """
        owner = self._owner(thread)
        if owner is None or owner.bot:
            return False
        if self.bot.exemptions.member_is_exempt(owner, ExemptCategory.THREAD_SPAM):
            return False

        guild = thread.guild
        threshold, window = self.bot.settings.thread_spam_limits(
            guild.id, self.default_threshold, self.default_window
        )

        now = time.monotonic() if now is None else now
        key = (DETECTOR, guild.id, owner.id)
        async with self.bot.tracker.lock(key):
            entries = self.bot.tracker.record(key, now, operation, window=window)
            count = len(entries)
            if count < threshold:
                return False
            self.bot.tracker.reset(key)

        await self._handle_breach(thread, owner, count, window)
        return True

    async def _handle_breach(
        self,
        thread: discord.Thread,
        owner: discord.Member,
        count: int,
        window: int,
    ) -> None:
        guild = thread.guild
        timed_out = await safe_timeout(
            owner, self.timeout_seconds, reason=f"Thread spam: {count} operations in {window}s"
        )

        logger.tree("THREAD SPAM DETECTED", [
            ("User", f"{owner} ({owner.id})"),
            ("Guild", f"{guild.name} ({guild.id})"),
            ("Thread", thread.name[:50] if thread.name else str(thread.id)),
            ("Operations", f"{count} in {window}s"),
            ("Timeout", f"{self.timeout_seconds}s" if timed_out else "Failed"),
        ], emoji="🧵")

        await self.bot.mod_log.log(guild, "🧵 Thread Spam", [
            ("User", f"{owner.mention} ({owner.id})"),
            ("Operations", f"{count} in {window}s"),
            ("Last Thread", thread.name[:100] if thread.name else str(thread.id)),
            ("Timeout", f"{self.timeout_seconds // 60} min" if timed_out else "Failed"),
        ], color=EmbedColors.LOG_WARNING)


__all__ = ["ThreadSpamService", "thread_changed"]
