"""
Guardian - Similarity Spam Service
==================================

Detects bursts of near-duplicate messages from one member.

DESIGN:
    Each message is appended to the author's window before counting, so
    the current message always counts itself. The burst is not reset on
    trigger; it ages out of the window on its own.
"""

import time
from typing import Optional, TYPE_CHECKING

import discord

from guardian.core.config import EmbedColors
from guardian.core.constants import SPAM_WARNING_DELETE_AFTER
from guardian.core.logger import logger
from guardian.services.exemptions import ExemptCategory
from guardian.services.remediation import RemediationRole, safe_add_role, send_transient

from .detectors import count_similar

if TYPE_CHECKING:
    from guardian.bot import GuardianBot


DETECTOR = "spam"


class SimilaritySpamService:
    """Near-duplicate message burst detection and mute."""

    def __init__(self, bot: "GuardianBot") -> None:
        self.bot = bot
        thresholds = bot.config.thresholds
        self.window = thresholds.spam_window_seconds
        self.message_threshold = thresholds.spam_message_threshold
        self.similarity_threshold = thresholds.spam_similarity_threshold

    def evaluate(self, guild_id: int, author_id: int, text: str, now: float) -> int:
        """
        Record a message and count similar messages in the window.

        Caller holds the key's lock.

        Returns:
            Number of window entries (current included) similar to `text`.
        """
        key = (DETECTOR, guild_id, author_id)
        entries = self.bot.tracker.record(key, now, text, window=self.window)
        return count_similar(text, (e.payload for e in entries), self.similarity_threshold)

    async def check(self, message: discord.Message, now: Optional[float] = None) -> bool:
        """
        Run spam detection on a guild message.

        Returns:
            True when the message was classified as spam and handled.
        """
        member = message.author
        guild = message.guild
        if not message.content:
            return False
        if self.bot.exemptions.member_is_exempt(member, ExemptCategory.SPAM):
            return False

        now = time.monotonic() if now is None else now
        key = (DETECTOR, guild.id, member.id)
        async with self.bot.tracker.lock(key):
            similar = self.evaluate(guild.id, member.id, message.content, now)

        if similar < self.message_threshold:
            return False

        await self._handle_spam(message, similar)
        return True

    async def _handle_spam(self, message: discord.Message, similar: int) -> None:
        member = message.author
        guild = message.guild

        deleted = await self.bot.deleter.delete(message, reason="Similarity spam")

        muted = False
        role = await self.bot.roles.ensure(guild, RemediationRole.MUTE)
        if role is not None:
            muted = await safe_add_role(member, role, reason="Similarity spam")

        await send_transient(
            message.channel,
            SPAM_WARNING_DELETE_AFTER,
            content=f"⚠️ {member.mention} please stop sending repeated messages.",
        )

        logger.tree("SPAM DETECTED", [
            ("User", f"{member} ({member.id})"),
            ("Guild", f"{guild.name} ({guild.id})"),
            ("Channel", f"#{getattr(message.channel, 'name', message.channel.id)}"),
            ("Similar", f"{similar} / {self.message_threshold} in {self.window}s"),
            ("Deleted", "Yes" if deleted else "No"),
            ("Muted", "Yes" if muted else "No"),
        ], emoji="🛡️")

        await self.bot.mod_log.log(guild, "🛡️ Similarity Spam", [
            ("User", f"{member.mention} ({member.id})"),
            ("Channel", f"<#{message.channel.id}>"),
            ("Similar Messages", f"{similar} in {self.window}s"),
            ("Muted", "Yes" if muted else "No"),
            ("Content", message.content[:200]),
        ], color=EmbedColors.LOG_WARNING)


__all__ = ["SimilaritySpamService"]
