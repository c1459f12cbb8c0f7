"""
Guardian - NG-Word Filter
=========================

Configurable per-guild banned words with tiered punishment.

Punishment levels:
    0/1   delete only
    2-7   delete + timeout (1 min, 5 min, 10 min, 1 h, 6 h, 24 h)
    8     delete + kick
    9     delete + ban
"""

from typing import Optional, TYPE_CHECKING

import discord

from guardian.core import constants as C
from guardian.core.config import EmbedColors
from guardian.core.logger import logger
from guardian.services.exemptions import ExemptCategory
from guardian.services.remediation import safe_ban, safe_kick, safe_timeout

from .models import NGWordRuleset

if TYPE_CHECKING:
    from guardian.bot import GuardianBot


def find_ngword(text: str, ruleset: NGWordRuleset) -> Optional[str]:
    """First configured word contained in `text`, honouring case sensitivity."""
    if not text:
        return None
    haystack = text if ruleset.case_sensitive else text.casefold()
    for word in ruleset.words:
        needle = word if ruleset.case_sensitive else word.casefold()
        if needle and needle in haystack:
            return word
    return None


def describe_punishment(level: int) -> str:
    if level >= C.NGWORD_BAN_LEVEL:
        return "Ban"
    if level == C.NGWORD_KICK_LEVEL:
        return "Kick"
    seconds = C.NGWORD_TIMEOUT_LEVELS.get(level)
    if seconds is None:
        return "Delete only"
    if seconds >= 3600:
        return f"Timeout {seconds // 3600}h"
    return f"Timeout {seconds // 60}m"


class NGWordFilter:
    """Applies a guild's NG-word ruleset to messages and edits."""

    def __init__(self, bot: "GuardianBot") -> None:
        self.bot = bot

    def is_exempt(self, member: discord.Member, ruleset: NGWordRuleset) -> bool:
        role_ids = [r.id for r in getattr(member, "roles", None) or []]
        if self.bot.exemptions.is_exempt(member.guild.id, role_ids, ExemptCategory.PROFANITY):
            return True
        return any(role_id in ruleset.exception_roles for role_id in role_ids)

    async def check(self, message: discord.Message, is_edit: bool = False) -> bool:
        """
        Returns:
            True when an NG-word matched and the message was handled.
        """
        guild = message.guild
        ruleset = self.bot.settings.ngword_ruleset(guild.id)
        if not ruleset.words:
            return False
        if is_edit and not ruleset.check_edits:
            return False
        if self.is_exempt(message.author, ruleset):
            return False

        word = find_ngword(message.content, ruleset)
        if word is None:
            return False

        await self._handle_match(message, word, ruleset, is_edit)
        return True

    async def punish(self, member: discord.Member, level: int, word: str) -> bool:
        reason = f"NG-word: {word}"
        if level >= C.NGWORD_BAN_LEVEL:
            return await safe_ban(member.guild, member, reason)
        if level == C.NGWORD_KICK_LEVEL:
            return await safe_kick(member, reason)
        seconds = C.NGWORD_TIMEOUT_LEVELS.get(level)
        if seconds is None:
            return True
        return await safe_timeout(member, seconds, reason)

    async def _notify(self, member: discord.Member, word: str) -> bool:
        try:
            await member.send(
                f"Your message in **{member.guild.name}** was removed because it contained "
                f"a blocked word: `{word}`"
            )
            return True
        except discord.Forbidden:
            logger.debug(f"NG-word DM failed for {member.id}: DMs disabled")
        except discord.HTTPException as e:
            logger.debug(f"NG-word DM failed for {member.id}: {e}")
        return False

    async def _handle_match(
        self,
        message: discord.Message,
        word: str,
        ruleset: NGWordRuleset,
        is_edit: bool,
    ) -> None:
        member = message.author
        guild = message.guild

        deleted = await self.bot.deleter.delete(message, reason=f"NG-word: {word}")
        dm_sent = await self._notify(member, word) if ruleset.dm_on_hit else False
        punished = await self.punish(member, ruleset.punishment_level, word)
        punishment = describe_punishment(ruleset.punishment_level)

        logger.tree("NG-WORD MATCHED", [
            ("User", f"{member} ({member.id})"),
            ("Guild", f"{guild.name} ({guild.id})"),
            ("Word", word),
            ("Source", "Edit" if is_edit else "Message"),
            ("Level", f"{ruleset.punishment_level} ({punishment})"),
            ("Deleted", "Yes" if deleted else "No"),
            ("Punished", "Yes" if punished else "Failed"),
            ("DM Sent", "Yes" if dm_sent else "No"),
        ], emoji="🚫")

        await self.bot.mod_log.log(guild, "🚫 NG-Word", [
            ("User", f"{member.mention} ({member.id})"),
            ("Channel", f"<#{message.channel.id}>"),
            ("Word", f"`{word}`"),
            ("Level", f"{ruleset.punishment_level} ({punishment})"),
            ("Punished", "Yes" if punished else "Failed"),
            ("Source", "Edit" if is_edit else "Message"),
        ], color=EmbedColors.LOG_WARNING)


__all__ = ["NGWordFilter", "describe_punishment", "find_ngword"]
