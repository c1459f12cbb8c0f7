"""
Guardian - Insult Filter
========================

Fixed bilingual insult list, matched case-insensitively as substrings.
On a match the bot replies with an admonition and removes the original
message a moment later, so the reply is still readable in context.
"""

import asyncio
import json
from pathlib import Path
from typing import Iterable, List, Optional, TYPE_CHECKING

import discord

from guardian.core import constants as C
from guardian.core.config import EmbedColors
from guardian.core.logger import logger
from guardian.services.exemptions import ExemptCategory
from guardian.utils.async_utils import create_safe_task
from guardian.utils.discord_rate_limit import log_http_error

if TYPE_CHECKING:
    from guardian.bot import GuardianBot


def load_insult_words(path: Path) -> List[str]:
    """
    Load the insult list.

    The file maps a language code to a list of words:
        {"ja": ["..."], "en": ["..."]}
    """
    try:
        with open(path, encoding="utf-8") as f:
            data = json.load(f)
    except (OSError, json.JSONDecodeError) as e:
        logger.warning("Insult List Unreadable", [("Path", str(path)), ("Error", str(e)[:100])])
        return []

    words: List[str] = []
    for language_words in data.values():
        words.extend(str(w).casefold() for w in language_words if str(w).strip())

    logger.info("Insult List Loaded", [("Path", str(path)), ("Words", str(len(words)))])
    return list(dict.fromkeys(words))


def find_insult(text: str, words: Iterable[str]) -> Optional[str]:
    if not text:
        return None
    haystack = text.casefold()
    for word in words:
        if word in haystack:
            return word
    return None


class InsultFilter:
    """Admonish-then-delete filter for the fixed insult list."""

    def __init__(self, bot: "GuardianBot", words: List[str]) -> None:
        self.bot = bot
        self.words = words

    async def check(self, message: discord.Message) -> bool:
        """
        Returns:
            True when an insult matched and was handled.
        """
        guild = message.guild
        if not self.words or not self.bot.settings.insult_filter_enabled(guild.id):
            return False
        if self.bot.exemptions.member_is_exempt(message.author, ExemptCategory.PROFANITY):
            return False

        word = find_insult(message.content, self.words)
        if word is None:
            return False

        await self._admonish(message)
        create_safe_task(self._delete_later(message), "Insult Delete")

        logger.tree("INSULT DETECTED", [
            ("User", f"{message.author} ({message.author.id})"),
            ("Guild", f"{guild.name} ({guild.id})"),
            ("Match", word),
        ], emoji="🤬")

        await self.bot.mod_log.log(guild, "🤬 Insult Removed", [
            ("User", f"{message.author.mention} ({message.author.id})"),
            ("Channel", f"<#{message.channel.id}>"),
            ("Match", f"`{word}`"),
        ], color=EmbedColors.LOG_WARNING)
        return True

    async def _admonish(self, message: discord.Message) -> None:
        try:
            if self.bot.deleter.was_deleted(message.id):
                # Original already removed by another filter; nothing to reply to
                await message.channel.send(f"{message.author.mention} {C.INSULT_ADMONITION}")
            else:
                await message.reply(C.INSULT_ADMONITION, mention_author=True)
        except discord.HTTPException as e:
            log_http_error(e, "Send Insult Admonition", [("Channel", str(message.channel.id))])

    async def _delete_later(self, message: discord.Message) -> None:
        await asyncio.sleep(C.INSULT_DELETE_DELAY)
        await self.bot.deleter.delete(message, reason="Insult")


__all__ = ["InsultFilter", "find_insult", "load_insult_words"]
