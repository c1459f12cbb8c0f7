"""
Guardian - Exemption Policy
===========================

Role-based detector exemptions, one role set per category per guild.
"""

from enum import Enum
from typing import Iterable

from guardian.services.guild_settings import GuildSettings


class ExemptCategory(str, Enum):
    """Detector categories that can be exempted by role."""
    SPAM = "spam"
    PROFANITY = "profanity"
    THREAD_SPAM = "thread_spam"
    LINK = "link"
    PHOTOSENSITIVE = "photosensitive"


class ExemptionPolicy:
    """Answers "is this member exempt from that detector?"."""

    def __init__(self, settings: GuildSettings) -> None:
        self.settings = settings

    def is_exempt(self, guild_id: int, role_ids: Iterable[int], category: ExemptCategory) -> bool:
        """True when any of `role_ids` is in the guild's set for `category`."""
        exempt = self.settings.exempt_roles(guild_id, ExemptCategory(category).value)
        if not exempt:
            return False
        return any(role_id in exempt for role_id in role_ids)

    def member_is_exempt(self, member, category: ExemptCategory) -> bool:
        """Convenience wrapper for a discord.Member."""
        roles = getattr(member, "roles", None) or []
        return self.is_exempt(member.guild.id, [r.id for r in roles], category)


__all__ = ["ExemptCategory", "ExemptionPolicy"]
