"""
Anti-Nuke Actor Attribution
===========================

Resolves who performed a role/channel create or delete.

DESIGN:
    Discord's gateway events do not carry the acting user, so the default
    attributor reads the guild audit log right after the event. This is
    best-effort: entries can lag the event, and two actors working at the
    same time can be confused. An entry whose target matches the event is
    preferred over the newest entry of the same action type.
"""

from abc import ABC, abstractmethod
from typing import Optional, Union

import discord

from guardian.core.logger import logger
from guardian.utils.discord_rate_limit import log_http_error


Actor = Union[discord.Member, discord.User]

AUDIT_LOG_SCAN_LIMIT = 5


class ActorAttributor(ABC):
    """Maps a guild event to the account that caused it."""

    @abstractmethod
    async def attribute(
        self,
        guild: discord.Guild,
        action: discord.AuditLogAction,
        target_id: Optional[int] = None,
    ) -> Optional[Actor]:
        """Return the acting account, or None when it cannot be resolved."""


class AuditLogAttributor(ActorAttributor):
    """Attribution from the most recent matching audit-log entry."""

    async def attribute(
        self,
        guild: discord.Guild,
        action: discord.AuditLogAction,
        target_id: Optional[int] = None,
    ) -> Optional[Actor]:
        newest = None
        try:
            async for entry in guild.audit_logs(limit=AUDIT_LOG_SCAN_LIMIT, action=action):
                if newest is None:
                    newest = entry
                target = getattr(entry, "target", None)
                if target_id is not None and getattr(target, "id", None) == target_id:
                    return entry.user
        except discord.HTTPException as e:
            log_http_error(e, "Read Audit Log", [
                ("Guild", f"{guild.name} ({guild.id})"),
                ("Action", str(action)),
            ])
            return None

        if newest is None:
            logger.debug("Audit Log Entry Not Found", [
                ("Guild", str(guild.id)),
                ("Action", str(action)),
            ])
            return None
        return newest.user


__all__ = ["Actor", "ActorAttributor", "AuditLogAttributor"]
