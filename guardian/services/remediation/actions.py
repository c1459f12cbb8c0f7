"""
Remediation Actions
===================

Moderation calls that log Discord failures instead of raising them.

DESIGN:
    Every helper returns True on success and False on a handled Discord
    error. Detectors keep going either way; their window bookkeeping is
    never rolled back because a remediation call failed.
"""

from collections import deque
from datetime import timedelta
from typing import Deque, Optional, Set

import discord

from guardian.core.constants import DELETED_MESSAGE_MEMORY
from guardian.utils.discord_rate_limit import log_http_error


def _who(member) -> str:
    return f"{member} ({member.id})"


# =============================================================================
# Message Deletion
# =============================================================================

class MessageDeleter:
    """
    Idempotent message deletion shared by every detector.

    A message already deleted by this process, or already gone on
    Discord's side (NotFound), counts as a successful delete.
    """

    def __init__(self, memory: int = DELETED_MESSAGE_MEMORY) -> None:
        self._order: Deque[int] = deque()
        self._deleted: Set[int] = set()
        self._memory = memory

    def _remember(self, message_id: int) -> None:
        if message_id in self._deleted:
            return
        self._deleted.add(message_id)
        self._order.append(message_id)
        while len(self._order) > self._memory:
            self._deleted.discard(self._order.popleft())

    def was_deleted(self, message_id: int) -> bool:
        return message_id in self._deleted

    async def delete(self, message: discord.Message, reason: str = "") -> bool:
        """Delete a message once; repeated calls are no-op successes."""
        if message.id in self._deleted:
            return True

        try:
            await message.delete()
        except discord.NotFound:
            self._remember(message.id)
            return True
        except discord.HTTPException as e:
            log_http_error(e, "Delete Message", [
                ("Message ID", str(message.id)),
                ("Reason", reason or "-"),
            ])
            return False

        self._remember(message.id)
        return True


# =============================================================================
# Member Actions
# =============================================================================

async def safe_timeout(member: discord.Member, seconds: int, reason: str) -> bool:
    """Apply a timeout of `seconds` to a member."""
    try:
        await member.timeout(timedelta(seconds=seconds), reason=reason)
        return True
    except discord.HTTPException as e:
        log_http_error(e, "Timeout Member", [("User", _who(member)), ("Duration", f"{seconds}s")])
        return False


async def safe_kick(member: discord.Member, reason: str) -> bool:
    try:
        await member.kick(reason=reason)
        return True
    except discord.HTTPException as e:
        log_http_error(e, "Kick Member", [("User", _who(member))])
        return False


async def safe_ban(guild: discord.Guild, user, reason: str) -> bool:
    """Ban a user (member or bare user object) from a guild."""
    try:
        await guild.ban(user, reason=reason, delete_message_seconds=0)
        return True
    except discord.HTTPException as e:
        log_http_error(e, "Ban User", [("User", _who(user)), ("Guild", str(guild.id))])
        return False


async def safe_add_role(member: discord.Member, role: discord.Role, reason: str) -> bool:
    try:
        await member.add_roles(role, reason=reason)
        return True
    except discord.HTTPException as e:
        log_http_error(e, "Add Role", [("User", _who(member)), ("Role", role.name)])
        return False


async def safe_remove_role(member: discord.Member, role: discord.Role, reason: str) -> bool:
    try:
        await member.remove_roles(role, reason=reason)
        return True
    except discord.HTTPException as e:
        log_http_error(e, "Remove Role", [("User", _who(member)), ("Role", role.name)])
        return False


async def send_transient(
    channel: discord.abc.Messageable,
    delete_after: float,
    content: Optional[str] = None,
    embed: Optional[discord.Embed] = None,
) -> Optional[discord.Message]:
    """Post a message that deletes itself after `delete_after` seconds."""
    try:
        return await channel.send(content=content, embed=embed, delete_after=delete_after)
    except discord.HTTPException as e:
        log_http_error(e, "Send Warning", [("Channel", str(getattr(channel, "id", "?")))])
        return None


__all__ = [
    "MessageDeleter",
    "safe_add_role",
    "safe_ban",
    "safe_kick",
    "safe_remove_role",
    "safe_timeout",
    "send_transient",
]
