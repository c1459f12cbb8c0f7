"""
Remediation Role Provisioner
============================

Lazily created remediation roles (mute, raid guard).

DESIGN:
    ensure() is idempotent under concurrent first use: a per-(guild, kind)
    lock serializes the lookup-then-create, the name lookup runs before
    any create, and the first role found by name wins on every later
    lookup. Channel overwrites are written once, when the role is created,
    and again for each channel created afterwards.
"""

import asyncio
from enum import Enum
from typing import Dict, List, Optional, Tuple

import discord

from guardian.core.logger import logger
from guardian.utils.discord_rate_limit import log_http_error


class RemediationRole(str, Enum):
    MUTE = "mute"
    RAID_GUARD = "raid_guard"


ROLE_OVERWRITES: Dict[RemediationRole, Dict[str, bool]] = {
    RemediationRole.MUTE: {
        "send_messages": False,
        "send_messages_in_threads": False,
        "add_reactions": False,
        "speak": False,
        "create_public_threads": False,
        "create_private_threads": False,
    },
    RemediationRole.RAID_GUARD: {
        "send_messages": False,
        "send_messages_in_threads": False,
        "add_reactions": False,
        "create_public_threads": False,
        "create_private_threads": False,
    },
}

RoleKey = Tuple[int, RemediationRole]


class RoleProvisioner:
    """Creates and caches remediation roles per guild."""

    def __init__(self, names: Dict[RemediationRole, str]) -> None:
        self.names = names
        self._cache: Dict[RoleKey, int] = {}
        self._locks: Dict[RoleKey, asyncio.Lock] = {}

    def _lock(self, key: RoleKey) -> asyncio.Lock:
        lock = self._locks.get(key)
        if lock is None:
            lock = asyncio.Lock()
            self._locks[key] = lock
        return lock

    def cached(self, guild: discord.Guild, kind: RemediationRole) -> Optional[discord.Role]:
        """Return the cached role if it still exists, without creating it."""
        role_id = self._cache.get((guild.id, kind))
        if role_id is None:
            return None
        role = guild.get_role(role_id)
        if role is None:
            self._cache.pop((guild.id, kind), None)
        return role

    async def ensure(self, guild: discord.Guild, kind: RemediationRole) -> Optional[discord.Role]:
        """
        Get the guild's remediation role of `kind`, creating it if absent.

        Returns:
            The role, or None when it could not be created.
        """
        role = self.cached(guild, kind)
        if role is not None:
            return role

        key = (guild.id, kind)
        async with self._lock(key):
            role = self.cached(guild, kind)
            if role is not None:
                return role

            name = self.names[kind]
            role = discord.utils.get(guild.roles, name=name)
            if role is None:
                role = await self._create(guild, kind, name)
                if role is None:
                    return None

            self._cache[key] = role.id
            return role

    async def _create(
        self,
        guild: discord.Guild,
        kind: RemediationRole,
        name: str,
    ) -> Optional[discord.Role]:
        try:
            role = await guild.create_role(
                name=name,
                permissions=discord.Permissions.none(),
                reason=f"Guardian {kind.value} role",
            )
        except discord.HTTPException as e:
            log_http_error(e, "Create Remediation Role", [
                ("Guild", f"{guild.name} ({guild.id})"),
                ("Role", name),
            ])
            return None

        applied, failed = await self._apply_overwrites(guild.channels, role, kind)

        logger.tree("Remediation Role Created", [
            ("Guild", f"{guild.name} ({guild.id})"),
            ("Role", f"{role.name} ({role.id})"),
            ("Kind", kind.value),
            ("Channels", f"{applied} applied, {failed} failed"),
        ], emoji="🔧")
        return role

    async def _apply_overwrites(
        self,
        channels: List[discord.abc.GuildChannel],
        role: discord.Role,
        kind: RemediationRole,
    ) -> Tuple[int, int]:
        overwrite = discord.PermissionOverwrite(**ROLE_OVERWRITES[kind])
        applied = failed = 0
        for channel in channels:
            try:
                await channel.set_permissions(role, overwrite=overwrite, reason=f"Guardian {kind.value} role")
                applied += 1
            except discord.HTTPException as e:
                failed += 1
                log_http_error(e, "Apply Role Overwrite", [
                    ("Channel", f"#{getattr(channel, 'name', channel.id)}"),
                    ("Role", role.name),
                ])
        return applied, failed

    async def apply_to_channel(self, channel: discord.abc.GuildChannel) -> int:
        """
        Write every cached remediation role's overwrite on a new channel.

        Returns:
            Number of roles applied.
        """
        applied = 0
        for kind in RemediationRole:
            role = self.cached(channel.guild, kind)
            if role is None:
                continue
            ok, _ = await self._apply_overwrites([channel], role, kind)
            applied += ok
        return applied


__all__ = ["RemediationRole", "RoleProvisioner", "ROLE_OVERWRITES"]
