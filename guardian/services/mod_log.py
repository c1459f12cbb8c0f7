"""
Guardian - Moderation Log Sink
==============================

Per-guild log channel for detector actions.

DESIGN:
    The channel is looked up by name and created on first use, visible
    only to the bot. Log delivery never raises into detector code: a
    guild where the channel cannot be created simply gets console logs.
"""

import asyncio
from datetime import datetime
from typing import Dict, Iterable, Optional, Tuple

import discord

from guardian.core.config import EmbedColors
from guardian.core.logger import LOCAL_TZ, logger
from guardian.utils.discord_rate_limit import log_http_error, send_message_with_retry


Fields = Iterable[Tuple[str, str]]


def build_log_embed(
    title: str,
    fields: Fields = (),
    color: int = EmbedColors.LOG_INFO,
    description: Optional[str] = None,
) -> discord.Embed:
    """Build a log embed with inline (name, value) fields."""
    embed = discord.Embed(
        title=title,
        description=description,
        color=color,
        timestamp=datetime.now(LOCAL_TZ),
    )
    for name, value in fields:
        embed.add_field(name=name, value=str(value)[:1024] or "-", inline=True)
    embed.set_footer(text="Guardian")
    return embed


class ModLogSink:
    """Lazily created, bot-only log channel per guild."""

    def __init__(self, channel_name: str) -> None:
        self.channel_name = channel_name
        self._channels: Dict[int, int] = {}
        self._locks: Dict[int, asyncio.Lock] = {}

    async def get_channel(self, guild: discord.Guild) -> Optional[discord.TextChannel]:
        """Find or create the guild's log channel."""
        cached_id = self._channels.get(guild.id)
        if cached_id is not None:
            channel = guild.get_channel(cached_id)
            if channel is not None:
                return channel
            self._channels.pop(guild.id, None)

        lock = self._locks.setdefault(guild.id, asyncio.Lock())
        async with lock:
            channel = discord.utils.get(guild.text_channels, name=self.channel_name)
            if channel is None:
                overwrites = {
                    guild.default_role: discord.PermissionOverwrite(view_channel=False),
                    guild.me: discord.PermissionOverwrite(
                        view_channel=True,
                        send_messages=True,
                        embed_links=True,
                    ),
                }
                try:
                    channel = await guild.create_text_channel(
                        self.channel_name,
                        overwrites=overwrites,
                        reason="Guardian moderation log",
                    )
                except discord.HTTPException as e:
                    log_http_error(e, "Create Log Channel", [("Guild", f"{guild.name} ({guild.id})")])
                    return None

                logger.tree("Log Channel Created", [
                    ("Guild", f"{guild.name} ({guild.id})"),
                    ("Channel", f"#{channel.name}"),
                ], emoji="📝")

            self._channels[guild.id] = channel.id
            return channel

    async def send(self, guild: discord.Guild, embed: discord.Embed) -> Optional[discord.Message]:
        """Post an embed to the guild's log channel."""
        channel = await self.get_channel(guild)
        if channel is None:
            return None
        return await send_message_with_retry(channel, embed=embed)

    async def log(
        self,
        guild: discord.Guild,
        title: str,
        fields: Fields = (),
        color: int = EmbedColors.LOG_INFO,
        description: Optional[str] = None,
    ) -> Optional[discord.Message]:
        """Build and post a log embed."""
        return await self.send(guild, build_log_embed(title, fields, color, description))

    def is_log_channel(self, channel) -> bool:
        """True for this sink's channels (detectors skip them)."""
        return getattr(channel, "name", None) == self.channel_name


__all__ = ["ModLogSink", "build_log_embed"]
