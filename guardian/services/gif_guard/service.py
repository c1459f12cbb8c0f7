"""
Guardian - GIF Guard Service
============================

Screens image attachments and (optionally) image URLs for hazardous GIFs.

DESIGN:
    Only GIFs are decoded; other images are checked for size alone.
    Decoding runs in a thread executor. Anything that cannot be verified
    as safe (download failure, timeout, unreadable file) is treated as
    dangerous. Scanning stops at the first dangerous image of a message.
"""

import asyncio
from typing import List, Optional, Tuple, TYPE_CHECKING

import discord

from guardian.core import constants as C
from guardian.core.config import EmbedColors
from guardian.core.logger import logger
from guardian.services.exemptions import ExemptCategory
from guardian.services.remediation import RemediationRole, safe_add_role, safe_remove_role, send_transient
from guardian.utils.async_utils import create_safe_task

from .analyzer import REASON_FETCH_ERROR, HazardVerdict, analyze_gif, oversized_verdict, safe_verdict
from .fetcher import ImageFetchError, ImageFetcher, extract_urls

if TYPE_CHECKING:
    from guardian.bot import GuardianBot


def _is_gif(content_type: Optional[str], filename: str) -> bool:
    if content_type:
        return content_type.split(";")[0].strip().lower() == "image/gif"
    return filename.lower().endswith(".gif")


def _is_image(content_type: Optional[str], filename: str) -> bool:
    if content_type:
        return content_type.lower().startswith("image/")
    return filename.lower().endswith((".gif", ".png", ".jpg", ".jpeg", ".webp"))


class GifGuardService:
    """Hazardous animated-image detection and remediation."""

    def __init__(self, bot: "GuardianBot", fetcher: ImageFetcher) -> None:
        self.bot = bot
        self.fetcher = fetcher
        self.mute_seconds = bot.config.thresholds.gif_mute_seconds

    # =========================================================================
    # Analysis
    # =========================================================================

    async def analyze_bytes(self, data: bytes) -> HazardVerdict:
        loop = asyncio.get_running_loop()
        return await loop.run_in_executor(None, analyze_gif, data)

    async def inspect_attachment(self, attachment: discord.Attachment) -> HazardVerdict:
        if attachment.size > C.GIF_MAX_BYTES:
            return oversized_verdict(attachment.size)
        if not _is_gif(attachment.content_type, attachment.filename):
            return safe_verdict(size_bytes=attachment.size)

        try:
            data = await asyncio.wait_for(attachment.read(), timeout=C.GIF_DOWNLOAD_TIMEOUT)
        except (discord.HTTPException, asyncio.TimeoutError) as e:
            return HazardVerdict(True, REASON_FETCH_ERROR, {"error": type(e).__name__})
        return await self.analyze_bytes(data)

    async def inspect_url(self, url: str) -> Optional[HazardVerdict]:
        """Returns None when the URL is not an accessible image."""
        probe = await self.fetcher.probe(url)
        if probe is None:
            return None
        if probe.size is not None and probe.size > C.GIF_MAX_BYTES:
            return oversized_verdict(probe.size)
        if not probe.is_gif:
            return safe_verdict(size_bytes=probe.size)

        try:
            data = await self.fetcher.download(url)
        except ImageFetchError as e:
            return HazardVerdict(True, REASON_FETCH_ERROR, {"error": str(e)})
        return await self.analyze_bytes(data)

    # =========================================================================
    # Message Entry Point
    # =========================================================================

    def candidates(self, message: discord.Message) -> Tuple[List[discord.Attachment], List[str]]:
        attachments = [a for a in message.attachments if _is_image(a.content_type, a.filename)]
        urls: List[str] = []
        if self.bot.settings.gif_url_scan_enabled(message.guild.id):
            urls = extract_urls(message.content)
        return attachments, urls

    async def check(self, message: discord.Message) -> bool:
        """
        Screen a message's images.

        Returns:
            True when a dangerous image was found and handled.
        """
        guild = message.guild
        if not self.bot.settings.gif_detection_enabled(guild.id):
            return False
        if self.bot.exemptions.member_is_exempt(message.author, ExemptCategory.PHOTOSENSITIVE):
            return False

        attachments, urls = self.candidates(message)

        for attachment in attachments:
            verdict = await self.inspect_attachment(attachment)
            if verdict.dangerous:
                await self._remediate(message, verdict, attachment.filename)
                return True

        for url in urls:
            verdict = await self.inspect_url(url)
            if verdict is not None and verdict.dangerous:
                await self._remediate(message, verdict, url)
                return True

        return False

    # =========================================================================
    # Remediation
    # =========================================================================

    async def _unmute_later(self, member: discord.Member, role: discord.Role) -> None:
        await asyncio.sleep(self.mute_seconds)
        await safe_remove_role(member, role, reason="GIF guard mute expired")

    async def _remediate(self, message: discord.Message, verdict: HazardVerdict, source: str) -> None:
        member = message.author
        guild = message.guild

        await self.bot.deleter.delete(message, reason=f"Hazardous image: {verdict.reason}")

        muted = False
        role = await self.bot.roles.ensure(guild, RemediationRole.MUTE)
        # An existing mute belongs to another detector or a moderator
        already_muted = role is not None and any(r.id == role.id for r in member.roles)
        if role is not None and not already_muted:
            muted = await safe_add_role(member, role, reason=f"Hazardous image: {verdict.reason}")
            if muted:
                create_safe_task(self._unmute_later(member, role), "GIF Guard Unmute")

        metrics = [(k.replace("_", " ").title(), str(v)) for k, v in verdict.details.items()]

        warning = discord.Embed(
            title="⚠️ Hazardous Image Removed",
            description=f"{member.mention}, your message was removed.\n**Reason:** {verdict.label}",
            color=EmbedColors.LOG_WARNING,
        )
        for name, value in metrics[:8]:
            warning.add_field(name=name, value=value, inline=True)
        await send_transient(message.channel, C.GIF_WARNING_DELETE_AFTER, embed=warning)

        logger.tree("HAZARDOUS IMAGE DETECTED", [
            ("User", f"{member} ({member.id})"),
            ("Guild", f"{guild.name} ({guild.id})"),
            ("Source", source[:80]),
            ("Reason", verdict.reason),
            *metrics,
            ("Muted", f"{self.mute_seconds}s" if muted else "No"),
        ], emoji="🚫")

        await self.bot.mod_log.log(guild, "🚫 Hazardous Image", [
            ("User", f"{member.mention} ({member.id})"),
            ("Channel", f"<#{message.channel.id}>"),
            ("Source", source[:200]),
            ("Reason", verdict.label),
            *metrics,
        ], color=EmbedColors.LOG_NEGATIVE)


__all__ = ["GifGuardService"]
