"""
Guardian - Discord HTTP Utilities
=================================

Logging and retry helpers for Discord API operations.

Usage:
    from guardian.utils.discord_rate_limit import log_http_error, send_message_with_retry

    try:
        await member.ban(reason="Nuke bot")
    except discord.HTTPException as e:
        log_http_error(e, "Ban Nuke Bot", [("Actor", str(member.id))])
"""

import asyncio
from typing import Any, Optional

import discord

from guardian.core.logger import logger


# =============================================================================
# Configuration
# =============================================================================

class RateLimitConfig:
    """Configuration for Discord rate limit handling."""
    MAX_RETRIES: int = 3
    BASE_DELAY: float = 1.0  # seconds
    MAX_DELAY: float = 30.0  # seconds


HTTP_STATUS_DESCRIPTIONS = {
    400: "Bad Request",
    401: "Unauthorized",
    403: "Forbidden",
    404: "Not Found",
    429: "Rate Limited",
    500: "Internal Server Error",
    502: "Bad Gateway",
    503: "Service Unavailable",
    504: "Gateway Timeout",
}


# =============================================================================
# Logging Helper
# =============================================================================

def log_http_error(
    e: discord.HTTPException,
    operation: str,
    context: Optional[list] = None,
) -> None:
    """
    Log a Discord HTTPException with status details.

    Args:
        e: The HTTPException that occurred.
        operation: Description of what operation failed.
        context: Additional (key, value) tuples for logging.
    """
    status_desc = HTTP_STATUS_DESCRIPTIONS.get(e.status, "Unknown")
    retry_after = getattr(e, "retry_after", None)

    log_items = [
        ("Status", f"{e.status} ({status_desc})"),
        ("Error", str(e.text) if getattr(e, "text", None) else str(e)),
    ]

    if isinstance(retry_after, (int, float)) and retry_after:
        log_items.append(("Retry After", f"{retry_after:.1f}s"))

    if context:
        log_items.extend(context)

    # Rate limits, permissions and missing objects are recoverable
    if e.status == 429:
        logger.warning(f"🚦 {operation} Rate Limited", log_items)
    elif e.status == 403:
        logger.warning(f"🚫 {operation} Forbidden", log_items)
    elif e.status == 404:
        logger.warning(f"❓ {operation} Not Found", log_items)
    else:
        logger.error(f"❌ {operation} Failed", log_items)


# =============================================================================
# Helper Functions
# =============================================================================

async def send_message_with_retry(
    channel: discord.abc.Messageable,
    content: Optional[str] = None,
    embed: Optional[discord.Embed] = None,
    max_retries: int = RateLimitConfig.MAX_RETRIES,
    **kwargs: Any,
) -> Optional[discord.Message]:
    """
    Send a message with automatic rate limit retry.

    Returns:
        The sent message or None on failure.
    """
    for attempt in range(max_retries):
        try:
            return await channel.send(content=content, embed=embed, **kwargs)
        except discord.RateLimited as e:
            if attempt < max_retries - 1 and e.retry_after < RateLimitConfig.MAX_DELAY:
                await asyncio.sleep(e.retry_after + 0.5)
                continue
            logger.warning("Rate Limited on Message Send", [
                ("Channel", str(getattr(channel, "id", "?"))),
                ("Retry After", f"{e.retry_after:.1f}s"),
            ])
            return None
        except discord.HTTPException as e:
            if e.status == 429 and attempt < max_retries - 1:
                await asyncio.sleep(RateLimitConfig.BASE_DELAY * (2 ** attempt))
                continue
            log_http_error(e, "Send Message", [("Channel", str(getattr(channel, "id", "?")))])
            return None

    return None


__all__ = [
    "RateLimitConfig",
    "HTTP_STATUS_DESCRIPTIONS",
    "log_http_error",
    "send_message_with_retry",
]
