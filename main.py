#!/usr/bin/env python3
"""
Guardian - Discord Moderation Bot Entry Point
=============================================

Loads .env, validates configuration, takes the single-instance lock and
runs the bot until interrupted.
"""

import asyncio
import sys

from dotenv import load_dotenv

load_dotenv()  # before guardian imports: the logger reads LOG_DIR at import

from guardian.bot import GuardianBot  # noqa: E402
from guardian.core.config import ConfigValidationError, get_config, validate_and_log_config  # noqa: E402
from guardian.core.instance_lock import InstanceLock  # noqa: E402
from guardian.core.logger import logger  # noqa: E402


async def main() -> None:
    """Create the bot and run it until it is closed."""
    config = get_config()

    logger.tree("GUARDIAN STARTING", [
        ("Data Dir", str(config.data_dir)),
        ("Log Channel", f"#{config.mod_log_channel_name}"),
    ], emoji="🔥")

    bot = GuardianBot(config)
    async with bot:
        await bot.start(config.discord_token)


if __name__ == "__main__":
    try:
        validate_and_log_config()
    except ConfigValidationError as e:
        logger.critical(f"Configuration Error: {e}")
        sys.exit(1)

    lock = InstanceLock(get_config().data_dir)
    if not lock.acquire():
        logger.error("Startup aborted - another instance is already running")
        sys.exit(1)

    try:
        asyncio.run(main())
    except KeyboardInterrupt:
        logger.info("Bot stopped by user (Ctrl+C)")
    finally:
        lock.release()
