"""
Guardian - Main Bot Class
=========================

Discord client that wires platform events to the detectors.

DESIGN:
    The bot owns every shared component (settings, sliding windows,
    exemption policy, role provisioner, message deleter, log sink) and
    every detector service. Event cogs only route events; detectors reach
    shared state through the bot.

SERVICE INITIALIZATION ORDER:
    1. __init__:
       - Settings loaded from SQLite
       - Shared components, then detector services
    2. setup_hook (before on_ready):
       - Event and command cog loading
       - Command tree syncing
"""

from datetime import datetime
from typing import Optional

import discord
from discord.ext import commands

from guardian.core import constants as C
from guardian.core.config import Config, get_config
from guardian.core.database import DatabaseManager, get_db
from guardian.core.logger import logger
from guardian.services.antinuke import AntiNukeService, AuditLogAttributor
from guardian.services.antispam import SimilaritySpamService
from guardian.services.exemptions import ExemptionPolicy
from guardian.services.gif_guard import GifGuardService, ImageFetcher
from guardian.services.guild_settings import GuildSettings
from guardian.services.mod_log import ModLogSink
from guardian.services.raid import RaidService, load_dangerous_bots
from guardian.services.remediation import MessageDeleter, RemediationRole, RoleProvisioner
from guardian.services.thread_spam import ThreadSpamService
from guardian.services.tracking import SlidingWindowTracker
from guardian.services.word_filter.insults import InsultFilter, load_insult_words
from guardian.services.word_filter.ngwords import NGWordFilter


# =============================================================================
# GuardianBot Class
# =============================================================================

class GuardianBot(commands.Bot):
    """Moderation bot holding shared state and detector services."""

    # =========================================================================
    # Initialization
    # =========================================================================

    def __init__(self, config: Optional[Config] = None, db: Optional[DatabaseManager] = None) -> None:
        self.config = config or get_config()

        intents = discord.Intents.default()
        intents.message_content = True
        intents.members = True

        super().__init__(
            command_prefix="!",
            intents=intents,
            help_command=None,
        )

        self.start_time: datetime = datetime.now()
        self.db = db or get_db()

        # Shared components
        self.settings = GuildSettings(self.db)
        self.settings.load()
        self.tracker = SlidingWindowTracker()
        self.exemptions = ExemptionPolicy(self.settings)
        self.roles = RoleProvisioner({
            RemediationRole.MUTE: self.config.mute_role_name,
            RemediationRole.RAID_GUARD: self.config.raid_role_name,
        })
        self.deleter = MessageDeleter()
        self.mod_log = ModLogSink(self.config.mod_log_channel_name)
        self.fetcher = ImageFetcher()

        # Detectors
        self.spam = SimilaritySpamService(self)
        self.thread_spam = ThreadSpamService(self)
        self.raid = RaidService(
            self, load_dangerous_bots(self.config.dangerous_bots_path or C.DANGEROUS_BOTS_FILE)
        )
        self.antinuke = AntiNukeService(self, AuditLogAttributor())
        self.gif_guard = GifGuardService(self, self.fetcher)
        self.ngwords = NGWordFilter(self)
        self.insults = InsultFilter(
            self, load_insult_words(self.config.insult_words_path or C.INSULT_WORDS_FILE)
        )

        self._ready_initialized: bool = False

        logger.info("Bot Instance Created")

    # =========================================================================
    # Setup Hook
    # =========================================================================

    async def setup_hook(self) -> None:
        """Load cogs and sync commands."""
        from guardian.commands import COMMAND_COGS
        from guardian.events import EVENT_COGS

        for cog in EVENT_COGS + COMMAND_COGS:
            try:
                await self.load_extension(cog)
                logger.debug(f"Cog Loaded: {cog.split('.')[-1]}")
            except commands.ExtensionError as e:
                logger.error("Failed to Load Cog", [("Cog", cog), ("Error", str(e))])

        try:
            synced = await self.tree.sync()
            logger.tree("Commands Synced", [("Count", str(len(synced)))], emoji="✅")
        except discord.HTTPException as e:
            logger.error("Command Sync Failed", [("Error", str(e))])

    # =========================================================================
    # On Ready
    # =========================================================================

    async def on_ready(self) -> None:
        if self._ready_initialized:
            logger.info("Bot Reconnected (skipping re-initialization)")
            return

        self._ready_initialized = True

        if not self.user:
            return

        if self.config.error_webhook_url:
            logger.set_webhook(self.config.error_webhook_url)

        logger.tree("GUARDIAN READY", [
            ("Name", self.user.name),
            ("ID", str(self.user.id)),
            ("Guilds", str(len(self.guilds))),
            ("Configured Guilds", str(len(self.settings.guild_ids))),
            ("Dangerous Bots", str(len(self.raid.dangerous_bots))),
            ("Insult Words", str(len(self.insults.words))),
        ], emoji="🛡️")

    # =========================================================================
    # Shutdown
    # =========================================================================

    async def close(self) -> None:
        """Graceful shutdown with proper cleanup."""
        logger.info("Initiating Graceful Shutdown")

        await self.fetcher.close()
        self.db.close()

        await super().close()
        logger.success("Shutdown Complete")


__all__ = ["GuardianBot"]
