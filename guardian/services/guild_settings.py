"""
Guardian - Guild Settings Service
=================================

Typed, cached access to the per-guild configuration store.

DESIGN:
    Every stored document is loaded once at startup and kept in memory.
    Reads never touch SQLite; writes update the cache and upsert the row.
    Unknown guilds read as defaults until something is written for them.
"""

from typing import Any, Dict, Optional, Set, Tuple

from guardian.core.database import DatabaseManager
from guardian.core.logger import logger
from guardian.services.word_filter.models import NGWordRuleset


# =============================================================================
# Keys & Defaults
# =============================================================================

KEY_NGWORDS = "ngword_ruleset"
KEY_GIF_DETECTION = "gif_detection"
KEY_GIF_URL_SCAN = "gif_url_scan"
KEY_INSULT_FILTER = "insult_filter"
KEY_THREAD_SPAM = "thread_spam"
KEY_RAID_LOCKDOWN_DEFAULT = "raid_lockdown_default"
EXEMPT_PREFIX = "exempt:"

DEFAULT_GIF_DETECTION = True
DEFAULT_GIF_URL_SCAN = False
DEFAULT_INSULT_FILTER = True


class GuildSettings:
    """Cached per-guild settings backed by DatabaseManager."""

    def __init__(self, db: DatabaseManager) -> None:
        self.db = db
        self._cache: Dict[int, Dict[str, Any]] = {}

    def load(self) -> None:
        """Load every stored document into memory."""
        self._cache = self.db.load_all_guild_settings()
        logger.tree("Guild Settings Loaded", [
            ("Guilds", str(len(self._cache))),
            ("Documents", str(sum(len(v) for v in self._cache.values()))),
        ], emoji="⚙️")

    # =========================================================================
    # Raw Access
    # =========================================================================

    def get(self, guild_id: int, key: str, default: Any = None) -> Any:
        return self._cache.get(guild_id, {}).get(key, default)

    def set(self, guild_id: int, key: str, value: Any) -> None:
        """Update the cache and upsert the stored document."""
        self._cache.setdefault(guild_id, {})[key] = value
        self.db.set_guild_setting(guild_id, key, value)

    # =========================================================================
    # NG-Words
    # =========================================================================

    def ngword_ruleset(self, guild_id: int) -> NGWordRuleset:
        data = self.get(guild_id, KEY_NGWORDS)
        if not isinstance(data, dict):
            return NGWordRuleset()
        return NGWordRuleset.from_dict(data)

    def set_ngword_ruleset(self, guild_id: int, ruleset: NGWordRuleset) -> None:
        self.set(guild_id, KEY_NGWORDS, ruleset.to_dict())

    # =========================================================================
    # Exemptions
    # =========================================================================

    def exempt_roles(self, guild_id: int, category: str) -> Set[int]:
        """Role ids exempt from one detector category (empty when unset)."""
        return {int(r) for r in self.get(guild_id, EXEMPT_PREFIX + category, [])}

    def add_exempt_role(self, guild_id: int, category: str, role_id: int) -> bool:
        """Returns False when the role was already exempt."""
        roles = self.exempt_roles(guild_id, category)
        if role_id in roles:
            return False
        roles.add(role_id)
        self.set(guild_id, EXEMPT_PREFIX + category, sorted(roles))
        return True

    def remove_exempt_role(self, guild_id: int, category: str, role_id: int) -> bool:
        """Returns False when the role was not exempt."""
        roles = self.exempt_roles(guild_id, category)
        if role_id not in roles:
            return False
        roles.discard(role_id)
        self.set(guild_id, EXEMPT_PREFIX + category, sorted(roles))
        return True

    # =========================================================================
    # Toggles
    # =========================================================================

    def gif_detection_enabled(self, guild_id: int) -> bool:
        return bool(self.get(guild_id, KEY_GIF_DETECTION, DEFAULT_GIF_DETECTION))

    def set_gif_detection(self, guild_id: int, enabled: bool) -> None:
        self.set(guild_id, KEY_GIF_DETECTION, enabled)

    def gif_url_scan_enabled(self, guild_id: int) -> bool:
        return bool(self.get(guild_id, KEY_GIF_URL_SCAN, DEFAULT_GIF_URL_SCAN))

    def set_gif_url_scan(self, guild_id: int, enabled: bool) -> None:
        self.set(guild_id, KEY_GIF_URL_SCAN, enabled)

    def insult_filter_enabled(self, guild_id: int) -> bool:
        return bool(self.get(guild_id, KEY_INSULT_FILTER, DEFAULT_INSULT_FILTER))

    def set_insult_filter(self, guild_id: int, enabled: bool) -> None:
        self.set(guild_id, KEY_INSULT_FILTER, enabled)

    def raid_lockdown_default(self, guild_id: int) -> bool:
        """Lockdown state a guild starts in after a restart."""
        return bool(self.get(guild_id, KEY_RAID_LOCKDOWN_DEFAULT, False))

    # =========================================================================
    # Thread Spam Overrides
    # =========================================================================

    def thread_spam_limits(
        self,
        guild_id: int,
        default_threshold: int,
        default_window: int,
    ) -> Tuple[int, int]:
        """Per-guild (threshold, window_seconds), falling back to the defaults."""
        data: Optional[Dict[str, Any]] = self.get(guild_id, KEY_THREAD_SPAM)
        if not isinstance(data, dict):
            return default_threshold, default_window
        threshold = int(data.get("threshold", default_threshold))
        window = int(data.get("window_seconds", default_window))
        return max(threshold, 1), max(window, 1)

    def set_thread_spam_limits(self, guild_id: int, threshold: int, window_seconds: int) -> None:
        self.set(guild_id, KEY_THREAD_SPAM, {
            "threshold": threshold,
            "window_seconds": window_seconds,
        })

    @property
    def guild_ids(self) -> Set[int]:
        return set(self._cache)


__all__ = ["GuildSettings", "NGWordRuleset"]
