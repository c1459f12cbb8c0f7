"""
Guardian - Guild Settings Mixin
===============================

Per-guild key -> JSON document operations.
"""

import json
import time
from collections import defaultdict
from typing import TYPE_CHECKING, Any, Dict

from guardian.core.database.base import _safe_json_loads

if TYPE_CHECKING:
    from guardian.core.database.manager import DatabaseManager


class SettingsMixin:
    """Mixin for guild settings get/set."""

    def get_guild_setting(self: "DatabaseManager", guild_id: int, key: str, default: Any = None) -> Any:
        """
        Get one setting document for a guild.

        Args:
            guild_id: Guild the setting belongs to.
            key: Setting key.
            default: Value returned when the key is not stored.
        """
        row = self.fetchone(
            "SELECT value FROM guild_settings WHERE guild_id = ? AND key = ?",
            (guild_id, key),
        )
        if row is None:
            return default
        return _safe_json_loads(row["value"], default)

    def set_guild_setting(self: "DatabaseManager", guild_id: int, key: str, value: Any) -> None:
        """Upsert one setting document for a guild."""
        self.execute(
            "INSERT OR REPLACE INTO guild_settings (guild_id, key, value, updated_at) VALUES (?, ?, ?, ?)",
            (guild_id, key, json.dumps(value, ensure_ascii=False), time.time()),
        )

    def load_all_guild_settings(self: "DatabaseManager") -> Dict[int, Dict[str, Any]]:
        """Load every stored setting, grouped by guild (used once at startup)."""
        settings: Dict[int, Dict[str, Any]] = defaultdict(dict)
        for row in self.fetchall("SELECT guild_id, key, value FROM guild_settings"):
            settings[row["guild_id"]][row["key"]] = _safe_json_loads(row["value"])
        return dict(settings)


__all__ = ["SettingsMixin"]
