"""
Guardian - Database Manager
===========================

SQLite database manager for persisted guild configuration.
Detector state is never written here; sliding windows live in memory only.
"""

from pathlib import Path
from typing import Optional

from guardian.core.database.base import DatabaseBase
from guardian.core.database.schema import SchemaMixin
from guardian.core.database.settings import SettingsMixin
from guardian.core.logger import logger


class DatabaseManager(SchemaMixin, SettingsMixin, DatabaseBase):
    """
    Database manager with thread-safe operations.

    DESIGN: One instance per process through get_db(); tests construct
    their own instances against a temporary path.
    """

    def __init__(self, db_path: Path) -> None:
        self._init_base(db_path)
        self._init_tables()

        logger.tree("Database Manager Initialized", [
            ("Path", str(db_path)),
            ("WAL Mode", "Enabled"),
        ], emoji="🗄️")


# =============================================================================
# Global Instance
# =============================================================================

_db: Optional[DatabaseManager] = None


def get_db() -> DatabaseManager:
    """Get the process-wide database manager, creating it on first use."""
    global _db
    if _db is None:
        from guardian.core.config import get_config
        _db = DatabaseManager(get_config().data_dir / "guardian.db")
    return _db


__all__ = ["DatabaseManager", "get_db"]
