"""
Guardian - Database Schema
==========================

Table definitions.
"""

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from guardian.core.database.manager import DatabaseManager


class SchemaMixin:
    """Mixin for database schema initialization."""

    def _init_tables(self: "DatabaseManager") -> None:
        """Create tables if they don't exist, allowing safe restarts."""
        conn = self._ensure_connection()
        cursor = conn.cursor()

        # -----------------------------------------------------------------
        # Guild Settings Table
        # DESIGN: Key -> JSON document store, one row per (guild, key)
        # -----------------------------------------------------------------
        cursor.execute("""
            CREATE TABLE IF NOT EXISTS guild_settings (
                guild_id INTEGER NOT NULL,
                key TEXT NOT NULL,
                value TEXT NOT NULL,
                updated_at REAL NOT NULL,
                PRIMARY KEY (guild_id, key)
            )
        """)

        conn.commit()


__all__ = ["SchemaMixin"]
