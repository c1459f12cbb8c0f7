"""
Guardian - Database Module
==========================

Persisted guild configuration (key -> JSON documents).
"""

from guardian.core.database.manager import DatabaseManager, get_db

__all__ = [
    "DatabaseManager",
    "get_db",
]
