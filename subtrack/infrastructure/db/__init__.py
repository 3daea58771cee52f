"""
Database Infrastructure for SubTrack

Async engine/session management, SQLModel tables and repositories.
"""

from subtrack.infrastructure.db.database import (
    DatabaseManager,
    close_db,
    get_db_manager,
    init_db,
)


__all__ = [
    "DatabaseManager",
    "close_db",
    "get_db_manager",
    "init_db",
]
