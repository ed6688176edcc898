"""
Database package initialization.
"""

from golden_ai.db.database import (
    Base,
    DatabaseError,
    async_session_maker,
    check_database_health,
    close_db,
    engine,
    get_db_session,
    init_db,
)
from golden_ai.db.models import SettingModel

__all__ = [
    # Database
    "Base",
    "engine",
    "async_session_maker",
    "get_db_session",
    "init_db",
    "close_db",
    "check_database_health",
    "DatabaseError",
    # Models
    "SettingModel",
]
