"""
Database infrastructure components.
"""

from manosetu.infrastructure.database.connection import (
    Base,
    DatabaseManager,
    get_db_manager,
    get_async_session,
    transaction,
)

__all__ = [
    "Base",
    "DatabaseManager",
    "get_db_manager", 
    "get_async_session",
    "transaction",
]
