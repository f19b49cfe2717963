"""
Repository pattern implementations package.
"""

from manosetu.infrastructure.database.repositories.base import BaseRepository
from manosetu.infrastructure.database.repositories.session_repository import SessionRepository
from manosetu.infrastructure.database.repositories.user_repository import UserRepository

__all__ = [
    "BaseRepository",
    "SessionRepository",
    "UserRepository",
]
