"""
Database ORM models package.
"""

from manosetu.infrastructure.database.models.user_model import UserModel
from manosetu.infrastructure.database.models.session_model import SessionModel

__all__ = [
    "UserModel",
    "SessionModel", 
]
