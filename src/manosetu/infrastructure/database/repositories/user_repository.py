"""
User Repository

Resolves users into session parties for the scheduling core.
"""

from typing import Optional
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from manosetu.config.logging_config import get_logger
from manosetu.domain.enums.session_status import PartyRole
from manosetu.domain.models.party import Party
from manosetu.infrastructure.database.models.user_model import UserModel
from manosetu.infrastructure.database.repositories.base import BaseRepository
from manosetu.services.scheduling.ports import PartyDirectory

logger = get_logger(__name__)


class UserRepository(BaseRepository[UserModel], PartyDirectory):
    """
    Repository for user data access.
    
    Normalizes the stored role tag and admin flag into a single
    PartyRole.
    """
    
    def __init__(self, session: AsyncSession) -> None:
        """Initialize with user model."""
        super().__init__(UserModel, session)
    
    async def get_party(self, party_id: UUID) -> Optional[Party]:
        """
        Get an active user as a party.
        
        Returns:
            Party if the user exists, is active and has a known role
        """
        user = await self.get_by_id(party_id)
        if user is None or not user.is_active:
            return None
        
        try:
            role = PartyRole.normalize(user.role, is_admin=user.is_admin)
        except ValueError:
            logger.warning(
                "User has unknown role tag",
                user_id=str(user.id),
                role=user.role,
            )
            return None
        
        return Party(id=user.id, role=role, display_name=user.name)
