"""
Base Repository Pattern

Provides generic async data access for all repositories.
Implements the Repository pattern for clean separation between
domain logic and data access.
"""

from typing import Generic, Optional, Type, TypeVar
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from manosetu.infrastructure.database.connection import Base

# Type variable for model types
ModelT = TypeVar("ModelT", bound=Base)


class BaseRepository(Generic[ModelT]):
    """
    Generic base repository with async data access.
    
    Subclass and specify the model type for entity-specific repositories.
    
    Usage:
        class SessionRepository(BaseRepository[SessionModel]):
            ...
            
        repo = SessionRepository(SessionModel, session)
        row = await repo.get_by_id(session_id)
    """
    
    def __init__(self, model: Type[ModelT], session: AsyncSession) -> None:
        """
        Initialize repository with model class and session.
        
        Args:
            model: SQLAlchemy model class
            session: Async database session
        """
        self._model = model
        self._session = session
    
    async def get_by_id(self, id: UUID) -> Optional[ModelT]:
        """
        Get entity by primary key ID.
        
        Returns:
            Entity if found, None otherwise
        """
        result = await self._session.execute(
            select(self._model).where(self._model.id == id)
        )
        return result.scalar_one_or_none()
    
    async def add(self, entity: ModelT) -> ModelT:
        """
        Stage a new entity and flush it to the database.
        
        Returns:
            Created entity with server defaults loaded
        """
        self._session.add(entity)
        await self._session.flush()
        await self._session.refresh(entity)
        return entity
