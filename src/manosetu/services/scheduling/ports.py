"""
Scheduling Collaborator Interfaces

Abstract contracts for the stores the scheduling core reads and
writes. The SQLAlchemy repositories implement them in production;
tests substitute in-memory versions.
"""

from abc import ABC, abstractmethod
from typing import AsyncContextManager, Optional, Sequence
from uuid import UUID

from manosetu.domain.enums.session_status import SessionStatus
from manosetu.domain.models.interval import TimeInterval
from manosetu.domain.models.party import Party
from manosetu.domain.models.session import Session


class SessionStore(ABC):
    """
    Persistence contract for therapy sessions.
    
    create() and update() stage writes; they become durable, and
    visible to other requests, when the enclosing transaction()
    block exits. A failure inside the block discards them.
    """
    
    @abstractmethod
    def transaction(self) -> AsyncContextManager[None]:
        """Commit boundary for the writes staged inside the block."""
        pass
    
    @abstractmethod
    async def get(self, session_id: UUID) -> Optional[Session]:
        """Find a session by id."""
        pass
    
    @abstractmethod
    async def find_active_for_therapist(
        self,
        therapist_id: UUID,
        window: Optional[TimeInterval] = None,
    ) -> Sequence[Session]:
        """
        Find the therapist's scheduled or ongoing sessions.
        
        Args:
            therapist_id: Therapist party id
            window: If given, only sessions overlapping it are returned
        """
        pass
    
    @abstractmethod
    async def list_for_client(self, client_id: UUID) -> Sequence[Session]:
        pass
    
    @abstractmethod
    async def list_for_therapist(self, therapist_id: UUID) -> Sequence[Session]:
        pass
    
    @abstractmethod
    async def create(self, session: Session) -> Session:
        """
        Persist a new session.
        
        Raises:
            SchedulingConflict: If the store itself rejects an overlapping window
        """
        pass
    
    @abstractmethod
    async def update(self, session: Session, expected_status: SessionStatus) -> Session:
        """
        Persist a session's new state if its stored status is still expected_status.
        
        Raises:
            NotFound: If the session no longer exists
            InvalidStateTransition: If another request changed the status first
        """
        pass


class PartyDirectory(ABC):
    """Lookup contract for users acting as session parties."""
    
    @abstractmethod
    async def get_party(self, party_id: UUID) -> Optional[Party]:
        """Find a party by id, or None if unknown or deactivated."""
        pass
