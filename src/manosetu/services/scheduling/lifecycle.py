"""
Session Lifecycle Controller

Moves sessions along the state machine on behalf of a caller:
start and end for participants, cancel for participants and admins.
"""

from dataclasses import dataclass
from uuid import UUID

from manosetu.config.logging_config import get_logger
from manosetu.domain.enums.session_status import SessionStatus
from manosetu.domain.errors import NotFound, Unauthorized
from manosetu.domain.models.party import Party
from manosetu.domain.models.session import Session
from manosetu.infrastructure.metrics import track_transition
from manosetu.services.scheduling.ports import SessionStore

logger = get_logger(__name__)


@dataclass(frozen=True)
class StartedSession:
    """Result of starting a session."""
    
    session: Session
    channel_identity: str


class SessionLifecycle:
    """
    Applies lifecycle transitions.
    
    Each operation loads the session, checks the caller, applies the
    transition guard on the entity, then persists conditionally on
    the predecessor status.
    """
    
    def __init__(self, store: SessionStore) -> None:
        self._store = store
    
    async def get_session(self, session_id: UUID) -> Session:
        """
        Load a session.
        
        Raises:
            NotFound: If no such session exists
        """
        session = await self._store.get(session_id)
        if session is None:
            raise NotFound()
        return session
    
    async def get_session_for(self, session_id: UUID, caller_id: UUID) -> Session:
        """Load a session the caller participates in."""
        session = await self.get_session(session_id)
        _require_participant(session, caller_id)
        return session
    
    async def start_session(self, session_id: UUID, caller_id: UUID) -> StartedSession:
        """
        Start a scheduled session and open its video channel.
        
        Raises:
            NotFound, Unauthorized, InvalidStateTransition
        """
        session = await self.get_session_for(session_id, caller_id)
        previous = session.status
        channel_identity = session.start()
        async with self._store.transaction():
            updated = await self._store.update(session, expected_status=previous)
        
        track_transition(previous.value, updated.status.value)
        logger.info(
            "Session started",
            session_id=str(updated.id),
            started_by=str(caller_id),
            started_by_role=session.participant_role(caller_id).value,
            channel=channel_identity,
        )
        return StartedSession(session=updated, channel_identity=channel_identity)
    
    async def end_session(self, session_id: UUID, caller_id: UUID) -> Session:
        """
        Complete an ongoing session.
        
        Raises:
            NotFound, Unauthorized, InvalidStateTransition
        """
        session = await self.get_session_for(session_id, caller_id)
        previous = session.status
        session.complete()
        async with self._store.transaction():
            updated = await self._store.update(session, expected_status=previous)
        
        track_transition(previous.value, updated.status.value)
        logger.info(
            "Session ended",
            session_id=str(updated.id),
            ended_by=str(caller_id),
            ended_by_role=session.participant_role(caller_id).value,
        )
        return updated
    
    async def cancel_session(self, session_id: UUID, caller: Party) -> Session:
        """
        Cancel a scheduled session.
        
        Either participant or any admin may cancel.
        
        Raises:
            NotFound, Unauthorized, InvalidStateTransition
        """
        session = await self.get_session(session_id)
        if not (session.is_participant(caller.id) or caller.is_admin):
            raise Unauthorized()
        previous = session.status
        session.cancel(cancelled_by=caller.id)
        async with self._store.transaction():
            updated = await self._store.update(session, expected_status=previous)
        
        track_transition(previous.value, SessionStatus.CANCELLED.value)
        logger.info(
            "Session cancelled",
            session_id=str(updated.id),
            cancelled_by=str(caller.id),
            caller_role=caller.role.value,
        )
        return updated


def _require_participant(session: Session, caller_id: UUID) -> None:
    if not session.is_participant(caller_id):
        logger.warning(
            "Non-participant attempted session access",
            session_id=str(session.id),
            caller_id=str(caller_id),
        )
        raise Unauthorized()
