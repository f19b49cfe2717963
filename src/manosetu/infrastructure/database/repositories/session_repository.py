"""
Session Repository

Data access layer for therapy sessions. Maps between the ORM
model and the Session domain entity.

Writes are only flushed here; callers commit them through
transaction() so the commit lands while the booking lock is held.
"""

from typing import AsyncContextManager, Optional, Sequence
from uuid import UUID

from sqlalchemy import select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from manosetu.config.logging_config import get_logger
from manosetu.domain.enums.session_status import ACTIVE_STATUSES, SessionStatus
from manosetu.domain.errors import InvalidStateTransition, NotFound, SchedulingConflict
from manosetu.domain.models.interval import TimeInterval
from manosetu.domain.models.session import Session
from manosetu.infrastructure.database.models.session_model import (
    OVERLAP_CONSTRAINT_NAME,
    SessionModel,
)
from manosetu.infrastructure.database.connection import transaction
from manosetu.infrastructure.database.repositories.base import BaseRepository
from manosetu.services.scheduling.ports import SessionStore

logger = get_logger(__name__)


def _to_domain(model: SessionModel) -> Session:
    return Session(
        id=model.id,
        client_id=model.client_id,
        therapist_id=model.therapist_id,
        start_time=model.start_time,
        end_time=model.end_time,
        duration_minutes=model.duration_minutes,
        status=SessionStatus(model.status),
        channel_identity=model.channel_identity,
        created_at=model.created_at,
        updated_at=model.updated_at,
        started_at=model.started_at,
        ended_at=model.ended_at,
        cancelled_at=model.cancelled_at,
        cancelled_by=model.cancelled_by,
    )


def _to_model(session: Session) -> SessionModel:
    return SessionModel(
        id=session.id,
        client_id=session.client_id,
        therapist_id=session.therapist_id,
        start_time=session.start_time,
        end_time=session.end_time,
        duration_minutes=session.duration_minutes,
        status=session.status.value,
        channel_identity=session.channel_identity,
        created_at=session.created_at,
        updated_at=session.updated_at,
    )


def _is_overlap_violation(error: IntegrityError) -> bool:
    orig = getattr(error, "orig", None)
    diag = getattr(orig, "diag", None)
    constraint_name = getattr(diag, "constraint_name", None) or ""
    if not constraint_name:
        constraint_name = getattr(orig, "constraint_name", None) or ""
    return constraint_name == OVERLAP_CONSTRAINT_NAME or OVERLAP_CONSTRAINT_NAME in str(orig)


class SessionRepository(BaseRepository[SessionModel], SessionStore):
    """
    Repository for therapy session persistence.
    
    Overlap queries use the same half-open predicate as the domain
    interval model: existing.start < window.end AND window.start < existing.end.
    """
    
    def __init__(self, session: AsyncSession) -> None:
        """Initialize with session model."""
        super().__init__(SessionModel, session)
    
    def transaction(self) -> AsyncContextManager[AsyncSession]:
        return transaction(self._session)
    
    async def get(self, session_id: UUID) -> Optional[Session]:
        model = await self.get_by_id(session_id)
        return _to_domain(model) if model else None
    
    async def find_active_for_therapist(
        self,
        therapist_id: UUID,
        window: Optional[TimeInterval] = None,
    ) -> Sequence[Session]:
        query = select(SessionModel).where(
            SessionModel.therapist_id == therapist_id,
            SessionModel.status.in_([s.value for s in ACTIVE_STATUSES]),
        )
        if window is not None:
            query = query.where(
                SessionModel.start_time < window.end,
                SessionModel.end_time > window.start,
            )
        result = await self._session.execute(query.order_by(SessionModel.start_time))
        return [_to_domain(m) for m in result.scalars().all()]
    
    async def list_for_client(self, client_id: UUID) -> Sequence[Session]:
        result = await self._session.execute(
            select(SessionModel)
            .where(SessionModel.client_id == client_id)
            .order_by(SessionModel.start_time)
        )
        return [_to_domain(m) for m in result.scalars().all()]
    
    async def list_for_therapist(self, therapist_id: UUID) -> Sequence[Session]:
        result = await self._session.execute(
            select(SessionModel)
            .where(SessionModel.therapist_id == therapist_id)
            .order_by(SessionModel.start_time)
        )
        return [_to_domain(m) for m in result.scalars().all()]
    
    async def create(self, session: Session) -> Session:
        """
        Stage a new session; the enclosing transaction commits it.
        
        Raises:
            SchedulingConflict: If the overlap exclusion constraint rejects the row
        """
        try:
            model = await self.add(_to_model(session))
        except IntegrityError as e:
            if _is_overlap_violation(e):
                raise SchedulingConflict() from e
            raise
        return _to_domain(model)
    
    async def update(self, session: Session, expected_status: SessionStatus) -> Session:
        """
        Stage status fields, conditional on the stored status.
        
        Raises:
            NotFound: If the row disappeared
            InvalidStateTransition: If the stored status is no longer expected_status
        """
        result = await self._session.execute(
            update(SessionModel)
            .where(
                SessionModel.id == session.id,
                SessionModel.status == expected_status.value,
            )
            .values(
                status=session.status.value,
                channel_identity=session.channel_identity,
                started_at=session.started_at,
                ended_at=session.ended_at,
                cancelled_at=session.cancelled_at,
                cancelled_by=session.cancelled_by,
                updated_at=session.updated_at,
            )
            .execution_options(synchronize_session=False)
        )
        if result.rowcount == 0:
            if await self.get_by_id(session.id) is None:
                raise NotFound()
            logger.info(
                "Concurrent status change detected",
                session_id=str(session.id),
                expected_status=expected_status.value,
            )
            raise InvalidStateTransition("Session status changed by another request")
        return session
