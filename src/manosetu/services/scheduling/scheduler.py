"""
Session Scheduler

Validates booking requests against the therapist's role and
existing commitments, and creates the session or rejects it.

ARCHITECTURE: The conflict check, the insert and its commit run
under the therapist's booking lock, so concurrent requests for the same
therapist are serialized and at most one overlapping booking wins.
The database exclusion constraint covers requests served by other
processes.
"""

from datetime import datetime
from typing import Optional
from uuid import UUID

from manosetu.config.logging_config import get_logger
from manosetu.domain.errors import InvalidInterval, InvalidParty, SchedulingConflict
from manosetu.domain.models.interval import TimeInterval, overlaps
from manosetu.domain.models.party import Party
from manosetu.domain.models.session import Session
from manosetu.infrastructure.metrics import (
    track_scheduling_conflict,
    track_session_scheduled,
)
from manosetu.services.scheduling.locks import TherapistLocks, get_therapist_locks
from manosetu.services.scheduling.ports import PartyDirectory, SessionStore

logger = get_logger(__name__)


class SessionScheduler:
    """
    Books therapy sessions.
    
    Usage:
        scheduler = SessionScheduler(store, parties)
        session = await scheduler.schedule_session(
            client_id, therapist_id, start, end, duration_minutes=60,
        )
    """
    
    def __init__(
        self,
        store: SessionStore,
        parties: PartyDirectory,
        locks: Optional[TherapistLocks] = None,
    ) -> None:
        self._store = store
        self._parties = parties
        self._locks = locks or get_therapist_locks()
    
    async def schedule_session(
        self,
        client_id: UUID,
        therapist_id: UUID,
        start_time: datetime,
        end_time: datetime,
        duration_minutes: int,
    ) -> Session:
        """
        Book a session for a client with a therapist.
        
        Args:
            client_id: Booking client
            therapist_id: Requested therapist
            start_time: Window start
            end_time: Window end (exclusive)
            duration_minutes: Requested length; recomputed from the window on mismatch
            
        Returns:
            The created session, status scheduled
            
        Raises:
            InvalidInterval: If the window is empty/inverted or duration is not positive
            InvalidParty: If the therapist or client has the wrong role
            SchedulingConflict: If the window overlaps an active session of the therapist
        """
        window = TimeInterval(start_time, end_time)
        if duration_minutes <= 0:
            raise InvalidInterval("Duration must be a positive number of minutes")
        
        therapist = await self._parties.get_party(therapist_id)
        if therapist is None or not therapist.is_therapist:
            raise InvalidParty("Invalid therapist")
        
        client = await self._parties.get_party(client_id)
        if client is None or not client.is_client:
            raise InvalidParty("Only clients can book sessions")
        
        if duration_minutes != window.duration_minutes:
            logger.warning(
                "Requested duration does not match window, using window",
                requested_minutes=duration_minutes,
                window_minutes=window.duration_minutes,
            )
        
        async with self._locks.hold(therapist.id), self._store.transaction():
            existing = await self._store.find_active_for_therapist(therapist.id, window)
            conflict = next(
                (
                    s for s in existing
                    if s.status.holds_therapist_time and overlaps(s.interval, window)
                ),
                None,
            )
            if conflict is not None:
                track_scheduling_conflict("check")
                logger.info(
                    "Scheduling conflict",
                    therapist_id=str(therapist.id),
                    conflicting_session_id=str(conflict.id),
                    start_time=window.start.isoformat(),
                    end_time=window.end.isoformat(),
                )
                raise SchedulingConflict()
            
            session = Session(
                client_id=client.id,
                therapist_id=therapist.id,
                start_time=window.start,
                end_time=window.end,
                duration_minutes=window.duration_minutes,
            )
            try:
                created = await self._store.create(session)
            except SchedulingConflict:
                track_scheduling_conflict("constraint")
                logger.info(
                    "Scheduling conflict rejected by store",
                    therapist_id=str(therapist.id),
                )
                raise
        
        track_session_scheduled(created.duration_minutes)
        logger.info(
            "Session scheduled",
            session_id=str(created.id),
            client_id=str(created.client_id),
            therapist_id=str(created.therapist_id),
            start_time=created.start_time.isoformat(),
            duration_minutes=created.duration_minutes,
        )
        return created
    
    async def sessions_for(self, party: Party) -> list[Session]:
        """
        Sessions the party takes part in, earliest first.
        
        Therapists see the sessions they run; everyone else sees
        the sessions they booked as client.
        """
        if party.is_therapist:
            sessions = await self._store.list_for_therapist(party.id)
        else:
            sessions = await self._store.list_for_client(party.id)
        return sorted(sessions, key=lambda s: s.start_time)
