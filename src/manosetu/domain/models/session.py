"""
Session Domain Model

A booked therapy session between one client and one therapist,
and its lifecycle state machine:

    scheduled --start()--> ongoing --complete()--> completed
        |
        +--cancel()--> cancelled

An ongoing session cannot be cancelled; it must be ended.
Every transition validates its guard before mutating, so a
rejected transition leaves the session untouched.
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Optional
from uuid import UUID, uuid4

from manosetu.domain.enums.session_status import PartyRole, SessionStatus
from manosetu.domain.errors import InvalidStateTransition
from manosetu.domain.models.interval import TimeInterval


ALLOWED_TRANSITIONS: dict[SessionStatus, frozenset[SessionStatus]] = {
    SessionStatus.SCHEDULED: frozenset({SessionStatus.ONGOING, SessionStatus.CANCELLED}),
    SessionStatus.ONGOING: frozenset({SessionStatus.COMPLETED}),
    SessionStatus.COMPLETED: frozenset(),
    SessionStatus.CANCELLED: frozenset(),
}

CHANNEL_PREFIX = "session-"


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def channel_identity_for(session_id: UUID) -> str:
    """Derive the media channel name bound to a session."""
    return f"{CHANNEL_PREFIX}{session_id}"


@dataclass
class Session:
    """
    Therapy session entity.
    
    Attributes:
        client_id: Client party id
        therapist_id: Therapist party id
        start_time: Window start (UTC)
        end_time: Window end (UTC), exclusive
        duration_minutes: Denormalized window length; the window wins on mismatch
        id: Unique session identifier
        status: Current lifecycle state
        channel_identity: Media channel name, assigned on first start
        cancelled_by: Party that cancelled the session
    """
    
    client_id: UUID
    therapist_id: UUID
    start_time: datetime
    end_time: datetime
    duration_minutes: int = 0
    id: UUID = field(default_factory=uuid4)
    status: SessionStatus = SessionStatus.SCHEDULED
    channel_identity: Optional[str] = None
    created_at: datetime = field(default_factory=_utcnow)
    updated_at: datetime = field(default_factory=_utcnow)
    started_at: Optional[datetime] = None
    ended_at: Optional[datetime] = None
    cancelled_at: Optional[datetime] = None
    cancelled_by: Optional[UUID] = None
    
    def __post_init__(self) -> None:
        window = TimeInterval(self.start_time, self.end_time)
        self.start_time = window.start
        self.end_time = window.end
        if self.duration_minutes != window.duration_minutes:
            self.duration_minutes = window.duration_minutes
    
    @property
    def interval(self) -> TimeInterval:
        return TimeInterval(self.start_time, self.end_time)
    
    def is_participant(self, party_id: UUID) -> bool:
        return party_id in (self.client_id, self.therapist_id)
    
    def participant_role(self, party_id: UUID) -> Optional[PartyRole]:
        """Role the party plays in this session, if any."""
        if party_id == self.client_id:
            return PartyRole.CLIENT
        if party_id == self.therapist_id:
            return PartyRole.THERAPIST
        return None
    
    def can_transition_to(self, target: SessionStatus) -> bool:
        return target in ALLOWED_TRANSITIONS[self.status]
    
    def _require_transition(self, target: SessionStatus, message: str) -> None:
        if not self.can_transition_to(target):
            raise InvalidStateTransition(f"{message} (status: {self.status.value})")
    
    def start(self, now: Optional[datetime] = None) -> str:
        """
        Open the session's video room.
        
        The session window is not enforced; participants may
        join early or late.
        
        Returns:
            The session's channel identity
        """
        self._require_transition(SessionStatus.ONGOING, "Session cannot be started")
        now = now or _utcnow()
        if self.channel_identity is None:
            self.channel_identity = channel_identity_for(self.id)
        self.status = SessionStatus.ONGOING
        self.started_at = now
        self.updated_at = now
        return self.channel_identity
    
    def complete(self, now: Optional[datetime] = None) -> None:
        """End an ongoing session. The channel identity is kept for history."""
        self._require_transition(SessionStatus.COMPLETED, "Session is not ongoing")
        now = now or _utcnow()
        self.status = SessionStatus.COMPLETED
        self.ended_at = now
        self.updated_at = now
    
    def cancel(self, cancelled_by: UUID, now: Optional[datetime] = None) -> None:
        """Cancel a session that has not started yet."""
        self._require_transition(SessionStatus.CANCELLED, "Only scheduled sessions can be cancelled")
        now = now or _utcnow()
        self.status = SessionStatus.CANCELLED
        self.cancelled_by = cancelled_by
        self.cancelled_at = now
        self.updated_at = now
