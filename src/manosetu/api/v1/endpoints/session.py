"""
Session Endpoints

Therapist booking, session lifecycle and video room credentials.
All endpoints require a bearer token; domain errors are mapped to
HTTP responses by the application's exception handler.
"""

from datetime import datetime
from typing import Iterable, Mapping, Optional
from uuid import UUID

from fastapi import APIRouter, Depends, status
from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from manosetu.api.deps import (
    get_credential_issuer,
    get_current_party,
    get_lifecycle,
    get_party_directory,
    get_scheduler,
)
from manosetu.config import Settings, get_settings
from manosetu.config.logging_config import get_logger
from manosetu.domain.models.party import Party
from manosetu.domain.models.session import Session
from manosetu.services.scheduling import PartyDirectory, SessionLifecycle, SessionScheduler
from manosetu.services.video import RoomCredentialIssuer

logger = get_logger(__name__)
router = APIRouter()


# Request/Response Models

class CamelModel(BaseModel):
    """Base model exchanging camelCase JSON."""
    
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class ScheduleSessionRequest(CamelModel):
    """Request to book a session with a therapist."""
    
    therapist_id: UUID = Field(..., description="Therapist to book")
    start_time: datetime = Field(..., description="Session start (ISO-8601)")
    end_time: datetime = Field(..., description="Session end (ISO-8601)")
    duration_minutes: int = Field(..., description="Requested length in minutes")
    
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        json_schema_extra={
            "example": {
                "therapistId": "123e4567-e89b-12d3-a456-426614174000",
                "startTime": "2026-11-02T14:00:00Z",
                "endTime": "2026-11-02T15:00:00Z",
                "durationMinutes": 60,
            }
        },
    )


class PartySummary(CamelModel):
    """The other side of a session, as shown in session lists."""
    
    id: UUID
    name: Optional[str] = None


class SessionResponse(CamelModel):
    """Session as seen by its participants."""
    
    id: UUID
    client_id: UUID
    therapist_id: UUID
    start_time: datetime
    end_time: datetime
    duration_minutes: int
    status: str
    channel_identity: Optional[str] = None
    created_at: datetime
    started_at: Optional[datetime] = None
    ended_at: Optional[datetime] = None
    cancelled_at: Optional[datetime] = None
    cancelled_by: Optional[UUID] = None
    client: PartySummary
    therapist: PartySummary
    
    @classmethod
    def from_domain(cls, session: Session, parties: Mapping[UUID, Party]) -> "SessionResponse":
        return cls(
            id=session.id,
            client_id=session.client_id,
            therapist_id=session.therapist_id,
            start_time=session.start_time,
            end_time=session.end_time,
            duration_minutes=session.duration_minutes,
            status=session.status.value,
            channel_identity=session.channel_identity,
            created_at=session.created_at,
            started_at=session.started_at,
            ended_at=session.ended_at,
            cancelled_at=session.cancelled_at,
            cancelled_by=session.cancelled_by,
            client=_summary(session.client_id, parties),
            therapist=_summary(session.therapist_id, parties),
        )


def _summary(party_id: UUID, parties: Mapping[UUID, Party]) -> PartySummary:
    party = parties.get(party_id)
    return PartySummary(id=party_id, name=party.display_name if party else None)


async def _load_parties(sessions: Iterable[Session], directory: PartyDirectory) -> dict[UUID, Party]:
    """Resolve every participant of the given sessions once."""
    found: dict[UUID, Party] = {}
    for party_id in {pid for s in sessions for pid in (s.client_id, s.therapist_id)}:
        party = await directory.get_party(party_id)
        if party is not None:
            found[party_id] = party
    return found


class SessionActionResponse(CamelModel):
    """Response carrying a single session."""
    
    success: bool = True
    message: str
    session: SessionResponse


class SessionListResponse(CamelModel):
    success: bool = True
    sessions: list[SessionResponse]


class StartSessionResponse(CamelModel):
    """Response for starting a session; meeting link is the channel name."""
    
    success: bool = True
    message: str
    meeting_link: str
    channel_name: str
    session: SessionResponse


class VideoTokenResponse(CamelModel):
    success: bool = True
    token: str
    channel_name: str
    uid: int
    expires_at: datetime


class VideoKeyResponse(CamelModel):
    key: str


@router.post(
    "/schedule",
    response_model=SessionActionResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Book a session with a therapist",
)
async def schedule_session(
    request: ScheduleSessionRequest,
    caller: Party = Depends(get_current_party),
    scheduler: SessionScheduler = Depends(get_scheduler),
    directory: PartyDirectory = Depends(get_party_directory),
) -> SessionActionResponse:
    """
    Book a session for the calling client.
    
    Rejected with 400 if the therapist is invalid, the window is
    empty, or the therapist already has an overlapping session.
    """
    session = await scheduler.schedule_session(
        client_id=caller.id,
        therapist_id=request.therapist_id,
        start_time=request.start_time,
        end_time=request.end_time,
        duration_minutes=request.duration_minutes,
    )
    return SessionActionResponse(
        message="Session scheduled successfully",
        session=SessionResponse.from_domain(session, await _load_parties([session], directory)),
    )


@router.get(
    "/my-sessions",
    response_model=SessionListResponse,
    summary="List the caller's sessions",
)
async def get_my_sessions(
    caller: Party = Depends(get_current_party),
    scheduler: SessionScheduler = Depends(get_scheduler),
    directory: PartyDirectory = Depends(get_party_directory),
) -> SessionListResponse:
    """Sessions the caller runs (therapists) or booked (clients), earliest first."""
    sessions = await scheduler.sessions_for(caller)
    parties = await _load_parties(sessions, directory)
    return SessionListResponse(sessions=[SessionResponse.from_domain(s, parties) for s in sessions])


@router.get(
    "/key",
    response_model=VideoKeyResponse,
    summary="Get the video provider application id",
)
async def get_video_key(
    caller: Party = Depends(get_current_party),
    settings: Settings = Depends(get_settings),
) -> VideoKeyResponse:
    """Application id clients need to join a channel. Never the certificate."""
    return VideoKeyResponse(key=settings.video.app_id)


@router.get(
    "/{session_id}",
    response_model=SessionActionResponse,
    summary="Get a session",
)
async def get_session(
    session_id: UUID,
    caller: Party = Depends(get_current_party),
    lifecycle: SessionLifecycle = Depends(get_lifecycle),
    directory: PartyDirectory = Depends(get_party_directory),
) -> SessionActionResponse:
    session = await lifecycle.get_session_for(session_id, caller.id)
    return SessionActionResponse(
        message="OK",
        session=SessionResponse.from_domain(session, await _load_parties([session], directory)),
    )


@router.post(
    "/{session_id}/start",
    response_model=StartSessionResponse,
    summary="Start a scheduled session",
)
async def start_session(
    session_id: UUID,
    caller: Party = Depends(get_current_party),
    lifecycle: SessionLifecycle = Depends(get_lifecycle),
    directory: PartyDirectory = Depends(get_party_directory),
) -> StartSessionResponse:
    """Open the session's video channel. Either participant may start it."""
    started = await lifecycle.start_session(session_id, caller.id)
    return StartSessionResponse(
        message="Session started",
        meeting_link=started.channel_identity,
        channel_name=started.channel_identity,
        session=SessionResponse.from_domain(started.session, await _load_parties([started.session], directory)),
    )


@router.post(
    "/{session_id}/end",
    response_model=SessionActionResponse,
    summary="End an ongoing session",
)
async def end_session(
    session_id: UUID,
    caller: Party = Depends(get_current_party),
    lifecycle: SessionLifecycle = Depends(get_lifecycle),
    directory: PartyDirectory = Depends(get_party_directory),
) -> SessionActionResponse:
    session = await lifecycle.end_session(session_id, caller.id)
    return SessionActionResponse(
        message="Session ended successfully",
        session=SessionResponse.from_domain(session, await _load_parties([session], directory)),
    )


@router.post(
    "/{session_id}/cancel",
    response_model=SessionActionResponse,
    summary="Cancel a scheduled session",
)
async def cancel_session(
    session_id: UUID,
    caller: Party = Depends(get_current_party),
    lifecycle: SessionLifecycle = Depends(get_lifecycle),
    directory: PartyDirectory = Depends(get_party_directory),
) -> SessionActionResponse:
    """Participants and admins may cancel; ongoing sessions must be ended instead."""
    session = await lifecycle.cancel_session(session_id, caller)
    return SessionActionResponse(
        message="Session cancelled",
        session=SessionResponse.from_domain(session, await _load_parties([session], directory)),
    )


@router.get(
    "/{session_id}/token",
    response_model=VideoTokenResponse,
    summary="Issue a video room credential",
)
async def get_video_token(
    session_id: UUID,
    caller: Party = Depends(get_current_party),
    lifecycle: SessionLifecycle = Depends(get_lifecycle),
    issuer: RoomCredentialIssuer = Depends(get_credential_issuer),
) -> VideoTokenResponse:
    """
    Issue a publisher credential for an ongoing session.
    
    Call again before expiry to renew; the channel and uid stay the same.
    """
    session = await lifecycle.get_session(session_id)
    credential = issuer.issue_credential(session, caller.id)
    return VideoTokenResponse(
        token=credential.token,
        channel_name=credential.channel_name,
        uid=credential.uid,
        expires_at=credential.expires_at,
    )
