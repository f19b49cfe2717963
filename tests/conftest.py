"""Tests configuration and fixtures."""

import asyncio
import os
from contextlib import asynccontextmanager
from dataclasses import replace
from datetime import datetime, timedelta
from typing import AsyncIterator, Callable, Optional, Sequence
from uuid import UUID, uuid4

import jwt
import pytest

# Set minimal environment before any settings are loaded
os.environ.setdefault("MANOSETU_JWT_SECRET_KEY", "test_secret_key_for_jwt_signing_min_32_chars")
os.environ.setdefault("MANOSETU_VIDEO_APP_ID", "test-app-id")
os.environ.setdefault("MANOSETU_VIDEO_APP_CERTIFICATE", "test-app-certificate")
os.environ.setdefault("MANOSETU_RATE_LIMIT_ENABLED", "false")

from manosetu.config import Settings
from manosetu.config.settings import RateLimitSettings, VideoSettings
from manosetu.domain.enums import PartyRole, SessionStatus
from manosetu.domain.errors import InvalidStateTransition, NotFound
from manosetu.domain.models import Party, Session, TimeInterval
from manosetu.infrastructure.video.signer import CredentialRole, CredentialSigner
from manosetu.services.scheduling import (
    PartyDirectory,
    SessionLifecycle,
    SessionScheduler,
    SessionStore,
    TherapistLocks,
)
from manosetu.services.video import RoomCredentialIssuer


class InMemorySessionStore(SessionStore):
    """
    Dict-backed session store.

    Hands out copies so callers cannot mutate stored state, and
    yields to the event loop on every call like a real database.
    """

    def __init__(self) -> None:
        self.sessions: dict[UUID, Session] = {}
        self.commits = 0
        self.on_commit: Optional[Callable[[], None]] = None

    @asynccontextmanager
    async def transaction(self) -> AsyncIterator[None]:
        yield
        await asyncio.sleep(0)
        self.commits += 1
        if self.on_commit is not None:
            self.on_commit()

    async def get(self, session_id: UUID) -> Optional[Session]:
        await asyncio.sleep(0)
        session = self.sessions.get(session_id)
        return replace(session) if session else None

    async def find_active_for_therapist(
        self,
        therapist_id: UUID,
        window: Optional[TimeInterval] = None,
    ) -> Sequence[Session]:
        await asyncio.sleep(0)
        return [
            replace(s) for s in self.sessions.values()
            if s.therapist_id == therapist_id
            and s.status.holds_therapist_time
            and (window is None or s.interval.overlaps(window))
        ]

    async def list_for_client(self, client_id: UUID) -> Sequence[Session]:
        await asyncio.sleep(0)
        return [replace(s) for s in self.sessions.values() if s.client_id == client_id]

    async def list_for_therapist(self, therapist_id: UUID) -> Sequence[Session]:
        await asyncio.sleep(0)
        return [replace(s) for s in self.sessions.values() if s.therapist_id == therapist_id]

    async def create(self, session: Session) -> Session:
        await asyncio.sleep(0)
        self.sessions[session.id] = replace(session)
        return replace(session)

    async def update(self, session: Session, expected_status: SessionStatus) -> Session:
        await asyncio.sleep(0)
        stored = self.sessions.get(session.id)
        if stored is None:
            raise NotFound()
        if stored.status != expected_status:
            raise InvalidStateTransition(
                f"Session status changed concurrently (status: {stored.status.value})"
            )
        self.sessions[session.id] = replace(session)
        return replace(session)

    def add(self, session: Session) -> Session:
        """Seed a session directly."""
        self.sessions[session.id] = replace(session)
        return session


class InMemoryPartyDirectory(PartyDirectory):
    def __init__(self, *parties: Party) -> None:
        self.parties = {p.id: p for p in parties}

    def add(self, party: Party) -> Party:
        self.parties[party.id] = party
        return party

    async def get_party(self, party_id: UUID) -> Optional[Party]:
        return self.parties.get(party_id)


class FakeSigner(CredentialSigner):
    """Deterministic signer recording every call."""

    def __init__(self, fail_with: Optional[Exception] = None) -> None:
        self.calls: list[dict] = []
        self.fail_with = fail_with

    @property
    def provider_name(self) -> str:
        return "fake"

    def sign(
        self,
        *,
        app_id: str,
        app_secret: str,
        channel_name: str,
        uid: int,
        role: CredentialRole,
        expire_ts: int,
    ) -> str:
        if self.fail_with is not None:
            raise self.fail_with
        self.calls.append({
            "app_id": app_id,
            "channel_name": channel_name,
            "uid": uid,
            "role": role,
            "expire_ts": expire_ts,
        })
        return f"tok:{channel_name}:{uid}:{expire_ts}:{len(self.calls)}"


def build_session(
    client: Party,
    therapist: Party,
    start: datetime,
    end: Optional[datetime] = None,
    status: SessionStatus = SessionStatus.SCHEDULED,
) -> Session:
    end = end or start + timedelta(hours=1)
    session = Session(
        client_id=client.id,
        therapist_id=therapist.id,
        start_time=start,
        end_time=end,
        duration_minutes=int((end - start).total_seconds() // 60),
    )
    if status in (SessionStatus.ONGOING, SessionStatus.COMPLETED):
        session.start()
    if status == SessionStatus.COMPLETED:
        session.complete()
    if status == SessionStatus.CANCELLED:
        session.cancel(cancelled_by=client.id)
    return session


@pytest.fixture
def test_settings() -> Settings:
    """Create test settings with mock values."""
    return Settings(
        env="development",
        debug=True,
        video=VideoSettings(app_id="test-app-id", app_certificate="test-app-certificate"),
        rate_limit=RateLimitSettings(enabled=False),
    )


@pytest.fixture
def client_party() -> Party:
    return Party(id=uuid4(), role=PartyRole.CLIENT, display_name="Asha")


@pytest.fixture
def other_client() -> Party:
    return Party(id=uuid4(), role=PartyRole.CLIENT, display_name="Ravi")


@pytest.fixture
def therapist() -> Party:
    return Party(id=uuid4(), role=PartyRole.THERAPIST, display_name="Dr. Mehta")


@pytest.fixture
def admin() -> Party:
    return Party(id=uuid4(), role=PartyRole.ADMIN)


@pytest.fixture
def store() -> InMemorySessionStore:
    return InMemorySessionStore()


@pytest.fixture
def parties(client_party, other_client, therapist, admin) -> InMemoryPartyDirectory:
    return InMemoryPartyDirectory(client_party, other_client, therapist, admin)


@pytest.fixture
def scheduler(store, parties) -> SessionScheduler:
    return SessionScheduler(store, parties, locks=TherapistLocks())


@pytest.fixture
def lifecycle(store) -> SessionLifecycle:
    return SessionLifecycle(store)


@pytest.fixture
def signer() -> FakeSigner:
    return FakeSigner()


@pytest.fixture
def issuer(signer) -> RoomCredentialIssuer:
    return RoomCredentialIssuer(
        signer=signer,
        app_id="test-app-id",
        app_certificate="test-app-certificate",
        ttl_seconds=3600,
    )


@pytest.fixture
def make_token(test_settings):
    """Build a bearer token for a party id, as the account service would."""
    def _make(party_id: UUID, **claims) -> str:
        payload = {"id": str(party_id), **claims}
        return jwt.encode(
            payload,
            test_settings.jwt.secret_key.get_secret_value(),
            algorithm=test_settings.jwt.algorithm,
        )
    return _make


@pytest.fixture
def make_session():
    """Factory for sessions already in a given status."""
    return build_session
