"""
API Dependencies

Wires request-scoped collaborators and authenticates the caller.

Bearer tokens are HS256 JWTs issued by the account service; the
party id is carried in the "id" claim (or "sub").
"""

from typing import Optional
from uuid import UUID

import jwt
from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.ext.asyncio import AsyncSession
import structlog

from manosetu.config import Settings, get_settings
from manosetu.config.logging_config import get_logger
from manosetu.domain.models.party import Party
from manosetu.infrastructure.database import get_async_session
from manosetu.infrastructure.database.repositories import SessionRepository, UserRepository
from manosetu.infrastructure.video import get_credential_signer
from manosetu.services.scheduling import (
    PartyDirectory,
    SessionLifecycle,
    SessionScheduler,
    SessionStore,
    get_therapist_locks,
)
from manosetu.services.video import RoomCredentialIssuer

logger = get_logger(__name__)

bearer_scheme = HTTPBearer(auto_error=False)


def _unauthenticated(detail: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=detail,
        headers={"WWW-Authenticate": "Bearer"},
    )


def decode_party_id(token: str, settings: Settings) -> UUID:
    """
    Verify a bearer token and extract the party id.
    
    Raises:
        HTTPException: 401 if the token is invalid, expired or carries no id
    """
    try:
        claims = jwt.decode(
            token,
            settings.jwt.secret_key.get_secret_value(),
            algorithms=[settings.jwt.algorithm],
        )
    except jwt.PyJWTError as e:
        logger.info("Bearer token rejected", reason=type(e).__name__)
        raise _unauthenticated("Invalid or expired token") from e
    
    raw_id = claims.get("id") or claims.get("sub")
    try:
        return UUID(str(raw_id))
    except (TypeError, ValueError) as e:
        raise _unauthenticated("Invalid or expired token") from e


async def get_session_store(db: AsyncSession = Depends(get_async_session)) -> SessionStore:
    return SessionRepository(db)


async def get_party_directory(db: AsyncSession = Depends(get_async_session)) -> PartyDirectory:
    return UserRepository(db)


async def get_current_party(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    parties: PartyDirectory = Depends(get_party_directory),
    settings: Settings = Depends(get_settings),
) -> Party:
    """Authenticate the caller and resolve them to a party."""
    if credentials is None:
        raise _unauthenticated("Authentication required")
    
    party_id = decode_party_id(credentials.credentials, settings)
    party = await parties.get_party(party_id)
    if party is None:
        raise _unauthenticated("User not found")
    
    structlog.contextvars.bind_contextvars(party_id=str(party.id))
    return party


def get_scheduler(
    store: SessionStore = Depends(get_session_store),
    parties: PartyDirectory = Depends(get_party_directory),
) -> SessionScheduler:
    return SessionScheduler(store, parties, locks=get_therapist_locks())


def get_lifecycle(store: SessionStore = Depends(get_session_store)) -> SessionLifecycle:
    return SessionLifecycle(store)


def get_credential_issuer(settings: Settings = Depends(get_settings)) -> RoomCredentialIssuer:
    return RoomCredentialIssuer(
        signer=get_credential_signer(),
        app_id=settings.video.app_id,
        app_certificate=settings.video.app_certificate.get_secret_value(),
        ttl_seconds=settings.video.token_ttl_seconds,
    )
