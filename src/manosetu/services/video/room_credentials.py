"""
Room Credential Issuer

Mints time-boxed credentials for a session's video channel.

The issuer is stateless: every call reads the session's current
status and channel, and re-invoking before expiry simply returns a
fresh credential for the same channel and identity.

SECURITY: Tokens are never logged. Only participants of an ongoing
session receive one.
"""

import hashlib
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Callable, Optional
from uuid import UUID

from manosetu.config.logging_config import get_logger
from manosetu.domain.enums.session_status import SessionStatus
from manosetu.domain.errors import (
    CredentialIssuanceFailure,
    InvalidStateTransition,
    Unauthorized,
)
from manosetu.domain.models.session import Session
from manosetu.infrastructure.metrics import track_credential
from manosetu.infrastructure.video.signer import CredentialRole, CredentialSigner

logger = get_logger(__name__)

# Agora uids are unsigned 32-bit; 0 asks the provider to assign one
_UID_MASK = 0x7FFFFFFF


def participant_uid(channel_name: str, party_id: UUID) -> int:
    """Stable numeric identity of a party within a channel."""
    digest = hashlib.sha256(f"{channel_name}:{party_id}".encode()).digest()
    return (int.from_bytes(digest[:4], "big") & _UID_MASK) or 1


@dataclass(frozen=True)
class RoomCredential:
    """
    Signed credential for one identity in one channel.
    
    Attributes:
        token: Opaque signed token
        channel_name: Channel the token is scoped to
        uid: Caller identity within the channel
        role: Privilege level (always publisher for participants)
        issued_at: Issuance time (UTC, whole seconds)
        expires_at: Expiry time, strictly after issued_at
    """
    
    token: str
    channel_name: str
    uid: int
    role: CredentialRole
    issued_at: datetime
    expires_at: datetime


class RoomCredentialIssuer:
    """
    Validates the caller and session state, then delegates signing.
    
    Usage:
        issuer = RoomCredentialIssuer(signer, app_id, app_certificate)
        credential = issuer.issue_credential(session, caller_id)
    """
    
    def __init__(
        self,
        signer: CredentialSigner,
        app_id: str,
        app_certificate: str,
        ttl_seconds: int = 3600,
        clock: Optional[Callable[[], datetime]] = None,
    ) -> None:
        if ttl_seconds <= 0:
            raise ValueError("Credential lifetime must be positive")
        self._signer = signer
        self._app_id = app_id
        self._app_certificate = app_certificate
        self._ttl = timedelta(seconds=ttl_seconds)
        self._clock = clock or (lambda: datetime.now(timezone.utc))
    
    @property
    def app_id(self) -> str:
        return self._app_id
    
    def is_configured(self) -> bool:
        return bool(self._app_id and self._app_certificate)
    
    def issue_credential(self, session: Session, caller_id: UUID) -> RoomCredential:
        """
        Issue a publisher credential for the session's channel.
        
        Raises:
            Unauthorized: If the caller is not a participant
            InvalidStateTransition: If the session is not ongoing
            CredentialIssuanceFailure: If signing is unavailable or fails
        """
        if not session.is_participant(caller_id):
            track_credential("rejected")
            raise Unauthorized()
        if session.status != SessionStatus.ONGOING or session.channel_identity is None:
            track_credential("rejected")
            raise InvalidStateTransition(
                f"Session is not ongoing (status: {session.status.value})"
            )
        if not self.is_configured():
            track_credential("failed")
            logger.error("Video provider credentials are not configured")
            raise CredentialIssuanceFailure("Video provider is not configured")
        
        channel_name = session.channel_identity
        uid = participant_uid(channel_name, caller_id)
        issued_at = self._clock().astimezone(timezone.utc).replace(microsecond=0)
        expires_at = issued_at + self._ttl
        
        try:
            token = self._signer.sign(
                app_id=self._app_id,
                app_secret=self._app_certificate,
                channel_name=channel_name,
                uid=uid,
                role=CredentialRole.PUBLISHER,
                expire_ts=int(expires_at.timestamp()),
            )
        except Exception as e:
            track_credential("failed")
            logger.error(
                "Credential signing failed",
                provider=self._signer.provider_name,
                session_id=str(session.id),
                error_type=type(e).__name__,
            )
            raise CredentialIssuanceFailure(original_error=e) from e
        
        track_credential("issued")
        logger.info(
            "Video credential issued",
            session_id=str(session.id),
            channel=channel_name,
            uid=uid,
            expires_at=expires_at.isoformat(),
        )
        return RoomCredential(
            token=token,
            channel_name=channel_name,
            uid=uid,
            role=CredentialRole.PUBLISHER,
            issued_at=issued_at,
            expires_at=expires_at,
        )
