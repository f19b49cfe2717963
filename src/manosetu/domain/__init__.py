"""
ManoSetu Domain Layer

Core scheduling entities, value objects and errors.
These models represent the domain logic independent of infrastructure.
"""

from manosetu.domain.enums.session_status import PartyRole, SessionStatus
from manosetu.domain.errors import (
    CredentialIssuanceFailure,
    InvalidInterval,
    InvalidParty,
    InvalidStateTransition,
    NotFound,
    SchedulingConflict,
    SessionError,
    Unauthorized,
)
from manosetu.domain.models.interval import TimeInterval, overlaps
from manosetu.domain.models.party import Party
from manosetu.domain.models.session import Session

__all__ = [
    # Models
    "TimeInterval",
    "overlaps",
    "Party",
    "Session",
    # Enums
    "PartyRole",
    "SessionStatus",
    # Errors
    "SessionError",
    "InvalidParty",
    "InvalidInterval",
    "SchedulingConflict",
    "NotFound",
    "Unauthorized",
    "InvalidStateTransition",
    "CredentialIssuanceFailure",
]
