"""
Session Status and Party Role Enumerations

Defines the lifecycle states of a therapy session and the
role tags a party may carry.
"""

from enum import StrEnum


class SessionStatus(StrEnum):
    """
    Therapy session lifecycle states.
    
    SCHEDULED is the initial state; COMPLETED and CANCELLED
    are terminal.
    """
    
    SCHEDULED = "scheduled"
    """Booked, not yet started."""
    
    ONGOING = "ongoing"
    """Video room open, session in progress."""
    
    COMPLETED = "completed"
    """Session ended normally by a participant."""
    
    CANCELLED = "cancelled"
    """Cancelled before it started."""
    
    @property
    def holds_therapist_time(self) -> bool:
        """Whether a session in this state blocks the therapist's calendar."""
        return self in ACTIVE_STATUSES


ACTIVE_STATUSES: frozenset[SessionStatus] = frozenset({
    SessionStatus.SCHEDULED,
    SessionStatus.ONGOING,
})


class PartyRole(StrEnum):
    """
    Normalized role tag of a party.
    
    Only CLIENT and THERAPIST may participate in a session.
    ADMIN may cancel sessions it does not participate in.
    """
    
    CLIENT = "client"
    THERAPIST = "therapist"
    ADMIN = "admin"
    
    @classmethod
    def normalize(cls, role: str | None, is_admin: bool = False) -> "PartyRole":
        """
        Map a stored role tag onto a PartyRole.
        
        Legacy accounts carry role "user" for clients and an
        is_admin flag instead of an admin role.
        
        Raises:
            ValueError: If the role tag is unknown
        """
        if is_admin:
            return cls.ADMIN
        value = (role or "user").strip().lower()
        if value == "user":
            return cls.CLIENT
        return cls(value)
    
    @property
    def can_participate(self) -> bool:
        return self in (PartyRole.CLIENT, PartyRole.THERAPIST)
