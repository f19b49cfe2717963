"""
Party Domain Model

A user as seen by the scheduling core: an opaque id and a role tag.
Identity and profile data live in the user directory.
"""

from dataclasses import dataclass
from typing import Optional
from uuid import UUID

from manosetu.domain.enums.session_status import PartyRole


@dataclass(frozen=True)
class Party:
    """
    Session participant or administrator.
    
    Attributes:
        id: User identifier
        role: Normalized role tag
        display_name: Name shown to the other participant
    """
    
    id: UUID
    role: PartyRole
    display_name: Optional[str] = None
    
    @property
    def is_therapist(self) -> bool:
        return self.role == PartyRole.THERAPIST
    
    @property
    def is_client(self) -> bool:
        return self.role == PartyRole.CLIENT
    
    @property
    def is_admin(self) -> bool:
        return self.role == PartyRole.ADMIN
