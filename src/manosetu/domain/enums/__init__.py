"""Domain enums package."""

from manosetu.domain.enums.session_status import PartyRole, SessionStatus

__all__ = ["PartyRole", "SessionStatus"]
