"""
Session Domain Errors

Every failure of the scheduling core is one of these exceptions.
Each carries the HTTP status and message the API returns for it.
"""

from typing import Optional


class SessionError(Exception):
    """Base exception for scheduling, lifecycle and credential errors."""
    
    status_code: int = 400
    code: str = "session_error"
    default_message: str = "Session request failed"
    
    def __init__(self, message: Optional[str] = None) -> None:
        self.message = message or self.default_message
        super().__init__(self.message)


class InvalidParty(SessionError):
    """Party does not exist or has the wrong role for the request."""
    
    code = "invalid_party"
    default_message = "Invalid therapist"


class InvalidInterval(SessionError):
    """Time window is empty or inverted."""
    
    code = "invalid_interval"
    default_message = "Start time must be before end time"


class SchedulingConflict(SessionError):
    """Requested window overlaps an active session of the therapist."""
    
    code = "scheduling_conflict"
    default_message = "Therapist is not available at this time"


class NotFound(SessionError):
    """Session does not exist."""
    
    status_code = 404
    code = "not_found"
    default_message = "Session not found"


class Unauthorized(SessionError):
    """Caller may not act on this session."""
    
    status_code = 403
    code = "unauthorized"
    default_message = "Not authorized"


class InvalidStateTransition(SessionError):
    """Requested transition is not an edge of the session state machine."""
    
    code = "invalid_state_transition"
    default_message = "Session cannot make this transition"


class CredentialIssuanceFailure(SessionError):
    """The signing primitive failed or is not configured."""
    
    status_code = 500
    code = "credential_issuance_failure"
    default_message = "Could not issue video credential"
    
    def __init__(
        self,
        message: Optional[str] = None,
        original_error: Optional[Exception] = None,
    ) -> None:
        super().__init__(message)
        self.original_error = original_error
