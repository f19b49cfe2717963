"""Session scheduling and lifecycle services."""

from manosetu.services.scheduling.lifecycle import SessionLifecycle, StartedSession
from manosetu.services.scheduling.locks import TherapistLocks, get_therapist_locks
from manosetu.services.scheduling.ports import PartyDirectory, SessionStore
from manosetu.services.scheduling.scheduler import SessionScheduler

__all__ = [
    "SessionScheduler",
    "SessionLifecycle",
    "StartedSession",
    "TherapistLocks",
    "get_therapist_locks",
    "PartyDirectory",
    "SessionStore",
]
