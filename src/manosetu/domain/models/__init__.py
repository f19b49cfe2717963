"""Domain models package."""

from manosetu.domain.models.interval import TimeInterval, ensure_utc, overlaps
from manosetu.domain.models.party import Party
from manosetu.domain.models.session import (
    ALLOWED_TRANSITIONS,
    Session,
    channel_identity_for,
)

__all__ = [
    # Interval
    "TimeInterval",
    "ensure_utc",
    "overlaps",
    # Party
    "Party",
    # Session
    "Session",
    "ALLOWED_TRANSITIONS",
    "channel_identity_for",
]
