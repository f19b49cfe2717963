"""
Time Interval Value Object

Half-open time range [start, end) used for booking windows.
Back-to-back bookings that share a boundary do not overlap.
"""

import math
from dataclasses import dataclass
from datetime import datetime, timezone

from manosetu.domain.errors import InvalidInterval


def ensure_utc(value: datetime) -> datetime:
    """Interpret naive timestamps as UTC and convert aware ones to UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


@dataclass(frozen=True)
class TimeInterval:
    """
    Half-open interval of absolute time.
    
    Attributes:
        start: Inclusive start (UTC)
        end: Exclusive end (UTC)
    """
    
    start: datetime
    end: datetime
    
    def __post_init__(self) -> None:
        start = ensure_utc(self.start)
        end = ensure_utc(self.end)
        if not start < end:
            raise InvalidInterval(
                f"Start time {start.isoformat()} must be before end time {end.isoformat()}"
            )
        object.__setattr__(self, "start", start)
        object.__setattr__(self, "end", end)
    
    @property
    def duration_minutes(self) -> int:
        return math.ceil((self.end - self.start).total_seconds() / 60)
    
    def overlaps(self, other: "TimeInterval") -> bool:
        return overlaps(self, other)


def overlaps(a: TimeInterval, b: TimeInterval) -> bool:
    """
    Check whether two half-open intervals share any instant.
    
    Touching endpoints ({10:00, 10:30} and {10:30, 11:00}) do not overlap.
    """
    return a.start < b.end and b.start < a.end
