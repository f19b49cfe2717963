"""
Per-Therapist Booking Locks

Serializes the conflict-check-then-commit sequence for each
therapist within one process. Requests for different therapists
never wait on each other.

asyncio locks belong to the event loop they are first contended
on, so the registry keeps a separate table per running loop. A
therapist's entry lives only while someone holds or awaits it.
"""

from contextlib import asynccontextmanager
from typing import AsyncIterator, Optional
from uuid import UUID
from weakref import WeakKeyDictionary
import asyncio

from manosetu.config.logging_config import get_logger

logger = get_logger(__name__)


class _Slot:
    """A therapist's lock and the number of tasks holding or awaiting it."""

    __slots__ = ("lock", "users")

    def __init__(self) -> None:
        self.lock = asyncio.Lock()
        self.users = 0


class TherapistLocks:
    """
    Registry of one asyncio.Lock per therapist and event loop.

    Usage:
        locks = TherapistLocks()
        async with locks.hold(therapist_id):
            # check, insert and commit
    """

    def __init__(self) -> None:
        self._slots: WeakKeyDictionary[asyncio.AbstractEventLoop, dict[UUID, _Slot]] = (
            WeakKeyDictionary()
        )

    @asynccontextmanager
    async def hold(self, therapist_id: UUID) -> AsyncIterator[None]:
        """Hold the therapist's booking lock for the duration of the block."""
        slots = self._slots.setdefault(asyncio.get_running_loop(), {})
        slot = slots.get(therapist_id)
        if slot is None:
            slot = slots[therapist_id] = _Slot()
        slot.users += 1
        if slot.users > 1:
            logger.debug(
                "Waiting for therapist booking lock",
                therapist_id=str(therapist_id),
                queued=slot.users - 1,
            )

        try:
            async with slot.lock:
                yield
        finally:
            slot.users -= 1
            if slot.users == 0:
                del slots[therapist_id]


# Global lock registry, shared by every request in this process
_therapist_locks: Optional[TherapistLocks] = None


def get_therapist_locks() -> TherapistLocks:
    """Get or create the process-wide lock registry."""
    global _therapist_locks
    if _therapist_locks is None:
        _therapist_locks = TherapistLocks()
    return _therapist_locks
