"""Video room credential services."""

from manosetu.services.video.room_credentials import (
    RoomCredential,
    RoomCredentialIssuer,
    participant_uid,
)

__all__ = [
    "RoomCredential",
    "RoomCredentialIssuer",
    "participant_uid",
]
