"""
Therapy Session Database Model

SQLAlchemy ORM model for booked therapy sessions.

The table carries the exclusion constraint no_overlap_per_therapist
(see the initial migration) so that two active sessions of one
therapist can never overlap, whichever process inserts them.
"""

from datetime import datetime
from typing import Optional
from uuid import UUID, uuid4

from sqlalchemy import CheckConstraint, DateTime, ForeignKey, Index, Integer, String, func
from sqlalchemy.dialects.postgresql import UUID as PGUUID
from sqlalchemy.orm import Mapped, mapped_column

from manosetu.infrastructure.database.connection import Base

OVERLAP_CONSTRAINT_NAME = "no_overlap_per_therapist"


class SessionModel(Base):
    """
    Therapy session table ORM model.
    
    Table: therapy_sessions
    """
    
    __tablename__ = "therapy_sessions"
    __table_args__ = (
        CheckConstraint("start_time < end_time", name="ck_therapy_sessions_window"),
        Index("ix_therapy_sessions_therapist_status", "therapist_id", "status"),
    )
    
    id: Mapped[UUID] = mapped_column(
        PGUUID(as_uuid=True),
        primary_key=True,
        default=uuid4,
        doc="Unique session identifier"
    )
    
    # Participants
    client_id: Mapped[UUID] = mapped_column(
        PGUUID(as_uuid=True),
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
        doc="Booking client"
    )
    therapist_id: Mapped[UUID] = mapped_column(
        PGUUID(as_uuid=True),
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        doc="Therapist running the session"
    )
    
    # Window
    start_time: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        index=True,
    )
    end_time: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
    )
    duration_minutes: Mapped[int] = mapped_column(Integer, nullable=False)
    
    # Lifecycle
    status: Mapped[str] = mapped_column(
        String(20),
        default="scheduled",
        nullable=False,
        doc="Session status (scheduled, ongoing, completed, cancelled)"
    )
    channel_identity: Mapped[Optional[str]] = mapped_column(
        String(64),
        nullable=True,
        unique=True,
        doc="Video channel name, set on first start"
    )
    cancelled_by: Mapped[Optional[UUID]] = mapped_column(
        PGUUID(as_uuid=True),
        nullable=True,
    )
    
    # Timestamps
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=func.now(),
        nullable=False,
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=func.now(),
        onupdate=func.now(),
        nullable=False,
    )
    started_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)
    ended_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)
    cancelled_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)
    
    def __repr__(self) -> str:
        return f"<SessionModel(id={self.id}, therapist_id={self.therapist_id}, status='{self.status}')>"
