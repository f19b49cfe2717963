"""Initial schema - users, therapy sessions

Revision ID: 001_initial_schema
Revises: 
Create Date: 2026-10-19 00:00:00.000000

Creates the ManoSetu scheduling schema:
- users: Directory of clients, therapists and admins
- therapy_sessions: Booked sessions with lifecycle timestamps and
  the per-therapist no-overlap exclusion constraint
"""

from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

# revision identifiers
revision: str = '001_initial_schema'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    # Equality on uuid inside a GiST exclusion constraint
    op.execute("CREATE EXTENSION IF NOT EXISTS btree_gist")
    
    # Create users table
    op.create_table(
        'users',
        sa.Column('id', postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column('name', sa.String(255), nullable=False),
        sa.Column('email', sa.String(255), nullable=False),
        sa.Column('role', sa.String(20), nullable=False, server_default='user'),
        sa.Column('is_admin', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('is_active', sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_users_email', 'users', ['email'], unique=True)
    op.create_index('ix_users_role', 'users', ['role'])
    
    # Create therapy_sessions table
    op.create_table(
        'therapy_sessions',
        sa.Column('id', postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column('client_id', postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column('therapist_id', postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column('start_time', sa.DateTime(timezone=True), nullable=False),
        sa.Column('end_time', sa.DateTime(timezone=True), nullable=False),
        sa.Column('duration_minutes', sa.Integer(), nullable=False),
        sa.Column('status', sa.String(20), nullable=False, server_default='scheduled'),
        sa.Column('channel_identity', sa.String(64), nullable=True),
        sa.Column('cancelled_by', postgresql.UUID(as_uuid=True), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column('started_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('ended_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('cancelled_at', sa.DateTime(timezone=True), nullable=True),
        sa.PrimaryKeyConstraint('id'),
        sa.ForeignKeyConstraint(['client_id'], ['users.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['therapist_id'], ['users.id'], ondelete='CASCADE'),
        sa.UniqueConstraint('channel_identity'),
        sa.CheckConstraint('start_time < end_time', name='ck_therapy_sessions_window'),
    )
    op.create_index('ix_therapy_sessions_client_id', 'therapy_sessions', ['client_id'])
    op.create_index('ix_therapy_sessions_start_time', 'therapy_sessions', ['start_time'])
    op.create_index(
        'ix_therapy_sessions_therapist_status',
        'therapy_sessions',
        ['therapist_id', 'status'],
    )
    
    # Half-open windows: back-to-back sessions do not collide
    op.execute(
        """
        ALTER TABLE therapy_sessions
        ADD CONSTRAINT no_overlap_per_therapist
        EXCLUDE USING gist (
            therapist_id WITH =,
            tstzrange(start_time, end_time, '[)') WITH &&
        )
        WHERE (status IN ('scheduled', 'ongoing'))
        """
    )


def downgrade() -> None:
    op.execute("ALTER TABLE therapy_sessions DROP CONSTRAINT IF EXISTS no_overlap_per_therapist")
    op.drop_table('therapy_sessions')
    op.drop_table('users')
