"""create_profiles_and_events

Revision ID: 4b1e7c2a9d10
Revises:
Create Date: 2026-09-14 10:12:40.318204

"""

from collections.abc import Sequence

import sqlalchemy as sa
from alembic import op
from sqlalchemy.dialects import postgresql

# revision identifiers, used by Alembic.
revision: str = "4b1e7c2a9d10"
down_revision: str | Sequence[str] | None = None
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None


def upgrade() -> None:
    """Create profiles, events and event_attendees with capacity constraints."""
    op.create_table('profiles',
        sa.Column('id', sa.UUID(), nullable=False),
        sa.Column('email', sa.String(length=255), nullable=False),
        sa.Column('username', sa.String(length=30), nullable=True),
        sa.Column('full_name', sa.String(length=100), nullable=False),
        sa.Column('avatar_url', sa.String(length=500), nullable=True),
        sa.Column('campus_name', sa.String(length=100), server_default='', nullable=False),
        sa.Column('class_year', sa.Integer(), nullable=True),
        sa.Column('major', sa.String(length=100), nullable=True),
        sa.Column('bio', sa.Text(), nullable=True),
        sa.Column('interests', postgresql.JSONB(), server_default='[]', nullable=False),
        sa.Column('rating_avg', sa.Float(), server_default='0', nullable=False),
        sa.Column('rating_count', sa.Integer(), server_default='0', nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.Column('updated_at', sa.DateTime(), nullable=False),
        sa.CheckConstraint('rating_avg >= 0 AND rating_avg <= 5', name='ck_profiles_rating_avg'),
        sa.CheckConstraint('rating_count >= 0', name='ck_profiles_rating_count'),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('email'),
        sa.UniqueConstraint('username'),
    )

    op.create_table('events',
        sa.Column('id', sa.UUID(), nullable=False),
        sa.Column('host_id', sa.UUID(), nullable=False),
        sa.Column('title', sa.String(length=100), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('category', sa.String(length=20), nullable=False),
        sa.Column('location_text', sa.String(length=200), nullable=False),
        sa.Column('latitude', sa.Float(), nullable=True),
        sa.Column('longitude', sa.Float(), nullable=True),
        sa.Column('start_time', sa.DateTime(), nullable=False),
        sa.Column('end_time', sa.DateTime(), nullable=False),
        sa.Column('max_attendees', sa.Integer(), server_default='20', nullable=False),
        sa.Column('current_attendees', sa.Integer(), server_default='0', nullable=False),
        sa.Column('cover_url', sa.String(length=500), nullable=True),
        sa.Column('tags', postgresql.JSONB(), server_default='[]', nullable=False),
        sa.Column('cost', sa.Integer(), nullable=True),
        sa.Column('auto_approve', sa.Boolean(), server_default=sa.true(), nullable=False),
        sa.Column('is_public', sa.Boolean(), server_default=sa.true(), nullable=False),
        sa.Column('status', sa.String(length=20), server_default='active', nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.Column('updated_at', sa.DateTime(), nullable=False),
        sa.CheckConstraint(
            "category IN ('study', 'sport', 'party', 'food', 'volunteer', 'social', "
            "'academic', 'fitness', 'music', 'tech', 'other')",
            name='ck_events_category',
        ),
        sa.CheckConstraint(
            "status IN ('draft', 'active', 'cancelled', 'completed')",
            name='ck_events_status',
        ),
        sa.CheckConstraint(
            'max_attendees >= 1 AND max_attendees <= 100', name='ck_events_max_attendees'
        ),
        sa.CheckConstraint(
            'current_attendees >= 0 AND current_attendees <= max_attendees',
            name='ck_events_capacity',
        ),
        sa.CheckConstraint('end_time > start_time', name='ck_events_time_window'),
        sa.ForeignKeyConstraint(['host_id'], ['profiles.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_events_host_id', 'events', ['host_id'], unique=False)
    op.create_index('ix_events_start_time', 'events', ['start_time'], unique=False)
    op.create_index(
        'ix_events_discovery',
        'events',
        ['status', 'is_public', 'start_time'],
        unique=False,
    )

    op.create_table('event_attendees',
        sa.Column('id', sa.UUID(), nullable=False),
        sa.Column('event_id', sa.UUID(), nullable=False),
        sa.Column('user_id', sa.UUID(), nullable=False),
        sa.Column('status', sa.String(length=20), server_default='joined', nullable=False),
        sa.Column('notes', sa.String(length=200), nullable=True),
        sa.Column('joined_at', sa.DateTime(), nullable=False),
        sa.CheckConstraint(
            "status IN ('joined', 'requested', 'denied', 'waitlisted')",
            name='ck_event_attendees_status',
        ),
        sa.ForeignKeyConstraint(['event_id'], ['events.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['user_id'], ['profiles.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('event_id', 'user_id', name='uq_event_attendees_event_user'),
    )
    op.create_index('ix_event_attendees_event_id', 'event_attendees', ['event_id'], unique=False)
    op.create_index('ix_event_attendees_user_id', 'event_attendees', ['user_id'], unique=False)


def downgrade() -> None:
    """Drop event_attendees, events and profiles."""
    op.drop_index('ix_event_attendees_user_id', table_name='event_attendees')
    op.drop_index('ix_event_attendees_event_id', table_name='event_attendees')
    op.drop_table('event_attendees')

    op.drop_index('ix_events_discovery', table_name='events')
    op.drop_index('ix_events_start_time', table_name='events')
    op.drop_index('ix_events_host_id', table_name='events')
    op.drop_table('events')

    op.drop_table('profiles')
