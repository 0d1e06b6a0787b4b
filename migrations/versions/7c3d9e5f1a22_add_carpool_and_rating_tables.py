"""add_carpool_and_rating_tables

Revision ID: 7c3d9e5f1a22
Revises: 4b1e7c2a9d10
Create Date: 2026-09-21 16:47:03.552871

"""

from collections.abc import Sequence

import sqlalchemy as sa
from alembic import op
from sqlalchemy.dialects import postgresql

# revision identifiers, used by Alembic.
revision: str = "7c3d9e5f1a22"
down_revision: str | Sequence[str] | None = "4b1e7c2a9d10"
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None


def upgrade() -> None:
    """Create carpools, carpool_requests and ratings."""
    op.create_table('carpools',
        sa.Column('id', sa.UUID(), nullable=False),
        sa.Column('event_id', sa.UUID(), nullable=False),
        sa.Column('driver_id', sa.UUID(), nullable=False),
        sa.Column('origin_text', sa.String(length=200), nullable=False),
        sa.Column('destination_text', sa.String(length=200), nullable=False),
        sa.Column('depart_time', sa.DateTime(), nullable=False),
        sa.Column('depart_window', sa.Integer(), server_default='15', nullable=False),
        sa.Column('seats_total', sa.Integer(), nullable=False),
        sa.Column('seats_available', sa.Integer(), nullable=False),
        sa.Column('cost_per_person', sa.Integer(), nullable=True),
        sa.Column('meeting_spot', sa.String(length=200), nullable=True),
        sa.Column('vehicle_info', sa.String(length=200), nullable=True),
        sa.Column('safety_notes', sa.String(length=500), nullable=True),
        sa.Column('status', sa.String(length=20), server_default='active', nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.Column('updated_at', sa.DateTime(), nullable=False),
        sa.CheckConstraint('seats_total >= 1 AND seats_total <= 8', name='ck_carpools_seats_total'),
        sa.CheckConstraint(
            'seats_available >= 0 AND seats_available <= seats_total',
            name='ck_carpools_seats_available',
        ),
        sa.CheckConstraint(
            "status IN ('active', 'full', 'cancelled', 'completed')",
            name='ck_carpools_status',
        ),
        sa.ForeignKeyConstraint(['event_id'], ['events.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['driver_id'], ['profiles.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_carpools_event_id', 'carpools', ['event_id'], unique=False)

    op.create_table('carpool_requests',
        sa.Column('id', sa.UUID(), nullable=False),
        sa.Column('carpool_id', sa.UUID(), nullable=False),
        sa.Column('rider_id', sa.UUID(), nullable=False),
        sa.Column('seats_requested', sa.Integer(), server_default='1', nullable=False),
        sa.Column('pickup_location', sa.String(length=200), nullable=True),
        sa.Column('message', sa.String(length=200), nullable=True),
        sa.Column('status', sa.String(length=20), server_default='pending', nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.Column('updated_at', sa.DateTime(), nullable=False),
        sa.CheckConstraint(
            'seats_requested >= 1 AND seats_requested <= 4', name='ck_carpool_requests_seats'
        ),
        sa.CheckConstraint(
            "status IN ('pending', 'accepted', 'denied', 'cancelled')",
            name='ck_carpool_requests_status',
        ),
        sa.ForeignKeyConstraint(['carpool_id'], ['carpools.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['rider_id'], ['profiles.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('carpool_id', 'rider_id', name='uq_carpool_requests_carpool_rider'),
    )
    op.create_index(
        'ix_carpool_requests_carpool_id', 'carpool_requests', ['carpool_id'], unique=False
    )

    op.create_table('ratings',
        sa.Column('id', sa.UUID(), nullable=False),
        sa.Column('event_id', sa.UUID(), nullable=False),
        sa.Column('rater_id', sa.UUID(), nullable=False),
        sa.Column('ratee_id', sa.UUID(), nullable=False),
        sa.Column('stars', sa.Integer(), nullable=False),
        sa.Column('quick_tags', postgresql.JSONB(), server_default='[]', nullable=False),
        sa.Column('comment', sa.String(length=500), nullable=True),
        sa.Column('is_anonymous', sa.Boolean(), server_default=sa.false(), nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.CheckConstraint('stars >= 1 AND stars <= 5', name='ck_ratings_stars'),
        sa.CheckConstraint('rater_id <> ratee_id', name='ck_ratings_not_self'),
        sa.ForeignKeyConstraint(['event_id'], ['events.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['rater_id'], ['profiles.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['ratee_id'], ['profiles.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint(
            'event_id', 'rater_id', 'ratee_id', name='uq_ratings_event_rater_ratee'
        ),
    )
    op.create_index('ix_ratings_ratee_id', 'ratings', ['ratee_id'], unique=False)


def downgrade() -> None:
    """Drop ratings, carpool_requests and carpools."""
    op.drop_index('ix_ratings_ratee_id', table_name='ratings')
    op.drop_table('ratings')

    op.drop_index('ix_carpool_requests_carpool_id', table_name='carpool_requests')
    op.drop_table('carpool_requests')

    op.drop_index('ix_carpools_event_id', table_name='carpools')
    op.drop_table('carpools')
