"""add_chat_tables

Revision ID: a9f2b6c84e31
Revises: 7c3d9e5f1a22
Create Date: 2026-09-28 11:05:19.904417

"""

from collections.abc import Sequence

import sqlalchemy as sa
from alembic import op

# revision identifiers, used by Alembic.
revision: str = "a9f2b6c84e31"
down_revision: str | Sequence[str] | None = "7c3d9e5f1a22"
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None


def upgrade() -> None:
    """Create threads, thread_participants and messages."""
    op.create_table('threads',
        sa.Column('id', sa.UUID(), nullable=False),
        sa.Column('type', sa.String(length=20), nullable=False),
        sa.Column('event_id', sa.UUID(), nullable=True),
        sa.Column('carpool_id', sa.UUID(), nullable=True),
        sa.Column('last_message_at', sa.DateTime(), nullable=True),
        sa.Column('is_archived', sa.Boolean(), server_default=sa.false(), nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.Column('updated_at', sa.DateTime(), nullable=False),
        sa.CheckConstraint("type IN ('event', 'carpool', 'dm')", name='ck_threads_type'),
        sa.ForeignKeyConstraint(['event_id'], ['events.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['carpool_id'], ['carpools.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('event_id'),
        sa.UniqueConstraint('carpool_id'),
    )

    # Composite PK: one participation row per (thread, user)
    op.create_table('thread_participants',
        sa.Column('thread_id', sa.UUID(), nullable=False),
        sa.Column('user_id', sa.UUID(), nullable=False),
        sa.Column('joined_at', sa.DateTime(), nullable=False),
        sa.ForeignKeyConstraint(['thread_id'], ['threads.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['user_id'], ['profiles.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('thread_id', 'user_id'),
    )
    op.create_index(
        'ix_thread_participants_user_id', 'thread_participants', ['user_id'], unique=False
    )

    op.create_table('messages',
        sa.Column('id', sa.UUID(), nullable=False),
        sa.Column('thread_id', sa.UUID(), nullable=False),
        sa.Column('event_id', sa.UUID(), nullable=True),
        sa.Column('sender_id', sa.UUID(), nullable=False),
        sa.Column('content', sa.Text(), nullable=False),
        sa.Column('message_type', sa.String(length=20), server_default='text', nullable=False),
        sa.Column('reply_to_id', sa.UUID(), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.CheckConstraint(
            "message_type IN ('text', 'image', 'location', 'rsvp_sticker', 'reaction')",
            name='ck_messages_type',
        ),
        sa.CheckConstraint(
            'char_length(content) BETWEEN 1 AND 1000', name='ck_messages_content_length'
        ),
        sa.ForeignKeyConstraint(['thread_id'], ['threads.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['event_id'], ['events.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['sender_id'], ['profiles.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['reply_to_id'], ['messages.id'], ondelete='SET NULL'),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_messages_thread_id', 'messages', ['thread_id'], unique=False)
    op.create_index('ix_messages_event_id', 'messages', ['event_id'], unique=False)
    op.create_index('ix_messages_created_at', 'messages', ['created_at'], unique=False)


def downgrade() -> None:
    """Drop messages, thread_participants and threads."""
    op.drop_index('ix_messages_created_at', table_name='messages')
    op.drop_index('ix_messages_event_id', table_name='messages')
    op.drop_index('ix_messages_thread_id', table_name='messages')
    op.drop_table('messages')

    op.drop_index('ix_thread_participants_user_id', table_name='thread_participants')
    op.drop_table('thread_participants')

    op.drop_table('threads')
