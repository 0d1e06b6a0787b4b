"""add_rls_policies

Revision ID: d5e8f0a3c7b2
Revises: a9f2b6c84e31
Create Date: 2026-10-02 09:31:55.127640

"""

from collections.abc import Sequence

from alembic import op

# revision identifiers, used by Alembic.
revision: str = "d5e8f0a3c7b2"
down_revision: str | Sequence[str] | None = "a9f2b6c84e31"
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None

TABLES = [
    "profiles",
    "events",
    "event_attendees",
    "carpools",
    "carpool_requests",
    "ratings",
    "threads",
    "thread_participants",
    "messages",
]


def upgrade() -> None:
    """Add Row Level Security policies and publish messages for realtime.

    The API connects with a service role that bypasses RLS and repeats these
    checks in the service layer. The policies apply to direct Supabase
    client connections, including realtime subscriptions on messages.
    """
    # --- Helper functions (SECURITY DEFINER to avoid RLS recursion) ---
    op.execute("""
        CREATE OR REPLACE FUNCTION get_user_thread_ids(uid UUID)
        RETURNS SETOF UUID
        LANGUAGE sql
        SECURITY DEFINER
        STABLE
        SET search_path = public
        AS $$
            SELECT thread_id FROM thread_participants WHERE user_id = uid;
        $$;
    """)
    op.execute("""
        CREATE OR REPLACE FUNCTION get_user_event_ids(uid UUID)
        RETURNS SETOF UUID
        LANGUAGE sql
        SECURITY DEFINER
        STABLE
        SET search_path = public
        AS $$
            SELECT id FROM events WHERE host_id = uid
            UNION
            SELECT event_id FROM event_attendees
            WHERE user_id = uid AND status = 'joined';
        $$;
    """)

    for table in TABLES:
        op.execute(f"ALTER TABLE {table} ENABLE ROW LEVEL SECURITY;")

    # --- Profiles: readable by signed-in users, writable by the owner ---
    op.execute("""
        CREATE POLICY profiles_select ON profiles
            FOR SELECT USING ((SELECT auth.uid()) IS NOT NULL);
    """)
    op.execute("""
        CREATE POLICY profiles_insert ON profiles
            FOR INSERT WITH CHECK (id = (SELECT auth.uid()));
    """)
    op.execute("""
        CREATE POLICY profiles_update ON profiles
            FOR UPDATE USING (id = (SELECT auth.uid()));
    """)

    # --- Events: public ones visible to all, own ones to the host ---
    op.execute("""
        CREATE POLICY events_select ON events
            FOR SELECT USING (
                is_public OR host_id = (SELECT auth.uid())
            );
    """)
    op.execute("""
        CREATE POLICY events_insert ON events
            FOR INSERT WITH CHECK (host_id = (SELECT auth.uid()));
    """)
    op.execute("""
        CREATE POLICY events_update ON events
            FOR UPDATE USING (host_id = (SELECT auth.uid()));
    """)

    # --- Event attendees: a user manages only their own row ---
    op.execute("""
        CREATE POLICY event_attendees_select ON event_attendees
            FOR SELECT USING ((SELECT auth.uid()) IS NOT NULL);
    """)
    op.execute("""
        CREATE POLICY event_attendees_insert ON event_attendees
            FOR INSERT WITH CHECK (user_id = (SELECT auth.uid()));
    """)
    op.execute("""
        CREATE POLICY event_attendees_delete ON event_attendees
            FOR DELETE USING (user_id = (SELECT auth.uid()));
    """)

    # --- Carpools and requests ---
    op.execute("""
        CREATE POLICY carpools_select ON carpools
            FOR SELECT USING ((SELECT auth.uid()) IS NOT NULL);
    """)
    op.execute("""
        CREATE POLICY carpools_insert ON carpools
            FOR INSERT WITH CHECK (driver_id = (SELECT auth.uid()));
    """)
    op.execute("""
        CREATE POLICY carpools_update ON carpools
            FOR UPDATE USING (driver_id = (SELECT auth.uid()));
    """)
    op.execute("""
        CREATE POLICY carpool_requests_select ON carpool_requests
            FOR SELECT USING (
                rider_id = (SELECT auth.uid())
                OR carpool_id IN (
                    SELECT id FROM carpools WHERE driver_id = (SELECT auth.uid())
                )
            );
    """)
    op.execute("""
        CREATE POLICY carpool_requests_insert ON carpool_requests
            FOR INSERT WITH CHECK (rider_id = (SELECT auth.uid()));
    """)

    # --- Ratings: readable by all, written as yourself ---
    op.execute("""
        CREATE POLICY ratings_select ON ratings
            FOR SELECT USING ((SELECT auth.uid()) IS NOT NULL);
    """)
    op.execute("""
        CREATE POLICY ratings_insert ON ratings
            FOR INSERT WITH CHECK (rater_id = (SELECT auth.uid()));
    """)

    # --- Threads and messages: participants only ---
    op.execute("""
        CREATE POLICY threads_select ON threads
            FOR SELECT USING (
                id IN (SELECT get_user_thread_ids((SELECT auth.uid())))
            );
    """)
    op.execute("""
        CREATE POLICY thread_participants_select ON thread_participants
            FOR SELECT USING (
                thread_id IN (SELECT get_user_thread_ids((SELECT auth.uid())))
            );
    """)
    op.execute("""
        CREATE POLICY messages_select ON messages
            FOR SELECT USING (
                thread_id IN (SELECT get_user_thread_ids((SELECT auth.uid())))
                OR event_id IN (SELECT get_user_event_ids((SELECT auth.uid())))
            );
    """)
    op.execute("""
        CREATE POLICY messages_insert ON messages
            FOR INSERT WITH CHECK (
                sender_id = (SELECT auth.uid())
                AND (
                    thread_id IN (SELECT get_user_thread_ids((SELECT auth.uid())))
                    OR event_id IN (SELECT get_user_event_ids((SELECT auth.uid())))
                )
            );
    """)

    # Realtime insert notifications for messages
    op.execute("ALTER PUBLICATION supabase_realtime ADD TABLE messages;")


def downgrade() -> None:
    """Drop all RLS policies and disable RLS."""
    op.execute("ALTER PUBLICATION supabase_realtime DROP TABLE messages;")

    policies = [
        ("messages_insert", "messages"),
        ("messages_select", "messages"),
        ("thread_participants_select", "thread_participants"),
        ("threads_select", "threads"),
        ("ratings_insert", "ratings"),
        ("ratings_select", "ratings"),
        ("carpool_requests_insert", "carpool_requests"),
        ("carpool_requests_select", "carpool_requests"),
        ("carpools_update", "carpools"),
        ("carpools_insert", "carpools"),
        ("carpools_select", "carpools"),
        ("event_attendees_delete", "event_attendees"),
        ("event_attendees_insert", "event_attendees"),
        ("event_attendees_select", "event_attendees"),
        ("events_update", "events"),
        ("events_insert", "events"),
        ("events_select", "events"),
        ("profiles_update", "profiles"),
        ("profiles_insert", "profiles"),
        ("profiles_select", "profiles"),
    ]
    for policy_name, table_name in policies:
        op.execute(f"DROP POLICY IF EXISTS {policy_name} ON {table_name};")

    for table in reversed(TABLES):
        op.execute(f"ALTER TABLE {table} DISABLE ROW LEVEL SECURITY;")

    op.execute("DROP FUNCTION IF EXISTS get_user_event_ids(UUID);")
    op.execute("DROP FUNCTION IF EXISTS get_user_thread_ids(UUID);")
