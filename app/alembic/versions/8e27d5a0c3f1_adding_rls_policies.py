"""adding RLS policies

Revision ID: 8e27d5a0c3f1
Revises: 3b1f6c2a9d04
Create Date: 2026-09-14 10:40:52.771904

"""

from typing import Sequence, Union

from alembic import op

# revision identifiers, used by Alembic.
revision: str = "8e27d5a0c3f1"
down_revision: Union[str, Sequence[str], None] = "3b1f6c2a9d04"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

TABLES = ("teams", "user_roles", "tickets", "ticket_responses")


def upgrade() -> None:
    """Enable Row Level Security for clients that talk to the database directly"""
    for table in TABLES:
        op.execute(f"ALTER TABLE {table} ENABLE ROW LEVEL SECURITY")

    # ============= Helper: is the caller staff or admin =============
    op.execute("""
        CREATE OR REPLACE FUNCTION public.is_staff_or_admin()
        RETURNS boolean
        LANGUAGE sql STABLE SECURITY DEFINER
        AS $$
            SELECT EXISTS (
                SELECT 1 FROM public.user_roles
                WHERE user_id = auth.uid() AND role IN ('staff', 'admin')
            )
        $$
    """)

    # ============= Tickets =============
    op.execute("""
        CREATE POLICY customer_own_tickets ON tickets
        FOR SELECT
        USING (customer_email = auth.jwt() ->> 'email')
    """)
    op.execute("""
        CREATE POLICY customer_create_tickets ON tickets
        FOR INSERT
        WITH CHECK (customer_email = auth.jwt() ->> 'email')
    """)
    op.execute("""
        CREATE POLICY staff_all_tickets ON tickets
        FOR ALL
        USING (public.is_staff_or_admin())
    """)

    # ============= Responses follow their ticket =============
    op.execute("""
        CREATE POLICY customer_own_responses ON ticket_responses
        FOR SELECT
        USING (
            ticket_id IN (
                SELECT id FROM tickets WHERE customer_email = auth.jwt() ->> 'email'
            )
        )
    """)
    op.execute("""
        CREATE POLICY staff_all_responses ON ticket_responses
        FOR ALL
        USING (public.is_staff_or_admin())
    """)

    # ============= Roles and teams =============
    op.execute("""
        CREATE POLICY read_own_role ON user_roles
        FOR SELECT
        USING (user_id = auth.uid() OR public.is_staff_or_admin())
    """)
    op.execute("""
        CREATE POLICY staff_read_teams ON teams
        FOR SELECT
        USING (public.is_staff_or_admin())
    """)

    # ============= Service Role Policy (Admin Access) =============
    for table in TABLES:
        op.execute(f"""
            CREATE POLICY service_role_access ON {table}
            FOR ALL
            USING (current_setting('role', true) = 'service_role')
        """)

    # ============= Attachments bucket =============
    op.execute("""
        CREATE POLICY "Authenticated users can upload attachments"
        ON storage.objects FOR INSERT
        TO authenticated
        WITH CHECK (
            bucket_id = 'tickets' AND
            (storage.foldername(name))[1] = 'attachments'
        );
    """)


def downgrade() -> None:
    """Downgrade schema."""
    op.execute("""
    DROP POLICY IF EXISTS "Authenticated users can upload attachments" ON storage.objects;
    """)
    for table in reversed(TABLES):
        op.execute(f"DROP POLICY IF EXISTS service_role_access ON {table}")
    op.execute("DROP POLICY IF EXISTS staff_read_teams ON teams")
    op.execute("DROP POLICY IF EXISTS read_own_role ON user_roles")
    op.execute("DROP POLICY IF EXISTS staff_all_responses ON ticket_responses")
    op.execute("DROP POLICY IF EXISTS customer_own_responses ON ticket_responses")
    op.execute("DROP POLICY IF EXISTS staff_all_tickets ON tickets")
    op.execute("DROP POLICY IF EXISTS customer_create_tickets ON tickets")
    op.execute("DROP POLICY IF EXISTS customer_own_tickets ON tickets")
    op.execute("DROP FUNCTION IF EXISTS public.is_staff_or_admin()")

    for table in reversed(TABLES):
        op.execute(f"ALTER TABLE {table} DISABLE ROW LEVEL SECURITY")
