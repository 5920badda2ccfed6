"""Row-level security policies.

Revision ID: 002
Revises: 001
Create Date: 2025-06-20 00:01:00.000000

Database-side counterpart of consent_portal.policies.row_level. The API
binds the caller for each transaction with
``set_config('app.current_user_id', <subject>, true)``; every policy below
reads it through portal_current_user_id(). FORCE is set so the policies
also apply when the API connects as the table owner.
"""

from typing import Sequence, Union

from alembic import op

# revision identifiers, used by Alembic.
revision: str = "002"
down_revision: Union[str, None] = "001"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

TABLES = ("profiles", "hospitals", "research_projects", "consent_records", "audit_logs")

CALLER_IS_ADMIN = """
    EXISTS (
        SELECT 1 FROM profiles AS caller_profile
        WHERE caller_profile.id = portal_current_user_id()
        AND caller_profile.role = 'admin'
    )
"""

POLICIES = [
    # Profiles: self only
    ("profiles_select_own", "profiles", "SELECT", "id = portal_current_user_id()", None),
    ("profiles_insert_own", "profiles", "INSERT", None, "id = portal_current_user_id()"),
    (
        "profiles_update_own",
        "profiles",
        "UPDATE",
        "id = portal_current_user_id()",
        "id = portal_current_user_id()",
    ),
    # Reference data: read-only
    ("hospitals_select_all", "hospitals", "SELECT", "true", None),
    ("research_projects_select_active", "research_projects", "SELECT", "status = 'active'", None),
    # Consent records: own rows, admins read all
    (
        "consent_records_select_own_or_admin",
        "consent_records",
        "SELECT",
        f"patient_id = portal_current_user_id() OR {CALLER_IS_ADMIN}",
        None,
    ),
    (
        "consent_records_insert_own",
        "consent_records",
        "INSERT",
        None,
        "patient_id = portal_current_user_id()",
    ),
    (
        "consent_records_update_own",
        "consent_records",
        "UPDATE",
        "patient_id = portal_current_user_id()",
        "patient_id = portal_current_user_id()",
    ),
    # Audit log: own rows, admins read all, insert only
    (
        "audit_logs_select_own_or_admin",
        "audit_logs",
        "SELECT",
        f"user_id = portal_current_user_id() OR {CALLER_IS_ADMIN}",
        None,
    ),
    ("audit_logs_insert_own", "audit_logs", "INSERT", None, "user_id = portal_current_user_id()"),
]


def upgrade() -> None:
    """Enable RLS and create policies."""

    op.execute("""
        CREATE OR REPLACE FUNCTION portal_current_user_id()
        RETURNS uuid AS $$
            SELECT NULLIF(current_setting('app.current_user_id', true), '')::uuid
        $$ LANGUAGE sql STABLE;
    """)

    for table in TABLES:
        op.execute(f"ALTER TABLE {table} ENABLE ROW LEVEL SECURITY")
        op.execute(f"ALTER TABLE {table} FORCE ROW LEVEL SECURITY")

    for name, table, command, using, with_check in POLICIES:
        clauses = ""
        if using:
            clauses += f" USING ({using})"
        if with_check:
            clauses += f" WITH CHECK ({with_check})"
        op.execute(f"CREATE POLICY {name} ON {table} FOR {command}{clauses}")

    # Role changes need app.role_assignment, which only scripts/assign_role.py sets
    op.execute("""
        CREATE OR REPLACE FUNCTION prevent_profile_role_change()
        RETURNS TRIGGER AS $$
        BEGIN
            IF NEW.role IS DISTINCT FROM OLD.role
               AND current_setting('app.role_assignment', true) IS DISTINCT FROM 'on' THEN
                RAISE EXCEPTION 'Profile role can only be changed by role assignment. Profile ID: %', OLD.id;
            END IF;
            RETURN NEW;
        END;
        $$ LANGUAGE plpgsql;
    """)
    op.execute("""
        CREATE TRIGGER profile_role_immutability_trigger
        BEFORE UPDATE ON profiles
        FOR EACH ROW
        EXECUTE FUNCTION prevent_profile_role_change()
    """)


def downgrade() -> None:
    """Drop policies and disable RLS."""
    op.execute("DROP TRIGGER IF EXISTS profile_role_immutability_trigger ON profiles")
    op.execute("DROP FUNCTION IF EXISTS prevent_profile_role_change()")

    for name, table, _command, _using, _with_check in POLICIES:
        op.execute(f"DROP POLICY IF EXISTS {name} ON {table}")

    for table in TABLES:
        op.execute(f"ALTER TABLE {table} NO FORCE ROW LEVEL SECURITY")
        op.execute(f"ALTER TABLE {table} DISABLE ROW LEVEL SECURITY")

    op.execute("DROP FUNCTION IF EXISTS portal_current_user_id()")
