"""Add audit_logs immutability trigger.

Revision ID: 004
Revises: 003
Create Date: 2025-06-20 00:03:00.000000

Rejects direct UPDATE and DELETE on audit_logs at the database level, so the
consent audit trail stays append-only even for the table owner. Rows removed
by the cascade from a deleted profile are let through.
"""

from typing import Sequence, Union

from alembic import op

# revision identifiers, used by Alembic.
revision: str = "004"
down_revision: Union[str, None] = "003"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """Add immutability trigger to audit_logs table."""

    # Direct statements run at trigger depth 1; the ON DELETE CASCADE from
    # profiles runs inside the foreign key trigger, one level deeper.
    op.execute("""
        CREATE OR REPLACE FUNCTION prevent_audit_log_modification()
        RETURNS TRIGGER AS $$
        BEGIN
            IF TG_OP = 'UPDATE' THEN
                RAISE EXCEPTION 'Audit log entries are immutable and cannot be modified. Entry ID: %', OLD.id;
            ELSIF TG_OP = 'DELETE' AND pg_trigger_depth() = 1 THEN
                RAISE EXCEPTION 'Audit log entries are immutable and cannot be deleted. Entry ID: %', OLD.id;
            END IF;
            RETURN OLD;
        END;
        $$ LANGUAGE plpgsql;
    """)

    op.execute("""
        DROP TRIGGER IF EXISTS audit_log_immutability_trigger ON audit_logs
    """)

    op.execute("""
        CREATE TRIGGER audit_log_immutability_trigger
        BEFORE UPDATE OR DELETE ON audit_logs
        FOR EACH ROW
        EXECUTE FUNCTION prevent_audit_log_modification()
    """)

    op.execute("""
        COMMENT ON TABLE audit_logs IS
        'Append-only consent audit trail. Protected by immutability trigger - entries cannot be modified or deleted after creation, except by profile removal cascade.';
    """)


def downgrade() -> None:
    """Remove immutability trigger."""
    op.execute("""
        DROP TRIGGER IF EXISTS audit_log_immutability_trigger ON audit_logs;
    """)

    op.execute("""
        DROP FUNCTION IF EXISTS prevent_audit_log_modification();
    """)

    op.execute("""
        COMMENT ON TABLE audit_logs IS NULL;
    """)
