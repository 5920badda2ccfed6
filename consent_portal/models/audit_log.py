"""Append-only audit log model for consent traceability."""

from enum import Enum

from sqlalchemy import ForeignKey, String, Text
from sqlalchemy.dialects.postgresql import JSON, UUID
from sqlalchemy.orm import Mapped, mapped_column

from consent_portal.db.base import Base, CreatedAtMixin


class AuditAction(str, Enum):
    """Action labels written by the portal."""

    CONSENT_GIVEN = "CONSENT_GIVEN"
    CONSENT_WITHDRAWN = "CONSENT_WITHDRAWN"


class AuditLogEntry(Base, CreatedAtMixin):
    """Append-only audit entry.

    IMPORTANT: This model intentionally has no update or delete
    operations. The store rejects both, and on PostgreSQL a trigger
    enforces the same at the database level.
    """

    __tablename__ = "audit_logs"

    # Actor
    user_id: Mapped[str] = mapped_column(
        UUID(as_uuid=False),
        ForeignKey("profiles.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )

    action: Mapped[str] = mapped_column(
        String(100),
        nullable=False,
        index=True,
    )

    # Resource affected
    resource_type: Mapped[str] = mapped_column(
        String(100),
        nullable=False,
    )
    resource_id: Mapped[str] = mapped_column(
        Text,
        nullable=False,
    )

    details: Mapped[dict] = mapped_column(
        JSON,
        nullable=False,
        default=dict,
    )

    # Request context
    ip_address: Mapped[str | None] = mapped_column(
        Text,
        nullable=True,
    )
    user_agent: Mapped[str | None] = mapped_column(
        Text,
        nullable=True,
    )

    def __repr__(self) -> str:
        return (
            f"<AuditLogEntry {self.action} by {self.user_id} "
            f"on {self.resource_type}:{self.resource_id}>"
        )
