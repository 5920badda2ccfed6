"""Consent record model for research participation."""

from datetime import datetime

from sqlalchemy import Boolean, DateTime, ForeignKey, Integer, UniqueConstraint
from sqlalchemy.dialects.postgresql import JSON, UUID
from sqlalchemy.orm import Mapped, mapped_column

from consent_portal.db.base import Base, TimestampMixin


class ConsentRecord(Base, TimestampMixin):
    """A patient's participation decision for one research project.

    There is at most one record per (patient, project). Changing the
    decision updates this record in place; withdrawal is a state change,
    never a delete, so the audit trail stays continuous.
    """

    __tablename__ = "consent_records"
    __table_args__ = (
        UniqueConstraint(
            "patient_id",
            "project_id",
            name="uq_consent_records_patient_project",
        ),
    )

    patient_id: Mapped[str] = mapped_column(
        UUID(as_uuid=False),
        ForeignKey("profiles.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    project_id: Mapped[str] = mapped_column(
        UUID(as_uuid=False),
        ForeignKey("research_projects.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    consent_given: Mapped[bool] = mapped_column(
        Boolean,
        nullable=False,
        default=False,
    )
    # When consent was last given
    consent_date: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
    )
    # Set exactly when consent_given transitions to false
    withdrawal_date: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True),
        nullable=True,
    )
    # Months
    data_retention_period: Mapped[int] = mapped_column(
        Integer,
        nullable=False,
        default=60,
    )
    # Sub-scopes, e.g. {"data_sharing": true, "federated_learning": true}
    specific_permissions: Mapped[dict] = mapped_column(
        JSON,
        nullable=False,
        default=dict,
    )
    gdpr_compliant: Mapped[bool] = mapped_column(
        Boolean,
        nullable=False,
        default=True,
    )

    def __repr__(self) -> str:
        state = "given" if self.consent_given else "withdrawn"
        return f"<ConsentRecord patient={self.patient_id[:8]}... project={self.project_id[:8]}... {state}>"
