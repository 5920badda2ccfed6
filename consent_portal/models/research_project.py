"""Research project model."""

from enum import Enum

from sqlalchemy import Integer, String, Text
from sqlalchemy.dialects.postgresql import JSON
from sqlalchemy.orm import Mapped, mapped_column

from consent_portal.db.base import Base, TimestampMixin


class ProjectStatus(str, Enum):
    """Lifecycle status of a research project."""

    ACTIVE = "active"
    COMPLETED = "completed"
    PAUSED = "paused"


class ResearchProject(Base, TimestampMixin):
    """A federated learning study that patients can consent to.

    Only ``active`` projects are visible through the portal.
    """

    __tablename__ = "research_projects"

    title: Mapped[str] = mapped_column(
        String(500),
        nullable=False,
    )
    description: Mapped[str] = mapped_column(
        Text,
        nullable=False,
    )
    principal_investigator: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
    )
    institution: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
    )
    # Categories of patient data used, e.g. ["Lab Results", "Medical Images"]
    data_types: Mapped[list] = mapped_column(
        JSON,
        nullable=False,
        default=list,
    )
    purpose: Mapped[str] = mapped_column(
        Text,
        nullable=False,
    )
    duration_months: Mapped[int] = mapped_column(
        Integer,
        nullable=False,
        default=12,
    )
    status: Mapped[ProjectStatus] = mapped_column(
        String(20),
        nullable=False,
        default=ProjectStatus.ACTIVE,
        index=True,
    )

    def __repr__(self) -> str:
        return f"<ResearchProject {self.title[:30]} ({self.status})>"
