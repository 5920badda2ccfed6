"""Profile model, one per identity provider subject."""

from enum import Enum

from sqlalchemy import ForeignKey, String
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import Mapped, mapped_column

from consent_portal.db.base import Base, TimestampMixin


class ProfileRole(str, Enum):
    """Portal roles. Only assigned out of band, never by the owner."""

    PATIENT = "patient"
    ADMIN = "admin"


class Profile(Base, TimestampMixin):
    """Portal profile for an authenticated identity.

    The primary key is the identity provider subject, so there is exactly
    one profile per identity. Profiles are provisioned on first sign-in and
    removed only by cascade when the identity itself is deleted.
    """

    __tablename__ = "profiles"

    email: Mapped[str] = mapped_column(
        String(255),
        unique=True,
        nullable=False,
        index=True,
    )
    full_name: Mapped[str | None] = mapped_column(
        String(255),
        nullable=True,
    )
    role: Mapped[ProfileRole] = mapped_column(
        String(20),
        default=ProfileRole.PATIENT,
        nullable=False,
    )
    hospital_id: Mapped[str | None] = mapped_column(
        UUID(as_uuid=False),
        ForeignKey("hospitals.id"),
        nullable=True,
    )

    def __repr__(self) -> str:
        return f"<Profile {self.email} ({self.role})>"
