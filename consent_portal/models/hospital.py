"""Hospital reference data."""

from sqlalchemy import String, Text
from sqlalchemy.orm import Mapped, mapped_column

from consent_portal.db.base import Base, CreatedAtMixin


class Hospital(Base, CreatedAtMixin):
    """Participating hospital. Read-only from the portal."""

    __tablename__ = "hospitals"

    name: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
    )
    address: Mapped[str | None] = mapped_column(
        Text,
        nullable=True,
    )
    contact_email: Mapped[str | None] = mapped_column(
        String(255),
        nullable=True,
    )

    def __repr__(self) -> str:
        return f"<Hospital {self.name}>"
