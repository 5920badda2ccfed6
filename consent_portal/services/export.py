"""Consent summary export as CSV."""

import csv
import io
from collections.abc import Iterable
from dataclasses import dataclass
from datetime import datetime

from sqlalchemy import select

from consent_portal.models.consent_record import ConsentRecord
from consent_portal.models.profile import Profile
from consent_portal.models.research_project import ResearchProject
from consent_portal.services.store import PolicyStore
from consent_portal.utils.time import date_stamp, format_datetime

EXPORT_HEADER = (
    "Project",
    "Patient Email",
    "Consent Status",
    "Consent Date",
    "Withdrawal Date",
    "GDPR Compliant",
)
UNKNOWN = "Unknown"
NO_WITHDRAWAL = "N/A"


@dataclass(frozen=True)
class ConsentExportRow:
    """One consent record joined with its project title and patient email."""

    project_title: str | None
    patient_email: str | None
    consent_given: bool
    consent_date: datetime
    withdrawal_date: datetime | None
    gdpr_compliant: bool

    def as_csv_row(self) -> list[str]:
        return [
            self.project_title or UNKNOWN,
            self.patient_email or UNKNOWN,
            "Consented" if self.consent_given else "Withdrawn",
            format_datetime(self.consent_date),
            format_datetime(self.withdrawal_date) if self.withdrawal_date else NO_WITHDRAWAL,
            "Yes" if self.gdpr_compliant else "No",
        ]


def render_consent_csv(rows: Iterable[ConsentExportRow]) -> str:
    """Render export rows as CSV text, header first."""
    buffer = io.StringIO()
    writer = csv.writer(buffer, lineterminator="\n")
    writer.writerow(EXPORT_HEADER)
    for row in rows:
        writer.writerow(row.as_csv_row())
    return buffer.getvalue()


def export_filename() -> str:
    return f"consent-data-{date_stamp()}.csv"


class ConsentExportService:
    """Read-only projection of visible consent records."""

    def __init__(self, store: PolicyStore) -> None:
        self.store = store

    async def get_rows(self) -> list[ConsentExportRow]:
        """Every consent record visible to the caller, oldest first.

        Project title and patient email are joined under their own tables'
        read policies, so hidden values come back as None.
        """
        query = (
            select(ConsentRecord, ResearchProject.title, Profile.email)
            .outerjoin(
                ResearchProject,
                (ResearchProject.id == ConsentRecord.project_id)
                & self.store.visible(ResearchProject),
            )
            .outerjoin(
                Profile,
                (Profile.id == ConsentRecord.patient_id) & self.store.visible(Profile),
            )
            .where(self.store.visible(ConsentRecord))
            .order_by(ConsentRecord.created_at)
        )
        result = await self.store.execute(query)

        return [
            ConsentExportRow(
                project_title=title,
                patient_email=email,
                consent_given=record.consent_given,
                consent_date=record.consent_date,
                withdrawal_date=record.withdrawal_date,
                gdpr_compliant=record.gdpr_compliant,
            )
            for record, title, email in result.all()
        ]

    async def export_csv(self) -> str:
        return render_consent_csv(await self.get_rows())
