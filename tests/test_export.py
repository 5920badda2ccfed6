"""Tests for the consent CSV export."""

import csv
import io
from datetime import datetime, timezone

from fastapi.testclient import TestClient

from consent_portal.services.consent import ConsentService
from consent_portal.services.export import (
    EXPORT_HEADER,
    ConsentExportRow,
    ConsentExportService,
    export_filename,
    render_consent_csv,
)
from consent_portal.services.store import PolicyStore

HEADER_LINE = "Project,Patient Email,Consent Status,Consent Date,Withdrawal Date,GDPR Compliant\n"


def parse_csv(text: str) -> list[list[str]]:
    return list(csv.reader(io.StringIO(text)))


def test_empty_export_is_header_only() -> None:
    assert render_consent_csv([]) == HEADER_LINE


def test_row_labels() -> None:
    rows = [
        ConsentExportRow(
            project_title="Imaging Study",
            patient_email="a@example.org",
            consent_given=True,
            consent_date=datetime(2025, 3, 1, 9, 30, tzinfo=timezone.utc),
            withdrawal_date=None,
            gdpr_compliant=True,
        ),
        ConsentExportRow(
            project_title=None,
            patient_email=None,
            consent_given=False,
            consent_date=datetime(2025, 3, 1, 9, 30),
            withdrawal_date=datetime(2025, 4, 2, 12, 0, tzinfo=timezone.utc),
            gdpr_compliant=False,
        ),
    ]

    parsed = parse_csv(render_consent_csv(rows))

    assert parsed[0] == list(EXPORT_HEADER)
    assert parsed[1] == [
        "Imaging Study",
        "a@example.org",
        "Consented",
        "2025-03-01T09:30:00Z",
        "N/A",
        "Yes",
    ]
    assert parsed[2] == [
        "Unknown",
        "Unknown",
        "Withdrawn",
        "2025-03-01T09:30:00Z",
        "2025-04-02T12:00:00Z",
        "No",
    ]


def test_values_with_commas_are_quoted() -> None:
    row = ConsentExportRow(
        project_title="Cancer, Imaging and Outcomes",
        patient_email="a@example.org",
        consent_given=True,
        consent_date=datetime(2025, 3, 1, tzinfo=timezone.utc),
        withdrawal_date=None,
        gdpr_compliant=True,
    )

    text = render_consent_csv([row])

    assert '"Cancer, Imaging and Outcomes"' in text
    assert parse_csv(text)[1][0] == "Cancer, Imaging and Outcomes"


def test_export_filename_format() -> None:
    name = export_filename()

    assert name.startswith("consent-data-")
    assert name.endswith(".csv")
    datetime.strptime(name[len("consent-data-"):-len(".csv")], "%Y-%m-%d")


class TestExportService:
    """Export over policy-scoped rows."""

    async def test_no_visible_records_gives_header_only(
        self, patient_store: PolicyStore, project
    ) -> None:
        assert await ConsentExportService(patient_store).export_csv() == HEADER_LINE

    async def test_patient_exports_only_own_records(
        self,
        patient_store: PolicyStore,
        other_patient_store: PolicyStore,
        patient,
        project,
        second_project,
    ) -> None:
        await ConsentService(patient_store).set_consent(project.id, True)
        await ConsentService(other_patient_store).set_consent(second_project.id, True)

        rows = await ConsentExportService(patient_store).get_rows()

        assert [(r.project_title, r.patient_email) for r in rows] == [
            (project.title, patient.email)
        ]

    async def test_admin_export_hides_other_profiles_emails(
        self,
        patient_store: PolicyStore,
        other_patient_store: PolicyStore,
        admin_store: PolicyStore,
        project,
        second_project,
    ) -> None:
        """Joined emails follow the profiles read policy, so admins see Unknown."""
        await ConsentService(patient_store).set_consent(project.id, True)
        await ConsentService(other_patient_store).set_consent(second_project.id, True)
        await ConsentService(other_patient_store).set_consent(second_project.id, False)

        parsed = parse_csv(await ConsentExportService(admin_store).export_csv())

        assert len(parsed) == 3
        assert {row[0] for row in parsed[1:]} == {project.title, second_project.title}
        assert {row[1] for row in parsed[1:]} == {"Unknown"}
        assert sorted(row[2] for row in parsed[1:]) == ["Consented", "Withdrawn"]

    async def test_inactive_project_title_shows_unknown(
        self,
        async_session,
        patient_store: PolicyStore,
        project,
    ) -> None:
        await ConsentService(patient_store).set_consent(project.id, True)
        project.status = "completed"
        await async_session.commit()

        [row] = await ConsentExportService(patient_store).get_rows()

        assert row.project_title is None
        assert row.as_csv_row()[0] == "Unknown"


def test_export_endpoint_returns_csv_attachment(
    client: TestClient, project, patient_auth_headers
) -> None:
    client.put(
        f"/api/v1/consent/projects/{project.id}",
        json={"consent_given": True},
        headers=patient_auth_headers,
    )

    response = client.get("/api/v1/admin/consent-export", headers=patient_auth_headers)

    assert response.status_code == 200
    assert response.headers["content-type"].startswith("text/csv")
    disposition = response.headers["content-disposition"]
    assert disposition.startswith('attachment; filename="consent-data-')
    assert disposition.endswith('.csv"')
    parsed = parse_csv(response.text)
    assert parsed[0] == list(EXPORT_HEADER)
    assert parsed[1][:3] == [project.title, "patient@example.org", "Consented"]


def test_export_endpoint_with_no_records(
    client: TestClient, admin_auth_headers
) -> None:
    response = client.get("/api/v1/admin/consent-export", headers=admin_auth_headers)

    assert response.status_code == 200
    assert response.text == HEADER_LINE
