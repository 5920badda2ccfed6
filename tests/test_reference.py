"""Tests for hospital and research project reads."""

from uuid import uuid4

from fastapi.testclient import TestClient


def test_list_hospitals(client: TestClient, hospital, patient_auth_headers) -> None:
    response = client.get("/api/v1/hospitals", headers=patient_auth_headers)

    assert response.status_code == 200
    assert [h["name"] for h in response.json()] == ["General Hospital"]


def test_list_projects_excludes_inactive(
    client: TestClient, project, second_project, paused_project, patient_auth_headers
) -> None:
    response = client.get("/api/v1/projects", headers=patient_auth_headers)

    assert response.status_code == 200
    data = response.json()
    assert [p["id"] for p in data] == [second_project.id, project.id]
    assert data[0]["data_types"] == ["Lab Results"]
    assert data[0]["status"] == "active"


def test_get_project(client: TestClient, project, patient_auth_headers) -> None:
    response = client.get(f"/api/v1/projects/{project.id}", headers=patient_auth_headers)

    assert response.status_code == 200
    assert response.json()["title"] == project.title


def test_inactive_project_is_not_found(
    client: TestClient, paused_project, patient_auth_headers
) -> None:
    response = client.get(
        f"/api/v1/projects/{paused_project.id}", headers=patient_auth_headers
    )

    assert response.status_code == 404


def test_unknown_project_is_not_found(client: TestClient, patient_auth_headers) -> None:
    response = client.get(f"/api/v1/projects/{uuid4()}", headers=patient_auth_headers)

    assert response.status_code == 404


def test_projects_require_authentication(client: TestClient, project) -> None:
    response = client.get("/api/v1/projects")

    assert response.status_code == 401


async def test_seed_reference_data_is_idempotent(async_session) -> None:
    from sqlalchemy import func, select

    from consent_portal.fixtures.reference_data import (
        HOSPITALS,
        RESEARCH_PROJECTS,
        seed_reference_data,
    )
    from consent_portal.models.hospital import Hospital
    from consent_portal.models.research_project import ResearchProject

    first = await seed_reference_data(async_session)
    second = await seed_reference_data(async_session)

    assert first == (len(HOSPITALS), len(RESEARCH_PROJECTS))
    assert second == (0, 0)
    assert await async_session.scalar(select(func.count()).select_from(Hospital)) == 3
    assert await async_session.scalar(select(func.count()).select_from(ResearchProject)) == 4
