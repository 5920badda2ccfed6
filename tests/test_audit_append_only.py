"""Tests for append-only audit log functionality."""

from uuid import uuid4

import pytest
from fastapi.testclient import TestClient

from consent_portal.policies.row_level import PolicyViolationError
from consent_portal.schemas.audit_log import AuditLogFilter
from consent_portal.services.audit import UNKNOWN_USER, AuditService, write_audit_entry
from consent_portal.services.store import PolicyStore


async def test_write_audit_entry(patient_store: PolicyStore, patient) -> None:
    """Test writing an audit entry."""
    entry = await write_audit_entry(
        patient_store,
        action="CONSENT_GIVEN",
        resource_type="consent_record",
        resource_id="project-123",
        details={"key": "value"},
        ip_address="192.0.2.10",
        user_agent="pytest",
    )

    assert entry.id is not None
    assert entry.user_id == patient.id
    assert entry.action == "CONSENT_GIVEN"
    assert entry.resource_type == "consent_record"
    assert entry.resource_id == "project-123"
    assert entry.details == {"key": "value"}
    assert entry.created_at is not None


async def test_audit_entry_is_mirrored_to_audit_logger(
    patient_store: PolicyStore, caplog
) -> None:
    with caplog.at_level("INFO", logger="audit"):
        await write_audit_entry(
            patient_store,
            action="CONSENT_WITHDRAWN",
            resource_type="consent_record",
            resource_id="project-123",
        )

    assert any("action=CONSENT_WITHDRAWN" in r.getMessage() for r in caplog.records)


async def test_audit_service_filters(patient_store: PolicyStore) -> None:
    """Test audit service filtering capabilities."""
    project_a, project_b = str(uuid4()), str(uuid4())
    await write_audit_entry(
        patient_store, "CONSENT_GIVEN", "consent_record", project_a
    )
    await write_audit_entry(
        patient_store, "CONSENT_WITHDRAWN", "consent_record", project_a
    )
    await write_audit_entry(
        patient_store, "CONSENT_GIVEN", "consent_record", project_b
    )

    service = AuditService(patient_store)

    entries = await service.get_entries(AuditLogFilter(resource_id=project_a))
    assert len(entries) == 2

    entries = await service.get_entries(AuditLogFilter(action="CONSENT_GIVEN"))
    assert len(entries) == 2

    entries = await service.get_entries(AuditLogFilter(limit=1))
    assert len(entries) == 1

    entries = await service.get_entries(AuditLogFilter(offset=2))
    assert len(entries) == 1


async def test_actor_email_follows_profile_policy(
    patient_store: PolicyStore,
    admin_store: PolicyStore,
    patient,
) -> None:
    """The actor email resolves only where the profile is readable."""
    await write_audit_entry(patient_store, "CONSENT_GIVEN", "consent_record", str(uuid4()))

    [(_, own_email)] = await AuditService(patient_store).get_entries(AuditLogFilter())
    [(_, admin_view_email)] = await AuditService(admin_store).get_entries(AuditLogFilter())

    assert own_email == patient.email
    assert admin_view_email == UNKNOWN_USER


async def test_cannot_write_entry_for_another_user(
    patient_store: PolicyStore, other_patient
) -> None:
    from consent_portal.models.audit_log import AuditLogEntry

    with pytest.raises(PolicyViolationError):
        await patient_store.insert(
            AuditLogEntry(
                user_id=other_patient.id,
                action="CONSENT_GIVEN",
                resource_type="consent_record",
                resource_id=str(uuid4()),
            )
        )


def test_list_audit_logs_endpoint(
    client: TestClient, project, patient_auth_headers, other_patient_auth_headers
) -> None:
    client.put(
        f"/api/v1/consent/projects/{project.id}",
        json={"consent_given": True},
        headers=patient_auth_headers,
    )
    client.put(
        f"/api/v1/consent/projects/{project.id}",
        json={"consent_given": False},
        headers=patient_auth_headers,
    )

    own = client.get("/api/v1/audit/logs", headers=patient_auth_headers)
    other = client.get("/api/v1/audit/logs", headers=other_patient_auth_headers)

    assert own.status_code == 200
    # Newest first
    assert [e["action"] for e in own.json()] == ["CONSENT_WITHDRAWN", "CONSENT_GIVEN"]
    assert own.json()[0]["user_email"] == "patient@example.org"
    assert own.json()[0]["resource_id"] == project.id
    assert other.json() == []


def test_list_audit_logs_limit_is_validated(
    client: TestClient, patient_auth_headers
) -> None:
    response = client.get(
        "/api/v1/audit/logs", params={"limit": 0}, headers=patient_auth_headers
    )

    assert response.status_code == 422


def test_get_audit_log_by_id(
    client: TestClient, project, patient_auth_headers, other_patient_auth_headers
) -> None:
    client.put(
        f"/api/v1/consent/projects/{project.id}",
        json={"consent_given": True},
        headers=patient_auth_headers,
    )
    [entry] = client.get("/api/v1/audit/logs", headers=patient_auth_headers).json()

    own = client.get(f"/api/v1/audit/logs/{entry['id']}", headers=patient_auth_headers)
    other = client.get(
        f"/api/v1/audit/logs/{entry['id']}", headers=other_patient_auth_headers
    )

    assert own.status_code == 200
    assert own.json()["action"] == "CONSENT_GIVEN"
    assert other.status_code == 404


def test_audit_endpoint_no_post_method(client: TestClient) -> None:
    """Test that audit endpoint does not allow POST (append-only enforcement)."""
    response = client.post(
        "/api/v1/audit/logs",
        json={
            "action": "CONSENT_GIVEN",
            "resource_type": "consent_record",
            "resource_id": "x",
        },
    )

    # Should return 405 Method Not Allowed (endpoint doesn't exist for POST)
    assert response.status_code == 405


def test_audit_endpoint_no_put_method(client: TestClient) -> None:
    """Test that audit endpoint does not allow PUT (append-only enforcement)."""
    response = client.put(
        f"/api/v1/audit/logs/{uuid4()}",
        json={"action": "modified"},
    )

    assert response.status_code == 405


def test_audit_endpoint_no_patch_method(client: TestClient) -> None:
    """Test that audit endpoint does not allow PATCH (append-only enforcement)."""
    response = client.patch(
        f"/api/v1/audit/logs/{uuid4()}",
        json={"action": "modified"},
    )

    assert response.status_code == 405


def test_audit_endpoint_no_delete_method(client: TestClient) -> None:
    """Test that audit endpoint does not allow DELETE (append-only enforcement)."""
    response = client.delete(f"/api/v1/audit/logs/{uuid4()}")

    assert response.status_code == 405


async def test_get_entry_by_id_resolves_actor_email(
    patient_store: PolicyStore, admin_store: PolicyStore, patient
) -> None:
    entry = await write_audit_entry(
        patient_store, "CONSENT_GIVEN", "consent_record", str(uuid4())
    )
    entry_id = entry.id

    own_entry, own_email = await AuditService(patient_store).get_entry_by_id(entry_id)
    _, admin_view_email = await AuditService(admin_store).get_entry_by_id(entry_id)

    assert own_entry.id == entry_id
    assert own_email == patient.email
    assert admin_view_email == UNKNOWN_USER


def test_audit_log_by_id_matches_listing_email(
    client: TestClient, project, patient_auth_headers
) -> None:
    client.put(
        f"/api/v1/consent/projects/{project.id}",
        json={"consent_given": True},
        headers=patient_auth_headers,
    )
    [listed] = client.get("/api/v1/audit/logs", headers=patient_auth_headers).json()

    response = client.get(
        f"/api/v1/audit/logs/{listed['id']}", headers=patient_auth_headers
    )

    assert response.status_code == 200
    assert response.json()["user_email"] == "patient@example.org"
    assert response.json()["user_email"] == listed["user_email"]


def test_list_audit_logs_rejects_malformed_user_id(
    client: TestClient, patient_auth_headers
) -> None:
    response = client.get(
        "/api/v1/audit/logs",
        params={"user_id": "not-a-uuid"},
        headers=patient_auth_headers,
    )

    assert response.status_code == 422


def test_list_audit_logs_filters_by_user_id(
    client: TestClient, project, patient, patient_auth_headers
) -> None:
    client.put(
        f"/api/v1/consent/projects/{project.id}",
        json={"consent_given": True},
        headers=patient_auth_headers,
    )

    own = client.get(
        "/api/v1/audit/logs",
        params={"user_id": patient.id},
        headers=patient_auth_headers,
    )
    other = client.get(
        "/api/v1/audit/logs",
        params={"user_id": str(uuid4())},
        headers=patient_auth_headers,
    )

    assert len(own.json()) == 1
    assert other.json() == []


def test_request_context_columns_are_unbounded_text() -> None:
    from sqlalchemy.dialects import postgresql
    from sqlalchemy.schema import CreateTable

    from consent_portal.models.audit_log import AuditLogEntry

    ddl = str(CreateTable(AuditLogEntry.__table__).compile(dialect=postgresql.dialect()))

    assert "ip_address TEXT" in ddl
    assert "user_agent TEXT" in ddl


def test_long_user_agent_is_recorded_with_consent_change(
    client: TestClient, project, patient_auth_headers
) -> None:
    user_agent = "Mozilla/5.0 " + "x" * 988
    headers = {**patient_auth_headers, "User-Agent": user_agent}

    response = client.put(
        f"/api/v1/consent/projects/{project.id}",
        json={"consent_given": True},
        headers=headers,
    )

    assert response.status_code == 200
    [entry] = client.get("/api/v1/audit/logs", headers=patient_auth_headers).json()
    assert entry["user_agent"] == user_agent
    assert len(entry["user_agent"]) == 1000
