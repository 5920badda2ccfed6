"""Tests for the public API key gate."""

import pytest
from fastapi.testclient import TestClient

from consent_portal.main import app
from consent_portal.middleware.api_key import requires_api_key


@pytest.mark.parametrize(
    "path,expected",
    [
        ("/api/v1/consent/projects", True),
        ("/api/v1/admin/consent-export", True),
        ("/api/v1", True),
        ("/api/v1/health", False),
        ("/api/v1/health/ready", False),
        ("/", False),
        ("/docs", False),
    ],
)
def test_requires_api_key(path: str, expected: bool) -> None:
    assert requires_api_key(path) is expected


def test_missing_api_key_rejected(patient_auth_headers) -> None:
    bare_client = TestClient(app)

    response = bare_client.get("/api/v1/consent/projects", headers=patient_auth_headers)

    assert response.status_code == 401
    assert response.json()["detail"] == "API key required"


def test_wrong_api_key_rejected(client: TestClient, patient_auth_headers) -> None:
    response = client.get(
        "/api/v1/consent/projects",
        headers={**patient_auth_headers, "apikey": "wrong-key"},
    )

    assert response.status_code == 401
    assert response.json()["detail"] == "Invalid API key"


def test_health_needs_no_api_key() -> None:
    bare_client = TestClient(app)

    response = bare_client.get("/api/v1/health")

    assert response.status_code == 200


def test_valid_api_key_passes_through(client: TestClient, patient_auth_headers) -> None:
    response = client.get("/api/v1/consent/projects", headers=patient_auth_headers)

    assert response.status_code == 200
