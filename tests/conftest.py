"""Pytest configuration and fixtures."""

import os

# Settings are read at import time; configure them before the app is imported
os.environ["ENV"] = "test"
os.environ["DATABASE_URL"] = "sqlite+aiosqlite:///:memory:"
os.environ["PUBLIC_API_KEY"] = "test-public-api-key"
os.environ["IDENTITY_JWT_SECRET"] = "test-identity-secret"
os.environ["RATE_LIMIT_ENABLED"] = "false"

from collections.abc import AsyncGenerator, Generator
from datetime import datetime, timedelta, timezone
from uuid import uuid4

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import StaticPool
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from consent_portal.core.config import settings
from consent_portal.core.security import CallerIdentity, create_identity_token
from consent_portal.db.base import Base
from consent_portal.db.session import get_db
from consent_portal.main import app
from consent_portal.models.hospital import Hospital
from consent_portal.models.profile import Profile, ProfileRole
from consent_portal.models.research_project import ProjectStatus, ResearchProject
from consent_portal.services.store import PolicyStore


# Use SQLite for testing (simpler than spinning up postgres)
TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"

PROJECT_EPOCH = datetime(2025, 1, 1, tzinfo=timezone.utc)


@pytest.fixture(scope="function")
async def async_engine():
    """Create async test database engine."""
    engine = create_async_engine(
        TEST_DATABASE_URL,
        echo=False,
        poolclass=StaticPool,
    )

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)

    await engine.dispose()


@pytest.fixture(scope="function")
async def async_session(async_engine) -> AsyncGenerator[AsyncSession, None]:
    """Create async database session for tests."""
    async_session_maker = async_sessionmaker(
        async_engine,
        class_=AsyncSession,
        expire_on_commit=False,
        autoflush=False,
    )

    async with async_session_maker() as session:
        yield session


@pytest.fixture(scope="function")
def client(async_session: AsyncSession) -> Generator[TestClient, None, None]:
    """Create FastAPI test client carrying the public API key."""

    async def override_get_db() -> AsyncGenerator[AsyncSession, None]:
        yield async_session

    app.dependency_overrides[get_db] = override_get_db

    with TestClient(app) as test_client:
        test_client.headers.update({"apikey": settings.public_api_key})
        yield test_client

    app.dependency_overrides.clear()


async def create_profile(
    session: AsyncSession,
    email: str,
    role: ProfileRole = ProfileRole.PATIENT,
    full_name: str | None = None,
) -> Profile:
    """Insert a profile directly, bypassing row policies."""
    profile = Profile(
        id=str(uuid4()),
        email=email,
        full_name=full_name,
        role=role,
    )
    session.add(profile)
    await session.commit()
    return profile


async def create_project(
    session: AsyncSession,
    title: str,
    status: ProjectStatus = ProjectStatus.ACTIVE,
    created_at: datetime | None = None,
) -> ResearchProject:
    """Insert a research project directly, bypassing row policies."""
    project = ResearchProject(
        title=title,
        description=f"{title} description",
        principal_investigator="Dr. Test Investigator",
        institution="Test Institute",
        data_types=["Lab Results"],
        purpose=f"{title} purpose",
        duration_months=24,
        status=status,
        created_at=created_at or PROJECT_EPOCH,
        updated_at=created_at or PROJECT_EPOCH,
    )
    session.add(project)
    await session.commit()
    return project


def caller_for(profile: Profile) -> CallerIdentity:
    return CallerIdentity(user_id=profile.id, email=profile.email, full_name=profile.full_name)


def auth_headers_for(
    subject: str,
    email: str,
    full_name: str | None = None,
) -> dict[str, str]:
    """Authorization headers with an identity token for the subject."""
    token = create_identity_token(subject=subject, email=email, full_name=full_name)
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
async def patient(async_session: AsyncSession) -> Profile:
    """Create a test patient profile."""
    return await create_profile(
        async_session, "patient@example.org", full_name="Test Patient"
    )


@pytest.fixture
async def other_patient(async_session: AsyncSession) -> Profile:
    """Create a second patient profile."""
    return await create_profile(
        async_session, "other.patient@example.org", full_name="Other Patient"
    )


@pytest.fixture
async def admin(async_session: AsyncSession) -> Profile:
    """Create an admin profile."""
    return await create_profile(
        async_session,
        "admin@example.org",
        role=ProfileRole.ADMIN,
        full_name="Portal Admin",
    )


@pytest.fixture
async def hospital(async_session: AsyncSession) -> Hospital:
    """Create a test hospital."""
    hospital = Hospital(
        name="General Hospital",
        address="123 Medical Center Dr",
        contact_email="admin@generalhospital.com",
    )
    async_session.add(hospital)
    await async_session.commit()
    return hospital


@pytest.fixture
async def project(async_session: AsyncSession) -> ResearchProject:
    """Create an active research project."""
    return await create_project(async_session, "Cancer Imaging Study")


@pytest.fixture
async def second_project(async_session: AsyncSession) -> ResearchProject:
    """Create a newer active research project."""
    return await create_project(
        async_session,
        "Cardiology Treatment Study",
        created_at=PROJECT_EPOCH + timedelta(days=30),
    )


@pytest.fixture
async def paused_project(async_session: AsyncSession) -> ResearchProject:
    """Create a research project that is not open for consent."""
    return await create_project(
        async_session, "Paused Genomics Study", status=ProjectStatus.PAUSED
    )


@pytest.fixture
def patient_store(async_session: AsyncSession, patient: Profile) -> PolicyStore:
    """Policy store bound to the test patient."""
    return PolicyStore(async_session, caller_for(patient))


@pytest.fixture
def other_patient_store(async_session: AsyncSession, other_patient: Profile) -> PolicyStore:
    """Policy store bound to the second patient."""
    return PolicyStore(async_session, caller_for(other_patient))


@pytest.fixture
def admin_store(async_session: AsyncSession, admin: Profile) -> PolicyStore:
    """Policy store bound to the admin."""
    return PolicyStore(async_session, caller_for(admin))


@pytest.fixture
def patient_auth_headers(patient: Profile) -> dict[str, str]:
    """Create authorization headers for the test patient."""
    return auth_headers_for(patient.id, patient.email, patient.full_name)


@pytest.fixture
def other_patient_auth_headers(other_patient: Profile) -> dict[str, str]:
    """Create authorization headers for the second patient."""
    return auth_headers_for(other_patient.id, other_patient.email, other_patient.full_name)


@pytest.fixture
def admin_auth_headers(admin: Profile) -> dict[str, str]:
    """Create authorization headers for the admin."""
    return auth_headers_for(admin.id, admin.email, admin.full_name)


@pytest.fixture
def identity_headers():
    """Factory for authorization headers of arbitrary identities."""
    return auth_headers_for
