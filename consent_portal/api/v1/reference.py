"""Read-only reference data: hospitals and research projects."""

from uuid import UUID

from fastapi import APIRouter, HTTPException, status

from consent_portal.api.deps import CurrentProfile, Store
from consent_portal.models.hospital import Hospital
from consent_portal.models.research_project import ResearchProject
from consent_portal.schemas.reference import HospitalRead, ResearchProjectRead
from consent_portal.services.consent import ConsentService

router = APIRouter()


@router.get("/hospitals", response_model=list[HospitalRead], tags=["hospitals"])
async def list_hospitals(
    profile: CurrentProfile,
    store: Store,
) -> list[Hospital]:
    """List participating hospitals."""
    return await store.all(store.select(Hospital).order_by(Hospital.name))


@router.get("/projects", response_model=list[ResearchProjectRead], tags=["projects"])
async def list_projects(
    profile: CurrentProfile,
    store: Store,
) -> list[ResearchProject]:
    """List research projects open for consent, newest first."""
    return await ConsentService(store).list_projects()


@router.get(
    "/projects/{project_id}",
    response_model=ResearchProjectRead,
    tags=["projects"],
)
async def get_project(
    project_id: UUID,
    profile: CurrentProfile,
    store: Store,
) -> ResearchProject:
    """Get a research project.

    Projects that are not active are reported as not found.
    """
    project = await store.get(ResearchProject, str(project_id))
    if not project:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Research project not found",
        )
    return project
