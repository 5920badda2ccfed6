"""Consent endpoints for the patient view."""

from uuid import UUID

from fastapi import APIRouter, HTTPException, Request, status

from consent_portal.api.deps import CurrentProfile, Store, get_client_ip
from consent_portal.models.consent_record import ConsentRecord
from consent_portal.policies.row_level import PolicyViolationError
from consent_portal.schemas.consent import (
    ConsentChangeRead,
    ConsentRecordRead,
    ConsentUpdate,
    ProjectConsentRead,
)
from consent_portal.services.consent import (
    ConsentService,
    ConsentWriteError,
    ProjectNotFoundError,
)

router = APIRouter(prefix="/consent", tags=["consent"])


@router.get("/projects", response_model=list[ProjectConsentRead])
async def list_project_consents(
    profile: CurrentProfile,
    store: Store,
) -> list[ProjectConsentRead]:
    """Active research projects with the caller's consent state for each."""
    states = await ConsentService(store).project_states()
    return [ProjectConsentRead.model_validate(s) for s in states]


@router.put("/projects/{project_id}", response_model=ConsentChangeRead)
async def set_project_consent(
    project_id: UUID,
    body: ConsentUpdate,
    profile: CurrentProfile,
    store: Store,
    request: Request,
) -> ConsentChangeRead:
    """Grant or withdraw consent for a research project.

    The first grant creates the consent record; every later change updates
    it in place. Each change appends one audit entry. Asking for the state
    already held is a no-op.
    """
    service = ConsentService(store)
    try:
        change = await service.set_consent(
            project_id=str(project_id),
            consent_given=body.consent_given,
            ip_address=get_client_ip(request),
            user_agent=request.headers.get("User-Agent"),
        )
    except ProjectNotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
    except PolicyViolationError as e:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=str(e))
    except ConsentWriteError as e:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT if e.conflict else status.HTTP_503_SERVICE_UNAVAILABLE,
            detail={"message": "Error updating consent", "error": str(e)},
        )

    return ConsentChangeRead(
        changed=change.changed,
        action=change.action.value if change.action else None,
        record=ConsentRecordRead.model_validate(change.record) if change.record else None,
    )


@router.get("/records", response_model=list[ConsentRecordRead])
async def list_my_consent_records(
    profile: CurrentProfile,
    store: Store,
) -> list[ConsentRecord]:
    """The caller's own consent records."""
    return await ConsentService(store).list_own_records()


@router.get("/records/{record_id}", response_model=ConsentRecordRead)
async def get_consent_record(
    record_id: UUID,
    profile: CurrentProfile,
    store: Store,
) -> ConsentRecord:
    """Get a consent record by id.

    Records the caller may not read are reported as not found.
    """
    record = await ConsentService(store).get_record(str(record_id))
    if not record:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Consent record not found",
        )
    return record
