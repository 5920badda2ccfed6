"""Endpoints for the caller's own profile."""

from fastapi import APIRouter, HTTPException, status

from consent_portal.api.deps import CurrentProfile, Store
from consent_portal.policies.row_level import PolicyViolationError
from consent_portal.schemas.profile import ProfileRead, ProfileUpdate
from consent_portal.services.profiles import HospitalNotFoundError, ProfileService

router = APIRouter(prefix="/profiles", tags=["profiles"])


@router.get("/me", response_model=ProfileRead)
async def get_my_profile(profile: CurrentProfile) -> ProfileRead:
    """Get the caller's profile (provisioned on first sign-in)."""
    return ProfileRead.model_validate(profile)


@router.patch("/me", response_model=ProfileRead)
async def update_my_profile(
    body: ProfileUpdate,
    profile: CurrentProfile,
    store: Store,
) -> ProfileRead:
    """Update the caller's name or hospital affiliation.

    Role is not editable here; admins are assigned out of band.
    """
    service = ProfileService(store)
    try:
        updated = await service.update_own(
            profile, body.model_dump(exclude_unset=True, mode="json")
        )
    except HospitalNotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
    except PolicyViolationError as e:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=str(e))

    return ProfileRead.model_validate(updated)
