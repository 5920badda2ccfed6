"""Profile provisioning and owner updates."""

import logging

from sqlalchemy.exc import IntegrityError

from consent_portal.models.hospital import Hospital
from consent_portal.models.profile import Profile
from consent_portal.services.store import PolicyStore

logger = logging.getLogger(__name__)


class ProfileProvisioningError(Exception):
    """Raised when a profile cannot be created for an identity."""

    pass


class HospitalNotFoundError(Exception):
    """Raised when a referenced hospital does not exist."""

    pass


class ProfileService:
    """Service for the caller's own profile."""

    def __init__(self, store: PolicyStore) -> None:
        self.store = store

    async def get_or_provision(self) -> Profile:
        """Return the caller's profile, creating it on first sign-in.

        A concurrent first request may win the insert; the loser re-reads
        the row it created.

        Raises:
            ProfileProvisioningError: token has no email, or the email is
                already taken by another identity
        """
        caller = self.store.caller
        profile = await self.store.get(Profile, caller.user_id)
        if profile:
            return profile

        if not caller.email:
            raise ProfileProvisioningError("Identity has no email address")

        profile = Profile(
            id=caller.user_id,
            email=caller.email,
            full_name=caller.full_name,
        )
        try:
            await self.store.insert(profile)
            await self.store.commit()
        except IntegrityError as e:
            await self.store.rollback()
            existing = await self.store.get(Profile, caller.user_id)
            if existing:
                return existing
            raise ProfileProvisioningError(
                "Email address is already registered to another identity"
            ) from e

        logger.info(f"Provisioned profile for new identity {caller.user_id}")
        return profile

    async def update_own(
        self,
        profile: Profile,
        changes: dict,
    ) -> Profile:
        """Apply owner-editable changes to the caller's profile.

        Args:
            profile: The caller's profile
            changes: Subset of full_name / hospital_id to set

        Raises:
            HospitalNotFoundError: hospital_id does not reference a hospital
            PolicyViolationError: the row or a column is not owner-editable
        """
        hospital_id = changes.get("hospital_id")
        if hospital_id is not None:
            hospital = await self.store.get(Hospital, hospital_id)
            if not hospital:
                raise HospitalNotFoundError(f"Hospital {hospital_id} not found")

        if not changes:
            return profile

        await self.store.update(profile, **changes)
        await self.store.commit()
        return profile
