"""FastAPI dependency injection utilities."""

from typing import Annotated

from fastapi import Depends, HTTPException, Request, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.ext.asyncio import AsyncSession

from consent_portal.core.security import (
    CallerIdentity,
    decode_identity_token,
    identity_from_claims,
)
from consent_portal.db.session import get_db
from consent_portal.models.profile import Profile
from consent_portal.services.profiles import ProfileProvisioningError, ProfileService
from consent_portal.services.store import PolicyStore

# Security scheme
security = HTTPBearer(auto_error=False)


async def get_current_identity(
    credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(security)],
) -> CallerIdentity:
    """Verify the identity provider token on the request.

    Raises:
        HTTPException: If no token is present or it does not verify
    """
    if not credentials:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Not authenticated",
            headers={"WWW-Authenticate": "Bearer"},
        )

    payload = decode_identity_token(credentials.credentials)
    if not payload:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid or expired token",
            headers={"WWW-Authenticate": "Bearer"},
        )

    return identity_from_claims(payload)


async def get_store(
    identity: Annotated[CallerIdentity, Depends(get_current_identity)],
    session: Annotated[AsyncSession, Depends(get_db)],
) -> PolicyStore:
    """Policy store bound to the authenticated caller for this request."""
    return PolicyStore(session, identity)


async def get_current_profile(
    store: Annotated[PolicyStore, Depends(get_store)],
) -> Profile:
    """Get the caller's profile, provisioning it on first sign-in.

    Raises:
        HTTPException: If a profile cannot be provisioned for the identity
    """
    try:
        return await ProfileService(store).get_or_provision()
    except ProfileProvisioningError as e:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail=str(e),
        )


def get_client_ip(request: Request) -> str | None:
    """Extract client IP from request.

    Args:
        request: FastAPI request

    Returns:
        Client IP address or None
    """
    # Check for forwarded header (when behind proxy)
    forwarded = request.headers.get("X-Forwarded-For")
    if forwarded:
        return forwarded.split(",")[0].strip()

    if request.client:
        return request.client.host

    return None


# Type aliases for cleaner dependency injection
CurrentProfile = Annotated[Profile, Depends(get_current_profile)]
Store = Annotated[PolicyStore, Depends(get_store)]
DbSession = Annotated[AsyncSession, Depends(get_db)]
