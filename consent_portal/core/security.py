"""Identity token verification.

Sign-in and sign-out belong to the external identity provider. This module
only verifies the bearer tokens it issues and turns them into a caller
identity that is passed explicitly into every store operation.
"""

from dataclasses import dataclass
from datetime import datetime, timedelta, timezone

from jose import JWTError, jwt

from consent_portal.core.config import settings


@dataclass(frozen=True)
class CallerIdentity:
    """The authenticated caller as asserted by the identity provider."""

    user_id: str
    email: str | None = None
    full_name: str | None = None


def decode_identity_token(token: str) -> dict | None:
    """Decode and validate an identity provider JWT.

    Args:
        token: The JWT token string

    Returns:
        Decoded token payload or None if invalid
    """
    try:
        payload = jwt.decode(
            token,
            settings.identity_jwt_secret,
            algorithms=[settings.identity_jwt_algorithm],
            audience=settings.identity_jwt_audience,
        )
    except JWTError:
        return None

    if not payload.get("sub"):
        return None
    return payload


def identity_from_claims(payload: dict) -> CallerIdentity:
    """Build a caller identity from decoded token claims."""
    metadata = payload.get("user_metadata") or {}
    return CallerIdentity(
        user_id=payload["sub"],
        email=payload.get("email"),
        full_name=metadata.get("full_name"),
    )


def create_identity_token(
    subject: str,
    email: str,
    full_name: str | None = None,
    expires_delta: timedelta | None = None,
) -> str:
    """Mint a token shaped like the identity provider's.

    Used by local tooling and tests; production tokens come from the
    identity provider.
    """
    if expires_delta is None:
        expires_delta = timedelta(hours=1)

    now = datetime.now(timezone.utc)
    to_encode = {
        "sub": subject,
        "email": email,
        "aud": settings.identity_jwt_audience,
        "role": "authenticated",
        "iat": now,
        "exp": now + expires_delta,
        "user_metadata": {"full_name": full_name} if full_name else {},
    }

    return jwt.encode(
        to_encode,
        settings.identity_jwt_secret,
        algorithm=settings.identity_jwt_algorithm,
    )
