"""Audit log endpoints.

IMPORTANT: This module intentionally provides READ-ONLY access to audit
entries. No endpoints exist for creating, updating, or deleting them;
entries are written by the consent service via write_audit_entry().
"""

from uuid import UUID

from fastapi import APIRouter, HTTPException, Query, status

from consent_portal.api.deps import CurrentProfile, Store
from consent_portal.core.config import settings
from consent_portal.schemas.audit_log import AuditLogFilter, AuditLogRead
from consent_portal.services.audit import AuditService

router = APIRouter()


@router.get(
    "/logs",
    response_model=list[AuditLogRead],
    status_code=status.HTTP_200_OK,
    summary="List audit entries",
    description="Visible audit entries, newest first (append-only, no modification endpoints)",
)
async def list_audit_logs(
    profile: CurrentProfile,
    store: Store,
    user_id: UUID | None = None,
    action: str | None = None,
    resource_type: str | None = None,
    resource_id: str | None = None,
    limit: int = Query(default=settings.audit_log_default_limit, ge=1),
    offset: int = Query(default=0, ge=0),
) -> list[AuditLogRead]:
    """Query audit entries with optional filters.

    Patients see their own entries; admins see everyone's.

    Args:
        profile: Caller's profile
        store: Policy store for the caller
        user_id: Filter by actor
        action: Filter by action label
        resource_type: Filter by resource type
        resource_id: Filter by resource id
        limit: Maximum results (capped)
        offset: Results to skip

    Returns:
        List of audit entries with actor email
    """
    filters = AuditLogFilter(
        user_id=user_id,
        action=action,
        resource_type=resource_type,
        resource_id=resource_id,
        limit=min(limit, settings.audit_log_max_limit),
        offset=offset,
    )

    rows = await AuditService(store).get_entries(filters)
    return [
        AuditLogRead.model_validate(entry).model_copy(update={"user_email": email})
        for entry, email in rows
    ]


@router.get(
    "/logs/{entry_id}",
    response_model=AuditLogRead,
    status_code=status.HTTP_200_OK,
    summary="Get audit entry",
)
async def get_audit_log(
    entry_id: UUID,
    profile: CurrentProfile,
    store: Store,
) -> AuditLogRead:
    """Get a single audit entry, if visible to the caller."""
    row = await AuditService(store).get_entry_by_id(str(entry_id))
    if not row:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Audit entry not found",
        )
    entry, email = row
    return AuditLogRead.model_validate(entry).model_copy(update={"user_email": email})


# NOTE: No POST, PUT, PATCH, or DELETE endpoints are provided.
# Audit entries are append-only and created only through internal
# service calls, never through the API.
