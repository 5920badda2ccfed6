"""Audit trail service for append-only audit logging."""

from typing import Any

from sqlalchemy import Select, select

from consent_portal.core.logging import audit_logger
from consent_portal.models.audit_log import AuditLogEntry
from consent_portal.models.profile import Profile
from consent_portal.schemas.audit_log import AuditLogFilter
from consent_portal.services.store import PolicyStore

UNKNOWN_USER = "Unknown User"


async def write_audit_entry(
    store: PolicyStore,
    action: str,
    resource_type: str,
    resource_id: str,
    details: dict[str, Any] | None = None,
    ip_address: str | None = None,
    user_agent: str | None = None,
    commit: bool = True,
) -> AuditLogEntry:
    """Append an audit entry for the store's caller.

    Entries are append-only. The store's insert policy only accepts
    entries whose actor is the caller.

    Args:
        store: Policy store bound to the acting caller
        action: Action label (e.g., "CONSENT_GIVEN")
        resource_type: Type of resource affected (e.g., "consent_record")
        resource_id: Identifier of the affected resource
        details: Additional context as JSON
        ip_address: Client IP address
        user_agent: Client user agent string
        commit: Commit immediately; pass False to join the caller's
            transaction and call ``log_audit_entry`` after committing

    Returns:
        Created AuditLogEntry instance
    """
    entry = AuditLogEntry(
        user_id=store.caller.user_id,
        action=action,
        resource_type=resource_type,
        resource_id=resource_id,
        details=details or {},
        ip_address=ip_address,
        user_agent=user_agent,
    )
    await store.insert(entry)

    if commit:
        await store.commit()
        log_audit_entry(entry)

    return entry


def log_audit_entry(entry: AuditLogEntry) -> None:
    """Mirror a persisted entry to the structured audit logger."""
    audit_logger.log(
        action=entry.action,
        user_id=entry.user_id,
        resource_type=entry.resource_type,
        resource_id=entry.resource_id,
        details=entry.details,
    )


class AuditService:
    """Service for querying audit entries.

    Note: This service only provides read operations.
    Entries are created via write_audit_entry().
    """

    def __init__(self, store: PolicyStore) -> None:
        self.store = store

    def _select_with_email(self) -> Select:
        # Actor email is subject to the profiles read policy
        return (
            select(AuditLogEntry, Profile.email)
            .outerjoin(
                Profile,
                (Profile.id == AuditLogEntry.user_id) & self.store.visible(Profile),
            )
            .where(self.store.visible(AuditLogEntry))
        )

    async def get_entries(
        self,
        filters: AuditLogFilter,
    ) -> list[tuple[AuditLogEntry, str]]:
        """Query visible audit entries, newest first, with actor email.

        The actor email comes from the profiles table and is subject to its
        own read policy, so it resolves to "Unknown User" when hidden.

        Args:
            filters: Filter parameters

        Returns:
            List of (entry, actor email) pairs
        """
        query = self._select_with_email().order_by(AuditLogEntry.created_at.desc())

        if filters.user_id:
            query = query.where(AuditLogEntry.user_id == str(filters.user_id))
        if filters.action:
            query = query.where(AuditLogEntry.action == filters.action)
        if filters.resource_type:
            query = query.where(AuditLogEntry.resource_type == filters.resource_type)
        if filters.resource_id:
            query = query.where(AuditLogEntry.resource_id == filters.resource_id)

        query = query.offset(filters.offset).limit(filters.limit)

        result = await self.store.execute(query)
        return [(entry, email or UNKNOWN_USER) for entry, email in result.all()]

    async def get_entry_by_id(
        self, entry_id: str
    ) -> tuple[AuditLogEntry, str] | None:
        """Get a single visible audit entry by ID, with actor email."""
        result = await self.store.execute(
            self._select_with_email().where(AuditLogEntry.id == entry_id)
        )
        row = result.one_or_none()
        if row is None:
            return None
        entry, email = row
        return entry, email or UNKNOWN_USER
