"""Business logic services."""

from consent_portal.services.audit import AuditService, write_audit_entry
from consent_portal.services.consent import ConsentService
from consent_portal.services.export import ConsentExportService
from consent_portal.services.profiles import ProfileService
from consent_portal.services.store import PolicyStore

__all__ = [
    "AuditService",
    "write_audit_entry",
    "ConsentService",
    "ConsentExportService",
    "ProfileService",
    "PolicyStore",
]
