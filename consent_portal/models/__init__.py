"""Database models for the consent portal."""

from consent_portal.models.audit_log import AuditAction, AuditLogEntry
from consent_portal.models.consent_record import ConsentRecord
from consent_portal.models.hospital import Hospital
from consent_portal.models.profile import Profile, ProfileRole
from consent_portal.models.research_project import ProjectStatus, ResearchProject

__all__ = [
    # Identity
    "Profile",
    "ProfileRole",
    # Reference data
    "Hospital",
    "ResearchProject",
    "ProjectStatus",
    # Consent
    "ConsentRecord",
    # Audit
    "AuditLogEntry",
    "AuditAction",
]
