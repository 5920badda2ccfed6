"""Pydantic schemas for request/response validation."""

from consent_portal.schemas.audit_log import AuditLogFilter, AuditLogRead
from consent_portal.schemas.consent import (
    ConsentChangeRead,
    ConsentOverviewRead,
    ConsentRecordRead,
    ConsentUpdate,
    ProjectConsentRead,
    ProjectConsentSummaryRead,
)
from consent_portal.schemas.profile import ProfileRead, ProfileUpdate
from consent_portal.schemas.reference import HospitalRead, ResearchProjectRead

__all__ = [
    # Audit
    "AuditLogRead",
    "AuditLogFilter",
    # Consent
    "ConsentUpdate",
    "ConsentRecordRead",
    "ConsentChangeRead",
    "ProjectConsentRead",
    "ProjectConsentSummaryRead",
    "ConsentOverviewRead",
    # Profile
    "ProfileRead",
    "ProfileUpdate",
    # Reference data
    "HospitalRead",
    "ResearchProjectRead",
]
