"""Pydantic schemas for consent operations."""

from datetime import datetime
from typing import Any

from pydantic import BaseModel, Field

from consent_portal.schemas.reference import ResearchProjectRead


class ConsentUpdate(BaseModel):
    """Requested consent state for one research project."""

    consent_given: bool = Field(
        ...,
        description="True to participate, False to withdraw",
    )


class ConsentRecordRead(BaseModel):
    """Schema for reading a consent record."""

    id: str
    patient_id: str
    project_id: str
    consent_given: bool
    consent_date: datetime
    withdrawal_date: datetime | None
    data_retention_period: int
    specific_permissions: dict[str, Any]
    gdpr_compliant: bool
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}


class ConsentChangeRead(BaseModel):
    """Result of a consent toggle."""

    changed: bool
    action: str | None = None
    record: ConsentRecordRead | None = None


class ProjectConsentRead(BaseModel):
    """A visible project with the caller's consent state."""

    project: ResearchProjectRead
    consent_given: bool
    record: ConsentRecordRead | None = None

    model_config = {"from_attributes": True}


class ProjectConsentSummaryRead(BaseModel):
    """Consent counts for one project."""

    project_id: str
    project_title: str
    total_patients: int
    consented_patients: int
    withdrawn_patients: int
    consent_rate: float

    model_config = {"from_attributes": True}


class ConsentOverviewRead(BaseModel):
    """Admin consent statistics."""

    projects: list[ProjectConsentSummaryRead]
    total_patients: int
    total_consented: int
    overall_consent_rate: float

    model_config = {"from_attributes": True}
