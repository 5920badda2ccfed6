"""Schemas for hospitals and research projects (read-only reference data)."""

from datetime import datetime

from pydantic import BaseModel

from consent_portal.models.research_project import ProjectStatus


class HospitalRead(BaseModel):
    """Schema for reading a hospital."""

    id: str
    name: str
    address: str | None
    contact_email: str | None
    created_at: datetime

    model_config = {"from_attributes": True}


class ResearchProjectRead(BaseModel):
    """Schema for reading a research project."""

    id: str
    title: str
    description: str
    principal_investigator: str
    institution: str
    data_types: list[str]
    purpose: str
    duration_months: int
    status: ProjectStatus
    created_at: datetime

    model_config = {"from_attributes": True}
