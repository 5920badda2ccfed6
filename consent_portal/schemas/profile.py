"""Pydantic schemas for profiles."""

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

from consent_portal.models.profile import ProfileRole


class ProfileRead(BaseModel):
    """Schema for reading the caller's profile."""

    id: str
    email: str
    full_name: str | None
    role: ProfileRole
    hospital_id: str | None
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}


class ProfileUpdate(BaseModel):
    """Owner-editable profile fields. Role is assigned out of band."""

    model_config = ConfigDict(extra="forbid")

    full_name: str | None = Field(None, max_length=255)
    hospital_id: UUID | None = None
