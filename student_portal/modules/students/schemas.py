"""Student schemas."""

from __future__ import annotations

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, ConfigDict, EmailStr, Field


class CenterRead(BaseModel):
    """Center summary."""

    model_config = ConfigDict(from_attributes=True)

    id: UUID
    name: str


class StudentRead(BaseModel):
    """Student profile output schema."""

    model_config = ConfigDict(from_attributes=True)

    id: UUID
    registration_number: str
    name: str
    email: str
    phone: str | None
    is_active: bool
    state_id: UUID | None
    center: CenterRead | None
    created_at: datetime
    updated_at: datetime


class StudentProfileUpdate(BaseModel):
    """Editable profile fields; omitted fields are left unchanged."""

    name: str | None = Field(default=None, min_length=1, max_length=255)
    email: EmailStr | None = None
    phone: str | None = Field(default=None, max_length=32)
    state_id: UUID | None = None
    center_id: UUID | None = None
