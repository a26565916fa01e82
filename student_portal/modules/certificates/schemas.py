"""Certificates schemas."""

from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from typing import Any
from uuid import UUID

from pydantic import BaseModel, ConfigDict

from student_portal.core.enums import CertificateStatusEnum


class AssessmentMarkRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    batch_id: UUID
    marks: dict[str, Any]
    total_marks: Decimal | None
    max_marks: Decimal | None
    grade: str | None
    remarks: str | None
    updated_at: datetime


class CertificateRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    batch_id: UUID
    certificate_number: str
    certificate_url: str | None
    status: CertificateStatusEnum
    generated_at: datetime | None
