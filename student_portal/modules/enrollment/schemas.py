"""Enrollment schemas."""

from __future__ import annotations

from datetime import date, datetime
from uuid import UUID

from pydantic import BaseModel, ConfigDict

from student_portal.modules.batches.schemas import BatchRead


class EnrollRequest(BaseModel):
    batch_id: UUID


class EnrollmentRead(BaseModel):
    """Enrollment output schema."""

    model_config = ConfigDict(from_attributes=True)

    id: UUID
    student_id: UUID
    batch_id: UUID
    status: bool
    is_permanent: bool
    end_date: date | None
    created_at: datetime


class EnrollmentDetailRead(EnrollmentRead):
    """Enrollment with its batch, course and center."""

    batch: BatchRead


class EnrollmentResultRead(BaseModel):
    """Outcome of an enroll request."""

    model_config = ConfigDict(from_attributes=True)

    enrollment: EnrollmentRead
    batch_name: str
    seats_remaining: int
    is_free_course: bool
    message: str
