"""Batch schemas."""

from __future__ import annotations

from datetime import date, time
from uuid import UUID

from pydantic import BaseModel, ConfigDict

from student_portal.core.enums import BatchStatusEnum
from student_portal.modules.students.schemas import CenterRead


class CourseRead(BaseModel):
    """Course summary."""

    model_config = ConfigDict(from_attributes=True)

    id: UUID
    course_name: str
    type: str | None
    language: str | None
    level: str | None
    mode: str | None
    program: str | None


class BatchRead(BaseModel):
    """Batch output schema."""

    model_config = ConfigDict(from_attributes=True)

    id: UUID
    batch_name: str
    status: BatchStatusEnum
    course: CourseRead
    center: CenterRead
    start_date: date | None
    end_date: date | None
    time_from: time | None
    time_to: time | None
    total_sessions: int | None


class BatchAvailabilityRead(BatchRead):
    """Batch with seat availability for the requesting student."""

    max_students: int
    enrolled_students: int
    available_seats: int
    is_full: bool
    is_student_enrolled: bool


class CenterBatchesRequest(BaseModel):
    center_id: UUID


class CenterBatchesRead(BaseModel):
    batches: list[BatchAvailabilityRead]
    total_batches: int
    available_batches: int
    enrolled_batches: int
    full_batches: int


class SeatOccupancyRead(BaseModel):
    """Seat counters of one batch."""

    model_config = ConfigDict(from_attributes=True)

    batch_id: UUID
    capacity: int
    enrolled_count: int
    available: int
    is_full: bool


class MergeGroupRead(BaseModel):
    batch_id: UUID
    batch_ids: list[UUID]
