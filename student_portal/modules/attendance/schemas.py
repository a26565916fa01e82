"""Attendance schemas."""

from __future__ import annotations

from datetime import date, datetime
from uuid import UUID

from pydantic import BaseModel

from student_portal.core.enums import BatchStatusEnum

NOT_MARKED = "not_marked"


class SessionAttendanceRead(BaseModel):
    session_id: UUID
    session_date: date
    status: str
    marked_at: datetime | None
    notes: str | None


class BatchAttendanceRead(BaseModel):
    """Attendance summary of one batch for the student."""

    batch_id: UUID
    batch_name: str
    batch_status: BatchStatusEnum
    start_date: date | None
    end_date: date | None
    total_sessions: int
    present_count: int
    absent_count: int
    late_count: int
    excused_count: int
    attendance_percentage: int
    sessions: list[SessionAttendanceRead]
