"""Attendance API router."""

from __future__ import annotations

from uuid import UUID

from fastapi import APIRouter, Depends

from student_portal.modules.attendance.schemas import BatchAttendanceRead
from student_portal.modules.attendance.service import AttendanceService, get_attendance_service
from student_portal.modules.students.service import get_current_student
from student_portal.shared.pagination import Envelope, ok

router = APIRouter(prefix="/attendance", tags=["attendance"])


@router.get("/my", response_model=Envelope[list[BatchAttendanceRead]])
async def get_my_attendance(
    service: AttendanceService = Depends(get_attendance_service),
    current_student=Depends(get_current_student),
) -> Envelope[list[BatchAttendanceRead]]:
    """Attendance summary for every approved enrollment."""
    return ok(await service.get_student_attendance(current_student))


@router.get("/my/{batch_id}", response_model=Envelope[BatchAttendanceRead])
async def get_my_batch_attendance(
    batch_id: UUID,
    service: AttendanceService = Depends(get_attendance_service),
    current_student=Depends(get_current_student),
) -> Envelope[BatchAttendanceRead]:
    return ok(await service.get_student_batch_attendance(current_student, batch_id))
