"""Enrollment API router."""

from __future__ import annotations

from fastapi import APIRouter, Depends, status

from student_portal.modules.enrollment.schemas import (
    EnrollmentDetailRead,
    EnrollmentRead,
    EnrollmentResultRead,
    EnrollRequest,
)
from student_portal.modules.enrollment.service import EnrollmentService, get_enrollment_service
from student_portal.modules.students.service import get_current_student
from student_portal.shared.pagination import Envelope, ok

router = APIRouter(prefix="/enrollment", tags=["enrollment"])


@router.post("", response_model=Envelope[EnrollmentResultRead], status_code=status.HTTP_201_CREATED)
async def enroll(
    payload: EnrollRequest,
    service: EnrollmentService = Depends(get_enrollment_service),
    current_student=Depends(get_current_student),
) -> Envelope[EnrollmentResultRead]:
    """Enroll current student into a batch."""
    result = await service.enroll(current_student, payload.batch_id)
    return ok(
        EnrollmentResultRead(
            enrollment=EnrollmentRead.model_validate(result.enrollment),
            batch_name=result.batch_name,
            seats_remaining=result.seats_remaining,
            is_free_course=result.is_free_course,
            message=result.message,
        ),
    )


@router.get("/my", response_model=Envelope[list[EnrollmentDetailRead]])
async def list_my_enrollments(
    service: EnrollmentService = Depends(get_enrollment_service),
    current_student=Depends(get_current_student),
) -> Envelope[list[EnrollmentDetailRead]]:
    """List enrollments of current student, expiring stale ones first."""
    enrollments = await service.list_enrollments(current_student)
    return ok([EnrollmentDetailRead.model_validate(item) for item in enrollments])
