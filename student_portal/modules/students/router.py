"""Students API router."""

from __future__ import annotations

from fastapi import APIRouter, Depends

from student_portal.modules.students.schemas import StudentProfileUpdate, StudentRead
from student_portal.modules.students.service import ProfileService, get_current_student, get_profile_service
from student_portal.shared.pagination import Envelope, ok

router = APIRouter(prefix="/students", tags=["students"])


@router.get("/me", response_model=Envelope[StudentRead])
async def get_me(current_student=Depends(get_current_student)) -> Envelope[StudentRead]:
    """Return profile of authenticated student."""
    return ok(StudentRead.model_validate(current_student))


@router.patch("/me", response_model=Envelope[StudentRead])
async def update_me(
    payload: StudentProfileUpdate,
    service: ProfileService = Depends(get_profile_service),
    current_student=Depends(get_current_student),
) -> Envelope[StudentRead]:
    """Update name, contact details, state or center of authenticated student."""
    student = await service.update_profile(current_student, payload)
    return ok(StudentRead.model_validate(student))
