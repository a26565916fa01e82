"""Skills API router."""

from __future__ import annotations

from uuid import UUID

from fastapi import APIRouter, Depends, status

from student_portal.core.enums import SkillModuleEnum
from student_portal.modules.skills.schemas import (
    AttemptRead,
    SkillContentRead,
    SkillReviewRead,
    SpeakingAttemptCreate,
    SubmissionCreate,
    SubmissionResultRead,
    WritingSubmissionCreate,
)
from student_portal.modules.skills.service import SkillsService, get_skills_service
from student_portal.modules.students.service import get_current_student
from student_portal.shared.pagination import Envelope, ok

router = APIRouter(prefix="/skills", tags=["skills"])


@router.get("/{module_type}/batches/{batch_id}", response_model=Envelope[list[SkillContentRead]])
async def list_batch_content(
    module_type: SkillModuleEnum,
    batch_id: UUID,
    service: SkillsService = Depends(get_skills_service),
    current_student=Depends(get_current_student),
) -> Envelope[list[SkillContentRead]]:
    """List skill content published to batch with the student's attempt state."""
    return ok(await service.list_for_batch(current_student, module_type, batch_id))


@router.post("/submissions", response_model=Envelope[SubmissionResultRead], status_code=status.HTTP_201_CREATED)
async def submit_answers(
    payload: SubmissionCreate,
    service: SkillsService = Depends(get_skills_service),
    current_student=Depends(get_current_student),
) -> Envelope[SubmissionResultRead]:
    """Submit answers once; the attempt is scored immediately."""
    return ok(await service.submit(current_student, payload))


@router.get("/review/{content_id}", response_model=Envelope[SkillReviewRead])
async def review_submission(
    content_id: UUID,
    service: SkillsService = Depends(get_skills_service),
    current_student=Depends(get_current_student),
) -> Envelope[SkillReviewRead]:
    return ok(await service.get_review(current_student, content_id))


@router.post("/speaking/attempts", response_model=Envelope[AttemptRead], status_code=status.HTTP_201_CREATED)
async def save_speaking_attempt(
    payload: SpeakingAttemptCreate,
    service: SkillsService = Depends(get_skills_service),
    current_student=Depends(get_current_student),
) -> Envelope[AttemptRead]:
    """Save a recording as draft or submit it."""
    attempt = await service.save_speaking_attempt(current_student, payload)
    return ok(AttemptRead.model_validate(attempt))


@router.post("/writing/submissions", response_model=Envelope[AttemptRead], status_code=status.HTTP_201_CREATED)
async def submit_writing_task(
    payload: WritingSubmissionCreate,
    service: SkillsService = Depends(get_skills_service),
    current_student=Depends(get_current_student),
) -> Envelope[AttemptRead]:
    attempt = await service.submit_writing(current_student, payload)
    return ok(AttemptRead.model_validate(attempt))
