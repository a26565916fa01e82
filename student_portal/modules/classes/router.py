"""Class materials API router."""

from __future__ import annotations

from uuid import UUID

from fastapi import APIRouter, Depends

from student_portal.modules.classes.schemas import ClassMeetingRead, ClassNoteRead
from student_portal.modules.classes.service import ClassesService, get_classes_service
from student_portal.modules.students.service import get_current_student
from student_portal.shared.pagination import Envelope, ok

router = APIRouter(prefix="/classes", tags=["classes"])


@router.get("/{batch_id}/notes", response_model=Envelope[list[ClassNoteRead]])
async def list_batch_notes(
    batch_id: UUID,
    service: ClassesService = Depends(get_classes_service),
    current_student=Depends(get_current_student),
) -> Envelope[list[ClassNoteRead]]:
    """List notes of batch and its merged batches, newest first."""
    notes = await service.list_notes(batch_id)
    return ok([ClassNoteRead.model_validate(item) for item in notes])


@router.get("/{batch_id}/meetings", response_model=Envelope[list[ClassMeetingRead]])
async def list_batch_meetings(
    batch_id: UUID,
    service: ClassesService = Depends(get_classes_service),
    current_student=Depends(get_current_student),
) -> Envelope[list[ClassMeetingRead]]:
    """List scheduled meetings of batch and its merged batches."""
    meetings = await service.list_meetings(batch_id)
    return ok([ClassMeetingRead.model_validate(item) for item in meetings])
