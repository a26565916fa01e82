"""Skills schemas."""

from __future__ import annotations

from datetime import datetime
from typing import Any
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

from student_portal.core.enums import AttemptStatusEnum, SkillModuleEnum


class SubmissionCreate(BaseModel):
    """Answers keyed by question number, e.g. ``{"Q1": "b"}``."""

    batch_id: UUID
    content_id: UUID
    answers: dict[str, str] = Field(min_length=1)


class SubmissionStatusRead(BaseModel):
    """Student-facing view of a submission; score stays null until verified."""

    submission_id: UUID
    score: int | None
    max_marks: int
    submitted_at: datetime
    verified: bool
    verified_at: datetime | None


class SpeakingAttemptCreate(BaseModel):
    """Recording already uploaded to storage; ``draft`` replaces the previous draft."""

    batch_id: UUID
    content_id: UUID
    audio_url: str = Field(min_length=1, max_length=1024)
    status: AttemptStatusEnum = AttemptStatusEnum.DRAFT


class WritingSubmissionCreate(BaseModel):
    batch_id: UUID
    content_id: UUID
    submission_image_url: str = Field(min_length=1, max_length=1024)


class AttemptRead(BaseModel):
    """Speaking or writing attempt with tutor feedback once reviewed."""

    model_config = ConfigDict(from_attributes=True)

    id: UUID
    content_id: UUID
    batch_id: UUID
    media_url: str
    status: AttemptStatusEnum
    submitted_at: datetime | None
    feedback: str | None
    marks: int | None
    reviewed_at: datetime | None


class SkillContentRead(BaseModel):
    id: UUID
    module_type: SkillModuleEnum
    title: str
    instruction: str | None
    media_url: str | None
    session_number: int | None
    max_marks: int
    questions: list[dict[str, Any]]
    created_at: datetime
    attempted: bool
    submitted: bool = False
    submission: SubmissionStatusRead | None = None
    attempt: AttemptRead | None = None


class SubmissionResultRead(BaseModel):
    submission_id: UUID
    score: int
    max_marks: int
    correct_answers: int
    total_questions: int
    message: str


class SkillReviewRead(BaseModel):
    """Content with correct answers alongside the student's own answers."""

    content_id: UUID
    module_type: SkillModuleEnum
    title: str
    instruction: str | None
    media_url: str | None
    session_number: int | None
    max_marks: int
    questions: list[dict[str, Any]]
    student_answers: dict[str, Any]
    score: int | None
    verified: bool
    submitted_at: datetime
