"""Skill modules: quiz listing, scoring and review, plus speaking and writing attempts."""

from __future__ import annotations

import logging
from uuid import UUID

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from student_portal.core.database import get_db_session
from student_portal.core.enums import AttemptStatusEnum, SkillModuleEnum
from student_portal.modules.batches.repository import BatchesRepository
from student_portal.modules.batches.service import BatchMergeResolver
from student_portal.modules.skills.models import SkillAttempt, SkillContent, SkillSubmission
from student_portal.modules.skills.repository import (
    ALREADY_SUBMITTED_MESSAGE,
    RESUBMISSION_MESSAGE,
    SkillsRepository,
)
from student_portal.modules.skills.schemas import (
    AttemptRead,
    SkillContentRead,
    SkillReviewRead,
    SpeakingAttemptCreate,
    SubmissionCreate,
    SubmissionResultRead,
    SubmissionStatusRead,
    WritingSubmissionCreate,
)
from student_portal.modules.skills.scoring import public_questions, score_answers
from student_portal.modules.students.models import Student
from student_portal.shared.exceptions import ConflictException, NotFoundException
from student_portal.shared.utils import utc_now

logger = logging.getLogger(__name__)


def is_verified(submission: SkillSubmission) -> bool:
    return bool(submission.verified) or submission.verified_at is not None


def visible_score(submission: SkillSubmission) -> int | None:
    """Score shown to the student: hidden until a tutor verifies it."""
    return submission.score if is_verified(submission) else None


QUIZ_MODULES = frozenset({SkillModuleEnum.LISTENING, SkillModuleEnum.READING})
ATTEMPT_MODULES = frozenset({SkillModuleEnum.SPEAKING, SkillModuleEnum.WRITING})


def preferred_attempts(attempts: list[SkillAttempt]) -> dict[UUID, SkillAttempt]:
    """Per content: the submitted attempt, else the most recent draft.

    ``attempts`` must be ordered newest first.
    """
    chosen: dict[UUID, SkillAttempt] = {}
    for attempt in attempts:
        current = chosen.get(attempt.content_id)
        if current is None or (
            attempt.status == AttemptStatusEnum.SUBMITTED and current.status != AttemptStatusEnum.SUBMITTED
        ):
            chosen[attempt.content_id] = attempt
    return chosen


class SkillsService:
    """Auto-scored quizzes published to batches."""

    def __init__(
        self,
        skills_repository: SkillsRepository,
        batches_repository: BatchesRepository,
        merge_resolver: BatchMergeResolver,
        now_provider=utc_now,
    ) -> None:
        self.skills_repository = skills_repository
        self.batches_repository = batches_repository
        self.merge_resolver = merge_resolver
        self.now_provider = now_provider

    async def list_for_batch(
        self,
        student: Student,
        module_type: SkillModuleEnum,
        batch_id: UUID,
    ) -> list[SkillContentRead]:
        """Content visible to the batch's merge group, with the student's attempt state."""
        batch = await self.batches_repository.get_batch_by_id(batch_id)
        if batch is None:
            raise NotFoundException("Batch not found")

        batch_ids = await self.merge_resolver.resolve_group(batch.id)
        contents = await self.skills_repository.list_visible_contents(batch_ids, batch.course_id, module_type)
        content_ids = [content.id for content in contents]
        if module_type in ATTEMPT_MODULES:
            submissions: dict[UUID, SkillSubmission] = {}
            attempts = preferred_attempts(await self.skills_repository.list_attempts(student.id, content_ids))
        else:
            submissions = {
                submission.content_id: submission
                for submission in await self.skills_repository.list_submissions(student.id, content_ids)
            }
            attempts = {}

        items: list[SkillContentRead] = []
        for content in contents:
            submission = submissions.get(content.id)
            attempt = attempts.get(content.id)
            submitted = submission is not None or (
                attempt is not None and attempt.status == AttemptStatusEnum.SUBMITTED
            )
            items.append(
                SkillContentRead(
                    id=content.id,
                    module_type=content.module_type,
                    title=content.title,
                    instruction=content.instruction,
                    media_url=content.media_url,
                    session_number=content.session_number,
                    max_marks=content.max_marks or 0,
                    questions=public_questions(content.questions or []),
                    created_at=content.created_at,
                    attempted=submission is not None or attempt is not None,
                    submitted=submitted,
                    attempt=AttemptRead.model_validate(attempt) if attempt is not None else None,
                    submission=(
                        SubmissionStatusRead(
                            submission_id=submission.id,
                            score=visible_score(submission),
                            max_marks=submission.max_marks,
                            submitted_at=submission.submitted_at,
                            verified=is_verified(submission),
                            verified_at=submission.verified_at,
                        )
                        if submission is not None
                        else None
                    ),
                ),
            )
        return items

    async def submit(self, student: Student, payload: SubmissionCreate) -> SubmissionResultRead:
        """Score and store the single allowed attempt."""
        content = await self._get_visible_content(payload.content_id, payload.batch_id, QUIZ_MODULES)

        existing = await self.skills_repository.get_submission(student.id, content.id)
        if existing is not None:
            raise ConflictException(ALREADY_SUBMITTED_MESSAGE)

        result = score_answers(
            content.questions or [],
            payload.answers,
            content.max_marks,
            require_all_answers=content.module_type == SkillModuleEnum.READING,
        )
        submission = await self.skills_repository.create_submission(
            student_id=student.id,
            content_id=content.id,
            batch_id=payload.batch_id,
            answers=payload.answers,
            score=result.marks,
            max_marks=result.max_marks,
            correct_answers=result.correct_answers,
            total_questions=result.total_questions,
            submitted_at=self.now_provider(),
        )
        logger.info(
            "Student %s submitted %s content %s: %s/%s correct",
            student.id,
            content.module_type,
            content.id,
            result.correct_answers,
            result.total_questions,
        )
        return SubmissionResultRead(
            submission_id=submission.id,
            score=result.marks,
            max_marks=result.max_marks,
            correct_answers=result.correct_answers,
            total_questions=result.total_questions,
            message="Submitted successfully",
        )

    async def _get_visible_content(
        self,
        content_id: UUID,
        batch_id: UUID,
        module_types: frozenset[SkillModuleEnum],
    ) -> SkillContent:
        content = await self.skills_repository.get_content(content_id)
        if content is None or content.module_type not in module_types:
            raise NotFoundException("Content not found")

        batch_ids = await self.merge_resolver.resolve_group(batch_id)
        if not await self.skills_repository.is_content_visible(content.id, batch_ids):
            raise NotFoundException("Content not found")
        return content

    async def save_speaking_attempt(self, student: Student, payload: SpeakingAttemptCreate) -> SkillAttempt:
        """Keep one draft per content until the student submits; submission is final."""
        content = await self._get_visible_content(
            payload.content_id,
            payload.batch_id,
            frozenset({SkillModuleEnum.SPEAKING}),
        )
        if await self.skills_repository.get_submitted_attempt(student.id, content.id) is not None:
            raise ConflictException(RESUBMISSION_MESSAGE)

        await self.skills_repository.delete_draft_attempts(student.id, content.id)
        is_submitted = payload.status == AttemptStatusEnum.SUBMITTED
        attempt = await self.skills_repository.create_attempt(
            student_id=student.id,
            content_id=content.id,
            batch_id=payload.batch_id,
            media_url=payload.audio_url,
            status=payload.status,
            submitted_at=self.now_provider() if is_submitted else None,
        )
        logger.info("Student %s saved speaking attempt %s as %s", student.id, attempt.id, payload.status)
        return attempt

    async def submit_writing(self, student: Student, payload: WritingSubmissionCreate) -> SkillAttempt:
        """Store the answer-sheet image; a later upload replaces the submitted one."""
        content = await self._get_visible_content(
            payload.content_id,
            payload.batch_id,
            frozenset({SkillModuleEnum.WRITING}),
        )
        now = self.now_provider()
        existing = await self.skills_repository.get_submitted_attempt(student.id, content.id)
        if existing is not None:
            attempt = await self.skills_repository.update_attempt_media(
                existing,
                media_url=payload.submission_image_url,
                submitted_at=now,
            )
        else:
            attempt = await self.skills_repository.create_attempt(
                student_id=student.id,
                content_id=content.id,
                batch_id=payload.batch_id,
                media_url=payload.submission_image_url,
                status=AttemptStatusEnum.SUBMITTED,
                submitted_at=now,
            )
        logger.info("Student %s submitted writing task %s", student.id, content.id)
        return attempt

    async def get_review(self, student: Student, content_id: UUID) -> SkillReviewRead:
        submission = await self.skills_repository.get_submission(student.id, content_id)
        if submission is None:
            raise NotFoundException("Quiz submission not found")
        content = await self.skills_repository.get_content(content_id)
        if content is None:
            raise NotFoundException("Content not found")

        return SkillReviewRead(
            content_id=content.id,
            module_type=content.module_type,
            title=content.title,
            instruction=content.instruction,
            media_url=content.media_url,
            session_number=content.session_number,
            max_marks=content.max_marks or 0,
            questions=list(content.questions or []),
            student_answers=submission.answers or {},
            score=visible_score(submission),
            verified=is_verified(submission),
            submitted_at=submission.submitted_at,
        )


async def get_skills_service(session: AsyncSession = Depends(get_db_session)) -> SkillsService:
    """Dependency provider for skills service."""
    batches_repository = BatchesRepository(session)
    return SkillsService(
        skills_repository=SkillsRepository(session),
        batches_repository=batches_repository,
        merge_resolver=BatchMergeResolver(batches_repository),
    )
