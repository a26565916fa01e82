"""Skills repository layer."""

from __future__ import annotations

from collections.abc import Iterable
from datetime import datetime
from uuid import UUID

from sqlalchemy import delete, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from student_portal.core.database import is_unique_violation
from student_portal.core.enums import AttemptStatusEnum, SkillModuleEnum
from student_portal.modules.skills.models import SkillAttempt, SkillBatchMapping, SkillContent, SkillSubmission
from student_portal.shared.exceptions import ConflictException

ALREADY_SUBMITTED_MESSAGE = "You have already completed this quiz."
RESUBMISSION_MESSAGE = "You have already submitted this attempt. Re-submission is not allowed."
SESSION_ORDERED_MODULES = (SkillModuleEnum.LISTENING, SkillModuleEnum.SPEAKING, SkillModuleEnum.WRITING)


class SkillsRepository:
    """DB operations for skill content and submissions."""

    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    async def get_content(self, content_id: UUID) -> SkillContent | None:
        stmt = select(SkillContent).where(SkillContent.id == content_id)
        return await self.session.scalar(stmt)

    def _visible_content_ids(self, batch_ids: Iterable[UUID]):
        return select(SkillBatchMapping.content_id).where(
            SkillBatchMapping.batch_id.in_(list(batch_ids)),
            SkillBatchMapping.student_visible.is_(True),
        )

    async def list_visible_contents(
        self,
        batch_ids: Iterable[UUID],
        course_id: UUID,
        module_type: SkillModuleEnum,
    ) -> list[SkillContent]:
        stmt = select(SkillContent).where(
            SkillContent.id.in_(self._visible_content_ids(batch_ids)),
            SkillContent.course_id == course_id,
            SkillContent.module_type == module_type,
        )
        if module_type in SESSION_ORDERED_MODULES:
            stmt = stmt.order_by(SkillContent.session_number.asc().nulls_last(), SkillContent.created_at.asc())
        else:
            stmt = stmt.order_by(SkillContent.created_at.desc())
        return (await self.session.scalars(stmt)).all()

    async def is_content_visible(self, content_id: UUID, batch_ids: Iterable[UUID]) -> bool:
        stmt = self._visible_content_ids(batch_ids).where(SkillBatchMapping.content_id == content_id).limit(1)
        return (await self.session.scalar(stmt)) is not None

    async def get_submission(self, student_id: UUID, content_id: UUID) -> SkillSubmission | None:
        stmt = select(SkillSubmission).where(
            SkillSubmission.student_id == student_id,
            SkillSubmission.content_id == content_id,
        )
        return await self.session.scalar(stmt)

    async def list_submissions(self, student_id: UUID, content_ids: Iterable[UUID]) -> list[SkillSubmission]:
        ids = list(content_ids)
        if not ids:
            return []
        stmt = select(SkillSubmission).where(
            SkillSubmission.student_id == student_id,
            SkillSubmission.content_id.in_(ids),
        )
        return (await self.session.scalars(stmt)).all()

    async def create_submission(
        self,
        student_id: UUID,
        content_id: UUID,
        batch_id: UUID,
        answers: dict,
        score: int,
        max_marks: int,
        correct_answers: int,
        total_questions: int,
        submitted_at: datetime,
    ) -> SkillSubmission:
        submission = SkillSubmission(
            student_id=student_id,
            content_id=content_id,
            batch_id=batch_id,
            answers=answers,
            score=score,
            max_marks=max_marks,
            correct_answers=correct_answers,
            total_questions=total_questions,
            submitted_at=submitted_at,
        )
        try:
            async with self.session.begin_nested():
                self.session.add(submission)
                await self.session.flush()
        except IntegrityError as exc:
            if is_unique_violation(exc):
                raise ConflictException(ALREADY_SUBMITTED_MESSAGE) from exc
            raise
        return submission

    async def get_submitted_attempt(self, student_id: UUID, content_id: UUID) -> SkillAttempt | None:
        stmt = select(SkillAttempt).where(
            SkillAttempt.student_id == student_id,
            SkillAttempt.content_id == content_id,
            SkillAttempt.status == AttemptStatusEnum.SUBMITTED,
        )
        return await self.session.scalar(stmt)

    async def delete_draft_attempts(self, student_id: UUID, content_id: UUID) -> None:
        stmt = delete(SkillAttempt).where(
            SkillAttempt.student_id == student_id,
            SkillAttempt.content_id == content_id,
            SkillAttempt.status == AttemptStatusEnum.DRAFT,
        )
        await self.session.execute(stmt)

    async def create_attempt(
        self,
        student_id: UUID,
        content_id: UUID,
        batch_id: UUID,
        media_url: str,
        status: AttemptStatusEnum,
        submitted_at: datetime | None,
    ) -> SkillAttempt:
        attempt = SkillAttempt(
            student_id=student_id,
            content_id=content_id,
            batch_id=batch_id,
            media_url=media_url,
            status=status,
            submitted_at=submitted_at,
        )
        try:
            async with self.session.begin_nested():
                self.session.add(attempt)
                await self.session.flush()
        except IntegrityError as exc:
            if is_unique_violation(exc):
                raise ConflictException(RESUBMISSION_MESSAGE) from exc
            raise
        return attempt

    async def update_attempt_media(
        self,
        attempt: SkillAttempt,
        media_url: str,
        submitted_at: datetime,
    ) -> SkillAttempt:
        attempt.media_url = media_url
        attempt.submitted_at = submitted_at
        await self.session.flush()
        return attempt

    async def list_attempts(self, student_id: UUID, content_ids: Iterable[UUID]) -> list[SkillAttempt]:
        ids = list(content_ids)
        if not ids:
            return []
        stmt = (
            select(SkillAttempt)
            .where(
                SkillAttempt.student_id == student_id,
                SkillAttempt.content_id.in_(ids),
            )
            .order_by(SkillAttempt.created_at.desc())
        )
        return (await self.session.scalars(stmt)).all()
