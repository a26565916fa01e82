"""Enrollment repository layer."""

from __future__ import annotations

from collections.abc import Iterable
from datetime import date
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from student_portal.core.database import is_unique_violation
from student_portal.core.enums import BatchStatusEnum
from student_portal.modules.batches.models import Batch
from student_portal.modules.enrollment.models import Enrollment
from student_portal.shared.exceptions import ConflictException

ALREADY_ENROLLED_MESSAGE = "You are already enrolled in this batch"


class EnrollmentRepository:
    """DB operations for enrollments."""

    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    async def get_enrollment(self, student_id: UUID, batch_id: UUID) -> Enrollment | None:
        stmt = select(Enrollment).where(
            Enrollment.student_id == student_id,
            Enrollment.batch_id == batch_id,
        )
        return await self.session.scalar(stmt)

    async def get_enrollment_by_id(self, enrollment_id: UUID) -> Enrollment | None:
        stmt = select(Enrollment).where(Enrollment.id == enrollment_id)
        return await self.session.scalar(stmt)

    async def create_enrollment(
        self,
        student_id: UUID,
        batch_id: UUID,
        status: bool,
        is_permanent: bool,
        end_date: date | None = None,
    ) -> Enrollment:
        enrollment = Enrollment(
            student_id=student_id,
            batch_id=batch_id,
            status=status,
            is_permanent=is_permanent,
            end_date=end_date,
        )
        self.session.add(enrollment)
        try:
            await self.session.flush()
        except IntegrityError as exc:
            if is_unique_violation(exc):
                raise ConflictException(ALREADY_ENROLLED_MESSAGE) from exc
            raise
        return enrollment

    async def list_stale_enrollments(self, today: date, student_id: UUID | None = None) -> list[Enrollment]:
        """Non-permanent enrollments whose end date lies before ``today``."""
        stmt = select(Enrollment).where(
            Enrollment.end_date.is_not(None),
            Enrollment.end_date < today,
            Enrollment.is_permanent.is_(False),
        )
        if student_id is not None:
            stmt = stmt.where(Enrollment.student_id == student_id)
        return (await self.session.scalars(stmt)).all()

    async def save(self, enrollment: Enrollment) -> Enrollment:
        await self.session.flush()
        return enrollment

    async def list_student_enrollments(
        self,
        student_id: UUID,
        batch_statuses: Iterable[BatchStatusEnum],
    ) -> list[Enrollment]:
        stmt = (
            select(Enrollment)
            .join(Batch, Batch.id == Enrollment.batch_id)
            .options(
                selectinload(Enrollment.batch).selectinload(Batch.course),
                selectinload(Enrollment.batch).selectinload(Batch.center),
            )
            .where(Enrollment.student_id == student_id, Batch.status.in_(list(batch_statuses)))
            .order_by(Enrollment.created_at.desc())
        )
        return (await self.session.scalars(stmt)).all()

    async def list_approved_enrollments(self, student_id: UUID) -> list[Enrollment]:
        stmt = (
            select(Enrollment)
            .options(selectinload(Enrollment.batch))
            .where(Enrollment.student_id == student_id, Enrollment.status.is_(True))
            .order_by(Enrollment.created_at.asc())
        )
        return (await self.session.scalars(stmt)).all()
