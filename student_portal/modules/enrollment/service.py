"""Enrollment lifecycle: enroll, expire and list."""

from __future__ import annotations

import logging
from collections.abc import Iterable
from dataclasses import dataclass
from uuid import UUID

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from student_portal.core.config import get_settings
from student_portal.core.database import get_db_session
from student_portal.core.enums import BatchStatusEnum, SeatReservationStatusEnum
from student_portal.core.metrics import record_enrollment_attempt
from student_portal.modules.audit.repository import AuditRepository
from student_portal.modules.batches.repository import BatchesRepository
from student_portal.modules.batches.service import SeatAllocationService
from student_portal.modules.enrollment.models import Enrollment
from student_portal.modules.enrollment.repository import ALREADY_ENROLLED_MESSAGE, EnrollmentRepository
from student_portal.modules.students.models import Student
from student_portal.shared.exceptions import ConflictException, NotFoundException
from student_portal.shared.utils import utc_today

logger = logging.getLogger(__name__)

VISIBLE_BATCH_STATUSES = (
    BatchStatusEnum.APPROVED,
    BatchStatusEnum.STARTED,
    BatchStatusEnum.COMPLETED,
)


@dataclass(slots=True)
class EnrollmentResult:
    enrollment: Enrollment
    batch_name: str
    seats_remaining: int
    is_free_course: bool
    message: str


class EnrollmentService:
    """Creates enrollments under capacity control and expires stale ones."""

    def __init__(
        self,
        enrollment_repository: EnrollmentRepository,
        batches_repository: BatchesRepository,
        seat_allocation: SeatAllocationService,
        audit_repository: AuditRepository,
        free_course_codes: Iterable[str] = (),
    ) -> None:
        self.enrollment_repository = enrollment_repository
        self.batches_repository = batches_repository
        self.seat_allocation = seat_allocation
        self.audit_repository = audit_repository
        self.free_course_codes = frozenset(free_course_codes)

    def is_free_course(self, course_name: str | None) -> bool:
        return course_name is not None and course_name in self.free_course_codes

    async def enroll(self, student: Student, batch_id: UUID) -> EnrollmentResult:
        """Enroll student into batch if a seat is available.

        Free courses are approved immediately and never expire; any other course
        waits for admin approval.
        """
        existing = await self.enrollment_repository.get_enrollment(student.id, batch_id)
        if existing is not None:
            record_enrollment_attempt("duplicate")
            raise ConflictException(ALREADY_ENROLLED_MESSAGE)

        batch = await self.batches_repository.get_batch_by_id(batch_id)
        if batch is None:
            record_enrollment_attempt("not_found")
            raise NotFoundException("Batch not found")

        is_free_course = self.is_free_course(batch.course.course_name if batch.course else None)

        async with self.seat_allocation.try_reserve_seat(batch.id) as reservation:
            if reservation.status == SeatReservationStatusEnum.NOT_FOUND:
                record_enrollment_attempt("not_found")
                raise NotFoundException("Batch not found")
            if reservation.status == SeatReservationStatusEnum.FULL:
                record_enrollment_attempt("full")
                raise ConflictException(
                    f"Batch is full: maximum capacity of {reservation.occupancy.capacity} students reached",
                )

            try:
                enrollment = await self.enrollment_repository.create_enrollment(
                    student_id=student.id,
                    batch_id=batch.id,
                    status=is_free_course,
                    is_permanent=is_free_course,
                )
            except ConflictException:
                record_enrollment_attempt("duplicate")
                raise

        seats_remaining = reservation.occupancy.available - 1
        await self.audit_repository.create_outbox_event(
            aggregate_type="enrollment",
            aggregate_id=str(enrollment.id),
            event_type="enrollment.created",
            payload={
                "enrollment_id": str(enrollment.id),
                "student_id": str(student.id),
                "batch_id": str(batch.id),
                "batch_name": batch.batch_name,
                "is_free_course": is_free_course,
            },
        )
        record_enrollment_attempt("created")
        logger.info(
            "Student %s enrolled in batch %s (free=%s, seats_remaining=%s)",
            student.id,
            batch.id,
            is_free_course,
            seats_remaining,
        )

        if is_free_course:
            message = "Enrollment successful! You now have access to the course."
        else:
            message = "Enrollment successful, pending approval"

        return EnrollmentResult(
            enrollment=enrollment,
            batch_name=batch.batch_name,
            seats_remaining=seats_remaining,
            is_free_course=is_free_course,
            message=message,
        )

    async def expire_stale(self, student_id: UUID) -> list[Enrollment]:
        """Revoke access of the student's enrollments past their end date."""
        return await self._expire(student_id)

    async def expire_all_stale(self) -> list[Enrollment]:
        """Revoke access of every enrollment past its end date."""
        return await self._expire(None)

    async def _expire(self, student_id: UUID | None) -> list[Enrollment]:
        stale = await self.enrollment_repository.list_stale_enrollments(utc_today(), student_id=student_id)
        transitioned: list[Enrollment] = []
        for enrollment in stale:
            if enrollment.is_permanent:
                continue
            if enrollment.status:
                transitioned.append(enrollment)
            enrollment.status = False
            await self.enrollment_repository.save(enrollment)

        for enrollment in transitioned:
            await self.audit_repository.create_outbox_event(
                aggregate_type="enrollment",
                aggregate_id=str(enrollment.id),
                event_type="enrollment.expired",
                payload={
                    "enrollment_id": str(enrollment.id),
                    "student_id": str(enrollment.student_id),
                    "batch_id": str(enrollment.batch_id),
                    "end_date": enrollment.end_date.isoformat() if enrollment.end_date else None,
                },
            )
        if transitioned:
            logger.info("Expired %s enrollment(s)", len(transitioned))
        return transitioned

    async def list_enrollments(self, student: Student) -> list[Enrollment]:
        """Return enrollments of student in running or finished batches."""
        await self.expire_stale(student.id)
        return await self.enrollment_repository.list_student_enrollments(student.id, VISIBLE_BATCH_STATUSES)


def build_enrollment_service(session: AsyncSession) -> EnrollmentService:
    """Wire enrollment service over a session."""
    settings = get_settings()
    batches_repository = BatchesRepository(session)
    return EnrollmentService(
        enrollment_repository=EnrollmentRepository(session),
        batches_repository=batches_repository,
        seat_allocation=SeatAllocationService(
            batches_repository,
            default_capacity=settings.default_batch_capacity,
        ),
        audit_repository=AuditRepository(session),
        free_course_codes=settings.free_course_codes,
    )


async def get_enrollment_service(session: AsyncSession = Depends(get_db_session)) -> EnrollmentService:
    """Dependency provider for enrollment service."""
    return build_enrollment_service(session)
