"""Attendance summaries for enrolled students."""

from __future__ import annotations

from collections import Counter
from uuid import UUID

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from student_portal.core.database import get_db_session
from student_portal.core.enums import AttendanceStatusEnum
from student_portal.modules.attendance.models import AttendanceRecord, AttendanceSession
from student_portal.modules.attendance.repository import AttendanceRepository
from student_portal.modules.attendance.schemas import NOT_MARKED, BatchAttendanceRead, SessionAttendanceRead
from student_portal.modules.batches.models import Batch
from student_portal.modules.batches.repository import BatchesRepository
from student_portal.modules.batches.service import BatchMergeResolver
from student_portal.modules.enrollment.repository import EnrollmentRepository
from student_portal.modules.students.models import Student
from student_portal.shared.exceptions import NotFoundException
from student_portal.shared.utils import round_half_up


def summarize_attendance(
    batch: Batch,
    sessions: list[AttendanceSession],
    records: list[AttendanceRecord],
) -> BatchAttendanceRead:
    """Build per-batch counters; sessions without a record count as not marked."""
    records_by_session = {record.session_id: record for record in records}
    counts: Counter[str] = Counter()
    details: list[SessionAttendanceRead] = []
    for session in sessions:
        record = records_by_session.get(session.id)
        if record is not None:
            counts[str(record.status)] += 1
        details.append(
            SessionAttendanceRead(
                session_id=session.id,
                session_date=session.session_date,
                status=str(record.status) if record is not None else NOT_MARKED,
                marked_at=record.marked_at if record is not None else None,
                notes=session.notes,
            ),
        )

    total = len(sessions)
    present = counts[AttendanceStatusEnum.PRESENT.value]
    percentage = round_half_up(present / total * 100) if total else 0
    return BatchAttendanceRead(
        batch_id=batch.id,
        batch_name=batch.batch_name,
        batch_status=batch.status,
        start_date=batch.start_date,
        end_date=batch.end_date,
        total_sessions=total,
        present_count=present,
        absent_count=counts[AttendanceStatusEnum.ABSENT.value],
        late_count=counts[AttendanceStatusEnum.LATE.value],
        excused_count=counts[AttendanceStatusEnum.EXCUSED.value],
        attendance_percentage=percentage,
        sessions=details,
    )


class AttendanceService:
    """Attendance of a student across approved enrollments."""

    def __init__(
        self,
        attendance_repository: AttendanceRepository,
        enrollment_repository: EnrollmentRepository,
        merge_resolver: BatchMergeResolver,
    ) -> None:
        self.attendance_repository = attendance_repository
        self.enrollment_repository = enrollment_repository
        self.merge_resolver = merge_resolver

    async def _batch_attendance(self, student: Student, batch: Batch) -> BatchAttendanceRead:
        batch_ids = await self.merge_resolver.resolve_group(batch.id)
        sessions = await self.attendance_repository.list_sessions(batch_ids)
        records = await self.attendance_repository.list_student_records(
            student.id,
            [session.id for session in sessions],
        )
        return summarize_attendance(batch, sessions, records)

    async def get_student_attendance(self, student: Student) -> list[BatchAttendanceRead]:
        enrollments = await self.enrollment_repository.list_approved_enrollments(student.id)
        return [await self._batch_attendance(student, enrollment.batch) for enrollment in enrollments]

    async def get_student_batch_attendance(self, student: Student, batch_id: UUID) -> BatchAttendanceRead:
        enrollments = await self.enrollment_repository.list_approved_enrollments(student.id)
        for enrollment in enrollments:
            if enrollment.batch_id == batch_id:
                return await self._batch_attendance(student, enrollment.batch)
        raise NotFoundException("You are not enrolled in this batch or enrollment is not approved")


async def get_attendance_service(session: AsyncSession = Depends(get_db_session)) -> AttendanceService:
    """Dependency provider for attendance service."""
    return AttendanceService(
        attendance_repository=AttendanceRepository(session),
        enrollment_repository=EnrollmentRepository(session),
        merge_resolver=BatchMergeResolver(BatchesRepository(session)),
    )
