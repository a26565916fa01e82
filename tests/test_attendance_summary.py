from __future__ import annotations

from datetime import UTC, date, datetime
from types import SimpleNamespace
from uuid import UUID, uuid4

import pytest

from student_portal.core.enums import AttendanceStatusEnum, BatchStatusEnum
from student_portal.modules.attendance.schemas import NOT_MARKED
from student_portal.modules.attendance.service import AttendanceService, summarize_attendance
from student_portal.shared.exceptions import NotFoundException


def make_batch() -> SimpleNamespace:
    return SimpleNamespace(
        id=uuid4(),
        batch_name="DE-A1-EVENING",
        status=BatchStatusEnum.STARTED,
        start_date=date(2026, 1, 5),
        end_date=None,
    )


def make_session(batch_id: UUID, day: int) -> SimpleNamespace:
    return SimpleNamespace(id=uuid4(), batch_id=batch_id, session_date=date(2026, 2, day), notes=None)


def make_record(session_id: UUID, student_id: UUID, status: AttendanceStatusEnum) -> SimpleNamespace:
    return SimpleNamespace(
        session_id=session_id,
        student_id=student_id,
        status=status,
        marked_at=datetime(2026, 2, 1, 18, 0, tzinfo=UTC),
    )


def test_summary_counts_statuses_and_unmarked_sessions() -> None:
    batch = make_batch()
    student_id = uuid4()
    sessions = [make_session(batch.id, day) for day in (1, 2, 3)]
    records = [
        make_record(sessions[0].id, student_id, AttendanceStatusEnum.PRESENT),
        make_record(sessions[1].id, student_id, AttendanceStatusEnum.PRESENT),
    ]

    summary = summarize_attendance(batch, sessions, records)

    assert summary.total_sessions == 3
    assert summary.present_count == 2
    assert summary.absent_count == 0
    assert summary.attendance_percentage == 67
    assert summary.sessions[2].status == NOT_MARKED
    assert summary.sessions[0].status == "present"


def test_summary_without_sessions_has_zero_percentage() -> None:
    summary = summarize_attendance(make_batch(), [], [])

    assert summary.total_sessions == 0
    assert summary.attendance_percentage == 0


class FakeAttendanceRepository:
    def __init__(self, sessions: list[SimpleNamespace], records: list[SimpleNamespace]) -> None:
        self.sessions = sessions
        self.records = records

    async def list_sessions(self, batch_ids) -> list[SimpleNamespace]:
        wanted = set(batch_ids)
        return [session for session in self.sessions if session.batch_id in wanted]

    async def list_student_records(self, student_id: UUID, session_ids) -> list[SimpleNamespace]:
        wanted = set(session_ids)
        return [r for r in self.records if r.student_id == student_id and r.session_id in wanted]


class FakeEnrollmentRepository:
    def __init__(self, enrollments: list[SimpleNamespace]) -> None:
        self.enrollments = enrollments

    async def list_approved_enrollments(self, student_id: UUID) -> list[SimpleNamespace]:
        return [item for item in self.enrollments if item.student_id == student_id]


class FakeMergeResolver:
    def __init__(self, group: set[UUID]) -> None:
        self.group = group

    async def resolve_group(self, batch_id: UUID) -> set[UUID]:
        return set(self.group) if batch_id in self.group else {batch_id}


@pytest.mark.asyncio
async def test_batch_attendance_includes_sessions_of_merged_batches() -> None:
    batch = make_batch()
    sibling_id = uuid4()
    student_id = uuid4()
    own_session = make_session(batch.id, 1)
    shared_session = make_session(sibling_id, 2)
    service = AttendanceService(
        attendance_repository=FakeAttendanceRepository(
            [own_session, shared_session, make_session(uuid4(), 3)],
            [
                make_record(own_session.id, student_id, AttendanceStatusEnum.PRESENT),
                make_record(shared_session.id, student_id, AttendanceStatusEnum.LATE),
            ],
        ),  # type: ignore[arg-type]
        enrollment_repository=FakeEnrollmentRepository(
            [SimpleNamespace(student_id=student_id, batch_id=batch.id, batch=batch)],
        ),  # type: ignore[arg-type]
        merge_resolver=FakeMergeResolver({batch.id, sibling_id}),  # type: ignore[arg-type]
    )

    summary = await service.get_student_batch_attendance(SimpleNamespace(id=student_id), batch.id)

    assert summary.total_sessions == 2
    assert summary.present_count == 1
    assert summary.late_count == 1
    assert summary.attendance_percentage == 50


@pytest.mark.asyncio
async def test_batch_attendance_requires_approved_enrollment() -> None:
    service = AttendanceService(
        attendance_repository=FakeAttendanceRepository([], []),  # type: ignore[arg-type]
        enrollment_repository=FakeEnrollmentRepository([]),  # type: ignore[arg-type]
        merge_resolver=FakeMergeResolver(set()),  # type: ignore[arg-type]
    )

    with pytest.raises(NotFoundException):
        await service.get_student_batch_attendance(SimpleNamespace(id=uuid4()), uuid4())
