from __future__ import annotations

import asyncio
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from dataclasses import dataclass
from datetime import date
from types import SimpleNamespace
from uuid import UUID, uuid4

import pytest

import student_portal.modules.enrollment.service as enrollment_service_module
from student_portal.core.enums import BatchStatusEnum
from student_portal.modules.batches.service import SeatAllocationService
from student_portal.modules.enrollment.repository import ALREADY_ENROLLED_MESSAGE
from student_portal.modules.enrollment.service import EnrollmentService
from student_portal.shared.exceptions import ConflictException, NotFoundException

FREE_COURSE = "ON-GR-FL-A1"


@dataclass
class FakeEnrollment:
    id: UUID
    student_id: UUID
    batch_id: UUID
    status: bool
    is_permanent: bool
    end_date: date | None = None


class FakeStore:
    def __init__(self) -> None:
        self.enrollments: list[FakeEnrollment] = []


class FakeBatchesRepository:
    def __init__(self, store: FakeStore, batches: list[SimpleNamespace]) -> None:
        self.store = store
        self.batches = {batch.id: batch for batch in batches}
        self._locks: dict[UUID, asyncio.Lock] = {}

    async def get_batch_by_id(self, batch_id: UUID) -> SimpleNamespace | None:
        return self.batches.get(batch_id)

    @asynccontextmanager
    async def lock_batch(self, batch_id: UUID) -> AsyncIterator[SimpleNamespace | None]:
        async with self._locks.setdefault(batch_id, asyncio.Lock()):
            yield self.batches.get(batch_id)

    async def count_batch_enrollments(self, batch_id: UUID) -> int:
        await asyncio.sleep(0)
        return sum(1 for item in self.store.enrollments if item.batch_id == batch_id)


class FakeEnrollmentRepository:
    def __init__(self, store: FakeStore) -> None:
        self.store = store

    async def get_enrollment(self, student_id: UUID, batch_id: UUID) -> FakeEnrollment | None:
        for item in self.store.enrollments:
            if item.student_id == student_id and item.batch_id == batch_id:
                return item
        return None

    async def create_enrollment(
        self,
        student_id: UUID,
        batch_id: UUID,
        status: bool,
        is_permanent: bool,
        end_date: date | None = None,
    ) -> FakeEnrollment:
        await asyncio.sleep(0)
        if await self.get_enrollment(student_id, batch_id) is not None:
            raise ConflictException(ALREADY_ENROLLED_MESSAGE)
        enrollment = FakeEnrollment(
            id=uuid4(),
            student_id=student_id,
            batch_id=batch_id,
            status=status,
            is_permanent=is_permanent,
            end_date=end_date,
        )
        self.store.enrollments.append(enrollment)
        return enrollment

    async def list_stale_enrollments(self, today: date, student_id: UUID | None = None) -> list[FakeEnrollment]:
        return [
            item
            for item in self.store.enrollments
            if item.end_date is not None
            and item.end_date < today
            and (student_id is None or item.student_id == student_id)
        ]

    async def save(self, enrollment: FakeEnrollment) -> FakeEnrollment:
        return enrollment


class FakeAuditRepository:
    def __init__(self) -> None:
        self.outbox: list[dict] = []

    async def create_outbox_event(self, aggregate_type: str, aggregate_id: str, event_type: str, payload: dict):
        event = {
            "aggregate_type": aggregate_type,
            "aggregate_id": aggregate_id,
            "event_type": event_type,
            "payload": payload,
        }
        self.outbox.append(event)
        return event


def make_batch(course_name: str = "ON-DE-FL-A1", max_students: int | None = None) -> SimpleNamespace:
    return SimpleNamespace(
        id=uuid4(),
        batch_name="DE-A1-MORNING",
        status=BatchStatusEnum.APPROVED,
        max_students=max_students,
        course=SimpleNamespace(course_name=course_name),
    )


def make_student() -> SimpleNamespace:
    return SimpleNamespace(id=uuid4(), registration_number=f"REG{uuid4().hex[:6]}")


def make_service(
    batches: list[SimpleNamespace],
) -> tuple[EnrollmentService, FakeStore, FakeAuditRepository]:
    store = FakeStore()
    batches_repo = FakeBatchesRepository(store, batches)
    audit_repo = FakeAuditRepository()
    service = EnrollmentService(
        enrollment_repository=FakeEnrollmentRepository(store),  # type: ignore[arg-type]
        batches_repository=batches_repo,  # type: ignore[arg-type]
        seat_allocation=SeatAllocationService(batches_repo, default_capacity=10),  # type: ignore[arg-type]
        audit_repository=audit_repo,  # type: ignore[arg-type]
        free_course_codes=(FREE_COURSE,),
    )
    return service, store, audit_repo


@pytest.mark.asyncio
async def test_free_course_enrollment_is_approved_and_permanent() -> None:
    batch = make_batch(course_name=FREE_COURSE)
    service, store, audit_repo = make_service([batch])

    result = await service.enroll(make_student(), batch.id)

    assert result.enrollment.status is True
    assert result.enrollment.is_permanent is True
    assert result.is_free_course is True
    assert result.seats_remaining == 9
    assert result.message == "Enrollment successful! You now have access to the course."
    assert len(store.enrollments) == 1
    assert audit_repo.outbox[0]["event_type"] == "enrollment.created"
    assert audit_repo.outbox[0]["payload"]["is_free_course"] is True


@pytest.mark.asyncio
async def test_paid_course_enrollment_waits_for_approval() -> None:
    batch = make_batch(max_students=5)
    service, _, _ = make_service([batch])

    result = await service.enroll(make_student(), batch.id)

    assert result.enrollment.status is False
    assert result.enrollment.is_permanent is False
    assert result.seats_remaining == 4
    assert result.message == "Enrollment successful, pending approval"


@pytest.mark.asyncio
async def test_enroll_into_unknown_batch_raises_not_found() -> None:
    service, store, _ = make_service([])

    with pytest.raises(NotFoundException):
        await service.enroll(make_student(), uuid4())
    assert store.enrollments == []


@pytest.mark.asyncio
async def test_repeat_enrollment_is_rejected() -> None:
    batch = make_batch()
    service, store, _ = make_service([batch])
    student = make_student()
    await service.enroll(student, batch.id)

    with pytest.raises(ConflictException) as exc:
        await service.enroll(student, batch.id)

    assert exc.value.message == ALREADY_ENROLLED_MESSAGE
    assert len(store.enrollments) == 1


@pytest.mark.asyncio
async def test_full_batch_rejects_enrollment_with_capacity_message() -> None:
    batch = make_batch(max_students=2)
    service, store, _ = make_service([batch])
    await service.enroll(make_student(), batch.id)
    await service.enroll(make_student(), batch.id)

    with pytest.raises(ConflictException) as exc:
        await service.enroll(make_student(), batch.id)

    assert exc.value.message == "Batch is full: maximum capacity of 2 students reached"
    assert len(store.enrollments) == 2


@pytest.mark.asyncio
async def test_concurrent_enrollments_fill_exactly_the_capacity() -> None:
    batch = make_batch(max_students=3)
    service, store, audit_repo = make_service([batch])

    results = await asyncio.gather(
        *(service.enroll(make_student(), batch.id) for _ in range(8)),
        return_exceptions=True,
    )

    successes = [item for item in results if not isinstance(item, Exception)]
    failures = [item for item in results if isinstance(item, Exception)]
    assert len(successes) == 3
    assert len(store.enrollments) == 3
    assert all(isinstance(item, ConflictException) for item in failures)
    assert sorted(item.seats_remaining for item in successes) == [0, 1, 2]
    assert len(audit_repo.outbox) == 3


@pytest.mark.asyncio
async def test_concurrent_duplicate_enrollment_creates_one_row() -> None:
    batch = make_batch()
    service, store, _ = make_service([batch])
    student = make_student()

    results = await asyncio.gather(
        service.enroll(student, batch.id),
        service.enroll(student, batch.id),
        return_exceptions=True,
    )

    failures = [item for item in results if isinstance(item, Exception)]
    assert len(store.enrollments) == 1
    assert len(failures) == 1
    assert isinstance(failures[0], ConflictException)
    assert failures[0].message == ALREADY_ENROLLED_MESSAGE


@pytest.mark.asyncio
async def test_expire_stale_revokes_access_and_keeps_permanent_rows(
    monkeypatch: pytest.MonkeyPatch,
) -> None:
    monkeypatch.setattr(enrollment_service_module, "utc_today", lambda: date(2026, 3, 10))
    service, store, audit_repo = make_service([])
    student_id = uuid4()
    stale_active = FakeEnrollment(uuid4(), student_id, uuid4(), True, False, date(2026, 3, 9))
    stale_inactive = FakeEnrollment(uuid4(), student_id, uuid4(), False, False, date(2026, 2, 1))
    permanent = FakeEnrollment(uuid4(), student_id, uuid4(), True, True, date(2026, 1, 1))
    ends_today = FakeEnrollment(uuid4(), student_id, uuid4(), True, False, date(2026, 3, 10))
    other_student = FakeEnrollment(uuid4(), uuid4(), uuid4(), True, False, date(2026, 3, 1))
    store.enrollments.extend([stale_active, stale_inactive, permanent, ends_today, other_student])

    expired = await service.expire_stale(student_id)

    assert expired == [stale_active]
    assert stale_active.status is False
    assert stale_inactive.status is False
    assert permanent.status is True
    assert ends_today.status is True
    assert other_student.status is True
    assert [event["event_type"] for event in audit_repo.outbox] == ["enrollment.expired"]
    assert audit_repo.outbox[0]["payload"]["end_date"] == "2026-03-09"


@pytest.mark.asyncio
async def test_expire_all_stale_covers_every_student(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(enrollment_service_module, "utc_today", lambda: date(2026, 3, 10))
    service, store, _ = make_service([])
    first = FakeEnrollment(uuid4(), uuid4(), uuid4(), True, False, date(2026, 3, 1))
    second = FakeEnrollment(uuid4(), uuid4(), uuid4(), True, False, date(2026, 3, 2))
    store.enrollments.extend([first, second])

    expired = await service.expire_all_stale()

    assert {item.id for item in expired} == {first.id, second.id}
    assert first.status is False and second.status is False
