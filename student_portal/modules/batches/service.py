"""Merge-group resolution and seat allocation for batches."""

from __future__ import annotations

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from dataclasses import dataclass
from uuid import UUID

from fastapi import Depends
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from student_portal.core.config import get_settings
from student_portal.core.database import get_db_session
from student_portal.core.enums import BatchStatusEnum, SeatReservationStatusEnum
from student_portal.modules.batches.models import Batch
from student_portal.modules.batches.repository import BatchesRepository
from student_portal.modules.batches.schemas import BatchAvailabilityRead, CenterBatchesRead, CourseRead
from student_portal.modules.students.schemas import CenterRead
from student_portal.shared.exceptions import NotFoundException

logger = logging.getLogger(__name__)


@dataclass(slots=True, frozen=True)
class SeatOccupancy:
    batch_id: UUID
    capacity: int
    enrolled_count: int

    @property
    def available(self) -> int:
        """Negative when a batch is over-subscribed, e.g. after capacity was lowered."""
        return self.capacity - self.enrolled_count

    @property
    def is_full(self) -> bool:
        return self.enrolled_count >= self.capacity


@dataclass(slots=True, frozen=True)
class SeatReservation:
    status: SeatReservationStatusEnum
    occupancy: SeatOccupancy | None = None

    @property
    def ok(self) -> bool:
        return self.status == SeatReservationStatusEnum.OK


class BatchMergeResolver:
    """Expands a batch into the set of batches sharing its merge group."""

    def __init__(self, repository: BatchesRepository) -> None:
        self.repository = repository

    async def resolve_group(self, batch_id: UUID) -> set[UUID]:
        """Return every batch id in the merge group of ``batch_id``.

        A batch outside any group resolves to itself. Lookup failures degrade to the
        same single-batch answer so that read paths keep working.
        """
        try:
            merge_group_id = await self.repository.get_merge_group_id(batch_id)
            if merge_group_id is None:
                return {batch_id}
            member_ids = await self.repository.list_merge_group_batch_ids(merge_group_id)
        except SQLAlchemyError:
            logger.exception("Merge group lookup failed for batch %s", batch_id)
            return {batch_id}

        group = set(member_ids)
        group.add(batch_id)
        return group


class SeatAllocationService:
    """Capacity accounting for batches."""

    def __init__(self, repository: BatchesRepository, default_capacity: int = 10) -> None:
        self.repository = repository
        self.default_capacity = default_capacity

    def capacity_for(self, batch: Batch) -> int:
        """Effective capacity; unset or zero max_students falls back to the default."""
        if batch.max_students is None or batch.max_students <= 0:
            return self.default_capacity
        return batch.max_students

    async def get_occupancy(self, batch_id: UUID) -> SeatOccupancy:
        batch = await self.repository.get_batch_by_id(batch_id)
        if batch is None:
            raise NotFoundException("Batch not found")
        enrolled_count = await self.repository.count_batch_enrollments(batch.id)
        return SeatOccupancy(batch_id=batch.id, capacity=self.capacity_for(batch), enrolled_count=enrolled_count)

    @asynccontextmanager
    async def try_reserve_seat(self, batch_id: UUID) -> AsyncIterator[SeatReservation]:
        """Check capacity under the batch row lock.

        The enrollment insert must happen inside the ``async with`` block so that the
        count and the insert are serialized against concurrent reservations.
        """
        async with self.repository.lock_batch(batch_id) as batch:
            if batch is None:
                yield SeatReservation(status=SeatReservationStatusEnum.NOT_FOUND)
                return

            enrolled_count = await self.repository.count_batch_enrollments(batch.id)
            occupancy = SeatOccupancy(
                batch_id=batch.id,
                capacity=self.capacity_for(batch),
                enrolled_count=enrolled_count,
            )
            status = SeatReservationStatusEnum.FULL if occupancy.is_full else SeatReservationStatusEnum.OK
            yield SeatReservation(status=status, occupancy=occupancy)

    async def list_center_batches(self, center_id: UUID, student_id: UUID) -> CenterBatchesRead:
        """List open batches of a center together with the student's own batches.

        Full batches are hidden unless the student is already enrolled in them.
        """
        approved = await self.repository.list_center_batches(center_id, [BatchStatusEnum.APPROVED])
        enrolled_ids = set(await self.repository.list_student_batch_ids(student_id))

        batches: dict[UUID, Batch] = {}
        for batch in await self.repository.list_batches_by_ids(enrolled_ids):
            batches[batch.id] = batch
        for batch in approved:
            batches[batch.id] = batch

        counts = await self.repository.count_enrollments_by_batch(batches.keys())

        items: list[BatchAvailabilityRead] = []
        for batch in batches.values():
            occupancy = SeatOccupancy(
                batch_id=batch.id,
                capacity=self.capacity_for(batch),
                enrolled_count=counts.get(batch.id, 0),
            )
            is_student_enrolled = batch.id in enrolled_ids
            if occupancy.is_full and not is_student_enrolled:
                continue
            items.append(
                BatchAvailabilityRead(
                    id=batch.id,
                    batch_name=batch.batch_name,
                    status=batch.status,
                    course=CourseRead.model_validate(batch.course),
                    center=CenterRead.model_validate(batch.center),
                    start_date=batch.start_date,
                    end_date=batch.end_date,
                    time_from=batch.time_from,
                    time_to=batch.time_to,
                    total_sessions=batch.total_sessions,
                    max_students=occupancy.capacity,
                    enrolled_students=occupancy.enrolled_count,
                    available_seats=occupancy.available,
                    is_full=occupancy.is_full,
                    is_student_enrolled=is_student_enrolled,
                ),
            )

        return CenterBatchesRead(
            batches=items,
            total_batches=len(items),
            available_batches=sum(1 for item in items if not item.is_full),
            enrolled_batches=sum(1 for item in items if item.is_student_enrolled),
            full_batches=sum(1 for item in items if item.is_full),
        )


async def get_merge_resolver(session: AsyncSession = Depends(get_db_session)) -> BatchMergeResolver:
    """Dependency provider for merge resolver."""
    return BatchMergeResolver(BatchesRepository(session))


async def get_seat_allocation_service(
    session: AsyncSession = Depends(get_db_session),
) -> SeatAllocationService:
    """Dependency provider for seat allocation service."""
    return SeatAllocationService(
        BatchesRepository(session),
        default_capacity=get_settings().default_batch_capacity,
    )
