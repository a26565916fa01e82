"""Batches repository layer."""

from __future__ import annotations

from collections.abc import AsyncIterator, Iterable
from contextlib import asynccontextmanager
from uuid import UUID

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from student_portal.core.enums import BatchStatusEnum
from student_portal.modules.batches.models import Batch, BatchMergeMember
from student_portal.modules.enrollment.models import Enrollment


class BatchesRepository:
    """DB operations for batches, merge groups and seat counts."""

    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    async def get_batch_by_id(self, batch_id: UUID) -> Batch | None:
        stmt = (
            select(Batch)
            .options(selectinload(Batch.course), selectinload(Batch.center))
            .where(Batch.id == batch_id)
        )
        return await self.session.scalar(stmt)

    @asynccontextmanager
    async def lock_batch(self, batch_id: UUID) -> AsyncIterator[Batch | None]:
        """Hold a row lock on the batch for the rest of the transaction.

        The block runs inside a savepoint: an exception raised by the caller undoes
        every write made while the lock was held.
        """
        async with self.session.begin_nested():
            stmt = select(Batch).where(Batch.id == batch_id).with_for_update()
            yield await self.session.scalar(stmt)

    async def list_center_batches(
        self,
        center_id: UUID,
        statuses: Iterable[BatchStatusEnum],
    ) -> list[Batch]:
        stmt = (
            select(Batch)
            .options(selectinload(Batch.course), selectinload(Batch.center))
            .where(Batch.center_id == center_id, Batch.status.in_(list(statuses)))
            .order_by(Batch.created_at.asc())
        )
        return (await self.session.scalars(stmt)).all()

    async def list_batches_by_ids(self, batch_ids: Iterable[UUID]) -> list[Batch]:
        ids = list(batch_ids)
        if not ids:
            return []
        stmt = (
            select(Batch)
            .options(selectinload(Batch.course), selectinload(Batch.center))
            .where(Batch.id.in_(ids))
            .order_by(Batch.created_at.asc())
        )
        return (await self.session.scalars(stmt)).all()

    async def list_student_batch_ids(self, student_id: UUID) -> list[UUID]:
        stmt = select(Enrollment.batch_id).where(Enrollment.student_id == student_id)
        return list((await self.session.scalars(stmt)).all())

    async def count_batch_enrollments(self, batch_id: UUID) -> int:
        stmt = select(func.count()).select_from(Enrollment).where(Enrollment.batch_id == batch_id)
        return int((await self.session.scalar(stmt)) or 0)

    async def count_enrollments_by_batch(self, batch_ids: Iterable[UUID]) -> dict[UUID, int]:
        ids = list(batch_ids)
        if not ids:
            return {}
        stmt = (
            select(Enrollment.batch_id, func.count())
            .where(Enrollment.batch_id.in_(ids))
            .group_by(Enrollment.batch_id)
        )
        rows = (await self.session.execute(stmt)).all()
        return {batch_id: int(count) for batch_id, count in rows}

    async def get_merge_group_id(self, batch_id: UUID) -> UUID | None:
        stmt = select(BatchMergeMember.merge_group_id).where(BatchMergeMember.batch_id == batch_id)
        return await self.session.scalar(stmt)

    async def list_merge_group_batch_ids(self, merge_group_id: UUID) -> list[UUID]:
        stmt = select(BatchMergeMember.batch_id).where(BatchMergeMember.merge_group_id == merge_group_id)
        return list((await self.session.scalars(stmt)).all())
