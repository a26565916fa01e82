"""Class materials shared across merged batches."""

from __future__ import annotations

from uuid import UUID

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from student_portal.core.database import get_db_session
from student_portal.modules.batches.repository import BatchesRepository
from student_portal.modules.batches.service import BatchMergeResolver
from student_portal.modules.classes.models import ClassMeeting, ClassNote
from student_portal.modules.classes.repository import ClassesRepository


class ClassesService:
    """Notes and meetings of a batch, including those of its merged batches."""

    def __init__(self, repository: ClassesRepository, merge_resolver: BatchMergeResolver) -> None:
        self.repository = repository
        self.merge_resolver = merge_resolver

    async def list_notes(self, batch_id: UUID) -> list[ClassNote]:
        batch_ids = await self.merge_resolver.resolve_group(batch_id)
        return await self.repository.list_notes(batch_ids)

    async def list_meetings(self, batch_id: UUID) -> list[ClassMeeting]:
        batch_ids = await self.merge_resolver.resolve_group(batch_id)
        return await self.repository.list_meetings(batch_ids)


async def get_classes_service(session: AsyncSession = Depends(get_db_session)) -> ClassesService:
    """Dependency provider for classes service."""
    return ClassesService(ClassesRepository(session), BatchMergeResolver(BatchesRepository(session)))
