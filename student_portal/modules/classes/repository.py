"""Class materials repository layer."""

from __future__ import annotations

from collections.abc import Iterable
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from student_portal.modules.classes.models import ClassMeeting, ClassNote


class ClassesRepository:
    """DB operations for notes and meetings."""

    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    async def list_notes(self, batch_ids: Iterable[UUID]) -> list[ClassNote]:
        stmt = (
            select(ClassNote)
            .where(ClassNote.batch_id.in_(list(batch_ids)))
            .order_by(ClassNote.created_at.desc())
        )
        return (await self.session.scalars(stmt)).all()

    async def list_meetings(self, batch_ids: Iterable[UUID]) -> list[ClassMeeting]:
        stmt = (
            select(ClassMeeting)
            .where(ClassMeeting.batch_id.in_(list(batch_ids)))
            .order_by(ClassMeeting.meeting_date.asc(), ClassMeeting.meeting_time.asc())
        )
        return (await self.session.scalars(stmt)).all()
