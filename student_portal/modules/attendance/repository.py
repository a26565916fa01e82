"""Attendance repository layer."""

from __future__ import annotations

from collections.abc import Iterable
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from student_portal.modules.attendance.models import AttendanceRecord, AttendanceSession


class AttendanceRepository:
    """DB operations for attendance sessions and records."""

    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    async def list_sessions(self, batch_ids: Iterable[UUID]) -> list[AttendanceSession]:
        ids = list(batch_ids)
        if not ids:
            return []
        stmt = (
            select(AttendanceSession)
            .where(AttendanceSession.batch_id.in_(ids))
            .order_by(AttendanceSession.session_date.desc())
        )
        return (await self.session.scalars(stmt)).all()

    async def list_student_records(self, student_id: UUID, session_ids: Iterable[UUID]) -> list[AttendanceRecord]:
        ids = list(session_ids)
        if not ids:
            return []
        stmt = select(AttendanceRecord).where(
            AttendanceRecord.student_id == student_id,
            AttendanceRecord.session_id.in_(ids),
        )
        return (await self.session.scalars(stmt)).all()
