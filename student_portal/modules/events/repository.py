"""Events repository layer."""

from __future__ import annotations

from datetime import date

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from student_portal.core.enums import EventStatusEnum
from student_portal.modules.events.models import AcademicEvent


class EventsRepository:
    """DB operations for academic calendar events."""

    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    async def list_active_events(
        self,
        start_from: date,
        start_to: date | None = None,
        limit: int | None = None,
    ) -> list[AcademicEvent]:
        """Active events starting within the window, earliest first."""
        stmt = select(AcademicEvent).where(
            AcademicEvent.status == EventStatusEnum.ACTIVE,
            AcademicEvent.event_start_date >= start_from,
        )
        if start_to is not None:
            stmt = stmt.where(AcademicEvent.event_start_date <= start_to)
        stmt = stmt.order_by(
            AcademicEvent.event_start_date.asc(),
            AcademicEvent.event_start_time.asc().nulls_first(),
        )
        if limit is not None:
            stmt = stmt.limit(limit)
        return (await self.session.scalars(stmt)).all()
