"""Academic calendar feeds for the events page and the announcements panel."""

from __future__ import annotations

from collections.abc import Callable
from datetime import date

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from student_portal.core.database import get_db_session
from student_portal.modules.events.models import AcademicEvent
from student_portal.modules.events.repository import EventsRepository
from student_portal.shared.exceptions import ValidationException
from student_portal.shared.utils import utc_today


def has_ended(event: AcademicEvent, today: date) -> bool:
    """An event is over once its last day, or its only day, lies before ``today``."""
    last_day = event.event_end_date or event.event_start_date
    return last_day < today


class EventsService:
    def __init__(
        self,
        repository: EventsRepository,
        today_provider: Callable[[], date] = utc_today,
    ) -> None:
        self.repository = repository
        self.today_provider = today_provider

    async def list_upcoming(self, limit: int = 10) -> list[AcademicEvent]:
        """Active events starting today or later."""
        today = self.today_provider()
        events = await self.repository.list_active_events(start_from=today, limit=limit)
        return [event for event in events if not has_ended(event, today)]

    async def list_in_range(
        self,
        start_date: date,
        end_date: date,
        *,
        hide_ended: bool = True,
    ) -> list[AcademicEvent]:
        """Active events starting between the two dates, both inclusive."""
        if start_date > end_date:
            raise ValidationException("start_date must not be after end_date")

        events = await self.repository.list_active_events(start_from=start_date, start_to=end_date)
        if not hide_ended:
            return events
        today = self.today_provider()
        return [event for event in events if not has_ended(event, today)]


async def get_events_service(session: AsyncSession = Depends(get_db_session)) -> EventsService:
    """Dependency provider for events service."""
    return EventsService(EventsRepository(session))
