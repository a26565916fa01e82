from __future__ import annotations

from datetime import date, time
from types import SimpleNamespace
from uuid import uuid4

import pytest

from student_portal.core.enums import EventStatusEnum
from student_portal.modules.events.schemas import AcademicEventRead
from student_portal.modules.events.service import EventsService, has_ended
from student_portal.shared.exceptions import ValidationException

TODAY = date(2026, 3, 10)


class FakeEventsRepository:
    """Mirrors the start-date window the real query applies."""

    def __init__(self, events: list[SimpleNamespace]) -> None:
        self.events = events
        self.calls: list[dict] = []

    async def list_active_events(self, start_from: date, start_to: date | None = None, limit: int | None = None):
        self.calls.append({"start_from": start_from, "start_to": start_to, "limit": limit})
        selected = [
            event
            for event in sorted(self.events, key=lambda item: item.event_start_date)
            if event.status == EventStatusEnum.ACTIVE
            and event.event_start_date >= start_from
            and (start_to is None or event.event_start_date <= start_to)
        ]
        return selected[:limit] if limit is not None else selected


def make_event(start: date, end: date | None = None, *, title: str = "Event", status=EventStatusEnum.ACTIVE):
    return SimpleNamespace(
        id=uuid4(),
        title=title,
        description=None,
        event_type="holiday",
        event_start_date=start,
        event_end_date=end,
        event_start_time=time(10, 0),
        event_end_time=None,
        status=status,
    )


def test_event_ends_on_its_last_day() -> None:
    assert has_ended(make_event(date(2026, 3, 9)), TODAY) is True
    assert has_ended(make_event(date(2026, 3, 10)), TODAY) is False
    assert has_ended(make_event(date(2026, 3, 1), date(2026, 3, 10)), TODAY) is False


@pytest.mark.asyncio
async def test_upcoming_feed_starts_today_and_respects_limit() -> None:
    today_event = make_event(TODAY, title="Today")
    later = make_event(date(2026, 3, 20), title="Later")
    much_later = make_event(date(2026, 4, 1), title="Much later")
    inactive = make_event(date(2026, 3, 15), status=EventStatusEnum.INACTIVE)
    past = make_event(date(2026, 3, 1))
    repository = FakeEventsRepository([much_later, inactive, past, later, today_event])
    service = EventsService(repository, today_provider=lambda: TODAY)  # type: ignore[arg-type]

    events = await service.list_upcoming(limit=2)

    assert [event.title for event in events] == ["Today", "Later"]
    assert repository.calls == [{"start_from": TODAY, "start_to": None, "limit": 2}]
    assert AcademicEventRead.model_validate(events[0]).event_start_date == TODAY


@pytest.mark.asyncio
async def test_range_feed_hides_ended_events() -> None:
    ended = make_event(date(2026, 3, 2), date(2026, 3, 5), title="Ended")
    running = make_event(date(2026, 3, 8), date(2026, 3, 12), title="Running")
    upcoming = make_event(date(2026, 3, 25), title="Upcoming")
    outside = make_event(date(2026, 4, 2), title="Outside")
    service = EventsService(
        FakeEventsRepository([ended, running, upcoming, outside]),  # type: ignore[arg-type]
        today_provider=lambda: TODAY,
    )

    events = await service.list_in_range(date(2026, 3, 1), date(2026, 3, 31))

    assert [event.title for event in events] == ["Running", "Upcoming"]


@pytest.mark.asyncio
async def test_announcement_range_keeps_ended_events() -> None:
    ended = make_event(date(2026, 3, 2), date(2026, 3, 5), title="Ended")
    upcoming = make_event(date(2026, 3, 25), title="Upcoming")
    service = EventsService(
        FakeEventsRepository([ended, upcoming]),  # type: ignore[arg-type]
        today_provider=lambda: TODAY,
    )

    events = await service.list_in_range(date(2026, 3, 1), date(2026, 3, 31), hide_ended=False)

    assert [event.title for event in events] == ["Ended", "Upcoming"]


@pytest.mark.asyncio
async def test_range_with_start_after_end_is_rejected() -> None:
    repository = FakeEventsRepository([])
    service = EventsService(repository, today_provider=lambda: TODAY)  # type: ignore[arg-type]

    with pytest.raises(ValidationException) as exc:
        await service.list_in_range(date(2026, 3, 31), date(2026, 3, 1))

    assert exc.value.message == "start_date must not be after end_date"
    assert repository.calls == []
