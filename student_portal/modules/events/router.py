"""Events and announcements API routers."""

from __future__ import annotations

from datetime import date

from fastapi import APIRouter, Depends, Query

from student_portal.modules.events.schemas import AcademicEventRead
from student_portal.modules.events.service import EventsService, get_events_service
from student_portal.shared.pagination import Envelope, ok

router = APIRouter(prefix="/events", tags=["events"])
announcements_router = APIRouter(prefix="/announcements", tags=["announcements"])


@router.get("/upcoming", response_model=Envelope[list[AcademicEventRead]])
async def list_upcoming_events(
    limit: int = Query(default=10, ge=1, le=100),
    service: EventsService = Depends(get_events_service),
) -> Envelope[list[AcademicEventRead]]:
    """List active events that have not ended yet."""
    events = await service.list_upcoming(limit)
    return ok([AcademicEventRead.model_validate(item) for item in events])


@router.get("/range", response_model=Envelope[list[AcademicEventRead]])
async def list_events_in_range(
    start_date: date = Query(...),
    end_date: date = Query(...),
    service: EventsService = Depends(get_events_service),
) -> Envelope[list[AcademicEventRead]]:
    events = await service.list_in_range(start_date, end_date)
    return ok([AcademicEventRead.model_validate(item) for item in events])


@announcements_router.get("/upcoming", response_model=Envelope[list[AcademicEventRead]])
async def list_upcoming_announcements(
    service: EventsService = Depends(get_events_service),
) -> Envelope[list[AcademicEventRead]]:
    """Next ten active events for the announcements panel."""
    events = await service.list_upcoming(10)
    return ok([AcademicEventRead.model_validate(item) for item in events])


@announcements_router.get("/range", response_model=Envelope[list[AcademicEventRead]])
async def list_announcements_in_range(
    start_date: date = Query(...),
    end_date: date = Query(...),
    service: EventsService = Depends(get_events_service),
) -> Envelope[list[AcademicEventRead]]:
    """Every active event starting in the range, including those already over."""
    events = await service.list_in_range(start_date, end_date, hide_ended=False)
    return ok([AcademicEventRead.model_validate(item) for item in events])
