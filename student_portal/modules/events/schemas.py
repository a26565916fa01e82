"""Events schemas."""

from __future__ import annotations

from datetime import date, time
from uuid import UUID

from pydantic import BaseModel, ConfigDict

from student_portal.core.enums import EventStatusEnum


class AcademicEventRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    title: str
    description: str | None
    event_type: str | None
    event_start_date: date
    event_end_date: date | None
    event_start_time: time | None
    event_end_time: time | None
    status: EventStatusEnum
