"""Class materials schemas."""

from __future__ import annotations

from datetime import date, datetime, time
from uuid import UUID

from pydantic import BaseModel, ConfigDict


class ClassNoteRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    batch_id: UUID
    title: str
    content: str | None
    file_url: str | None
    created_at: datetime


class ClassMeetingRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    batch_id: UUID
    title: str
    meet_link: str
    meeting_date: date
    meeting_time: time | None
