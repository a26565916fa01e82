"""Notifications schemas."""

from __future__ import annotations

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, ConfigDict

from student_portal.core.enums import NotificationStatusEnum


class NotificationRead(BaseModel):
    """Notification response schema."""

    model_config = ConfigDict(from_attributes=True)

    id: UUID
    student_id: UUID
    channel: str
    title: str
    body: str
    status: NotificationStatusEnum
    is_read: bool
    sent_at: datetime | None
    created_at: datetime
