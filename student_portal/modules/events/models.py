"""Academic calendar ORM models."""

from __future__ import annotations

from datetime import date, time

from sqlalchemy import Date, Enum as SAEnum, String, Text, Time
from sqlalchemy.orm import Mapped, mapped_column

from student_portal.core.database import Base, BaseModelMixin
from student_portal.core.enums import EventStatusEnum


class AcademicEvent(BaseModelMixin, Base):
    """Institute-wide calendar entry such as a holiday, exam or workshop."""

    __tablename__ = "academic_events"

    title: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    event_type: Mapped[str | None] = mapped_column(String(64), nullable=True)
    event_start_date: Mapped[date] = mapped_column(Date, nullable=False, index=True)
    event_end_date: Mapped[date | None] = mapped_column(Date, nullable=True)
    event_start_time: Mapped[time | None] = mapped_column(Time, nullable=True)
    event_end_time: Mapped[time | None] = mapped_column(Time, nullable=True)
    status: Mapped[EventStatusEnum] = mapped_column(
        SAEnum(EventStatusEnum, name="event_status_enum", native_enum=False),
        default=EventStatusEnum.ACTIVE,
        nullable=False,
        index=True,
    )
