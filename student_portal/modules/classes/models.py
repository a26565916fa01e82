"""Class materials ORM models."""

from __future__ import annotations

from datetime import date, time
from uuid import UUID

from sqlalchemy import Date, ForeignKey, String, Text, Time
from sqlalchemy.orm import Mapped, mapped_column

from student_portal.core.database import Base, BaseModelMixin


class ClassNote(BaseModelMixin, Base):
    """Note or study material published to a batch."""

    __tablename__ = "class_notes"

    batch_id: Mapped[UUID] = mapped_column(ForeignKey("batches.id", ondelete="CASCADE"), nullable=False, index=True)
    title: Mapped[str] = mapped_column(String(255), nullable=False)
    content: Mapped[str | None] = mapped_column(Text, nullable=True)
    file_url: Mapped[str | None] = mapped_column(String(1024), nullable=True)


class ClassMeeting(BaseModelMixin, Base):
    """Scheduled online class of a batch."""

    __tablename__ = "class_meetings"

    batch_id: Mapped[UUID] = mapped_column(ForeignKey("batches.id", ondelete="CASCADE"), nullable=False, index=True)
    title: Mapped[str] = mapped_column(String(255), nullable=False)
    meet_link: Mapped[str] = mapped_column(String(1024), nullable=False)
    meeting_date: Mapped[date] = mapped_column(Date, nullable=False)
    meeting_time: Mapped[time | None] = mapped_column(Time, nullable=True)
