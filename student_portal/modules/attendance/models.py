"""Attendance ORM models."""

from __future__ import annotations

from datetime import date, datetime
from uuid import UUID

from sqlalchemy import Date, DateTime, Enum as SAEnum, ForeignKey, Text, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from student_portal.core.database import Base, BaseModelMixin
from student_portal.core.enums import AttendanceStatusEnum


class AttendanceSession(BaseModelMixin, Base):
    """One held class of a batch."""

    __tablename__ = "attendance_sessions"

    batch_id: Mapped[UUID] = mapped_column(ForeignKey("batches.id", ondelete="CASCADE"), nullable=False, index=True)
    session_date: Mapped[date] = mapped_column(Date, nullable=False)
    notes: Mapped[str | None] = mapped_column(Text, nullable=True)


class AttendanceRecord(BaseModelMixin, Base):
    """Attendance mark of a student for a session."""

    __tablename__ = "attendance_records"
    __table_args__ = (UniqueConstraint("session_id", "student_id"),)

    session_id: Mapped[UUID] = mapped_column(
        ForeignKey("attendance_sessions.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    student_id: Mapped[UUID] = mapped_column(ForeignKey("students.id", ondelete="CASCADE"), nullable=False, index=True)
    status: Mapped[AttendanceStatusEnum] = mapped_column(
        SAEnum(AttendanceStatusEnum, name="attendance_status_enum", native_enum=False),
        nullable=False,
    )
    marked_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
