"""Enrollment ORM models."""

from __future__ import annotations

from datetime import date
from typing import TYPE_CHECKING
from uuid import UUID

from sqlalchemy import Boolean, Date, ForeignKey, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from student_portal.core.database import Base, BaseModelMixin

if TYPE_CHECKING:
    from student_portal.modules.batches.models import Batch
    from student_portal.modules.students.models import Student


class Enrollment(BaseModelMixin, Base):
    """Student membership in a batch.

    ``status`` is true once access is approved. ``is_permanent`` rows never expire.
    """

    __tablename__ = "enrollments"
    __table_args__ = (UniqueConstraint("student_id", "batch_id"),)

    student_id: Mapped[UUID] = mapped_column(ForeignKey("students.id", ondelete="CASCADE"), nullable=False, index=True)
    batch_id: Mapped[UUID] = mapped_column(ForeignKey("batches.id", ondelete="CASCADE"), nullable=False, index=True)
    status: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    is_permanent: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    end_date: Mapped[date | None] = mapped_column(Date, nullable=True)

    student: Mapped["Student"] = relationship(back_populates="enrollments")
    batch: Mapped["Batch"] = relationship()
