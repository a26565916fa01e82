"""Student ORM models."""

from __future__ import annotations

from typing import TYPE_CHECKING
from uuid import UUID

from sqlalchemy import Boolean, ForeignKey, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from student_portal.core.database import Base, BaseModelMixin

if TYPE_CHECKING:
    from student_portal.modules.batches.models import Center
    from student_portal.modules.enrollment.models import Enrollment
    from student_portal.modules.notifications.models import Notification


class Student(BaseModelMixin, Base):
    """Student account as registered by the admissions flow."""

    __tablename__ = "students"

    registration_number: Mapped[str] = mapped_column(String(64), unique=True, index=True, nullable=False)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    email: Mapped[str] = mapped_column(String(255), index=True, nullable=False)
    phone: Mapped[str | None] = mapped_column(String(32), nullable=True)
    is_active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)

    state_id: Mapped[UUID | None] = mapped_column(
        ForeignKey("states.id", ondelete="SET NULL"),
        nullable=True,
        index=True,
    )

    center_id: Mapped[UUID | None] = mapped_column(
        ForeignKey("centers.id", ondelete="SET NULL"),
        nullable=True,
        index=True,
    )
    center: Mapped["Center | None"] = relationship()

    enrollments: Mapped[list["Enrollment"]] = relationship(back_populates="student")
    notifications: Mapped[list["Notification"]] = relationship(back_populates="student")
