"""Catalog ORM models: centers, courses, batches and merge groups."""

from __future__ import annotations

from datetime import date, time
from uuid import UUID

from sqlalchemy import Date, Enum as SAEnum, ForeignKey, Integer, String, Time
from sqlalchemy.orm import Mapped, mapped_column, relationship

from student_portal.core.database import Base, BaseModelMixin
from student_portal.core.enums import BatchStatusEnum


class Center(BaseModelMixin, Base):
    """Teaching center."""

    __tablename__ = "centers"

    name: Mapped[str] = mapped_column(String(255), nullable=False)
    state_id: Mapped[UUID | None] = mapped_column(
        ForeignKey("states.id", ondelete="SET NULL"),
        nullable=True,
        index=True,
    )


class Course(BaseModelMixin, Base):
    """Course offered by the institute; course_name is its catalog code."""

    __tablename__ = "courses"

    course_name: Mapped[str] = mapped_column(String(64), unique=True, nullable=False)
    type: Mapped[str | None] = mapped_column(String(64), nullable=True)
    language: Mapped[str | None] = mapped_column(String(64), nullable=True)
    level: Mapped[str | None] = mapped_column(String(32), nullable=True)
    mode: Mapped[str | None] = mapped_column(String(32), nullable=True)
    program: Mapped[str | None] = mapped_column(String(64), nullable=True)


class Batch(BaseModelMixin, Base):
    """Scheduled offering of a course to a group of students."""

    __tablename__ = "batches"

    batch_name: Mapped[str] = mapped_column(String(128), nullable=False)
    course_id: Mapped[UUID] = mapped_column(ForeignKey("courses.id", ondelete="RESTRICT"), nullable=False, index=True)
    center_id: Mapped[UUID] = mapped_column(ForeignKey("centers.id", ondelete="RESTRICT"), nullable=False, index=True)
    max_students: Mapped[int | None] = mapped_column(Integer, nullable=True)
    status: Mapped[BatchStatusEnum] = mapped_column(
        SAEnum(
            BatchStatusEnum,
            name="batch_status_enum",
            native_enum=False,
            values_callable=lambda enum: [member.value for member in enum],
        ),
        default=BatchStatusEnum.PENDING,
        nullable=False,
        index=True,
    )
    start_date: Mapped[date | None] = mapped_column(Date, nullable=True)
    end_date: Mapped[date | None] = mapped_column(Date, nullable=True)
    time_from: Mapped[time | None] = mapped_column(Time, nullable=True)
    time_to: Mapped[time | None] = mapped_column(Time, nullable=True)
    total_sessions: Mapped[int | None] = mapped_column(Integer, nullable=True)

    course: Mapped[Course] = relationship()
    center: Mapped[Center] = relationship()


class BatchMergeGroup(BaseModelMixin, Base):
    """Group of batches sharing sessions and materials."""

    __tablename__ = "batch_merge_groups"

    name: Mapped[str] = mapped_column(String(128), nullable=False)

    members: Mapped[list["BatchMergeMember"]] = relationship(
        back_populates="merge_group",
        cascade="all, delete-orphan",
    )


class BatchMergeMember(BaseModelMixin, Base):
    """Membership of one batch in a merge group."""

    __tablename__ = "batch_merge_members"

    merge_group_id: Mapped[UUID] = mapped_column(
        ForeignKey("batch_merge_groups.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    batch_id: Mapped[UUID] = mapped_column(
        ForeignKey("batches.id", ondelete="CASCADE"),
        nullable=False,
        unique=True,
    )

    merge_group: Mapped[BatchMergeGroup] = relationship(back_populates="members")
