"""Skill module ORM models: content, batch publishing, scored submissions and recorded attempts."""

from __future__ import annotations

from datetime import datetime
from uuid import UUID

from sqlalchemy import Boolean, DateTime, Enum as SAEnum, ForeignKey, Index, Integer, String, Text, UniqueConstraint, text
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import Mapped, mapped_column

from student_portal.core.database import Base, BaseModelMixin
from student_portal.core.enums import AttemptStatusEnum, SkillModuleEnum
from student_portal.shared.utils import utc_now


class SkillContent(BaseModelMixin, Base):
    """Learning material of a course; listening and reading items carry scored questions."""

    __tablename__ = "skill_contents"

    module_type: Mapped[SkillModuleEnum] = mapped_column(
        SAEnum(SkillModuleEnum, name="skill_module_enum", native_enum=False),
        nullable=False,
        index=True,
    )
    course_id: Mapped[UUID] = mapped_column(ForeignKey("courses.id", ondelete="CASCADE"), nullable=False, index=True)
    title: Mapped[str] = mapped_column(String(255), nullable=False)
    instruction: Mapped[str | None] = mapped_column(Text, nullable=True)
    media_url: Mapped[str | None] = mapped_column(String(1024), nullable=True)
    session_number: Mapped[int | None] = mapped_column(Integer, nullable=True)
    questions: Mapped[list] = mapped_column(JSONB, default=list, nullable=False)
    max_marks: Mapped[int] = mapped_column(Integer, default=0, nullable=False)


class SkillBatchMapping(BaseModelMixin, Base):
    """Publication of content to a batch."""

    __tablename__ = "skill_batch_mappings"
    __table_args__ = (UniqueConstraint("content_id", "batch_id"),)

    content_id: Mapped[UUID] = mapped_column(
        ForeignKey("skill_contents.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    batch_id: Mapped[UUID] = mapped_column(ForeignKey("batches.id", ondelete="CASCADE"), nullable=False, index=True)
    student_visible: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)


class SkillSubmission(BaseModelMixin, Base):
    """Single scored attempt of a student; rows are insert-only."""

    __tablename__ = "skill_submissions"
    __table_args__ = (UniqueConstraint("student_id", "content_id"),)

    student_id: Mapped[UUID] = mapped_column(ForeignKey("students.id", ondelete="CASCADE"), nullable=False, index=True)
    content_id: Mapped[UUID] = mapped_column(
        ForeignKey("skill_contents.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    batch_id: Mapped[UUID] = mapped_column(ForeignKey("batches.id", ondelete="CASCADE"), nullable=False)
    answers: Mapped[dict] = mapped_column(JSONB, default=dict, nullable=False)
    score: Mapped[int] = mapped_column(Integer, nullable=False)
    max_marks: Mapped[int] = mapped_column(Integer, nullable=False)
    correct_answers: Mapped[int] = mapped_column(Integer, nullable=False)
    total_questions: Mapped[int] = mapped_column(Integer, nullable=False)
    submitted_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utc_now, nullable=False)
    verified: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    verified_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)


class SkillAttempt(BaseModelMixin, Base):
    """Speaking or writing attempt; the recording or scan itself lives in object storage.

    A student keeps at most one submitted attempt per content item. Drafts are
    replaced on every save.
    """

    __tablename__ = "skill_attempts"
    __table_args__ = (
        Index(
            "uq_skill_attempts_submitted",
            "student_id",
            "content_id",
            unique=True,
            postgresql_where=text("status = 'SUBMITTED'"),
        ),
    )

    student_id: Mapped[UUID] = mapped_column(ForeignKey("students.id", ondelete="CASCADE"), nullable=False, index=True)
    content_id: Mapped[UUID] = mapped_column(
        ForeignKey("skill_contents.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    batch_id: Mapped[UUID] = mapped_column(ForeignKey("batches.id", ondelete="CASCADE"), nullable=False)
    media_url: Mapped[str] = mapped_column(String(1024), nullable=False)
    status: Mapped[AttemptStatusEnum] = mapped_column(
        SAEnum(AttemptStatusEnum, name="attempt_status_enum", native_enum=False),
        default=AttemptStatusEnum.DRAFT,
        nullable=False,
    )
    submitted_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    feedback: Mapped[str | None] = mapped_column(Text, nullable=True)
    marks: Mapped[int | None] = mapped_column(Integer, nullable=True)
    reviewed_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
