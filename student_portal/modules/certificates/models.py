"""Assessment marks and certificate ORM models."""

from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from uuid import UUID

from sqlalchemy import DateTime, Enum as SAEnum, ForeignKey, Numeric, String, Text, UniqueConstraint
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import Mapped, mapped_column

from student_portal.core.database import Base, BaseModelMixin
from student_portal.core.enums import AssessmentStatusEnum, CertificateStatusEnum


class AssessmentMark(BaseModelMixin, Base):
    """Final assessment marks of a student in a batch, entered by the tutor."""

    __tablename__ = "assessment_marks"
    __table_args__ = (UniqueConstraint("student_id", "batch_id"),)

    student_id: Mapped[UUID] = mapped_column(ForeignKey("students.id", ondelete="CASCADE"), nullable=False, index=True)
    batch_id: Mapped[UUID] = mapped_column(ForeignKey("batches.id", ondelete="CASCADE"), nullable=False, index=True)
    marks: Mapped[dict] = mapped_column(JSONB, default=dict, nullable=False)
    total_marks: Mapped[Decimal | None] = mapped_column(Numeric(6, 2), nullable=True)
    max_marks: Mapped[Decimal | None] = mapped_column(Numeric(6, 2), nullable=True)
    grade: Mapped[str | None] = mapped_column(String(16), nullable=True)
    remarks: Mapped[str | None] = mapped_column(Text, nullable=True)
    status: Mapped[AssessmentStatusEnum] = mapped_column(
        SAEnum(AssessmentStatusEnum, name="assessment_status_enum", native_enum=False),
        default=AssessmentStatusEnum.DRAFT,
        nullable=False,
    )


class GeneratedCertificate(BaseModelMixin, Base):
    """Completion certificate; the PDF itself lives in object storage."""

    __tablename__ = "generated_certificates"

    student_id: Mapped[UUID] = mapped_column(ForeignKey("students.id", ondelete="CASCADE"), nullable=False, index=True)
    batch_id: Mapped[UUID] = mapped_column(ForeignKey("batches.id", ondelete="CASCADE"), nullable=False, index=True)
    certificate_number: Mapped[str] = mapped_column(String(64), unique=True, nullable=False)
    certificate_url: Mapped[str | None] = mapped_column(String(1024), nullable=True)
    status: Mapped[CertificateStatusEnum] = mapped_column(
        SAEnum(CertificateStatusEnum, name="certificate_status_enum", native_enum=False),
        default=CertificateStatusEnum.PENDING,
        nullable=False,
    )
    generated_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
