"""Payments ORM models."""

from __future__ import annotations

from datetime import date
from decimal import Decimal
from typing import TYPE_CHECKING
from uuid import UUID

from sqlalchemy import Boolean, Date, Enum as SAEnum, ForeignKey, Integer, Numeric, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from student_portal.core.database import Base, BaseModelMixin
from student_portal.core.enums import PaymentSourceEnum, PaymentTypeEnum

if TYPE_CHECKING:
    from student_portal.modules.enrollment.models import Enrollment

GLOBAL_LOCK_SCOPE = "global"


class PaymentLock(BaseModelMixin, Base):
    """Payment plan chosen by a student for one batch, or globally.

    Rows are written once and never updated.
    """

    __tablename__ = "payment_locks"
    __table_args__ = (UniqueConstraint("register_number", "scope_key"),)

    register_number: Mapped[str] = mapped_column(String(64), nullable=False, index=True)
    scope_key: Mapped[str] = mapped_column(String(64), nullable=False)
    batch_id: Mapped[UUID | None] = mapped_column(
        ForeignKey("batches.id", ondelete="CASCADE"),
        nullable=True,
        index=True,
    )
    payment_type: Mapped[PaymentTypeEnum] = mapped_column(
        SAEnum(PaymentTypeEnum, name="payment_type_enum", native_enum=False),
        nullable=False,
    )


class CoursePayment(BaseModelMixin, Base):
    """Course fee payment; ``payment_id`` is the gateway's idempotency key."""

    __tablename__ = "course_payments"

    registration_number: Mapped[str] = mapped_column(String(64), nullable=False, index=True)
    enrollment_id: Mapped[UUID | None] = mapped_column(
        ForeignKey("enrollments.id", ondelete="SET NULL"),
        nullable=True,
        index=True,
    )
    student_name: Mapped[str | None] = mapped_column(String(255), nullable=True)
    email: Mapped[str | None] = mapped_column(String(255), nullable=True)
    contact: Mapped[str | None] = mapped_column(String(32), nullable=True)
    course_name: Mapped[str | None] = mapped_column(String(128), nullable=True)
    course_duration: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    original_fees: Mapped[Decimal] = mapped_column(Numeric(12, 2), default=Decimal("0"), nullable=False)
    discount_percentage: Mapped[Decimal] = mapped_column(Numeric(5, 2), default=Decimal("0"), nullable=False)
    final_fees: Mapped[Decimal] = mapped_column(Numeric(12, 2), default=Decimal("0"), nullable=False)
    payment_type: Mapped[PaymentTypeEnum] = mapped_column(
        SAEnum(PaymentTypeEnum, name="payment_type_enum", native_enum=False),
        default=PaymentTypeEnum.FULL,
        nullable=False,
    )
    emi_duration: Mapped[int | None] = mapped_column(Integer, nullable=True)
    current_emi: Mapped[int | None] = mapped_column(Integer, nullable=True)
    next_emi_due_date: Mapped[date | None] = mapped_column(Date, nullable=True)
    payment_id: Mapped[str] = mapped_column(String(128), unique=True, nullable=False)
    order_id: Mapped[str | None] = mapped_column(String(128), nullable=True, index=True)
    bank_rrn: Mapped[str | None] = mapped_column(String(128), nullable=True)
    source: Mapped[PaymentSourceEnum] = mapped_column(
        SAEnum(PaymentSourceEnum, name="payment_source_enum", native_enum=False),
        default=PaymentSourceEnum.CHECKOUT,
        nullable=False,
    )
    status: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False, index=True)

    enrollment: Mapped["Enrollment | None"] = relationship()
