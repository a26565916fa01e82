"""Payments schemas."""

from __future__ import annotations

from datetime import date, datetime
from decimal import Decimal
from typing import Any
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

from student_portal.core.enums import PaymentSourceEnum, PaymentTypeEnum


class PaymentLockRequest(BaseModel):
    """Lock payment plan; without enrollment the lock is global."""

    enrollment_id: UUID | None = None
    payment_type: PaymentTypeEnum


class PaymentLockRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    register_number: str
    scope_key: str
    batch_id: UUID | None
    payment_type: PaymentTypeEnum
    created_at: datetime


class OrderCreateRequest(BaseModel):
    """Checkout order request; fee details travel to the gateway as order notes."""

    final_fees: Decimal = Field(gt=0)
    enrollment_id: UUID | None = None
    course_name: str | None = None
    course_duration: int = Field(default=0, ge=0)
    original_fees: Decimal = Field(default=Decimal("0"), ge=0)
    discount_percentage: Decimal = Field(default=Decimal("0"), ge=0, le=100)
    payment_type: PaymentTypeEnum = PaymentTypeEnum.FULL
    emi_duration: int | None = Field(default=None, ge=1)
    current_emi: int | None = Field(default=None, ge=1)


class OrderRead(BaseModel):
    order: dict[str, Any]
    key: str


class PaymentVerifyRequest(BaseModel):
    razorpay_order_id: str = Field(min_length=1)
    razorpay_payment_id: str = Field(min_length=1)
    razorpay_signature: str = Field(min_length=1)


class ManualPaymentRequest(BaseModel):
    """Payment reported by the student, pending admin verification."""

    enrollment_id: UUID
    amount: Decimal = Field(gt=0)
    payment_type: PaymentTypeEnum
    course_name: str | None = None
    course_duration: int = Field(default=0, ge=0)
    original_fees: Decimal | None = Field(default=None, ge=0)
    discount_percentage: Decimal = Field(default=Decimal("0"), ge=0, le=100)
    emi_duration: int | None = Field(default=None, ge=1)
    current_emi: int | None = Field(default=None, ge=1)


class CoursePaymentRead(BaseModel):
    """Course payment output schema."""

    model_config = ConfigDict(from_attributes=True)

    id: UUID
    registration_number: str
    enrollment_id: UUID | None
    student_name: str | None
    course_name: str | None
    course_duration: int
    original_fees: Decimal
    discount_percentage: Decimal
    final_fees: Decimal
    payment_type: PaymentTypeEnum
    emi_duration: int | None
    current_emi: int | None
    next_emi_due_date: date | None
    payment_id: str
    order_id: str | None
    bank_rrn: str | None
    source: PaymentSourceEnum
    status: bool
    created_at: datetime
