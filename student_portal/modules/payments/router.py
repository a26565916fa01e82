"""Payments API router."""

from __future__ import annotations

from uuid import UUID

from fastapi import APIRouter, Depends, Header, Query, Request, status
from fastapi.responses import PlainTextResponse

from student_portal.modules.payments.schemas import (
    CoursePaymentRead,
    ManualPaymentRequest,
    OrderCreateRequest,
    OrderRead,
    PaymentLockRead,
    PaymentLockRequest,
    PaymentVerifyRequest,
)
from student_portal.modules.payments.service import (
    PaymentLockService,
    PaymentService,
    get_payment_lock_service,
    get_payment_service,
)
from student_portal.modules.students.service import get_current_student
from student_portal.shared.pagination import Envelope, Page, build_page, get_pagination_params, ok

router = APIRouter(prefix="/payments", tags=["payments"])


@router.post("/lock", response_model=Envelope[PaymentLockRead], status_code=status.HTTP_201_CREATED)
async def lock_payment_mode(
    payload: PaymentLockRequest,
    service: PaymentLockService = Depends(get_payment_lock_service),
    current_student=Depends(get_current_student),
) -> Envelope[PaymentLockRead]:
    """Lock payment plan for an enrollment, or globally."""
    lock = await service.acquire_lock(current_student, payload.enrollment_id, payload.payment_type)
    return ok(PaymentLockRead.model_validate(lock))


@router.get("/lock", response_model=Envelope[PaymentLockRead])
async def get_payment_mode_lock(
    enrollment_id: UUID | None = Query(default=None),
    service: PaymentLockService = Depends(get_payment_lock_service),
    current_student=Depends(get_current_student),
) -> Envelope[PaymentLockRead]:
    lock = await service.get_lock(current_student, enrollment_id)
    return ok(PaymentLockRead.model_validate(lock))


@router.post("/orders", response_model=Envelope[OrderRead])
async def create_payment_order(
    payload: OrderCreateRequest,
    service: PaymentService = Depends(get_payment_service),
    current_student=Depends(get_current_student),
) -> Envelope[OrderRead]:
    """Create checkout order in the payment gateway."""
    return ok(await service.create_order(current_student, payload))


@router.post("/verify", response_model=Envelope[CoursePaymentRead])
async def verify_payment(
    payload: PaymentVerifyRequest,
    service: PaymentService = Depends(get_payment_service),
    current_student=Depends(get_current_student),
) -> Envelope[CoursePaymentRead]:
    """Verify checkout signature and store payment."""
    payment = await service.verify_payment(payload)
    return ok(CoursePaymentRead.model_validate(payment))


@router.post("/sync/{payment_id}", response_model=Envelope[CoursePaymentRead])
async def sync_payment(
    payment_id: str,
    service: PaymentService = Depends(get_payment_service),
    current_student=Depends(get_current_student),
) -> Envelope[CoursePaymentRead]:
    """Record a captured payment that never reached verify or webhook."""
    payment = await service.sync_payment(current_student, payment_id)
    return ok(CoursePaymentRead.model_validate(payment))


@router.post("/manual", response_model=Envelope[CoursePaymentRead], status_code=status.HTTP_201_CREATED)
async def record_manual_payment(
    payload: ManualPaymentRequest,
    service: PaymentService = Depends(get_payment_service),
    current_student=Depends(get_current_student),
) -> Envelope[CoursePaymentRead]:
    payment = await service.record_manual_payment(current_student, payload)
    return ok(CoursePaymentRead.model_validate(payment))


@router.get("/transactions", response_model=Envelope[Page[CoursePaymentRead]])
async def list_transactions(
    pagination=Depends(get_pagination_params),
    service: PaymentService = Depends(get_payment_service),
    current_student=Depends(get_current_student),
) -> Envelope[Page[CoursePaymentRead]]:
    """List payments of current student, newest first."""
    items, total = await service.list_transactions(current_student, pagination.limit, pagination.offset)
    return ok(build_page([CoursePaymentRead.model_validate(item) for item in items], total, pagination))


@router.post("/webhook", response_class=PlainTextResponse)
async def payment_webhook(
    request: Request,
    x_razorpay_signature: str | None = Header(default=None),
    service: PaymentService = Depends(get_payment_service),
) -> PlainTextResponse:
    """Gateway webhook; the signature is checked against the raw body."""
    raw_body = await request.body()
    return PlainTextResponse(await service.handle_webhook(raw_body, x_razorpay_signature))
