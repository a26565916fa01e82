"""Payment-mode locking, checkout orders and payment reconciliation."""

from __future__ import annotations

import json
import logging
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from typing import Any
from uuid import UUID, uuid4

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from student_portal.core.config import get_settings
from student_portal.core.database import get_db_session
from student_portal.core.enums import PaymentSourceEnum, PaymentTypeEnum
from student_portal.core.metrics import record_payment_webhook
from student_portal.modules.audit.repository import AuditRepository
from student_portal.modules.enrollment.repository import EnrollmentRepository
from student_portal.modules.payments.gateway import (
    PaymentGateway,
    get_payment_gateway,
    verify_payment_signature,
    verify_webhook_signature,
)
from student_portal.modules.payments.models import GLOBAL_LOCK_SCOPE, CoursePayment, PaymentLock
from student_portal.modules.payments.repository import PaymentsRepository
from student_portal.modules.payments.schemas import (
    ManualPaymentRequest,
    OrderCreateRequest,
    OrderRead,
    PaymentVerifyRequest,
)
from student_portal.modules.students.models import Student
from student_portal.shared.exceptions import (
    BusinessRuleException,
    ConflictException,
    NotFoundException,
    SecurityException,
    SignatureException,
)
from student_portal.shared.utils import utc_now

logger = logging.getLogger(__name__)

CAPTURED_EVENT = "payment.captured"
CAPTURED_STATUS = "captured"


def _to_int(value: Any) -> int:
    try:
        return int(Decimal(str(value)))
    except (InvalidOperation, ValueError, TypeError):
        return 0


def _to_decimal(value: Any) -> Decimal:
    try:
        result = Decimal(str(value))
    except (InvalidOperation, ValueError, TypeError):
        return Decimal("0")
    return result if result.is_finite() else Decimal("0")


def _to_uuid(value: Any) -> UUID | None:
    if not value:
        return None
    try:
        return UUID(str(value))
    except ValueError:
        return None


def _to_payment_type(value: Any) -> PaymentTypeEnum:
    try:
        return PaymentTypeEnum(str(value).lower())
    except ValueError:
        return PaymentTypeEnum.FULL


def bank_reference(payment: dict[str, Any]) -> str | None:
    """Bank RRN, falling back to the UPI transaction id for wallet and UPI payments."""
    acquirer = payment.get("acquirer_data") or {}
    return acquirer.get("rrn") or acquirer.get("upi_transaction_id") or None


def amount_in_paise(amount: Decimal) -> int:
    return int((amount * 100).quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def captured_payment_entity(body: dict[str, Any]) -> dict[str, Any]:
    """Payment entity of a ``payment.captured`` body; empty when any level is malformed."""
    payload = body.get("payload")
    payment = payload.get("payment") if isinstance(payload, dict) else None
    entity = payment.get("entity") if isinstance(payment, dict) else None
    return entity if isinstance(entity, dict) else {}


class PaymentLockService:
    """Fixes a student's payment plan per batch, or globally when no batch is given."""

    def __init__(
        self,
        payments_repository: PaymentsRepository,
        enrollment_repository: EnrollmentRepository,
        audit_repository: AuditRepository,
    ) -> None:
        self.payments_repository = payments_repository
        self.enrollment_repository = enrollment_repository
        self.audit_repository = audit_repository

    async def resolve_scope(self, student: Student, enrollment_id: UUID | None) -> tuple[str, UUID | None]:
        """Return lock scope key and batch id for the enrollment."""
        if enrollment_id is None:
            return GLOBAL_LOCK_SCOPE, None

        enrollment = await self.enrollment_repository.get_enrollment_by_id(enrollment_id)
        if enrollment is None or enrollment.student_id != student.id:
            raise NotFoundException("Enrollment not found")
        return str(enrollment.batch_id), enrollment.batch_id

    async def acquire_lock(
        self,
        student: Student,
        enrollment_id: UUID | None,
        payment_type: PaymentTypeEnum,
    ) -> PaymentLock:
        """Lock payment plan; an existing lock is never changed."""
        scope_key, batch_id = await self.resolve_scope(student, enrollment_id)
        existing = await self.payments_repository.get_lock(student.registration_number, scope_key)
        if existing is not None:
            raise ConflictException(self._locked_message(batch_id))

        try:
            lock = await self.payments_repository.create_lock(
                register_number=student.registration_number,
                scope_key=scope_key,
                batch_id=batch_id,
                payment_type=payment_type,
            )
        except ConflictException as exc:
            raise ConflictException(self._locked_message(batch_id)) from exc

        await self.audit_repository.create_audit_log(
            student_id=student.id,
            action="payments.lock.create",
            entity_type="payment_lock",
            entity_id=str(lock.id),
            payload={"scope_key": scope_key, "payment_type": str(payment_type)},
        )
        await self.audit_repository.create_outbox_event(
            aggregate_type="payment_lock",
            aggregate_id=str(lock.id),
            event_type="payments.lock.created",
            payload={
                "lock_id": str(lock.id),
                "student_id": str(student.id),
                "batch_id": str(batch_id) if batch_id else None,
                "payment_type": str(payment_type),
            },
        )
        logger.info(
            "Payment mode %s locked for %s (scope=%s)",
            payment_type,
            student.registration_number,
            scope_key,
        )
        return lock

    async def find_lock(self, student: Student, enrollment_id: UUID | None) -> PaymentLock | None:
        scope_key, _ = await self.resolve_scope(student, enrollment_id)
        return await self.payments_repository.get_lock(student.registration_number, scope_key)

    async def get_lock(self, student: Student, enrollment_id: UUID | None) -> PaymentLock:
        lock = await self.find_lock(student, enrollment_id)
        if lock is None:
            raise NotFoundException("Not locked yet")
        return lock

    @staticmethod
    def _locked_message(batch_id: UUID | None) -> str:
        if batch_id is not None:
            return "Payment mode already locked for this batch"
        return "Payment mode already locked"


class PaymentService:
    """Checkout orders and idempotent recording of gateway payments."""

    def __init__(
        self,
        payments_repository: PaymentsRepository,
        lock_service: PaymentLockService,
        gateway: PaymentGateway,
        audit_repository: AuditRepository,
        *,
        key_id: str = "",
        key_secret: str = "",
        webhook_secret: str = "",
        currency: str = "INR",
        now_provider=utc_now,
    ) -> None:
        self.payments_repository = payments_repository
        self.lock_service = lock_service
        self.gateway = gateway
        self.audit_repository = audit_repository
        self.key_id = key_id
        self.key_secret = key_secret
        self.webhook_secret = webhook_secret
        self.currency = currency
        self.now_provider = now_provider

    def _timestamp_ms(self) -> int:
        return int(self.now_provider().timestamp() * 1000)

    async def create_order(self, student: Student, payload: OrderCreateRequest) -> OrderRead:
        """Create gateway order after checking the locked payment mode."""
        if payload.final_fees <= 0:
            raise BusinessRuleException("Final fees must be greater than zero")

        lock = await self.lock_service.find_lock(student, payload.enrollment_id)
        if lock is not None and lock.payment_type != payload.payment_type:
            logger.warning(
                "Order refused for %s: payment mode locked to %s, requested %s",
                student.registration_number,
                lock.payment_type,
                payload.payment_type,
            )
            raise SecurityException(f"Payment mode is locked to {lock.payment_type}")

        raw_notes = {
            "enrollment_id": payload.enrollment_id,
            "registration_number": student.registration_number,
            "student_name": student.name,
            "email": student.email,
            "contact": student.phone,
            "course_name": payload.course_name,
            "course_duration": payload.course_duration,
            "original_fees": payload.original_fees,
            "discount_percentage": payload.discount_percentage,
            "final_fees": payload.final_fees,
            "payment_type": payload.payment_type,
            "emi_duration": payload.emi_duration,
            "current_emi": payload.current_emi,
        }
        notes = {key: str(value) for key, value in raw_notes.items() if value is not None}

        order = await self.gateway.create_order(
            amount=amount_in_paise(payload.final_fees),
            currency=self.currency,
            receipt=f"receipt_{self._timestamp_ms()}",
            notes=notes,
        )
        logger.info("Payment order %s created for %s", order.get("id"), student.registration_number)
        return OrderRead(order=order, key=self.key_id)

    async def verify_payment(self, payload: PaymentVerifyRequest) -> CoursePayment:
        """Verify checkout signature and store the payment once."""
        if not verify_payment_signature(
            self.key_secret,
            payload.razorpay_order_id,
            payload.razorpay_payment_id,
            payload.razorpay_signature,
        ):
            raise SignatureException("Invalid signature")

        order = await self.gateway.fetch_order(payload.razorpay_order_id)
        payment = await self.gateway.fetch_payment(payload.razorpay_payment_id)
        record, _ = await self._record_payment(
            payment_id=payload.razorpay_payment_id,
            order_id=payload.razorpay_order_id,
            notes=order.get("notes") or {},
            gateway_payment=payment,
            source=PaymentSourceEnum.CHECKOUT,
        )
        return record

    async def handle_webhook(self, raw_body: bytes, signature: str | None) -> str:
        """Process a gateway webhook and return the acknowledgement text.

        Only signature problems are reported to the caller; anything failing after
        the signature is accepted is logged and acknowledged.
        """
        if not self.webhook_secret or not signature:
            record_payment_webhook("rejected")
            raise SignatureException("Missing webhook secret or signature header")
        if not verify_webhook_signature(self.webhook_secret, raw_body, signature):
            record_payment_webhook("rejected")
            raise SignatureException("Invalid signature")

        try:
            body = json.loads(raw_body)
        except ValueError:
            logger.warning("Webhook body is not valid JSON")
            record_payment_webhook("failed")
            return "error"

        event = body.get("event") if isinstance(body, dict) else None
        if event != CAPTURED_EVENT:
            logger.info("Webhook event ignored: %s", event)
            record_payment_webhook("ignored")
            return "ignored"

        payment_id = captured_payment_entity(body).get("id")
        if not payment_id or not isinstance(payment_id, str):
            logger.warning("payment.captured webhook without payment id")
            record_payment_webhook("failed")
            return "missing payment id"

        try:
            async with self.payments_repository.savepoint():
                payment = await self.gateway.fetch_payment(payment_id)
                _, created = await self._record_payment(
                    payment_id=payment_id,
                    order_id=payment.get("order_id"),
                    notes=payment.get("notes") or {},
                    gateway_payment=payment,
                    source=PaymentSourceEnum.WEBHOOK,
                )
        except Exception:
            logger.exception("Webhook processing failed for payment %s", payment_id)
            record_payment_webhook("failed")
            return "ok"

        record_payment_webhook("recorded" if created else "duplicate")
        return "ok"

    async def sync_payment(self, student: Student, payment_id: str) -> CoursePayment:
        """Pull payment state from the gateway and record it when captured."""
        payment = await self.gateway.fetch_payment(payment_id)
        notes = payment.get("notes") or {}
        if notes.get("registration_number") != student.registration_number:
            raise NotFoundException("Payment not found")
        if payment.get("status") != CAPTURED_STATUS:
            raise BusinessRuleException(f"Payment is {payment.get('status') or 'unknown'}, not captured")

        record, _ = await self._record_payment(
            payment_id=payment_id,
            order_id=payment.get("order_id"),
            notes=notes,
            gateway_payment=payment,
            source=PaymentSourceEnum.SYNC,
        )
        return record

    async def record_manual_payment(self, student: Student, payload: ManualPaymentRequest) -> CoursePayment:
        """Store a student-reported payment pending admin verification."""
        await self.lock_service.resolve_scope(student, payload.enrollment_id)

        timestamp = self._timestamp_ms()
        is_emi = payload.payment_type == PaymentTypeEnum.EMI
        payment = await self.payments_repository.create_payment(
            {
                "registration_number": student.registration_number,
                "enrollment_id": payload.enrollment_id,
                "student_name": student.name,
                "email": student.email,
                "contact": student.phone,
                "course_name": payload.course_name or "Unknown Course",
                "course_duration": payload.course_duration,
                "original_fees": payload.original_fees if payload.original_fees is not None else payload.amount,
                "discount_percentage": payload.discount_percentage,
                "final_fees": payload.amount,
                "payment_type": payload.payment_type,
                "emi_duration": payload.emi_duration if is_emi else None,
                "current_emi": payload.current_emi if is_emi else None,
                "payment_id": f"manual-{timestamp}-{uuid4().hex[:8]}",
                "order_id": f"manual-{timestamp}",
                "source": PaymentSourceEnum.MANUAL,
                "status": False,
            },
        )
        await self._publish_recorded(payment)
        return payment

    async def list_transactions(
        self,
        student: Student,
        limit: int,
        offset: int,
    ) -> tuple[list[CoursePayment], int]:
        return await self.payments_repository.list_payments_for_registration(
            student.registration_number,
            limit,
            offset,
        )

    async def _record_payment(
        self,
        payment_id: str,
        order_id: str | None,
        notes: dict[str, Any],
        gateway_payment: dict[str, Any],
        source: PaymentSourceEnum,
    ) -> tuple[CoursePayment, bool]:
        payment_type = _to_payment_type(notes.get("payment_type") or PaymentTypeEnum.FULL)
        is_emi = payment_type == PaymentTypeEnum.EMI
        values = {
            "registration_number": str(notes.get("registration_number") or ""),
            "enrollment_id": _to_uuid(notes.get("enrollment_id")),
            "student_name": notes.get("student_name"),
            "email": notes.get("email"),
            "contact": notes.get("contact"),
            "course_name": notes.get("course_name"),
            "course_duration": _to_int(notes.get("course_duration")),
            "original_fees": _to_decimal(notes.get("original_fees")),
            "discount_percentage": _to_decimal(notes.get("discount_percentage")),
            "final_fees": _to_decimal(notes.get("final_fees")),
            "payment_type": payment_type,
            "emi_duration": _to_int(notes.get("emi_duration")) if is_emi else None,
            "current_emi": _to_int(notes.get("current_emi")) if is_emi else None,
            "payment_id": payment_id,
            "order_id": order_id,
            "bank_rrn": bank_reference(gateway_payment),
            "source": source,
            "status": False,
        }

        payment, created = await self.payments_repository.insert_payment_if_absent(values)
        if created:
            await self._publish_recorded(payment)
        else:
            logger.info("Payment %s already recorded, skipping insert", payment_id)
        return payment, created

    async def _publish_recorded(self, payment: CoursePayment) -> None:
        await self.audit_repository.create_outbox_event(
            aggregate_type="payment",
            aggregate_id=str(payment.id),
            event_type="payments.payment.recorded",
            payload={
                "payment_id": payment.payment_id,
                "registration_number": payment.registration_number,
                "final_fees": str(payment.final_fees),
                "payment_type": str(payment.payment_type),
                "source": str(payment.source),
            },
        )
        logger.info("Payment %s recorded via %s", payment.payment_id, payment.source)


def build_payment_lock_service(session: AsyncSession) -> PaymentLockService:
    return PaymentLockService(
        payments_repository=PaymentsRepository(session),
        enrollment_repository=EnrollmentRepository(session),
        audit_repository=AuditRepository(session),
    )


async def get_payment_lock_service(session: AsyncSession = Depends(get_db_session)) -> PaymentLockService:
    """Dependency provider for payment lock service."""
    return build_payment_lock_service(session)


async def get_payment_service(
    session: AsyncSession = Depends(get_db_session),
    gateway: PaymentGateway = Depends(get_payment_gateway),
) -> PaymentService:
    """Dependency provider for payment service."""
    settings = get_settings()
    return PaymentService(
        payments_repository=PaymentsRepository(session),
        lock_service=build_payment_lock_service(session),
        gateway=gateway,
        audit_repository=AuditRepository(session),
        key_id=settings.razorpay_key_id,
        key_secret=settings.razorpay_key_secret,
        webhook_secret=settings.razorpay_webhook_secret,
        currency=settings.payment_currency,
    )
