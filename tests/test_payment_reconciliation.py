from __future__ import annotations

import json
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from datetime import UTC, datetime
from decimal import Decimal
from types import SimpleNamespace
from typing import Any
from uuid import uuid4

import pytest

from student_portal.core.enums import PaymentSourceEnum, PaymentTypeEnum
from student_portal.core.security import hmac_sha256_hex
from student_portal.modules.payments.schemas import ManualPaymentRequest, PaymentVerifyRequest
from student_portal.modules.payments.service import PaymentService, bank_reference
from student_portal.shared.exceptions import (
    BusinessRuleException,
    ConflictException,
    NotFoundException,
    SignatureException,
    UpstreamException,
)

WEBHOOK_SECRET = "whsec_test"
KEY_SECRET = "key_secret_test"


class FakePaymentsRepository:
    def __init__(self) -> None:
        self.payments: dict[str, SimpleNamespace] = {}
        self.savepoints = 0

    @asynccontextmanager
    async def savepoint(self) -> AsyncIterator[None]:
        self.savepoints += 1
        yield

    async def get_payment_by_payment_id(self, payment_id: str) -> SimpleNamespace | None:
        return self.payments.get(payment_id)

    async def create_payment(self, values: dict[str, Any]) -> SimpleNamespace:
        if values["payment_id"] in self.payments:
            raise ConflictException("Payment already recorded")
        payment = SimpleNamespace(id=uuid4(), **values)
        self.payments[values["payment_id"]] = payment
        return payment

    async def insert_payment_if_absent(self, values: dict[str, Any]) -> tuple[SimpleNamespace, bool]:
        existing = self.payments.get(values["payment_id"])
        if existing is not None:
            return existing, False
        return await self.create_payment(values), True


class FakeLockService:
    def __init__(self, owned_enrollment_ids: set | None = None) -> None:
        self.owned_enrollment_ids = owned_enrollment_ids or set()

    async def resolve_scope(self, student, enrollment_id):
        if enrollment_id not in self.owned_enrollment_ids:
            raise NotFoundException("Enrollment not found")
        return "scope", None


class FakeAuditRepository:
    def __init__(self) -> None:
        self.outbox: list[dict] = []

    async def create_outbox_event(self, **kwargs):
        self.outbox.append(kwargs)


class FakeGateway:
    def __init__(self, payments: dict[str, dict] | None = None, orders: dict[str, dict] | None = None) -> None:
        self.payments = payments or {}
        self.orders = orders or {}
        self.fetched: list[str] = []

    async def fetch_order(self, order_id: str) -> dict:
        return self.orders[order_id]

    async def fetch_payment(self, payment_id: str) -> dict:
        self.fetched.append(payment_id)
        if payment_id not in self.payments:
            raise UpstreamException("Payment gateway rejected the request")
        return self.payments[payment_id]


NOTES = {
    "registration_number": "REG1001",
    "student_name": "Asha Nair",
    "course_name": "ON-DE-FL-A1",
    "course_duration": "3",
    "original_fees": "15000",
    "discount_percentage": "10",
    "final_fees": "13500",
    "payment_type": "emi",
    "emi_duration": "3",
    "current_emi": "1",
}


def make_service(
    gateway: FakeGateway,
    *,
    lock_service: FakeLockService | None = None,
) -> tuple[PaymentService, FakePaymentsRepository, FakeAuditRepository]:
    payments_repo = FakePaymentsRepository()
    audit_repo = FakeAuditRepository()
    service = PaymentService(
        payments_repository=payments_repo,  # type: ignore[arg-type]
        lock_service=lock_service or FakeLockService(),  # type: ignore[arg-type]
        gateway=gateway,  # type: ignore[arg-type]
        audit_repository=audit_repo,  # type: ignore[arg-type]
        key_id="rzp_test_key",
        key_secret=KEY_SECRET,
        webhook_secret=WEBHOOK_SECRET,
        now_provider=lambda: datetime(2026, 3, 1, 12, 0, tzinfo=UTC),
    )
    return service, payments_repo, audit_repo


def captured_body(payment_id: str, event: str = "payment.captured") -> bytes:
    return json.dumps({"event": event, "payload": {"payment": {"entity": {"id": payment_id}}}}).encode()


def gateway_payment(payment_id: str, status: str = "captured") -> dict:
    return {
        "id": payment_id,
        "order_id": "order_1",
        "status": status,
        "notes": dict(NOTES),
        "acquirer_data": {"rrn": "123456789012"},
    }


@pytest.mark.asyncio
async def test_webhook_without_signature_is_rejected() -> None:
    gateway = FakeGateway({"pay_1": gateway_payment("pay_1")})
    service, payments_repo, _ = make_service(gateway)

    with pytest.raises(SignatureException):
        await service.handle_webhook(captured_body("pay_1"), None)
    assert gateway.fetched == []
    assert payments_repo.payments == {}


@pytest.mark.asyncio
async def test_webhook_with_wrong_signature_is_rejected() -> None:
    gateway = FakeGateway({"pay_1": gateway_payment("pay_1")})
    service, payments_repo, _ = make_service(gateway)
    body = captured_body("pay_1")

    with pytest.raises(SignatureException):
        await service.handle_webhook(body, hmac_sha256_hex("other-secret", body))
    assert payments_repo.payments == {}


@pytest.mark.asyncio
async def test_captured_webhook_is_recorded_once_across_redeliveries() -> None:
    gateway = FakeGateway({"pay_1": gateway_payment("pay_1")})
    service, payments_repo, audit_repo = make_service(gateway)
    body = captured_body("pay_1")
    signature = hmac_sha256_hex(WEBHOOK_SECRET, body)

    first = await service.handle_webhook(body, signature)
    second = await service.handle_webhook(body, signature)

    assert first == "ok"
    assert second == "ok"
    assert list(payments_repo.payments) == ["pay_1"]
    payment = payments_repo.payments["pay_1"]
    assert payment.registration_number == "REG1001"
    assert payment.payment_type == PaymentTypeEnum.EMI
    assert payment.final_fees == Decimal("13500")
    assert payment.emi_duration == 3
    assert payment.bank_rrn == "123456789012"
    assert payment.source == PaymentSourceEnum.WEBHOOK
    assert payment.status is False
    assert [event["event_type"] for event in audit_repo.outbox] == ["payments.payment.recorded"]


@pytest.mark.asyncio
async def test_webhook_for_other_events_is_ignored() -> None:
    gateway = FakeGateway()
    service, payments_repo, _ = make_service(gateway)
    body = captured_body("pay_1", event="payment.failed")

    result = await service.handle_webhook(body, hmac_sha256_hex(WEBHOOK_SECRET, body))

    assert result == "ignored"
    assert gateway.fetched == []
    assert payments_repo.payments == {}


@pytest.mark.asyncio
async def test_webhook_processing_failure_is_acknowledged() -> None:
    gateway = FakeGateway()
    service, payments_repo, _ = make_service(gateway)
    body = captured_body("pay_missing")

    result = await service.handle_webhook(body, hmac_sha256_hex(WEBHOOK_SECRET, body))

    assert result == "ok"
    assert payments_repo.savepoints == 1
    assert payments_repo.payments == {}


@pytest.mark.asyncio
async def test_webhook_with_malformed_json_returns_error() -> None:
    service, _, _ = make_service(FakeGateway())
    body = b"{not json"

    assert await service.handle_webhook(body, hmac_sha256_hex(WEBHOOK_SECRET, body)) == "error"


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "payload",
    [
        "oops",
        ["payment"],
        {"payment": "entity"},
        {"payment": {"entity": ["pay_1"]}},
        {"payment": {"entity": {"id": 12345}}},
    ],
)
async def test_signed_captured_webhook_with_malformed_payload_is_acknowledged(payload: Any) -> None:
    gateway = FakeGateway({"pay_1": gateway_payment("pay_1")})
    service, payments_repo, _ = make_service(gateway)
    body = json.dumps({"event": "payment.captured", "payload": payload}).encode()

    result = await service.handle_webhook(body, hmac_sha256_hex(WEBHOOK_SECRET, body))

    assert result == "missing payment id"
    assert gateway.fetched == []
    assert payments_repo.payments == {}


@pytest.mark.asyncio
async def test_verify_payment_records_order_notes() -> None:
    gateway = FakeGateway(
        payments={"pay_2": gateway_payment("pay_2")},
        orders={"order_1": {"id": "order_1", "notes": dict(NOTES)}},
    )
    service, payments_repo, _ = make_service(gateway)
    signature = hmac_sha256_hex(KEY_SECRET, b"order_1|pay_2")

    payment = await service.verify_payment(
        PaymentVerifyRequest(
            razorpay_order_id="order_1",
            razorpay_payment_id="pay_2",
            razorpay_signature=signature,
        ),
    )

    assert payment.order_id == "order_1"
    assert payment.source == PaymentSourceEnum.CHECKOUT
    assert payment.course_name == "ON-DE-FL-A1"
    assert "pay_2" in payments_repo.payments


@pytest.mark.asyncio
async def test_verify_payment_with_bad_signature_is_rejected() -> None:
    gateway = FakeGateway(payments={"pay_2": gateway_payment("pay_2")})
    service, payments_repo, _ = make_service(gateway)

    with pytest.raises(SignatureException):
        await service.verify_payment(
            PaymentVerifyRequest(
                razorpay_order_id="order_1",
                razorpay_payment_id="pay_2",
                razorpay_signature="deadbeef",
            ),
        )
    assert gateway.fetched == []
    assert payments_repo.payments == {}


@pytest.mark.asyncio
async def test_sync_refuses_payment_that_is_not_captured() -> None:
    gateway = FakeGateway({"pay_3": gateway_payment("pay_3", status="authorized")})
    service, payments_repo, _ = make_service(gateway)
    student = SimpleNamespace(id=uuid4(), registration_number="REG1001")

    with pytest.raises(BusinessRuleException):
        await service.sync_payment(student, "pay_3")
    assert payments_repo.payments == {}


@pytest.mark.asyncio
async def test_sync_hides_payment_of_another_student() -> None:
    gateway = FakeGateway({"pay_3": gateway_payment("pay_3")})
    service, _, _ = make_service(gateway)
    student = SimpleNamespace(id=uuid4(), registration_number="REG9999")

    with pytest.raises(NotFoundException):
        await service.sync_payment(student, "pay_3")


@pytest.mark.asyncio
async def test_manual_payment_is_stored_unverified_with_unique_id() -> None:
    enrollment_id = uuid4()
    service, payments_repo, audit_repo = make_service(
        FakeGateway(),
        lock_service=FakeLockService({enrollment_id}),
    )
    student = SimpleNamespace(
        id=uuid4(),
        registration_number="REG1001",
        name="Asha Nair",
        email="asha@example.com",
        phone="9999999999",
    )
    payload = ManualPaymentRequest(
        enrollment_id=enrollment_id,
        amount=Decimal("5000"),
        payment_type=PaymentTypeEnum.FULL,
    )

    first = await service.record_manual_payment(student, payload)
    second = await service.record_manual_payment(student, payload)

    assert first.payment_id != second.payment_id
    assert first.payment_id.startswith("manual-")
    assert first.status is False
    assert first.source == PaymentSourceEnum.MANUAL
    assert first.course_name == "Unknown Course"
    assert first.original_fees == Decimal("5000")
    assert first.emi_duration is None
    assert len(payments_repo.payments) == 2
    assert len(audit_repo.outbox) == 2


def test_bank_reference_falls_back_to_upi_transaction_id() -> None:
    assert bank_reference({"acquirer_data": {"rrn": "111"}}) == "111"
    assert bank_reference({"acquirer_data": {"upi_transaction_id": "UPI222"}}) == "UPI222"
    assert bank_reference({}) is None
