"""Payments repository layer."""

from __future__ import annotations

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from typing import Any
from uuid import UUID

from sqlalchemy import Select, func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from student_portal.core.database import is_unique_violation
from student_portal.core.enums import PaymentTypeEnum
from student_portal.modules.batches.models import Batch
from student_portal.modules.enrollment.models import Enrollment
from student_portal.modules.payments.models import CoursePayment, PaymentLock
from student_portal.shared.exceptions import ConflictException


class PaymentsRepository:
    """DB operations for payment locks and course payments."""

    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    @asynccontextmanager
    async def savepoint(self) -> AsyncIterator[None]:
        """Run a block whose writes are undone on error without aborting the request."""
        async with self.session.begin_nested():
            yield

    async def get_lock(self, register_number: str, scope_key: str) -> PaymentLock | None:
        stmt = select(PaymentLock).where(
            PaymentLock.register_number == register_number,
            PaymentLock.scope_key == scope_key,
        )
        return await self.session.scalar(stmt)

    async def create_lock(
        self,
        register_number: str,
        scope_key: str,
        batch_id: UUID | None,
        payment_type: PaymentTypeEnum,
    ) -> PaymentLock:
        lock = PaymentLock(
            register_number=register_number,
            scope_key=scope_key,
            batch_id=batch_id,
            payment_type=payment_type,
        )
        try:
            async with self.session.begin_nested():
                self.session.add(lock)
                await self.session.flush()
        except IntegrityError as exc:
            if is_unique_violation(exc):
                raise ConflictException("Payment mode already locked") from exc
            raise
        return lock

    async def get_payment_by_payment_id(self, payment_id: str) -> CoursePayment | None:
        stmt = select(CoursePayment).where(CoursePayment.payment_id == payment_id)
        return await self.session.scalar(stmt)

    async def create_payment(self, values: dict[str, Any]) -> CoursePayment:
        payment = CoursePayment(**values)
        try:
            async with self.session.begin_nested():
                self.session.add(payment)
                await self.session.flush()
        except IntegrityError as exc:
            if is_unique_violation(exc):
                raise ConflictException("Payment already recorded") from exc
            raise
        return payment

    async def insert_payment_if_absent(self, values: dict[str, Any]) -> tuple[CoursePayment, bool]:
        """Insert payment unless one with the same payment_id exists.

        Returns the stored row and whether this call created it.
        """
        existing = await self.get_payment_by_payment_id(values["payment_id"])
        if existing is not None:
            return existing, False

        try:
            return await self.create_payment(values), True
        except ConflictException:
            existing = await self.get_payment_by_payment_id(values["payment_id"])
            if existing is None:
                raise
            return existing, False

    async def list_payments_for_registration(
        self,
        registration_number: str,
        limit: int,
        offset: int,
    ) -> tuple[list[CoursePayment], int]:
        base_stmt: Select[tuple[CoursePayment]] = select(CoursePayment).where(
            CoursePayment.registration_number == registration_number,
        )
        count_stmt = select(func.count()).select_from(base_stmt.subquery())
        total = int((await self.session.scalar(count_stmt)) or 0)

        stmt = base_stmt.order_by(CoursePayment.created_at.desc()).limit(limit).offset(offset)
        items = (await self.session.scalars(stmt)).all()
        return items, total

    async def list_emi_payments_with_due_date(self) -> list[CoursePayment]:
        """Approved EMI payments that carry a next installment due date."""
        stmt = (
            select(CoursePayment)
            .options(
                selectinload(CoursePayment.enrollment)
                .selectinload(Enrollment.batch)
                .selectinload(Batch.course),
            )
            .where(
                CoursePayment.payment_type == PaymentTypeEnum.EMI,
                CoursePayment.status.is_(True),
                CoursePayment.next_emi_due_date.is_not(None),
            )
        )
        return (await self.session.scalars(stmt)).all()
