"""Outbox consumer that materializes domain events into notifications."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta
from uuid import UUID

from student_portal.core.enums import NotificationStatusEnum
from student_portal.modules.audit.models import OutboxEvent
from student_portal.modules.audit.repository import AuditRepository
from student_portal.modules.notifications.repository import NotificationsRepository
from student_portal.modules.students.repository import StudentsRepository
from student_portal.shared.utils import utc_now


@dataclass(slots=True)
class NotificationMessage:
    student_id: UUID
    title: str
    body: str
    channel: str = "in_app"


class NotificationsOutboxWorker:
    """Process outbox events and create student notifications."""

    def __init__(
        self,
        audit_repository: AuditRepository,
        notifications_repository: NotificationsRepository,
        students_repository: StudentsRepository,
        *,
        batch_size: int = 100,
        max_retries: int = 5,
        base_backoff_seconds: int = 30,
        max_backoff_seconds: int = 300,
        now_provider=utc_now,
    ) -> None:
        self.audit_repository = audit_repository
        self.notifications_repository = notifications_repository
        self.students_repository = students_repository
        self.batch_size = batch_size
        self.max_retries = max_retries
        self.base_backoff_seconds = base_backoff_seconds
        self.max_backoff_seconds = max_backoff_seconds
        self.now_provider = now_provider

    async def run_once(self) -> dict[str, int]:
        """Run one processing cycle."""
        stats = {"requeued": 0, "processed": 0, "failed": 0, "dispatched": 0}
        stats["requeued"] = await self._requeue_retryable_failed_events()

        events = await self.audit_repository.list_pending_outbox(limit=self.batch_size)
        for event in events:
            try:
                messages = await self._build_messages(event)
                for message in messages:
                    notification = await self.notifications_repository.create_notification(
                        student_id=message.student_id,
                        channel=message.channel,
                        title=message.title,
                        body=message.body,
                    )
                    await self.notifications_repository.set_status(
                        notification,
                        NotificationStatusEnum.SENT,
                        self.now_provider(),
                    )
                    stats["dispatched"] += 1

                await self.audit_repository.mark_outbox_processed(event, self.now_provider())
                stats["processed"] += 1
            except Exception as exc:
                await self.audit_repository.mark_outbox_failed(event, str(exc))
                stats["failed"] += 1
        return stats

    async def _requeue_retryable_failed_events(self) -> int:
        now = self.now_provider()
        failed_events = await self.audit_repository.list_failed_outbox(
            limit=self.batch_size,
            max_retries=self.max_retries,
        )
        requeued = 0
        for event in failed_events:
            if self._is_backoff_elapsed(event, now):
                await self.audit_repository.mark_outbox_pending(event)
                requeued += 1
        return requeued

    def _is_backoff_elapsed(self, event: OutboxEvent, now: datetime) -> bool:
        retries = max(event.retries, 1)
        backoff_seconds = min(
            self.max_backoff_seconds,
            self.base_backoff_seconds * (2 ** (retries - 1)),
        )
        last_attempt_at = event.updated_at or event.occurred_at
        return now >= last_attempt_at + timedelta(seconds=backoff_seconds)

    async def _build_messages(self, event: OutboxEvent) -> list[NotificationMessage]:
        payload = event.payload or {}
        event_type = event.event_type

        if event_type == "enrollment.created":
            student_id = self._required_uuid(payload, "student_id")
            batch_name = payload.get("batch_name", "your batch")
            if payload.get("is_free_course"):
                return [
                    NotificationMessage(
                        student_id=student_id,
                        title="Enrollment confirmed",
                        body=f"You now have access to {batch_name}.",
                    ),
                ]
            return [
                NotificationMessage(
                    student_id=student_id,
                    title="Enrollment received",
                    body=f"Your enrollment in {batch_name} is pending approval.",
                ),
            ]

        if event_type == "enrollment.expired":
            student_id = self._required_uuid(payload, "student_id")
            end_date = payload.get("end_date", "unknown")
            return [
                NotificationMessage(
                    student_id=student_id,
                    title="Enrollment expired",
                    body=f"Your batch access ended on {end_date}. Renew your payment to continue.",
                ),
            ]

        if event_type == "payments.lock.created":
            student_id = self._required_uuid(payload, "student_id")
            payment_type = payload.get("payment_type", "unknown")
            return [
                NotificationMessage(
                    student_id=student_id,
                    title="Payment mode locked",
                    body=f"Your payment mode is set to {payment_type}.",
                ),
            ]

        if event_type == "payments.payment.recorded":
            registration_number = payload.get("registration_number")
            if not registration_number:
                raise ValueError("Missing required key: registration_number")
            student = await self.students_repository.get_student_by_registration_number(registration_number)
            if student is None:
                raise ValueError(f"Student not found for registration number {registration_number}")
            payment_id = payload.get("payment_id", "unknown")
            amount = payload.get("final_fees", "0")
            return [
                NotificationMessage(
                    student_id=student.id,
                    title="Payment received",
                    body=f"Payment {payment_id} of {amount} was received and is awaiting verification.",
                ),
            ]

        return []

    @staticmethod
    def _required_uuid(payload: dict, key: str) -> UUID:
        value = payload.get(key)
        if value is None:
            raise ValueError(f"Missing required key: {key}")
        return UUID(str(value))
