"""Daily reminders for upcoming EMI installments."""

from __future__ import annotations

import logging
from collections.abc import Iterable
from datetime import date, datetime, time, timezone

from student_portal.core.enums import NotificationStatusEnum
from student_portal.modules.notifications.repository import NotificationsRepository
from student_portal.modules.payments.models import CoursePayment
from student_portal.modules.payments.repository import PaymentsRepository
from student_portal.shared.utils import utc_now

logger = logging.getLogger(__name__)

REMINDER_TITLE = "EMI payment reminder"

_HEADLINES = {
    1: ("Final reminder - payment due tomorrow", "Please make your payment immediately."),
    2: ("EMI payment reminder - 2 days left", "Please make your payment soon to avoid disruption."),
    3: ("EMI payment reminder - 3 days left", "Please make your payment on or before the due date."),
}


def format_due_date(value: date) -> str:
    return f"{value.strftime('%b')} {value.day}, {value.year}"


def build_reminder_body(days_left: int, course_name: str, batch_name: str, due_date: date) -> str:
    headline, closing = _HEADLINES.get(
        days_left,
        (f"EMI payment reminder - {days_left} days left", "Please make your payment on or before the due date."),
    )
    return (
        f"{headline}\n\n"
        f"Course: {course_name}\n"
        f"Batch: {batch_name}\n\n"
        f"Due date: {format_due_date(due_date)}\n\n"
        f"{closing}"
    )


class EmiReminderJob:
    """Notify students whose next EMI falls due within the reminder window."""

    def __init__(
        self,
        payments_repository: PaymentsRepository,
        notifications_repository: NotificationsRepository,
        *,
        reminder_days: Iterable[int] = (1, 2, 3),
        now_provider=utc_now,
    ) -> None:
        self.payments_repository = payments_repository
        self.notifications_repository = notifications_repository
        self.reminder_days = frozenset(reminder_days)
        self.now_provider = now_provider

    async def run_once(self) -> dict[str, int]:
        """Run one reminder pass; at most one identical reminder per student per UTC day."""
        stats = {"checked": 0, "sent": 0, "skipped": 0}
        now = self.now_provider()
        today = now.date()
        start_of_day = datetime.combine(today, time.min, tzinfo=timezone.utc)

        for payment in await self.payments_repository.list_emi_payments_with_due_date():
            stats["checked"] += 1
            body = self._reminder_body(payment, today)
            if body is None:
                stats["skipped"] += 1
                continue

            student_id = payment.enrollment.student_id
            if await self.notifications_repository.exists_since(student_id, body, start_of_day):
                stats["skipped"] += 1
                continue

            notification = await self.notifications_repository.create_notification(
                student_id=student_id,
                channel="in_app",
                title=REMINDER_TITLE,
                body=body,
            )
            await self.notifications_repository.set_status(notification, NotificationStatusEnum.SENT, now)
            stats["sent"] += 1
            logger.info("EMI reminder sent to student %s for payment %s", student_id, payment.payment_id)
        return stats

    def _reminder_body(self, payment: CoursePayment, today: date) -> str | None:
        if payment.next_emi_due_date is None or payment.enrollment is None:
            return None

        days_left = (payment.next_emi_due_date - today).days
        if days_left not in self.reminder_days:
            return None

        if payment.current_emi is not None and payment.emi_duration is not None:
            if payment.current_emi >= payment.emi_duration:
                return None

        batch = payment.enrollment.batch
        batch_name = batch.batch_name if batch is not None else "your course"
        course_name = batch.course.course_name if batch is not None and batch.course is not None else "course"
        return build_reminder_body(days_left, course_name, batch_name, payment.next_emi_due_date)
