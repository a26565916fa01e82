from __future__ import annotations

from dataclasses import dataclass
from datetime import UTC, date, datetime
from types import SimpleNamespace
from uuid import UUID, uuid4

import pytest

from student_portal.core.enums import NotificationStatusEnum
from student_portal.modules.notifications.emi_reminders import EmiReminderJob, build_reminder_body, format_due_date

NOW = datetime(2026, 3, 10, 8, 0, tzinfo=UTC)


@dataclass
class FakeNotification:
    id: UUID
    student_id: UUID
    title: str
    body: str
    created_at: datetime
    status: NotificationStatusEnum = NotificationStatusEnum.PENDING
    sent_at: datetime | None = None


class FakeNotificationsRepository:
    def __init__(self) -> None:
        self.notifications: list[FakeNotification] = []

    async def create_notification(self, student_id: UUID, channel: str, title: str, body: str) -> FakeNotification:
        notification = FakeNotification(id=uuid4(), student_id=student_id, title=title, body=body, created_at=NOW)
        self.notifications.append(notification)
        return notification

    async def exists_since(self, student_id: UUID, body: str, since: datetime) -> bool:
        return any(
            item.student_id == student_id and item.body == body and item.created_at >= since
            for item in self.notifications
        )

    async def set_status(self, notification, status, sent_at):
        notification.status = status
        notification.sent_at = sent_at
        return notification


class FakePaymentsRepository:
    def __init__(self, payments: list[SimpleNamespace]) -> None:
        self.payments = payments

    async def list_emi_payments_with_due_date(self) -> list[SimpleNamespace]:
        return self.payments


def make_payment(
    due: date,
    *,
    current_emi: int = 1,
    emi_duration: int = 3,
    with_enrollment: bool = True,
) -> SimpleNamespace:
    enrollment = None
    if with_enrollment:
        enrollment = SimpleNamespace(
            student_id=uuid4(),
            batch=SimpleNamespace(batch_name="DE-A1-MORNING", course=SimpleNamespace(course_name="ON-DE-FL-A1")),
        )
    return SimpleNamespace(
        payment_id=f"pay_{uuid4().hex[:6]}",
        next_emi_due_date=due,
        current_emi=current_emi,
        emi_duration=emi_duration,
        enrollment=enrollment,
    )


def make_job(payments: list[SimpleNamespace]) -> tuple[EmiReminderJob, FakeNotificationsRepository]:
    notifications_repo = FakeNotificationsRepository()
    job = EmiReminderJob(
        payments_repository=FakePaymentsRepository(payments),  # type: ignore[arg-type]
        notifications_repository=notifications_repo,  # type: ignore[arg-type]
        now_provider=lambda: NOW,
    )
    return job, notifications_repo


def test_reminder_body_mentions_course_batch_and_due_date() -> None:
    body = build_reminder_body(1, "ON-DE-FL-A1", "DE-A1-MORNING", date(2026, 3, 11))

    assert body.startswith("Final reminder - payment due tomorrow")
    assert "Course: ON-DE-FL-A1" in body
    assert "Batch: DE-A1-MORNING" in body
    assert f"Due date: {format_due_date(date(2026, 3, 11))}" in body
    assert format_due_date(date(2026, 3, 1)) == "Mar 1, 2026"


@pytest.mark.asyncio
async def test_reminders_are_sent_only_inside_window() -> None:
    due_tomorrow = make_payment(date(2026, 3, 11))
    due_in_three = make_payment(date(2026, 3, 13))
    due_later = make_payment(date(2026, 3, 20))
    overdue = make_payment(date(2026, 3, 9))
    job, notifications_repo = make_job([due_tomorrow, due_in_three, due_later, overdue])

    stats = await job.run_once()

    assert stats == {"checked": 4, "sent": 2, "skipped": 2}
    recipients = {item.student_id for item in notifications_repo.notifications}
    assert recipients == {due_tomorrow.enrollment.student_id, due_in_three.enrollment.student_id}
    assert all(item.status == NotificationStatusEnum.SENT for item in notifications_repo.notifications)


@pytest.mark.asyncio
async def test_final_installment_and_orphan_payments_are_skipped() -> None:
    job, notifications_repo = make_job(
        [
            make_payment(date(2026, 3, 11), current_emi=3, emi_duration=3),
            make_payment(date(2026, 3, 11), with_enrollment=False),
        ],
    )

    stats = await job.run_once()

    assert stats == {"checked": 2, "sent": 0, "skipped": 2}
    assert notifications_repo.notifications == []


@pytest.mark.asyncio
async def test_same_reminder_is_not_repeated_within_a_day() -> None:
    job, notifications_repo = make_job([make_payment(date(2026, 3, 12))])

    await job.run_once()
    second = await job.run_once()

    assert second == {"checked": 1, "sent": 0, "skipped": 1}
    assert len(notifications_repo.notifications) == 1
