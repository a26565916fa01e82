"""Notifications repository layer."""

from __future__ import annotations

from datetime import datetime
from uuid import UUID

from sqlalchemy import Select, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from student_portal.core.enums import NotificationStatusEnum
from student_portal.modules.notifications.models import Notification


class NotificationsRepository:
    """DB operations for notifications domain."""

    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    async def create_notification(
        self,
        student_id: UUID,
        channel: str,
        title: str,
        body: str,
    ) -> Notification:
        notification = Notification(student_id=student_id, channel=channel, title=title, body=body)
        self.session.add(notification)
        await self.session.flush()
        return notification

    async def get_notification_by_id(self, notification_id: UUID) -> Notification | None:
        stmt = select(Notification).where(Notification.id == notification_id)
        return await self.session.scalar(stmt)

    async def list_notifications_for_student(
        self,
        student_id: UUID,
        unread_only: bool,
        limit: int,
        offset: int,
    ) -> tuple[list[Notification], int]:
        base_stmt: Select[tuple[Notification]] = select(Notification).where(Notification.student_id == student_id)
        if unread_only:
            base_stmt = base_stmt.where(Notification.is_read.is_(False))
        count_stmt = select(func.count()).select_from(base_stmt.subquery())
        total = int((await self.session.scalar(count_stmt)) or 0)

        stmt = base_stmt.order_by(Notification.created_at.desc()).limit(limit).offset(offset)
        items = (await self.session.scalars(stmt)).all()
        return items, total

    async def exists_since(self, student_id: UUID, body: str, since: datetime) -> bool:
        stmt = (
            select(Notification.id)
            .where(
                Notification.student_id == student_id,
                Notification.body == body,
                Notification.created_at >= since,
            )
            .limit(1)
        )
        return (await self.session.scalar(stmt)) is not None

    async def set_status(
        self,
        notification: Notification,
        status: NotificationStatusEnum,
        sent_at: datetime | None,
    ) -> Notification:
        notification.status = status
        notification.sent_at = sent_at
        await self.session.flush()
        return notification

    async def mark_read(self, notification: Notification) -> Notification:
        notification.is_read = True
        await self.session.flush()
        return notification
