"""Notifications business logic layer."""

from __future__ import annotations

from uuid import UUID

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from student_portal.core.database import get_db_session
from student_portal.modules.notifications.models import Notification
from student_portal.modules.notifications.repository import NotificationsRepository
from student_portal.modules.students.models import Student
from student_portal.shared.exceptions import NotFoundException


class NotificationsService:
    """Student inbox."""

    def __init__(self, repository: NotificationsRepository) -> None:
        self.repository = repository

    async def list_my_notifications(
        self,
        student: Student,
        include_read: bool,
        limit: int,
        offset: int,
    ) -> tuple[list[Notification], int]:
        """List unread notifications, or all of them when ``include_read`` is set."""
        return await self.repository.list_notifications_for_student(
            student.id,
            unread_only=not include_read,
            limit=limit,
            offset=offset,
        )

    async def mark_read(self, student: Student, notification_id: UUID) -> Notification:
        notification = await self.repository.get_notification_by_id(notification_id)
        if notification is None or notification.student_id != student.id:
            raise NotFoundException("Notification not found")
        if notification.is_read:
            return notification
        return await self.repository.mark_read(notification)


async def get_notifications_service(session: AsyncSession = Depends(get_db_session)) -> NotificationsService:
    """Dependency provider for notifications service."""
    return NotificationsService(repository=NotificationsRepository(session))
