"""Notifications API router."""

from __future__ import annotations

from uuid import UUID

from fastapi import APIRouter, Depends, Query

from student_portal.modules.notifications.schemas import NotificationRead
from student_portal.modules.notifications.service import NotificationsService, get_notifications_service
from student_portal.modules.students.service import get_current_student
from student_portal.shared.pagination import Envelope, Page, build_page, get_pagination_params, ok

router = APIRouter(prefix="/notifications", tags=["notifications"])


@router.get("/my", response_model=Envelope[Page[NotificationRead]])
async def list_my_notifications(
    all_notifications: bool = Query(default=False, alias="all"),
    pagination=Depends(get_pagination_params),
    service: NotificationsService = Depends(get_notifications_service),
    current_student=Depends(get_current_student),
) -> Envelope[Page[NotificationRead]]:
    """List unread notifications of current student; ``all=true`` includes read ones."""
    items, total = await service.list_my_notifications(
        current_student,
        include_read=all_notifications,
        limit=pagination.limit,
        offset=pagination.offset,
    )
    serialized = [NotificationRead.model_validate(item) for item in items]
    return ok(build_page(serialized, total, pagination))


@router.patch("/{notification_id}/read", response_model=Envelope[NotificationRead])
async def mark_notification_read(
    notification_id: UUID,
    service: NotificationsService = Depends(get_notifications_service),
    current_student=Depends(get_current_student),
) -> Envelope[NotificationRead]:
    notification = await service.mark_read(current_student, notification_id)
    return ok(NotificationRead.model_validate(notification))
