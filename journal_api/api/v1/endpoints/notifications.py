"""
Notification Endpoints

Endpoints:
----------
- GET    /notifications                      - Feed (level one entries)
- GET    /notifications/unread-count         - Number of unread notifications
- POST   /notifications/mark-all-read        - Mark all as read
- GET    /notifications/{notification_id}    - Detail (level two)
- POST   /notifications/{notification_id}/read - Mark one as read
- DELETE /notifications/{notification_id}    - Delete one
"""

from typing import List, Optional
from uuid import UUID

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from journal_api.db.database import get_db
from journal_api.api.deps import get_current_user_optional
from journal_api.models.user import User
from journal_api.schemas.notification import (
    LevelOneNotification,
    LevelTwoNotification,
    MarkAllReadResponse,
    NotificationStateResponse,
    UnreadCountResponse,
)
from journal_api.services.notification_service import NotificationService

router = APIRouter(prefix="/notifications", tags=["Notifications"])


def get_notification_service(db: AsyncSession = Depends(get_db)) -> NotificationService:
    """Dependency that provides NotificationService instance."""
    return NotificationService(db)


@router.get(
    "",
    response_model=List[LevelOneNotification],
    summary="Notification feed for the current user",
)
async def list_notifications(
    limit: Optional[int] = Query(None, ge=1, le=200),
    current_user: Optional[User] = Depends(get_current_user_optional),
    service: NotificationService = Depends(get_notification_service),
):
    return await service.get_feed(current_user, limit)


@router.get(
    "/unread-count",
    response_model=UnreadCountResponse,
    summary="Get unread notification count",
)
async def unread_count(
    current_user: Optional[User] = Depends(get_current_user_optional),
    service: NotificationService = Depends(get_notification_service),
):
    return UnreadCountResponse(unread_count=await service.unread_count(current_user))


@router.post(
    "/mark-all-read",
    response_model=MarkAllReadResponse,
    summary="Mark all notifications as read",
)
async def mark_all_read(
    current_user: Optional[User] = Depends(get_current_user_optional),
    service: NotificationService = Depends(get_notification_service),
):
    return MarkAllReadResponse(marked=await service.mark_all_read(current_user))


@router.get(
    "/{notification_id}",
    response_model=LevelTwoNotification,
    summary="Expanded view of one notification",
)
async def get_notification(
    notification_id: UUID,
    current_user: Optional[User] = Depends(get_current_user_optional),
    service: NotificationService = Depends(get_notification_service),
):
    return await service.get_detail(current_user, notification_id)


@router.post(
    "/{notification_id}/read",
    response_model=NotificationStateResponse,
    summary="Mark one notification as read",
)
async def mark_read(
    notification_id: UUID,
    current_user: Optional[User] = Depends(get_current_user_optional),
    service: NotificationService = Depends(get_notification_service),
):
    return await service.mark_read(current_user, notification_id)


@router.delete(
    "/{notification_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete one notification",
)
async def delete_notification(
    notification_id: UUID,
    current_user: Optional[User] = Depends(get_current_user_optional),
    service: NotificationService = Depends(get_notification_service),
):
    await service.delete(current_user, notification_id)
