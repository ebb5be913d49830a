"""
Notification API endpoints.
"""

from fastapi import APIRouter, Depends, Path, Query
from uuid import UUID

from rental_marketplace.models.profile import Profile
from rental_marketplace.services.notification import NotificationService
from rental_marketplace.schemas.notification import (
    NotificationResponse,
    NotificationListResponse,
    MarkAllReadResponse
)
from rental_marketplace.schemas.error import get_error_responses
from rental_marketplace.utils.dependencies import get_current_user, get_notification_service


router = APIRouter(prefix="/notifications", tags=["Notifications"])


@router.get(
    "",
    response_model=NotificationListResponse,
    summary="List my notifications",
    responses=get_error_responses(401)
)
async def list_notifications(
    limit: int = Query(50, ge=1, le=200),
    current_user: Profile = Depends(get_current_user),
    notification_service: NotificationService = Depends(get_notification_service)
) -> NotificationListResponse:
    notifications, unread_count = await notification_service.list_notifications(current_user, limit)
    return NotificationListResponse(
        notifications=[NotificationResponse.model_validate(n.to_dict()) for n in notifications],
        unread_count=unread_count
    )


@router.post(
    "/read-all",
    response_model=MarkAllReadResponse,
    summary="Mark all notifications read",
    responses=get_error_responses(401)
)
async def mark_all_read(
    current_user: Profile = Depends(get_current_user),
    notification_service: NotificationService = Depends(get_notification_service)
) -> MarkAllReadResponse:
    updated = await notification_service.mark_all_read(current_user)
    return MarkAllReadResponse(updated=updated)


@router.post(
    "/{notification_id}/read",
    response_model=NotificationResponse,
    summary="Mark notification read",
    responses=get_error_responses(401, 404)
)
async def mark_read(
    notification_id: UUID = Path(..., description="Notification ID"),
    current_user: Profile = Depends(get_current_user),
    notification_service: NotificationService = Depends(get_notification_service)
) -> NotificationResponse:
    notification = await notification_service.mark_read(notification_id, current_user)
    return NotificationResponse.model_validate(notification.to_dict())
