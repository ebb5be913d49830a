"""
Notification service for in-app notifications.
"""

from typing import Optional, List, Tuple
from sqlalchemy.ext.asyncio import AsyncSession
from rental_marketplace.repositories.notification import NotificationRepository
from rental_marketplace.models.notification import Notification
from rental_marketplace.models.profile import Profile
from rental_marketplace.utils.exceptions import NotFoundError
import uuid
import logging

logger = logging.getLogger(__name__)


class NotificationService:

    def __init__(self, db_session: AsyncSession):
        self.db = db_session
        self.notification_repo = NotificationRepository(db_session)

    async def notify(
        self,
        user_id: uuid.UUID,
        type: str,
        title: str,
        message: str,
        link: Optional[str] = None
    ) -> Notification:
        """Write an unread notification for a profile."""
        notification = await self.notification_repo.create({
            "user_id": user_id,
            "type": type,
            "title": title,
            "message": message,
            "link": link,
            "is_read": False,
        })
        logger.debug(f"Notification {type} written for {user_id}")
        return notification

    async def list_notifications(self, current_user: Profile, limit: int = 50) -> Tuple[List[Notification], int]:
        """
        Get the caller's notifications, newest first.

        Returns:
            Tuple of (notifications, unread count)
        """
        notifications = await self.notification_repo.get_user_notifications(current_user.id, limit)
        unread = await self.notification_repo.count_unread(current_user.id)
        return notifications, unread

    async def mark_read(self, notification_id: uuid.UUID, current_user: Profile) -> Notification:
        """
        Mark one of the caller's notifications as read.

        Raises:
            NotFoundError: If the notification does not exist or belongs to someone else
        """
        notification = await self.notification_repo.get_by_id(notification_id)
        if notification is None or notification.user_id != current_user.id:
            raise NotFoundError("Notification", str(notification_id))

        return await self.notification_repo.update(notification_id, {"is_read": True})

    async def mark_all_read(self, current_user: Profile) -> int:
        """Mark every unread notification of the caller as read; returns how many changed."""
        updated = await self.notification_repo.mark_all_read(current_user.id)
        logger.info(f"Marked {updated} notifications read for {current_user.id}")
        return updated
