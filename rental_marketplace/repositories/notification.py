"""
Notification repository for in-app notifications.
"""

from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, update, func, desc
from rental_marketplace.repositories.base import BaseRepository
from rental_marketplace.models.notification import Notification
from typing import List
import uuid
import logging

logger = logging.getLogger(__name__)


class NotificationRepository(BaseRepository[Notification]):

    def __init__(self, db: AsyncSession):
        super().__init__(Notification, db)

    async def get_user_notifications(self, user_id: uuid.UUID, limit: int = 50) -> List[Notification]:
        """Get a profile's notifications, newest first."""
        try:
            query = (
                select(Notification)
                .where(Notification.user_id == user_id)
                .order_by(desc(Notification.created_at))
                .limit(limit)
            )
            result = await self.db.execute(query)
            return list(result.scalars().all())
        except Exception as e:
            logger.error(f"Failed to list notifications of {user_id}: {e}")
            raise

    async def count_unread(self, user_id: uuid.UUID) -> int:
        result = await self.db.execute(
            select(func.count(Notification.id)).where(
                Notification.user_id == user_id,
                Notification.is_read.is_(False)
            )
        )
        return result.scalar()

    async def mark_all_read(self, user_id: uuid.UUID) -> int:
        """
        Mark every unread notification of a profile as read.

        Returns:
            Number of notifications updated
        """
        async with self._transaction(f"mark notifications read for {user_id}"):
            result = await self.db.execute(
                update(Notification)
                .where(Notification.user_id == user_id, Notification.is_read.is_(False))
                .values(is_read=True)
                .execution_options(synchronize_session=False)
            )
        return result.rowcount
