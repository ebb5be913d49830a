"""
Favorite repository for the (user, property) bookmark pairs.
"""

from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, delete, desc
from sqlalchemy.orm import selectinload
from rental_marketplace.repositories.base import BaseRepository
from rental_marketplace.models.favorite import Favorite
from typing import Optional, List
import uuid
import logging

logger = logging.getLogger(__name__)


class FavoriteRepository(BaseRepository[Favorite]):

    def __init__(self, db: AsyncSession):
        super().__init__(Favorite, db)

    async def get_favorite(self, user_id: uuid.UUID, property_id: uuid.UUID) -> Optional[Favorite]:
        try:
            result = await self.db.execute(
                select(Favorite).where(Favorite.user_id == user_id, Favorite.property_id == property_id)
            )
            return result.scalar_one_or_none()
        except Exception as e:
            logger.error(f"Failed to get favorite of {user_id} for property {property_id}: {e}")
            raise

    async def remove_favorite(self, user_id: uuid.UUID, property_id: uuid.UUID) -> bool:
        """
        Delete the favorite pair.

        Returns:
            True if a favorite was removed, False if none existed
        """
        async with self._transaction(f"remove favorite of {user_id} for property {property_id}"):
            result = await self.db.execute(
                delete(Favorite).where(Favorite.user_id == user_id, Favorite.property_id == property_id)
            )
        return result.rowcount > 0

    async def get_user_favorites(self, user_id: uuid.UUID) -> List[Favorite]:
        """Get a profile's favorites with property summaries, newest first."""
        try:
            query = (
                select(Favorite)
                .options(selectinload(Favorite.property))
                .execution_options(populate_existing=True)
                .where(Favorite.user_id == user_id)
                .order_by(desc(Favorite.created_at))
            )
            result = await self.db.execute(query)
            return list(result.scalars().all())
        except Exception as e:
            logger.error(f"Failed to list favorites of {user_id}: {e}")
            raise
