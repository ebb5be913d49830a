"""
Favorite service for bookmarking properties.
"""

from typing import List
from sqlalchemy.ext.asyncio import AsyncSession
from rental_marketplace.repositories.favorite import FavoriteRepository
from rental_marketplace.repositories.property import PropertyRepository
from rental_marketplace.models.favorite import Favorite
from rental_marketplace.models.profile import Profile
from rental_marketplace.utils.exceptions import PropertyNotFoundError, NotFoundError
import uuid
import logging

logger = logging.getLogger(__name__)


class FavoriteService:

    def __init__(self, db_session: AsyncSession):
        self.db = db_session
        self.favorite_repo = FavoriteRepository(db_session)
        self.property_repo = PropertyRepository(db_session)

    async def add_favorite(self, property_id: uuid.UUID, current_user: Profile) -> Favorite:
        """
        Favorite a property. Adding an existing favorite returns it unchanged.

        Raises:
            PropertyNotFoundError: If the property doesn't exist
        """
        if not await self.property_repo.exists(property_id):
            raise PropertyNotFoundError(str(property_id))

        existing = await self.favorite_repo.get_favorite(current_user.id, property_id)
        if existing:
            return existing

        favorite = await self.favorite_repo.create({"user_id": current_user.id, "property_id": property_id})
        logger.info(f"Property {property_id} favorited by {current_user.id}")
        return favorite

    async def remove_favorite(self, property_id: uuid.UUID, current_user: Profile) -> None:
        """
        Raises:
            NotFoundError: If the property was not a favorite
        """
        removed = await self.favorite_repo.remove_favorite(current_user.id, property_id)
        if not removed:
            raise NotFoundError("Favorite", str(property_id))

        logger.info(f"Property {property_id} unfavorited by {current_user.id}")

    async def list_favorites(self, current_user: Profile) -> List[Favorite]:
        return await self.favorite_repo.get_user_favorites(current_user.id)

    async def is_favorite(self, property_id: uuid.UUID, current_user: Profile) -> bool:
        return await self.favorite_repo.get_favorite(current_user.id, property_id) is not None
