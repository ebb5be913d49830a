"""
Review repository: one review per (user, property).
"""

from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, desc
from sqlalchemy.orm import selectinload
from rental_marketplace.repositories.base import BaseRepository
from rental_marketplace.models.review import Review
from typing import Optional, List
import uuid
import logging

logger = logging.getLogger(__name__)


class ReviewRepository(BaseRepository[Review]):

    def __init__(self, db: AsyncSession):
        super().__init__(Review, db)

    async def get_user_review(self, user_id: uuid.UUID, property_id: uuid.UUID) -> Optional[Review]:
        """Get the review a profile left on a property, if any."""
        try:
            result = await self.db.execute(
                select(Review).where(Review.user_id == user_id, Review.property_id == property_id)
            )
            return result.scalar_one_or_none()
        except Exception as e:
            logger.error(f"Failed to get review of {user_id} for property {property_id}: {e}")
            raise

    async def get_property_reviews(
        self,
        property_id: uuid.UUID,
        skip: int = 0,
        limit: int = 50
    ) -> List[Review]:
        """Get reviews of a property with reviewer profiles, newest first."""
        try:
            query = (
                select(Review)
                .options(selectinload(Review.user))
                .execution_options(populate_existing=True)
                .where(Review.property_id == property_id)
                .order_by(desc(Review.created_at))
                .offset(skip)
                .limit(limit)
            )
            result = await self.db.execute(query)
            return list(result.scalars().all())
        except Exception as e:
            logger.error(f"Failed to list reviews for property {property_id}: {e}")
            raise
