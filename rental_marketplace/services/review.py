"""
Review service: one review per (user, property), created or replaced in place.
"""

from typing import Optional, List, Tuple
from sqlalchemy.ext.asyncio import AsyncSession
from rental_marketplace.repositories.review import ReviewRepository
from rental_marketplace.repositories.property import PropertyRepository
from rental_marketplace.models.review import Review
from rental_marketplace.models.profile import Profile
from rental_marketplace.schemas.review import ReviewUpsert
from rental_marketplace.utils.exceptions import PropertyNotFoundError, InsufficientPermissionsError
import uuid
import logging

logger = logging.getLogger(__name__)


class ReviewService:

    def __init__(self, db_session: AsyncSession):
        self.db = db_session
        self.review_repo = ReviewRepository(db_session)
        self.property_repo = PropertyRepository(db_session)

    async def upsert_review(
        self,
        property_id: uuid.UUID,
        review_data: ReviewUpsert,
        current_user: Profile
    ) -> Tuple[Review, bool]:
        """
        Create the caller's review of a property, or replace its rating and comment.

        A concurrent insert for the same pair fails on the unique constraint
        and surfaces as a 409.

        Returns:
            Tuple of (review, created) where created is False for an update

        Raises:
            InsufficientPermissionsError: If the caller is a rent provider
            PropertyNotFoundError: If the property doesn't exist
        """
        if current_user.is_rent_provider:
            raise InsufficientPermissionsError("review properties")

        if not await self.property_repo.exists(property_id):
            raise PropertyNotFoundError(str(property_id))

        comment = review_data.comment or None
        existing = await self.review_repo.get_user_review(current_user.id, property_id)

        if existing:
            review = await self.review_repo.update(existing.id, {
                "rating": review_data.rating,
                "comment": comment,
            })
            logger.info(f"Review {review.id} updated by {current_user.id} for property {property_id}")
            return review, False

        review = await self.review_repo.create({
            "property_id": property_id,
            "user_id": current_user.id,
            "rating": review_data.rating,
            "comment": comment,
        })
        logger.info(f"Review {review.id} created by {current_user.id} for property {property_id}")
        return review, True

    async def list_reviews(self, property_id: uuid.UUID) -> Tuple[List[Review], Optional[float]]:
        """
        Reviews of a property, newest first, with the average rating.

        Raises:
            PropertyNotFoundError: If the property doesn't exist
        """
        if not await self.property_repo.exists(property_id):
            raise PropertyNotFoundError(str(property_id))

        reviews = await self.review_repo.get_property_reviews(property_id)
        _, average_rating = await self.property_repo.get_review_stats(property_id)
        return reviews, average_rating

    async def get_my_review(self, property_id: uuid.UUID, current_user: Profile) -> Optional[Review]:
        return await self.review_repo.get_user_review(current_user.id, property_id)
