"""
Property repository for managing property listings with search and filtering.
Keeps the ordered image gallery in step with the primary image reference.
"""

from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, and_, or_, func, desc
from sqlalchemy.orm import selectinload
from rental_marketplace.repositories.base import BaseRepository
from rental_marketplace.models.property import Property, PropertyType, AvailabilityStatus
from rental_marketplace.models.image import PropertyImage
from rental_marketplace.models.review import Review
from typing import Optional, List, Dict, Any, Tuple
import uuid
import logging

logger = logging.getLogger(__name__)


class PropertySearchFilters:
    """Data class for property search filters."""

    def __init__(
        self,
        location: Optional[str] = None,
        property_type: Optional[PropertyType] = None,
        min_price: Optional[int] = None,
        max_price: Optional[int] = None,
        min_bedrooms: Optional[int] = None,
        availability_status: Optional[AvailabilityStatus] = None,
        search_text: Optional[str] = None,
        rent_provider_id: Optional[uuid.UUID] = None
    ):
        self.location = location
        self.property_type = property_type
        self.min_price = min_price
        self.max_price = max_price
        self.min_bedrooms = min_bedrooms
        self.availability_status = availability_status
        self.search_text = search_text
        self.rent_provider_id = rent_provider_id


class PropertyRepository(BaseRepository[Property]):
    """
    Repository for property listings and their image galleries.
    """

    def __init__(self, db: AsyncSession):
        super().__init__(Property, db)

    async def create_property(self, property_data: Dict[str, Any], image_urls: List[str]) -> Property:
        """
        Create a property together with its ordered image gallery.

        The first URL becomes the primary image_url; every URL is stored as a
        PropertyImage whose display_order is its position in the list.

        Args:
            property_data: Column values for the property
            image_urls: Ordered image URLs

        Returns:
            Created property with images loaded
        """
        property_obj = Property(**property_data)
        property_obj.image_url = image_urls[0] if image_urls else None
        property_obj.images = [
            PropertyImage(image_url=url, display_order=index)
            for index, url in enumerate(image_urls)
        ]
        async with self._transaction("create property"):
            self.db.add(property_obj)

        created = await self.get_property_with_details(property_obj.id)
        logger.info(f"Created property: {created.title} (ID: {created.id})")
        return created

    async def update_property(
        self,
        property_id: uuid.UUID,
        update_data: Dict[str, Any],
        image_urls: Optional[List[str]] = None
    ) -> Optional[Property]:
        """
        Update property columns and optionally replace the image gallery.

        Args:
            property_id: UUID of the property
            update_data: Column values to change
            image_urls: New ordered image list, or None to keep the current one

        Returns:
            Updated property with details loaded, None if not found
        """
        property_obj = await self.get_property_with_details(property_id)
        if property_obj is None:
            return None

        async with self._transaction(f"update property {property_id}"):
            for field, value in update_data.items():
                setattr(property_obj, field, value)

            if image_urls is not None:
                # delete-orphan removes the previous gallery rows on flush
                property_obj.images = [
                    PropertyImage(image_url=url, display_order=index)
                    for index, url in enumerate(image_urls)
                ]
                property_obj.image_url = image_urls[0] if image_urls else None

        updated = await self.get_property_with_details(property_id)
        logger.info(f"Updated property: {property_id}")
        return updated

    async def get_property_with_details(self, property_id: uuid.UUID) -> Optional[Property]:
        """
        Get property with its provider and ordered images.

        Args:
            property_id: UUID of the property

        Returns:
            Property with loaded relationships or None if not found
        """
        try:
            query = (
                select(Property)
                .options(
                    selectinload(Property.rent_provider),
                    selectinload(Property.images)
                )
                .where(Property.id == property_id)
                .execution_options(populate_existing=True)
            )

            result = await self.db.execute(query)
            property_obj = result.scalar_one_or_none()

            if property_obj:
                logger.debug(f"Retrieved property with details: {property_id}")

            return property_obj
        except Exception as e:
            logger.error(f"Failed to get property with details {property_id}: {e}")
            raise

    async def search_properties(
        self,
        filters: PropertySearchFilters,
        skip: int = 0,
        limit: int = 20
    ) -> Tuple[List[Property], int]:
        """
        Search properties with filtering and pagination, newest first.

        Args:
            filters: PropertySearchFilters instance with search criteria
            skip: Number of records to skip for pagination
            limit: Maximum number of records to return

        Returns:
            Tuple of (properties list, total count)
        """
        try:
            query = select(Property).options(selectinload(Property.images))
            count_query = select(func.count(Property.id))

            conditions = self._build_filter_conditions(filters)
            if conditions:
                query = query.where(and_(*conditions))
                count_query = count_query.where(and_(*conditions))

            count_result = await self.db.execute(count_query)
            total_count = count_result.scalar()

            query = query.order_by(desc(Property.created_at)).offset(skip).limit(limit)

            result = await self.db.execute(query)
            properties = result.scalars().all()

            logger.debug(f"Property search returned {len(properties)} of {total_count} total results")
            return list(properties), total_count
        except Exception as e:
            logger.error(f"Failed to search properties: {e}")
            raise

    def _build_filter_conditions(self, filters: PropertySearchFilters) -> List:
        """
        Build SQLAlchemy filter conditions from search filters.

        Args:
            filters: PropertySearchFilters instance

        Returns:
            List of SQLAlchemy conditions
        """
        conditions = []

        # Location filter (case-insensitive partial match)
        if filters.location:
            conditions.append(Property.location.ilike(f"%{filters.location}%"))

        if filters.property_type:
            conditions.append(Property.type == filters.property_type)

        if filters.min_price is not None:
            conditions.append(Property.price >= filters.min_price)
        if filters.max_price is not None:
            conditions.append(Property.price <= filters.max_price)

        if filters.min_bedrooms is not None:
            conditions.append(Property.bedrooms >= filters.min_bedrooms)

        if filters.availability_status:
            conditions.append(Property.availability_status == filters.availability_status)

        if filters.rent_provider_id:
            conditions.append(Property.rent_provider_id == filters.rent_provider_id)

        # Text search in title and description
        if filters.search_text:
            search_term = f"%{filters.search_text}%"
            conditions.append(
                or_(
                    Property.title.ilike(search_term),
                    Property.description.ilike(search_term)
                )
            )

        return conditions

    async def get_properties_by_provider(
        self,
        rent_provider_id: uuid.UUID,
        skip: int = 0,
        limit: int = 20
    ) -> Tuple[List[Property], int]:
        """
        Get properties owned by a rent provider, newest first.

        Returns:
            Tuple of (properties list, total count)
        """
        return await self.search_properties(
            PropertySearchFilters(rent_provider_id=rent_provider_id),
            skip=skip,
            limit=limit
        )

    async def get_review_stats(self, property_id: uuid.UUID) -> Tuple[int, Optional[float]]:
        """
        Get review count and average rating for a property.

        Returns:
            Tuple of (review count, average rating or None without reviews)
        """
        try:
            result = await self.db.execute(
                select(func.count(Review.id), func.avg(Review.rating))
                .where(Review.property_id == property_id)
            )
            count, average = result.one()
            return count, (round(float(average), 2) if average is not None else None)
        except Exception as e:
            logger.error(f"Failed to get review stats for property {property_id}: {e}")
            raise
