"""
Property service for managing property listings with business logic validation.
Handles CRUD operations, ownership validation and search functionality.
"""

from typing import Optional, List, Dict, Any, Tuple
from sqlalchemy.ext.asyncio import AsyncSession
from rental_marketplace.repositories.property import PropertyRepository, PropertySearchFilters
from rental_marketplace.models.property import Property, PropertyType, AvailabilityStatus, DEFAULT_PROPERTY_RATING
from rental_marketplace.models.profile import Profile
from rental_marketplace.schemas.property import PropertyCreate, PropertyUpdate
from rental_marketplace.utils.exceptions import (
    APIException,
    PropertyNotFoundError,
    ValidationError,
    InsufficientPermissionsError,
    PropertyOwnershipError
)
import uuid
import logging

logger = logging.getLogger(__name__)


def parse_budget(budget: str) -> Tuple[int, Optional[int]]:
    """
    Parse a budget range such as "10000-25000", "100000-" or "100000+".

    A missing or zero upper bound means no maximum.

    Raises:
        ValidationError: If the lower bound is not a number
    """
    min_part, _, max_part = budget.strip().partition("-")
    try:
        min_price = int(min_part.strip().rstrip("+"))
        max_price = int(max_part.strip()) if max_part.strip() else None
    except ValueError:
        raise ValidationError(f"Invalid budget range: '{budget}'")

    return min_price, (max_price or None)


class PropertyService:
    """
    Property service for listings owned by rent providers.
    Only providers create listings and only the owning provider may change them.
    """

    def __init__(self, db_session: AsyncSession):
        self.db = db_session
        self.property_repo = PropertyRepository(db_session)

    async def create_property(self, property_data: PropertyCreate, current_user: Profile) -> Property:
        """
        Create a new property listing for the calling provider.

        Args:
            property_data: Property creation data including ordered image URLs
            current_user: Provider creating the property

        Returns:
            Created property with images

        Raises:
            InsufficientPermissionsError: If the caller is not a rent provider
        """
        if not current_user.is_rent_provider:
            raise InsufficientPermissionsError("create properties")

        create_data = property_data.model_dump(exclude={"image_urls"})
        create_data.update({
            "rent_provider_id": current_user.id,
            "availability_status": AvailabilityStatus.AVAILABLE,
            "is_verified": False,
            "featured": False,
            "rating": DEFAULT_PROPERTY_RATING,
        })

        property_obj = await self.property_repo.create_property(create_data, property_data.image_urls)

        logger.info(f"Property created by {current_user.email}: {property_obj.title} (ID: {property_obj.id})")
        return property_obj

    async def get_property(self, property_id: uuid.UUID) -> Tuple[Property, Dict[str, Any]]:
        """
        Get a property with images, provider and review statistics.

        Returns:
            Tuple of (property, {"review_count", "average_rating"})

        Raises:
            PropertyNotFoundError: If property doesn't exist
        """
        property_obj = await self.property_repo.get_property_with_details(property_id)
        if not property_obj:
            raise PropertyNotFoundError(str(property_id))

        review_count, average_rating = await self.property_repo.get_review_stats(property_id)
        return property_obj, {"review_count": review_count, "average_rating": average_rating}

    async def update_property(
        self,
        property_id: uuid.UUID,
        property_data: PropertyUpdate,
        current_user: Profile
    ) -> Property:
        """
        Update a property owned by the caller.

        Raises:
            PropertyNotFoundError: If property doesn't exist
            PropertyOwnershipError: If the caller doesn't own the property
            ValidationError: If no fields are provided
        """
        existing = await self._get_owned_property(property_id, current_user)

        update_data = property_data.model_dump(exclude_unset=True, exclude={"image_urls"})
        image_urls = property_data.image_urls
        if not update_data and image_urls is None:
            raise ValidationError("No valid fields provided for update")

        # Explicit nulls on required columns are ignored
        update_data = {
            field: value for field, value in update_data.items()
            if value is not None or field == "contact_phone"
        }

        updated = await self.property_repo.update_property(existing.id, update_data, image_urls)
        if not updated:
            raise PropertyNotFoundError(str(property_id))

        logger.info(f"Property updated by {current_user.email}: {property_id}")
        return updated

    async def delete_property(self, property_id: uuid.UUID, current_user: Profile) -> bool:
        """
        Delete a property owned by the caller; images, bookings, reviews and
        favorites of the property go with it.

        Raises:
            PropertyNotFoundError: If property doesn't exist
            PropertyOwnershipError: If the caller doesn't own the property
        """
        await self._get_owned_property(property_id, current_user)

        deleted = await self.property_repo.delete(property_id)
        if not deleted:
            raise PropertyNotFoundError(str(property_id))

        logger.info(f"Property deleted by {current_user.email}: {property_id}")
        return True

    async def search_properties(
        self,
        location: Optional[str] = None,
        property_type: Optional[PropertyType] = None,
        budget: Optional[str] = None,
        min_price: Optional[int] = None,
        max_price: Optional[int] = None,
        min_bedrooms: Optional[int] = None,
        availability_status: Optional[AvailabilityStatus] = None,
        query: Optional[str] = None,
        rent_provider_id: Optional[uuid.UUID] = None,
        page: int = 1,
        page_size: int = 20
    ) -> Tuple[List[Property], int]:
        """
        Search properties, newest first.

        A budget string takes precedence over min_price/max_price.

        Returns:
            Tuple of (properties, total count)
        """
        try:
            if budget:
                min_price, max_price = parse_budget(budget)

            if min_price is not None and max_price is not None and min_price > max_price:
                raise ValidationError("Minimum price cannot be greater than maximum price")

            filters = PropertySearchFilters(
                location=location.strip() if location else None,
                property_type=property_type,
                min_price=min_price,
                max_price=max_price,
                min_bedrooms=min_bedrooms,
                availability_status=availability_status,
                search_text=query.strip() if query else None,
                rent_provider_id=rent_provider_id
            )

            skip = (page - 1) * page_size
            properties, total = await self.property_repo.search_properties(filters, skip, page_size)

            logger.debug(f"Property search returned {len(properties)} of {total}")
            return properties, total

        except APIException:
            raise
        except Exception as e:
            logger.error(f"Failed to search properties: {e}")
            raise

    async def list_provider_properties(
        self,
        current_user: Profile,
        page: int = 1,
        page_size: int = 20
    ) -> Tuple[List[Property], int]:
        """
        Properties owned by the calling provider.

        Raises:
            InsufficientPermissionsError: If the caller is not a rent provider
        """
        if not current_user.is_rent_provider:
            raise InsufficientPermissionsError("manage properties")

        skip = (page - 1) * page_size
        return await self.property_repo.get_properties_by_provider(current_user.id, skip, page_size)

    async def _get_owned_property(self, property_id: uuid.UUID, current_user: Profile) -> Property:
        existing = await self.property_repo.get_by_id(property_id)
        if not existing:
            raise PropertyNotFoundError(str(property_id))

        if not current_user.can_manage_property(existing.rent_provider_id):
            raise PropertyOwnershipError()

        return existing
