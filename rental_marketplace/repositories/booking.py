"""
Booking repository for rental requests and their lifecycle queries.
"""

from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, func, desc
from sqlalchemy.orm import selectinload
from rental_marketplace.repositories.base import BaseRepository
from rental_marketplace.models.booking import Booking, ACTIVE_STATUSES
from typing import Optional, List, Tuple
from datetime import date
import uuid
import logging

logger = logging.getLogger(__name__)


class BookingRepository(BaseRepository[Booking]):
    """
    Repository for bookings. Detail queries load the property and both
    profiles up front so callers never trigger lazy loads.
    """

    def __init__(self, db: AsyncSession):
        super().__init__(Booking, db)

    async def get_booking_with_details(self, booking_id: uuid.UUID) -> Optional[Booking]:
        """
        Get booking joined with its property, requester and provider profiles.

        Args:
            booking_id: UUID of the booking

        Returns:
            Booking with loaded relationships or None if not found
        """
        try:
            query = (
                select(Booking)
                .options(
                    selectinload(Booking.property),
                    selectinload(Booking.user),
                    selectinload(Booking.rent_provider)
                )
                .where(Booking.id == booking_id)
                .execution_options(populate_existing=True)
            )
            result = await self.db.execute(query)
            return result.scalar_one_or_none()
        except Exception as e:
            logger.error(f"Failed to get booking with details {booking_id}: {e}")
            raise

    async def get_bookings_for_user(
        self,
        user_id: uuid.UUID,
        skip: int = 0,
        limit: int = 20
    ) -> Tuple[List[Booking], int]:
        """
        Get bookings requested by a profile, newest first, with property summaries.

        Returns:
            Tuple of (bookings list, total count)
        """
        return await self._list_bookings(Booking.user_id == user_id, skip, limit)

    async def get_bookings_for_provider(
        self,
        rent_provider_id: uuid.UUID,
        skip: int = 0,
        limit: int = 20
    ) -> Tuple[List[Booking], int]:
        """
        Get bookings received by a rent provider, newest first, with property
        summaries and requester profiles.

        Returns:
            Tuple of (bookings list, total count)
        """
        return await self._list_bookings(Booking.rent_provider_id == rent_provider_id, skip, limit)

    async def _list_bookings(self, condition, skip: int, limit: int) -> Tuple[List[Booking], int]:
        try:
            count_result = await self.db.execute(select(func.count(Booking.id)).where(condition))
            total_count = count_result.scalar()

            query = (
                select(Booking)
                .options(
                    selectinload(Booking.property),
                    selectinload(Booking.user),
                    selectinload(Booking.rent_provider)
                )
                .where(condition)
                .execution_options(populate_existing=True)
                .order_by(desc(Booking.created_at))
                .offset(skip)
                .limit(limit)
            )
            result = await self.db.execute(query)
            bookings = result.scalars().all()

            logger.debug(f"Retrieved {len(bookings)} of {total_count} bookings")
            return list(bookings), total_count
        except Exception as e:
            logger.error(f"Failed to list bookings: {e}")
            raise

    async def find_overlapping(
        self,
        property_id: uuid.UUID,
        start_date: date,
        end_date: date
    ) -> List[Booking]:
        """
        Find pending or confirmed bookings of a property whose date range
        overlaps [start_date, end_date], inclusive on both ends.
        """
        try:
            query = select(Booking).where(
                Booking.property_id == property_id,
                Booking.status.in_(ACTIVE_STATUSES),
                Booking.start_date <= end_date,
                Booking.end_date >= start_date
            )
            result = await self.db.execute(query)
            return list(result.scalars().all())
        except Exception as e:
            logger.error(f"Failed to check overlapping bookings for property {property_id}: {e}")
            raise
