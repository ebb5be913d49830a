"""
Booking service for the rental request lifecycle.
Prices date ranges, creates pending bookings and applies provider decisions,
with best-effort email and in-app notifications on each step.
"""

from typing import Optional, List, Tuple
from datetime import date, timedelta
from sqlalchemy.ext.asyncio import AsyncSession
from rental_marketplace.config import Settings, settings as default_settings
from rental_marketplace.repositories.booking import BookingRepository
from rental_marketplace.repositories.property import PropertyRepository
from rental_marketplace.repositories.profile import ProfileRepository
from rental_marketplace.models.booking import Booking, BookingStatus, DECISION_STATUSES
from rental_marketplace.models.profile import Profile
from rental_marketplace.models.notification import NotificationType
from rental_marketplace.schemas.booking import BookingCreate
from rental_marketplace.services.email_dispatch import EmailDispatchService
from rental_marketplace.services.notification import NotificationService
from rental_marketplace.utils.email_templates import (
    booking_request_email_for_provider,
    booking_confirmation_email_for_user,
    format_long_date
)
from rental_marketplace.utils.exceptions import (
    ValidationError,
    InsufficientPermissionsError,
    PropertyNotFoundError,
    PropertyStatusError,
    BookingNotFoundError,
    BookingOwnershipError,
    BookingConflictError,
    InvalidBookingTransitionError
)
import httpx
import math
import uuid
import logging

logger = logging.getLogger(__name__)

DAYS_PER_MONTH = 30


def booking_days(start_date: date, end_date: date) -> int:
    """Number of charged days: whole days between check-in and check-out."""
    return math.ceil((end_date - start_date) / timedelta(days=1))


def calculate_total_amount(monthly_price: int, start_date: date, end_date: date) -> float:
    """
    Prorate the monthly price over the booked days.

    A flat 30-day month is used regardless of the calendar, and the result
    is not rounded: 30000 over 2024-06-01..2024-06-04 is 3000.0.
    """
    return (monthly_price / DAYS_PER_MONTH) * booking_days(start_date, end_date)


class BookingService:
    """
    Service driving bookings from request to provider decision.

    Persistence errors propagate to the caller. Email and in-app notifications
    run after the booking is committed; their failures are logged and never
    undo the booking.
    """

    def __init__(
        self,
        db_session: AsyncSession,
        http_client: Optional[httpx.AsyncClient] = None,
        app_settings: Optional[Settings] = None
    ):
        self.db = db_session
        self.settings = app_settings or default_settings
        self.booking_repo = BookingRepository(db_session)
        self.property_repo = PropertyRepository(db_session)
        self.profile_repo = ProfileRepository(db_session)
        self.email_service = EmailDispatchService(db_session, http_client, self.settings)
        self.notification_service = NotificationService(db_session)

    async def create_booking(self, booking_data: BookingCreate, current_user: Profile) -> Booking:
        """
        Create a pending booking for a property.

        Args:
            booking_data: Property and date range requested
            current_user: Renter making the request

        Returns:
            Created booking with property and profiles loaded

        Raises:
            InsufficientPermissionsError: If the caller is a rent provider
            ValidationError: If the end date is before the start date
            PropertyNotFoundError: If the property doesn't exist
            PropertyStatusError: If the property is not available
            BookingConflictError: If overlapping bookings are disallowed and the dates are taken
        """
        if current_user.is_rent_provider:
            raise InsufficientPermissionsError("book properties")

        start_date, end_date = booking_data.start_date, booking_data.end_date
        if end_date < start_date:
            raise ValidationError(
                "End date must be on or after the start date",
                field_errors=[{"field": "end_date", "message": "End date must be on or after the start date"}]
            )

        property_obj = await self.property_repo.get_by_id(booking_data.property_id)
        if not property_obj:
            raise PropertyNotFoundError(str(booking_data.property_id))

        if not property_obj.is_available:
            raise PropertyStatusError(
                f"Property is not available for booking (status: {property_obj.availability_status.value})"
            )

        if not self.settings.allow_overlapping_bookings:
            overlapping = await self.booking_repo.find_overlapping(property_obj.id, start_date, end_date)
            if overlapping:
                logger.info(
                    f"Booking request for property {property_obj.id} overlaps {len(overlapping)} active booking(s)"
                )
                raise BookingConflictError()

        total_amount = calculate_total_amount(property_obj.price, start_date, end_date)

        booking = await self.booking_repo.create({
            "property_id": property_obj.id,
            "user_id": current_user.id,
            "rent_provider_id": property_obj.rent_provider_id,
            "start_date": start_date,
            "end_date": end_date,
            "total_amount": total_amount,
            "message": booking_data.message or None,
            "status": BookingStatus.PENDING,
        })
        booking_id = booking.id
        logger.info(
            f"Booking {booking_id} created by {current_user.email} for property {property_obj.id} "
            f"({start_date} to {end_date}, {total_amount})"
        )

        await self._notify_provider_of_request(
            provider_id=property_obj.rent_provider_id,
            property_title=property_obj.title,
            property_location=property_obj.location,
            user_name=current_user.full_name or current_user.email or "Guest User",
            user_email=current_user.email,
            start_date=start_date,
            end_date=end_date,
            total_amount=total_amount,
            message=booking.message
        )

        return await self.booking_repo.get_booking_with_details(booking_id)

    async def update_booking_status(
        self,
        booking_id: uuid.UUID,
        new_status: BookingStatus,
        current_user: Profile
    ) -> Booking:
        """
        Apply a provider decision to a booking.

        Args:
            booking_id: UUID of the booking
            new_status: confirmed or cancelled
            current_user: Provider making the decision

        Returns:
            Updated booking with property and profiles loaded

        Raises:
            ValidationError: If the status is not a decision status
            BookingNotFoundError: If the booking doesn't exist
            BookingOwnershipError: If the caller is not the booking's provider
            InvalidBookingTransitionError: If strict transitions are on and the booking was already decided
        """
        if new_status not in DECISION_STATUSES:
            raise ValidationError("Status must be 'confirmed' or 'cancelled'")

        booking = await self.booking_repo.get_booking_with_details(booking_id)
        if not booking:
            raise BookingNotFoundError(str(booking_id))

        if booking.rent_provider_id != current_user.id:
            raise BookingOwnershipError()

        previous_status = booking.status
        if self.settings.strict_booking_transitions and previous_status != BookingStatus.PENDING:
            raise InvalidBookingTransitionError(previous_status.value, new_status.value)

        property_obj = booking.property
        requester = booking.user
        provider = booking.rent_provider
        property_title = (property_obj.title if property_obj else None) or "Property"
        property_location = property_obj.location if property_obj else ""
        requester_id = booking.user_id
        requester_email = requester.email if requester else None
        provider_name = (provider.full_name if provider else None) or "Property Owner"
        start_date, end_date, total_amount = booking.start_date, booking.end_date, booking.total_amount

        await self.booking_repo.update(booking_id, {"status": new_status})
        logger.info(
            f"Booking {booking_id} status changed by {current_user.email}: "
            f"{previous_status.value} -> {new_status.value}"
        )

        if new_status == BookingStatus.CONFIRMED and requester_email:
            await self._send_confirmation_email(
                to=requester_email,
                property_title=property_title,
                property_location=property_location,
                provider_name=provider_name,
                start_date=start_date,
                end_date=end_date,
                total_amount=total_amount
            )

        await self._notify_requester_of_decision(requester_id, new_status, property_title)

        return await self.booking_repo.get_booking_with_details(booking_id)

    async def get_booking(self, booking_id: uuid.UUID, current_user: Profile) -> Booking:
        """
        Get a booking visible to its requester or its provider.

        Raises:
            BookingNotFoundError: If the booking doesn't exist
            BookingOwnershipError: If the caller is neither party
        """
        booking = await self.booking_repo.get_booking_with_details(booking_id)
        if not booking:
            raise BookingNotFoundError(str(booking_id))

        if current_user.id not in (booking.user_id, booking.rent_provider_id):
            raise BookingOwnershipError("You are not allowed to view this booking")

        return booking

    async def list_user_bookings(
        self,
        current_user: Profile,
        page: int = 1,
        page_size: int = 20
    ) -> Tuple[List[Booking], int]:
        """Bookings the caller requested, newest first."""
        skip = (page - 1) * page_size
        return await self.booking_repo.get_bookings_for_user(current_user.id, skip, page_size)

    async def list_provider_bookings(
        self,
        current_user: Profile,
        page: int = 1,
        page_size: int = 20
    ) -> Tuple[List[Booking], int]:
        """
        Bookings received by the calling provider, newest first.

        Raises:
            InsufficientPermissionsError: If the caller is not a rent provider
        """
        if not current_user.is_rent_provider:
            raise InsufficientPermissionsError("view received bookings")

        skip = (page - 1) * page_size
        return await self.booking_repo.get_bookings_for_provider(current_user.id, skip, page_size)

    async def _notify_provider_of_request(
        self,
        provider_id: uuid.UUID,
        property_title: str,
        property_location: str,
        user_name: str,
        user_email: str,
        start_date: date,
        end_date: date,
        total_amount: float,
        message: Optional[str]
    ) -> None:
        title = property_title or "Property"

        try:
            provider = await self.profile_repo.get_by_id(provider_id)
            if provider and provider.email:
                email = booking_request_email_for_provider(
                    property_title=title,
                    property_location=property_location,
                    user_name=user_name,
                    user_email=user_email,
                    start_date=start_date,
                    end_date=end_date,
                    total_amount=total_amount,
                    message=message,
                    app_url=self.settings.app_url
                )
                await self.email_service.send(provider.email, email.subject, email.html)
            else:
                logger.warning(f"No email on file for provider {provider_id}; booking request email skipped")
        except Exception as e:
            logger.error(f"Failed to send booking request email to provider {provider_id}: {e}", exc_info=True)

        try:
            await self.notification_service.notify(
                user_id=provider_id,
                type=NotificationType.BOOKING_REQUEST,
                title="New booking request",
                message=(
                    f"{user_name} requested {title} from {format_long_date(start_date)} "
                    f"to {format_long_date(end_date)}."
                ),
                link="/dashboard/bookings"
            )
        except Exception as e:
            logger.error(f"Failed to write booking request notification for {provider_id}: {e}", exc_info=True)

    async def _send_confirmation_email(
        self,
        to: str,
        property_title: str,
        property_location: str,
        provider_name: str,
        start_date: date,
        end_date: date,
        total_amount: float
    ) -> None:
        try:
            email = booking_confirmation_email_for_user(
                property_title=property_title,
                property_location=property_location,
                provider_name=provider_name,
                start_date=start_date,
                end_date=end_date,
                total_amount=total_amount,
                app_url=self.settings.app_url
            )
            await self.email_service.send(to, email.subject, email.html)
        except Exception as e:
            logger.error(f"Failed to send booking confirmation email to {to}: {e}", exc_info=True)

    async def _notify_requester_of_decision(
        self,
        user_id: uuid.UUID,
        new_status: BookingStatus,
        property_title: str
    ) -> None:
        if new_status == BookingStatus.CONFIRMED:
            notification_type = NotificationType.BOOKING_CONFIRMED
            title = "Booking confirmed"
            message = f"Your booking for {property_title} has been confirmed."
        else:
            notification_type = NotificationType.BOOKING_CANCELLED
            title = "Booking cancelled"
            message = f"Your booking request for {property_title} was cancelled."

        try:
            await self.notification_service.notify(
                user_id=user_id,
                type=notification_type,
                title=title,
                message=message,
                link="/bookings"
            )
        except Exception as e:
            logger.error(f"Failed to write {notification_type} notification for {user_id}: {e}", exc_info=True)
