"""
Booking API endpoints for rental requests and provider decisions.
"""

from fastapi import APIRouter, Depends, status, Query, Path
from typing import List
from uuid import UUID

from rental_marketplace.config import settings
from rental_marketplace.models.booking import Booking
from rental_marketplace.models.profile import Profile
from rental_marketplace.services.booking import BookingService
from rental_marketplace.schemas.booking import (
    BookingCreate,
    BookingStatusUpdate,
    BookingResponse,
    BookingListResponse
)
from rental_marketplace.schemas.error import get_crud_error_responses, get_error_responses
from rental_marketplace.utils.dependencies import get_current_user, get_booking_service


router = APIRouter(prefix="/bookings", tags=["Bookings"])


def _to_response(booking: Booking) -> BookingResponse:
    return BookingResponse.model_validate(
        booking.to_dict(include_property=True, include_user=True, include_provider=True)
    )


def _to_list_response(bookings: List[Booking], total: int, page: int, page_size: int) -> BookingListResponse:
    return BookingListResponse(
        bookings=[_to_response(b) for b in bookings],
        total=total,
        page=page,
        page_size=page_size
    )


@router.post(
    "",
    response_model=BookingResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Request a booking",
    description="Create a pending booking. The amount is the monthly price / 30 per booked day. "
                "The provider is notified by email and in-app notification on a best-effort basis.",
    responses=get_crud_error_responses()
)
async def create_booking(
    booking_data: BookingCreate,
    current_user: Profile = Depends(get_current_user),
    booking_service: BookingService = Depends(get_booking_service)
) -> BookingResponse:
    """
    Create a booking request.

    Args:
        booking_data: Property and date range
        current_user: Renter making the request
        booking_service: Booking service instance

    Returns:
        Created pending booking

    Raises:
        PropertyStatusError: If the property is not available
        BookingConflictError: If overlapping bookings are disallowed and the dates are taken
    """
    booking = await booking_service.create_booking(booking_data, current_user)
    return _to_response(booking)


@router.get(
    "/mine",
    response_model=BookingListResponse,
    summary="List my bookings",
    responses=get_error_responses(401)
)
async def list_my_bookings(
    page: int = Query(1, ge=1),
    page_size: int = Query(settings.default_page_size, ge=1, le=settings.max_page_size),
    current_user: Profile = Depends(get_current_user),
    booking_service: BookingService = Depends(get_booking_service)
) -> BookingListResponse:
    bookings, total = await booking_service.list_user_bookings(current_user, page, page_size)
    return _to_list_response(bookings, total, page, page_size)


@router.get(
    "/provider",
    response_model=BookingListResponse,
    summary="List received bookings",
    description="Bookings of the calling rent provider's properties, newest first.",
    responses=get_error_responses(401, 403)
)
async def list_provider_bookings(
    page: int = Query(1, ge=1),
    page_size: int = Query(settings.default_page_size, ge=1, le=settings.max_page_size),
    current_user: Profile = Depends(get_current_user),
    booking_service: BookingService = Depends(get_booking_service)
) -> BookingListResponse:
    bookings, total = await booking_service.list_provider_bookings(current_user, page, page_size)
    return _to_list_response(bookings, total, page, page_size)


@router.get(
    "/{booking_id}",
    response_model=BookingResponse,
    summary="Get booking",
    responses=get_error_responses(401, 403, 404)
)
async def get_booking(
    booking_id: UUID = Path(..., description="Booking ID"),
    current_user: Profile = Depends(get_current_user),
    booking_service: BookingService = Depends(get_booking_service)
) -> BookingResponse:
    booking = await booking_service.get_booking(booking_id, current_user)
    return _to_response(booking)


@router.patch(
    "/{booking_id}/status",
    response_model=BookingResponse,
    summary="Confirm or cancel a booking",
    description="Provider decision on a booking. Confirming emails the renter once; "
                "a failed email never reverts the status.",
    responses=get_crud_error_responses()
)
async def update_booking_status(
    status_data: BookingStatusUpdate,
    booking_id: UUID = Path(..., description="Booking ID"),
    current_user: Profile = Depends(get_current_user),
    booking_service: BookingService = Depends(get_booking_service)
) -> BookingResponse:
    booking = await booking_service.update_booking_status(booking_id, status_data.status, current_user)
    return _to_response(booking)
