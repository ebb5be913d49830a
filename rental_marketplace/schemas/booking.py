"""
Pydantic schemas for booking requests and responses.
"""

from pydantic import BaseModel, Field, model_validator
from typing import Optional, List
from datetime import date, datetime
from rental_marketplace.models.booking import BookingStatus
from rental_marketplace.schemas.property import PropertySummary
from rental_marketplace.schemas.profile import ProfileSummary
import uuid


class BookingCreate(BaseModel):
    """Booking request for a date range of a property."""

    property_id: uuid.UUID = Field(..., description="Property to book")
    start_date: date = Field(..., description="Check-in date", examples=["2024-06-01"])
    end_date: date = Field(..., description="Check-out date", examples=["2024-06-04"])
    message: Optional[str] = Field(None, max_length=2000, description="Optional note for the provider")


class BookingStatusUpdate(BaseModel):
    """Provider decision on a booking."""

    status: BookingStatus = Field(..., description="confirmed or cancelled")

    @model_validator(mode='after')
    def validate_decision(self):
        if self.status == BookingStatus.PENDING:
            raise ValueError("Status must be 'confirmed' or 'cancelled'")
        return self


class BookingResponse(BaseModel):
    """Booking with optional embedded property and profiles."""

    id: str
    property_id: str
    user_id: str
    rent_provider_id: str
    start_date: date
    end_date: date
    total_amount: float = Field(..., description="Prorated rent, monthly price / 30 per day")
    message: Optional[str] = None
    status: BookingStatus
    created_at: datetime
    updated_at: datetime

    property: Optional[PropertySummary] = None
    user_profile: Optional[ProfileSummary] = None
    provider_profile: Optional[ProfileSummary] = None


class BookingListResponse(BaseModel):
    bookings: List[BookingResponse]
    total: int
    page: int
    page_size: int
