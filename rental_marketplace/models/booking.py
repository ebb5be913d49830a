"""
Booking model for rental requests against a property.
A booking is immutable after creation except for its status.
"""

from sqlalchemy import String, Text, Float, Date, ForeignKey, Index, Enum as SQLEnum, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship
from rental_marketplace.database import Base
from datetime import date
import enum
import uuid
from typing import Optional, TYPE_CHECKING

if TYPE_CHECKING:
    from rental_marketplace.models.profile import Profile
    from rental_marketplace.models.property import Property


class BookingStatus(str, enum.Enum):
    """Booking lifecycle states."""
    PENDING = "pending"
    CONFIRMED = "confirmed"
    CANCELLED = "cancelled"


# Statuses a provider may set on a booking
DECISION_STATUSES = (BookingStatus.CONFIRMED, BookingStatus.CANCELLED)

# Statuses that hold the dates of a property
ACTIVE_STATUSES = (BookingStatus.PENDING, BookingStatus.CONFIRMED)


class Booking(Base):
    """
    Booking request from a user for a date range of a property.
    rent_provider_id is copied from the property when the booking is created.
    """

    __tablename__ = "bookings"

    property_id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True),
        ForeignKey("properties.id", ondelete="CASCADE"),
        nullable=False,
        index=True
    )

    user_id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True),
        ForeignKey("profiles.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
        comment="Profile that requested the booking"
    )

    rent_provider_id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True),
        ForeignKey("profiles.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
        comment="Provider of the property at booking time"
    )

    start_date: Mapped[date] = mapped_column(Date, nullable=False)

    end_date: Mapped[date] = mapped_column(Date, nullable=False)

    total_amount: Mapped[float] = mapped_column(
        Float,
        nullable=False,
        comment="Prorated rent for the booked days, unrounded"
    )

    message: Mapped[Optional[str]] = mapped_column(
        Text,
        nullable=True
    )

    status: Mapped[BookingStatus] = mapped_column(
        SQLEnum(BookingStatus),
        nullable=False,
        default=BookingStatus.PENDING,
        index=True
    )

    property: Mapped["Property"] = relationship("Property")

    user: Mapped["Profile"] = relationship("Profile", foreign_keys=[user_id])

    rent_provider: Mapped["Profile"] = relationship("Profile", foreign_keys=[rent_provider_id])

    def __repr__(self) -> str:
        return f"<Booking(id={self.id}, property_id={self.property_id}, status={self.status})>"

    def overlaps(self, start_date: date, end_date: date) -> bool:
        """Inclusive calendar-day overlap check."""
        return self.start_date <= end_date and start_date <= self.end_date

    def to_dict(
        self,
        include_property: bool = False,
        include_user: bool = False,
        include_provider: bool = False
    ) -> dict:
        """
        Convert booking to dictionary.

        Relationship flags must only be set when the relationship was loaded
        with the query that produced this booking.
        """
        result = {
            "id": str(self.id),
            "property_id": str(self.property_id),
            "user_id": str(self.user_id),
            "rent_provider_id": str(self.rent_provider_id),
            "start_date": self.start_date.isoformat(),
            "end_date": self.end_date.isoformat(),
            "total_amount": self.total_amount,
            "message": self.message,
            "status": self.status.value,
            "created_at": self.created_at.isoformat(),
            "updated_at": self.updated_at.isoformat(),
        }

        if include_property and self.property is not None:
            result["property"] = self.property.to_summary()
        if include_user and self.user is not None:
            result["user_profile"] = self.user.to_summary()
        if include_provider and self.rent_provider is not None:
            result["provider_profile"] = self.rent_provider.to_summary()

        return result


property_dates_index = Index(
    'idx_bookings_property_dates',
    Booking.property_id,
    Booking.start_date,
    Booking.end_date
)

provider_created_index = Index(
    'idx_bookings_provider_created',
    Booking.rent_provider_id,
    Booking.created_at.desc()
)
