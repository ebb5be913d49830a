"""
Property model for rental listings.
Handles property data with location, pricing, preference tags and ownership.
"""

from sqlalchemy import String, Text, Integer, Float, Boolean, JSON, Enum as SQLEnum, Index, ForeignKey, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship
from rental_marketplace.database import Base
import enum
import uuid
from typing import List, Optional, TYPE_CHECKING

if TYPE_CHECKING:
    from rental_marketplace.models.profile import Profile
    from rental_marketplace.models.image import PropertyImage


class PropertyType(str, enum.Enum):
    """Property category offered on the marketplace."""
    APARTMENT = "Apartment"
    VILLA = "Villa"
    INDEPENDENT_HOUSE = "Independent House"
    STUDIO = "Studio"
    PENTHOUSE = "Penthouse"
    PG_CO_LIVING = "PG/Co-Living"
    SERVICED_APARTMENT = "Serviced Apartment"


class AvailabilityStatus(str, enum.Enum):
    """Availability of a property for new bookings."""
    AVAILABLE = "available"
    RENTED = "rented"
    MAINTENANCE = "maintenance"


# Preference tag columns; each holds a de-duplicated list of strings
PREFERENCE_TAG_FIELDS = ("professional_domains", "interests", "lifestyle", "amenities")

DEFAULT_PROPERTY_RATING = 4.5


class Property(Base):
    """
    Property model for managing rental listings.
    Price is the monthly rent in whole currency units.
    """

    __tablename__ = "properties"

    title: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
        index=True,
        comment="Property listing title"
    )

    description: Mapped[str] = mapped_column(
        Text,
        nullable=False,
        comment="Detailed property description"
    )

    location: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
        index=True,
        comment="Property location/address"
    )

    price: Mapped[int] = mapped_column(
        Integer,
        nullable=False,
        index=True,
        comment="Monthly rent in currency units"
    )

    bedrooms: Mapped[int] = mapped_column(
        Integer,
        nullable=False,
        index=True
    )

    bathrooms: Mapped[int] = mapped_column(
        Integer,
        nullable=False
    )

    area: Mapped[int] = mapped_column(
        Integer,
        nullable=False,
        comment="Property area in square feet"
    )

    type: Mapped[PropertyType] = mapped_column(
        SQLEnum(PropertyType),
        nullable=False,
        index=True
    )

    image_url: Mapped[Optional[str]] = mapped_column(
        String(1024),
        nullable=True,
        comment="Primary image reference"
    )

    contact_phone: Mapped[Optional[str]] = mapped_column(
        String(32),
        nullable=True
    )

    availability_status: Mapped[AvailabilityStatus] = mapped_column(
        SQLEnum(AvailabilityStatus),
        nullable=False,
        default=AvailabilityStatus.AVAILABLE,
        index=True
    )

    rent_provider_id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True),
        ForeignKey("profiles.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
        comment="ID of the rent provider who owns this property"
    )

    professional_domains: Mapped[List[str]] = mapped_column(JSON, nullable=False, default=list)
    interests: Mapped[List[str]] = mapped_column(JSON, nullable=False, default=list)
    lifestyle: Mapped[List[str]] = mapped_column(JSON, nullable=False, default=list)
    amenities: Mapped[List[str]] = mapped_column(JSON, nullable=False, default=list)

    is_verified: Mapped[bool] = mapped_column(
        Boolean,
        nullable=False,
        default=False
    )

    featured: Mapped[bool] = mapped_column(
        Boolean,
        nullable=False,
        default=False
    )

    rating: Mapped[float] = mapped_column(
        Float,
        nullable=False,
        default=DEFAULT_PROPERTY_RATING
    )

    rent_provider: Mapped["Profile"] = relationship("Profile")

    images: Mapped[List["PropertyImage"]] = relationship(
        "PropertyImage",
        back_populates="property_rel",
        cascade="all, delete-orphan",
        passive_deletes=True,
        order_by="PropertyImage.display_order",
        lazy="selectin"
    )

    def __repr__(self) -> str:
        """String representation of the property."""
        return f"<Property(id={self.id}, title={self.title}, price={self.price})>"

    @property
    def is_available(self) -> bool:
        """Whether the property accepts new booking requests."""
        return self.availability_status == AvailabilityStatus.AVAILABLE

    @property
    def daily_rate(self) -> float:
        """Flat daily rate: the monthly price spread over 30 days."""
        return self.price / 30

    def to_dict(self, include_images: bool = False) -> dict:
        """
        Convert property to dictionary.

        Args:
            include_images: Whether to include the ordered image list

        Returns:
            Dictionary representation of property
        """
        result = {
            "id": str(self.id),
            "title": self.title,
            "description": self.description,
            "location": self.location,
            "price": self.price,
            "bedrooms": self.bedrooms,
            "bathrooms": self.bathrooms,
            "area": self.area,
            "type": self.type.value,
            "image_url": self.image_url,
            "contact_phone": self.contact_phone,
            "availability_status": self.availability_status.value,
            "rent_provider_id": str(self.rent_provider_id),
            "is_verified": self.is_verified,
            "featured": self.featured,
            "rating": self.rating,
            "created_at": self.created_at.isoformat(),
            "updated_at": self.updated_at.isoformat(),
        }
        for field in PREFERENCE_TAG_FIELDS:
            result[field] = list(getattr(self, field) or [])

        if include_images:
            result["images"] = [image.to_dict() for image in self.images]

        return result

    def to_summary(self) -> dict:
        """Compact representation embedded in bookings and favorites."""
        return {
            "id": str(self.id),
            "title": self.title,
            "location": self.location,
            "price": self.price,
            "image_url": self.image_url,
            "bedrooms": self.bedrooms,
            "bathrooms": self.bathrooms,
            "area": self.area,
            "type": self.type.value,
            "availability_status": self.availability_status.value,
        }


# Composite index for the public search (location, type, price)
search_index = Index(
    'idx_properties_search',
    Property.location,
    Property.type,
    Property.price
)

# Composite index for a provider's dashboard listing
provider_created_index = Index(
    'idx_properties_provider_created',
    Property.rent_provider_id,
    Property.created_at.desc()
)
