"""
Pydantic schemas for property requests and responses.
Handles property CRUD operations, search filters and validation.
"""

from pydantic import BaseModel, Field, field_validator
from typing import Optional, List
from datetime import datetime
from rental_marketplace.models.property import PropertyType, AvailabilityStatus
from rental_marketplace.schemas.profile import ProfileSummary


def _dedupe_tags(values: Optional[List[str]]) -> Optional[List[str]]:
    """Strip, drop blanks and de-duplicate tags keeping first-seen order."""
    if values is None:
        return None
    seen = []
    for value in values:
        tag = value.strip()
        if tag and tag not in seen:
            seen.append(tag)
    return seen


def _clean_image_urls(values: Optional[List[str]]) -> Optional[List[str]]:
    if values is None:
        return None
    urls = [value.strip() for value in values if value and value.strip()]
    if not urls:
        raise ValueError("At least one image URL is required")
    return urls


class PropertyBase(BaseModel):
    """Base property schema with common fields."""

    title: str = Field(
        ...,
        min_length=3,
        max_length=255,
        description="Property listing title",
        examples=["Sea-facing 2BHK in Bandra"]
    )

    description: str = Field(
        ...,
        min_length=1,
        max_length=5000,
        description="Detailed property description"
    )

    location: str = Field(
        ...,
        min_length=2,
        max_length=255,
        description="Property location/address",
        examples=["Bandra West, Mumbai"]
    )

    price: int = Field(
        ...,
        gt=0,
        description="Monthly rent in INR",
        examples=[30000]
    )

    bedrooms: int = Field(..., ge=0, le=50, description="Number of bedrooms")

    bathrooms: int = Field(..., ge=0, le=50, description="Number of bathrooms")

    area: int = Field(..., gt=0, le=1000000, description="Area in square feet")

    type: PropertyType = Field(..., description="Property type", examples=["Apartment"])

    contact_phone: Optional[str] = Field(None, max_length=32)

    professional_domains: List[str] = Field(default_factory=list)
    interests: List[str] = Field(default_factory=list)
    lifestyle: List[str] = Field(default_factory=list)
    amenities: List[str] = Field(default_factory=list)

    @field_validator('title', 'description', 'location')
    @classmethod
    def validate_text(cls, v):
        """Reject blank text and trim whitespace."""
        if not v or not v.strip():
            raise ValueError("Field cannot be empty")
        return v.strip()

    @field_validator('professional_domains', 'interests', 'lifestyle', 'amenities')
    @classmethod
    def validate_tags(cls, v):
        return _dedupe_tags(v)


class PropertyCreate(PropertyBase):
    """Schema for creating a new property."""

    image_urls: List[str] = Field(
        ...,
        min_length=1,
        description="Ordered image URLs; the first one is the primary image"
    )

    @field_validator('image_urls')
    @classmethod
    def validate_image_urls(cls, v):
        return _clean_image_urls(v)


class PropertyUpdate(BaseModel):
    """Schema for updating an existing property; omitted fields are unchanged."""

    title: Optional[str] = Field(None, min_length=3, max_length=255)
    description: Optional[str] = Field(None, min_length=1, max_length=5000)
    location: Optional[str] = Field(None, min_length=2, max_length=255)
    price: Optional[int] = Field(None, gt=0)
    bedrooms: Optional[int] = Field(None, ge=0, le=50)
    bathrooms: Optional[int] = Field(None, ge=0, le=50)
    area: Optional[int] = Field(None, gt=0, le=1000000)
    type: Optional[PropertyType] = None
    contact_phone: Optional[str] = Field(None, max_length=32)
    availability_status: Optional[AvailabilityStatus] = None
    professional_domains: Optional[List[str]] = None
    interests: Optional[List[str]] = None
    lifestyle: Optional[List[str]] = None
    amenities: Optional[List[str]] = None
    image_urls: Optional[List[str]] = Field(
        None,
        description="Replacement image list; the primary image follows its first entry"
    )

    @field_validator('title', 'description', 'location')
    @classmethod
    def validate_text(cls, v):
        if v is not None:
            if not v.strip():
                raise ValueError("Field cannot be empty")
            return v.strip()
        return v

    @field_validator('professional_domains', 'interests', 'lifestyle', 'amenities')
    @classmethod
    def validate_tags(cls, v):
        return _dedupe_tags(v)

    @field_validator('image_urls')
    @classmethod
    def validate_image_urls(cls, v):
        return _clean_image_urls(v)


class PropertyImageResponse(BaseModel):
    id: str
    image_url: str
    display_order: int


class PropertySummary(BaseModel):
    """Compact property embedded in bookings and favorites."""

    id: str
    title: str
    location: str
    price: int
    image_url: Optional[str] = None
    bedrooms: int
    bathrooms: int
    area: int
    type: PropertyType
    availability_status: AvailabilityStatus


class PropertyResponse(PropertyBase):
    """Schema for property response with additional metadata."""

    id: str = Field(..., description="Property unique identifier")
    rent_provider_id: str = Field(..., description="Owning rent provider")
    image_url: Optional[str] = Field(None, description="Primary image URL")
    availability_status: AvailabilityStatus
    is_verified: bool
    featured: bool
    rating: float
    created_at: datetime
    updated_at: datetime

    images: List[PropertyImageResponse] = Field(default_factory=list)

    rent_provider: Optional[ProfileSummary] = Field(None, description="Provider (detail view only)")
    review_count: Optional[int] = Field(None, description="Number of reviews (detail view only)")
    average_rating: Optional[float] = Field(None, description="Mean review rating (detail view only)")


class PropertyListResponse(BaseModel):
    """Schema for paginated property list response."""

    properties: List[PropertyResponse]
    total: int = Field(..., description="Total number of properties matching the criteria")
    page: int
    page_size: int
    total_pages: int
    has_next: bool
    has_previous: bool
