"""
Pydantic schemas for property reviews.
"""

from pydantic import BaseModel, Field, field_validator
from typing import Optional, List
from datetime import datetime
from rental_marketplace.models.review import MIN_RATING, MAX_RATING


class ReviewUpsert(BaseModel):
    """Create or replace the caller's review of a property."""

    rating: int = Field(..., ge=MIN_RATING, le=MAX_RATING, description="Rating from 1 to 5")
    comment: Optional[str] = Field(None, max_length=2000)

    @field_validator('comment')
    @classmethod
    def blank_comment_to_none(cls, v):
        if v is not None and not v.strip():
            return None
        return v


class ReviewerSummary(BaseModel):
    full_name: str
    avatar_url: Optional[str] = None


class ReviewResponse(BaseModel):
    id: str
    property_id: str
    user_id: str
    rating: int
    comment: Optional[str] = None
    created_at: datetime
    updated_at: datetime
    user_profile: Optional[ReviewerSummary] = None


class ReviewListResponse(BaseModel):
    reviews: List[ReviewResponse]
    total: int
    average_rating: Optional[float] = None
