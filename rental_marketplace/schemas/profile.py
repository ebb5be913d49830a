"""
Pydantic schemas for profiles.
"""

from pydantic import BaseModel, Field, field_validator
from typing import Optional
from datetime import datetime
from rental_marketplace.models.profile import ProfileRole


class ProfileSummary(BaseModel):
    """Public subset of a profile embedded in bookings."""

    id: str
    full_name: str
    email: str
    phone: Optional[str] = None
    avatar_url: Optional[str] = None


class ProfileResponse(BaseModel):
    """Profile response schema (excluding sensitive data)."""

    id: str = Field(..., description="Profile unique identifier")
    email: str = Field(..., description="Profile email address")
    full_name: str = Field(..., description="Full name")
    phone: Optional[str] = Field(None, description="Contact phone number")
    role: ProfileRole = Field(..., description="Profile role")
    avatar_url: Optional[str] = Field(None, description="Avatar image URL")
    created_at: datetime = Field(..., description="Signup timestamp")
    updated_at: datetime = Field(..., description="Last update timestamp")


class ProfileUpdate(BaseModel):
    """
    Profile update schema. Only the name and phone are editable;
    unknown fields such as email or role are rejected.
    """

    model_config = {"extra": "forbid"}

    full_name: Optional[str] = Field(None, min_length=1, max_length=255)
    phone: Optional[str] = Field(None, max_length=32)

    @field_validator('full_name')
    @classmethod
    def validate_full_name(cls, v):
        if v is not None and not v.strip():
            raise ValueError("Full name cannot be empty")
        return v
