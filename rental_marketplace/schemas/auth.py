"""
Pydantic schemas for authentication requests and responses.
Handles signup, login and token refresh data validation.
"""

from pydantic import BaseModel, EmailStr, Field, field_validator
from typing import Optional
from rental_marketplace.models.profile import ProfileRole
from rental_marketplace.schemas.profile import ProfileResponse


class SignupRequest(BaseModel):
    """Signup request schema."""

    email: EmailStr = Field(
        ...,
        description="Email address used to sign in",
        examples=["renter@example.com"]
    )
    password: str = Field(
        ...,
        min_length=8,
        max_length=128,
        description="Password (minimum 8 characters)",
        examples=["securepassword123"]
    )
    full_name: str = Field(
        ...,
        min_length=1,
        max_length=255,
        description="Full name shown to the other party of a booking",
        examples=["Asha Rao"]
    )
    role: ProfileRole = Field(
        default=ProfileRole.USER,
        description="user to rent properties, rent_provider to list them"
    )
    phone: Optional[str] = Field(
        None,
        max_length=32,
        description="Contact phone number"
    )

    @field_validator('email')
    @classmethod
    def normalize_email(cls, v):
        """Normalize email to lowercase."""
        return v.lower().strip()

    @field_validator('full_name')
    @classmethod
    def validate_full_name(cls, v):
        if not v.strip():
            raise ValueError("Full name cannot be empty")
        return v.strip()


class LoginRequest(BaseModel):
    """Login request schema."""

    email: EmailStr = Field(
        ...,
        description="Profile email address",
        examples=["renter@example.com"]
    )
    password: str = Field(
        ...,
        min_length=1,
        max_length=128,
        description="Profile password"
    )

    @field_validator('email')
    @classmethod
    def normalize_email(cls, v):
        """Normalize email to lowercase."""
        return v.lower().strip()


class RefreshTokenRequest(BaseModel):
    """Refresh token request schema."""

    refresh_token: str = Field(..., description="Valid refresh token")


class TokenResponse(BaseModel):
    """Token pair response schema."""

    access_token: str = Field(..., description="JWT access token")
    refresh_token: str = Field(..., description="JWT refresh token")
    token_type: str = Field(default="bearer", description="Token type")
    expires_in: int = Field(..., description="Access token expiration time in seconds")


class AccessTokenResponse(BaseModel):
    """Access token response schema."""

    access_token: str = Field(..., description="New JWT access token")
    token_type: str = Field(default="bearer", description="Token type")
    expires_in: int = Field(..., description="Access token expiration time in seconds")


class AuthResponse(BaseModel):
    """Signup and login response: the profile plus its tokens."""

    profile: ProfileResponse = Field(..., description="Signed-in profile")
    tokens: TokenResponse = Field(..., description="Authentication tokens")
