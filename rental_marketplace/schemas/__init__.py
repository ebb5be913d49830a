"""
Pydantic schemas for request/response validation.
"""

from .auth import (
    SignupRequest,
    LoginRequest,
    RefreshTokenRequest,
    TokenResponse,
    AccessTokenResponse,
    AuthResponse
)
from .profile import ProfileSummary, ProfileResponse, ProfileUpdate
from .property import (
    PropertyCreate,
    PropertyUpdate,
    PropertyResponse,
    PropertySummary,
    PropertyImageResponse,
    PropertyListResponse
)
from .booking import BookingCreate, BookingStatusUpdate, BookingResponse, BookingListResponse
from .review import ReviewUpsert, ReviewResponse, ReviewListResponse
from .favorite import FavoriteResponse, FavoriteListResponse, FavoriteStatusResponse
from .notification import NotificationResponse, NotificationListResponse, MarkAllReadResponse
from .email import EmailSendRequest, EmailSendResponse
from .error import ErrorDetail, ErrorResponse, APIErrorResponse

__all__ = [
    "SignupRequest",
    "LoginRequest",
    "RefreshTokenRequest",
    "TokenResponse",
    "AccessTokenResponse",
    "AuthResponse",
    "ProfileSummary",
    "ProfileResponse",
    "ProfileUpdate",
    "PropertyCreate",
    "PropertyUpdate",
    "PropertyResponse",
    "PropertySummary",
    "PropertyImageResponse",
    "PropertyListResponse",
    "BookingCreate",
    "BookingStatusUpdate",
    "BookingResponse",
    "BookingListResponse",
    "ReviewUpsert",
    "ReviewResponse",
    "ReviewListResponse",
    "FavoriteResponse",
    "FavoriteListResponse",
    "FavoriteStatusResponse",
    "NotificationResponse",
    "NotificationListResponse",
    "MarkAllReadResponse",
    "EmailSendRequest",
    "EmailSendResponse",
    "ErrorDetail",
    "ErrorResponse",
    "APIErrorResponse",
]
