"""
FastAPI dependency injection utilities for authentication, services and the mail relay client.
Provides reusable dependencies for route protection and profile extraction.
"""

from typing import Optional
from fastapi import Depends, Request
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from sqlalchemy.ext.asyncio import AsyncSession
from rental_marketplace.database import get_db
from rental_marketplace.models.profile import Profile
from rental_marketplace.services.auth import AuthService
from rental_marketplace.services.profile import ProfileService
from rental_marketplace.services.property import PropertyService
from rental_marketplace.services.booking import BookingService
from rental_marketplace.services.review import ReviewService
from rental_marketplace.services.favorite import FavoriteService
from rental_marketplace.services.notification import NotificationService
from rental_marketplace.services.mailer import MailerService
from rental_marketplace.utils.exceptions import (
    UnauthorizedError,
    InvalidTokenError,
    TokenExpiredError,
    InsufficientPermissionsError
)
import httpx


# HTTP Bearer token security scheme
security = HTTPBearer(auto_error=False)


def get_email_http_client(request: Request) -> Optional[httpx.AsyncClient]:
    """
    Shared client for the mail relay, opened in the application lifespan.
    None makes the dispatcher open a short-lived client per delivery.
    """
    return getattr(request.app.state, "email_http_client", None)


async def get_auth_service(db: AsyncSession = Depends(get_db)) -> AuthService:
    """
    Get authentication service instance.

    Args:
        db: Database session

    Returns:
        AuthService instance
    """
    return AuthService(db)


async def get_profile_service(db: AsyncSession = Depends(get_db)) -> ProfileService:
    return ProfileService(db)


async def get_property_service(db: AsyncSession = Depends(get_db)) -> PropertyService:
    """
    Get property service instance.

    Args:
        db: Database session

    Returns:
        PropertyService instance
    """
    return PropertyService(db)


async def get_booking_service(
    db: AsyncSession = Depends(get_db),
    http_client: Optional[httpx.AsyncClient] = Depends(get_email_http_client)
) -> BookingService:
    """Get booking service wired to the mail relay client."""
    return BookingService(db, http_client)


async def get_review_service(db: AsyncSession = Depends(get_db)) -> ReviewService:
    return ReviewService(db)


async def get_favorite_service(db: AsyncSession = Depends(get_db)) -> FavoriteService:
    return FavoriteService(db)


async def get_notification_service(db: AsyncSession = Depends(get_db)) -> NotificationService:
    return NotificationService(db)


def get_mailer_service() -> MailerService:
    return MailerService()


async def get_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
    auth_service: AuthService = Depends(get_auth_service)
) -> Profile:
    """
    Get current authenticated profile from JWT token.

    Args:
        credentials: HTTP Bearer credentials
        auth_service: Authentication service

    Returns:
        Current Profile object

    Raises:
        UnauthorizedError: If no token provided or token is invalid
        TokenExpiredError: If token is expired
    """
    if not credentials:
        raise UnauthorizedError("Authentication token required")

    try:
        return await auth_service.get_current_profile(credentials.credentials)
    except (InvalidTokenError, TokenExpiredError):
        raise
    except Exception as e:
        raise UnauthorizedError(f"Authentication failed: {str(e)}")


async def get_current_provider(
    current_user: Profile = Depends(get_current_user)
) -> Profile:
    """
    Get current profile with the rent provider role.

    Raises:
        InsufficientPermissionsError: If the profile is not a rent provider
    """
    if not current_user.is_rent_provider:
        raise InsufficientPermissionsError("access rent provider resources")

    return current_user
