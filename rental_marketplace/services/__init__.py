"""
Service layer for business logic implementation.
Contains services for authentication, listings, bookings, email delivery and error handling.
"""

from .auth import AuthService
from .profile import ProfileService
from .property import PropertyService
from .booking import BookingService
from .review import ReviewService
from .favorite import FavoriteService
from .notification import NotificationService
from .email_dispatch import EmailDispatchService
from .mailer import MailerService
from .error_handler import ErrorHandlerService

__all__ = [
    "AuthService",
    "ProfileService",
    "PropertyService",
    "BookingService",
    "ReviewService",
    "FavoriteService",
    "NotificationService",
    "EmailDispatchService",
    "MailerService",
    "ErrorHandlerService",
]
