"""
Database models for the Rental Marketplace API.
Includes profiles, properties with images, bookings, reviews, favorites,
notifications and the email outbox.
"""

from rental_marketplace.models.profile import Profile, ProfileRole
from rental_marketplace.models.property import Property, PropertyType, AvailabilityStatus
from rental_marketplace.models.image import PropertyImage
from rental_marketplace.models.booking import Booking, BookingStatus
from rental_marketplace.models.review import Review
from rental_marketplace.models.favorite import Favorite
from rental_marketplace.models.notification import Notification, NotificationType
from rental_marketplace.models.email_outbox import EmailOutbox, OutboxStatus

# Export all models for easy importing
__all__ = [
    "Profile",
    "ProfileRole",
    "Property",
    "PropertyType",
    "AvailabilityStatus",
    "PropertyImage",
    "Booking",
    "BookingStatus",
    "Review",
    "Favorite",
    "Notification",
    "NotificationType",
    "EmailOutbox",
    "OutboxStatus",
]
