"""
Repository layer for data access operations.
Wraps async SQLAlchemy queries with logging and transaction handling.
"""

from rental_marketplace.repositories.base import BaseRepository
from rental_marketplace.repositories.profile import ProfileRepository
from rental_marketplace.repositories.property import PropertyRepository, PropertySearchFilters
from rental_marketplace.repositories.booking import BookingRepository
from rental_marketplace.repositories.review import ReviewRepository
from rental_marketplace.repositories.favorite import FavoriteRepository
from rental_marketplace.repositories.notification import NotificationRepository
from rental_marketplace.repositories.outbox import EmailOutboxRepository

__all__ = [
    "BaseRepository",
    "ProfileRepository",
    "PropertyRepository",
    "PropertySearchFilters",
    "BookingRepository",
    "ReviewRepository",
    "FavoriteRepository",
    "NotificationRepository",
    "EmailOutboxRepository",
]
