"""
API routers for the Rental Marketplace API.
"""

from . import auth, profiles, properties, reviews, bookings, favorites, notifications, email

__all__ = ["auth", "profiles", "properties", "reviews", "bookings", "favorites", "notifications", "email"]
