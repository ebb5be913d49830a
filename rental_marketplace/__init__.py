"""
Rental Marketplace API: property listings, bookings and notifications.
"""
