"""
HTML email templates for the booking lifecycle.
Provider booking requests and renter booking confirmations.
"""

from datetime import date
from decimal import Decimal, ROUND_HALF_UP
from html import escape
from typing import Optional, NamedTuple
from rental_marketplace.config import settings

SIGNATURE = "Smart house: your rental services Team"


class RenderedEmail(NamedTuple):
    subject: str
    html: str


def format_long_date(value: date) -> str:
    """Format a date like 'Saturday, 1 June 2024'."""
    return f"{value:%A}, {value.day} {value:%B %Y}"


def format_inr(amount: float) -> str:
    """
    Format an amount in rupees without decimals using Indian digit grouping,
    e.g. 100000 -> '₹1,00,000'.
    """
    rounded = int(Decimal(str(amount)).quantize(Decimal("1"), rounding=ROUND_HALF_UP))
    sign = "-" if rounded < 0 else ""
    digits = str(abs(rounded))

    if len(digits) > 3:
        head, tail = digits[:-3], digits[-3:]
        groups = []
        while len(head) > 2:
            groups.insert(0, head[-2:])
            head = head[:-2]
        if head:
            groups.insert(0, head)
        digits = ",".join(groups + [tail])

    return f"{sign}₹{digits}"


def _base_url(app_url: Optional[str]) -> str:
    return (app_url or settings.app_url).rstrip("/")


def booking_request_email_for_provider(
    property_title: str,
    property_location: str,
    user_name: str,
    user_email: str,
    start_date: date,
    end_date: date,
    total_amount: float,
    message: Optional[str] = None,
    app_url: Optional[str] = None
) -> RenderedEmail:
    """
    Email telling a provider that a renter requested their property.

    Args:
        property_title: Title of the booked property
        property_location: Location of the booked property
        user_name: Renter's display name
        user_email: Renter's email
        start_date: Check-in date
        end_date: Check-out date
        total_amount: Prorated booking amount
        message: Optional note from the renter
        app_url: Base URL for the dashboard link, defaults to settings.app_url

    Returns:
        RenderedEmail with subject and HTML body
    """
    title = escape(property_title)
    guest_message = ""
    if message:
        guest_message = f"""
            <div style="background: white; padding: 20px; border-radius: 8px; margin: 20px 0; box-shadow: 0 2px 4px rgba(0,0,0,0.1);">
              <h2 style="color: #667eea; margin-top: 0;">Message from Guest</h2>
              <p style="font-style: italic;">{escape(message)}</p>
            </div>"""

    html = f"""<!DOCTYPE html>
<html>
  <head>
    <meta charset="utf-8">
    <meta name="viewport" content="width=device-width, initial-scale=1.0">
    <title>New Booking Request</title>
  </head>
  <body style="font-family: Arial, sans-serif; line-height: 1.6; color: #333; max-width: 600px; margin: 0 auto; padding: 20px;">
    <div style="background: linear-gradient(135deg, #667eea 0%, #764ba2 100%); padding: 30px; text-align: center; border-radius: 10px 10px 0 0;">
      <h1 style="color: white; margin: 0;">New Booking Request</h1>
    </div>
    <div style="background: #f9f9f9; padding: 30px; border-radius: 0 0 10px 10px;">
      <p style="font-size: 16px;">Hello,</p>
      <p style="font-size: 16px;">You have received a new booking request for your property.</p>
      <div style="background: white; padding: 20px; border-radius: 8px; margin: 20px 0; box-shadow: 0 2px 4px rgba(0,0,0,0.1);">
        <h2 style="color: #667eea; margin-top: 0;">Property Details</h2>
        <p><strong>Property:</strong> {title}</p>
        <p><strong>Location:</strong> {escape(property_location)}</p>
      </div>
      <div style="background: white; padding: 20px; border-radius: 8px; margin: 20px 0; box-shadow: 0 2px 4px rgba(0,0,0,0.1);">
        <h2 style="color: #667eea; margin-top: 0;">Guest Information</h2>
        <p><strong>Name:</strong> {escape(user_name)}</p>
        <p><strong>Email:</strong> {escape(user_email)}</p>
      </div>
      <div style="background: white; padding: 20px; border-radius: 8px; margin: 20px 0; box-shadow: 0 2px 4px rgba(0,0,0,0.1);">
        <h2 style="color: #667eea; margin-top: 0;">Booking Details</h2>
        <p><strong>Check-in Date:</strong> {format_long_date(start_date)}</p>
        <p><strong>Check-out Date:</strong> {format_long_date(end_date)}</p>
        <p><strong>Total Amount:</strong> <span style="font-size: 20px; color: #667eea; font-weight: bold;">{format_inr(total_amount)}</span></p>
      </div>{guest_message}
      <div style="text-align: center; margin: 30px 0;">
        <a href="{_base_url(app_url)}/dashboard/bookings"
           style="display: inline-block; background: #667eea; color: white; padding: 15px 30px; text-decoration: none; border-radius: 5px; font-weight: bold;">
          View Booking Details
        </a>
      </div>
      <p style="font-size: 14px; color: #666;">Please log in to your dashboard to accept or reject this booking request.</p>
      <p style="font-size: 14px; color: #666;">Best regards,<br>{SIGNATURE}</p>
    </div>
  </body>
</html>
"""
    return RenderedEmail(subject=f"New Booking Request for {property_title}", html=html)


def booking_confirmation_email_for_user(
    property_title: str,
    property_location: str,
    provider_name: str,
    start_date: date,
    end_date: date,
    total_amount: float,
    app_url: Optional[str] = None
) -> RenderedEmail:
    """Email telling a renter that the provider confirmed their booking."""
    html = f"""<!DOCTYPE html>
<html>
  <head>
    <meta charset="utf-8">
    <meta name="viewport" content="width=device-width, initial-scale=1.0">
    <title>Booking Confirmed</title>
  </head>
  <body style="font-family: Arial, sans-serif; line-height: 1.6; color: #333; max-width: 600px; margin: 0 auto; padding: 20px;">
    <div style="background: linear-gradient(135deg, #10b981 0%, #059669 100%); padding: 30px; text-align: center; border-radius: 10px 10px 0 0;">
      <h1 style="color: white; margin: 0;">Booking Confirmed!</h1>
    </div>
    <div style="background: #f9f9f9; padding: 30px; border-radius: 0 0 10px 10px;">
      <p style="font-size: 16px;">Hello,</p>
      <p style="font-size: 16px;">Great news! Your booking request has been confirmed by the rental provider.</p>
      <div style="background: white; padding: 20px; border-radius: 8px; margin: 20px 0; box-shadow: 0 2px 4px rgba(0,0,0,0.1);">
        <h2 style="color: #10b981; margin-top: 0;">Property Details</h2>
        <p><strong>Property:</strong> {escape(property_title)}</p>
        <p><strong>Location:</strong> {escape(property_location)}</p>
        <p><strong>Property Owner:</strong> {escape(provider_name)}</p>
      </div>
      <div style="background: white; padding: 20px; border-radius: 8px; margin: 20px 0; box-shadow: 0 2px 4px rgba(0,0,0,0.1);">
        <h2 style="color: #10b981; margin-top: 0;">Booking Details</h2>
        <p><strong>Check-in Date:</strong> {format_long_date(start_date)}</p>
        <p><strong>Check-out Date:</strong> {format_long_date(end_date)}</p>
        <p><strong>Total Amount:</strong> <span style="font-size: 20px; color: #10b981; font-weight: bold;">{format_inr(total_amount)}</span></p>
      </div>
      <div style="text-align: center; margin: 30px 0;">
        <a href="{_base_url(app_url)}/bookings"
           style="display: inline-block; background: #10b981; color: white; padding: 15px 30px; text-decoration: none; border-radius: 5px; font-weight: bold;">
          View My Bookings
        </a>
      </div>
      <p style="font-size: 14px; color: #666;">If you have any questions or need to make changes to your booking, please contact the property owner or our support team.</p>
      <p style="font-size: 14px; color: #666;">We look forward to serving you!<br><strong>{SIGNATURE}</strong></p>
    </div>
  </body>
</html>
"""
    return RenderedEmail(subject=f"Booking Confirmed: {property_title}", html=html)
