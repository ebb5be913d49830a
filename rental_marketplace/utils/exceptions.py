"""
Error types of the Rental Marketplace API.

API errors carry their HTTP status and a machine-readable error code as class
attributes; ErrorHandlerService renders them into the common error envelope.
Mail relay errors use the relay's own {error, message} body instead.
"""

from typing import Any, Dict, Optional, List
from fastapi import HTTPException, status


class APIException(HTTPException):
    """Base for errors reported to API clients."""

    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR
    error_code: str = "API_ERROR"

    def __init__(
        self,
        detail: str,
        details: Optional[List[Dict[str, Any]]] = None,
        headers: Optional[Dict[str, str]] = None
    ):
        super().__init__(status_code=type(self).status_code, detail=detail, headers=headers)
        self.details = details or []


class ValidationError(APIException):
    status_code = status.HTTP_422_UNPROCESSABLE_ENTITY
    error_code = "VALIDATION_ERROR"

    def __init__(self, detail: str, field_errors: Optional[List[Dict[str, str]]] = None):
        super().__init__(detail, details=field_errors)

    @property
    def field_errors(self) -> List[Dict[str, Any]]:
        return self.details


class BadRequestError(APIException):
    status_code = status.HTTP_400_BAD_REQUEST
    error_code = "BAD_REQUEST"


class NotFoundError(APIException):
    status_code = status.HTTP_404_NOT_FOUND
    error_code = "NOT_FOUND"

    def __init__(self, resource: str, resource_id: Optional[str] = None):
        detail = f"{resource} not found"
        if resource_id:
            detail += f" with ID: {resource_id}"
        super().__init__(detail)


class UnauthorizedError(APIException):
    status_code = status.HTTP_401_UNAUTHORIZED
    error_code = "UNAUTHORIZED"

    def __init__(self, detail: str = "Authentication required"):
        super().__init__(detail, headers={"WWW-Authenticate": "Bearer"})


class ForbiddenError(APIException):
    status_code = status.HTTP_403_FORBIDDEN
    error_code = "FORBIDDEN"

    def __init__(self, detail: str = "Access forbidden"):
        super().__init__(detail)


class ConflictError(APIException):
    status_code = status.HTTP_409_CONFLICT
    error_code = "CONFLICT"


# Authentication
class InvalidCredentialsError(UnauthorizedError):
    error_code = "INVALID_CREDENTIALS"

    def __init__(self, detail: str = "Invalid email or password"):
        super().__init__(detail)


class TokenExpiredError(UnauthorizedError):
    error_code = "TOKEN_EXPIRED"

    def __init__(self, detail: str = "Token has expired"):
        super().__init__(detail)


class InvalidTokenError(UnauthorizedError):
    error_code = "INVALID_TOKEN"

    def __init__(self, detail: str = "Invalid token"):
        super().__init__(detail)


class InsufficientPermissionsError(ForbiddenError):
    """The caller's role does not allow the action (renters vs rent providers)."""

    error_code = "INSUFFICIENT_PERMISSIONS"

    def __init__(self, action: str):
        super().__init__(f"Insufficient permissions to {action}")


class DuplicateResourceError(ConflictError):
    error_code = "DUPLICATE_RESOURCE"

    def __init__(self, resource: str, identifier: str):
        super().__init__(f"{resource} with identifier '{identifier}' already exists")


# Properties
class PropertyNotFoundError(NotFoundError):
    error_code = "PROPERTY_NOT_FOUND"

    def __init__(self, property_id: str):
        super().__init__("Property", property_id)


class PropertyOwnershipError(ForbiddenError):
    error_code = "NOT_PROPERTY_OWNER"

    def __init__(self, detail: str = "You don't own this property"):
        super().__init__(detail)


class PropertyStatusError(BadRequestError):
    """Property availability prevents booking it."""

    error_code = "PROPERTY_UNAVAILABLE"


# Bookings
class BookingNotFoundError(NotFoundError):
    error_code = "BOOKING_NOT_FOUND"

    def __init__(self, booking_id: str):
        super().__init__("Booking", booking_id)


class BookingOwnershipError(ForbiddenError):
    """Caller is neither the requester nor the provider of the booking."""

    error_code = "NOT_BOOKING_PARTY"

    def __init__(self, detail: str = "You are not allowed to manage this booking"):
        super().__init__(detail)


class BookingConflictError(ConflictError):
    """Requested dates overlap a pending or confirmed booking of the same property."""

    error_code = "BOOKING_DATES_TAKEN"

    def __init__(self, detail: str = "The selected dates are already booked"):
        super().__init__(detail)


class InvalidBookingTransitionError(ConflictError):
    error_code = "INVALID_BOOKING_TRANSITION"

    def __init__(self, current: str, requested: str):
        super().__init__(f"Cannot change booking status from '{current}' to '{requested}'")


# Email
class EmailDeliveryError(Exception):
    """The relay or SMTP server rejected or could not take a message. Internal to email delivery."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code


class MailRelayError(Exception):
    """
    Failure answered by the mail relay endpoint.
    Rendered as {"error": error, "message": message} so relay clients see one shape.
    """

    def __init__(self, status_code: int, error: str, message: Optional[str] = None):
        super().__init__(error)
        self.status_code = status_code
        self.error = error
        self.message = message
