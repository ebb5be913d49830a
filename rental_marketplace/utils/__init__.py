"""
Utility modules for the Rental Marketplace API.
"""

from .auth import (
    create_access_token,
    create_refresh_token,
    decode_token,
    issue_tokens,
    TokenPayload,
    TokenType
)

from .exceptions import (
    APIException,
    ValidationError,
    NotFoundError,
    UnauthorizedError,
    ForbiddenError,
    ConflictError,
    BadRequestError,
    InvalidCredentialsError,
    TokenExpiredError,
    InvalidTokenError,
    InsufficientPermissionsError,
    DuplicateResourceError,
    PropertyNotFoundError,
    PropertyOwnershipError,
    PropertyStatusError,
    BookingNotFoundError,
    BookingOwnershipError,
    BookingConflictError,
    InvalidBookingTransitionError,
    EmailDeliveryError,
    MailRelayError
)

# Dependencies are imported directly where needed to avoid circular imports

__all__ = [
    # Auth utilities
    "create_access_token",
    "create_refresh_token",
    "decode_token",
    "issue_tokens",
    "TokenPayload",
    "TokenType",

    # Exceptions
    "APIException",
    "ValidationError",
    "NotFoundError",
    "UnauthorizedError",
    "ForbiddenError",
    "ConflictError",
    "BadRequestError",
    "InvalidCredentialsError",
    "TokenExpiredError",
    "InvalidTokenError",
    "InsufficientPermissionsError",
    "DuplicateResourceError",
    "PropertyNotFoundError",
    "PropertyOwnershipError",
    "PropertyStatusError",
    "BookingNotFoundError",
    "BookingOwnershipError",
    "BookingConflictError",
    "InvalidBookingTransitionError",
    "EmailDeliveryError",
    "MailRelayError",
]
