"""
Error response schemas for API documentation and consistent error formatting.
Provides standardized error response models for OpenAPI documentation.
"""

from pydantic import BaseModel, Field
from typing import List, Optional, Any, Dict


class ErrorDetail(BaseModel):
    """Schema for individual error detail."""

    field: Optional[str] = Field(None, description="Field name that caused the error", examples=["body -> end_date"])
    message: str = Field(..., description="Human-readable error message")
    type: Optional[str] = Field(None, description="Error type identifier")
    input: Optional[Any] = Field(None, description="Input value that caused the error")


class ErrorResponse(BaseModel):
    """Schema for standardized error responses."""

    code: str = Field(..., description="Error code identifier", examples=["VALIDATION_ERROR"])
    message: str = Field(..., description="Human-readable error message")
    timestamp: str = Field(..., description="Error timestamp in ISO format")
    request_id: Optional[str] = Field(None, description="Short request identifier for tracking")
    details: Optional[List[ErrorDetail]] = Field(None, description="Field errors for validation failures")


class APIErrorResponse(BaseModel):
    """Schema for API error response wrapper."""

    error: ErrorResponse = Field(..., description="Error information")


def _example(code: str, message: str) -> Dict[str, Any]:
    return {
        "application/json": {
            "example": {
                "error": {
                    "code": code,
                    "message": message,
                    "timestamp": "2024-06-01T00:00:00.000000Z",
                    "request_id": "abc12345"
                }
            }
        }
    }


# Common error response examples for documentation
COMMON_ERROR_RESPONSES = {
    400: {
        "description": "Bad Request - Invalid request parameters",
        "model": APIErrorResponse,
        "content": _example("BAD_REQUEST", "Property is not available for booking"),
    },
    401: {
        "description": "Unauthorized - Authentication required",
        "model": APIErrorResponse,
        "content": _example("UNAUTHORIZED", "Authentication required"),
    },
    403: {
        "description": "Forbidden - Insufficient permissions",
        "model": APIErrorResponse,
        "content": _example("FORBIDDEN", "Insufficient permissions to create properties"),
    },
    404: {
        "description": "Not Found - Resource does not exist",
        "model": APIErrorResponse,
        "content": _example("NOT_FOUND", "Property not found with ID: 123e4567-e89b-12d3-a456-426614174000"),
    },
    409: {
        "description": "Conflict - Resource state conflict",
        "model": APIErrorResponse,
        "content": _example("CONFLICT", "The selected dates are already booked"),
    },
    422: {
        "description": "Unprocessable Entity - Validation failed",
        "model": APIErrorResponse,
        "content": _example("VALIDATION_ERROR", "Request validation failed"),
    },
    500: {
        "description": "Internal Server Error",
        "model": APIErrorResponse,
        "content": _example("INTERNAL_SERVER_ERROR", "An unexpected error occurred. Please try again later."),
    },
}


def get_error_responses(*status_codes: int) -> Dict[int, Dict[str, Any]]:
    """
    Get error response schemas for specific status codes.

    Args:
        status_codes: HTTP status codes to include

    Returns:
        Dictionary of error response schemas
    """
    return {
        code: COMMON_ERROR_RESPONSES[code]
        for code in status_codes
        if code in COMMON_ERROR_RESPONSES
    }


def get_auth_error_responses() -> Dict[int, Dict[str, Any]]:
    """Get authentication and authorization error response schemas."""
    return get_error_responses(401, 403)


def get_crud_error_responses() -> Dict[int, Dict[str, Any]]:
    """Get error response schemas for CRUD operations."""
    return get_error_responses(400, 401, 403, 404, 409, 422, 500)
