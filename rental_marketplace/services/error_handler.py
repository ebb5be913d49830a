"""
Error rendering for the marketplace API.

API errors, request validation failures, database errors and anything
unexpected become {"error": {code, message, timestamp, request_id, details?}}.
Database integrity violations are translated using the marketplace's own
constraints (one review and one favorite per profile and property, rating
range, references to deleted listings or profiles) so clients get a
meaningful 409 instead of a driver message. The mail relay endpoint keeps its
flat {error, message} body.
"""

from typing import Dict, Any, Optional, List, Tuple
from datetime import datetime, timezone
from fastapi import Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError, IntegrityError
from starlette.exceptions import HTTPException as StarletteHTTPException
from rental_marketplace.utils.exceptions import APIException, MailRelayError
import logging
import uuid

logger = logging.getLogger(__name__)

REQUEST_ID_HEADER = "X-Request-ID"

# (markers found in driver messages, error code, client message). Postgres names
# the constraint; SQLite names CHECK constraints but lists columns for UNIQUE.
INTEGRITY_RULES: List[Tuple[Tuple[str, ...], str, str]] = [
    (
        ("uq_reviews_user_property", "reviews.user_id, reviews.property_id"),
        "DUPLICATE_REVIEW",
        "You have already reviewed this property"
    ),
    (
        ("uq_favorites_user_property", "favorites.user_id, favorites.property_id"),
        "DUPLICATE_FAVORITE",
        "Property is already in your favorites"
    ),
    (
        ("ck_reviews_rating_range",),
        "INVALID_RATING",
        "Rating must be between 1 and 5"
    ),
    (
        ("profiles.email", "ix_profiles_email"),
        "DUPLICATE_EMAIL",
        "An account with this email already exists"
    ),
    (
        ("foreign key",),
        "REFERENCE_NOT_FOUND",
        "The referenced property or profile no longer exists"
    ),
]


class ErrorHandlerService:
    """Builds error responses and logs each handled error once."""

    @staticmethod
    def format_error_response(
        error_code: str,
        message: str,
        request_id: str,
        details: Optional[List[Dict[str, Any]]] = None
    ) -> Dict[str, Any]:
        error = {
            "code": error_code,
            "message": message,
            "timestamp": datetime.now(timezone.utc).strftime("%Y-%m-%dT%H:%M:%S.%fZ"),
            "request_id": request_id,
        }
        if details:
            error["details"] = details
        return {"error": error}

    @staticmethod
    def handle_api_exception(exception: APIException, request: Optional[Request] = None) -> JSONResponse:
        """Render a marketplace API error; 5xx are logged as errors, the rest as warnings."""
        request_id = ErrorHandlerService._new_request_id()
        level = logging.ERROR if exception.status_code >= 500 else logging.WARNING
        logger.log(
            level,
            f"[{request_id}] {ErrorHandlerService._route(request)} -> "
            f"{exception.status_code} {exception.error_code}: {exception.detail}"
        )

        return ErrorHandlerService._respond(
            exception.status_code,
            ErrorHandlerService.format_error_response(
                exception.error_code, exception.detail, request_id, exception.details
            ),
            request_id,
            exception.headers
        )

    @staticmethod
    def handle_validation_error(
        exception: RequestValidationError,
        request: Optional[Request] = None
    ) -> JSONResponse:
        """
        Render request validation failures with one detail per field.
        Field paths read like "body -> end_date" or "query -> page_size".
        """
        request_id = ErrorHandlerService._new_request_id()
        details = [
            {
                "field": " -> ".join(str(loc) for loc in error["loc"]),
                "message": error["msg"],
                "type": error["type"],
                "input": jsonable_encoder(error.get("input")),
            }
            for error in exception.errors()
        ]
        logger.warning(
            f"[{request_id}] {ErrorHandlerService._route(request)} -> 422 VALIDATION_ERROR: "
            f"{', '.join(detail['field'] for detail in details)}"
        )

        return ErrorHandlerService._respond(
            422,
            ErrorHandlerService.format_error_response(
                "VALIDATION_ERROR", "Request validation failed", request_id, details
            ),
            request_id
        )

    @staticmethod
    def handle_database_error(exception: SQLAlchemyError, request: Optional[Request] = None) -> JSONResponse:
        """
        Integrity violations become 409 with a marketplace error code; any other
        database failure is a 500 that never exposes driver details.
        """
        request_id = ErrorHandlerService._new_request_id()

        if isinstance(exception, IntegrityError):
            status_code = 409
            error_code, message = ErrorHandlerService.classify_integrity_error(exception)
            logger.warning(f"[{request_id}] {ErrorHandlerService._route(request)} -> 409 {error_code}: {exception.orig}")
        else:
            status_code = 500
            error_code, message = "DATABASE_ERROR", "Database operation failed"
            logger.error(
                f"[{request_id}] {ErrorHandlerService._route(request)} -> 500 DATABASE_ERROR: "
                f"{type(exception).__name__}: {exception}",
                exc_info=exception
            )

        return ErrorHandlerService._respond(
            status_code,
            ErrorHandlerService.format_error_response(error_code, message, request_id),
            request_id
        )

    @staticmethod
    def classify_integrity_error(exception: IntegrityError) -> Tuple[str, str]:
        """Map an integrity violation to (error code, client message)."""
        driver_message = str(exception.orig).lower()
        for markers, error_code, message in INTEGRITY_RULES:
            if any(marker in driver_message for marker in markers):
                return error_code, message
        return "INTEGRITY_ERROR", "Data integrity constraint violation"

    @staticmethod
    def handle_http_exception(
        exception: StarletteHTTPException,
        request: Optional[Request] = None
    ) -> JSONResponse:
        """Routing errors (unknown path, wrong method) and explicit HTTPExceptions such as /health's 503."""
        request_id = ErrorHandlerService._new_request_id()
        logger.warning(
            f"[{request_id}] {ErrorHandlerService._route(request)} -> {exception.status_code}: {exception.detail}"
        )

        return ErrorHandlerService._respond(
            exception.status_code,
            ErrorHandlerService.format_error_response(
                f"HTTP_{exception.status_code}", str(exception.detail), request_id
            ),
            request_id,
            getattr(exception, "headers", None)
        )

    @staticmethod
    def handle_mail_relay_error(exception: MailRelayError, request: Optional[Request] = None) -> JSONResponse:
        """Relay failures answered in the relay's flat body, which the email outbox records as last_error."""
        request_id = ErrorHandlerService._new_request_id()
        level = logging.ERROR if exception.status_code >= 500 else logging.WARNING
        logger.log(
            level,
            f"[{request_id}] {ErrorHandlerService._route(request)} -> {exception.status_code}: "
            f"{exception.error}" + (f" ({exception.message})" if exception.message else "")
        )

        content: Dict[str, Any] = {"error": exception.error}
        if exception.message:
            content["message"] = exception.message
        return ErrorHandlerService._respond(exception.status_code, content, request_id)

    @staticmethod
    def handle_unexpected_error(exception: Exception, request: Optional[Request] = None) -> JSONResponse:
        request_id = ErrorHandlerService._new_request_id()
        logger.error(
            f"[{request_id}] {ErrorHandlerService._route(request)} -> 500: {type(exception).__name__}: {exception}",
            exc_info=exception
        )

        return ErrorHandlerService._respond(
            500,
            ErrorHandlerService.format_error_response(
                "INTERNAL_SERVER_ERROR", "An unexpected error occurred. Please try again later.", request_id
            ),
            request_id
        )

    @staticmethod
    def _respond(
        status_code: int,
        content: Dict[str, Any],
        request_id: str,
        headers: Optional[Dict[str, str]] = None
    ) -> JSONResponse:
        return JSONResponse(
            status_code=status_code,
            content=content,
            headers={**(headers or {}), REQUEST_ID_HEADER: request_id}
        )

    @staticmethod
    def _new_request_id() -> str:
        return uuid.uuid4().hex[:8]

    @staticmethod
    def _route(request: Optional[Request]) -> str:
        if request is None:
            return "-"
        return f"{request.method} {request.url.path}"
