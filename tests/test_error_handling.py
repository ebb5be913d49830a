"""
Tests for error rendering: marketplace error codes, integrity violation mapping,
the mail relay body and the error envelope over HTTP.
"""

import json
import pytest
from unittest.mock import Mock
from sqlalchemy.exc import IntegrityError, OperationalError

from rental_marketplace.config import settings
from rental_marketplace.models.favorite import Favorite
from rental_marketplace.models.property import AvailabilityStatus
from rental_marketplace.models.review import Review
from rental_marketplace.services.error_handler import ErrorHandlerService, REQUEST_ID_HEADER
from rental_marketplace.utils.exceptions import (
    ValidationError,
    PropertyNotFoundError,
    PropertyStatusError,
    BookingConflictError,
    InvalidBookingTransitionError,
    TokenExpiredError,
    MailRelayError
)
from tests.conftest import auth_headers

API = settings.api_v1_prefix


def _body(response) -> dict:
    return json.loads(response.body)


class TestApiExceptionRendering:

    @pytest.mark.parametrize("exception, status_code, code", [
        (PropertyNotFoundError("abc"), 404, "PROPERTY_NOT_FOUND"),
        (PropertyStatusError("Property is not available for booking (status: rented)"), 400, "PROPERTY_UNAVAILABLE"),
        (BookingConflictError(), 409, "BOOKING_DATES_TAKEN"),
        (InvalidBookingTransitionError("confirmed", "cancelled"), 409, "INVALID_BOOKING_TRANSITION"),
        (TokenExpiredError(), 401, "TOKEN_EXPIRED"),
    ])
    def test_status_and_code(self, exception, status_code, code):
        response = ErrorHandlerService.handle_api_exception(exception)

        assert response.status_code == status_code
        error = _body(response)["error"]
        assert error["code"] == code
        assert error["message"] == exception.detail
        assert response.headers[REQUEST_ID_HEADER] == error["request_id"]

    def test_field_errors_become_details(self):
        exception = ValidationError(
            "End date must be on or after the start date",
            field_errors=[{"field": "end_date", "message": "End date must be on or after the start date"}]
        )

        error = _body(ErrorHandlerService.handle_api_exception(exception))["error"]

        assert error["details"] == [{"field": "end_date", "message": "End date must be on or after the start date"}]

    def test_unauthorized_keeps_bearer_challenge(self):
        response = ErrorHandlerService.handle_api_exception(TokenExpiredError())
        assert response.headers["WWW-Authenticate"] == "Bearer"

    def test_request_validation_paths(self):
        exception = Mock()
        exception.errors.return_value = [
            {"loc": ("body", "end_date"), "msg": "Field required", "type": "missing", "input": None},
            {"loc": ("query", "page_size"), "msg": "Input should be less than or equal to 100",
             "type": "less_than_equal", "input": "500"},
        ]

        response = ErrorHandlerService.handle_validation_error(exception)

        assert response.status_code == 422
        fields = [detail["field"] for detail in _body(response)["error"]["details"]]
        assert fields == ["body -> end_date", "query -> page_size"]


class TestIntegrityErrorMapping:

    @pytest.mark.asyncio
    async def test_duplicate_review(self, db_session, test_renter, test_property):
        db_session.add(Review(property_id=test_property.id, user_id=test_renter.id, rating=4))
        await db_session.commit()
        db_session.add(Review(property_id=test_property.id, user_id=test_renter.id, rating=5))
        with pytest.raises(IntegrityError) as exc_info:
            await db_session.commit()
        await db_session.rollback()

        response = ErrorHandlerService.handle_database_error(exc_info.value)

        assert response.status_code == 409
        error = _body(response)["error"]
        assert error["code"] == "DUPLICATE_REVIEW"
        assert error["message"] == "You have already reviewed this property"

    @pytest.mark.asyncio
    async def test_duplicate_favorite(self, db_session, test_renter, test_property):
        db_session.add(Favorite(user_id=test_renter.id, property_id=test_property.id))
        await db_session.commit()
        db_session.add(Favorite(user_id=test_renter.id, property_id=test_property.id))
        with pytest.raises(IntegrityError) as exc_info:
            await db_session.commit()
        await db_session.rollback()

        assert ErrorHandlerService.classify_integrity_error(exc_info.value)[0] == "DUPLICATE_FAVORITE"

    @pytest.mark.asyncio
    async def test_rating_out_of_range(self, db_session, test_renter, test_property):
        db_session.add(Review(property_id=test_property.id, user_id=test_renter.id, rating=9))
        with pytest.raises(IntegrityError) as exc_info:
            await db_session.commit()
        await db_session.rollback()

        assert ErrorHandlerService.classify_integrity_error(exc_info.value) == (
            "INVALID_RATING", "Rating must be between 1 and 5"
        )

    @pytest.mark.parametrize("driver_message, code", [
        ('duplicate key value violates unique constraint "uq_reviews_user_property"', "DUPLICATE_REVIEW"),
        ('insert or update on table "bookings" violates foreign key constraint "bookings_property_id_fkey"',
         "REFERENCE_NOT_FOUND"),
        ("FOREIGN KEY constraint failed", "REFERENCE_NOT_FOUND"),
        ("UNIQUE constraint failed: profiles.email", "DUPLICATE_EMAIL"),
        ("NOT NULL constraint failed: bookings.start_date", "INTEGRITY_ERROR"),
    ])
    def test_driver_messages(self, driver_message, code):
        exception = IntegrityError("INSERT ...", {}, Exception(driver_message))
        assert ErrorHandlerService.classify_integrity_error(exception)[0] == code

    def test_other_database_errors_hide_details(self):
        exception = OperationalError("SELECT ...", {}, Exception("connection to server lost"))

        response = ErrorHandlerService.handle_database_error(exception)

        assert response.status_code == 500
        error = _body(response)["error"]
        assert error["code"] == "DATABASE_ERROR"
        assert "connection" not in error["message"]


class TestMailRelayErrors:

    def test_flat_body(self):
        response = ErrorHandlerService.handle_mail_relay_error(
            MailRelayError(500, "Failed to send email", message="mailbox unavailable")
        )

        assert response.status_code == 500
        assert _body(response) == {"error": "Failed to send email", "message": "mailbox unavailable"}

    def test_message_omitted_when_absent(self):
        response = ErrorHandlerService.handle_mail_relay_error(MailRelayError(401, "Invalid relay token"))
        assert _body(response) == {"error": "Invalid relay token"}


@pytest.mark.integration
class TestErrorEnvelopeOverHttp:

    @pytest.mark.asyncio
    async def test_booking_unavailable_property(self, async_client, test_renter, test_property, property_repository):
        await property_repository.update(test_property.id, {"availability_status": AvailabilityStatus.RENTED})

        response = await async_client.post(
            f"{API}/bookings",
            json={"property_id": str(test_property.id), "start_date": "2024-06-01", "end_date": "2024-06-04"},
            headers=auth_headers(test_renter)
        )

        assert response.status_code == 400
        assert response.json()["error"]["code"] == "PROPERTY_UNAVAILABLE"
        assert REQUEST_ID_HEADER in response.headers

    @pytest.mark.asyncio
    async def test_provider_cannot_book(self, async_client, test_provider, test_property):
        response = await async_client.post(
            f"{API}/bookings",
            json={"property_id": str(test_property.id), "start_date": "2024-06-01", "end_date": "2024-06-04"},
            headers=auth_headers(test_provider)
        )

        assert response.status_code == 403
        assert response.json()["error"]["code"] == "INSUFFICIENT_PERMISSIONS"
