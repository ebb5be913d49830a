"""
Integration tests for the HTTP API.
Exercises routing, authentication, response shapes and the error envelope end to end.
"""

import pytest
import aiosmtplib

from rental_marketplace.config import settings
from rental_marketplace.models.profile import Profile
from rental_marketplace.models.property import Property
from tests.conftest import auth_headers, TEST_PASSWORD

API = settings.api_v1_prefix

pytestmark = pytest.mark.integration


def _property_payload(**overrides) -> dict:
    payload = {
        "title": "Lake View Flat",
        "description": "Two bedroom flat overlooking the lake",
        "location": "Powai, Mumbai",
        "price": 45000,
        "bedrooms": 2,
        "bathrooms": 2,
        "area": 1100,
        "type": "Apartment",
        "amenities": ["Lift", "Lift", "Pool"],
        "image_urls": ["https://img.example.com/lake-1.jpg", "https://img.example.com/lake-2.jpg"],
    }
    payload.update(overrides)
    return payload


class TestHealthAndErrors:

    @pytest.mark.asyncio
    async def test_root(self, async_client):
        response = await async_client.get("/")
        assert response.status_code == 200
        assert response.json()["api_prefix"] == API

    @pytest.mark.asyncio
    async def test_unknown_route_uses_error_envelope(self, async_client):
        response = await async_client.get(f"{API}/does-not-exist")

        assert response.status_code == 404
        error = response.json()["error"]
        assert error["code"] == "HTTP_404"
        assert "timestamp" in error
        assert len(error["request_id"]) == 8

    @pytest.mark.asyncio
    async def test_validation_error_details(self, async_client, test_renter: Profile):
        response = await async_client.post(
            f"{API}/bookings",
            json={"property_id": "not-a-uuid", "start_date": "2024-06-01"},
            headers=auth_headers(test_renter)
        )

        assert response.status_code == 422
        error = response.json()["error"]
        assert error["code"] == "VALIDATION_ERROR"
        fields = {detail["field"] for detail in error["details"]}
        assert "body -> property_id" in fields
        assert "body -> end_date" in fields

    @pytest.mark.asyncio
    async def test_missing_token(self, async_client):
        response = await async_client.get(f"{API}/bookings/mine")

        assert response.status_code == 401
        assert response.json()["error"]["code"] == "UNAUTHORIZED"


class TestAuthAPI:

    @pytest.mark.asyncio
    async def test_signup_login_me(self, async_client):
        response = await async_client.post(f"{API}/auth/signup", json={
            "email": "fresh@test.com",
            "password": TEST_PASSWORD,
            "full_name": "Fresh Renter",
        })
        assert response.status_code == 201
        body = response.json()
        assert body["profile"]["role"] == "user"
        assert body["tokens"]["token_type"] == "bearer"
        assert body["tokens"]["expires_in"] == settings.access_token_expire_minutes * 60

        response = await async_client.post(f"{API}/auth/login", json={
            "email": "fresh@test.com",
            "password": TEST_PASSWORD,
        })
        assert response.status_code == 200
        access_token = response.json()["tokens"]["access_token"]
        refresh_token = response.json()["tokens"]["refresh_token"]

        response = await async_client.get(
            f"{API}/auth/me", headers={"Authorization": f"Bearer {access_token}"}
        )
        assert response.status_code == 200
        assert response.json()["email"] == "fresh@test.com"

        response = await async_client.post(f"{API}/auth/refresh", json={"refresh_token": refresh_token})
        assert response.status_code == 200
        assert response.json()["access_token"]

    @pytest.mark.asyncio
    async def test_duplicate_signup(self, async_client, test_renter: Profile):
        response = await async_client.post(f"{API}/auth/signup", json={
            "email": test_renter.email,
            "password": TEST_PASSWORD,
            "full_name": "Duplicate",
        })
        assert response.status_code == 409

    @pytest.mark.asyncio
    async def test_bad_login(self, async_client, test_renter: Profile):
        response = await async_client.post(f"{API}/auth/login", json={
            "email": test_renter.email,
            "password": "wrongpassword",
        })
        assert response.status_code == 401

    @pytest.mark.asyncio
    async def test_update_profile(self, async_client, test_renter: Profile):
        response = await async_client.patch(
            f"{API}/profiles/me",
            json={"full_name": "Asha K", "phone": "+91 90000 22222"},
            headers=auth_headers(test_renter)
        )
        assert response.status_code == 200
        assert response.json()["full_name"] == "Asha K"

        response = await async_client.patch(
            f"{API}/profiles/me", json={"role": "rent_provider"}, headers=auth_headers(test_renter)
        )
        assert response.status_code == 422


class TestPropertiesAPI:

    @pytest.mark.asyncio
    async def test_create_and_get(self, async_client, test_provider: Profile):
        response = await async_client.post(
            f"{API}/properties", json=_property_payload(), headers=auth_headers(test_provider)
        )
        assert response.status_code == 201
        created = response.json()
        assert created["amenities"] == ["Lift", "Pool"]
        assert created["image_url"] == "https://img.example.com/lake-1.jpg"
        assert created["availability_status"] == "available"

        response = await async_client.get(f"{API}/properties/{created['id']}")
        assert response.status_code == 200
        body = response.json()
        assert body["rent_provider"]["full_name"] == "Ravi Provider"
        assert body["review_count"] == 0
        assert body["average_rating"] is None
        assert [image["image_url"] for image in body["images"]] == [
            "https://img.example.com/lake-1.jpg",
            "https://img.example.com/lake-2.jpg",
        ]

    @pytest.mark.asyncio
    async def test_renter_cannot_create(self, async_client, test_renter: Profile):
        response = await async_client.post(
            f"{API}/properties", json=_property_payload(), headers=auth_headers(test_renter)
        )
        assert response.status_code == 403

    @pytest.mark.asyncio
    async def test_search(self, async_client, test_property: Property):
        response = await async_client.get(f"{API}/properties", params={"location": "bandra", "budget": "20000-40000"})

        assert response.status_code == 200
        body = response.json()
        assert body["total"] == 1
        assert body["properties"][0]["id"] == str(test_property.id)
        assert body["has_next"] is False

        response = await async_client.get(f"{API}/properties", params={"budget": "abc"})
        assert response.status_code == 422

    @pytest.mark.asyncio
    async def test_update_and_delete(self, async_client, test_provider: Profile, other_provider: Profile,
                                     test_property: Property):
        url = f"{API}/properties/{test_property.id}"

        response = await async_client.put(url, json={"price": 1}, headers=auth_headers(other_provider))
        assert response.status_code == 403

        response = await async_client.put(url, json={"availability_status": "rented"},
                                          headers=auth_headers(test_provider))
        assert response.status_code == 200
        assert response.json()["availability_status"] == "rented"

        response = await async_client.delete(url, headers=auth_headers(test_provider))
        assert response.status_code == 204

        response = await async_client.get(url)
        assert response.status_code == 404
        assert response.json()["error"]["code"] == "PROPERTY_NOT_FOUND"


class TestBookingsAPI:

    @pytest.mark.asyncio
    async def test_booking_lifecycle(self, async_client, relay, test_renter: Profile, test_provider: Profile,
                                     test_property: Property):
        response = await async_client.post(
            f"{API}/bookings",
            json={
                "property_id": str(test_property.id),
                "start_date": "2024-06-01",
                "end_date": "2024-06-04",
                "message": "",
            },
            headers=auth_headers(test_renter)
        )
        assert response.status_code == 201
        booking = response.json()
        assert booking["status"] == "pending"
        assert booking["total_amount"] == 3000.0
        assert booking["message"] is None
        assert booking["property"]["title"] == "Sea View Apartment"
        assert booking["provider_profile"]["email"] == test_provider.email
        assert len(relay.requests) == 1

        response = await async_client.get(f"{API}/bookings/provider", headers=auth_headers(test_provider))
        assert response.status_code == 200
        assert response.json()["total"] == 1
        assert response.json()["bookings"][0]["user_profile"]["full_name"] == "Asha Renter"

        response = await async_client.patch(
            f"{API}/bookings/{booking['id']}/status",
            json={"status": "confirmed"},
            headers=auth_headers(test_renter)
        )
        assert response.status_code == 403

        response = await async_client.patch(
            f"{API}/bookings/{booking['id']}/status",
            json={"status": "confirmed"},
            headers=auth_headers(test_provider)
        )
        assert response.status_code == 200
        assert response.json()["status"] == "confirmed"
        assert len(relay.requests) == 2
        assert relay.payloads[1]["to"] == test_renter.email

        response = await async_client.get(f"{API}/bookings/mine", headers=auth_headers(test_renter))
        assert response.json()["bookings"][0]["status"] == "confirmed"

        response = await async_client.get(f"{API}/notifications", headers=auth_headers(test_renter))
        assert response.status_code == 200
        assert response.json()["unread_count"] == 1
        assert response.json()["notifications"][0]["type"] == "booking_confirmed"

    @pytest.mark.asyncio
    async def test_end_before_start(self, async_client, test_renter: Profile, test_property: Property):
        response = await async_client.post(
            f"{API}/bookings",
            json={"property_id": str(test_property.id), "start_date": "2024-06-04", "end_date": "2024-06-01"},
            headers=auth_headers(test_renter)
        )
        assert response.status_code == 422
        assert response.json()["error"]["details"][0]["field"] == "end_date"

    @pytest.mark.asyncio
    async def test_pending_status_rejected(self, async_client, test_provider: Profile, test_renter: Profile):
        response = await async_client.patch(
            f"{API}/bookings/{test_renter.id}/status",
            json={"status": "pending"},
            headers=auth_headers(test_provider)
        )
        assert response.status_code == 422

    @pytest.mark.asyncio
    async def test_renter_has_no_provider_view(self, async_client, test_renter: Profile):
        response = await async_client.get(f"{API}/bookings/provider", headers=auth_headers(test_renter))
        assert response.status_code == 403


class TestReviewsAndFavoritesAPI:

    @pytest.mark.asyncio
    async def test_review_upsert(self, async_client, test_renter: Profile, test_property: Property):
        url = f"{API}/properties/{test_property.id}/reviews"

        response = await async_client.get(f"{url}/mine", headers=auth_headers(test_renter))
        assert response.status_code == 200
        assert response.json() is None

        response = await async_client.put(url, json={"rating": 5, "comment": "Great"},
                                          headers=auth_headers(test_renter))
        assert response.status_code == 201

        response = await async_client.put(url, json={"rating": 4}, headers=auth_headers(test_renter))
        assert response.status_code == 200
        assert response.json()["rating"] == 4

        response = await async_client.get(url)
        body = response.json()
        assert body["total"] == 1
        assert body["average_rating"] == 4.0
        assert body["reviews"][0]["user_profile"]["full_name"] == "Asha Renter"

        response = await async_client.put(url, json={"rating": 9}, headers=auth_headers(test_renter))
        assert response.status_code == 422

    @pytest.mark.asyncio
    async def test_favorites(self, async_client, test_renter: Profile, test_property: Property):
        url = f"{API}/favorites/{test_property.id}"
        headers = auth_headers(test_renter)

        assert (await async_client.post(url, headers=headers)).status_code == 201
        assert (await async_client.post(url, headers=headers)).status_code == 201
        assert (await async_client.get(url, headers=headers)).json()["is_favorite"] is True

        response = await async_client.get(f"{API}/favorites", headers=headers)
        assert response.json()["total"] == 1
        assert response.json()["favorites"][0]["property"]["title"] == "Sea View Apartment"

        assert (await async_client.delete(url, headers=headers)).status_code == 204
        assert (await async_client.delete(url, headers=headers)).status_code == 404


class TestNotificationsAPI:

    @pytest.mark.asyncio
    async def test_mark_read(self, async_client, db_session, test_renter: Profile, test_provider: Profile):
        from rental_marketplace.services.notification import NotificationService
        service = NotificationService(db_session)
        first = await service.notify(test_renter.id, "booking_confirmed", "Booking confirmed", "Done")
        await service.notify(test_renter.id, "booking_cancelled", "Booking cancelled", "Sorry")
        headers = auth_headers(test_renter)

        response = await async_client.post(f"{API}/notifications/{first.id}/read", headers=headers)
        assert response.status_code == 200
        assert response.json()["is_read"] is True

        response = await async_client.post(f"{API}/notifications/{first.id}/read",
                                           headers=auth_headers(test_provider))
        assert response.status_code == 404

        response = await async_client.post(f"{API}/notifications/read-all", headers=headers)
        assert response.json() == {"updated": 1}


class TestMailRelayAPI:

    @pytest.fixture
    def smtp_configured(self, monkeypatch):
        monkeypatch.setattr(settings, "smtp_username", "bot@test.com")
        monkeypatch.setattr(settings, "smtp_password", "app-password")
        monkeypatch.setattr(settings, "email_relay_token", None)

    @pytest.fixture
    def sent_messages(self, monkeypatch):
        sent = []

        async def fake_send(message, **kwargs):
            sent.append(message)

        monkeypatch.setattr(aiosmtplib, "send", fake_send)
        return sent

    @pytest.mark.asyncio
    async def test_send(self, async_client, smtp_configured, sent_messages):
        response = await async_client.post(f"{API}/email/send", json={
            "to": "renter@test.com", "subject": "Hello", "html": "<p>Hi</p>"
        })

        assert response.status_code == 200
        assert response.json() == {"success": True}
        assert sent_messages[0]["To"] == "renter@test.com"

    @pytest.mark.asyncio
    async def test_missing_fields(self, async_client, smtp_configured, sent_messages):
        response = await async_client.post(f"{API}/email/send", json={"to": "renter@test.com"})

        assert response.status_code == 400
        assert response.json() == {"error": "Missing required fields: to, subject, html"}
        assert sent_messages == []

    @pytest.mark.asyncio
    async def test_not_configured(self, async_client, monkeypatch):
        monkeypatch.setattr(settings, "smtp_username", None)
        monkeypatch.setattr(settings, "email_relay_token", None)

        response = await async_client.post(f"{API}/email/send", json={
            "to": "renter@test.com", "subject": "Hello", "html": "<p>Hi</p>"
        })

        assert response.status_code == 500
        assert "not configured" in response.json()["error"]

    @pytest.mark.asyncio
    async def test_smtp_failure(self, async_client, smtp_configured, monkeypatch):
        async def failing_send(message, **kwargs):
            raise aiosmtplib.SMTPException("mailbox unavailable")

        monkeypatch.setattr(aiosmtplib, "send", failing_send)

        response = await async_client.post(f"{API}/email/send", json={
            "to": "renter@test.com", "subject": "Hello", "html": "<p>Hi</p>"
        })

        assert response.status_code == 500
        assert response.json()["error"] == "Failed to send email"
        assert "mailbox unavailable" in response.json()["message"]

    @pytest.mark.asyncio
    async def test_relay_token_required(self, async_client, smtp_configured, sent_messages, monkeypatch):
        monkeypatch.setattr(settings, "email_relay_token", "s3cret")
        payload = {"to": "renter@test.com", "subject": "Hello", "html": "<p>Hi</p>"}

        response = await async_client.post(f"{API}/email/send", json=payload)
        assert response.status_code == 401

        response = await async_client.post(
            f"{API}/email/send", json=payload, headers={"X-Email-Relay-Token": "s3cret"}
        )
        assert response.status_code == 200
        assert len(sent_messages) == 1
