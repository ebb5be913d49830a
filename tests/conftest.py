"""
Test configuration and fixtures for the rental marketplace API.
Provides database fixtures, a recording mail relay, test data factories and common test utilities.
"""

import os

# Point the application at SQLite before any application module builds its engine
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")
os.environ.setdefault("ENVIRONMENT", "testing")
os.environ.setdefault("OUTBOX_WORKER_ENABLED", "false")

import json
import pytest
import uuid
from typing import AsyncGenerator, Dict, List, Optional
import httpx
from httpx import AsyncClient, ASGITransport
from sqlalchemy import event
from sqlalchemy.ext.asyncio import AsyncSession, AsyncEngine, create_async_engine, async_sessionmaker
from sqlalchemy.pool import StaticPool

from rental_marketplace.config import Settings, settings
from rental_marketplace.main import app
from rental_marketplace.database import Base, get_db
from rental_marketplace.models.profile import Profile, ProfileRole
from rental_marketplace.models.property import Property, PropertyType, AvailabilityStatus
from rental_marketplace.repositories.profile import ProfileRepository
from rental_marketplace.repositories.property import PropertyRepository
from rental_marketplace.services.auth import AuthService
from rental_marketplace.services.booking import BookingService
from rental_marketplace.services.property import PropertyService
from rental_marketplace.utils.auth import create_access_token
from rental_marketplace.utils.dependencies import get_email_http_client


TEST_DATABASE_URL = os.getenv("TEST_DATABASE_URL", "sqlite+aiosqlite://")
TEST_RELAY_URL = "http://relay.test/api/v1/email/send"
TEST_PASSWORD = "testpassword123"


def _enforce_foreign_keys(engine: AsyncEngine) -> None:
    @event.listens_for(engine.sync_engine, "connect")
    def _enable_foreign_keys(dbapi_connection, connection_record):
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()


@pytest.fixture
async def test_engine() -> AsyncGenerator[AsyncEngine, None]:
    """Fresh in-memory database per test, with foreign keys enforced."""
    engine = create_async_engine(
        TEST_DATABASE_URL,
        echo=False,
        poolclass=StaticPool,
        connect_args={"check_same_thread": False}
    )

    _enforce_foreign_keys(engine)

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    await engine.dispose()


@pytest.fixture
async def file_session_factory(tmp_path) -> AsyncGenerator[async_sessionmaker, None]:
    """
    Sessions on a file-backed database, one connection each, for tests that
    run requests concurrently.
    """
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'marketplace.db'}", echo=False)
    _enforce_foreign_keys(engine)

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield async_sessionmaker(bind=engine, class_=AsyncSession, expire_on_commit=False)

    await engine.dispose()


@pytest.fixture
def session_factory(test_engine: AsyncEngine) -> async_sessionmaker:
    return async_sessionmaker(bind=test_engine, class_=AsyncSession, expire_on_commit=False)


@pytest.fixture
async def db_session(session_factory: async_sessionmaker) -> AsyncGenerator[AsyncSession, None]:
    """Create a test database session."""
    async with session_factory() as session:
        try:
            yield session
        finally:
            await session.rollback()
            await session.close()


# Mail relay doubles
class RecordingRelay:
    """
    Stand-in for the mail relay endpoint.
    Records every request; answers with status_code or raises a connection error.
    """

    def __init__(self, status_code: int = 200, fail_connect: bool = False):
        self.status_code = status_code
        self.fail_connect = fail_connect
        self.requests: List[httpx.Request] = []

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if self.fail_connect:
            raise httpx.ConnectError("relay unreachable", request=request)
        if self.status_code >= 400:
            return httpx.Response(self.status_code, json={"error": "Failed to send email"})
        return httpx.Response(self.status_code, json={"success": True})

    @property
    def payloads(self) -> List[Dict]:
        return [json.loads(request.content) for request in self.requests]


@pytest.fixture
def relay() -> RecordingRelay:
    return RecordingRelay()


@pytest.fixture
def failing_relay() -> RecordingRelay:
    return RecordingRelay(fail_connect=True)


@pytest.fixture
async def relay_client(relay: RecordingRelay) -> AsyncGenerator[httpx.AsyncClient, None]:
    async with httpx.AsyncClient(transport=httpx.MockTransport(relay.handler)) as client:
        yield client


@pytest.fixture
async def failing_relay_client(failing_relay: RecordingRelay) -> AsyncGenerator[httpx.AsyncClient, None]:
    async with httpx.AsyncClient(transport=httpx.MockTransport(failing_relay.handler)) as client:
        yield client


def make_settings(**overrides) -> Settings:
    """Copy of the application settings pointed at the test relay."""
    values = {"email_endpoint_url": TEST_RELAY_URL, "email_relay_token": None}
    values.update(overrides)
    return settings.model_copy(update=values)


@pytest.fixture
def test_settings() -> Settings:
    return make_settings()


# Repository fixtures
@pytest.fixture
def profile_repository(db_session: AsyncSession) -> ProfileRepository:
    return ProfileRepository(db_session)


@pytest.fixture
def property_repository(db_session: AsyncSession) -> PropertyRepository:
    return PropertyRepository(db_session)


# Service fixtures
@pytest.fixture
def auth_service(db_session: AsyncSession) -> AuthService:
    return AuthService(db_session)


@pytest.fixture
def property_service(db_session: AsyncSession) -> PropertyService:
    return PropertyService(db_session)


@pytest.fixture
def booking_service(
    db_session: AsyncSession,
    relay_client: httpx.AsyncClient,
    test_settings: Settings
) -> BookingService:
    """Booking service delivering emails to the recording relay."""
    return BookingService(db_session, http_client=relay_client, app_settings=test_settings)


# Test data factories
class ProfileFactory:
    """Factory for creating test profiles."""

    @staticmethod
    async def create_profile(
        profile_repo: ProfileRepository,
        email: Optional[str] = None,
        password: str = TEST_PASSWORD,
        full_name: str = "Test User",
        role: ProfileRole = ProfileRole.USER,
        phone: Optional[str] = None
    ) -> Profile:
        """Create a test profile in the database."""
        return await profile_repo.create_profile({
            "email": email or f"test{uuid.uuid4().hex[:8]}@example.com",
            "password": password,
            "full_name": full_name,
            "role": role,
            "phone": phone,
        })


class PropertyFactory:
    """Factory for creating test properties."""

    @staticmethod
    def create_property_data(
        rent_provider_id: uuid.UUID,
        title: str = "Sea View Apartment",
        description: str = "Bright two bedroom apartment close to the promenade",
        location: str = "Bandra West, Mumbai",
        price: int = 30000,
        bedrooms: int = 2,
        bathrooms: int = 2,
        area: int = 950,
        property_type: PropertyType = PropertyType.APARTMENT,
        availability_status: AvailabilityStatus = AvailabilityStatus.AVAILABLE
    ) -> dict:
        return {
            "rent_provider_id": rent_provider_id,
            "title": title,
            "description": description,
            "location": location,
            "price": price,
            "bedrooms": bedrooms,
            "bathrooms": bathrooms,
            "area": area,
            "type": property_type,
            "availability_status": availability_status,
            "amenities": ["Parking", "Gym"],
        }

    @staticmethod
    async def create_property(
        property_repo: PropertyRepository,
        rent_provider_id: uuid.UUID,
        image_urls: Optional[List[str]] = None,
        **fields
    ) -> Property:
        """Create a test property in the database."""
        property_data = PropertyFactory.create_property_data(rent_provider_id, **fields)
        return await property_repo.create_property(
            property_data,
            image_urls or ["https://img.example.com/front.jpg", "https://img.example.com/kitchen.jpg"]
        )


# Common test fixtures
@pytest.fixture
async def test_renter(profile_repository: ProfileRepository) -> Profile:
    return await ProfileFactory.create_profile(
        profile_repository,
        email="renter@test.com",
        full_name="Asha Renter",
        role=ProfileRole.USER
    )


@pytest.fixture
async def test_provider(profile_repository: ProfileRepository) -> Profile:
    return await ProfileFactory.create_profile(
        profile_repository,
        email="provider@test.com",
        full_name="Ravi Provider",
        role=ProfileRole.RENT_PROVIDER,
        phone="+91 98200 00000"
    )


@pytest.fixture
async def other_provider(profile_repository: ProfileRepository) -> Profile:
    return await ProfileFactory.create_profile(
        profile_repository,
        email="other.provider@test.com",
        full_name="Other Provider",
        role=ProfileRole.RENT_PROVIDER
    )


@pytest.fixture
async def test_property(property_repository: PropertyRepository, test_provider: Profile) -> Property:
    return await PropertyFactory.create_property(property_repository, test_provider.id)


# HTTP client
@pytest.fixture
async def async_client(
    db_session: AsyncSession,
    relay_client: httpx.AsyncClient
) -> AsyncGenerator[AsyncClient, None]:
    """Async client for the app with the test session and the recording relay."""
    async def override_get_db():
        yield db_session

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_email_http_client] = lambda: relay_client

    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
        yield client

    app.dependency_overrides.clear()


# Utility functions for tests
def auth_headers(profile: Profile) -> Dict[str, str]:
    """Bearer header for a profile."""
    token = create_access_token(user_id=profile.id, email=profile.email, role=profile.role)
    return {"Authorization": f"Bearer {token}"}
