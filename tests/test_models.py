"""
Tests for database models: helpers, serialization and database constraints.
"""

import pytest
import uuid
from datetime import date
from sqlalchemy.exc import IntegrityError

from rental_marketplace.models.booking import Booking, BookingStatus
from rental_marketplace.models.favorite import Favorite
from rental_marketplace.models.profile import Profile, ProfileRole
from rental_marketplace.models.property import Property, AvailabilityStatus
from rental_marketplace.models.review import Review


class TestProfileModel:

    def test_email_normalization(self):
        assert Profile.validate_email_format("Someone@Example.COM") == "someone@example.com"

    def test_invalid_email(self):
        with pytest.raises(ValueError, match="Invalid email format"):
            Profile.validate_email_format("someone@")

    def test_password_hashing(self):
        hashed = Profile.hash_password("longenough")
        profile = Profile(email="a@test.com", hashed_password=hashed, full_name="A", role=ProfileRole.USER)

        assert hashed != "longenough"
        assert profile.verify_password("longenough") is True
        assert profile.verify_password("wrong-password") is False

    def test_short_password_rejected(self):
        with pytest.raises(ValueError):
            Profile.hash_password("short")

    def test_can_manage_property(self):
        provider = Profile(id=uuid.uuid4(), role=ProfileRole.RENT_PROVIDER)
        renter = Profile(id=uuid.uuid4(), role=ProfileRole.USER)

        assert provider.can_manage_property(provider.id) is True
        assert provider.can_manage_property(uuid.uuid4()) is False
        assert renter.can_manage_property(renter.id) is False

    @pytest.mark.asyncio
    async def test_to_dict_excludes_password(self, test_renter: Profile):
        data = test_renter.to_dict()
        assert "hashed_password" not in data
        assert data["role"] == "user"


class TestPropertyModel:

    def test_daily_rate_and_availability(self):
        property_obj = Property(price=30000, availability_status=AvailabilityStatus.AVAILABLE)
        assert property_obj.daily_rate == 1000
        assert property_obj.is_available is True

        property_obj.availability_status = AvailabilityStatus.MAINTENANCE
        assert property_obj.is_available is False

    @pytest.mark.asyncio
    async def test_to_dict_with_images(self, test_property: Property):
        data = test_property.to_dict(include_images=True)

        assert data["type"] == "Apartment"
        assert data["amenities"] == ["Parking", "Gym"]
        assert [image["display_order"] for image in data["images"]] == [0, 1]
        assert data["image_url"] == data["images"][0]["image_url"]


class TestBookingModel:

    @pytest.mark.parametrize("start,end,expected", [
        (date(2024, 6, 1), date(2024, 6, 4), True),
        (date(2024, 6, 4), date(2024, 6, 8), True),
        (date(2024, 5, 25), date(2024, 6, 1), True),
        (date(2024, 6, 5), date(2024, 6, 8), False),
        (date(2024, 5, 1), date(2024, 5, 31), False),
    ])
    def test_overlaps_is_inclusive(self, start, end, expected):
        booking = Booking(start_date=date(2024, 6, 1), end_date=date(2024, 6, 4), status=BookingStatus.PENDING)
        assert booking.overlaps(start, end) is expected


class TestConstraints:

    @pytest.mark.asyncio
    async def test_one_review_per_user_and_property(self, db_session, test_renter: Profile, test_property: Property):
        db_session.add(Review(property_id=test_property.id, user_id=test_renter.id, rating=5))
        await db_session.commit()

        db_session.add(Review(property_id=test_property.id, user_id=test_renter.id, rating=4))
        with pytest.raises(IntegrityError):
            await db_session.commit()
        await db_session.rollback()

    @pytest.mark.asyncio
    async def test_rating_range_enforced(self, db_session, test_renter: Profile, test_property: Property):
        db_session.add(Review(property_id=test_property.id, user_id=test_renter.id, rating=7))
        with pytest.raises(IntegrityError):
            await db_session.commit()
        await db_session.rollback()

    @pytest.mark.asyncio
    async def test_one_favorite_per_user_and_property(
        self, db_session, test_renter: Profile, test_property: Property
    ):
        db_session.add(Favorite(property_id=test_property.id, user_id=test_renter.id))
        await db_session.commit()

        db_session.add(Favorite(property_id=test_property.id, user_id=test_renter.id))
        with pytest.raises(IntegrityError):
            await db_session.commit()
        await db_session.rollback()
