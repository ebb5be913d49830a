"""
Profile repository for authentication and profile management operations.
Handles email normalization and password hashing on signup.
"""

from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select
from rental_marketplace.repositories.base import BaseRepository
from rental_marketplace.models.profile import Profile, ProfileRole
from typing import Optional, Dict, Any
import logging

logger = logging.getLogger(__name__)


class ProfileRepository(BaseRepository[Profile]):
    """
    Repository for profiles of renters and rent providers.
    """

    def __init__(self, db: AsyncSession):
        super().__init__(Profile, db)

    async def create_profile(self, profile_data: Dict[str, Any]) -> Profile:
        """
        Create a new profile with email validation and password hashing.

        Args:
            profile_data: Dictionary containing profile information.
                          Must include: email, password, full_name
                          Optional: role (defaults to USER), phone

        Returns:
            Created profile instance

        Raises:
            ValueError: If validation fails or the email is taken
        """
        try:
            email = Profile.validate_email_format(profile_data["email"])

            existing_profile = await self.get_by_email(email)
            if existing_profile:
                raise ValueError(f"Profile with email {email} already exists")

            data = dict(profile_data)
            password = data.pop("password")

            create_data = {
                **data,
                "email": email,
                "hashed_password": Profile.hash_password(password),
                "role": data.get("role") or ProfileRole.USER,
            }

            created_profile = await self.create(create_data)
            logger.info(f"Created profile: {created_profile.email} (ID: {created_profile.id})")
            return created_profile
        except ValueError as e:
            logger.error(f"Profile validation failed: {e}")
            raise

    async def get_by_email(self, email: str) -> Optional[Profile]:
        """
        Get profile by email address (case-insensitive).

        Args:
            email: Email address to search for

        Returns:
            Profile instance if found, None otherwise
        """
        try:
            result = await self.db.execute(
                select(Profile).where(Profile.email == email.strip().lower())
            )
            return result.scalar_one_or_none()
        except Exception as e:
            logger.error(f"Failed to get profile by email {email}: {e}")
            raise

    async def authenticate(self, email: str, password: str) -> Optional[Profile]:
        """
        Authenticate a profile with email and password.

        Returns:
            Profile instance if authentication succeeds, None otherwise
        """
        profile = await self.get_by_email(email)
        if not profile:
            logger.debug(f"Authentication failed: profile not found for {email}")
            return None

        if not profile.verify_password(password):
            logger.debug(f"Authentication failed: invalid password for {email}")
            return None

        logger.info(f"Profile authenticated: {email}")
        return profile
