"""
Profile service: the signed-in profile's own editable fields.
"""

from sqlalchemy.ext.asyncio import AsyncSession
from rental_marketplace.repositories.profile import ProfileRepository
from rental_marketplace.models.profile import Profile
from rental_marketplace.utils.exceptions import NotFoundError
from typing import Optional
import logging

logger = logging.getLogger(__name__)


class ProfileService:

    def __init__(self, db_session: AsyncSession):
        self.db = db_session
        self.profile_repo = ProfileRepository(db_session)

    async def update_profile(
        self,
        profile: Profile,
        full_name: Optional[str] = None,
        phone: Optional[str] = None
    ) -> Profile:
        """
        Update the caller's full name and/or phone. Email and role are fixed.

        Raises:
            NotFoundError: If the profile vanished meanwhile
        """
        updates = {}
        if full_name is not None:
            updates["full_name"] = full_name.strip()
        if phone is not None:
            updates["phone"] = phone.strip() or None

        updated = await self.profile_repo.update(profile.id, updates)
        if updated is None:
            raise NotFoundError("Profile", str(profile.id))

        logger.info(f"Profile updated: {profile.id} ({', '.join(updates) or 'no changes'})")
        return updated
