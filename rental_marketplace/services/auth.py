"""
Authentication service for signup, login and token management.
Handles JWT token generation and validation for renters and rent providers.
"""

from typing import Tuple
from sqlalchemy.ext.asyncio import AsyncSession
from rental_marketplace.repositories.profile import ProfileRepository
from rental_marketplace.models.profile import Profile, ProfileRole
from rental_marketplace.utils.auth import (
    TokenPayload,
    TokenType,
    create_access_token,
    decode_token,
    issue_tokens
)
from rental_marketplace.utils.exceptions import (
    APIException,
    InvalidCredentialsError,
    InvalidTokenError,
    ValidationError,
    DuplicateResourceError
)
import logging

logger = logging.getLogger(__name__)


class AuthService:
    """
    Authentication service for managing signup, login and tokens.
    """

    def __init__(self, db_session: AsyncSession):
        self.db = db_session
        self.profile_repo = ProfileRepository(db_session)

    async def signup(
        self,
        email: str,
        password: str,
        full_name: str,
        role: ProfileRole = ProfileRole.USER,
        phone: str = None
    ) -> Tuple[Profile, str, str]:
        """
        Register a new profile and sign it in.

        Args:
            email: Email address, normalized before storage
            password: Plain text password (at least 8 characters)
            full_name: Display name
            role: user or rent_provider
            phone: Optional phone number

        Returns:
            Tuple of (profile, access_token, refresh_token)

        Raises:
            DuplicateResourceError: If the email is already registered
            ValidationError: If email or password is invalid
        """
        try:
            try:
                normalized_email = Profile.validate_email_format(email)
            except ValueError as e:
                raise ValidationError(str(e))

            if await self.profile_repo.get_by_email(normalized_email):
                raise DuplicateResourceError("Profile", normalized_email)

            try:
                profile = await self.profile_repo.create_profile({
                    "email": normalized_email,
                    "password": password,
                    "full_name": full_name.strip(),
                    "role": role,
                    "phone": phone,
                })
            except ValueError as e:
                raise ValidationError(str(e))

            access_token, refresh_token = issue_tokens(profile)
            logger.info(f"Profile signed up: {profile.email} ({profile.role.value})")
            return profile, access_token, refresh_token

        except APIException:
            raise
        except Exception as e:
            logger.error(f"Signup failed for {email}: {e}")
            raise

    async def authenticate_profile(self, email: str, password: str) -> Profile:
        """
        Authenticate a profile with email and password.

        Raises:
            InvalidCredentialsError: If credentials are invalid
            ValidationError: If input is missing
        """
        if not email or not email.strip():
            raise ValidationError("Email is required")

        if not password:
            raise ValidationError("Password is required")

        profile = await self.profile_repo.authenticate(email, password)

        if not profile:
            logger.warning(f"Failed authentication attempt for email: {email}")
            raise InvalidCredentialsError()

        return profile

    async def login(self, email: str, password: str) -> Tuple[Profile, str, str]:
        """
        Authenticate profile and create tokens.

        Returns:
            Tuple of (profile, access_token, refresh_token)

        Raises:
            InvalidCredentialsError: If credentials are invalid
        """
        profile = await self.authenticate_profile(email, password)
        access_token, refresh_token = issue_tokens(profile)

        logger.info(f"Profile logged in: {profile.email}")
        return profile, access_token, refresh_token

    async def refresh_access_token(self, refresh_token: str) -> str:
        """
        Mint an access token for the profile behind a refresh token.
        The role claim comes from the stored profile, not from the old token.

        Raises:
            InvalidTokenError: If the token is invalid or its profile is gone
            TokenExpiredError: If the refresh token is expired
        """
        payload = decode_token(refresh_token, TokenType.REFRESH)
        profile = await self._token_profile(payload)
        return create_access_token(profile.id, profile.email, profile.role)

    async def get_current_profile(self, token: str) -> Profile:
        """
        Get current profile from access token.

        Raises:
            InvalidTokenError: If token is invalid or its profile is gone
            TokenExpiredError: If token is expired
        """
        return await self._token_profile(decode_token(token, TokenType.ACCESS))

    async def _token_profile(self, payload: TokenPayload) -> Profile:
        profile = await self.profile_repo.get_by_id(payload.profile_id)
        if not profile:
            logger.warning(f"{payload.token_type.value} token presented for missing profile {payload.profile_id}")
            raise InvalidTokenError("Token subject no longer exists")
        return profile
