"""
Authentication API endpoints for signup, login and token management.
Provides JWT-based authentication for renters and rent providers.
"""

from fastapi import APIRouter, Depends, status
from rental_marketplace.models.profile import Profile
from rental_marketplace.services.auth import AuthService
from rental_marketplace.schemas.auth import (
    SignupRequest,
    LoginRequest,
    RefreshTokenRequest,
    TokenResponse,
    AccessTokenResponse,
    AuthResponse
)
from rental_marketplace.schemas.profile import ProfileResponse
from rental_marketplace.schemas.error import get_error_responses, get_auth_error_responses
from rental_marketplace.utils.dependencies import get_auth_service, get_current_user
from rental_marketplace.config import settings


router = APIRouter(prefix="/auth", tags=["Authentication"])


def _auth_response(profile: Profile, access_token: str, refresh_token: str) -> AuthResponse:
    return AuthResponse(
        profile=ProfileResponse.model_validate(profile.to_dict()),
        tokens=TokenResponse(
            access_token=access_token,
            refresh_token=refresh_token,
            token_type="bearer",
            expires_in=settings.access_token_expire_minutes * 60
        )
    )


@router.post(
    "/signup",
    response_model=AuthResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Sign up",
    description="Create a renter or rent provider profile and return JWT tokens",
    responses=get_error_responses(409, 422)
)
async def signup(
    signup_data: SignupRequest,
    auth_service: AuthService = Depends(get_auth_service)
) -> AuthResponse:
    """
    Register a new profile.

    Args:
        signup_data: Email, password, full name and role
        auth_service: Authentication service

    Returns:
        Created profile with JWT tokens

    Raises:
        DuplicateResourceError: If the email is already registered
    """
    profile, access_token, refresh_token = await auth_service.signup(
        email=signup_data.email,
        password=signup_data.password,
        full_name=signup_data.full_name,
        role=signup_data.role,
        phone=signup_data.phone
    )
    return _auth_response(profile, access_token, refresh_token)


@router.post(
    "/login",
    response_model=AuthResponse,
    summary="Log in",
    description="Authenticate with email and password, returns JWT tokens",
    responses=get_error_responses(401, 422)
)
async def login(
    login_data: LoginRequest,
    auth_service: AuthService = Depends(get_auth_service)
) -> AuthResponse:
    """
    Authenticate profile and return JWT tokens.

    Raises:
        InvalidCredentialsError: If credentials are invalid
    """
    profile, access_token, refresh_token = await auth_service.login(
        email=login_data.email,
        password=login_data.password
    )
    return _auth_response(profile, access_token, refresh_token)


@router.post(
    "/refresh",
    response_model=AccessTokenResponse,
    summary="Refresh access token",
    description="Exchange a refresh token for a new access token",
    responses=get_error_responses(401, 422)
)
async def refresh_token(
    refresh_data: RefreshTokenRequest,
    auth_service: AuthService = Depends(get_auth_service)
) -> AccessTokenResponse:
    access_token = await auth_service.refresh_access_token(refresh_data.refresh_token)
    return AccessTokenResponse(
        access_token=access_token,
        token_type="bearer",
        expires_in=settings.access_token_expire_minutes * 60
    )


@router.get(
    "/me",
    response_model=ProfileResponse,
    summary="Get current profile",
    responses=get_auth_error_responses()
)
async def get_me(current_user: Profile = Depends(get_current_user)) -> ProfileResponse:
    return ProfileResponse.model_validate(current_user.to_dict())
