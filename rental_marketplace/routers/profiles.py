"""
Profile API endpoints for the signed-in profile.
"""

from fastapi import APIRouter, Depends
from rental_marketplace.models.profile import Profile
from rental_marketplace.services.profile import ProfileService
from rental_marketplace.schemas.profile import ProfileResponse, ProfileUpdate
from rental_marketplace.schemas.error import get_error_responses
from rental_marketplace.utils.dependencies import get_current_user, get_profile_service


router = APIRouter(prefix="/profiles", tags=["Profiles"])


@router.get(
    "/me",
    response_model=ProfileResponse,
    summary="Get my profile",
    responses=get_error_responses(401)
)
async def get_my_profile(current_user: Profile = Depends(get_current_user)) -> ProfileResponse:
    return ProfileResponse.model_validate(current_user.to_dict())


@router.patch(
    "/me",
    response_model=ProfileResponse,
    summary="Update my profile",
    description="Only full_name and phone can be changed; email and role are fixed at signup.",
    responses=get_error_responses(401, 422)
)
async def update_my_profile(
    profile_data: ProfileUpdate,
    current_user: Profile = Depends(get_current_user),
    profile_service: ProfileService = Depends(get_profile_service)
) -> ProfileResponse:
    profile = await profile_service.update_profile(
        current_user,
        full_name=profile_data.full_name,
        phone=profile_data.phone
    )
    return ProfileResponse.model_validate(profile.to_dict())
