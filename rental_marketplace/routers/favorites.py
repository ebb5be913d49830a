"""
Favorite API endpoints.
"""

from fastapi import APIRouter, Depends, Path, Response, status
from uuid import UUID

from rental_marketplace.models.profile import Profile
from rental_marketplace.services.favorite import FavoriteService
from rental_marketplace.schemas.favorite import FavoriteResponse, FavoriteListResponse, FavoriteStatusResponse
from rental_marketplace.schemas.error import get_error_responses
from rental_marketplace.utils.dependencies import get_current_user, get_favorite_service


router = APIRouter(prefix="/favorites", tags=["Favorites"])


@router.get(
    "",
    response_model=FavoriteListResponse,
    summary="List my favorites",
    responses=get_error_responses(401)
)
async def list_favorites(
    current_user: Profile = Depends(get_current_user),
    favorite_service: FavoriteService = Depends(get_favorite_service)
) -> FavoriteListResponse:
    favorites = await favorite_service.list_favorites(current_user)
    return FavoriteListResponse(
        favorites=[FavoriteResponse.model_validate(f.to_dict(include_property=True)) for f in favorites],
        total=len(favorites)
    )


@router.post(
    "/{property_id}",
    response_model=FavoriteResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Add favorite",
    description="Idempotent: favoriting an already favorited property returns the existing favorite.",
    responses=get_error_responses(401, 404)
)
async def add_favorite(
    property_id: UUID = Path(..., description="Property ID"),
    current_user: Profile = Depends(get_current_user),
    favorite_service: FavoriteService = Depends(get_favorite_service)
) -> FavoriteResponse:
    favorite = await favorite_service.add_favorite(property_id, current_user)
    return FavoriteResponse.model_validate(favorite.to_dict())


@router.delete(
    "/{property_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Remove favorite",
    responses=get_error_responses(401, 404)
)
async def remove_favorite(
    property_id: UUID = Path(..., description="Property ID"),
    current_user: Profile = Depends(get_current_user),
    favorite_service: FavoriteService = Depends(get_favorite_service)
) -> Response:
    await favorite_service.remove_favorite(property_id, current_user)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.get(
    "/{property_id}",
    response_model=FavoriteStatusResponse,
    summary="Check favorite",
    responses=get_error_responses(401)
)
async def check_favorite(
    property_id: UUID = Path(..., description="Property ID"),
    current_user: Profile = Depends(get_current_user),
    favorite_service: FavoriteService = Depends(get_favorite_service)
) -> FavoriteStatusResponse:
    is_favorite = await favorite_service.is_favorite(property_id, current_user)
    return FavoriteStatusResponse(property_id=str(property_id), is_favorite=is_favorite)
