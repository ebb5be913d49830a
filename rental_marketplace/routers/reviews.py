"""
Review API endpoints nested under a property.
"""

from fastapi import APIRouter, Depends, Path, Response, status
from typing import Optional
from uuid import UUID

from rental_marketplace.models.profile import Profile
from rental_marketplace.services.review import ReviewService
from rental_marketplace.schemas.review import ReviewUpsert, ReviewResponse, ReviewListResponse
from rental_marketplace.schemas.error import get_crud_error_responses, get_error_responses
from rental_marketplace.utils.dependencies import get_current_user, get_review_service


router = APIRouter(prefix="/properties/{property_id}/reviews", tags=["Reviews"])


@router.get(
    "",
    response_model=ReviewListResponse,
    summary="List property reviews",
    responses=get_error_responses(404)
)
async def list_reviews(
    property_id: UUID = Path(..., description="Property ID"),
    review_service: ReviewService = Depends(get_review_service)
) -> ReviewListResponse:
    reviews, average_rating = await review_service.list_reviews(property_id)
    return ReviewListResponse(
        reviews=[ReviewResponse.model_validate(r.to_dict(include_user=True)) for r in reviews],
        total=len(reviews),
        average_rating=average_rating
    )


@router.get(
    "/mine",
    response_model=Optional[ReviewResponse],
    summary="Get my review of the property",
    description="Returns null when the caller has not reviewed the property.",
    responses=get_error_responses(401)
)
async def get_my_review(
    property_id: UUID = Path(..., description="Property ID"),
    current_user: Profile = Depends(get_current_user),
    review_service: ReviewService = Depends(get_review_service)
) -> Optional[ReviewResponse]:
    review = await review_service.get_my_review(property_id, current_user)
    return ReviewResponse.model_validate(review.to_dict()) if review else None


@router.put(
    "",
    response_model=ReviewResponse,
    summary="Create or update my review",
    description="One review per renter and property; a second submission replaces rating and comment.",
    responses=get_crud_error_responses()
)
async def upsert_review(
    review_data: ReviewUpsert,
    response: Response,
    property_id: UUID = Path(..., description="Property ID"),
    current_user: Profile = Depends(get_current_user),
    review_service: ReviewService = Depends(get_review_service)
) -> ReviewResponse:
    review, created = await review_service.upsert_review(property_id, review_data, current_user)
    if created:
        response.status_code = status.HTTP_201_CREATED
    return ReviewResponse.model_validate(review.to_dict())
