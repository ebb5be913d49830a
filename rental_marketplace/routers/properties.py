"""
Property listing API endpoints for CRUD operations, search and filtering.
Listings are public to read; only their owning rent provider may change them.
"""

from fastapi import APIRouter, Depends, status, Query, Path, Response
from typing import Optional, List
from uuid import UUID
import math

from rental_marketplace.config import settings
from rental_marketplace.models.profile import Profile
from rental_marketplace.models.property import Property, PropertyType, AvailabilityStatus
from rental_marketplace.services.property import PropertyService
from rental_marketplace.schemas.property import (
    PropertyCreate,
    PropertyUpdate,
    PropertyResponse,
    PropertyListResponse
)
from rental_marketplace.utils.dependencies import (
    get_current_user,
    get_current_provider,
    get_property_service
)
from rental_marketplace.schemas.error import get_crud_error_responses, get_error_responses


router = APIRouter(prefix="/properties", tags=["Properties"])


def _to_response(property_obj: Property, **extra) -> PropertyResponse:
    data = property_obj.to_dict(include_images=True)
    data.update(extra)
    return PropertyResponse.model_validate(data)


def _to_list_response(properties: List[Property], total: int, page: int, page_size: int) -> PropertyListResponse:
    total_pages = math.ceil(total / page_size) if total > 0 else 0
    return PropertyListResponse(
        properties=[_to_response(p) for p in properties],
        total=total,
        page=page,
        page_size=page_size,
        total_pages=total_pages,
        has_next=page < total_pages,
        has_previous=page > 1
    )


@router.post(
    "",
    response_model=PropertyResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create new property",
    description="Create a new property listing. Requires the rent provider role.",
    responses=get_crud_error_responses()
)
async def create_property(
    property_data: PropertyCreate,
    current_user: Profile = Depends(get_current_user),
    property_service: PropertyService = Depends(get_property_service)
) -> PropertyResponse:
    """
    Create a new property listing.

    Args:
        property_data: Property creation data with ordered image URLs
        current_user: Current authenticated profile
        property_service: Property service instance

    Returns:
        Created property with images
    """
    property_obj = await property_service.create_property(property_data, current_user)
    return _to_response(property_obj)


@router.get(
    "",
    response_model=PropertyListResponse,
    summary="Search properties",
    description="Paginated property search, newest first. "
                "budget accepts 'min-max', 'min-' or 'min+' and overrides min_price/max_price.",
    responses=get_error_responses(422)
)
async def search_properties(
    location: Optional[str] = Query(None, description="Case-insensitive partial location match"),
    type: Optional[PropertyType] = Query(None, description="Exact property type"),
    budget: Optional[str] = Query(None, description="Budget range, e.g. 10000-25000"),
    min_price: Optional[int] = Query(None, ge=0, description="Minimum monthly price"),
    max_price: Optional[int] = Query(None, ge=0, description="Maximum monthly price"),
    min_bedrooms: Optional[int] = Query(None, ge=0, le=50, description="Minimum number of bedrooms"),
    availability_status: Optional[AvailabilityStatus] = Query(None, description="Availability filter"),
    query: Optional[str] = Query(None, max_length=255, description="Text search over title and description"),
    rent_provider_id: Optional[UUID] = Query(None, description="Only properties of this provider"),
    page: int = Query(1, ge=1, description="Page number (starts from 1)"),
    page_size: int = Query(settings.default_page_size, ge=1, le=settings.max_page_size, description="Properties per page"),
    property_service: PropertyService = Depends(get_property_service)
) -> PropertyListResponse:
    properties, total = await property_service.search_properties(
        location=location,
        property_type=type,
        budget=budget,
        min_price=min_price,
        max_price=max_price,
        min_bedrooms=min_bedrooms,
        availability_status=availability_status,
        query=query,
        rent_provider_id=rent_provider_id,
        page=page,
        page_size=page_size
    )
    return _to_list_response(properties, total, page, page_size)


@router.get(
    "/mine",
    response_model=PropertyListResponse,
    summary="List my properties",
    description="Properties owned by the calling rent provider.",
    responses=get_error_responses(401, 403)
)
async def list_my_properties(
    page: int = Query(1, ge=1),
    page_size: int = Query(settings.default_page_size, ge=1, le=settings.max_page_size),
    current_user: Profile = Depends(get_current_provider),
    property_service: PropertyService = Depends(get_property_service)
) -> PropertyListResponse:
    properties, total = await property_service.list_provider_properties(current_user, page, page_size)
    return _to_list_response(properties, total, page, page_size)


@router.get(
    "/{property_id}",
    response_model=PropertyResponse,
    summary="Get property details",
    description="Property with ordered images, provider summary and review statistics.",
    responses=get_error_responses(404, 422)
)
async def get_property(
    property_id: UUID = Path(..., description="Property ID"),
    property_service: PropertyService = Depends(get_property_service)
) -> PropertyResponse:
    property_obj, stats = await property_service.get_property(property_id)
    rent_provider = property_obj.rent_provider.to_summary() if property_obj.rent_provider else None
    return _to_response(property_obj, rent_provider=rent_provider, **stats)


@router.put(
    "/{property_id}",
    response_model=PropertyResponse,
    summary="Update property",
    description="Update a property owned by the caller. image_urls replaces the gallery.",
    responses=get_crud_error_responses()
)
async def update_property(
    property_data: PropertyUpdate,
    property_id: UUID = Path(..., description="Property ID"),
    current_user: Profile = Depends(get_current_user),
    property_service: PropertyService = Depends(get_property_service)
) -> PropertyResponse:
    property_obj = await property_service.update_property(property_id, property_data, current_user)
    return _to_response(property_obj)


@router.delete(
    "/{property_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete property",
    description="Delete a property owned by the caller together with its images, bookings, reviews and favorites.",
    responses=get_crud_error_responses()
)
async def delete_property(
    property_id: UUID = Path(..., description="Property ID"),
    current_user: Profile = Depends(get_current_user),
    property_service: PropertyService = Depends(get_property_service)
) -> Response:
    await property_service.delete_property(property_id, current_user)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
