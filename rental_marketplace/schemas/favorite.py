"""
Pydantic schemas for favorites.
"""

from pydantic import BaseModel
from typing import Optional, List
from datetime import datetime
from rental_marketplace.schemas.property import PropertySummary


class FavoriteResponse(BaseModel):
    id: str
    user_id: str
    property_id: str
    created_at: datetime
    property: Optional[PropertySummary] = None


class FavoriteListResponse(BaseModel):
    favorites: List[FavoriteResponse]
    total: int


class FavoriteStatusResponse(BaseModel):
    property_id: str
    is_favorite: bool
