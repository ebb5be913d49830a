"""
Review model: a rating with optional comment, one per (user, property).
"""

from sqlalchemy import Integer, Text, ForeignKey, UniqueConstraint, CheckConstraint, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship
from rental_marketplace.database import Base
import uuid
from typing import Optional, TYPE_CHECKING

if TYPE_CHECKING:
    from rental_marketplace.models.profile import Profile

MIN_RATING = 1
MAX_RATING = 5


class Review(Base):
    """Property review written by a user."""

    __tablename__ = "reviews"
    __table_args__ = (
        UniqueConstraint("user_id", "property_id", name="uq_reviews_user_property"),
        CheckConstraint(f"rating BETWEEN {MIN_RATING} AND {MAX_RATING}", name="ck_reviews_rating_range"),
    )

    property_id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True),
        ForeignKey("properties.id", ondelete="CASCADE"),
        nullable=False,
        index=True
    )

    user_id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True),
        ForeignKey("profiles.id", ondelete="CASCADE"),
        nullable=False,
        index=True
    )

    rating: Mapped[int] = mapped_column(Integer, nullable=False)

    comment: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    user: Mapped["Profile"] = relationship("Profile")

    def __repr__(self) -> str:
        return f"<Review(id={self.id}, property_id={self.property_id}, rating={self.rating})>"

    def to_dict(self, include_user: bool = False) -> dict:
        result = {
            "id": str(self.id),
            "property_id": str(self.property_id),
            "user_id": str(self.user_id),
            "rating": self.rating,
            "comment": self.comment,
            "created_at": self.created_at.isoformat(),
            "updated_at": self.updated_at.isoformat(),
        }
        if include_user and self.user is not None:
            result["user_profile"] = {
                "full_name": self.user.full_name,
                "avatar_url": self.user.avatar_url,
            }
        return result
