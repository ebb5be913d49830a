"""
Favorite model: existence-only link between a profile and a property.
"""

from sqlalchemy import ForeignKey, UniqueConstraint, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship
from rental_marketplace.database import Base
import uuid
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from rental_marketplace.models.property import Property


class Favorite(Base):
    __tablename__ = "favorites"
    __table_args__ = (
        UniqueConstraint("user_id", "property_id", name="uq_favorites_user_property"),
    )

    user_id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True),
        ForeignKey("profiles.id", ondelete="CASCADE"),
        nullable=False,
        index=True
    )

    property_id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True),
        ForeignKey("properties.id", ondelete="CASCADE"),
        nullable=False,
        index=True
    )

    property: Mapped["Property"] = relationship("Property")

    def __repr__(self) -> str:
        return f"<Favorite(user_id={self.user_id}, property_id={self.property_id})>"

    def to_dict(self, include_property: bool = False) -> dict:
        result = {
            "id": str(self.id),
            "user_id": str(self.user_id),
            "property_id": str(self.property_id),
            "created_at": self.created_at.isoformat(),
        }
        if include_property and self.property is not None:
            result["property"] = self.property.to_summary()
        return result
