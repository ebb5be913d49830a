"""
PropertyImage model for the ordered image gallery of a property.
Images live in external storage; only their URLs are kept here.
"""

from sqlalchemy import String, Integer, ForeignKey, Index, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship
from rental_marketplace.database import Base
import uuid
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from rental_marketplace.models.property import Property


class PropertyImage(Base):
    """Image reference with its position in the property gallery."""

    __tablename__ = "property_images"

    property_id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True),
        ForeignKey("properties.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
        comment="ID of the property this image belongs to"
    )

    image_url: Mapped[str] = mapped_column(
        String(1024),
        nullable=False,
        comment="URL of the stored image"
    )

    display_order: Mapped[int] = mapped_column(
        Integer,
        nullable=False,
        default=0,
        comment="Display order for image gallery"
    )

    property_rel: Mapped["Property"] = relationship(
        "Property",
        back_populates="images"
    )

    def __repr__(self) -> str:
        """String representation of the property image."""
        return f"<PropertyImage(id={self.id}, property_id={self.property_id}, order={self.display_order})>"

    def to_dict(self) -> dict:
        return {
            "id": str(self.id),
            "image_url": self.image_url,
            "display_order": self.display_order,
        }


property_order_index = Index(
    'idx_property_images_property_order',
    PropertyImage.property_id,
    PropertyImage.display_order
)
