"""
Profile model with authentication and role management.
A profile is the account of either a renter or a rent provider.
"""

from sqlalchemy import String, Enum as SQLEnum
from sqlalchemy.orm import Mapped, mapped_column
from rental_marketplace.database import Base
from passlib.context import CryptContext
from email_validator import validate_email, EmailNotValidError
import enum
import uuid
from typing import Optional

# Password hashing context
pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")


class ProfileRole(str, enum.Enum):
    """Profile role enumeration; decides which dashboard and actions apply."""
    USER = "user"
    RENT_PROVIDER = "rent_provider"


class Profile(Base):
    """
    Profile model for authentication and authorization.
    Email and role are fixed at signup; full name and phone are editable.
    """

    __tablename__ = "profiles"

    email: Mapped[str] = mapped_column(
        String(255),
        unique=True,
        nullable=False,
        index=True,
        comment="Profile email address - must be unique and valid"
    )

    hashed_password: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
        comment="Bcrypt hashed password"
    )

    full_name: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
        comment="Profile owner's full name"
    )

    phone: Mapped[Optional[str]] = mapped_column(
        String(32),
        nullable=True
    )

    role: Mapped[ProfileRole] = mapped_column(
        SQLEnum(ProfileRole),
        nullable=False,
        default=ProfileRole.USER,
        index=True,
        comment="Profile role for access control"
    )

    avatar_url: Mapped[Optional[str]] = mapped_column(
        String(1024),
        nullable=True
    )

    def __repr__(self) -> str:
        """String representation of the profile."""
        return f"<Profile(id={self.id}, email={self.email}, role={self.role})>"

    @classmethod
    def validate_email_format(cls, email: str) -> str:
        """
        Validate email format using email-validator.

        Args:
            email: Email address to validate

        Returns:
            Normalized email address

        Raises:
            ValueError: If email format is invalid
        """
        try:
            valid_email = validate_email(email, check_deliverability=False)
            return valid_email.normalized.lower()
        except EmailNotValidError as e:
            raise ValueError(f"Invalid email format: {str(e)}")

    @classmethod
    def hash_password(cls, password: str) -> str:
        """
        Hash a password using bcrypt.

        Raises:
            ValueError: If the password is shorter than 8 characters
        """
        if not password or len(password) < 8:
            raise ValueError("Password must be at least 8 characters long")

        return pwd_context.hash(password)

    def verify_password(self, password: str) -> bool:
        """Verify a password against the stored hash."""
        return pwd_context.verify(password, self.hashed_password)

    @property
    def is_rent_provider(self) -> bool:
        """Check if profile has the rent provider role."""
        return self.role == ProfileRole.RENT_PROVIDER

    def can_manage_property(self, rent_provider_id: uuid.UUID) -> bool:
        """Providers can only manage the properties they own."""
        return self.is_rent_provider and self.id == rent_provider_id

    def to_dict(self) -> dict:
        """
        Convert profile to dictionary (excluding sensitive data).

        Returns:
            Dictionary representation of profile
        """
        return {
            "id": str(self.id),
            "email": self.email,
            "full_name": self.full_name,
            "phone": self.phone,
            "role": self.role.value,
            "avatar_url": self.avatar_url,
            "created_at": self.created_at.isoformat(),
            "updated_at": self.updated_at.isoformat(),
        }

    def to_summary(self) -> dict:
        """Public subset shown next to bookings and reviews."""
        return {
            "id": str(self.id),
            "full_name": self.full_name,
            "email": self.email,
            "phone": self.phone,
            "avatar_url": self.avatar_url,
        }
