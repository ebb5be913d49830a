"""
Configuration management using Pydantic settings.
Handles database URL, JWT secrets, mail delivery and booking policy switches.
"""

from pydantic import field_validator
from pydantic_settings import BaseSettings
from typing import Optional, List
from functools import lru_cache


class Settings(BaseSettings):
    """Application settings with Docker environment variable support."""

    # Application configuration
    app_name: str = "Rental Marketplace API"
    app_version: str = "1.0.0"
    environment: str = "development"
    debug: bool = False
    testing: bool = False

    # Database configuration
    database_url: str = "postgresql+asyncpg://postgres:postgres@db:5432/rental_marketplace"

    # JWT configuration
    jwt_secret_key: str = "your-secret-key-change-in-production"
    jwt_algorithm: str = "HS256"
    access_token_expire_minutes: int = 30
    jwt_refresh_token_expire_days: int = 7

    # API configuration
    api_v1_prefix: str = "/api/v1"
    cors_origins: List[str] = ["http://localhost:3000", "http://localhost:8000"]

    # Pagination defaults
    default_page_size: int = 20
    max_page_size: int = 100

    # Server configuration
    host: str = "0.0.0.0"
    port: int = 8000

    # Public frontend URL used for links inside emails
    app_url: str = "http://localhost:3000"

    # Mail relay boundary used by the email outbox
    email_endpoint_url: str = "http://localhost:8000/api/v1/email/send"
    email_relay_token: Optional[str] = None
    email_request_timeout: float = 10.0

    # SMTP configuration for the mail relay endpoint
    smtp_host: str = "smtp.gmail.com"
    smtp_port: int = 587
    smtp_username: Optional[str] = None
    smtp_password: Optional[str] = None
    smtp_use_tls: bool = True
    from_email: Optional[str] = None

    # Email outbox worker
    outbox_max_attempts: int = 5
    outbox_dispatch_interval_seconds: float = 60.0
    outbox_batch_size: int = 50
    outbox_lease_seconds: float = 60.0
    outbox_worker_enabled: bool = True

    # Booking policies
    allow_overlapping_bookings: bool = True
    strict_booking_transitions: bool = False

    @field_validator("database_url")
    @classmethod
    def validate_database_url(cls, v):
        """Ensure an async driver is used."""
        if v.startswith("postgresql://"):
            return v.replace("postgresql://", "postgresql+asyncpg://", 1)
        if v.startswith("sqlite://"):
            return v.replace("sqlite://", "sqlite+aiosqlite://", 1)
        return v

    @field_validator("jwt_secret_key")
    @classmethod
    def validate_jwt_secret_key(cls, v):
        """Validate JWT secret key strength."""
        if not v:
            raise ValueError("JWT_SECRET_KEY is required")
        if len(v) < 32 and v != "your-secret-key-change-in-production":
            raise ValueError("JWT_SECRET_KEY must be at least 32 characters long")
        return v

    @field_validator("environment")
    @classmethod
    def validate_environment(cls, v):
        """Validate environment setting."""
        allowed_envs = ["development", "testing", "staging", "production"]
        if v not in allowed_envs:
            raise ValueError(f"Environment must be one of: {allowed_envs}")
        return v

    @field_validator("outbox_max_attempts")
    @classmethod
    def validate_outbox_max_attempts(cls, v):
        if v < 1:
            raise ValueError("OUTBOX_MAX_ATTEMPTS must be at least 1")
        return v

    @field_validator("outbox_lease_seconds")
    @classmethod
    def validate_outbox_lease_seconds(cls, v, info):
        timeout = info.data.get("email_request_timeout", 0)
        if v <= timeout:
            raise ValueError("OUTBOX_LEASE_SECONDS must be longer than EMAIL_REQUEST_TIMEOUT")
        return v

    @property
    def is_development(self) -> bool:
        """Check if running in development mode."""
        return self.environment == "development"

    @property
    def is_testing(self) -> bool:
        """Check if running in testing mode."""
        return self.environment == "testing" or self.testing

    @property
    def smtp_configured(self) -> bool:
        """Whether SMTP credentials are available for the mail relay."""
        return bool(self.smtp_username and self.smtp_password)

    @property
    def sender_address(self) -> str:
        """From header used by the mail relay."""
        if self.from_email:
            return self.from_email
        return f"Smart house: your rental services <{self.smtp_username}>"

    model_config = {
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "case_sensitive": False,
    }


@lru_cache()
def get_settings() -> Settings:
    """
    Get cached settings instance.
    This ensures we only create one instance of settings throughout the app lifecycle.
    """
    return Settings()


# Global settings instance
settings = get_settings()
