# =============================================================================
# app/config.py - Application Settings
# =============================================================================
# This module loads configuration from environment variables using pydantic-settings.
# It provides a single Settings class with all configuration values.
#
# Usage:
#   from app.config import settings
#   print(settings.SUPABASE_URL)
#
# Environment variables are loaded from:
# 1. System environment variables
# 2. .env file in project root (if exists)
#
# Only the database credentials are required. Every other integration
# (Luma, Stripe, Unsplash, SendGrid) is optional; the routes that need a
# missing credential answer 503 instead of failing at startup.
# =============================================================================

from functools import lru_cache
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.

    All settings are accessed via the global `settings` instance.
    """

    # -------------------------------------------------------------------------
    # Supabase Configuration
    # -------------------------------------------------------------------------
    # These are required - app won't start without them

    SUPABASE_URL: str = Field(
        ...,
        description="Supabase project URL (e.g., https://xxx.supabase.co)"
    )

    SUPABASE_SERVICE_KEY: str = Field(
        ...,
        description="Supabase service_role key (bypasses RLS)"
    )

    SUPABASE_STORAGE_BUCKET: str = Field(
        default="media",
        description="Storage bucket holding uploaded images"
    )

    # -------------------------------------------------------------------------
    # Redis Configuration (for Celery)
    # -------------------------------------------------------------------------

    REDIS_URL: str = Field(
        default="redis://localhost:6379/0",
        description="Redis connection URL for Celery broker"
    )

    # -------------------------------------------------------------------------
    # Luma (events platform)
    # -------------------------------------------------------------------------

    LUMA_API_KEY: str | None = Field(
        default=None,
        description="Luma calendar API key (x-luma-api-key header)"
    )

    LUMA_API_BASE_URL: str = Field(
        default="https://api.lu.ma/public/v1",
        description="Base URL of the Luma public API"
    )

    LUMA_TIMEOUT_SECONDS: float = Field(
        default=30.0,
        gt=0,
        description="Timeout for a single Luma request"
    )

    # -------------------------------------------------------------------------
    # Stripe (subscription billing)
    # -------------------------------------------------------------------------

    STRIPE_SECRET_KEY: str | None = Field(
        default=None,
        description="Stripe secret API key"
    )

    STRIPE_PRICE_ID: str | None = Field(
        default=None,
        description="Price ID of the membership subscription"
    )

    STRIPE_WEBHOOK_SECRET: str | None = Field(
        default=None,
        description="Signing secret for the Stripe webhook endpoint"
    )

    # -------------------------------------------------------------------------
    # Unsplash (image search)
    # -------------------------------------------------------------------------

    UNSPLASH_ACCESS_KEY: str | None = Field(
        default=None,
        description="Unsplash API access key"
    )

    # -------------------------------------------------------------------------
    # Email (SendGrid)
    # -------------------------------------------------------------------------

    SENDGRID_API_KEY: str | None = Field(
        default=None,
        description="SendGrid API key; emails are only logged when unset"
    )

    SENDGRID_FROM_EMAIL: str = Field(
        default="noreply@example.com",
        description="Sender address for verification and reset emails"
    )

    APP_URL: str = Field(
        default="http://localhost:5000",
        description="Public URL of the web client (used in emails and Stripe redirects)"
    )

    # -------------------------------------------------------------------------
    # Application Settings
    # -------------------------------------------------------------------------

    ENVIRONMENT: Literal["development", "staging", "production"] = Field(
        default="development",
        description="Current environment"
    )

    DEBUG: bool = Field(
        default=False,
        description="Enable debug mode (verbose logging, auto-reload)"
    )

    API_HOST: str = Field(
        default="0.0.0.0",
        description="Host to bind the API server to"
    )

    API_PORT: int = Field(
        default=8000,
        ge=1,
        le=65535,
        description="Port for the API server"
    )

    # -------------------------------------------------------------------------
    # Security
    # -------------------------------------------------------------------------

    SECRET_KEY: str = Field(
        default="dev-secret-key-change-in-production",
        min_length=16,
        description="Secret key for signing session tokens"
    )

    SESSION_COOKIE_NAME: str = Field(
        default="lumate_session",
        description="Name of the session cookie"
    )

    SESSION_TTL_HOURS: int = Field(
        default=24 * 7,
        ge=1,
        description="Lifetime of a login session"
    )

    VERIFICATION_TOKEN_TTL_HOURS: int = Field(
        default=24,
        ge=1,
        description="Lifetime of email verification and password reset tokens"
    )

    # CORS origins (comma-separated string that gets parsed)
    CORS_ORIGINS: str = Field(
        default="http://localhost:5000",
        description="Allowed CORS origins (comma-separated)"
    )

    # -------------------------------------------------------------------------
    # Media Upload Settings
    # -------------------------------------------------------------------------

    MAX_UPLOAD_SIZE_MB: int = Field(
        default=10,
        ge=1,
        le=100,
        description="Maximum image upload size in MB"
    )

    ALLOWED_IMAGE_EXTENSIONS: str = Field(
        default=".png,.jpg,.jpeg,.gif,.webp",
        description="Allowed image extensions (comma-separated)"
    )

    # -------------------------------------------------------------------------
    # Pydantic Settings Configuration
    # -------------------------------------------------------------------------

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_ignore_empty=True,
        case_sensitive=True,
        extra="ignore",
    )

    # -------------------------------------------------------------------------
    # Computed Properties
    # -------------------------------------------------------------------------

    @property
    def cors_origins_list(self) -> list[str]:
        """
        Parse CORS_ORIGINS string into a list.

        Example: "http://localhost:5000, https://sarasota.tech" -> ["http://localhost:5000", "https://sarasota.tech"]
        """
        return [origin.strip() for origin in self.CORS_ORIGINS.split(",")]

    @property
    def allowed_image_extensions_list(self) -> list[str]:
        """Example: ".png, .JPG" -> [".png", ".jpg"]"""
        return [ext.strip().lower() for ext in self.ALLOWED_IMAGE_EXTENSIONS.split(",")]

    @property
    def max_upload_size_bytes(self) -> int:
        return self.MAX_UPLOAD_SIZE_MB * 1024 * 1024

    @property
    def is_production(self) -> bool:
        """Check if running in production mode."""
        return self.ENVIRONMENT == "production"


@lru_cache
def get_settings() -> Settings:
    """
    Get cached Settings instance.

    Using lru_cache ensures we only parse .env and validate once,
    not on every access.

    Returns:
        Settings: The application settings instance
    """
    return Settings()


# Global settings instance for easy importing
# Usage: from app.config import settings
settings = get_settings()
