"""
Application Configuration

Centralized settings management using Pydantic Settings.
Supports environment variables and .env files.

Settings are read once at process startup and handed to the components that
need them; nothing reads the environment per request.
"""

from functools import lru_cache
from typing import List, Optional

from pydantic_settings import BaseSettings, SettingsConfigDict

from photogenius import __version__


class Settings(BaseSettings):
    """Application settings with environment variable support."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=True,
        extra="ignore",
    )

    # ==========================================================================
    # App Settings
    # ==========================================================================
    APP_NAME: str = "Photo Genius"
    APP_VERSION: str = __version__
    ENVIRONMENT: str = "development"  # development, staging, production
    DEBUG: bool = False

    # ==========================================================================
    # Background Removal Provider (fal.ai)
    # ==========================================================================
    FAL_KEY: Optional[str] = None
    FAL_MODEL_ID: str = "fal-ai/imageutils/rembg"
    FAL_BASE_URL: str = "https://fal.run"
    # None disables the local timeout; the provider decides how long a run takes
    FAL_TIMEOUT_SECONDS: Optional[float] = None

    # ==========================================================================
    # Capture / Editor Settings
    # ==========================================================================
    CAPTURE_JPEG_QUALITY: int = 92  # matches canvas.toDataURL('image/jpeg')
    DOWNLOAD_FILENAME: str = "processed_image.png"

    # ==========================================================================
    # Logging Settings
    # ==========================================================================
    LOG_LEVEL: str = "INFO"
    LOG_FORMAT_JSON: bool = True  # JSON for production, console for development

    # ==========================================================================
    # CORS Settings
    # ==========================================================================
    CORS_ORIGINS: str = "http://localhost:3000,http://localhost:8000"

    @property
    def cors_origins(self) -> List[str]:
        return [origin.strip() for origin in self.CORS_ORIGINS.split(",") if origin.strip()]


@lru_cache()
def get_settings() -> Settings:
    """Return cached settings to avoid reparsing env on every call."""
    return Settings()
