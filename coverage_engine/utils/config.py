"""
Configuration Management

Uses Pydantic Settings for environment-based configuration.
Loads from .env file automatically.
"""

from typing import List
from functools import lru_cache
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment."""

    # Application Settings
    ENVIRONMENT: str = "development"
    LOG_LEVEL: str = "INFO"

    # Platform used when a request does not name one
    DEFAULT_PLATFORM_ID: int = 1

    # Published articles per (country, language) that count as 100%
    LANGUAGE_ARTICLE_TARGET: int = 50

    # Founder theme (cross-platform)
    FOUNDER_NAME: str = "Williams Jullin"
    FOUNDER_TITLE_FALLBACK: bool = False
    FOUNDER_TITLE_KEYWORDS: List[str] = ["Williams Jullin", "fondateur", "founder"]

    # Global recommendations are drawn from the N highest-priority countries
    GLOBAL_RECOMMENDATION_COUNTRY_POOL: int = 30

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",  # Ignore extra fields in .env file
        case_sensitive=False,  # Allow both UPPERCASE and lowercase
    )


@lru_cache
def get_settings() -> Settings:
    """Get or create cached settings instance."""
    return Settings()
