"""
Configuration Management

Uses Pydantic Settings for environment-based configuration.
Loads from .env file automatically.
"""

from typing import Optional
from functools import lru_cache
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application settings loaded from environment."""

    # DataForSEO (optional - intersection strategy is skipped without it)
    DATAFORSEO_LOGIN: Optional[str] = None
    DATAFORSEO_PASSWORD: Optional[str] = None

    # Claude API (optional - AI estimate strategy is skipped without it)
    ANTHROPIC_API_KEY: Optional[str] = None
    CLAUDE_MODEL: str = "claude-sonnet-4-20250514"

    # Application Settings
    ENVIRONMENT: str = "development"
    LOG_LEVEL: str = "INFO"

    # Default analysis settings
    DEFAULT_LOCATION_CODE: int = 2840  # United States
    DEFAULT_LANGUAGE: str = "en"

    # Limits
    GAPS_PER_COMPETITOR: int = 50
    AI_SAMPLE_SIZE: int = 100
    INTERSECTION_LIMIT: int = 100
    MOCK_GAPS_PER_COMPETITOR: int = 10

    # Cache
    CACHE_TTL_MINUTES: int = 60

    # Timeouts
    API_TIMEOUT: int = 60

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"
        extra = "ignore"
        case_sensitive = False

    @property
    def has_dataforseo(self) -> bool:
        return bool(self.DATAFORSEO_LOGIN and self.DATAFORSEO_PASSWORD)

    @property
    def has_anthropic(self) -> bool:
        return bool(self.ANTHROPIC_API_KEY)


@lru_cache
def get_settings() -> Settings:
    """Get or create cached settings instance."""
    return Settings()
