"""Application configuration using Pydantic Settings."""

from functools import lru_cache
from typing import Literal

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from lims.constants import DEFAULT_PAGE_SIZE, MAX_PAGE_SIZE


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # App
    app_env: Literal["development", "production", "test"] = "development"
    app_name: str = "LIMS"
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] | None = None

    # Database
    database_url: str = "sqlite+aiosqlite:///./lims.db"
    database_echo: bool = False

    # Listings
    default_page_size: int = DEFAULT_PAGE_SIZE
    max_page_size: int = MAX_PAGE_SIZE

    @field_validator("max_page_size")
    @classmethod
    def validate_max_page_size(cls, v: int) -> int:
        """Keep the configured ceiling within the hard limit."""
        if not 1 <= v <= MAX_PAGE_SIZE:
            raise ValueError(f"MAX_PAGE_SIZE must be between 1 and {MAX_PAGE_SIZE}")
        return v

    @property
    def is_development(self) -> bool:
        """Check if running in development mode."""
        return self.app_env == "development"

    @property
    def is_production(self) -> bool:
        """Check if running in production mode."""
        return self.app_env == "production"


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
