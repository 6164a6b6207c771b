"""
Application configuration using Pydantic Settings.
Loads environment variables and provides type-safe configuration.
"""

from functools import lru_cache

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from ``INVOICEME_*`` environment variables."""

    model_config = SettingsConfigDict(
        env_prefix="INVOICEME_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore"
    )

    # Environment
    environment: str = Field(default="development", description="Current environment")
    debug: bool = Field(default=False, description="Debug mode")
    log_level: str = Field(default="INFO")

    # Database
    database_url: str = Field(default="sqlite:///./invoiceme.db", description="SQLAlchemy database URL")
    database_echo: bool = Field(default=False)

    # Invoicing
    invoice_number_prefix: str = Field(default="INV", min_length=1, max_length=10)
    invoice_sequence_width: int = Field(default=4, ge=1, le=10)
    default_payment_terms: str = Field(default="Net 30")

    # Pagination
    default_page_size: int = Field(default=20, ge=1)
    max_page_size: int = Field(default=100, ge=1)

    @field_validator("log_level")
    @classmethod
    def normalize_log_level(cls, v: str) -> str:
        level = v.strip().upper()
        if level not in ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"):
            raise ValueError(f"Unknown log level: {v}")
        return level

    @property
    def is_development(self) -> bool:
        """Check if running in development environment."""
        return self.environment.lower() == "development"

    @property
    def is_production(self) -> bool:
        """Check if running in production environment."""
        return self.environment.lower() == "production"

    @property
    def is_testing(self) -> bool:
        return self.environment.lower() == "testing"

    def validate_environment(self) -> None:
        """Reject settings that are unsafe outside development."""
        if self.database_url == "sqlite://" or ":memory:" in self.database_url:
            raise ValueError("An in-memory database cannot be used in production")
        if self.default_page_size > self.max_page_size:
            raise ValueError("INVOICEME_DEFAULT_PAGE_SIZE cannot exceed INVOICEME_MAX_PAGE_SIZE")


@lru_cache()
def get_settings() -> Settings:
    """
    Get cached settings instance.
    Use this function to get settings throughout the application.
    """
    settings = Settings()

    # Validate environment in production
    if settings.is_production:
        settings.validate_environment()

    return settings
