"""Configuration management for the Query Router API."""

from functools import lru_cache
from pathlib import Path
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Application
    app_name: str = "Query Router"
    app_version: str = "0.1.0"
    debug: bool = False
    environment: Literal["development", "staging", "production"] = "development"

    # Logging
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO"
    log_json: bool = False

    # Routing tables (built-in tables are used when no path is set)
    catalog_path: Path | None = None
    default_model: str = "gemini-2.5-flash"

    # Recommendation
    recommendation_threshold: int = Field(default=30, ge=0, le=100)
    max_recommendations: int = Field(default=3, ge=1)

    # Token/cost estimation
    chars_per_token: int = Field(default=4, ge=1)
    output_multiplier: int = Field(default=4, ge=0)
    min_display_cost: float = Field(default=0.001, ge=0.0)
    currency: str = "INR"

    # Observability
    otel_exporter_otlp_endpoint: str | None = None


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
