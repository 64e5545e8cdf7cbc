"""
Configuration management for editor_finder.

Uses pydantic-settings for type-safe configuration with automatic
environment variable loading and validation.
"""

from functools import lru_cache
from pathlib import Path

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from editor_finder.constants import (
    DEFAULT_DISCOVERY_MAX_RESULTS,
    DEFAULT_DISCOVERY_RATE_LIMIT,
    DEFAULT_DISCOVERY_TIMEOUT,
    DEFAULT_DISCOVERY_WORKERS,
    DEFAULT_FUZZY_THRESHOLD,
    DEFAULT_MIN_TEXT_HITS,
    DEFAULT_RESULT_CAP,
    DEFAULT_SEARCH_DEADLINE,
)
from editor_finder.errors import ConfigurationError


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.

    Thresholds that are product/tuning decisions (fuzzy match threshold,
    fallback trigger) live here rather than in code so they can be tuned
    per deployment.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",  # Ignore extra env vars
    )

    # Discovery provider (Apify RAG web browser)
    apify_api_token: str | None = Field(
        default=None,
        description="Apify API token for web discovery (optional)",
    )

    # Metadata feed
    tmdb_api_key: str | None = Field(
        default=None,
        description="TMDb API key for crew sync (optional)",
    )

    # Resolution / fallback tuning
    fuzzy_threshold: float = Field(
        default=DEFAULT_FUZZY_THRESHOLD,
        ge=0.0,
        le=1.0,
        description="Minimum name similarity for a fuzzy match",
    )
    fallback_min_text_hits: int = Field(
        default=DEFAULT_MIN_TEXT_HITS,
        ge=0,
        description="Free-text searches with fewer local hits fall back to discovery",
    )

    # Discovery limits
    discovery_workers: int = Field(default=DEFAULT_DISCOVERY_WORKERS, ge=1)
    discovery_max_results: int = Field(default=DEFAULT_DISCOVERY_MAX_RESULTS, ge=1)
    discovery_rate_limit: float = Field(
        default=DEFAULT_DISCOVERY_RATE_LIMIT,
        gt=0.0,
        description="Requests per second against one discovery endpoint",
    )
    discovery_timeout_seconds: float = Field(default=DEFAULT_DISCOVERY_TIMEOUT, gt=0.0)
    search_deadline_seconds: float = Field(default=DEFAULT_SEARCH_DEADLINE, gt=0.0)
    result_cap: int = Field(default=DEFAULT_RESULT_CAP, ge=1)

    # Paths
    cache_dir: Path = Field(default=Path("data/cache"))
    sqlite_path: Path = Field(default=Path("data/editors.db"))
    vocabulary_path: Path | None = Field(
        default=None,
        description="Override for the parser vocabulary data table",
    )
    sources_path: Path | None = Field(
        default=None,
        description="Override for the origin registry data table",
    )

    @field_validator("apify_api_token", "tmdb_api_key", mode="before")
    @classmethod
    def empty_string_to_none(cls, v: str | None) -> str | None:
        """Convert empty strings to None for optional fields."""
        if isinstance(v, str):
            v = v.strip()
            return v if v else None
        return v


@lru_cache
def get_settings() -> Settings:
    """
    Get cached settings instance.

    Uses lru_cache to ensure settings are only loaded once.
    """
    return Settings()


def get_apify_api_token() -> str:
    """Get Apify token from settings."""
    token = get_settings().apify_api_token
    if not token:
        raise ConfigurationError("APIFY_API_TOKEN not set in .env file")
    return token


def get_tmdb_api_key() -> str:
    """Get TMDb API key from settings."""
    key = get_settings().tmdb_api_key
    if not key:
        raise ConfigurationError("TMDB_API_KEY not set in .env file")
    return key


def get_cache_dir() -> Path:
    """Get cache directory from settings."""
    return get_settings().cache_dir


def get_sqlite_path() -> Path:
    """Get path to the SQLite record store."""
    return get_settings().sqlite_path
