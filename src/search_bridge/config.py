"""Centralized configuration for the search bridge using Pydantic Settings."""

from __future__ import annotations

from functools import lru_cache

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Strictly typed configuration loaded from environment variables.

    Values come from the process environment first and an optional ``.env``
    file second; unknown variables are ignored.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        validate_default=True,
        extra="ignore",
    )

    # Search index
    solr_url: str = Field(default="http://localhost:8983", description="Base URL of the search index")

    # Document store
    couchdb_url: str = Field(default="http://localhost:5984", description="Base URL of the document store")
    couchdb_database: str = Field(
        default="chef",
        min_length=1,
        description="Document store database; also the partition every search and rebuild is scoped to",
    )

    # HTTP settings
    http_timeout: int = Field(default=30, ge=1, description="Transport request timeout in seconds")

    # Search defaults
    search_default_rows: int = Field(
        default=20, ge=1, description="Page size applied by kind-scoped searches when the caller sets none"
    )
    base_url: str = Field(default="http://localhost:4000", description="Public base URL used to render search URLs")

    # Logging
    log_level: str = Field(default="info", description="Logging level")
    log_json: bool = Field(default=True, description="Emit structured JSON logs")

    @field_validator("solr_url", "couchdb_url", "base_url")
    @classmethod
    def _check_http_url(cls, value: str) -> str:
        value = value.strip()
        if not value.startswith(("http://", "https://")):
            raise ValueError(f"Expected an http(s) URL, got {value!r}")
        return value.rstrip("/")

    @field_validator("log_level")
    @classmethod
    def _check_log_level(cls, value: str) -> str:
        normalized = value.strip().lower()
        if normalized not in {"debug", "info", "warning", "error", "critical"}:
            raise ValueError(f"Unknown log level {value!r}")
        return normalized


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Return the process-wide settings instance."""
    return Settings()
