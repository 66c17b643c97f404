"""Application configuration models."""

from __future__ import annotations

from functools import lru_cache
from typing import Literal

from pydantic import Field, HttpUrl, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from .errors import ConfigurationError


class Settings(BaseSettings):
    """Settings loaded from environment variables or a .env file."""

    app_name: str = Field(default="ReelScope", alias="APP_NAME")

    tmdb_api_key: str | None = Field(default=None, alias="TMDB_API_KEY")
    omdb_api_key: str | None = Field(default=None, alias="OMDB_API_KEY")

    tmdb_api_url: HttpUrl = Field(
        default="https://api.themoviedb.org/3", alias="TMDB_API_URL"
    )
    omdb_api_url: HttpUrl = Field(
        default="https://www.omdbapi.com/", alias="OMDB_API_URL"
    )
    tmdb_image_base_url: str = Field(
        default="https://image.tmdb.org/t/p/w500", alias="TMDB_IMAGE_BASE_URL"
    )
    watch_region: str = Field(default="IN", alias="WATCH_REGION")

    http_timeout_seconds: float = Field(
        default=20.0, alias="HTTP_TIMEOUT_SECONDS", gt=0
    )
    http_retry_attempts: int = Field(
        default=4, alias="HTTP_RETRY_ATTEMPTS", ge=1, le=10
    )
    retry_backoff_seconds: float = Field(
        default=1.0, alias="RETRY_BACKOFF_SECONDS", ge=0
    )
    enrichment_concurrency: int = Field(
        default=8, alias="ENRICHMENT_CONCURRENCY", ge=1, le=64
    )

    mcp_transport: Literal["stdio", "streamable-http", "sse"] = Field(
        default="stdio", alias="MCP_TRANSPORT"
    )
    server_host: str = Field(default="127.0.0.1", alias="HOST")
    server_port: int = Field(default=8000, alias="PORT")
    log_level: str = Field(default="INFO", alias="LOG_LEVEL")

    @field_validator("tmdb_api_key", "omdb_api_key", mode="before")
    @classmethod
    def _blank_keys_are_missing(cls, value: object) -> object:
        if isinstance(value, str) and not value.strip():
            return None
        return value

    @field_validator("watch_region", mode="before")
    @classmethod
    def _normalise_region(cls, value: object) -> str:
        """Region codes are two-letter ISO 3166-1 codes, upper-cased."""

        text = str(value or "").strip().upper()
        if len(text) != 2 or not text.isalpha():
            raise ValueError("WATCH_REGION must be a two-letter country code")
        return text

    @field_validator("tmdb_image_base_url", mode="before")
    @classmethod
    def _strip_trailing_slash(cls, value: object) -> str:
        text = str(value or "").strip().rstrip("/")
        if not text.startswith(("http://", "https://")):
            raise ValueError("TMDB_IMAGE_BASE_URL must be an absolute http(s) URL")
        return text

    @field_validator("log_level", mode="before")
    @classmethod
    def _upper_log_level(cls, value: object) -> str:
        return str(value or "INFO").strip().upper()

    def require_tmdb_key(self) -> str:
        """Return the TMDB key or raise when it has not been configured."""

        if not self.tmdb_api_key:
            raise ConfigurationError("TMDB", "TMDB_API_KEY")
        return self.tmdb_api_key

    def require_omdb_key(self) -> str:
        """Return the OMDb key or raise when it has not been configured."""

        if not self.omdb_api_key:
            raise ConfigurationError("OMDB", "OMDB_API_KEY")
        return self.omdb_api_key

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8")


@lru_cache
def get_settings() -> Settings:
    """Return a cached settings instance."""

    return Settings()  # type: ignore[call-arg]
