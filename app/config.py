"""Application configuration models."""

from __future__ import annotations

from functools import lru_cache
from typing import Literal

from pydantic import Field, HttpUrl, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Settings loaded from environment variables or a .env file."""

    app_name: str = Field(default="MyFavMovies", alias="APP_NAME")
    server_host: str = Field(default="0.0.0.0", alias="HOST")
    server_port: int = Field(default=3000, alias="PORT")

    tmdb_api_key: str | None = Field(default=None, alias="TMDB_API_KEY")
    tmdb_api_url: HttpUrl = Field(
        default="https://api.themoviedb.org/3", alias="TMDB_API_URL"
    )
    tmdb_language: str = Field(default="en-US", alias="TMDB_LANGUAGE")
    tmdb_timeout_seconds: float = Field(
        default=10.0, alias="TMDB_TIMEOUT", ge=1.0, le=60.0
    )
    placeholder_page_size: int = Field(
        default=20, alias="PLACEHOLDER_PAGE_SIZE", ge=1, le=100
    )

    database_url: str = Field(
        default="sqlite+aiosqlite:///./myfavmovies.db", alias="DATABASE_URL"
    )
    db_pool_size: int = Field(default=10, alias="DB_POOL_SIZE", ge=1, le=200)
    db_max_overflow: int = Field(default=0, alias="DB_MAX_OVERFLOW", ge=0, le=200)
    db_pool_timeout_seconds: float = Field(
        default=30.0, alias="DB_POOL_TIMEOUT", gt=0
    )

    top_contributors_limit: int = Field(
        default=10, alias="TOP_CONTRIBUTORS_LIMIT", ge=1, le=100
    )

    environment: Literal["development", "production"] = Field(
        default="development", alias="ENVIRONMENT"
    )

    @field_validator("tmdb_api_key", mode="before")
    @classmethod
    def _strip_blank_key(cls, value: object) -> object:
        """Treat blank API keys as missing."""

        if isinstance(value, str):
            value = value.strip()
            if not value:
                return None
        return value

    @property
    def tmdb_base_url(self) -> str:
        """Return the provider base URL without a trailing slash."""

        return str(self.tmdb_api_url).rstrip("/")

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8")


@lru_cache
def get_settings() -> Settings:
    """Return a cached settings instance."""

    return Settings()  # type: ignore[call-arg]


settings = get_settings()
