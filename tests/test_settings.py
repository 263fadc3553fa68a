"""Configuration settings behaviour tests."""

from __future__ import annotations

import pytest
from pydantic import ValidationError

from app.config import Settings


def test_defaults_without_environment(monkeypatch) -> None:
    for name in ("TMDB_API_KEY", "TMDB_API_URL", "TMDB_TIMEOUT", "DATABASE_URL"):
        monkeypatch.delenv(name, raising=False)

    settings = Settings(_env_file=None)

    assert settings.tmdb_api_key is None
    assert settings.tmdb_base_url == "https://api.themoviedb.org/3"
    assert settings.tmdb_timeout_seconds == 10.0
    assert settings.placeholder_page_size == 20
    assert settings.database_url.startswith("sqlite+aiosqlite://")
    assert settings.top_contributors_limit == 10


def test_blank_api_key_is_treated_as_missing() -> None:
    """Whitespace-only keys should not be sent to the provider."""

    settings = Settings(_env_file=None, TMDB_API_KEY="   ")

    assert settings.tmdb_api_key is None


def test_api_key_is_stripped() -> None:
    settings = Settings(_env_file=None, TMDB_API_KEY="  abc123 ")

    assert settings.tmdb_api_key == "abc123"


def test_base_url_drops_trailing_slash() -> None:
    settings = Settings(_env_file=None, TMDB_API_URL="https://tmdb.example.com/3/")

    assert settings.tmdb_base_url == "https://tmdb.example.com/3"


@pytest.mark.parametrize(
    ("field", "value"),
    [
        ("TMDB_TIMEOUT", 0),
        ("TMDB_TIMEOUT", 120),
        ("PLACEHOLDER_PAGE_SIZE", 0),
        ("DB_POOL_SIZE", 0),
        ("TOP_CONTRIBUTORS_LIMIT", 500),
    ],
)
def test_out_of_range_values_are_rejected(field: str, value: int) -> None:
    with pytest.raises(ValidationError):
        Settings(_env_file=None, **{field: value})


def test_environment_variables_are_read(monkeypatch) -> None:
    monkeypatch.setenv("TMDB_LANGUAGE", "de-DE")
    monkeypatch.setenv("PORT", "8080")

    settings = Settings(_env_file=None)

    assert settings.tmdb_language == "de-DE"
    assert settings.server_port == 8080
