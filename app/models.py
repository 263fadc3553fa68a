"""Pydantic models describing catalog, list and search payloads."""

from __future__ import annotations

from datetime import datetime
from typing import Any, Literal

from pydantic import AliasChoices, BaseModel, ConfigDict, Field

MediaType = Literal["movie", "tv"]
SearchKind = Literal["multi", "person"]
ItemSource = Literal["local", "remote", "placeholder"]


class CatalogItem(BaseModel):
    """Canonical shape for a movie or show, whatever the provider called it."""

    model_config = ConfigDict(populate_by_name=True)

    external_id: int = Field(validation_alias=AliasChoices("external_id", "externalId", "id"))
    title: str = ""
    poster_path: str | None = None
    overview: str = ""
    release_date: str | None = None
    vote_average: float | None = None  # provider score, 0-10
    media_type: MediaType = "movie"
    user_rating_average: float | None = None  # local ratings, 0-100
    rating_count: int | None = None
    character: str | None = None
    source: ItemSource = "remote"


class Person(BaseModel):
    """Canonical shape for a cast/crew member returned by the provider."""

    model_config = ConfigDict(populate_by_name=True)

    external_id: int
    name: str = ""
    profile_path: str | None = None
    known_for_department: str | None = None
    popularity: float = 0.0
    gender: str | None = None
    character: str | None = None
    media_type: Literal["person"] = "person"
    known_for: list[CatalogItem] = Field(default_factory=list)


class ItemDetail(CatalogItem):
    """Single-item view enriched with credits and recommendations."""

    backdrop_path: str | None = None
    runtime: int | None = None
    genres: list[str] = Field(default_factory=list)
    vote_count: int | None = None
    cast: list[Person] = Field(default_factory=list)
    similar: list[CatalogItem] = Field(default_factory=list)


class PersonDetail(Person):
    """Person view including biography fields."""

    biography: str = ""
    birthday: str | None = None
    deathday: str | None = None
    place_of_birth: str | None = None


class ItemPage(BaseModel):
    """Listing page of normalized items."""

    results: list[CatalogItem] = Field(default_factory=list)
    page: int = 1
    total_pages: int = 1
    total_results: int = 0
    degraded: bool = False


class PersonPage(BaseModel):
    """Listing page of normalized people."""

    results: list[Person] = Field(default_factory=list)
    page: int = 1
    total_pages: int = 1
    total_results: int = 0
    degraded: bool = False


class SearchPage(BaseModel):
    """Search response partitioned into items and people.

    ``page``, ``total_pages`` and ``total_results`` are copied from the
    provider untouched, so for ``multi`` searches they describe the unfiltered
    provider result set rather than ``results``.
    """

    results: list[CatalogItem] = Field(default_factory=list)
    people: list[Person] = Field(default_factory=list)
    page: int = 1
    total_pages: int = 1
    total_results: int = 0


class SeedFields(BaseModel):
    """Item fields captured by the caller when adding to a list."""

    model_config = ConfigDict(populate_by_name=True)

    external_id: int = Field(
        ge=1, validation_alias=AliasChoices("external_id", "externalId", "movie_id")
    )
    title: str = Field(
        min_length=1,
        max_length=500,
        validation_alias=AliasChoices("title", "movie_title", "name"),
    )
    poster_path: str | None = Field(default=None, max_length=500)
    overview: str | None = None
    release_date: str | None = Field(default=None, max_length=40)
    media_type: MediaType = "movie"
    vote_average: float | None = None


class RatingRequest(BaseModel):
    """Body of a rating submission.

    ``value`` is left unparsed so the service rejects booleans and numeric
    strings instead of pydantic coercing them.
    """

    model_config = ConfigDict(populate_by_name=True)

    external_id: int = Field(
        validation_alias=AliasChoices("external_id", "externalId", "movie_id")
    )
    value: Any = Field(validation_alias=AliasChoices("value", "rating"))


class ListEntryView(BaseModel):
    """One entry of a user's collection joined with the user's own rating."""

    external_id: int
    title: str
    poster_path: str | None = None
    overview: str = ""
    release_date: str | None = None
    media_type: MediaType = "movie"
    rating: int | None = None
    added_at: datetime | None = None


class ContributorView(BaseModel):
    """Leaderboard row for one user."""

    user_id: int
    list_count: int = 0
    rating_count: int = 0
