"""Client for The Movie Database (TMDB) metadata API.

Listing calls (popular, top rated, popular people) never raise on provider
failure: they return a deterministic placeholder page flagged as degraded.
Point queries (detail, person, search) raise typed errors instead.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Literal

import httpx

from ..config import Settings
from ..errors import CatalogError, InvalidValue, NotFound, RemoteUnavailable
from ..utils import clamp_page, coerce_int

logger = logging.getLogger(__name__)

PlaceholderKind = Literal["movie", "tv", "person"]

PLACEHOLDER_OVERVIEW = "Details are temporarily unavailable."
PLACEHOLDER_RELEASE_DATE = "2023-01-01"
PLACEHOLDER_VOTE_AVERAGE = 5.0


@dataclass(slots=True)
class ProviderPage:
    """A provider page envelope plus whether it was synthesised locally."""

    results: list[dict[str, Any]] = field(default_factory=list)
    page: int = 1
    total_pages: int = 1
    total_results: int = 0
    degraded: bool = False

    def to_payload(self) -> dict[str, Any]:
        return {
            "results": self.results,
            "page": self.page,
            "total_pages": self.total_pages,
            "total_results": self.total_results,
        }


def build_placeholder_page(kind: PlaceholderKind, size: int) -> ProviderPage:
    """Return the synthetic page served when a listing call fails."""

    results: list[dict[str, Any]] = []
    for index in range(1, size + 1):
        if kind == "person":
            results.append(
                {
                    "id": index,
                    "name": f"Unavailable Person {index}",
                    "profile_path": None,
                    "known_for_department": None,
                    "popularity": 0.0,
                    "known_for": [],
                }
            )
            continue
        entry: dict[str, Any] = {
            "id": index,
            "poster_path": None,
            "overview": PLACEHOLDER_OVERVIEW,
            "vote_average": PLACEHOLDER_VOTE_AVERAGE,
            "media_type": kind,
        }
        if kind == "tv":
            entry["name"] = f"Unavailable Show {index}"
            entry["first_air_date"] = PLACEHOLDER_RELEASE_DATE
        else:
            entry["title"] = f"Unavailable Movie {index}"
            entry["release_date"] = PLACEHOLDER_RELEASE_DATE
        results.append(entry)
    return ProviderPage(
        results=results,
        page=1,
        total_pages=1,
        total_results=len(results),
        degraded=True,
    )


class TMDBClient:
    """Thin wrapper around the TMDB HTTP API."""

    def __init__(self, settings: Settings, http_client: httpx.AsyncClient):
        if not settings.tmdb_api_key:
            logger.warning("TMDB_API_KEY is not configured; provider calls will fail")
        self._settings = settings
        self._client = http_client
        self._base_url = settings.tmdb_base_url
        self._timeout = httpx.Timeout(settings.tmdb_timeout_seconds)

    async def fetch_popular(self, media_type: str = "movie", page: int = 1) -> ProviderPage:
        """Return popular movies or shows, degrading on provider failure."""

        if media_type not in ("movie", "tv"):
            raise InvalidValue(f"Unsupported media type: {media_type}")
        return await self._get_page(
            f"/{media_type}/popular",
            {"page": clamp_page(page)},
            degrade_as=media_type,  # type: ignore[arg-type]
        )

    async def fetch_top_rated(self, page: int = 1) -> ProviderPage:
        return await self._get_page(
            "/movie/top_rated", {"page": clamp_page(page)}, degrade_as="movie"
        )

    async def fetch_popular_people(self, page: int = 1) -> ProviderPage:
        return await self._get_page(
            "/person/popular", {"page": clamp_page(page)}, degrade_as="person"
        )

    async def fetch_detail(self, external_id: int, media_type: str = "movie") -> dict[str, Any]:
        """Return the raw detail payload for one movie or show."""

        endpoint = "tv" if media_type == "tv" else "movie"
        return await self._request(
            f"/{endpoint}/{int(external_id)}",
            {"append_to_response": "credits,similar"},
        )

    async def fetch_person(self, external_id: int) -> dict[str, Any]:
        return await self._request(
            f"/person/{int(external_id)}",
            {"append_to_response": "combined_credits"},
        )

    async def search(self, query: str, page: int = 1, kind: str = "multi") -> ProviderPage:
        """Run a multi-type or person search; failures raise ``RemoteUnavailable``."""

        normalized_query = (query or "").strip()
        if not normalized_query:
            raise InvalidValue("Search query is required")
        if kind not in ("multi", "person"):
            raise InvalidValue(f"Unsupported search kind: {kind}")
        return await self._get_page(
            f"/search/{kind}",
            {
                "query": normalized_query,
                "page": clamp_page(page),
                "include_adult": "false",
            },
            degrade_as=None,
        )

    async def _get_page(
        self,
        path: str,
        params: dict[str, Any],
        *,
        degrade_as: PlaceholderKind | None,
    ) -> ProviderPage:
        """Fetch a paginated envelope.

        ``degrade_as`` is the per-call-site policy: when set, failures are
        logged and replaced by a placeholder page of that kind; when ``None``
        they propagate as ``RemoteUnavailable``.
        """

        try:
            payload = await self._request(path, params)
            results = payload.get("results")
            if not isinstance(results, list):
                raise RemoteUnavailable(f"Invalid TMDB response format for {path}")
        except CatalogError as exc:
            if degrade_as is None:
                if isinstance(exc, RemoteUnavailable):
                    raise
                raise RemoteUnavailable(f"TMDB request to {path} failed") from exc
            logger.warning(
                "TMDB listing %s unavailable (%s); serving placeholder page",
                path,
                exc.message,
            )
            return build_placeholder_page(
                degrade_as, self._settings.placeholder_page_size
            )

        return ProviderPage(
            results=[entry for entry in results if isinstance(entry, dict)],
            page=coerce_int(payload.get("page"), default=1),
            total_pages=coerce_int(payload.get("total_pages"), default=1),
            total_results=coerce_int(payload.get("total_results"), default=len(results)),
        )

    async def _request(self, path: str, params: dict[str, Any] | None = None) -> dict[str, Any]:
        if not self._settings.tmdb_api_key:
            raise RemoteUnavailable("TMDB API key is not configured")

        query = dict(params or {})
        query["api_key"] = self._settings.tmdb_api_key
        query.setdefault("language", self._settings.tmdb_language)

        try:
            response = await self._client.get(
                f"{self._base_url}{path}", params=query, timeout=self._timeout
            )
        except httpx.HTTPError as exc:
            logger.warning(
                "TMDB request to %s failed: %s", path, exc.__class__.__name__
            )
            raise RemoteUnavailable(f"TMDB request to {path} failed") from exc

        if response.status_code == 404:
            raise NotFound(f"TMDB has no resource at {path}")
        if response.status_code >= 400:
            logger.warning(
                "TMDB request to %s returned HTTP %s", path, response.status_code
            )
            raise RemoteUnavailable(
                f"TMDB request to {path} returned HTTP {response.status_code}"
            )

        try:
            data = response.json()
        except ValueError as exc:
            raise RemoteUnavailable(f"TMDB returned invalid JSON for {path}") from exc
        if not isinstance(data, dict):
            raise RemoteUnavailable(f"Invalid TMDB response format for {path}")
        return data
