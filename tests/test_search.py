"""Search aggregation tests."""

from __future__ import annotations

from typing import Any

import httpx
import pytest

from app.config import Settings
from app.errors import RemoteUnavailable
from app.models import ItemPage, PersonPage, SearchPage
from app.services.search import SearchAggregator
from app.services.tmdb import TMDBClient


@pytest.fixture
def anyio_backend() -> str:
    return "asyncio"


def _settings() -> Settings:
    return Settings(_env_file=None, TMDB_API_KEY="test-key")  # type: ignore[call-arg]


def _batman_results() -> list[dict[str, Any]]:
    movies = [
        {"id": 100 + index, "title": f"Batman {index}", "release_date": "1989-06-23", "media_type": "movie"}
        for index in range(5)
    ]
    shows = [
        {"id": 200 + index, "name": f"Batman Series {index}", "first_air_date": "1992-09-05", "media_type": "tv"}
        for index in range(2)
    ]
    people = [
        {"id": 300 + index, "name": f"Bat Person {index}", "media_type": "person", "gender": 1}
        for index in range(3)
    ]
    return movies[:3] + people[:1] + shows + people[1:] + movies[3:]


def _aggregator(handler) -> tuple[SearchAggregator, httpx.AsyncClient]:
    http_client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    return SearchAggregator(TMDBClient(_settings(), http_client)), http_client


@pytest.mark.anyio("asyncio")
async def test_multi_search_partitions_items_and_people() -> None:
    """5 movies, 2 shows and 3 people split into 7 items and 3 people."""

    def handler(request: httpx.Request) -> httpx.Response:
        assert request.url.path.endswith("/search/multi")
        return httpx.Response(
            200,
            json={
                "results": _batman_results(),
                "page": 1,
                "total_pages": 12,
                "total_results": 231,
            },
        )

    aggregator, http_client = _aggregator(handler)
    async with http_client:
        result = await aggregator.search("batman", 1, "multi")

    assert len(result.results) == 7
    assert len(result.people) == 3
    assert {item.media_type for item in result.results} == {"movie", "tv"}
    assert all(person.media_type == "person" for person in result.people)
    assert result.total_results == 231
    assert result.total_pages == 12
    assert result.page == 1


@pytest.mark.anyio("asyncio")
async def test_multi_search_treats_untagged_entries_as_items() -> None:
    def handler(_: httpx.Request) -> httpx.Response:
        return httpx.Response(
            200,
            json={
                "results": [{"id": 1, "title": "Legacy Entry"}],
                "page": 1,
                "total_pages": 1,
                "total_results": 1,
            },
        )

    aggregator, http_client = _aggregator(handler)
    async with http_client:
        result = await aggregator.search("legacy")

    assert [item.title for item in result.results] == ["Legacy Entry"]
    assert result.results[0].media_type == "movie"
    assert result.people == []


@pytest.mark.anyio("asyncio")
async def test_person_search_treats_everything_as_people() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        assert request.url.path.endswith("/search/person")
        return httpx.Response(
            200,
            json={
                "results": [
                    {"id": 6384, "name": "Keanu Reeves", "known_for": [{"id": 603, "title": "The Matrix"}]},
                    {"id": 6385, "name": "Keanu Other"},
                ],
                "page": 1,
                "total_pages": 1,
                "total_results": 2,
            },
        )

    aggregator, http_client = _aggregator(handler)
    async with http_client:
        result = await aggregator.search("keanu", 1, "person")

    assert result.results == []
    assert [person.name for person in result.people] == ["Keanu Reeves", "Keanu Other"]
    assert result.people[0].known_for[0].title == "The Matrix"
    assert result.total_results == len(result.people)


@pytest.mark.anyio("asyncio")
async def test_search_failure_propagates() -> None:
    def handler(_: httpx.Request) -> httpx.Response:
        return httpx.Response(502, text="bad gateway")

    aggregator, http_client = _aggregator(handler)
    async with http_client:
        with pytest.raises(RemoteUnavailable):
            await aggregator.search("batman")


def test_empty_pages_share_paging_defaults() -> None:
    assert SearchPage().total_pages == ItemPage().total_pages == PersonPage().total_pages == 1
