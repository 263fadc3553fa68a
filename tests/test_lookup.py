"""Hybrid lookup tests against a temporary SQLite store."""

from __future__ import annotations

import asyncio
from typing import Any, cast

import pytest
from sqlalchemy import func, select

from app.database import Database
from app.db_models import CatalogItemRecord
from app.errors import NotFound, RemoteUnavailable
from app.models import SeedFields
from app.services.catalog_store import CatalogStore
from app.services.collection import ListManager
from app.services.lookup import HybridLookupService
from app.services.tmdb import TMDBClient


class StubTMDB:
    """Records detail requests and replays a canned payload or error."""

    def __init__(self, payload: dict[str, Any] | None = None, error: Exception | None = None):
        self.payload = payload
        self.error = error
        self.calls: list[tuple[int, str]] = []

    async def fetch_detail(self, external_id: int, media_type: str = "movie") -> dict[str, Any]:
        self.calls.append((external_id, media_type))
        if self.error is not None:
            raise self.error
        return self.payload or {}

    async def fetch_person(self, external_id: int) -> dict[str, Any]:
        if self.error is not None:
            raise self.error
        return self.payload or {}


async def _count_items(database: Database) -> int:
    async with database.session_factory() as session:
        return int(await session.scalar(select(func.count(CatalogItemRecord.id))) or 0)


def test_stored_item_keeps_seed_score_and_local_average(tmp_path) -> None:
    """A stored item keeps its 0-10 provider score and adds the local average."""

    async def runner() -> None:
        database = Database(f"sqlite+aiosqlite:///{tmp_path / 'lookup.db'}")
        await database.create_all()
        store = CatalogStore(database.session_factory)
        lists = ListManager(store)
        tmdb = StubTMDB(payload={"id": 550, "title": "Fight Club", "vote_average": 9.9})
        service = HybridLookupService(store, cast(TMDBClient, tmdb))

        seed = SeedFields(external_id=550, title="Fight Club", vote_average=8.4)
        await lists.add_to_list(1, seed)
        await lists.add_to_list(2, seed)
        await lists.rate(1, 550, 80)
        await lists.rate(2, 550, 40)

        item = await service.get_item(550)

        assert item.source == "local"
        assert item.user_rating_average == pytest.approx(60.0)
        assert item.rating_count == 2
        assert item.vote_average == pytest.approx(8.4)
        assert tmdb.calls == []

        await database.dispose()

    asyncio.run(runner())


def test_stored_item_without_ratings_has_no_average(tmp_path) -> None:
    async def runner() -> None:
        database = Database(f"sqlite+aiosqlite:///{tmp_path / 'unrated.db'}")
        await database.create_all()
        store = CatalogStore(database.session_factory)
        await ListManager(store).add_to_list(
            1, SeedFields(external_id=7, title="Se7en", media_type="movie")
        )
        service = HybridLookupService(store, cast(TMDBClient, StubTMDB()))

        item = await service.get_item(7)

        assert item.user_rating_average is None
        assert item.vote_average is None
        assert item.rating_count == 0

        await database.dispose()

    asyncio.run(runner())


def test_remote_item_is_normalized_and_not_persisted(tmp_path) -> None:
    """Viewing a detail page never creates a catalog row."""

    async def runner() -> None:
        database = Database(f"sqlite+aiosqlite:///{tmp_path / 'remote.db'}")
        await database.create_all()
        store = CatalogStore(database.session_factory)
        tmdb = StubTMDB(
            payload={
                "id": 1399,
                "name": "Game of Thrones",
                "first_air_date": "2011-04-17",
                "vote_average": 8.5,
                "episode_run_time": [60],
            }
        )
        service = HybridLookupService(store, cast(TMDBClient, tmdb))

        item = await service.get_item(1399, "tv")

        assert item.source == "remote"
        assert item.media_type == "tv"
        assert item.title == "Game of Thrones"
        assert item.vote_average == pytest.approx(8.5)
        assert tmdb.calls == [(1399, "tv")]
        assert await _count_items(database) == 0

        await database.dispose()

    asyncio.run(runner())


@pytest.mark.parametrize(
    "error",
    [NotFound("missing"), RemoteUnavailable("timeout")],
)
def test_remote_failure_signals_not_found(tmp_path, error: Exception) -> None:
    """Detail lookups never degrade to placeholders."""

    async def runner() -> None:
        database = Database(f"sqlite+aiosqlite:///{tmp_path / 'failure.db'}")
        await database.create_all()
        store = CatalogStore(database.session_factory)
        service = HybridLookupService(store, cast(TMDBClient, StubTMDB(error=error)))

        with pytest.raises(NotFound):
            await service.get_item(123)

        await database.dispose()

    asyncio.run(runner())


def test_person_lookup_propagates_provider_errors(tmp_path) -> None:
    async def runner() -> None:
        database = Database(f"sqlite+aiosqlite:///{tmp_path / 'person.db'}")
        await database.create_all()
        store = CatalogStore(database.session_factory)
        service = HybridLookupService(
            store, cast(TMDBClient, StubTMDB(error=RemoteUnavailable("down")))
        )

        with pytest.raises(RemoteUnavailable):
            await service.get_person(287)

        await database.dispose()

    asyncio.run(runner())


def test_stored_item_with_other_media_type_is_a_miss(tmp_path) -> None:
    """Movie and show ids overlap, so a stored movie never answers a tv lookup."""

    async def runner() -> None:
        database = Database(f"sqlite+aiosqlite:///{tmp_path / 'media.db'}")
        await database.create_all()
        store = CatalogStore(database.session_factory)
        await ListManager(store).add_to_list(
            1, SeedFields(external_id=1399, title="Some Movie", media_type="movie")
        )
        tmdb = StubTMDB(payload={"id": 1399, "name": "Game of Thrones"})
        service = HybridLookupService(store, cast(TMDBClient, tmdb))

        show = await service.get_item(1399, "tv")
        movie = await service.get_item(1399, "movie")

        assert show.source == "remote"
        assert show.title == "Game of Thrones"
        assert show.media_type == "tv"
        assert movie.source == "local"
        assert tmdb.calls == [(1399, "tv")]

        await database.dispose()

    asyncio.run(runner())
