"""Entry point for the FastAPI-powered catalog service."""

from __future__ import annotations

import logging
from contextlib import AsyncExitStack, asynccontextmanager
from dataclasses import dataclass
from typing import Any

import httpx
from fastapi import Depends, FastAPI, Header, HTTPException, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from .config import settings
from .database import Database
from .errors import CatalogError
from .models import RatingRequest, SeedFields
from .normalization import to_item_page, to_person_page
from .services.catalog_store import CatalogStore
from .services.collection import ListManager
from .services.contributors import ContributorRanking
from .services.lookup import HybridLookupService
from .services.search import SearchAggregator
from .services.tmdb import TMDBClient

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)

app: FastAPI


@dataclass(slots=True)
class ServiceContainer:
    """Services wired onto ``app.state`` during startup."""

    tmdb: TMDBClient
    lookup: HybridLookupService
    search: SearchAggregator
    lists: ListManager
    contributors: ContributorRanking


@asynccontextmanager
async def lifespan(fastapi_app: FastAPI):
    exit_stack = AsyncExitStack()
    tmdb_http_client = await exit_stack.enter_async_context(
        httpx.AsyncClient(
            timeout=httpx.Timeout(settings.tmdb_timeout_seconds, connect=5.0),
        )
    )
    database = Database(
        settings.database_url,
        pool_size=settings.db_pool_size,
        max_overflow=settings.db_max_overflow,
        pool_timeout=settings.db_pool_timeout_seconds,
    )
    await database.create_all()

    tmdb = TMDBClient(settings, tmdb_http_client)
    store = CatalogStore(database.session_factory)
    fastapi_app.state.services = ServiceContainer(
        tmdb=tmdb,
        lookup=HybridLookupService(store, tmdb),
        search=SearchAggregator(tmdb),
        lists=ListManager(store),
        contributors=ContributorRanking(store, settings.top_contributors_limit),
    )
    fastapi_app.state.database = database

    try:
        yield
    finally:  # pragma: no cover - teardown path exercised at runtime
        await database.dispose()
        await exit_stack.aclose()


def create_app() -> FastAPI:
    fastapi_app = FastAPI(
        title=settings.app_name,
        description="Movie and show catalog with personal lists and ratings",
        version="1.0.0",
        lifespan=lifespan,
    )

    fastapi_app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["GET", "POST", "DELETE"],
        allow_headers=["*"],
    )

    register_routes(fastapi_app)
    return fastapi_app


def get_services(fastapi_app: FastAPI) -> ServiceContainer:
    services = getattr(fastapi_app.state, "services", None)
    if not isinstance(services, ServiceContainer):
        raise RuntimeError("Catalog services not initialised")
    return services


def current_user_id(x_user_id: str | None = Header(default=None)) -> int:
    """Return the user id asserted by the upstream credential layer."""

    try:
        user_id = int(x_user_id or "")
    except ValueError:
        user_id = 0
    if user_id <= 0:
        raise HTTPException(status_code=401, detail="Authenticated user id is required")
    return user_id


async def _catalog_error_handler(_: Request, exc: CatalogError) -> JSONResponse:
    return JSONResponse(exc.to_payload(), status_code=exc.status_code)


def register_routes(fastapi_app: FastAPI) -> None:
    fastapi_app.add_exception_handler(CatalogError, _catalog_error_handler)

    @fastapi_app.get("/healthz")
    async def healthcheck() -> dict[str, str]:
        return {"status": "ok"}

    @fastapi_app.get("/api/movies/popular")
    async def popular(media_type: str = "movie", page: int = 1) -> dict[str, Any]:
        services = get_services(fastapi_app)
        provider_page = await services.tmdb.fetch_popular(media_type, page)
        return to_item_page(
            provider_page.to_payload(), media_type, degraded=provider_page.degraded
        ).model_dump(mode="json")

    @fastapi_app.get("/api/movies/top-rated")
    async def top_rated(page: int = 1) -> dict[str, Any]:
        services = get_services(fastapi_app)
        provider_page = await services.tmdb.fetch_top_rated(page)
        return to_item_page(
            provider_page.to_payload(), "movie", degraded=provider_page.degraded
        ).model_dump(mode="json")

    @fastapi_app.get("/api/movies/popular-people")
    async def popular_people(page: int = 1) -> dict[str, Any]:
        services = get_services(fastapi_app)
        provider_page = await services.tmdb.fetch_popular_people(page)
        return to_person_page(
            provider_page.to_payload(), degraded=provider_page.degraded
        ).model_dump(mode="json")

    @fastapi_app.get("/api/movies/details/{external_id}")
    async def item_details(external_id: int, media_type: str = "movie") -> dict[str, Any]:
        services = get_services(fastapi_app)
        item = await services.lookup.get_item(external_id, media_type)
        return item.model_dump(mode="json")

    @fastapi_app.get("/api/movies/person/{external_id}")
    async def person_details(external_id: int) -> dict[str, Any]:
        services = get_services(fastapi_app)
        person = await services.lookup.get_person(external_id)
        return person.model_dump(mode="json")

    @fastapi_app.get("/api/movies/search")
    async def search(query: str = "", page: int = 1, kind: str = "multi") -> dict[str, Any]:
        services = get_services(fastapi_app)
        result = await services.search.search(query, page, kind)
        return result.model_dump(mode="json")

    @fastapi_app.get("/api/movies/list")
    async def user_list(user_id: int = Depends(current_user_id)) -> list[dict[str, Any]]:
        services = get_services(fastapi_app)
        entries = await services.lists.list_for_user(user_id)
        return [entry.model_dump(mode="json") for entry in entries]

    @fastapi_app.post("/api/movies/list", status_code=201)
    async def add_to_list(
        seed: SeedFields, user_id: int = Depends(current_user_id)
    ) -> dict[str, str]:
        services = get_services(fastapi_app)
        await services.lists.add_to_list(user_id, seed)
        return {"status": "ok", "message": "Item added to your list"}

    @fastapi_app.delete("/api/movies/list/{external_id}")
    async def remove_from_list(
        external_id: int, user_id: int = Depends(current_user_id)
    ) -> dict[str, str]:
        services = get_services(fastapi_app)
        await services.lists.remove_from_list(user_id, external_id)
        return {"status": "ok", "message": "Item removed from your list"}

    @fastapi_app.post("/api/movies/rate")
    async def rate(
        body: RatingRequest, user_id: int = Depends(current_user_id)
    ) -> dict[str, Any]:
        services = get_services(fastapi_app)
        value = await services.lists.rate(user_id, body.external_id, body.value)
        return {"status": "ok", "external_id": body.external_id, "value": value}

    @fastapi_app.get("/api/users/top")
    async def top_contributors(limit: int | None = None) -> list[dict[str, Any]]:
        services = get_services(fastapi_app)
        rows = await services.contributors.top_contributors(limit)
        return [row.model_dump(mode="json") for row in rows]


app = create_app()


if __name__ == "__main__":  # pragma: no cover - manual execution
    import uvicorn

    uvicorn.run(
        "app.main:app",
        host=settings.server_host,
        port=settings.server_port,
        reload=settings.environment == "development",
    )
