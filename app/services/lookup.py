"""Hybrid item lookup: local store first, metadata provider on a miss."""

from __future__ import annotations

import logging

from ..errors import NotFound, RemoteUnavailable
from ..models import CatalogItem, ItemDetail, PersonDetail
from ..normalization import normalize_detail, normalize_person_detail
from .catalog_store import CatalogStore
from .tmdb import TMDBClient

logger = logging.getLogger(__name__)


class HybridLookupService:
    """Resolve single items and people by their provider identifier."""

    def __init__(self, store: CatalogStore, tmdb: TMDBClient):
        self._store = store
        self._tmdb = tmdb

    async def get_item(
        self, external_id: int, media_type: str = "movie"
    ) -> CatalogItem | ItemDetail:
        """Return the stored item, or the provider's detail without persisting it.

        A stored item reports the local rating aggregate and the provider
        score captured when it was added; the provider is not called for it,
        so the response carries no cast, genres or similar items. A stored
        row whose media type differs from ``media_type`` is a different title
        sharing the numeric id and counts as a miss.
        """

        requested = "tv" if media_type == "tv" else "movie"
        local = await self._store.get_item_with_rating(external_id)
        if local is not None and local.media_type == requested:
            return local

        try:
            payload = await self._tmdb.fetch_detail(external_id, media_type)
        except (NotFound, RemoteUnavailable) as exc:
            logger.info("Item %s (%s) unavailable: %s", external_id, media_type, exc.message)
            raise NotFound(f"Item {external_id} not found") from exc
        try:
            return normalize_detail(payload, media_type)
        except ValueError as exc:
            raise NotFound(f"Item {external_id} not found") from exc

    async def get_person(self, external_id: int) -> PersonDetail:
        """Return person details; provider failures propagate to the caller."""

        payload = await self._tmdb.fetch_person(external_id)
        try:
            return normalize_person_detail(payload)
        except ValueError as exc:
            raise NotFound(f"Person {external_id} not found") from exc
