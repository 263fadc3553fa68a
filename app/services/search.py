"""Search aggregation over the provider's multi-type and person search."""

from __future__ import annotations

import logging
from typing import Any

from ..models import CatalogItem, Person, SearchPage
from ..normalization import normalize_item, normalize_people, normalize_person
from .tmdb import TMDBClient

logger = logging.getLogger(__name__)


class SearchAggregator:
    """Partition provider search results into items and people."""

    def __init__(self, tmdb: TMDBClient):
        self._tmdb = tmdb

    async def search(self, query: str, page: int = 1, kind: str = "multi") -> SearchPage:
        """Run one provider search and normalize its results.

        The pagination envelope is passed through unchanged, so for ``multi``
        searches ``total_results`` counts the provider's unfiltered results.
        """

        provider_page = await self._tmdb.search(query, page, kind)
        if kind == "person":
            items: list[CatalogItem] = []
            people = normalize_people(provider_page.results)
        else:
            items, people = self._partition(provider_page.results)

        logger.debug(
            "Search %r page %s: %s items, %s people",
            query,
            provider_page.page,
            len(items),
            len(people),
        )
        return SearchPage(
            results=items,
            people=people,
            page=provider_page.page,
            total_pages=provider_page.total_pages,
            total_results=provider_page.total_results,
        )

    @staticmethod
    def _partition(
        results: list[dict[str, Any]],
    ) -> tuple[list[CatalogItem], list[Person]]:
        items: list[CatalogItem] = []
        people: list[Person] = []
        for record in results:
            if record.get("id") is None:
                continue
            try:
                if record.get("media_type") == "person":
                    people.append(normalize_person(record))
                else:
                    # Untagged legacy entries are treated as items.
                    items.append(normalize_item(record))
            except ValueError:
                continue
        return items, people
