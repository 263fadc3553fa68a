"""Leaderboard of users by list and rating activity."""

from __future__ import annotations

from ..models import ContributorView
from .catalog_store import CatalogStore

MAX_CONTRIBUTORS = 100


class ContributorRanking:
    def __init__(self, store: CatalogStore, default_limit: int = 10):
        self._store = store
        self._default_limit = default_limit

    async def top_contributors(self, limit: int | None = None) -> list[ContributorView]:
        """Return users ordered by distinct list entries, most first.

        Ties keep the store's scan order; there is no secondary sort key.
        """

        resolved = self._default_limit if limit is None else limit
        resolved = max(1, min(int(resolved), MAX_CONTRIBUTORS))
        return await self._store.contributor_counts(resolved)
