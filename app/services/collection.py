"""Per-user list membership and ratings."""

from __future__ import annotations

import logging
from numbers import Real

from ..errors import InvalidValue
from ..models import ListEntryView, SeedFields
from .catalog_store import CatalogStore

logger = logging.getLogger(__name__)

RATING_MIN = 0
RATING_MAX = 100


def validate_rating(value: object) -> int:
    """Return ``value`` as an int on the 0-100 scale or raise ``InvalidValue``."""

    if isinstance(value, bool) or not isinstance(value, Real):
        raise InvalidValue("Rating must be an integer between 0 and 100")
    if isinstance(value, float) and not value.is_integer():
        raise InvalidValue("Rating must be an integer between 0 and 100")
    number = int(value)
    if not RATING_MIN <= number <= RATING_MAX:
        raise InvalidValue("Rating must be an integer between 0 and 100")
    return number


class ListManager:
    """Idempotent list membership and rating upserts scoped to one user."""

    def __init__(self, store: CatalogStore):
        self._store = store

    async def add_to_list(self, user_id: int, seed: SeedFields) -> None:
        """Add the seeded item to the user's list.

        The catalog row is created lazily from ``seed`` on first add. Raises
        ``AlreadyInList`` when the user already has the item.
        """

        item_id = await self._store.ensure_item(seed)
        await self._store.insert_list_entry(user_id, item_id)
        logger.info("User %s added item %s to their list", user_id, seed.external_id)

    async def remove_from_list(self, user_id: int, external_id: int) -> None:
        """Remove the item from the user's list; a missing entry is not an error."""

        removed = await self._store.delete_list_entry(user_id, external_id)
        if removed:
            logger.info("User %s removed item %s from their list", user_id, external_id)

    async def rate(self, user_id: int, external_id: int, value: object) -> int:
        rating = validate_rating(value)
        await self._store.upsert_rating(user_id, external_id, rating)
        return rating

    async def list_for_user(self, user_id: int) -> list[ListEntryView]:
        """Return the user's list, one entry per provider identifier.

        Duplicate catalog rows for one ``external_id`` can only exist if the
        unique index was bypassed; they collapse to a single entry, preferring
        the one carrying a rating.
        """

        entries = await self._store.list_entries_for_user(user_id)
        collapsed: dict[int, ListEntryView] = {}
        for entry in entries:
            current = collapsed.get(entry.external_id)
            if current is None or (current.rating is None and entry.rating is not None):
                collapsed[entry.external_id] = entry
        return list(collapsed.values())
