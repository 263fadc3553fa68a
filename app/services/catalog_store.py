"""Relational store gateway for catalog items, list entries and ratings."""

from __future__ import annotations

import logging
from contextlib import contextmanager
from datetime import datetime
from typing import Iterator

from sqlalchemy import and_, delete, distinct, func, select, union, update
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from ..db_models import CatalogItemRecord, ListEntryRecord, RatingRecord
from ..errors import AlreadyInList, NotFound, StoreError
from ..models import CatalogItem, ContributorView, ListEntryView, SeedFields

logger = logging.getLogger(__name__)


@contextmanager
def _store_errors(operation: str) -> Iterator[None]:
    """Translate unexpected SQLAlchemy failures into ``StoreError``."""

    try:
        yield
    except SQLAlchemyError as exc:
        logger.exception("Store operation %s failed", operation)
        raise StoreError(f"Store operation {operation} failed") from exc


class CatalogStore:
    """All reads and writes against ``catalog_items``, ``list_entries`` and ``ratings``."""

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]):
        self._session_factory = session_factory

    async def get_item_with_rating(self, external_id: int) -> CatalogItem | None:
        """Return the stored item joined with the aggregate of its ratings.

        ``vote_average`` is the provider score captured when the item was
        added; the local average lands in ``user_rating_average``.
        """

        stmt = (
            select(
                CatalogItemRecord,
                func.avg(RatingRecord.value),
                func.count(RatingRecord.id),
            )
            .outerjoin(RatingRecord, RatingRecord.item_id == CatalogItemRecord.id)
            .where(CatalogItemRecord.external_id == external_id)
            .group_by(CatalogItemRecord.id)
            .order_by(CatalogItemRecord.id)
            .limit(1)
        )
        with _store_errors("get_item"):
            async with self._session_factory() as session:
                row = (await session.execute(stmt)).first()
        if row is None:
            return None
        record, average, count = row
        return CatalogItem(
            external_id=record.external_id,
            title=record.title,
            poster_path=record.poster_path,
            overview=record.overview or "",
            release_date=record.release_date,
            vote_average=record.vote_average,
            user_rating_average=float(average) if average is not None else None,
            rating_count=int(count or 0),
            media_type=record.media_type if record.media_type in ("movie", "tv") else "movie",
            source="local",
        )

    async def ensure_item(self, seed: SeedFields) -> int:
        """Return the row id for ``seed.external_id``, creating it if absent.

        Creation is idempotent: a concurrent insert that wins the race on the
        ``external_id`` unique index is picked up by re-reading.
        """

        with _store_errors("ensure_item"):
            async with self._session_factory() as session:
                item_id = await self._find_item_id(session, seed.external_id)
                if item_id is not None:
                    return item_id

                record = CatalogItemRecord(
                    external_id=seed.external_id,
                    title=seed.title,
                    poster_path=seed.poster_path,
                    overview=seed.overview or "",
                    release_date=seed.release_date or None,
                    vote_average=seed.vote_average,
                    media_type=seed.media_type,
                )
                session.add(record)
                try:
                    await session.commit()
                except IntegrityError:
                    await session.rollback()
                    logger.info(
                        "Catalog item %s was created concurrently; reusing it",
                        seed.external_id,
                    )
                    item_id = await self._find_item_id(session, seed.external_id)
                    if item_id is None:
                        raise StoreError(
                            f"Catalog item {seed.external_id} could not be created"
                        )
                    return item_id
                return record.id

    async def insert_list_entry(self, user_id: int, item_id: int) -> None:
        """Insert a list entry; a duplicate raises ``AlreadyInList``.

        The unique constraint on ``(user_id, item_id)`` decides: the pre-check
        only avoids a pointless write in the common case.
        """

        with _store_errors("insert_list_entry"):
            async with self._session_factory() as session:
                if await self._has_list_entry(session, user_id, item_id):
                    raise AlreadyInList("Item already in your list")
                session.add(
                    ListEntryRecord(
                        user_id=user_id, item_id=item_id, added_at=datetime.utcnow()
                    )
                )
                try:
                    await session.commit()
                except IntegrityError as exc:
                    await session.rollback()
                    if await self._has_list_entry(session, user_id, item_id):
                        logger.info(
                            "Concurrent add of item %s for user %s rejected by constraint",
                            item_id,
                            user_id,
                        )
                        raise AlreadyInList("Item already in your list") from exc
                    raise

    async def delete_list_entry(self, user_id: int, external_id: int) -> int:
        """Delete the user's entry and own rating for the item; return entries removed."""

        item_ids = select(CatalogItemRecord.id).where(
            CatalogItemRecord.external_id == external_id
        )
        with _store_errors("delete_list_entry"):
            async with self._session_factory() as session:
                result = await session.execute(
                    delete(ListEntryRecord).where(
                        ListEntryRecord.user_id == user_id,
                        ListEntryRecord.item_id.in_(item_ids),
                    )
                )
                await session.execute(
                    delete(RatingRecord).where(
                        RatingRecord.user_id == user_id,
                        RatingRecord.item_id.in_(item_ids),
                    )
                )
                await session.commit()
        return int(result.rowcount or 0)

    async def upsert_rating(self, user_id: int, external_id: int, value: int) -> None:
        """Insert or update the single rating row for ``(user_id, item)``."""

        with _store_errors("upsert_rating"):
            async with self._session_factory() as session:
                item_id = await self._find_item_id(session, external_id)
                if item_id is None:
                    raise NotFound(f"Item {external_id} is not in the catalog")

                now = datetime.utcnow()
                existing = await self._find_rating(session, user_id, item_id)
                if existing is not None:
                    existing.value = value
                    existing.rated_at = now
                    await session.commit()
                    return

                session.add(
                    RatingRecord(
                        user_id=user_id, item_id=item_id, value=value, rated_at=now
                    )
                )
                try:
                    await session.commit()
                except IntegrityError:
                    await session.rollback()
                    logger.info(
                        "Concurrent rating of item %s by user %s; updating instead",
                        item_id,
                        user_id,
                    )
                    await session.execute(
                        update(RatingRecord)
                        .where(
                            RatingRecord.user_id == user_id,
                            RatingRecord.item_id == item_id,
                        )
                        .values(value=value, rated_at=now)
                    )
                    await session.commit()

    async def list_entries_for_user(self, user_id: int) -> list[ListEntryView]:
        """Return every entry of the user's list with the user's own rating."""

        stmt = (
            select(ListEntryRecord, CatalogItemRecord, RatingRecord.value)
            .join(CatalogItemRecord, CatalogItemRecord.id == ListEntryRecord.item_id)
            .outerjoin(
                RatingRecord,
                and_(
                    RatingRecord.item_id == ListEntryRecord.item_id,
                    RatingRecord.user_id == user_id,
                ),
            )
            .where(ListEntryRecord.user_id == user_id)
            .order_by(ListEntryRecord.added_at, ListEntryRecord.id)
        )
        with _store_errors("list_entries_for_user"):
            async with self._session_factory() as session:
                rows = (await session.execute(stmt)).all()
        return [
            ListEntryView(
                external_id=item.external_id,
                title=item.title,
                poster_path=item.poster_path,
                overview=item.overview or "",
                release_date=item.release_date,
                media_type=item.media_type if item.media_type in ("movie", "tv") else "movie",
                rating=rating,
                added_at=entry.added_at,
            )
            for entry, item, rating in rows
        ]

    async def contributor_counts(self, limit: int) -> list[ContributorView]:
        """Distinct list and rating counts per user, most list entries first."""

        list_counts = (
            select(
                ListEntryRecord.user_id.label("user_id"),
                func.count(distinct(ListEntryRecord.item_id)).label("list_count"),
            )
            .group_by(ListEntryRecord.user_id)
            .subquery()
        )
        rating_counts = (
            select(
                RatingRecord.user_id.label("user_id"),
                func.count(distinct(RatingRecord.item_id)).label("rating_count"),
            )
            .group_by(RatingRecord.user_id)
            .subquery()
        )
        users = union(
            select(ListEntryRecord.user_id.label("user_id")),
            select(RatingRecord.user_id.label("user_id")),
        ).subquery()
        list_count = func.coalesce(list_counts.c.list_count, 0)
        stmt = (
            select(
                users.c.user_id,
                list_count.label("list_count"),
                func.coalesce(rating_counts.c.rating_count, 0).label("rating_count"),
            )
            .select_from(
                users.outerjoin(
                    list_counts, list_counts.c.user_id == users.c.user_id
                ).outerjoin(
                    rating_counts, rating_counts.c.user_id == users.c.user_id
                )
            )
            .order_by(list_count.desc())
            .limit(limit)
        )
        with _store_errors("contributor_counts"):
            async with self._session_factory() as session:
                rows = (await session.execute(stmt)).all()
        return [
            ContributorView(
                user_id=row.user_id,
                list_count=int(row.list_count),
                rating_count=int(row.rating_count),
            )
            for row in rows
        ]

    @staticmethod
    async def _find_item_id(session: AsyncSession, external_id: int) -> int | None:
        return await session.scalar(
            select(CatalogItemRecord.id)
            .where(CatalogItemRecord.external_id == external_id)
            .order_by(CatalogItemRecord.id)
            .limit(1)
        )

    @staticmethod
    async def _find_rating(
        session: AsyncSession, user_id: int, item_id: int
    ) -> RatingRecord | None:
        return await session.scalar(
            select(RatingRecord).where(
                RatingRecord.user_id == user_id,
                RatingRecord.item_id == item_id,
            )
        )

    @staticmethod
    async def _has_list_entry(session: AsyncSession, user_id: int, item_id: int) -> bool:
        found = await session.scalar(
            select(ListEntryRecord.id).where(
                ListEntryRecord.user_id == user_id,
                ListEntryRecord.item_id == item_id,
            )
        )
        return found is not None
