"""Map provider-native movie, show and person records onto canonical models.

Every function in this module is pure: it only reads the mapping it is given
and builds a new model, so the same payload always yields the same result.
Movies carry ``title``/``release_date`` while shows carry
``name``/``first_air_date``; both end up in :class:`CatalogItem`.
"""

from __future__ import annotations

from typing import Any, Iterable, Mapping

from .models import (
    CatalogItem,
    ItemDetail,
    ItemPage,
    ItemSource,
    MediaType,
    Person,
    PersonDetail,
    PersonPage,
)
from .utils import clean_text, coerce_float, coerce_int

MEDIA_TYPES: tuple[MediaType, ...] = ("movie", "tv")
GENDER_LABELS = {1: "Female", 2: "Male", 3: "Non-binary"}
CAST_LIMIT = 10
KNOWN_FOR_LIMIT = 8


def resolve_media_type(record: Mapping[str, Any], fallback: str | None = None) -> MediaType:
    """Return the record's own tag, then the caller's hint, then ``movie``."""

    for candidate in (record.get("media_type"), fallback):
        if candidate in MEDIA_TYPES:
            return candidate  # type: ignore[return-value]
    return "movie"


def normalize_item(
    record: Mapping[str, Any],
    media_type: str | None = None,
    *,
    source: ItemSource = "remote",
) -> CatalogItem:
    """Normalize a movie or show record into a :class:`CatalogItem`."""

    external_id = coerce_int(record.get("id"))
    if external_id is None:
        raise ValueError("Provider record has no usable id")
    return CatalogItem(
        external_id=external_id,
        title=_first_text(record, "title", "name") or "",
        poster_path=clean_text(record.get("poster_path")),
        overview=clean_text(record.get("overview")) or "",
        release_date=_first_text(record, "release_date", "first_air_date"),
        vote_average=coerce_float(record.get("vote_average"), default=0.0),
        media_type=resolve_media_type(record, media_type),
        character=clean_text(record.get("character")),
        source=source,
    )


def normalize_items(
    records: Iterable[Any],
    media_type: str | None = None,
    *,
    source: ItemSource = "remote",
) -> list[CatalogItem]:
    """Normalize a batch, skipping entries without a usable id."""

    items: list[CatalogItem] = []
    for record in records or ():
        if not isinstance(record, Mapping) or coerce_int(record.get("id")) is None:
            continue
        items.append(normalize_item(record, media_type, source=source))
    return items


def normalize_person(record: Mapping[str, Any]) -> Person:
    external_id = coerce_int(record.get("id"))
    if external_id is None:
        raise ValueError("Provider record has no usable id")
    return Person(
        external_id=external_id,
        name=clean_text(record.get("name")) or "",
        profile_path=clean_text(record.get("profile_path")),
        known_for_department=clean_text(record.get("known_for_department")),
        popularity=coerce_float(record.get("popularity"), default=0.0),
        gender=GENDER_LABELS.get(coerce_int(record.get("gender"), default=0)),
        character=clean_text(record.get("character")),
        known_for=normalize_items(record.get("known_for") or ()),
    )


def normalize_people(records: Iterable[Any]) -> list[Person]:
    return [
        normalize_person(record)
        for record in records or ()
        if isinstance(record, Mapping) and coerce_int(record.get("id")) is not None
    ]


def normalize_detail(record: Mapping[str, Any], media_type: str) -> ItemDetail:
    """Normalize a detail payload fetched with ``credits`` and ``similar``."""

    resolved = resolve_media_type({}, media_type)
    base = normalize_item(record, resolved)
    run_times = record.get("episode_run_time") or []
    runtime = coerce_int(record.get("runtime"))
    if not runtime and isinstance(run_times, list) and run_times:
        runtime = coerce_int(run_times[0])
    credits = record.get("credits") or {}
    similar = record.get("similar") or {}
    genres = [
        genre["name"]
        for genre in record.get("genres") or []
        if isinstance(genre, Mapping) and clean_text(genre.get("name"))
    ]
    return ItemDetail(
        **base.model_dump(exclude={"media_type"}),
        media_type=resolved,
        backdrop_path=clean_text(record.get("backdrop_path")),
        runtime=runtime or None,
        genres=genres,
        vote_count=coerce_int(record.get("vote_count")),
        cast=normalize_people((credits.get("cast") or [])[:CAST_LIMIT]),
        similar=normalize_items(similar.get("results") or [], resolved),
    )


def normalize_person_detail(record: Mapping[str, Any]) -> PersonDetail:
    """Normalize a person payload fetched with ``combined_credits``."""

    base = normalize_person(record)
    credits = (record.get("combined_credits") or {}).get("cast") or []
    ranked = sorted(
        (credit for credit in credits if isinstance(credit, Mapping)),
        key=lambda credit: coerce_float(credit.get("popularity"), default=0.0),
        reverse=True,
    )
    return PersonDetail(
        **base.model_dump(exclude={"known_for"}),
        known_for=normalize_items(ranked[:KNOWN_FOR_LIMIT]),
        biography=clean_text(record.get("biography")) or "",
        birthday=clean_text(record.get("birthday")),
        deathday=clean_text(record.get("deathday")),
        place_of_birth=clean_text(record.get("place_of_birth")),
    )


def to_item_page(
    payload: Mapping[str, Any],
    media_type: str | None = None,
    *,
    degraded: bool = False,
) -> ItemPage:
    source: ItemSource = "placeholder" if degraded else "remote"
    return ItemPage(
        results=normalize_items(payload.get("results") or [], media_type, source=source),
        page=coerce_int(payload.get("page"), default=1),
        total_pages=coerce_int(payload.get("total_pages"), default=1),
        total_results=coerce_int(payload.get("total_results"), default=0),
        degraded=degraded,
    )


def to_person_page(payload: Mapping[str, Any], *, degraded: bool = False) -> PersonPage:
    return PersonPage(
        results=normalize_people(payload.get("results") or []),
        page=coerce_int(payload.get("page"), default=1),
        total_pages=coerce_int(payload.get("total_pages"), default=1),
        total_results=coerce_int(payload.get("total_results"), default=0),
        degraded=degraded,
    )


def _first_text(record: Mapping[str, Any], *keys: str) -> str | None:
    for key in keys:
        value = clean_text(record.get(key))
        if value:
            return value
    return None
