"""Utility helpers for the catalog service."""

from __future__ import annotations

from typing import Any

MAX_PROVIDER_PAGE = 500


def coerce_int(value: Any, *, default: int | None = None) -> int | None:
    """Return ``value`` as an int, or ``default`` when it cannot be parsed."""

    if isinstance(value, bool):
        return default
    try:
        return int(value)
    except (TypeError, ValueError):
        return default


def coerce_float(value: Any, *, default: float | None = None) -> float | None:
    if isinstance(value, bool):
        return default
    try:
        return float(value)
    except (TypeError, ValueError):
        return default


def clean_text(value: Any) -> str | None:
    """Return a stripped string, or ``None`` for blank and non-string values."""

    if not isinstance(value, str):
        return None
    value = value.strip()
    return value or None


def clamp_page(page: Any) -> int:
    """Clamp a requested page number to the provider's accepted range."""

    number = coerce_int(page, default=1) or 1
    return max(1, min(number, MAX_PROVIDER_PAGE))
