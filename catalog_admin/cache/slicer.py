"""Local page slicing over the cached result window."""

from __future__ import annotations

from typing import Optional, Tuple

from catalog_admin.cache.result_cache import CacheEntry
from catalog_admin.domain.models import Product
from catalog_admin.errors import InvalidInput


def validate_paging(page: int, page_size: int) -> None:
    """Raise InvalidInput unless page and page_size are positive ints."""
    for label, value in (("page", page), ("page_size", page_size)):
        if isinstance(value, bool) or not isinstance(value, int) or value < 1:
            raise InvalidInput(f"{label} must be a positive integer, got {value!r}")


def slice_page(entry: Optional[CacheEntry], page: int, page_size: int) -> Tuple[Product, ...]:
    """
    Cut one 1-indexed page out of the cached window.

    Paging past the end of the window yields an empty tuple: the window is
    capped by the fetch limit while the store may hold more rows.
    """
    validate_paging(page, page_size)
    if entry is None:
        return ()
    start = (page - 1) * page_size
    if start >= len(entry.records):
        return ()
    return entry.records[start : start + page_size]


def reported_total(server_total: int, limit: int) -> int:
    """Total shown to the UI, so page counts never exceed the cached window."""
    return min(server_total, limit)


def page_count(total: int, page_size: int) -> int:
    validate_paging(1, page_size)
    return -(-total // page_size)


__all__ = ["page_count", "reported_total", "slice_page", "validate_paging"]
