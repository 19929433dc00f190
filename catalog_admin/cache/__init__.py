"""
Client-side query-result caching for the list view.

The normalizer derives canonical keys, the coordinator owns the
single-slot cache and decides when to fetch, and the slicer cuts pages out
of the cached window without I/O.
"""

from catalog_admin.cache.coordinator import DEFAULT_HARD_CAP, CoordinatorStats, FetchCoordinator
from catalog_admin.cache.normalizer import (
    CacheKey,
    coerce_filter,
    coerce_sort,
    normalize,
    validate_limit,
)
from catalog_admin.cache.result_cache import CacheEntry, ResultCache
from catalog_admin.cache.slicer import page_count, reported_total, slice_page, validate_paging

__all__ = [
    "DEFAULT_HARD_CAP",
    "CacheEntry",
    "CacheKey",
    "CoordinatorStats",
    "FetchCoordinator",
    "ResultCache",
    "coerce_filter",
    "coerce_sort",
    "normalize",
    "page_count",
    "reported_total",
    "slice_page",
    "validate_limit",
    "validate_paging",
]
