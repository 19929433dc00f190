"""
Fetch coordinator for the list view.

Decides whether the cached result window still answers the requested
query. On a hit it returns the cached window without touching the data
source; on a miss (or a forced reload) it awaits the source, then replaces
the cache.

Overlapping `ensure` calls are expected when the user types into a filter
faster than the store answers. Every call records its key as the latest
requested one, and a fetch is only applied if, when it resolves:

- its key is still the latest requested key, and
- no fetch issued after it has already been applied.

Otherwise the response is dropped and `StaleResponseDiscarded` is raised to
that call's awaiter. In-flight source calls are never cancelled.
"""

from __future__ import annotations

import itertools
from dataclasses import dataclass
from typing import Any, Optional

from catalog_admin.cache.normalizer import (
    CacheKey,
    FilterInput,
    SortInput,
    coerce_filter,
    coerce_sort,
    normalize,
)
from catalog_admin.cache.result_cache import ResultCache
from catalog_admin.domain.models import QueryResult
from catalog_admin.errors import StaleResponseDiscarded
from catalog_admin.sources.abstract import ProductSource
from catalog_admin.utils.logging import get_logger

log = get_logger(__name__)

DEFAULT_HARD_CAP = 10_000


@dataclass
class CoordinatorStats:
    hits: int = 0
    misses: int = 0
    discarded: int = 0
    failures: int = 0


class FetchCoordinator:
    """
    Sole writer of the list-view `ResultCache`.

    Parameters
    ----------
    source : ProductSource
        Store to query on a cache miss.
    cache : ResultCache, optional
        Cache to own; a fresh one is created when omitted.
    hard_cap : int
        Deployment-wide ceiling applied to the requested limit before it
        reaches the source.
    """

    def __init__(
        self,
        source: ProductSource,
        cache: Optional[ResultCache] = None,
        hard_cap: int = DEFAULT_HARD_CAP,
    ) -> None:
        if hard_cap <= 0:
            raise ValueError("hard_cap must be positive")
        self.source = source
        self.cache = cache if cache is not None else ResultCache()
        self.hard_cap = hard_cap
        self.stats = CoordinatorStats()
        self._tickets = itertools.count(1)
        self._latest_key: Optional[CacheKey] = None
        self._applied_ticket = 0

    async def ensure(
        self,
        query_filter: FilterInput,
        sort: SortInput,
        limit: Any,
        force_reload: bool = False,
    ) -> QueryResult:
        """
        Return the result window for a query, fetching only when needed.

        Raises
        ------
        InvalidInput
            Before any I/O, if the query does not normalize.
        StaleResponseDiscarded
            If a newer request superseded this one while it was in flight.
        Exception
            Whatever the source raised; the cache is left untouched.
        """
        key = normalize(query_filter, sort, limit)
        self._latest_key = key

        entry = self.cache.get()
        if not force_reload and entry is not None and entry.key == key:
            self.stats.hits += 1
            log.debug("Cache hit", extra={"key": key})
            return QueryResult(records=entry.records, total=entry.total)

        ticket = next(self._tickets)
        effective_limit = min(limit, self.hard_cap)
        self.stats.misses += 1
        log.info(
            "Fetching from %s",
            self.source.name,
            extra={
                "key": key,
                "limit": limit,
                "effective_limit": effective_limit,
                "forced": force_reload,
                "ticket": ticket,
            },
        )

        try:
            result = await self.source.query(
                coerce_filter(query_filter), coerce_sort(sort), effective_limit
            )
        except Exception:
            self.stats.failures += 1
            log.warning("Fetch failed; cache left unchanged", extra={"key": key, "ticket": ticket})
            raise

        if key != self._latest_key or ticket < self._applied_ticket:
            self.stats.discarded += 1
            log.debug(
                "Discarding stale response",
                extra={"key": key, "latest_key": self._latest_key, "ticket": ticket},
            )
            raise StaleResponseDiscarded(key, self._latest_key)

        self._applied_ticket = ticket
        self.cache.set(key, result.records, result.total)
        log.info(
            "Cache replaced",
            extra={"key": key, "rows": len(result.records), "total": result.total},
        )
        return result

    async def reload(self, query_filter: FilterInput, sort: SortInput, limit: Any) -> QueryResult:
        """Explicit user reload: always fetches, even for an unchanged key."""
        return await self.ensure(query_filter, sort, limit, force_reload=True)

    def invalidate(self) -> None:
        """Drop the cached window, e.g. after a write to the store."""
        self.cache.invalidate()
        log.debug("Cache invalidated")


__all__ = ["DEFAULT_HARD_CAP", "CoordinatorStats", "FetchCoordinator"]
