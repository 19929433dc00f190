"""
Bulk export path.

Fetches every product matching a filter (up to the export hard cap) in one
uncached transfer. The result cache is neither read nor written: exports
are consumed once by an encoder and discarded.
"""

from __future__ import annotations

from typing import Tuple

from catalog_admin.cache.normalizer import FilterInput, SortInput, coerce_filter, coerce_sort
from catalog_admin.domain.models import Product
from catalog_admin.errors import EmptyResult
from catalog_admin.sources.abstract import ProductSource
from catalog_admin.utils.logging import get_logger
from catalog_admin.utils.profiler import profile_block

log = get_logger(__name__)

DEFAULT_EXPORT_HARD_CAP = 100_000


class BulkExporter:
    def __init__(self, source: ProductSource, hard_cap: int = DEFAULT_EXPORT_HARD_CAP) -> None:
        if hard_cap <= 0:
            raise ValueError("hard_cap must be positive")
        self.source = source
        self.hard_cap = hard_cap

    async def export_all(self, query_filter: FilterInput, sort: SortInput) -> Tuple[Product, ...]:
        """
        Fetch all matching products in sort order.

        Raises
        ------
        InvalidInput
            If the filter or sort does not validate.
        EmptyResult
            If no product matches; callers show a notice rather than fail.
        """
        qf = coerce_filter(query_filter)
        spec = coerce_sort(sort)

        with profile_block("export") as stats:
            result = await self.source.query(qf, spec, self.hard_cap)

        log.info(
            "Export fetched",
            extra={
                "rows": len(result.records),
                "total": result.total,
                "duration_seconds": round(stats.duration_seconds, 3),
                "peak_rss_bytes": stats.peak_rss_bytes,
            },
        )
        if not result.records:
            raise EmptyResult()
        if result.total > len(result.records):
            log.warning(
                "Export truncated at hard cap",
                extra={"hard_cap": self.hard_cap, "total": result.total},
            )
        return result.records


__all__ = ["DEFAULT_EXPORT_HARD_CAP", "BulkExporter"]
