"""
Catalog service: the operations the CLI (or any other UI) calls.

Composes the fetch coordinator and the page slicer into `request_view`, and
the bulk exporter and encoder into `request_export` / `export_to_file`.

Usage:
    from catalog_admin.service import CatalogService
    from catalog_admin.sources import InMemoryProductSource

    service = CatalogService(InMemoryProductSource())
    page = await service.request_view({"category": "books"}, {"field": "price"}, page=1)
    print(page.total, [p.name for p in page.records])
"""

from __future__ import annotations

from pathlib import Path
from typing import Any, Optional, Tuple

from catalog_admin.cache.coordinator import FetchCoordinator
from catalog_admin.cache.normalizer import FilterInput, SortInput
from catalog_admin.cache.slicer import reported_total, slice_page, validate_paging
from catalog_admin.config import Settings, get_settings
from catalog_admin.domain.models import PageResult, Product
from catalog_admin.errors import StaleResponseDiscarded
from catalog_admin.export.encoder import (
    CsvExportEncoder,
    ExportEncoder,
    default_export_filename,
    write_artifact,
)
from catalog_admin.export.exporter import BulkExporter
from catalog_admin.preferences import (
    InMemoryPreferenceStore,
    PreferenceStore,
    load_fetch_limit,
    save_fetch_limit,
)
from catalog_admin.sources.abstract import ProductSource
from catalog_admin.utils.logging import get_logger

log = get_logger(__name__)


class CatalogService:
    """
    Upward interface of the catalog core.

    Parameters
    ----------
    source : ProductSource
        Store backing both the list view and exports.
    preferences : PreferenceStore, optional
        Holds the user's FetchLimit; defaults to an in-memory store.
    settings : Settings, optional
        Hard caps and view defaults; defaults to `get_settings()`.
    encoder : ExportEncoder, optional
        Spreadsheet encoder for `export_to_file`; defaults to CSV.
    """

    def __init__(
        self,
        source: ProductSource,
        preferences: Optional[PreferenceStore] = None,
        settings: Optional[Settings] = None,
        encoder: Optional[ExportEncoder] = None,
    ) -> None:
        self.settings = settings or get_settings()
        self.preferences = preferences if preferences is not None else InMemoryPreferenceStore()
        self.coordinator = FetchCoordinator(source, hard_cap=self.settings.view_hard_cap)
        self.exporter = BulkExporter(source, hard_cap=self.settings.export_hard_cap)
        self.encoder = encoder or CsvExportEncoder()

    @property
    def fetch_limit(self) -> int:
        return load_fetch_limit(self.preferences, self.settings.default_fetch_limit)

    def set_fetch_limit(self, limit: int) -> int:
        return save_fetch_limit(self.preferences, limit)

    async def request_view(
        self,
        query_filter: FilterInput = None,
        sort: SortInput = None,
        limit: Any = None,
        page: int = 1,
        page_size: Optional[int] = None,
        force_reload: bool = False,
    ) -> Optional[PageResult]:
        """
        Fetch-then-slice one page of the list view.

        `limit` defaults to the stored FetchLimit and `page_size` to the
        configured default. Returns None when a newer request superseded
        this one while it was in flight; there is nothing to render then.

        Raises
        ------
        InvalidInput
            Before any I/O, for a bad filter, sort, limit or paging.
        """
        limit = self.fetch_limit if limit is None else limit
        page_size = self.settings.default_page_size if page_size is None else page_size
        validate_paging(page, page_size)

        try:
            await self.coordinator.ensure(query_filter, sort, limit, force_reload=force_reload)
        except StaleResponseDiscarded as exc:
            log.debug("View request superseded", extra={"key": exc.key})
            return None

        entry = self.coordinator.cache.get()
        window = min(limit, self.coordinator.hard_cap)
        return PageResult(
            records=slice_page(entry, page, page_size),
            total=reported_total(entry.total, window) if entry is not None else 0,
            page=page,
            page_size=page_size,
        )

    async def reload(
        self,
        query_filter: FilterInput = None,
        sort: SortInput = None,
        limit: Any = None,
        page_size: Optional[int] = None,
    ) -> Optional[PageResult]:
        """Explicit reload: refetch and go back to the first page."""
        return await self.request_view(
            query_filter, sort, limit, page=1, page_size=page_size, force_reload=True
        )

    def invalidate(self) -> None:
        self.coordinator.invalidate()

    async def request_export(
        self, query_filter: FilterInput = None, sort: SortInput = None
    ) -> Tuple[Product, ...]:
        """
        All products matching the filter, bypassing the view cache.

        Raises
        ------
        EmptyResult
            If nothing matches.
        """
        return await self.exporter.export_all(query_filter, sort)

    async def export_to_file(
        self,
        query_filter: FilterInput = None,
        sort: SortInput = None,
        path: Optional[Path] = None,
    ) -> Tuple[Path, int]:
        """Export, encode and write the artifact; returns (path, rows)."""
        records = await self.request_export(query_filter, sort)
        payload = await self.encoder.encode(records)
        target = path or self.settings.export_dir / default_export_filename(
            extension=self.encoder.extension
        )
        write_artifact(payload, target)
        log.info("Export written", extra={"path": str(target), "rows": len(records)})
        return target, len(records)


__all__ = ["CatalogService"]
