"""
catalog-admin - Product catalog administration tool.

A single-table product catalog kept in PostgreSQL, administered from the
command line:

- Filtered, sorted, paginated list views served from a client-side result
  cache that refetches only when the query changes
- Uncached bulk export to a spreadsheet file
- Single-record show/add/update/delete
- A persisted fetch-limit preference
"""

from __future__ import annotations

__version__ = "0.1.0"
__license__ = "MIT"

# Public API exports
from catalog_admin.cache import FetchCoordinator, ResultCache, normalize, slice_page
from catalog_admin.config import Settings, get_settings
from catalog_admin.domain import PageResult, Product, QueryFilter, QueryResult, SortSpec
from catalog_admin.errors import (
    CatalogError,
    EmptyResult,
    InvalidInput,
    ProductNotFound,
    RemoteFailure,
    StaleResponseDiscarded,
)
from catalog_admin.export import BulkExporter, CsvExportEncoder
from catalog_admin.service import CatalogService
from catalog_admin.sources import InMemoryProductSource, PostgresProductSource, ProductSource
from catalog_admin.utils.logging import configure_logging, get_logger

__all__ = [
    # Version info
    "__version__",
    "__license__",
    # Configuration
    "Settings",
    "get_settings",
    # Service
    "CatalogService",
    # Cache
    "FetchCoordinator",
    "ResultCache",
    "normalize",
    "slice_page",
    # Domain
    "PageResult",
    "Product",
    "QueryFilter",
    "QueryResult",
    "SortSpec",
    # Errors
    "CatalogError",
    "EmptyResult",
    "InvalidInput",
    "ProductNotFound",
    "RemoteFailure",
    "StaleResponseDiscarded",
    # Export
    "BulkExporter",
    "CsvExportEncoder",
    # Sources
    "InMemoryProductSource",
    "PostgresProductSource",
    "ProductSource",
    # Logging
    "configure_logging",
    "get_logger",
]
