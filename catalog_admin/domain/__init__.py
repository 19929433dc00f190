"""
Domain package for the catalog administration tool.

Exports the product model and the query/result shapes used by the cache,
the data sources and the CLI. Keep this package focused on data
definitions and validation concerns.
"""

from catalog_admin.domain.models import (
    CATEGORY_LABELS,
    STATUS_LABELS,
    Category,
    PageResult,
    Product,
    ProductCreate,
    ProductStatus,
    ProductUpdate,
    QueryFilter,
    QueryResult,
    SortField,
    SortOrder,
    SortSpec,
)

__all__ = [
    "CATEGORY_LABELS",
    "STATUS_LABELS",
    "Category",
    "PageResult",
    "Product",
    "ProductCreate",
    "ProductStatus",
    "ProductUpdate",
    "QueryFilter",
    "QueryResult",
    "SortField",
    "SortOrder",
    "SortSpec",
]
