"""
Error taxonomy for the catalog administration tool.

`CatalogError` covers every failure the core can raise. `EmptyResult` is kept
outside that hierarchy: an export that matches nothing is a notice for the
user, not a failure, and must not be caught by generic error handlers.
"""

from __future__ import annotations

from typing import Optional


class CatalogError(Exception):
    """Base class for catalog failures."""


class InvalidInput(CatalogError, ValueError):
    """Malformed filter, sort, limit, paging or record payload."""


class RemoteFailure(CatalogError):
    """The product store could not complete a query or write."""


class ProductNotFound(CatalogError):
    """No product exists with the requested id."""

    def __init__(self, product_id: int) -> None:
        super().__init__(f"Product {product_id} not found")
        self.product_id = product_id


class StaleResponseDiscarded(CatalogError):
    """
    A fetch resolved after a newer request superseded it.

    Internal only: the result was not applied to the cache and callers are
    expected to drop it silently.
    """

    def __init__(self, key: str, latest_key: Optional[str]) -> None:
        super().__init__(f"Discarded stale response for {key}")
        self.key = key
        self.latest_key = latest_key


class EmptyResult(Exception):
    """A bulk export matched zero products."""

    def __init__(self, message: str = "No products match the current filter") -> None:
        super().__init__(message)


__all__ = [
    "CatalogError",
    "EmptyResult",
    "InvalidInput",
    "ProductNotFound",
    "RemoteFailure",
    "StaleResponseDiscarded",
]
