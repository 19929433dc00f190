"""
Abstract data-source interface for the catalog administration tool.

A source executes filter/sort/count/fetch against persisted storage. The
cache layer only awaits `query` and treats any exception it raises as
opaque, so sources are free to sit on a database driver, an HTTP API, or a
plain list in memory.
"""

from __future__ import annotations

import abc
from typing import Optional, Protocol, runtime_checkable

from catalog_admin.domain.models import QueryFilter, QueryResult, SortSpec


@runtime_checkable
class ProductSource(Protocol):
    """
    Common interface all product sources must implement.

    Attributes
    ----------
    name : str
        A short machine-friendly identifier.
    """

    name: str

    async def query(
        self,
        query_filter: QueryFilter,
        sort: SortSpec,
        limit: int,
        page: Optional[int] = None,
        page_size: Optional[int] = None,
    ) -> QueryResult:
        """
        Run a filtered, sorted query.

        Parameters
        ----------
        query_filter : QueryFilter
            Validated filter; unset fields match everything.
        sort : SortSpec
            Validated sort column and direction. Ties break on id.
        limit : int
            Maximum number of records in scope for this query.
        page, page_size : int, optional
            When both are given, only that 1-indexed page of the in-scope
            records is returned.

        Returns
        -------
        QueryResult
            The records plus `total`, the full count of matching rows
            (not capped by `limit`).
        """
        ...


class AbstractProductSource(abc.ABC):
    """
    Optional ABC helper for class-based implementations.

    Subclasses set `name` and implement `query`; `window` applies the
    limit/page arithmetic shared by every implementation.
    """

    name: str

    @abc.abstractmethod
    async def query(
        self,
        query_filter: QueryFilter,
        sort: SortSpec,
        limit: int,
        page: Optional[int] = None,
        page_size: Optional[int] = None,
    ) -> QueryResult:  # pragma: no cover - interface only
        """Run the query and return the matching records and count."""
        raise NotImplementedError

    @staticmethod
    def window(limit: int, page: Optional[int], page_size: Optional[int]) -> tuple[int, int]:
        """Return (offset, row_count) for a query, never reaching past `limit`."""
        if page is None or page_size is None:
            return 0, limit
        offset = min((page - 1) * page_size, limit)
        return offset, max(min(page_size, limit - offset), 0)


__all__ = ["AbstractProductSource", "ProductSource"]
