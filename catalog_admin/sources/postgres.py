"""
PostgreSQL product source over an asyncpg pool.

Filtering, sorting and counting are delegated to the database:

- `name` becomes an `ILIKE` substring match with `%`, `_` and `\\` escaped,
- `category` and `status` are exact matches,
- the sort column comes from a fixed allow-list, with `id` as tie-breaker,
- `total` is a separate `COUNT(*)` over the same predicate.

Both statements run inside one read-only REPEATABLE READ transaction so the
count and the rows describe the same snapshot. Driver and network errors
surface as `RemoteFailure`; nothing is retried at query time.
"""

from __future__ import annotations

import asyncio
from typing import Any, List, Optional, Tuple

import asyncpg

from catalog_admin.domain.models import Product, QueryFilter, QueryResult, SortField, SortSpec
from catalog_admin.errors import RemoteFailure
from catalog_admin.infrastructure.db_factory import create_async_pool
from catalog_admin.sources.abstract import AbstractProductSource
from catalog_admin.utils.logging import get_logger

log = get_logger(__name__)

_SORT_COLUMNS = {
    SortField.ID: "id",
    SortField.PRICE: "price",
    SortField.STOCK: "stock",
    SortField.CREATED_AT: "created_at",
}

_COLUMNS = "id, name, category, price, stock, status, created_at, updated_at"

_DRIVER_ERRORS = (asyncpg.PostgresError, asyncpg.InterfaceError, OSError, asyncio.TimeoutError)


def _escape_like(value: str) -> str:
    return value.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


def build_where(query_filter: QueryFilter) -> Tuple[str, List[Any]]:
    """Return the WHERE clause (possibly empty) and its positional params."""
    clauses: List[str] = []
    params: List[Any] = []
    if query_filter.name is not None:
        params.append(f"%{_escape_like(query_filter.name)}%")
        clauses.append(f"name ILIKE ${len(params)} ESCAPE '\\'")
    if query_filter.category is not None:
        params.append(query_filter.category.value)
        clauses.append(f"category = ${len(params)}")
    if query_filter.status is not None:
        params.append(query_filter.status.value)
        clauses.append(f"status = ${len(params)}")
    where = f" WHERE {' AND '.join(clauses)}" if clauses else ""
    return where, params


def build_order_by(sort: SortSpec) -> str:
    column = _SORT_COLUMNS[sort.field]
    direction = "DESC" if sort.descending else "ASC"
    if column == "id":
        return f" ORDER BY id {direction}"
    return f" ORDER BY {column} {direction}, id ASC"


def build_queries(
    query_filter: QueryFilter, sort: SortSpec, offset: int, count: int
) -> Tuple[str, str, List[Any]]:
    """
    Compose the count and select statements for a query.

    Returns
    -------
    (count_sql, select_sql, params)
        `params` binds the WHERE clause; the select statement takes two
        extra trailing params, `count` and `offset`, already appended.
    """
    where, params = build_where(query_filter)
    count_sql = f"SELECT COUNT(*) FROM public.products{where}"
    n = len(params)
    select_sql = (
        f"SELECT {_COLUMNS} FROM public.products{where}{build_order_by(sort)}"
        f" LIMIT ${n + 1} OFFSET ${n + 2}"
    )
    return count_sql, select_sql, [*params, count, offset]


class PostgresProductSource(AbstractProductSource):
    """
    Query the `products` table through a lazily created asyncpg pool.

    Use as an async context manager, or call `close()` when done.
    """

    name: str = "postgres"

    def __init__(self, dsn_override: Optional[str] = None, pool: Optional[asyncpg.Pool] = None) -> None:
        self._dsn_override = dsn_override
        self._pool_instance: Optional[asyncpg.Pool] = pool

    async def _get_pool(self) -> asyncpg.Pool:
        if self._pool_instance is None:
            try:
                self._pool_instance = await create_async_pool(self._dsn_override)
            except _DRIVER_ERRORS as exc:
                raise RemoteFailure(f"Could not connect to the product store: {exc}") from exc
        return self._pool_instance

    async def query(
        self,
        query_filter: QueryFilter,
        sort: SortSpec,
        limit: int,
        page: Optional[int] = None,
        page_size: Optional[int] = None,
    ) -> QueryResult:
        offset, count = self.window(limit, page, page_size)
        count_sql, select_sql, params = build_queries(query_filter, sort, offset, count)
        where_params = params[:-2]

        pool = await self._get_pool()
        try:
            async with pool.acquire() as conn:
                async with conn.transaction(isolation="repeatable_read", readonly=True):
                    total = await conn.fetchval(count_sql, *where_params)
                    rows = await conn.fetch(select_sql, *params) if count > 0 else []
        except _DRIVER_ERRORS as exc:
            log.error("Product query failed", extra={"error": str(exc)})
            raise RemoteFailure(f"Product query failed: {exc}") from exc

        records = tuple(Product.model_validate(dict(row)) for row in rows)
        log.debug(
            "Product query complete",
            extra={"rows": len(records), "total": total, "offset": offset},
        )
        return QueryResult(records=records, total=int(total))

    async def close(self) -> None:
        if self._pool_instance is not None:
            await self._pool_instance.close()
            self._pool_instance = None

    async def __aenter__(self) -> "PostgresProductSource":
        await self._get_pool()
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.close()


__all__ = ["PostgresProductSource", "build_order_by", "build_queries", "build_where"]
