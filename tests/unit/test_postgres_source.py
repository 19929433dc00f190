from datetime import date

import pytest

from catalog_admin.domain.models import QueryFilter, SortField, SortOrder, SortSpec
from catalog_admin.errors import RemoteFailure
from catalog_admin.sources.postgres import (
    PostgresProductSource,
    build_order_by,
    build_queries,
    build_where,
)

ROW = {
    "id": 7,
    "name": "Wireless Earbuds",
    "category": "electronics",
    "price": 28000,
    "stock": 67,
    "status": "active",
    "created_at": date(2024, 1, 30),
    "updated_at": date(2024, 3, 2),
}


class _FakeTransaction:
    def __init__(self, conn, kwargs):
        self.conn = conn
        conn.transaction_kwargs = kwargs

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc, tb):
        return False


class _FakeConnection:
    def __init__(self, rows, total, error=None):
        self.rows = rows
        self.total = total
        self.error = error
        self.statements = []
        self.transaction_kwargs = None

    def transaction(self, **kwargs):
        return _FakeTransaction(self, kwargs)

    async def fetchval(self, sql, *params):
        self.statements.append((sql, params))
        if self.error is not None:
            raise self.error
        return self.total

    async def fetch(self, sql, *params):
        self.statements.append((sql, params))
        return self.rows


class _AcquireContext:
    def __init__(self, conn):
        self.conn = conn

    async def __aenter__(self):
        return self.conn

    async def __aexit__(self, exc_type, exc, tb):
        return False


class _FakePool:
    def __init__(self, conn):
        self.conn = conn
        self.closed = False

    def acquire(self):
        return _AcquireContext(self.conn)

    async def close(self):
        self.closed = True


def test_where_is_empty_without_filter():
    assert build_where(QueryFilter()) == ("", [])


def test_where_numbers_placeholders_in_order():
    where, params = build_where(QueryFilter(name="mac", category="electronics", status="active"))
    assert where == " WHERE name ILIKE $1 ESCAPE '\\' AND category = $2 AND status = $3"
    assert params == ["%mac%", "electronics", "active"]


def test_name_wildcards_are_escaped():
    _, params = build_where(QueryFilter(name="50%_off\\"))
    assert params == ["%50\\%\\_off\\\\%"]


@pytest.mark.parametrize(
    "sort, expected",
    [
        (SortSpec(), " ORDER BY id ASC"),
        (SortSpec(order=SortOrder.DESC), " ORDER BY id DESC"),
        (SortSpec(field=SortField.PRICE, order=SortOrder.DESC), " ORDER BY price DESC, id ASC"),
        (SortSpec(field=SortField.CREATED_AT), " ORDER BY created_at ASC, id ASC"),
    ],
)
def test_order_by(sort, expected):
    assert build_order_by(sort) == expected


def test_queries_append_limit_and_offset():
    count_sql, select_sql, params = build_queries(
        QueryFilter(category="books"), SortSpec(field=SortField.STOCK), offset=20, count=10
    )
    assert count_sql == "SELECT COUNT(*) FROM public.products WHERE category = $1"
    assert select_sql.endswith(" WHERE category = $1 ORDER BY stock ASC, id ASC LIMIT $2 OFFSET $3")
    assert params == ["books", 10, 20]


@pytest.mark.asyncio
async def test_query_maps_rows_and_total():
    conn = _FakeConnection(rows=[ROW], total=120)
    source = PostgresProductSource(pool=_FakePool(conn))

    result = await source.query(QueryFilter(category="electronics"), SortSpec(), 50)

    assert result.total == 120
    assert [p.id for p in result.records] == [7]
    assert conn.transaction_kwargs == {"isolation": "repeatable_read", "readonly": True}
    (count_sql, count_params), (_, select_params) = conn.statements
    assert count_params == ("electronics",)
    assert select_params == ("electronics", 50, 0)


@pytest.mark.asyncio
async def test_query_skips_select_for_empty_window():
    conn = _FakeConnection(rows=[ROW], total=120)
    source = PostgresProductSource(pool=_FakePool(conn))

    result = await source.query(QueryFilter(), SortSpec(), 10, page=5, page_size=10)

    assert result.records == ()
    assert result.total == 120
    assert len(conn.statements) == 1


@pytest.mark.asyncio
async def test_driver_errors_become_remote_failure():
    conn = _FakeConnection(rows=[], total=0, error=ConnectionResetError("reset by peer"))
    source = PostgresProductSource(pool=_FakePool(conn))

    with pytest.raises(RemoteFailure) as excinfo:
        await source.query(QueryFilter(), SortSpec(), 10)
    assert "reset by peer" in str(excinfo.value)


@pytest.mark.asyncio
async def test_pool_creation_failure_becomes_remote_failure(monkeypatch):
    async def _refuse(*args, **kwargs):
        raise OSError("connection refused")

    monkeypatch.setattr("catalog_admin.sources.postgres.create_async_pool", _refuse)

    with pytest.raises(RemoteFailure):
        await PostgresProductSource().query(QueryFilter(), SortSpec(), 10)


@pytest.mark.asyncio
async def test_close_releases_pool():
    pool = _FakePool(_FakeConnection(rows=[], total=0))
    source = PostgresProductSource(pool=pool)

    async with source:
        pass

    assert pool.closed
