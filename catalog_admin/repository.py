"""
Single-record writes and lookups on the `products` table.

Synchronous psycopg access used by the CLI's show/add/update/delete
commands. The list view never reads through here; it sees writes on its
next fetch, or after `CatalogService.invalidate()` in a long-lived process.
"""

from __future__ import annotations

from contextlib import contextmanager
from typing import Any, Iterable, Iterator, List, Mapping, Optional, Union

import psycopg
from psycopg import sql
from psycopg.rows import dict_row
from pydantic import ValidationError

from catalog_admin.config import get_settings
from catalog_admin.domain.models import Product, ProductCreate, ProductUpdate
from catalog_admin.errors import InvalidInput, ProductNotFound, RemoteFailure
from catalog_admin.infrastructure.db_factory import apply_statement_timeout, get_sync_connection
from catalog_admin.utils.logging import get_logger

log = get_logger(__name__)

_RETURNING = sql.SQL(
    "RETURNING id, name, category, price, stock, status, created_at, updated_at"
)


def _validate(model: type, payload: Union[Any, Mapping[str, Any]]) -> Any:
    if isinstance(payload, model):
        return payload
    try:
        return model.model_validate(dict(payload))
    except ValidationError as exc:
        err = exc.errors()[0]
        loc = ".".join(str(part) for part in err["loc"]) or "payload"
        raise InvalidInput(f"Invalid product ({loc}: {err['msg']})") from exc


class ProductRepository:
    """
    CRUD over `public.products`.

    Parameters
    ----------
    dsn_override : str, optional
        Connect here instead of the DSN composed from settings.
    connection : psycopg.Connection, optional
        Reuse an open connection (left open on exit); otherwise each call
        opens and closes its own.
    """

    def __init__(
        self,
        dsn_override: Optional[str] = None,
        connection: Optional[psycopg.Connection] = None,
    ) -> None:
        self._dsn_override = dsn_override
        self._connection = connection

    @contextmanager
    def _cursor(self) -> Iterator[psycopg.Cursor]:
        try:
            conn = self._connection or get_sync_connection(self._dsn_override)
        except psycopg.Error as exc:
            raise RemoteFailure(f"Could not connect to the product store: {exc}") from exc
        try:
            with conn.cursor(row_factory=dict_row) as cur:
                apply_statement_timeout(cur, get_settings().db_statement_timeout_ms)
                yield cur
            conn.commit()
        except psycopg.Error as exc:
            conn.rollback()
            raise RemoteFailure(f"Product store error: {exc}") from exc
        except Exception:
            conn.rollback()
            raise
        finally:
            if self._connection is None:
                conn.close()

    def get(self, product_id: int) -> Product:
        with self._cursor() as cur:
            cur.execute(
                "SELECT id, name, category, price, stock, status, created_at, updated_at "
                "FROM public.products WHERE id = %s",
                (product_id,),
            )
            row = cur.fetchone()
        if row is None:
            raise ProductNotFound(product_id)
        return Product.model_validate(row)

    def create(self, payload: Union[ProductCreate, Mapping[str, Any]]) -> Product:
        draft: ProductCreate = _validate(ProductCreate, payload)
        values = draft.model_dump(mode="json")
        columns = list(values)
        query = sql.SQL("INSERT INTO public.products ({}) VALUES ({}) {}").format(
            sql.SQL(", ").join(sql.Identifier(c) for c in columns),
            sql.SQL(", ").join(sql.Placeholder() for _ in columns),
            _RETURNING,
        )
        with self._cursor() as cur:
            cur.execute(query, [values[c] for c in columns])
            row = cur.fetchone()
        product = Product.model_validate(row)
        log.info("Product created", extra={"product_id": product.id})
        return product

    def update(self, product_id: int, payload: Union[ProductUpdate, Mapping[str, Any]]) -> Product:
        changes = _validate(ProductUpdate, payload).changes()
        if not changes:
            raise InvalidInput("Nothing to update")
        assignments = [
            sql.SQL("{} = {}").format(sql.Identifier(column), sql.Placeholder())
            for column in changes
        ]
        assignments.append(sql.SQL("updated_at = GREATEST(CURRENT_DATE, created_at)"))
        query = sql.SQL("UPDATE public.products SET {} WHERE id = {} {}").format(
            sql.SQL(", ").join(assignments), sql.Placeholder(), _RETURNING
        )
        with self._cursor() as cur:
            cur.execute(query, [*changes.values(), product_id])
            row = cur.fetchone()
        if row is None:
            raise ProductNotFound(product_id)
        log.info("Product updated", extra={"product_id": product_id, "fields": sorted(changes)})
        return Product.model_validate(row)

    def delete(self, product_id: int) -> Product:
        query = sql.SQL("DELETE FROM public.products WHERE id = %s {}").format(_RETURNING)
        with self._cursor() as cur:
            cur.execute(query, (product_id,))
            row = cur.fetchone()
        if row is None:
            raise ProductNotFound(product_id)
        log.info("Product deleted", extra={"product_id": product_id})
        return Product.model_validate(row)

    def delete_many(self, product_ids: Iterable[int]) -> List[int]:
        """Delete several products; returns the ids that actually existed."""
        ids = sorted(set(product_ids))
        if not ids:
            raise InvalidInput("No product ids given")
        with self._cursor() as cur:
            cur.execute(
                "DELETE FROM public.products WHERE id = ANY(%s) RETURNING id",
                (ids,),
            )
            deleted = sorted(row["id"] for row in cur.fetchall())
        log.info("Products deleted", extra={"requested": len(ids), "deleted": len(deleted)})
        return deleted


__all__ = ["ProductRepository"]
