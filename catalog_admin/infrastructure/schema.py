"""DDL for the `products` table."""

from __future__ import annotations

import psycopg

from catalog_admin.utils.logging import get_logger

log = get_logger(__name__)

PRODUCTS_DDL = """
CREATE TABLE IF NOT EXISTS public.products (
    id          BIGSERIAL PRIMARY KEY,
    name        TEXT NOT NULL CHECK (length(name) > 0),
    category    TEXT NOT NULL
                CHECK (category IN ('electronics', 'clothing', 'food', 'furniture', 'books')),
    price       INTEGER NOT NULL CHECK (price >= 0),
    stock       INTEGER NOT NULL DEFAULT 0 CHECK (stock >= 0),
    status      TEXT NOT NULL DEFAULT 'active'
                CHECK (status IN ('active', 'inactive', 'soldout')),
    created_at  DATE NOT NULL DEFAULT CURRENT_DATE,
    updated_at  DATE NOT NULL DEFAULT CURRENT_DATE,
    CHECK (created_at <= updated_at)
);
CREATE INDEX IF NOT EXISTS idx_products_price ON public.products (price, id);
CREATE INDEX IF NOT EXISTS idx_products_stock ON public.products (stock, id);
CREATE INDEX IF NOT EXISTS idx_products_created_at ON public.products (created_at, id);
CREATE INDEX IF NOT EXISTS idx_products_category_status ON public.products (category, status);
"""


def ensure_schema(conn: psycopg.Connection) -> None:
    """Create the products table and its indexes if missing, then commit."""
    with conn.cursor() as cur:
        cur.execute(PRODUCTS_DDL)
    conn.commit()
    log.info("Schema ensured", extra={"table": "public.products"})


__all__ = ["PRODUCTS_DDL", "ensure_schema"]
