"""
Infrastructure package for the catalog administration tool.

Centralizes database connectivity (sync psycopg connections, asyncpg pool)
and the table schema. Keep this layer focused on I/O and resource
management, decoupled from the cache and the CLI.
"""

from catalog_admin.infrastructure.db_factory import (
    apply_statement_timeout,
    create_async_pool,
    get_sync_connection,
)
from catalog_admin.infrastructure.schema import PRODUCTS_DDL, ensure_schema

__all__ = [
    "PRODUCTS_DDL",
    "apply_statement_timeout",
    "create_async_pool",
    "ensure_schema",
    "get_sync_connection",
]
