"""
Database connection factory utilities for the catalog administration tool.

Provides the synchronous psycopg connections used by the CRUD repository
and the schema/seed scripts, and the asyncpg pool behind the list-view and
export source.

Connection setup is retried with tenacity on transient failures. Query
execution is never retried here; callers decide their own retry policy.
"""

from __future__ import annotations

from typing import Optional

import asyncpg
import psycopg
from tenacity import retry, retry_if_exception_type, stop_after_attempt, wait_exponential

from catalog_admin.config import build_dsn, get_settings


def apply_statement_timeout(cur: psycopg.Cursor, timeout_ms: int) -> None:
    """
    Set the session statement timeout on a psycopg cursor's connection.

    A value of 0 or less leaves the server default in place.
    """
    if timeout_ms > 0:
        cur.execute("SELECT set_config('statement_timeout', %s, false)", (str(timeout_ms),))


@retry(
    stop=stop_after_attempt(3),
    wait=wait_exponential(multiplier=1, min=1, max=10),
    retry=retry_if_exception_type((psycopg.OperationalError, psycopg.InterfaceError)),
    reraise=True,
)
def get_sync_connection(dsn_override: Optional[str] = None) -> psycopg.Connection:
    """
    Acquire a dedicated synchronous connection with automatic retry.

    Retries up to 3 times with exponential backoff for transient connection errors.

    Parameters
    ----------
    dsn_override : str, optional
        Connect here instead of the DSN composed from settings.

    Returns
    -------
    Connection
        A new psycopg connection instance.

    Raises
    ------
    psycopg.OperationalError
        If connection fails after all retry attempts.
    """
    return psycopg.connect(dsn_override or build_dsn())


@retry(
    stop=stop_after_attempt(3),
    wait=wait_exponential(multiplier=1, min=1, max=10),
    retry=retry_if_exception_type((OSError, ConnectionError, asyncpg.CannotConnectNowError)),
    reraise=True,
)
async def create_async_pool(
    dsn_override: Optional[str] = None,
    min_size: Optional[int] = None,
    max_size: Optional[int] = None,
) -> asyncpg.Pool:
    """
    Create an asyncpg pool with automatic retry.

    Pool sizes and the per-command timeout default to settings. The command
    timeout is how the list view bounds a slow store; the cache layer never
    times out on its own.

    Returns
    -------
    asyncpg.Pool
        An open pool; the caller owns it and must close it.
    """
    settings = get_settings()
    timeout_ms = settings.db_statement_timeout_ms
    return await asyncpg.create_pool(
        dsn_override or build_dsn(settings),
        min_size=min_size or settings.db_pool_min_size,
        max_size=max_size or settings.db_pool_max_size,
        command_timeout=timeout_ms / 1000.0 if timeout_ms > 0 else None,
    )


__all__ = [
    "apply_statement_timeout",
    "create_async_pool",
    "get_sync_connection",
]
