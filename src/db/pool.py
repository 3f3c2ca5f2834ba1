"""Async Postgres connection pool.

Repositories share one bounded async pool (psycopg3). The pool is the only shared mutable resource
in the record store and is safe for concurrent use; no extra locking is layered on top. Every new
connection is configured to use UTC at the session level.
"""

from __future__ import annotations

from contextlib import asynccontextmanager
from typing import AsyncIterator

from psycopg import AsyncConnection
from psycopg_pool import AsyncConnectionPool

from src.config.settings import Settings
from src.db.connection import resolve_database_url
from src.db.session import session_configurer


def create_pool(
        database_url: str | None = None,
        *,
        min_size: int = 1,
        max_size: int = 5,
        max_lifetime: float = 30 * 60.0,
        max_idle: float = 10 * 60.0,
        timeout: float = 30.0,
        search_path: str | None = None,
) -> AsyncConnectionPool:
    """Create an async DB pool.

    Notes:
        - The returned pool is created with `open=False`. Call `await pool.open()` at startup.
        - If `database_url` is omitted, the function loads `.env` and resolves the DSN from
          settings.
        - Connections are recycled after `max_lifetime` seconds and idle ones above `min_size`
          are closed after `max_idle` seconds.
    """

    if database_url is None:
        database_url = resolve_database_url()

    return AsyncConnectionPool(
        conninfo=database_url,
        min_size=min_size,
        max_size=max_size,
        max_lifetime=max_lifetime,
        max_idle=max_idle,
        timeout=timeout,
        open=False,
        configure=session_configurer(search_path),
    )


def create_pool_from_settings(
        settings: Settings,
        *,
        search_path: str | None = None,
) -> AsyncConnectionPool:
    """Create the pool using the bounds declared in `Settings`."""

    return create_pool(
        settings.dsn,
        min_size=settings.pool_min_size,
        max_size=settings.pool_max_size,
        max_lifetime=settings.pool_max_lifetime,
        max_idle=settings.pool_max_idle,
        timeout=settings.pool_timeout,
        search_path=search_path,
    )


@asynccontextmanager
async def get_conn(pool: AsyncConnectionPool) -> AsyncIterator[AsyncConnection]:
    """Acquire a connection from the pool.

    The pool commits on a clean exit and rolls back if the block raises.
    """

    async with pool.connection() as conn:
        yield conn
