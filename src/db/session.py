"""DB session configuration helpers.

Creation timestamps are generated and compared in UTC, so every DB session must be locked to the
UTC timezone. Sessions can optionally be pinned to a schema via `search_path` (used to isolate
integration test runs).
"""

from __future__ import annotations

from collections.abc import Awaitable, Callable

from psycopg import AsyncConnection, sql


async def configure_session(conn: AsyncConnection, *, search_path: str | None = None) -> None:
    """Set the session timezone to UTC and, if given, the schema search path."""

    async with conn.cursor() as cur:
        await cur.execute("SET TIME ZONE 'UTC'", prepare=False)
        if search_path:
            await cur.execute(
                sql.SQL("SET search_path TO {}").format(sql.Identifier(search_path)),
                prepare=False,
            )
    # `SET` starts a transaction when autocommit is disabled; commit so the pool doesn't see INTRANS.
    await conn.commit()


def session_configurer(
        search_path: str | None = None,
) -> Callable[[AsyncConnection], Awaitable[None]]:
    """Return a pool `configure` callback bound to the given search path."""

    async def _configure(conn: AsyncConnection) -> None:
        await configure_session(conn, search_path=search_path)

    return _configure
