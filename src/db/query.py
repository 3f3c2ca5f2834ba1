"""Safe DB query helpers.

These helpers are used by the repositories. They never interpolate values into SQL: every query is
parameterized and all values are passed via `params`. DB errors are not swallowed; the caller
decides how to map them.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any, LiteralString, cast

from psycopg import AsyncConnection
from psycopg.rows import dict_row

Params = Mapping[str, Any]

GREETING_SQL = "SELECT 'Hello, Intent!' AS greeting"


async def fetch_scalar_int(conn: AsyncConnection, sql: str, params: Params | None = None) -> int:
    """Execute a scalar query and return an `int`.

    Contract:
        - Returns `0` if the query yields no rows or the first column is NULL.
    """

    async with conn.cursor() as cur:
        await cur.execute(cast(LiteralString, sql), params)
        row = await cur.fetchone()

    if not row:
        return 0

    value = row[0]
    if value is None:
        return 0

    return int(value)


async def fetch_one(
        conn: AsyncConnection,
        sql: str,
        params: Params | None = None,
) -> dict[str, Any] | None:
    """Execute a query and return the first row as a dict, or `None` when no row matched."""

    async with conn.cursor(row_factory=dict_row) as cur:
        await cur.execute(cast(LiteralString, sql), params)
        return await cur.fetchone()


async def fetch_all(
        conn: AsyncConnection,
        sql: str,
        params: Params | None = None,
) -> list[dict[str, Any]]:
    """Execute a query and return every row as a dict."""

    async with conn.cursor(row_factory=dict_row) as cur:
        await cur.execute(cast(LiteralString, sql), params)
        return await cur.fetchall()


async def execute_rowcount(conn: AsyncConnection, sql: str, params: Params | None = None) -> int:
    """Execute a statement and return the number of affected rows."""

    async with conn.cursor() as cur:
        await cur.execute(cast(LiteralString, sql), params)
        return cur.rowcount


async def fetch_greeting(conn: AsyncConnection) -> str:
    """Ask the database to produce a greeting (connectivity check)."""

    async with conn.cursor() as cur:
        await cur.execute(GREETING_SQL)
        row = await cur.fetchone()
    return str(row[0]) if row else ""
