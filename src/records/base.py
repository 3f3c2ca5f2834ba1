"""Shared repository plumbing.

Repositories receive the connection pool at construction time; nothing here reads global state.
Every operation acquires one pooled connection, runs under an optional per-call deadline, and maps
driver failures to `ExecutionError`. `NotFoundError` and `SerializationError` raised inside an
operation propagate unchanged. Nothing is retried.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable
from contextlib import asynccontextmanager
from datetime import UTC, datetime
from typing import Any, AsyncIterator, ClassVar
from uuid import UUID

import psycopg
from psycopg import AsyncConnection
from psycopg_pool import AsyncConnectionPool

from src.db.pool import get_conn
from src.db.query import execute_rowcount, fetch_all, fetch_one, fetch_scalar_int
from src.records.errors import ExecutionError, NotFoundError
from src.records.schema import Pagination
from src.sql.builder import PredicateBuilder
from src.sql.columns import TableSpec, select_list

logger = logging.getLogger(__name__)

Clock = Callable[[], datetime]


def utcnow() -> datetime:
    return datetime.now(UTC)


class BaseRepository:
    """Lifecycle plumbing shared by the Intent and Goal repositories."""

    entity: ClassVar[str]
    table: ClassVar[TableSpec]

    def __init__(self, pool: AsyncConnectionPool | None, *, clock: Clock = utcnow) -> None:
        self._pool = pool
        self._clock = clock

    @asynccontextmanager
    async def _connection(self, *, timeout: float | None = None) -> AsyncIterator[AsyncConnection]:
        """Acquire a pooled connection under an optional deadline (seconds)."""

        if self._pool is None:
            raise ExecutionError("database pool is not configured")

        try:
            async with asyncio.timeout(timeout):
                async with get_conn(self._pool) as conn:
                    yield conn
        except TimeoutError as exc:
            logger.warning("%s operation timed out after %ss", self.entity, timeout)
            raise ExecutionError(f"{self.entity} operation exceeded its deadline") from exc
        except psycopg.Error as exc:
            logger.warning("%s query failed: %s", self.entity, exc)
            raise ExecutionError(f"{self.entity} query failed: {exc}") from exc

    async def _fetch_by_id(self, entity_id: UUID, *, timeout: float | None) -> dict[str, Any]:
        sql = f"SELECT {select_list(self.table)} FROM {self.table.name} WHERE id = %(id)s"
        async with self._connection(timeout=timeout) as conn:
            row = await fetch_one(conn, sql, {"id": entity_id})
        if row is None:
            raise NotFoundError(self.entity, entity_id)
        return row

    async def _returning_one(
            self,
            sql: str,
            params: dict[str, Any],
            entity_id: UUID,
            *,
            timeout: float | None,
    ) -> dict[str, Any]:
        """Run a statement with a RETURNING clause; zero rows means the id did not match."""

        async with self._connection(timeout=timeout) as conn:
            row = await fetch_one(conn, sql, params)
        if row is None:
            raise NotFoundError(self.entity, entity_id)
        return row

    async def _execute(self, sql: str, params: dict[str, Any], *, timeout: float | None) -> int:
        async with self._connection(timeout=timeout) as conn:
            return await execute_rowcount(conn, sql, params)

    async def _delete_by_id(self, entity_id: UUID, *, timeout: float | None) -> None:
        sql = f"DELETE FROM {self.table.name} WHERE id = %(id)s"
        affected = await self._execute(sql, {"id": entity_id}, timeout=timeout)
        # A DELETE matching nothing is not a driver error; report it explicitly.
        if affected == 0:
            raise NotFoundError(self.entity, entity_id)
        logger.info("deleted %s id=%s", self.entity, entity_id)

    async def _fetch_page(
            self,
            builder: PredicateBuilder,
            pagination: Pagination,
            *,
            timeout: float | None,
    ) -> tuple[list[dict[str, Any]], int]:
        """Run the COUNT query and the page query built from the same predicates.

        The two reads are not wrapped in a snapshot, so under concurrent writes the total may
        disagree with the returned page.
        """

        count = builder.count_query()
        page = builder.page_query(limit=pagination.limit, offset=pagination.offset)

        async with self._connection(timeout=timeout) as conn:
            total = await fetch_scalar_int(conn, count.sql, count.params)
            rows = await fetch_all(conn, page.sql, page.params)

        logger.info("list %s total=%d returned=%d", self.table.name, total, len(rows))
        return rows, total
