"""Pytest configuration.

The repository uses a flat `src/` layout. This conftest ensures tests can import from the `src.*`
namespace when running `pytest` locally without installing the package, and provides a scripted
fake connection pool so repository tests run without a database.
"""

from __future__ import annotations

import asyncio
import sys
from contextlib import asynccontextmanager
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, AsyncIterator

import pytest

# Ensure `import src...` works when running pytest without installing the package.
REPO_ROOT = Path(__file__).resolve().parents[1]
sys.path.insert(0, str(REPO_ROOT))


@dataclass
class FakeResult:
    """One scripted response to a single `cursor.execute` call."""

    rows: list[Any] = field(default_factory=list)
    rowcount: int | None = None
    delay: float = 0.0


class FakeCursor:
    def __init__(self, conn: FakeConnection, row_factory: Any = None) -> None:
        self._conn = conn
        self.row_factory = row_factory
        self._rows: list[Any] = []
        self.rowcount = -1

    async def __aenter__(self) -> FakeCursor:
        return self

    async def __aexit__(self, *_exc: object) -> None:
        return None

    async def execute(self, query: Any, params: Any = None, *, prepare: bool | None = None) -> None:
        """Record the statement and load the next scripted response (psycopg's `execute`)."""

        self._conn.executed.append((str(query), params))
        response = self._conn.responses.pop(0) if self._conn.responses else FakeResult()
        if isinstance(response, BaseException):
            raise response
        if response.delay:
            await asyncio.sleep(response.delay)
        self._rows = list(response.rows)
        self.rowcount = len(self._rows) if response.rowcount is None else response.rowcount

    async def fetchone(self) -> Any:
        return self._rows[0] if self._rows else None

    async def fetchall(self) -> list[Any]:
        return list(self._rows)


class FakeConnection:
    def __init__(self, responses: list[Any], executed: list[tuple[str, Any]]) -> None:
        self.responses = responses
        self.executed = executed
        self.commits = 0

    async def commit(self) -> None:
        self.commits += 1

    def cursor(self, *, row_factory: Any = None) -> FakeCursor:
        return FakeCursor(self, row_factory=row_factory)


class FakePool:
    """Stand-in for `AsyncConnectionPool` that replays scripted results."""

    def __init__(self) -> None:
        self.responses: list[Any] = []
        self.executed: list[tuple[str, Any]] = []
        self.acquired = 0

    def returns(
            self,
            rows: list[Any] | None = None,
            *,
            rowcount: int | None = None,
            delay: float = 0.0,
    ) -> FakePool:
        self.responses.append(FakeResult(rows=list(rows or []), rowcount=rowcount, delay=delay))
        return self

    def fails(self, exc: BaseException) -> FakePool:
        self.responses.append(exc)
        return self

    @asynccontextmanager
    async def connection(self) -> AsyncIterator[FakeConnection]:
        self.acquired += 1
        yield FakeConnection(self.responses, self.executed)


@pytest.fixture
def fake_pool() -> FakePool:
    return FakePool()
