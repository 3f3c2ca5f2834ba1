"""Application composition root.

This module wires together configuration, the DB pool and the repositories. The pool is created
once and injected into each repository; repositories hold no other shared state.
"""

from __future__ import annotations

from dataclasses import dataclass

from psycopg_pool import AsyncConnectionPool

from src.config.settings import Settings
from src.db.pool import create_pool_from_settings, get_conn
from src.db.query import fetch_greeting
from src.records.goals import GoalRepository
from src.records.intents import IntentRepository


@dataclass(frozen=True)
class App:
    """Shared application dependencies for callers (e.g. an HTTP layer)."""

    settings: Settings
    pool: AsyncConnectionPool
    intents: IntentRepository
    goals: GoalRepository

    async def ping(self) -> str:
        """Round-trip to the database and return its greeting."""

        async with get_conn(self.pool) as conn:
            return await fetch_greeting(conn)


def create_app(settings: Settings, *, search_path: str | None = None) -> App:
    """Create the application container.

    Note:
        The returned DB pool is not opened. Call `await app.pool.open()` at startup and
        `await app.pool.close()` on shutdown.
    """

    pool = create_pool_from_settings(settings, search_path=search_path)
    return App(
        settings=settings,
        pool=pool,
        intents=IntentRepository(pool),
        goals=GoalRepository(pool),
    )
