"""Synchronous Postgres connection helpers for tooling (migrations, test fixtures).

For deterministic timestamp handling, every DB session must set its timezone to UTC.
"""

from __future__ import annotations

import psycopg
from dotenv import load_dotenv

from src.config.settings import load_settings


def resolve_database_url() -> str:
    """Load `.env` and return the configured DSN (`DATABASE_URL` or the `DB_*` parts)."""

    load_dotenv(".env")
    return load_settings().dsn


def connect_utc(database_url: str) -> psycopg.Connection:
    """Connect to Postgres and lock the session timezone to UTC."""

    conn = psycopg.connect(database_url)
    conn.execute("SET TIME ZONE 'UTC'", prepare=False)
    return conn
