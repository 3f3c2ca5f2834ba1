"""Apply SQL migrations to the configured PostgreSQL database.

This project keeps migrations as plain `.sql` files under `src/db/migrations/` and applies them in
lexicographic order. Applied migration filenames are tracked in the `schema_migrations` table.
"""

from __future__ import annotations

import argparse
import logging
from pathlib import Path
from typing import LiteralString, cast

import psycopg

from src.config.logging import configure_logging
from src.db.connection import connect_utc, resolve_database_url

MIGRATIONS_DIR = Path(__file__).resolve().parent / "migrations"

logger = logging.getLogger(__name__)

_SCHEMA_MIGRATIONS_SQL = """
CREATE TABLE IF NOT EXISTS schema_migrations
(
    filename   TEXT PRIMARY KEY,
    applied_at TIMESTAMPTZ NOT NULL DEFAULT NOW()
)
"""

_DROP_ALL_SQL = """
DROP TABLE IF EXISTS goals;
DROP TABLE IF EXISTS intents;
DROP TABLE IF EXISTS schema_migrations;
"""


def list_migration_files() -> list[Path]:
    """Return migration files in the order they must be applied."""

    if not MIGRATIONS_DIR.exists():
        raise RuntimeError(f"Migrations directory does not exist: {MIGRATIONS_DIR}")

    files = sorted(p for p in MIGRATIONS_DIR.iterdir() if p.is_file() and p.suffix == ".sql")
    if not files:
        raise RuntimeError(f"No .sql migration files found in {MIGRATIONS_DIR}")
    return files


def _get_applied_migrations(conn: psycopg.Connection) -> set[str]:
    rows = conn.execute("SELECT filename FROM schema_migrations", prepare=False).fetchall()
    return {r[0] for r in rows}


def _apply_migration(conn: psycopg.Connection, filename: str, sql_text: str) -> None:
    with conn.transaction():
        conn.execute(cast(LiteralString, sql_text), prepare=False)
        conn.execute(
            "INSERT INTO schema_migrations(filename) VALUES (%s)",
            (filename,),
            prepare=False,
        )


def apply_migrations(conn: psycopg.Connection) -> list[str]:
    """Apply every pending migration on `conn` and return the filenames applied."""

    conn.execute(_SCHEMA_MIGRATIONS_SQL, prepare=False)
    applied = _get_applied_migrations(conn)

    newly_applied: list[str] = []
    for file_path in list_migration_files():
        if file_path.name in applied:
            continue

        _apply_migration(conn, file_path.name, file_path.read_text(encoding="utf-8"))
        logger.info("applied migration %s", file_path.name)
        newly_applied.append(file_path.name)
    return newly_applied


def migrate(*, recreate: bool, database_url: str | None = None) -> list[str]:
    """Run migrations against the configured database (`DATABASE_URL` or `DB_*`)."""

    if database_url is None:
        database_url = resolve_database_url()

    with connect_utc(database_url) as conn:
        if recreate:
            conn.execute(_DROP_ALL_SQL, prepare=False)
        return apply_migrations(conn)


def main() -> None:
    """CLI entry point for applying migrations."""

    parser = argparse.ArgumentParser(description="Apply SQL migrations to Postgres.")
    parser.add_argument(
        "--recreate",
        action="store_true",
        help="Drop existing tables and re-apply all migrations (destructive).",
    )
    args = parser.parse_args()

    configure_logging()
    applied = migrate(recreate=args.recreate)
    if not applied:
        logger.info("database schema is up to date")


if __name__ == "__main__":
    main()
