"""Logging configuration for the record store."""

from __future__ import annotations

import logging
import os


def configure_logging(level: str | None = None) -> None:
    """Configure Python logging for the process.

    Repository logs carry identifiers and counts only; record contents are never logged.
    """

    log_level = (level or os.getenv("LOG_LEVEL") or "INFO").upper()
    logging.basicConfig(
        level=log_level,
        format="%(asctime)s %(levelname)s %(name)s %(message)s",
    )

    # The pool logs every connection lifecycle event at INFO.
    logging.getLogger("psycopg.pool").setLevel(logging.WARNING)
