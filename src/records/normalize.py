"""Tag-set normalization and JSONB encoding."""

from __future__ import annotations

from collections.abc import Iterable
from typing import Any

from psycopg.types.json import Jsonb
from pydantic import TypeAdapter, ValidationError

from src.records.errors import SerializationError

_TAG_LIST = TypeAdapter(list[str])


def normalize_tags(values: Iterable[str] | None) -> list[str]:
    """Normalize a tag set before persistence.

    Rules:
        - Trim surrounding whitespace and drop empty values.
        - Deduplicate case-insensitively; the first-seen spelling and position win.

    The function is idempotent: normalizing an already normalized list returns it unchanged.
    """

    cleaned: list[str] = []
    seen: set[str] = set()
    for value in values or ():
        trimmed = value.strip()
        if not trimmed:
            continue
        key = trimmed.lower()
        if key in seen:
            continue
        seen.add(key)
        cleaned.append(trimmed)
    return cleaned


def encode_tags(values: Iterable[str] | None) -> Jsonb:
    """Normalize a tag set and wrap it for binding to a JSONB column (never NULL)."""

    return Jsonb(normalize_tags(values))


def decode_tags(raw: Any, *, column: str) -> list[str]:
    """Decode a stored JSONB tag set back into an ordered list of strings.

    psycopg already parses JSONB into Python objects; text/bytes payloads (e.g. a `::text` cast)
    are parsed here. A NULL column reads back as an empty list.
    """

    if raw is None:
        return []

    try:
        if isinstance(raw, (str, bytes, bytearray)):
            return _TAG_LIST.validate_json(raw)
        return _TAG_LIST.validate_python(raw, strict=True)
    except ValidationError as exc:
        raise SerializationError(f"column {column} does not hold a JSON array of strings") from exc
