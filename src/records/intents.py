"""Intent repository: create, get, update, delete and filtered listing."""

from __future__ import annotations

import logging
from typing import Any
from uuid import UUID, uuid4

from src.records.base import BaseRepository
from src.records.normalize import decode_tags, encode_tags, normalize_tags
from src.records.schema import Intent, IntentFilters, IntentInput, Page, Pagination
from src.sql.builder import PredicateBuilder
from src.sql.columns import INTENTS

logger = logging.getLogger(__name__)

_INSERT_SQL = """
INSERT INTO intents (id, statement, context, expected_outcome, collaborators, created_at)
VALUES (%(id)s, %(statement)s, %(context)s, %(expected_outcome)s, %(collaborators)s, %(created_at)s)
"""

_UPDATE_SQL = """
UPDATE intents
SET statement = %(statement)s,
    context = %(context)s,
    expected_outcome = %(expected_outcome)s,
    collaborators = %(collaborators)s
WHERE id = %(id)s
RETURNING id, statement, context, expected_outcome, collaborators, created_at
"""


def _intent_from_row(row: dict[str, Any]) -> Intent:
    return Intent(
        id=row["id"],
        statement=row["statement"],
        context=row["context"],
        expected_outcome=row["expected_outcome"],
        collaborators=decode_tags(row["collaborators"], column="collaborators"),
        created_at=row["created_at"],
    )


def _mutable_params(data: IntentInput) -> dict[str, Any]:
    return {
        "statement": data.statement,
        "context": data.context,
        "expected_outcome": data.expected_outcome,
        "collaborators": encode_tags(data.collaborators),
    }


class IntentRepository(BaseRepository):
    """Owns the Intent lifecycle.

    Required text fields are validated by the caller (see `IntentInput`); the repository only
    normalizes the collaborators tag set.
    """

    entity = "intent"
    table = INTENTS

    async def create(self, data: IntentInput, *, timeout: float | None = None) -> Intent:
        intent = Intent(
            id=uuid4(),
            statement=data.statement,
            context=data.context,
            expected_outcome=data.expected_outcome,
            collaborators=normalize_tags(data.collaborators),
            created_at=self._clock(),
        )
        params = {**_mutable_params(data), "id": intent.id, "created_at": intent.created_at}
        await self._execute(_INSERT_SQL, params, timeout=timeout)

        logger.info("created intent id=%s", intent.id)
        return intent

    async def get(self, intent_id: UUID, *, timeout: float | None = None) -> Intent:
        row = await self._fetch_by_id(intent_id, timeout=timeout)
        return _intent_from_row(row)

    async def update(
            self,
            intent_id: UUID,
            data: IntentInput,
            *,
            timeout: float | None = None,
    ) -> Intent:
        """Replace every mutable field; id and creation time are left untouched."""

        params = {**_mutable_params(data), "id": intent_id}
        row = await self._returning_one(_UPDATE_SQL, params, intent_id, timeout=timeout)

        logger.info("updated intent id=%s", intent_id)
        return _intent_from_row(row)

    async def delete(self, intent_id: UUID, *, timeout: float | None = None) -> None:
        await self._delete_by_id(intent_id, timeout=timeout)

    async def list(
            self,
            filters: IntentFilters | None = None,
            pagination: Pagination | None = None,
            *,
            timeout: float | None = None,
    ) -> Page[Intent]:
        """List intents newest first, with the total number of matching rows."""

        filters = filters or IntentFilters()
        pagination = pagination or Pagination()

        builder = (
            PredicateBuilder(INTENTS)
            .search(filters.query)
            .tag_membership("collaborators", filters.collaborator)
            .created_between(filters.created_after, filters.created_before)
        )
        rows, total = await self._fetch_page(builder, pagination, timeout=timeout)
        return Page[Intent](items=[_intent_from_row(row) for row in rows], total_count=total)
