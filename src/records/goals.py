"""Goal repository.

Same operation shape as the Intent repository, plus an `updated_at` timestamp that equals
`created_at` on creation and is restamped on every successful update.
"""

from __future__ import annotations

import logging
from typing import Any
from uuid import UUID, uuid4

from src.records.base import BaseRepository
from src.records.normalize import decode_tags, encode_tags, normalize_tags
from src.records.schema import Goal, GoalFilters, GoalInput, Page, Pagination
from src.sql.builder import PredicateBuilder
from src.sql.columns import GOALS

logger = logging.getLogger(__name__)

_TAG_FIELDS: tuple[str, ...] = GOALS.tag_columns

_INSERT_SQL = """
INSERT INTO goals (id, title, clarity_statement,
                   guardrails, decision_rights, constraints, success_criteria,
                   created_at, updated_at)
VALUES (%(id)s, %(title)s, %(clarity_statement)s,
        %(guardrails)s, %(decision_rights)s, %(constraints)s, %(success_criteria)s,
        %(created_at)s, %(updated_at)s)
"""

_UPDATE_SQL = """
UPDATE goals
SET title = %(title)s,
    clarity_statement = %(clarity_statement)s,
    guardrails = %(guardrails)s,
    decision_rights = %(decision_rights)s,
    constraints = %(constraints)s,
    success_criteria = %(success_criteria)s,
    updated_at = %(updated_at)s
WHERE id = %(id)s
RETURNING id, title, clarity_statement,
          guardrails, decision_rights, constraints, success_criteria,
          created_at, updated_at
"""


def _goal_from_row(row: dict[str, Any]) -> Goal:
    tags = {name: decode_tags(row[name], column=name) for name in _TAG_FIELDS}
    return Goal(
        id=row["id"],
        title=row["title"],
        clarity_statement=row["clarity_statement"],
        created_at=row["created_at"],
        updated_at=row["updated_at"],
        **tags,
    )


def _mutable_params(data: GoalInput) -> dict[str, Any]:
    params: dict[str, Any] = {
        "title": data.title,
        "clarity_statement": data.clarity_statement,
    }
    for name in _TAG_FIELDS:
        params[name] = encode_tags(getattr(data, name))
    return params


class GoalRepository(BaseRepository):
    """Owns the Goal lifecycle."""

    entity = "goal"
    table = GOALS

    async def create(self, data: GoalInput, *, timeout: float | None = None) -> Goal:
        now = self._clock()
        goal = Goal(
            id=uuid4(),
            title=data.title,
            clarity_statement=data.clarity_statement,
            created_at=now,
            updated_at=now,
            **{name: normalize_tags(getattr(data, name)) for name in _TAG_FIELDS},
        )
        params = {
            **_mutable_params(data),
            "id": goal.id,
            "created_at": goal.created_at,
            "updated_at": goal.updated_at,
        }
        await self._execute(_INSERT_SQL, params, timeout=timeout)

        logger.info("created goal id=%s", goal.id)
        return goal

    async def get(self, goal_id: UUID, *, timeout: float | None = None) -> Goal:
        row = await self._fetch_by_id(goal_id, timeout=timeout)
        return _goal_from_row(row)

    async def update(self, goal_id: UUID, data: GoalInput, *, timeout: float | None = None) -> Goal:
        """Replace every mutable field and stamp a fresh `updated_at`."""

        params = {**_mutable_params(data), "id": goal_id, "updated_at": self._clock()}
        row = await self._returning_one(_UPDATE_SQL, params, goal_id, timeout=timeout)

        logger.info("updated goal id=%s", goal_id)
        return _goal_from_row(row)

    async def delete(self, goal_id: UUID, *, timeout: float | None = None) -> None:
        await self._delete_by_id(goal_id, timeout=timeout)

    async def list(
            self,
            filters: GoalFilters | None = None,
            pagination: Pagination | None = None,
            *,
            timeout: float | None = None,
    ) -> Page[Goal]:
        filters = filters or GoalFilters()
        pagination = pagination or Pagination()

        builder = (
            PredicateBuilder(GOALS)
            .search(filters.query)
            .created_between(filters.created_after, filters.created_before)
        )
        rows, total = await self._fetch_page(builder, pagination, timeout=timeout)
        return Page[Goal](items=[_goal_from_row(row) for row in rows], total_count=total)
