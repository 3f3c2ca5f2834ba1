"""Tests for the Goal repository against a scripted fake pool."""

from __future__ import annotations

import uuid
from datetime import UTC, datetime, timedelta
from typing import Any

import pytest

from src.records.errors import NotFoundError
from src.records.goals import GoalRepository
from src.records.schema import GoalFilters, GoalInput, Pagination

_CREATED = datetime(2025, 3, 1, 9, 0, tzinfo=UTC)


class _StepClock:
    """Deterministic clock advancing one minute per reading."""

    def __init__(self, start: datetime) -> None:
        self._next = start

    def __call__(self) -> datetime:
        value = self._next
        self._next += timedelta(minutes=1)
        return value


def _row(goal_id: uuid.UUID, **overrides: Any) -> dict[str, Any]:
    row = {
        "id": goal_id,
        "title": "Boost release confidence",
        "clarity_statement": "Ensure Thursday release is risk-free",
        "guardrails": ["No Friday deploys"],
        "decision_rights": ["Release manager"],
        "constraints": ["Keep production stable"],
        "success_criteria": ["Zero Sev-1 incidents"],
        "created_at": _CREATED,
        "updated_at": _CREATED,
    }
    row.update(overrides)
    return row


def _input(**overrides: Any) -> GoalInput:
    payload: dict[str, Any] = {
        "title": "Boost release confidence",
        "clarity_statement": "Ensure Thursday release is risk-free",
        "constraints": ["Keep production stable", "keep production STABLE"],
        "success_criteria": [" Zero Sev-1 incidents "],
    }
    payload.update(overrides)
    return GoalInput(**payload)


@pytest.mark.asyncio
async def test_create_sets_updated_at_equal_to_created_at(fake_pool: Any) -> None:
    repo = GoalRepository(fake_pool, clock=_StepClock(_CREATED))
    fake_pool.returns(rowcount=1)

    goal = await repo.create(_input())

    assert goal.created_at == goal.updated_at == _CREATED
    assert goal.constraints == ["Keep production stable"]
    assert goal.success_criteria == ["Zero Sev-1 incidents"]
    assert goal.guardrails == []
    assert goal.decision_rights == []

    sql, params = fake_pool.executed[0]
    assert "INSERT INTO goals" in sql
    assert params["created_at"] == params["updated_at"] == _CREATED
    assert params["guardrails"].obj == []
    assert params["decision_rights"].obj == []
    assert params["constraints"].obj == ["Keep production stable"]


@pytest.mark.asyncio
async def test_update_stamps_new_updated_at(fake_pool: Any) -> None:
    goal_id = uuid.uuid4()
    later = _CREATED + timedelta(hours=2)
    fake_pool.returns([_row(goal_id, title="Renamed", updated_at=later)])
    repo = GoalRepository(fake_pool, clock=_StepClock(later))

    goal = await repo.update(goal_id, _input(title="Renamed", guardrails=["a", "A", "b"]))

    assert goal.title == "Renamed"
    assert goal.created_at == _CREATED
    assert goal.updated_at == later

    sql, params = fake_pool.executed[0]
    assert "updated_at = %(updated_at)s" in sql
    assert "created_at =" not in sql
    assert params["updated_at"] == later
    assert params["guardrails"].obj == ["a", "b"]


@pytest.mark.asyncio
async def test_get_decodes_every_tag_set(fake_pool: Any) -> None:
    goal_id = uuid.uuid4()
    fake_pool.returns([_row(goal_id, decision_rights=None)])

    goal = await GoalRepository(fake_pool).get(goal_id)

    assert goal.guardrails == ["No Friday deploys"]
    assert goal.decision_rights == []
    assert goal.success_criteria == ["Zero Sev-1 incidents"]


@pytest.mark.asyncio
async def test_update_and_delete_missing_raise_not_found(fake_pool: Any) -> None:
    repo = GoalRepository(fake_pool)
    fake_pool.returns([]).returns(rowcount=0)

    with pytest.raises(NotFoundError):
        await repo.update(uuid.uuid4(), _input())
    with pytest.raises(NotFoundError):
        await repo.delete(uuid.uuid4())


@pytest.mark.asyncio
async def test_list_applies_search_date_range_and_page(fake_pool: Any) -> None:
    after = datetime(2025, 1, 1, tzinfo=UTC)
    before = datetime(2025, 12, 31, tzinfo=UTC)
    ids = [uuid.uuid4() for _ in range(5)]
    fake_pool.returns([(12,)]).returns([_row(goal_id) for goal_id in ids])

    page = await GoalRepository(fake_pool).list(
        GoalFilters(query="sev", created_after=after, created_before=before),
        Pagination.from_page(2, 5),
    )

    assert page.total_count == 12
    assert len(page.items) == 5
    assert page.total_pages(5) == 3

    (count_sql, count_params), (page_sql, page_params) = fake_pool.executed
    assert "success_criteria::text ILIKE %(p1)s" in count_sql
    assert "created_at >= %(p2)s AND created_at <= %(p3)s" in count_sql
    assert count_params == {"p1": "%sev%", "p2": after, "p3": before}
    assert page_sql.endswith("LIMIT %(p4)s OFFSET %(p5)s")
    assert page_params["p4"] == 5
    assert page_params["p5"] == 5
