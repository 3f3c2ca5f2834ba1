"""Record schema (Pydantic models).

These models are the contract between callers (for example an HTTP layer) and the repositories:
typed create/update inputs, list filters, pagination, and the persisted entities.
"""

from __future__ import annotations

from datetime import datetime
from typing import Generic, TypeVar
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

DEFAULT_PAGE_SIZE = 20
MAX_PAGE_SIZE = 100


class Intent(BaseModel):
    """A stated commitment captured from an engineer."""

    model_config = ConfigDict(extra="forbid")

    id: UUID
    statement: str
    context: str
    expected_outcome: str
    collaborators: list[str] = Field(default_factory=list)
    created_at: datetime


class IntentInput(BaseModel):
    """Mutable Intent fields supplied on create and update."""

    model_config = ConfigDict(extra="forbid", str_strip_whitespace=True)

    statement: str = Field(min_length=1)
    context: str = Field(min_length=1)
    expected_outcome: str = Field(min_length=1)
    collaborators: list[str] = Field(default_factory=list)


class IntentFilters(BaseModel):
    """Optional Intent list filters combined using logical AND."""

    model_config = ConfigDict(extra="forbid", str_strip_whitespace=True)

    query: str | None = None
    collaborator: str | None = None
    created_after: datetime | None = None
    created_before: datetime | None = None


class Goal(BaseModel):
    """An objective with a clarity statement and guiding tag sets."""

    model_config = ConfigDict(extra="forbid")

    id: UUID
    title: str
    clarity_statement: str
    guardrails: list[str] = Field(default_factory=list)
    decision_rights: list[str] = Field(default_factory=list)
    constraints: list[str] = Field(default_factory=list)
    success_criteria: list[str] = Field(default_factory=list)
    created_at: datetime
    updated_at: datetime


class GoalInput(BaseModel):
    """Mutable Goal fields supplied on create and update."""

    model_config = ConfigDict(extra="forbid", str_strip_whitespace=True)

    title: str = Field(min_length=1)
    clarity_statement: str = Field(min_length=1)
    guardrails: list[str] = Field(default_factory=list)
    decision_rights: list[str] = Field(default_factory=list)
    constraints: list[str] = Field(default_factory=list)
    success_criteria: list[str] = Field(default_factory=list)


class GoalFilters(BaseModel):
    """Optional Goal list filters combined using logical AND."""

    model_config = ConfigDict(extra="forbid", str_strip_whitespace=True)

    query: str | None = None
    created_after: datetime | None = None
    created_before: datetime | None = None


class Pagination(BaseModel):
    """Offset-based pagination.

    A `limit` of zero or less means "unbounded"; an `offset` of zero is not rendered at all.
    """

    model_config = ConfigDict(extra="forbid")

    limit: int = 0
    offset: int = Field(default=0, ge=0)

    @classmethod
    def from_page(cls, page: int, page_size: int = DEFAULT_PAGE_SIZE) -> Pagination:
        """Translate a 1-based page number and page size into limit/offset.

        Out-of-range input is clamped rather than rejected: `page < 1` becomes 1, a page size
        below 1 falls back to the default, and sizes above `MAX_PAGE_SIZE` are capped.
        """

        page = max(page, 1)
        if page_size < 1:
            page_size = DEFAULT_PAGE_SIZE
        page_size = min(page_size, MAX_PAGE_SIZE)
        return cls(limit=page_size, offset=(page - 1) * page_size)


T = TypeVar("T")


class Page(BaseModel, Generic[T]):
    """One page of entities plus the total number of matching rows."""

    items: list[T]
    total_count: int

    def total_pages(self, page_size: int) -> int:
        if self.total_count <= 0 or page_size <= 0:
            return 0
        return -(-self.total_count // page_size)
