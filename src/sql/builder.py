"""Deterministic predicate builder.

The builder turns optional list filters into parameterized SQL for one table. Identifiers
(tables, columns, search expressions) are strictly allowlisted via `src.sql.columns`; only values
become bound parameters.

Parameters are psycopg named placeholders numbered from the builder's start slot (`%(p1)s`,
`%(p2)s`, ...). The same builder renders both the COUNT query and the page query, so the total
and the returned rows are always computed against an identical predicate set.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from datetime import datetime
from typing import Any

from src.sql.columns import TableSpec, select_list


class SQLBuilderError(ValueError):
    """Raised when a filter cannot be converted into allowlisted SQL."""


@dataclass(frozen=True)
class BuiltQuery:
    """A parameterized SQL query ready for execution."""

    sql: str
    params: dict[str, Any]


def placeholder(number: int) -> str:
    """Render the named placeholder for parameter slot `number`."""

    return f"%(p{number})s"


def escape_like(term: str) -> str:
    """Escape LIKE metacharacters so the term matches literally."""

    return term.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


def _named_params(start: int, args: Sequence[Any]) -> dict[str, Any]:
    return {f"p{start + idx}": value for idx, value in enumerate(args)}


def _where_and(clauses: list[str]) -> str:
    if not clauses:
        return ""
    return "WHERE " + " AND ".join(clauses)


class PredicateBuilder:
    """Collect AND-combined predicates and their bound arguments for one table."""

    def __init__(self, table: TableSpec, *, start: int = 1) -> None:
        if start < 1:
            raise SQLBuilderError("parameter numbering must start at 1 or later")
        self._table = table
        self._start = start
        self.clauses: list[str] = []
        self.args: list[Any] = []

    @property
    def table(self) -> TableSpec:
        return self._table

    @property
    def next_param(self) -> int:
        """The next unused parameter number."""

        return self._start + len(self.args)

    @property
    def params(self) -> dict[str, Any]:
        """Bound arguments keyed by their placeholder names."""

        return _named_params(self._start, self.args)

    def _bind(self, value: Any) -> str:
        ref = placeholder(self.next_param)
        self.args.append(value)
        return ref

    def search(self, term: str | None, expressions: Sequence[str] | None = None) -> PredicateBuilder:
        """Add a case-insensitive "contains" match OR'd across the search expressions."""

        value = (term or "").strip()
        if not value:
            return self

        targets = tuple(expressions) if expressions is not None else self._table.search_expressions
        if not targets:
            raise SQLBuilderError(f"no search expressions configured for {self._table.name}")
        for expr in targets:
            if expr not in self._table.search_expressions:
                raise SQLBuilderError(f"search expression is not allowlisted: {expr}")

        ref = self._bind(f"%{escape_like(value)}%")
        self.clauses.append("(" + " OR ".join(f"{expr} ILIKE {ref}" for expr in targets) + ")")
        return self

    def tag_membership(self, column: str, value: str | None) -> PredicateBuilder:
        """Add a case-insensitive match against any element of a JSONB array column."""

        tag = (value or "").strip()
        if not tag:
            return self
        if column not in self._table.tag_columns:
            raise SQLBuilderError(f"tag column is not allowlisted: {column}")

        ref = self._bind(tag)
        self.clauses.append(
            f"EXISTS (SELECT 1 FROM jsonb_array_elements_text({column}) AS tag "
            f"WHERE LOWER(tag) = LOWER({ref}))"
        )
        return self

    def created_between(
            self,
            after: datetime | None = None,
            before: datetime | None = None,
    ) -> PredicateBuilder:
        """Add inclusive lower and/or upper bounds on the creation timestamp."""

        column = self._table.created_column
        if after is not None:
            self.clauses.append(f"{column} >= {self._bind(after)}")
        if before is not None:
            self.clauses.append(f"{column} <= {self._bind(before)}")
        return self

    def where_clause(self) -> str:
        return _where_and(self.clauses)

    def count_query(self) -> BuiltQuery:
        """Build `SELECT COUNT(*)` over the current predicates."""

        sql = f"SELECT COUNT(*)::bigint FROM {self._table.name} {self.where_clause()}".strip()
        return BuiltQuery(sql=sql, params=self.params)

    def page_query(self, *, limit: int = 0, offset: int = 0) -> BuiltQuery:
        """Build the ordered page query over the current predicates.

        Pagination parameters are numbered after the predicate parameters without mutating the
        builder, so `count_query()` stays valid afterwards. `LIMIT` is omitted when `limit <= 0`
        (unbounded) and `OFFSET` when `offset <= 0`.
        """

        args = list(self.args)
        number = self.next_param
        parts = [
            f"SELECT {select_list(self._table)} FROM {self._table.name}",
            self.where_clause(),
            f"ORDER BY {self._table.order_by}",
        ]

        if limit > 0:
            parts.append(f"LIMIT {placeholder(number)}")
            args.append(limit)
            number += 1

        if offset > 0:
            parts.append(f"OFFSET {placeholder(number)}")
            args.append(offset)

        sql = " ".join(part for part in parts if part)
        return BuiltQuery(sql=sql, params=_named_params(self._start, args))
