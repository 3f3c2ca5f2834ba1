"""Allowlisted SQL identifiers.

All table names, column names and search expressions referenced in generated SQL must come from
these definitions; no caller-provided identifier should ever be interpolated into SQL.
"""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class TableSpec:
    """Identifiers the builder may reference for one table."""

    name: str
    columns: tuple[str, ...]
    search_expressions: tuple[str, ...]
    tag_columns: tuple[str, ...]
    created_column: str = "created_at"
    order_by: str = "created_at DESC, id DESC"


INTENTS = TableSpec(
    name="intents",
    columns=(
        "id",
        "statement",
        "context",
        "expected_outcome",
        "collaborators",
        "created_at",
    ),
    search_expressions=("statement", "context", "expected_outcome"),
    tag_columns=("collaborators",),
)

GOALS = TableSpec(
    name="goals",
    columns=(
        "id",
        "title",
        "clarity_statement",
        "guardrails",
        "decision_rights",
        "constraints",
        "success_criteria",
        "created_at",
        "updated_at",
    ),
    search_expressions=("title", "clarity_statement", "success_criteria::text"),
    tag_columns=("guardrails", "decision_rights", "constraints", "success_criteria"),
)

TABLES: dict[str, TableSpec] = {spec.name: spec for spec in (INTENTS, GOALS)}


def select_list(table: TableSpec) -> str:
    """Render the table's column list for SELECT / RETURNING clauses."""

    return ", ".join(table.columns)
