"""Repository error taxonomy.

None of these errors encode transport status codes; mapping them to user-facing responses is the
caller's job.
"""

from __future__ import annotations

from uuid import UUID


class RepositoryError(Exception):
    """Base class for every failure raised by a repository."""


class NotFoundError(RepositoryError, LookupError):
    """Raised when get/update/delete targets an identifier that matches no row."""

    def __init__(self, entity: str, entity_id: UUID) -> None:
        super().__init__(f"{entity} not found: {entity_id}")
        self.entity = entity
        self.entity_id = entity_id


class ExecutionError(RepositoryError):
    """Raised when the database cannot be reached or a statement fails to execute."""


class SerializationError(ExecutionError):
    """Raised when a stored tag set cannot be decoded into a list of strings."""
