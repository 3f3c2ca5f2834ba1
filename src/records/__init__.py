"""Intent and Goal records.

The records layer owns entity lifecycle: typed inputs are normalized, persisted through the shared
connection pool, and read back as validated Pydantic models.
"""
