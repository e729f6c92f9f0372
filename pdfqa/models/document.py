"""Document record models.

A :class:`Document` is the single source of truth for one uploaded PDF:
where its bytes live, which vector-index namespace holds its page vectors,
and whether ingestion has completed.  Records are owned by the document
store; pipelines only ever see frozen snapshots.
"""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field

# Field limit carried by every unique document field.
MAX_FIELD_LENGTH = 100


class Document(BaseModel):
    """One uploaded document and its processing state.

    ``namespace`` is assigned once at upload time and never changes.
    ``processed`` only ever moves from ``False`` to ``True``.
    """

    model_config = ConfigDict(frozen=True)

    id: str = Field(description="Opaque unique identifier assigned by the document store.")
    display_name: str = Field(
        max_length=MAX_FIELD_LENGTH,
        description="Original file name as uploaded.",
    )
    source_location: str = Field(
        max_length=MAX_FIELD_LENGTH,
        description="URI of the stored original bytes.",
    )
    namespace: str = Field(
        max_length=MAX_FIELD_LENGTH,
        description="Vector-index namespace holding this document's page vectors.",
    )
    processed: bool = Field(default=False, description="True once ingestion has succeeded.")
    created_at: datetime | None = Field(default=None, description="Record creation time (UTC).")
    updated_at: datetime | None = Field(default=None, description="Last update time (UTC).")


class NewDocument(BaseModel):
    """Fields supplied by the caller when creating a document record."""

    model_config = ConfigDict(frozen=True, str_strip_whitespace=True)

    display_name: str = Field(min_length=1, max_length=MAX_FIELD_LENGTH)
    source_location: str = Field(min_length=1, max_length=MAX_FIELD_LENGTH)
    namespace: str = Field(min_length=1, max_length=MAX_FIELD_LENGTH)
