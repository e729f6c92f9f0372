"""Pydantic request/response schemas for the pdfqa API.

Defines the public contract for every REST endpoint: listing, upload,
processing, querying and health.

Convention: request schemas end with "Request", response schemas end with
"Response".  Request bodies are validated before any pipeline step runs;
a body that fails validation is answered with a 400 ``ErrorResponse``.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any

from pydantic import BaseModel, Field

from pdfqa.models.document import Document


class DocumentSummary(BaseModel):
    """One document as shown in the listing."""

    id: str
    display_name: str
    source_location: str
    namespace: str
    processed: bool
    created_at: datetime | None = None
    updated_at: datetime | None = None

    @classmethod
    def from_document(cls, document: Document) -> "DocumentSummary":
        return cls(**document.model_dump())


class UploadResponse(BaseModel):
    """Response returned after a PDF was stored and registered."""

    message: str = "File uploaded successfully"
    document: DocumentSummary


class ProcessRequest(BaseModel):
    """Request body for ``POST /documents/process``."""

    id: str = Field(..., min_length=1, max_length=200, description="Document id to ingest.")


class ProcessResponse(BaseModel):
    message: str = "File processed successfully"
    document_id: str
    pages_indexed: int = 0


class QueryRequest(BaseModel):
    """Request body for ``POST /documents/query``."""

    id: str = Field(..., min_length=1, max_length=200, description="Document id to ask about.")
    query: str = Field(..., min_length=1, max_length=4000, description="Natural-language question.")


class QueryResponse(BaseModel):
    answer: str


class HealthResponse(BaseModel):
    """Application health check response."""

    status: str
    version: str
    providers: dict[str, Any]


class ErrorResponse(BaseModel):
    """Standard error response body."""

    error: str
    detail: str | None = None
