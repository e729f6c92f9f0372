"""FastAPI API routes for pdfqa.

Provides REST endpoints for document upload, listing, ingestion, question
answering and health checks.  Service dependencies are resolved from
``app.state`` via FastAPI's ``Depends`` using the ``Annotated`` pattern.

# Endpoint                         Method  Description
# ──────────────────────────────────────────────────────────────────────
# /api/v1/documents                GET     List every uploaded document
# /api/v1/documents/upload         POST    Store a PDF + reserve its namespace
# /api/v1/documents/process        POST    Ingest a document into its namespace
# /api/v1/documents/query          POST    Answer a question about a document
# /api/v1/health                   GET     Health check + provider status
#
# Errors raised by the services propagate to ErrorHandlingMiddleware,
# which turns them into an ErrorResponse with the class's status code.
"""

from __future__ import annotations

from typing import Annotated, Any

import structlog
from fastapi import APIRouter, Depends, File, Request, UploadFile

from pdfqa import __version__
from pdfqa.api.schemas import (
    DocumentSummary,
    ErrorResponse,
    HealthResponse,
    ProcessRequest,
    ProcessResponse,
    QueryRequest,
    QueryResponse,
    UploadResponse,
)
from pdfqa.services.document_service import DocumentService
from pdfqa.services.ingestion.ingestion_service import IngestionService
from pdfqa.services.qa_service import QAService
from pdfqa.utils.errors import PayloadTooLargeError, ValidationError
from pdfqa.utils.logging import get_logger

_logger: structlog.BoundLogger = get_logger(__name__)

# All routes in this file are prefixed with /api/v1.
router = APIRouter(prefix="/api/v1")

# Uploads are read in 64 KB increments so oversized files are rejected
# without buffering the whole payload.
_UPLOAD_CHUNK_SIZE = 64 * 1024

_ERROR_RESPONSES: dict[int | str, dict[str, Any]] = {
    400: {"model": ErrorResponse},
    500: {"model": ErrorResponse},
}


# ---------------------------------------------------------------------------
# Dependencies
# ---------------------------------------------------------------------------


def _get_document_service(request: Request) -> DocumentService:
    return request.app.state.document_service


def _get_ingestion_service(request: Request) -> IngestionService:
    return request.app.state.ingestion_service


def _get_qa_service(request: Request) -> QAService:
    return request.app.state.qa_service


DocumentServiceDep = Annotated[DocumentService, Depends(_get_document_service)]
IngestionServiceDep = Annotated[IngestionService, Depends(_get_ingestion_service)]
QAServiceDep = Annotated[QAService, Depends(_get_qa_service)]


# ---------------------------------------------------------------------------
# Documents
# ---------------------------------------------------------------------------


@router.get(
    "/documents",
    response_model=list[DocumentSummary],
    responses={500: {"model": ErrorResponse}},
    summary="List uploaded documents",
)
async def list_documents(documents: DocumentServiceDep) -> list[DocumentSummary]:
    """Return every document with its processing state, oldest first."""
    return [DocumentSummary.from_document(d) for d in await documents.list_documents()]


@router.post(
    "/documents/upload",
    response_model=UploadResponse,
    responses={**_ERROR_RESPONSES, 413: {"model": ErrorResponse}},
    summary="Upload a PDF document",
)
async def upload_document(
    request: Request,
    documents: DocumentServiceDep,
    file: Annotated[UploadFile | None, File()] = None,
) -> UploadResponse:
    """Store the uploaded PDF, reserve its namespace and create its record."""
    if file is None:
        raise ValidationError(message="No file uploaded")

    max_bytes: int = request.app.state.settings.max_upload_bytes
    chunks: list[bytes] = []
    total_size = 0
    while True:
        chunk = await file.read(_UPLOAD_CHUNK_SIZE)
        if not chunk:
            break
        total_size += len(chunk)
        if total_size > max_bytes:
            raise PayloadTooLargeError(
                message=f"File too large: maximum is {max_bytes} bytes"
            )
        chunks.append(chunk)

    document = await documents.upload(file.filename, b"".join(chunks))
    return UploadResponse(document=DocumentSummary.from_document(document))


@router.post(
    "/documents/process",
    response_model=ProcessResponse,
    responses=_ERROR_RESPONSES,
    summary="Extract, embed and index a document",
)
async def process_document(
    body: ProcessRequest,
    ingestion: IngestionServiceDep,
) -> ProcessResponse:
    """Run the ingestion pipeline; the document is marked processed on success."""
    result = await ingestion.ingest(body.id)
    return ProcessResponse(document_id=result.document_id, pages_indexed=result.pages_indexed)


@router.post(
    "/documents/query",
    response_model=QueryResponse,
    responses=_ERROR_RESPONSES,
    summary="Ask a question about a document",
)
async def query_document(body: QueryRequest, qa: QAServiceDep) -> QueryResponse:
    result = await qa.answer(body.id, body.query)
    return QueryResponse(answer=result.answer)


# ---------------------------------------------------------------------------
# Health
# ---------------------------------------------------------------------------


@router.get(
    "/health",
    response_model=HealthResponse,
    summary="Application health check",
)
async def health_check(request: Request) -> HealthResponse:
    """Return application health, version, and provider availability.

    ``healthy`` needs every provider; ``degraded`` means storage works but
    the embedding or completion service is not configured.
    """
    state = request.app.state
    providers: dict[str, Any] = {}

    document_store = getattr(state, "document_store", None)
    providers["document_store"] = bool(document_store and await document_store.ping())
    for key in ("vector_index", "embedding", "completion"):
        provider = getattr(state, key, None)
        providers[key] = bool(provider and provider.is_available())

    storage_ok = providers["document_store"] and providers["vector_index"]
    models_ok = providers["embedding"] and providers["completion"]
    if storage_ok and models_ok:
        status = "healthy"
    elif storage_ok:
        status = "degraded"
    else:
        status = "unhealthy"

    return HealthResponse(status=status, version=__version__, providers=providers)
