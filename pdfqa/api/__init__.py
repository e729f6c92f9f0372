"""pdfqa API layer: routes, schemas, and middleware."""

from pdfqa.api.middleware import (
    ErrorHandlingMiddleware,
    RequestLoggingMiddleware,
    configure_cors,
    register_error_handlers,
)
from pdfqa.api.routes import router
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

__all__ = [
    "ErrorHandlingMiddleware",
    "RequestLoggingMiddleware",
    "configure_cors",
    "register_error_handlers",
    "router",
    "DocumentSummary",
    "ErrorResponse",
    "HealthResponse",
    "ProcessRequest",
    "ProcessResponse",
    "QueryRequest",
    "QueryResponse",
    "UploadResponse",
]
