"""API middleware: CORS, request logging, and error handling.

Provides helper functions and middleware classes to configure cross-origin
resource sharing, structured request logging (via structlog), and automatic
conversion of ``PdfQAError`` subclasses into JSON ``ErrorResponse`` bodies.

Starlette middleware is a stack (last added, first executed).  In main.py:

    app.add_middleware(ErrorHandlingMiddleware)    # added 1st -> inner
    app.add_middleware(RequestLoggingMiddleware)   # added 2nd -> outermost

so RequestLoggingMiddleware sees the final status code, including the
ones ErrorHandlingMiddleware produced.
"""

from __future__ import annotations

import time
import uuid

import structlog
from fastapi import FastAPI, Request, Response
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint

from pdfqa.api.schemas import ErrorResponse
from pdfqa.utils.errors import PdfQAError, ValidationError
from pdfqa.utils.logging import get_logger

_logger: structlog.BoundLogger = get_logger(__name__)


# ---------------------------------------------------------------------------
# CORS
# ---------------------------------------------------------------------------


def configure_cors(app: FastAPI, *, allowed_origins: list[str] | None = None) -> None:
    """Add CORS middleware to the FastAPI application.

    Parameters
    ----------
    app:
        The FastAPI application instance.
    allowed_origins:
        Explicit list of allowed origins.  Defaults to ``["*"]`` for
        development; override with specific origins in production.
    """
    origins = allowed_origins or ["*"]
    app.add_middleware(
        CORSMiddleware,
        allow_origins=origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )


# ---------------------------------------------------------------------------
# Request Logging
# ---------------------------------------------------------------------------


REQUEST_ID_HEADER = "X-Request-ID"


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """Log every HTTP request with method, path, status code, and duration.

    A request id (taken from ``X-Request-ID`` or generated) is bound to the
    structlog context for the whole request, so pipeline events logged
    while serving it carry the same ``request_id``.  The id is echoed back
    in the response header.
    """

    async def dispatch(
        self,
        request: Request,
        call_next: RequestResponseEndpoint,
    ) -> Response:
        request_id = request.headers.get(REQUEST_ID_HEADER) or uuid.uuid4().hex
        start = time.perf_counter()
        response: Response | None = None

        try:
            with structlog.contextvars.bound_contextvars(request_id=request_id):
                response = await call_next(request)
            response.headers[REQUEST_ID_HEADER] = request_id
            return response
        finally:
            duration_ms = round((time.perf_counter() - start) * 1000, 2)
            status_code = response.status_code if response else 500
            _logger.info(
                "http_request",
                method=request.method,
                path=str(request.url.path),
                status=status_code,
                duration_ms=duration_ms,
                request_id=request_id,
            )


# ---------------------------------------------------------------------------
# Error Handling
# ---------------------------------------------------------------------------


def error_response(exc: PdfQAError) -> JSONResponse:
    """Build the JSON response for *exc* using its class's status code."""
    body = ErrorResponse(error=exc.kind, detail=exc.message)
    return JSONResponse(status_code=exc.status_code, content=body.model_dump())


class ErrorHandlingMiddleware(BaseHTTPMiddleware):
    """Catch ``PdfQAError`` subclasses and return structured JSON errors.

    The client only sees the error kind and message; provider details and
    stack traces stay in the server log.  Generic Python exceptions bubble
    up to Starlette's default 500 handler.
    """

    async def dispatch(
        self,
        request: Request,
        call_next: RequestResponseEndpoint,
    ) -> Response:
        try:
            return await call_next(request)
        except PdfQAError as exc:
            log = _logger.warning if exc.status_code < 500 else _logger.error
            log(
                "application_error",
                error_type=exc.kind,
                message=exc.message,
                provider=exc.provider_name,
                status=exc.status_code,
                path=str(request.url.path),
            )
            return error_response(exc)


async def request_validation_handler(
    request: Request,
    exc: RequestValidationError,
) -> JSONResponse:
    """Answer malformed request bodies with 400 instead of FastAPI's 422."""
    problems = "; ".join(
        f"{'.'.join(str(part) for part in err.get('loc', ()))}: {err.get('msg', '')}"
        for err in exc.errors()
    )
    _logger.warning("request_validation_failed", path=str(request.url.path), detail=problems)
    return error_response(ValidationError(message=problems or "Invalid request"))


def register_error_handlers(app: FastAPI) -> None:
    """Install the error middleware and the request-validation handler."""
    app.add_exception_handler(RequestValidationError, request_validation_handler)
    app.add_middleware(ErrorHandlingMiddleware)
