"""Utility modules for pdfqa.

- **errors** -- Domain exception hierarchy rooted at PdfQAError; each
  class carries the HTTP status the API layer reports for it.
- **logging** -- structlog setup with a dual-renderer pattern: coloured
  console output in development, structured JSON in production.
- **concurrency** -- semaphore-bounded fan-out used for page embedding.
- **retry** -- request deadlines and bounded retry with backoff for
  upstream calls.
- **locks** -- per-document asyncio locks for ingestion.
"""

from pdfqa.utils.concurrency import throttled_gather
from pdfqa.utils.errors import (
    AlreadyProcessedError,
    ConfigurationError,
    ConflictError,
    FetchError,
    NotFoundError,
    ParseError,
    PayloadTooLargeError,
    PdfQAError,
    UpstreamError,
    ValidationError,
)
from pdfqa.utils.locks import KeyedLock
from pdfqa.utils.logging import configure_logging, get_logger
from pdfqa.utils.retry import RetryPolicy, call_upstream

__all__ = [
    "AlreadyProcessedError",
    "ConfigurationError",
    "ConflictError",
    "FetchError",
    "KeyedLock",
    "NotFoundError",
    "ParseError",
    "PayloadTooLargeError",
    "PdfQAError",
    "RetryPolicy",
    "UpstreamError",
    "ValidationError",
    "call_upstream",
    "configure_logging",
    "get_logger",
    "throttled_gather",
]
