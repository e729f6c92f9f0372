"""Custom exception hierarchy for pdfqa.

All application exceptions inherit from :class:`PdfQAError`, which carries
an optional ``provider_name`` so error handlers can identify which external
service (e.g. "openai", "chromadb", "sqlite") caused the failure.  Each
class also declares the HTTP ``status_code`` the API layer returns for it.

    PdfQAError  (base -- catch-all for any pdfqa error)
    +-- ValidationError        (malformed request, 400)
    |   +-- PayloadTooLargeError (upload over the size limit, 413)
    +-- NotFoundError          (unknown document id, 400)
    +-- AlreadyProcessedError  (document already ingested, 400)
    +-- ConflictError          (namespace / unique-field collision)
    +-- FetchError             (source bytes could not be retrieved)
    +-- ParseError             (source bytes are not a valid PDF)
    +-- UpstreamError          (embedding / index / completion / store failure)
    +-- ConfigurationError     (startup / missing config)

Validation and not-found conditions are raised before any external
service is contacted.  ``UpstreamError`` carries a ``retryable`` flag that
the retry helper in :mod:`pdfqa.utils.retry` uses to decide between
backing off and surfacing the failure immediately.
"""


class PdfQAError(Exception):
    """Base exception for all pdfqa errors.

    Every subclass carries a human-readable ``message`` and an optional
    ``provider_name`` identifying which external service triggered the
    error.  The ``__str__`` method prefixes the provider name in brackets
    for structured log output, e.g. ``[openai] Rate limit exceeded``.
    """

    status_code: int = 500

    def __init__(
        self,
        message: str = "An unexpected error occurred",
        provider_name: str | None = None,
    ) -> None:
        self._message = message
        self._provider_name = provider_name
        super().__init__(self._message)

    @property
    def message(self) -> str:
        return self._message

    @property
    def provider_name(self) -> str | None:
        return self._provider_name

    @property
    def kind(self) -> str:
        """Stable error kind reported to API callers."""
        return type(self).__name__

    def __str__(self) -> str:
        if self._provider_name:
            return f"[{self._provider_name}] {self._message}"
        return self._message


# ---------------------------------------------------------------------------
# Request errors -- detected before any external call
# ---------------------------------------------------------------------------

class ValidationError(PdfQAError):
    """Raised when a request payload is malformed or missing fields."""

    status_code = 400

    def __init__(
        self,
        message: str = "Invalid request",
        provider_name: str | None = None,
    ) -> None:
        super().__init__(message=message, provider_name=provider_name)


class PayloadTooLargeError(ValidationError):
    """Raised when an uploaded file exceeds the configured size limit."""

    status_code = 413

    def __init__(
        self,
        message: str = "Uploaded file is too large",
        provider_name: str | None = None,
    ) -> None:
        super().__init__(message=message, provider_name=provider_name)


class NotFoundError(PdfQAError):
    """Raised when a document id does not exist in the document store."""

    status_code = 400

    def __init__(
        self,
        message: str = "File not found",
        provider_name: str | None = None,
    ) -> None:
        super().__init__(message=message, provider_name=provider_name)


class AlreadyProcessedError(PdfQAError):
    """Raised when ingestion is requested for an already-processed document.

    This is a benign conflict: nothing has been written when it is raised.
    """

    status_code = 400

    def __init__(
        self,
        message: str = "File is already processed",
        provider_name: str | None = None,
    ) -> None:
        super().__init__(message=message, provider_name=provider_name)


class ConflictError(PdfQAError):
    """Raised when a namespace or unique document field already exists."""

    def __init__(
        self,
        message: str = "Resource already exists",
        provider_name: str | None = None,
    ) -> None:
        super().__init__(message=message, provider_name=provider_name)


# ---------------------------------------------------------------------------
# Ingestion-time data errors
# ---------------------------------------------------------------------------

class FetchError(PdfQAError):
    """Raised when the document bytes cannot be retrieved from storage."""

    def __init__(
        self,
        message: str = "Error getting file contents",
        provider_name: str | None = None,
    ) -> None:
        super().__init__(message=message, provider_name=provider_name)


class ParseError(PdfQAError):
    """Raised when the byte stream is not a valid PDF document."""

    def __init__(
        self,
        message: str = "Document could not be parsed",
        provider_name: str | None = None,
    ) -> None:
        super().__init__(message=message, provider_name=provider_name)


# ---------------------------------------------------------------------------
# External service errors
# ---------------------------------------------------------------------------

class UpstreamError(PdfQAError):
    """Raised when an embedding, index, completion or store call fails.

    ``retryable`` marks transient failures (timeouts, connection errors,
    rate limits, 5xx responses).  Terminal failures (4xx, malformed input)
    leave it ``False`` and are surfaced without another attempt.
    """

    def __init__(
        self,
        message: str = "Upstream service call failed",
        provider_name: str | None = None,
        retryable: bool = False,
    ) -> None:
        super().__init__(message=message, provider_name=provider_name)
        self._retryable = retryable

    @property
    def retryable(self) -> bool:
        return self._retryable


class ConfigurationError(PdfQAError):
    """Raised when configuration is invalid or missing at startup."""

    def __init__(
        self,
        message: str = "Invalid or missing configuration",
        provider_name: str | None = None,
    ) -> None:
        super().__init__(message=message, provider_name=provider_name)
