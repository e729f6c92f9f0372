"""Translation of ``openai`` SDK exceptions into :class:`UpstreamError`.

Shared by the embedding and completion adapters so both classify failures
the same way: timeouts, connection errors, rate limits and 5xx responses
are retryable; every other API error (4xx, malformed input) is terminal.
"""

from __future__ import annotations

import openai

from pdfqa.utils.errors import UpstreamError


def is_retryable(exc: openai.APIError) -> bool:
    """Return ``True`` for transient OpenAI failures."""
    if isinstance(exc, (openai.APIConnectionError, openai.RateLimitError)):
        # APITimeoutError is a subclass of APIConnectionError.
        return True
    if isinstance(exc, openai.APIStatusError):
        return exc.status_code >= 500
    return False


def to_upstream_error(exc: openai.APIError, label: str, provider_name: str) -> UpstreamError:
    """Wrap *exc* in an :class:`UpstreamError`; the caller raises it ``from exc``."""
    if isinstance(exc, openai.APITimeoutError):
        message = f"{label} timed out"
    else:
        message = f"{label} API error: {exc}"
    return UpstreamError(
        message=message,
        provider_name=provider_name,
        retryable=is_retryable(exc),
    )
