"""Deadline and bounded-retry wrapper for external service calls.

Every call the pipelines make to an external collaborator (embedding,
vector index, completion, document store) goes through :func:`call_upstream`:

1. **Deadline** -- the call runs under ``asyncio.wait_for``; exceeding
   ``timeout`` becomes a retryable :class:`UpstreamError`.
2. **Retry** -- retryable :class:`UpstreamError` failures are re-attempted
   up to ``max_attempts`` times with exponential backoff
   (``backoff * 2 ** (attempt - 1)``).  Terminal failures and every other
   :class:`PdfQAError` surface immediately.

``max_attempts=1`` gives the plain single-shot behaviour.
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass
from typing import Awaitable, Callable, TypeVar

import structlog

from pdfqa.utils.errors import UpstreamError
from pdfqa.utils.logging import get_logger

_T = TypeVar("_T")

_logger: structlog.BoundLogger = get_logger(__name__)


@dataclass(frozen=True)
class RetryPolicy:
    """Deadline and retry parameters for one class of upstream calls."""

    timeout: float = 30.0
    max_attempts: int = 3
    backoff: float = 0.5

    @classmethod
    def from_config(cls, section: dict) -> "RetryPolicy":
        """Build a policy from the ``upstream`` section of the YAML config."""
        return cls(
            timeout=float(section.get("timeout_seconds", cls.timeout)),
            max_attempts=max(1, int(section.get("max_attempts", cls.max_attempts))),
            backoff=float(section.get("backoff_seconds", cls.backoff)),
        )


async def call_upstream(
    operation: str,
    fn: Callable[[], Awaitable[_T]],
    policy: RetryPolicy | None = None,
) -> _T:
    """Await ``fn()`` under the policy's deadline, retrying transient failures.

    Parameters
    ----------
    operation:
        Short name used in log events and error messages (e.g. ``"embed_query"``).
    fn:
        Zero-argument factory returning a fresh awaitable per attempt.
    policy:
        Deadline / retry parameters.  Defaults to :class:`RetryPolicy()`.

    Raises
    ------
    UpstreamError
        When the final attempt fails or a terminal failure occurs.
    """
    policy = policy or RetryPolicy()

    for attempt in range(1, policy.max_attempts + 1):
        try:
            return await asyncio.wait_for(fn(), timeout=policy.timeout)
        except asyncio.TimeoutError as exc:
            error = UpstreamError(
                message=f"{operation} exceeded {policy.timeout}s deadline",
                retryable=True,
            )
            error.__cause__ = exc
        except UpstreamError as exc:
            error = exc

        if not error.retryable or attempt >= policy.max_attempts:
            raise error

        delay = policy.backoff * (2 ** (attempt - 1))
        _logger.warning(
            "upstream_retry",
            operation=operation,
            attempt=attempt,
            max_attempts=policy.max_attempts,
            backoff_s=delay,
            error=str(error),
        )
        await asyncio.sleep(delay)

    # Unreachable: the loop either returns or raises.
    raise UpstreamError(message=f"{operation} failed")
