"""Bounded fan-out helpers for the ingestion pipeline.

**throttled_gather** is a drop-in replacement for ``asyncio.gather`` that
wraps each awaitable in a semaphore acquire/release, so at most
``limit`` coroutines run at once while results keep input order.  The
ingestion pipeline uses it to embed pages concurrently and then pairs each
result with its page number by position.

With ``return_exceptions=False`` the first failure cancels every awaitable
that has not finished, so nothing queued behind the semaphore is started
after a page has already failed.
"""

from __future__ import annotations

import asyncio
from typing import Awaitable, TypeVar

_T = TypeVar("_T")


async def throttled_gather(
    coros: list[Awaitable[_T]],
    semaphore: asyncio.Semaphore | None = None,
    limit: int = 4,
    return_exceptions: bool = True,
) -> list[_T | BaseException]:
    """Run awaitables concurrently with semaphore throttling.

    Parameters
    ----------
    coros:
        Awaitable objects to execute concurrently.
    semaphore:
        Optional semaphore for concurrency control.  When omitted a fresh
        semaphore of size *limit* is created for this call only.
    limit:
        Concurrency bound used when no *semaphore* is given.  ``1`` runs
        the awaitables strictly one after another, in input order.
    return_exceptions:
        If ``True``, exceptions are returned in the results list rather
        than being raised.  If ``False``, the first exception cancels the
        remaining awaitables and is raised once they have stopped.

    Returns
    -------
    list[_T | BaseException]
        Results in the same order as the input coroutines.
    """
    if semaphore is None:
        semaphore = asyncio.Semaphore(max(1, limit))

    tasks: list[asyncio.Future[_T]] = []

    def _cancel_others() -> None:
        current = asyncio.current_task()
        for task in tasks:
            if task is not current:
                task.cancel()

    async def _wrapped(coro: Awaitable[_T]) -> _T:
        try:
            async with semaphore:
                try:
                    return await coro
                except Exception:
                    # Cancel while still holding the slot so no waiter starts.
                    if not return_exceptions:
                        _cancel_others()
                    raise
        finally:
            # Releases coroutines cancelled before they were ever awaited.
            if asyncio.iscoroutine(coro):
                coro.close()

    tasks.extend(asyncio.ensure_future(_wrapped(c)) for c in coros)
    results = await asyncio.gather(*tasks, return_exceptions=True)

    if not return_exceptions:
        for result in results:
            if isinstance(result, Exception):
                raise result
    return results
