"""Bounded-concurrency helpers for batched network work.

**throttled_gather** is a drop-in replacement for ``asyncio.gather`` that
wraps each awaitable in a semaphore acquire/release and, optionally, a
per-item timeout.  It is what keeps an update check over a large library
from opening dozens of simultaneous connections to the source site.

Cancelling the task awaiting ``throttled_gather`` cancels every wrapped
awaitable that is still pending, so a caller backing out of a batch does
not leak in-flight requests.
"""

from __future__ import annotations

import asyncio
from typing import Awaitable, TypeVar

_T = TypeVar("_T")


async def throttled_gather(
    coros: list[Awaitable[_T]],
    semaphore: asyncio.Semaphore,
    timeout: float | None = None,
    return_exceptions: bool = True,
) -> list[_T | BaseException]:
    """Run awaitables concurrently, at most ``semaphore`` slots at a time.

    Parameters
    ----------
    coros:
        Awaitable objects to execute concurrently.
    semaphore:
        Semaphore bounding how many awaitables run simultaneously.
    timeout:
        Optional per-item timeout in seconds, measured from when the item
        acquires its slot.  An expired item yields ``asyncio.TimeoutError``.
    return_exceptions:
        If ``True``, exceptions are returned in the results list rather
        than being raised.  Mirrors ``asyncio.gather`` semantics.

    Returns
    -------
    list[_T | BaseException]
        Results in the same order as the input awaitables.
    """

    async def _wrapped(coro: Awaitable[_T]) -> _T:
        async with semaphore:
            if timeout is None:
                return await coro
            return await asyncio.wait_for(coro, timeout=timeout)

    tasks = [_wrapped(c) for c in coros]
    return await asyncio.gather(*tasks, return_exceptions=return_exceptions)
