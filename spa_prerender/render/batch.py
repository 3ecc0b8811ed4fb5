# File: spa_prerender/render/batch.py
"""
Wave-based concurrency limiter.

Up to ``max_concurrent`` coroutines run together; the next wave starts only
after the whole current wave has finished. There is no work stealing: a slow
task holds back the start of the following wave.
"""
from __future__ import annotations

import asyncio
from typing import Awaitable, Callable, List, Optional, TypeVar

T = TypeVar("T")

__all__ = ("batch_requests",)


async def batch_requests(
    total_requests: int,
    max_concurrent: Optional[int],
    make_request: Callable[[int], Awaitable[T]],
) -> List[T]:
    """Issue ``make_request(0) … make_request(total_requests - 1)`` in waves.

    Parameters
    ----------
    total_requests
        Number of requests to issue.
    max_concurrent
        Wave size. ``None`` means a single wave with every request.
    make_request
        Coroutine factory, receives the request index.

    Every task of a wave runs to completion. The failure with the lowest
    index in that wave is then re-raised and no further waves are started.
    Sibling tasks of that wave are not cancelled.
    """
    if max_concurrent is None:
        max_concurrent = total_requests
    if total_requests > 0 and max_concurrent < 1:
        raise ValueError("max_concurrent must be >= 1")

    results: List[T] = []
    i = 0
    while i < total_requests:
        end = min(total_requests, i + max_concurrent)
        wave = [make_request(idx) for idx in range(i, end)]
        i = end
        # every task of the wave settles before a failure leaves this function
        outcomes = await asyncio.gather(*wave, return_exceptions=True)
        for outcome in outcomes:
            if isinstance(outcome, BaseException):
                raise outcome
        results.extend(outcomes)
    return results
