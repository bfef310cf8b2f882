from __future__ import annotations

import asyncio
from typing import Awaitable, Callable, Optional

from greenhub.core.exceptions import OperationCancelledError

SleepFn = Callable[[float], Awaitable[None]]


class CancellationToken:
    """
    Cooperative cancellation flag handed to async operations.

    The owner of a consuming context (a page, a callback, a test) keeps the
    token and calls cancel() when the context goes away. Operations check the
    token after every suspension point and discard their result instead of
    applying it to a stale context.
    """

    def __init__(self) -> None:
        self._cancelled = False

    @property
    def cancelled(self) -> bool:
        return self._cancelled

    def cancel(self) -> None:
        self._cancelled = True

    def raise_if_cancelled(self) -> None:
        if self._cancelled:
            raise OperationCancelledError("Operation was cancelled")


async def simulated_latency(
    seconds: float,
    token: Optional[CancellationToken] = None,
    sleep: SleepFn = asyncio.sleep,
) -> None:
    """
    Wait `seconds` through `sleep`, then fail if `token` was cancelled meanwhile.

    `sleep` is injectable so tests can resolve immediately, or cancel the token
    from inside the wait.
    """
    if token is not None:
        token.raise_if_cancelled()
    await sleep(max(seconds, 0.0))
    if token is not None:
        token.raise_if_cancelled()
