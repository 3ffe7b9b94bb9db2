"""Cooperative cancellation for in-flight network operations."""

import asyncio
import contextlib
import inspect
from collections.abc import Awaitable
from typing import TypeVar

from pdfchat.errors import OperationCancelled

T = TypeVar("T")


class CancellationToken:
    """One-shot cancellation signal shared by an operation's suspension points.

    Awaiting through :meth:`guard` or :meth:`sleep` races the awaited work
    against the signal; whichever finishes first wins.
    """

    def __init__(self) -> None:
        self._event = asyncio.Event()

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()

    def cancel(self) -> None:
        self._event.set()

    async def guard(self, awaitable: Awaitable[T]) -> T:
        """Await ``awaitable`` unless the token fires first.

        Raises:
            OperationCancelled: If the token fired before the work finished.
        """
        if self._event.is_set():
            if inspect.iscoroutine(awaitable):
                awaitable.close()
            raise OperationCancelled("Operation cancelled")
        work = asyncio.ensure_future(awaitable)
        waiter = asyncio.ensure_future(self._event.wait())
        try:
            done, _ = await asyncio.wait(
                {work, waiter}, return_when=asyncio.FIRST_COMPLETED
            )
        finally:
            waiter.cancel()
            if not work.done():
                work.cancel()
                with contextlib.suppress(asyncio.CancelledError):
                    await work
        if work in done:
            return work.result()
        raise OperationCancelled("Operation cancelled")

    async def sleep(self, seconds: float) -> None:
        """Sleep for ``seconds`` unless the token fires first."""
        await self.guard(asyncio.sleep(seconds))
