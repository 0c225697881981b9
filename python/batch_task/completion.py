"""Single-resolution completion signal for batch tasks.

The signal is owned and settled by its task; everybody else only
observes it. It settles at most once, either resolved (the task
completed) or rejected with a TaskCanceledError (the task was canceled).

Example:
    >>> task = BatchTask(values, fn, options)
    >>> task.done.add_done_callback(lambda signal: print(signal.is_resolved()))
    >>> await task.done
"""

from __future__ import annotations

import asyncio
from collections.abc import Callable, Generator
from concurrent.futures import Future
from typing import Any

DoneCallback = Callable[["CompletionSignal"], Any]


class CompletionSignal:
    """Read-only view of a task's outcome.

    Backed by a concurrent.futures.Future, which has no event loop
    affinity and never reports a rejection that nobody retrieved. A
    canceled task with no listeners therefore stays silent, while every
    listener that does attach still sees the TaskCanceledError.
    """

    def __init__(self) -> None:
        self._future: Future[None] = Future()

    def __repr__(self) -> str:
        if not self._future.done():
            state = "pending"
        elif self._future.exception() is None:
            state = "resolved"
        else:
            state = "rejected"
        return f"<CompletionSignal {state}>"

    def __await__(self) -> Generator[Any, None, None]:
        return self.wait().__await__()

    def is_settled(self) -> bool:
        return self._future.done()

    def is_resolved(self) -> bool:
        return self._future.done() and self._future.exception() is None

    def is_rejected(self) -> bool:
        return self._future.done() and self._future.exception() is not None

    def add_done_callback(self, fn: DoneCallback) -> None:
        """Call ``fn(signal)`` once the signal settles.

        If the signal has already settled, ``fn`` is called immediately.
        Exceptions raised by ``fn`` are logged by concurrent.futures and
        do not reach the task.
        """
        self._future.add_done_callback(lambda _future: fn(self))

    def result(self, timeout: float | None = None) -> None:
        """Return once resolved.

        Blocks until settled, so only call it with a timeout or from a
        thread other than the one running the task.

        Raises:
            TaskCanceledError: If the task was canceled.
            TimeoutError: If the signal did not settle within timeout seconds.
        """
        return self._future.result(timeout)

    def exception(self, timeout: float | None = None) -> BaseException | None:
        """Return the rejection error, or None if resolved.

        Raises:
            TimeoutError: If the signal did not settle within timeout seconds.
        """
        return self._future.exception(timeout)

    async def wait(self) -> None:
        """Wait for the signal from a coroutine.

        Cancelling the waiting coroutine does not affect the signal.

        Raises:
            TaskCanceledError: If the task was canceled.
        """
        if not self._future.done():
            loop = asyncio.get_running_loop()
            waiter = loop.create_future()
            self._future.add_done_callback(lambda _future: _schedule_wake(loop, waiter))
            await waiter
        self._future.result()

    def _resolve(self) -> bool:
        if self._future.done():
            return False
        self._future.set_result(None)
        return True

    def _reject(self, error: BaseException) -> bool:
        if self._future.done():
            return False
        self._future.set_exception(error)
        return True


def _schedule_wake(loop: asyncio.AbstractEventLoop, waiter: asyncio.Future[None]) -> None:
    # Waiter abandoned along with its loop
    if loop.is_closed():
        return
    loop.call_soon_threadsafe(_wake, waiter)


def _wake(waiter: asyncio.Future[None]) -> None:
    if not waiter.done():
        waiter.set_result(None)


__all__ = ["CompletionSignal", "DoneCallback"]
