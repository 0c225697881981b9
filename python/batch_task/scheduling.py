"""Scheduler and clock collaborators for batch tasks.

A task never touches the event loop or the system clock directly. It
receives a Scheduler, used to defer each batch until the current
synchronous work has unwound, and a Clock, used to measure the time
budget of the milliseconds strategy.

Threading Model:
    Everything runs on the event loop's thread. EventLoopScheduler uses
    loop.call_soon, which is not thread-safe; tasks must be created and
    canceled from the loop's own thread.
"""

from __future__ import annotations

import asyncio
import time
from collections.abc import Callable
from typing import Protocol, runtime_checkable

Callback = Callable[[], None]


@runtime_checkable
class Scheduler(Protocol):
    """Deferred-execution capability.

    schedule() must never run the callback synchronously. Callbacks
    scheduled through the same scheduler run in FIFO order.
    """

    def schedule(self, callback: Callback) -> None: ...


@runtime_checkable
class Clock(Protocol):
    """Monotonic clock measured in milliseconds."""

    def now(self) -> float: ...


class EventLoopScheduler:
    """Scheduler backed by an asyncio event loop.

    Each callback is queued with loop.call_soon, so it runs on a later
    iteration of the loop, after I/O callbacks and other ready handles
    queued before it.

    Args:
        loop: Loop to schedule on. Defaults to the loop running at the
              time schedule() is called.

    Example:
        >>> async def main():
        ...     task = BatchTask(values, fn, options, scheduler=EventLoopScheduler())
        ...     await task.done
    """

    def __init__(self, loop: asyncio.AbstractEventLoop | None = None) -> None:
        self._loop = loop

    @property
    def loop(self) -> asyncio.AbstractEventLoop:
        """The bound loop, or the currently running one.

        Raises:
            RuntimeError: If no loop was given and none is running.
        """
        if self._loop is not None:
            return self._loop
        return asyncio.get_running_loop()

    def schedule(self, callback: Callback) -> None:
        self.loop.call_soon(callback)


class MonotonicClock:
    """Clock reading time.perf_counter(), in milliseconds."""

    def now(self) -> float:
        return time.perf_counter() * 1000.0


__all__ = [
    "Callback",
    "Scheduler",
    "Clock",
    "EventLoopScheduler",
    "MonotonicClock",
]
