"""Deterministic scheduler and clock for testing batch tasks.

ManualScheduler stands in for the event loop: scheduled callbacks sit
in a queue until the test runs them, one turn at a time. ManualClock is
a clock whose time only moves when the test (or the processing function
under test) moves it.

Example:
    >>> from batch_task import BatchTask, BatchTaskOptions
    >>> from batch_task.testing import ManualScheduler
    >>>
    >>> scheduler = ManualScheduler()
    >>> result = []
    >>> task = BatchTask([1, 2, 3, 4, 5], result.append,
    ...                  BatchTaskOptions.iterations(3), scheduler=scheduler)
    >>> scheduler.run_only_pending()
    1
    >>> result
    [1, 2, 3]
    >>> scheduler.run_all()
    1
    >>> task.is_completed()
    True
"""

from __future__ import annotations

from collections import deque

from .exceptions import SchedulerExhaustedError
from .scheduling import Callback


class ManualScheduler:
    """Scheduler whose queue is drained explicitly by the caller.

    A "turn" runs the callbacks that were queued when the turn started.
    Callbacks scheduled while a turn is running wait for the next turn,
    which mirrors how an event loop defers call_soon handles.

    Attributes:
        scheduled_count: Total callbacks ever scheduled.
    """

    DEFAULT_MAX_TURNS = 10_000

    def __init__(self) -> None:
        self._queue: deque[Callback] = deque()
        self.scheduled_count = 0

    def schedule(self, callback: Callback) -> None:
        self._queue.append(callback)
        self.scheduled_count += 1

    @property
    def pending(self) -> int:
        """Number of callbacks waiting to run."""
        return len(self._queue)

    def run_only_pending(self) -> int:
        """Run one turn: the callbacks queued right now.

        Exceptions raised by a callback propagate to the caller, and the
        callbacks after it stay queued.

        Returns:
            Number of callbacks run.
        """
        count = len(self._queue)
        for _ in range(count):
            callback = self._queue.popleft()
            callback()
        return count

    def run_all(self, max_turns: int = DEFAULT_MAX_TURNS) -> int:
        """Run turns until nothing is left to run.

        Args:
            max_turns: Upper bound on turns before giving up.

        Returns:
            Number of turns run.

        Raises:
            SchedulerExhaustedError: If callbacks are still queued after
                max_turns turns.
        """
        turns = 0
        while self._queue:
            if turns >= max_turns:
                raise SchedulerExhaustedError(
                    f"Still {len(self._queue)} callbacks pending after {max_turns} turns"
                )
            self.run_only_pending()
            turns += 1
        return turns

    def clear(self) -> None:
        """Drop every queued callback without running it."""
        self._queue.clear()


class ManualClock:
    """Clock that only moves when told to.

    Args:
        start: Initial reading in milliseconds.
    """

    def __init__(self, start: float = 0.0) -> None:
        self._now = start

    def now(self) -> float:
        return self._now

    def set(self, milliseconds: float) -> None:
        self._now = milliseconds

    def advance(self, milliseconds: float) -> None:
        self._now += milliseconds


__all__ = ["ManualScheduler", "ManualClock"]
