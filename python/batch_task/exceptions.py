"""Custom exceptions for batch-task.

This module provides a hierarchy of exceptions for error handling
in cooperative batch tasks.
"""

from __future__ import annotations


class BatchTaskError(Exception):
    """Base exception for all batch-task errors.

    All exceptions raised by batch-task inherit from this class,
    making it easy to catch all task-related errors.

    Example:
        >>> try:
        ...     await task.done
        ... except BatchTaskError as e:
        ...     print(f"Batch task error: {e}")
    """

    pass


class TaskCanceledError(BatchTaskError):
    """Raised through the completion signal of a canceled task.

    This is the only error a task produces on its own. It is never
    raised by cancel() itself, only surfaced to whoever observes the
    task's ``done`` signal.

    Example:
        >>> task.cancel()
        >>> try:
        ...     await task.done
        ... except TaskCanceledError as e:
        ...     print(e)
        canceled
    """

    def __init__(self, message: str = "canceled") -> None:
        super().__init__(message)


class InvalidBatchOptionsError(BatchTaskError, ValueError):
    """Raised when a task is constructed with invalid batching options.

    Common causes:
    - Unknown budget (only "iterations" and "milliseconds" exist)
    - Non-positive amount
    - Fractional amount for the iterations budget

    Example:
        >>> try:
        ...     BatchTask(values, fn, {"budget": "iterations", "amount": 0})
        ... except InvalidBatchOptionsError as e:
        ...     print(f"Bad options: {e}")
    """

    pass


class SchedulerExhaustedError(BatchTaskError):
    """Raised when a manual scheduler keeps producing work past its turn limit.

    This usually means a task keeps re-arming itself, for example a
    processing function that never lets the cursor reach the end.
    """

    pass


__all__ = [
    "BatchTaskError",
    "TaskCanceledError",
    "InvalidBatchOptionsError",
    "SchedulerExhaustedError",
]
