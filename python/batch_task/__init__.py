"""
Batch Task

Cooperative batch processing for asyncio applications: apply a function
to every value of a sequence in small batches, yielding to the event
loop between batches so that other callbacks keep running.

Example:
    >>> import batch_task
    >>> batch_task.__version__
    '0.1.1'

    >>> # Process rows in batches of 500, yielding between batches
    >>> from batch_task import BatchTask, BatchTaskOptions
    >>> task = BatchTask(rows, index_row, BatchTaskOptions.iterations(500))
    >>> await task.done

    >>> # Or spend at most ~8ms per batch
    >>> task = BatchTask(rows, index_row, {"budget": "milliseconds", "amount": 8})

    >>> # Stop early by returning False, or cancel from the outside
    >>> task.cancel()
    >>> task.is_canceled()
    True
"""

from __future__ import annotations

from batch_task.completion import CompletionSignal

# Exceptions
from batch_task.exceptions import (
    BatchTaskError,
    InvalidBatchOptionsError,
    SchedulerExhaustedError,
    TaskCanceledError,
)

# Logging functions
from batch_task.logging import (
    configure_logging,
    log_debug,
    log_error,
    log_info,
    log_trace,
    log_warn,
)
from batch_task.scheduling import Clock, EventLoopScheduler, MonotonicClock, Scheduler
from batch_task.task import STOP, BatchTask, ProcessingFunction, run_in_batches
from batch_task.types import (
    BatchBudget,
    BatchTaskOptions,
    BatchTaskProgress,
    LogContext,
    TaskStatus,
)

__version__ = "0.1.1"


def version() -> str:
    """Return the package version string."""
    return __version__


__all__ = [
    # Version
    "__version__",
    "version",
    # Task
    "BatchTask",
    "ProcessingFunction",
    "STOP",
    "run_in_batches",
    "CompletionSignal",
    # Collaborators
    "Scheduler",
    "Clock",
    "EventLoopScheduler",
    "MonotonicClock",
    # Types
    "BatchBudget",
    "BatchTaskOptions",
    "BatchTaskProgress",
    "LogContext",
    "TaskStatus",
    # Exceptions
    "BatchTaskError",
    "TaskCanceledError",
    "InvalidBatchOptionsError",
    "SchedulerExhaustedError",
    # Logging
    "configure_logging",
    "log_error",
    "log_warn",
    "log_info",
    "log_debug",
    "log_trace",
]
