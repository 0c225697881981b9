"""Non-blocking iterative task.

BatchTask uses the event loop to divide an iteration over a sequence
into smaller batches and schedules each batch for deferred execution,
so that a long loop never monopolizes the loop's thread.

The batching strategies are the following:
- iterations: the batches contain a fixed amount of iterations,
- milliseconds: the batches take a fixed amount of time to complete.

Returning False from the processing function stops the iteration,
similarly to what happens when using a ``break`` statement in a
regular loop.

Example:
    >>> import asyncio
    >>> from batch_task import BatchTask, BatchTaskOptions
    >>>
    >>> async def main():
    ...     totals = []
    ...     task = BatchTask(range(100_000), totals.append,
    ...                      BatchTaskOptions.milliseconds(8))
    ...     await task.done
    ...     return len(totals)
    >>>
    >>> asyncio.run(main())
    100000
"""

from __future__ import annotations

import asyncio
from collections.abc import Callable, Generator, Iterable, Mapping
from typing import Any, Generic, TypeVar
from uuid import uuid4

from pydantic import ValidationError

from .completion import CompletionSignal
from .exceptions import InvalidBatchOptionsError, TaskCanceledError
from .logging import log_debug, log_error, log_info, log_trace
from .scheduling import Clock, EventLoopScheduler, MonotonicClock, Scheduler
from .types import BatchBudget, BatchTaskOptions, BatchTaskProgress, TaskStatus

T = TypeVar("T")

ProcessingFunction = Callable[[T], object]

# Returned by a processing function to stop the task early
STOP = False


class BatchTask(Generic[T]):
    """Cooperative task applying a function to each value of a sequence.

    The task is started by the constructor, which schedules the first
    batch and returns before any value is processed. Every batch then
    schedules the next one until the values run out, the processing
    function returns False, or the task is canceled.

    Cancellation is checked once at the start of each batch, never
    between the values of a running batch.

    Args:
        values: Input values. Copied into a tuple at construction.
        processing_fn: Function called with each value in order.
        options: Batching strategy, as BatchTaskOptions or a mapping
                 like ``{"budget": "iterations", "amount": 100}``.
        scheduler: Deferred-execution capability. Defaults to an
                   EventLoopScheduler bound to the running loop.
        clock: Millisecond clock for the milliseconds budget.
        name: Name used in logs. Generated if not provided.

    Raises:
        InvalidBatchOptionsError: If options are invalid.
        RuntimeError: If no scheduler is given and no loop is running.

    Example:
        >>> task = BatchTask(rows, index_row, {"budget": "iterations", "amount": 500})
        >>> task.done.add_done_callback(lambda _: print("indexed"))
        >>> ...
        >>> task.cancel()
    """

    def __init__(
        self,
        values: Iterable[T],
        processing_fn: ProcessingFunction[T],
        options: BatchTaskOptions | Mapping[str, Any],
        *,
        scheduler: Scheduler | None = None,
        clock: Clock | None = None,
        name: str | None = None,
    ) -> None:
        self._options = _coerce_options(options)
        if scheduler is None:
            scheduler = EventLoopScheduler(asyncio.get_running_loop())

        self._values: tuple[T, ...] = tuple(values)
        self._processing_fn = processing_fn
        self._scheduler = scheduler
        self._clock = clock if clock is not None else MonotonicClock()
        self._name = name or f"batch-task-{uuid4().hex[:8]}"

        self._status = TaskStatus.RUNNING
        self._cancel_requested = False
        self._cursor = 0
        self._processed = 0
        self._batches_run = 0
        self._done = CompletionSignal()

        if self._options.budget is BatchBudget.ITERATIONS:
            self._run_batch: Callable[[], None] = self._run_iterations_batch
        else:
            self._run_batch = self._run_milliseconds_batch

        log_debug(
            "BatchTask created",
            {**self._log_fields(), "amount": self._options.amount},
        )
        self._scheduler.schedule(self._run_batch)

    def __repr__(self) -> str:
        return (
            f"<BatchTask {self._name} {self._status.value} "
            f"{self._cursor}/{len(self._values)}>"
        )

    def __await__(self) -> Generator[Any, None, None]:
        return self._done.__await__()

    @property
    def done(self) -> CompletionSignal:
        """Signal resolved as soon as the task terminates successfully,
        and rejected with TaskCanceledError if the task is canceled.
        """
        return self._done

    @property
    def name(self) -> str:
        return self._name

    @property
    def options(self) -> BatchTaskOptions:
        return self._options

    @property
    def status(self) -> TaskStatus:
        return self._status

    @property
    def cancel_requested(self) -> bool:
        """Whether cancel() was ever called, even after completion."""
        return self._cancel_requested

    def is_canceled(self) -> bool:
        """Whether or not the task execution was canceled."""
        return self._status is TaskStatus.CANCELED

    def is_completed(self) -> bool:
        """Whether or not the task has successfully terminated its execution."""
        return self._status is TaskStatus.COMPLETED

    def progress(self) -> BatchTaskProgress:
        return BatchTaskProgress(
            total=len(self._values),
            cursor=self._cursor,
            processed=self._processed,
            batches_run=self._batches_run,
            status=self._status,
        )

    def cancel(self) -> None:
        """Cancel the execution of this task.

        Safe to call any number of times. Has no effect on a task that
        already completed, apart from being recorded in cancel_requested.
        """
        self._cancel_requested = True
        if self._status.is_terminal:
            return

        self._status = TaskStatus.CANCELED
        self._done._reject(TaskCanceledError())
        log_info(
            "BatchTask canceled",
            {**self._log_fields(), "cursor": self._cursor, "total": len(self._values)},
        )

    # =========================================================================
    # Batch execution
    # =========================================================================

    def _run_iterations_batch(self) -> None:
        """Process up to ``amount`` values, then yield."""
        if not self._begin_batch():
            return

        batch_end = self._cursor + self._options.amount
        while self._cursor < batch_end:
            if not self._process_next():
                return

        self._end_batch()

    def _run_milliseconds_batch(self) -> None:
        """Process values until ``amount`` milliseconds have elapsed, then yield.

        The clock is only read between values, so a slow value can make
        the batch overrun its budget by that value's processing time.
        """
        if not self._begin_batch():
            return

        start = self._clock.now()
        while True:
            if not self._process_next():
                return
            if self._clock.now() - start >= self._options.amount:
                break

        self._end_batch()

    def _begin_batch(self) -> bool:
        if self._status.is_terminal:
            log_trace(
                "BatchTask: Skipping batch",
                {**self._log_fields(), "status": self._status.value},
            )
            return False

        self._batches_run += 1
        log_trace(
            "BatchTask: Batch started",
            {**self._log_fields(), "batch": self._batches_run, "cursor": self._cursor},
        )
        return True

    def _end_batch(self) -> None:
        log_trace(
            "BatchTask: Batch finished",
            {**self._log_fields(), "batch": self._batches_run, "cursor": self._cursor},
        )
        # Canceled while the batch was running
        if self._status.is_terminal:
            return

        if self._cursor >= len(self._values):
            self._complete()
        else:
            self._scheduler.schedule(self._run_batch)

    def _process_next(self) -> bool:
        """Apply the processing function to the value at the cursor.

        Returns:
            False once the task has nothing left to process.
        """
        if self._cursor >= len(self._values):
            self._complete()
            return False

        try:
            outcome = self._processing_fn(self._values[self._cursor])
        except Exception as e:
            log_error(
                f"BatchTask: Processing function raised: {e}",
                {
                    **self._log_fields(),
                    "index": self._cursor,
                    "error_type": type(e).__name__,
                },
            )
            raise
        self._processed += 1

        if outcome is STOP:
            log_debug(
                "BatchTask: Stopped by processing function",
                {**self._log_fields(), "index": self._cursor},
            )
            self._complete()
            return False

        self._cursor += 1
        return True

    def _complete(self) -> None:
        if self._status.is_terminal:
            return

        self._status = TaskStatus.COMPLETED
        self._done._resolve()
        log_debug(
            "BatchTask completed",
            {**self._log_fields(), "processed": self._processed, "batches": self._batches_run},
        )

    def _log_fields(self) -> dict[str, Any]:
        return {"task_name": self._name, "budget": self._options.budget.value}


async def run_in_batches(
    values: Iterable[T],
    processing_fn: ProcessingFunction[T],
    options: BatchTaskOptions | Mapping[str, Any],
    *,
    scheduler: Scheduler | None = None,
    clock: Clock | None = None,
    name: str | None = None,
) -> BatchTaskProgress:
    """Run a BatchTask on the running loop and wait for it.

    If the calling coroutine is cancelled, the task is canceled as well.

    Returns:
        The task's final progress snapshot.

    Raises:
        InvalidBatchOptionsError: If options are invalid.
        TaskCanceledError: If the task is canceled by someone else.

    Example:
        >>> progress = await run_in_batches(rows, index_row, BatchTaskOptions.iterations(500))
        >>> progress.processed
        12000
    """
    task = BatchTask(
        values,
        processing_fn,
        options,
        scheduler=scheduler,
        clock=clock,
        name=name,
    )
    try:
        await task.done
    except asyncio.CancelledError:
        task.cancel()
        raise
    return task.progress()


def _coerce_options(options: BatchTaskOptions | Mapping[str, Any]) -> BatchTaskOptions:
    if isinstance(options, BatchTaskOptions):
        return options
    try:
        return BatchTaskOptions.model_validate(dict(options))
    except (ValidationError, TypeError, ValueError) as e:
        raise InvalidBatchOptionsError(f"Invalid batch task options: {e}") from e


__all__ = ["BatchTask", "ProcessingFunction", "STOP", "run_in_batches"]
