"""Pydantic models for batch-task.

This module provides type-safe configuration and status models for
cooperative batch tasks, using Pydantic v2 for validation.
"""

from __future__ import annotations

import math
from enum import Enum
from typing import Any

from pydantic import BaseModel, Field, ValidationInfo, field_validator


class BatchBudget(str, Enum):
    """Strategies used to divide a task into batches."""

    ITERATIONS = "iterations"
    """Each batch processes a fixed number of elements."""

    MILLISECONDS = "milliseconds"
    """Each batch processes elements until a time budget is spent."""


class TaskStatus(str, Enum):
    """Batch task lifecycle states.

    A task starts RUNNING and moves exactly once to one of the two
    terminal states.
    """

    RUNNING = "running"
    """Task is scheduled or processing batches."""

    CANCELED = "canceled"
    """Task was canceled before it could complete."""

    COMPLETED = "completed"
    """Task processed every element or was stopped by the processing function."""

    @property
    def is_terminal(self) -> bool:
        return self is not TaskStatus.RUNNING


class BatchTaskOptions(BaseModel):
    """Batching strategy for a task.

    The task can be divided into batches that either contain a fixed
    amount of iterations, or that take a fixed amount of time (in
    milliseconds) to complete.

    Example:
        >>> options = BatchTaskOptions(budget="iterations", amount=100)
        >>> options = BatchTaskOptions.milliseconds(8)
        >>> options = BatchTaskOptions.model_validate(
        ...     {"budget": "milliseconds", "amount": 16}
        ... )
    """

    budget: BatchBudget = Field(description="Batching strategy.")
    amount: int | float = Field(
        description=(
            "Elements per batch for the iterations budget, "
            "milliseconds per batch for the milliseconds budget."
        ),
    )

    model_config = {"extra": "forbid", "frozen": True}

    @field_validator("amount", mode="before")
    @classmethod
    def reject_bool_amount(cls, value: Any) -> Any:
        if isinstance(value, bool):
            raise ValueError("amount must be a number, not a boolean")
        return value

    @field_validator("amount")
    @classmethod
    def check_amount(cls, value: int | float, info: ValidationInfo) -> int | float:
        if not math.isfinite(value) or value <= 0:
            raise ValueError("amount must be a positive finite number")
        if info.data.get("budget") is not BatchBudget.ITERATIONS:
            return value
        if isinstance(value, float):
            if not value.is_integer():
                raise ValueError("iterations budget requires a whole number amount")
            return int(value)
        return value

    @classmethod
    def iterations(cls, amount: int) -> BatchTaskOptions:
        """Batches of at most ``amount`` elements."""
        return cls(budget=BatchBudget.ITERATIONS, amount=amount)

    @classmethod
    def milliseconds(cls, amount: float) -> BatchTaskOptions:
        """Batches that run for about ``amount`` milliseconds."""
        return cls(budget=BatchBudget.MILLISECONDS, amount=amount)

    @classmethod
    def atomic(cls) -> BatchTaskOptions:
        """One element per batch, yielding to the scheduler after every element."""
        return cls(budget=BatchBudget.ITERATIONS, amount=1)


class BatchTaskProgress(BaseModel):
    """Point-in-time snapshot of a task's progress.

    Example:
        >>> progress = task.progress()
        >>> print(f"{progress.processed}/{progress.total} in {progress.batches_run} batches")
    """

    total: int = Field(description="Number of input values.")
    cursor: int = Field(description="Index of the next value to process.")
    processed: int = Field(description="Number of times the processing function was called.")
    batches_run: int = Field(description="Number of batches that started processing.")
    status: TaskStatus = Field(description="Current lifecycle state.")

    @property
    def remaining(self) -> int:
        return self.total - self.cursor


class LogContext(BaseModel):
    """Context fields for structured logging.

    Example:
        >>> context = LogContext(task_name="reindex", budget="iterations")
        >>> log_info("Task canceled", context)
    """

    task_name: str | None = Field(
        default=None,
        description="Name of the batch task.",
    )
    budget: str | None = Field(
        default=None,
        description="Batching strategy in use.",
    )
    correlation_id: str | None = Field(
        default=None,
        description="Correlation ID for tracing.",
    )
    operation: str | None = Field(
        default=None,
        description="Current operation name.",
    )


__all__ = [
    "BatchBudget",
    "TaskStatus",
    "BatchTaskOptions",
    "BatchTaskProgress",
    "LogContext",
]
