"""Model and enum tests.

These tests verify:
- BatchTaskOptions validation for both budgets
- Factory helpers
- TaskStatus terminal states
- BatchTaskProgress snapshots
"""

from __future__ import annotations

import pytest
from pydantic import ValidationError


class TestBatchTaskOptions:
    """Test BatchTaskOptions model."""

    def test_iterations_options(self):
        """Test an iterations budget."""
        from batch_task import BatchBudget, BatchTaskOptions

        options = BatchTaskOptions(budget="iterations", amount=3)
        assert options.budget == BatchBudget.ITERATIONS
        assert options.amount == 3
        assert isinstance(options.amount, int)

    def test_milliseconds_options(self):
        """Test a milliseconds budget accepts fractional amounts."""
        from batch_task import BatchBudget, BatchTaskOptions

        options = BatchTaskOptions(budget="milliseconds", amount=2.5)
        assert options.budget == BatchBudget.MILLISECONDS
        assert options.amount == 2.5

    def test_model_validate_from_dict(self):
        """Test options validate from a plain dict."""
        from batch_task import BatchTaskOptions

        options = BatchTaskOptions.model_validate({"budget": "milliseconds", "amount": 25})
        assert options == BatchTaskOptions.milliseconds(25)

    def test_whole_float_iterations_normalized(self):
        """Test 3.0 iterations becomes the integer 3."""
        from batch_task import BatchTaskOptions

        options = BatchTaskOptions(budget="iterations", amount=3.0)
        assert options.amount == 3
        assert isinstance(options.amount, int)

    @pytest.mark.parametrize(
        "data",
        [
            {"budget": "iterations", "amount": 0},
            {"budget": "iterations", "amount": -1},
            {"budget": "iterations", "amount": 2.5},
            {"budget": "milliseconds", "amount": 0},
            {"budget": "milliseconds", "amount": float("inf")},
            {"budget": "milliseconds", "amount": float("nan")},
            {"budget": "iterations", "amount": True},
            {"budget": "atomic", "amount": 1},
            {"budget": "iterations"},
            {"amount": 3},
            {"budget": "iterations", "amount": 3, "extra": "field"},
        ],
    )
    def test_invalid_options(self, data):
        """Test invalid option combinations are rejected."""
        from batch_task import BatchTaskOptions

        with pytest.raises(ValidationError):
            BatchTaskOptions.model_validate(data)

    def test_options_are_frozen(self):
        """Test options cannot be changed after construction."""
        from batch_task import BatchTaskOptions

        options = BatchTaskOptions.iterations(3)
        with pytest.raises(ValidationError):
            options.amount = 4

    def test_factories(self):
        """Test the factory helpers."""
        from batch_task import BatchBudget, BatchTaskOptions

        assert BatchTaskOptions.iterations(10).budget == BatchBudget.ITERATIONS
        assert BatchTaskOptions.milliseconds(8).budget == BatchBudget.MILLISECONDS

        atomic = BatchTaskOptions.atomic()
        assert atomic.budget == BatchBudget.ITERATIONS
        assert atomic.amount == 1


class TestTaskStatus:
    """Test TaskStatus enum."""

    def test_values(self):
        """Test status string values."""
        from batch_task import TaskStatus

        assert TaskStatus.RUNNING.value == "running"
        assert TaskStatus.CANCELED.value == "canceled"
        assert TaskStatus.COMPLETED.value == "completed"

    def test_terminal_states(self):
        """Test only canceled and completed are terminal."""
        from batch_task import TaskStatus

        assert not TaskStatus.RUNNING.is_terminal
        assert TaskStatus.CANCELED.is_terminal
        assert TaskStatus.COMPLETED.is_terminal


class TestBatchTaskProgress:
    """Test BatchTaskProgress model."""

    def test_remaining(self):
        """Test remaining counts values past the cursor."""
        from batch_task import BatchTaskProgress, TaskStatus

        progress = BatchTaskProgress(
            total=10,
            cursor=4,
            processed=4,
            batches_run=2,
            status=TaskStatus.RUNNING,
        )
        assert progress.remaining == 6

    def test_snapshot_from_task(self, manual_scheduler):
        """Test progress reflects the task at the time it is taken."""
        from batch_task import BatchTask, BatchTaskOptions, TaskStatus

        task = BatchTask(range(5), lambda _: None, BatchTaskOptions.iterations(2), scheduler=manual_scheduler)
        before = task.progress()
        manual_scheduler.run_only_pending()
        after = task.progress()

        assert before.cursor == 0
        assert before.batches_run == 0
        assert after.cursor == 2
        assert after.processed == 2
        assert after.batches_run == 1
        assert after.status == TaskStatus.RUNNING
