"""pytest configuration and fixtures for batch_task tests.

This module provides shared fixtures for driving batch tasks
deterministically: a manual scheduler standing in for the event loop,
a manual clock, and a result list for processing functions to fill.
"""

from __future__ import annotations

from collections.abc import Callable

import pytest

from batch_task.testing import ManualClock, ManualScheduler


@pytest.fixture
def manual_scheduler() -> ManualScheduler:
    """Provide a scheduler whose turns are run explicitly by the test."""
    return ManualScheduler()


@pytest.fixture
def manual_clock() -> ManualClock:
    """Provide a clock starting at 0ms that only moves when told to."""
    return ManualClock()


@pytest.fixture
def result() -> list[int]:
    """Provide an empty list for processing functions to append to."""
    return []


@pytest.fixture
def push_incremented(result: list[int]) -> Callable[[int], None]:
    """Provide a processing function appending ``value + 1`` to result."""

    def callback(value: int) -> None:
        result.append(value + 1)

    return callback


# Markers for test categorization
def pytest_configure(config):
    """Configure custom pytest markers."""
    config.addinivalue_line(
        "markers",
        "real_loop: marks tests that run tasks on a real asyncio loop",
    )
