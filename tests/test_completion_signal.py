"""CompletionSignal tests.

These tests verify:
- The signal settles at most once
- Listeners attached before and after settlement are notified
- Rejections surface TaskCanceledError without requiring a listener
"""

from __future__ import annotations

import asyncio
import gc

import pytest

from batch_task import CompletionSignal, TaskCanceledError


class TestSettlement:
    """Test resolving and rejecting the signal."""

    def test_starts_pending(self):
        """Test a new signal is not settled."""
        signal = CompletionSignal()

        assert not signal.is_settled()
        assert not signal.is_resolved()
        assert not signal.is_rejected()
        assert "pending" in repr(signal)

    def test_resolve(self):
        """Test resolving the signal."""
        signal = CompletionSignal()

        assert signal._resolve() is True
        assert signal.is_resolved()
        assert signal.result(timeout=0) is None
        assert signal.exception(timeout=0) is None
        assert "resolved" in repr(signal)

    def test_reject(self):
        """Test rejecting the signal."""
        signal = CompletionSignal()

        assert signal._reject(TaskCanceledError()) is True
        assert signal.is_rejected()
        assert isinstance(signal.exception(timeout=0), TaskCanceledError)
        with pytest.raises(TaskCanceledError, match="canceled"):
            signal.result(timeout=0)
        assert "rejected" in repr(signal)

    def test_settles_only_once(self):
        """Test later settle attempts are ignored."""
        signal = CompletionSignal()

        signal._resolve()

        assert signal._reject(TaskCanceledError()) is False
        assert signal._resolve() is False
        assert signal.is_resolved()

    def test_result_times_out_when_pending(self):
        """Test waiting on a pending signal honors the timeout."""
        signal = CompletionSignal()

        with pytest.raises(TimeoutError):
            signal.result(timeout=0)


class TestListeners:
    """Test done callbacks."""

    def test_listener_called_on_settlement(self):
        """Test listeners run when the signal settles."""
        signal = CompletionSignal()
        calls: list[CompletionSignal] = []

        signal.add_done_callback(calls.append)
        assert calls == []

        signal._resolve()
        assert calls == [signal]

    def test_many_listeners(self):
        """Test every listener is notified exactly once."""
        signal = CompletionSignal()
        calls: list[str] = []

        signal.add_done_callback(lambda _: calls.append("first"))
        signal.add_done_callback(lambda _: calls.append("second"))
        signal._reject(TaskCanceledError())
        signal._reject(TaskCanceledError())

        assert calls == ["first", "second"]

    def test_late_listener_called_immediately(self):
        """Test a listener added after settlement runs right away."""
        signal = CompletionSignal()
        signal._reject(TaskCanceledError())
        outcomes: list[BaseException | None] = []

        signal.add_done_callback(lambda s: outcomes.append(s.exception()))

        assert len(outcomes) == 1
        assert isinstance(outcomes[0], TaskCanceledError)


class TestUnobservedRejection:
    """Test that nobody is forced to observe a rejection."""

    def test_no_diagnostic_for_unobserved_rejection(self, caplog):
        """Test a rejected signal nobody looked at is collected silently."""
        signal = CompletionSignal()
        signal._reject(TaskCanceledError())

        del signal
        gc.collect()

        assert "never retrieved" not in caplog.text


class TestAbandonedWaiter:
    """Test settling a signal after a waiting loop has gone away."""

    def test_settle_after_waiting_loop_closed(self, caplog):
        """Test no callback error is logged when the waiter's loop is closed."""
        signal = CompletionSignal()
        loop = asyncio.new_event_loop()
        try:
            with pytest.raises(TimeoutError):
                loop.run_until_complete(asyncio.wait_for(signal.wait(), 0.01))
        finally:
            loop.close()

        signal._reject(TaskCanceledError())

        assert signal.is_rejected()
        assert "exception calling callback" not in caplog.text
