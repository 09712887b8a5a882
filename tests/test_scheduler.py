"""Tests for the cancellation-token schedulers."""

import threading
from unittest.mock import MagicMock

from escalation import CancelToken, ManualScheduler, ThreadingScheduler


class TestManualScheduler:
    """Test cases for ManualScheduler."""

    def test_runs_in_due_order(self):
        scheduler = ManualScheduler()
        order = []
        token = CancelToken()
        scheduler.call_later(3.0, lambda: order.append("c"), token)
        scheduler.call_later(1.0, lambda: order.append("a"), token)
        scheduler.call_later(2.0, lambda: order.append("b"), token)

        assert scheduler.advance(5.0) == 3
        assert order == ["a", "b", "c"]
        assert scheduler.now() == 5.0

    def test_clock_visible_inside_callback(self):
        scheduler = ManualScheduler()
        seen = []
        scheduler.call_later(2.5, lambda: seen.append(scheduler.now()), CancelToken())

        scheduler.advance(10.0)

        assert seen == [2.5]

    def test_token_cancels_every_action(self):
        scheduler = ManualScheduler()
        callback = MagicMock()
        token = CancelToken()
        scheduler.call_later(1.0, callback, token)
        scheduler.call_later(2.0, callback, token)

        token.cancel()

        assert scheduler.advance(5.0) == 0
        callback.assert_not_called()

    def test_action_scheduled_during_advance_runs_if_due(self):
        scheduler = ManualScheduler()
        token = CancelToken()
        hits = []

        def chain():
            hits.append(scheduler.now())
            if len(hits) < 3:
                scheduler.call_later(1.0, chain, token)

        scheduler.call_later(1.0, chain, token)
        scheduler.advance(10.0)

        assert hits == [1.0, 2.0, 3.0]

    def test_callback_error_is_logged_not_raised(self):
        scheduler = ManualScheduler()
        after = MagicMock()
        scheduler.call_later(1.0, MagicMock(side_effect=RuntimeError("bad")), CancelToken())
        scheduler.call_later(2.0, after, CancelToken())

        scheduler.advance(3.0)

        after.assert_called_once()


class TestThreadingScheduler:
    """Test cases for ThreadingScheduler."""

    def test_action_fires(self):
        fired = threading.Event()
        ThreadingScheduler().call_later(0.01, fired.set, CancelToken())
        assert fired.wait(timeout=2)

    def test_cancelled_action_does_not_fire(self):
        fired = threading.Event()
        token = CancelToken()
        ThreadingScheduler().call_later(0.05, fired.set, token)

        token.cancel()

        assert not fired.wait(timeout=0.2)
