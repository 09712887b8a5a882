"""
escalation/scheduler.py

Delayed actions paired with cancellation tokens.

Whoever holds the CancelToken owns the right to cancel: the escalation
controller hands one token to every tick of a countdown, the hazard monitor
hands one to every emission of an armed session. Cancelling the token stops
every action scheduled with it, including ones that were scheduled after
the timer handle was lost.

Two schedulers share the same interface:

    ThreadingScheduler - real time, one threading.Timer per action
    ManualScheduler    - virtual clock advanced explicitly; used by tests
                         and simulations so schedules are deterministic
"""

from __future__ import annotations

import heapq
import itertools
import logging
import threading
import time
from typing import Callable

logger = logging.getLogger(__name__)


class CancelToken:
    """A one-way flag shared by every action of one cancellable operation."""

    def __init__(self):
        self._cancelled = threading.Event()

    def cancel(self) -> None:
        self._cancelled.set()

    @property
    def cancelled(self) -> bool:
        return self._cancelled.is_set()


class ScheduledAction:
    """
    A callback due at a point in time, guarded by a CancelToken.

    run() is a no-op once the token (or the action itself) is cancelled.
    """

    def __init__(self, callback: Callable[[], None], token: CancelToken, due: float):
        self._callback = callback
        self.token = token
        self.due = due
        self._cancelled = False
        self._timer: threading.Timer | None = None

    @property
    def cancelled(self) -> bool:
        return self._cancelled or self.token.cancelled

    def cancel(self) -> None:
        self._cancelled = True
        if self._timer is not None:
            self._timer.cancel()

    def run(self) -> None:
        if self.cancelled:
            return
        try:
            self._callback()
        except Exception as exc:
            # Timer threads have no caller to report to.
            logger.error("Scheduled action failed: %s", exc, exc_info=True)


class ThreadingScheduler:
    """Runs each action on its own daemon threading.Timer."""

    def now(self) -> float:
        return time.monotonic()

    def call_later(self, delay: float, callback: Callable[[], None], token: CancelToken) -> ScheduledAction:
        action = ScheduledAction(callback, token, due=self.now() + delay)
        timer = threading.Timer(max(0.0, delay), action.run)
        timer.daemon = True
        action._timer = timer
        timer.start()
        return action


class ManualScheduler:
    """
    Scheduler driven by a virtual clock.

    Nothing runs until advance() is called. Actions fire in due-time order
    (ties in scheduling order), and actions scheduled while advancing also
    fire if they fall inside the advanced window.

    Usage
    -----
        scheduler = ManualScheduler()
        scheduler.call_later(6.0, fire, CancelToken())
        scheduler.advance(3.0)   # nothing yet
        scheduler.advance(3.0)   # fire() runs at t=6.0
    """

    def __init__(self, start: float = 0.0):
        self._now = start
        self._queue: list[tuple[float, int, ScheduledAction]] = []
        self._counter = itertools.count()

    def now(self) -> float:
        return self._now

    def call_later(self, delay: float, callback: Callable[[], None], token: CancelToken) -> ScheduledAction:
        action = ScheduledAction(callback, token, due=self._now + max(0.0, delay))
        heapq.heappush(self._queue, (action.due, next(self._counter), action))
        return action

    def advance(self, seconds: float) -> int:
        """
        Move the clock forward and run every action that falls due.

        Returns the number of actions that actually ran.
        """
        target = self._now + seconds
        ran = 0
        while self._queue and self._queue[0][0] <= target:
            due, _, action = heapq.heappop(self._queue)
            self._now = due
            if action.cancelled:
                continue
            action.run()
            ran += 1
        self._now = target
        return ran

    @property
    def pending(self) -> int:
        """Number of queued actions that have not been cancelled."""
        return sum(1 for _, _, action in self._queue if not action.cancelled)
