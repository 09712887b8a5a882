"""
escalation/controller.py

The SOS state machine: trigger, per-second countdown, cancel, dispatch.

    Idle --trigger--> CountingDown --tick x N--> Dispatching --always--> Idle
                      CountingDown --cancel----> Idle

Every escalation gets its own CancelToken. Scheduled ticks carry that token,
so a tick left over from a cancelled escalation can never advance a newer
one. All state lives behind one RLock; dispatch itself runs outside the lock
with the state parked at DISPATCHING, which is what lets a late cancel()
answer TOO_LATE instead of waiting for the notifications to finish.

Usage
-----
    controller = EscalationController(
        profile_store=store,
        notifier=LoggingNotifier(),
        scheduler=ThreadingScheduler(),
        on_status=print,
    )
    controller.trigger()      # CountingDown(10)
    controller.cancel()       # back to Idle, nothing sent
"""

from __future__ import annotations

import logging
import threading
import time
from dataclasses import dataclass
from enum import Enum
from typing import Callable

from capabilities.haptics import SOS_PATTERN, NullHaptics
from escalation.notifier import (
    DEFAULT_NOTIFY_TIMEOUT,
    DispatchResult,
    Location,
    NotificationDispatcher,
    dispatch_to_contacts,
)
from escalation.scheduler import CancelToken, ScheduledAction
from profile_store.models import InvalidPreferenceError
from profile_store.store import ProfileStore

logger = logging.getLogger(__name__)

TICK_SECONDS = 1.0


# ---------------------------------------------------------------------------
# States and results
# ---------------------------------------------------------------------------

class EscalationState(str, Enum):
    IDLE = "idle"
    COUNTING_DOWN = "counting_down"
    DISPATCHING = "dispatching"


class TriggerResult(str, Enum):
    STARTED = "started"
    ALREADY_ACTIVE = "already_active"


class CancelResult(str, Enum):
    """
    CANCELLED   - a countdown was running and has been stopped.
    NOT_ACTIVE  - nothing to cancel; no effect.
    TOO_LATE    - dispatch already started and will complete.
    """
    CANCELLED = "cancelled"
    NOT_ACTIVE = "not_active"
    TOO_LATE = "too_late"


@dataclass(frozen=True)
class EscalationSnapshot:
    """What the UI renders. `deadline` is on the scheduler's clock."""
    state: EscalationState
    remaining: int = 0
    deadline: float | None = None


# ---------------------------------------------------------------------------
# Main class
# ---------------------------------------------------------------------------

class EscalationController:
    """
    Owns the SOS countdown and the final dispatch to emergency contacts.

    Parameters
    ----------
    profile_store : ProfileStore
        Source of the countdown length, haptic preference, contacts and
        medical info. Read at trigger time and again at dispatch time.

    notifier : NotificationDispatcher
        Delivers the alert to each contact.

    scheduler : ThreadingScheduler | ManualScheduler | None
        Drives the one-second ticks. With None, ticks only happen when
        tick() is called, which is how the state machine is stepped by hand.

    haptics : HapticDevice | None
        Vibrated with SOS_PATTERN on trigger when haptic feedback is on.

    location_provider : Callable[[], Location | None] | None
        Called once per dispatch for the location sent to contacts.

    on_status : Callable[[str], None] | None
        Receives a human-readable line at each transition. Hook this to
        the UI's notification area.

    notify_timeout : float
        Seconds each contact gets before it is marked failed.
    """

    def __init__(
        self,
        profile_store: ProfileStore,
        notifier: NotificationDispatcher,
        scheduler=None,
        haptics=None,
        location_provider: Callable[[], Location | None] | None = None,
        on_status: Callable[[str], None] | None = None,
        notify_timeout: float = DEFAULT_NOTIFY_TIMEOUT,
    ):
        self._store = profile_store
        self._notifier = notifier
        self._scheduler = scheduler
        self._haptics = haptics or NullHaptics()
        self._location_provider = location_provider
        self._on_status = on_status
        self._notify_timeout = notify_timeout

        self._lock = threading.RLock()
        self._state = EscalationState.IDLE
        self._remaining = 0
        self._deadline: float | None = None
        self._token: CancelToken | None = None
        self._pending: ScheduledAction | None = None
        self._last_dispatch: DispatchResult | None = None

    # -----------------------------------------------------------------------
    # Public API
    # -----------------------------------------------------------------------

    @property
    def state(self) -> EscalationState:
        with self._lock:
            return self._state

    @property
    def last_dispatch(self) -> DispatchResult | None:
        with self._lock:
            return self._last_dispatch

    def snapshot(self) -> EscalationSnapshot:
        with self._lock:
            return EscalationSnapshot(self._state, self._remaining, self._deadline)

    def trigger(self) -> TriggerResult:
        """
        Start the SOS countdown.

        Returns ALREADY_ACTIVE, with no side effects, if a countdown or
        dispatch is already under way.

        Raises
        ------
        InvalidPreferenceError
            If the stored countdown length is not positive.
        """
        preferences = self._store.get().preferences
        seconds = preferences.sos_countdown_seconds
        if seconds <= 0:
            raise InvalidPreferenceError(f"sos_countdown_seconds must be positive, got {seconds}")

        with self._lock:
            if self._state is not EscalationState.IDLE:
                logger.info("Trigger ignored | state=%s", self._state.value)
                return TriggerResult.ALREADY_ACTIVE

            token = CancelToken()
            self._token = token
            self._state = EscalationState.COUNTING_DOWN
            self._remaining = seconds
            self._deadline = self._now() + seconds * TICK_SECONDS
            self._schedule_tick(token)

        logger.warning("ESCALATION TRIGGERED | countdown=%ds", seconds)
        if preferences.haptic_feedback:
            self._haptics.vibrate(SOS_PATTERN)
        self._status(f"EMERGENCY MODE ACTIVATED - SOS will activate in {seconds} seconds")
        return TriggerResult.STARTED

    def tick(self) -> DispatchResult | None:
        """
        Advance the countdown by one second.

        Returns the DispatchResult on the tick that reaches zero, otherwise
        None. Outside CountingDown this does nothing.
        """
        return self._advance(token=None)

    def cancel(self) -> CancelResult:
        """
        Stop a running countdown. Safe to call in any state.

        Once this returns CANCELLED no tick of the cancelled escalation
        will run.
        """
        with self._lock:
            if self._state is EscalationState.IDLE:
                return CancelResult.NOT_ACTIVE
            if self._state is EscalationState.DISPATCHING:
                logger.info("Cancel arrived after dispatch started.")
                return CancelResult.TOO_LATE

            remaining = self._remaining
            self._stop_timer()
            self._reset()

        logger.info("Escalation cancelled | remaining=%ds", remaining)
        self._status("Emergency cancelled - SOS has been deactivated")
        return CancelResult.CANCELLED

    def dispatch(self) -> DispatchResult:
        """
        Notify every emergency contact, lowest priority number first.

        Per-contact failures are collected in the result; this never raises.
        Called by the tick that ends the countdown.
        """
        profile = self._store.get()
        location = self._current_location()

        logger.warning(
            "SOS DISPATCH | user=%s | contacts=%d",
            profile.name or "<unnamed>",
            len(profile.contacts),
        )
        return dispatch_to_contacts(
            self._notifier,
            profile.contacts_by_priority(),
            profile.medical_info,
            location,
            timeout=self._notify_timeout,
        )

    # -----------------------------------------------------------------------
    # Internal helpers
    # -----------------------------------------------------------------------

    def _advance(self, token: CancelToken | None) -> DispatchResult | None:
        with self._lock:
            if self._state is not EscalationState.COUNTING_DOWN:
                return None
            if token is not None and (token is not self._token or token.cancelled):
                return None

            self._remaining -= 1
            if self._remaining > 0:
                # Only timer-driven ticks re-arm the timer.
                if token is not None:
                    self._schedule_tick(token)
                return None

            self._state = EscalationState.DISPATCHING
            self._stop_timer()

        try:
            result = self.dispatch()
        except Exception as exc:
            logger.error("Dispatch failed unexpectedly: %s", exc, exc_info=True)
            result = DispatchResult()

        with self._lock:
            self._last_dispatch = result
            self._reset()
        self._status(
            f"SOS ACTIVATED - {result.succeeded}/{result.attempted} emergency contacts notified"
        )
        return result

    def _schedule_tick(self, token: CancelToken) -> None:
        if self._scheduler is None:
            return
        # Anchored to the deadline so late callbacks do not accumulate drift.
        due = self._deadline - (self._remaining - 1) * TICK_SECONDS
        delay = max(0.0, due - self._scheduler.now())
        self._pending = self._scheduler.call_later(
            delay,
            lambda: self._advance(token),
            token,
        )

    def _stop_timer(self) -> None:
        if self._token is not None:
            self._token.cancel()
        if self._pending is not None:
            self._pending.cancel()
            self._pending = None

    def _reset(self) -> None:
        self._state = EscalationState.IDLE
        self._remaining = 0
        self._deadline = None
        self._token = None

    def _now(self) -> float:
        if self._scheduler is not None:
            return self._scheduler.now()
        return time.monotonic()

    def _current_location(self) -> Location | None:
        if self._location_provider is None:
            return None
        try:
            return self._location_provider()
        except Exception as exc:
            logger.error("Location lookup failed: %s", exc, exc_info=True)
            return None

    def _status(self, msg: str) -> None:
        logger.info("[STATUS] %s", msg)
        if self._on_status:
            try:
                self._on_status(msg)
            except Exception as exc:
                logger.error("Status callback failed: %s", exc, exc_info=True)
