# hazard_detection/monitor.py

import logging
import threading
from typing import Iterator, Optional

from escalation.scheduler import CancelToken, ScheduledAction
from .events import HazardEvent, HazardSource, SimulatedHazardSource

logger = logging.getLogger(__name__)


class HazardMonitor:
    """
    Emits hazard events on a randomized schedule while armed.

    Each start() opens a new session: a fresh CancelToken and a fresh
    interval iterator from the source. Every emission schedules the next
    one with the same token, so stop() ends the whole chain by cancelling
    a single token.

    The armed flag is persisted through the profile store and re-checked
    at fire time, under the same lock stop() takes. Once stop() returns no
    emission of the stopped session can run.

    Usage
    -----
    monitor = HazardMonitor(sink, scheduler, store,
                            source=SimulatedHazardSource(random.Random(7)))
    monitor.start()
    ...
    monitor.stop()
    """

    def __init__(self, sink, scheduler, profile_store, source: Optional[HazardSource] = None):
        self._sink      = sink
        self._scheduler = scheduler
        self._store     = profile_store
        self._source    = source or SimulatedHazardSource()

        self._lock      = threading.RLock()
        self._armed     = False
        self._token     : Optional[CancelToken]     = None
        self._intervals : Optional[Iterator[float]] = None
        self._pending   : Optional[ScheduledAction] = None
        self.emitted    = 0

    # ── Public API ────────────────────────────────────────────────────────────

    @property
    def armed(self) -> bool:
        with self._lock:
            return self._armed

    def start(self) -> bool:
        """Arm the monitor. Returns False if it was already armed."""
        with self._lock:
            if self._armed:
                return False
            self._armed     = True
            self._token     = CancelToken()
            self._intervals = self._source.intervals()
            self._store.set_monitor_armed(True)
            self._schedule_next(self._token)

        logger.info("Hazard monitoring enabled.")
        return True

    def stop(self) -> bool:
        """Disarm and cancel the pending emission. Returns False if already stopped."""
        with self._lock:
            was_armed   = self._armed
            self._armed = False
            if self._token is not None:
                self._token.cancel()
            if self._pending is not None:
                self._pending.cancel()
            self._token     = None
            self._pending   = None
            self._intervals = None
            self._store.set_monitor_armed(False)

        if was_armed:
            logger.info("Hazard monitoring disabled.")
        return was_armed

    def emit(self) -> HazardEvent:
        """Pick the next hazard from the source and present it."""
        event = self._source.next_event()
        self.emitted += 1
        logger.info("Hazard | type=%s | severity=%s", event.type, event.severity.value)
        self._sink.present(event)
        return event

    # ── Private helpers ───────────────────────────────────────────────────────

    def _schedule_next(self, token: CancelToken):
        delay = next(self._intervals)
        logger.debug("Next hazard check in %.1fs", delay)
        self._pending = self._scheduler.call_later(delay, lambda: self._fire(token), token)

    def _fire(self, token: CancelToken):
        with self._lock:
            # Disarmed (or restarted) since this emission was scheduled.
            if not self._armed or token is not self._token or token.cancelled:
                logger.debug("Suppressed emission from a stopped session.")
                return
            try:
                self.emit()
            finally:
                if self._armed and token is self._token:
                    self._schedule_next(token)
