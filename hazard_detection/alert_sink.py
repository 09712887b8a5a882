# hazard_detection/alert_sink.py

import logging
import threading
from typing import Callable, Optional

from capabilities.descriptor import CapabilityUnavailable
from capabilities.haptics import DEFAULT_ALERT_PATTERN, HIGH_SEVERITY_PATTERN, NullHaptics
from escalation.controller import TriggerResult
from .events import HazardEvent, Severity

logger = logging.getLogger(__name__)


class AlertSink:
    """
    Presents hazard events to the user and decides whether to escalate.

    For every event:
      • vibrate   - short triple burst for HIGH severity, one pulse otherwise
      • record    - overwrite the persisted last-alert slot
      • show      - hand the event to the UI callback when visual alerts are on
      • speak     - read it aloud on a background thread when text-to-speech is on
      • escalate  - start the SOS countdown for HIGH severity when auto-SOS is on
    """

    def __init__(
        self,
        profile_store,
        controller,
        haptics=None,
        speech=None,
        on_alert: Optional[Callable[[HazardEvent], None]] = None,
    ):
        self._store      = profile_store
        self._controller = controller
        self._haptics    = haptics or NullHaptics()
        self._speech     = speech
        self._on_alert   = on_alert

    def present(self, event: HazardEvent) -> None:
        prefs = self._store.get().preferences

        if prefs.haptic_feedback:
            pattern = HIGH_SEVERITY_PATTERN if event.severity is Severity.HIGH else DEFAULT_ALERT_PATTERN
            self._haptics.vibrate(pattern)

        self._store.set_last_alert(event.describe())

        if prefs.visual_alerts and self._on_alert is not None:
            try:
                self._on_alert(event)
            except Exception as exc:
                logger.error("Alert callback failed: %s", exc, exc_info=True)

        if prefs.text_to_speech_enabled and self._speech is not None:
            # Off the caller's thread: present() runs under the monitor lock.
            threading.Thread(target=self._speak, args=(event,), name="alert-speech", daemon=True).start()

        if prefs.auto_sos and event.severity is Severity.HIGH:
            result = self._controller.trigger()
            if result is TriggerResult.ALREADY_ACTIVE:
                logger.debug("Auto-SOS skipped, escalation already active.")
            else:
                logger.warning("Auto-SOS started by %s", event.type)

    def _speak(self, event: HazardEvent):
        try:
            self._speech.speak(f'Warning. {event.type}. {event.action}.')
        except CapabilityUnavailable as exc:
            logger.info("Alert not spoken: %s", exc)
        except Exception as exc:
            logger.error("Speaking alert failed: %s", exc, exc_info=True)
