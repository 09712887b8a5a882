"""
companion/core.py

Single entry point for the UI.

GuardianCore wires the profile store, hazard monitor, alert sink and
escalation controller together and exposes the only paths into their
state. A UI reads escalation_state(), last_alert(), monitor_armed() and
capabilities(); it writes through start_monitor(), stop_monitor(),
trigger_escalation(), cancel() and the profile calls. It never holds
state of its own.

Usage
-----
    from companion import GuardianCore
    from profile_store import ProfileStore, JsonFileStore

    core = GuardianCore(
        ProfileStore(JsonFileStore("guardian_store.json")),
        on_status=lambda msg: print(msg),  # hook this to your UI
    )
    core.start_monitor()
    core.trigger_escalation()
    core.cancel()
    core.shutdown()
"""

from __future__ import annotations

import logging
import random
from typing import Callable

from capabilities.descriptor import Capability, CapabilityUnavailable
from capabilities.haptics import NullHaptics
from capabilities.speech import SpeechResult
from escalation.controller import (
    CancelResult,
    EscalationController,
    EscalationSnapshot,
    TriggerResult,
)
from escalation.notifier import DEFAULT_NOTIFY_TIMEOUT, Location, LoggingNotifier, NotificationDispatcher
from escalation.scheduler import ThreadingScheduler
from hazard_detection.alert_sink import AlertSink
from hazard_detection.events import HazardEvent, HazardSource, SimulatedHazardSource
from hazard_detection.monitor import HazardMonitor
from profile_store.models import EmergencyContact, Preferences, UserProfile
from profile_store.store import PROFILE_KEY, ProfileStore

logger = logging.getLogger(__name__)

_NO_SPEECH = Capability.unavailable("speech", "speech bridge not configured")


class GuardianCore:
    """
    The companion's core, assembled.

    Parameters
    ----------
    profile_store : ProfileStore
        Explicit store handle. Loaded on construction, written on every
        profile call.

    notifier : NotificationDispatcher | None
        Delivery for SOS dispatch. Defaults to LoggingNotifier.

    scheduler : ThreadingScheduler | ManualScheduler | None
        Shared by the countdown and the monitor. Defaults to real time.

    haptics : HapticDevice | None
        Defaults to NullHaptics (no vibration hardware).

    speech : SpeechBridge | None
        Optional. When None, speech controls report unavailable.

    hazard_source : HazardSource | None
        Defaults to SimulatedHazardSource seeded with `random_seed`.

    location_provider : Callable[[], Location | None] | None
        Location sent with each SOS dispatch.

    on_status : Callable[[str], None] | None
        Escalation status lines (activated, cancelled, dispatched).

    on_alert : Callable[[HazardEvent], None] | None
        Called with each hazard when visual alerts are enabled.

    resume_monitor : bool
        Re-arm the monitor on construction if it was armed when the
        previous session ended.
    """

    def __init__(
        self,
        profile_store: ProfileStore,
        notifier: NotificationDispatcher | None = None,
        scheduler=None,
        haptics=None,
        speech=None,
        hazard_source: HazardSource | None = None,
        location_provider: Callable[[], Location | None] | None = None,
        on_status: Callable[[str], None] | None = None,
        on_alert: Callable[[HazardEvent], None] | None = None,
        notify_timeout: float = DEFAULT_NOTIFY_TIMEOUT,
        random_seed: int | None = None,
        resume_monitor: bool = True,
    ):
        self.store = profile_store
        profile = self.store.get()  # load-on-init; creates defaults on first run

        self._scheduler = scheduler or ThreadingScheduler()
        self._haptics = haptics or NullHaptics()
        self._speech = speech
        self.notifier = notifier or LoggingNotifier(user_name=profile.name)

        self.controller = EscalationController(
            profile_store=self.store,
            notifier=self.notifier,
            scheduler=self._scheduler,
            haptics=self._haptics,
            location_provider=location_provider,
            on_status=on_status,
            notify_timeout=notify_timeout,
        )
        self.sink = AlertSink(
            profile_store=self.store,
            controller=self.controller,
            haptics=self._haptics,
            speech=speech,
            on_alert=on_alert,
        )
        self.monitor = HazardMonitor(
            sink=self.sink,
            scheduler=self._scheduler,
            profile_store=self.store,
            source=hazard_source or SimulatedHazardSource(random.Random(random_seed)),
        )

        logger.info(
            "GuardianCore ready | contacts=%d | haptics=%s | tts=%s | stt=%s",
            len(profile.contacts),
            self._haptics.capability.supported,
            self._tts_capability().supported,
            self._stt_capability().supported,
        )

        if resume_monitor and self.store.is_monitor_armed():
            logger.info("Monitor was armed in the previous session, re-arming.")
            # The persisted flag says armed but this process has no schedule yet.
            self.store.set_monitor_armed(False)
            self.monitor.start()

    # -----------------------------------------------------------------------
    # Writes
    # -----------------------------------------------------------------------

    def start_monitor(self) -> bool:
        return self.monitor.start()

    def stop_monitor(self) -> bool:
        return self.monitor.stop()

    def trigger_escalation(self) -> TriggerResult:
        return self.controller.trigger()

    def cancel(self) -> CancelResult:
        return self.controller.cancel()

    def update_profile(self, name: str | None = None, medical_info: str | None = None) -> UserProfile:
        profile = self.store.update_profile(name=name, medical_info=medical_info)
        if name is not None and isinstance(self.notifier, LoggingNotifier):
            self.notifier.user_name = name
        return profile

    def update_preferences(self, **changes) -> Preferences:
        return self.store.update_preferences(**changes)

    def add_contact(
        self,
        name: str,
        phone: str,
        relationship: str = "",
    ) -> EmergencyContact:
        return self.store.add_contact(EmergencyContact(name=name, phone=phone, relationship=relationship))

    def remove_contact(self, contact_id: str) -> bool:
        return self.store.remove_contact(contact_id)

    def speak(self, text: str) -> SpeechResult:
        """Speak through the bridge; an unavailable capability is a failed result."""
        if self._speech is None:
            return SpeechResult(success=False, error=str(CapabilityUnavailable(_NO_SPEECH)))
        try:
            return self._speech.speak(text)
        except CapabilityUnavailable as exc:
            logger.info("Speak skipped: %s", exc)
            return SpeechResult(success=False, error=str(exc))

    def start_transcription(self):
        """
        Return the transcript stream when speech-to-text is enabled and supported.

        Raises
        ------
        CapabilityUnavailable
            If there is no bridge, the preference is off, or the platform
            cannot record and transcribe.
        """
        if not self.store.get().preferences.speech_to_text_enabled:
            raise CapabilityUnavailable(
                Capability.unavailable("speech_to_text", "disabled in preferences")
            )
        if self._speech is None:
            raise CapabilityUnavailable(_NO_SPEECH)
        return self._speech.start_recognition()

    def stop_transcription(self) -> None:
        if self._speech is not None:
            self._speech.stop()

    # -----------------------------------------------------------------------
    # Reads
    # -----------------------------------------------------------------------

    def escalation_state(self) -> EscalationSnapshot:
        return self.controller.snapshot()

    def last_alert(self) -> str | None:
        return self.store.last_alert()

    def monitor_armed(self) -> bool:
        return self.monitor.armed

    def profile(self) -> UserProfile:
        return self.store.get(PROFILE_KEY)

    def capabilities(self) -> dict[str, Capability]:
        return {
            "haptics": self._haptics.capability,
            "text_to_speech": self._tts_capability(),
            "speech_to_text": self._stt_capability(),
        }

    # -----------------------------------------------------------------------
    # Lifecycle
    # -----------------------------------------------------------------------

    def shutdown(self) -> None:
        """
        Stop timers for this process without touching the persisted arm flag.

        A monitor that was armed stays armed in the store so the next
        session resumes it.
        """
        armed = self.monitor.armed
        self.monitor.stop()
        self.controller.cancel()
        self.stop_transcription()
        if armed:
            self.store.set_monitor_armed(True)
        logger.info("GuardianCore shut down | monitor_armed=%s", armed)

    def _tts_capability(self) -> Capability:
        return self._speech.tts if self._speech is not None else _NO_SPEECH

    def _stt_capability(self) -> Capability:
        return self._speech.stt if self._speech is not None else _NO_SPEECH
