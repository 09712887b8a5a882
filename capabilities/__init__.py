"""
capabilities/__init__.py

Optional platform features: haptics and speech.

Each feature is described by a Capability probed once at startup. An
unsupported capability disables its controls; it never stops the companion.

Usage
-----
    from capabilities import ConsoleHaptics, SpeechBridge

    bridge = SpeechBridge()
    if bridge.tts.supported:
        bridge.speak("Vehicle approaching")
"""

from capabilities.descriptor import Capability, CapabilityUnavailable
from capabilities.haptics import (
    DEFAULT_ALERT_PATTERN,
    HIGH_SEVERITY_PATTERN,
    SOS_PATTERN,
    ConsoleHaptics,
    NullHaptics,
)
from capabilities.speech import SpeechBridge, SpeechResult

__all__ = [
    "Capability",
    "CapabilityUnavailable",
    "ConsoleHaptics",
    "NullHaptics",
    "SOS_PATTERN",
    "HIGH_SEVERITY_PATTERN",
    "DEFAULT_ALERT_PATTERN",
    "SpeechBridge",
    "SpeechResult",
]
