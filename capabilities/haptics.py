# haptic output for alerts and SOS activation.

from __future__ import annotations

import logging
from typing import Sequence

from capabilities.descriptor import Capability

logger = logging.getLogger(__name__)

# Vibration patterns: alternating on/off durations in milliseconds.
SOS_PATTERN = (200, 100, 200, 100, 200)
HIGH_SEVERITY_PATTERN = (100, 50, 100, 50, 100)
DEFAULT_ALERT_PATTERN = (200,)


class NullHaptics:
    """Haptic device for platforms with no vibration motor. vibrate() does nothing."""

    capability = Capability.unavailable("haptics", "no vibration hardware on this platform")

    def vibrate(self, pattern: Sequence[int]) -> None:
        return None


class ConsoleHaptics:
    """
    Simulated haptic device that logs each pattern.

    Used by the console driver so a sighted tester can see what the
    wearer would have felt.
    """

    capability = Capability.available("haptics")

    def __init__(self):
        self.history: list[tuple[int, ...]] = []

    def vibrate(self, pattern: Sequence[int]) -> None:
        pattern = tuple(int(ms) for ms in pattern)
        self.history.append(pattern)
        logger.info("Vibrate | pattern=%s | total_ms=%d", list(pattern), sum(pattern))
