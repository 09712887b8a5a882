# hazard_detection/events.py

import random
from dataclasses import dataclass
from enum import Enum
from typing import Iterator

# ── Interval ranges (seconds) ─────────────────────────────────────────────────
# First emission after arming, then every later one. Both are half-open
# [low, high) ranges drawn uniformly.
FIRST_INTERVAL  = (5.0, 15.0)
REPEAT_INTERVAL = (10.0, 25.0)


class Severity(str, Enum):
    LOW    = 'low'
    MEDIUM = 'medium'
    HIGH   = 'high'


@dataclass(frozen=True)
class HazardEvent:
    """
    One detected (or simulated) environmental hazard.

    type     : short name shown to the user, e.g. 'Vehicle Approaching'
    severity : Severity
    action   : recommended action, e.g. 'Step to safety'
    """
    type     : str
    severity : Severity
    action   : str

    def describe(self) -> str:
        return f'{self.type}: {self.action}'


HAZARD_CATALOG = (
    HazardEvent('Vehicle Approaching', Severity.HIGH,   'Step to safety'),
    HazardEvent('Emergency Siren',     Severity.MEDIUM, 'Be aware of emergency vehicles'),
    HazardEvent('Construction Noise',  Severity.LOW,    'Construction zone ahead'),
    HazardEvent('Horn Honking',        Severity.HIGH,   'Check your surroundings'),
    HazardEvent('Alarm Bell',          Severity.MEDIUM, 'Look for the alarm source and follow evacuation signs'),
)


class HazardSource:
    """
    Where the monitor gets its timing and its events.

    intervals()  - a fresh, lazy, infinite iterator of delays in seconds.
                   Called once per start(), so every armed session gets an
                   independent sequence.
    next_event() - the hazard to present at the next emission.

    A real classifier replaces this class; nothing downstream changes.
    """

    def intervals(self) -> Iterator[float]:
        raise NotImplementedError

    def next_event(self) -> HazardEvent:
        raise NotImplementedError


class SimulatedHazardSource(HazardSource):
    """
    Random hazards at random intervals.

    rng : random.Random - pass a seeded instance for reproducible runs.
    """

    def __init__(self, rng=None, catalog=HAZARD_CATALOG):
        self._rng     = rng if rng is not None else random.Random()
        self._catalog = tuple(catalog)

    def intervals(self) -> Iterator[float]:
        yield _uniform(self._rng, *FIRST_INTERVAL)
        while True:
            yield _uniform(self._rng, *REPEAT_INTERVAL)

    def next_event(self) -> HazardEvent:
        return self._rng.choice(self._catalog)


def _uniform(rng, low: float, high: float) -> float:
    # random.uniform may return `high`; this stays inside [low, high).
    return low + rng.random() * (high - low)
