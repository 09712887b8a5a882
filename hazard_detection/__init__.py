# hazard_detection/__init__.py
"""
hazard_detection
================
Environmental hazard monitoring for the guardian companion.

Public API
----------
HazardMonitor          - arm/disarm; emits events on a randomized schedule
AlertSink              - vibrates, records, shows and maybe escalates each event
HazardEvent            - frozen value object (type, severity, action)
HazardSource           - strategy interface for timing + event selection
SimulatedHazardSource  - seeded random implementation of HazardSource

Typical usage
-------------
    import random
    from escalation import ThreadingScheduler
    from hazard_detection import AlertSink, HazardMonitor, SimulatedHazardSource

    sink    = AlertSink(store, controller)
    monitor = HazardMonitor(sink, ThreadingScheduler(), store,
                            source=SimulatedHazardSource(random.Random(42)))
    monitor.start()
"""

from .events      import HAZARD_CATALOG, HazardEvent, HazardSource, Severity, SimulatedHazardSource
from .monitor     import HazardMonitor
from .alert_sink  import AlertSink

__all__ = [
    'HazardMonitor',
    'AlertSink',
    'HazardEvent',
    'HazardSource',
    'SimulatedHazardSource',
    'Severity',
    'HAZARD_CATALOG',
]
