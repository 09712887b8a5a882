"""
escalation/__init__.py

Public interface for the escalation module.

Usage
-----
    from escalation import EscalationController, ThreadingScheduler, LoggingNotifier
    from escalation import TriggerResult, CancelResult, EscalationState
"""

from escalation.controller import (
    CancelResult,
    EscalationController,
    EscalationSnapshot,
    EscalationState,
    TriggerResult,
)
from escalation.notifier import (
    DispatchResult,
    Location,
    LoggingNotifier,
    NotificationDispatcher,
    NotifyResult,
    dispatch_to_contacts,
)
from escalation.scheduler import CancelToken, ManualScheduler, ScheduledAction, ThreadingScheduler

__all__ = [
    # State machine
    "EscalationController",
    "EscalationState",
    "EscalationSnapshot",
    "TriggerResult",
    "CancelResult",
    # Delivery
    "NotificationDispatcher",
    "LoggingNotifier",
    "NotifyResult",
    "DispatchResult",
    "Location",
    "dispatch_to_contacts",
    # Timing
    "CancelToken",
    "ScheduledAction",
    "ThreadingScheduler",
    "ManualScheduler",
]
