# emergency notification for the guardian companion.

from __future__ import annotations

import logging
import queue
import threading
from dataclasses import dataclass, field
from datetime import datetime
from typing import Sequence

from profile_store.models import EmergencyContact

# Logging
logger = logging.getLogger(__name__)

# Seconds each contact gets before it is marked failed.
DEFAULT_NOTIFY_TIMEOUT = 10.0


# Data classes
@dataclass(frozen=True)
class Location:
    latitude: float
    longitude: float
    description: str = "" # e.g. "Corner of 5th and Main".

    def describe(self) -> str:
        coords = f"{self.latitude:.5f}, {self.longitude:.5f}"
        return f"{self.description} ({coords})" if self.description else coords


@dataclass
class NotifyResult:
    contact_id: str
    success: bool # whether the notification was delivered without error.
    error: str | None = None # error message if success is False, otherwise None.
    timestamp: str = field(default_factory=lambda: datetime.now().isoformat())


@dataclass
class DispatchResult:
    succeeded: int = 0
    failed: list[str] = field(default_factory=list) # contact ids, in dispatch order.
    results: list[NotifyResult] = field(default_factory=list)
    timestamp: str = field(default_factory=lambda: datetime.now().isoformat())

    @property
    def attempted(self) -> int:
        return len(self.results)


# Dispatchers
class NotificationDispatcher:
    """
    Delivers the emergency payload to one contact.

    Subclasses implement notify(). It must return a NotifyResult for every
    outcome; failures are values, not exceptions.
    """

    def notify(
        self,
        contact: EmergencyContact,
        medical_info: str,
        location: Location | None,
    ) -> NotifyResult:
        raise NotImplementedError


class LoggingNotifier(NotificationDispatcher):
    """
    Mock dispatcher: writes each alert to the log and the console.

    Replace with a real SMS or voice integration when one is available.

    Parameters
    ----------
    user_name : str
        The monitored user's name, used in the message body.
    echo : bool
        Also print a framed copy of each alert to stdout.
    """

    def __init__(self, user_name: str = "", echo: bool = True):
        self.user_name = user_name
        self.echo = echo
        self.sent: list[tuple[str, str]] = [] # (contact_id, message) pairs.

    def notify(
        self,
        contact: EmergencyContact,
        medical_info: str,
        location: Location | None,
    ) -> NotifyResult:
        message = build_alert_message(contact.name, self.user_name, medical_info, location)
        self.sent.append((contact.id, message))

        logger.info(
            "Mock notification logged | to=%s | phone=%s | priority=%d",
            contact.name,
            contact.phone,
            contact.priority,
        )
        if self.echo:
            print(
                f"\n"
                f"{'=' * 60}\n"
                f"EMERGENCY ALERT (MOCK)\n"
                f"{'=' * 60}\n"
                f"  To       : {contact.name} ({contact.relationship or 'contact'}) {contact.phone}\n"
                f"  Message  : {message}\n"
                f"  Status   : *** THIS IS A MOCK - nothing was sent ***\n"
                f"{'=' * 60}\n"
            )
        return NotifyResult(contact_id=contact.id, success=True)


def build_alert_message(
    contact_name: str,
    user_name: str,
    medical_info: str,
    location: Location | None,
) -> str:
    """Build the text delivered to one contact."""
    subject = user_name or "Your contact"
    parts = [
        f"Hello {contact_name}.",
        "This is an automated emergency alert.",
        f"{subject} triggered an SOS and did not cancel it.",
        f"Location: {location.describe() if location else 'unavailable'}.",
    ]
    if medical_info:
        parts.append(f"Medical info: {medical_info}.")
    parts.append("Please check on them immediately and call emergency services if needed.")
    return " ".join(parts)


def dispatch_to_contacts(
    notifier: NotificationDispatcher,
    contacts: Sequence[EmergencyContact],
    medical_info: str,
    location: Location | None,
    timeout: float = DEFAULT_NOTIFY_TIMEOUT,
) -> DispatchResult:
    """
    Notify every contact in ascending priority order.

    Each notify() call runs on a worker thread and is given `timeout`
    seconds. A contact that raises, returns a failure, or times out is
    recorded in `failed` and the remaining contacts are still tried.
    Calls are started one at a time, so contacts are always invoked in
    priority order.

    Returns
    -------
    DispatchResult
        Never raises.
    """
    ordered = sorted(contacts, key=lambda c: c.priority)
    result = DispatchResult()
    if not ordered:
        logger.warning("Dispatch with no emergency contacts configured.")
        return result

    for contact in ordered:
        outcome = _notify_one(notifier, contact, medical_info, location, timeout)
        result.results.append(outcome)
        if outcome.success:
            result.succeeded += 1
        else:
            result.failed.append(contact.id)

    logger.info(
        "Dispatch complete | succeeded=%d | failed=%d",
        result.succeeded,
        len(result.failed),
    )
    return result


def _notify_one(
    notifier: NotificationDispatcher,
    contact: EmergencyContact,
    medical_info: str,
    location: Location | None,
    timeout: float,
) -> NotifyResult:
    # Daemon thread per call: a hung notify() is abandoned and never
    # keeps the interpreter alive at exit.
    outbox: queue.Queue = queue.Queue(maxsize=1)

    def run() -> None:
        try:
            outbox.put((True, notifier.notify(contact, medical_info, location)))
        except Exception as exc:
            outbox.put((False, exc))

    worker = threading.Thread(target=run, name=f"notify-{contact.id[:8]}", daemon=True)
    worker.start()

    try:
        ok, outcome = outbox.get(timeout=timeout)
    except queue.Empty:
        logger.error("Notify timed out | to=%s | timeout=%.1fs", contact.name, timeout)
        return NotifyResult(contact_id=contact.id, success=False, error=f"timed out after {timeout}s")

    if not ok:
        logger.error(
            "Notify unexpected error | to=%s | error=%s",
            contact.name,
            str(outcome),
            exc_info=outcome,
        )
        return NotifyResult(contact_id=contact.id, success=False, error=str(outcome))

    if not isinstance(outcome, NotifyResult):
        return NotifyResult(contact_id=contact.id, success=False, error=f"unexpected result {outcome!r}")
    if not outcome.success:
        logger.error("Notify failed | to=%s | error=%s", contact.name, outcome.error)
    return outcome
