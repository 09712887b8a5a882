"""Pytest configuration and fixtures for the guardian companion tests."""

import itertools

import pytest

from capabilities import ConsoleHaptics
from escalation import ManualScheduler, NotificationDispatcher, NotifyResult
from hazard_detection import HazardEvent, HazardSource, Severity
from profile_store import EmergencyContact, MemoryStore, ProfileStore


class RecordingNotifier(NotificationDispatcher):
    """Notifier that records every call; contacts named in `fail` get a failure result."""

    def __init__(self, fail=(), raise_for=()):
        self.calls = []
        self.fail = set(fail)
        self.raise_for = set(raise_for)

    def notify(self, contact, medical_info, location):
        self.calls.append((contact, medical_info, location))
        if contact.name in self.raise_for:
            raise RuntimeError(f"boom for {contact.name}")
        if contact.name in self.fail:
            return NotifyResult(contact_id=contact.id, success=False, error="unreachable")
        return NotifyResult(contact_id=contact.id, success=True)

    @property
    def names(self):
        return [contact.name for contact, _, _ in self.calls]


class FixedSource(HazardSource):
    """Emits the same event at a constant interval."""

    def __init__(self, interval=6.0, event=None):
        self.interval = interval
        self.event = event or HazardEvent('Emergency Siren', Severity.MEDIUM, 'Be aware of emergency vehicles')

    def intervals(self):
        return itertools.repeat(self.interval)

    def next_event(self):
        return self.event


@pytest.fixture
def store():
    return ProfileStore(MemoryStore())


@pytest.fixture
def scheduler():
    return ManualScheduler()


@pytest.fixture
def notifier():
    return RecordingNotifier()


@pytest.fixture
def haptics():
    return ConsoleHaptics()


@pytest.fixture
def store_with_contacts(store):
    """Store holding three contacts with priorities 1, 2, 3."""
    store.update_profile(name="Margaret", medical_info="Type 1 diabetic")
    for name, phone in [("Susan", "+12125551234"), ("David", "+13105559876"), ("Ana", "+14155550000")]:
        store.add_contact(EmergencyContact(name=name, phone=phone, relationship="family"))
    return store
