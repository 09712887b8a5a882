"""
profile_store/__init__.py

Public interface for the profile_store module.

Usage
-----
    from profile_store import ProfileStore, JsonFileStore, EmergencyContact
"""

from profile_store.models import (
    SOS_COUNTDOWN_CHOICES,
    EmergencyContact,
    InvalidPreferenceError,
    Preferences,
    UserProfile,
)
from profile_store.store import (
    LAST_ALERT_KEY,
    MONITOR_KEY,
    PROFILE_KEY,
    JsonFileStore,
    MemoryStore,
    ProfileStore,
)

__all__ = [
    "ProfileStore",
    "JsonFileStore",
    "MemoryStore",
    "UserProfile",
    "Preferences",
    "EmergencyContact",
    "InvalidPreferenceError",
    "SOS_COUNTDOWN_CHOICES",
    "PROFILE_KEY",
    "MONITOR_KEY",
    "LAST_ALERT_KEY",
]
