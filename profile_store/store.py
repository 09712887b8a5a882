"""
profile_store/store.py

Persistence for the user profile, the monitor arm flag and the last alert.

The profile is held in an opaque key-value store. Two backends ship here:

    JsonFileStore - one JSON document on disk, survives restarts
    MemoryStore   - a plain dict, for tests and throwaway sessions

ProfileStore wraps a backend with typed accessors. It loads lazily on first
read and writes through on every mutation; nothing else in the companion
touches the backend directly.

Usage
-----
    store = ProfileStore(JsonFileStore("guardian_store.json"))
    store.add_contact(EmergencyContact("Susan", "+12125551234", "daughter"))
    store.update_preferences(sos_countdown_seconds=5)
"""

from __future__ import annotations

import copy
import json
import logging
import os
import threading
from dataclasses import replace
from pathlib import Path
from typing import Any

from profile_store.models import EmergencyContact, InvalidPreferenceError, Preferences, UserProfile

logger = logging.getLogger(__name__)

# Well-known store keys
PROFILE_KEY = "guardian-profile"
MONITOR_KEY = "hazard-monitoring"
LAST_ALERT_KEY = "last-alert"


# ---------------------------------------------------------------------------
# Key-value backends
# ---------------------------------------------------------------------------

class MemoryStore:
    """In-process key-value store. Values are deep-copied in and out."""

    def __init__(self, initial: dict[str, Any] | None = None):
        self._data: dict[str, Any] = copy.deepcopy(initial) if initial else {}

    def get(self, key: str, default: Any = None) -> Any:
        return copy.deepcopy(self._data.get(key, default))

    def set(self, key: str, value: Any) -> None:
        self._data[key] = copy.deepcopy(value)


class JsonFileStore:
    """
    Key-value store kept in a single JSON file.

    The whole document is rewritten on each set(). Writes go to a temp file
    first and are moved into place, so a crash mid-write leaves the previous
    document intact.

    Parameters
    ----------
    path : str | Path
        Location of the JSON document. Parent directories are created.
    """

    def __init__(self, path: str | Path):
        self.path = Path(path)
        self._lock = threading.Lock()
        self._data: dict[str, Any] | None = None

    def get(self, key: str, default: Any = None) -> Any:
        with self._lock:
            return copy.deepcopy(self._load().get(key, default))

    def set(self, key: str, value: Any) -> None:
        with self._lock:
            data = self._load()
            data[key] = copy.deepcopy(value)
            self._write(data)

    def _load(self) -> dict[str, Any]:
        if self._data is not None:
            return self._data

        if not self.path.exists():
            self._data = {}
            return self._data

        try:
            with open(self.path, encoding="utf-8") as f:
                data = json.load(f)
        except (OSError, json.JSONDecodeError) as exc:
            logger.error("Could not read store | path=%s | error=%s", self.path, exc)
            data = {}

        if not isinstance(data, dict):
            logger.error("Store file is not a JSON object, ignoring | path=%s", self.path)
            data = {}

        self._data = data
        return self._data

    def _write(self, data: dict[str, Any]) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        tmp_path = self.path.with_suffix(self.path.suffix + ".tmp")
        with open(tmp_path, "w", encoding="utf-8") as f:
            json.dump(data, f, indent=2)
        os.replace(tmp_path, self.path)


# ---------------------------------------------------------------------------
# Typed profile access
# ---------------------------------------------------------------------------

class ProfileStore:
    """
    Typed access to the persisted profile and companion flags.

    Parameters
    ----------
    backend : MemoryStore | JsonFileStore
        Any object with get(key, default) and set(key, value).
    """

    def __init__(self, backend):
        self._backend = backend
        self._lock = threading.RLock()
        self._profile: UserProfile | None = None

    # -- profile -------------------------------------------------------------

    def get(self, key: str = PROFILE_KEY) -> UserProfile:
        """
        Return a copy of the stored profile.

        A default profile is created and saved on first use.
        """
        with self._lock:
            if key != PROFILE_KEY:
                return self._read_profile(key)
            if self._profile is None:
                self._profile = self._read_profile(key)
            return copy.deepcopy(self._profile)

    def set(self, key: str, profile: UserProfile) -> None:
        """Validate and overwrite the profile stored under `key`."""
        profile.preferences.validate()
        with self._lock:
            self._backend.set(key, profile.to_dict())
            if key == PROFILE_KEY:
                self._profile = copy.deepcopy(profile)
        logger.debug("Profile saved | key=%s | contacts=%d", key, len(profile.contacts))

    def update_profile(self, name: str | None = None, medical_info: str | None = None) -> UserProfile:
        with self._lock:
            profile = self.get()
            if name is not None:
                profile.name = name
            if medical_info is not None:
                profile.medical_info = medical_info
            self.set(PROFILE_KEY, profile)
            return profile

    def update_preferences(self, **changes) -> Preferences:
        """
        Apply preference changes and save them.

        The new values are validated before anything is written; on
        InvalidPreferenceError the previously stored preferences remain.

        Raises
        ------
        InvalidPreferenceError
            If a key is unknown or a value is out of range.
        """
        unknown = set(changes) - set(Preferences.__dataclass_fields__)
        if unknown:
            raise InvalidPreferenceError(f"Unknown preference(s): {', '.join(sorted(unknown))}")

        with self._lock:
            profile = self.get()
            updated = replace(profile.preferences, **changes)
            updated.validate()
            profile.preferences = updated
            self.set(PROFILE_KEY, profile)

        logger.info("Preferences updated | %s", ", ".join(f"{k}={v}" for k, v in changes.items()))
        return updated

    def add_contact(self, contact: EmergencyContact) -> EmergencyContact:
        """
        Append a contact and assign it the next priority.

        Priorities only ever increase: a removed contact's priority is not
        handed out again.
        """
        with self._lock:
            profile = self.get()
            next_priority = max((c.priority for c in profile.contacts), default=0) + 1
            stored = replace(contact, priority=next_priority)
            profile.contacts.append(stored)
            self.set(PROFILE_KEY, profile)

        logger.info("Contact added | name=%s | priority=%d", stored.name, stored.priority)
        return stored

    def remove_contact(self, contact_id: str) -> bool:
        with self._lock:
            profile = self.get()
            remaining = [c for c in profile.contacts if c.id != contact_id]
            if len(remaining) == len(profile.contacts):
                return False
            profile.contacts = remaining
            self.set(PROFILE_KEY, profile)
        logger.info("Contact removed | id=%s", contact_id)
        return True

    # -- companion flags -----------------------------------------------------

    def is_monitor_armed(self) -> bool:
        return bool(self._backend.get(MONITOR_KEY, False))

    def set_monitor_armed(self, armed: bool) -> None:
        self._backend.set(MONITOR_KEY, bool(armed))

    def last_alert(self) -> str | None:
        return self._backend.get(LAST_ALERT_KEY, None)

    def set_last_alert(self, text: str) -> None:
        self._backend.set(LAST_ALERT_KEY, text)

    # -- internal ------------------------------------------------------------

    def _read_profile(self, key: str) -> UserProfile:
        data = self._backend.get(key, None)
        if data is None:
            profile = UserProfile()
            self._backend.set(key, profile.to_dict())
            logger.info("Created default profile | key=%s", key)
            return profile

        try:
            profile = UserProfile.from_dict(data)
        except (TypeError, ValueError, AttributeError) as exc:
            logger.error("Stored profile malformed, using defaults | key=%s | error=%s", key, exc)
            return UserProfile()

        try:
            profile.preferences.validate()
        except InvalidPreferenceError as exc:
            logger.error("Stored preferences invalid, using defaults | error=%s", exc)
            profile.preferences = Preferences()
        return profile
