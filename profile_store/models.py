# profile data for the guardian companion.

from __future__ import annotations

import uuid
from dataclasses import asdict, dataclass, field

# Allowed SOS countdown lengths, in seconds.
SOS_COUNTDOWN_CHOICES = (5, 10, 15, 30)


class InvalidPreferenceError(ValueError):
    """Raised when a profile write carries a value outside its allowed range."""


# Data classes
@dataclass
class EmergencyContact:
    name: str # display name used in log messages and the alert payload.
    phone: str # phone number in E.164 format (e.g. "+12125551234").
    relationship: str = "" # e.g. "daughter", "neighbour".
    priority: int = 0 # dispatch order, lowest first. Assigned by ProfileStore.add_contact.
    id: str = field(default_factory=lambda: uuid.uuid4().hex)


@dataclass
class Preferences:
    sos_countdown_seconds: int = 10
    haptic_feedback: bool = True
    visual_alerts: bool = True
    auto_sos: bool = True
    speech_to_text_enabled: bool = False
    text_to_speech_enabled: bool = False

    def validate(self) -> None:
        """Raise InvalidPreferenceError if any field is out of range."""
        countdown = self.sos_countdown_seconds
        if isinstance(countdown, bool) or not isinstance(countdown, int):
            raise InvalidPreferenceError(
                f"sos_countdown_seconds must be an integer, got {countdown!r}"
            )
        if countdown not in SOS_COUNTDOWN_CHOICES:
            raise InvalidPreferenceError(
                f"sos_countdown_seconds must be one of {SOS_COUNTDOWN_CHOICES}, got {countdown}"
            )
        for name in (
            "haptic_feedback",
            "visual_alerts",
            "auto_sos",
            "speech_to_text_enabled",
            "text_to_speech_enabled",
        ):
            if not isinstance(getattr(self, name), bool):
                raise InvalidPreferenceError(f"{name} must be a boolean")


@dataclass
class UserProfile:
    name: str = ""
    contacts: list[EmergencyContact] = field(default_factory=list)
    medical_info: str = ""
    preferences: Preferences = field(default_factory=Preferences)

    def contacts_by_priority(self) -> list[EmergencyContact]:
        return sorted(self.contacts, key=lambda c: c.priority)

    def to_dict(self) -> dict:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: dict) -> "UserProfile":
        """
        Build a profile from its stored dict form.

        Unknown keys are ignored so that older or newer store files still
        load; missing keys fall back to the dataclass defaults.
        """
        prefs_data = data.get("preferences") or {}
        known = Preferences.__dataclass_fields__
        preferences = Preferences(**{k: v for k, v in prefs_data.items() if k in known})

        contact_fields = EmergencyContact.__dataclass_fields__
        contacts = [
            EmergencyContact(**{k: v for k, v in c.items() if k in contact_fields})
            for c in data.get("contacts") or []
        ]

        return cls(
            name=data.get("name", ""),
            contacts=contacts,
            medical_info=data.get("medical_info", ""),
            preferences=preferences,
        )
