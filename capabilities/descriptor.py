# capability descriptors for optional platform features.

from __future__ import annotations

from dataclasses import dataclass


class CapabilityUnavailable(RuntimeError):
    """Raised when a caller uses a capability that was probed as unsupported."""

    def __init__(self, capability: "Capability"):
        self.capability = capability
        super().__init__(f"{capability.name} unavailable: {capability.reason or 'not supported'}")


@dataclass(frozen=True)
class Capability:
    name: str # e.g. "haptics", "text_to_speech".
    supported: bool
    reason: str | None = None # why it is unsupported; None when supported.

    @classmethod
    def available(cls, name: str) -> "Capability":
        return cls(name=name, supported=True)

    @classmethod
    def unavailable(cls, name: str, reason: str) -> "Capability":
        return cls(name=name, supported=False, reason=reason)

    def require(self) -> None:
        if not self.supported:
            raise CapabilityUnavailable(self)
