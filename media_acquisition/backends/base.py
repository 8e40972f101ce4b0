"""Capture backend interface consumed by the acquisition orchestrator."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any, Dict, Optional

from media_acquisition.constraints.builder import BackendProfile, ConstraintDescriptor
from media_acquisition.domain.entities import MediaKind, MediaStream


class CaptureBackend(ABC):
    """Primitive capture operations offered by one host capture stack.

    Implementations are selected once and injected; the orchestrator never
    asks which concrete backend it is talking to.
    """

    name = "abstract"

    def __init__(self, profile: Optional[BackendProfile] = None) -> None:
        self.profile = profile or self.default_profile()

    @classmethod
    def default_profile(cls) -> BackendProfile:
        return BackendProfile()

    async def capture_combined(self, constraints: ConstraintDescriptor) -> MediaStream:
        """Capture every requested non-desktop kind in one call."""
        raise NotImplementedError(f"{self.name} backend cannot capture kinds together")

    @abstractmethod
    async def capture_one(self, kind: MediaKind, constraints: ConstraintDescriptor) -> MediaStream:
        """Capture exactly one kind."""

    def supports_combined_capture(self) -> bool:
        return False

    def supports_desktop_capture(self) -> bool:
        return False

    def release_stream(self, stream: MediaStream) -> None:
        stream.stop()

    def describe(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "combined_capture": self.supports_combined_capture(),
            "desktop_capture": self.supports_desktop_capture(),
            "audio_vocabulary": self.profile.audio_vocabulary.value,
            "screen_vocabulary": self.profile.screen_vocabulary.value,
        }


def read_constraint(section: Any, key: str) -> Any:
    """Look up ``key`` in a constraint section regardless of its shape.

    Checks the top level, then ``mandatory``, then each ``optional`` entry.
    """

    if not isinstance(section, dict):
        return None
    if key in section:
        return section[key]
    mandatory = section.get("mandatory")
    if isinstance(mandatory, dict) and key in mandatory:
        return mandatory[key]
    for entry in section.get("optional") or ():
        if isinstance(entry, dict) and key in entry:
            return entry[key]
    return None


def requested_device(section: Any) -> Optional[str]:
    """Return the pinned device id, preferring the strict field."""
    value = read_constraint(section, "deviceId") or read_constraint(section, "sourceId")
    return str(value) if value not in (None, "") else None


__all__ = ["CaptureBackend", "read_constraint", "requested_device"]
