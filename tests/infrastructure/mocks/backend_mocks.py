"""Scripted capture backend for orchestrator and service tests.

Records every capture and release call in order so tests can assert exactly
which backend primitives ran, and in which sequence.
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Tuple

from media_acquisition.backends.base import CaptureBackend
from media_acquisition.constraints.builder import BackendProfile, ConstraintDescriptor
from media_acquisition.domain.entities import MediaKind, MediaStream, MediaTrack, MediaType


@dataclass
class BackendCall:
    """One recorded backend call."""
    method: str
    kind: Optional[MediaKind] = None
    constraints: Optional[ConstraintDescriptor] = None
    stream_id: Optional[str] = None


@dataclass
class ScriptConfig:
    """Behaviour of a ScriptedBackend."""
    combined: bool = True
    desktop: bool = True
    failures: Dict[MediaKind, BaseException] = field(default_factory=dict)
    combined_failure: Optional[BaseException] = None
    missing_tracks: Tuple[MediaKind, ...] = ()
    release_failure: Optional[BaseException] = None
    return_none: Tuple[MediaKind, ...] = ()
    combined_returns_none: bool = False
    delays: Dict[MediaKind, float] = field(default_factory=dict)


class ScriptedBackend(CaptureBackend):
    """CaptureBackend whose results are scripted up front."""

    name = "scripted"

    def __init__(self, config: Optional[ScriptConfig] = None, profile: Optional[BackendProfile] = None, **overrides: Any):
        super().__init__(profile)
        self.config = config or ScriptConfig(**overrides)
        self.calls: List[BackendCall] = []
        self.streams: List[MediaStream] = []

    # =========================================================================
    # Capability flags
    # =========================================================================

    def supports_combined_capture(self) -> bool:
        return self.config.combined

    def supports_desktop_capture(self) -> bool:
        return self.config.desktop

    # =========================================================================
    # Capture primitives
    # =========================================================================

    async def capture_combined(self, constraints: ConstraintDescriptor) -> MediaStream:
        self.calls.append(BackendCall("capture_combined", constraints=constraints))
        await asyncio.sleep(0)
        if self.config.combined_failure is not None:
            raise self.config.combined_failure
        if self.config.combined_returns_none:
            return None
        tracks = []
        if constraints.audio and MediaKind.AUDIO not in self.config.missing_tracks:
            tracks.append(MediaTrack(MediaType.AUDIO, label="scripted microphone"))
        if constraints.video and MediaKind.VIDEO not in self.config.missing_tracks:
            tracks.append(MediaTrack(MediaType.VIDEO, label="scripted camera"))
        return self._remember(MediaStream(tracks))

    async def capture_one(self, kind: MediaKind, constraints: ConstraintDescriptor) -> MediaStream:
        self.calls.append(BackendCall("capture_one", kind=kind, constraints=constraints))
        await asyncio.sleep(self.config.delays.get(kind, 0))
        if kind in self.config.failures:
            raise self.config.failures[kind]
        if kind in self.config.return_none:
            return None
        if kind in self.config.missing_tracks:
            return self._remember(MediaStream([]))
        media_type = MediaType.AUDIO if kind is MediaKind.AUDIO else MediaType.VIDEO
        return self._remember(MediaStream([MediaTrack(media_type, label=f"scripted {kind.value}")]))

    def release_stream(self, stream: MediaStream) -> None:
        self.calls.append(BackendCall("release", stream_id=stream.stream_id))
        if self.config.release_failure is not None:
            raise self.config.release_failure
        stream.stop()

    # =========================================================================
    # Test helpers
    # =========================================================================

    def _remember(self, stream: MediaStream) -> MediaStream:
        self.streams.append(stream)
        return stream

    def methods(self) -> List[str]:
        return [call.method for call in self.calls]

    def capture_calls(self) -> List[BackendCall]:
        return [call for call in self.calls if call.method.startswith("capture")]

    def released_ids(self) -> List[str]:
        return [call.stream_id for call in self.calls if call.method == "release"]


class DeviceError(Exception):
    """Backend error that carries a browser-style ``name``."""

    def __init__(self, name: str, message: str = "", constraint: Optional[str] = None):
        super().__init__(message or name)
        self.name = name
        if constraint is not None:
            self.constraint = constraint


__all__ = ["BackendCall", "DeviceError", "ScriptConfig", "ScriptedBackend"]
