"""
Synthetic capture backend.

Fake microphones, cameras and screens that live entirely in-process. Video
tracks hand out numpy test-pattern frames sized from the constraints; audio
tracks hand out sine-tone blocks. Combined capture, desktop support and
per-kind faults are constructor options so both acquisition strategies and
every failure path can be driven without hardware.
"""

from __future__ import annotations

import asyncio
from typing import Any, Dict, List, Mapping, Optional, Tuple

import numpy as np

from media_acquisition.constraints.builder import BackendProfile, ConstraintDescriptor
from media_acquisition.core.logging_utils import LoggerLike, ensure_structured_logger
from media_acquisition.domain.entities import MediaKind, MediaStream, MediaTrack, MediaType

from .base import CaptureBackend, read_constraint, requested_device

DEFAULT_FRAME_SIZE: Tuple[int, int] = (640, 480)
SAMPLE_RATE = 48_000
TONE_HZ = 440.0


class SyntheticVideoSource:
    """Moving gradient frames at a fixed size."""

    def __init__(self, width: int, height: int) -> None:
        self.width = int(width)
        self.height = int(height)
        self.frame_number = 0

    def read_frame(self) -> np.ndarray:
        self.frame_number += 1
        ramp = np.linspace(0, 255, self.width, dtype=np.float32)
        row = ((ramp + self.frame_number * 4) % 256).astype(np.uint8)
        frame = np.empty((self.height, self.width, 3), dtype=np.uint8)
        frame[:, :, 0] = row
        frame[:, :, 1] = row[::-1]
        frame[:, :, 2] = self.frame_number % 256
        return frame


class SyntheticAudioSource:
    """Continuous mono sine tone."""

    def __init__(self, sample_rate: int = SAMPLE_RATE, frequency: float = TONE_HZ) -> None:
        self.sample_rate = sample_rate
        self.frequency = frequency
        self._position = 0

    def read_block(self, frames: int = 480) -> np.ndarray:
        t = (np.arange(frames, dtype=np.float32) + self._position) / self.sample_rate
        self._position += frames
        return (0.25 * np.sin(2 * np.pi * self.frequency * t)).astype(np.float32)


class SyntheticBackend(CaptureBackend):
    """In-process fake devices with optional fault injection."""

    name = "synthetic"

    def __init__(
        self,
        *,
        combined: bool = True,
        desktop: bool = True,
        failures: Optional[Mapping[MediaKind, BaseException]] = None,
        drop_tracks: Tuple[MediaKind, ...] = (),
        latency: float = 0.0,
        profile: Optional[BackendProfile] = None,
        logger: LoggerLike = None,
    ) -> None:
        super().__init__(profile)
        self._combined = combined
        self._desktop = desktop
        self._failures: Dict[MediaKind, BaseException] = {
            MediaKind.parse(kind): error for kind, error in (failures or {}).items()
        }
        self._drop_tracks = tuple(MediaKind.parse(kind) for kind in drop_tracks)
        self._latency = max(0.0, float(latency))
        self._logger = ensure_structured_logger(logger, fallback_name=__name__)
        self.captures: List[Tuple[str, Any]] = []
        self.released: List[MediaStream] = []

    @classmethod
    def default_profile(cls) -> BackendProfile:
        return BackendProfile(supports_fake_devices=True)

    def supports_combined_capture(self) -> bool:
        return self._combined

    def supports_desktop_capture(self) -> bool:
        return self._desktop

    def fail(self, kind: MediaKind, error: BaseException) -> None:
        self._failures[MediaKind.parse(kind)] = error

    def heal(self, kind: MediaKind) -> None:
        self._failures.pop(MediaKind.parse(kind), None)

    # ------------------------------------------------------------------
    # Capture primitives

    async def capture_combined(self, constraints: ConstraintDescriptor) -> MediaStream:
        if not self._combined:
            raise NotImplementedError("combined capture disabled")
        self.captures.append(("combined", constraints))
        await self._settle()
        kinds = []
        if constraints.audio:
            kinds.append(MediaKind.AUDIO)
        if constraints.video:
            kinds.append(MediaKind.VIDEO)
        for kind in kinds:
            if kind in self._failures:
                raise self._failures[kind]
        tracks = [
            self._make_track(kind, constraints)
            for kind in kinds
            if kind not in self._drop_tracks
        ]
        return MediaStream(tracks)

    async def capture_one(self, kind: MediaKind, constraints: ConstraintDescriptor) -> MediaStream:
        kind = MediaKind.parse(kind)
        self.captures.append((kind.value, constraints))
        await self._settle()
        if kind in self._failures:
            raise self._failures[kind]
        if kind.is_desktop_path and not self._desktop:
            raise NotImplementedError("desktop capture disabled")
        tracks = [] if kind in self._drop_tracks else [self._make_track(kind, constraints)]
        return MediaStream(tracks)

    def release_stream(self, stream: MediaStream) -> None:
        if stream.stopped:
            return
        stream.stop()
        self.released.append(stream)
        self._logger.debug("Released %s", stream.stream_id)

    # ------------------------------------------------------------------
    # Internal helpers

    async def _settle(self) -> None:
        if self._latency:
            await asyncio.sleep(self._latency)
        else:
            await asyncio.sleep(0)

    def _make_track(self, kind: MediaKind, constraints: ConstraintDescriptor) -> MediaTrack:
        if kind is MediaKind.AUDIO:
            device = requested_device(constraints.audio) or "default"
            return MediaTrack(
                MediaType.AUDIO,
                label=f"Synthetic microphone ({device})",
                device_id=device,
                source=SyntheticAudioSource(),
            )
        width, height = self._frame_size(kind, constraints.video)
        if kind is MediaKind.VIDEO:
            device = requested_device(constraints.video) or "default"
            label = f"Synthetic camera ({device})"
        else:
            device = str(read_constraint(constraints.video, "chromeMediaSourceId") or kind.value)
            label = f"Synthetic {kind.value} ({device})"
        return MediaTrack(
            MediaType.VIDEO,
            label=label,
            device_id=device,
            source=SyntheticVideoSource(width, height),
        )

    @staticmethod
    def _frame_size(kind: MediaKind, video: Any) -> Tuple[int, int]:
        if kind.is_desktop_path:
            keys = ("maxWidth", "maxHeight")
        else:
            keys = ("minWidth", "minHeight")
        width = read_constraint(video, keys[0])
        height = read_constraint(video, keys[1])
        if isinstance(width, int) and isinstance(height, int) and width > 0 and height > 0:
            return width, height
        return DEFAULT_FRAME_SIZE


__all__ = ["SyntheticAudioSource", "SyntheticBackend", "SyntheticVideoSource"]
