"""Core data structures for media acquisition."""

from __future__ import annotations

import itertools
from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Any, Callable, Dict, Iterable, List, Mapping, Optional, Tuple


class MediaKind(str, Enum):
    """Requested category of captured media."""

    AUDIO = "audio"
    VIDEO = "video"
    SCREEN = "screen"
    DESKTOP = "desktop"

    @property
    def is_desktop_path(self) -> bool:
        return self in (MediaKind.SCREEN, MediaKind.DESKTOP)

    @classmethod
    def parse(cls, value: Any) -> "MediaKind":
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).strip().lower())
        except ValueError:
            raise ValueError(f"Unknown media kind: {value!r}") from None


class MediaType(str, Enum):
    AUDIO = "audio"
    VIDEO = "video"


class VideoType(str, Enum):
    CAMERA = "camera"
    DESKTOP = "desktop"


DEFAULT_KINDS: Tuple[MediaKind, ...] = (MediaKind.AUDIO, MediaKind.VIDEO)


@dataclass(slots=True, frozen=True)
class MediaOptions:
    """Per-request tuning knobs. Unset fields fall back to backend defaults."""

    resolution: Optional[str] = None
    bandwidth: Optional[int] = None
    fps: Optional[float] = None
    min_fps: Optional[float] = None
    max_fps: Optional[float] = None
    camera_device_id: Optional[str] = None
    mic_device_id: Optional[str] = None
    desktop_source_id: Optional[str] = None
    fake_device: bool = False

    def with_default_resolution(self, label: str) -> "MediaOptions":
        if self.resolution:
            return self
        return replace(self, resolution=label)

    @classmethod
    def from_mapping(cls, data: Optional[Mapping[str, Any]]) -> "MediaOptions":
        """Build options from a loosely typed mapping, ignoring unknown keys."""

        if not data:
            return cls()

        def _number(key: str, cast):
            value = data.get(key)
            if value in (None, ""):
                return None
            try:
                return cast(value)
            except (TypeError, ValueError):
                return None

        def _text(key: str) -> Optional[str]:
            value = data.get(key)
            return str(value) if value not in (None, "") else None

        def _flag(key: str) -> bool:
            value = data.get(key, False)
            if isinstance(value, str):
                return value.strip().lower() in {"true", "yes", "on", "1"}
            return bool(value)

        return cls(
            resolution=_text("resolution"),
            bandwidth=_number("bandwidth", int),
            fps=_number("fps", float),
            min_fps=_number("min_fps", float),
            max_fps=_number("max_fps", float),
            camera_device_id=_text("camera_device_id"),
            mic_device_id=_text("mic_device_id"),
            desktop_source_id=_text("desktop_source_id"),
            fake_device=_flag("fake_device"),
        )


@dataclass(slots=True, frozen=True)
class MediaRequest:
    """Ordered set of kinds plus options; immutable once built."""

    kinds: Tuple[MediaKind, ...] = DEFAULT_KINDS
    options: MediaOptions = field(default_factory=MediaOptions)

    def __post_init__(self) -> None:
        ordered: list[MediaKind] = []
        for raw in self.kinds:
            kind = MediaKind.parse(raw)
            if kind not in ordered:
                ordered.append(kind)
        if MediaKind.SCREEN in ordered and MediaKind.DESKTOP in ordered:
            raise ValueError("screen and desktop cannot be requested together")
        object.__setattr__(self, "kinds", tuple(ordered))

    @classmethod
    def create(
        cls,
        kinds: Optional[Iterable[Any]] = None,
        options: Optional[MediaOptions] = None,
        **option_values: Any,
    ) -> "MediaRequest":
        if options is None:
            options = MediaOptions(**option_values)
        elif option_values:
            options = replace(options, **option_values)
        return cls(kinds=DEFAULT_KINDS if kinds is None else tuple(kinds), options=options)

    @property
    def device_kinds(self) -> Tuple[MediaKind, ...]:
        return tuple(kind for kind in self.kinds if not kind.is_desktop_path)

    @property
    def desktop_kind(self) -> Optional[MediaKind]:
        for kind in self.kinds:
            if kind.is_desktop_path:
                return kind
        return None


# ---------------------------------------------------------------------------
# Captured streams

_track_ids = itertools.count(1)
_stream_ids = itertools.count(1)


class MediaTrack:
    """One elementary captured track (a microphone or a video source)."""

    def __init__(
        self,
        media_type: MediaType,
        *,
        label: str = "",
        device_id: Optional[str] = None,
        source: Any = None,
        on_stop: Optional[Callable[[], None]] = None,
        track_id: Optional[str] = None,
    ) -> None:
        self.media_type = MediaType(media_type)
        self.label = label
        self.device_id = device_id
        self.source = source
        self.track_id = track_id or f"{self.media_type.value}-{next(_track_ids)}"
        self._on_stop = on_stop
        self._stopped = False

    @property
    def stopped(self) -> bool:
        return self._stopped

    def stop(self) -> None:
        if self._stopped:
            return
        self._stopped = True
        if self._on_stop is not None:
            self._on_stop()

    def __repr__(self) -> str:
        state = "stopped" if self._stopped else "live"
        return f"MediaTrack({self.track_id!r}, {self.media_type.value}, {self.label!r}, {state})"


class MediaStream:
    """A bundle of tracks handed back by one backend capture call."""

    def __init__(
        self,
        tracks: Iterable[MediaTrack] = (),
        *,
        stream_id: Optional[str] = None,
        on_stop: Optional[Callable[[], None]] = None,
    ) -> None:
        self.tracks: List[MediaTrack] = list(tracks)
        self.stream_id = stream_id or f"stream-{next(_stream_ids)}"
        self._on_stop = on_stop
        self._stopped = False

    def get_tracks(self) -> List[MediaTrack]:
        return list(self.tracks)

    def get_audio_tracks(self) -> List[MediaTrack]:
        return [t for t in self.tracks if t.media_type is MediaType.AUDIO]

    def get_video_tracks(self) -> List[MediaTrack]:
        return [t for t in self.tracks if t.media_type is MediaType.VIDEO]

    @property
    def stopped(self) -> bool:
        return self._stopped

    def stop(self) -> None:
        """Stop every track, then the stream itself. Safe to call twice."""
        if self._stopped:
            return
        self._stopped = True
        for track in self.tracks:
            track.stop()
        if self._on_stop is not None:
            self._on_stop()

    def __repr__(self) -> str:
        return f"MediaStream({self.stream_id!r}, tracks={len(self.tracks)}, stopped={self._stopped})"


@dataclass(slots=True, frozen=True)
class CaptureOutcome:
    """Result of one backend capture call for one kind."""

    kind: MediaKind
    stream: Optional[MediaStream] = None
    error: Optional[BaseException] = None

    @property
    def succeeded(self) -> bool:
        return self.error is None and self.stream is not None

    @classmethod
    def success(cls, kind: MediaKind, stream: MediaStream) -> "CaptureOutcome":
        return cls(kind=kind, stream=stream)

    @classmethod
    def failure(cls, kind: MediaKind, error: BaseException) -> "CaptureOutcome":
        return cls(kind=kind, error=error)


@dataclass(slots=True)
class RawResultBundle:
    """Whatever shape the chosen strategy produced, before normalization."""

    combined: Optional[MediaStream] = None
    streams: Dict[MediaKind, MediaStream] = field(default_factory=dict)
    desktop: Optional[MediaStream] = None
    resolution: Optional[str] = None

    @property
    def is_empty(self) -> bool:
        return self.combined is None and not self.streams and self.desktop is None

    def all_streams(self) -> List[MediaStream]:
        result: list[MediaStream] = []
        for stream in (self.desktop, self.combined, *self.streams.values()):
            if stream is not None and stream not in result:
                result.append(stream)
        return result


@dataclass(slots=True, frozen=True)
class TrackDescriptor:
    """Normalized output unit: one stream paired with one elementary track."""

    stream: MediaStream
    track: MediaTrack
    media_type: MediaType
    video_type: Optional[VideoType] = None
    resolution: Optional[str] = None

    def summary(self) -> Dict[str, Any]:
        return {
            "stream_id": self.stream.stream_id,
            "track_id": self.track.track_id,
            "label": self.track.label,
            "media_type": self.media_type.value,
            "video_type": self.video_type.value if self.video_type else None,
            "resolution": self.resolution,
        }


__all__ = [
    "CaptureOutcome",
    "DEFAULT_KINDS",
    "MediaKind",
    "MediaOptions",
    "MediaRequest",
    "MediaStream",
    "MediaTrack",
    "MediaType",
    "RawResultBundle",
    "TrackDescriptor",
    "VideoType",
]
