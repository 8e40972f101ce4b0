"""Translate an abstract media request into backend-shaped constraints.

The builder is pure: it never performs I/O, never raises for bad option
values (they are dropped) and returns a freshly built structure on every call,
so two builds with equal inputs compare equal.

Which shape a backend understands is fixed up front in a ``BackendProfile``;
nothing here inspects the host.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Iterable, Optional, Tuple

from media_acquisition.core.logging_utils import LoggerLike, ensure_structured_logger
from media_acquisition.domain.constants import (
    DEFAULT_SCREEN_SIZE,
    DESKTOP_MAX_FRAME_RATE,
    FALLBACK_MAX_FRAME_RATE,
    FALLBACK_RESOLUTION,
    LEAKY_BUCKET_HINT,
    NESTED_AUDIO_HINTS,
    RESOLUTIONS,
)
from media_acquisition.domain.entities import MediaKind, MediaOptions


class AudioVocabulary(str, Enum):
    """How a backend wants microphone constraints expressed."""

    NESTED = "nested"    # {mandatory: {}, optional: [...]} with named hints
    FLAT = "flat"        # plain True, or a flat object when a device is pinned
    BOOLEAN = "boolean"  # only ``True`` is understood

    @classmethod
    def coerce(cls, value: Any, default: "AudioVocabulary" = None) -> "AudioVocabulary":
        fallback = default or cls.NESTED
        if value is None:
            return fallback
        try:
            return cls(str(value).strip().lower())
        except ValueError:
            return fallback


class ScreenVocabulary(str, Enum):
    """How a backend wants screen-capture constraints expressed."""

    SOURCE = "source"  # chromeMediaSource tag in the mandatory block
    WINDOW = "window"  # mediaSource = "window"
    PLUGIN = "plugin"  # plugin-provided screen source id
    NONE = "none"      # no screen capture at all

    @classmethod
    def coerce(cls, value: Any, default: "ScreenVocabulary" = None) -> "ScreenVocabulary":
        fallback = default or cls.SOURCE
        if value is None:
            return fallback
        try:
            return cls(str(value).strip().lower())
        except ValueError:
            return fallback


@dataclass(slots=True, frozen=True)
class BackendProfile:
    """Static description of the constraint vocabulary a backend accepts."""

    audio_vocabulary: AudioVocabulary = AudioVocabulary.NESTED
    screen_vocabulary: ScreenVocabulary = ScreenVocabulary.SOURCE
    reduced_default_profile: bool = False
    supports_fake_devices: bool = False
    screen_size: Tuple[int, int] = DEFAULT_SCREEN_SIZE
    plugin_source_key: Optional[str] = None


@dataclass(slots=True)
class ConstraintDescriptor:
    """What to ask the backend for. ``False`` means the kind is not requested."""

    audio: Any = False
    video: Any = False
    fake: bool = False
    unsupported: Tuple[MediaKind, ...] = field(default_factory=tuple)

    @property
    def is_supported(self) -> bool:
        return not self.unsupported

    def to_dict(self) -> Dict[str, Any]:
        payload: Dict[str, Any] = {"audio": self.audio, "video": self.video}
        if self.fake:
            payload["fake"] = True
        return payload


def _blank() -> Dict[str, Any]:
    return {"mandatory": {}, "optional": []}


def _positive(value: Any) -> Optional[float]:
    """Return ``value`` as a positive number, or None when unusable."""
    if value is None or isinstance(value, bool):
        return None
    try:
        number = float(value)
    except (TypeError, ValueError):
        return None
    if number <= 0:
        return None
    return int(number) if number.is_integer() else number


def _device_id(value: Any) -> Optional[str]:
    if value is None:
        return None
    text = str(value).strip()
    return text or None


class ConstraintBuilder:
    """Build ``ConstraintDescriptor`` objects for one backend profile."""

    def __init__(self, profile: Optional[BackendProfile] = None, *, logger: LoggerLike = None) -> None:
        self.profile = profile or BackendProfile()
        self._logger = ensure_structured_logger(logger, fallback_name=__name__)

    def build(self, kinds: Iterable[MediaKind], options: Optional[MediaOptions] = None) -> ConstraintDescriptor:
        options = options or MediaOptions()
        requested = [MediaKind.parse(kind) for kind in kinds]
        descriptor = ConstraintDescriptor()
        unsupported: list[MediaKind] = []

        if MediaKind.VIDEO in requested:
            descriptor.video = self._camera_constraints(options)
        if MediaKind.AUDIO in requested:
            descriptor.audio = self._audio_constraints(options)
        if MediaKind.SCREEN in requested:
            screen = self._screen_constraints()
            if screen is None:
                unsupported.append(MediaKind.SCREEN)
            else:
                descriptor.video = screen
        if MediaKind.DESKTOP in requested:
            if self.profile.screen_vocabulary is ScreenVocabulary.NONE:
                unsupported.append(MediaKind.DESKTOP)
            else:
                descriptor.video = self._desktop_constraints(options)

        self._apply_overrides(descriptor, options)

        if options.fake_device and self.profile.supports_fake_devices:
            descriptor.fake = True
        descriptor.unsupported = tuple(unsupported)

        if self._logger.isEnabledFor(logging.DEBUG):
            self._logger.debug(
                "Built constraints for %s: %s",
                ",".join(kind.value for kind in requested) or "nothing",
                descriptor.to_dict(),
            )
        return descriptor

    # ------------------------------------------------------------------
    # Per-kind shapes

    def _camera_constraints(self, options: MediaOptions) -> Dict[str, Any]:
        video = _blank()
        camera_id = _device_id(options.camera_device_id)
        if camera_id:
            video["deviceId"] = camera_id
            video["optional"].append({"sourceId": camera_id})
        video["optional"].append({LEAKY_BUCKET_HINT: True})
        self._apply_resolution(video["mandatory"], options.resolution)
        return video

    def _apply_resolution(self, mandatory: Dict[str, Any], resolution: Optional[str]) -> None:
        label = str(resolution).strip().lower() if resolution is not None else None
        if label in RESOLUTIONS:
            width, height = RESOLUTIONS[label]
        elif self.profile.reduced_default_profile:
            width, height = FALLBACK_RESOLUTION
            mandatory["maxFrameRate"] = FALLBACK_MAX_FRAME_RATE
        else:
            return
        # Exact size rather than a range.
        mandatory["minWidth"] = mandatory["maxWidth"] = width
        mandatory["minHeight"] = mandatory["maxHeight"] = height

    def _audio_constraints(self, options: MediaOptions) -> Any:
        vocabulary = self.profile.audio_vocabulary
        mic_id = _device_id(options.mic_device_id)

        if vocabulary is AudioVocabulary.BOOLEAN:
            return True

        if vocabulary is AudioVocabulary.FLAT:
            if not mic_id:
                return True
            return {"mandatory": {}, "deviceId": mic_id, "optional": [{"sourceId": mic_id}]}

        audio = _blank()
        if mic_id:
            audio["deviceId"] = mic_id
            audio["optional"].append({"sourceId": mic_id})
        audio["optional"].extend({name: value} for name, value in NESTED_AUDIO_HINTS)
        return audio

    def _screen_constraints(self) -> Optional[Dict[str, Any]]:
        vocabulary = self.profile.screen_vocabulary
        if vocabulary is ScreenVocabulary.SOURCE:
            return self._source_shape("screen", None)
        if vocabulary is ScreenVocabulary.WINDOW:
            return {"mozMediaSource": "window", "mediaSource": "window"}
        if vocabulary is ScreenVocabulary.PLUGIN and self.profile.plugin_source_key:
            return {"optional": [{"sourceId": self.profile.plugin_source_key}]}
        return None

    def _desktop_constraints(self, options: MediaOptions) -> Dict[str, Any]:
        return self._source_shape("desktop", _device_id(options.desktop_source_id))

    def _source_shape(self, source: str, source_id: Optional[str]) -> Dict[str, Any]:
        width, height = self.profile.screen_size
        mandatory: Dict[str, Any] = {"chromeMediaSource": source}
        if source == "desktop":
            mandatory["chromeMediaSourceId"] = source_id
        mandatory.update({
            LEAKY_BUCKET_HINT: True,
            "maxWidth": width,
            "maxHeight": height,
            "maxFrameRate": DESKTOP_MAX_FRAME_RATE,
        })
        return {"mandatory": mandatory, "optional": []}

    # ------------------------------------------------------------------
    # Overrides (augment only)

    @staticmethod
    def _apply_overrides(descriptor: ConstraintDescriptor, options: MediaOptions) -> None:
        bandwidth = _positive(options.bandwidth)
        min_fps = _positive(options.min_fps) or _positive(options.fps)
        max_fps = _positive(options.max_fps)
        if bandwidth is None and min_fps is None and max_fps is None:
            return

        video = descriptor.video
        if not isinstance(video, dict):
            # Overrides only tune a video request; they never create one.
            return

        if bandwidth is not None:
            video.setdefault("optional", []).append({"bandwidth": bandwidth})
        mandatory = video.setdefault("mandatory", {})
        if min_fps is not None:
            mandatory.setdefault("minFrameRate", min_fps)
        if max_fps is not None:
            # A cap chosen by the resolution or screen logic stays in place.
            mandatory.setdefault("maxFrameRate", max_fps)


__all__ = [
    "AudioVocabulary",
    "BackendProfile",
    "ConstraintBuilder",
    "ConstraintDescriptor",
    "ScreenVocabulary",
]
