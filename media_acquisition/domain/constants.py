"""Constants shared by constraint building and acquisition."""

from __future__ import annotations

from types import MappingProxyType
from typing import Mapping, Tuple

# Resolution label -> (width, height). Aliases share dimensions.
RESOLUTIONS: Mapping[str, Tuple[int, int]] = MappingProxyType({
    "4k": (3840, 2160),
    "1080": (1920, 1080),
    "fullhd": (1920, 1080),
    "720": (1280, 720),
    "hd": (1280, 720),
    "960": (960, 720),
    "640": (640, 480),
    "vga": (640, 480),
    "360": (640, 360),
    "320": (320, 240),
    "180": (320, 180),
})

# Reduced profile for backends whose hardware path rejects larger requests.
FALLBACK_RESOLUTION: Tuple[int, int] = (320, 180)
FALLBACK_MAX_FRAME_RATE = 15

DEFAULT_COMBINED_RESOLUTION = "360"

# Screen content barely moves; keep the grab rate low.
DESKTOP_MAX_FRAME_RATE = 3

DEFAULT_SCREEN_SIZE: Tuple[int, int] = (1920, 1080)

# Optional audio processing hints for the nested vocabulary.
NESTED_AUDIO_HINTS: Tuple[Tuple[str, bool], ...] = (
    ("googEchoCancellation", True),
    ("googAutoGainControl", True),
    ("googNoiseSupression", True),
    ("googHighpassFilter", True),
    ("googNoisesuppression2", True),
    ("googEchoCancellation2", True),
    ("googAutoGainControl2", True),
)

LEAKY_BUCKET_HINT = "googLeakyBucket"

__all__ = [
    "DEFAULT_COMBINED_RESOLUTION",
    "DEFAULT_SCREEN_SIZE",
    "DESKTOP_MAX_FRAME_RATE",
    "FALLBACK_MAX_FRAME_RATE",
    "FALLBACK_RESOLUTION",
    "LEAKY_BUCKET_HINT",
    "NESTED_AUDIO_HINTS",
    "RESOLUTIONS",
]
