"""Flatten a raw acquisition result into ordered track descriptors."""

from __future__ import annotations

from typing import List, Optional

from media_acquisition.core.logging_utils import get_module_logger
from media_acquisition.domain.entities import (
    MediaKind,
    MediaStream,
    MediaType,
    RawResultBundle,
    TrackDescriptor,
    VideoType,
)

logger = get_module_logger(__name__)


def normalize(bundle: Optional[RawResultBundle], resolution: Optional[str] = None) -> List[TrackDescriptor]:
    """Return descriptors ordered desktop, audio, camera.

    A combined stream contributes its first audio and first video track; a
    per-kind result contributes the first matching track of each stream. Streams
    without a usable track contribute nothing. Never raises.
    """

    if bundle is None:
        return []
    if resolution is None:
        resolution = bundle.resolution

    descriptors: list[TrackDescriptor] = []

    desktop = bundle.desktop
    if desktop is not None:
        tracks = desktop.get_video_tracks()
        if tracks:
            descriptors.append(
                TrackDescriptor(
                    stream=desktop,
                    track=tracks[0],
                    media_type=MediaType.VIDEO,
                    video_type=VideoType.DESKTOP,
                )
            )
        else:
            logger.debug("Desktop stream %s carries no video track", desktop.stream_id)

    if bundle.combined is not None:
        audio_stream: Optional[MediaStream] = bundle.combined
        video_stream: Optional[MediaStream] = bundle.combined
    else:
        audio_stream = bundle.streams.get(MediaKind.AUDIO)
        video_stream = bundle.streams.get(MediaKind.VIDEO)

    if audio_stream is not None:
        tracks = audio_stream.get_audio_tracks()
        if tracks:
            descriptors.append(
                TrackDescriptor(stream=audio_stream, track=tracks[0], media_type=MediaType.AUDIO)
            )

    if video_stream is not None:
        tracks = video_stream.get_video_tracks()
        if tracks:
            descriptors.append(
                TrackDescriptor(
                    stream=video_stream,
                    track=tracks[0],
                    media_type=MediaType.VIDEO,
                    video_type=VideoType.CAMERA,
                    resolution=resolution,
                )
            )

    return descriptors


__all__ = ["normalize"]
