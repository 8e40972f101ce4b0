"""Host capture backend: OpenCV cameras, sounddevice microphones, mss screens.

Each kind needs its own device call, so this backend is per-device only.
Blocking open/close calls run through ``asyncio.to_thread``.
"""

from __future__ import annotations

import asyncio
from typing import Any, Optional, Union

import numpy as np

from media_acquisition.constraints.builder import AudioVocabulary, BackendProfile, ConstraintDescriptor
from media_acquisition.core.logging_utils import LoggerLike, ensure_structured_logger
from media_acquisition.domain.entities import MediaKind, MediaStream, MediaTrack, MediaType

from .base import CaptureBackend, read_constraint, requested_device

DEFAULT_SAMPLE_RATE = 48_000


class OverconstrainedError(Exception):
    """The device opened but cannot honour one of the mandatory constraints."""

    def __init__(self, constraint: str, message: str) -> None:
        super().__init__(message)
        self.constraint = constraint


def _device_index(device: Optional[str]) -> Union[int, str, None]:
    if device is None:
        return None
    return int(device) if device.isdigit() else device


class HostBackend(CaptureBackend):
    """Per-device capture against the local machine's devices."""

    name = "host"

    def __init__(
        self,
        *,
        sample_rate: int = DEFAULT_SAMPLE_RATE,
        profile: Optional[BackendProfile] = None,
        logger: LoggerLike = None,
    ) -> None:
        super().__init__(profile)
        self.sample_rate = max(1, int(sample_rate))
        self._logger = ensure_structured_logger(logger, fallback_name=__name__)

    @classmethod
    def default_profile(cls) -> BackendProfile:
        return BackendProfile(audio_vocabulary=AudioVocabulary.FLAT)

    def supports_desktop_capture(self) -> bool:
        try:
            import mss  # noqa: F401
        except ImportError:
            return False
        return True

    async def capture_one(self, kind: MediaKind, constraints: ConstraintDescriptor) -> MediaStream:
        kind = MediaKind.parse(kind)
        if kind is MediaKind.AUDIO:
            track = await asyncio.to_thread(self._open_microphone, constraints.audio)
        elif kind is MediaKind.VIDEO:
            track = await asyncio.to_thread(self._open_camera, constraints.video)
        else:
            track = await asyncio.to_thread(self._open_screen, kind, constraints.video)
        return MediaStream([track])

    # ------------------------------------------------------------------
    # Microphone

    def _open_microphone(self, audio: Any) -> MediaTrack:
        import sounddevice as sd

        device = _device_index(requested_device(audio))
        try:
            stream = sd.InputStream(
                device=device,
                channels=1,
                samplerate=self.sample_rate,
                dtype="float32",
            )
        except ValueError as exc:
            # sounddevice reports unknown device names/indices as ValueError
            raise FileNotFoundError(str(exc)) from exc
        try:
            stream.start()
        except Exception:
            stream.close()
            raise
        self._logger.info("Microphone %s opened (%d Hz)", device if device is not None else "default", self.sample_rate)

        def _close() -> None:
            try:
                stream.stop()
            finally:
                stream.close()

        return MediaTrack(
            MediaType.AUDIO,
            label=f"Microphone {device if device is not None else 'default'}",
            device_id=None if device is None else str(device),
            source=stream,
            on_stop=_close,
        )

    # ------------------------------------------------------------------
    # Camera

    def _open_camera(self, video: Any) -> MediaTrack:
        import cv2

        device = _device_index(requested_device(video))
        target = 0 if device is None else device
        cap = cv2.VideoCapture(target)
        if not cap or not cap.isOpened():
            if cap:
                cap.release()
            raise FileNotFoundError(f"Camera {target} could not be opened")

        try:
            self._configure_camera(cv2, cap, video)
        except Exception:
            cap.release()
            raise

        self._logger.info("Camera %s opened", target)
        return MediaTrack(
            MediaType.VIDEO,
            label=f"Camera {target}",
            device_id=str(target),
            source=cap,
            on_stop=cap.release,
        )

    @staticmethod
    def _configure_camera(cv2, cap, video: Any) -> None:
        width = read_constraint(video, "minWidth")
        height = read_constraint(video, "minHeight")
        fps = read_constraint(video, "minFrameRate") or read_constraint(video, "maxFrameRate")
        if width and height:
            cap.set(cv2.CAP_PROP_FRAME_WIDTH, width)
            cap.set(cv2.CAP_PROP_FRAME_HEIGHT, height)
        if fps:
            cap.set(cv2.CAP_PROP_FPS, fps)
        if width and height:
            actual = (int(cap.get(cv2.CAP_PROP_FRAME_WIDTH)), int(cap.get(cv2.CAP_PROP_FRAME_HEIGHT)))
            if actual != (int(width), int(height)):
                raise OverconstrainedError(
                    "minWidth",
                    f"Camera delivered {actual[0]}x{actual[1]} instead of {width}x{height}",
                )

    # ------------------------------------------------------------------
    # Screen / desktop

    def _open_screen(self, kind: MediaKind, video: Any) -> MediaTrack:
        import mss

        source_id = read_constraint(video, "chromeMediaSourceId")
        monitor_index = int(source_id) if isinstance(source_id, str) and source_id.isdigit() else 1
        sct = mss.mss()
        try:
            monitors = sct.monitors
            if monitor_index >= len(monitors):
                raise FileNotFoundError(f"Monitor {monitor_index} does not exist")
            monitor = monitors[monitor_index]
            sct.grab(monitor)
        except Exception:
            sct.close()
            raise

        self._logger.info("%s capture opened on monitor %d", kind.value.capitalize(), monitor_index)
        return MediaTrack(
            MediaType.VIDEO,
            label=f"{kind.value.capitalize()} {monitor_index}",
            device_id=str(monitor_index),
            source=_ScreenGrabber(sct, monitor),
            on_stop=sct.close,
        )


class _ScreenGrabber:
    """Grab one monitor on demand."""

    def __init__(self, sct: Any, monitor: dict) -> None:
        self.sct = sct
        self.monitor = monitor

    def read_frame(self) -> np.ndarray:
        shot = self.sct.grab(self.monitor)
        return np.asarray(shot)[:, :, :3]


__all__ = ["HostBackend", "OverconstrainedError"]
