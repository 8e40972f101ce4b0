"""Caller-facing acquisition entry point.

Wires the configured backend, the constraint builder, the orchestrator, the
normalizer and the availability tracker together. Callers only ever see
track descriptors or one classified error.
"""

from __future__ import annotations

from typing import Callable, Dict, Iterable, List, Optional

from media_acquisition.backends.base import CaptureBackend
from media_acquisition.backends.registry import create_backend
from media_acquisition.constraints.builder import ConstraintBuilder
from media_acquisition.core.logging_utils import LoggerLike, ensure_structured_logger
from media_acquisition.domain.availability import AvailabilitySnapshot, DeviceAvailabilityTracker
from media_acquisition.domain.entities import MediaRequest, MediaStream, TrackDescriptor
from media_acquisition.domain.errors import AcquisitionError
from media_acquisition.runtime.normalizer import normalize
from media_acquisition.runtime.orchestrator import AcquisitionOrchestrator

FailureHandler = Callable[[AcquisitionError], None]


class MediaAcquisitionService:
    """Acquire media tracks through one injected capture backend."""

    def __init__(
        self,
        backend: Optional[CaptureBackend],
        *,
        builder: Optional[ConstraintBuilder] = None,
        tracker: Optional[DeviceAvailabilityTracker] = None,
        logger: LoggerLike = None,
    ) -> None:
        self.backend = backend
        self.logger = ensure_structured_logger(logger, fallback_name=__name__)
        self.tracker = tracker or DeviceAvailabilityTracker()
        self.orchestrator = AcquisitionOrchestrator(
            backend,
            builder=builder,
            tracker=self.tracker,
            logger=self.logger.getChild("Orchestrator"),
        )
        self._failure_handlers: List[FailureHandler] = []

        if backend is None:
            self.logger.error("No capture backend available; every acquisition will fail")
        else:
            self.logger.info(
                "Using %s backend (combined=%s, desktop=%s)",
                backend.name,
                backend.supports_combined_capture(),
                backend.supports_desktop_capture(),
            )

    @classmethod
    def from_settings(cls, settings, *, logger: LoggerLike = None, **backend_kwargs) -> "MediaAcquisitionService":
        """Select the configured backend once and build a service around it."""

        log = ensure_structured_logger(logger, fallback_name=__name__)
        backend = create_backend(
            settings.backend,
            profile=settings.backend_profile(),
            logger=log.getChild("Backend"),
            **backend_kwargs,
        )
        return cls(backend, logger=log)

    # ------------------------------------------------------------------
    # Acquisition

    async def acquire(self, request: Optional[MediaRequest] = None) -> List[TrackDescriptor]:
        """Acquire every kind in ``request`` and return normalized descriptors.

        Raises one ``AcquisitionError`` subclass on failure; any partially
        captured streams have already been released at that point.
        """

        request = request or MediaRequest()
        try:
            bundle = await self.orchestrator.acquire(request.kinds, request.options)
        except AcquisitionError as exc:
            self._dispatch_failure(exc)
            raise

        descriptors = normalize(bundle)
        self.logger.info(
            "Acquired %d track(s): %s",
            len(descriptors),
            ", ".join(d.media_type.value if d.video_type is None else d.video_type.value for d in descriptors)
            or "none",
        )
        return descriptors

    def release(self, tracks: Iterable[TrackDescriptor]) -> int:
        """Release each distinct stream behind ``tracks`` once.

        A stream that fails to release is logged and skipped so the rest are
        still released. Returns the number released successfully.
        """

        streams: Dict[str, MediaStream] = {}
        for descriptor in tracks:
            streams.setdefault(descriptor.stream.stream_id, descriptor.stream)

        released = 0
        for stream in streams.values():
            try:
                if self.backend is not None:
                    self.backend.release_stream(stream)
                else:
                    stream.stop()
            except Exception:
                self.logger.warning("Failed to release stream %s", stream.stream_id, exc_info=True)
                continue
            released += 1
        if streams:
            self.logger.debug("Released %d of %d stream(s)", released, len(streams))
        return released

    # ------------------------------------------------------------------
    # Failure handlers

    def add_failure_handler(self, handler: FailureHandler) -> None:
        if handler not in self._failure_handlers:
            self._failure_handlers.append(handler)

    def remove_failure_handler(self, handler: FailureHandler) -> None:
        try:
            self._failure_handlers.remove(handler)
        except ValueError:
            pass

    def _dispatch_failure(self, error: AcquisitionError) -> None:
        self.logger.warning("Acquisition failed [%s]: %s", error.code, error.message)
        for handler in list(self._failure_handlers):
            try:
                handler(error)
            except Exception:
                self.logger.debug("Failure handler %r raised", handler, exc_info=True)

    # ------------------------------------------------------------------
    # Queries

    def is_desktop_sharing_enabled(self) -> bool:
        return self.backend is not None and self.backend.supports_desktop_capture()

    def current_availability(self) -> AvailabilitySnapshot:
        return self.tracker.current_availability()

    def describe_backend(self) -> dict:
        if self.backend is None:
            return {"name": None, "available": False, "combined_capture": False, "desktop_capture": False}
        info = self.backend.describe()
        info["available"] = True
        return info
