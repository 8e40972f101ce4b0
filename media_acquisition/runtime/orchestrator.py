"""Acquisition orchestrator.

Two strategies, chosen by what the injected backend can do:

* combined: one backend call for every camera/microphone kind, then a
  separate call for screen/desktop. Nothing is partially held if the combined
  call fails.
* sequential: one backend call per kind, strictly one after another. The
  first failure stops the queue and every stream captured so far is released
  before the failure is raised.

Availability of audio/video is recorded after each attempt in both strategies.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Optional, Sequence, Tuple

from media_acquisition.backends.base import CaptureBackend
from media_acquisition.constraints.builder import ConstraintBuilder, ConstraintDescriptor
from media_acquisition.core.logging_utils import LoggerLike, ensure_structured_logger
from media_acquisition.domain.availability import DeviceAvailabilityTracker
from media_acquisition.domain.constants import DEFAULT_COMBINED_RESOLUTION
from media_acquisition.domain.entities import (
    CaptureOutcome,
    MediaKind,
    MediaOptions,
    MediaRequest,
    MediaStream,
    RawResultBundle,
)
from media_acquisition.domain.errors import (
    BackendUnavailable,
    CapabilityUnsupported,
    DeviceNotFound,
    GeneralAcquisitionError,
    PartialAcquisitionFailure,
    classify_failure,
)


@dataclass(slots=True)
class AcquisitionSession:
    """State of one sequential acquisition.

    ``acquired`` only grows until the first failure; after that the session
    holds the failure and nothing more is captured.
    """

    pending: List[MediaKind]
    acquired: Dict[MediaKind, CaptureOutcome] = field(default_factory=dict)
    failure: Optional[CaptureOutcome] = None

    @classmethod
    def start(cls, kinds: Iterable[MediaKind]) -> "AcquisitionSession":
        return cls(pending=list(kinds))

    @property
    def failed(self) -> bool:
        return self.failure is not None

    def next_kind(self) -> Optional[MediaKind]:
        if self.failed or not self.pending:
            return None
        return self.pending.pop(0)

    def record(self, outcome: CaptureOutcome) -> None:
        if self.failed:
            raise RuntimeError("session already failed")
        if outcome.succeeded:
            self.acquired[outcome.kind] = outcome
        else:
            self.failure = outcome
            self.pending.clear()

    def held_streams(self) -> List[Tuple[MediaKind, MediaStream]]:
        return [(kind, outcome.stream) for kind, outcome in self.acquired.items() if outcome.stream is not None]


class AcquisitionOrchestrator:
    """Run the combined or sequential strategy against one backend."""

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
        profile = backend.profile if backend is not None else None
        self.builder = builder or ConstraintBuilder(profile, logger=self.logger.getChild("Constraints"))
        self.tracker = tracker or DeviceAvailabilityTracker()

    async def acquire(
        self,
        kinds: Sequence[MediaKind],
        options: Optional[MediaOptions] = None,
    ) -> RawResultBundle:
        try:
            request = MediaRequest(kinds=tuple(kinds), options=options or MediaOptions())
        except ValueError as exc:
            raise CapabilityUnsupported(str(exc), cause=exc) from exc
        if not request.kinds:
            return RawResultBundle(resolution=request.options.resolution)

        backend = self.backend
        if backend is None:
            raise BackendUnavailable("No usable capture backend", kinds=request.kinds)

        desktop_kind = request.desktop_kind
        if desktop_kind is not None and not backend.supports_desktop_capture():
            raise CapabilityUnsupported(
                f"{desktop_kind.value} capture is not supported by the {backend.name} backend",
                kinds=(desktop_kind,),
            )

        if backend.supports_combined_capture():
            self.logger.debug("Combined acquisition of %s", _names(request.kinds))
            return await self._acquire_combined(backend, request)
        self.logger.debug("Sequential acquisition of %s", _names(request.kinds))
        return await self._acquire_sequential(backend, request)

    # ------------------------------------------------------------------
    # Combined strategy

    async def _acquire_combined(self, backend: CaptureBackend, request: MediaRequest) -> RawResultBundle:
        options = request.options.with_default_resolution(DEFAULT_COMBINED_RESOLUTION)
        device_kinds = request.device_kinds
        desktop_kind = request.desktop_kind

        desktop_constraints = None
        if desktop_kind is not None:
            desktop_constraints = self.builder.build((desktop_kind,), options)
            self._require_supported(desktop_constraints)

        bundle = RawResultBundle(resolution=options.resolution)

        if device_kinds:
            constraints = self.builder.build(device_kinds, options)
            self.logger.debug("Combined capture call for %s", _names(device_kinds))
            try:
                stream = await backend.capture_combined(constraints)
            except Exception as exc:
                self.tracker.record_outcomes(device_kinds, False)
                error = classify_failure(exc, device_kinds)
                self.logger.warning("Combined capture of %s failed: %s", _names(device_kinds), error.message)
                raise error
            if stream is None:
                self.tracker.record_outcomes(device_kinds, False)
                raise GeneralAcquisitionError(
                    f"{backend.name} returned no combined stream",
                    kinds=device_kinds,
                )

            missing = _missing_kinds(stream, device_kinds)
            for kind in device_kinds:
                self.tracker.record_outcome(kind, kind not in missing)
            if missing:
                self._release(stream, "incomplete combined stream")
                raise DeviceNotFound(
                    "Unable to get the audio and video tracks "
                    f"(missing {_names(missing)})",
                    kinds=missing,
                )
            self.logger.info("Combined capture of %s succeeded", _names(device_kinds))
            bundle.combined = stream

        if desktop_kind is not None:
            try:
                outcome = await self._capture_one(backend, desktop_kind, desktop_constraints)
            except BaseException:
                for stream in bundle.all_streams():
                    self._release(stream, f"{desktop_kind.value} capture interrupted")
                raise
            if not outcome.succeeded:
                error = classify_failure(outcome.error, (desktop_kind,))
                if bundle.combined is None:
                    raise error
                self._release(bundle.combined, f"{desktop_kind.value} failed")
                raise PartialAcquisitionFailure(desktop_kind, error, released=device_kinds)
            bundle.desktop = outcome.stream

        return bundle

    # ------------------------------------------------------------------
    # Sequential strategy

    async def _acquire_sequential(self, backend: CaptureBackend, request: MediaRequest) -> RawResultBundle:
        options = request.options
        constraints = {kind: self.builder.build((kind,), options) for kind in request.kinds}
        for descriptor in constraints.values():
            self._require_supported(descriptor)

        session = AcquisitionSession.start(request.kinds)
        try:
            while (kind := session.next_kind()) is not None:
                outcome = await self._capture_one(backend, kind, constraints[kind])
                session.record(outcome)
                self.tracker.record_outcome(kind, outcome.succeeded)
        except BaseException:
            released = self._rollback(session)
            self.logger.warning("Sequential acquisition interrupted, released %s", _names(released))
            raise

        if session.failed:
            failed_kind = session.failure.kind
            error = classify_failure(session.failure.error, (failed_kind,))
            released = self._rollback(session)
            if released:
                raise PartialAcquisitionFailure(failed_kind, error, released=released)
            raise error

        bundle = RawResultBundle(resolution=options.resolution)
        for kind, stream in session.held_streams():
            if kind.is_desktop_path:
                bundle.desktop = stream
            else:
                bundle.streams[kind] = stream
        return bundle

    def _rollback(self, session: AcquisitionSession) -> Tuple[MediaKind, ...]:
        released: list[MediaKind] = []
        for kind, stream in session.held_streams():
            self._release(stream, f"rollback of {kind.value}")
            released.append(kind)
        return tuple(released)

    # ------------------------------------------------------------------
    # Shared helpers

    async def _capture_one(
        self,
        backend: CaptureBackend,
        kind: MediaKind,
        constraints: ConstraintDescriptor,
    ) -> CaptureOutcome:
        self.logger.debug("Capture call for %s", kind.value)
        try:
            stream = await backend.capture_one(kind, constraints)
        except Exception as exc:
            self.logger.warning("Failed to obtain %s stream: %s", kind.value, exc)
            return CaptureOutcome.failure(kind, exc)
        if stream is None:
            return CaptureOutcome.failure(
                kind,
                GeneralAcquisitionError(f"{backend.name} returned no {kind.value} stream", kinds=(kind,)),
            )
        self.logger.info("Obtained %s stream %s", kind.value, stream.stream_id)
        return CaptureOutcome.success(kind, stream)

    def _release(self, stream: MediaStream, reason: str) -> None:
        try:
            self.backend.release_stream(stream)
        except Exception:
            self.logger.warning("Failed to release %s (%s)", stream.stream_id, reason, exc_info=True)
            return
        self.logger.info("Released %s (%s)", stream.stream_id, reason)

    @staticmethod
    def _require_supported(descriptor: ConstraintDescriptor) -> None:
        if descriptor.unsupported:
            raise CapabilityUnsupported(
                f"No constraint vocabulary for {_names(descriptor.unsupported)}",
                kinds=descriptor.unsupported,
            )


def _missing_kinds(stream: MediaStream, kinds: Sequence[MediaKind]) -> Tuple[MediaKind, ...]:
    missing: list[MediaKind] = []
    if MediaKind.AUDIO in kinds and not stream.get_audio_tracks():
        missing.append(MediaKind.AUDIO)
    if MediaKind.VIDEO in kinds and not stream.get_video_tracks():
        missing.append(MediaKind.VIDEO)
    return tuple(missing)


def _names(kinds: Iterable[MediaKind]) -> str:
    return ", ".join(kind.value for kind in kinds) or "nothing"


__all__ = ["AcquisitionOrchestrator", "AcquisitionSession"]
