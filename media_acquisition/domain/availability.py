"""Last-known availability of audio and video capture."""

from __future__ import annotations

import threading
from dataclasses import dataclass
from typing import Callable, Iterable

from media_acquisition.core.logging_utils import get_module_logger

from .entities import MediaKind

logger = get_module_logger(__name__)


@dataclass(slots=True, frozen=True)
class AvailabilitySnapshot:
    audio: bool = True
    video: bool = True

    def as_dict(self) -> dict[str, bool]:
        return {"audio": self.audio, "video": self.video}


AvailabilityObserver = Callable[[AvailabilitySnapshot], None]


class DeviceAvailabilityTracker:
    """Holds the availability snapshot and notifies observers when a kind flips.

    Only audio and video are tracked; screen/desktop outcomes are ignored.
    Readers get an immutable snapshot; writers replace it whole.
    """

    def __init__(self, *, audio: bool = True, video: bool = True) -> None:
        self._snapshot = AvailabilitySnapshot(audio=audio, video=video)
        self._lock = threading.Lock()
        self._observers: list[AvailabilityObserver] = []

    # ------------------------------------------------------------------
    # Observer helpers

    def subscribe(self, observer: AvailabilityObserver, *, replay: bool = False) -> None:
        if observer not in self._observers:
            self._observers.append(observer)
        if replay:
            observer(self._snapshot)

    def unsubscribe(self, observer: AvailabilityObserver) -> None:
        try:
            self._observers.remove(observer)
        except ValueError:
            pass

    def _notify(self, snapshot: AvailabilitySnapshot) -> None:
        for observer in list(self._observers):
            try:
                observer(snapshot)
            except Exception:
                logger.debug("Availability observer failed", exc_info=True)

    # ------------------------------------------------------------------
    # Read / write

    def current_availability(self) -> AvailabilitySnapshot:
        return self._snapshot

    def record_outcome(self, kind: MediaKind, succeeded: bool) -> bool:
        """Record the outcome of one capture attempt; return True if it flipped."""

        kind = MediaKind.parse(kind)
        if kind not in (MediaKind.AUDIO, MediaKind.VIDEO):
            return False
        available = bool(succeeded)
        with self._lock:
            current = self._snapshot
            if getattr(current, kind.value) == available:
                return False
            if kind is MediaKind.AUDIO:
                updated = AvailabilitySnapshot(audio=available, video=current.video)
            else:
                updated = AvailabilitySnapshot(audio=current.audio, video=available)
            self._snapshot = updated
        logger.debug("%s availability -> %s", kind.value, available)
        self._notify(updated)
        return True

    def record_outcomes(self, kinds: Iterable[MediaKind], succeeded: bool) -> None:
        for kind in kinds:
            self.record_outcome(kind, succeeded)


__all__ = ["AvailabilityObserver", "AvailabilitySnapshot", "DeviceAvailabilityTracker"]
