"""Acquire microphone, camera and screen streams through one interface."""

from importlib.metadata import PackageNotFoundError, version

from media_acquisition.app.service import MediaAcquisitionService
from media_acquisition.backends import CaptureBackend, create_backend
from media_acquisition.constraints import BackendProfile, ConstraintBuilder
from media_acquisition.domain import (
    AcquisitionError,
    DeviceAvailabilityTracker,
    MediaKind,
    MediaOptions,
    MediaRequest,
    TrackDescriptor,
)

try:
    __version__ = version("media-acquisition")
except PackageNotFoundError:  # running from a source checkout
    __version__ = "0.0.0"

__all__ = [
    "AcquisitionError",
    "BackendProfile",
    "CaptureBackend",
    "ConstraintBuilder",
    "DeviceAvailabilityTracker",
    "MediaAcquisitionService",
    "MediaKind",
    "MediaOptions",
    "MediaRequest",
    "TrackDescriptor",
    "__version__",
    "create_backend",
]
