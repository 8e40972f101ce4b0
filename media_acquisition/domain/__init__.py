"""Domain models, constants and errors for media acquisition."""

from .availability import AvailabilitySnapshot, DeviceAvailabilityTracker
from .entities import (
    DEFAULT_KINDS,
    CaptureOutcome,
    MediaKind,
    MediaOptions,
    MediaRequest,
    MediaStream,
    MediaTrack,
    MediaType,
    RawResultBundle,
    TrackDescriptor,
    VideoType,
)
from .errors import (
    AcquisitionError,
    BackendUnavailable,
    CapabilityUnsupported,
    ConstraintNotSatisfiable,
    DeviceNotFound,
    GeneralAcquisitionError,
    PartialAcquisitionFailure,
    PermissionDenied,
    classify_failure,
)

__all__ = [
    "AcquisitionError",
    "AvailabilitySnapshot",
    "BackendUnavailable",
    "CapabilityUnsupported",
    "CaptureOutcome",
    "ConstraintNotSatisfiable",
    "DEFAULT_KINDS",
    "DeviceAvailabilityTracker",
    "DeviceNotFound",
    "GeneralAcquisitionError",
    "MediaKind",
    "MediaOptions",
    "MediaRequest",
    "MediaStream",
    "MediaTrack",
    "MediaType",
    "PartialAcquisitionFailure",
    "PermissionDenied",
    "RawResultBundle",
    "TrackDescriptor",
    "VideoType",
    "classify_failure",
]
