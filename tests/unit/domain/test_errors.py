"""Unit tests for failure classification."""

from __future__ import annotations

import pytest

from media_acquisition.domain.entities import MediaKind
from media_acquisition.domain.errors import (
    AcquisitionError,
    ConstraintNotSatisfiable,
    DeviceNotFound,
    GeneralAcquisitionError,
    PartialAcquisitionFailure,
    PermissionDenied,
    classify_failure,
)
from tests.infrastructure.mocks.backend_mocks import DeviceError


VIDEO = (MediaKind.VIDEO,)


class TestClassifyFailure:

    @pytest.mark.parametrize("cause", [
        PermissionError("denied"),
        DeviceError("PermissionDeniedError"),
        DeviceError("NotAllowedError"),
        DeviceError("SecurityError"),
    ])
    def test_permission(self, cause):
        error = classify_failure(cause, VIDEO)
        assert isinstance(error, PermissionDenied)
        assert error.cause is cause
        assert error.__cause__ is cause
        assert error.kinds == VIDEO

    @pytest.mark.parametrize("cause", [
        FileNotFoundError("no camera"),
        DeviceError("NotFoundError"),
        DeviceError("DevicesNotFoundError"),
    ])
    def test_not_found(self, cause):
        assert isinstance(classify_failure(cause, VIDEO), DeviceNotFound)

    def test_resolution_constraint(self):
        error = classify_failure(DeviceError("OverconstrainedError", constraint="minWidth"), VIDEO)
        assert isinstance(error, ConstraintNotSatisfiable)
        assert error.constraint == "minWidth"
        assert error.resolution_related

    def test_other_constraint(self):
        error = classify_failure(DeviceError("ConstraintNotSatisfiedError", constraint="frameRate"), VIDEO)
        assert isinstance(error, ConstraintNotSatisfiable)
        assert not error.resolution_related

    def test_unknown_is_general(self):
        error = classify_failure(RuntimeError("boom"), VIDEO)
        assert isinstance(error, GeneralAcquisitionError)
        assert "boom" in error.message

    def test_classified_error_passes_through(self):
        original = DeviceNotFound("gone", kinds=VIDEO)
        assert classify_failure(original, (MediaKind.AUDIO,)) is original


class TestPayloads:

    def test_base_payload(self):
        error = PermissionDenied("nope", kinds=("audio",))
        assert error.to_payload() == {"code": "permission_denied", "message": "nope", "kinds": ["audio"]}
        assert isinstance(error, AcquisitionError)

    def test_partial_failure_payload(self):
        cause = DeviceNotFound("no screen", kinds=(MediaKind.DESKTOP,))
        error = PartialAcquisitionFailure(MediaKind.DESKTOP, cause, released=(MediaKind.AUDIO, MediaKind.VIDEO))
        payload = error.to_payload()
        assert payload["failed_kind"] == "desktop"
        assert payload["released"] == ["audio", "video"]
        assert payload["cause"]["code"] == "device_not_found"
        assert error.cause is cause
        assert "released audio, video" in error.message
