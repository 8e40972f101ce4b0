"""Unit tests for MediaAcquisitionService."""

from __future__ import annotations

import pytest

from media_acquisition.app.service import MediaAcquisitionService
from media_acquisition.backends.synthetic import SyntheticBackend
from media_acquisition.config.settings import AcquisitionSettings
from media_acquisition.domain.entities import MediaKind, MediaOptions, MediaRequest
from media_acquisition.domain.errors import (
    BackendUnavailable,
    DeviceNotFound,
    PartialAcquisitionFailure,
    PermissionDenied,
)
from tests.infrastructure.helpers import assert_all_released, assert_descriptor_layout, run_async
from tests.infrastructure.mocks.backend_mocks import DeviceError, ScriptedBackend


AUDIO, VIDEO, DESKTOP = MediaKind.AUDIO, MediaKind.VIDEO, MediaKind.DESKTOP


class TestAcquire:

    def test_combined_defaults(self, combined_backend):
        service = MediaAcquisitionService(combined_backend)
        tracks = run_async(service.acquire())

        assert combined_backend.methods() == ["capture_combined"]
        assert_descriptor_layout(tracks, ["audio", "camera"])
        assert tracks[1].resolution == "360"

    def test_combined_with_desktop(self, combined_backend):
        service = MediaAcquisitionService(combined_backend)
        tracks = run_async(service.acquire(MediaRequest.create(kinds=["audio", "video", "desktop"])))
        assert_descriptor_layout(tracks, ["desktop", "audio", "camera"])

    def test_sequential(self, sequential_backend):
        service = MediaAcquisitionService(sequential_backend)
        request = MediaRequest.create(kinds=["video", "audio"], resolution="720")
        tracks = run_async(service.acquire(request))
        assert_descriptor_layout(tracks, ["audio", "camera"])
        assert tracks[0].stream is not tracks[1].stream
        assert tracks[1].resolution == "720"

    def test_empty_request(self, combined_backend):
        service = MediaAcquisitionService(combined_backend)
        assert run_async(service.acquire(MediaRequest.create(kinds=[]))) == []
        assert combined_backend.calls == []

    def test_missing_backend(self):
        service = MediaAcquisitionService(None)
        with pytest.raises(BackendUnavailable):
            run_async(service.acquire())
        assert not service.is_desktop_sharing_enabled()
        assert service.describe_backend()["available"] is False

    def test_partial_failure_surfaces_after_rollback(self, sequential_backend):
        sequential_backend.config.failures[DESKTOP] = DeviceError("NotAllowedError")
        service = MediaAcquisitionService(sequential_backend)

        with pytest.raises(PartialAcquisitionFailure):
            run_async(service.acquire(MediaRequest.create(kinds=["audio", "video", "desktop"])))
        assert_all_released(sequential_backend.streams)


class TestFailureHandlers:

    def test_handlers_see_classified_error(self, combined_backend):
        combined_backend.config.combined_failure = PermissionError("blocked")
        service = MediaAcquisitionService(combined_backend)
        seen = []
        service.add_failure_handler(seen.append)
        service.add_failure_handler(seen.append)

        with pytest.raises(PermissionDenied) as info:
            run_async(service.acquire())

        assert seen == [info.value]

    def test_broken_handler_does_not_mask_error(self, combined_backend):
        combined_backend.config.combined_failure = FileNotFoundError("none")
        service = MediaAcquisitionService(combined_backend)
        seen = []

        def broken(_error):
            raise RuntimeError("handler bug")

        service.add_failure_handler(broken)
        service.add_failure_handler(seen.append)

        with pytest.raises(DeviceNotFound):
            run_async(service.acquire())
        assert len(seen) == 1

    def test_removed_handler_not_called(self, combined_backend):
        combined_backend.config.combined_failure = FileNotFoundError("none")
        service = MediaAcquisitionService(combined_backend)
        seen = []
        service.add_failure_handler(seen.append)
        service.remove_failure_handler(seen.append)
        service.remove_failure_handler(seen.append)

        with pytest.raises(DeviceNotFound):
            run_async(service.acquire())
        assert seen == []


class TestRelease:

    def test_combined_stream_released_once(self, combined_backend):
        service = MediaAcquisitionService(combined_backend)
        tracks = run_async(service.acquire())

        assert service.release(tracks) == 1
        assert combined_backend.released_ids() == [tracks[0].stream.stream_id]
        assert_all_released(combined_backend.streams)

    def test_sequential_streams_released(self, sequential_backend):
        service = MediaAcquisitionService(sequential_backend)
        tracks = run_async(service.acquire(MediaRequest.create(kinds=["audio", "video"])))
        assert service.release(tracks) == 2

    def test_release_nothing(self, combined_backend):
        assert MediaAcquisitionService(combined_backend).release([]) == 0

    def test_failed_release_does_not_stop_the_rest(self, sequential_backend):
        service = MediaAcquisitionService(sequential_backend)
        tracks = run_async(service.acquire(MediaRequest.create(kinds=["audio", "video"])))
        sequential_backend.config.release_failure = RuntimeError("release broke")

        assert service.release(tracks) == 0
        assert sequential_backend.released_ids() == [stream.stream_id for stream in sequential_backend.streams]


class TestQueries:

    def test_desktop_sharing_flag(self):
        assert MediaAcquisitionService(ScriptedBackend(desktop=True)).is_desktop_sharing_enabled()
        assert not MediaAcquisitionService(ScriptedBackend(desktop=False)).is_desktop_sharing_enabled()

    def test_availability_follows_failures(self, combined_backend, tracker):
        combined_backend.config.missing_tracks = (VIDEO,)
        service = MediaAcquisitionService(combined_backend, tracker=tracker)
        with pytest.raises(DeviceNotFound):
            run_async(service.acquire())
        assert service.current_availability().as_dict() == {"audio": True, "video": False}

    def test_availability_recovers_after_device_returns(self, tracker):
        backend = SyntheticBackend(combined=False)
        service = MediaAcquisitionService(backend, tracker=tracker)
        request = MediaRequest.create(kinds=["video"])

        backend.fail(VIDEO, FileNotFoundError("camera unplugged"))
        with pytest.raises(DeviceNotFound):
            run_async(service.acquire(request))
        assert service.current_availability().video is False

        backend.heal(VIDEO)
        tracks = run_async(service.acquire(request))
        assert_descriptor_layout(tracks, ["camera"])
        assert service.current_availability().video is True

    def test_describe_backend(self, combined_backend):
        info = MediaAcquisitionService(combined_backend).describe_backend()
        assert info["name"] == "scripted"
        assert info["combined_capture"] is True
        assert info["available"] is True


class TestFromSettings:

    def test_synthetic_backend_with_configured_profile(self):
        settings = AcquisitionSettings(backend="synthetic", reduced_default_profile=True)
        service = MediaAcquisitionService.from_settings(settings)

        assert isinstance(service.backend, SyntheticBackend)
        assert service.backend.profile.reduced_default_profile is True

        request = MediaRequest.create(kinds=["video"], options=MediaOptions(fake_device=True))
        tracks = run_async(service.acquire(request))
        assert_descriptor_layout(tracks, ["camera"])
        frame = tracks[0].track.source.read_frame()
        assert frame.shape[:2] == (360, 640)
        service.release(tracks)

    def test_unknown_backend(self):
        settings = AcquisitionSettings(backend="nonexistent")
        service = MediaAcquisitionService.from_settings(settings)
        assert service.backend is None
