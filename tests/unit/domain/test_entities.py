"""Unit tests for the acquisition data model."""

from __future__ import annotations

import pytest

from media_acquisition.domain.entities import (
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


class TestMediaKind:

    def test_parse_strings(self):
        assert MediaKind.parse(" Audio ") is MediaKind.AUDIO
        assert MediaKind.parse(MediaKind.DESKTOP) is MediaKind.DESKTOP

    def test_parse_unknown(self):
        with pytest.raises(ValueError, match="Unknown media kind"):
            MediaKind.parse("hologram")

    def test_desktop_path(self):
        assert MediaKind.SCREEN.is_desktop_path
        assert MediaKind.DESKTOP.is_desktop_path
        assert not MediaKind.VIDEO.is_desktop_path


class TestMediaRequest:

    def test_default_kinds(self):
        request = MediaRequest.create()
        assert request.kinds == (MediaKind.AUDIO, MediaKind.VIDEO)

    def test_explicit_empty_stays_empty(self):
        assert MediaRequest.create(kinds=[]).kinds == ()

    def test_duplicates_removed_order_kept(self):
        request = MediaRequest(kinds=("video", "audio", "video"))
        assert request.kinds == (MediaKind.VIDEO, MediaKind.AUDIO)

    def test_screen_and_desktop_rejected(self):
        with pytest.raises(ValueError):
            MediaRequest(kinds=("screen", "desktop"))

    def test_device_and_desktop_split(self):
        request = MediaRequest(kinds=("desktop", "audio"))
        assert request.device_kinds == (MediaKind.AUDIO,)
        assert request.desktop_kind is MediaKind.DESKTOP

    def test_create_with_option_values(self):
        request = MediaRequest.create(kinds=["video"], resolution="720")
        assert request.options.resolution == "720"

    def test_create_overrides_given_options(self):
        request = MediaRequest.create(options=MediaOptions(resolution="720"), fps=10)
        assert request.options.resolution == "720"
        assert request.options.fps == 10


class TestMediaOptions:

    def test_default_resolution_only_when_unset(self):
        assert MediaOptions().with_default_resolution("360").resolution == "360"
        assert MediaOptions(resolution="720").with_default_resolution("360").resolution == "720"

    def test_from_mapping_coerces_and_drops(self):
        options = MediaOptions.from_mapping({
            "resolution": 720,
            "bandwidth": "300",
            "fps": "fast",
            "camera_device_id": "",
            "fake_device": 1,
            "unknown": "ignored",
        })
        assert options.resolution == "720"
        assert options.bandwidth == 300
        assert options.fps is None
        assert options.camera_device_id is None
        assert options.fake_device is True

    def test_from_mapping_reads_text_flags(self):
        assert MediaOptions.from_mapping({"fake_device": "false"}).fake_device is False
        assert MediaOptions.from_mapping({"fake_device": "No"}).fake_device is False
        assert MediaOptions.from_mapping({"fake_device": "yes"}).fake_device is True
        assert MediaOptions.from_mapping({"fake_device": True}).fake_device is True

    def test_from_mapping_empty(self):
        assert MediaOptions.from_mapping(None) == MediaOptions()


class TestStreams:

    def test_stop_stops_tracks_then_stream(self):
        order = []
        audio = MediaTrack(MediaType.AUDIO, on_stop=lambda: order.append("audio"))
        video = MediaTrack(MediaType.VIDEO, on_stop=lambda: order.append("video"))
        stream = MediaStream([audio, video], on_stop=lambda: order.append("stream"))

        stream.stop()

        assert order == ["audio", "video", "stream"]
        assert stream.stopped and audio.stopped and video.stopped

    def test_stop_is_idempotent(self):
        calls = []
        stream = MediaStream([MediaTrack(MediaType.AUDIO)], on_stop=lambda: calls.append(1))
        stream.stop()
        stream.stop()
        assert calls == [1]

    def test_track_filters(self):
        stream = MediaStream([MediaTrack(MediaType.VIDEO), MediaTrack(MediaType.AUDIO)])
        assert [t.media_type for t in stream.get_audio_tracks()] == [MediaType.AUDIO]
        assert [t.media_type for t in stream.get_video_tracks()] == [MediaType.VIDEO]
        assert len(stream.get_tracks()) == 2

    def test_ids_are_unique(self):
        assert MediaStream().stream_id != MediaStream().stream_id
        assert MediaTrack(MediaType.AUDIO).track_id != MediaTrack(MediaType.AUDIO).track_id


class TestResults:

    def test_capture_outcome(self):
        stream = MediaStream()
        assert CaptureOutcome.success(MediaKind.AUDIO, stream).succeeded
        assert not CaptureOutcome.failure(MediaKind.AUDIO, RuntimeError("x")).succeeded

    def test_bundle_streams_deduplicated(self):
        shared = MediaStream()
        bundle = RawResultBundle(combined=shared, streams={MediaKind.AUDIO: shared})
        assert bundle.all_streams() == [shared]
        assert not bundle.is_empty
        assert RawResultBundle().is_empty

    def test_descriptor_summary(self):
        track = MediaTrack(MediaType.VIDEO, label="cam")
        stream = MediaStream([track])
        descriptor = TrackDescriptor(stream, track, MediaType.VIDEO, VideoType.CAMERA, "360")
        summary = descriptor.summary()
        assert summary["stream_id"] == stream.stream_id
        assert summary["video_type"] == "camera"
        assert summary["resolution"] == "360"
        assert summary["label"] == "cam"
