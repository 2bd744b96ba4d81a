"""Tests for probe domain models and track tags."""

import math
from pathlib import Path

from hdrsucks.domain.enums import ArtifactKind, CodecType, SideDataKind
from hdrsucks.domain.models import (
    Disposition,
    FrameDescriptor,
    ProbeResult,
    StreamDescriptor,
    TrackTagSet,
)


class TestEnums:
    """Tests for the probe-facing enums."""

    def test_codec_type_from_probe(self):
        assert CodecType.from_probe("video") == CodecType.VIDEO
        assert CodecType.from_probe(None) == CodecType.UNKNOWN
        assert CodecType.from_probe("mystery") == CodecType.UNKNOWN

    def test_side_data_kind_from_type_name(self):
        """Only the four HDR side data types are recognised."""
        assert (
            SideDataKind.from_type_name("Mastering display metadata")
            == SideDataKind.MASTERING_DISPLAY
        )
        assert (
            SideDataKind.from_type_name("Dolby Vision RPU Data")
            == SideDataKind.OTHER
        )
        assert SideDataKind.from_type_name(None) == SideDataKind.OTHER

    def test_artifact_extensions(self):
        assert ArtifactKind.VIDEO_STREAM.extension == ".hevc"
        assert ArtifactKind.DOVI_RPU.extension == ".bin"
        assert ArtifactKind.HDR10_PLUS_JSON.extension == ".json"
        assert ArtifactKind.AUDIO_STREAM.extension == ".opus"


class TestStreamDescriptor:
    """Tests for StreamDescriptor accessors."""

    def test_tag_lookup_is_case_insensitive(self):
        stream = StreamDescriptor(
            index=0, codec_type=CodecType.VIDEO, tags={"LANGUAGE": "jpn"}
        )
        assert stream.language == "jpn"
        assert stream.tag("Language") == "jpn"

    def test_frame_rate(self):
        stream = StreamDescriptor(
            index=0, codec_type=CodecType.VIDEO, r_frame_rate="30000/1001"
        )
        assert math.isclose(stream.frame_rate, 29.97, abs_tol=0.01)

    def test_missing_frame_rate_is_nan(self):
        stream = StreamDescriptor(index=0, codec_type=CodecType.VIDEO)
        assert math.isnan(stream.frame_rate)

    def test_interlaced_field_orders(self):
        """tt, bb, tb and bt are interlaced; everything else is not."""
        for order in ("tt", "bb", "tb", "bt"):
            stream = StreamDescriptor(
                index=0, codec_type=CodecType.VIDEO, field_order=order
            )
            assert stream.is_interlaced
        for order in ("progressive", "unknown", None):
            stream = StreamDescriptor(
                index=0, codec_type=CodecType.VIDEO, field_order=order
            )
            assert not stream.is_interlaced


class TestProbeResult:
    """Tests for ProbeResult stream and frame selection."""

    def test_first_video_stream_selected(self):
        result = ProbeResult(
            path=Path("in.mkv"),
            streams=(
                StreamDescriptor(index=0, codec_type=CodecType.AUDIO),
                StreamDescriptor(index=1, codec_type=CodecType.VIDEO),
                StreamDescriptor(index=2, codec_type=CodecType.VIDEO),
            ),
        )
        assert result.video_stream.index == 1

    def test_frame_matched_by_stream_index(self):
        """Frames of other streams are skipped."""
        result = ProbeResult(
            path=Path("in.mkv"),
            streams=(StreamDescriptor(index=1, codec_type=CodecType.VIDEO),),
            frames=(
                FrameDescriptor(media_type="audio", stream_index=0),
                FrameDescriptor(media_type="video", stream_index=1),
            ),
        )
        assert result.first_video_frame.stream_index == 1

    def test_frame_falls_back_to_media_type(self):
        result = ProbeResult(
            path=Path("in.mkv"),
            streams=(StreamDescriptor(index=0, codec_type=CodecType.VIDEO),),
            frames=(FrameDescriptor(media_type="video"),),
        )
        assert result.first_video_frame is not None

    def test_no_video(self):
        result = ProbeResult(path=Path("in.flac"))
        assert result.video_stream is None
        assert result.first_video_frame is None


class TestTrackTagSet:
    """Tests for TrackTagSet.from_stream."""

    def test_copies_language_and_disposition(self):
        stream = StreamDescriptor(
            index=2,
            codec_type=CodecType.AUDIO,
            tags={"language": "fre"},
            disposition=Disposition(commentary=True, visual_impaired=True),
        )
        tags = TrackTagSet.from_stream(stream)

        assert tags.language == "fre"
        assert tags.commentary is True
        assert tags.visual_impaired is True
        assert tags.default is False

    def test_untagged_language_defaults_to_english(self):
        stream = StreamDescriptor(index=0, codec_type=CodecType.VIDEO)
        assert TrackTagSet.from_stream(stream).language == "eng"
