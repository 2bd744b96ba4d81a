"""Tests for the ffprobe introspector."""

import json
from pathlib import Path
from unittest.mock import patch

import pytest

from hdrsucks.exceptions import ProbeError
from hdrsucks.introspector.ffprobe import FFprobeIntrospector


class TestBuildCommand:
    """Tests for FFprobeIntrospector.build_command."""

    def test_single_invocation_for_streams_and_frames(self):
        """Streams, format and frames are requested in one call."""
        command = FFprobeIntrospector("/opt/ffprobe").build_command(
            Path("/media/in.mkv")
        )

        assert command == [
            "/opt/ffprobe",
            "-hide_banner",
            "-v",
            "error",
            "-of",
            "json",
            "-show_format",
            "-show_streams",
            "-show_frames",
            "-read_intervals",
            "%+2",
            "/media/in.mkv",
        ]


class TestProbe:
    """Tests for FFprobeIntrospector.probe."""

    @patch("hdrsucks.introspector.ffprobe.run_command")
    def test_parses_output(self, mock_run, hdr10_fixture):
        mock_run.return_value = (json.dumps(hdr10_fixture), "", 0)

        result = FFprobeIntrospector().probe(Path("/media/hdr10.mkv"))

        assert result.path == Path("/media/hdr10.mkv")
        assert result.video_stream.codec_name == "hevc"
        mock_run.assert_called_once()

    @patch("hdrsucks.introspector.ffprobe.run_command")
    def test_missing_ffprobe(self, mock_run):
        mock_run.side_effect = FileNotFoundError("ffprobe")

        with pytest.raises(ProbeError, match="ffprobe not found") as exc_info:
            FFprobeIntrospector().probe(Path("/media/in.mkv"))

        assert isinstance(exc_info.value.__cause__, FileNotFoundError)

    @patch("hdrsucks.introspector.ffprobe.run_command")
    def test_non_zero_exit(self, mock_run):
        """ffprobe's diagnostic output ends up in the error message."""
        mock_run.return_value = ("", "in.mkv: Invalid data found\n", 1)

        with pytest.raises(ProbeError, match="Invalid data found"):
            FFprobeIntrospector().probe(Path("/media/in.mkv"))

    @patch("hdrsucks.introspector.ffprobe.run_command")
    def test_invalid_json(self, mock_run):
        mock_run.return_value = ("{not json", "", 0)

        with pytest.raises(ProbeError, match="Invalid ffprobe output"):
            FFprobeIntrospector().probe(Path("/media/in.mkv"))

    @patch("hdrsucks.introspector.ffprobe.run_command")
    def test_missing_streams(self, mock_run):
        mock_run.return_value = ("{}", "", 0)

        with pytest.raises(ProbeError, match="Missing 'streams'"):
            FFprobeIntrospector().probe(Path("/media/in.mkv"))
