"""Tests for Dolby Vision and HDR10+ tool invocation."""

from pathlib import Path
from unittest.mock import MagicMock, patch

import pytest

from hdrsucks.config.models import ToolPathsConfig
from hdrsucks.exceptions import HdrExtractError, HdrInjectError
from hdrsucks.executor.pipeline import PipelineResult, ProcessOutcome
from hdrsucks.hdr.sidechannel import HdrSideChannel


def _pipeline_result(producer_rc: int = 0, consumer_rc: int = 0) -> PipelineResult:
    return PipelineResult(
        producer=ProcessOutcome(("ffmpeg",), producer_rc, "ffmpeg said"),
        consumer=ProcessOutcome(("dovi_tool",), consumer_rc, "dovi_tool said"),
    )


@pytest.fixture
def tools() -> ToolPathsConfig:
    return ToolPathsConfig(
        ffmpeg="/opt/ffmpeg",
        dovi_tool="/opt/dovi_tool",
        hdr10plus_tool="/opt/hdr10plus_tool",
    )


class TestExtraction:
    """Tests for extract_dolby_vision and extract_hdr10_plus."""

    def test_stream_copy_args(self, tools):
        args = HdrSideChannel(tools).stream_copy_args(Path("in.mkv"))

        assert args[0] == "/opt/ffmpeg"
        assert args[args.index("-bsf:v") + 1] == "hevc_mp4toannexb"
        assert args[-3:] == ["-f", "hevc", "-"]

    def test_extract_dolby_vision(self, tools):
        runner = MagicMock()
        runner.run.return_value = _pipeline_result()

        HdrSideChannel(tools, runner).extract_dolby_vision(
            Path("in.mkv"), Path("/tmp/rpu.bin")
        )

        producer, consumer = runner.run.call_args[0]
        assert producer[0] == "/opt/ffmpeg"
        assert consumer == ["/opt/dovi_tool", "extract-rpu", "-o", "/tmp/rpu.bin", "-"]

    def test_extract_hdr10_plus(self, tools):
        runner = MagicMock()
        runner.run.return_value = _pipeline_result()

        HdrSideChannel(tools, runner).extract_hdr10_plus(
            Path("in.mkv"), Path("/tmp/meta.json")
        )

        _, consumer = runner.run.call_args[0]
        assert consumer == [
            "/opt/hdr10plus_tool",
            "extract",
            "-o",
            "/tmp/meta.json",
            "-",
        ]

    def test_extractor_failure(self, tools):
        """A failing extractor raises with its exit code and diagnostics."""
        runner = MagicMock()
        runner.run.return_value = _pipeline_result(consumer_rc=1)

        with pytest.raises(HdrExtractError) as exc_info:
            HdrSideChannel(tools, runner).extract_dolby_vision(
                Path("in.mkv"), Path("/tmp/rpu.bin")
            )

        assert exc_info.value.returncode == 1
        assert "dovi_tool said" in exc_info.value.diagnostics

    def test_missing_extractor(self, tools):
        runner = MagicMock()
        runner.run.side_effect = FileNotFoundError(2, "No such file", "/opt/dovi_tool")

        with pytest.raises(HdrExtractError, match="executable not found"):
            HdrSideChannel(tools, runner).extract_dolby_vision(
                Path("in.mkv"), Path("/tmp/rpu.bin")
            )


class TestInjection:
    """Tests for inject_dolby_vision and inject_hdr10_plus."""

    @patch("hdrsucks.hdr.sidechannel.run_command")
    def test_inject_dolby_vision(self, mock_run, tools):
        mock_run.return_value = ("", "", 0)

        HdrSideChannel(tools).inject_dolby_vision(
            Path("a.hevc"), Path("rpu.bin"), Path("b.hevc")
        )

        mock_run.assert_called_once_with(
            [
                "/opt/dovi_tool",
                "inject-rpu",
                "--rpu-in",
                "rpu.bin",
                "-i",
                "a.hevc",
                "-o",
                "b.hevc",
            ]
        )

    @patch("hdrsucks.hdr.sidechannel.run_command")
    def test_inject_hdr10_plus(self, mock_run, tools):
        mock_run.return_value = ("", "", 0)

        HdrSideChannel(tools).inject_hdr10_plus(
            Path("a.hevc"), Path("meta.json"), Path("b.hevc")
        )

        args = mock_run.call_args[0][0]
        assert args[:4] == ["/opt/hdr10plus_tool", "inject", "-j", "meta.json"]

    @patch("hdrsucks.hdr.sidechannel.run_command")
    def test_inject_failure(self, mock_run, tools):
        mock_run.return_value = ("", "Error: invalid RPU\n", 2)

        with pytest.raises(HdrInjectError, match="invalid RPU") as exc_info:
            HdrSideChannel(tools).inject_dolby_vision(
                Path("a.hevc"), Path("rpu.bin"), Path("b.hevc")
            )

        assert exc_info.value.returncode == 2

    @patch("hdrsucks.hdr.sidechannel.run_command")
    def test_inject_missing_tool(self, mock_run, tools):
        mock_run.side_effect = FileNotFoundError("/opt/dovi_tool")

        with pytest.raises(HdrInjectError, match="executable not found"):
            HdrSideChannel(tools).inject_dolby_vision(
                Path("a.hevc"), Path("rpu.bin"), Path("b.hevc")
            )
