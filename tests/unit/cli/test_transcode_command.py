"""Tests for the hdrsucks transcode command."""

from pathlib import Path
from unittest.mock import patch

import pytest
from click.testing import CliRunner

from hdrsucks.cli import main
from hdrsucks.config.models import AppConfig, JobsConfig, LoggingConfig
from hdrsucks.domain.enums import ArtifactKind, JobStage, StageStatus
from hdrsucks.exceptions import TranscodeError
from hdrsucks.jobs import Artifact, JobResult, StageOutcome


@pytest.fixture
def input_file(temp_dir: Path) -> Path:
    path = temp_dir / "movie.mkv"
    path.write_bytes(b"\x1a\x45\xdf\xa3")
    return path


@pytest.fixture
def mock_job():
    """Patch TranscodeJob; the instance's run() returns a successful result."""
    with patch("hdrsucks.cli.transcode.TranscodeJob") as job_cls:
        job = job_cls.return_value
        job.run.return_value = JobResult(
            job_id="abc123",
            input_path=Path("movie.mkv"),
            output_path=Path("/out/movie.hdr-sucks.mkv"),
            state=JobStage.DONE,
        )
        job.ledger.pending = ()
        yield job_cls


def _failed_result(leaked_path: Path) -> JobResult:
    error = TranscodeError("Video transcode failed: x265 failed", returncode=1)
    error.stage = JobStage.TRANSCODE_VIDEO
    return JobResult(
        job_id="abc123",
        input_path=Path("movie.mkv"),
        output_path=Path("out.mkv"),
        state=JobStage.FAILED,
        outcomes=[
            StageOutcome(JobStage.PROBE, StageStatus.COMPLETED, 0.1),
            StageOutcome(
                JobStage.TRANSCODE_VIDEO, StageStatus.FAILED, 2.0, error=error
            ),
        ],
        error=error,
        leaked_artifacts=(
            Artifact(
                ArtifactKind.VIDEO_STREAM,
                leaked_path,
                JobStage.TRANSCODE_VIDEO,
                JobStage.REMUX,
            ),
        ),
    )


def _invoke(runner: CliRunner, args: list[str], config: AppConfig | None = None):
    return runner.invoke(
        main, ["transcode", *args], obj={"config": config or AppConfig()}
    )


class TestTranscodeCommand:
    """Tests for the transcode command."""

    def test_success(self, runner, input_file, mock_job) -> None:
        result = _invoke(runner, [str(input_file)])

        assert result.exit_code == 0
        assert "Output: /out/movie.hdr-sucks.mkv" in result.output

    def test_options_passed_to_job(self, runner, input_file, mock_job, temp_dir):
        out = temp_dir / "out.mkv"
        result = _invoke(
            runner,
            [
                "-p",
                "slow",
                "-q",
                "18",
                "--keep-bit-depth",
                "--double-fps",
                "-s",
                "00:01:00",
                "-t",
                "90",
                "-o",
                "psy-rd=2",
                "--audio",
                "--audio-bitrate",
                "192",
                "--work-dir",
                str(temp_dir),
                str(input_file),
                str(out),
            ],
        )

        assert result.exit_code == 0, result.output
        args, kwargs = mock_job.call_args
        input_path, output_path, options = args
        assert input_path == input_file
        assert output_path == out
        assert options.preset == "slow"
        assert options.crf == 18
        assert options.keep_bit_depth is True
        assert options.double_rate is True
        assert options.seek == 60
        assert options.time_limit == 90
        assert options.extra_args == (("psy-rd", "2"),)
        assert options.transcode_audio is True
        assert options.audio_bitrate == 192
        assert kwargs["work_dir"] == temp_dir

    def test_config_defaults_used(self, runner, input_file, mock_job) -> None:
        """Preset, CRF and temp directory fall back to the configuration."""
        config = AppConfig(jobs=JobsConfig(preset="veryslow", crf=16))

        result = _invoke(runner, [str(input_file)], config)

        assert result.exit_code == 0
        _, options = mock_job.call_args[0][1:]
        assert options.preset == "veryslow"
        assert options.crf == 16
        assert mock_job.call_args.kwargs["work_dir"] is None

    def test_missing_input(self, runner, temp_dir, mock_job) -> None:
        result = _invoke(runner, [str(temp_dir / "missing.mkv")])

        assert result.exit_code == 20
        assert "Input file not found" in result.output
        mock_job.assert_not_called()

    def test_reserved_encoder_argument(self, runner, input_file, mock_job) -> None:
        result = _invoke(runner, ["-o", "output=/tmp/x.hevc", str(input_file)])

        assert result.exit_code == 10
        assert "Invalid options" in result.output
        mock_job.assert_not_called()

    def test_bad_duration(self, runner, input_file, mock_job) -> None:
        result = _invoke(runner, ["-t", "soon", str(input_file)])

        assert result.exit_code != 0
        assert "is not seconds or HH:MM:SS" in result.output

    @pytest.mark.parametrize("value", ["inf", "nan", "1e400"])
    def test_non_finite_duration(self, runner, input_file, mock_job, value) -> None:
        result = _invoke(runner, ["--seek", value, str(input_file)])

        assert result.exit_code != 0
        assert "is not seconds or HH:MM:SS" in result.output
        mock_job.assert_not_called()

    def test_failure_reports_leaked_files(
        self, runner, input_file, mock_job, temp_dir
    ) -> None:
        leaked = temp_dir / ".hdrsucks-abc123.hevc"
        mock_job.return_value.run.return_value = _failed_result(leaked)

        result = _invoke(runner, [str(input_file)])

        assert result.exit_code == 42
        assert f"Temporary file left behind: {leaked}" in result.output
        assert "Error: transcode-video failed: Video transcode failed" in result.output

    def test_cleanup_on_failure(self, runner, input_file, mock_job, temp_dir):
        leaked = temp_dir / ".hdrsucks-abc123.hevc"
        failed = _failed_result(leaked)
        mock_job.return_value.run.return_value = failed

        with patch("hdrsucks.cli.transcode.cleanup_artifacts") as cleanup:
            cleanup.side_effect = lambda r: setattr(r, "leaked_artifacts", ())
            result = _invoke(runner, ["--cleanup-on-failure", str(input_file)])

        assert result.exit_code == 42
        cleanup.assert_called_once_with(failed)
        assert "Temporary file left behind" not in result.output

    def test_interrupted(self, runner, input_file, mock_job) -> None:
        mock_job.return_value.run.side_effect = KeyboardInterrupt

        result = _invoke(runner, [str(input_file)])

        assert result.exit_code == 2
        assert "Interrupted" in result.output

    def test_verbose_enables_debug_logging(self, runner, input_file, mock_job):
        with patch("hdrsucks.cli.transcode._enable_debug_logging") as enable:
            result = _invoke(runner, ["-v", str(input_file)])

        assert result.exit_code == 0
        enable.assert_called_once()
        assert mock_job.call_args[0][2].verbose is True

    def test_json_logging_disables_progress(self, runner, input_file, mock_job):
        config = AppConfig(logging=LoggingConfig(format="json"))

        _invoke(runner, [str(input_file)], config)

        assert mock_job.call_args.kwargs["progress"].enabled is False


class TestMainGroup:
    """Tests for the top-level command group."""

    def test_help_lists_commands(self, runner) -> None:
        result = runner.invoke(main, ["--help"])

        assert result.exit_code == 0
        assert "transcode" in result.output
        assert "doctor" in result.output

    def test_invalid_config_file(self, runner, temp_dir) -> None:
        """An explicitly given config file must parse."""
        config_file = temp_dir / "config.toml"
        config_file.write_text("[tools\n")

        with patch("hdrsucks.cli.configure_logging"):
            result = runner.invoke(
                main, ["--config", str(config_file), "doctor"], obj={}
            )

        assert result.exit_code == 11
        assert "Cannot load config file" in result.output

    def test_config_loaded_and_logging_configured(self, runner, temp_dir) -> None:
        config_file = temp_dir / "config.toml"
        config_file.write_text('[tools]\nffmpeg = "/opt/ffmpeg"\n')
        obj: dict = {}

        with (
            patch("hdrsucks.cli.configure_logging") as configure,
            patch("hdrsucks.cli.doctor.check_tool_availability", return_value=[]),
        ):
            result = runner.invoke(
                main,
                ["--log-level", "debug", "--config", str(config_file), "doctor"],
                obj=obj,
            )

        assert result.exit_code == 0, result.output
        assert obj["config"].tools.ffmpeg == "/opt/ffmpeg"
        configure.assert_called_once_with(obj["config"].logging)
        assert obj["config"].logging.level == "debug"
