"""Tests for cli/exit_codes.py module."""

import pytest

from hdrsucks.cli.exit_codes import ExitCode, exit_code_for_error
from hdrsucks.exceptions import (
    FormatError,
    HdrExtractError,
    HdrInjectError,
    InputValidationError,
    MasteringDataError,
    PipelineError,
    ProbeError,
    RemuxError,
    TranscodeError,
)


class TestExitCode:
    """Tests for ExitCode enum."""

    def test_success_is_zero(self) -> None:
        """SUCCESS should be 0."""
        assert ExitCode.SUCCESS == 0

    def test_exit_codes_are_unique(self) -> None:
        """All exit codes should have unique values."""
        values = [int(code) for code in ExitCode]
        assert len(values) == len(set(values))

    def test_exit_code_ranges(self) -> None:
        """Exit codes should be within expected ranges."""
        assert 1 <= ExitCode.INTERRUPTED <= 9
        assert 10 <= ExitCode.CONFIG_ERROR <= 19
        assert 20 <= ExitCode.INPUT_NOT_FOUND <= 29
        assert 30 <= ExitCode.TOOL_NOT_AVAILABLE <= 39
        for code in (
            ExitCode.PROBE_FAILED,
            ExitCode.HDR_EXTRACT_FAILED,
            ExitCode.TRANSCODE_FAILED,
            ExitCode.HDR_INJECT_FAILED,
            ExitCode.REMUX_FAILED,
        ):
            assert 40 <= code <= 49


class TestExitCodeForError:
    """Tests for exit_code_for_error function."""

    @pytest.mark.parametrize(
        "error,expected",
        [
            (ProbeError("x"), ExitCode.PROBE_FAILED),
            (InputValidationError("x"), ExitCode.INPUT_VALIDATION_ERROR),
            (FormatError("x"), ExitCode.INPUT_VALIDATION_ERROR),
            (MasteringDataError("x"), ExitCode.INPUT_VALIDATION_ERROR),
            (HdrExtractError("x", returncode=1), ExitCode.HDR_EXTRACT_FAILED),
            (TranscodeError("x", returncode=1), ExitCode.TRANSCODE_FAILED),
            (HdrInjectError("x", returncode=1), ExitCode.HDR_INJECT_FAILED),
            (RemuxError("x", returncode=2), ExitCode.REMUX_FAILED),
            (PipelineError("x"), ExitCode.GENERAL_ERROR),
        ],
    )
    def test_stage_errors(self, error, expected) -> None:
        assert exit_code_for_error(error) == expected

    def test_missing_executable(self) -> None:
        """An executable that could not be started wins over the stage."""
        try:
            try:
                raise FileNotFoundError(2, "No such file", "x265")
            except FileNotFoundError as e:
                raise TranscodeError("Video transcode failed") from e
        except TranscodeError as error:
            assert exit_code_for_error(error) == ExitCode.TOOL_NOT_AVAILABLE
