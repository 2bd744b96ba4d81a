"""Centralized exit codes for all CLI commands.

Exit code ranges:
    0: Success
    1-9: General errors
    10-19: Validation errors (input, options, config)
    20-29: Input file errors
    30-39: Tool/dependency errors
    40-49: Stage failures
"""

from __future__ import annotations

from enum import IntEnum

from hdrsucks.exceptions import (
    HdrExtractError,
    HdrInjectError,
    InputValidationError,
    PipelineError,
    ProbeError,
    RemuxError,
    TranscodeError,
)


class ExitCode(IntEnum):
    """Exit codes for hdrsucks CLI commands."""

    # Success (0)
    SUCCESS = 0

    # General errors (1-9)
    GENERAL_ERROR = 1
    INTERRUPTED = 2  # Ctrl+C / SIGINT

    # Validation errors (10-19)
    INPUT_VALIDATION_ERROR = 10
    CONFIG_ERROR = 11

    # Input file errors (20-29)
    INPUT_NOT_FOUND = 20

    # Tool/dependency errors (30-39)
    TOOL_NOT_AVAILABLE = 30

    # Stage failures (40-49)
    PROBE_FAILED = 40
    HDR_EXTRACT_FAILED = 41
    TRANSCODE_FAILED = 42
    HDR_INJECT_FAILED = 43
    REMUX_FAILED = 44


# Checked in order; subclasses must come before their bases
_ERROR_EXIT_CODES: tuple[tuple[type[PipelineError], ExitCode], ...] = (
    (ProbeError, ExitCode.PROBE_FAILED),
    (InputValidationError, ExitCode.INPUT_VALIDATION_ERROR),
    (HdrExtractError, ExitCode.HDR_EXTRACT_FAILED),
    (TranscodeError, ExitCode.TRANSCODE_FAILED),
    (HdrInjectError, ExitCode.HDR_INJECT_FAILED),
    (RemuxError, ExitCode.REMUX_FAILED),
)


def exit_code_for_error(error: PipelineError) -> ExitCode:
    """Map a job failure to its exit code.

    Errors caused by an executable that could not be started map to
    TOOL_NOT_AVAILABLE regardless of the stage they occurred in.
    """
    if isinstance(error.__cause__, FileNotFoundError):
        return ExitCode.TOOL_NOT_AVAILABLE
    for error_type, code in _ERROR_EXIT_CODES:
        if isinstance(error, error_type):
            return code
    return ExitCode.GENERAL_ERROR
