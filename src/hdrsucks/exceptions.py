"""Exception hierarchy for transcode jobs.

Every failure that ends a job derives from PipelineError, allowing the
orchestrator to catch all stage errors with a single except clause while
letting programming errors propagate untouched.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from hdrsucks.domain.enums import JobStage


class PipelineError(Exception):
    """Base exception for job stage failures.

    Attributes:
        stage: The stage that raised the error. Attached by the orchestrator
            when the error crosses a stage boundary; None before that.
    """

    def __init__(self, message: str) -> None:
        """Initialize the exception.

        Args:
            message: Human-readable description of the failure.
        """
        super().__init__(message)
        self.stage: JobStage | None = None


class ProbeError(PipelineError):
    """Raised when ffprobe fails or its output cannot be parsed."""


class InputValidationError(PipelineError):
    """Raised when the input or the requested options cannot be used.

    Covers missing video streams or frames, invalid option values and the
    more specific metadata errors below.
    """


class FormatError(InputValidationError):
    """Raised when a pixel format is not a YUV format x265 can be fed."""


class MasteringDataError(InputValidationError):
    """Raised when mastering display side data is incomplete or non-numeric."""


class ToolError(PipelineError):
    """Base exception for an external tool exiting unsuccessfully.

    Attributes:
        returncode: Exit status of the failing process, or None if it could
            not be started.
        diagnostics: Captured diagnostic text (tail of stderr).
    """

    def __init__(
        self,
        message: str,
        returncode: int | None = None,
        diagnostics: str = "",
    ) -> None:
        """Initialize the exception.

        Args:
            message: Human-readable description of the failure.
            returncode: Exit status of the failing process.
            diagnostics: Captured diagnostic text.
        """
        self.returncode = returncode
        self.diagnostics = diagnostics
        full = message
        if returncode is not None:
            full = f"{full} (exit code {returncode})"
        if diagnostics:
            full = f"{full}: {diagnostics}"
        super().__init__(full)


class HdrExtractError(ToolError):
    """Raised when Dolby Vision or HDR10+ extraction fails."""


class HdrInjectError(ToolError):
    """Raised when Dolby Vision or HDR10+ injection fails."""


class TranscodeError(ToolError):
    """Raised when a decode/encode process pair fails."""


class RemuxError(ToolError):
    """Raised when mkvmerge fails to produce the output container."""
