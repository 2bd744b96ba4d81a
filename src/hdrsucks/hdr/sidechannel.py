"""Dolby Vision and HDR10+ extraction and injection.

Extraction copies the source's HEVC stream in Annex B framing out of
ffmpeg and pipes it into ``dovi_tool extract-rpu`` or
``hdr10plus_tool extract``, which write a sidecar file. Injection runs the
matching inject operation on the freshly encoded stream and writes a new
stream file.
"""

from __future__ import annotations

import logging
from pathlib import Path

from hdrsucks.config.models import ToolPathsConfig
from hdrsucks.core.subprocess_utils import run_command
from hdrsucks.exceptions import HdrExtractError, HdrInjectError
from hdrsucks.executor.pipeline import ProcessPairRunner, run_checked

logger = logging.getLogger(__name__)


class HdrSideChannel:
    """Runs dovi_tool and hdr10plus_tool for one job."""

    def __init__(
        self, tools: ToolPathsConfig, runner: ProcessPairRunner | None = None
    ) -> None:
        """Initialize the side channel.

        Args:
            tools: Configured tool executables.
            runner: Process pair runner for the extraction pipes.
        """
        self._tools = tools
        self._runner = runner or ProcessPairRunner()

    def stream_copy_args(self, input_path: Path) -> list[str]:
        """ffmpeg command writing the first video stream as raw Annex B HEVC."""
        return [
            self._tools.ffmpeg,
            "-nostdin",
            "-hide_banner",
            "-loglevel",
            "error",
            "-i",
            str(input_path),
            "-map",
            "0:v:0",
            "-c:v",
            "copy",
            "-bsf:v",
            "hevc_mp4toannexb",
            "-f",
            "hevc",
            "-",
        ]

    def extract_dolby_vision(self, input_path: Path, rpu_path: Path) -> None:
        """Extract the Dolby Vision RPU to ``rpu_path``.

        Raises:
            HdrExtractError: If ffmpeg or dovi_tool fails.
        """
        run_checked(
            self._runner,
            self.stream_copy_args(input_path),
            [self._tools.dovi_tool, "extract-rpu", "-o", str(rpu_path), "-"],
            HdrExtractError,
            "Extracting Dolby Vision failed",
        )

    def extract_hdr10_plus(self, input_path: Path, json_path: Path) -> None:
        """Extract HDR10+ dynamic metadata to ``json_path``.

        Raises:
            HdrExtractError: If ffmpeg or hdr10plus_tool fails.
        """
        run_checked(
            self._runner,
            self.stream_copy_args(input_path),
            [self._tools.hdr10plus_tool, "extract", "-o", str(json_path), "-"],
            HdrExtractError,
            "Extracting HDR10+ failed",
        )

    def _inject(self, cmd: list[str], description: str) -> None:
        try:
            _, stderr, returncode = run_command(cmd)
        except FileNotFoundError as e:
            raise HdrInjectError(
                f"{description}: executable not found ({e.filename or e})"
            ) from e
        if returncode != 0:
            raise HdrInjectError(
                description, returncode=returncode, diagnostics=stderr.strip()
            )

    def inject_dolby_vision(
        self, stream_path: Path, rpu_path: Path, output_path: Path
    ) -> None:
        """Write ``stream_path`` with the RPU injected to ``output_path``.

        Raises:
            HdrInjectError: If dovi_tool fails.
        """
        self._inject(
            [
                self._tools.dovi_tool,
                "inject-rpu",
                "--rpu-in",
                str(rpu_path),
                "-i",
                str(stream_path),
                "-o",
                str(output_path),
            ],
            "Injecting Dolby Vision failed",
        )

    def inject_hdr10_plus(
        self, stream_path: Path, json_path: Path, output_path: Path
    ) -> None:
        """Write ``stream_path`` with HDR10+ metadata injected to ``output_path``.

        Raises:
            HdrInjectError: If hdr10plus_tool fails.
        """
        self._inject(
            [
                self._tools.hdr10plus_tool,
                "inject",
                "-j",
                str(json_path),
                "-i",
                str(stream_path),
                "-o",
                str(output_path),
            ],
            "Injecting HDR10+ failed",
        )
