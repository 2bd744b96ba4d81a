"""FFprobe-based implementation of the MediaIntrospector protocol."""

import json
import logging
from pathlib import Path

from hdrsucks.core.subprocess_utils import run_command
from hdrsucks.domain.models import ProbeResult
from hdrsucks.exceptions import ProbeError
from hdrsucks.introspector.parsers import parse_ffprobe_output

logger = logging.getLogger(__name__)

# Frames are only read from the start of the file; two seconds is enough for
# the first video frame even when audio packets come first.
READ_INTERVAL = "%+2"


class FFprobeIntrospector:
    """ffprobe-based implementation of MediaIntrospector protocol.

    Runs ffprobe exactly once per file, asking for format, stream and frame
    data from the earliest readable interval.
    """

    def __init__(self, ffprobe_path: str | Path = "ffprobe") -> None:
        """Initialize the introspector.

        Args:
            ffprobe_path: ffprobe executable name or path.
        """
        self._ffprobe_path = str(ffprobe_path)

    def build_command(self, path: Path) -> list[str]:
        """Build the ffprobe argument list for a file."""
        return [
            self._ffprobe_path,
            "-hide_banner",
            "-v",
            "error",
            "-of",
            "json",
            "-show_format",
            "-show_streams",
            "-show_frames",
            "-read_intervals",
            READ_INTERVAL,
            str(path),
        ]

    def probe(self, path: Path) -> ProbeResult:
        """Extract metadata from a media file.

        Args:
            path: Path to the media file.

        Returns:
            ProbeResult containing streams, frames and format info.

        Raises:
            ProbeError: If ffprobe is missing, exits non-zero, or prints
                output that is not a valid probe document.
        """
        try:
            stdout, stderr, returncode = run_command(self.build_command(path))
        except FileNotFoundError as e:
            raise ProbeError(
                f"ffprobe not found at '{self._ffprobe_path}'. "
                "Install ffmpeg or set FFPROBE_PATH."
            ) from e

        if returncode != 0:
            raise ProbeError(
                f"ffprobe failed for {path} (exit code {returncode}): "
                f"{stderr.strip() or 'no diagnostic output'}"
            )

        try:
            data = json.loads(stdout)
        except json.JSONDecodeError as e:
            raise ProbeError(f"Invalid ffprobe output for {path}: {e}") from e

        if not isinstance(data, dict) or "streams" not in data:
            raise ProbeError(
                f"Missing 'streams' in ffprobe output for {path}. "
                "File may be corrupted or not a valid media file."
            )

        result = parse_ffprobe_output(path, data)
        logger.debug(
            "Probed %s: %d streams, %d frames",
            path,
            len(result.streams),
            len(result.frames),
        )
        return result
