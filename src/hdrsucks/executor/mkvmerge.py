"""Final remux of the encoded stream and source tracks using mkvmerge.

The encoded HEVC stream and any transcoded audio files are written first,
each with explicit language and disposition flags, followed by the source
file with its video (and, when audio was transcoded, its audio) excluded.
This is a lossless remux.

When only part of the source was transcoded, the untouched source tracks are
first cut to the same window with an ffmpeg stream copy so they stay in sync
with the encoded video.
"""

from __future__ import annotations

import logging
import subprocess  # nosec B404 - subprocess is required for mkvmerge execution
from collections.abc import Callable, Sequence
from dataclasses import dataclass
from pathlib import Path

from hdrsucks.domain.models import TrackTagSet
from hdrsucks.encoder.command import format_number_arg
from hdrsucks.exceptions import RemuxError
from hdrsucks.executor.pipeline import DEFAULT_TAIL_LINES, StreamPump
from hdrsucks.executor.progress import parse_mkvmerge_progress

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RemuxTrack:
    """A single-track input file and the tags to write for it."""

    path: Path
    tags: TrackTagSet


def _flag(value: bool) -> str:
    return f"0:{1 if value else 0}"


def track_tag_args(tags: TrackTagSet) -> list[str]:
    """Build mkvmerge per-track options for track 0 of the next input."""
    return [
        "--language",
        f"0:{tags.language}",
        "--default-track-flag",
        _flag(tags.default),
        "--forced-display-flag",
        _flag(tags.forced),
        "--hearing-impaired-flag",
        _flag(tags.hearing_impaired),
        "--visual-impaired-flag",
        _flag(tags.visual_impaired),
        "--text-descriptions-flag",
        _flag(tags.text_descriptions),
        "--original-flag",
        _flag(tags.original),
        "--commentary-flag",
        _flag(tags.commentary),
    ]


def build_source_excerpt_args(
    ffmpeg: str,
    source: Path,
    output: Path,
    *,
    seek: float | None = None,
    time_limit: float | None = None,
    drop_audio: bool = False,
) -> list[str]:
    """Build the ffmpeg command that cuts the non-video source tracks.

    The excerpt starts at ``seek`` and lasts ``time_limit`` seconds, the same
    window the video decoder reads, with timestamps starting at zero.

    Args:
        ffmpeg: ffmpeg executable.
        source: Original input file.
        output: Matroska file to write.
        seek: Start offset in seconds.
        time_limit: Maximum seconds to keep.
        drop_audio: Leave out audio tracks (they were transcoded).
    """
    args = [ffmpeg, "-nostdin", "-hide_banner", "-loglevel", "error"]
    if seek:
        args.extend(["-ss", format_number_arg(seek)])
    args.extend(["-i", str(source), "-map", "0", "-map", "-0:v"])
    if drop_audio:
        args.extend(["-map", "-0:a"])
    if time_limit is not None:
        args.extend(["-t", format_number_arg(time_limit)])
    args.extend(["-dn", "-c", "copy", "-f", "matroska", str(output)])
    return args


class MkvmergeRemuxer:
    """Runs mkvmerge once to assemble the output container."""

    def __init__(
        self, mkvmerge_path: str | Path = "mkvmerge", *, verbose: bool = False
    ) -> None:
        """Initialize the remuxer.

        Args:
            mkvmerge_path: mkvmerge executable name or path.
            verbose: Log every output line at DEBUG.
        """
        self._tool_path = str(mkvmerge_path)
        self._verbose = verbose

    def build_command(
        self,
        output: Path,
        video: RemuxTrack,
        audio: Sequence[RemuxTrack],
        source: Path,
    ) -> list[str]:
        """Build the mkvmerge argument list.

        Args:
            output: Output container path.
            video: Encoded video stream and its tags.
            audio: Transcoded audio files and their tags, in source order.
            source: Original input, supplying all remaining tracks.

        Returns:
            Complete argument list including the executable.
        """
        # English UI keeps "Progress: N%" parseable
        cmd = [self._tool_path, "--ui-language", "en", "-o", str(output)]
        cmd.extend(track_tag_args(video.tags))
        cmd.append(str(video.path))
        for track in audio:
            cmd.extend(track_tag_args(track.tags))
            cmd.append(str(track.path))
        cmd.append("--no-video")
        if audio:
            cmd.append("--no-audio")
        cmd.append(str(source))
        return cmd

    def remux(
        self,
        output: Path,
        video: RemuxTrack,
        audio: Sequence[RemuxTrack],
        source: Path,
        on_progress: Callable[[int], None] | None = None,
    ) -> None:
        """Run mkvmerge.

        Args:
            output: Output container path.
            video: Encoded video stream and its tags.
            audio: Transcoded audio files and their tags.
            source: Original input file.
            on_progress: Called with each reported percentage.

        Raises:
            RemuxError: If mkvmerge is missing or exits non-zero.
        """
        cmd = self.build_command(output, video, audio, source)
        logger.debug("Executing mkvmerge: %s", " ".join(cmd))

        def handle_line(line: str) -> None:
            percent = parse_mkvmerge_progress(line)
            if percent is not None and on_progress is not None:
                on_progress(percent)

        try:
            proc = subprocess.Popen(  # nosec B603 - args are built internally
                cmd,
                stdin=subprocess.DEVNULL,
                stdout=subprocess.PIPE,
                stderr=subprocess.PIPE,
            )
        except FileNotFoundError as e:
            raise RemuxError(
                f"mkvmerge not found at '{self._tool_path}'. "
                "Install MKVToolNix or set MKVMERGE_PATH."
            ) from e

        assert proc.stdout is not None and proc.stderr is not None
        stdout_pump = StreamPump(
            proc.stdout,
            "mkvmerge",
            handle_line,
            verbose=self._verbose,
            tail_lines=DEFAULT_TAIL_LINES,
        )
        stderr_pump = StreamPump(proc.stderr, "mkvmerge", verbose=self._verbose)
        stdout_pump.start()
        stderr_pump.start()
        returncode = proc.wait()
        stdout_pump.join()
        stderr_pump.join()

        if returncode != 0:
            # mkvmerge reports most errors on stdout
            diagnostics = stderr_pump.diagnostics() or "\n".join(
                line
                for line in stdout_pump.tail
                if parse_mkvmerge_progress(line) is None
            )
            raise RemuxError(
                "mkvmerge failed", returncode=returncode, diagnostics=diagnostics
            )
