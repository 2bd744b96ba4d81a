"""Progress parsing for x265, ffmpeg and mkvmerge output.

x265 prints ``\\r``-terminated status lines such as::

    1234 frames: 23.45 fps, 3456.78 kb/s

ffmpeg prints ``frame=... time=00:01:23.45 bitrate=... speed=2.0x`` and
mkvmerge prints ``Progress: 42%``. The trackers here turn those lines into
small records that can be rendered as a single in-place status line.
"""

from __future__ import annotations

import math
import re
from collections import deque
from dataclasses import dataclass

from hdrsucks.core.numbers import format_hms, is_nan

X265_PROGRESS_PATTERN = re.compile(
    r"([0-9]+) frames: ([0-9]+\.[0-9]+) fps, ([0-9]+\.[0-9]+) kb/s"
)
AUDIO_PROGRESS_PATTERN = re.compile(
    r"time=\s*(\d+):(\d{2}):(\d{2}(?:\.\d+)?).*?"
    r"bitrate=\s*(\S+).*?speed=\s*(\S+)"
)
MKVMERGE_PROGRESS_PATTERN = re.compile(r"^Progress:\s*(\d+)%")

# Number of fps samples averaged for the ETA
RATE_WINDOW_SIZE = 500


@dataclass(frozen=True)
class EncodeProgress:
    """One parsed x265 status line plus the derived estimate."""

    frames_done: int
    fps: float
    bitrate_kbps: float
    total_frames: int | None
    smoothed_fps: float
    eta_seconds: float | None

    def describe(self) -> str:
        total = str(self.total_frames) if self.total_frames is not None else "?"
        return (
            f"{self.frames_done} / {total} frames, {self.fps:.2f} fps, "
            f"{self.bitrate_kbps:.2f} kb/s, eta {format_hms(self.eta_seconds)}"
        )


class EncodeProgressTracker:
    """Rolling-average ETA over x265 status lines.

    Keeps the most recent ``window`` fps samples; the oldest sample is
    dropped once the window is full. The ETA is
    ``(total - done) / mean(window)``.
    """

    def __init__(
        self, total_frames: int | None, window: int = RATE_WINDOW_SIZE
    ) -> None:
        """Initialize the tracker.

        Args:
            total_frames: Estimated frame count, None when unknown.
            window: Number of rate samples averaged.
        """
        self.total_frames = total_frames
        self._samples: deque[float] = deque(maxlen=window)
        self.latest: EncodeProgress | None = None

    @property
    def sample_count(self) -> int:
        return len(self._samples)

    @property
    def smoothed_fps(self) -> float:
        """Mean of the sample window, NaN before the first sample."""
        if not self._samples:
            return float("nan")
        return math.fsum(self._samples) / len(self._samples)

    def eta_seconds(self, frames_done: int) -> float | None:
        """Seconds left at the smoothed rate, None when unknown."""
        rate = self.smoothed_fps
        if self.total_frames is None or is_nan(rate) or rate <= 0:
            return None
        return max(self.total_frames - frames_done, 0) / rate

    def feed(self, line: str) -> EncodeProgress | None:
        """Parse one diagnostic line.

        Returns:
            EncodeProgress for status lines, None for anything else.
        """
        match = X265_PROGRESS_PATTERN.search(line)
        if match is None:
            return None
        frames_done = int(match.group(1))
        fps = float(match.group(2))
        bitrate = float(match.group(3))
        self._samples.append(fps)
        eta = self.eta_seconds(frames_done)
        self.latest = EncodeProgress(
            frames_done=frames_done,
            fps=fps,
            bitrate_kbps=bitrate,
            total_frames=self.total_frames,
            smoothed_fps=self.smoothed_fps,
            eta_seconds=round(eta) if eta is not None else None,
        )
        return self.latest


@dataclass(frozen=True)
class AudioProgress:
    """Parsed ffmpeg stats line for an audio track."""

    elapsed_seconds: float
    bitrate: str
    speed: str
    duration_seconds: float

    def describe(self) -> str:
        return (
            f"{format_hms(self.elapsed_seconds)} / "
            f"{format_hms(self.duration_seconds)}, "
            f"{self.bitrate}, {self.speed}"
        )


def parse_audio_progress(line: str, duration_seconds: float) -> AudioProgress | None:
    """Parse an ffmpeg stats line.

    Args:
        line: A line from ffmpeg's stderr.
        duration_seconds: Known duration of the track, may be NaN.

    Returns:
        AudioProgress, or None when the line is not a stats line.
    """
    match = AUDIO_PROGRESS_PATTERN.search(line)
    if match is None:
        return None
    hours, minutes, seconds, bitrate, speed = match.groups()
    elapsed = int(hours) * 3600 + int(minutes) * 60 + float(seconds)
    return AudioProgress(
        elapsed_seconds=elapsed,
        bitrate=bitrate,
        speed=speed,
        duration_seconds=duration_seconds,
    )


def parse_mkvmerge_progress(line: str) -> int | None:
    """Extract the percentage from a ``Progress: N%`` line."""
    match = MKVMERGE_PROGRESS_PATTERN.match(line.strip())
    if match is None:
        return None
    return int(match.group(1))
