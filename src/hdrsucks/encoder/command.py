"""Build ffmpeg decode and x265 encode command lines for the video stage.

The decoder writes YUV4MPEG to stdout and x265 reads it from stdin, so
both halves of the pair are built here and must agree on seek, duration
and deinterlacing.
"""

from __future__ import annotations

import logging
import math
from collections.abc import Iterable, Iterator, Sequence
from pathlib import Path

from hdrsucks.core.numbers import is_nan
from hdrsucks.domain.models import StreamDescriptor
from hdrsucks.encoder.translate import PixelFormat, color_args, select_output_depth

logger = logging.getLogger(__name__)


class EncoderArgumentSet:
    """Ordered x265 argument tokens, frozen once the output is set.

    Tokens are accumulated stage by stage (pixel format, color, HDR,
    quality, user overrides). :meth:`finalize` appends the output path and
    freezes the set so the command handed to the process runner can no
    longer change.
    """

    def __init__(self) -> None:
        self._tokens: list[str] = ["--input", "-", "--y4m"]
        self._frozen = False

    def __iter__(self) -> Iterator[str]:
        return iter(self._tokens)

    def __len__(self) -> int:
        return len(self._tokens)

    def __repr__(self) -> str:
        state = "frozen" if self._frozen else "open"
        return f"EncoderArgumentSet({state}, {self._tokens!r})"

    @property
    def frozen(self) -> bool:
        return self._frozen

    @property
    def tokens(self) -> tuple[str, ...]:
        return tuple(self._tokens)

    def add(self, *tokens: str) -> None:
        """Append raw tokens.

        Raises:
            RuntimeError: If the set has been finalized.
        """
        if self._frozen:
            raise RuntimeError("EncoderArgumentSet is frozen; output already set")
        self._tokens.extend(str(token) for token in tokens)

    def add_option(self, name: str, value: object) -> None:
        """Append ``--name value``."""
        self.add(f"--{name}", str(value))

    def extend(self, tokens: Iterable[str]) -> None:
        self.add(*tokens)

    def finalize(self, output: Path) -> tuple[str, ...]:
        """Append the output path and freeze the set.

        Args:
            output: Path of the HEVC elementary stream to write.

        Returns:
            The complete token tuple.
        """
        self.add("--output", str(output))
        self._frozen = True
        return self.tokens


def build_base_encoder_args(
    stream: StreamDescriptor,
    pix_fmt: PixelFormat,
    keep_bit_depth: bool = False,
) -> EncoderArgumentSet:
    """Start an argument set with bit depth and color signalling.

    Args:
        stream: Video stream being transcoded.
        pix_fmt: Its parsed pixel format.
        keep_bit_depth: Keep the input depth instead of promoting 8-bit
            input to 10-bit.

    Returns:
        A new, open EncoderArgumentSet.
    """
    args = EncoderArgumentSet()
    depth, use_aq_mode = select_output_depth(pix_fmt, keep_bit_depth)
    if pix_fmt.depth == "8":
        if use_aq_mode:
            logger.info('Input depth is 8, using "aq-mode=3" to improve darker scenes')
        else:
            logger.info(
                "Input depth is 8, using output depth 10 to improve darker scenes"
            )
    args.add_option("output-depth", depth)
    if use_aq_mode:
        args.add_option("aq-mode", 3)
    args.extend(color_args(stream))
    return args


def format_number_arg(value: float) -> str:
    """Format a number for a command line without exponent notation."""
    if float(value).is_integer():
        return str(int(value))
    return f"{value:f}".rstrip("0").rstrip(".")


def quality_args(preset: str, crf: float) -> list[str]:
    """x265 preset and constant rate factor tokens."""
    return ["--preset", preset, "--crf", format_number_arg(crf)]


def parse_extra_args(value: str) -> tuple[tuple[str, str], ...]:
    """Parse ``key=value:key=value`` into pairs.

    Malformed entries (no ``=``, more than one ``=``, empty key) are skipped
    with a warning.

    Example:
        >>> parse_extra_args("psy-rd=2:no-sao=1")
        (('psy-rd', '2'), ('no-sao', '1'))
    """
    pairs: list[tuple[str, str]] = []
    for entry in value.split(":"):
        if not entry:
            continue
        parts = entry.split("=")
        if len(parts) != 2 or not parts[0]:
            logger.warning("Ignoring malformed encoder argument %r", entry)
            continue
        pairs.append((parts[0], parts[1]))
    return tuple(pairs)


def extra_arg_tokens(pairs: Sequence[tuple[str, str]]) -> list[str]:
    """Expand ``(key, value)`` pairs into ``--key value`` tokens."""
    tokens: list[str] = []
    for key, value in pairs:
        tokens.extend([f"--{key}", value])
    return tokens


def deinterlace_filter(stream: StreamDescriptor, double_rate: bool) -> str | None:
    """Return the yadif filter for interlaced input, or None.

    ``yadif=1`` outputs one frame per field, doubling the frame rate.
    """
    if not stream.is_interlaced:
        return None
    return f"yadif={1 if double_rate else 0}"


def effective_frame_rate(stream: StreamDescriptor, double_rate: bool) -> float:
    """Frame rate of the decoded output after deinterlacing."""
    fps = stream.frame_rate
    if stream.is_interlaced and double_rate:
        return fps * 2
    return fps


def effective_span(
    duration: float,
    seek: float | None = None,
    time_limit: float | None = None,
) -> float:
    """Seconds of media that will actually be decoded."""
    if time_limit is not None:
        return time_limit
    if seek:
        return max(duration - seek, 0.0)
    return duration


def estimate_total_frames(
    duration: float,
    fps: float,
    seek: float | None = None,
    time_limit: float | None = None,
) -> int | None:
    """Estimate how many frames the encoder will receive.

    Returns:
        ``ceil(span * fps)``, or None when the span or rate is unknown.
    """
    span = effective_span(duration, seek, time_limit)
    if is_nan(span) or is_nan(fps) or fps <= 0:
        return None
    return math.ceil(span * fps)


def build_decode_args(
    ffmpeg: str,
    input_path: Path,
    *,
    video_filter: str | None = None,
    seek: float | None = None,
    time_limit: float | None = None,
) -> list[str]:
    """Build the ffmpeg command that decodes the first video stream to y4m.

    Args:
        ffmpeg: ffmpeg executable.
        input_path: Source media file.
        video_filter: Optional ``-vf`` filter (deinterlacing).
        seek: Start offset in seconds.
        time_limit: Maximum seconds to decode.

    Returns:
        Complete argument list including the executable.
    """
    args = [ffmpeg, "-nostdin", "-hide_banner", "-loglevel", "error"]
    if seek:
        args.extend(["-ss", format_number_arg(seek)])
    args.extend(["-i", str(input_path), "-map", "0:v:0"])
    if video_filter:
        args.extend(["-vf", video_filter])
    if time_limit is not None:
        args.extend(["-t", format_number_arg(time_limit)])
    args.extend(["-f", "yuv4mpegpipe", "-strict", "-1", "-"])
    return args
