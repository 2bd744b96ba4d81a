"""Build the ffmpeg | opusenc process pair for one audio track."""

from __future__ import annotations

from pathlib import Path

from hdrsucks.domain.models import StreamDescriptor
from hdrsucks.encoder.command import format_number_arg

DEFAULT_KBPS_PER_CHANNEL = 64
DEFAULT_CHANNELS = 2


def audio_bitrate_kbps(stream: StreamDescriptor, override: int | None = None) -> int:
    """Pick an Opus bitrate for a track.

    Args:
        stream: The audio stream.
        override: Explicit bitrate in kbps; wins when given.

    Returns:
        Bitrate in kbps: 64 per channel unless overridden.
    """
    if override is not None:
        return override
    channels = stream.channels if stream.channels else DEFAULT_CHANNELS
    return DEFAULT_KBPS_PER_CHANNEL * max(channels, 1)


def build_audio_decode_args(
    ffmpeg: str,
    input_path: Path,
    audio_index: int,
    *,
    seek: float | None = None,
    time_limit: float | None = None,
) -> list[str]:
    """Build the ffmpeg command that decodes one audio track to WAV.

    ``-stats`` keeps the progress line on stderr at ``-loglevel error``;
    it is parsed for time, bitrate and speed.

    Args:
        ffmpeg: ffmpeg executable.
        input_path: Source media file.
        audio_index: Index among the file's audio streams (``0:a:N``).
        seek: Start offset in seconds, matching the video stage.
        time_limit: Maximum seconds to decode, matching the video stage.
    """
    args = [ffmpeg, "-nostdin", "-hide_banner", "-loglevel", "error", "-stats"]
    if seek:
        args.extend(["-ss", format_number_arg(seek)])
    args.extend(["-i", str(input_path), "-map", f"0:a:{audio_index}"])
    if time_limit is not None:
        args.extend(["-t", format_number_arg(time_limit)])
    args.extend(["-vn", "-f", "wav", "-rf64", "auto", "-"])
    return args


def build_audio_encode_args(opusenc: str, bitrate_kbps: int, output: Path) -> list[str]:
    """Build the opusenc command reading WAV on stdin."""
    return [opusenc, "--quiet", "--bitrate", str(bitrate_kbps), "-", str(output)]
