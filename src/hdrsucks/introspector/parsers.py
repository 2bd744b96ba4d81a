"""Parsing functions for ffprobe JSON output.

Each function accepts the raw dictionaries ffprobe prints and returns the
typed records from :mod:`hdrsucks.domain.models`. Parsing never raises on
missing fields; :func:`validate_probe_result` enforces the minimum a job
needs.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any

from hdrsucks.core.numbers import NAN, is_nan, parse_rational, parse_timestamp
from hdrsucks.domain.enums import CodecType, SideDataKind
from hdrsucks.domain.models import (
    Disposition,
    FormatInfo,
    FrameDescriptor,
    ProbeResult,
    SideDataRecord,
    StreamDescriptor,
)
from hdrsucks.exceptions import InputValidationError

logger = logging.getLogger(__name__)

# ffprobe disposition keys mapped to Disposition field names
_DISPOSITION_KEYS = {
    "default": "default",
    "forced": "forced",
    "hearing_impaired": "hearing_impaired",
    "visual_impaired": "visual_impaired",
    "descriptions": "text_descriptions",
    "original": "original",
    "comment": "commentary",
}


def _optional_str(value: Any) -> str | None:
    """Normalize a scalar JSON value to a string, keeping None."""
    if value is None:
        return None
    return str(value)


def _string_tags(tags: Any) -> dict[str, str]:
    """Keep only scalar tag values, as strings."""
    if not isinstance(tags, dict):
        return {}
    return {
        str(key): str(value)
        for key, value in tags.items()
        if not isinstance(value, (dict, list))
    }


def parse_side_data(entries: Any) -> tuple[SideDataRecord, ...]:
    """Parse a ``side_data_list`` array.

    Args:
        entries: The list ffprobe printed, or None.

    Returns:
        Records in the order ffprobe listed them.
    """
    if not isinstance(entries, list):
        return ()

    records = []
    for entry in entries:
        if not isinstance(entry, dict):
            continue
        type_name = str(entry.get("side_data_type", ""))
        values = {
            key: str(value)
            for key, value in entry.items()
            if key != "side_data_type" and not isinstance(value, (dict, list))
        }
        records.append(
            SideDataRecord(
                kind=SideDataKind.from_type_name(type_name),
                type_name=type_name,
                values=values,
            )
        )
    return tuple(records)


def parse_disposition(data: Any) -> Disposition:
    """Parse a disposition object (ffprobe uses 0/1 integers)."""
    if not isinstance(data, dict):
        return Disposition()
    flags = {
        field_name: bool(data.get(probe_key, 0))
        for probe_key, field_name in _DISPOSITION_KEYS.items()
    }
    return Disposition(**flags)


def parse_stream(data: dict[str, Any]) -> StreamDescriptor:
    """Parse one entry of ffprobe's ``streams`` array."""
    channels = data.get("channels")
    return StreamDescriptor(
        index=int(data.get("index", 0)),
        codec_type=CodecType.from_probe(data.get("codec_type")),
        codec_name=_optional_str(data.get("codec_name")),
        pix_fmt=_optional_str(data.get("pix_fmt")),
        r_frame_rate=_optional_str(data.get("r_frame_rate")),
        field_order=_optional_str(data.get("field_order")),
        color_range=_optional_str(data.get("color_range")),
        color_primaries=_optional_str(data.get("color_primaries")),
        color_transfer=_optional_str(data.get("color_transfer")),
        color_space=_optional_str(data.get("color_space")),
        channels=int(channels) if isinstance(channels, int) else None,
        duration=_optional_str(data.get("duration")),
        tags=_string_tags(data.get("tags")),
        disposition=parse_disposition(data.get("disposition")),
        side_data=parse_side_data(data.get("side_data_list")),
    )


def parse_frame(data: dict[str, Any]) -> FrameDescriptor:
    """Parse one entry of ffprobe's ``frames`` array."""
    stream_index = data.get("stream_index")
    return FrameDescriptor(
        media_type=_optional_str(data.get("media_type")),
        stream_index=int(stream_index) if isinstance(stream_index, int) else None,
        side_data=parse_side_data(data.get("side_data_list")),
    )


def parse_format(data: Any) -> FormatInfo:
    """Parse ffprobe's ``format`` object."""
    if not isinstance(data, dict):
        return FormatInfo()
    return FormatInfo(
        format_name=_optional_str(data.get("format_name")),
        duration=_optional_str(data.get("duration")),
        tags=_string_tags(data.get("tags")),
    )


def parse_ffprobe_output(path: Path, data: dict[str, Any]) -> ProbeResult:
    """Parse ffprobe JSON output into a ProbeResult.

    Args:
        path: Path of the probed file.
        data: Parsed JSON from ffprobe.

    Returns:
        ProbeResult with streams, frames and format info.
    """
    streams = tuple(
        parse_stream(s) for s in data.get("streams", []) if isinstance(s, dict)
    )
    frames = tuple(
        parse_frame(f) for f in data.get("frames", []) if isinstance(f, dict)
    )
    return ProbeResult(
        path=path,
        streams=streams,
        frames=frames,
        format=parse_format(data.get("format")),
    )


def validate_probe_result(
    result: ProbeResult,
) -> tuple[StreamDescriptor, FrameDescriptor]:
    """Check that a probe result has what a transcode needs.

    Args:
        result: The parsed probe result.

    Returns:
        Tuple of (video stream, first video frame).

    Raises:
        InputValidationError: If there is no video stream or no frame data.
    """
    stream = result.video_stream
    if stream is None:
        raise InputValidationError(f"No video stream found in {result.path}")
    frame = result.first_video_frame
    if frame is None:
        raise InputValidationError(
            f"ffprobe returned no frame data for the video stream of {result.path}"
        )
    return stream, frame


def resolve_duration(stream: StreamDescriptor, fmt: FormatInfo) -> float:
    """Resolve the duration of a stream in seconds.

    Order of preference: the stream's own duration, a ``duration*`` tag
    holding an ``HH:MM:SS[.fraction]`` timestamp (Matroska writes these),
    then the container duration.

    Args:
        stream: Stream to resolve.
        fmt: Container format info, used as the last fallback.

    Returns:
        Duration in seconds, or NaN when nothing usable is present.
    """
    duration = parse_rational(stream.duration)
    if not is_nan(duration):
        return duration

    for key, value in stream.tags.items():
        if key.casefold().startswith("duration"):
            duration = parse_timestamp(value)
            if not is_nan(duration):
                return duration
            logger.debug("Ignoring unparseable duration tag %s=%r", key, value)

    duration = parse_rational(fmt.duration)
    if not is_nan(duration):
        return duration
    return NAN
