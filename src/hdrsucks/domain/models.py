"""Domain models for probe results and container track tags.

These records replace ffprobe's open-ended JSON with named, optional
fields. Missing strings are None, missing flags are False and numeric
values are parsed on access, yielding NaN when absent or malformed.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from pathlib import Path

from hdrsucks.core.numbers import parse_rational
from hdrsucks.domain.enums import CodecType, SideDataKind

# Field orders that mean the picture is made of two interleaved fields
INTERLACED_FIELD_ORDERS = frozenset({"tt", "bb", "tb", "bt"})

DEFAULT_LANGUAGE = "eng"


def _lookup_tag(tags: Mapping[str, str], name: str) -> str | None:
    """Case-insensitive tag lookup (MKV uses upper case, MP4 lower case)."""
    wanted = name.casefold()
    for key, value in tags.items():
        if key.casefold() == wanted:
            return value
    return None


@dataclass(frozen=True)
class SideDataRecord:
    """A side data entry attached to a stream or a frame."""

    kind: SideDataKind
    type_name: str
    """Raw ``side_data_type`` string as printed by ffprobe."""

    values: Mapping[str, str] = field(default_factory=dict)
    """Remaining fields in ffprobe's textual form (e.g. ``"34000/50000"``)."""

    def get(self, key: str) -> str | None:
        """Get a field value, or None if absent."""
        return self.values.get(key)


@dataclass(frozen=True)
class Disposition:
    """Container disposition flags for a stream."""

    default: bool = False
    forced: bool = False
    hearing_impaired: bool = False
    visual_impaired: bool = False
    text_descriptions: bool = False
    original: bool = False
    commentary: bool = False


@dataclass(frozen=True)
class StreamDescriptor:
    """Per-stream attributes from ffprobe's ``streams`` array."""

    index: int
    codec_type: CodecType
    codec_name: str | None = None
    pix_fmt: str | None = None
    r_frame_rate: str | None = None
    field_order: str | None = None
    color_range: str | None = None
    color_primaries: str | None = None
    color_transfer: str | None = None
    color_space: str | None = None
    channels: int | None = None
    duration: str | None = None
    tags: Mapping[str, str] = field(default_factory=dict)
    disposition: Disposition = field(default_factory=Disposition)
    side_data: tuple[SideDataRecord, ...] = ()

    def tag(self, name: str) -> str | None:
        """Get a tag value by case-insensitive name."""
        return _lookup_tag(self.tags, name)

    @property
    def language(self) -> str | None:
        """Language tag, if present."""
        return self.tag("language")

    @property
    def frame_rate(self) -> float:
        """Frame rate as a float, NaN when unknown."""
        return parse_rational(self.r_frame_rate)

    @property
    def is_interlaced(self) -> bool:
        """True when the field order describes interlaced content."""
        return (self.field_order or "").casefold() in INTERLACED_FIELD_ORDERS


@dataclass(frozen=True)
class FrameDescriptor:
    """Per-frame attributes from ffprobe's ``frames`` array."""

    media_type: str | None = None
    stream_index: int | None = None
    side_data: tuple[SideDataRecord, ...] = ()


@dataclass(frozen=True)
class FormatInfo:
    """Container-level attributes from ffprobe's ``format`` object."""

    format_name: str | None = None
    duration: str | None = None
    tags: Mapping[str, str] = field(default_factory=dict)


@dataclass(frozen=True)
class ProbeResult:
    """Parsed ffprobe output for one media file."""

    path: Path
    streams: tuple[StreamDescriptor, ...] = ()
    frames: tuple[FrameDescriptor, ...] = ()
    format: FormatInfo = field(default_factory=FormatInfo)

    @property
    def video_stream(self) -> StreamDescriptor | None:
        """First video stream, which is the one that gets transcoded."""
        for stream in self.streams:
            if stream.codec_type == CodecType.VIDEO:
                return stream
        return None

    @property
    def first_video_frame(self) -> FrameDescriptor | None:
        """First decoded frame belonging to the selected video stream.

        Falls back to the first frame ffprobe labelled as video when no
        frame carries the stream's index.
        """
        stream = self.video_stream
        if stream is not None:
            for frame in self.frames:
                if frame.stream_index == stream.index:
                    return frame
        for frame in self.frames:
            if frame.media_type == CodecType.VIDEO.value:
                return frame
        return None

    @property
    def audio_streams(self) -> tuple[StreamDescriptor, ...]:
        """Audio streams in container order."""
        return tuple(s for s in self.streams if s.codec_type == CodecType.AUDIO)


@dataclass(frozen=True)
class TrackTagSet:
    """Metadata written for one track of the output container."""

    language: str = DEFAULT_LANGUAGE
    default: bool = False
    forced: bool = False
    hearing_impaired: bool = False
    visual_impaired: bool = False
    text_descriptions: bool = False
    original: bool = False
    commentary: bool = False

    @classmethod
    def from_stream(cls, stream: StreamDescriptor) -> TrackTagSet:
        """Copy language and disposition from a probed stream.

        Args:
            stream: The stream whose tags should carry over.

        Returns:
            A new TrackTagSet; language defaults to ``eng`` when untagged.
        """
        d = stream.disposition
        return cls(
            language=stream.language or DEFAULT_LANGUAGE,
            default=d.default,
            forced=d.forced,
            hearing_impaired=d.hearing_impaired,
            visual_impaired=d.visual_impaired,
            text_descriptions=d.text_descriptions,
            original=d.original,
            commentary=d.commentary,
        )
