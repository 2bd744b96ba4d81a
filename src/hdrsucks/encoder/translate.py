"""Translate probe metadata into x265 syntax.

All functions here are pure: they take probe values and return strings or
token lists, raising InputValidationError subclasses when a value cannot
be expressed.
"""

from __future__ import annotations

import math
import re
from collections.abc import Mapping
from dataclasses import dataclass

from hdrsucks.core.numbers import is_nan, parse_rational
from hdrsucks.domain.models import SideDataRecord, StreamDescriptor
from hdrsucks.exceptions import FormatError, MasteringDataError

# Chromaticity coordinates are signalled in 0.00002 units, luminance in
# 0.0001 cd/m2 units (SMPTE ST 2086 as used by x265 --master-display).
CHROMATICITY_SCALE = 50000
LUMINANCE_SCALE = 10000

MASTER_DISPLAY_FIELDS = (
    "green_x",
    "green_y",
    "blue_x",
    "blue_y",
    "red_x",
    "red_y",
    "white_point_x",
    "white_point_y",
    "max_luminance",
    "min_luminance",
)
_LUMINANCE_FIELDS = frozenset({"max_luminance", "min_luminance"})

COLOR_RANGE = {
    "pc": "full",
    "tv": "limited",
}

# ffprobe spellings meaning "not signalled"
_UNSET_COLOR_VALUES = frozenset({"", "unknown", "reserved", "unspecified"})

_NON_DIGITS = re.compile(r"\D")


@dataclass(frozen=True)
class PixelFormat:
    """x265 view of a pixel format."""

    csp: str
    """Chroma subsampling as x265 names it, e.g. ``i420``."""

    depth: str
    """Bit depth digits, e.g. ``"10"``."""

    @property
    def bit_depth(self) -> int:
        return int(self.depth)


def parse_pix_fmt(pix_fmt: str | None) -> PixelFormat:
    """Split an ffmpeg pixel format into chroma subsampling and bit depth.

    Args:
        pix_fmt: Pixel format name such as ``yuv420p10le``.

    Returns:
        PixelFormat; depth defaults to ``"8"`` when the name carries none.

    Raises:
        FormatError: If the format is not YUV or has no subsampling digits.

    Example:
        >>> parse_pix_fmt("yuv420p10le")
        PixelFormat(csp='i420', depth='10')
    """
    if not pix_fmt or "yuv" not in pix_fmt:
        raise FormatError(f"Input must be YUV, got pixel format {pix_fmt!r}")

    head, _, tail = pix_fmt.partition("p")
    subsampling = _NON_DIGITS.sub("", head)
    if not subsampling:
        raise FormatError(f"Cannot determine chroma subsampling of {pix_fmt!r}")
    depth = _NON_DIGITS.sub("", tail) or "8"
    return PixelFormat(csp=f"i{subsampling}", depth=depth)


def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def format_master_display(data: SideDataRecord | Mapping[str, str]) -> str:
    """Format mastering display metadata for ``--master-display``.

    Args:
        data: Mastering display side data record or its field mapping.

    Returns:
        String of the form ``G(gx,gy)B(bx,by)R(rx,ry)WP(wx,wy)L(max,min)``.

    Raises:
        MasteringDataError: If any of the ten fields is missing or
            non-numeric.
    """
    values = data.values if isinstance(data, SideDataRecord) else data

    scaled: dict[str, int] = {}
    for name in MASTER_DISPLAY_FIELDS:
        raw = values.get(name)
        if raw is None or raw == "":
            raise MasteringDataError(f"Mastering display data is missing {name}")
        number = parse_rational(raw)
        if is_nan(number):
            raise MasteringDataError(
                f"Mastering display field {name} is not numeric: {raw!r}"
            )
        scale = LUMINANCE_SCALE if name in _LUMINANCE_FIELDS else CHROMATICITY_SCALE
        scaled[name] = _round_half_up(number * scale)

    return (
        f"G({scaled['green_x']},{scaled['green_y']})"
        f"B({scaled['blue_x']},{scaled['blue_y']})"
        f"R({scaled['red_x']},{scaled['red_y']})"
        f"WP({scaled['white_point_x']},{scaled['white_point_y']})"
        f"L({scaled['max_luminance']},{scaled['min_luminance']})"
    )


def format_max_cll(data: SideDataRecord | Mapping[str, str]) -> str:
    """Format content light level metadata for ``--max-cll``.

    Missing values are written as 0, which x265 treats as "not present".
    """
    values = data.values if isinstance(data, SideDataRecord) else data
    max_content = values.get("max_content") or "0"
    max_average = values.get("max_average") or "0"
    return f"{max_content},{max_average}"


def _is_set(value: str | None) -> bool:
    return value is not None and value.casefold() not in _UNSET_COLOR_VALUES


def color_args(stream: StreamDescriptor) -> list[str]:
    """Build x265 color signalling tokens for a video stream.

    Only values the source actually signals are passed on.
    """
    args: list[str] = []
    if _is_set(stream.color_range) and stream.color_range in COLOR_RANGE:
        args.extend(["--range", COLOR_RANGE[stream.color_range]])
    if _is_set(stream.color_primaries):
        args.extend(["--colorprim", stream.color_primaries])
    if _is_set(stream.color_transfer):
        args.extend(["--transfer", stream.color_transfer])
    if _is_set(stream.color_space):
        args.extend(["--colormatrix", stream.color_space])
    return args


def select_output_depth(
    pix_fmt: PixelFormat, keep_bit_depth: bool
) -> tuple[str, bool]:
    """Choose the x265 output depth.

    8-bit sources are promoted to 10-bit to avoid banding in dark scenes.
    When the source depth must be kept, 8-bit output gets adaptive
    quantization mode 3 instead.

    Args:
        pix_fmt: Parsed input pixel format.
        keep_bit_depth: Keep the input depth instead of promoting.

    Returns:
        Tuple of (output depth, whether ``--aq-mode 3`` is needed).
    """
    if keep_bit_depth:
        return pix_fmt.depth, pix_fmt.depth == "8"
    if pix_fmt.depth == "8":
        return "10", False
    return pix_fmt.depth, False
