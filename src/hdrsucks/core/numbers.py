"""Numeric translators for ffprobe values.

ffprobe reports most numbers as strings: rationals such as ``"24000/1001"``,
plain decimals such as ``"5.000000"`` and clock timestamps in tags. These
helpers convert them to floats and use NaN as the "not a number" sentinel.
Callers must check results with :func:`is_nan` before using them.
"""

from __future__ import annotations

import math
import re

NAN = float("nan")

_NUMBER_PATTERN = re.compile(r"^[+-]?(?:\d+(?:\.\d*)?|\.\d+)(?:[eE][+-]?\d+)?$")

# HH:MM:SS with an optional fractional part, e.g. "01:42:17.125000000"
_TIMESTAMP_PATTERN = re.compile(r"^(\d+):([0-5]?\d):([0-5]?\d(?:\.\d+)?)$")

UNKNOWN_HMS = "--:--:--"


def is_numeric(value: str) -> bool:
    """Check whether a string is a plain decimal number."""
    return bool(_NUMBER_PATTERN.match(value.strip()))


def is_nan(value: float | None) -> bool:
    """Check whether a value is missing or the NaN sentinel."""
    return value is None or math.isnan(value)


def parse_rational(value: str | float | int | None) -> float:
    """Parse a rational or plain number.

    Args:
        value: ``"N/D"``, a bare number, or an already numeric value.

    Returns:
        N divided by D, the plain number, or NaN when the value has more
        than one ``/``, a non-numeric part, or a zero denominator.

    Example:
        >>> parse_rational("30000/1001")
        29.97002997002997
        >>> parse_rational("1/2/3")
        nan
    """
    if value is None:
        return NAN
    if isinstance(value, bool):
        return NAN
    if isinstance(value, (int, float)):
        return float(value)

    parts = value.split("/")
    if len(parts) == 1:
        return float(value) if is_numeric(value) else NAN
    if len(parts) > 2:
        return NAN

    numerator, denominator = parts
    if not is_numeric(numerator) or not is_numeric(denominator):
        return NAN
    denominator_value = float(denominator)
    if denominator_value == 0:
        return NAN
    return float(numerator) / denominator_value


def parse_timestamp(value: str | None) -> float:
    """Parse an ``HH:MM:SS[.fraction]`` timestamp into seconds.

    Args:
        value: Timestamp string as found in container duration tags.

    Returns:
        Seconds since midnight of the epoch date, or NaN if the value does
        not have the expected shape.
    """
    if not value:
        return NAN
    match = _TIMESTAMP_PATTERN.match(value.strip())
    if match is None:
        return NAN
    hours, minutes, seconds = match.groups()
    return int(hours) * 3600 + int(minutes) * 60 + float(seconds)


def format_hms(seconds: float | None) -> str:
    """Format a number of seconds as ``HH:MM:SS``.

    Hours are not wrapped at 24. Unknown or negative values format as
    ``--:--:--``.
    """
    if is_nan(seconds) or math.isinf(seconds) or seconds < 0:
        return UNKNOWN_HMS
    total = int(round(seconds))
    hours, remainder = divmod(total, 3600)
    minutes, secs = divmod(remainder, 60)
    return f"{hours:02d}:{minutes:02d}:{secs:02d}"
