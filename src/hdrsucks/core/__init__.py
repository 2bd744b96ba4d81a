"""Core utilities shared across hdr-sucks modules."""

from hdrsucks.core.numbers import (
    NAN,
    format_hms,
    is_nan,
    is_numeric,
    parse_rational,
    parse_timestamp,
)
from hdrsucks.core.subprocess_utils import run_command

__all__ = [
    "NAN",
    "format_hms",
    "is_nan",
    "is_numeric",
    "parse_rational",
    "parse_timestamp",
    "run_command",
]
