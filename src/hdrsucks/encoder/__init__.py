"""Encoder argument derivation for x265, ffmpeg and opusenc."""

from hdrsucks.encoder.command import (
    EncoderArgumentSet,
    build_base_encoder_args,
    build_decode_args,
    deinterlace_filter,
    effective_frame_rate,
    estimate_total_frames,
    extra_arg_tokens,
    parse_extra_args,
    quality_args,
)
from hdrsucks.encoder.translate import (
    PixelFormat,
    color_args,
    format_master_display,
    format_max_cll,
    parse_pix_fmt,
    select_output_depth,
)

__all__ = [
    "EncoderArgumentSet",
    "PixelFormat",
    "build_base_encoder_args",
    "build_decode_args",
    "color_args",
    "deinterlace_filter",
    "effective_frame_rate",
    "estimate_total_frames",
    "extra_arg_tokens",
    "format_master_display",
    "format_max_cll",
    "parse_extra_args",
    "parse_pix_fmt",
    "quality_args",
    "select_output_depth",
]
