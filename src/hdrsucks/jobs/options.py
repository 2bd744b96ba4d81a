"""Validated encode options for a transcode job."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from hdrsucks.encoder.command import parse_extra_args
from hdrsucks.exceptions import InputValidationError

VALID_PRESETS = (
    "ultrafast",
    "superfast",
    "veryfast",
    "faster",
    "fast",
    "medium",
    "slow",
    "slower",
    "veryslow",
    "placebo",
)

# x265 options the job sets itself; overriding them breaks the pipe
RESERVED_ENCODER_ARGS = frozenset({"input", "y4m", "output", "output-depth"})


class EncodeOptions(BaseModel):
    """User-facing options controlling one transcode."""

    model_config = ConfigDict(extra="forbid", frozen=True, allow_inf_nan=False)

    preset: str = "medium"
    crf: float = Field(default=23, ge=0, le=51)
    keep_bit_depth: bool = False
    double_rate: bool = False
    time_limit: float | None = Field(default=None, gt=0)
    seek: float | None = Field(default=None, ge=0)
    extra_args: tuple[tuple[str, str], ...] = ()
    transcode_audio: bool = False
    audio_bitrate: int | None = Field(default=None, gt=0)
    verbose: bool = False

    @field_validator("preset")
    @classmethod
    def validate_preset(cls, v: str) -> str:
        """Validate the x265 preset name."""
        preset = v.casefold()
        if preset not in VALID_PRESETS:
            raise ValueError(
                f"Invalid preset '{v}'. Must be one of: {', '.join(VALID_PRESETS)}"
            )
        return preset

    @field_validator("extra_args", mode="before")
    @classmethod
    def parse_extra_args_string(cls, v: Any) -> Any:
        """Accept ``key=value:key=value`` strings as well as pairs."""
        if v is None:
            return ()
        if isinstance(v, str):
            return parse_extra_args(v)
        return v

    @field_validator("extra_args")
    @classmethod
    def validate_extra_args(
        cls, v: tuple[tuple[str, str], ...]
    ) -> tuple[tuple[str, str], ...]:
        """Reject overrides of arguments the job controls."""
        for key, _ in v:
            if key.lstrip("-") in RESERVED_ENCODER_ARGS:
                raise ValueError(f"Encoder argument '{key}' is set by hdr-sucks")
        return v


def build_encode_options(**values: Any) -> EncodeOptions:
    """Create EncodeOptions, raising InputValidationError on bad values.

    None values are dropped so model defaults apply.
    """
    try:
        return EncodeOptions(**{k: v for k, v in values.items() if v is not None})
    except ValidationError as e:
        problems = "; ".join(
            f"{'.'.join(str(p) for p in err['loc']) or 'options'}: {err['msg']}"
            for err in e.errors()
        )
        raise InputValidationError(f"Invalid options: {problems}") from e
