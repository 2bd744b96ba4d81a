"""Configuration data models.

This module defines dataclasses for hdr-sucks configuration options.
"""

from dataclasses import dataclass, field, fields
from pathlib import Path


@dataclass
class ToolPathsConfig:
    """Configuration for external tool paths.

    Each value is an executable name resolved via PATH, or an explicit path.
    """

    ffmpeg: str = "ffmpeg"
    ffprobe: str = "ffprobe"
    x265: str = "x265"
    dovi_tool: str = "dovi_tool"
    hdr10plus_tool: str = "hdr10plus_tool"
    mkvmerge: str = "mkvmerge"
    opusenc: str = "opusenc"

    def get(self, name: str) -> str:
        """Get a tool path by tool name.

        Raises:
            KeyError: If the name is not a known tool.
        """
        if name not in {f.name for f in fields(self)}:
            raise KeyError(name)
        return getattr(self, name)


@dataclass
class LoggingConfig:
    """Configuration for logging."""

    # Log level: debug, info, warning, error
    level: str = "info"

    # Log file path (None = stderr only)
    file: Path | None = None

    # Log format: text or json
    format: str = "text"

    # Also log to stderr when file is set
    include_stderr: bool = False

    # Rotation threshold in bytes (default 10MB)
    max_bytes: int = 10_485_760

    # Number of rotated files to keep
    backup_count: int = 5

    def __post_init__(self) -> None:
        """Validate configuration."""
        valid_levels = {"debug", "info", "warning", "error"}
        if self.level.lower() not in valid_levels:
            raise ValueError(f"level must be one of {valid_levels}, got {self.level}")
        valid_formats = {"text", "json"}
        if self.format.lower() not in valid_formats:
            raise ValueError(
                f"format must be one of {valid_formats}, got {self.format}"
            )
        if self.max_bytes <= 0:
            raise ValueError(f"max_bytes must be positive, got {self.max_bytes}")
        if self.backup_count < 0:
            raise ValueError(
                f"backup_count must be non-negative, got {self.backup_count}"
            )


@dataclass
class JobsConfig:
    """Configuration for transcode jobs."""

    # Directory for intermediate files (None = current working directory)
    temp_directory: Path | None = None

    # Default x265 preset and CRF when not given on the command line
    preset: str = "medium"
    crf: float = 23


@dataclass
class AppConfig:
    """Complete hdr-sucks configuration."""

    tools: ToolPathsConfig = field(default_factory=ToolPathsConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)
    jobs: JobsConfig = field(default_factory=JobsConfig)
