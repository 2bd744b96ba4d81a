"""Configuration builder with explicit layering.

Each source (config file, environment, command line) is turned into a
ConfigSource whose None fields mean "not specified here". ConfigBuilder
applies sources in precedence order and fills the gaps with defaults.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field, fields
from pathlib import Path
from typing import Any

from hdrsucks.config.env import LOG_FILE_VAR, LOG_LEVEL_VAR, TEMP_DIR_VAR, EnvReader
from hdrsucks.config.models import (
    AppConfig,
    JobsConfig,
    LoggingConfig,
    ToolPathsConfig,
)

logger = logging.getLogger(__name__)


@dataclass
class ConfigSource:
    """Configuration values from a single source."""

    # Tool executables, keyed by tool name
    tools: dict[str, str] = field(default_factory=dict)

    # Jobs config
    jobs_temp_directory: Path | None = None
    jobs_preset: str | None = None
    jobs_crf: float | None = None

    # Logging config
    logging_level: str | None = None
    logging_file: Path | None = None
    logging_format: str | None = None
    logging_include_stderr: bool | None = None
    logging_max_bytes: int | None = None
    logging_backup_count: int | None = None


class ConfigBuilder:
    """Builds AppConfig by layering ConfigSources.

    Later sources override earlier ones for non-None values; tool entries
    override per tool.

    Example:
        builder = ConfigBuilder()
        builder.apply(source_from_file(file_config), source_name="file")
        builder.apply(source_from_env(reader), source_name="env")
        config = builder.build()
    """

    def __init__(self) -> None:
        self._values: dict[str, Any] = {}
        self._tools: dict[str, str] = {}
        self._origins: dict[str, str] = {}

    def apply(self, source: ConfigSource, source_name: str = "unknown") -> None:
        """Apply a source, overriding values already set.

        Args:
            source: Configuration source to apply.
            source_name: Label recorded for each value it sets.
        """
        for field_obj in fields(source):
            if field_obj.name == "tools":
                continue
            value = getattr(source, field_obj.name)
            if value is not None:
                self._values[field_obj.name] = value
                self._origins[field_obj.name] = source_name

        known_tools = {f.name for f in fields(ToolPathsConfig)}
        for tool, path in source.tools.items():
            if tool not in known_tools:
                logger.warning("Ignoring unknown tool %r from %s", tool, source_name)
                continue
            self._tools[tool] = path
            self._origins[f"tools.{tool}"] = source_name

    def origin(self, key: str) -> str:
        """Which source set a key (``"default"`` if none did)."""
        return self._origins.get(key, "default")

    def _get(self, key: str, default: Any) -> Any:
        return self._values.get(key, default)

    def build(self) -> AppConfig:
        """Build the final AppConfig.

        Raises:
            ValueError: If a layered value fails model validation.
        """
        defaults = LoggingConfig()
        logging_config = LoggingConfig(
            level=self._get("logging_level", defaults.level),
            file=self._get("logging_file", defaults.file),
            format=self._get("logging_format", defaults.format),
            include_stderr=self._get(
                "logging_include_stderr", defaults.include_stderr
            ),
            max_bytes=self._get("logging_max_bytes", defaults.max_bytes),
            backup_count=self._get("logging_backup_count", defaults.backup_count),
        )
        jobs_defaults = JobsConfig()
        jobs = JobsConfig(
            temp_directory=self._get("jobs_temp_directory", None),
            preset=self._get("jobs_preset", jobs_defaults.preset),
            crf=self._get("jobs_crf", jobs_defaults.crf),
        )
        return AppConfig(
            tools=ToolPathsConfig(**self._tools),
            logging=logging_config,
            jobs=jobs,
        )


def _optional_path(value: Any) -> Path | None:
    return Path(str(value)).expanduser() if value else None


def source_from_file(file_config: dict[str, Any]) -> ConfigSource:
    """Create a ConfigSource from a parsed TOML config file.

    Args:
        file_config: Parsed configuration with optional ``[tools]``,
            ``[logging]`` and ``[jobs]`` tables.
    """
    tools = file_config.get("tools", {})
    jobs = file_config.get("jobs", {})
    logging_conf = file_config.get("logging", {})

    return ConfigSource(
        tools={str(k): str(v) for k, v in tools.items() if v},
        jobs_temp_directory=_optional_path(jobs.get("temp_directory")),
        jobs_preset=jobs.get("preset"),
        jobs_crf=jobs.get("crf"),
        logging_level=logging_conf.get("level"),
        logging_file=_optional_path(logging_conf.get("file")),
        logging_format=logging_conf.get("format"),
        logging_include_stderr=logging_conf.get("include_stderr"),
        logging_max_bytes=logging_conf.get("max_bytes"),
        logging_backup_count=logging_conf.get("backup_count"),
    )


def source_from_env(reader: EnvReader) -> ConfigSource:
    """Create a ConfigSource from environment variables."""
    return ConfigSource(
        tools=reader.tool_paths(),
        jobs_temp_directory=reader.get_path(TEMP_DIR_VAR, must_exist=True),
        logging_level=reader.get_str(LOG_LEVEL_VAR),
        logging_file=reader.get_path(LOG_FILE_VAR),
    )
