"""Configuration loader with precedence handling.

Configuration is loaded with the following precedence (highest to lowest):
1. CLI arguments (passed directly to get_config)
2. Environment variables
3. Config file (~/.hdrsucks/config.toml)
4. Default values

Environment variables:
- FFMPEG_PATH, FFPROBE_PATH, X265_PATH, DOVI_PATH, HDR10PLUS_PATH,
  MKVMERGE_PATH, OPUSENC_PATH: tool executables
- HDRSUCKS_CONFIG_PATH: Path to config file (overrides default location)
- HDRSUCKS_TEMP_DIR: Directory for intermediate files
- HDRSUCKS_LOG_LEVEL, HDRSUCKS_LOG_FILE: Logging overrides
"""

from __future__ import annotations

import logging
import tomllib
from pathlib import Path

from hdrsucks.config.builder import (
    ConfigBuilder,
    ConfigSource,
    source_from_env,
    source_from_file,
)
from hdrsucks.config.env import CONFIG_PATH_VAR, EnvReader
from hdrsucks.config.models import AppConfig

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_DIR = Path.home() / ".hdrsucks"
DEFAULT_CONFIG_FILE = DEFAULT_CONFIG_DIR / "config.toml"


class ConfigError(Exception):
    """Raised when the configuration file or values are invalid."""


def get_default_config_path(env_reader: EnvReader | None = None) -> Path:
    """Get the config file path, honouring HDRSUCKS_CONFIG_PATH."""
    reader = env_reader or EnvReader()
    return reader.get_path(CONFIG_PATH_VAR) or DEFAULT_CONFIG_FILE


def load_config_file(path: Path, *, strict: bool = False) -> dict:
    """Load configuration from a TOML file.

    Args:
        path: Path to the config file.
        strict: Raise ConfigError on unreadable or invalid files instead of
            logging a warning and using defaults.

    Returns:
        Parsed configuration dict; empty if the file doesn't exist.

    Raises:
        ConfigError: When strict=True and the file cannot be parsed.
    """
    if not path.exists():
        return {}
    try:
        with path.open("rb") as f:
            return tomllib.load(f)
    except (OSError, tomllib.TOMLDecodeError) as e:
        if strict:
            raise ConfigError(f"Cannot load config file {path}: {e}") from e
        logger.warning("Ignoring invalid config file %s: %s", path, e)
        return {}


def get_config(
    config_path: Path | None = None,
    *,
    temp_directory: Path | None = None,
    log_level: str | None = None,
    log_file: Path | None = None,
    log_format: str | None = None,
    env_reader: EnvReader | None = None,
    strict: bool = False,
) -> AppConfig:
    """Get configuration with full precedence handling.

    Args:
        config_path: Path to config file (overrides HDRSUCKS_CONFIG_PATH).
        temp_directory: CLI override for the intermediate file directory.
        log_level: CLI override for the log level.
        log_file: CLI override for the log file.
        log_format: CLI override for the log format.
        env_reader: Optional EnvReader for testing (uses os.environ if None).
        strict: Raise ConfigError for an unparseable config file.

    Returns:
        AppConfig with merged configuration.

    Raises:
        ConfigError: If the merged values are invalid, or when strict=True
            and the config file cannot be parsed.
    """
    reader = env_reader or EnvReader()
    path = config_path or get_default_config_path(reader)
    file_config = load_config_file(path, strict=strict)

    cli_source = ConfigSource(
        jobs_temp_directory=temp_directory,
        logging_level=log_level,
        logging_file=log_file,
        logging_format=log_format,
    )

    builder = ConfigBuilder()
    builder.apply(source_from_file(file_config), source_name="file")
    builder.apply(source_from_env(reader), source_name="env")
    builder.apply(cli_source, source_name="cli")

    try:
        return builder.build()
    except (TypeError, ValueError) as e:
        raise ConfigError(f"Invalid configuration: {e}") from e
