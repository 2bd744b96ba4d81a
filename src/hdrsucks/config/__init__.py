"""Configuration for hdr-sucks: models, layering and loading."""

from hdrsucks.config.env import EnvReader
from hdrsucks.config.loader import ConfigError, get_config, load_config_file
from hdrsucks.config.models import (
    AppConfig,
    JobsConfig,
    LoggingConfig,
    ToolPathsConfig,
)

__all__ = [
    "AppConfig",
    "ConfigError",
    "EnvReader",
    "JobsConfig",
    "LoggingConfig",
    "ToolPathsConfig",
    "get_config",
    "load_config_file",
]
