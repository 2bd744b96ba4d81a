"""Environment variable reader.

Tool locations follow the historical variable names (``FFMPEG_PATH``,
``DOVI_PATH`` ...); everything else uses the ``HDRSUCKS_`` prefix.
An env mapping can be injected so tests never touch os.environ.
"""

from __future__ import annotations

import logging
import os
from collections.abc import Mapping
from pathlib import Path

logger = logging.getLogger(__name__)

# Tool name -> environment variable overriding its executable
TOOL_ENV_VARS = {
    "ffmpeg": "FFMPEG_PATH",
    "ffprobe": "FFPROBE_PATH",
    "x265": "X265_PATH",
    "dovi_tool": "DOVI_PATH",
    "hdr10plus_tool": "HDR10PLUS_PATH",
    "mkvmerge": "MKVMERGE_PATH",
    "opusenc": "OPUSENC_PATH",
}

CONFIG_PATH_VAR = "HDRSUCKS_CONFIG_PATH"
TEMP_DIR_VAR = "HDRSUCKS_TEMP_DIR"
LOG_LEVEL_VAR = "HDRSUCKS_LOG_LEVEL"
LOG_FILE_VAR = "HDRSUCKS_LOG_FILE"


class EnvReader:
    """Typed access to environment variables.

    Example:
        reader = EnvReader(env={"HDRSUCKS_LOG_LEVEL": "debug"})
        reader.get_str("HDRSUCKS_LOG_LEVEL")  # "debug"
    """

    def __init__(self, env: Mapping[str, str] | None = None) -> None:
        """Initialize the environment reader.

        Args:
            env: Optional mapping to use instead of os.environ.
        """
        self._env: Mapping[str, str] = env if env is not None else os.environ

    def get_str(self, var: str, default: str | None = None) -> str | None:
        """Get a string; empty values count as unset."""
        value = self._env.get(var)
        if not value:
            return default
        return value

    def get_int(self, var: str, default: int | None = None) -> int | None:
        """Get an integer, warning and falling back to default if invalid."""
        value = self.get_str(var)
        if value is None:
            return default
        try:
            return int(value)
        except ValueError:
            logger.warning("Invalid integer value for %s: %s", var, value)
            return default

    def get_path(self, var: str, must_exist: bool = False) -> Path | None:
        """Get a tilde-expanded path.

        Args:
            var: Environment variable name.
            must_exist: Ignore (with a warning) paths that do not exist.
        """
        value = self.get_str(var)
        if value is None:
            return None
        path = Path(value).expanduser()
        if must_exist and not path.exists():
            logger.warning(
                "Environment variable %s points to non-existent path: %s",
                var,
                value,
            )
            return None
        return path

    def tool_paths(self) -> dict[str, str]:
        """Collect tool executables overridden through the environment."""
        overrides = {}
        for tool, var in TOOL_ENV_VARS.items():
            value = self.get_str(var)
            if value is not None:
                overrides[tool] = value
        return overrides
