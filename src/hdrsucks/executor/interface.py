"""Tool availability checks for the external programs a job runs."""

from __future__ import annotations

import shutil
from dataclasses import dataclass

from hdrsucks.config.models import ToolPathsConfig

# Tools every job needs, in the order they run
REQUIRED_TOOLS = ("ffprobe", "ffmpeg", "x265", "mkvmerge")
# Tools only needed for some inputs or options
OPTIONAL_TOOLS = {
    "dovi_tool": "Dolby Vision inputs",
    "hdr10plus_tool": "HDR10+ inputs",
    "opusenc": "audio transcoding",
}


@dataclass(frozen=True)
class ToolStatus:
    """Resolution result for one configured tool."""

    name: str
    configured: str
    resolved: str | None
    required: bool

    @property
    def available(self) -> bool:
        return self.resolved is not None


def resolve_tool(command: str) -> str | None:
    """Resolve a tool name or path the way the OS would when spawning it."""
    return shutil.which(command)


def check_tool_availability(tools: ToolPathsConfig) -> list[ToolStatus]:
    """Check every configured tool.

    Args:
        tools: Configured executable names or paths.

    Returns:
        One ToolStatus per tool, required tools first.
    """
    statuses = []
    for name in (*REQUIRED_TOOLS, *OPTIONAL_TOOLS):
        configured = tools.get(name)
        statuses.append(
            ToolStatus(
                name=name,
                configured=configured,
                resolved=resolve_tool(configured),
                required=name in REQUIRED_TOOLS,
            )
        )
    return statuses
