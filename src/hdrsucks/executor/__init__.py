"""External process execution: pipes, progress parsing and remuxing."""

from hdrsucks.executor.interface import ToolStatus, check_tool_availability
from hdrsucks.executor.mkvmerge import MkvmergeRemuxer, RemuxTrack, track_tag_args
from hdrsucks.executor.pipeline import (
    PipelineResult,
    ProcessOutcome,
    ProcessPairRunner,
    run_checked,
)
from hdrsucks.executor.progress import (
    AudioProgress,
    EncodeProgress,
    EncodeProgressTracker,
    parse_audio_progress,
    parse_mkvmerge_progress,
)

__all__ = [
    "AudioProgress",
    "EncodeProgress",
    "EncodeProgressTracker",
    "MkvmergeRemuxer",
    "PipelineResult",
    "ProcessOutcome",
    "ProcessPairRunner",
    "RemuxTrack",
    "ToolStatus",
    "check_tool_availability",
    "parse_audio_progress",
    "parse_mkvmerge_progress",
    "run_checked",
    "track_tag_args",
]
