"""Transcode jobs: options, temporary artifacts, progress and orchestration."""

from hdrsucks.jobs.artifacts import (
    TEMP_PREFIX,
    Artifact,
    ArtifactLedger,
    JobPaths,
    generate_temp_name,
)
from hdrsucks.jobs.options import EncodeOptions, build_encode_options
from hdrsucks.jobs.orchestrator import (
    JobResult,
    StageOutcome,
    TranscodeJob,
    cleanup_artifacts,
    default_output_path,
)
from hdrsucks.jobs.progress import (
    ConsoleProgressReporter,
    NullProgressReporter,
    ProgressReporter,
)

__all__ = [
    "TEMP_PREFIX",
    "Artifact",
    "ArtifactLedger",
    "ConsoleProgressReporter",
    "EncodeOptions",
    "JobPaths",
    "JobResult",
    "NullProgressReporter",
    "ProgressReporter",
    "StageOutcome",
    "TranscodeJob",
    "build_encode_options",
    "cleanup_artifacts",
    "default_output_path",
    "generate_temp_name",
]
