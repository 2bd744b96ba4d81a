"""Enums for probe data and job state.

This module has no dependencies on other hdr-sucks modules.
"""

from enum import Enum


class CodecType(Enum):
    """Stream codec type as reported by ffprobe."""

    VIDEO = "video"
    AUDIO = "audio"
    SUBTITLE = "subtitle"
    DATA = "data"
    ATTACHMENT = "attachment"
    UNKNOWN = "unknown"

    @classmethod
    def from_probe(cls, value: str | None) -> "CodecType":
        """Map an ffprobe codec_type string, defaulting to UNKNOWN."""
        try:
            return cls(value)
        except ValueError:
            return cls.UNKNOWN


class SideDataKind(Enum):
    """Side data kinds relevant to HDR handling.

    Values are the ``side_data_type`` strings ffprobe prints.
    """

    MASTERING_DISPLAY = "Mastering display metadata"
    CONTENT_LIGHT_LEVEL = "Content light level metadata"
    DOVI_CONFIG = "DOVI configuration record"
    HDR10_PLUS = "HDR Dynamic Metadata SMPTE2094-40 (HDR10+)"
    OTHER = "other"

    @classmethod
    def from_type_name(cls, value: str | None) -> "SideDataKind":
        """Map an ffprobe side_data_type string, defaulting to OTHER."""
        try:
            return cls(value)
        except ValueError:
            return cls.OTHER


class JobStage(Enum):
    """Stages of a transcode job in execution order.

    PENDING, DONE and FAILED are the non-executing states of the job's
    state machine.
    """

    PENDING = "pending"
    PROBE = "probe"
    BUILD_VIDEO_ARGS = "build-video-args"
    EXTRACT_HDR = "extract-hdr"
    TRANSCODE_VIDEO = "transcode-video"
    INJECT_HDR = "inject-hdr"
    TRANSCODE_AUDIO = "transcode-audio"
    REMUX = "remux"
    CLEANUP = "cleanup"
    DONE = "done"
    FAILED = "failed"


class StageStatus(Enum):
    """Outcome of a single executed stage."""

    COMPLETED = "completed"
    FAILED = "failed"


class ArtifactKind(Enum):
    """Kinds of temporary files a job produces.

    Each value carries the file extension used when naming the artifact.
    """

    VIDEO_STREAM = ".hevc"
    DOVI_RPU = ".bin"
    HDR10_PLUS_JSON = ".json"
    AUDIO_STREAM = ".opus"
    SOURCE_EXCERPT = ".mkv"

    @property
    def extension(self) -> str:
        """File extension for this artifact kind."""
        return self.value
