"""Typed records shared by every stage of a transcode job."""

from hdrsucks.domain.enums import (
    ArtifactKind,
    CodecType,
    JobStage,
    SideDataKind,
    StageStatus,
)
from hdrsucks.domain.models import (
    Disposition,
    FormatInfo,
    FrameDescriptor,
    ProbeResult,
    SideDataRecord,
    StreamDescriptor,
    TrackTagSet,
)

__all__ = [
    "ArtifactKind",
    "CodecType",
    "Disposition",
    "FormatInfo",
    "FrameDescriptor",
    "JobStage",
    "ProbeResult",
    "SideDataKind",
    "SideDataRecord",
    "StageStatus",
    "StreamDescriptor",
    "TrackTagSet",
]
