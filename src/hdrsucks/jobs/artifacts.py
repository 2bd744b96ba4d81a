"""Temporary artifact bookkeeping for a job.

Every intermediate file a job creates is registered in an ArtifactLedger
together with the stage that produced it and the stage that will consume
it. Whatever is still pending when a job fails is exactly the set of
leaked files.
"""

from __future__ import annotations

import logging
import secrets
from collections.abc import Iterator
from dataclasses import dataclass
from pathlib import Path

from hdrsucks.domain.enums import ArtifactKind, JobStage

logger = logging.getLogger(__name__)

TEMP_PREFIX = ".hdrsucks-"
_SUFFIX_BYTES = 3


def generate_temp_name(work_dir: Path, extension: str) -> Path:
    """Return ``work_dir/.hdrsucks-<6 hex digits><extension>``."""
    return work_dir / f"{TEMP_PREFIX}{secrets.token_hex(_SUFFIX_BYTES)}{extension}"


@dataclass(frozen=True)
class Artifact:
    """One pending temporary file."""

    kind: ArtifactKind
    path: Path
    producer: JobStage
    consumer: JobStage
    track_index: int | None = None


class ArtifactLedger:
    """Ordered set of pending artifacts for one job.

    Only the orchestrator's current stage mutates the ledger.
    """

    def __init__(self, work_dir: Path) -> None:
        """Initialize an empty ledger.

        Args:
            work_dir: Directory temporary files are created in.
        """
        self.work_dir = work_dir
        self._pending: list[Artifact] = []

    def __iter__(self) -> Iterator[Artifact]:
        return iter(tuple(self._pending))

    def __len__(self) -> int:
        return len(self._pending)

    @property
    def pending(self) -> tuple[Artifact, ...]:
        return tuple(self._pending)

    def _unique_path(self, extension: str) -> Path:
        taken = {a.path for a in self._pending}
        while True:
            path = generate_temp_name(self.work_dir, extension)
            if path not in taken and not path.exists():
                return path

    def create(
        self,
        kind: ArtifactKind,
        producer: JobStage,
        consumer: JobStage,
        track_index: int | None = None,
    ) -> Artifact:
        """Allocate a fresh path and register it as pending.

        The file itself is created by the producing tool.
        """
        artifact = Artifact(
            kind=kind,
            path=self._unique_path(kind.extension),
            producer=producer,
            consumer=consumer,
            track_index=track_index,
        )
        self._pending.append(artifact)
        logger.debug(
            "Registered %s artifact %s (%s -> %s)",
            kind.name,
            artifact.path.name,
            producer.value,
            consumer.value,
        )
        return artifact

    def latest(self, kind: ArtifactKind) -> Artifact | None:
        """Most recently created pending artifact of a kind."""
        for artifact in reversed(self._pending):
            if artifact.kind == kind:
                return artifact
        return None

    def of_kind(self, kind: ArtifactKind) -> tuple[Artifact, ...]:
        """Pending artifacts of a kind in creation order."""
        return tuple(a for a in self._pending if a.kind == kind)

    def release(self, artifact: Artifact) -> None:
        """Delete an artifact's file and drop it from the ledger.

        A file that is already gone is not an error. Other deletion
        failures are logged and the entry stays pending.
        """
        try:
            artifact.path.unlink(missing_ok=True)
        except OSError as e:
            logger.warning("Failed to remove temp file %s: %s", artifact.path, e)
            return
        self._pending.remove(artifact)
        logger.debug("Removed temp file %s", artifact.path.name)

    def release_all(self) -> list[Artifact]:
        """Release every pending artifact.

        Returns:
            Artifacts that could not be removed.
        """
        for artifact in self.pending:
            self.release(artifact)
        return list(self._pending)


@dataclass(frozen=True)
class JobPaths:
    """Filesystem locations of one job, derived from its ledger."""

    input: Path
    output: Path
    artifacts: ArtifactLedger

    @property
    def temp(self) -> Path | None:
        """Current encoded video stream."""
        artifact = self.artifacts.latest(ArtifactKind.VIDEO_STREAM)
        return artifact.path if artifact else None

    @property
    def dv(self) -> Path | None:
        """Dolby Vision RPU sidecar."""
        artifact = self.artifacts.latest(ArtifactKind.DOVI_RPU)
        return artifact.path if artifact else None

    @property
    def plus(self) -> Path | None:
        """HDR10+ JSON sidecar."""
        artifact = self.artifacts.latest(ArtifactKind.HDR10_PLUS_JSON)
        return artifact.path if artifact else None

    @property
    def audio(self) -> tuple[Path, ...]:
        """Transcoded audio files in track order."""
        return tuple(a.path for a in self.artifacts.of_kind(ArtifactKind.AUDIO_STREAM))
