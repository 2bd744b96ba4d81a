"""MediaIntrospector interface for probe implementations."""

from pathlib import Path
from typing import Protocol

from hdrsucks.domain.models import ProbeResult


class MediaIntrospector(Protocol):
    """Protocol for media introspection implementations.

    The orchestrator depends on this protocol so tests can substitute a
    canned ProbeResult without running ffprobe.
    """

    def probe(self, path: Path) -> ProbeResult:
        """Extract stream, frame and format metadata from a media file.

        Args:
            path: Path to the media file.

        Returns:
            ProbeResult describing the file.

        Raises:
            ProbeError: If the file cannot be probed.
        """
        ...
