"""Progress reporting for long-running stages.

Stages push short status strings while a tool runs. The console reporter
overwrites a single terminal line; the null reporter discards everything
(for JSON logging or tests).
"""

from __future__ import annotations

import sys
from typing import Protocol, TextIO


class ProgressReporter(Protocol):
    """Protocol for live stage progress."""

    def on_progress(self, label: str, message: str) -> None:
        """Show the latest status for a stage.

        Args:
            label: Short stage label, e.g. ``x265``.
            message: Status text; replaces the previous one.
        """
        ...

    def on_complete(self) -> None:
        """Finish the current status line."""
        ...


class ConsoleProgressReporter:
    """Writes status lines in place using carriage returns."""

    def __init__(self, stream: TextIO | None = None, enabled: bool = True) -> None:
        """Initialize the reporter.

        Args:
            stream: Output stream, stdout by default.
            enabled: If False, suppresses output.
        """
        self.enabled = enabled
        self._stream = stream
        self._last_width = 0

    @property
    def stream(self) -> TextIO:
        return self._stream if self._stream is not None else sys.stdout

    def on_progress(self, label: str, message: str) -> None:
        if not self.enabled:
            return
        line = f"[{label}] {message}"
        padding = " " * max(self._last_width - len(line), 0)
        self.stream.write(f"\r{line}{padding}")
        self.stream.flush()
        self._last_width = len(line)

    def on_complete(self) -> None:
        if not self.enabled or self._last_width == 0:
            return
        self.stream.write("\n")
        self.stream.flush()
        self._last_width = 0


class NullProgressReporter:
    """No-op progress reporter."""

    def on_progress(self, label: str, message: str) -> None:
        """No-op."""

    def on_complete(self) -> None:
        """No-op."""
