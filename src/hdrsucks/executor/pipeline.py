"""Run a producer process piped into a consumer process.

The producer's stdout is handed to the consumer as its stdin and the
parent closes its copy, so the bytes flow through the kernel pipe only:
a slow consumer blocks the producer and a consumer that exits makes the
producer's next write fail. Each process's stderr is drained line by line
on its own daemon thread; that thread is the only writer of the progress
state its callback updates.
"""

from __future__ import annotations

import io
import logging
import subprocess  # nosec B404 - subprocess is required for tool invocation
import threading
from collections import deque
from collections.abc import Callable, Sequence
from dataclasses import dataclass
from pathlib import Path
from typing import IO

from hdrsucks.exceptions import ToolError

logger = logging.getLogger(__name__)

LineCallback = Callable[[str], None]

# Lines of diagnostic output kept per process for error messages
DEFAULT_TAIL_LINES = 40


class StreamPump(threading.Thread):
    """Daemon thread that reads a binary stream as text lines.

    Universal newlines are used so ``\\r``-terminated progress updates
    arrive as separate lines. The last ``tail_lines`` lines are kept for
    diagnostics.
    """

    def __init__(
        self,
        stream: IO[bytes],
        name: str,
        callback: LineCallback | None = None,
        *,
        verbose: bool = False,
        tail_lines: int = DEFAULT_TAIL_LINES,
    ) -> None:
        super().__init__(name=f"pump-{name}", daemon=True)
        self._stream = stream
        self._tool = name
        self._callback = callback
        self._verbose = verbose
        self.tail: deque[str] = deque(maxlen=tail_lines)

    def run(self) -> None:
        reader = io.TextIOWrapper(
            self._stream, encoding="utf-8", errors="replace", newline=None
        )
        try:
            for raw_line in reader:
                line = raw_line.rstrip("\n")
                if not line.strip():
                    continue
                self.tail.append(line)
                if self._verbose:
                    logger.debug("[%s] %s", self._tool, line)
                if self._callback is not None:
                    self._dispatch(line)
        finally:
            reader.close()

    def _dispatch(self, line: str) -> None:
        try:
            self._callback(line)  # type: ignore[misc]
        except Exception:
            # Keep draining so the tool never blocks on a full stderr pipe
            logger.exception(
                "Progress callback failed for %s; disabling it", self._tool
            )
            self._callback = None

    def diagnostics(self) -> str:
        return "\n".join(self.tail)


@dataclass(frozen=True)
class ProcessOutcome:
    """Exit status and diagnostic tail of one finished process."""

    args: tuple[str, ...]
    returncode: int
    diagnostics: str = ""

    @property
    def name(self) -> str:
        return Path(self.args[0]).name if self.args else "unknown"

    @property
    def success(self) -> bool:
        return self.returncode == 0


@dataclass(frozen=True)
class PipelineResult:
    """Outcome of a producer | consumer pair."""

    producer: ProcessOutcome
    consumer: ProcessOutcome

    @property
    def returncode(self) -> int:
        """The consumer's exit status, which decides the stage."""
        return self.consumer.returncode

    @property
    def success(self) -> bool:
        return self.producer.success and self.consumer.success

    @property
    def failed(self) -> ProcessOutcome | None:
        """The process to blame, consumer first."""
        if not self.consumer.success:
            return self.consumer
        if not self.producer.success:
            return self.producer
        return None


class ProcessPairRunner:
    """Runs two processes joined by a pipe and waits for both.

    Example:
        runner = ProcessPairRunner()
        result = runner.run(
            ["ffmpeg", "-i", "in.mkv", "-f", "yuv4mpegpipe", "-"],
            ["x265", "--input", "-", "--y4m", "--output", "out.hevc"],
            on_consumer_line=tracker.feed,
        )
    """

    def __init__(
        self, *, verbose: bool = False, tail_lines: int = DEFAULT_TAIL_LINES
    ) -> None:
        """Initialize the runner.

        Args:
            verbose: Log every diagnostic line at DEBUG.
            tail_lines: Diagnostic lines kept per process.
        """
        self.verbose = verbose
        self.tail_lines = tail_lines

    def _pump(
        self, proc: subprocess.Popen, callback: LineCallback | None
    ) -> StreamPump:
        assert proc.stderr is not None
        pump = StreamPump(
            proc.stderr,
            Path(str(proc.args[0])).name,
            callback,
            verbose=self.verbose,
            tail_lines=self.tail_lines,
        )
        pump.start()
        return pump

    def run(
        self,
        producer: Sequence[str],
        consumer: Sequence[str],
        *,
        on_producer_line: LineCallback | None = None,
        on_consumer_line: LineCallback | None = None,
    ) -> PipelineResult:
        """Run ``producer | consumer`` to completion.

        Args:
            producer: Command writing to stdout.
            consumer: Command reading from stdin.
            on_producer_line: Called with each producer stderr line.
            on_consumer_line: Called with each consumer stderr line.

        Returns:
            PipelineResult with both exit codes and diagnostic tails.

        Raises:
            FileNotFoundError: If either executable does not exist. A
                producer that already started is killed first.
        """
        producer_args = tuple(str(a) for a in producer)
        consumer_args = tuple(str(a) for a in consumer)
        logger.debug(
            "Starting pipe: %s | %s",
            " ".join(producer_args),
            " ".join(consumer_args),
        )

        producer_proc = subprocess.Popen(  # nosec B603 - args are built internally
            producer_args,
            stdin=subprocess.DEVNULL,
            stdout=subprocess.PIPE,
            stderr=subprocess.PIPE,
        )
        try:
            consumer_proc = subprocess.Popen(  # nosec B603
                consumer_args,
                stdin=producer_proc.stdout,
                stdout=subprocess.DEVNULL,
                stderr=subprocess.PIPE,
            )
        except OSError:
            producer_proc.kill()
            producer_proc.wait()
            if producer_proc.stdout is not None:
                producer_proc.stdout.close()
            if producer_proc.stderr is not None:
                producer_proc.stderr.close()
            raise

        # Only the consumer may hold the read end, or the producer would never
        # see a broken pipe when the consumer exits early.
        assert producer_proc.stdout is not None
        producer_proc.stdout.close()

        producer_pump = self._pump(producer_proc, on_producer_line)
        consumer_pump = self._pump(consumer_proc, on_consumer_line)

        consumer_rc = consumer_proc.wait()
        producer_rc = producer_proc.wait()
        producer_pump.join()
        consumer_pump.join()

        result = PipelineResult(
            producer=ProcessOutcome(
                producer_args, producer_rc, producer_pump.diagnostics()
            ),
            consumer=ProcessOutcome(
                consumer_args, consumer_rc, consumer_pump.diagnostics()
            ),
        )
        logger.debug(
            "Pipe finished",
            extra={"producer_rc": producer_rc, "consumer_rc": consumer_rc},
        )
        return result


def run_checked(
    runner: ProcessPairRunner,
    producer: Sequence[str],
    consumer: Sequence[str],
    error_type: type[ToolError],
    description: str,
    *,
    on_producer_line: LineCallback | None = None,
    on_consumer_line: LineCallback | None = None,
    require_producer: bool = True,
) -> PipelineResult:
    """Run a pair and raise ``error_type`` if it failed.

    Args:
        runner: The runner to use.
        producer: Producer command.
        consumer: Consumer command.
        error_type: ToolError subclass for the calling stage.
        description: What the pair does, used in the error message.
        on_producer_line: Producer stderr callback.
        on_consumer_line: Consumer stderr callback.
        require_producer: Fail when the producer exits non-zero even though
            the consumer succeeded. Encoders stop reading once they have
            their frame count, so a decoder dying of a broken pipe after a
            clean encoder exit is only logged when this is False.

    Returns:
        The PipelineResult.

    Raises:
        ToolError: The given subclass, carrying exit code and diagnostics.
    """
    try:
        result = runner.run(
            producer,
            consumer,
            on_producer_line=on_producer_line,
            on_consumer_line=on_consumer_line,
        )
    except FileNotFoundError as e:
        raise error_type(
            f"{description}: executable not found ({e.filename or e})"
        ) from e

    failed = result.failed
    if failed is result.producer and not require_producer:
        logger.warning(
            "%s exited with code %d after %s finished; keeping the output",
            failed.name,
            failed.returncode,
            result.consumer.name,
        )
        return result
    if failed is not None:
        raise error_type(
            f"{description}: {failed.name} failed",
            returncode=failed.returncode,
            diagnostics=failed.diagnostics,
        )
    return result
