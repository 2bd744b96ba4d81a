"""Integration test fixtures: fake external tools.

Each fake is a small Python script named after the tool it replaces. It
appends its argv to a shared JSON-lines log and behaves just enough like
the real tool for a job to run: producers write bytes to stdout,
consumers read stdin when told to and write their output file. An ffmpeg
run with a file as its last argument writes that file instead.
"""

from __future__ import annotations

import json
import stat
import sys
from dataclasses import dataclass, field
from pathlib import Path

import pytest

from hdrsucks.config.models import ToolPathsConfig

FAKE_TOOL_TEMPLATE = """#!{python}
import json
import sys

NAME = {name!r}
args = sys.argv[1:]
with open({log!r}, "a") as log:
    log.write(json.dumps([NAME, *args]) + "\\n")

if NAME in {failing!r}:
    sys.stderr.write(NAME + ": fake failure\\n")
    sys.exit(3)

if NAME == "ffprobe":
    with open({fixture!r}) as f:
        sys.stdout.write(f.read())
    sys.exit(0)

if NAME == "ffmpeg" and args[-1] != "-":
    with open(args[-1], "wb") as f:
        f.write(b"\\x1a\\x45\\xdf\\xa3")
    sys.exit(0)

if NAME == "ffmpeg":
    sys.stdout.buffer.write(b"\\0" * 4096)
    sys.stderr.write("size=4kB time=00:00:05.00 bitrate=6.6kbits/s speed=2x\\n")
    sys.exit(0)

data = sys.stdin.buffer.read() if "-" in args else NAME.encode()
if NAME == "opusenc":
    output = args[-1]
elif "--output" in args:
    output = args[args.index("--output") + 1]
else:
    output = args[args.index("-o") + 1]
with open(output, "wb") as f:
    f.write(data or NAME.encode())

if NAME == "x265":
    sys.stderr.write("240 frames: 24.00 fps, 3000.00 kb/s\\n")
if NAME == "mkvmerge":
    print("Progress: 50%")
    print("Progress: 100%")
"""

TOOL_NAMES = (
    "ffmpeg",
    "ffprobe",
    "x265",
    "dovi_tool",
    "hdr10plus_tool",
    "mkvmerge",
    "opusenc",
)


@dataclass
class FakeTools:
    """A directory of fake tool executables and their call log."""

    bin_dir: Path
    log_path: Path
    config: ToolPathsConfig = field(default_factory=ToolPathsConfig)

    def calls(self) -> list[list[str]]:
        """Every invocation as ``[tool, *args]``, in start order."""
        if not self.log_path.exists():
            return []
        return [json.loads(line) for line in self.log_path.read_text().splitlines()]

    def calls_to(self, name: str) -> list[list[str]]:
        return [call[1:] for call in self.calls() if call[0] == name]

    def names(self, exclude: tuple[str, ...] = ("ffmpeg",)) -> list[str]:
        """Tool names in call order, producers left out by default."""
        return [call[0] for call in self.calls() if call[0] not in exclude]


@pytest.fixture
def make_fake_tools(temp_dir: Path):
    """Factory building fake tools around an ffprobe fixture.

    Args (of the returned callable):
        fixture: ffprobe fixture name (without .json).
        failing: Tool names that exit with status 3.
    """
    fixtures_dir = Path(__file__).parent.parent / "fixtures" / "ffprobe"

    def _make(fixture: str, failing: tuple[str, ...] = ()) -> FakeTools:
        bin_dir = temp_dir / "bin"
        bin_dir.mkdir(exist_ok=True)
        log_path = temp_dir / "calls.jsonl"
        paths = {}
        for name in TOOL_NAMES:
            script = bin_dir / name
            script.write_text(
                FAKE_TOOL_TEMPLATE.format(
                    python=sys.executable,
                    name=name,
                    log=str(log_path),
                    failing=tuple(failing),
                    fixture=str(fixtures_dir / f"{fixture}.json"),
                )
            )
            script.chmod(script.stat().st_mode | stat.S_IXUSR | stat.S_IXGRP)
            paths[name] = str(script)
        return FakeTools(bin_dir, log_path, ToolPathsConfig(**paths))

    return _make


@pytest.fixture
def work_dir(temp_dir: Path) -> Path:
    path = temp_dir / "work"
    path.mkdir()
    return path


@pytest.fixture
def source_file(temp_dir: Path) -> Path:
    path = temp_dir / "movie.mkv"
    path.write_bytes(b"\x1a\x45\xdf\xa3" + b"\0" * 1024)
    return path
