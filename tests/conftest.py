"""Shared test fixtures for hdr-sucks."""

import json
import os
import shutil
import tempfile
from pathlib import Path
from unittest.mock import patch

import pytest
from click.testing import CliRunner

from hdrsucks.introspector.parsers import parse_ffprobe_output


@pytest.fixture
def temp_dir():
    """Create a temporary directory for test isolation."""
    dir_path = tempfile.mkdtemp()
    yield Path(dir_path)
    shutil.rmtree(dir_path, ignore_errors=True)


@pytest.fixture
def runner() -> CliRunner:
    """Click test runner."""
    return CliRunner()


@pytest.fixture(autouse=True)
def isolated_environment(temp_dir: Path):
    """Keep the user's config file and tool overrides out of every test.

    Points HDRSUCKS_CONFIG_PATH at a file that does not exist and removes
    any tool path variables inherited from the shell.
    """
    cleared = {
        name: ""
        for name in (
            "FFMPEG_PATH",
            "FFPROBE_PATH",
            "X265_PATH",
            "DOVI_PATH",
            "HDR10PLUS_PATH",
            "MKVMERGE_PATH",
            "OPUSENC_PATH",
            "HDRSUCKS_TEMP_DIR",
            "HDRSUCKS_LOG_LEVEL",
            "HDRSUCKS_LOG_FILE",
        )
    }
    cleared["HDRSUCKS_CONFIG_PATH"] = str(temp_dir / "no-such-config.toml")
    with patch.dict(os.environ, cleared):
        yield


@pytest.fixture
def ffprobe_fixtures_dir() -> Path:
    """Return the path to the ffprobe fixtures directory."""
    return Path(__file__).parent / "fixtures" / "ffprobe"


def load_ffprobe_fixture(name: str) -> dict:
    """Load an ffprobe JSON fixture by name.

    Args:
        name: Name of the fixture file (without .json extension).

    Returns:
        Parsed JSON data from the fixture.
    """
    fixture_path = Path(__file__).parent / "fixtures" / "ffprobe" / f"{name}.json"
    return json.loads(fixture_path.read_text())


@pytest.fixture
def hdr10_fixture() -> dict:
    """Load the 8-bit HDR10 progressive ffprobe fixture."""
    return load_ffprobe_fixture("hdr10_8bit_progressive")


@pytest.fixture
def dolby_vision_fixture() -> dict:
    """Load the Dolby Vision + HDR10+ ffprobe fixture."""
    return load_ffprobe_fixture("dolby_vision_hdr10plus")


@pytest.fixture
def interlaced_fixture() -> dict:
    """Load the interlaced SDR ffprobe fixture."""
    return load_ffprobe_fixture("interlaced_sdr")


@pytest.fixture
def audio_only_fixture() -> dict:
    """Load the audio-only ffprobe fixture."""
    return load_ffprobe_fixture("audio_only")


@pytest.fixture
def hdr10_probe(hdr10_fixture: dict):
    """Parsed ProbeResult for the HDR10 fixture."""
    return parse_ffprobe_output(Path("/media/hdr10.mkv"), hdr10_fixture)


@pytest.fixture
def dolby_vision_probe(dolby_vision_fixture: dict):
    """Parsed ProbeResult for the Dolby Vision + HDR10+ fixture."""
    return parse_ffprobe_output(Path("/media/dv_hdr10plus.mkv"), dolby_vision_fixture)


@pytest.fixture
def interlaced_probe(interlaced_fixture: dict):
    """Parsed ProbeResult for the interlaced fixture."""
    return parse_ffprobe_output(Path("/media/broadcast.ts"), interlaced_fixture)
