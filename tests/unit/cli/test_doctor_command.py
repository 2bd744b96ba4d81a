"""Tests for the hdrsucks doctor command."""

from unittest.mock import patch

from hdrsucks.cli import main
from hdrsucks.config.models import AppConfig, ToolPathsConfig


def _which(available: set[str]):
    def fake_which(command: str) -> str | None:
        return f"/usr/bin/{command}" if command in available else None

    return fake_which


ALL_TOOLS = {
    "ffprobe",
    "ffmpeg",
    "x265",
    "mkvmerge",
    "dovi_tool",
    "hdr10plus_tool",
    "opusenc",
}


class TestDoctorCommand:
    """Tests for doctor command output and exit codes."""

    def test_all_tools_found(self, runner) -> None:
        with patch("hdrsucks.executor.interface.shutil.which", _which(ALL_TOOLS)):
            result = runner.invoke(main, ["doctor"], obj={"config": AppConfig()})

        assert result.exit_code == 0
        assert "hdr-sucks External Tool Check" in result.output
        assert "✓ x265: /usr/bin/x265" in result.output
        assert "✓ opusenc: /usr/bin/opusenc [audio transcoding]" in result.output
        assert "✗" not in result.output

    def test_missing_optional_tool(self, runner) -> None:
        """Optional tools only produce a mark, not a failure."""
        available = ALL_TOOLS - {"hdr10plus_tool"}
        with patch("hdrsucks.executor.interface.shutil.which", _which(available)):
            result = runner.invoke(main, ["doctor"], obj={"config": AppConfig()})

        assert result.exit_code == 0
        assert "✗ hdr10plus_tool: not found (hdr10plus_tool)" in result.output

    def test_missing_required_tool(self, runner) -> None:
        available = ALL_TOOLS - {"mkvmerge"}
        with patch("hdrsucks.executor.interface.shutil.which", _which(available)):
            result = runner.invoke(main, ["doctor"], obj={"config": AppConfig()})

        assert result.exit_code == 30
        assert "✗ mkvmerge" in result.output
        assert "Required tools are missing" in result.output

    def test_uses_configured_paths(self, runner) -> None:
        config = AppConfig(tools=ToolPathsConfig(x265="x265-10bit"))
        available = (ALL_TOOLS - {"x265"}) | {"x265-10bit"}
        with patch("hdrsucks.executor.interface.shutil.which", _which(available)):
            result = runner.invoke(main, ["doctor"], obj={"config": config})

        assert result.exit_code == 0
        assert "✓ x265: /usr/bin/x265-10bit" in result.output
