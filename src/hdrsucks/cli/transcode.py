"""CLI command for transcoding one HDR video file."""

from __future__ import annotations

import logging
import math
from pathlib import Path

import click

from hdrsucks.cli.exit_codes import ExitCode, exit_code_for_error
from hdrsucks.cli.output import error_exit, warning_output
from hdrsucks.config.models import AppConfig
from hdrsucks.core.numbers import parse_timestamp
from hdrsucks.exceptions import InputValidationError
from hdrsucks.jobs import (
    ConsoleProgressReporter,
    TranscodeJob,
    build_encode_options,
    cleanup_artifacts,
)
from hdrsucks.jobs.options import VALID_PRESETS

logger = logging.getLogger(__name__)


class DurationType(click.ParamType):
    """Seconds as a number or an ``HH:MM:SS[.fraction]`` timestamp."""

    name = "duration"

    def convert(self, value, param, ctx):
        if isinstance(value, (int, float)):
            seconds = float(value)
        else:
            try:
                seconds = float(value)
            except ValueError:
                seconds = parse_timestamp(value)
        if not math.isfinite(seconds):
            self.fail(f"{value!r} is not seconds or HH:MM:SS", param, ctx)
        return seconds


DURATION = DurationType()


def _enable_debug_logging() -> None:
    """Lower the root logger and its handlers to DEBUG for tool output."""
    root_logger = logging.getLogger()
    root_logger.setLevel(logging.DEBUG)
    for handler in root_logger.handlers:
        handler.setLevel(logging.DEBUG)


@click.command("transcode")
@click.argument(
    "input_path",
    metavar="INPUT",
    type=click.Path(path_type=Path, dir_okay=False),
)
@click.argument(
    "output_path",
    metavar="[OUTPUT]",
    required=False,
    type=click.Path(path_type=Path, dir_okay=False),
)
@click.option(
    "--preset",
    "-p",
    type=click.Choice(VALID_PRESETS, case_sensitive=False),
    default=None,
    help="x265 preset (default: medium).",
)
@click.option(
    "--crf",
    "-q",
    type=click.FloatRange(0, 51),
    default=None,
    help="x265 constant rate factor (default: 23).",
)
@click.option(
    "--keep-bit-depth",
    is_flag=True,
    help="Encode at the input bit depth instead of promoting 8-bit to 10-bit.",
)
@click.option(
    "--double-fps",
    "double_rate",
    is_flag=True,
    help="Deinterlace interlaced input to one frame per field.",
)
@click.option(
    "--time",
    "-t",
    "time_limit",
    type=DURATION,
    default=None,
    help="Only transcode this much of the input.",
)
@click.option(
    "--seek",
    "-s",
    type=DURATION,
    default=None,
    help="Start transcoding at this position.",
)
@click.option(
    "--args",
    "-o",
    "extra_args",
    default=None,
    help="Extra x265 options as key=value:key=value.",
)
@click.option(
    "--audio",
    "transcode_audio",
    is_flag=True,
    help="Transcode audio tracks to Opus instead of copying them.",
)
@click.option(
    "--audio-bitrate",
    type=click.IntRange(min=1),
    default=None,
    help="Opus bitrate in kb/s (default: 64 per channel).",
)
@click.option(
    "--work-dir",
    type=click.Path(path_type=Path, file_okay=False, exists=True),
    default=None,
    help="Directory for temporary files (default: current directory).",
)
@click.option(
    "--cleanup-on-failure",
    is_flag=True,
    help="Remove temporary files when the job fails.",
)
@click.option(
    "--verbose",
    "-v",
    is_flag=True,
    help="Log every line the external tools print.",
)
@click.pass_context
def transcode_command(
    ctx: click.Context,
    input_path: Path,
    output_path: Path | None,
    preset: str | None,
    crf: float | None,
    keep_bit_depth: bool,
    double_rate: bool,
    time_limit: float | None,
    seek: float | None,
    extra_args: str | None,
    transcode_audio: bool,
    audio_bitrate: int | None,
    work_dir: Path | None,
    cleanup_on_failure: bool,
    verbose: bool,
) -> None:
    """Transcode INPUT to an HEVC Matroska file.

    OUTPUT defaults to <input name>.hdr-sucks.mkv in the current directory.
    HDR10 mastering metadata, Dolby Vision RPUs and HDR10+ metadata are
    carried over to the output.

    \b
    Examples:
      hdrsucks transcode movie.mkv
      hdrsucks transcode -p slow -q 18 movie.mkv out.mkv
      hdrsucks transcode -o "aq-mode=2:psy-rd=1.5" movie.mkv
    """
    config: AppConfig = ctx.obj["config"]

    if not input_path.is_file():
        error_exit(f"Input file not found: {input_path}", ExitCode.INPUT_NOT_FOUND)

    try:
        options = build_encode_options(
            preset=preset or config.jobs.preset,
            crf=crf if crf is not None else config.jobs.crf,
            keep_bit_depth=keep_bit_depth,
            double_rate=double_rate,
            time_limit=time_limit,
            seek=seek,
            extra_args=extra_args,
            transcode_audio=transcode_audio,
            audio_bitrate=audio_bitrate,
            verbose=verbose,
        )
    except InputValidationError as e:
        error_exit(str(e), ExitCode.INPUT_VALIDATION_ERROR)

    if verbose:
        _enable_debug_logging()

    progress = ConsoleProgressReporter(
        enabled=config.logging.format.casefold() != "json"
    )
    job = TranscodeJob(
        input_path,
        output_path,
        options,
        tools=config.tools,
        work_dir=work_dir or config.jobs.temp_directory,
        progress=progress,
    )

    try:
        result = job.run()
    except KeyboardInterrupt:
        progress.on_complete()
        if cleanup_on_failure:
            leftovers = job.ledger.release_all()
        else:
            leftovers = list(job.ledger.pending)
        for artifact in leftovers:
            warning_output(f"Temporary file left behind: {artifact.path}")
        error_exit("Interrupted", ExitCode.INTERRUPTED)

    if result.success:
        click.echo(f"Output: {result.output_path}")
        return

    assert result.error is not None
    if cleanup_on_failure:
        cleanup_artifacts(result)
    for artifact in result.leaked_artifacts:
        warning_output(f"Temporary file left behind: {artifact.path}")
    error_exit(
        result.failure_message or str(result.error),
        exit_code_for_error(result.error),
    )
