"""CLI module for hdr-sucks."""

import logging
from pathlib import Path

import click

from hdrsucks.cli.exit_codes import ExitCode
from hdrsucks.cli.output import error_exit
from hdrsucks.config import ConfigError, get_config
from hdrsucks.logging import configure_logging

logger = logging.getLogger(__name__)


@click.group()
@click.version_option(package_name="hdr-sucks")
@click.option(
    "--log-level",
    type=click.Choice(["debug", "info", "warning", "error"], case_sensitive=False),
    default=None,
    help="Override log level (default: info).",
)
@click.option(
    "--log-file",
    type=click.Path(path_type=Path),
    default=None,
    help="Override log file path.",
)
@click.option(
    "--log-json",
    is_flag=True,
    default=False,
    help="Use JSON log format.",
)
@click.option(
    "--config",
    "config_path",
    type=click.Path(path_type=Path, dir_okay=False),
    default=None,
    help="Config file (default: ~/.hdrsucks/config.toml).",
)
@click.pass_context
def main(
    ctx: click.Context,
    log_level: str | None,
    log_file: Path | None,
    log_json: bool,
    config_path: Path | None,
) -> None:
    """hdr-sucks - Transcode HDR video with x265, keeping its HDR metadata."""
    ctx.ensure_object(dict)

    # Tests may pass a prepared config
    if "config" not in ctx.obj:
        try:
            config = get_config(
                config_path,
                log_level=log_level,
                log_file=log_file,
                log_format="json" if log_json else None,
                strict=config_path is not None,
            )
        except ConfigError as e:
            error_exit(str(e), ExitCode.CONFIG_ERROR)
        ctx.obj["config"] = config
        configure_logging(config.logging)

    config = ctx.obj["config"]
    logger.debug(
        "hdr-sucks starting: log_level=%s, log_file=%s",
        config.logging.level,
        config.logging.file or "stderr",
    )


# Defer import to avoid circular dependency
def _register_commands():
    from hdrsucks.cli.doctor import doctor_command
    from hdrsucks.cli.transcode import transcode_command

    main.add_command(transcode_command)
    main.add_command(doctor_command)


_register_commands()
