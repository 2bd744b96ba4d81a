"""hdrsucks doctor command for checking external tool availability."""

import click

from hdrsucks.cli.exit_codes import ExitCode
from hdrsucks.executor.interface import OPTIONAL_TOOLS, check_tool_availability


def _format_status(available: bool) -> str:
    """Format status for display."""
    return "✓" if available else "✗"


@click.command("doctor")
@click.pass_context
def doctor_command(ctx: click.Context) -> None:
    """Check that the external tools a transcode needs can be found.

    Exit codes:
      0 - All required tools available
      30 - A required tool is missing
    """
    config = ctx.obj["config"]
    statuses = check_tool_availability(config.tools)

    click.echo("hdr-sucks External Tool Check")
    click.echo("=" * 40)

    missing_required = False
    for heading, required in (("Required:", True), ("Optional:", False)):
        click.echo()
        click.echo(heading)
        click.echo("-" * 20)
        for status in statuses:
            if status.required != required:
                continue
            location = status.resolved or f"not found ({status.configured})"
            note = "" if required else f" [{OPTIONAL_TOOLS[status.name]}]"
            click.echo(
                f"  {_format_status(status.available)} {status.name}: "
                f"{location}{note}"
            )
            if required and not status.available:
                missing_required = True

    if missing_required:
        click.echo()
        click.echo("Required tools are missing; transcoding will fail.")
        ctx.exit(ExitCode.TOOL_NOT_AVAILABLE)
