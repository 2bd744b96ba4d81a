"""CLI output helpers for errors and warnings."""

from __future__ import annotations

import sys
from typing import TYPE_CHECKING, NoReturn

import click

if TYPE_CHECKING:
    from .exit_codes import ExitCode


def error_exit(message: str, code: ExitCode | int) -> NoReturn:
    """Print ``Error: <message>`` to stderr and exit.

    Args:
        message: Error message to display.
        code: Exit code to use (ExitCode enum or int).

    Note:
        This function never returns; it always calls sys.exit().
    """
    click.echo(f"Error: {message}", err=True)
    sys.exit(int(code))


def warning_output(message: str) -> None:
    """Print ``Warning: <message>`` to stderr."""
    click.echo(f"Warning: {message}", err=True)
