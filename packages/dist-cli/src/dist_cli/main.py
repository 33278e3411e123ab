# SPDX-License-Identifier: MIT
"""CLI entry point for the dist command."""

from __future__ import annotations

import logging
import sys

import click

from .config import ConfigError


class Context:
    """CLI context object passed to commands."""

    def __init__(self) -> None:
        self.verbose: bool = False


pass_context = click.make_pass_decorator(Context, ensure=True)


def echo_error(message: str) -> None:
    """Print an error message to stderr."""
    click.secho(f"Error: {message}", fg="red", err=True)


def echo_success(message: str) -> None:
    """Print a success message."""
    click.secho(message, fg="green")


def echo_info(message: str) -> None:
    """Print an info message."""
    click.echo(message)


def echo_warning(message: str) -> None:
    """Print a warning message."""
    click.secho(f"Warning: {message}", fg="yellow", err=True)


class ClickEchoHandler(logging.Handler):
    """Route library log records through the echo helpers."""

    def emit(self, record: logging.LogRecord) -> None:
        try:
            message = self.format(record)
            if record.levelno >= logging.ERROR:
                echo_error(message)
            elif record.levelno >= logging.WARNING:
                echo_warning(message)
            else:
                echo_info(message)
        except Exception:
            self.handleError(record)


def configure_logging(verbose: bool = False) -> None:
    """Attach a single ClickEchoHandler to the ``dist_*`` package loggers."""
    for name in ("dist_integrity", "dist_cli"):
        logger = logging.getLogger(name)
        for handler in list(logger.handlers):
            if isinstance(handler, ClickEchoHandler):
                logger.removeHandler(handler)
        logger.addHandler(ClickEchoHandler())
        logger.setLevel(logging.DEBUG if verbose else logging.WARNING)


@click.group()
@click.version_option(package_name="dist-tools")
@click.option(
    "-v",
    "--verbose",
    is_flag=True,
    help="Enable verbose output.",
)
@pass_context
def cli(ctx: Context, verbose: bool) -> None:
    """Release publishing tool.

    Checksum, sign and upload release artifacts to a release registry.

    \b
    Examples:
        dist dist build/my-program-1-0-0 --version 1.0.0 --platform linux/amd64
        dist dist build/app --version 2.1.0 --signing-key ~/.keys/dist.key
    """
    ctx.verbose = verbose
    configure_logging(verbose)


# Import and register commands
from .commands import dist  # noqa: E402

cli.add_command(dist.dist)


def main() -> None:
    """Main entry point for the CLI."""
    try:
        cli()
    except ConfigError as e:
        echo_error(str(e))
        sys.exit(1)
    except Exception as e:
        echo_error(f"Unexpected error: {e}")
        sys.exit(1)


if __name__ == "__main__":
    main()
